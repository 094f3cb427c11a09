from typing import Any, List, Literal, Optional

from pydantic import ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ...models.generation import ProviderConfig
from .transforms import as_transform


class CustomProviderConfig(ProviderConfig):
    """
    Settings for an arbitrary HTTP completion endpoint.

    ``api_format="openai"`` speaks the chat completions shape; ``"custom"``
    sends a single ``prompt`` string and reads the answer from ``response``,
    ``text``, ``content`` or ``output``. Transforms may be ``Transform``
    objects or plain callables.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        arbitrary_types_allowed=True,
    )

    api_format: Literal["openai", "custom"] = "openai"
    completion_path: str = "/v1/chat/completions"
    stream_path: str = "/v1/chat/completions"
    models_path: str = "/v1/models"
    auth_type: Literal["bearer", "apikey", "custom"] = "bearer"
    auth_header: Optional[str] = None
    supported_models: Optional[List[str]] = None
    request_transform: Optional[Any] = None
    response_transform: Optional[Any] = None

    @field_validator("request_transform", "response_transform", mode="before")
    @classmethod
    def _wrap_transform(cls, value: Any) -> Any:
        try:
            return as_transform(value)
        except TypeError as e:
            raise ValueError(str(e)) from e
