from enum import Enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class GatewayModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TurnRole(str, Enum):
    """Conversation turn roles."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


VALID_ROLES = frozenset(role.value for role in TurnRole)


class FunctionCall(GatewayModel):
    """A function invocation requested by the model."""
    name: str
    arguments: str = ""


class Message(GatewayModel):
    """
    Message format shared by every provider.

    ``role`` stays a plain string so that unknown roles are reported by the
    adapter's own validation instead of failing at construction.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    role: str
    content: Any
    name: Optional[str] = None
    function_call: Optional[FunctionCall] = None

    @field_validator("role", mode="before")
    @classmethod
    def _role_value(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        return value


class InlineData(GatewayModel):
    """Base64 encoded binary payload."""
    mime_type: str = "image/jpeg"
    data: str


class ContentPart(GatewayModel):
    """One part of a multimodal message: either text or inline data."""
    type: Literal["text", "image"] = "text"
    text: Optional[str] = None
    inline_data: Optional[InlineData] = None


class MultimodalMessage(GatewayModel):
    """Message whose content may mix text and images."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    role: str
    content: Union[str, List[ContentPart]]

    @field_validator("role", mode="before")
    @classmethod
    def _role_value(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        return value
