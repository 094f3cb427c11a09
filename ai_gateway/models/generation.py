import time
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .conversation_types import GatewayModel, Message


class ProviderType(str, Enum):
    """Supported AI providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    GROK = "grok"
    CUSTOM = "custom"


FinishReason = Literal["stop", "length", "function_call", "content_filter"]


class CompletionOptions(GatewayModel):
    """
    Normalized completion request.

    Optional parameters left as ``None`` are omitted from the provider
    request. Messages may be passed as ``Message`` instances or plain dicts.
    """
    model: str = Field(..., description="Model identifier")
    messages: List[Message] = Field(default_factory=list)
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    stop: Optional[List[str]] = None
    functions: Optional[List[Dict[str, Any]]] = None
    function_call: Optional[Union[str, Dict[str, Any]]] = None
    response_format: Optional[Dict[str, Any]] = None
    user: Optional[str] = None


class Usage(GatewayModel):
    """Token usage. ``total_tokens`` is always prompt plus completion."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @model_validator(mode="after")
    def _recompute_total(self) -> "Usage":
        self.total_tokens = self.prompt_tokens + self.completion_tokens
        return self


class Choice(GatewayModel):
    index: int = 0
    message: Message
    finish_reason: FinishReason = "stop"


class CompletionResponse(GatewayModel):
    """Normalized completion response."""
    id: str
    choices: List[Choice]
    usage: Usage = Field(default_factory=Usage)
    model: str
    created: int = Field(default_factory=lambda: int(time.time()))

    @property
    def text(self) -> str:
        """Content of the first choice."""
        if not self.choices:
            return ""
        content = self.choices[0].message.content
        return content if isinstance(content, str) else ""


class StreamDelta(GatewayModel):
    role: Optional[str] = None
    content: Optional[str] = None
    # Partial function call; argument fragments arrive across chunks
    function_call: Optional[Dict[str, Any]] = None


class StreamChoice(GatewayModel):
    delta: StreamDelta = Field(default_factory=StreamDelta)
    index: int = 0
    finish_reason: Optional[str] = None


class StreamChunk(GatewayModel):
    """One incremental piece of a streamed completion."""
    choices: List[StreamChoice] = Field(default_factory=list)

    def get_text(self) -> str:
        """Concatenated content of every choice delta in this chunk."""
        return "".join(choice.delta.content or "" for choice in self.choices)

    @classmethod
    def text_chunk(cls, content: str, finish_reason: Optional[str] = None) -> "StreamChunk":
        return cls(choices=[StreamChoice(delta=StreamDelta(content=content), finish_reason=finish_reason)])

    @classmethod
    def finish_chunk(cls, finish_reason: str) -> "StreamChunk":
        return cls(choices=[StreamChoice(finish_reason=finish_reason)])


class ProviderConfig(GatewayModel):
    """
    Connection settings for one adapter instance.

    ``timeout`` is in milliseconds. Unknown keys are kept so that a generic
    config can later be promoted to a provider specific one.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    api_key: str
    base_url: Optional[str] = None
    organization: Optional[str] = None
    default_model: Optional[str] = None
    timeout: int = 30000
    max_retries: int = 3
    headers: Dict[str, str] = Field(default_factory=dict)
    share_backoff_state: bool = False


class ProviderInfo(GatewayModel):
    """Descriptive metadata for a provider type."""
    type: ProviderType
    name: str
    description: str
    models: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    limitations: List[str] = Field(default_factory=list)


__all__ = [
    "ProviderType",
    "FinishReason",
    "CompletionOptions",
    "Usage",
    "Choice",
    "CompletionResponse",
    "StreamDelta",
    "StreamChoice",
    "StreamChunk",
    "ProviderConfig",
    "ProviderInfo",
]
