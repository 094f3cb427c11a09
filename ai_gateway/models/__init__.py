"""Contract types shared by every provider adapter."""

from .conversation_types import (
    ContentPart,
    FunctionCall,
    InlineData,
    Message,
    MultimodalMessage,
    TurnRole,
)
from .generation import (
    Choice,
    CompletionOptions,
    CompletionResponse,
    ProviderConfig,
    ProviderInfo,
    ProviderType,
    StreamChoice,
    StreamChunk,
    StreamDelta,
    Usage,
)

__all__ = [
    "ContentPart",
    "FunctionCall",
    "InlineData",
    "Message",
    "MultimodalMessage",
    "TurnRole",
    "Choice",
    "CompletionOptions",
    "CompletionResponse",
    "ProviderConfig",
    "ProviderInfo",
    "ProviderType",
    "StreamChoice",
    "StreamChunk",
    "StreamDelta",
    "Usage",
]
