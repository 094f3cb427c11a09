"""
AI Gateway - one asynchronous interface over several chat-completion providers.

Supported providers:
- OpenAI
- Anthropic (Claude)
- Google Gemini
- Grok (X.AI)
- Custom OpenAI compatible or prompt based endpoints

Features:
- Normalized request, response and stream chunk types
- Provider specific message ordering reconciled automatically
- Retries with exponential backoff on transient statuses
- Per-model context budget checks and cost calculation
- Adapter cache keyed by provider and API key
"""

__version__ = "0.1.0"

from .factory import (
    EnvKeyStore,
    KeyStore,
    ProviderCache,
    ProviderCredentials,
    ProviderFactory,
    StaticKeyStore,
    create_provider,
    create_user_provider,
    get_default_factory,
    validate_provider,
)
from .models.conversation_types import ContentPart, Message, MultimodalMessage, TurnRole
from .models.generation import (
    CompletionOptions,
    CompletionResponse,
    ProviderConfig,
    ProviderType,
    StreamChunk,
    Usage,
)
from .providers import (
    AnthropicProvider,
    AuthenticationError,
    ContextLengthExceededError,
    CredentialsNotFoundError,
    CustomProvider,
    CustomProviderConfig,
    GoogleProvider,
    GrokProvider,
    NetworkError,
    OpenAIProvider,
    ProviderAdapter,
    ProviderError,
    ProviderHTTPError,
    ProviderTimeoutError,
    RateLimitError,
    ValidationError,
)

__all__ = [
    "__version__",
    # Factory
    "ProviderFactory",
    "ProviderCache",
    "KeyStore",
    "StaticKeyStore",
    "EnvKeyStore",
    "ProviderCredentials",
    "create_provider",
    "create_user_provider",
    "get_default_factory",
    "validate_provider",
    # Types
    "Message",
    "MultimodalMessage",
    "ContentPart",
    "TurnRole",
    "CompletionOptions",
    "CompletionResponse",
    "StreamChunk",
    "Usage",
    "ProviderConfig",
    "ProviderType",
    # Providers
    "ProviderAdapter",
    "OpenAIProvider",
    "AnthropicProvider",
    "GoogleProvider",
    "GrokProvider",
    "CustomProvider",
    "CustomProviderConfig",
    # Errors
    "ProviderError",
    "ValidationError",
    "ContextLengthExceededError",
    "ProviderHTTPError",
    "AuthenticationError",
    "RateLimitError",
    "ProviderTimeoutError",
    "NetworkError",
    "CredentialsNotFoundError",
]
