"""
Provider Adapters Layer

This layer contains all provider-specific implementations. Each adapter
translates between the gateway's normalized types and one provider's HTTP
API.
"""

from .base import ProviderAdapter
from .errors import (
    AuthenticationError,
    ContextLengthExceededError,
    CredentialsNotFoundError,
    NetworkError,
    ProviderError,
    ProviderHTTPError,
    ProviderTimeoutError,
    RateLimitError,
    ValidationError,
)
from .openai.adapter import OpenAIProvider
from .anthropic.adapter import AnthropicProvider
from .google.adapter import GoogleProvider
from .grok.adapter import GrokProvider
from .custom.adapter import CustomProvider
from .custom.config import CustomProviderConfig

__all__ = [
    "ProviderAdapter",
    "ProviderError",
    "ValidationError",
    "ContextLengthExceededError",
    "ProviderHTTPError",
    "AuthenticationError",
    "RateLimitError",
    "ProviderTimeoutError",
    "NetworkError",
    "CredentialsNotFoundError",
    "OpenAIProvider",
    "AnthropicProvider",
    "GoogleProvider",
    "GrokProvider",
    "CustomProvider",
    "CustomProviderConfig",
]
