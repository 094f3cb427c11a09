"""
Error taxonomy and error mapping for provider adapters.

Every failure surfaced by the gateway is a ``ProviderError``. HTTP failures
keep the provider's status code so that the retry layer and callers can
branch on ``isinstance`` checks or ``is_retryable`` instead of parsing
messages.
"""

import asyncio
from typing import Any, Optional

import httpx

from ..config.constants import RETRYABLE_STATUS_CODES


class ProviderError(Exception):
    """Base error raised by provider adapters."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.details = details

    @property
    def is_retryable(self) -> bool:
        return self.status_code in RETRYABLE_STATUS_CODES


class ValidationError(ProviderError):
    """The request was rejected before reaching the provider."""


class ContextLengthExceededError(ProviderError):
    """Estimated prompt plus completion budget exceeds the model limit."""

    def __init__(self, required_tokens: int, limit: int, provider: Optional[str] = None):
        super().__init__(
            f"Token limit exceeded: {required_tokens} tokens required, but model limit is {limit}",
            provider=provider,
        )
        self.required_tokens = required_tokens
        self.limit = limit


class ProviderHTTPError(ProviderError):
    """The provider answered with a non-2xx status."""


class AuthenticationError(ProviderHTTPError):
    """401 or 403 from the provider."""


class RateLimitError(ProviderHTTPError):
    """429 from the provider."""


class ProviderTimeoutError(ProviderError):
    """The call did not finish within the configured timeout."""


class NetworkError(ProviderError):
    """Transport level failure (DNS, connection reset, TLS...)."""


class CredentialsNotFoundError(ProviderError):
    """No active API key could be resolved for a user and provider."""


class ErrorMapper:
    """Maps HTTP responses and transport exceptions to ``ProviderError``."""

    @staticmethod
    def for_status(
        message: str,
        provider: Optional[str],
        status_code: int,
        details: Any = None,
    ) -> ProviderHTTPError:
        if status_code in (401, 403):
            error_class = AuthenticationError
        elif status_code == 429:
            error_class = RateLimitError
        else:
            error_class = ProviderHTTPError
        return error_class(message, provider=provider, status_code=status_code, details=details)

    @staticmethod
    async def from_response(
        response: httpx.Response,
        provider: Optional[str],
        label: str,
    ) -> ProviderHTTPError:
        """
        Build the error for a failed HTTP response.

        The message comes from ``error.message`` or ``message`` of a JSON body,
        otherwise from the raw body text, otherwise ``"<label> API error"``.

        Args:
            response: The failed response; streamed bodies are read here
            provider: Provider type value recorded on the error
            label: Human readable provider name used in the fallback message

        Returns:
            ProviderHTTPError (or a subclass chosen by status code)
        """
        message = f"{label} API error"
        details = None

        try:
            await response.aread()
            content_type = response.headers.get("content-type", "")
            if "application/json" in content_type:
                details = response.json()
                if isinstance(details, dict):
                    error = details.get("error")
                    if isinstance(error, dict) and error.get("message"):
                        message = error["message"]
                    elif details.get("message"):
                        message = details["message"]
            elif response.text:
                message = response.text
        except (ValueError, httpx.HTTPError):
            # Unreadable or malformed body: keep the generic message
            details = None

        return ErrorMapper.for_status(message, provider, response.status_code, details)

    @staticmethod
    def from_transport_error(
        error: Exception,
        provider: Optional[str],
        timeout_ms: int,
    ) -> ProviderError:
        """Map an httpx or asyncio transport exception."""
        if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError)):
            return ProviderTimeoutError(f"Request timed out after {timeout_ms}ms", provider=provider)
        return NetworkError(f"Network error: {error}", provider=provider)


__all__ = [
    "RETRYABLE_STATUS_CODES",
    "ProviderError",
    "ValidationError",
    "ContextLengthExceededError",
    "ProviderHTTPError",
    "AuthenticationError",
    "RateLimitError",
    "ProviderTimeoutError",
    "NetworkError",
    "CredentialsNotFoundError",
    "ErrorMapper",
]
