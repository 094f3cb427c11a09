"""
Structured logging utility for provider adapters.

Every adapter logs through a ``ProviderLogger`` so that lines carry the same
``[provider=... model=... request_id=...]`` prefix. The library never installs
handlers; applications configure ``logging`` themselves.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from ..models.generation import Usage


class ProviderLogger:
    """Structured logger for one provider adapter."""

    def __init__(self, provider_name: str):
        """
        Args:
            provider_name: Provider type value (e.g. "openai", "google")
        """
        self.provider = provider_name
        self.logger = logging.getLogger(f"ai_gateway.providers.{provider_name}")

    def _format_message(self, message: str, **fields: Any) -> str:
        parts = [f"provider={self.provider}"]
        parts.extend(f"{key}={value}" for key, value in fields.items() if value is not None)
        return f"[{' '.join(parts)}] {message}"

    def _log(self, level: int, message: str, **fields: Any) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, self._format_message(message, **fields))

    def debug(self, message: str, model: Optional[str] = None, request_id: Optional[str] = None, **fields):
        self._log(logging.DEBUG, message, model=model, request_id=request_id, **fields)

    def info(self, message: str, model: Optional[str] = None, request_id: Optional[str] = None, **fields):
        self._log(logging.INFO, message, model=model, request_id=request_id, **fields)

    def warning(self, message: str, model: Optional[str] = None, request_id: Optional[str] = None, **fields):
        self._log(logging.WARNING, message, model=model, request_id=request_id, **fields)

    def error(self, message: str, model: Optional[str] = None, request_id: Optional[str] = None,
              error: Optional[Exception] = None, **fields):
        """Log at error level, adding the exception type, text and status code when given."""
        if error is not None:
            fields.update(
                error_type=type(error).__name__,
                error_msg=str(error),
                status_code=getattr(error, "status_code", None),
            )
        self._log(logging.ERROR, message, model=model, request_id=request_id, **fields)

    @contextmanager
    def track_request(self, method: str, model: str,
                      request_id: Optional[str] = None) -> Iterator[Dict[str, Any]]:
        """
        Log the start, duration and outcome of one adapter call.

        Args:
            method: Adapter method name ("complete", "stream")
            model: Model id sent to the provider
            request_id: Correlation id; a short random one when omitted

        Yields:
            Dict with ``request_id``, ``model``, ``method`` and ``start_time``
        """
        info = {
            "request_id": request_id or uuid.uuid4().hex[:8],
            "model": model,
            "method": method,
            "start_time": time.monotonic(),
        }
        context = {"model": model, "request_id": info["request_id"], "method": method}
        self.debug(f"Starting {method} request", **context)

        try:
            yield info
        except Exception as e:
            self.error(f"Failed {method} request", duration_ms=self._elapsed_ms(info), error=e, **context)
            raise
        self.info(f"Completed {method} request", duration_ms=self._elapsed_ms(info), **context)

    @staticmethod
    def _elapsed_ms(info: Dict[str, Any]) -> int:
        return int((time.monotonic() - info["start_time"]) * 1000)

    def log_usage(self, usage: Usage, model: str, request_id: str):
        self.info(
            "Token usage",
            model=model,
            request_id=request_id,
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            total_tokens=usage.total_tokens,
        )

    def log_retry(self, error: Exception, attempt: int, delay: float, request_id: Optional[str] = None):
        """Retry callback for ``RetryManager``."""
        self.warning(
            f"Retrying after attempt {attempt} failed",
            request_id=request_id,
            status_code=getattr(error, "status_code", None),
            delay_s=delay,
        )
