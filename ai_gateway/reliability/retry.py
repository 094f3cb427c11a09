from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Collection, Optional, TypeVar

from ..config.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY_SECONDS,
    RETRY_BACKOFF_FACTOR,
    RETRYABLE_STATUS_CODES,
)

T = TypeVar("T")

RetryCallback = Callable[[Exception, int, float], None]


@dataclass
class RetryConfig:
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay: float = DEFAULT_RETRY_DELAY_SECONDS
    backoff_factor: float = RETRY_BACKOFF_FACTOR
    retryable_status_codes: Collection[int] = RETRYABLE_STATUS_CODES


@dataclass
class BackoffState:
    """Next delay to wait. Shared instances carry the delay across calls."""
    delay: float = DEFAULT_RETRY_DELAY_SECONDS


class RetryManager:
    """
    Runs provider operations with retries on transient HTTP statuses.

    An error is retried when it carries a ``status_code`` in
    ``config.retryable_status_codes`` and retry budget remains. Each retry
    waits the current backoff delay, which then grows by ``backoff_factor``.
    Any other error propagates unchanged on its first occurrence.
    """

    def __init__(self, sleep: Optional[Callable[[float], Awaitable[None]]] = None):
        self._sleep = sleep or asyncio.sleep

    async def execute_with_retry(
        self,
        func: Callable[[], Awaitable[T]],
        config: RetryConfig,
        state: Optional[BackoffState] = None,
        on_retry: Optional[RetryCallback] = None,
    ) -> T:
        """
        Execute a function with retry logic.

        Args:
            func: Zero-argument coroutine function performing one attempt
            config: Retry configuration
            state: Backoff state to use; a fresh call-local one when omitted
            on_retry: Called with (error, attempt, delay) before each wait

        Returns:
            Result from successful function execution

        Raises:
            The last exception if it is not retryable or retries are exhausted
        """
        if state is None:
            state = BackoffState(delay=config.initial_delay)

        attempt = 0
        while True:
            attempt += 1
            try:
                return await func()
            except Exception as e:  # noqa: BLE001
                if not self._should_retry(e, attempt, config):
                    raise

                delay = state.delay
                if on_retry is not None:
                    on_retry(e, attempt, delay)
                await self._sleep(delay)
                state.delay = delay * config.backoff_factor

    def _should_retry(self, error: Exception, attempt: int, config: RetryConfig) -> bool:
        if attempt > config.max_retries:
            return False
        return self.is_retryable(error, config)

    @staticmethod
    def is_retryable(error: Exception, config: Optional[RetryConfig] = None) -> bool:
        codes = config.retryable_status_codes if config else RETRYABLE_STATUS_CODES
        return getattr(error, "status_code", None) in codes
