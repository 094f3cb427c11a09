"""
Base Provider Adapter Interface

This module defines the abstract base class for all provider adapters.
All provider implementations inherit from this class and implement the
required methods so that callers get identical behavior regardless of the
backend.
"""

import asyncio
import math
import re
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Type,
    TypeVar,
    Union,
)

import httpx

from ..config.constants import DEFAULT_CHARS_PER_TOKEN, HANGUL_CHARS_PER_TOKEN
from ..config.models import get_context_limit
from ..models.conversation_types import VALID_ROLES, Message
from ..models.generation import CompletionOptions, CompletionResponse, ProviderConfig, StreamChunk, Usage
from ..observability.logging import ProviderLogger
from ..reliability.retry import BackoffState, RetryConfig, RetryManager
from .errors import ContextLengthExceededError, ErrorMapper, ProviderError, ValidationError

T = TypeVar("T")

HANGUL_PATTERN = re.compile("[\u3131-\uD79D]")

OptionsInput = Union[CompletionOptions, Mapping[str, Any]]


class ProviderAdapter(ABC):
    """
    Abstract base class for provider adapters.

    The adapter is responsible for:
    - Translating ``CompletionOptions`` to the provider's wire format
    - Making HTTP calls with timeout, retry and error normalization
    - Normalizing responses and stream chunks to the gateway's types
    - Pricing usage for the provider's models

    Subclasses set the class attributes below and implement the abstract
    methods. Each instance owns a private copy of its ``ProviderConfig``.
    """

    name: str = ""
    label: str = ""
    default_base_url: str = ""
    default_context_limit: int = 4096
    model_aliases: Mapping[str, str] = {}
    config_class: Type[ProviderConfig] = ProviderConfig

    def __init__(
        self,
        config: Union[ProviderConfig, Mapping[str, Any]],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: Provider configuration (model or dict, camelCase keys accepted)
            transport: Optional httpx transport used for every request
        """
        self.config = self._coerce_config(config)
        self.transport = transport
        self.retry_manager = RetryManager()
        self.logger = ProviderLogger(self.name)
        self._shared_backoff: Optional[BackoffState] = (
            BackoffState() if self.config.share_backoff_state else None
        )

    @classmethod
    def _coerce_config(cls, config: Union[ProviderConfig, Mapping[str, Any]]) -> ProviderConfig:
        if isinstance(config, cls.config_class):
            return config.model_copy(update={"headers": dict(config.headers)})
        if isinstance(config, ProviderConfig):
            data = config.model_dump()
            data.update(config.model_extra or {})
            return cls.config_class.model_validate(data)
        return cls.config_class.model_validate(dict(config))

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    @abstractmethod
    async def complete(self, options: OptionsInput) -> CompletionResponse:
        """
        Run a non-streaming completion.

        Validates messages and the context budget before any network call,
        then posts the request with retries on transient statuses.

        Args:
            options: Completion options (model, messages, sampling params)

        Returns:
            CompletionResponse with normalized choices and usage

        Raises:
            ValidationError: Empty messages, invalid role or non-string content
            ContextLengthExceededError: Estimated budget exceeds the model limit
            ProviderHTTPError: Non-2xx response after retries
            ProviderTimeoutError: The call exceeded ``config.timeout``
            NetworkError: Transport failure
        """

    @abstractmethod
    def stream_complete(self, options: OptionsInput) -> AsyncIterator[StreamChunk]:
        """
        Stream a completion as normalized chunks.

        Implemented as an async generator: validation runs when iteration
        starts. Errors before the first byte of a successful response are
        retried like ``complete``; errors after streaming began propagate.

        Args:
            options: Completion options

        Yields:
            StreamChunk for each content delta and a terminal chunk carrying
            the finish reason when the provider reports one
        """

    @abstractmethod
    async def validate_api_key(self) -> bool:
        """Check whether the configured key is accepted by the provider."""

    @abstractmethod
    async def get_available_models(self) -> List[str]:
        """List model ids usable with this provider."""

    def calculate_cost(self, usage: Usage, model: str) -> float:
        """Monetary cost of ``usage`` in USD. Providers without pricing return 0."""
        return 0.0

    # ------------------------------------------------------------------
    # Shared validation and estimation
    # ------------------------------------------------------------------

    def validate_messages(self, messages: Sequence[Message]) -> None:
        if not messages:
            raise ValidationError("Messages array cannot be empty", provider=self.name)

        for message in messages:
            if message.role not in VALID_ROLES:
                raise ValidationError(f"Invalid message role: {message.role}", provider=self.name)
            if not isinstance(message.content, str):
                raise ValidationError("Message content must be a string", provider=self.name)

    @staticmethod
    def estimate_tokens(text: str) -> int:
        """
        Rough token count: 2.5 characters per token for mostly Hangul text,
        4 characters per token otherwise.
        """
        if not text:
            return 0
        hangul_ratio = len(HANGUL_PATTERN.findall(text)) / len(text)
        chars_per_token = HANGUL_CHARS_PER_TOKEN if hangul_ratio > 0.5 else DEFAULT_CHARS_PER_TOKEN
        return math.ceil(len(text) / chars_per_token)

    def check_context_length(self, messages: Sequence[Message], max_tokens: int, model_limit: int) -> None:
        required = sum(
            self.estimate_tokens(message.content) for message in messages if isinstance(message.content, str)
        )
        required += max_tokens or 0
        if required > model_limit:
            raise ContextLengthExceededError(required, model_limit, provider=self.name)

    def context_limit_for(self, model: str) -> int:
        return get_context_limit(model, self.default_context_limit)

    def normalize_model_name(self, model: str) -> str:
        return self.model_aliases.get(model, model)

    @staticmethod
    def coerce_options(options: OptionsInput) -> CompletionOptions:
        if isinstance(options, CompletionOptions):
            return options
        return CompletionOptions.model_validate(dict(options))

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    @property
    def base_url(self) -> str:
        return (self.config.base_url or self.default_base_url).rstrip("/")

    @property
    def timeout_seconds(self) -> float:
        return self.config.timeout / 1000

    def build_headers(self, extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """JSON content type, then configured headers, then adapter headers."""
        headers = {"Content-Type": "application/json"}
        headers.update(self.config.headers)
        if extra:
            headers.update(extra)
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=self.timeout_seconds)

    async def with_retry(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` under the adapter's retry policy."""
        config = RetryConfig(max_retries=self.config.max_retries)
        return await self.retry_manager.execute_with_retry(
            operation,
            config,
            state=self._shared_backoff,
            on_retry=self.logger.log_retry,
        )

    async def _send(self, client: httpx.AsyncClient, request: httpx.Request, stream: bool = False) -> httpx.Response:
        try:
            response = await asyncio.wait_for(client.send(request, stream=stream), timeout=self.timeout_seconds)
        except (httpx.TimeoutException, asyncio.TimeoutError, httpx.RequestError) as e:
            raise ErrorMapper.from_transport_error(e, self.name, self.config.timeout) from e

        if not response.is_success:
            error = await ErrorMapper.from_response(response, self.name, self.label)
            await response.aclose()
            raise error
        return response

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        files: Any = None,
        data: Any = None,
    ) -> Any:
        """Perform one HTTP call and return the decoded JSON body. Not retried."""
        async with self._client() as client:
            request = client.build_request(
                method, url, headers=headers, json=json, params=params, files=files, data=data
            )
            response = await self._send(client, request)
            try:
                return response.json()
            except ValueError as e:
                raise ProviderError(
                    f"{self.label} returned an invalid JSON body",
                    provider=self.name,
                    status_code=response.status_code,
                ) from e

    @asynccontextmanager
    async def open_stream(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> AsyncIterator[AsyncIterator[str]]:
        """
        Open a streaming request and yield its body as decoded text lines.

        Establishing the response is retried on transient statuses. Once the
        headers arrive, the whole body must be read within ``config.timeout``.
        """
        async with self._client() as client:

            async def connect() -> httpx.Response:
                request = client.build_request(method, url, headers=headers, json=json, params=params)
                return await self._send(client, request, stream=True)

            response = await self.with_retry(connect)
            try:
                deadline = asyncio.get_running_loop().time() + self.timeout_seconds
                yield self._read_until(response.aiter_lines(), deadline)
            finally:
                await response.aclose()

    async def _read_until(self, lines: AsyncIterator[str], deadline: float) -> AsyncIterator[str]:
        loop = asyncio.get_running_loop()
        while True:
            remaining = deadline - loop.time()
            try:
                if remaining <= 0:
                    raise asyncio.TimeoutError()
                line = await asyncio.wait_for(lines.__anext__(), timeout=remaining)
            except StopAsyncIteration:
                return
            except (httpx.TimeoutException, asyncio.TimeoutError, httpx.RequestError) as e:
                raise ErrorMapper.from_transport_error(e, self.name, self.config.timeout) from e
            yield line


__all__ = ["ProviderAdapter", "ProviderError", "OptionsInput"]
