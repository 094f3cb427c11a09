"""Unit tests for retry and backoff behavior."""

import pytest

from ai_gateway.models.conversation_types import Message
from ai_gateway.models.generation import CompletionOptions
from ai_gateway.providers import OpenAIProvider
from ai_gateway.providers.errors import (
    AuthenticationError,
    ProviderError,
    ProviderHTTPError,
    ProviderTimeoutError,
    RateLimitError,
)
from ai_gateway.reliability.retry import BackoffState, RetryConfig, RetryManager
from tests.helpers.http_mocks import MockAPI, error_response, json_response, openai_completion, record_sleeps

pytestmark = pytest.mark.unit


def options():
    return CompletionOptions(model="gpt-3.5-turbo", messages=[Message(role="user", content="Hi")])


class FakeSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class TestRetryManager:
    """RetryManager in isolation."""

    @pytest.mark.asyncio
    async def test_returns_first_success(self):
        sleep = FakeSleep()
        manager = RetryManager(sleep=sleep)

        async def operation():
            return "ok"

        assert await manager.execute_with_retry(operation, RetryConfig()) == "ok"
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_retries_retryable_status_then_succeeds(self):
        sleep = FakeSleep()
        manager = RetryManager(sleep=sleep)
        attempts = []

        async def operation():
            attempts.append(1)
            if len(attempts) < 3:
                raise ProviderHTTPError("busy", status_code=503)
            return "ok"

        assert await manager.execute_with_retry(operation, RetryConfig()) == "ok"
        assert len(attempts) == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_last_error(self):
        sleep = FakeSleep()
        manager = RetryManager(sleep=sleep)
        attempts = []

        async def operation():
            attempts.append(1)
            raise RateLimitError(f"limited {len(attempts)}", status_code=429)

        with pytest.raises(RateLimitError, match="limited 4"):
            await manager.execute_with_retry(operation, RetryConfig(max_retries=3))
        assert len(attempts) == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_non_retryable_error_propagates_immediately(self):
        sleep = FakeSleep()
        manager = RetryManager(sleep=sleep)
        attempts = []

        async def operation():
            attempts.append(1)
            raise ProviderHTTPError("bad request", status_code=400)

        with pytest.raises(ProviderHTTPError):
            await manager.execute_with_retry(operation, RetryConfig())
        assert len(attempts) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_zero_retries(self):
        manager = RetryManager(sleep=FakeSleep())
        attempts = []

        async def operation():
            attempts.append(1)
            raise ProviderHTTPError("busy", status_code=502)

        with pytest.raises(ProviderHTTPError):
            await manager.execute_with_retry(operation, RetryConfig(max_retries=0))
        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_shared_state_keeps_growing(self):
        sleep = FakeSleep()
        manager = RetryManager(sleep=sleep)
        state = BackoffState()
        calls = {"count": 0}

        async def flaky():
            calls["count"] += 1
            if calls["count"] % 2:
                raise ProviderHTTPError("busy", status_code=503)
            return "ok"

        await manager.execute_with_retry(flaky, RetryConfig(), state=state)
        await manager.execute_with_retry(flaky, RetryConfig(), state=state)
        assert sleep.delays == [1.0, 2.0]
        assert state.delay == 4.0

    @pytest.mark.asyncio
    async def test_on_retry_callback(self):
        manager = RetryManager(sleep=FakeSleep())
        seen = []
        calls = {"count": 0}

        async def operation():
            calls["count"] += 1
            if calls["count"] == 1:
                raise ProviderHTTPError("busy", status_code=504)
            return "ok"

        await manager.execute_with_retry(
            operation, RetryConfig(), on_retry=lambda error, attempt, delay: seen.append((attempt, delay))
        )
        assert seen == [(1, 1.0)]

    def test_is_retryable(self):
        assert RetryManager.is_retryable(ProviderError("x", status_code=429))
        assert RetryManager.is_retryable(ProviderError("x", status_code=502))
        assert not RetryManager.is_retryable(ProviderError("x", status_code=500))
        assert not RetryManager.is_retryable(ProviderTimeoutError("x"))
        assert not RetryManager.is_retryable(ValueError("x"))


class TestAdapterRetries:
    """Retry behavior observed through an adapter."""

    @pytest.mark.asyncio
    async def test_rate_limit_then_success(self):
        api = MockAPI(error_response(429, "slow down"), json_response(openai_completion()))
        provider = OpenAIProvider({"api_key": "k"}, transport=api.transport)
        delays = record_sleeps(provider)

        response = await provider.complete(options())

        assert response.text == "Test response"
        assert api.call_count == 2
        assert delays == [1.0]

    @pytest.mark.asyncio
    async def test_authentication_error_is_not_retried(self):
        api = MockAPI(error_response(401, "Invalid API key"))
        provider = OpenAIProvider({"api_key": "bad"}, transport=api.transport)
        delays = record_sleeps(provider)

        with pytest.raises(AuthenticationError, match="Invalid API key") as exc_info:
            await provider.complete(options())

        assert exc_info.value.status_code == 401
        assert api.call_count == 1
        assert delays == []

    @pytest.mark.asyncio
    async def test_retries_exhausted(self):
        api = MockAPI(error_response(503, "overloaded"))
        provider = OpenAIProvider({"api_key": "k", "max_retries": 3}, transport=api.transport)
        record_sleeps(provider)

        with pytest.raises(ProviderHTTPError) as exc_info:
            await provider.complete(options())

        assert exc_info.value.status_code == 503
        assert api.call_count == 4

    @pytest.mark.asyncio
    async def test_backoff_is_call_local_by_default(self):
        api = MockAPI(
            error_response(429), json_response(openai_completion()),
            error_response(429), json_response(openai_completion()),
        )
        provider = OpenAIProvider({"api_key": "k"}, transport=api.transport)
        delays = record_sleeps(provider)

        await provider.complete(options())
        await provider.complete(options())

        assert delays == [1.0, 1.0]

    @pytest.mark.asyncio
    async def test_shared_backoff_grows_across_calls(self):
        api = MockAPI(
            error_response(429), json_response(openai_completion()),
            error_response(429), json_response(openai_completion()),
        )
        provider = OpenAIProvider({"api_key": "k", "share_backoff_state": True}, transport=api.transport)
        delays = record_sleeps(provider)

        await provider.complete(options())
        await provider.complete(options())

        assert delays == [1.0, 2.0]
