"""Unit tests for the Grok provider."""

import pytest

from ai_gateway.models.generation import Usage
from ai_gateway.providers import GrokProvider
from tests.helpers.http_mocks import MockAPI, error_response, json_response, openai_completion, record_sleeps
from tests.helpers.streaming_mocks import openai_stream_events, sse_body, streaming_response

pytestmark = pytest.mark.unit


def make_provider(api, **config):
    provider = GrokProvider({"api_key": "xai-key", **config}, transport=api.transport)
    record_sleeps(provider)
    return provider


class TestComplete:
    @pytest.mark.asyncio
    async def test_openai_compatible_request(self, user_messages):
        api = MockAPI(json_response(openai_completion("Grok says hi")))
        provider = make_provider(api, organization="ignored")

        response = await provider.complete({"model": "grok", "messages": user_messages})

        assert response.text == "Grok says hi"
        request = api.last_request
        assert str(request.url) == "https://api.x.ai/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer xai-key"
        assert "OpenAI-Organization" not in request.headers
        assert api.last_json()["model"] == "grok-1"

    @pytest.mark.asyncio
    async def test_max_tokens_finish_reason(self, user_messages):
        api = MockAPI(json_response(openai_completion(finish_reason="max_tokens")))
        provider = make_provider(api)

        response = await provider.complete({"model": "grok-2", "messages": user_messages})

        assert response.choices[0].finish_reason == "length"

    @pytest.mark.asyncio
    async def test_stream(self, user_messages):
        body = sse_body(openai_stream_events(["G", "rok"], finish_reason="max_tokens"))
        api = MockAPI(streaming_response(body, chunk_size=5))
        provider = make_provider(api)

        chunks = [chunk async for chunk in provider.stream_complete({"model": "grok-1", "messages": user_messages})]

        assert "".join(chunk.get_text() for chunk in chunks) == "Grok"
        assert chunks[-1].choices[0].finish_reason == "length"


class TestKeysModelsCost:
    @pytest.mark.asyncio
    async def test_validate_api_key(self):
        api = MockAPI(json_response(openai_completion()))
        provider = make_provider(api)

        assert await provider.validate_api_key() is True
        assert api.last_json()["max_tokens"] == 1
        assert api.last_json()["model"] == "grok-1"

    @pytest.mark.asyncio
    async def test_validate_api_key_unauthorized(self):
        assert await make_provider(MockAPI(error_response(401))).validate_api_key() is False

    @pytest.mark.asyncio
    async def test_available_models(self):
        provider = GrokProvider({"api_key": "k"})
        assert await provider.get_available_models() == ["grok-1", "grok-2", "grok-2-advanced"]

    def test_cost(self):
        provider = GrokProvider({"api_key": "k"})
        cost = provider.calculate_cost(Usage(prompt_tokens=1000, completion_tokens=1000), "grok-1")
        assert cost == pytest.approx(0.02)


class TestExtensions:
    @pytest.mark.asyncio
    async def test_search_posts(self):
        api = MockAPI(json_response({"posts": [{"id": "1", "text": "hello"}]}))
        provider = make_provider(api)

        posts = await provider.search_posts("python", limit=5)

        assert posts == [{"id": "1", "text": "hello"}]
        params = api.last_request.url.params
        assert params["q"] == "python"
        assert params["limit"] == "5"
        assert params["include_replies"] == "false"

    @pytest.mark.asyncio
    async def test_analyze_trends_omits_unset_filters(self):
        api = MockAPI(json_response({"trends": [{"name": "#AI"}]}))
        provider = make_provider(api)

        assert await provider.analyze_trends(location="Seoul") == [{"name": "#AI"}]
        assert dict(api.last_request.url.params) == {"location": "Seoul"}

    @pytest.mark.asyncio
    async def test_realtime_context(self):
        api = MockAPI(json_response(openai_completion("It is late")))
        provider = make_provider(api)

        response = await provider.generate_with_realtime_context("What time is it?")

        assert response.text == "It is late"
        sent = api.last_json()
        assert sent["model"] == "grok-2"
        assert sent["messages"][0]["role"] == "system"
        assert "current time" in sent["messages"][0]["content"]
        assert sent["messages"][-1] == {"role": "user", "content": "What time is it?"}
