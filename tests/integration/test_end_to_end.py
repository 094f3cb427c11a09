"""End-to-end integration tests: factory, adapters and streaming together."""

import pytest

from ai_gateway import ProviderFactory, StaticKeyStore
from ai_gateway.config.models import resolve_model_alias
from ai_gateway.models.conversation_types import Message
from ai_gateway.models.generation import CompletionOptions, ProviderType
from ai_gateway.streaming import buffer_stream, collect_text
from tests.helpers.http_mocks import MockAPI, json_response, openai_completion
from tests.helpers.streaming_mocks import (
    anthropic_stream_body,
    gemini_stream_objects,
    ndjson_body,
    openai_stream_events,
    sse_body,
    streaming_response,
)


def route_by_host(request):
    """Answer each provider's endpoint with its own wire format."""
    host = request.url.host
    if host == "api.openai.com":
        return json_response(openai_completion("openai says hi"))
    if host == "api.anthropic.com":
        return json_response({
            "id": "msg_1",
            "content": [{"type": "text", "text": "anthropic says hi"}],
            "stop_reason": "end_turn",
            "usage": {"input_tokens": 5, "output_tokens": 3},
        })
    if host == "generativelanguage.googleapis.com":
        return json_response({
            "candidates": [{"content": {"parts": [{"text": "google says hi"}]}, "finishReason": "STOP"}],
            "usageMetadata": {"promptTokenCount": 5, "candidatesTokenCount": 3},
        })
    if host == "api.x.ai":
        return json_response(openai_completion("grok says hi"))
    return json_response({"response": "custom says hi"})


CREDENTIALS = {
    ("user-1", "openai"): {"api_key": "sk-openai"},
    ("user-1", "anthropic"): {"api_key": "sk-anthropic"},
    ("user-1", "google"): {"api_key": "g-key"},
    ("user-1", "grok"): {"api_key": "xai-key"},
}


@pytest.mark.integration
class TestEndToEnd:
    """One conversation sent through every provider."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("provider", ["openai", "anthropic", "google", "grok"])
    async def test_same_conversation_every_provider(self, provider, conversation_messages):
        factory = ProviderFactory(key_store=StaticKeyStore(CREDENTIALS), transport=MockAPI(route_by_host).transport)
        adapter = await factory.create_for_user("user-1", provider)
        model = resolve_model_alias("fast", provider)

        response = await adapter.complete(CompletionOptions(model=model, messages=conversation_messages))

        assert response.text == f"{provider} says hi"
        assert response.choices[0].finish_reason == "stop"
        assert response.usage.total_tokens == response.usage.prompt_tokens + response.usage.completion_tokens
        assert adapter.calculate_cost(response.usage, response.model) >= 0

    @pytest.mark.asyncio
    async def test_custom_endpoint(self, user_messages):
        factory = ProviderFactory(transport=MockAPI(route_by_host).transport)
        adapter = factory.create(ProviderType.CUSTOM, {
            "api_key": "c-key",
            "base_url": "http://localhost:8080",
            "api_format": "custom",
            "completion_path": "/generate",
        })

        response = await adapter.complete({"model": "local", "messages": user_messages})

        assert response.text == "custom says hi"
        assert adapter.calculate_cost(response.usage, "local") == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("provider, body", [
        ("openai", sse_body(openai_stream_events(["one ", "two ", "three"]))),
        ("anthropic", anthropic_stream_body(["one ", "two ", "three"])),
        ("google", ndjson_body(gemini_stream_objects(["one ", "two ", "three"]))),
        ("grok", sse_body(openai_stream_events(["one ", "two ", "three"]))),
    ])
    async def test_streams_normalize_to_same_text(self, provider, body):
        api = MockAPI(streaming_response(body, chunk_size=3))
        factory = ProviderFactory(key_store=StaticKeyStore(CREDENTIALS), transport=api.transport)
        adapter = await factory.create_for_user("user-1", provider)
        options = CompletionOptions(
            model=resolve_model_alias("fast", provider),
            messages=[Message(role="user", content="Count to three")],
        )

        assert await collect_text(adapter.stream_complete(options)) == "one two three"

    @pytest.mark.asyncio
    async def test_buffered_stream(self):
        api = MockAPI(streaming_response(sse_body(openai_stream_events(list("abcdefghij")))))
        adapter = ProviderFactory(transport=api.transport).create("openai", {"api_key": "k"})
        options = CompletionOptions(model="gpt-4o", messages=[Message(role="user", content="letters")])

        chunks = [chunk async for chunk in buffer_stream(adapter.stream_complete(options), min_chunk_size=4)]

        texts = [chunk.get_text() for chunk in chunks if chunk.get_text()]
        assert texts == ["abcd", "efgh", "ij"]
