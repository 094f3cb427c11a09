from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

from ...models.generation import StreamChoice, StreamChunk, StreamDelta, Usage
from ...streaming.decoders import safe_json_loads
from ..errors import ProviderError
from .parsers import normalize_finish_reason


@dataclass
class AnthropicStreamState:
    """What the named events of one stream have reported so far."""
    message_id: Optional[str] = None
    prompt_tokens: int = 0
    completion_tokens: int = 0
    finish_reason: Optional[str] = None

    @property
    def usage(self) -> Usage:
        return Usage(prompt_tokens=self.prompt_tokens, completion_tokens=self.completion_tokens)


async def iter_message_events(
    payloads: AsyncIterator[str],
    state: AnthropicStreamState,
    provider: str = "anthropic",
) -> AsyncIterator[StreamChunk]:
    """
    Translate Messages API stream events into chunks.

    ``message_start`` records the id and prompt tokens, ``content_block_delta``
    yields text, ``message_delta`` yields the terminal chunk with the finish
    reason, ``message_stop`` ends the stream and ``error`` raises.
    """
    async for payload in payloads:
        event: Any = safe_json_loads(payload)
        if not isinstance(event, dict):
            continue

        event_type = event.get("type")
        if event_type == "message_start":
            message = event.get("message") or {}
            state.message_id = message.get("id")
            state.prompt_tokens = (message.get("usage") or {}).get("input_tokens") or 0

        elif event_type == "content_block_delta":
            delta = event.get("delta") or {}
            text = delta.get("text")
            if text:
                yield StreamChunk(choices=[StreamChoice(delta=StreamDelta(content=text))])

        elif event_type == "message_delta":
            usage = event.get("usage") or {}
            if usage.get("output_tokens") is not None:
                state.completion_tokens = usage["output_tokens"]
            stop_reason = (event.get("delta") or {}).get("stop_reason")
            if stop_reason:
                state.finish_reason = normalize_finish_reason(stop_reason)
                yield StreamChunk.finish_chunk(state.finish_reason)

        elif event_type == "message_stop":
            return

        elif event_type == "error":
            error = event.get("error") or {}
            raise ProviderError(
                error.get("message") or "Anthropic stream error",
                provider=provider,
                details=event,
            )
