"""Response and stream chunk parsers for OpenAI compatible payloads."""

import time
import uuid
from typing import Any, Dict, Mapping, Optional

from ...models.conversation_types import FunctionCall, Message
from ...models.generation import Choice, CompletionResponse, StreamChoice, StreamChunk, StreamDelta, Usage

OPENAI_FINISH_REASONS: Mapping[str, str] = {
    "stop": "stop",
    "length": "length",
    "function_call": "function_call",
    "content_filter": "content_filter",
}


def normalize_finish_reason(reason: Optional[str], mapping: Mapping[str, str] = OPENAI_FINISH_REASONS) -> str:
    return mapping.get(reason or "", "stop")


def _function_call(data: Any) -> Optional[FunctionCall]:
    if not isinstance(data, dict) or not data.get("name"):
        return None
    return FunctionCall(name=data["name"], arguments=data.get("arguments") or "")


def parse_usage(data: Optional[Dict[str, Any]]) -> Usage:
    data = data or {}
    return Usage(
        prompt_tokens=data.get("prompt_tokens") or 0,
        completion_tokens=data.get("completion_tokens") or 0,
    )


def parse_completion(
    data: Dict[str, Any],
    model: str,
    finish_reasons: Mapping[str, str] = OPENAI_FINISH_REASONS,
) -> CompletionResponse:
    """
    Map a chat completion body to ``CompletionResponse``.

    Missing fields fall back to sensible values: the requested model, the
    current time, a generated id and zero usage.
    """
    choices = []
    for position, choice in enumerate(data.get("choices") or []):
        message = choice.get("message") or {}
        choices.append(
            Choice(
                index=choice.get("index", position),
                message=Message(
                    role=message.get("role") or "assistant",
                    content=message.get("content") or "",
                    function_call=_function_call(message.get("function_call")),
                ),
                finish_reason=normalize_finish_reason(choice.get("finish_reason"), finish_reasons),
            )
        )

    return CompletionResponse(
        id=data.get("id") or f"chatcmpl-{uuid.uuid4().hex}",
        choices=choices,
        usage=parse_usage(data.get("usage")),
        model=data.get("model") or model,
        created=data.get("created") or int(time.time()),
    )


def parse_stream_chunk(data: Dict[str, Any], finish_reasons: Mapping[str, str] = OPENAI_FINISH_REASONS) -> StreamChunk:
    choices = []
    for position, choice in enumerate(data.get("choices") or []):
        delta = choice.get("delta") or {}
        reason = choice.get("finish_reason")
        choices.append(
            StreamChoice(
                index=choice.get("index", position),
                delta=StreamDelta(
                    role=delta.get("role"),
                    content=delta.get("content"),
                    function_call=delta.get("function_call"),
                ),
                finish_reason=normalize_finish_reason(reason, finish_reasons) if reason else None,
            )
        )
    return StreamChunk(choices=choices)
