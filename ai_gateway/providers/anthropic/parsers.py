from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional, Sequence

from ...models.conversation_types import Message
from ...models.generation import Choice, CompletionResponse, Usage

ANTHROPIC_FINISH_REASONS = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
}


def normalize_finish_reason(stop_reason: Optional[str]) -> str:
    return ANTHROPIC_FINISH_REASONS.get(stop_reason or "", "stop")


def extract_text(data: Dict[str, Any]) -> str:
    """Concatenate the text blocks of a Messages API response."""
    blocks = data.get("content") or []
    return "".join(
        block.get("text", "") for block in blocks
        if isinstance(block, dict) and block.get("type", "text") == "text"
    )


def parse_message_response(
    data: Dict[str, Any],
    model: str,
    prompt_messages: Sequence[Message],
    estimate_tokens: Callable[[str], int],
) -> CompletionResponse:
    """
    Map a Messages API body to ``CompletionResponse``.

    When the provider omits a usage figure it is estimated from the prompt
    and completion text.
    """
    text = extract_text(data)
    usage = data.get("usage") or {}
    prompt_tokens = usage.get("input_tokens") or estimate_tokens(
        " ".join(m.content for m in prompt_messages)
    )
    completion_tokens = usage.get("output_tokens") or estimate_tokens(text)

    return CompletionResponse(
        id=data.get("id") or f"msg-{int(time.time() * 1000)}",
        choices=[
            Choice(
                index=0,
                message=Message(role="assistant", content=text),
                finish_reason=normalize_finish_reason(data.get("stop_reason")),
            )
        ],
        usage=Usage(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
        model=data.get("model") or model,
        created=int(time.time()),
    )
