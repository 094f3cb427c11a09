from __future__ import annotations

import time
from typing import Any, Dict, Optional

from ...models.conversation_types import Message
from ...models.generation import Choice, CompletionResponse, StreamChoice, StreamChunk, StreamDelta, Usage
from ..errors import ProviderError

GOOGLE_FINISH_REASONS = {
    "STOP": "stop",
    "MAX_TOKENS": "length",
    "SAFETY": "content_filter",
    "RECITATION": "content_filter",
}


def normalize_finish_reason(reason: Optional[str]) -> str:
    return GOOGLE_FINISH_REASONS.get(reason or "", "stop")


def _first_candidate(data: Dict[str, Any]) -> Dict[str, Any]:
    candidates = data.get("candidates") or []
    return candidates[0] if candidates else {}


def candidate_text(candidate: Dict[str, Any]) -> str:
    parts = (candidate.get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def parse_usage(data: Dict[str, Any]) -> Usage:
    metadata = data.get("usageMetadata") or {}
    return Usage(
        prompt_tokens=metadata.get("promptTokenCount") or 0,
        completion_tokens=metadata.get("candidatesTokenCount") or 0,
    )


def parse_generate_response(data: Dict[str, Any], model: str) -> CompletionResponse:
    candidate = _first_candidate(data)
    return CompletionResponse(
        id=f"gemini-{int(time.time() * 1000)}",
        choices=[
            Choice(
                index=0,
                message=Message(role="assistant", content=candidate_text(candidate)),
                finish_reason=normalize_finish_reason(candidate.get("finishReason")),
            )
        ],
        usage=parse_usage(data),
        model=model,
        created=int(time.time()),
    )


def parse_stream_chunk(data: Dict[str, Any], provider: str = "google") -> Optional[StreamChunk]:
    """Chunk for one streamed response object, or None when it carries nothing.

    An object with an ``error`` member ends the stream with ``ProviderError``.
    """
    error = data.get("error")
    if error:
        error = error if isinstance(error, dict) else {"message": str(error)}
        code = error.get("code")
        raise ProviderError(
            error.get("message") or "Gemini stream error",
            provider=provider,
            status_code=code if isinstance(code, int) else None,
            details=data,
        )

    candidate = _first_candidate(data)
    text = candidate_text(candidate)
    reason = candidate.get("finishReason")
    if not text and not reason:
        return None
    return StreamChunk(
        choices=[
            StreamChoice(
                delta=StreamDelta(content=text or None),
                finish_reason=normalize_finish_reason(reason) if reason else None,
            )
        ]
    )
