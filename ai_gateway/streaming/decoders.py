"""Decoders for streamed HTTP bodies.

Both decoders consume the text lines of a response, as produced by
``httpx.Response.aiter_lines()``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data: "
SSE_DONE = "[DONE]"


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """
    Yield the payload of every ``data: `` line of a server-sent event stream.

    Lines are stripped before matching; other SSE fields (``event:``, ``id:``,
    comments) are ignored. A ``[DONE]`` payload ends the stream.
    """
    async for raw_line in lines:
        line = raw_line.strip()
        if not line.startswith(SSE_DATA_PREFIX):
            continue
        data = line[len(SSE_DATA_PREFIX):]
        if data == SSE_DONE:
            return
        yield data


async def iter_ndjson(lines: AsyncIterator[str]) -> AsyncIterator[Any]:
    """Yield each parsed JSON line of a newline-delimited JSON stream.

    Blank and unparseable lines are skipped. The stream ends with the body.
    """
    async for raw_line in lines:
        line = raw_line.strip()
        if not line:
            continue
        value = safe_json_loads(line)
        if value is not None:
            yield value


def safe_json_loads(text: str) -> Any:
    """Parse JSON, returning None for invalid input."""
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        logger.debug(f"Skipping invalid JSON payload: {text[:80]!r}")
        return None
