"""Helper utilities for common streaming patterns."""

from __future__ import annotations

from typing import AsyncIterator, List

from ..models.generation import StreamChunk


class StreamingHelper:
    """Helper for consuming normalized chunk streams."""

    @staticmethod
    async def buffer_stream(
        stream: AsyncIterator[StreamChunk],
        min_chunk_size: int = 10,
    ) -> AsyncIterator[StreamChunk]:
        """Coalesce small content deltas into chunks of at least ``min_chunk_size`` characters.

        Chunks without content (role or finish markers) are passed through
        immediately after flushing whatever text is buffered. Remaining text
        is flushed when the source ends.
        """
        buffer = ""
        async for chunk in stream:
            text = chunk.get_text()
            if not text:
                if buffer:
                    yield StreamChunk.text_chunk(buffer)
                    buffer = ""
                yield chunk
                continue

            buffer += text
            if len(buffer) >= min_chunk_size:
                yield StreamChunk.text_chunk(buffer)
                buffer = ""

        if buffer:
            yield StreamChunk.text_chunk(buffer)

    @staticmethod
    async def collect_text(stream: AsyncIterator[StreamChunk]) -> str:
        """Drain a stream and return its concatenated content."""
        parts: List[str] = []
        async for chunk in stream:
            parts.append(chunk.get_text())
        return "".join(parts)


buffer_stream = StreamingHelper.buffer_stream
collect_text = StreamingHelper.collect_text
