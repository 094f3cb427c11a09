"""Stream decoding and chunk helpers.

This layer handles:
- SSE and NDJSON decoding of response lines
- Coalescing and collecting normalized ``StreamChunk`` streams
"""

from .decoders import iter_ndjson, iter_sse_data, safe_json_loads
from .helpers import StreamingHelper, buffer_stream, collect_text

__all__ = [
    "iter_ndjson",
    "iter_sse_data",
    "safe_json_loads",
    "StreamingHelper",
    "buffer_stream",
    "collect_text",
]
