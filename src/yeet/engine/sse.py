"""Server-sent events parser used by the Anthropic and OpenAI adapters.

Only the ``event:`` and ``data:`` fields are read. A blank line ends an
event; a trailing event without a final blank line is still delivered.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator
from typing import NamedTuple


class ServerSentEvent(NamedTuple):
    event: str
    data: str


async def iter_sse(lines: AsyncIterable[str]) -> AsyncIterator[ServerSentEvent]:
    """Yield events parsed from an async stream of text lines.

    Read errors from *lines* propagate to the caller.
    """
    event = ""
    data = ""
    async for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            if data:
                yield ServerSentEvent(event, data)
            event = ""
            data = ""
            continue

        if line.startswith("event:"):
            event = line[len("event:") :].strip()
        elif line.startswith("data:"):
            data = line[len("data:") :].strip()

    if data:
        yield ServerSentEvent(event, data)
