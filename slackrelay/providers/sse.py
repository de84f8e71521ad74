"""Server-sent-event decoding for chat-completions streams."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterable, AsyncIterator

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


def delta_content(event: dict) -> str:
    """Pull the text delta out of one chat-completions stream event."""
    choices = event.get("choices") or []
    if not choices:
        return ""
    delta = choices[0].get("delta") or {}
    content = delta.get("content")
    return content if isinstance(content, str) else ""


async def iter_sse_fragments(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield text fragments from the ``data:`` lines of an SSE stream.

    Stops at the ``[DONE]`` sentinel. Comments, blank lines, other fields and
    payloads that are not valid JSON are skipped.
    """
    async for line in lines:
        if not line.startswith("data:"):
            continue
        data = line[len("data:"):].strip()
        if not data:
            continue
        if data == DONE_SENTINEL:
            break
        try:
            event = json.loads(data)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed stream payload: %s", data[:100])
            continue
        if not isinstance(event, dict):
            continue
        content = delta_content(event)
        if content:
            yield content
