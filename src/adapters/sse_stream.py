"""Stream consumer for chat completion event streams.

Responsibility:
- Parse `data: {...}` event lines and pull out the incremental text delta.
- Expose the response as a lazy, finite, non-restartable async iterator of
  text fragments.
- Drain that iterator into a writer without buffering the whole answer.

A malformed fragment is skipped (logged at DEBUG) so that one bad line never
blocks the rest of the output.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import AsyncIterable, AsyncIterator, Callable

from core.domain.errors import MalformedFragmentError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"


class StreamEvent(Enum):
    DONE = "done"


def parse_event_line(line: str) -> str | StreamEvent | None:
    """Parses one line of the event stream.

    Returns the delta text, `StreamEvent.DONE` for the end-of-stream marker,
    or `None` for anything that carries no text (comments, blank lines,
    role-only or finish chunks). Raises `MalformedFragmentError` when the
    data is not valid JSON.
    """

    line = line.strip()
    if not line.startswith(DATA_PREFIX):
        return None

    data = line[len(DATA_PREFIX):].strip()
    if not data:
        return None
    if data == DONE_MARKER:
        return StreamEvent.DONE

    try:
        payload = json.loads(data)
    except json.JSONDecodeError as exc:
        raise MalformedFragmentError(data) from exc

    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None


async def iter_deltas(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yields text deltas in arrival order until `[DONE]` or end of transport."""

    async for line in lines:
        try:
            event = parse_event_line(line)
        except MalformedFragmentError as exc:
            logger.debug("Skipping fragment: %s", exc)
            continue

        if event is StreamEvent.DONE:
            logger.debug("Received %s", DONE_MARKER)
            return
        if event is None:
            if line.strip():
                logger.debug("No content in line: %s", line.strip())
            continue
        yield event


async def write_deltas(deltas: AsyncIterator[str], write: Callable[[str], None]) -> int:
    """Writes each fragment as it arrives, with no separators added."""

    written = 0
    async for fragment in deltas:
        write(fragment)
        written += len(fragment)
    return written
