"""Server-Sent Events framing for the recipe event stream.

Each event is one line ``data: <json>`` followed by a blank line. The same
events feed both the streaming endpoints and the buffered ones.
"""

import json
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from typing import Any

from recipe_cache.dto import ChunkEvent, DoneEvent, ErrorEvent, RecipeEvent, is_terminal
from recipe_cache.errors import IncompleteStream, RecipeStreamError

DATA_PREFIX = "data: "
EVENT_SEPARATOR = "\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_event(event: RecipeEvent) -> str:
    """Serialize one event as an SSE frame."""
    payload = event.model_dump_json(by_alias=True)
    return f"{DATA_PREFIX}{payload}{EVENT_SEPARATOR}"


async def encode_events(events: AsyncIterable[RecipeEvent]) -> AsyncIterator[str]:
    """Turn a stream of events into SSE frames."""
    async for event in events:
        yield format_event(event)


async def collect_terminal(events: AsyncIterable[RecipeEvent]) -> DoneEvent | ErrorEvent:
    """Drain an event stream, dropping chunks, and return its terminal event.

    Raises:
        IncompleteStream: If the stream ends without a terminal event
    """
    async for event in events:
        if is_terminal(event):
            return event
    raise IncompleteStream("Event stream ended without a terminal event")


def decode_event(payload: dict[str, Any]) -> RecipeEvent | None:
    """Map a decoded frame payload onto the event vocabulary.

    Returns:
        The event, or None for payloads outside the vocabulary
    """
    if "error" in payload:
        return ErrorEvent(error=str(payload["error"]))
    if payload.get("done"):
        return DoneEvent.model_validate(payload)
    if "chunk" in payload:
        return ChunkEvent(chunk=payload["chunk"])
    return None


def iter_frames(lines: Iterable[str]) -> Iterable[dict[str, Any]]:
    """Yield decoded ``data:`` payloads from SSE lines.

    Comment lines, other fields and undecodable payloads are skipped.
    """
    for line in lines:
        line = line.strip()
        if not line.startswith(DATA_PREFIX.rstrip()):
            continue
        data = line[len("data:"):].strip()
        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            continue
        if isinstance(payload, dict):
            yield payload


def read_event_stream(lines: Iterable[str]) -> DoneEvent:
    """Consume an SSE stream until its terminal event.

    Args:
        lines: Text lines of the response body

    Returns:
        The terminal success event

    Raises:
        RecipeStreamError: If the terminal event is an error
        IncompleteStream: If the stream ends without a terminal event
    """
    for payload in iter_frames(lines):
        event = decode_event(payload)
        if isinstance(event, ErrorEvent):
            raise RecipeStreamError(event.error)
        if isinstance(event, DoneEvent):
            return event
    raise IncompleteStream("Connection closed before a recipe was returned. Please try again.")
