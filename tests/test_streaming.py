import json

import pytest
from fakes import BANANA_BREAD

from recipe_cache.dto import ChunkEvent, DoneEvent, ErrorEvent
from recipe_cache.errors import IncompleteStream, RecipeStreamError
from recipe_cache.streaming import collect_terminal, format_event, read_event_stream


async def replay(*events):
    for event in events:
        yield event


def test_chunk_frame():
    assert format_event(ChunkEvent(chunk='{"ti')) == 'data: {"chunk":"{\\"ti"}\n\n'


def test_done_frame_uses_wire_names():
    frame = format_event(DoneEvent(recipe=BANANA_BREAD, from_cache=True))

    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    payload = json.loads(frame[len("data: "):])
    assert payload == {"done": True, "recipe": BANANA_BREAD, "_fromCache": True}


def test_error_frame_hides_status():
    frame = format_event(ErrorEvent(error="Rate limited", status=429))
    assert json.loads(frame[len("data: "):]) == {"error": "Rate limited"}


@pytest.mark.asyncio
async def test_collect_terminal_drops_chunks():
    done = DoneEvent(recipe=BANANA_BREAD, from_cache=False)
    assert await collect_terminal(replay(ChunkEvent(chunk="a"), ChunkEvent(chunk="b"), done)) == done


@pytest.mark.asyncio
async def test_collect_terminal_without_terminal_event():
    with pytest.raises(IncompleteStream):
        await collect_terminal(replay(ChunkEvent(chunk="a")))


def lines_of(*events) -> list[str]:
    return "".join(format_event(e) for e in events).splitlines()


def test_read_event_stream_returns_done():
    lines = [": keep-alive", ""] + lines_of(
        ChunkEvent(chunk="{"),
        DoneEvent(recipe=BANANA_BREAD, from_cache=False),
    )

    done = read_event_stream(lines)

    assert done.recipe == BANANA_BREAD
    assert done.from_cache is False


def test_read_event_stream_raises_on_error_event():
    with pytest.raises(RecipeStreamError, match="Received an unexpected"):
        read_event_stream(lines_of(ChunkEvent(chunk="x"), ErrorEvent(error="Received an unexpected response format.")))


def test_read_event_stream_truncated():
    with pytest.raises(IncompleteStream):
        read_event_stream(lines_of(ChunkEvent(chunk="{"), ChunkEvent(chunk='"title"')))


def test_read_event_stream_skips_garbage_frames():
    lines = ["data: not json", "data: [1, 2]", "event: ping"] + lines_of(DoneEvent(recipe={"title": "x"}, from_cache=True))
    assert read_event_stream(lines).recipe == {"title": "x"}


def test_done_frame_without_cache_flag():
    lines = ["data: " + json.dumps({"done": True, "recipe": BANANA_BREAD}), ""]

    done = read_event_stream(lines)

    assert done.recipe == BANANA_BREAD
    assert done.from_cache is False
