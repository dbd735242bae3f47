import json

import httpx
import pytest
from fakes import BANANA_BREAD

from recipe_cache.client import RecipeStreamClient
from recipe_cache.dto import ChunkEvent, DoneEvent, ErrorEvent
from recipe_cache.errors import IncompleteStream, RecipeStreamError
from recipe_cache.streaming import format_event


def make_client(handler) -> RecipeStreamClient:
    http = httpx.Client(base_url="http://recipes.test", transport=httpx.MockTransport(handler))
    return RecipeStreamClient("http://recipes.test", client=http)


def stream_response(*events) -> httpx.Response:
    body = "".join(format_event(e) for e in events)
    return httpx.Response(200, text=body, headers={"content-type": "text/event-stream"})


def test_generate_reports_chunks_and_returns_recipe():
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return stream_response(
            ChunkEvent(chunk='{"title":'),
            ChunkEvent(chunk=' "Banana"}'),
            DoneEvent(recipe=BANANA_BREAD, from_cache=False),
        )

    chunks: list[str] = []
    with make_client(handler) as client:
        done = client.generate("banana bread", ["Nuts"], on_chunk=chunks.append)

    assert chunks == ['{"title":', ' "Banana"}']
    assert done.recipe == BANANA_BREAD
    assert done.from_cache is False
    assert sent == [{"meal": "banana bread", "avoidList": ["Nuts"], "force": False}]


def test_cached_response_has_no_chunks():
    chunks: list[str] = []
    with make_client(lambda request: stream_response(DoneEvent(recipe=BANANA_BREAD, from_cache=True))) as client:
        done = client.generate("banana bread", on_chunk=chunks.append)

    assert chunks == []
    assert done.from_cache is True


def test_error_event_raises():
    handler = lambda request: stream_response(ChunkEvent(chunk="{"), ErrorEvent(error="Overloaded"))  # noqa: E731

    with make_client(handler) as client, pytest.raises(RecipeStreamError, match="Overloaded"):
        client.generate("banana bread")


def test_truncated_stream_raises():
    handler = lambda request: stream_response(ChunkEvent(chunk="{"), ChunkEvent(chunk='"ti'))  # noqa: E731

    with make_client(handler) as client, pytest.raises(IncompleteStream):
        client.generate("banana bread")


def test_error_status_raises_with_detail():
    handler = lambda request: httpx.Response(400, json={"detail": "Meal is required"})  # noqa: E731

    with make_client(handler) as client, pytest.raises(RecipeStreamError, match="Meal is required"):
        client.generate("   ")
