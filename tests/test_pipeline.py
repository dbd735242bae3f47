import asyncio
import json

import pytest
from fakes import BANANA_BREAD, split_fragments

from recipe_cache.dto import ChunkEvent, DoneEvent, ErrorEvent
from recipe_cache.entities import CacheEntryEntity, GenerationJob
from recipe_cache.errors import DEFAULT_GENERATION_MESSAGE, UNEXPECTED_FORMAT_MESSAGE, GenerationFailed
from recipe_cache.keys import make_cache_key
from recipe_cache.prompts import build_recipe_prompt


def make_job(meal: str = "banana bread", allergens: list[str] | None = None, force: bool = False) -> GenerationJob:
    allergens = ["Nuts", "Dairy"] if allergens is None else allergens
    return GenerationJob(
        cache_key=make_cache_key(meal, allergens),
        meal=meal.strip(),
        prompt=build_recipe_prompt(meal.strip(), allergens),
        allergens=allergens,
        force=force,
    )


async def collect(pipeline, job: GenerationJob) -> list:
    return [event async for event in pipeline.events(job)]


def chunks_of(events: list) -> str:
    return "".join(e.chunk for e in events if isinstance(e, ChunkEvent))


@pytest.mark.asyncio
async def test_miss_streams_then_caches(pipeline, generator, store):
    events = await collect(pipeline, make_job())

    *chunks, terminal = events
    assert all(isinstance(e, ChunkEvent) for e in chunks)
    assert chunks_of(events) == "".join(generator.fragments)
    assert isinstance(terminal, DoneEvent)
    assert terminal.recipe == BANANA_BREAD
    assert terminal.from_cache is False

    document = store.read()
    assert len(document["recipeCache"]) == 1
    assert document["stats"] == {"apiCalls": 1, "cacheHits": 0}
    assert 'The user wants to make: "banana bread"' in generator.prompts[0]


@pytest.mark.asyncio
async def test_hit_yields_only_done(pipeline, generator, store):
    await collect(pipeline, make_job())

    events = await collect(pipeline, make_job("  Banana Bread ", ["dairy", "NUTS"]))

    assert len(events) == 1
    assert isinstance(events[0], DoneEvent)
    assert events[0].from_cache is True
    assert events[0].recipe == BANANA_BREAD
    assert len(generator.prompts) == 1
    assert store.read()["stats"] == {"apiCalls": 1, "cacheHits": 1}


@pytest.mark.asyncio
async def test_force_regenerates_and_refreshes(pipeline, generator, store):
    await collect(pipeline, make_job())
    created = store.read()["recipeCache"][0]

    generator.fragments = [json.dumps({**BANANA_BREAD, "title": "Banana Bread II"})]
    events = await collect(pipeline, make_job(force=True))

    assert events[-1].from_cache is False
    assert events[-1].recipe["title"] == "Banana Bread II"
    assert len(generator.prompts) == 2

    document = store.read()
    assert len(document["recipeCache"]) == 1
    refreshed = document["recipeCache"][0]
    assert refreshed["id"] == created["id"]
    assert refreshed["createdAt"] == created["createdAt"]
    assert refreshed["recipe"]["title"] == "Banana Bread II"
    assert document["stats"] == {"apiCalls": 2, "cacheHits": 0}


@pytest.mark.asyncio
async def test_fenced_output_is_accepted(pipeline, generator):
    generator.fragments = split_fragments(f"```json\n{json.dumps(BANANA_BREAD)}\n```", size=7)

    events = await collect(pipeline, make_job())

    assert chunks_of(events).startswith("```json")
    assert events[-1].recipe == BANANA_BREAD


@pytest.mark.asyncio
async def test_malformed_output_is_not_cached(pipeline, generator, store):
    generator.fragments = ['{"title": "Banana', " Bread"]

    events = await collect(pipeline, make_job())

    assert chunks_of(events) == '{"title": "Banana Bread'
    terminal = events[-1]
    assert isinstance(terminal, ErrorEvent)
    assert terminal.error == UNEXPECTED_FORMAT_MESSAGE
    assert terminal.status == 500
    assert store.read()["recipeCache"] == []
    assert store.read()["stats"]["apiCalls"] == 0


@pytest.mark.asyncio
async def test_provider_failure_keeps_status(pipeline, generator, store):
    generator.fragments = ['{"title"']
    generator.error = GenerationFailed("Rate limited, slow down", status=429)

    events = await collect(pipeline, make_job())

    assert isinstance(events[0], ChunkEvent)
    assert events[-1] == ErrorEvent(error="Rate limited, slow down", status=429)
    assert store.read()["recipeCache"] == []


@pytest.mark.asyncio
async def test_unexpected_exception_still_terminates(pipeline, generator, store):
    generator.error = RuntimeError("socket exploded")

    events = await collect(pipeline, make_job())

    terminal = events[-1]
    assert isinstance(terminal, ErrorEvent)
    assert terminal.error == DEFAULT_GENERATION_MESSAGE
    assert store.read()["recipeCache"] == []
    assert not pipeline.registry.is_running(make_job().cache_key)


@pytest.mark.asyncio
async def test_store_outage_still_returns_recipe(pipeline, generator, store):
    store.available = False

    events = await collect(pipeline, make_job())

    assert isinstance(events[-1], DoneEvent)
    assert events[-1].from_cache is False
    assert events[-1].recipe == BANANA_BREAD
    assert len(generator.prompts) == 1


@pytest.mark.asyncio
async def test_concurrent_requests_share_one_generation(pipeline, generator, store):
    generator.gate = asyncio.Event()
    job = make_job()

    first = asyncio.create_task(collect(pipeline, job))
    second = asyncio.create_task(collect(pipeline, make_job("Banana bread", ["dairy", "nuts"])))
    for _ in range(5):
        await asyncio.sleep(0)
    assert pipeline.registry.is_running(job.cache_key)

    generator.gate.set()
    leader, follower = await asyncio.gather(first, second)

    assert len(generator.prompts) == 1
    assert leader == follower
    assert chunks_of(follower) == "".join(generator.fragments)
    assert isinstance(follower[-1], DoneEvent)
    assert store.read()["stats"] == {"apiCalls": 1, "cacheHits": 0}
    assert not pipeline.registry.is_running(job.cache_key)


@pytest.mark.asyncio
async def test_late_joiner_replays_earlier_fragments(pipeline, generator):
    generator.gate = asyncio.Event()
    job = make_job()

    first = asyncio.create_task(collect(pipeline, job))
    for _ in range(5):
        await asyncio.sleep(0)
    generation, started = pipeline.registry.join_or_start(job.cache_key, None)
    assert started is False

    await generation.publish("early ")
    late = asyncio.create_task(collect(pipeline, job))
    generator.gate.set()
    leader, follower = await asyncio.gather(first, late)

    assert follower == leader
    assert chunks_of(follower).startswith("early ")


@pytest.mark.asyncio
async def test_unreadable_cached_record_is_regenerated(pipeline, generator, store):
    job = make_job()
    store.write({
        "recipeCache": [{"id": "r1", "cacheKey": job.cache_key, "recipe": None, "hitCount": 3, "createdAt": "2024"}],
    })

    events = await collect(pipeline, job)

    assert isinstance(events[0], ChunkEvent)
    assert isinstance(events[-1], DoneEvent)
    assert events[-1].from_cache is False
    record = store.read()["recipeCache"][0]
    assert record["id"] == "r1"
    assert record["recipe"] == BANANA_BREAD
    assert store.read()["stats"] == {"apiCalls": 1, "cacheHits": 0}


@pytest.mark.asyncio
async def test_invalid_cached_entry_counts_as_miss(pipeline, generator, cache_service, monkeypatch):
    broken = CacheEntryEntity(id="r1", cache_key="k", meal="banana bread", recipe=None, created_at="", updated_at="")
    monkeypatch.setattr(cache_service, "lookup", lambda key: broken)

    events = await collect(pipeline, make_job())

    assert events[-1].from_cache is False
    assert len(generator.prompts) == 1


@pytest.mark.asyncio
async def test_unexpected_lookup_failure_still_terminates(pipeline, generator, cache_service, monkeypatch):
    def explode(key):
        raise RuntimeError("lookup exploded")

    monkeypatch.setattr(cache_service, "lookup", explode)

    events = await collect(pipeline, make_job())

    assert events == [ErrorEvent(error=DEFAULT_GENERATION_MESSAGE)]
    assert generator.prompts == []


@pytest.mark.asyncio
async def test_disconnected_leader_does_not_stop_generation(pipeline, generator, store):
    generator.gate = asyncio.Event()
    job = make_job()

    leader = pipeline.events(job)
    pending = asyncio.create_task(leader.__anext__())
    follower = asyncio.create_task(collect(pipeline, job))
    for _ in range(5):
        await asyncio.sleep(0)
    generation, started = pipeline.registry.join_or_start(job.cache_key, None)
    assert started is False

    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending
    await leader.aclose()
    with pytest.raises(StopAsyncIteration):
        await leader.__anext__()

    generator.gate.set()
    events = await follower
    await generation.task

    assert isinstance(events[-1], DoneEvent)
    assert events[-1].from_cache is False
    assert len(generator.prompts) == 1
    document = store.read()
    assert document["stats"] == {"apiCalls": 1, "cacheHits": 0}
    assert document["recipeCache"][0]["cacheKey"] == job.cache_key
