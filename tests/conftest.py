"""Shared fixtures: in-memory store, scripted generator, wired services."""

import pytest
from fakes import ADMIN_TOKEN, ScriptedGenerator, TickingClock

from recipe_cache.handlers import RecipeHandler
from recipe_cache.repositories import InMemoryDocumentStore
from recipe_cache.services import CacheService, RecipePipeline


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def cache_service(store, clock) -> CacheService:
    return CacheService(store=store, max_entries=0, clock=clock)


@pytest.fixture
def generator() -> ScriptedGenerator:
    return ScriptedGenerator()


@pytest.fixture
def pipeline(cache_service, generator) -> RecipePipeline:
    return RecipePipeline.create(cache_service=cache_service, generator=generator)


@pytest.fixture
def handler(pipeline, cache_service, generator) -> RecipeHandler:
    return RecipeHandler(
        pipeline=pipeline,
        cache_service=cache_service,
        generator=generator,
        admin_token=ADMIN_TOKEN,
    )
