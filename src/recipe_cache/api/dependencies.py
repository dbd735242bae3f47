"""Dependency injection for the FastAPI app.

Everything is built once in ``lifespan`` and kept on ``app.state``; routes
receive the handler through ``HandlerDep``. Tests replace
``app.state.recipe_handler`` directly instead of running the lifespan.
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from recipe_cache.config import settings
from recipe_cache.handlers import RecipeHandler
from recipe_cache.logging_config import setup_logging
from recipe_cache.protocols import DocumentStore
from recipe_cache.repositories import (
    AnthropicRecipeGenerator,
    InMemoryDocumentStore,
    RedisDocumentStore,
)
from recipe_cache.services import CacheService, RecipePipeline

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> RecipeHandler:
    """Dependency injection for RecipeHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The RecipeHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "recipe_handler", None)
    if handler is None:
        raise RuntimeError("RecipeHandler not initialized. Check lifespan setup.")
    return handler


def build_store() -> DocumentStore:
    """Create the document store selected by STORE_BACKEND."""
    if settings.uses_memory_store:
        logger.warning("Using in-memory store; cached recipes will not survive a restart")
        return InMemoryDocumentStore()
    return RedisDocumentStore.create()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Store and generator (data access) - created explicitly
    2. Services (business logic) - app.state.cache_service, app.state.pipeline
    3. Handler (HTTP endpoints) - app.state.recipe_handler

    Args:
        app: The FastAPI application instance

    Yields:
        None

    Cleanup:
        Closes the generator's HTTP client and removes services from app.state
    """
    setup_logging()

    store = build_store()
    generator = AnthropicRecipeGenerator.create()

    cache_service = CacheService.create(store=store)
    pipeline = RecipePipeline.create(cache_service=cache_service, generator=generator)
    recipe_handler = RecipeHandler(
        pipeline=pipeline,
        cache_service=cache_service,
        generator=generator,
        admin_token=settings.admin_token,
    )

    # Store in app.state (FastAPI pattern)
    app.state.store = store
    app.state.generator = generator
    app.state.cache_service = cache_service
    app.state.pipeline = pipeline
    app.state.recipe_handler = recipe_handler

    logger.info("Recipe service initialized (model %s)", generator.model_name)
    logger.info("Store backend: %s, healthy: %s", settings.store_backend, cache_service.is_healthy())
    if not generator.is_available():
        logger.warning("ANTHROPIC_API_KEY is not set; generation requests will fail")
    if not settings.admin_token:
        logger.warning("ADMIN_TOKEN is not set; the stats endpoint is disabled")

    yield

    await generator.close()
    del app.state.recipe_handler
    del app.state.pipeline
    del app.state.cache_service
    del app.state.generator
    del app.state.store
    logger.info("Recipe service shut down")


# Type alias for cleaner dependency injection
HandlerDep = Annotated[RecipeHandler, Depends(get_handler)]
