"""Recipe Cache - allergy-safe recipe generation with caching and streaming.

This package provides a layered architecture for cached recipe generation:

Layers:
    - protocols: Interface contracts (DocumentStore, RecipeGenerator)
    - repositories: Data access implementations (Redis, memory, Anthropic)
    - services: Business logic (cache, pipeline, in-flight coalescing)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts and stream events)
    - entities: Domain models (internal)

Usage:
    ```python
    from recipe_cache.repositories import AnthropicRecipeGenerator, RedisDocumentStore
    from recipe_cache.services import CacheService, RecipePipeline

    cache = CacheService.create(store=RedisDocumentStore.create())
    pipeline = RecipePipeline.create(
        cache_service=cache,
        generator=AnthropicRecipeGenerator.create(),
    )
    ```

For HTTP API:
    ```python
    from recipe_cache.api.app import app
    ```
"""

from recipe_cache.config import get_redis_client, settings
from recipe_cache.dto import ChunkEvent, ConvertRecipeRequest, DoneEvent, ErrorEvent, RecipeRequest
from recipe_cache.entities import CacheEntryEntity, GenerationJob, UsageStatsEntity
from recipe_cache.errors import (
    GenerationFailed,
    IncompleteStream,
    InvalidInput,
    MalformedRecipe,
    RecipeCacheError,
    StoreUnavailable,
)
from recipe_cache.handlers import RecipeHandler
from recipe_cache.keys import make_cache_key
from recipe_cache.protocols import DocumentStore, RecipeGenerator
from recipe_cache.repositories import AnthropicRecipeGenerator, InMemoryDocumentStore, RedisDocumentStore
from recipe_cache.services import CacheService, RecipePipeline

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "DocumentStore",
    "RecipeGenerator",
    # Services (business logic)
    "CacheService",
    "RecipePipeline",
    "make_cache_key",
    # Handlers (HTTP)
    "RecipeHandler",
    # Repositories (data access)
    "RedisDocumentStore",
    "InMemoryDocumentStore",
    "AnthropicRecipeGenerator",
    # Entities (domain models)
    "CacheEntryEntity",
    "GenerationJob",
    "UsageStatsEntity",
    # DTOs (API contracts)
    "RecipeRequest",
    "ConvertRecipeRequest",
    "ChunkEvent",
    "DoneEvent",
    "ErrorEvent",
    # Errors
    "RecipeCacheError",
    "InvalidInput",
    "StoreUnavailable",
    "GenerationFailed",
    "MalformedRecipe",
    "IncompleteStream",
]
