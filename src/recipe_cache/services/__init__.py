"""Service layer for business logic.

CacheService owns the cache records and counters inside the application
document. RecipePipeline turns one request into a stream of events, with
InFlightRegistry making concurrent requests for a key share one generation.
Services depend on protocols, not on concrete stores or providers.

Usage:
    ```python
    from recipe_cache.services import CacheService, RecipePipeline

    cache = CacheService.create(store=store)
    pipeline = RecipePipeline.create(cache_service=cache, generator=generator)
    ```
"""

from .cache_service import CacheService
from .inflight import InFlightGeneration, InFlightRegistry
from .recipe_pipeline import RecipePipeline

__all__ = [
    "CacheService",
    "InFlightGeneration",
    "InFlightRegistry",
    "RecipePipeline",
]
