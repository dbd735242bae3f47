"""Recipe generation pipeline.

Orchestrates one request end to end and expresses the outcome as a stream
of events:

1. Cache lookup (skipped when forced). A hit yields only a done event.
2. On a miss, join or start the generation for the key.
3. Forward every fragment as a chunk event.
4. Parse the accumulated text; write the recipe back to the cache.
5. Yield exactly one terminal event, done or error.

Store failures never surface: a failed lookup counts as a miss and a
failed write-back is logged while the recipe is still returned. A cached
record that cannot be served counts as a miss, and any other failure still
ends the stream with an error event.
"""

import logging
from collections.abc import AsyncIterator

from pydantic import ValidationError

from recipe_cache.dto import DoneEvent, ErrorEvent, RecipeEvent, is_terminal
from recipe_cache.entities import GenerationJob
from recipe_cache.errors import DEFAULT_GENERATION_MESSAGE, GenerationFailed, MalformedRecipe, StoreUnavailable
from recipe_cache.parsing import parse_recipe
from recipe_cache.protocols import RecipeGenerator

from .cache_service import CacheService
from .inflight import InFlightGeneration, InFlightRegistry

logger = logging.getLogger(__name__)


class RecipePipeline:
    """Cache-or-generate pipeline producing recipe events.

    Example:
        ```python
        pipeline = RecipePipeline.create(cache_service=cache, generator=generator)

        async for event in pipeline.events(job):
            print(event)
        ```
    """

    def __init__(
        self,
        cache_service: CacheService,
        generator: RecipeGenerator,
        registry: InFlightRegistry | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            cache_service: Cache lookups and write-backs (required).
            generator: Streaming model provider (required).
            registry: Coalesces concurrent generations per key. One is
                created if not given.
        """
        self._cache = cache_service
        self._generator = generator
        self._registry = registry or InFlightRegistry()

    @classmethod
    def create(
        cls,
        cache_service: CacheService,
        generator: RecipeGenerator,
    ) -> "RecipePipeline":
        """Factory method to create a pipeline with a fresh registry."""
        return cls(cache_service=cache_service, generator=generator)

    async def events(self, job: GenerationJob) -> AsyncIterator[RecipeEvent]:
        """Serve one request as a stream of events.

        Args:
            job: The normalized request

        Yields:
            Chunk events on a miss, then exactly one terminal event
        """
        terminated = False
        try:
            async for event in self._serve(job):
                terminated = is_terminal(event)
                yield event
        except Exception:
            logger.exception("Serving %r failed unexpectedly", job.meal)
            if not terminated:
                yield ErrorEvent(error=DEFAULT_GENERATION_MESSAGE)

    async def _serve(self, job: GenerationJob) -> AsyncIterator[RecipeEvent]:
        if not job.force:
            cached = self._lookup(job.cache_key)
            if cached is not None:
                logger.info("Cache hit: %r", job.meal)
                yield cached
                return

        generation, started = self._registry.join_or_start(
            job.cache_key,
            lambda shared: self._generate(shared, job),
        )
        if started:
            reason = "refresh" if job.force else "miss"
            logger.info("Cache %s: %r - calling %s", reason, job.meal, self._generator.model_name)
        else:
            logger.info("Joining in-flight generation for %r", job.meal)

        async for event in generation.follow():
            yield event

    def _lookup(self, key: str) -> DoneEvent | None:
        """Return the cached recipe as a done event, or None on a miss.

        An unreachable store or an unusable stored record counts as a miss.
        """
        try:
            entry = self._cache.lookup(key)
        except StoreUnavailable as e:
            logger.warning("Cache lookup failed, treating as miss: %s", e)
            return None
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Cached record for %r is unreadable, treating as miss: %s", key, e)
            return None
        if entry is None:
            return None

        try:
            return DoneEvent(recipe=entry.recipe, from_cache=True)
        except ValidationError as e:
            logger.warning("Cached recipe for %r is invalid, treating as miss: %s", key, e)
            return None

    async def _generate(self, generation: InFlightGeneration, job: GenerationJob) -> None:
        parts: list[str] = []
        try:
            async for fragment in self._generator.stream(job.prompt):
                parts.append(fragment)
                await generation.publish(fragment)
            recipe = parse_recipe("".join(parts))
        except GenerationFailed as e:
            logger.error("Generation failed for %r (%s): %s", job.meal, e.status, e.message)
            await generation.finish(ErrorEvent(error=e.message, status=e.status))
            return
        except MalformedRecipe:
            logger.error("Unparseable recipe for %r after %d fragments", job.meal, len(parts))
            await generation.finish(ErrorEvent(error=MalformedRecipe.user_message, status=500))
            return

        try:
            self._cache.upsert(job.cache_key, job.meal, job.allergens, recipe)
        except StoreUnavailable as e:
            logger.warning("Cache write failed for %r, returning uncached recipe: %s", job.meal, e)

        await generation.finish(DoneEvent(recipe=recipe, from_cache=False))

    @property
    def registry(self) -> InFlightRegistry:
        """Get the in-flight registry (for testing)."""
        return self._registry
