"""Per-key coalescing of concurrent generations.

At most one generation runs per cache key inside a process. Requests that
arrive while it runs join it: each follower replays the fragments produced
so far, then receives the rest live, then the shared terminal event.

The generation runs in its own task, so a follower that disconnects does
not cancel it for the others.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from recipe_cache.dto import ChunkEvent, ErrorEvent, RecipeEvent
from recipe_cache.errors import DEFAULT_GENERATION_MESSAGE

logger = logging.getLogger(__name__)


class InFlightGeneration:
    """One running generation shared by every request for the same key."""

    def __init__(self, key: str) -> None:
        self.key = key
        self.task: asyncio.Task | None = None
        self._fragments: list[str] = []
        self._outcome: RecipeEvent | None = None
        self._changed = asyncio.Condition()

    @property
    def done(self) -> bool:
        return self._outcome is not None

    async def publish(self, fragment: str) -> None:
        """Append a fragment and wake every follower."""
        async with self._changed:
            self._fragments.append(fragment)
            self._changed.notify_all()

    async def finish(self, event: RecipeEvent) -> None:
        """Record the terminal event. Later calls are ignored."""
        async with self._changed:
            if self._outcome is None:
                self._outcome = event
            self._changed.notify_all()

    async def follow(self) -> AsyncIterator[RecipeEvent]:
        """Yield every fragment from the start, then the terminal event."""
        index = 0
        while True:
            async with self._changed:
                await self._changed.wait_for(lambda: len(self._fragments) > index or self._outcome is not None)
                fragments = self._fragments[index:]
                index += len(fragments)
                outcome = self._outcome

            for fragment in fragments:
                yield ChunkEvent(chunk=fragment)
            if outcome is not None:
                yield outcome
                return


Producer = Callable[[InFlightGeneration], Awaitable[None]]


class InFlightRegistry:
    """Registry of running generations keyed by cache key."""

    def __init__(self) -> None:
        self._running: dict[str, InFlightGeneration] = {}

    def join_or_start(self, key: str, produce: Producer) -> tuple[InFlightGeneration, bool]:
        """Join the generation running for a key, or start one.

        Args:
            key: Normalized cache key
            produce: Runs the generation, publishing into the given object

        Returns:
            The shared generation and whether this call started it
        """
        existing = self._running.get(key)
        if existing is not None and not existing.done:
            return existing, False

        generation = InFlightGeneration(key)
        self._running[key] = generation
        generation.task = asyncio.create_task(self._run(generation, produce))
        return generation, True

    async def _run(self, generation: InFlightGeneration, produce: Producer) -> None:
        try:
            await produce(generation)
        except Exception:
            logger.exception("Generation for %r failed unexpectedly", generation.key)
        finally:
            # Followers block until a terminal event arrives
            if not generation.done:
                await generation.finish(ErrorEvent(error=DEFAULT_GENERATION_MESSAGE))
            if self._running.get(generation.key) is generation:
                del self._running[generation.key]

    def is_running(self, key: str) -> bool:
        """Check if a generation is registered for a key (for testing)."""
        return key in self._running
