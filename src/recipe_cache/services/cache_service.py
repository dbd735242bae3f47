"""Cache service for recipe lookups, write-backs and usage stats.

Every operation round-trips the document store; there is no in-process
cache layer. Each lookup hit and each upsert is a single atomic update of
the whole document.
"""

import logging
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

from recipe_cache.config import settings
from recipe_cache.entities import AppDocument, CacheEntryEntity, UsageStatsEntity
from recipe_cache.protocols import DocumentStore

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def entry_from_record(record: dict[str, Any]) -> CacheEntryEntity:
    """Convert a stored camelCase cache record to an entity."""
    return CacheEntryEntity(
        id=record["id"],
        cache_key=record["cacheKey"],
        meal=record.get("meal", ""),
        allergens=list(record.get("allergens") or []),
        recipe=record["recipe"],
        hit_count=record.get("hitCount") or 0,
        created_at=record.get("createdAt", ""),
        updated_at=record.get("updatedAt", ""),
        last_hit_at=record.get("lastHitAt"),
    )


def _find_record(document: AppDocument, key: str) -> dict[str, Any] | None:
    for record in document["recipeCache"]:
        if record.get("cacheKey") == key:
            return record
    return None


def _servable(record: dict[str, Any] | None) -> bool:
    return record is not None and isinstance(record.get("recipe"), dict)


class CacheService:
    """Recipe cache backed by a whole-document store.

    Example:
        ```python
        from recipe_cache.repositories import RedisDocumentStore
        from recipe_cache.services import CacheService

        cache = CacheService.create(store=RedisDocumentStore.create())

        entry = cache.lookup("banana bread|dairy,nuts")
        if entry is None:
            entry = cache.upsert("banana bread|dairy,nuts", "banana bread", ["Nuts", "Dairy"], recipe)
        ```
    """

    def __init__(
        self,
        store: DocumentStore,
        max_entries: int | None = None,
        clock: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the cache service.

        Args:
            store: Whole-document storage backend (required).
            max_entries: Capacity bound; 0 disables eviction. Defaults to settings.
            clock: Returns the current timestamp string. Defaults to UTC now.
        """
        self._store = store
        self._max_entries = max_entries if max_entries is not None else settings.cache_max_entries
        self._clock = clock or utc_timestamp

    @classmethod
    def create(
        cls,
        store: DocumentStore,
        max_entries: int | None = None,
    ) -> "CacheService":
        """Factory method to create CacheService with defaults from settings.

        Args:
            store: Whole-document storage backend (required).
            max_entries: Capacity bound. If None, uses settings.

        Returns:
            Configured CacheService instance
        """
        return cls(store=store, max_entries=max_entries)

    def lookup(self, key: str) -> CacheEntryEntity | None:
        """Find the entry for a cache key and record the hit.

        A hit increments the entry's hitCount and the global cacheHits in
        one store update. A miss does not write. A record without a recipe
        object is a miss; the next upsert overwrites it.

        Args:
            key: Normalized cache key

        Returns:
            The entry as it is after the hit, or None on a miss

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        if not _servable(_find_record(self._store.read(), key)):
            return None

        now = self._clock()

        def record_hit(document: AppDocument) -> CacheEntryEntity | None:
            record = _find_record(document, key)
            if record is None or not _servable(record):
                # Evicted or overwritten between the read and the update
                return None
            record["hitCount"] = (record.get("hitCount") or 0) + 1
            record["lastHitAt"] = now
            document["stats"]["cacheHits"] += 1
            return entry_from_record(record)

        return self._store.update(record_hit)

    def upsert(
        self,
        key: str,
        meal: str,
        allergens: Sequence[str],
        recipe: dict[str, Any],
    ) -> CacheEntryEntity:
        """Create or refresh the entry for a cache key after a generation.

        A refresh keeps id, createdAt and hitCount and overwrites the rest.
        Either way apiCalls is incremented once.

        Args:
            key: Normalized cache key
            meal: Trimmed request text, for display
            allergens: Allergens as supplied by the caller
            recipe: The parsed recipe document

        Returns:
            The written entry

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        now = self._clock()

        def write_entry(document: AppDocument) -> tuple[CacheEntryEntity, int, int]:
            cache = document["recipeCache"]
            record = _find_record(document, key)
            if record is None:
                record = {
                    "id": str(uuid.uuid4()),
                    "cacheKey": key,
                    "createdAt": now,
                    "hitCount": 0,
                }
                cache.append(record)
            record["meal"] = meal
            record["allergens"] = list(allergens)
            record["recipe"] = recipe
            record["updatedAt"] = now
            record["hitCount"] = record.get("hitCount") or 0
            document["stats"]["apiCalls"] += 1
            evicted = self._evict(document, keep=key)
            return entry_from_record(record), len(document["recipeCache"]), evicted

        entry, size, evicted = self._store.update(write_entry)
        if evicted:
            logger.info("Evicted %d least recently used cache entries", evicted)
        logger.info("API call: %r - cache now has %d entries", meal, size)
        return entry

    def _evict(self, document: AppDocument, keep: str) -> int:
        """Drop least recently used entries beyond the capacity bound."""
        cache = document["recipeCache"]
        if not self._max_entries or len(cache) <= self._max_entries:
            return 0

        candidates = sorted(
            (entry_from_record(r) for r in cache if r.get("cacheKey") != keep),
            key=lambda e: e.last_used_at,
        )
        excess = len(cache) - self._max_entries
        doomed = {e.cache_key for e in candidates[:excess]}
        document["recipeCache"] = [r for r in cache if r.get("cacheKey") not in doomed]
        return len(doomed)

    def get_stats(self) -> UsageStatsEntity:
        """Get aggregate counters and the cache, most hit first.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        document = self._store.read()
        entries = sorted(
            (entry_from_record(r) for r in document["recipeCache"]),
            key=lambda e: e.hit_count,
            reverse=True,
        )
        return UsageStatsEntity(
            api_calls=document["stats"]["apiCalls"],
            cache_hits=document["stats"]["cacheHits"],
            entries=entries,
        )

    def is_healthy(self) -> bool:
        return self._store.health_check()

    @property
    def store(self) -> DocumentStore:
        """Get the underlying store (for testing)."""
        return self._store
