"""Cache entry domain entity."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a cached recipe.

    This is an internal representation used by services. The store keeps
    the same data as camelCase records inside the application document.

    Attributes:
        id: Opaque identifier, assigned once on creation
        cache_key: Canonical normalized key, unique within the cache
        meal: Trimmed meal text as requested (display only)
        allergens: Allergens as supplied by the latest write
        recipe: The recipe document
        hit_count: Number of cache reads that served this entry
        created_at: ISO-8601 creation timestamp, never changes
        updated_at: ISO-8601 timestamp of the latest write
        last_hit_at: ISO-8601 timestamp of the latest cache read, if any
    """

    id: str
    cache_key: str
    meal: str
    recipe: dict[str, Any]
    created_at: str
    updated_at: str
    allergens: list[str] = field(default_factory=list)
    hit_count: int = 0
    last_hit_at: str | None = None

    @property
    def last_used_at(self) -> str:
        """Latest of write time and read time, for LRU eviction."""
        return max(self.updated_at, self.last_hit_at or "")
