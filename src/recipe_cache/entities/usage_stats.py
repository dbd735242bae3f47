"""Usage statistics domain entity."""

import math
from dataclasses import dataclass, field

from .cache_entry import CacheEntryEntity


@dataclass(frozen=True)
class UsageStatsEntity:
    """Read-only view over the aggregate counters and the cache.

    Attributes:
        api_calls: Successful generations that were written to the cache
        cache_hits: Responses served from the cache
        entries: Cache entries, most hit first
    """

    api_calls: int = 0
    cache_hits: int = 0
    entries: list[CacheEntryEntity] = field(default_factory=list)

    @property
    def total_requests(self) -> int:
        return self.api_calls + self.cache_hits

    @property
    def cache_hit_rate(self) -> int:
        """Percentage of requests served from cache, halves rounded up."""
        if self.total_requests == 0:
            return 0
        return math.floor(self.cache_hits / self.total_requests * 100 + 0.5)

    @property
    def cache_entries(self) -> int:
        return len(self.entries)
