"""Domain entities for internal representation.

These are pure dataclasses (frozen) and typed dicts used internally by
services and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.

Entities should have:
- No Pydantic validation
- No external dependencies
- Pure domain logic only
"""

from .app_document import AppDocument, StatsRecord, coerce_document, empty_document
from .cache_entry import CacheEntryEntity
from .generation_job import GenerationJob
from .usage_stats import UsageStatsEntity

__all__ = [
    "AppDocument",
    "StatsRecord",
    "CacheEntryEntity",
    "GenerationJob",
    "UsageStatsEntity",
    "coerce_document",
    "empty_document",
]
