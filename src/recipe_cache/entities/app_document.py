"""Shape of the single application document held by the store.

The document carries sections owned by other parts of the application
(users, profiles, saved recipes). They are kept verbatim on every write.
"""

from typing import Any, TypedDict


class StatsRecord(TypedDict):
    apiCalls: int
    cacheHits: int


class AppDocument(TypedDict):
    users: list[dict[str, Any]]
    profiles: list[dict[str, Any]]
    savedRecipes: list[dict[str, Any]]
    recipeCache: list[dict[str, Any]]
    stats: StatsRecord


def empty_document() -> AppDocument:
    """Document returned when the store holds nothing yet."""
    return {
        "users": [],
        "profiles": [],
        "savedRecipes": [],
        "recipeCache": [],
        "stats": {"apiCalls": 0, "cacheHits": 0},
    }


def coerce_document(raw: dict[str, Any] | None) -> AppDocument:
    """Fill in missing sections of a stored document.

    Unknown top-level keys are preserved.
    """
    document: dict[str, Any] = {**empty_document(), **(raw or {})}
    for section in ("users", "profiles", "savedRecipes", "recipeCache"):
        if document.get(section) is None:
            document[section] = []
    stats = document.get("stats") or {}
    document["stats"] = {
        **stats,
        "apiCalls": stats.get("apiCalls") or 0,
        "cacheHits": stats.get("cacheHits") or 0,
    }
    return document  # type: ignore[return-value]
