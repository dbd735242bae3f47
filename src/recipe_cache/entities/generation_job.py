"""Generation job domain entity."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GenerationJob:
    """Everything the pipeline needs to serve one recipe request.

    Attributes:
        cache_key: Normalized key identifying the request
        meal: Trimmed request text stored with the cache entry
        prompt: Full prompt sent to the model on a miss
        allergens: Allergens as supplied by the caller
        force: Skip the cache lookup and always regenerate
    """

    cache_key: str
    meal: str
    prompt: str
    allergens: list[str] = field(default_factory=list)
    force: bool = False
