"""Cache key normalization.

A cache key identifies a (meal, allergen-set) request. Allergen order, case
and surrounding whitespace do not matter; spelling does ("peanut" and
"peanuts" are different keys).
"""

from collections.abc import Sequence

from recipe_cache.errors import InvalidInput

KEY_SEPARATOR = "|"
CONVERSION_PREFIX = "convert:"


def normalize_allergens(allergens: Sequence[str] | None) -> str:
    """Lowercase, trim and sort allergens, joined with commas."""
    return ",".join(sorted(a.strip().lower() for a in allergens or ()))


def make_cache_key(meal: str, allergens: Sequence[str] | None = None) -> str:
    """Build the canonical cache key for a meal request.

    Args:
        meal: The requested meal name
        allergens: Ingredients/allergens to avoid (any order, any case)

    Returns:
        Key of the form ``"<meal>|<a1>,<a2>"``

    Raises:
        InvalidInput: If the meal is empty after trimming
    """
    normalized_meal = (meal or "").strip().lower()
    if not normalized_meal:
        raise InvalidInput("Meal name is required.")
    return f"{normalized_meal}{KEY_SEPARATOR}{normalize_allergens(allergens)}"


def make_conversion_key(recipe_text: str, allergens: Sequence[str] | None = None) -> str:
    """Build the cache key for a recipe-conversion request."""
    if not (recipe_text or "").strip():
        raise InvalidInput("Recipe text is required.")
    return CONVERSION_PREFIX + make_cache_key(recipe_text, allergens)
