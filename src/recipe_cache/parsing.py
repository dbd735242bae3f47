"""Parsing of accumulated model output into a recipe document."""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from recipe_cache.dto import RecipeDocument
from recipe_cache.errors import MalformedRecipe

logger = logging.getLogger(__name__)

# One optional opening fence (optionally tagged, e.g. ```json) and one closing fence
_LEADING_FENCE = re.compile(r"^```[a-z0-9_-]*\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model added despite instructions.

    Args:
        text: Raw accumulated model output

    Returns:
        The text without one leading and one trailing fence, trimmed
    """
    content = text.strip()
    content = _LEADING_FENCE.sub("", content, count=1)
    content = _TRAILING_FENCE.sub("", content, count=1)
    return content.strip()


def parse_recipe(text: str) -> dict[str, Any]:
    """Parse accumulated model output as a recipe document.

    The returned dict is the decoded JSON object itself; it is only checked
    against ``RecipeDocument``, never rewritten.

    Args:
        text: Raw accumulated model output

    Returns:
        The recipe as a JSON object

    Raises:
        MalformedRecipe: If the text is not a JSON object of the recipe shape
    """
    content = strip_code_fences(text)

    try:
        recipe = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse model response as JSON: %s", e)
        raise MalformedRecipe(str(e)) from e

    if not isinstance(recipe, dict):
        logger.error("Model response is JSON but not an object: %s", type(recipe).__name__)
        raise MalformedRecipe(f"expected a JSON object, got {type(recipe).__name__}")

    try:
        RecipeDocument.model_validate(recipe)
    except ValidationError as e:
        logger.error("Model response does not match the recipe shape: %s", e)
        raise MalformedRecipe(str(e)) from e

    return recipe
