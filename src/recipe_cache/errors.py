"""Error taxonomy for the recipe pipeline.

Pre-flight errors (``InvalidInput``) become plain HTTP error responses.
Once a stream has been opened, ``GenerationFailed`` and ``MalformedRecipe``
are reported as a terminal error event. ``StoreUnavailable`` is absorbed by
the pipeline: lookups degrade to a miss, write-backs are logged and dropped.
``IncompleteStream`` and ``RecipeStreamError`` are raised client-side.
"""

UNEXPECTED_FORMAT_MESSAGE = "Received an unexpected response format. Please try again."
DEFAULT_GENERATION_MESSAGE = "Failed to generate recipe. Please try again."


class RecipeCacheError(Exception):
    """Base class for all recipe pipeline errors."""


class InvalidInput(RecipeCacheError):
    """The request is malformed in a user-correctable way."""


class StoreUnavailable(RecipeCacheError):
    """The persistent store cannot be reached or is not configured."""


class GenerationFailed(RecipeCacheError):
    """The model provider call itself failed.

    Attributes:
        status: HTTP-like status reported by the provider (500 if unknown)
        message: Provider message, safe to show to the user
    """

    def __init__(self, message: str | None = None, status: int | None = None) -> None:
        self.status = status or 500
        self.message = message or DEFAULT_GENERATION_MESSAGE
        super().__init__(self.message)


class MalformedRecipe(RecipeCacheError):
    """The provider answered, but the text is not a recipe document."""

    user_message = UNEXPECTED_FORMAT_MESSAGE


class IncompleteStream(RecipeCacheError):
    """The event stream closed before a terminal event arrived."""


class RecipeStreamError(RecipeCacheError):
    """The event stream ended with a terminal error event."""
