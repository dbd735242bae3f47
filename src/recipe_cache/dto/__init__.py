"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract: request bodies,
response bodies, stream event payloads and the recipe document shape.

Internal domain logic should use entities from the entities package.
"""

from .events import ChunkEvent, DoneEvent, ErrorEvent, RecipeEvent, is_terminal
from .recipes import Ingredient, RecipeDocument, Substitution
from .requests import ConvertRecipeRequest, RecipeRequest
from .responses import CachedRecipeSummary, HealthCheckResponse, StatsResponse

__all__ = [
    "RecipeRequest",
    "ConvertRecipeRequest",
    "ChunkEvent",
    "DoneEvent",
    "ErrorEvent",
    "RecipeEvent",
    "is_terminal",
    "Ingredient",
    "Substitution",
    "RecipeDocument",
    "CachedRecipeSummary",
    "StatsResponse",
    "HealthCheckResponse",
]
