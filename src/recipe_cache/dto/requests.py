"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class RecipeRequest(BaseModel):
    """Request DTO for generating a recipe for a meal.

    The handler converts this to a cache key and a prompt; whitespace-only
    meals are rejected there with a 400.
    """

    meal: str = Field(..., description="The meal to make", min_length=1)
    avoid_list: list[str] | None = Field(
        None,
        alias="avoidList",
        description="Ingredients/allergens to avoid (order and case do not matter)",
    )
    force: bool = Field(
        False,
        description="Skip the cache lookup and always regenerate",
    )

    model_config = {"populate_by_name": True}

    @property
    def allergens(self) -> list[str]:
        return self.avoid_list or []


class ConvertRecipeRequest(BaseModel):
    """Request DTO for converting an existing recipe to an allergy-safe one."""

    recipe_text: str = Field(..., alias="recipeText", description="The recipe to convert", min_length=1)
    avoid_list: list[str] | None = Field(
        None,
        alias="avoidList",
        description="Ingredients/allergens to avoid",
    )
    force: bool = Field(False, description="Skip the cache lookup and always regenerate")

    model_config = {"populate_by_name": True}

    @property
    def allergens(self) -> list[str]:
        return self.avoid_list or []
