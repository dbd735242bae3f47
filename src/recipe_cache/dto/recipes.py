"""Recipe document shape expected from the model.

Used to check the structure of parsed model output. The cache stores the
decoded JSON as-is, not a re-serialized copy of these models.
"""

from pydantic import BaseModel, Field


class Ingredient(BaseModel):
    amount: str | int | float = Field(..., description="Quantity, e.g. '1 cup'")
    item: str = Field(..., description="Ingredient name")


class Substitution(BaseModel):
    original: str
    substitute: str
    reason: str = ""


class RecipeDocument(BaseModel):
    """Structured recipe as returned by the model."""

    title: str = Field(..., min_length=1)
    servings: str | int | float
    prep_time: str | int | float = Field(..., alias="prepTime")
    cook_time: str | int | float = Field(..., alias="cookTime")
    ingredients: list[Ingredient]
    instructions: list[str]
    substitutions: list[Substitution] = Field(default_factory=list)
    allergen_note: str = Field("", alias="allergenNote")

    model_config = {"populate_by_name": True, "extra": "allow"}
