from collections.abc import Sequence

RECIPE_JSON_SHAPE = """{
  "title": "Recipe title",
  "servings": "e.g. 4 servings",
  "prepTime": "e.g. 15 minutes",
  "cookTime": "e.g. 30 minutes",
  "ingredients": [
    { "amount": "1 cup", "item": "ingredient name" }
  ],
  "instructions": [
    "Step 1: ...",
    "Step 2: ..."
  ],
  "substitutions": [
    { "original": "butter", "substitute": "coconut oil", "reason": "dairy-free alternative that works well for baking" }
  ],
  "allergenNote": "A brief paragraph confirming this recipe is free from the listed allergens and any general safety tips."
}"""

RECIPE_RULES = """Important rules:
- Do NOT include any of the avoided ingredients or anything derived from them
- Make thoughtful substitutions that preserve the dish's flavor and texture as much as possible
- Only include substitutions that were actually made (if none were needed, use an empty array)
- Keep instructions clear and beginner-friendly
- Return ONLY the JSON object, no markdown, no extra text"""

CREATE_RECIPE_PROMPT = """You are a helpful recipe assistant specializing in allergy-friendly cooking.

The user wants to make: "{meal}"
Ingredients/allergens to AVOID: {avoid_text}

Please create a detailed, allergy-friendly recipe. Respond with valid JSON in exactly this format:
{shape}

{rules}"""

CONVERT_RECIPE_PROMPT = """You are a helpful recipe assistant specializing in allergy-friendly cooking.

The user has this recipe:
\"\"\"
{recipe_text}
\"\"\"
Ingredients/allergens to AVOID: {avoid_text}

Please rewrite this recipe so it is allergy-friendly, keeping it as close to the original as possible. Respond with valid JSON in exactly this format:
{shape}

{rules}"""


def format_avoid_list(avoid_list: Sequence[str] | None) -> str:
    """Comma-join the avoid list, or ``none`` when empty."""
    return ", ".join(avoid_list) if avoid_list else "none"


def build_recipe_prompt(meal: str, avoid_list: Sequence[str] | None = None) -> str:
    return CREATE_RECIPE_PROMPT.format(
        meal=meal,
        avoid_text=format_avoid_list(avoid_list),
        shape=RECIPE_JSON_SHAPE,
        rules=RECIPE_RULES,
    )


def build_conversion_prompt(recipe_text: str, avoid_list: Sequence[str] | None = None) -> str:
    return CONVERT_RECIPE_PROMPT.format(
        recipe_text=recipe_text,
        avoid_text=format_avoid_list(avoid_list),
        shape=RECIPE_JSON_SHAPE,
        rules=RECIPE_RULES,
    )
