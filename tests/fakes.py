"""Test doubles and sample data shared across test modules."""

import asyncio
import json
from collections.abc import AsyncIterator

BANANA_BREAD = {
    "title": "Nut-Free, Dairy-Free Banana Bread",
    "servings": "8 slices",
    "prepTime": "15 minutes",
    "cookTime": "55 minutes",
    "ingredients": [
        {"amount": "3", "item": "ripe bananas"},
        {"amount": "1/3 cup", "item": "coconut oil, melted"},
        {"amount": "1 1/2 cups", "item": "all-purpose flour"},
    ],
    "instructions": [
        "Step 1: Preheat the oven to 350°F.",
        "Step 2: Mash the bananas and stir in the oil.",
        "Step 3: Fold in the flour and bake for 55 minutes.",
    ],
    "substitutions": [
        {"original": "butter", "substitute": "coconut oil", "reason": "dairy-free"},
    ],
    "allergenNote": "Free from nuts and dairy.",
}


ADMIN_TOKEN = "test-admin-token"


def split_fragments(text: str, size: int = 40) -> list[str]:
    return [text[i : i + size] for i in range(0, len(text), size)]


class ScriptedGenerator:
    """RecipeGenerator that replays fixed fragments, then optionally fails."""

    def __init__(
        self,
        fragments: list[str] | None = None,
        error: Exception | None = None,
        model_name: str = "scripted-model",
    ) -> None:
        self.fragments = fragments if fragments is not None else split_fragments(json.dumps(BANANA_BREAD))
        self.error = error
        self.prompts: list[str] = []
        self.gate: asyncio.Event | None = None
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        return self._model_name

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        self.prompts.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        for fragment in self.fragments:
            yield fragment
        if self.error is not None:
            raise self.error

    def is_available(self) -> bool:
        return True


class TickingClock:
    """Deterministic, strictly increasing ISO timestamps."""

    def __init__(self) -> None:
        self.ticks = 0

    def __call__(self) -> str:
        self.ticks += 1
        return f"2024-01-01T00:{self.ticks // 60:02d}:{self.ticks % 60:02d}.000Z"

