"""Recipe generator protocol.

Defines the interface for any language-model service that turns a prompt
into a stream of text fragments.

Implementations can include:
- Anthropic Messages API (default)
- Any other provider with incremental output
- Scripted generators in tests
"""

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class RecipeGenerator(Protocol):
    """Protocol for streaming text generation.

    Example:
        ```python
        from recipe_cache.protocols import RecipeGenerator

        generator: RecipeGenerator = AnthropicRecipeGenerator.create()
        async for fragment in generator.stream(prompt):
            print(fragment, end="")
        ```
    """

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the model."""
        ...

    def stream(self, prompt: str) -> AsyncIterator[str]:
        """Submit a prompt and yield text fragments as they arrive.

        The iterator is finite and cannot be restarted. Fragments come in
        arrival order, none dropped or duplicated.

        Args:
            prompt: The full prompt text

        Yields:
            Text fragments

        Raises:
            GenerationFailed: If the provider call fails
        """
        ...

    def is_available(self) -> bool:
        """Check if the generator is configured to make calls.

        Returns:
            True if available, False otherwise
        """
        ...
