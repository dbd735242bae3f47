"""Event payloads for the recipe event stream.

Each event is serialized as one ``data: <json>`` frame. A stream carries
zero or more ``ChunkEvent`` followed by exactly one terminal event,
``DoneEvent`` or ``ErrorEvent``.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ChunkEvent(BaseModel):
    """A fragment of generated text, in arrival order."""

    chunk: str


class DoneEvent(BaseModel):
    """Terminal success event."""

    done: Literal[True] = True
    recipe: dict[str, Any]
    from_cache: bool = Field(False, alias="_fromCache")

    model_config = {"populate_by_name": True}

    def to_body(self) -> dict[str, Any]:
        """Flatten to the buffered response body ``{...recipe, _fromCache}``."""
        return {**self.recipe, "_fromCache": self.from_cache}


class ErrorEvent(BaseModel):
    """Terminal failure event."""

    error: str
    status: int = Field(500, exclude=True)


RecipeEvent = ChunkEvent | DoneEvent | ErrorEvent


def is_terminal(event: RecipeEvent) -> bool:
    return not isinstance(event, ChunkEvent)
