"""HTTP client for the recipe event stream.

Example:
    ```python
    from recipe_cache.client import RecipeStreamClient

    with RecipeStreamClient("http://localhost:3001") as client:
        done = client.generate("banana bread", ["Nuts", "Dairy"], on_chunk=print)
        print(done.recipe["title"], done.from_cache)
    ```
"""

from collections.abc import Callable, Iterable, Iterator, Sequence

import httpx

from recipe_cache.dto import ChunkEvent, DoneEvent
from recipe_cache.errors import RecipeStreamError
from recipe_cache.streaming import decode_event, iter_frames, read_event_stream


class RecipeStreamClient:
    """Synchronous client for ``POST /api/recipe``."""

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Service root, e.g. http://localhost:3001
            timeout: Read timeout in seconds; None waits for the model
            client: HTTP client to use. If None, one is created.
        """
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(10.0, read=timeout),
        )

    def __enter__(self) -> "RecipeStreamClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return f"Server error ({response.status_code}). Please try again."
        return str(data.get("detail") or data.get("error") or f"Server error ({response.status_code})")

    @staticmethod
    def _tap_chunks(lines: Iterable[str], on_chunk: Callable[[str], None]) -> Iterator[str]:
        """Pass lines through, reporting chunk payloads on the way."""
        for line in lines:
            for payload in iter_frames([line]):
                event = decode_event(payload)
                if isinstance(event, ChunkEvent):
                    on_chunk(event.chunk)
            yield line

    def generate(
        self,
        meal: str,
        avoid_list: Sequence[str] | None = None,
        force: bool = False,
        on_chunk: Callable[[str], None] | None = None,
    ) -> DoneEvent:
        """Request a recipe and follow the stream to its terminal event.

        Args:
            meal: The meal to make
            avoid_list: Ingredients/allergens to avoid
            force: Skip the cache and regenerate
            on_chunk: Called with each generated fragment

        Returns:
            The terminal success event

        Raises:
            RecipeStreamError: On an error response or terminal error event
            IncompleteStream: If the connection closes before a terminal event
        """
        body = {"meal": meal, "avoidList": list(avoid_list or []), "force": force}
        with self._client.stream("POST", "/api/recipe", json=body) as response:
            if response.status_code >= 400:
                response.read()
                raise RecipeStreamError(self._error_detail(response))

            lines = response.iter_lines()
            if on_chunk is not None:
                lines = self._tap_chunks(lines, on_chunk)
            return read_event_stream(lines)
