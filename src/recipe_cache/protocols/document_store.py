"""Document storage protocol.

Defines the interface for the persistent store holding the whole
application document (users, profiles, saved recipes, recipe cache,
aggregate stats) as a single unit.

Implementations can include:
- Redis (default)
- In-process memory (local development and tests)
- Any key-value store that can hold one JSON document
"""

from collections.abc import Callable
from typing import Protocol, TypeVar, runtime_checkable

from recipe_cache.entities import AppDocument

T = TypeVar("T")


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for whole-document storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed. Every method raises ``StoreUnavailable``
    when the backend cannot be reached.

    Example:
        ```python
        from recipe_cache.protocols import DocumentStore

        store: DocumentStore = RedisDocumentStore.create()
        store: DocumentStore = InMemoryDocumentStore()
        ```
    """

    def read(self) -> AppDocument:
        """Read a snapshot of the whole document.

        Returns:
            The stored document, or the empty document if none exists
        """
        ...

    def write(self, document: AppDocument) -> None:
        """Replace the whole document.

        Args:
            document: The new document
        """
        ...

    def update(self, mutator: Callable[[AppDocument], T]) -> T:
        """Atomically read, mutate and write back the document.

        The mutator may run more than once if a concurrent writer changed
        the document in between; it must only depend on the document it is
        given.

        Args:
            mutator: Mutates the document in place and returns a result

        Returns:
            The mutator's result from the attempt that was committed
        """
        ...

    def health_check(self) -> bool:
        """Check if the store is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...
