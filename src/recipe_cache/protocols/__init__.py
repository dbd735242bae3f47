"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis → memory, Anthropic → another provider)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from recipe_cache.protocols import DocumentStore, RecipeGenerator

    # Type hints work with any implementation
    store: DocumentStore = RedisDocumentStore.create()
    store: DocumentStore = InMemoryDocumentStore()
    ```
"""

from .document_store import DocumentStore
from .recipe_generator import RecipeGenerator

__all__ = [
    "DocumentStore",
    "RecipeGenerator",
]
