"""Repository layer for data access.

This layer abstracts external dependencies (Redis, the model provider)
behind protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis → memory, Anthropic → another provider)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from recipe_cache.protocols import DocumentStore, RecipeGenerator

from .anthropic_generator import AnthropicRecipeGenerator
from .memory_document_store import InMemoryDocumentStore
from .redis_document_store import RedisDocumentStore

__all__ = [
    "DocumentStore",
    "RecipeGenerator",
    "AnthropicRecipeGenerator",
    "InMemoryDocumentStore",
    "RedisDocumentStore",
]
