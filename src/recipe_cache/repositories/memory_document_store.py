"""In-process implementation of DocumentStore.

Keeps the document as serialized JSON so callers never share mutable state
with the store, the same as with a remote backend. Nothing survives a
restart; meant for local development and tests.
"""

import json
import threading
from collections.abc import Callable
from typing import TypeVar

from recipe_cache.entities import AppDocument, coerce_document
from recipe_cache.errors import StoreUnavailable

T = TypeVar("T")


class InMemoryDocumentStore:
    """Memory-backed store satisfying the DocumentStore protocol."""

    def __init__(self, document: AppDocument | None = None) -> None:
        self._raw: str | None = json.dumps(document) if document is not None else None
        self._lock = threading.Lock()
        # Switch and write counter (for testing)
        self.available = True
        self.writes = 0

    def _check(self) -> None:
        if not self.available:
            raise StoreUnavailable("In-memory store is marked unavailable")

    def _load(self) -> AppDocument:
        return coerce_document(json.loads(self._raw) if self._raw is not None else None)

    def _dump(self, document: AppDocument) -> None:
        self.writes += 1
        self._raw = json.dumps(document)

    def read(self) -> AppDocument:
        self._check()
        with self._lock:
            return self._load()

    def write(self, document: AppDocument) -> None:
        self._check()
        with self._lock:
            self._dump(document)

    def update(self, mutator: Callable[[AppDocument], T]) -> T:
        self._check()
        with self._lock:
            document = self._load()
            result = mutator(document)
            self._dump(document)
            return result

    def health_check(self) -> bool:
        return self.available
