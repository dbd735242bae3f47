"""Redis implementation of DocumentStore.

The whole application document is stored as one JSON string under a single
key. Read-modify-write goes through an optimistic transaction (WATCH/MULTI)
so concurrent writers are serialized instead of overwriting each other.
"""

import json
import logging
from collections.abc import Callable
from typing import TypeVar

import redis

from recipe_cache.config import get_redis_client, settings
from recipe_cache.entities import AppDocument, coerce_document
from recipe_cache.errors import StoreUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RedisDocumentStore:
    """Redis implementation holding the document under one key.

    This class satisfies the DocumentStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        document_key: str | None = None,
    ) -> None:
        """Initialize the Redis document store.

        Args:
            redis_client: Redis client instance. If None, one is created
                lazily on first use from settings.
            document_key: Key holding the document. Defaults to settings.
        """
        self._client = redis_client
        self._key = document_key or settings.redis_document_key

    @classmethod
    def create(cls, document_key: str | None = None) -> "RedisDocumentStore":
        """Factory method to create RedisDocumentStore with defaults.

        Args:
            document_key: Redis key. If None, uses settings.

        Returns:
            Configured RedisDocumentStore
        """
        return cls(document_key=document_key)

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client, creating it on first use.

        Raises:
            StoreUnavailable: If Redis is not configured
        """
        if self._client is None:
            self._client = get_redis_client()
        return self._client

    @property
    def document_key(self) -> str:
        return self._key

    def _decode(self, raw: str | bytes | None) -> AppDocument:
        if raw is None:
            return coerce_document(None)
        try:
            return coerce_document(json.loads(raw))
        except json.JSONDecodeError as e:
            raise StoreUnavailable(f"Stored document at {self._key!r} is not valid JSON") from e

    def read(self) -> AppDocument:
        """Read the whole document.

        Returns:
            The stored document, or the empty document if the key is unset

        Raises:
            StoreUnavailable: If Redis cannot be reached
        """
        try:
            raw = self.client.get(self._key)
        except redis.RedisError as e:
            raise StoreUnavailable(f"Redis read failed: {e}") from e
        return self._decode(raw)  # type: ignore[arg-type]

    def write(self, document: AppDocument) -> None:
        """Replace the whole document.

        Raises:
            StoreUnavailable: If Redis cannot be reached
        """
        try:
            self.client.set(self._key, json.dumps(document))
        except redis.RedisError as e:
            raise StoreUnavailable(f"Redis write failed: {e}") from e

    def update(self, mutator: Callable[[AppDocument], T]) -> T:
        """Read, mutate and write the document in one optimistic transaction.

        Redis retries the transaction when the key changes between WATCH and
        EXEC; the mutator then runs again on the fresh document.

        Raises:
            StoreUnavailable: If Redis cannot be reached
        """

        def transaction(pipe: redis.client.Pipeline) -> T:
            document = self._decode(pipe.get(self._key))  # type: ignore[arg-type]
            result = mutator(document)
            pipe.multi()
            pipe.set(self._key, json.dumps(document))
            return result

        try:
            return self.client.transaction(transaction, self._key, value_from_callable=True)
        except redis.RedisError as e:
            raise StoreUnavailable(f"Redis update failed: {e}") from e

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self.client.ping())
        except (redis.RedisError, StoreUnavailable) as e:
            logger.warning("Redis health check failed: %s", e)
            return False
