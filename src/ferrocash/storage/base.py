"""
Abstract Storage Backend for FerroCash.

Registers, sessions, movements and checks are stored as JSON-compatible
documents grouped in collections. Besides documents a backend provides the
two primitives the ledger serializes on: integer counters and token-owned
locks with a TTL.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

# Key under which query results carry their document key
KEY_FIELD = "_key"


def matches(record: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    """Exact-match filter shared by the backends."""
    if not filters:
        return True
    return all(record.get(field) == value for field, value in filters.items())


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    Documents are copied on the way in and out; callers never share a
    mutable dict with the store.
    """

    @abstractmethod
    async def save(self, collection: str, key: str, data: dict[str, Any]) -> None:
        """
        Insert or replace a document.

        Args:
            collection: Collection name (e.g. "cash_registers")
            key: Document key, usually the entity id
            data: JSON-serializable document
        """
        ...

    @abstractmethod
    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        """Return the document, or None if it does not exist."""
        ...

    @abstractmethod
    async def update(self, collection: str, key: str, data: dict[str, Any]) -> bool:
        """
        Merge fields into an existing document.

        Returns:
            True if updated, False if the document does not exist
        """
        ...

    @abstractmethod
    async def delete(self, collection: str, key: str) -> bool:
        """Remove a document. Returns False if it was not there."""
        ...

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Documents whose fields equal every value in ``filters``.

        Each result carries its document key under ``_key``. Order is
        unspecified; services sort what they return.
        """
        ...

    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        return len(await self.query(collection, filters))

    @abstractmethod
    async def increment(self, counter: str, delta: int = 1) -> int:
        """
        Atomically add ``delta`` to a named integer counter.

        Missing counters start at zero.

        Returns:
            The counter value after the increment
        """
        ...

    @abstractmethod
    async def reset_counter(self, counter: str) -> None:
        """Drop a counter so that it starts from zero again."""
        ...

    async def next_sequence(self, name: str) -> int:
        """
        Allocate the next value of a named sequence.

        Values start at 1 and are strictly increasing per name, across every
        process sharing the backend.
        """
        return await self.increment(f"sequence:{name}")

    @abstractmethod
    async def acquire_lock(self, key: str, ttl: int = 30) -> str | None:
        """
        Try once to acquire a lock.

        Args:
            key: Lock key (e.g. "lock:session:abc")
            ttl: Seconds before an abandoned lock expires

        Returns:
            Ownership token if acquired, None if already held
        """
        ...

    @abstractmethod
    async def release_lock(self, key: str, token: str | None = None) -> bool:
        """
        Release a lock.

        Args:
            key: Lock key
            token: Ownership token; the lock is only released if it matches

        Returns:
            True if released, False if not held or owned by someone else
        """
        ...

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        """Release connections held by the backend."""
        return None


# Storage backend registry, filled in by the backend modules on import
_STORAGE_BACKENDS: dict[str, type[StorageBackend]] = {}


def register_storage_backend(name: str, backend_class: type[StorageBackend]) -> None:
    """Register a storage backend by name."""
    _STORAGE_BACKENDS[name] = backend_class


def get_storage_backend(name: str) -> type[StorageBackend] | None:
    return _STORAGE_BACKENDS.get(name)


def list_storage_backends() -> list[str]:
    return sorted(_STORAGE_BACKENDS)
