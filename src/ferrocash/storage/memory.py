"""
In-Memory Storage Backend.

Default backend for development and tests. Everything lives in process
memory and is lost when the process exits.
"""

from __future__ import annotations

import time
import uuid
from collections import defaultdict
from copy import deepcopy
from typing import Any

from ferrocash.storage.base import KEY_FIELD, StorageBackend, matches, register_storage_backend


class InMemoryStorage(StorageBackend):
    """
    Dict-backed storage.

    No method awaits while mutating, so each call is atomic with respect to
    other tasks on the same event loop. Locks expire on ``time.monotonic``.
    """

    def __init__(self) -> None:
        self._collections: defaultdict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._counters: dict[str, int] = {}
        self._locks: dict[str, tuple[str, float]] = {}

    async def save(self, collection: str, key: str, data: dict[str, Any]) -> None:
        self._collections[collection][key] = deepcopy(data)

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        document = self._collections[collection].get(key)
        return deepcopy(document) if document is not None else None

    async def update(self, collection: str, key: str, data: dict[str, Any]) -> bool:
        document = self._collections[collection].get(key)
        if document is None:
            return False
        document.update(deepcopy(data))
        return True

    async def delete(self, collection: str, key: str) -> bool:
        return self._collections[collection].pop(key, None) is not None

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        results = []
        for key, document in self._collections[collection].items():
            if not matches(document, filters):
                continue
            results.append({**deepcopy(document), KEY_FIELD: key})
            if limit is not None and len(results) >= limit:
                break
        return results

    async def increment(self, counter: str, delta: int = 1) -> int:
        value = self._counters.get(counter, 0) + delta
        self._counters[counter] = value
        return value

    async def reset_counter(self, counter: str) -> None:
        self._counters.pop(counter, None)

    async def acquire_lock(self, key: str, ttl: int = 30) -> str | None:
        """Take the lock unless a live holder exists. Expired holders are replaced."""
        now = time.monotonic()
        holder = self._locks.get(key)
        if holder is not None and holder[1] > now:
            return None

        token = uuid.uuid4().hex
        self._locks[key] = (token, now + ttl)
        return token

    async def release_lock(self, key: str, token: str | None = None) -> bool:
        holder = self._locks.get(key)
        if holder is None or (token is not None and holder[0] != token):
            return False
        del self._locks[key]
        return True


register_storage_backend("memory", InMemoryStorage)
