"""
Redis Storage Backend.

Production backend: several API workers sharing one Redis share the same
ledger, sequences and locks.
"""

from __future__ import annotations

import json
import os
import uuid
from typing import Any

import redis.asyncio as redis

from ferrocash.storage.base import KEY_FIELD, StorageBackend, matches, register_storage_backend

DEFAULT_REDIS_URL = "redis://localhost:6379/0"

# Delete the lock only while it still holds our token
_RELEASE_LOCK_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""

# Merge fields into the stored JSON document in one step
_MERGE_SCRIPT = """
local raw = redis.call("get", KEYS[1])
if not raw then
    return 0
end
local document = cjson.decode(raw)
for field, value in pairs(cjson.decode(ARGV[1])) do
    document[field] = value
end
redis.call("set", KEYS[1], cjson.encode(document))
return 1
"""


class RedisStorage(StorageBackend):
    """
    Redis storage backend.

    Layout under ``prefix``:
        {prefix}:doc:{collection}:{key}   JSON document
        {prefix}:index:{collection}       set of document keys
        {prefix}:counter:{name}           INCRBY counter
        {prefix}:lock:{key}               SET NX EX lock holding its token
    """

    def __init__(self, redis_url: str | None = None, prefix: str = "ferrocash") -> None:
        """
        Initialize Redis storage.

        Args:
            redis_url: Connection URL (default: FERROCASH_REDIS_URL or localhost)
            prefix: Namespace for every key this backend writes
        """
        self._redis_url = redis_url or os.environ.get("FERROCASH_REDIS_URL", DEFAULT_REDIS_URL)
        self._prefix = prefix
        self._client: redis.Redis | None = None

    @property
    def client(self) -> redis.Redis:
        """Connection pool, created on first use."""
        if self._client is None:
            self._client = redis.from_url(self._redis_url, decode_responses=True)
        return self._client

    def _doc(self, collection: str, key: str) -> str:
        return f"{self._prefix}:doc:{collection}:{key}"

    def _index(self, collection: str) -> str:
        return f"{self._prefix}:index:{collection}"

    def _counter(self, name: str) -> str:
        return f"{self._prefix}:counter:{name}"

    def _lock(self, key: str) -> str:
        return f"{self._prefix}:lock:{key}"

    async def save(self, collection: str, key: str, data: dict[str, Any]) -> None:
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.set(self._doc(collection, key), json.dumps(data))
            pipe.sadd(self._index(collection), key)
            await pipe.execute()

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        raw = await self.client.get(self._doc(collection, key))
        return json.loads(raw) if raw is not None else None

    async def update(self, collection: str, key: str, data: dict[str, Any]) -> bool:
        merged = await self.client.eval(_MERGE_SCRIPT, 1, self._doc(collection, key), json.dumps(data))
        return int(merged) > 0

    async def delete(self, collection: str, key: str) -> bool:
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.delete(self._doc(collection, key))
            pipe.srem(self._index(collection), key)
            deleted, _ = await pipe.execute()
        return deleted > 0

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        keys = sorted(await self.client.smembers(self._index(collection)))
        if not keys:
            return []

        raws = await self.client.mget([self._doc(collection, key) for key in keys])
        results = []
        for key, raw in zip(keys, raws):
            # Index entries can outlive a document deleted by another worker
            if raw is None:
                continue
            document = json.loads(raw)
            if not matches(document, filters):
                continue
            document[KEY_FIELD] = key
            results.append(document)
            if limit is not None and len(results) >= limit:
                break
        return results

    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        if filters:
            return len(await self.query(collection, filters))
        return int(await self.client.scard(self._index(collection)))

    async def increment(self, counter: str, delta: int = 1) -> int:
        return int(await self.client.incrby(self._counter(counter), delta))

    async def reset_counter(self, counter: str) -> None:
        await self.client.delete(self._counter(counter))

    async def acquire_lock(self, key: str, ttl: int = 30) -> str | None:
        token = uuid.uuid4().hex
        acquired = await self.client.set(self._lock(key), token, nx=True, ex=ttl)
        return token if acquired else None

    async def release_lock(self, key: str, token: str | None = None) -> bool:
        if token is None:
            return await self.client.delete(self._lock(key)) > 0
        released = await self.client.eval(_RELEASE_LOCK_SCRIPT, 1, self._lock(key), token)
        return int(released) > 0

    async def health_check(self) -> bool:
        try:
            return bool(await self.client.ping())
        except redis.RedisError:
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


register_storage_backend("redis", RedisStorage)
