"""
Ledger Lock Service.

Serializes writers per register and per session so that "read last balance,
compute, append" and "check no open session, insert" are atomic.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from ferrocash.core.exceptions import LockUnavailableError

if TYPE_CHECKING:
    from ferrocash.storage.base import StorageBackend

logger = logging.getLogger(__name__)


def register_lock_key(register_id: str) -> str:
    return f"lock:register:{register_id}"


def session_lock_key(session_id: str) -> str:
    return f"lock:session:{session_id}"


class LedgerLockService:
    """
    Service for managing register/session locks (mutexes).

    Implements a distributed lock pattern using the storage backend. When several
    locks are needed they must be requested register first, then session.
    """

    def __init__(
        self,
        storage: StorageBackend,
        ttl: int = 30,
        retry_count: int = 50,
        retry_delay: float = 0.05,
    ) -> None:
        """
        Initialize lock service.

        Args:
            storage: Storage backend (Redis/Memory)
            ttl: Lock time-to-live in seconds
            retry_count: Number of retries if lock is held
            retry_delay: Delay between retries in seconds
        """
        self._storage = storage
        self._ttl = ttl
        self._retry_count = retry_count
        self._retry_delay = retry_delay

    async def acquire(
        self,
        key: str,
        ttl: int | None = None,
        retry_count: int | None = None,
        retry_delay: float | None = None,
    ) -> str | None:
        """
        Acquire a lock.

        Args:
            key: Lock key (see register_lock_key / session_lock_key)
            ttl: Override lock time-to-live
            retry_count: Override number of retries
            retry_delay: Override delay between retries

        Returns:
            lock_token (str) if successful, None if failed
        """
        ttl = self._ttl if ttl is None else ttl
        retry_count = self._retry_count if retry_count is None else retry_count
        retry_delay = self._retry_delay if retry_delay is None else retry_delay

        for i in range(retry_count + 1):
            token = await self._storage.acquire_lock(key, ttl)
            if token:
                logger.debug(f"Acquired {key} (token: {token[:8]}...)")
                return token

            if i < retry_count:
                await asyncio.sleep(retry_delay)

        logger.warning(f"Failed to acquire {key} after {retry_count} retries")
        return None

    async def release(self, key: str, lock_token: str) -> bool:
        """
        Release a previously acquired lock.

        Args:
            key: The lock key
            lock_token: The ownership token returned by acquire()

        Returns:
            True if released, False if not found or token mismatch
        """
        result = await self._storage.release_lock(key, lock_token)
        if result:
            logger.debug(f"Released {key}")
        else:
            logger.warning(f"Lock {key} was not held by token {lock_token[:8]}... (expired?)")
        return result

    @asynccontextmanager
    async def hold(self, *keys: str) -> AsyncIterator[None]:
        """
        Hold several locks for the duration of the block.

        Locks are taken in the order given and released in reverse.

        Raises:
            LockUnavailableError: If any lock cannot be acquired; locks already
                taken are released first.
        """
        held: list[tuple[str, str]] = []
        try:
            for key in keys:
                token = await self.acquire(key)
                if token is None:
                    raise LockUnavailableError(key, self._retry_count + 1)
                held.append((key, token))
            yield
        finally:
            for key, token in reversed(held):
                await self.release(key, token)
