"""
Storage backends for FerroCash.

Configuration via environment:
    FERROCASH_STORAGE_BACKEND=memory  # or 'redis'
    FERROCASH_REDIS_URL=redis://localhost:6379/0

Example:
    >>> from ferrocash.storage import get_storage
    >>> storage = get_storage("redis", redis_url="redis://cache:6379/0")
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from ferrocash.core.exceptions import ConfigurationError
from ferrocash.core.logging import get_logger
from ferrocash.storage.base import (
    StorageBackend,
    get_storage_backend,
    list_storage_backends,
    register_storage_backend,
)
from ferrocash.storage.memory import InMemoryStorage
from ferrocash.storage.redis import RedisStorage

if TYPE_CHECKING:
    from ferrocash.core.config import Config

logger = get_logger("storage")


def get_storage(backend_name: str | None = None, **kwargs: Any) -> StorageBackend:
    """
    Build a storage backend by registered name.

    Args:
        backend_name: Backend name, or None to read FERROCASH_STORAGE_BACKEND
        **kwargs: Passed to the backend constructor (e.g. redis_url)

    Raises:
        ConfigurationError: If no backend is registered under that name
    """
    name = backend_name or os.environ.get("FERROCASH_STORAGE_BACKEND", "memory")
    backend_class = get_storage_backend(name)
    if backend_class is None:
        raise ConfigurationError(
            f"Unknown storage backend: '{name}'. Available: {', '.join(list_storage_backends())}"
        )
    return backend_class(**kwargs)


def storage_from_config(config: Config) -> StorageBackend:
    """Backend selected by ``config.storage_backend``."""
    if config.storage_backend == "redis":
        logger.info(f"Using Redis storage at {config.masked_redis_url() or 'FERROCASH_REDIS_URL'}")
        return get_storage("redis", redis_url=config.redis_url)
    return get_storage(config.storage_backend)


__all__ = [
    "StorageBackend",
    "InMemoryStorage",
    "RedisStorage",
    "get_storage",
    "get_storage_backend",
    "list_storage_backends",
    "register_storage_backend",
    "storage_from_config",
]
