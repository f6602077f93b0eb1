"""
Configuration management for FerroCash.

Handles loading configuration from environment variables and validation.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ferrocash.core.exceptions import ConfigurationError


def _get_env_var(name: str, default: str | None = None, required: bool = False) -> str | None:
    """Get environment variable with optional default."""
    value = os.environ.get(name, default)
    if required and not value:
        raise ConfigurationError(f"Required environment variable {name} is not set")
    return value


def _get_env_number(name: str, default: float, cast: type = float) -> Any:
    """Get a numeric environment variable."""
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Config:
    """Ledger configuration."""

    storage_backend: str = "memory"
    redis_url: str | None = None
    log_level: str = "INFO"
    env: str = "development"

    # Calendar used for "today" in check alerts
    timezone: str = "America/Argentina/Buenos_Aires"

    # Register/session locks
    lock_ttl: int = 30  # seconds a crashed holder keeps the lock
    lock_retry_count: int = 50
    lock_retry_delay: float = 0.05

    # Outbound change notifications (None disables the webhook sink)
    webhook_url: str | None = None
    webhook_timeout: float = 5.0

    def __post_init__(self) -> None:
        if not self.storage_backend:
            raise ConfigurationError("storage_backend is required")
        if self.lock_ttl <= 0:
            raise ConfigurationError("lock_ttl must be positive")
        if self.lock_retry_count < 0:
            raise ConfigurationError("lock_retry_count cannot be negative")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ConfigurationError(f"Unknown timezone: {self.timezone}") from None

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls, **overrides: Any) -> Config:
        """Load configuration from environment variables."""
        values: dict[str, Any] = {
            "storage_backend": _get_env_var("FERROCASH_STORAGE_BACKEND", default="memory"),
            "redis_url": _get_env_var("FERROCASH_REDIS_URL"),
            "log_level": _get_env_var("FERROCASH_LOG_LEVEL", default="INFO"),
            "env": _get_env_var("FERROCASH_ENV", default="development"),
            "timezone": _get_env_var("FERROCASH_TIMEZONE", default=cls.timezone),
            "lock_ttl": _get_env_number("FERROCASH_LOCK_TTL", cls.lock_ttl, int),
            "lock_retry_count": _get_env_number(
                "FERROCASH_LOCK_RETRIES", cls.lock_retry_count, int
            ),
            "lock_retry_delay": _get_env_number(
                "FERROCASH_LOCK_RETRY_DELAY", cls.lock_retry_delay
            ),
            "webhook_url": _get_env_var("FERROCASH_WEBHOOK_URL") or None,
            "webhook_timeout": _get_env_number("FERROCASH_WEBHOOK_TIMEOUT", cls.webhook_timeout),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_updates(self, **updates: Any) -> Config:
        """Create a new Config with updated values."""
        current = asdict(self)
        current.update(updates)
        return Config(**current)

    def masked_redis_url(self) -> str | None:
        """Return the Redis URL with any password masked for safe logging."""
        if not self.redis_url or "@" not in self.redis_url:
            return self.redis_url
        scheme, _, rest = self.redis_url.partition("://")
        _, _, host = rest.rpartition("@")
        return f"{scheme}://****@{host}"
