"""
Circuit breaker for outbound change deliveries.

State lives in the StorageBackend so every worker sharing a Redis store
backs off from a failing webhook together.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import TYPE_CHECKING, Any

from ferrocash.core.exceptions import FerroCashError
from ferrocash.core.logging import get_logger

if TYPE_CHECKING:
    from ferrocash.storage.base import StorageBackend

RESILIENCE_COLLECTION = "resilience"


class CircuitState(str, Enum):
    CLOSED = "closed"  # deliveries go through
    OPEN = "open"  # deliveries are skipped
    HALF_OPEN = "half_open"  # one trial delivery allowed


class CircuitOpenError(FerroCashError):
    """A delivery was attempted while the circuit is OPEN."""

    kind = "circuit_open"

    def __init__(self, service: str, retry_at: float) -> None:
        self.service = service
        self.retry_at = retry_at
        super().__init__(
            f"Circuit open for {service}",
            details={"service": service, "retry_at": retry_at},
        )


class CircuitBreaker:
    """
    Storage-backed circuit breaker.

    ``failure_threshold`` consecutive-ish failures (each success forgives
    one) open the circuit for ``recovery_timeout`` seconds. After that a
    single trial delivery runs in HALF_OPEN: success closes the circuit, failure
    opens it again.

    Usable as an async context manager around the protected call.
    """

    def __init__(
        self,
        service_name: str,
        storage: StorageBackend,
        failure_threshold: int = 5,
        recovery_timeout: float = 30,
    ) -> None:
        self.service = service_name
        self.threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._storage = storage
        self._logger = get_logger(f"circuit.{service_name}")
        self._state_key = f"circuit:{service_name}"
        self._failures = f"circuit:{service_name}:failures"

    async def _load(self) -> dict[str, Any]:
        return await self._storage.get(RESILIENCE_COLLECTION, self._state_key) or {}

    async def _store(self, state: CircuitState, retry_at: float = 0.0) -> None:
        await self._storage.save(
            RESILIENCE_COLLECTION,
            self._state_key,
            {"state": state.value, "retry_at": retry_at},
        )
        self._logger.info(f"Circuit {self.service} is now {state.value}")

    async def get_state(self) -> CircuitState:
        return CircuitState((await self._load()).get("state", CircuitState.CLOSED.value))

    async def is_available(self) -> bool:
        """True when CLOSED or HALF_OPEN. An expired OPEN circuit moves to HALF_OPEN."""
        data = await self._load()
        if data.get("state") != CircuitState.OPEN.value:
            return True
        if time.time() < float(data.get("retry_at", 0)):
            return False
        await self._store(CircuitState.HALF_OPEN)
        return True

    async def record_failure(self) -> None:
        if await self.get_state() == CircuitState.HALF_OPEN:
            self._logger.warning(f"Trial delivery to {self.service} failed")
            await self.trip()
            return

        failures = await self._storage.increment(self._failures)
        self._logger.warning(f"{self.service} failure {failures}/{self.threshold}")
        if failures >= self.threshold:
            await self.trip()

    async def record_success(self) -> None:
        state = await self.get_state()
        if state == CircuitState.HALF_OPEN:
            await self.close()
        elif state == CircuitState.CLOSED:
            if await self._storage.increment(self._failures, -1) <= 0:
                await self._storage.reset_counter(self._failures)

    async def trip(self) -> None:
        """Open the circuit for ``recovery_timeout`` seconds."""
        await self._store(CircuitState.OPEN, time.time() + self.recovery_timeout)
        await self._storage.reset_counter(self._failures)
        self._logger.error(f"Circuit tripped, skipping {self.service} for {self.recovery_timeout}s")

    async def close(self) -> None:
        await self._store(CircuitState.CLOSED)
        await self._storage.reset_counter(self._failures)

    async def __aenter__(self) -> CircuitBreaker:
        if not await self.is_available():
            raise CircuitOpenError(self.service, float((await self._load()).get("retry_at", 0)))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            await self.record_success()
        else:
            await self.record_failure()
        return False
