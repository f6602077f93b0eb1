"""FerroCash - Main entry point wiring storage, locks and services."""

from __future__ import annotations

from datetime import date
from typing import Any

from ferrocash.checks.service import CheckWallet
from ferrocash.core.config import Config
from ferrocash.core.logging import configure_logging, get_logger
from ferrocash.core.types import (
    AmountType,
    CashMovement,
    CashRegister,
    CashRegisterSession,
    CashRegisterSummary,
    Check,
    CheckWithAlert,
    MovementType,
    SessionDetails,
)
from ferrocash.ledger.lock import LedgerLockService
from ferrocash.ledger.movements import MovementLedger
from ferrocash.notifications.notifier import ChangeNotifier
from ferrocash.notifications.sinks import NotificationSink, SubscriberHub, WebhookSink
from ferrocash.registers.service import RegisterService
from ferrocash.sessions.service import SessionManager
from ferrocash.storage import storage_from_config
from ferrocash.storage.base import StorageBackend


class FerroCash:
    """
    Main client for the cash register ledger and check wallet.

    Every service shares one storage backend and one lock service, so a
    single instance (or several processes on the same Redis) keeps the
    register and session invariants.

    Example:
        >>> async with FerroCash() as cash:
        ...     register = await cash.registers.create_register("Front counter")
        ...     session = await cash.open_session(register.id, "1000.00", "ana")
        ...     await cash.create_movement(session.id, register.id, "sale", "500.00", user_id="ana")
        ...     closed = await cash.close_session(session.id, "1500.00", "ana")
    """

    def __init__(
        self,
        config: Config | None = None,
        storage: StorageBackend | None = None,
        sinks: list[NotificationSink] | None = None,
    ) -> None:
        """
        Initialize FerroCash.

        Args:
            config: Configuration (default: loaded from FERROCASH_* env vars)
            storage: Storage backend (default: built from config)
            sinks: Extra notification sinks. A SubscriberHub is always added,
                and a WebhookSink when ``config.webhook_url`` is set.
        """
        self._config = config or Config.from_env()

        configure_logging(level=self._config.log_level, json_format=self._config.env == "production")
        self._logger = get_logger("client")

        self._storage = storage or storage_from_config(self._config)

        self._hub = SubscriberHub()
        self._notifier = ChangeNotifier([self._hub, *(sinks or [])])
        if self._config.webhook_url:
            self._notifier.add_sink(
                WebhookSink(
                    self._config.webhook_url,
                    self._storage,
                    timeout=self._config.webhook_timeout,
                )
            )

        self._locks = LedgerLockService(
            self._storage,
            ttl=self._config.lock_ttl,
            retry_count=self._config.lock_retry_count,
            retry_delay=self._config.lock_retry_delay,
        )
        self._registers = RegisterService(self._storage, self._locks, self._notifier)
        self._ledger = MovementLedger(self._storage, self._locks, self._registers, self._notifier)
        self._sessions = SessionManager(
            self._storage, self._locks, self._registers, self._ledger, self._notifier
        )
        self._checks = CheckWallet(self._storage, self._locks, self._notifier, self._config.tzinfo)

        self._logger.info(
            f"FerroCash ready (storage={self._config.storage_backend}, tz={self._config.timezone})"
        )

    @property
    def config(self) -> Config:
        return self._config

    @property
    def storage(self) -> StorageBackend:
        return self._storage

    @property
    def registers(self) -> RegisterService:
        """Register directory and balance projection."""
        return self._registers

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    @property
    def ledger(self) -> MovementLedger:
        """Movement ledger."""
        return self._ledger

    @property
    def checks(self) -> CheckWallet:
        return self._checks

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    @property
    def hub(self) -> SubscriberHub:
        """In-process subscribers (websocket clients)."""
        return self._hub

    async def __aenter__(self) -> FerroCash:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Flush pending notifications and release connections."""
        await self._notifier.close()
        await self._storage.close()

    # ------------------------------------------------------------------ #
    # Sessions
    # ------------------------------------------------------------------ #

    async def open_session(
        self, register_id: str, opening_balance: AmountType, actor_id: str
    ) -> CashRegisterSession:
        return await self._sessions.open_session(register_id, opening_balance, actor_id)

    async def close_session(
        self,
        session_id: str,
        closing_balance: AmountType,
        actor_id: str,
        notes: str | None = None,
    ) -> CashRegisterSession:
        return await self._sessions.close_session(session_id, closing_balance, actor_id, notes)

    async def get_current_session(self, register_id: str) -> CashRegisterSession | None:
        return await self._sessions.get_current_session(register_id)

    async def get_session_details(self, session_id: str) -> SessionDetails:
        return await self._sessions.get_session_details(session_id)

    # ------------------------------------------------------------------ #
    # Movements
    # ------------------------------------------------------------------ #

    async def create_movement(
        self,
        session_id: str,
        register_id: str,
        movement_type: MovementType | str,
        amount: AmountType,
        **fields: Any,
    ) -> CashMovement:
        return await self._ledger.create_movement(session_id, register_id, movement_type, amount, **fields)

    async def get_cash_register_summary(self, register_id: str) -> CashRegisterSummary:
        return await self._ledger.get_cash_register_summary(register_id)

    async def get_register(self, register_id: str) -> CashRegister:
        return await self._registers.get_register(register_id)

    # ------------------------------------------------------------------ #
    # Checks
    # ------------------------------------------------------------------ #

    async def create_check(self, **fields: Any) -> Check:
        return await self._checks.create_check(**fields)

    async def deposit_check(self, check_id: str, deposit_account_id: str) -> Check:
        return await self._checks.deposit_check(check_id, deposit_account_id)

    async def endorse_check(self, check_id: str, endorsed_to: str) -> Check:
        return await self._checks.endorse_check(check_id, endorsed_to)

    async def reject_check(self, check_id: str, reason: str) -> Check:
        return await self._checks.reject_check(check_id, reason)

    async def get_checks_with_alerts(self, today: date | None = None) -> list[CheckWithAlert]:
        return await self._checks.get_checks_with_alerts(today)
