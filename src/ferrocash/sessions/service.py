"""
Session manager.

Opens and closes till sessions. At most one session per register is open at
any time, and closing reconciles the counted cash against the ledger.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from ferrocash.core.constants import SESSIONS_COLLECTION
from ferrocash.core.events import EntityType
from ferrocash.core.exceptions import AlreadyClosedError, ConflictError, NotFoundError, ValidationError
from ferrocash.core.logging import get_logger
from ferrocash.core.types import (
    AmountType,
    CashRegisterSession,
    SessionDetails,
    SessionStatus,
)
from ferrocash.ledger.lock import register_lock_key, session_lock_key
from ferrocash.ledger.movements import expected_balance
from ferrocash.utils.money import non_negative_money, utcnow

if TYPE_CHECKING:
    from ferrocash.ledger.lock import LedgerLockService
    from ferrocash.ledger.movements import MovementLedger
    from ferrocash.notifications.notifier import ChangeNotifier
    from ferrocash.registers.service import RegisterService
    from ferrocash.storage.base import StorageBackend

logger = get_logger("sessions")


class SessionManager:
    """
    Manages the open/close lifecycle of register sessions.

    Opening is serialized on the register lock. Closing holds the register
    lock and then the session lock, the same order every writer uses.
    """

    COLLECTION = SESSIONS_COLLECTION

    def __init__(
        self,
        storage: StorageBackend,
        locks: LedgerLockService,
        registers: RegisterService,
        ledger: MovementLedger,
        notifier: ChangeNotifier,
    ) -> None:
        self._storage = storage
        self._locks = locks
        self._registers = registers
        self._ledger = ledger
        self._notifier = notifier

    async def open_session(
        self,
        register_id: str,
        opening_balance: AmountType,
        actor_id: str,
    ) -> CashRegisterSession:
        """
        Open a new session on a register.

        Args:
            register_id: Register to open
            opening_balance: Cash counted in the drawer (>= 0)
            actor_id: Operator opening the session

        Returns:
            The open session

        Raises:
            ValidationError: Bad balance, missing operator or inactive register
            NotFoundError: Register does not exist
            ConflictError: Register already has an open session
        """
        balance = non_negative_money(opening_balance, field="opening_balance")
        if not actor_id:
            raise ValidationError("opened_by is required", field="opened_by")

        async with self._locks.hold(register_lock_key(register_id)):
            register = await self._registers.get_register(register_id)
            if not register.is_active:
                raise ValidationError(f"Register {register_id} is inactive", field="register_id")

            current = await self._find_open(register_id)
            if current is not None:
                raise ConflictError(
                    f"Register {register_id} already has an open session",
                    details={"register_id": register_id, "session_id": current.id},
                )

            session = CashRegisterSession(
                id=str(uuid.uuid4()),
                register_id=register_id,
                opened_by=actor_id,
                opening_balance=balance,
                status=SessionStatus.OPEN,
                opened_at=utcnow(),
            )
            await self._storage.save(self.COLLECTION, session.id, session.to_dict())

        logger.info(f"Opened session {session.id} on register {register_id} with {balance}")
        self._notifier.notify(EntityType.CASH_REGISTERS, register_id=register_id, session_id=session.id)
        return session

    async def close_session(
        self,
        session_id: str,
        closing_balance: AmountType,
        actor_id: str,
        notes: str | None = None,
    ) -> CashRegisterSession:
        """
        Close a session and reconcile it.

        The expected balance is replayed from the opening balance and every
        movement. ``difference = closing_balance - expected_balance``; a
        negative value means cash is missing. The counted cash, not the
        expected balance, becomes the register's balance.

        Raises:
            ValidationError: Bad balance or missing operator
            NotFoundError: Session does not exist
            AlreadyClosedError: Session was already closed
        """
        counted = non_negative_money(closing_balance, field="closing_balance")
        if not actor_id:
            raise ValidationError("closed_by is required", field="closed_by")

        session = await self.get_session(session_id)
        if not session.is_open:
            raise AlreadyClosedError(session_id)

        async with self._locks.hold(register_lock_key(session.register_id), session_lock_key(session_id)):
            session = await self.get_session(session_id)
            if not session.is_open:
                raise AlreadyClosedError(session_id)

            movements = await self._ledger.list_movements(session_id)
            expected = expected_balance(session.opening_balance, movements)

            session.status = SessionStatus.CLOSED
            session.closed_by = actor_id
            session.closing_balance = counted
            session.expected_balance = expected
            session.difference = counted - expected
            session.notes = notes
            session.closed_at = utcnow()

            await self._storage.save(self.COLLECTION, session.id, session.to_dict())
            await self._registers.apply_close(session.register_id, counted, session.closed_at)

        if session.difference:
            logger.warning(
                f"Session {session_id} closed with difference {session.difference} "
                f"(expected {expected}, counted {counted})"
            )
        else:
            logger.info(f"Session {session_id} closed balanced at {counted}")

        self._notifier.notify(EntityType.CASH_REGISTERS, register_id=session.register_id, session_id=session_id)
        return session

    async def get_session(self, session_id: str) -> CashRegisterSession:
        """
        Get a session by ID.

        Raises:
            NotFoundError: If session does not exist
        """
        data = await self._storage.get(self.COLLECTION, session_id)
        if data is None:
            raise NotFoundError("Cash session", session_id)
        return CashRegisterSession.from_dict(data)

    async def get_current_session(self, register_id: str) -> CashRegisterSession | None:
        """The register's open session, or None."""
        await self._registers.get_register(register_id)
        return await self._find_open(register_id)

    async def get_session_details(self, session_id: str) -> SessionDetails:
        """Session plus its register and movements in creation order."""
        session = await self.get_session(session_id)
        register = await self._registers.get_register(session.register_id)
        movements = await self._ledger.list_movements(session_id)
        return SessionDetails(session=session, register=register, movements=movements)

    async def list_sessions(
        self,
        register_id: str,
        status: SessionStatus | str | None = None,
        limit: int = 50,
    ) -> list[CashRegisterSession]:
        """Sessions of a register, most recently opened first."""
        filters: dict[str, str] = {"register_id": register_id}
        if status is not None:
            try:
                filters["status"] = SessionStatus(status).value
            except ValueError as e:
                raise ValidationError(f"Unknown session status: {status}", field="status") from e

        rows = await self._storage.query(self.COLLECTION, filters=filters)
        sessions = [CashRegisterSession.from_dict(r) for r in rows]
        sessions.sort(key=lambda s: s.opened_at.isoformat() if s.opened_at else "", reverse=True)
        return sessions[:limit]

    async def _find_open(self, register_id: str) -> CashRegisterSession | None:
        rows = await self._storage.query(
            self.COLLECTION,
            filters={"register_id": register_id, "status": SessionStatus.OPEN.value},
        )
        if len(rows) > 1:
            logger.error(f"Register {register_id} has {len(rows)} open sessions")
        return CashRegisterSession.from_dict(rows[0]) if rows else None
