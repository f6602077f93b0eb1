"""
Movement ledger for cash register sessions.

Append-only log of cash movements. Each entry snapshots the running balance
after applying it, so a session can always be replayed from its opening balance.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from decimal import Decimal
from typing import TYPE_CHECKING

from ferrocash.core.constants import MOVEMENT_SEQUENCE, MOVEMENTS_COLLECTION, SESSIONS_COLLECTION
from ferrocash.core.events import EntityType
from ferrocash.core.exceptions import SessionNotOpenError, ValidationError
from ferrocash.core.logging import get_logger
from ferrocash.core.types import (
    AmountType,
    CashMovement,
    CashRegisterSession,
    CashRegisterSummary,
    MovementType,
    SessionStatus,
)
from ferrocash.ledger.lock import session_lock_key
from ferrocash.utils.money import positive_money, utcnow

if TYPE_CHECKING:
    from ferrocash.ledger.lock import LedgerLockService
    from ferrocash.notifications.notifier import ChangeNotifier
    from ferrocash.registers.service import RegisterService
    from ferrocash.storage.base import StorageBackend

logger = get_logger("ledger")


def replay(opening_balance: Decimal, movements: Iterable[CashMovement]) -> list[Decimal]:
    """
    Recompute the running balance after each movement.

    Args:
        opening_balance: The session's opening cash count
        movements: Movements in creation order

    Returns:
        One running balance per movement
    """
    balance = opening_balance
    balances = []
    for movement in movements:
        balance = movement.type.apply(balance, movement.amount)
        balances.append(balance)
    return balances


def expected_balance(opening_balance: Decimal, movements: Iterable[CashMovement]) -> Decimal:
    """Final balance of a replay; the opening balance if there are no movements."""
    balances = replay(opening_balance, movements)
    return balances[-1] if balances else opening_balance


class MovementLedger:
    """
    Records cash movements against open sessions.

    Appends to a session are serialized through the session lock, so two
    concurrent movements can never compute from the same predecessor balance.
    """

    COLLECTION = MOVEMENTS_COLLECTION

    def __init__(
        self,
        storage: StorageBackend,
        locks: LedgerLockService,
        registers: RegisterService,
        notifier: ChangeNotifier,
    ) -> None:
        """
        Initialize ledger with storage backend.

        Args:
            storage: The unified storage backend (InMemory, Redis, etc.)
            locks: Lock service used to serialize appends per session
            registers: Register projection updated on every append
            notifier: Change notifier
        """
        self._storage = storage
        self._locks = locks
        self._registers = registers
        self._notifier = notifier

    async def create_movement(
        self,
        session_id: str,
        register_id: str,
        movement_type: MovementType | str,
        amount: AmountType,
        *,
        user_id: str,
        category: str | None = None,
        payment_method_id: str | None = None,
        sale_id: str | None = None,
        description: str | None = None,
        reference: str | None = None,
    ) -> CashMovement:
        """
        Append a movement to an open session.

        Args:
            session_id: Target session
            register_id: The session's register (must match)
            movement_type: income, expense, sale, transfer_in or transfer_out
            amount: Positive decimal amount
            user_id: Operator recording the movement
            category: Optional bookkeeping category
            payment_method_id: Optional payment method reference
            sale_id: Optional originating sale
            description: Free text
            reference: Receipt or invoice number

        Returns:
            The stored movement with its running balance

        Raises:
            ValidationError: Unknown type, non-positive amount, missing user or
                register mismatch
            SessionNotOpenError: Session missing or already closed
        """
        kind = self._parse_type(movement_type)
        value = positive_money(amount)
        if not user_id:
            raise ValidationError("user_id is required", field="user_id")

        # Fail fast without taking the lock
        await self._get_open_session(session_id, register_id)

        async with self._locks.hold(session_lock_key(session_id)):
            session = await self._get_open_session(session_id, register_id)

            last = await self._last_movement(session_id)
            previous = last.running_balance if last else session.opening_balance

            movement = CashMovement(
                id=str(uuid.uuid4()),
                session_id=session_id,
                register_id=session.register_id,
                sequence=await self._storage.next_sequence(MOVEMENT_SEQUENCE),
                type=kind,
                amount=value,
                running_balance=kind.apply(previous, value),
                user_id=user_id,
                category=category,
                payment_method_id=payment_method_id,
                sale_id=sale_id,
                description=description,
                reference=reference,
                created_at=utcnow(),
            )
            await self._storage.save(self.COLLECTION, movement.id, movement.to_dict())
            await self._registers.apply_running_balance(session.register_id, movement.running_balance)

        logger.info(
            f"Movement {movement.type.value} {movement.amount} on session {session_id} "
            f"-> running balance {movement.running_balance}"
        )
        self._notifier.notify(
            EntityType.CASH_REGISTERS,
            register_id=movement.register_id,
            session_id=session_id,
            movement_id=movement.id,
        )
        return movement

    async def list_movements(self, session_id: str) -> list[CashMovement]:
        """All movements of a session in creation order."""
        rows = await self._storage.query(self.COLLECTION, filters={"session_id": session_id})
        movements = [CashMovement.from_dict(r) for r in rows]
        movements.sort(key=lambda m: m.sequence)
        return movements

    async def get_cash_register_summary(self, register_id: str) -> CashRegisterSummary:
        """
        Totals of the register's open session, recomputed on every call.

        With no open session the totals are zero and the balance is the
        register's last closing count.

        Raises:
            NotFoundError: If register does not exist
        """
        register = await self._registers.get_register(register_id)
        summary = CashRegisterSummary(register_id=register.id, current_balance=register.current_balance)

        rows = await self._storage.query(
            SESSIONS_COLLECTION,
            filters={"register_id": register_id, "status": SessionStatus.OPEN.value},
            limit=1,
        )
        if not rows:
            return summary

        summary.session_id = rows[0]["id"]
        movements = await self.list_movements(summary.session_id)
        for movement in movements:
            if movement.type.is_inflow:
                summary.total_income += movement.amount
            else:
                summary.total_expense += movement.amount
        summary.movement_count = len(movements)
        return summary

    async def verify_session(self, session: CashRegisterSession) -> bool:
        """Check that every stored running balance matches a fresh replay."""
        movements = await self.list_movements(session.id)
        recomputed = replay(session.opening_balance, movements)
        mismatches = [
            m.id for m, balance in zip(movements, recomputed) if m.running_balance != balance
        ]
        if mismatches:
            logger.error(f"Running balance drift in session {session.id}: {mismatches}")
        return not mismatches

    async def _last_movement(self, session_id: str) -> CashMovement | None:
        movements = await self.list_movements(session_id)
        return movements[-1] if movements else None

    async def _get_open_session(self, session_id: str, register_id: str) -> CashRegisterSession:
        data = await self._storage.get(SESSIONS_COLLECTION, session_id)
        if data is None:
            raise SessionNotOpenError(session_id)

        session = CashRegisterSession.from_dict(data)
        if not session.is_open:
            raise SessionNotOpenError(session_id, status=session.status.value)
        if register_id and register_id != session.register_id:
            raise ValidationError(
                f"Session {session_id} belongs to register {session.register_id}, not {register_id}",
                field="register_id",
            )
        return session

    @staticmethod
    def _parse_type(movement_type: MovementType | str) -> MovementType:
        if isinstance(movement_type, MovementType):
            return movement_type
        if not movement_type:
            raise ValidationError("type is required", field="type")
        try:
            return MovementType.from_string(movement_type)
        except ValueError as e:
            raise ValidationError(str(e), field="type") from e


__all__ = ["MovementLedger", "replay", "expected_balance"]
