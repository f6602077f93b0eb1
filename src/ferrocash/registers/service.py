"""
RegisterService - Cash register directory and balance projection.

``current_balance`` is written by exactly two paths: movement creation
(``apply_running_balance``) and session close (``apply_close``).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from ferrocash.core.constants import REGISTERS_COLLECTION, SESSIONS_COLLECTION
from ferrocash.core.events import EntityType
from ferrocash.core.exceptions import ConflictError, NotFoundError, ValidationError
from ferrocash.core.logging import get_logger
from ferrocash.core.types import CashRegister, SessionStatus
from ferrocash.ledger.lock import register_lock_key
from ferrocash.utils.money import ZERO, utcnow

if TYPE_CHECKING:
    from ferrocash.ledger.lock import LedgerLockService
    from ferrocash.notifications.notifier import ChangeNotifier
    from ferrocash.storage.base import StorageBackend

logger = get_logger("registers")


class RegisterService:
    """
    Service for managing cash registers.

    Registers are never deleted, only deactivated.
    """

    COLLECTION = REGISTERS_COLLECTION

    def __init__(
        self,
        storage: StorageBackend,
        locks: LedgerLockService,
        notifier: ChangeNotifier,
    ) -> None:
        self._storage = storage
        self._locks = locks
        self._notifier = notifier

    async def create_register(self, name: str, description: str | None = None) -> CashRegister:
        """
        Create a new active register with a zero balance.

        Raises:
            ValidationError: If name is blank
        """
        if not name or not name.strip():
            raise ValidationError("name is required", field="name")

        now = utcnow()
        register = CashRegister(
            id=str(uuid.uuid4()),
            name=name.strip(),
            description=description,
            is_active=True,
            current_balance=ZERO,
            created_at=now,
            updated_at=now,
        )
        await self._save(register)

        logger.info(f"Created register {register.id} ({register.name})")
        self._notifier.notify(EntityType.CASH_REGISTERS, register_id=register.id)
        return register

    async def get_register(self, register_id: str) -> CashRegister:
        """
        Get a register by ID.

        Raises:
            NotFoundError: If register does not exist
        """
        data = await self._storage.get(self.COLLECTION, register_id)
        if data is None:
            raise NotFoundError("Cash register", register_id)
        return CashRegister.from_dict(data)

    async def list_registers(self, active_only: bool = False) -> list[CashRegister]:
        """List registers ordered by name."""
        filters = {"is_active": True} if active_only else None
        rows = await self._storage.query(self.COLLECTION, filters=filters)
        registers = [CashRegister.from_dict(r) for r in rows]
        registers.sort(key=lambda r: (r.name.lower(), r.id))
        return registers

    async def update_register(
        self,
        register_id: str,
        name: str | None = None,
        description: str | None = None,
    ) -> CashRegister:
        """Rename or re-describe a register. Balances are not editable here."""
        changes: dict[str, str] = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("name cannot be blank", field="name")
            changes["name"] = name.strip()
        if description is not None:
            changes["description"] = description

        # Only the edited fields are written; balances stay with the ledger
        await self._patch(register_id, changes)
        self._notifier.notify(EntityType.CASH_REGISTERS, register_id=register_id)
        return await self.get_register(register_id)

    async def deactivate_register(self, register_id: str) -> CashRegister:
        """
        Soft-deactivate a register.

        Raises:
            NotFoundError: If register does not exist
            ConflictError: If the register has an open session
        """
        await self.get_register(register_id)

        async with self._locks.hold(register_lock_key(register_id)):
            open_count = await self._storage.count(
                SESSIONS_COLLECTION,
                {"register_id": register_id, "status": SessionStatus.OPEN.value},
            )
            if open_count:
                raise ConflictError(
                    f"Register {register_id} has an open session; close it first",
                    details={"register_id": register_id},
                )
            register = await self._set_active(register_id, False)

        logger.info(f"Deactivated register {register_id}")
        return register

    async def activate_register(self, register_id: str) -> CashRegister:
        """Re-enable a deactivated register."""
        await self.get_register(register_id)
        async with self._locks.hold(register_lock_key(register_id)):
            register = await self._set_active(register_id, True)
        logger.info(f"Activated register {register_id}")
        return register

    async def apply_running_balance(self, register_id: str, balance: Decimal) -> None:
        """Project the open session's latest running balance onto the register."""
        await self._patch(register_id, {"current_balance": str(balance)})

    async def apply_close(self, register_id: str, closing_balance: Decimal, closed_at: datetime) -> None:
        """Project a session close: the counted cash becomes the register balance."""
        await self._patch(
            register_id,
            {
                "current_balance": str(closing_balance),
                "last_closed_at": closed_at.isoformat(),
            },
        )

    async def _set_active(self, register_id: str, active: bool) -> CashRegister:
        await self._patch(register_id, {"is_active": active})
        self._notifier.notify(EntityType.CASH_REGISTERS, register_id=register_id)
        return await self.get_register(register_id)

    async def _patch(self, register_id: str, updates: dict) -> None:
        updates["updated_at"] = utcnow().isoformat()
        updated = await self._storage.update(self.COLLECTION, register_id, updates)
        if not updated:
            raise NotFoundError("Cash register", register_id)

    async def _save(self, register: CashRegister) -> None:
        await self._storage.save(self.COLLECTION, register.id, register.to_dict())
