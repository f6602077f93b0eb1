"""
CheckWallet - storage and lifecycle of held third-party checks.

Alerts are never persisted; they are derived from the due date each time
``get_checks_with_alerts`` runs.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, tzinfo
from typing import TYPE_CHECKING, Any

from ferrocash.checks.alerts import annotate
from ferrocash.core.constants import CHECKS_COLLECTION
from ferrocash.core.events import EntityType
from ferrocash.core.exceptions import InvalidCheckTransitionError, NotFoundError, ValidationError
from ferrocash.core.logging import get_logger
from ferrocash.core.types import (
    AmountType,
    Check,
    CheckOrigin,
    CheckStatus,
    CheckType,
    CheckWithAlert,
)
from ferrocash.utils.money import positive_money, to_date, utcnow

if TYPE_CHECKING:
    from ferrocash.ledger.lock import LedgerLockService
    from ferrocash.notifications.notifier import ChangeNotifier
    from ferrocash.storage.base import StorageBackend

logger = get_logger("checks")


def check_lock_key(check_id: str) -> str:
    return f"lock:check:{check_id}"


def _required(value: str | None, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    return str(value).strip()


def _enum(enum_cls: type, value: Any, field: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as e:
        supported = [m.value for m in enum_cls]
        raise ValidationError(f"Unknown {field}: {value}. Supported: {supported}", field=field) from e


class CheckWallet:
    """
    Service for the check wallet.

    Only pending checks may be deposited, endorsed or rejected; every other
    status is terminal.
    """

    COLLECTION = CHECKS_COLLECTION

    def __init__(
        self,
        storage: StorageBackend,
        locks: LedgerLockService,
        notifier: ChangeNotifier,
        tz: tzinfo,
    ) -> None:
        """
        Initialize the wallet.

        Args:
            storage: Storage backend
            locks: Lock service used to serialize status transitions
            notifier: Change notifier
            tz: Time zone that defines "today" for alerts
        """
        self._storage = storage
        self._locks = locks
        self._notifier = notifier
        self._tz = tz

    def today(self) -> date:
        return datetime.now(self._tz).date()

    async def create_check(
        self,
        *,
        check_type: CheckType | str,
        check_number: str,
        bank_name: str,
        amount: AmountType,
        issue_date: date | str,
        due_date: date | str,
        issuer_name: str,
        bank_branch: str | None = None,
        issuer_cuit: str | None = None,
        payee_name: str | None = None,
        origin_type: CheckOrigin | str | None = None,
        origin_id: str | None = None,
        client_id: str | None = None,
        notes: str | None = None,
        created_by: str | None = None,
    ) -> Check:
        """
        Store a new pending check. Duplicate check numbers are accepted.

        Raises:
            ValidationError: Missing field, non-positive amount, unknown type
                or a due date before the issue date
        """
        kind = _enum(CheckType, _required(check_type, "check_type"), "check_type")
        issued = to_date(issue_date, field="issue_date")
        due = to_date(due_date, field="due_date")
        if due < issued:
            raise ValidationError(
                f"due_date {due} is before issue_date {issued}",
                field="due_date",
            )

        now = utcnow()
        check = Check(
            id=str(uuid.uuid4()),
            check_type=kind,
            check_number=_required(check_number, "check_number"),
            bank_name=_required(bank_name, "bank_name"),
            amount=positive_money(amount),
            issue_date=issued,
            due_date=due,
            issuer_name=_required(issuer_name, "issuer_name"),
            status=CheckStatus.PENDING,
            bank_branch=bank_branch,
            issuer_cuit=issuer_cuit,
            payee_name=payee_name,
            origin_type=_enum(CheckOrigin, origin_type, "origin_type") if origin_type else None,
            origin_id=origin_id,
            client_id=client_id,
            notes=notes,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        await self._storage.save(self.COLLECTION, check.id, check.to_dict())

        logger.info(f"Stored {check.check_type.value} check {check.check_number} for {check.amount}")
        self._notifier.notify(EntityType.CHECKS, check_id=check.id)
        return check

    async def get_check(self, check_id: str) -> Check:
        """
        Get a check by ID.

        Raises:
            NotFoundError: If check does not exist
        """
        data = await self._storage.get(self.COLLECTION, check_id)
        if data is None:
            raise NotFoundError("Check", check_id)
        return Check.from_dict(data)

    async def list_checks(self, status: CheckStatus | str | None = None) -> list[Check]:
        """List checks ordered by due date, optionally filtered by status."""
        filters = None
        if status is not None:
            filters = {"status": _enum(CheckStatus, status, "status").value}
        rows = await self._storage.query(self.COLLECTION, filters=filters)
        checks = [Check.from_dict(r) for r in rows]
        checks.sort(key=lambda c: (c.due_date, c.check_number))
        return checks

    async def deposit_check(self, check_id: str, deposit_account_id: str) -> Check:
        """Mark a pending check as deposited into ``deposit_account_id``."""
        account = _required(deposit_account_id, "deposit_account_id")
        return await self._transition(
            check_id,
            CheckStatus.DEPOSITED,
            "deposit_date",
            deposit_account_id=account,
        )

    async def endorse_check(self, check_id: str, endorsed_to: str) -> Check:
        """Mark a pending check as endorsed to a third party."""
        payee = _required(endorsed_to, "endorsed_to")
        return await self._transition(
            check_id,
            CheckStatus.ENDORSED,
            "endorsed_date",
            endorsed_to=payee,
        )

    async def reject_check(self, check_id: str, reason: str) -> Check:
        """Mark a pending check as rejected by the bank."""
        text = _required(reason, "rejection_reason")
        return await self._transition(
            check_id,
            CheckStatus.REJECTED,
            "rejection_date",
            rejection_reason=text,
        )

    async def get_checks_with_alerts(self, today: date | None = None) -> list[CheckWithAlert]:
        """
        Pending checks with their due-date alert, soonest due first.

        Args:
            today: Reference date; defaults to the current date in the
                configured time zone

        Returns:
            Annotated checks ordered by ascending due date
        """
        reference = today or self.today()
        pending = await self.list_checks(CheckStatus.PENDING)
        return [annotate(check, reference) for check in pending]

    async def _transition(
        self,
        check_id: str,
        target: CheckStatus,
        stamp_field: str,
        **fields: Any,
    ) -> Check:
        async with self._locks.hold(check_lock_key(check_id)):
            check = await self.get_check(check_id)
            if check.status != CheckStatus.PENDING:
                raise InvalidCheckTransitionError(check_id, check.status.value, target.value)

            now = utcnow()
            for name, value in fields.items():
                setattr(check, name, value)
            setattr(check, stamp_field, now)
            check.status = target
            check.updated_at = now
            await self._storage.save(self.COLLECTION, check.id, check.to_dict())

        logger.info(f"Check {check_id} {target.value}")
        self._notifier.notify(EntityType.CHECKS, check_id=check_id)
        return check
