"""
Type definitions for FerroCash.

This module contains the enums and data classes for cash registers,
till sessions, cash movements and the check wallet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TypeAlias

# Type alias for flexible amount input
AmountType: TypeAlias = Decimal | int | float | str


def _dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value else None


def _money(value: Any) -> Decimal | None:
    return Decimal(str(value)) if value is not None else None


class SessionStatus(str, Enum):
    """Lifecycle of a till session. Only open -> closed is allowed."""

    OPEN = "open"
    CLOSED = "closed"


class MovementType(str, Enum):
    """Kinds of cash movement recorded against a session."""

    INCOME = "income"
    EXPENSE = "expense"
    SALE = "sale"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"

    @classmethod
    def from_string(cls, value: str) -> MovementType:
        normalized = value.strip().lower().replace("-", "_")
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown movement type: {value}. Supported: {[m.value for m in cls]}")

    @property
    def is_inflow(self) -> bool:
        return self in (MovementType.INCOME, MovementType.SALE, MovementType.TRANSFER_IN)

    def apply(self, balance: Decimal, amount: Decimal) -> Decimal:
        """Return the balance after applying ``amount`` with this type's sign."""
        return balance + amount if self.is_inflow else balance - amount


class CheckType(str, Enum):
    """Physical paper check or electronic check (e-cheq)."""

    PHYSICAL = "physical"
    ECHEQ = "echeq"


class CheckStatus(str, Enum):
    """Check lifecycle. Anything other than PENDING is terminal."""

    PENDING = "pending"
    DEPOSITED = "deposited"
    ENDORSED = "endorsed"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self != CheckStatus.PENDING


class CheckOrigin(str, Enum):
    """Where a held check came from."""

    SALE = "sale"
    COLLECTION = "collection"
    PURCHASE = "purchase"


class AlertLevel(str, Enum):
    """Due-date proximity classification for pending checks."""

    NORMAL = "normal"
    WARNING = "warning"
    URGENT = "urgent"
    OVERDUE = "overdue"


@dataclass
class CashRegister:
    """
    A physical till.

    ``current_balance`` is a projection of the ledger: the running balance of the
    open session, or the counted closing balance of the last closed one.
    """

    id: str
    name: str
    description: str | None = None
    is_active: bool = True
    current_balance: Decimal = Decimal("0.00")
    last_closed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "is_active": self.is_active,
            "current_balance": str(self.current_balance),
            "last_closed_at": _iso(self.last_closed_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CashRegister:
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description"),
            is_active=bool(data.get("is_active", True)),
            current_balance=Decimal(str(data.get("current_balance", "0.00"))),
            last_closed_at=_dt(data.get("last_closed_at")),
            created_at=_dt(data.get("created_at")),
            updated_at=_dt(data.get("updated_at")),
        )


@dataclass
class CashRegisterSession:
    """One open-to-close cycle of a register."""

    id: str
    register_id: str
    opened_by: str
    opening_balance: Decimal
    status: SessionStatus = SessionStatus.OPEN
    opened_at: datetime | None = None
    closed_by: str | None = None
    closing_balance: Decimal | None = None
    expected_balance: Decimal | None = None
    difference: Decimal | None = None
    notes: str | None = None
    closed_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.status == SessionStatus.OPEN

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "register_id": self.register_id,
            "opened_by": self.opened_by,
            "opening_balance": str(self.opening_balance),
            "status": self.status.value,
            "opened_at": _iso(self.opened_at),
            "closed_by": self.closed_by,
            "closing_balance": str(self.closing_balance) if self.closing_balance is not None else None,
            "expected_balance": str(self.expected_balance) if self.expected_balance is not None else None,
            "difference": str(self.difference) if self.difference is not None else None,
            "notes": self.notes,
            "closed_at": _iso(self.closed_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CashRegisterSession:
        return cls(
            id=data["id"],
            register_id=data["register_id"],
            opened_by=data.get("opened_by", ""),
            opening_balance=Decimal(str(data.get("opening_balance", "0.00"))),
            status=SessionStatus(data.get("status", SessionStatus.OPEN.value)),
            opened_at=_dt(data.get("opened_at")),
            closed_by=data.get("closed_by"),
            closing_balance=_money(data.get("closing_balance")),
            expected_balance=_money(data.get("expected_balance")),
            difference=_money(data.get("difference")),
            notes=data.get("notes"),
            closed_at=_dt(data.get("closed_at")),
        )


@dataclass
class CashMovement:
    """
    A single immutable ledger entry.

    ``sequence`` is strictly increasing in creation order and is the sort key
    for replaying a session.
    """

    id: str
    session_id: str
    register_id: str
    sequence: int
    type: MovementType
    amount: Decimal
    running_balance: Decimal
    user_id: str
    category: str | None = None
    payment_method_id: str | None = None
    sale_id: str | None = None
    description: str | None = None
    reference: str | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "register_id": self.register_id,
            "sequence": self.sequence,
            "type": self.type.value,
            "amount": str(self.amount),
            "running_balance": str(self.running_balance),
            "user_id": self.user_id,
            "category": self.category,
            "payment_method_id": self.payment_method_id,
            "sale_id": self.sale_id,
            "description": self.description,
            "reference": self.reference,
            "created_at": _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CashMovement:
        return cls(
            id=data["id"],
            session_id=data["session_id"],
            register_id=data["register_id"],
            sequence=int(data.get("sequence", 0)),
            type=MovementType(data["type"]),
            amount=Decimal(str(data["amount"])),
            running_balance=Decimal(str(data["running_balance"])),
            user_id=data.get("user_id", ""),
            category=data.get("category"),
            payment_method_id=data.get("payment_method_id"),
            sale_id=data.get("sale_id"),
            description=data.get("description"),
            reference=data.get("reference"),
            created_at=_dt(data.get("created_at")),
        )


@dataclass
class Check:
    """A third-party check held in the wallet."""

    id: str
    check_type: CheckType
    check_number: str
    bank_name: str
    amount: Decimal
    issue_date: date
    due_date: date
    issuer_name: str
    status: CheckStatus = CheckStatus.PENDING
    bank_branch: str | None = None
    issuer_cuit: str | None = None
    payee_name: str | None = None
    deposit_account_id: str | None = None
    deposit_date: datetime | None = None
    endorsed_to: str | None = None
    endorsed_date: datetime | None = None
    rejection_reason: str | None = None
    rejection_date: datetime | None = None
    origin_type: CheckOrigin | None = None
    origin_id: str | None = None
    client_id: str | None = None
    notes: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "check_type": self.check_type.value,
            "check_number": self.check_number,
            "bank_name": self.bank_name,
            "bank_branch": self.bank_branch,
            "amount": str(self.amount),
            "issue_date": self.issue_date.isoformat(),
            "due_date": self.due_date.isoformat(),
            "issuer_name": self.issuer_name,
            "issuer_cuit": self.issuer_cuit,
            "payee_name": self.payee_name,
            "status": self.status.value,
            "deposit_account_id": self.deposit_account_id,
            "deposit_date": _iso(self.deposit_date),
            "endorsed_to": self.endorsed_to,
            "endorsed_date": _iso(self.endorsed_date),
            "rejection_reason": self.rejection_reason,
            "rejection_date": _iso(self.rejection_date),
            "origin_type": self.origin_type.value if self.origin_type else None,
            "origin_id": self.origin_id,
            "client_id": self.client_id,
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Check:
        origin = data.get("origin_type")
        return cls(
            id=data["id"],
            check_type=CheckType(data["check_type"]),
            check_number=data["check_number"],
            bank_name=data["bank_name"],
            bank_branch=data.get("bank_branch"),
            amount=Decimal(str(data["amount"])),
            issue_date=date.fromisoformat(data["issue_date"]),
            due_date=date.fromisoformat(data["due_date"]),
            issuer_name=data["issuer_name"],
            issuer_cuit=data.get("issuer_cuit"),
            payee_name=data.get("payee_name"),
            status=CheckStatus(data.get("status", CheckStatus.PENDING.value)),
            deposit_account_id=data.get("deposit_account_id"),
            deposit_date=_dt(data.get("deposit_date")),
            endorsed_to=data.get("endorsed_to"),
            endorsed_date=_dt(data.get("endorsed_date")),
            rejection_reason=data.get("rejection_reason"),
            rejection_date=_dt(data.get("rejection_date")),
            origin_type=CheckOrigin(origin) if origin else None,
            origin_id=data.get("origin_id"),
            client_id=data.get("client_id"),
            notes=data.get("notes"),
            created_by=data.get("created_by"),
            created_at=_dt(data.get("created_at")),
            updated_at=_dt(data.get("updated_at")),
        )


@dataclass
class CheckWithAlert:
    """A pending check annotated with its due-date alert, computed on read."""

    check: Check
    days_until_due: int
    alert_level: AlertLevel

    @property
    def is_overdue(self) -> bool:
        return self.alert_level == AlertLevel.OVERDUE

    def to_dict(self) -> dict[str, Any]:
        data = self.check.to_dict()
        data.update(
            {
                "days_until_due": self.days_until_due,
                "is_overdue": self.is_overdue,
                "alert_level": self.alert_level.value,
            }
        )
        return data


@dataclass
class CashRegisterSummary:
    """Totals for the register's open session, recomputed on every read."""

    register_id: str
    current_balance: Decimal
    total_income: Decimal = Decimal("0.00")
    total_expense: Decimal = Decimal("0.00")
    movement_count: int = 0
    session_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "register_id": self.register_id,
            "session_id": self.session_id,
            "total_income": str(self.total_income),
            "total_expense": str(self.total_expense),
            "current_balance": str(self.current_balance),
            "movement_count": self.movement_count,
        }


@dataclass
class SessionDetails:
    """A session with its register and ordered movements."""

    session: CashRegisterSession
    register: CashRegister
    movements: list[CashMovement] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = self.session.to_dict()
        data["register"] = self.register.to_dict()
        data["movements"] = [m.to_dict() for m in self.movements]
        return data
