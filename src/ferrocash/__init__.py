"""
FerroCash - Cash register ledger and check wallet for hardware stores.

Usage:
    >>> from ferrocash import FerroCash
    >>>
    >>> async with FerroCash() as cash:
    ...     register = await cash.registers.create_register("Front counter")
    ...     session = await cash.open_session(register.id, "1000.00", "ana")
    ...     await cash.create_movement(session.id, register.id, "income", "500.00", user_id="ana")
    ...     await cash.create_movement(session.id, register.id, "expense", "200.00", user_id="ana")
    ...     closed = await cash.close_session(session.id, "1300.00", "ana")
    ...     closed.difference
    Decimal('0.00')
"""

from ferrocash.client import FerroCash
from ferrocash.core.config import Config
from ferrocash.core.events import ChangeEvent, EntityType
from ferrocash.core.exceptions import (
    AlreadyClosedError,
    ConfigurationError,
    ConflictError,
    FerroCashError,
    InvalidCheckTransitionError,
    LockUnavailableError,
    NotFoundError,
    SessionNotOpenError,
    ValidationError,
)
from ferrocash.core.types import (
    AlertLevel,
    CashMovement,
    CashRegister,
    CashRegisterSession,
    CashRegisterSummary,
    Check,
    CheckOrigin,
    CheckStatus,
    CheckType,
    CheckWithAlert,
    MovementType,
    SessionDetails,
    SessionStatus,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "FerroCash",
    "Config",
    # Events
    "ChangeEvent",
    "EntityType",
    # Exceptions
    "FerroCashError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "AlreadyClosedError",
    "InvalidCheckTransitionError",
    "SessionNotOpenError",
    "LockUnavailableError",
    # Types
    "AlertLevel",
    "CashMovement",
    "CashRegister",
    "CashRegisterSession",
    "CashRegisterSummary",
    "Check",
    "CheckOrigin",
    "CheckStatus",
    "CheckType",
    "CheckWithAlert",
    "MovementType",
    "SessionDetails",
    "SessionStatus",
]
