"""Cash movement ledger and the locks that serialize it."""

from ferrocash.ledger.lock import LedgerLockService, register_lock_key, session_lock_key
from ferrocash.ledger.movements import MovementLedger, expected_balance, replay

__all__ = [
    "LedgerLockService",
    "MovementLedger",
    "expected_balance",
    "register_lock_key",
    "replay",
    "session_lock_key",
]
