"""Storage collection names shared by the ledger services."""

REGISTERS_COLLECTION = "cash_registers"
SESSIONS_COLLECTION = "cash_register_sessions"
MOVEMENTS_COLLECTION = "cash_movements"
CHECKS_COLLECTION = "checks_wallet"

# Counter that orders movements across the whole store
MOVEMENT_SEQUENCE = "cash_movements"
