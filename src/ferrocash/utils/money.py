"""Decimal money and timestamp helpers for FerroCash."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ferrocash.core.exceptions import ValidationError
from ferrocash.core.types import AmountType

# Matches a numeric(14, 2) column: 12 integer digits and cents
CENT = Decimal("0.01")
ZERO = Decimal("0.00")
MAX_INTEGER_DIGITS = 12
MONEY_LIMIT = Decimal(10) ** MAX_INTEGER_DIGITS


def to_money(value: AmountType | None, field: str = "amount") -> Decimal:
    """
    Parse a monetary value into a Decimal quantized to cents.

    Floats are converted through their string form so ``0.1`` stays ``0.10``.

    Raises:
        ValidationError: If the value is missing, non-numeric, not finite or
            wider than 12 integer digits
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required", field=field)

    if isinstance(value, Decimal):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            raise ValidationError(f"{field} is required", field=field)
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            raise ValidationError(f"{field} is not a decimal number: {value!r}", field=field) from None

    if not parsed.is_finite():
        raise ValidationError(f"{field} must be finite: {value!r}", field=field)

    if parsed.copy_abs() >= MONEY_LIMIT:
        raise ValidationError(
            f"{field} exceeds {MAX_INTEGER_DIGITS} integer digits: {value!r}", field=field
        )
    try:
        amount = parsed.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"{field} is out of range: {value!r}", field=field) from None
    # 999999999999.995 rounds up past the column width
    if amount.copy_abs() >= MONEY_LIMIT:
        raise ValidationError(
            f"{field} exceeds {MAX_INTEGER_DIGITS} integer digits: {value!r}", field=field
        )
    return amount


def non_negative_money(value: AmountType | None, field: str = "amount") -> Decimal:
    """Parse money and reject values below zero."""
    amount = to_money(value, field)
    if amount < ZERO:
        raise ValidationError(f"{field} cannot be negative: {amount}", field=field)
    return amount


def positive_money(value: AmountType | None, field: str = "amount") -> Decimal:
    """Parse money and reject zero or negative values."""
    amount = to_money(value, field)
    if amount <= ZERO:
        raise ValidationError(f"{field} must be greater than zero: {amount}", field=field)
    return amount


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def to_date(value: str | date | datetime | None, field: str = "date") -> date:
    """
    Coerce a calendar date, dropping any time-of-day component.

    Raises:
        ValidationError: If the value is missing or not an ISO date
    """
    if value is None or value == "":
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        # Accept full timestamps too: "2026-10-19T15:30:00Z"
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValidationError(f"{field} is not an ISO date: {value!r}", field=field) from None
