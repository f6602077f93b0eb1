"""Unit tests for types and money helpers."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from ferrocash.core.exceptions import ValidationError
from ferrocash.core.types import (
    AlertLevel,
    CashMovement,
    CashRegisterSession,
    Check,
    CheckStatus,
    CheckType,
    CheckWithAlert,
    MovementType,
    SessionStatus,
)
from ferrocash.utils.money import non_negative_money, positive_money, to_date, to_money


class TestMovementType:
    """Tests for MovementType."""

    @pytest.mark.parametrize(
        "movement_type,expected",
        [
            (MovementType.INCOME, Decimal("110.00")),
            (MovementType.SALE, Decimal("110.00")),
            (MovementType.TRANSFER_IN, Decimal("110.00")),
            (MovementType.EXPENSE, Decimal("90.00")),
            (MovementType.TRANSFER_OUT, Decimal("90.00")),
        ],
    )
    def test_apply_sign(self, movement_type, expected) -> None:
        assert movement_type.apply(Decimal("100.00"), Decimal("10.00")) == expected

    def test_from_string_normalizes(self) -> None:
        assert MovementType.from_string("Transfer-In") == MovementType.TRANSFER_IN
        assert MovementType.from_string(" sale ") == MovementType.SALE

    def test_from_string_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown movement type"):
            MovementType.from_string("refund")


class TestCheckStatus:
    def test_only_pending_is_open(self) -> None:
        assert not CheckStatus.PENDING.is_terminal
        assert all(s.is_terminal for s in CheckStatus if s != CheckStatus.PENDING)


class TestSerialization:
    """to_dict/from_dict keep money as strings and dates as ISO text."""

    def test_session_roundtrip_keeps_decimals(self) -> None:
        session = CashRegisterSession(
            id="ses-1",
            register_id="reg-1",
            opened_by="ana",
            opening_balance=Decimal("1000.00"),
            status=SessionStatus.CLOSED,
            opened_at=datetime(2026, 10, 19, 12, tzinfo=timezone.utc),
            closing_balance=Decimal("1250.00"),
            expected_balance=Decimal("1300.00"),
            difference=Decimal("-50.00"),
        )

        data = session.to_dict()
        assert data["difference"] == "-50.00"
        assert data["status"] == "closed"

        restored = CashRegisterSession.from_dict(data)
        assert restored.difference == Decimal("-50.00")
        assert restored.opened_at == session.opened_at
        assert not restored.is_open

    def test_movement_from_dict_ignores_storage_key(self) -> None:
        movement = CashMovement.from_dict(
            {
                "_key": "mov-1",
                "id": "mov-1",
                "session_id": "ses-1",
                "register_id": "reg-1",
                "sequence": 7,
                "type": "expense",
                "amount": "200.00",
                "running_balance": "1300.00",
                "user_id": "ana",
            }
        )

        assert movement.type == MovementType.EXPENSE
        assert movement.running_balance == Decimal("1300.00")
        assert movement.sequence == 7

    def test_check_with_alert_to_dict(self) -> None:
        check = Check(
            id="chk-1",
            check_type=CheckType.ECHEQ,
            check_number="1",
            bank_name="Banco Galicia",
            amount=Decimal("5000.00"),
            issue_date=date(2026, 10, 1),
            due_date=date(2026, 10, 18),
            issuer_name="Pinturerías Sur",
        )
        data = CheckWithAlert(check, days_until_due=-1, alert_level=AlertLevel.OVERDUE).to_dict()

        assert data["due_date"] == "2026-10-18"
        assert data["days_until_due"] == -1
        assert data["is_overdue"] is True
        assert data["alert_level"] == "overdue"


class TestMoney:
    """Tests for money parsing."""

    def test_quantizes_half_up(self) -> None:
        assert to_money("10.005") == Decimal("10.01")
        assert to_money(0.1) == Decimal("0.10")
        assert to_money(1500) == Decimal("1500.00")

    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", "Infinity", True])
    def test_rejects_malformed(self, value) -> None:
        with pytest.raises(ValidationError):
            to_money(value)

    @pytest.mark.parametrize("value", ["1e30", "1000000000000", "-1000000000000.00", "999999999999.995"])
    def test_rejects_more_than_twelve_integer_digits(self, value) -> None:
        with pytest.raises(ValidationError, match="12 integer digits") as excinfo:
            to_money(value, field="opening_balance")
        assert excinfo.value.details["field"] == "opening_balance"

    def test_accepts_widest_amount(self) -> None:
        assert to_money("999999999999.99") == Decimal("999999999999.99")
        assert to_money("-999999999999.994") == Decimal("-999999999999.99")

    def test_positive_rejects_zero(self) -> None:
        with pytest.raises(ValidationError, match="greater than zero"):
            positive_money("0")

    def test_non_negative_accepts_zero(self) -> None:
        assert non_negative_money("0") == Decimal("0.00")
        with pytest.raises(ValidationError, match="cannot be negative"):
            non_negative_money("-0.01", field="closing_balance")

    def test_to_date_truncates_time(self) -> None:
        assert to_date("2026-10-19T23:59:00Z") == date(2026, 10, 19)
        assert to_date(datetime(2026, 10, 19, 8, 30)) == date(2026, 10, 19)

    def test_to_date_rejects_garbage(self) -> None:
        with pytest.raises(ValidationError, match="due_date"):
            to_date("next friday", field="due_date")
