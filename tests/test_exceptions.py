"""Unit tests for exceptions module."""

import pytest

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


class TestFerroCashError:
    """Tests for base exception."""

    def test_basic_error(self) -> None:
        error = FerroCashError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.details == {}
        assert error.kind == "error"

    def test_error_with_details(self) -> None:
        error = FerroCashError("Storage failed", details={"collection": "cash_movements"})

        assert "Storage failed" in str(error)
        assert "Details:" in str(error)
        assert error.details["collection"] == "cash_movements"

    def test_to_dict(self) -> None:
        error = ConflictError("Register busy", details={"register_id": "reg-1"})

        assert error.to_dict() == {
            "error": "conflict",
            "message": "Register busy",
            "details": {"register_id": "reg-1"},
        }

    def test_is_catchable_as_base_type(self) -> None:
        with pytest.raises(FerroCashError):
            raise NotFoundError("Check", "chk-1")


class TestSpecificErrors:
    """Tests for the specific error kinds."""

    def test_validation_error_records_field(self) -> None:
        error = ValidationError("amount must be greater than zero: 0.00", field="amount")

        assert error.field == "amount"
        assert error.details["field"] == "amount"
        assert error.kind == "validation_error"

    def test_not_found_message(self) -> None:
        error = NotFoundError("Cash register", "reg-9")

        assert error.message == "Cash register not found: reg-9"
        assert error.entity == "Cash register"
        assert error.entity_id == "reg-9"

    def test_already_closed_is_conflict(self) -> None:
        error = AlreadyClosedError("ses-1")

        assert isinstance(error, ConflictError)
        assert error.kind == "already_closed"
        assert error.session_id == "ses-1"

    def test_invalid_check_transition_is_conflict(self) -> None:
        error = InvalidCheckTransitionError("chk-1", "deposited", "endorsed")

        assert isinstance(error, ConflictError)
        assert "deposited" in error.message
        assert "endorsed" in error.message
        assert error.current_status == "deposited"

    def test_session_not_open_missing(self) -> None:
        error = SessionNotOpenError("ses-1")

        assert error.message == "Session ses-1 is not open (missing)"
        assert not isinstance(error, ConflictError)

    def test_session_not_open_closed(self) -> None:
        assert "(closed)" in SessionNotOpenError("ses-1", status="closed").message

    def test_lock_unavailable(self) -> None:
        error = LockUnavailableError("lock:session:ses-1", 6)

        assert error.attempts == 6
        assert error.kind == "lock_unavailable"

    def test_configuration_error(self) -> None:
        assert ConfigurationError("bad").kind == "configuration_error"
