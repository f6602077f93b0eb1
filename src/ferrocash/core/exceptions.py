"""
Exception hierarchy for FerroCash.

All ledger-specific exceptions inherit from FerroCashError for easy catching.
Every error carries a machine-readable ``kind`` alongside the human message.
"""

from __future__ import annotations

from typing import Any


class FerroCashError(Exception):
    """
    Base exception for all FerroCash errors.

    Catch this to handle any ledger-related exception.

    Example:
        >>> try:
        ...     await cash.sessions.open_session("reg-1", "1000.00", "ana")
        ... except FerroCashError as e:
        ...     print(f"{e.kind}: {e.message}")
    """

    kind = "error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API error bodies."""
        return {"error": self.kind, "message": self.message, "details": self.details}


class ConfigurationError(FerroCashError):
    """
    Configuration is missing or invalid.

    Raised when:
    - Environment variables hold unparseable values
    - An unknown storage backend is requested
    """

    kind = "configuration_error"


class ValidationError(FerroCashError):
    """
    Input validation error.

    Raised when:
    - Required fields are missing or blank
    - Amounts are malformed, negative, or zero where a positive value is required
    - A movement references a register other than its session's
    """

    kind = "validation_error"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        if field and "field" not in self.details:
            self.details["field"] = field


class NotFoundError(FerroCashError):
    """
    A referenced register, session, or check does not exist.
    """

    kind = "not_found"

    def __init__(
        self,
        entity: str,
        entity_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"{entity} not found: {entity_id}", details)
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(FerroCashError):
    """
    The operation conflicts with the current state.

    Raised when:
    - A session is opened while another is open on the same register
    - A register with an open session is deactivated
    """

    kind = "conflict"


class AlreadyClosedError(ConflictError):
    """A session was closed a second time."""

    kind = "already_closed"

    def __init__(self, session_id: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"Session already closed: {session_id}", details)
        self.session_id = session_id


class InvalidCheckTransitionError(ConflictError):
    """
    A check was moved out of a terminal status.

    Only pending checks may be deposited, endorsed or rejected.
    """

    kind = "invalid_check_transition"

    def __init__(
        self,
        check_id: str,
        current_status: str,
        target_status: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"Check {check_id} is {current_status}, cannot mark as {target_status}",
            details,
        )
        self.check_id = check_id
        self.current_status = current_status
        self.target_status = target_status


class SessionNotOpenError(FerroCashError):
    """
    A movement targeted a session that is closed or does not exist.
    """

    kind = "session_not_open"

    def __init__(
        self,
        session_id: str,
        status: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        state = status or "missing"
        super().__init__(f"Session {session_id} is not open ({state})", details)
        self.session_id = session_id
        self.status = status


class LockUnavailableError(FerroCashError):
    """
    A register or session lock could not be acquired within the retry budget.

    Nothing was written; the caller may resubmit the request.
    """

    kind = "lock_unavailable"

    def __init__(
        self,
        resource: str,
        attempts: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Could not lock {resource} after {attempts} attempts", details)
        self.resource = resource
        self.attempts = attempts
