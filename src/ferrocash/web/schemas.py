"""
Request and response schemas (Pydantic).

JSON is camelCase on the wire; money travels as decimal strings.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from ferrocash.core.types import (
    CheckOrigin,
    CheckStatus,
    CheckType,
    CheckWithAlert,
    MovementType,
    SessionDetails,
    SessionStatus,
)

# Decimal strings or whole numbers; JSON floats are rejected. The services
# parse the value so that bad amounts share the 400 body of other validation errors.
Amount = Union[StrictStr, StrictInt]


class CamelModel(BaseModel):
    """Base model: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =========================================================================
# Requests
# =========================================================================


class RegisterCreateRequest(CamelModel):
    name: str = Field(..., description="Display name of the till")
    description: str | None = None


class RegisterUpdateRequest(CamelModel):
    name: str | None = None
    description: str | None = None


class SessionOpenRequest(CamelModel):
    register_id: str = Field(..., description="Register to open")
    opening_balance: Amount = Field(..., description="Counted cash at open")
    opened_by: str = Field(..., description="Operator id")


class SessionCloseRequest(CamelModel):
    closing_balance: Amount = Field(..., description="Counted cash at close")
    closed_by: str = Field(..., description="Operator id")
    notes: str | None = None


class MovementCreateRequest(CamelModel):
    session_id: str
    register_id: str
    type: str = Field(..., description="income, expense, sale, transfer_in or transfer_out")
    amount: Amount
    user_id: str
    category: str | None = None
    payment_method_id: str | None = None
    sale_id: str | None = None
    description: str | None = None
    reference: str | None = None


class CheckCreateRequest(CamelModel):
    check_type: str = Field(..., description="physical or echeq")
    check_number: str
    bank_name: str
    amount: Amount
    issue_date: str = Field(..., description="ISO date")
    due_date: str = Field(..., description="ISO date")
    issuer_name: str
    bank_branch: str | None = None
    issuer_cuit: str | None = None
    payee_name: str | None = None
    origin_type: str | None = None
    origin_id: str | None = None
    client_id: str | None = None
    notes: str | None = None
    created_by: str | None = None


class CheckDepositRequest(CamelModel):
    deposit_account_id: str


class CheckEndorseRequest(CamelModel):
    endorsed_to: str


class CheckRejectRequest(CamelModel):
    reason: str


# =========================================================================
# Responses
# =========================================================================


class RegisterResponse(CamelModel):
    id: str
    name: str
    description: str | None = None
    is_active: bool
    current_balance: Decimal
    last_closed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SessionResponse(CamelModel):
    id: str
    register_id: str
    opened_by: str
    opening_balance: Decimal
    status: SessionStatus
    opened_at: datetime | None = None
    closed_by: str | None = None
    closing_balance: Decimal | None = None
    expected_balance: Decimal | None = None
    difference: Decimal | None = None
    notes: str | None = None
    closed_at: datetime | None = None


class MovementResponse(CamelModel):
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


class SessionDetailsResponse(SessionResponse):
    register: RegisterResponse
    movements: list[MovementResponse] = Field(default_factory=list)

    @classmethod
    def from_details(cls, details: SessionDetails) -> SessionDetailsResponse:
        return cls(
            **SessionResponse.model_validate(details.session).model_dump(),
            register=RegisterResponse.model_validate(details.register),
            movements=[MovementResponse.model_validate(m) for m in details.movements],
        )


class SummaryResponse(CamelModel):
    register_id: str
    session_id: str | None = None
    total_income: Decimal
    total_expense: Decimal
    current_balance: Decimal
    movement_count: int


class CheckResponse(CamelModel):
    id: str
    check_type: CheckType
    check_number: str
    bank_name: str
    bank_branch: str | None = None
    amount: Decimal
    issue_date: date
    due_date: date
    issuer_name: str
    issuer_cuit: str | None = None
    payee_name: str | None = None
    status: CheckStatus
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


class CheckAlertResponse(CheckResponse):
    days_until_due: int
    is_overdue: bool
    alert_level: str

    @classmethod
    def from_alert(cls, item: CheckWithAlert) -> CheckAlertResponse:
        return cls(
            **CheckResponse.model_validate(item.check).model_dump(),
            days_until_due=item.days_until_due,
            is_overdue=item.is_overdue,
            alert_level=item.alert_level.value,
        )


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    status: str
    storage: str
    version: str
