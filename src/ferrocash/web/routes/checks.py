"""
Check wallet API routes.

Alerts are recomputed on every request against today's date in the
configured time zone.
"""

from fastapi import APIRouter, Depends, Query, status

from ferrocash.client import FerroCash
from ferrocash.web.dependencies import get_cash
from ferrocash.web.schemas import (
    CheckAlertResponse,
    CheckCreateRequest,
    CheckDepositRequest,
    CheckEndorseRequest,
    CheckRejectRequest,
    CheckResponse,
)

router = APIRouter(prefix="/api/checks", tags=["Checks"])


@router.post("", response_model=CheckResponse, status_code=status.HTTP_201_CREATED)
async def create_check(body: CheckCreateRequest, cash: FerroCash = Depends(get_cash)):
    check = await cash.create_check(**body.model_dump())
    return CheckResponse.model_validate(check)


@router.get("", response_model=list[CheckResponse])
async def list_checks(
    check_status: str | None = Query(default=None, alias="status"),
    cash: FerroCash = Depends(get_cash),
):
    checks = await cash.checks.list_checks(check_status)
    return [CheckResponse.model_validate(c) for c in checks]


@router.get("/alerts", response_model=list[CheckAlertResponse])
async def get_alerts(cash: FerroCash = Depends(get_cash)):
    """Pending checks with due-date alerts, soonest first."""
    alerts = await cash.get_checks_with_alerts()
    return [CheckAlertResponse.from_alert(a) for a in alerts]


@router.get("/{check_id}", response_model=CheckResponse)
async def get_check(check_id: str, cash: FerroCash = Depends(get_cash)):
    return CheckResponse.model_validate(await cash.checks.get_check(check_id))


@router.post("/{check_id}/deposit", response_model=CheckResponse)
async def deposit_check(
    check_id: str,
    body: CheckDepositRequest,
    cash: FerroCash = Depends(get_cash),
):
    check = await cash.deposit_check(check_id, body.deposit_account_id)
    return CheckResponse.model_validate(check)


@router.post("/{check_id}/endorse", response_model=CheckResponse)
async def endorse_check(
    check_id: str,
    body: CheckEndorseRequest,
    cash: FerroCash = Depends(get_cash),
):
    check = await cash.endorse_check(check_id, body.endorsed_to)
    return CheckResponse.model_validate(check)


@router.post("/{check_id}/reject", response_model=CheckResponse)
async def reject_check(
    check_id: str,
    body: CheckRejectRequest,
    cash: FerroCash = Depends(get_cash),
):
    check = await cash.reject_check(check_id, body.reason)
    return CheckResponse.model_validate(check)
