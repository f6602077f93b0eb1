"""
Cash register API routes.

Register directory plus per-register views (current session, summary, history).
"""

from fastapi import APIRouter, Depends, Query, status

from ferrocash.client import FerroCash
from ferrocash.core.types import SessionStatus
from ferrocash.web.dependencies import get_cash
from ferrocash.web.schemas import (
    RegisterCreateRequest,
    RegisterResponse,
    RegisterUpdateRequest,
    SessionResponse,
    SummaryResponse,
)

router = APIRouter(prefix="/api/cash-registers", tags=["Cash Registers"])


@router.post("", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def create_register(body: RegisterCreateRequest, cash: FerroCash = Depends(get_cash)):
    register = await cash.registers.create_register(body.name, body.description)
    return RegisterResponse.model_validate(register)


@router.get("", response_model=list[RegisterResponse])
async def list_registers(
    active_only: bool = Query(default=False, alias="activeOnly"),
    cash: FerroCash = Depends(get_cash),
):
    registers = await cash.registers.list_registers(active_only=active_only)
    return [RegisterResponse.model_validate(r) for r in registers]


@router.get("/{register_id}", response_model=RegisterResponse)
async def get_register(register_id: str, cash: FerroCash = Depends(get_cash)):
    return RegisterResponse.model_validate(await cash.registers.get_register(register_id))


@router.patch("/{register_id}", response_model=RegisterResponse)
async def update_register(
    register_id: str,
    body: RegisterUpdateRequest,
    cash: FerroCash = Depends(get_cash),
):
    register = await cash.registers.update_register(register_id, body.name, body.description)
    return RegisterResponse.model_validate(register)


@router.post("/{register_id}/deactivate", response_model=RegisterResponse)
async def deactivate_register(register_id: str, cash: FerroCash = Depends(get_cash)):
    """Deactivate a register (409 while a session is open)."""
    return RegisterResponse.model_validate(await cash.registers.deactivate_register(register_id))


@router.post("/{register_id}/activate", response_model=RegisterResponse)
async def activate_register(register_id: str, cash: FerroCash = Depends(get_cash)):
    return RegisterResponse.model_validate(await cash.registers.activate_register(register_id))


@router.get("/{register_id}/current-session", response_model=SessionResponse | None)
async def get_current_session(register_id: str, cash: FerroCash = Depends(get_cash)):
    """The open session, or null when the register is closed."""
    session = await cash.get_current_session(register_id)
    return SessionResponse.model_validate(session) if session else None


@router.get("/{register_id}/summary", response_model=SummaryResponse)
async def get_summary(register_id: str, cash: FerroCash = Depends(get_cash)):
    """Totals of the open session, recomputed on every request."""
    summary = await cash.get_cash_register_summary(register_id)
    return SummaryResponse.model_validate(summary)


@router.get("/{register_id}/sessions", response_model=list[SessionResponse])
async def list_sessions(
    register_id: str,
    session_status: SessionStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=500),
    cash: FerroCash = Depends(get_cash),
):
    """Session history, newest first."""
    await cash.get_register(register_id)
    sessions = await cash.sessions.list_sessions(register_id, status=session_status, limit=limit)
    return [SessionResponse.model_validate(s) for s in sessions]
