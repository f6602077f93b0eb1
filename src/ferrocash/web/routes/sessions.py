"""
Cash session API routes.

POST /api/cash-sessions/open       - open a register
POST /api/cash-sessions/{id}/close - close and reconcile
GET  /api/cash-sessions/{id}       - session with register and movements
"""

from fastapi import APIRouter, Depends, status

from ferrocash.client import FerroCash
from ferrocash.web.dependencies import get_cash
from ferrocash.web.schemas import (
    SessionCloseRequest,
    SessionDetailsResponse,
    SessionOpenRequest,
    SessionResponse,
)

router = APIRouter(prefix="/api/cash-sessions", tags=["Cash Sessions"])


@router.post("/open", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def open_session(body: SessionOpenRequest, cash: FerroCash = Depends(get_cash)):
    session = await cash.open_session(body.register_id, body.opening_balance, body.opened_by)
    return SessionResponse.model_validate(session)


@router.post("/{session_id}/close", response_model=SessionResponse)
async def close_session(
    session_id: str,
    body: SessionCloseRequest,
    cash: FerroCash = Depends(get_cash),
):
    """Close a session. A non-zero difference is reported, never rejected."""
    session = await cash.close_session(session_id, body.closing_balance, body.closed_by, body.notes)
    return SessionResponse.model_validate(session)


@router.get("/{session_id}", response_model=SessionDetailsResponse)
async def get_session(session_id: str, cash: FerroCash = Depends(get_cash)):
    details = await cash.get_session_details(session_id)
    return SessionDetailsResponse.from_details(details)
