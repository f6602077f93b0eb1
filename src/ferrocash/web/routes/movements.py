"""Cash movement API routes."""

from fastapi import APIRouter, Depends, status

from ferrocash.client import FerroCash
from ferrocash.web.dependencies import get_cash
from ferrocash.web.schemas import MovementCreateRequest, MovementResponse

router = APIRouter(prefix="/api/cash-movements", tags=["Cash Movements"])


@router.post("", response_model=MovementResponse, status_code=status.HTTP_201_CREATED)
async def create_movement(body: MovementCreateRequest, cash: FerroCash = Depends(get_cash)):
    """Record a movement against an open session."""
    movement = await cash.create_movement(
        body.session_id,
        body.register_id,
        body.type,
        body.amount,
        user_id=body.user_id,
        category=body.category,
        payment_method_id=body.payment_method_id,
        sale_id=body.sale_id,
        description=body.description,
        reference=body.reference,
    )
    return MovementResponse.model_validate(movement)
