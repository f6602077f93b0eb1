"""
Health check endpoint.

GET /health - server and storage status
"""

from fastapi import APIRouter, Depends

from ferrocash import __version__
from ferrocash.client import FerroCash
from ferrocash.web.dependencies import get_cash
from ferrocash.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(cash: FerroCash = Depends(get_cash)) -> HealthResponse:
    """Report "ok" when the storage backend answers, "degraded" otherwise."""
    healthy = await cash.storage.health_check()
    return HealthResponse(
        status="ok" if healthy else "degraded",
        storage=cash.config.storage_backend,
        version=__version__,
    )
