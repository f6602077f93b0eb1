"""
FastAPI application.

Router registration, error mapping and FerroCash lifecycle.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ferrocash import __version__
from ferrocash.client import FerroCash
from ferrocash.core.config import Config
from ferrocash.core.exceptions import (
    ConflictError,
    FerroCashError,
    LockUnavailableError,
    NotFoundError,
    SessionNotOpenError,
    ValidationError,
)
from ferrocash.core.logging import get_logger
from ferrocash.web.routes import changes, checks, health, movements, registers, sessions

logger = get_logger("web")

# Most specific first; anything unlisted is a 500
STATUS_CODES: list[tuple[type[FerroCashError], int]] = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (SessionNotOpenError, 409),
    (LockUnavailableError, 503),
]


def status_for(exc: FerroCashError) -> int:
    for exc_type, code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return 500


async def ferrocash_error_handler(request: Request, exc: FerroCashError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or None
    error = ValidationError(first.get("msg", "Invalid request"), field=field)
    return JSONResponse(status_code=400, content=error.to_dict())


def create_app(cash: FerroCash | None = None) -> FastAPI:
    """
    Build the API application.

    Args:
        cash: FerroCash instance to serve. When omitted one is built from the
            environment at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = getattr(app.state, "cash", None) is None
        if owned:
            app.state.cash = FerroCash(Config.from_env())
        yield
        if owned:
            await app.state.cash.close()
            logger.info("FerroCash closed")

    app = FastAPI(
        title="FerroCash API",
        description="Cash register ledger and check wallet",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    if cash is not None:
        app.state.cash = cash

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FerroCashError, ferrocash_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health.router)
    app.include_router(registers.router)
    app.include_router(sessions.router)
    app.include_router(movements.router)
    app.include_router(checks.router)
    app.include_router(changes.router)

    return app
