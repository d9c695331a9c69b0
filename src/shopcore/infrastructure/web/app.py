"""FastAPI application factory.

Run with ``uvicorn --factory shopcore.infrastructure.web.app:create_app``
or ``shopcore serve``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shopcore.domain.exceptions import (
    AlreadyReleasedError,
    DomainException,
    EmptyCartError,
    EntityNotFoundError,
    ForbiddenError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidTransitionError,
    ValidationError,
)
from shopcore.infrastructure.bootstrap import Container, load_settings
from shopcore.infrastructure.logging import clear_context, configure_logging
from shopcore.infrastructure.web.auth import AuthGate, StaticTokenAuthGate
from shopcore.infrastructure.web.routes import cart_router, order_router

logger = structlog.get_logger(__name__)

# Most specific first.
_ERROR_MAP: list[tuple[type[DomainException], int, str]] = [
    (InvalidQuantityError, 400, "InvalidQuantity"),
    (EmptyCartError, 400, "EmptyCart"),
    (ValidationError, 400, "ValidationError"),
    (EntityNotFoundError, 404, "NotFound"),
    (ForbiddenError, 403, "Forbidden"),
    (InsufficientStockError, 409, "InsufficientStock"),
    (InvalidTransitionError, 409, "InvalidTransition"),
    (AlreadyReleasedError, 409, "InvalidTransition"),
]


def _classify(exc: DomainException) -> tuple[int, str]:
    for error_type, status_code, code in _ERROR_MAP:
        if isinstance(exc, error_type):
            return status_code, code
    return 400, "DomainError"


async def _domain_error(request: Request, exc: DomainException) -> JSONResponse:
    status_code, code = _classify(exc)
    content: dict = {"error": code, "detail": str(exc)}
    if isinstance(exc, InsufficientStockError):
        content["product_ids"] = exc.product_ids
    logger.info("Request rejected", path=request.url.path, error=code, detail=str(exc))
    return JSONResponse(status_code=status_code, content=content)


async def _request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    code = "InvalidRequest"
    if any(error.get("loc", ())[-1:] == ("quantity",) for error in errors):
        code = "InvalidQuantity"
    detail = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in errors
    )
    return JSONResponse(status_code=400, content={"error": code, "detail": detail})


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = "Unauthorized" if exc.status_code == 401 else "HTTPError"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": code, "detail": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "detail": "Internal server error"},
    )


def create_app(
    container: Container | None = None,
    auth_gate: AuthGate | None = None,
) -> FastAPI:
    if container is None:
        configure_logging()
    if container is None or auth_gate is None:
        settings = load_settings()
        container = container or Container.from_url(settings.database_url)
        auth_gate = auth_gate or StaticTokenAuthGate(settings.api_tokens)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.container.engine.dispose()

    app = FastAPI(title="shopcore", lifespan=lifespan)
    app.state.container = container
    app.state.auth_gate = auth_gate

    @app.middleware("http")
    async def fresh_log_context(request: Request, call_next):
        clear_context()
        return await call_next(request)

    app.add_exception_handler(DomainException, _domain_error)
    app.add_exception_handler(RequestValidationError, _request_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unexpected_error)

    app.include_router(cart_router)
    app.include_router(order_router)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "service": "shopcore"}

    return app
