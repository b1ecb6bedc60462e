"""
api/main.py -- FastAPI application entry point for Stockroom.

Run with:  python main.py serve
           uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- adds CORS headers for allowed browser origins
  2. log_requests   -- one log line per request with latency

Lifespan builds every collaborator from Settings exactly once (init_state) and
stores them on app.state; route handlers and dependencies read them from
there. Tests swap in their own lifespan that calls init_state with in-memory
database URLs.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.items import router as items_router
from auth.authenticator import Authenticator
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.config import Settings, get_settings
from core.errors import AuthError, StockroomError
from inventory.query import QueryBuilder
from inventory.service import InventoryService
from inventory.store import ItemStore

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("stockroom.api")

# ---------------------------------------------------------------------------
# Application state
# ---------------------------------------------------------------------------


def init_state(app: FastAPI, settings: Settings) -> None:
    """Construct stores, codec, authenticator, and services onto app.state.

    The signing secret and store handles are created here once and shared by
    every request; nothing below this point reads configuration itself.
    """
    app.state.user_store = UserStore(settings.auth_db_url)
    app.state.item_store = ItemStore(settings.inventory_db_url)
    app.state.token_codec = TokenCodec(settings.secret_key, settings.token_expire_seconds)
    app.state.authenticator = Authenticator(
        app.state.user_store,
        app.state.token_codec,
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    app.state.query_builder = QueryBuilder(
        default_limit=settings.default_page_size,
        max_limit=settings.max_page_size,
    )
    app.state.inventory = InventoryService(app.state.item_store, app.state.user_store)


def close_state(app: FastAPI) -> None:
    app.state.item_store.close()
    app.state.user_store.close()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build collaborators on startup and dispose of them on shutdown."""
    logger.info("Stockroom API starting up")
    init_state(app, get_settings())
    logger.info("Stores initialized (setup_required=%s)", not app.state.user_store.has_users())

    yield

    close_state(app)
    logger.info("Stockroom API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Stockroom API",
    description="Role-based inventory tracking.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(items_router, prefix="/api/v1", tags=["Items"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


@app.exception_handler(StockroomError)
async def domain_error_handler(request: Request, exc: StockroomError) -> JSONResponse:
    """Render any core.errors exception with its own status code and machine code."""
    response = _error_response(exc.status_code, exc.code, exc.message)
    if isinstance(exc, AuthError):
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with structured error when request body or path params fail validation."""
    return _error_response(400, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap framework-raised HTTP errors (404 route, 405 method) in the envelope."""
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=VERSION)
