"""
Pastebin Backend - FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers; the
       lifespan builds the store, the cache and the PasteService once and
       stores the service on app.state.
Who:   uvicorn (`uvicorn pastebin.main:app`), and tests through
       create_app(paste_service=...).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → CORS           │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────┐ ┌────────────────┐ ┌──────────────┐   │
    │  │ GET /    │ │ POST/DELETE    │ │ GET /archive/│   │
    │  │ GET /{id}│ │ /update/...    │ │ GET /health  │   │
    │  └──────────┘ └────────────────┘ └──────────────┘   │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ Unauth/Forbidden→403 │ NotFound→404│
    │  Store→500 │ Timeout→504 │ anything else→500         │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → engine + session factory → cache → PasteService
    Shutdown: close cache client → dispose engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pastebin import __version__
from pastebin.config import settings
from pastebin.database import create_engine, create_session_factory, dispose_engine
from pastebin.exceptions import (
    ForbiddenError,
    NotFoundError,
    PastebinError,
    RequestTimeoutError,
    StoreUnavailableError,
    UnauthenticatedError,
    ValidationError,
)
from pastebin.middleware.logging import RequestLoggingMiddleware
from pastebin.middleware.request_id import RequestIDMiddleware, request_id_var
from pastebin.routes import health, pastes
from pastebin.services.paste_cache import RedisPasteCache, create_cache
from pastebin.services.paste_service import PasteService
from pastebin.services.paste_store import PasteStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the PasteService and its dependencies, unless create_app() was
    handed one already; in that case the caller owns their lifecycle.
    """
    setup_logging()
    logger.info("Pastebin %s starting up...", __version__)

    if getattr(app.state, "paste_service", None) is not None:
        yield
        return

    engine = create_engine()
    cache = create_cache()
    app.state.paste_service = PasteService(
        store=PasteStore(create_session_factory(engine)),
        cache=cache,
    )
    logger.info("Paste store: %s", engine.url.render_as_string(hide_password=True))
    logger.info("Paste cache: %s", settings.cache_backend)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Pastebin shutting down...")
    del app.state.paste_service
    if isinstance(cache, RedisPasteCache):
        await cache.close()
    await dispose_engine(engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int, error: str, message: str, details: Optional[dict] = None
) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy to HTTP responses.

    Handler hierarchy:
        ValidationError       → 400 Bad Request
        UnauthenticatedError  → 403 Forbidden
        ForbiddenError        → 403 Forbidden
        NotFoundError         → 404 Not Found
        StoreUnavailableError → 500 Internal Server Error
        RequestTimeoutError   → 504 Gateway Timeout
        PastebinError (base)  → 500 Internal Server Error
        Exception (fallback)  → 500 Internal Server Error

    Store and unexpected errors never expose driver messages to the client.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        logger.info("[%s] Login required for %s %s", request_id_var.get(""), request.method, request.url.path)
        return _error_response(403, "login_required", exc.message)

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return _error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_error(request: Request, exc: StoreUnavailableError):
        logger.error("[%s] Store error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(RequestTimeoutError)
    async def handle_timeout(request: Request, exc: RequestTimeoutError):
        return _error_response(504, "timeout", exc.message, {"operation": exc.operation})

    @app.exception_handler(PastebinError)
    async def handle_pastebin_error(request: Request, exc: PastebinError):
        logger.error("[%s] Unhandled application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(paste_service: Optional[PasteService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        paste_service: A ready-made service (tests, embedding). When omitted,
            the lifespan builds one from settings.
    """
    app = FastAPI(
        title="Pastebin",
        description="Share text snippets by short link.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.identity_header = settings.identity_header
    if paste_service is not None:
        app.state.paste_service = paste_service

    # Executes in reverse order of addition: Request ID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # pastes.router ends with the catch-all "/{paste_id}", so it goes last
    app.include_router(health.router)
    app.include_router(pastes.router)

    return app


app = create_app()
