"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Everything the request path needs (settings, token service,
database engine and session factory) is built here once and kept on
app.state; dependencies read it from there instead of from module
globals. Lifespan manages startup/shutdown (tables, engine disposal).
"""

import traceback
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskhub import __version__
from taskhub.api import api_router
from taskhub.auth.jwt import TokenService
from taskhub.config import Settings
from taskhub.db.engine import create_engine, create_session_factory, create_tables
from taskhub.errors import AppError
from taskhub.middleware.request_id import RequestIdMiddleware
from taskhub.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "taskhub.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )
    if settings.uses_default_secret:
        logger.warning(
            "taskhub.default_jwt_secret",
            hint="set TASKHUB_JWT_SECRET; tokens are forgeable with the default",
        )

    await create_tables(app.state.engine)

    yield

    logger.info("taskhub.shutdown")
    await app.state.engine.dispose()


def _error_body(settings: Settings, message: str, exc: Exception) -> dict:
    """The error envelope. Stack traces are withheld in production."""
    stack = None
    if not settings.is_production:
        stack = "".join(traceback.format_exception(exc))
    return {"message": message, "stack": stack}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"{where}: {first.get('msg')}" if where else str(first.get("msg"))


def register_error_handlers(app: FastAPI) -> None:
    settings: Settings = app.state.settings

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(settings, exc.message, exc),
            headers=exc.headers or None,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(settings, str(exc.detail), exc),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=_error_body(settings, _validation_message(exc), exc),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("taskhub.unhandled_error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_body(settings, "Internal server error", exc),
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or Settings()

    app = FastAPI(
        title="TaskHub",
        description="Personal task tracking with token-guarded, owner-scoped records",
        version=__version__,
        lifespan=lifespan,
    )

    engine = create_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.token_service = TokenService.from_settings(settings)

    register_error_handlers(app)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: taskhub.main:app)
app = create_app()
