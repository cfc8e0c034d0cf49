"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from coursehub import __version__
from coursehub.api.dependencies import close_store, init_settings, init_store
from coursehub.api.models import APIResponse
from coursehub.api.routes import admin, auth, courses
from coursehub.config import Settings, load_settings
from coursehub.logging import get_logger, sanitize_for_log
from coursehub.store import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotEnrolledError,
    NotFoundError,
    StoreError,
    ValidationError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = get_logger("api")

# Store error -> HTTP status. Lookup follows the exception's MRO, so the
# most specific registered class wins and StoreError is the fallback.
ERROR_STATUS: dict[type[StoreError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotEnrolledError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    init_settings(settings)
    init_store(settings.db_path, settings.password_schemes)
    logger.info("CourseHub API started (db=%s)", settings.db_path)
    yield
    close_store()


def _error_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[None](data=None, error=message).model_dump(),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map store errors and HTTP errors to APIResponse envelopes."""

    async def store_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        for cls in type(exc).__mro__:
            if cls in ERROR_STATUS:
                return _error_response(ERROR_STATUS[cls], str(exc))
        logger.error("Unhandled store error: %s", sanitize_for_log(str(exc)))
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    async def http_error_handler(_request: Request, exc: HTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail), exc.headers)

    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)  # type: ignore[arg-type]


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or load_settings()

    app = FastAPI(
        title="CourseHub API",
        description="REST API for CourseHub - course enrollment and reviews",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Any) -> Any:
        response = await call_next(request)
        logger.debug(
            "%s %s -> %d", request.method, sanitize_for_log(str(request.url)), response.status_code
        )
        return response

    register_exception_handlers(app)

    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    @app.get("/api/v1/health", tags=["health"])
    def health() -> APIResponse[dict[str, str]]:
        return APIResponse(data={"status": "ok", "version": __version__})

    return app


# Default app instance
app = create_app()
