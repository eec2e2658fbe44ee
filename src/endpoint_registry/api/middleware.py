"""Middleware and error handlers for the FastAPI application.

This module provides CORS, request logging and the mapping from registry
errors to HTTP responses.
"""

import logging
import time
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request, Response, status  # type: ignore[import-untyped]
from fastapi.middleware.cors import CORSMiddleware  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]

from endpoint_registry.api.models import ErrorResponse
from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.errors import (
    AuthenticationError,
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    PersistenceError,
    RegistryError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Looked up along the error class MRO, so subclasses inherit a code
ERROR_STATUS_CODES: dict[type, int] = {
    ValidationError: 422,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    InvalidStateError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(error: RegistryError) -> int:
    """Get the HTTP status code for a registry error."""
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def setup_cors(app: FastAPI, config: ConfigManager) -> None:
    """Configure CORS middleware.

    Args:
        app: FastAPI application instance
        config: Configuration manager

    Note:
        CORS is configured based on the api.cors section in config.
        By default, only localhost origins are allowed.
    """
    if not config.get("api.cors.enabled", True):
        return

    origins = config.get("api.cors.origins", ["http://localhost:3000"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_request_logging(app: FastAPI, config: ConfigManager) -> None:
    """Log every request with its duration and flag slow ones."""
    slow_seconds = float(config.get("api.advanced.slow_request_seconds", 5.0))

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        message = f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.3f}s)"
        if elapsed > slow_seconds:
            logger.warning(f"Slow request: {message}")
        else:
            logger.debug(message)
        return response


def setup_exception_handlers(app: FastAPI) -> None:
    """Map registry errors to JSON error responses.

    Each error kind gets its own status code and ``error_code`` so clients
    can tell "not authorized" from "already reviewed" without parsing text.
    """

    @app.exception_handler(RegistryError)
    async def handle_registry_error(request: Request, exc: RegistryError) -> JSONResponse:
        status_code = status_code_for(exc)
        if isinstance(exc, PersistenceError):
            logger.error(f"{request.method} {request.url.path} failed: {exc.detail or exc}")

        body = ErrorResponse(
            detail=exc.message,
            error_code=exc.error_code,
            errors=exc.field_errors,
        )
        headers: dict[str, Any] = {}
        if isinstance(exc, AuthenticationError):
            headers["WWW-Authenticate"] = "Bearer"
        return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def setup_middleware(app: FastAPI, config: ConfigManager) -> None:
    """Set up all middleware for the application.

    Args:
        app: FastAPI application instance
        config: Configuration manager

    Note:
        This function configures:
        - CORS middleware
        - Request logging
        - Registry error handlers
    """
    setup_cors(app, config)
    setup_request_logging(app, config)
    setup_exception_handlers(app)
