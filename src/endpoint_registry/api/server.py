"""FastAPI application server.

This module contains the main FastAPI application setup and server runner.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]
from fastapi.staticfiles import StaticFiles  # type: ignore[import-untyped]

from endpoint_registry import __version__
from endpoint_registry.api.middleware import setup_middleware
from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.database import Database
from endpoint_registry.core.service import RegistryService

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[ConfigManager] = None, database: Optional[Database] = None
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Optional configuration manager (creates default if None)
        database: Optional database (built from config if None)

    Returns:
        Configured FastAPI application instance

    Example:
        >>> app = create_app()
        >>> # Or with custom config
        >>> config = ConfigManager(Path("config.yml"))
        >>> app = create_app(config)
    """
    if config is None:
        config = ConfigManager()
    if database is None:
        database = Database.from_config(config)
    database.create_all()

    app = FastAPI(
        title="Endpoint Registry API",
        description="Moderated registry of API endpoints",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Shared objects for dependency injection
    app.state.config = config
    app.state.database = database
    app.state.service = RegistryService.from_config(config, database)
    app.state.secret_key = config.ensure_api_secret_key()

    setup_middleware(app, config)

    from endpoint_registry.api.endpoints import (
        admin,
        endpoints,
        requests,
        system,
        tags,
        uploads,
    )

    app.include_router(system.router, prefix="/api/v1", tags=["system"])
    app.include_router(endpoints.router, prefix="/api/v1/endpoints", tags=["endpoints"])
    app.include_router(requests.router, prefix="/api/v1/requests", tags=["requests"])
    app.include_router(tags.router, prefix="/api/v1/tags", tags=["tags"])
    app.include_router(uploads.router, prefix="/api/v1/uploads", tags=["uploads"])
    app.include_router(admin.router, prefix="/api/v1/admin", tags=["admin"])

    icon_store = app.state.service.icon_store
    if icon_store is not None:
        icon_store.storage_dir.mkdir(parents=True, exist_ok=True)
        app.mount("/static", StaticFiles(directory=str(icon_store.storage_dir)), name="static")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Root endpoint - points at the docs."""
        return JSONResponse(
            {
                "message": "Endpoint Registry API",
                "version": __version__,
                "docs": "/docs",
                "health": "/api/v1/health",
            }
        )

    logger.info(f"API ready (database: {database.engine.dialect.name})")
    return app


def run_server(
    host: str = "localhost",
    port: int = 8000,
    reload: bool = False,
    workers: int = 1,
    ssl_certfile: Optional[Path] = None,
    ssl_keyfile: Optional[Path] = None,
    config: Optional[ConfigManager] = None,
    database: Optional[Database] = None,
) -> None:
    """Run the API server using Uvicorn.

    Args:
        host: Host address to bind to
        port: Port number to bind to
        reload: Enable auto-reload for development
        workers: Number of worker processes
        ssl_certfile: Path to SSL certificate file
        ssl_keyfile: Path to SSL key file
        config: Optional configuration manager
        database: Optional database (built from config if None)

    Raises:
        ValueError: If an explicit database is combined with reload or
            multiple workers, which build their apps from config alone

    Note:
        This function blocks until the server is stopped.
        SSL requires both cert_file and key_file to be specified.
    """
    import uvicorn  # type: ignore[import-untyped]

    if config is None:
        config = ConfigManager()

    uvicorn_config: dict[str, Any] = {
        "app": "endpoint_registry.api.server:create_app",
        "factory": True,
        "host": host,
        "port": port,
        "reload": reload,
        "workers": workers if not reload else 1,  # reload only works with 1 worker
        "log_level": config.get("api.advanced.log_level", "info"),
        "access_log": config.get("api.advanced.access_log", True),
    }

    # The import-string factory only sees the default config path
    if not reload and workers == 1:
        uvicorn_config.update({"app": create_app(config, database), "factory": False})
    elif database is not None:
        raise ValueError("An explicit database URL needs a single worker without reload")

    if ssl_certfile and ssl_keyfile:
        uvicorn_config.update(
            {
                "ssl_certfile": str(ssl_certfile),
                "ssl_keyfile": str(ssl_keyfile),
            }
        )

    uvicorn.run(**uvicorn_config)
