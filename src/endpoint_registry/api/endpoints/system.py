"""System endpoints for health checks, status and the current caller."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]

from endpoint_registry import __version__
from endpoint_registry.api.auth import get_caller
from endpoint_registry.api.dependencies import get_config, get_database, get_service
from endpoint_registry.api.models import CallerResponse, HealthResponse, StatusResponse
from endpoint_registry.core.authorization import Caller
from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.database import Database
from endpoint_registry.core.service import RegistryService

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint.

    Note:
        This endpoint is public (no authentication required).
        Use this for monitoring and load balancer health checks.

    Example:
        >>> GET /api/v1/health
        {
            "status": "healthy",
            "timestamp": "2025-11-16T10:30:00Z",
            "version": "0.4.0"
        }
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )


@router.get("/status", response_model=StatusResponse)
async def get_status(
    config: ConfigManager = Depends(get_config),
    database: Database = Depends(get_database),
    service: RegistryService = Depends(get_service),
) -> StatusResponse:
    """Get system status.

    Example:
        >>> GET /api/v1/status
        {
            "api_enabled": true,
            "cors_enabled": true,
            "uploads_enabled": true,
            "database_backend": "sqlite",
            "uptime_seconds": 3600.5
        }
    """
    return StatusResponse(
        api_enabled=config.get("api.enabled", False),
        cors_enabled=config.get("api.cors.enabled", True),
        uploads_enabled=service.icon_store is not None,
        database_backend=database.engine.dialect.name,
        uptime_seconds=time.time() - _server_start_time,
    )


@router.get("/me", response_model=CallerResponse)
def get_me(
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> CallerResponse:
    """Get the current caller's identity and role.

    Example:
        >>> GET /api/v1/me
        {"user_id": "alice", "role": "admin"}
    """
    return CallerResponse(user_id=caller.user_id, role=service.get_caller_role(caller).value)
