"""Admin dashboard endpoints."""

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]

from endpoint_registry.api.auth import get_caller
from endpoint_registry.api.dependencies import get_service
from endpoint_registry.api.models import AdminStatsResponse
from endpoint_registry.core.authorization import Caller
from endpoint_registry.core.service import RegistryService

router = APIRouter()


@router.get("/stats", response_model=AdminStatsResponse)
def get_stats(
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> AdminStatsResponse:
    """Dashboard counters (admin).

    Example:
        >>> GET /api/v1/admin/stats
        {
            "pending_requests": 3,
            "total_endpoints": 42,
            "active_endpoints": 40,
            "total_users": 12
        }
    """
    return AdminStatsResponse.from_stats(service.get_admin_stats(caller))
