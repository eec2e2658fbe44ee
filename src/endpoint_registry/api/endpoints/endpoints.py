"""Endpoint browsing and admin management.

Listing and detail are public. Create, update and delete are admin-only;
the service enforces that and the error handlers map the failures.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status  # type: ignore[import-untyped]

from endpoint_registry.api.auth import get_caller
from endpoint_registry.api.dependencies import get_service
from endpoint_registry.api.models import EndpointResponse
from endpoint_registry.core.authorization import Caller
from endpoint_registry.core.errors import ValidationError
from endpoint_registry.core.models import EndpointFilter, EndpointStatus
from endpoint_registry.core.service import RegistryService

router = APIRouter()


def _parse_status(value: Any) -> Optional[EndpointStatus]:
    if value is None:
        return None
    try:
        return EndpointStatus(value)
    except ValueError:
        choices = ", ".join(s.value for s in EndpointStatus)
        raise ValidationError.for_field("status", f"Status must be one of: {choices}")


@router.get("/", response_model=list[EndpointResponse])
def list_endpoints(
    status_filter: str = Query(EndpointStatus.ACTIVE.value, alias="status"),
    tags: Optional[str] = Query(None, description="Comma-separated tag slugs (match any)"),
    q: Optional[str] = Query(None, description="Search title, company and description"),
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> list[EndpointResponse]:
    """List endpoints.

    Args:
        status_filter: Operational status to list (default active)
        tags: Tag slugs, any of which must be attached
        q: Case-insensitive search text
        caller: Current caller (injected)
        service: Registry service (injected)

    Example:
        >>> GET /api/v1/endpoints/?tags=payments,authentication&q=stripe
    """
    endpoint_filter = EndpointFilter(
        status=_parse_status(status_filter) or EndpointStatus.ACTIVE,
        tag_slugs=[slug.strip() for slug in (tags or "").split(",") if slug.strip()],
        search_text=q,
    )
    endpoints = service.list_endpoints(caller, endpoint_filter)
    return [EndpointResponse.from_endpoint(e) for e in endpoints]


@router.get("/{endpoint_id}", response_model=EndpointResponse)
def get_endpoint(
    endpoint_id: str,
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> EndpointResponse:
    """Get a specific endpoint by ID."""
    return EndpointResponse.from_endpoint(service.get_endpoint(caller, endpoint_id))


@router.post("/", response_model=EndpointResponse, status_code=status.HTTP_201_CREATED)
def create_endpoint(
    body: dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> EndpointResponse:
    """Create an active endpoint directly, skipping review (admin).

    Example:
        >>> POST /api/v1/endpoints/
        {
            "company": "Stripe",
            "title": "Payments API",
            "protocol": "HTTPS",
            "address": "https://api.stripe.com",
            "tagIds": ["..."]
        }
    """
    endpoint = service.create_endpoint_direct(caller, body)
    return EndpointResponse.from_endpoint(endpoint)


@router.put("/{endpoint_id}", response_model=EndpointResponse)
def update_endpoint(
    endpoint_id: str,
    body: dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> EndpointResponse:
    """Replace an endpoint's fields and tags (admin).

    The body has the same shape as a create, plus an optional ``status``.
    """
    new_status = _parse_status(body.get("status"))
    endpoint = service.update_endpoint(caller, endpoint_id, body, status=new_status)
    return EndpointResponse.from_endpoint(endpoint)


@router.delete("/{endpoint_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_endpoint(
    endpoint_id: str,
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> None:
    """Delete an endpoint (admin)."""
    service.delete_endpoint(caller, endpoint_id)
