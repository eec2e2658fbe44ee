"""Tag endpoints."""

from fastapi import APIRouter, Depends, status  # type: ignore[import-untyped]

from endpoint_registry.api.auth import get_caller
from endpoint_registry.api.dependencies import get_service
from endpoint_registry.api.models import CreateTagRequest, TagResponse
from endpoint_registry.core.authorization import Caller
from endpoint_registry.core.service import RegistryService

router = APIRouter()


@router.get("/", response_model=list[TagResponse])
def list_tags(
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> list[TagResponse]:
    """List all tags ordered by name."""
    return [TagResponse.from_tag(tag) for tag in service.list_tags(caller)]


@router.post("/", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
def create_tag(
    request: CreateTagRequest,
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> TagResponse:
    """Create a tag (admin).

    Example:
        >>> POST /api/v1/tags/
        {"name": "Payments", "slug": "payments", "color": "#10b981"}
    """
    tag = service.create_tag(caller, request.name, request.slug, request.color)
    return TagResponse.from_tag(tag)
