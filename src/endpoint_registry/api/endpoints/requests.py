"""Endpoint request submission and review."""

from typing import Any

from fastapi import APIRouter, Body, Depends, status  # type: ignore[import-untyped]

from endpoint_registry.api.auth import get_caller
from endpoint_registry.api.dependencies import get_service
from endpoint_registry.api.models import (
    ApprovalResponse,
    EndpointRequestResponse,
    EndpointResponse,
)
from endpoint_registry.core.authorization import Caller
from endpoint_registry.core.service import RegistryService

router = APIRouter()


@router.post("/", response_model=EndpointRequestResponse, status_code=status.HTTP_201_CREATED)
def submit_request(
    body: dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> EndpointRequestResponse:
    """Submit an endpoint for review.

    Example:
        >>> POST /api/v1/requests/
        {
            "company": "Stripe",
            "title": "Payments API",
            "protocol": "HTTPS",
            "address": "https://api.stripe.com",
            "ports": "443",
            "tagIds": ["..."]
        }
    """
    request = service.submit_request(caller, body)
    return EndpointRequestResponse.from_request(request)


@router.get("/mine", response_model=list[EndpointRequestResponse])
def list_own_submissions(
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> list[EndpointRequestResponse]:
    """List the caller's submissions, newest first."""
    return [EndpointRequestResponse.from_request(r) for r in service.list_own_submissions(caller)]


@router.get("/pending", response_model=list[EndpointRequestResponse])
def list_pending_requests(
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> list[EndpointRequestResponse]:
    """List pending requests, oldest first (admin)."""
    return [EndpointRequestResponse.from_request(r) for r in service.list_pending_requests(caller)]


@router.post("/{request_id}/approve", response_model=ApprovalResponse)
def approve_request(
    request_id: str,
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> ApprovalResponse:
    """Approve a pending request and publish its endpoint (admin).

    Raises:
        409 INVALID_STATE: If the request was already reviewed
    """
    request, endpoint = service.approve_request(caller, request_id)
    return ApprovalResponse(
        request=EndpointRequestResponse.from_request(request),
        endpoint=EndpointResponse.from_endpoint(endpoint),
    )


@router.post("/{request_id}/reject", response_model=EndpointRequestResponse)
def reject_request(
    request_id: str,
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> EndpointRequestResponse:
    """Reject a pending request (admin)."""
    return EndpointRequestResponse.from_request(service.reject_request(caller, request_id))


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_own_submission(
    request_id: str,
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> None:
    """Delete one of the caller's pending requests.

    Note:
        Requests owned by someone else, or already reviewed, are left alone
        and the response is still 204.
    """
    service.delete_own_submission(caller, request_id)
