"""Pydantic models for API requests and responses.

Submission bodies (requests and endpoints) are taken as plain JSON objects
and validated by :mod:`endpoint_registry.core.validation`, so they have no
model here.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field  # type: ignore[import-untyped]

from endpoint_registry.core.models import AdminStats, Endpoint, EndpointRequest, Tag

# ============================================================================
# Response Models
# ============================================================================


class TagResponse(BaseModel):
    """Response model for tag."""

    id: str
    name: str
    slug: str
    color: str

    class Config:
        """Pydantic configuration."""

        from_attributes = True

    @classmethod
    def from_tag(cls, tag: Tag) -> "TagResponse":
        return cls(id=tag.id, name=tag.name, slug=tag.slug, color=tag.color)


class EndpointResponse(BaseModel):
    """Response model for a published endpoint."""

    id: str
    company: str
    title: str
    description: Optional[str] = None
    protocol: str
    address: str
    ports: Optional[list[str]] = None
    icon_url: Optional[str] = None
    status: str
    created_by: Optional[str] = None
    source_request_id: Optional[str] = None
    tags: list[TagResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_endpoint(cls, endpoint: Endpoint) -> "EndpointResponse":
        """Create response from Endpoint model.

        Args:
            endpoint: Endpoint instance from core.models

        Returns:
            EndpointResponse instance
        """
        fields = endpoint.fields
        return cls(
            id=endpoint.id,
            company=fields.company,
            title=fields.title,
            description=fields.description,
            protocol=fields.protocol.value,
            address=fields.address,
            ports=fields.ports,
            icon_url=fields.icon_url,
            status=endpoint.status.value,
            created_by=endpoint.created_by,
            source_request_id=endpoint.source_request_id,
            tags=[TagResponse.from_tag(tag) for tag in endpoint.tags],
            created_at=endpoint.created_at,
            updated_at=endpoint.updated_at,
        )


class EndpointRequestResponse(BaseModel):
    """Response model for an endpoint request."""

    id: str
    company: str
    title: str
    description: Optional[str] = None
    protocol: str
    address: str
    ports: Optional[list[str]] = None
    icon_url: Optional[str] = None
    review_status: str
    submitted_by: str
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    tags: list[TagResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_request(cls, request: EndpointRequest) -> "EndpointRequestResponse":
        """Create response from EndpointRequest model."""
        fields = request.fields
        return cls(
            id=request.id,
            company=fields.company,
            title=fields.title,
            description=fields.description,
            protocol=fields.protocol.value,
            address=fields.address,
            ports=fields.ports,
            icon_url=fields.icon_url,
            review_status=request.review_status.value,
            submitted_by=request.submitted_by,
            reviewed_by=request.reviewed_by,
            reviewed_at=request.reviewed_at,
            tags=[TagResponse.from_tag(tag) for tag in request.tags],
            created_at=request.created_at,
            updated_at=request.updated_at,
        )


class ApprovalResponse(BaseModel):
    """Response model for an approval: the reviewed request and its endpoint."""

    request: EndpointRequestResponse
    endpoint: EndpointResponse


class AdminStatsResponse(BaseModel):
    """Response model for dashboard counters."""

    pending_requests: int
    total_endpoints: int
    active_endpoints: int
    total_users: int

    @classmethod
    def from_stats(cls, stats: AdminStats) -> "AdminStatsResponse":
        return cls(**stats.to_dict())


class CallerResponse(BaseModel):
    """Response model for the current caller."""

    user_id: Optional[str] = None
    role: str = Field(..., description="unauthenticated, user or admin")


class UploadResponse(BaseModel):
    """Response model for a stored icon."""

    url: str = Field(..., description="Public URL of the stored icon")


# ============================================================================
# Request Models
# ============================================================================


class CreateTagRequest(BaseModel):
    """Request model for creating a tag.

    Values are checked by the service so that failures carry the same
    field-keyed messages as submissions.
    """

    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="Lowercase alphanumeric with hyphens")
    color: str = Field(..., description="Hex color code, e.g. #3b82f6")


# ============================================================================
# System Models
# ============================================================================


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status (healthy, degraded, unhealthy)")
    timestamp: datetime = Field(..., description="Current server time")
    version: str = Field(..., description="API version")


class StatusResponse(BaseModel):
    """Response model for system status."""

    api_enabled: bool
    cors_enabled: bool
    uploads_enabled: bool
    database_backend: str
    uptime_seconds: float


# ============================================================================
# Authentication Models
# ============================================================================


class TokenResponse(BaseModel):
    """Response model for authentication token."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiry in seconds")


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Machine-readable error code")
    errors: dict[str, list[str]] = Field(
        default_factory=dict, description="Messages keyed by field name"
    )
