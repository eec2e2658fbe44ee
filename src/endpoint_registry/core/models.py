"""Core data models for the endpoint registry."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class Protocol(str, Enum):
    """Transport protocols an endpoint can be listed under."""

    HTTP = "HTTP"
    HTTPS = "HTTPS"
    GRPC = "gRPC"
    WEBSOCKET = "WebSocket"
    TCP = "TCP"
    UDP = "UDP"


class ReviewStatus(str, Enum):
    """Outcome of admin review for a submitted request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EndpointStatus(str, Enum):
    """Operational visibility of a published endpoint."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    DEPRECATED = "deprecated"


class UserRole(str, Enum):
    """Roles stored in the role store."""

    USER = "user"
    ADMIN = "admin"


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Tag:
    """Category label attachable to endpoints and requests.

    Attributes:
        id: Unique identifier (UUID string)
        name: Display name
        slug: URL-safe unique identifier
        color: Display color (hex)
        created_at: Creation timestamp
    """

    id: str
    name: str
    slug: str
    color: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "color": self.color,
            "created_at": _isoformat(self.created_at),
        }


@dataclass
class EndpointFields:
    """Submitted-field shape shared by requests and endpoints.

    Attributes:
        company: Company offering the API
        title: Endpoint title
        protocol: Transport protocol
        address: Endpoint address (opaque string)
        description: Optional description
        ports: Optional list of port strings (None when not given)
        icon_url: Optional icon URL
    """

    company: str
    title: str
    protocol: Protocol
    address: str
    description: Optional[str] = None
    ports: Optional[list[str]] = None
    icon_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "company": self.company,
            "title": self.title,
            "description": self.description,
            "protocol": self.protocol.value,
            "address": self.address,
            "ports": list(self.ports) if self.ports is not None else None,
            "icon_url": self.icon_url,
        }


@dataclass
class EndpointRequest:
    """A not-yet-reviewed (or reviewed) submission proposing a new endpoint.

    Attributes:
        id: Unique identifier (UUID string)
        fields: Submitted field values
        submitted_by: Submitter user id
        review_status: Review state (pending until reviewed exactly once)
        reviewed_by: Reviewer user id (None while pending)
        reviewed_at: Review timestamp (None while pending)
        tags: Associated tags (order irrelevant)
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    id: str
    fields: EndpointFields
    submitted_by: str
    review_status: ReviewStatus = ReviewStatus.PENDING
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    tags: list[Tag] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        """Check if this request still awaits review."""
        return self.review_status == ReviewStatus.PENDING

    @property
    def tag_ids(self) -> set[str]:
        return {tag.id for tag in self.tags}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {"id": self.id}
        data.update(self.fields.to_dict())
        data.update(
            {
                "review_status": self.review_status.value,
                "submitted_by": self.submitted_by,
                "reviewed_by": self.reviewed_by,
                "reviewed_at": _isoformat(self.reviewed_at),
                "tags": [tag.to_dict() for tag in self.tags],
                "created_at": _isoformat(self.created_at),
                "updated_at": _isoformat(self.updated_at),
            }
        )
        return data


@dataclass
class Endpoint:
    """A published, browsable registry entry.

    Attributes:
        id: Unique identifier (UUID string)
        fields: Listed field values
        created_by: Creator user id (approving admin or direct creator)
        status: Operational state, independent of review status
        source_request_id: Request this endpoint was approved from (None if direct)
        tags: Associated tags (order irrelevant)
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    id: str
    fields: EndpointFields
    created_by: Optional[str]
    status: EndpointStatus = EndpointStatus.ACTIVE
    source_request_id: Optional[str] = None
    tags: list[Tag] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def tag_ids(self) -> set[str]:
        return {tag.id for tag in self.tags}

    @property
    def tag_slugs(self) -> set[str]:
        return {tag.slug for tag in self.tags}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {"id": self.id}
        data.update(self.fields.to_dict())
        data.update(
            {
                "status": self.status.value,
                "created_by": self.created_by,
                "source_request_id": self.source_request_id,
                "tags": [tag.to_dict() for tag in self.tags],
                "created_at": _isoformat(self.created_at),
                "updated_at": _isoformat(self.updated_at),
            }
        )
        return data


@dataclass
class EndpointFilter:
    """Listing filter for published endpoints.

    Attributes:
        status: Operational status to match (defaults to active)
        tag_slugs: Keep endpoints having at least one of these tag slugs
        search_text: Case-insensitive substring matched on title, company or description
    """

    status: EndpointStatus = EndpointStatus.ACTIVE
    tag_slugs: list[str] = field(default_factory=list)
    search_text: Optional[str] = None


@dataclass
class AdminStats:
    """Counters shown on the admin dashboard."""

    pending_requests: int
    total_endpoints: int
    active_endpoints: int
    total_users: int

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return {
            "pending_requests": self.pending_requests,
            "total_endpoints": self.total_endpoints,
            "active_endpoints": self.active_endpoints,
            "total_users": self.total_users,
        }
