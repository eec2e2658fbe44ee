"""SQLAlchemy table definitions for the registry store."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (  # type: ignore[import-untyped]
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.orm import (  # type: ignore[import-untyped]
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)

from endpoint_registry.core.models import (
    Endpoint,
    EndpointFields,
    EndpointRequest,
    EndpointStatus,
    Protocol,
    ReviewStatus,
    Tag,
)


def new_id() -> str:
    """Generate a new primary key."""
    return str(uuid.uuid4())


def _enum_check(column: str, enum_cls: type) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


class Base(DeclarativeBase):
    pass


class TagRow(Base):
    """Persistence for :class:`Tag`."""

    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    slug: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    def to_domain(self) -> Tag:
        return Tag(
            id=self.id,
            name=self.name,
            slug=self.slug,
            color=self.color,
            created_at=self.created_at,
        )


class UserRoleRow(Base):
    """Role store record: one role per user."""

    __tablename__ = "user_roles"
    __table_args__ = (CheckConstraint("role IN ('user', 'admin')", name="ck_user_roles_role"),)

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="user")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now
    )


class SubmittedFieldsMixin:
    """Columns shared by requests and endpoints."""

    company: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    protocol: Mapped[str] = mapped_column(String(16), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    ports: Mapped[Optional[list]] = mapped_column(JSON(none_as_null=True), nullable=True)
    icon_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now
    )

    def apply_fields(self, fields: EndpointFields) -> None:
        """Copy submitted field values onto this row."""
        self.company = fields.company
        self.title = fields.title
        self.description = fields.description
        self.protocol = fields.protocol.value
        self.address = fields.address
        self.ports = list(fields.ports) if fields.ports is not None else None
        self.icon_url = fields.icon_url

    def to_fields(self) -> EndpointFields:
        return EndpointFields(
            company=self.company,
            title=self.title,
            description=self.description,
            protocol=Protocol(self.protocol),
            address=self.address,
            ports=list(self.ports) if self.ports is not None else None,
            icon_url=self.icon_url,
        )


class EndpointRequestTagRow(Base):
    """Junction between a request and a tag."""

    __tablename__ = "endpoint_request_tags"

    request_id: Mapped[str] = mapped_column(
        ForeignKey("endpoint_requests.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[str] = mapped_column(
        ForeignKey("tags.id", ondelete="RESTRICT"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    tag: Mapped[TagRow] = relationship(lazy="joined")


class EndpointRequestRow(SubmittedFieldsMixin, Base):
    """Persistence for :class:`EndpointRequest`."""

    __tablename__ = "endpoint_requests"
    __table_args__ = (
        CheckConstraint(_enum_check("review_status", ReviewStatus), name="ck_requests_status"),
        # Reviewer and review time are set together, exactly when reviewed
        CheckConstraint(
            "(review_status = 'pending' AND reviewed_by IS NULL AND reviewed_at IS NULL)"
            " OR (review_status <> 'pending' AND reviewed_by IS NOT NULL"
            " AND reviewed_at IS NOT NULL)",
            name="ck_requests_review_fields",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    review_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ReviewStatus.PENDING.value, index=True
    )
    submitted_by: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    tag_links: Mapped[list[EndpointRequestTagRow]] = relationship(
        cascade="all, delete-orphan", passive_deletes=True, lazy="selectin"
    )

    def to_domain(self) -> EndpointRequest:
        return EndpointRequest(
            id=self.id,
            fields=self.to_fields(),
            submitted_by=self.submitted_by,
            review_status=ReviewStatus(self.review_status),
            reviewed_by=self.reviewed_by,
            reviewed_at=self.reviewed_at,
            tags=[link.tag.to_domain() for link in self.tag_links],
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class EndpointTagRow(Base):
    """Junction between an endpoint and a tag."""

    __tablename__ = "endpoint_tags"

    endpoint_id: Mapped[str] = mapped_column(
        ForeignKey("endpoints.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[str] = mapped_column(
        ForeignKey("tags.id", ondelete="RESTRICT"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    tag: Mapped[TagRow] = relationship(lazy="joined")


class EndpointRow(SubmittedFieldsMixin, Base):
    """Persistence for :class:`Endpoint`."""

    __tablename__ = "endpoints"
    __table_args__ = (
        CheckConstraint(_enum_check("status", EndpointStatus), name="ck_endpoints_status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=EndpointStatus.ACTIVE.value, index=True
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    # At most one endpoint per approved request
    source_request_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("endpoint_requests.id", ondelete="SET NULL"), unique=True, nullable=True
    )

    tag_links: Mapped[list[EndpointTagRow]] = relationship(
        cascade="all, delete-orphan", passive_deletes=True, lazy="selectin"
    )

    def to_domain(self) -> Endpoint:
        return Endpoint(
            id=self.id,
            fields=self.to_fields(),
            created_by=self.created_by,
            status=EndpointStatus(self.status),
            source_request_id=self.source_request_id,
            tags=[link.tag.to_domain() for link in self.tag_links],
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
