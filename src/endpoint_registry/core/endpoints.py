"""Repository for published endpoints."""

import logging
from typing import Optional

from sqlalchemy import delete, func, or_, select  # type: ignore[import-untyped]
from sqlalchemy.orm import Session  # type: ignore[import-untyped]

from endpoint_registry.core.database import Database
from endpoint_registry.core.errors import NotFoundError
from endpoint_registry.core.models import (
    Endpoint,
    EndpointFields,
    EndpointFilter,
    EndpointStatus,
)
from endpoint_registry.core.schema import EndpointRow, EndpointTagRow, TagRow, new_id
from endpoint_registry.core.tags import load_tags

logger = logging.getLogger(__name__)


class EndpointRepository:
    """Create, update, delete and browse published endpoints.

    Authorization is the caller's job; every method here assumes it has
    already been checked.
    """

    def __init__(self, db: Database):
        self.db = db

    def insert(
        self,
        session: Session,
        fields: EndpointFields,
        tag_ids: list[str],
        creator_id: Optional[str],
        source_request_id: Optional[str] = None,
    ) -> EndpointRow:
        """Insert an endpoint and its tag links into a caller-owned session.

        Args:
            session: Open session (the caller commits)
            fields: Validated field values
            tag_ids: Ids of existing tags
            creator_id: Creating user id
            source_request_id: Approved request the endpoint comes from

        Returns:
            The flushed endpoint row

        Raises:
            ValidationError: If a tag id does not exist
        """
        row = EndpointRow(
            id=new_id(),
            status=EndpointStatus.ACTIVE.value,
            created_by=creator_id,
            source_request_id=source_request_id,
        )
        row.apply_fields(fields)
        session.add(row)
        session.flush()
        for tag in load_tags(session, tag_ids):
            row.tag_links.append(EndpointTagRow(endpoint_id=row.id, tag_id=tag.id, tag=tag))
        session.flush()
        return row

    def create(self, fields: EndpointFields, tag_ids: list[str], creator_id: str) -> Endpoint:
        """Create an active endpoint directly, bypassing review.

        Raises:
            ValidationError: If a tag id does not exist
            PersistenceError: If the store fails
        """
        with self.db.transaction() as session:
            endpoint = self.insert(session, fields, tag_ids, creator_id).to_domain()
        logger.info(f"Endpoint {endpoint.id} created by {creator_id}")
        return endpoint

    def update(
        self,
        endpoint_id: str,
        fields: EndpointFields,
        tag_ids: list[str],
        status: Optional[EndpointStatus] = None,
    ) -> Endpoint:
        """Replace an endpoint's fields and tag set.

        Scalars and tags change in one transaction. Tags are reconciled by
        difference, so unchanged associations are left in place.

        Args:
            endpoint_id: Endpoint identifier
            fields: New field values
            tag_ids: New tag set
            status: Optional new operational status

        Returns:
            Updated endpoint

        Raises:
            NotFoundError: If the endpoint does not exist
            ValidationError: If a tag id does not exist
            PersistenceError: If the store fails
        """
        with self.db.transaction() as session:
            row = session.get(EndpointRow, endpoint_id)
            if row is None:
                raise NotFoundError("Endpoint not found")
            row.apply_fields(fields)
            if status is not None:
                row.status = status.value
            self._reconcile_tags(session, row, tag_ids)
            session.flush()
            session.refresh(row)
            endpoint = row.to_domain()
        logger.info(f"Endpoint {endpoint_id} updated")
        return endpoint

    def _reconcile_tags(self, session: Session, row: EndpointRow, tag_ids: list[str]) -> None:
        wanted = load_tags(session, tag_ids)
        wanted_ids = {tag.id for tag in wanted}
        current_ids = {link.tag_id for link in row.tag_links}

        for link in list(row.tag_links):
            if link.tag_id not in wanted_ids:
                row.tag_links.remove(link)
        for tag in wanted:
            if tag.id not in current_ids:
                row.tag_links.append(EndpointTagRow(endpoint_id=row.id, tag_id=tag.id, tag=tag))

    def delete(self, endpoint_id: str) -> bool:
        """Delete an endpoint and its tag links.

        Returns:
            True if an endpoint was deleted, False if none matched
        """
        with self.db.transaction() as session:
            session.execute(
                delete(EndpointTagRow)
                .where(EndpointTagRow.endpoint_id == endpoint_id)
                .execution_options(synchronize_session=False)
            )
            result = session.execute(
                delete(EndpointRow)
                .where(EndpointRow.id == endpoint_id)
                .execution_options(synchronize_session=False)
            )
            deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Endpoint {endpoint_id} deleted")
        return deleted

    def get_by_id(self, endpoint_id: str) -> Optional[Endpoint]:
        """Get an endpoint by id, or None."""
        with self.db.transaction() as session:
            row = session.get(EndpointRow, endpoint_id)
            return row.to_domain() if row else None

    def find_by_source_request(self, request_id: str) -> Optional[Endpoint]:
        """Get the endpoint materialized from a request, or None."""
        with self.db.transaction() as session:
            row = session.scalars(
                select(EndpointRow).where(EndpointRow.source_request_id == request_id)
            ).first()
            return row.to_domain() if row else None

    def list_endpoints(self, endpoint_filter: Optional[EndpointFilter] = None) -> list[Endpoint]:
        """List endpoints matching a filter, newest first.

        Args:
            endpoint_filter: Status, tag slugs (match any) and search text.
                Defaults to all active endpoints.

        Returns:
            Matching endpoints with their tags
        """
        endpoint_filter = endpoint_filter or EndpointFilter()
        stmt = select(EndpointRow).where(EndpointRow.status == endpoint_filter.status.value)

        slugs = [slug for slug in endpoint_filter.tag_slugs if slug]
        if slugs:
            stmt = stmt.where(EndpointRow.tag_links.any(EndpointTagRow.tag.has(TagRow.slug.in_(slugs))))

        search = (endpoint_filter.search_text or "").strip()
        if search:
            stmt = stmt.where(
                or_(
                    EndpointRow.title.icontains(search, autoescape=True),
                    EndpointRow.company.icontains(search, autoescape=True),
                    EndpointRow.description.icontains(search, autoescape=True),
                )
            )

        stmt = stmt.order_by(EndpointRow.created_at.desc())
        with self.db.transaction() as session:
            return [row.to_domain() for row in session.scalars(stmt).all()]

    def count(self, status: Optional[EndpointStatus] = None) -> int:
        """Count endpoints, optionally only those with a given status."""
        stmt = select(func.count()).select_from(EndpointRow)
        if status is not None:
            stmt = stmt.where(EndpointRow.status == status.value)
        with self.db.transaction() as session:
            return int(session.scalar(stmt) or 0)
