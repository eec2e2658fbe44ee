"""Repository for pending endpoint submissions."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select, update  # type: ignore[import-untyped]
from sqlalchemy.orm import Session  # type: ignore[import-untyped]

from endpoint_registry.core.database import Database
from endpoint_registry.core.models import EndpointFields, EndpointRequest, ReviewStatus
from endpoint_registry.core.schema import (
    EndpointRequestRow,
    EndpointRequestTagRow,
    new_id,
)
from endpoint_registry.core.tags import load_tags

logger = logging.getLogger(__name__)


class RequestRepository:
    """CRUD-ish operations over endpoint requests and their tag links.

    The repository trusts its caller to have checked authorization.
    """

    def __init__(self, db: Database):
        self.db = db

    def create(self, fields: EndpointFields, tag_ids: list[str], submitter_id: str) -> EndpointRequest:
        """Create a pending request with its tag associations.

        The request row and its junction rows are written in one
        transaction: if attaching tags fails, the request is rolled back
        and nothing is observable.

        Args:
            fields: Validated field values
            tag_ids: Ids of existing tags (at least one)
            submitter_id: Submitting user id

        Returns:
            Created request with review status pending

        Raises:
            ValidationError: If a tag id does not exist
            PersistenceError: If the store fails
        """
        with self.db.transaction() as session:
            row = EndpointRequestRow(
                id=new_id(),
                submitted_by=submitter_id,
                review_status=ReviewStatus.PENDING.value,
            )
            row.apply_fields(fields)
            session.add(row)
            session.flush()
            self._attach_tags(session, row, tag_ids)
            session.flush()
            request = row.to_domain()
        logger.info(f"Request {request.id} submitted by {submitter_id}")
        return request

    def _attach_tags(self, session: Session, row: EndpointRequestRow, tag_ids: list[str]) -> None:
        for tag in load_tags(session, tag_ids):
            row.tag_links.append(EndpointRequestTagRow(request_id=row.id, tag_id=tag.id, tag=tag))

    def get(self, request_id: str) -> Optional[EndpointRequest]:
        """Get a request by id, or None."""
        with self.db.transaction() as session:
            row = session.get(EndpointRequestRow, request_id)
            return row.to_domain() if row else None

    def list_pending(self) -> list[EndpointRequest]:
        """List pending requests, oldest first (FIFO review queue)."""
        stmt = (
            select(EndpointRequestRow)
            .where(EndpointRequestRow.review_status == ReviewStatus.PENDING.value)
            .order_by(EndpointRequestRow.created_at.asc())
        )
        with self.db.transaction() as session:
            return [row.to_domain() for row in session.scalars(stmt).all()]

    def list_by_submitter(self, submitter_id: str) -> list[EndpointRequest]:
        """List every request of one submitter, newest first."""
        stmt = (
            select(EndpointRequestRow)
            .where(EndpointRequestRow.submitted_by == submitter_id)
            .order_by(EndpointRequestRow.created_at.desc())
        )
        with self.db.transaction() as session:
            return [row.to_domain() for row in session.scalars(stmt).all()]

    def count_pending(self) -> int:
        with self.db.transaction() as session:
            stmt = (
                select(func.count())
                .select_from(EndpointRequestRow)
                .where(EndpointRequestRow.review_status == ReviewStatus.PENDING.value)
            )
            return int(session.scalar(stmt) or 0)

    def delete_if_pending(self, request_id: str, submitter_id: str) -> bool:
        """Delete a request only if it is the submitter's and still pending.

        Args:
            request_id: Request identifier
            submitter_id: User id that must own the request

        Returns:
            True if the request was deleted, False if nothing matched
        """
        with self.db.transaction() as session:
            result = session.execute(
                delete(EndpointRequestRow)
                .where(EndpointRequestRow.id == request_id)
                .where(EndpointRequestRow.submitted_by == submitter_id)
                .where(EndpointRequestRow.review_status == ReviewStatus.PENDING.value)
                .execution_options(synchronize_session=False)
            )
            deleted = result.rowcount > 0
            if deleted:
                # Covers stores that do not cascade junction rows
                session.execute(
                    delete(EndpointRequestTagRow)
                    .where(EndpointRequestTagRow.request_id == request_id)
                    .execution_options(synchronize_session=False)
                )
        if deleted:
            logger.info(f"Request {request_id} deleted by {submitter_id}")
        return deleted

    # Workflow helpers: these run inside a caller-owned transaction

    def load_row(self, session: Session, request_id: str) -> Optional[EndpointRequestRow]:
        return session.get(EndpointRequestRow, request_id, populate_existing=True)

    def transition(
        self,
        session: Session,
        request_id: str,
        to_status: ReviewStatus,
        reviewer_id: str,
        reviewed_at: datetime,
    ) -> bool:
        """Move a request out of pending with a compare-and-swap update.

        Args:
            session: Caller-owned session
            request_id: Request identifier
            to_status: Target status (approved or rejected)
            reviewer_id: Reviewing admin's user id
            reviewed_at: Review timestamp

        Returns:
            True if the request was pending and is now ``to_status``; False if
            it does not exist or was already reviewed
        """
        result = session.execute(
            update(EndpointRequestRow)
            .where(EndpointRequestRow.id == request_id)
            .where(EndpointRequestRow.review_status == ReviewStatus.PENDING.value)
            .values(
                review_status=to_status.value,
                reviewed_by=reviewer_id,
                reviewed_at=reviewed_at,
                updated_at=reviewed_at,
            )
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount == 1)
