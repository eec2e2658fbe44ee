"""Approval workflow: pending requests become endpoints or are rejected.

A request leaves ``pending`` exactly once. Approval flips the status and
materializes the endpoint (fields and tags) in a single transaction, so a
reader never sees an approved request without its endpoint, or the
reverse.
"""

import logging
from datetime import datetime
from typing import NoReturn

from sqlalchemy.orm import Session  # type: ignore[import-untyped]

from endpoint_registry.core.authorization import Caller, require_admin
from endpoint_registry.core.database import Database
from endpoint_registry.core.endpoints import EndpointRepository
from endpoint_registry.core.errors import InvalidStateError, NotFoundError
from endpoint_registry.core.models import Endpoint, EndpointRequest, ReviewStatus
from endpoint_registry.core.requests import RequestRepository

logger = logging.getLogger(__name__)


class ApprovalWorkflow:
    """Applies review decisions to pending requests."""

    def __init__(self, db: Database, requests: RequestRepository, endpoints: EndpointRepository):
        self.db = db
        self.requests = requests
        self.endpoints = endpoints

    def approve(self, request_id: str, caller: Caller) -> tuple[EndpointRequest, Endpoint]:
        """Approve a pending request and publish it as an active endpoint.

        The status flip is a compare-and-swap on ``pending`` issued before
        anything is read, so of two concurrent approvals exactly one wins and
        the other sees an already-reviewed request.

        Args:
            request_id: Request identifier
            caller: Reviewing caller (must be admin)

        Returns:
            Tuple of (reviewed request, created endpoint)

        Raises:
            AuthenticationError: If the caller has no identity
            AuthorizationError: If the caller is not an admin
            NotFoundError: If the request does not exist
            InvalidStateError: If the request was already reviewed
            PersistenceError: If the store fails; nothing is changed
        """
        reviewer_id = require_admin(caller)
        reviewed_at = datetime.now()

        with self.db.transaction() as session:
            if not self.requests.transition(
                session, request_id, ReviewStatus.APPROVED, reviewer_id, reviewed_at
            ):
                self._raise_not_pending(session, request_id)

            row = self.requests.load_row(session, request_id)
            if row is None:
                self._raise_not_pending(session, request_id)
            endpoint_row = self.endpoints.insert(
                session,
                row.to_fields(),
                [link.tag_id for link in row.tag_links],
                reviewer_id,
                source_request_id=row.id,
            )
            request = row.to_domain()
            endpoint = endpoint_row.to_domain()

        logger.info(f"Request {request_id} approved by {reviewer_id} as endpoint {endpoint.id}")
        return request, endpoint

    def reject(self, request_id: str, caller: Caller) -> EndpointRequest:
        """Reject a pending request. No endpoint is created.

        Raises:
            AuthenticationError: If the caller has no identity
            AuthorizationError: If the caller is not an admin
            NotFoundError: If the request does not exist
            InvalidStateError: If the request was already reviewed
        """
        reviewer_id = require_admin(caller)
        reviewed_at = datetime.now()

        with self.db.transaction() as session:
            if not self.requests.transition(
                session, request_id, ReviewStatus.REJECTED, reviewer_id, reviewed_at
            ):
                self._raise_not_pending(session, request_id)
            row = self.requests.load_row(session, request_id)
            if row is None:
                self._raise_not_pending(session, request_id)
            request = row.to_domain()

        logger.info(f"Request {request_id} rejected by {reviewer_id}")
        return request

    def _raise_not_pending(self, session: Session, request_id: str) -> NoReturn:
        row = self.requests.load_row(session, request_id)
        if row is None:
            raise NotFoundError("Request not found")
        logger.warning(f"Request {request_id} already {row.review_status}, ignoring review")
        raise InvalidStateError()
