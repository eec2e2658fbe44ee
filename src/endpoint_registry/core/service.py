"""Registry service: the operations the UI and API invoke.

Every method takes an explicit :class:`Caller`. Authorization is checked
here, before any repository call, and errors are raised as
:class:`RegistryError` subclasses. Wrap calls with
:func:`endpoint_registry.core.results.run_action` to get structured results
instead.
"""

import logging
from typing import Any, Mapping, Optional

from endpoint_registry.core.authorization import (
    Caller,
    CallerRole,
    require_admin,
    require_authenticated,
)
from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.database import Database
from endpoint_registry.core.endpoints import EndpointRepository
from endpoint_registry.core.errors import NotFoundError, ValidationError
from endpoint_registry.core.models import (
    AdminStats,
    Endpoint,
    EndpointFilter,
    EndpointRequest,
    EndpointStatus,
    Tag,
)
from endpoint_registry.core.requests import RequestRepository
from endpoint_registry.core.roles import RoleRepository
from endpoint_registry.core.tags import TagRepository
from endpoint_registry.core.uploads import IconStore
from endpoint_registry.core.validation import parse_submission
from endpoint_registry.core.workflow import ApprovalWorkflow

logger = logging.getLogger(__name__)


class RegistryService:
    """Facade over repositories and the approval workflow."""

    def __init__(self, db: Database, icon_store: Optional[IconStore] = None):
        """Initialize service.

        Args:
            db: Database to operate on
            icon_store: Icon storage; uploads are refused when None
        """
        self.db = db
        self.icon_store = icon_store
        self.requests = RequestRepository(db)
        self.endpoints = EndpointRepository(db)
        self.tags = TagRepository(db)
        self.roles = RoleRepository(db)
        self.workflow = ApprovalWorkflow(db, self.requests, self.endpoints)

    @classmethod
    def from_config(cls, config: ConfigManager, db: Optional[Database] = None) -> "RegistryService":
        """Create a service wired from configuration."""
        icon_store = IconStore.from_config(config) if config.get("uploads.enabled", True) else None
        return cls(db or Database.from_config(config), icon_store=icon_store)

    # Submissions

    def submit_request(self, caller: Caller, raw: Mapping[str, Any]) -> EndpointRequest:
        """Submit a new endpoint request for review.

        Args:
            caller: Submitting caller (must be authenticated)
            raw: Submission fields (see :func:`validate_submission`)

        Returns:
            Created request, status pending

        Raises:
            AuthenticationError: If the caller has no identity
            ValidationError: If the fields are invalid or a tag does not exist
            PersistenceError: If the store fails
        """
        user_id = require_authenticated(caller)
        fields, tag_ids = parse_submission(raw)
        return self.requests.create(fields, tag_ids, user_id)

    def list_own_submissions(self, caller: Caller) -> list[EndpointRequest]:
        """List the caller's requests, newest first."""
        user_id = require_authenticated(caller)
        return self.requests.list_by_submitter(user_id)

    def delete_own_submission(self, caller: Caller, request_id: str) -> bool:
        """Delete one of the caller's pending requests.

        Deleting a request that is not the caller's, or is no longer pending,
        is a silent no-op.

        Returns:
            True if a request was deleted
        """
        user_id = require_authenticated(caller)
        deleted = self.requests.delete_if_pending(request_id, user_id)
        if not deleted:
            logger.debug(f"Delete of request {request_id} by {user_id} matched nothing")
        return deleted

    # Review

    def list_pending_requests(self, caller: Caller) -> list[EndpointRequest]:
        """List pending requests, oldest first (admin)."""
        require_admin(caller)
        return self.requests.list_pending()

    def approve_request(self, caller: Caller, request_id: str) -> tuple[EndpointRequest, Endpoint]:
        """Approve a pending request (admin). See :meth:`ApprovalWorkflow.approve`."""
        return self.workflow.approve(request_id, caller)

    def reject_request(self, caller: Caller, request_id: str) -> EndpointRequest:
        """Reject a pending request (admin). See :meth:`ApprovalWorkflow.reject`."""
        return self.workflow.reject(request_id, caller)

    # Endpoints

    def create_endpoint_direct(self, caller: Caller, raw: Mapping[str, Any]) -> Endpoint:
        """Create an active endpoint without review (admin).

        Raises:
            AuthorizationError: If the caller is not an admin
            ValidationError: If the fields are invalid
            PersistenceError: If the store fails
        """
        admin_id = require_admin(caller)
        fields, tag_ids = parse_submission(raw)
        return self.endpoints.create(fields, tag_ids, admin_id)

    def update_endpoint(
        self,
        caller: Caller,
        endpoint_id: str,
        raw: Mapping[str, Any],
        status: Optional[EndpointStatus] = None,
    ) -> Endpoint:
        """Replace an endpoint's fields and tags (admin).

        Args:
            caller: Calling admin
            endpoint_id: Endpoint identifier
            raw: Full submission fields
            status: Optional new operational status

        Raises:
            AuthorizationError: If the caller is not an admin
            ValidationError: If the fields are invalid
            NotFoundError: If the endpoint does not exist
            PersistenceError: If the store fails
        """
        require_admin(caller)
        fields, tag_ids = parse_submission(raw)
        return self.endpoints.update(endpoint_id, fields, tag_ids, status=status)

    def delete_endpoint(self, caller: Caller, endpoint_id: str) -> None:
        """Delete an endpoint (admin).

        Raises:
            AuthorizationError: If the caller is not an admin
            NotFoundError: If the endpoint does not exist
        """
        admin_id = require_admin(caller)
        if not self.endpoints.delete(endpoint_id):
            raise NotFoundError("Endpoint not found")
        logger.info(f"Endpoint {endpoint_id} deleted by {admin_id}")

    def list_endpoints(
        self, caller: Caller, endpoint_filter: Optional[EndpointFilter] = None
    ) -> list[Endpoint]:
        """List endpoints for any caller. An empty list is a valid result."""
        return self.endpoints.list_endpoints(endpoint_filter)

    def get_endpoint(self, caller: Caller, endpoint_id: str) -> Endpoint:
        """Get one endpoint.

        Raises:
            NotFoundError: If the endpoint does not exist
        """
        endpoint = self.endpoints.get_by_id(endpoint_id)
        if endpoint is None:
            raise NotFoundError("Endpoint not found")
        return endpoint

    # Tags

    def list_tags(self, caller: Caller) -> list[Tag]:
        return self.tags.list_tags()

    def create_tag(self, caller: Caller, name: str, slug: str, color: str) -> Tag:
        """Create a tag (admin)."""
        require_admin(caller)
        return self.tags.create(name, slug, color)

    # Misc

    def get_admin_stats(self, caller: Caller) -> AdminStats:
        """Dashboard counters (admin)."""
        require_admin(caller)
        return AdminStats(
            pending_requests=self.requests.count_pending(),
            total_endpoints=self.endpoints.count(),
            active_endpoints=self.endpoints.count(EndpointStatus.ACTIVE),
            total_users=self.roles.count_users(),
        )

    def get_caller_role(self, caller: Caller) -> CallerRole:
        return caller.role

    def upload_icon(self, caller: Caller, filename: str, content_type: str, data: bytes) -> str:
        """Store an icon for the caller and return its public URL.

        Raises:
            AuthenticationError: If the caller has no identity
            ValidationError: If uploads are disabled or the file is not acceptable
        """
        user_id = require_authenticated(caller)
        if self.icon_store is None:
            raise ValidationError.for_field("root", "Icon uploads are disabled")
        return self.icon_store.store(user_id, filename, content_type, data)
