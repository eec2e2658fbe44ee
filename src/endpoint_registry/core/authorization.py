"""Caller classification for gating registry operations.

Callers are classified once, from an explicit identity, into an immutable
:class:`Caller` value that is passed into every service call. Nothing here
reads ambient request or session state.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from endpoint_registry.core.errors import (
    AuthenticationError,
    AuthorizationError,
)
from endpoint_registry.core.models import UserRole

logger = logging.getLogger(__name__)


class CallerRole(str, Enum):
    """Three-tier privilege level used for all authorization decisions."""

    UNAUTHENTICATED = "unauthenticated"
    USER = "user"
    ADMIN = "admin"


# Role given to an identified caller whose role record is missing, unknown,
# or cannot be read. Must never be ADMIN.
DEFAULT_ROLE = CallerRole.USER


class RoleStore(Protocol):
    """Anything that can answer "what role does user X have"."""

    def get_role(self, user_id: str) -> Optional[str]: ...


class IdentityProvider(Protocol):
    """Anything that can turn an opaque session token into a user id."""

    def resolve(self, token: Optional[str]) -> Optional[str]: ...


@dataclass(frozen=True)
class Caller:
    """Identity and privilege of whoever is invoking an operation.

    Attributes:
        user_id: Authenticated user id (None when unauthenticated)
        role: Caller classification
    """

    user_id: Optional[str] = None
    role: CallerRole = CallerRole.UNAUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None and self.role != CallerRole.UNAUTHENTICATED

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == CallerRole.ADMIN

    @classmethod
    def anonymous(cls) -> "Caller":
        """Caller with no identity."""
        return cls()


def classify_caller(user_id: Optional[str], role_store: RoleStore) -> Caller:
    """Classify a caller from an already-resolved identity.

    Args:
        user_id: Authenticated user id, or None
        role_store: Role store to consult

    Returns:
        Caller with role unauthenticated, user or admin

    Note:
        A missing role record and a failing role store both yield
        ``DEFAULT_ROLE``. The store is consulted only when an identity exists.
    """
    if not user_id:
        return Caller.anonymous()

    try:
        stored = role_store.get_role(user_id)
    except Exception as e:
        logger.warning(f"Role lookup failed for {user_id}, using default role: {getattr(e, 'detail', None) or e}")
        return Caller(user_id=user_id, role=DEFAULT_ROLE)

    if stored is None:
        return Caller(user_id=user_id, role=DEFAULT_ROLE)
    if stored == UserRole.ADMIN.value:
        return Caller(user_id=user_id, role=CallerRole.ADMIN)
    if stored != UserRole.USER.value:
        logger.warning(f"Unknown role {stored!r} for {user_id}, using default role")
    return Caller(user_id=user_id, role=DEFAULT_ROLE)


def resolve_caller(
    token: Optional[str], identity_provider: IdentityProvider, role_store: RoleStore
) -> Caller:
    """Classify a caller from an opaque session token (or none)."""
    return classify_caller(identity_provider.resolve(token), role_store)


def require_authenticated(caller: Caller) -> str:
    """Return the caller's user id or raise.

    Raises:
        AuthenticationError: If the caller has no identity
    """
    if not caller.is_authenticated or caller.user_id is None:
        raise AuthenticationError()
    return caller.user_id


def require_admin(caller: Caller) -> str:
    """Return the admin caller's user id or raise.

    Raises:
        AuthenticationError: If the caller has no identity
        AuthorizationError: If the caller is not an admin
    """
    user_id = require_authenticated(caller)
    if not caller.is_admin:
        raise AuthorizationError()
    return user_id
