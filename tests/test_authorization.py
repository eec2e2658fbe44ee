"""Tests for caller classification and operation gates."""

from typing import Optional

import pytest  # type: ignore[import-not-found]

from endpoint_registry.core.authorization import (
    DEFAULT_ROLE,
    Caller,
    CallerRole,
    classify_caller,
    require_admin,
    require_authenticated,
    resolve_caller,
)
from endpoint_registry.core.errors import (
    AuthenticationError,
    AuthorizationError,
    PersistenceError,
)


class FakeRoleStore:
    """In-memory role store that records lookups."""

    def __init__(self, roles: Optional[dict[str, str]] = None, error: Optional[Exception] = None):
        self.roles = roles or {}
        self.error = error
        self.lookups: list[str] = []

    def get_role(self, user_id: str) -> Optional[str]:
        self.lookups.append(user_id)
        if self.error:
            raise self.error
        return self.roles.get(user_id)


class FakeIdentityProvider:
    """Maps fixed tokens to user ids."""

    def __init__(self, tokens: dict[str, str]):
        self.tokens = tokens

    def resolve(self, token: Optional[str]) -> Optional[str]:
        return self.tokens.get(token) if token else None


class TestClassifyCaller:
    """Test classification from an identity."""

    def test_no_identity_is_unauthenticated(self) -> None:
        store = FakeRoleStore({"alice": "admin"})

        caller = classify_caller(None, store)

        assert caller.role == CallerRole.UNAUTHENTICATED
        assert not caller.is_authenticated
        assert store.lookups == []

    def test_admin_record(self) -> None:
        caller = classify_caller("alice", FakeRoleStore({"alice": "admin"}))

        assert caller == Caller(user_id="alice", role=CallerRole.ADMIN)
        assert caller.is_admin

    def test_user_record(self) -> None:
        caller = classify_caller("bob", FakeRoleStore({"bob": "user"}))

        assert caller.role == CallerRole.USER
        assert not caller.is_admin

    def test_missing_record_uses_default_role(self) -> None:
        caller = classify_caller("carol", FakeRoleStore())

        assert caller.role == DEFAULT_ROLE == CallerRole.USER

    def test_unknown_role_uses_default_role(self) -> None:
        caller = classify_caller("dave", FakeRoleStore({"dave": "superuser"}))

        assert caller.role == DEFAULT_ROLE

    def test_store_failure_never_grants_admin(self) -> None:
        store = FakeRoleStore({"alice": "admin"}, error=PersistenceError(detail="connection refused"))

        caller = classify_caller("alice", store)

        assert caller.role == CallerRole.USER
        assert caller.user_id == "alice"

    @pytest.mark.parametrize(
        "error", [ConnectionError("role backend unreachable"), OSError("disk I/O error"), RuntimeError("boom")]
    )
    def test_any_store_exception_uses_default_role(self, error: Exception) -> None:
        store = FakeRoleStore({"alice": "admin"}, error=error)

        caller = classify_caller("alice", store)

        assert caller == Caller(user_id="alice", role=DEFAULT_ROLE)
        assert store.lookups == ["alice"]

    def test_default_role_is_not_admin(self) -> None:
        assert DEFAULT_ROLE != CallerRole.ADMIN


class TestResolveCaller:
    """Test classification from a session token."""

    def test_valid_token(self) -> None:
        provider = FakeIdentityProvider({"tok-1": "alice"})

        caller = resolve_caller("tok-1", provider, FakeRoleStore({"alice": "admin"}))

        assert caller.is_admin

    def test_unknown_token_is_unauthenticated(self) -> None:
        store = FakeRoleStore({"alice": "admin"})

        caller = resolve_caller("forged", FakeIdentityProvider({"tok-1": "alice"}), store)

        assert caller == Caller.anonymous()
        assert store.lookups == []

    def test_no_token(self) -> None:
        caller = resolve_caller(None, FakeIdentityProvider({}), FakeRoleStore())

        assert caller.role == CallerRole.UNAUTHENTICATED


class TestRequireGates:
    """Test the operation gates."""

    def test_require_authenticated(self) -> None:
        assert require_authenticated(Caller("bob", CallerRole.USER)) == "bob"

        with pytest.raises(AuthenticationError):
            require_authenticated(Caller.anonymous())

    def test_require_admin_accepts_admin(self) -> None:
        assert require_admin(Caller("alice", CallerRole.ADMIN)) == "alice"

    def test_require_admin_rejects_user(self) -> None:
        with pytest.raises(AuthorizationError) as exc_info:
            require_admin(Caller("bob", CallerRole.USER))

        assert not isinstance(exc_info.value, AuthenticationError)
        assert exc_info.value.error_code == "NOT_AUTHORIZED"

    def test_require_admin_rejects_anonymous(self) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            require_admin(Caller.anonymous())

        assert exc_info.value.error_code == "AUTHENTICATION_REQUIRED"
        assert not isinstance(exc_info.value, AuthorizationError)

    def test_role_without_identity_is_not_trusted(self) -> None:
        caller = Caller(user_id=None, role=CallerRole.ADMIN)

        assert not caller.is_admin
        with pytest.raises(AuthenticationError):
            require_admin(caller)
