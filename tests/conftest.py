"""Pytest configuration and shared fixtures."""

import tempfile
from pathlib import Path
from typing import Any, Callable, Iterable

import pytest  # type: ignore[import-not-found]

from endpoint_registry.core.authorization import Caller, CallerRole
from endpoint_registry.core.database import Database
from endpoint_registry.core.models import Tag, UserRole
from endpoint_registry.core.service import RegistryService
from endpoint_registry.core.uploads import IconStore

ADMIN_ID = "admin-1"
USER_A_ID = "user-a"
USER_B_ID = "user-b"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db(temp_dir: Path):
    """File-backed SQLite database with all tables created."""
    database = Database(f"sqlite:///{temp_dir / 'registry.db'}")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def icon_store(temp_dir: Path) -> IconStore:
    """Icon store writing under the temporary directory."""
    return IconStore(temp_dir / "uploads", "http://testserver/static")


@pytest.fixture
def service(db: Database, icon_store: IconStore) -> RegistryService:
    """Registry service with one admin and one ordinary user on record."""
    svc = RegistryService(db, icon_store=icon_store)
    svc.roles.set_role(ADMIN_ID, UserRole.ADMIN)
    svc.roles.set_role(USER_A_ID, UserRole.USER)
    return svc


@pytest.fixture
def tags(service: RegistryService) -> dict[str, Tag]:
    """Seeded tags keyed by slug."""
    created = [
        service.tags.create("Authentication", "authentication", "#ef4444"),
        service.tags.create("Payments", "payments", "#10b981"),
        service.tags.create("Storage", "storage", "#3b82f6"),
    ]
    return {tag.slug: tag for tag in created}


@pytest.fixture
def admin() -> Caller:
    return Caller(user_id=ADMIN_ID, role=CallerRole.ADMIN)


@pytest.fixture
def user_a() -> Caller:
    return Caller(user_id=USER_A_ID, role=CallerRole.USER)


@pytest.fixture
def user_b() -> Caller:
    return Caller(user_id=USER_B_ID, role=CallerRole.USER)


@pytest.fixture
def anonymous() -> Caller:
    return Caller.anonymous()


@pytest.fixture
def submission(tags: dict[str, Tag]) -> Callable[..., dict[str, Any]]:
    """Factory for valid submission bodies.

    Tags are given by slug; any field can be overridden.
    """

    def make(slugs: Iterable[str] = ("payments",), **overrides: Any) -> dict[str, Any]:
        data: dict[str, Any] = {
            "company": "Stripe",
            "title": "Payments API",
            "description": "Charge cards and manage payouts",
            "protocol": "HTTPS",
            "address": "https://api.stripe.com",
            "ports": "443",
            "tagIds": [tags[slug].id for slug in slugs],
            "iconUrl": "https://stripe.com/favicon.png",
        }
        data.update(overrides)
        return data

    return make
