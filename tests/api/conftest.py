"""Fixtures for API tests."""

from pathlib import Path
from typing import Any, Callable

import pytest  # type: ignore[import-not-found]
from fastapi.testclient import TestClient  # type: ignore[import-untyped]

from endpoint_registry.api import create_app
from endpoint_registry.api.auth import create_token_for_user
from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.database import Database
from endpoint_registry.core.models import UserRole

ADMIN_ID = "admin-1"
USER_A_ID = "user-a"
USER_B_ID = "user-b"


@pytest.fixture
def test_config(temp_dir: Path) -> ConfigManager:
    """Configuration writing everything under the temporary directory."""
    config = ConfigManager(temp_dir / "config.yml")
    config.set("database.url", f"sqlite:///{temp_dir / 'api.db'}")
    config.set("uploads.storage_dir", str(temp_dir / "uploads"))
    config.set("uploads.public_base_url", "http://testserver/static")
    return config


@pytest.fixture
def database(test_config: ConfigManager):
    database = Database.from_config(test_config)
    yield database
    database.dispose()


@pytest.fixture
def test_app(test_config: ConfigManager, database: Database):  # type: ignore[no-untyped-def]
    """Create a test FastAPI application with one admin on record."""
    app = create_app(test_config, database)
    app.state.service.roles.set_role(ADMIN_ID, UserRole.ADMIN)
    app.state.service.roles.set_role(USER_A_ID, UserRole.USER)
    return app


@pytest.fixture
def client(test_app) -> TestClient:  # type: ignore[no-untyped-def]
    return TestClient(test_app)


def bearer(config: ConfigManager, user_id: str) -> dict[str, str]:
    token = create_token_for_user(config, user_id)["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(test_config: ConfigManager, test_app) -> dict[str, str]:  # type: ignore[no-untyped-def]
    return bearer(test_config, ADMIN_ID)


@pytest.fixture
def user_a_headers(test_config: ConfigManager, test_app) -> dict[str, str]:  # type: ignore[no-untyped-def]
    return bearer(test_config, USER_A_ID)


@pytest.fixture
def user_b_headers(test_config: ConfigManager, test_app) -> dict[str, str]:  # type: ignore[no-untyped-def]
    return bearer(test_config, USER_B_ID)


@pytest.fixture
def tag_ids(test_app) -> dict[str, str]:  # type: ignore[no-untyped-def]
    """Seeded tag ids keyed by slug."""
    service = test_app.state.service
    return {
        tag.slug: tag.id
        for tag in [
            service.tags.create("Authentication", "authentication", "#ef4444"),
            service.tags.create("Payments", "payments", "#10b981"),
            service.tags.create("Storage", "storage", "#3b82f6"),
        ]
    }


@pytest.fixture
def body(tag_ids: dict[str, str]) -> Callable[..., dict[str, Any]]:
    """Factory for valid submission bodies with tags given by slug."""

    def make(slugs: Any = ("payments",), **overrides: Any) -> dict[str, Any]:
        data: dict[str, Any] = {
            "company": "Stripe",
            "title": "Payments API",
            "description": "Charge cards and manage payouts",
            "protocol": "HTTPS",
            "address": "https://api.stripe.com",
            "ports": "443",
            "tagIds": [tag_ids[slug] for slug in slugs],
        }
        data.update(overrides)
        return data

    return make
