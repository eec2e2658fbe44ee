"""Tests for CLI commands."""

import json
from pathlib import Path
from typing import Any

import pytest  # type: ignore[import-not-found]
from click.testing import CliRunner  # type: ignore[import-not-found]

from endpoint_registry import __version__
from endpoint_registry.cli.config_commands import _convert_value
from endpoint_registry.cli.main import cli
from endpoint_registry.core.authorization import Caller, CallerRole
from endpoint_registry.core.database import Database
from endpoint_registry.core.models import UserRole
from endpoint_registry.core.service import RegistryService


@pytest.fixture  # type: ignore[misc]
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def database_url(temp_dir: Path) -> str:
    return f"sqlite:///{temp_dir / 'cli.db'}"


@pytest.fixture
def invoke(runner: CliRunner, temp_dir: Path, database_url: str):  # type: ignore[no-untyped-def]
    """Invoke the CLI against a temporary config and database."""

    def run(*args: str) -> Any:
        return runner.invoke(
            cli,
            ["--config", str(temp_dir / "config.yml"), "--database-url", database_url, *args],
        )

    return run


@pytest.fixture
def seeded(database_url: str):  # type: ignore[no-untyped-def]
    """Service on the CLI database with an admin, a tag and a pending request."""
    db = Database(database_url)
    db.create_all()
    service = RegistryService(db)
    service.roles.set_role("alice", UserRole.ADMIN)
    tag = service.tags.create("Payments", "payments", "#10b981")
    request = service.submit_request(
        Caller("bob", CallerRole.USER),
        {
            "company": "Stripe",
            "title": "Payments API",
            "protocol": "HTTPS",
            "address": "https://api.stripe.com",
            "tagIds": [tag.id],
        },
    )
    yield service, request
    db.dispose()


class TestCLIBasics:
    """Test top-level CLI behavior."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Endpoint Registry" in result.output
        for command in ["api", "config", "tags", "roles", "endpoints", "requests", "stats"]:
            assert command in result.output

    def test_init_db(self, invoke: Any) -> None:
        result = invoke("init-db")

        assert result.exit_code == 0
        assert "Database ready" in result.output


class TestTagCommands:
    """Test tag management."""

    def test_add_and_list(self, invoke: Any) -> None:
        result = invoke("tags", "add", "Payments", "payments", "--color", "#10b981")
        assert result.exit_code == 0
        assert "Created tag payments" in result.output

        result = invoke("tags", "list", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [t["slug"] for t in data] == ["payments"]
        assert data[0]["color"] == "#10b981"

    def test_list_empty(self, invoke: Any) -> None:
        result = invoke("tags", "list")

        assert result.exit_code == 0
        assert "No tags found" in result.output

    def test_add_invalid_slug(self, invoke: Any) -> None:
        result = invoke("tags", "add", "Payments", "Not A Slug")

        assert result.exit_code == 1
        assert "VALIDATION_ERROR" in result.output


class TestRoleCommands:
    """Test role management."""

    def test_grant_show_revoke(self, invoke: Any) -> None:
        result = invoke("roles", "grant", "alice")
        assert result.exit_code == 0
        assert "alice is now admin" in result.output

        assert "alice: admin" in invoke("roles", "show", "alice").output

        result = invoke("roles", "revoke", "alice")
        assert result.exit_code == 0
        assert "alice: user" in invoke("roles", "show", "alice").output

    def test_show_unknown_user_gets_default_role(self, invoke: Any) -> None:
        result = invoke("roles", "show", "nobody")

        assert "nobody: user" in result.output


class TestReviewCommands:
    """Test the review queue commands."""

    def test_pending_json(self, invoke: Any, seeded: Any) -> None:
        _, request = seeded

        result = invoke("requests", "pending", "--as", "alice", "--json")

        assert result.exit_code == 0
        assert [r["id"] for r in json.loads(result.output)] == [request.id]

    def test_pending_requires_admin(self, invoke: Any, seeded: Any) -> None:
        result = invoke("requests", "pending", "--as", "bob")

        assert result.exit_code == 1
        assert "NOT_AUTHORIZED" in result.output

    def test_approve_then_list(self, invoke: Any, seeded: Any) -> None:
        _, request = seeded

        result = invoke("requests", "approve", request.id, "--as", "alice")
        assert result.exit_code == 0
        assert "Approved: Payments API" in result.output

        listed = json.loads(invoke("endpoints", "list", "-t", "payments", "--json").output)
        assert [e["source_request_id"] for e in listed] == [request.id]

        assert "No pending requests" in invoke("requests", "pending", "--as", "alice").output

    def test_second_review_is_reported(self, invoke: Any, seeded: Any) -> None:
        _, request = seeded
        assert invoke("requests", "reject", request.id, "--as", "alice").exit_code == 0

        result = invoke("requests", "approve", request.id, "--as", "alice")

        assert result.exit_code == 1
        assert "INVALID_STATE" in result.output
        assert "already been reviewed" in result.output

    def test_endpoints_list_empty(self, invoke: Any) -> None:
        result = invoke("endpoints", "list", "-q", "stripe")

        assert result.exit_code == 0
        assert "No endpoints found" in result.output

    def test_stats_json(self, invoke: Any, seeded: Any) -> None:
        result = invoke("stats", "--as", "alice", "--json")

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "pending_requests": 1,
            "total_endpoints": 0,
            "active_endpoints": 0,
            "total_users": 1,
        }


class TestConfigCommands:
    """Test configuration commands."""

    def test_set_and_get(self, invoke: Any) -> None:
        result = invoke("config", "set", "api.port", "9000")
        assert result.exit_code == 0

        result = invoke("config", "get", "api.port")
        assert result.exit_code == 0
        assert result.output.strip() == "9000"

    def test_set_invalid(self, invoke: Any) -> None:
        result = invoke("config", "set", "api.port", "0")

        assert result.exit_code == 1

    def test_get_missing_key(self, invoke: Any) -> None:
        result = invoke("config", "get", "nope.nothing")

        assert result.exit_code == 1

    def test_show_masks_secret(self, invoke: Any) -> None:
        invoke("config", "set", "api.authentication.secret_key", "s3cr3t-value")

        result = invoke("config", "show")

        assert result.exit_code == 0
        assert "s3cr3t-value" not in result.output

    @pytest.mark.parametrize(
        "raw,expected",
        [("true", True), ("no", False), ("null", None), ("42", 42), ("0.5", 0.5), ("text", "text")],
    )
    def test_convert_value(self, raw: str, expected: Any) -> None:
        assert _convert_value(raw) == expected


class TestApiCommands:
    """Test API helper commands."""

    def test_token_create(self, invoke: Any) -> None:
        result = invoke("api", "token", "create", "alice", "--expires", "1")

        assert result.exit_code == 0
        assert "Token created successfully!" in result.output
        assert "User: alice" in result.output

    def test_serve_refuses_when_disabled(self, invoke: Any) -> None:
        result = invoke("api", "serve")

        assert result.exit_code == 1

    def test_serve_uses_database_url(
        self, invoke: Any, database_url: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        served: dict[str, Any] = {}
        monkeypatch.setattr("uvicorn.run", lambda **kwargs: served.update(kwargs))
        assert invoke("config", "set", "api.enabled", "true").exit_code == 0
        invoke("config", "set", "uploads.enabled", "false")

        result = invoke("api", "serve", "--port", "8123")

        assert result.exit_code == 0, result.output
        assert served["port"] == 8123
        assert served["factory"] is False
        assert served["app"].state.database.url == database_url

    def test_serve_rejects_database_url_with_reload(
        self, invoke: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("uvicorn.run", lambda **kwargs: None)
        invoke("config", "set", "api.enabled", "true")

        result = invoke("api", "serve", "--reload")

        assert result.exit_code == 1

    def test_status(self, invoke: Any) -> None:
        result = invoke("api", "status")

        assert result.exit_code == 0
        assert "API Enabled: False" in result.output
