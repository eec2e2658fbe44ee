"""Tests for configuration manager."""

import tempfile
from pathlib import Path

import pytest  # type: ignore[import-not-found]
import yaml  # type: ignore[import-untyped]

from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.database import default_database_url


@pytest.fixture
def temp_config_path():
    """Create a temporary config file path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "config.yml"


class TestConfigManager:
    """Test ConfigManager."""

    def test_initialization_creates_default_config(self, temp_config_path: Path) -> None:
        """Test that initialization creates default configuration."""
        assert not temp_config_path.exists()

        config = ConfigManager(temp_config_path)

        assert temp_config_path.exists()
        assert config.get("version") == "1.0"
        assert config.get("general.data_dir") == "~/.endpoint-registry/data"
        assert config.get("api.enabled") is False
        assert config.get("uploads.enabled") is True

    def test_load_existing_config(self, temp_config_path: Path) -> None:
        """Test loading existing configuration."""
        config_data = {
            "version": "1.0",
            "database": {"url": "sqlite:////srv/registry.db", "echo": True},
            "api": {"enabled": True, "port": 9000},
        }

        with open(temp_config_path, "w") as f:
            yaml.dump(config_data, f)

        config = ConfigManager(temp_config_path)

        assert config.get("database.url") == "sqlite:////srv/registry.db"
        assert config.get("database.echo") is True
        assert config.get("api.enabled") is True
        assert config.get("api.port") == 9000

    def test_merge_with_defaults(self, temp_config_path: Path) -> None:
        """Test that partial config is merged with defaults."""
        config_data = {
            "version": "1.0",
            "api": {"cors": {"enabled": False}},
        }

        with open(temp_config_path, "w") as f:
            yaml.dump(config_data, f)

        config = ConfigManager(temp_config_path)

        assert config.get("api.cors.enabled") is False
        assert config.get("api.cors.origins") == ["http://localhost:3000", "http://localhost:5173"]
        assert config.get("api.port") == 8000
        assert config.get("uploads.bucket") == "endpoint-icons"

    def test_get_nonexistent_key_returns_default(self, temp_config_path: Path) -> None:
        """Test getting nonexistent key returns default."""
        config = ConfigManager(temp_config_path)

        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "default") == "default"
        assert config.get("general.nonexistent", 42) == 42
        assert config.get("database.url", "sqlite://") == "sqlite://"

    def test_set_value_persists(self, temp_config_path: Path) -> None:
        """Test setting configuration values."""
        config = ConfigManager(temp_config_path)

        config.set("api.port", 8080)

        assert config.get("api.port") == 8080
        assert ConfigManager(temp_config_path).get("api.port") == 8080

    def test_set_creates_missing_keys(self, temp_config_path: Path) -> None:
        """Test that set creates missing intermediate keys."""
        config = ConfigManager(temp_config_path)

        config.set("custom.nested.value", "test")

        assert config.get("custom.nested.value") == "test"

    def test_validate_valid_config(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        assert config.validate() is True

    def test_port_range(self, temp_config_path: Path) -> None:
        """Test API port range validation."""
        config = ConfigManager(temp_config_path)

        config.set("api.port", 1)
        config.set("api.port", 65535)

        with pytest.raises(ValueError, match="Invalid configuration"):
            config.set("api.port", 0)
        with pytest.raises(ValueError, match="Invalid configuration"):
            config.set("api.port", 65536)

    def test_log_level_validation(self, temp_config_path: Path) -> None:
        """Test logging level enum validation."""
        config = ConfigManager(temp_config_path)

        for level in ["DEBUG", "INFO", "WARNING", "ERROR"]:
            config.set("logging.level", level)
            assert config.get("logging.level") == level

        with pytest.raises(ValueError):
            config.set("logging.level", "TRACE")

    def test_bucket_name_validation(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        config.set("uploads.bucket", "team-icons")
        with pytest.raises(ValueError):
            config.set("uploads.bucket", "Team Icons")

    def test_token_expiry_range(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        config.set("api.authentication.token_expiry_hours", 8760)
        with pytest.raises(ValueError):
            config.set("api.authentication.token_expiry_hours", 0)

    def test_reset_to_defaults(self, temp_config_path: Path) -> None:
        """Test resetting configuration to defaults."""
        config = ConfigManager(temp_config_path)
        config.set("api.port", 9000)
        config.set("uploads.enabled", False)

        config.reset()

        assert config.get("api.port") == 8000
        assert config.get("uploads.enabled") is True

    def test_to_dict_is_copy(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        config_dict = config.to_dict()
        assert config_dict["version"] == "1.0"
        assert config_dict["uploads"]["bucket"] == "endpoint-icons"

        config_dict["version"] = "9.9"
        assert config.get("version") == "1.0"

    def test_get_all_keys(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        keys = config.get_all_keys()

        assert "version" in keys
        assert "database.url" in keys
        assert "uploads.max_file_size" in keys
        assert "api.authentication.secret_key" in keys
        assert "api.advanced.slow_request_seconds" in keys

    def test_corrupted_config_creates_backup(self, temp_config_path: Path) -> None:
        """Test that corrupted config is backed up and defaults used."""
        config_data = {
            "version": "1.0",
            "api": {"port": 70000},
        }

        with open(temp_config_path, "w") as f:
            yaml.dump(config_data, f)

        backup_path = temp_config_path.with_suffix(".yml.backup")

        with pytest.raises(ValueError, match="Config validation failed"):
            ConfigManager(temp_config_path)

        assert backup_path.exists()
        with open(temp_config_path) as f:
            new_config = yaml.safe_load(f)
        assert new_config["api"]["port"] == 8000

    def test_config_file_format(self, temp_config_path: Path) -> None:
        """Test that config file is saved in block-style YAML."""
        config = ConfigManager(temp_config_path)
        config.set("api.enabled", True)

        content = temp_config_path.read_text()

        parsed = yaml.safe_load(content)
        assert parsed["version"] == "1.0"
        assert parsed["api"]["enabled"] is True
        assert "enabled: true" in content

    def test_get_path_expands_user(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        path = config.get_path("uploads.storage_dir", "~/fallback")

        assert path == Path("~/.endpoint-registry/uploads").expanduser()
        assert config.get_path("missing.dir", "~/fallback") == Path("~/fallback").expanduser()

    def test_ensure_api_secret_key(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)
        assert config.get("api.authentication.secret_key") is None

        key = config.ensure_api_secret_key()

        assert len(key) >= 32
        assert config.ensure_api_secret_key() == key
        assert ConfigManager(temp_config_path).get("api.authentication.secret_key") == key


class TestDefaultDatabaseUrl:
    """Test database URL resolution."""

    def test_explicit_url(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)
        config.set("database.url", "postgresql://registry@db/registry")

        assert default_database_url(config) == "postgresql://registry@db/registry"

    def test_sqlite_file_in_data_dir(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)
        data_dir = temp_config_path.parent / "data"
        config.set("general.data_dir", str(data_dir))

        url = default_database_url(config)

        assert url == f"sqlite:///{data_dir / 'registry.db'}"
        assert data_dir.is_dir()
