"""Test suite for config management and store client selection.

This test suite validates:
- Preferences module functionality
- Config loader functionality
- Dynamic config path resolution (no module-level caching)
- Backend and client selection from arguments, environment and config
- CLI commands for config management
"""
import json
from argparse import Namespace
from pathlib import Path

import pytest
import yaml

from secret_version_toolkit.secrets.domains import preferences
from secret_version_toolkit.secrets.domains import config_loader
from secret_version_toolkit.secrets.domains.aws_client import AWSSecretStoreClient
from secret_version_toolkit.secrets.domains.config_loader import ConfigError, ConfigNotFoundError
from secret_version_toolkit.secrets.domains.gcp_client import GCPSecretStoreClient
from secret_version_toolkit.secrets.workflows import secret_operations

STORE_ENV_VARS = ("SECRET_STORE_BACKEND", "AWS_REGION", "AWS_DEFAULT_REGION", "AWS_PROFILE", "GCP_PROJECT")


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Fixture to create a temporary home directory for testing."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)

    for name in STORE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    return fake_home


@pytest.fixture
def temp_config_dir(temp_home):
    """Fixture to create temporary config directory."""
    config_dir = temp_home / ".config" / "secret-version-toolkit"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


@pytest.fixture
def write_config(temp_config_dir):
    """Write a YAML config to the default location and return its path."""
    def _write(content, name="config.yml"):
        config_file = temp_config_dir / name
        with open(config_file, 'w') as f:
            yaml.dump(content, f)
        return config_file
    return _write


@pytest.fixture
def service_account_file(tmp_path):
    sa_file = tmp_path / "sa.json"
    sa_file.write_text(json.dumps({"type": "service_account"}))
    return sa_file


class TestPreferencesModule:
    """Test suite for preferences module."""

    def test_get_preference_returns_none_when_not_set(self, temp_home):
        assert preferences.get_preference("config_path") is None

    def test_set_preference_stores_value(self, temp_home):
        preferences.set_preference("config_path", "/path/to/config.yml")
        assert preferences.get_preference("config_path") == "/path/to/config.yml"

    def test_clear_preference_removes_value(self, temp_home):
        preferences.set_preference("config_path", "/path/to/config.yml")
        preferences.clear_preference("config_path")
        assert preferences.get_preference("config_path") is None

    def test_preferences_persisted_to_json_file(self, temp_home):
        preferences.set_preference("config_path", "/path/to/config.yml")

        with open(temp_home / ".config" / "secret-version-toolkit" / "preferences.json", 'r') as f:
            data = json.load(f)

        assert data["config_path"] == "/path/to/config.yml"

    def test_corrupt_preferences_file_is_ignored(self, temp_config_dir):
        (temp_config_dir / "preferences.json").write_text("{not json")
        assert preferences.get_preference("config_path") is None

    def test_preferences_file_follows_home_directory(self, temp_home, tmp_path, monkeypatch):
        """The preferences location is resolved on every call, like the config path."""
        preferences.set_preference("config_path", "/first/config.yml")

        other_home = tmp_path / "other-home"
        other_home.mkdir()
        monkeypatch.setattr(Path, "home", lambda: other_home)

        assert preferences.preferences_file() == other_home / ".config" / "secret-version-toolkit" / "preferences.json"
        assert preferences.get_preference("config_path") is None

    def test_clear_nonexistent_preference(self, temp_home):
        """Clearing a missing key must not raise."""
        preferences.clear_preference("nonexistent_key")


class TestConfigLoader:
    """Test suite for config_loader module."""

    def test_get_config_path_with_preference_set(self, temp_home, tmp_path):
        custom = tmp_path / "custom.yml"
        custom.write_text("backend: aws\n")
        preferences.set_preference("config_path", str(custom))

        assert config_loader._get_config_path() == str(custom)

    def test_get_config_path_returns_default_location(self, temp_home, write_config):
        default_config = write_config({"backend": "aws", "aws": {"region": "us-east-1"}})
        assert config_loader._get_config_path() == str(default_config)

    def test_preference_with_nonexistent_path_falls_back(self, temp_home, write_config, tmp_path):
        preferences.set_preference("config_path", str(tmp_path / "missing.yml"))
        default_config = write_config({"backend": "aws", "aws": {"region": "us-east-1"}})

        assert config_loader._get_config_path() == str(default_config)

    def test_missing_config_raises(self, temp_home):
        with pytest.raises(ConfigNotFoundError) as exc_info:
            config_loader.load_config()

        assert "Configuration file not found" in str(exc_info.value)

    def test_config_path_not_cached_at_module_level(self, temp_home, tmp_path):
        """Changing the preference takes effect without a restart."""
        config1 = tmp_path / "config1.yml"
        config2 = tmp_path / "config2.yml"
        config1.write_text(yaml.dump({"backend": "aws", "aws": {"region": "us-east-1"}}))
        config2.write_text(yaml.dump({"backend": "aws", "aws": {"region": "eu-west-1"}}))

        preferences.set_preference("config_path", str(config1))
        assert config_loader.load_config()["aws"]["region"] == "us-east-1"

        preferences.set_preference("config_path", str(config2))
        assert config_loader.load_config()["aws"]["region"] == "eu-west-1"

    def test_backend_defaults_to_aws(self, temp_home, write_config):
        write_config({"aws": {"region": "us-east-1"}})
        assert config_loader.load_config()["backend"] == "aws"

    def test_unsupported_backend(self, temp_home, write_config):
        write_config({"backend": "vault"})

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "Unsupported backend" in str(exc_info.value)

    def test_backend_settings_are_optional_in_file(self, temp_home, write_config):
        """Region and project id may come from the environment instead."""
        write_config({"backend": "gcp"})

        assert config_loader.load_config()["backend"] == "gcp"

    def test_backend_section_must_be_mapping(self, temp_home, write_config):
        write_config({"backend": "aws", "aws": "us-east-1"})

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "'aws'" in str(exc_info.value)
        assert "mapping" in str(exc_info.value)

    def test_service_account_file_must_exist(self, temp_home, write_config):
        write_config({
            "backend": "gcp",
            "gcp": {"project_id": "test-project"},
            "authentication": {"type": "service_account", "service_account_path": "/nonexistent/sa.json"},
        })

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "Service account file not found" in str(exc_info.value)

    def test_unsupported_auth_type(self, temp_home, write_config, service_account_file):
        write_config({
            "backend": "gcp",
            "gcp": {"project_id": "test-project"},
            "authentication": {"type": "oauth2", "service_account_path": str(service_account_file)},
        })

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "Unsupported authentication type" in str(exc_info.value)

    def test_load_config_success(self, temp_home, write_config, service_account_file):
        write_config({
            "backend": "gcp",
            "gcp": {"project_id": "test-project"},
            "authentication": {"type": "service_account", "service_account_path": str(service_account_file)},
        })

        config = config_loader.load_config()

        assert config["backend"] == "gcp"
        assert config["gcp"]["project_id"] == "test-project"


class TestEdgeCases:
    """Malformed config files."""

    def test_empty_config_file(self, temp_config_dir):
        (temp_config_dir / "config.yml").write_text("")

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "empty" in str(exc_info.value).lower()

    def test_invalid_yaml_config(self, temp_config_dir):
        (temp_config_dir / "config.yml").write_text("invalid: yaml: content: [")

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "parse" in str(exc_info.value).lower()

    def test_non_mapping_config(self, temp_config_dir):
        (temp_config_dir / "config.yml").write_text("- just\n- a list\n")

        with pytest.raises(ConfigError) as exc_info:
            config_loader.load_config()

        assert "mapping" in str(exc_info.value)


class TestStoreClientSelection:
    """build_store_client() picks the backend and its settings."""

    def test_defaults_to_aws_without_config(self, temp_home, monkeypatch):
        monkeypatch.setenv("AWS_REGION", "us-west-2")

        client = secret_operations.build_store_client()

        assert isinstance(client, AWSSecretStoreClient)
        assert client.region_name == "us-west-2"

    def test_environment_selects_gcp(self, temp_home, monkeypatch):
        monkeypatch.setenv("SECRET_STORE_BACKEND", "GCP")
        assert isinstance(secret_operations.build_store_client(), GCPSecretStoreClient)

    def test_argument_beats_environment(self, temp_home, monkeypatch):
        monkeypatch.setenv("SECRET_STORE_BACKEND", "gcp")
        monkeypatch.setenv("AWS_DEFAULT_REGION", "ap-south-1")

        client = secret_operations.build_store_client("aws")

        assert isinstance(client, AWSSecretStoreClient)
        assert client.region_name == "ap-south-1"

    def test_config_supplies_backend_and_region(self, temp_home, write_config):
        write_config({"backend": "aws", "aws": {"region": "eu-central-1", "profile": "ops"}})

        client = secret_operations.build_store_client()

        assert client.region_name == "eu-central-1"
        assert client.profile_name == "ops"

    def test_missing_region_raises(self, temp_home):
        with pytest.raises(ConfigError):
            secret_operations.build_store_client("aws")

    def test_unknown_backend_raises(self, temp_home):
        with pytest.raises(ConfigError):
            secret_operations.build_store_client("azure")

    def test_gcp_config_with_project_from_environment(self, temp_home, monkeypatch, write_config):
        write_config({"backend": "gcp"})
        monkeypatch.setenv("GCP_PROJECT", "env-project")

        client = secret_operations.build_store_client()

        assert isinstance(client, GCPSecretStoreClient)
        assert client.get_project_id() == "env-project"

    def test_broken_config_is_not_ignored(self, temp_home, monkeypatch, temp_config_dir):
        (temp_config_dir / "config.yml").write_text("backend: gcp\ngcp: [unclosed\n")
        monkeypatch.setenv("AWS_REGION", "us-east-1")

        with pytest.raises(ConfigError) as exc_info:
            secret_operations.build_store_client()

        assert "parse" in str(exc_info.value).lower()

    def test_invalid_config_backend_is_not_ignored(self, temp_home, monkeypatch, write_config):
        write_config({"backend": "vault"})
        monkeypatch.setenv("AWS_REGION", "us-east-1")

        with pytest.raises(ConfigError) as exc_info:
            secret_operations.build_store_client()

        assert "Unsupported backend" in str(exc_info.value)

    def test_region_from_environment_profile_from_config(self, temp_home, monkeypatch, write_config):
        write_config({"backend": "aws", "aws": {"profile": "ops"}})
        monkeypatch.setenv("AWS_REGION", "us-west-2")

        client = secret_operations.build_store_client()

        assert client.region_name == "us-west-2"
        assert client.profile_name == "ops"

    def test_aws_config_without_region_raises(self, temp_home, write_config):
        write_config({"backend": "aws", "aws": {"profile": "ops"}})

        with pytest.raises(ConfigError) as exc_info:
            secret_operations.build_store_client()

        assert "AWS region not found" in str(exc_info.value)


class TestCLICommands:
    """Config management CLI commands."""

    def test_config_set_path_validates_file_exists(self, temp_home, tmp_path):
        from secret_version_toolkit.cli.main import cmd_config_set_path

        args = Namespace(path=str(tmp_path / "nonexistent.yml"))

        with pytest.raises(SystemExit) as exc_info:
            cmd_config_set_path(args)

        assert exc_info.value.code == 1

    def test_config_set_path_stores_absolute_path(self, temp_home, write_config):
        from secret_version_toolkit.cli.main import cmd_config_set_path

        config_file = write_config({"backend": "aws", "aws": {"region": "us-east-1"}}, name="other.yml")
        cmd_config_set_path(Namespace(path=str(config_file)))

        assert preferences.get_preference("config_path") == str(config_file.resolve())

    def test_config_show_with_preference(self, temp_home, write_config, capsys):
        from secret_version_toolkit.cli.main import cmd_config_show

        config_file = write_config({"backend": "aws", "aws": {"region": "us-east-1"}}, name="other.yml")
        preferences.set_preference("config_path", str(config_file))

        cmd_config_show(Namespace())

        captured = capsys.readouterr()
        assert str(config_file) in captured.out
        assert "preference" in captured.out.lower()

    def test_config_show_without_preference(self, temp_home, capsys):
        from secret_version_toolkit.cli.main import cmd_config_show

        cmd_config_show(Namespace())

        captured = capsys.readouterr()
        assert "config.yml" in captured.out
        assert "default (file not found)" in captured.out

    def test_config_clear_removes_preference(self, temp_home, write_config, capsys):
        from secret_version_toolkit.cli.main import cmd_config_clear

        config_file = write_config({"backend": "aws", "aws": {"region": "us-east-1"}})
        preferences.set_preference("config_path", str(config_file))

        cmd_config_clear(Namespace())

        assert preferences.get_preference("config_path") is None
        assert "cleared" in capsys.readouterr().out.lower()
