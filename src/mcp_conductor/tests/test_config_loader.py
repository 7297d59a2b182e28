"""
Test suite for configuration loading system.

This module tests YAML file loading, environment-specific files,
environment variable overrides and error reporting.
"""

import os
import pytest
from pathlib import Path

from mcp_conductor.config.loader import (
    ConfigLoader, validate_config_file, ConfigurationError
)
from mcp_conductor.config.models import ConductorConfig


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run each test from an empty directory with no conductor env vars."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("CONDUCTOR_") or key == "ENVIRONMENT":
            monkeypatch.delenv(key, raising=False)
    return tmp_path


def write_yaml(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class TestConfigLoader:
    """Test the ConfigLoader class functionality."""

    def test_load_builtin_defaults(self, workdir):
        """Test loading configuration when no files exist."""
        loader = ConfigLoader(load_env_file=False)
        config = loader.load_config()

        assert isinstance(config, ConductorConfig)
        assert config.orchestration.max_providers == 4
        assert loader.config_path is None

    def test_default_yaml_is_found(self, workdir):
        write_yaml(workdir / "configs" / "default.yaml", """
orchestration:
  maxProviders: 3
""")
        loader = ConfigLoader(load_env_file=False)
        config = loader.load_config()

        assert config.orchestration.max_providers == 3
        assert loader.config_path == Path("configs/default.yaml")

    def test_cli_file_overrides_default(self, workdir):
        write_yaml(workdir / "configs" / "default.yaml", """
orchestration:
  max_providers: 3
  auto_activation: false
""")
        custom = write_yaml(workdir / "custom.yaml", """
orchestration:
  max_providers: 2
""")
        config = ConfigLoader(load_env_file=False).load_config(str(custom))

        assert config.orchestration.max_providers == 2
        assert config.orchestration.auto_activation is False

    def test_environment_specific_file(self, workdir, monkeypatch):
        write_yaml(workdir / "configs" / "default.yaml", "sessions:\n  max_sessions: 50\n")
        write_yaml(workdir / "configs" / "production.yaml", "sessions:\n  max_sessions: 500\n")
        monkeypatch.setenv("CONDUCTOR_ENV", "production")

        config = ConfigLoader(load_env_file=False).load_config()

        assert config.sessions.max_sessions == 500

    def test_environment_variable_overrides(self, workdir, monkeypatch):
        """Test that environment variables override config file values."""
        custom = write_yaml(workdir / "custom.yaml", "orchestration:\n  max_providers: 2\n")
        monkeypatch.setenv("CONDUCTOR_ORCHESTRATION_MAX_PROVIDERS", "5")
        monkeypatch.setenv("CONDUCTOR_ORCHESTRATION_AUTO_ACTIVATION", "false")
        monkeypatch.setenv("CONDUCTOR_ORCHESTRATION_DEFAULT_PROVIDERS", "context7,github")
        monkeypatch.setenv("CONDUCTOR_PERFORMANCE_REQUEST_TIMEOUT_SECONDS", "2.5")

        config = ConfigLoader(load_env_file=False).load_config(str(custom))

        assert config.orchestration.max_providers == 5
        assert config.orchestration.auto_activation is False
        assert config.orchestration.default_providers == ["context7", "github"]
        assert config.performance.request_timeout_seconds == 2.5

    def test_unknown_env_section_ignored(self, workdir, monkeypatch):
        monkeypatch.setenv("CONDUCTOR_THEME_NAME", "dark")
        config = ConfigLoader(load_env_file=False).load_config()
        assert config == ConductorConfig()

    def test_missing_cli_file(self, workdir):
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigLoader(load_env_file=False).load_config("missing.yaml")

    def test_invalid_yaml(self, workdir):
        bad = write_yaml(workdir / "bad.yaml", "orchestration: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ConfigLoader(load_env_file=False).load_config(str(bad))

    def test_non_mapping_yaml(self, workdir):
        bad = write_yaml(workdir / "list.yaml", "- one\n- two\n")
        with pytest.raises(ConfigurationError, match="YAML object"):
            ConfigLoader(load_env_file=False).load_config(str(bad))

    def test_validation_error_is_readable(self, workdir):
        bad = write_yaml(workdir / "bad.yaml", "orchestration:\n  max_providers: 0\n")

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader(load_env_file=False).load_config(str(bad))

        assert "orchestration -> " in str(exc_info.value)
        assert exc_info.value.details["error_type"] == "validation"

    def test_reload_config(self, workdir):
        path = write_yaml(workdir / "custom.yaml", "orchestration:\n  max_providers: 2\n")
        loader = ConfigLoader(load_env_file=False)
        assert loader.load_config(str(path)).orchestration.max_providers == 2

        path.write_text("orchestration:\n  max_providers: 6\n", encoding="utf-8")
        assert loader.reload_config(str(path)).orchestration.max_providers == 6

    def test_dotenv_file_is_loaded(self, workdir):
        (workdir / ".env").write_text("CONDUCTOR_SESSIONS_MAX_SESSIONS=7\n", encoding="utf-8")

        try:
            config = ConfigLoader().load_config()
        finally:
            os.environ.pop("CONDUCTOR_SESSIONS_MAX_SESSIONS", None)

        assert config.sessions.max_sessions == 7


class TestValidateConfigFile:
    """Test standalone config file validation."""

    def test_valid_file(self, workdir):
        path = write_yaml(workdir / "ok.yaml", "history:\n  max_entries: 10\n")
        assert validate_config_file(path) == (True, None)

    def test_invalid_file(self, workdir):
        path = write_yaml(workdir / "bad.yaml", "history:\n  max_entries: -1\n")
        is_valid, message = validate_config_file(path)

        assert is_valid is False
        assert "max_entries" in message
