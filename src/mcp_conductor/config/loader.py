"""
Configuration loading system for MCP Conductor.

This module handles loading, merging, and validating configuration from
multiple sources including YAML files, environment variables, and CLI arguments.
"""

import os
from pathlib import Path
from typing import Optional, Dict, Any, Union
import yaml
from pydantic import ValidationError
from dotenv import load_dotenv

from .models import ConductorConfig
from ..utils.error_handling import ConfigurationError

ENV_PREFIX = "CONDUCTOR_"


class ConfigLoader:
    """
    Configuration loader that supports multiple sources and validation.

    Loading priority (highest to lowest):
    1. Environment variables (CONDUCTOR_<SECTION>_<FIELD>)
    2. CLI-specified config file
    3. Environment-specific config (e.g., development.yaml)
    4. Default configuration file
    5. Built-in defaults (from Pydantic models)
    """

    def __init__(self, load_env_file: bool = True):
        """Initialize the configuration loader."""
        self._config: Optional[ConductorConfig] = None
        self._config_path: Optional[Path] = None

        if load_env_file:
            env_file = Path(".env")
            if env_file.exists():
                load_dotenv(env_file)

    @property
    def config_path(self) -> Optional[Path]:
        return self._config_path

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConductorConfig:
        """
        Load configuration from multiple sources and validate it.

        Args:
            config_path: Optional path to a specific config file

        Returns:
            Validated ConductorConfig instance

        Raises:
            ConfigurationError: If configuration loading or validation fails
        """
        try:
            config_data: Dict[str, Any] = {}

            default_config_path = self._find_default_config()
            if default_config_path:
                config_data = self._deep_merge(config_data, self._load_yaml_file(default_config_path))
                self._config_path = default_config_path

            env_config_path = self._find_environment_config()
            if env_config_path and env_config_path != default_config_path:
                config_data = self._deep_merge(config_data, self._load_yaml_file(env_config_path))
                self._config_path = env_config_path

            if config_path:
                cli_config_path = Path(config_path)
                if not cli_config_path.exists():
                    raise ConfigurationError(f"Specified config file not found: {config_path}")

                config_data = self._deep_merge(config_data, self._load_yaml_file(cli_config_path))
                self._config_path = cli_config_path

            config_data = self._apply_env_overrides(config_data)

            self._config = ConductorConfig(**config_data)
            return self._config

        except ValidationError as e:
            raise ConfigurationError(
                f"Configuration validation failed: {self._format_validation_error(e)}",
                details={"error_type": "validation"}
            ) from e
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {str(e)}") from e

    def get_config(self) -> ConductorConfig:
        """Get the current configuration, loading it if necessary."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def reload_config(self, config_path: Optional[Union[str, Path]] = None) -> ConductorConfig:
        """Reload configuration from sources."""
        self._config = None
        return self.load_config(config_path)

    def _find_default_config(self) -> Optional[Path]:
        """Find the default configuration file."""
        possible_paths = [
            Path("configs/default.yaml"),
            Path("configs/default.yml"),
            Path("config/default.yaml"),
            Path("config/default.yml"),
        ]

        for path in possible_paths:
            if path.exists():
                return path

        return None

    def _find_environment_config(self) -> Optional[Path]:
        """Find environment-specific configuration file."""
        env = os.getenv(f"{ENV_PREFIX}ENV") or os.getenv("ENVIRONMENT")
        if not env:
            return None

        possible_paths = [
            Path(f"configs/{env}.yaml"),
            Path(f"configs/{env}.yml"),
            Path(f"config/{env}.yaml"),
            Path(f"config/{env}.yml"),
        ]

        for path in possible_paths:
            if path.exists():
                return path

        return None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse a YAML configuration file.

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)

            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration file {file_path} must contain a YAML object (dictionary)")

            return data

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {file_path}: {str(e)}") from e
        except IOError as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {str(e)}") from e

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides to configuration.

        The first segment after the prefix names the section and the rest is
        the field: CONDUCTOR_ORCHESTRATION_MAX_PROVIDERS=3 sets
        orchestration.max_providers.
        """
        result = config_data.copy()
        sections = set(ConductorConfig.model_fields)

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue

            section, _, field = env_key[len(ENV_PREFIX):].lower().partition('_')
            if section not in sections or not field:
                continue

            section_data = result.get(section)
            section_data = dict(section_data) if isinstance(section_data, dict) else {}
            section_data[field] = self._convert_env_value(env_value)
            result[section] = section_data

        return result

    def _convert_env_value(self, value: str) -> Any:
        """Convert environment variable string to bool, int, float, list or string."""
        if value.lower() in ('true', 'yes', 'on'):
            return True
        elif value.lower() in ('false', 'no', 'off'):
            return False

        try:
            if '.' not in value:
                return int(value)
            else:
                return float(value)
        except ValueError:
            pass

        if ',' in value:
            return [item.strip() for item in value.split(',')]

        return value

    def _format_validation_error(self, error: ValidationError) -> str:
        """Format a Pydantic validation error for user-friendly display."""
        messages = []
        for err in error.errors():
            location = " -> ".join(str(loc) for loc in err['loc'])
            message = err['msg']
            value = err.get('input', 'N/A')
            messages.append(f"  {location}: {message} (got: {value})")

        return "Validation errors:\n" + "\n".join(messages)


# Global configuration loader instance
_config_loader = ConfigLoader()


def load_config(config_path: Optional[Union[str, Path]] = None) -> ConductorConfig:
    """
    Load configuration from multiple sources.

    Raises:
        ConfigurationError: If configuration loading fails
    """
    return _config_loader.load_config(config_path)


def get_config() -> ConductorConfig:
    """Get the current configuration, loading it if necessary."""
    return _config_loader.get_config()


def reload_config(config_path: Optional[Union[str, Path]] = None) -> ConductorConfig:
    """Reload configuration from sources."""
    return _config_loader.reload_config(config_path)


def validate_config_file(config_path: Union[str, Path]) -> tuple:
    """
    Validate a configuration file without loading it globally.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        temp_loader = ConfigLoader(load_env_file=False)
        temp_loader.load_config(config_path)
        return True, None
    except ConfigurationError as e:
        return False, str(e)
