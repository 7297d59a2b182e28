"""
MCP Conductor Configuration System

    from mcp_conductor.config import get_config, load_config

Basic usage:
    config = get_config()
    print(config.orchestration.default_providers)   # ["context7", "memory"]
    print(config.orchestration.max_providers)       # 4
"""

from .loader import (
    ConfigLoader,
    load_config,
    get_config,
    reload_config,
    validate_config_file,
)

from .models import (
    ConductorConfig,
    AppConfig,
    OrchestrationConfig,
    SessionsConfig,
    HistoryConfig,
    PerformanceConfig,
    LogLevel,
)

from ..utils.error_handling import ConfigurationError

__all__ = [
    # Main functions
    "ConfigLoader",
    "get_config",
    "load_config",
    "reload_config",
    "validate_config_file",

    # Exception
    "ConfigurationError",

    # Configuration models
    "ConductorConfig",
    "AppConfig",
    "OrchestrationConfig",
    "SessionsConfig",
    "HistoryConfig",
    "PerformanceConfig",
    "LogLevel",
]
