"""
MCP Conductor Utilities

This module provides the logging and error handling helpers used throughout
MCP Conductor.
"""

from .logging import (
    setup_logging,
    get_logger,
    log_performance,
    log_startup,
    log_config_info,
    log_shutdown,
)

from .error_handling import (
    ConductorError,
    ConfigurationError,
    ClassificationError,
    PersistenceError,
    ValidationError,
    handle_configuration_operation,
    handle_persistence_operation,
    AsyncStorageMixin,
    validate_input,
)

__all__ = [
    # Logging utilities
    "setup_logging",
    "get_logger",
    "log_performance",
    "log_startup",
    "log_config_info",
    "log_shutdown",

    # Error handling utilities
    "ConductorError",
    "ConfigurationError",
    "ClassificationError",
    "PersistenceError",
    "ValidationError",
    "handle_configuration_operation",
    "handle_persistence_operation",
    "AsyncStorageMixin",
    "validate_input",
]
