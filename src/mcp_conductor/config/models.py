"""
Pydantic models for MCP Conductor configuration validation.

The orchestration and session sections accept both snake_case and the
camelCase option names used by the embedding host (``autoActivation``,
``maxProviders``, ``sessionTimeoutMs`` ...). Unknown keys are ignored.
"""

from typing import List, Optional, Dict, Any
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _expand(path: Optional[str]) -> Optional[str]:
    if path is None or path == "":
        return None
    return str(Path(path).expanduser())


class AppConfig(BaseModel):
    """Application-level configuration settings."""

    name: str = Field(default="MCP Conductor", description="Application display name")
    version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Logging level")
    verbose_logging: bool = Field(default=False, description="Enable verbose debug logging")

    log_file: Optional[str] = Field(default=None, description="JSON log file location, disabled when unset")
    max_log_size_mb: int = Field(default=10, ge=1, le=1000, description="Maximum log file size")
    backup_count: int = Field(default=5, ge=1, le=100, description="Number of backup log files")

    @field_validator('log_file')
    @classmethod
    def expand_path(cls, v):
        """Expand user home directory in paths."""
        return _expand(v)


class OrchestrationConfig(BaseModel):
    """Provider selection settings."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", validate_assignment=True)

    auto_activation: bool = Field(
        default=True, alias="autoActivation",
        description="Activate always-on and conditional default providers"
    )
    default_providers: List[str] = Field(
        default=["context7", "memory"], alias="defaultProviders",
        description="Providers always considered, first one is the fallback provider"
    )
    max_providers: int = Field(
        default=4, ge=1, le=16, alias="maxProviders",
        description="Upper bound on activated providers"
    )
    performance_optimization: bool = Field(
        default=True, alias="performanceOptimization",
        description="Emit --uc and cache hints"
    )

    @field_validator('default_providers', mode='before')
    @classmethod
    def split_provider_list(cls, v):
        """Accept a comma separated string (environment overrides)."""
        if isinstance(v, str):
            v = [item.strip() for item in v.split(',') if item.strip()]
        return v

    @field_validator('default_providers')
    @classmethod
    def require_providers(cls, v):
        if not v:
            raise ValueError("at least one default provider is required")
        return [provider.strip().lower() for provider in v]


class SessionsConfig(BaseModel):
    """Session lifecycle settings."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", validate_assignment=True)

    session_timeout_ms: int = Field(
        default=3_600_000, ge=1000, alias="sessionTimeoutMs",
        description="Idle time after which a session is evicted"
    )
    max_sessions: int = Field(
        default=100, ge=1, le=100_000, alias="maxSessions",
        description="Maximum concurrently tracked sessions"
    )
    sweep_interval_seconds: float = Field(
        default=300.0, ge=0.1, le=86_400.0, description="Periodic sweep interval"
    )
    window_size: int = Field(
        default=20, ge=1, le=1000, description="Recent results kept per session"
    )

    @property
    def session_timeout_seconds(self) -> float:
        return self.session_timeout_ms / 1000.0


class HistoryConfig(BaseModel):
    """Usage history and settings persistence."""

    max_entries: int = Field(default=100, ge=1, le=100_000, description="History cap, oldest evicted first")
    history_file: Optional[str] = Field(default=None, description="JSON history file, in-memory when unset")
    settings_file: Optional[str] = Field(default=None, description="JSON settings overlay file")
    persist_on_append: bool = Field(default=True, description="Schedule a save after every append")

    @field_validator('history_file', 'settings_file')
    @classmethod
    def expand_paths(cls, v):
        """Expand user home directory in paths."""
        return _expand(v)


class PerformanceConfig(BaseModel):
    """Timeouts and performance thresholds."""

    request_timeout_seconds: float = Field(default=5.0, ge=0.01, le=600.0, description="Per-dispatch timeout")
    slow_request_threshold_seconds: float = Field(
        default=5.0, ge=0.1, le=600.0, description="Average time above which sessions are flagged as slow"
    )
    persistence_timeout_seconds: float = Field(default=10.0, ge=0.1, le=600.0, description="Storage call timeout")


# Option names routed to each section by ConductorConfig.with_options
_SECTION_OPTIONS = {
    "orchestration": OrchestrationConfig,
    "sessions": SessionsConfig,
}


class ConductorConfig(BaseModel):
    """Main configuration model."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    app: AppConfig = Field(default_factory=AppConfig)
    orchestration: OrchestrationConfig = Field(default_factory=OrchestrationConfig)
    sessions: SessionsConfig = Field(default_factory=SessionsConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)

    def with_options(self, options: Dict[str, Any]) -> "ConductorConfig":
        """Return a copy with flat host options (camelCase or snake_case) applied.

        Unknown keys are ignored.
        """
        sections: Dict[str, Dict[str, Any]] = {}
        for key, value in options.items():
            for section, model in _SECTION_OPTIONS.items():
                field_name = _resolve_field(model, key)
                if field_name is not None:
                    sections.setdefault(section, {})[field_name] = value
                    break

        data = self.model_dump()
        for section, values in sections.items():
            data[section].update(values)
        return ConductorConfig.model_validate(data)

    def to_options(self) -> Dict[str, Any]:
        """Flat camelCase view of the host-facing options."""
        options = self.orchestration.model_dump(by_alias=True)
        options.update(self.sessions.model_dump(by_alias=True, include={"session_timeout_ms", "max_sessions"}))
        return options


def _resolve_field(model, key: str) -> Optional[str]:
    for name, info in model.model_fields.items():
        if key == name or key == info.alias:
            return name
    return None
