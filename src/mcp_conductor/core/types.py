"""
Shared types for provider orchestration.

Catalog records are frozen dataclasses. ``ActivationConfig`` is a tagged
union of three dataclasses distinguished by their ``mode``; consumers are
expected to handle each case.
"""

import re
from collections import deque
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Deque, Dict, FrozenSet, List, Optional, Tuple, Union


class PriorityClass(Enum):
    """Provider priority; lower rank wins ties."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 0, "medium": 1, "low": 2}[self.value]


class LoadTime(Enum):
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"


class SelectionStrategy(Enum):
    """How a super-command picks its providers."""

    EXPLICIT = "explicit"
    AUTO_DETECT = "auto-detect"
    HISTORY_BASED = "history-based"


class ActivationMode(Enum):
    SUPER_COMMAND = "super-command"
    AUTO_OPTIMIZED = "auto-optimized"
    FALLBACK = "fallback"


class SessionState(Enum):
    """Session lifecycle: NEW -> ACTIVE -> (IDLE_TIMEOUT | CAPACITY_EVICTED) -> DESTROYED."""

    NEW = "new"
    ACTIVE = "active"
    IDLE_TIMEOUT = "idle_timeout"
    CAPACITY_EVICTED = "capacity_evicted"
    DESTROYED = "destroyed"


# ---------------------------------------------------------------------------
# Catalog records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CapabilityProvider:
    """A named provider the dispatcher can activate."""

    id: str
    name: str
    capabilities: FrozenSet[str]
    activation_flags: Tuple[str, ...]
    description: str
    priority: PriorityClass
    load_time: LoadTime
    localized_name: str = ""

    @property
    def canonical_flag(self) -> str:
        return self.activation_flags[0]


@dataclass(frozen=True)
class WorkTypePattern:
    name: str
    keywords: Tuple[str, ...]
    file_patterns: Tuple[str, ...]
    recommended_providers: Tuple[str, ...]
    confidence: float


@dataclass(frozen=True)
class SuperCommand:
    """A user-facing shortcut that bypasses scoring."""

    token: str
    name: str
    description: str
    strategy: SelectionStrategy
    providers: Tuple[str, ...] = ()
    flags: Tuple[str, ...] = ()
    options: Tuple[Tuple[str, bool], ...] = ()

    @property
    def is_dynamic(self) -> bool:
        return self.strategy is not SelectionStrategy.EXPLICIT

    def options_dict(self) -> Dict[str, bool]:
        return dict(self.options)


@dataclass(frozen=True)
class ProjectProfile:
    name: str
    indicators: Tuple[str, ...]
    recommended_providers: Tuple[str, ...]
    confidence: float


@dataclass(frozen=True)
class NaturalLanguageRule:
    pattern: "re.Pattern[str]"
    command: str
    confidence: float


# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RequestContext:
    """Everything scoring may look at for one request."""

    user_input: str = ""
    files: Tuple[str, ...] = ()
    project_type: Optional[str] = None
    project_profile: str = "general"
    project_complexity: float = 0.0
    file_count: int = 0
    task_type: str = "general"

    is_analysis_task: bool = False
    is_complex_debugging: bool = False
    needs_file_operations: bool = False
    is_project_structure_task: bool = False
    is_refactoring_task: bool = False
    has_git_files: bool = False
    is_version_control_task: bool = False
    is_collaboration_task: bool = False
    has_database_files: bool = False
    is_database_task: bool = False

    is_complex_task: bool = False
    needs_parallel_processing: bool = False
    is_large_project: bool = False

    extras: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


# ---------------------------------------------------------------------------
# Classification results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SuperCommandIntent:
    command: SuperCommand
    resolved_by: str  # "command", "alias" or "natural_language"


@dataclass(frozen=True)
class UnknownCommandIntent:
    token: str


@dataclass(frozen=True)
class WorkTypeMatch:
    type: str
    score: float
    confidence: float
    final_score: float


@dataclass(frozen=True)
class WorkTypeIntent:
    ranked: Tuple[WorkTypeMatch, ...] = ()

    @property
    def top(self) -> Optional[WorkTypeMatch]:
        return self.ranked[0] if self.ranked else None


Intent = Union[SuperCommandIntent, UnknownCommandIntent, WorkTypeIntent]


# ---------------------------------------------------------------------------
# Selection and activation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RankedProvider:
    provider_id: str
    score: float
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"provider_id": self.provider_id, "score": round(self.score, 4), "reason": self.reason}


@dataclass(frozen=True)
class SelectionResult:
    ranking: Tuple[RankedProvider, ...]
    activation: Tuple[RankedProvider, ...]
    source: str = "work-type"

    @property
    def provider_ids(self) -> List[str]:
        return [ranked.provider_id for ranked in self.activation]


@dataclass(frozen=True)
class PerformanceEstimate:
    estimated_time: str
    resource_usage: str
    cache_effective: bool
    parallel_capable: bool


@dataclass(frozen=True)
class CacheHint:
    provider_id: str
    capabilities: Tuple[str, ...]


@dataclass(frozen=True)
class _ActivationBase:
    providers: Tuple[str, ...]
    flags: Tuple[str, ...]
    cache_hints: Tuple[CacheHint, ...]
    performance: PerformanceEstimate
    rationale: str
    user_friendly_command: str

    mode: ClassVar[ActivationMode]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        return data


@dataclass(frozen=True)
class SuperCommandActivation(_ActivationBase):
    command: str = ""
    name: str = ""
    description: str = ""
    options: Tuple[Tuple[str, bool], ...] = ()

    mode: ClassVar[ActivationMode] = ActivationMode.SUPER_COMMAND


@dataclass(frozen=True)
class AutoOptimizedActivation(_ActivationBase):
    confidence: float = 0.0

    mode: ClassVar[ActivationMode] = ActivationMode.AUTO_OPTIMIZED


@dataclass(frozen=True)
class FallbackActivation(_ActivationBase):
    reason: str = ""

    mode: ClassVar[ActivationMode] = ActivationMode.FALLBACK


ActivationConfig = Union[SuperCommandActivation, AutoOptimizedActivation, FallbackActivation]


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FeedbackRecord:
    rating: int
    comments: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


@dataclass(frozen=True)
class UsageHistoryEntry:
    """One completed dispatch."""

    timestamp: str
    request_id: str
    session_id: str
    user_input: str
    providers: Tuple[str, ...]
    flags: Tuple[str, ...]
    mode: str
    success: bool = True
    feedback: Optional[FeedbackRecord] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "timestamp": self.timestamp,
            "request_id": self.request_id,
            "session_id": self.session_id,
            "user_input": self.user_input,
            "providers": list(self.providers),
            "flags": list(self.flags),
            "mode": self.mode,
            "success": self.success,
            "feedback": asdict(self.feedback) if self.feedback else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UsageHistoryEntry":
        """Create from dictionary."""
        feedback = data.get("feedback")
        return cls(
            timestamp=data["timestamp"],
            request_id=data["request_id"],
            session_id=data.get("session_id", ""),
            user_input=data.get("user_input", ""),
            providers=tuple(data.get("providers", ())),
            flags=tuple(data.get("flags", ())),
            mode=data.get("mode", ActivationMode.AUTO_OPTIMIZED.value),
            success=bool(data.get("success", True)),
            feedback=FeedbackRecord(**feedback) if feedback else None,
        )


@dataclass(frozen=True)
class PersistenceResult:
    """Outcome of a storage call; failures are values, not exceptions."""

    ok: bool
    operation: str
    error: Optional[str] = None
    entries: int = 0


# ---------------------------------------------------------------------------
# Sessions and dispatch
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SessionResultSummary:
    request_id: str
    providers: Tuple[str, ...]
    mode: str
    success: bool
    elapsed_ms: float


@dataclass
class Session:
    """Mutable session record, owned by the SessionManager."""

    id: str
    created_at: float
    last_accessed: float
    window_size: int = 20
    request_count: int = 0
    total_time_ms: float = 0.0
    state: SessionState = SessionState.NEW
    preferences: Dict[str, Any] = field(default_factory=dict)
    recent_results: Deque[SessionResultSummary] = field(default_factory=deque)

    def __post_init__(self):
        self.recent_results = deque(self.recent_results, maxlen=self.window_size)

    @property
    def average_time_ms(self) -> float:
        if self.request_count == 0:
            return 0.0
        return self.total_time_ms / self.request_count

    def record(self, summary: SessionResultSummary) -> None:
        self.recent_results.append(summary)
        self.total_time_ms += summary.elapsed_ms

    def provider_usage(self) -> Dict[str, int]:
        usage: Dict[str, int] = {}
        for summary in self.recent_results:
            for provider_id in summary.providers:
                usage[provider_id] = usage.get(provider_id, 0) + 1
        return usage

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "created_at": self.created_at,
            "last_accessed": self.last_accessed,
            "request_count": self.request_count,
            "average_time_ms": round(self.average_time_ms, 3),
            "state": self.state.value,
            "preferences": dict(self.preferences),
            "recent_results": [asdict(summary) for summary in self.recent_results],
        }


@dataclass(frozen=True)
class Alternative:
    command: str
    reason: str


@dataclass(frozen=True)
class Recommendations:
    alternatives: Tuple[Alternative, ...] = ()
    tips: Tuple[str, ...] = ()
    session: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DispatchTiming:
    total_ms: float
    stages: Dict[str, float] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class DispatchResult:
    request_id: str
    session_id: str
    success: bool
    config: ActivationConfig
    ranking: Tuple[RankedProvider, ...] = ()
    recommendations: Recommendations = field(default_factory=Recommendations)
    timing: Optional[DispatchTiming] = None
    error: Optional[str] = None
    fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "dispatch",
            "request_id": self.request_id,
            "session_id": self.session_id,
            "success": self.success,
            "fallback": self.fallback,
            "error": self.error,
            "config": self.config.to_dict(),
            "ranking": [ranked.to_dict() for ranked in self.ranking],
            "recommendations": asdict(self.recommendations),
            "timing": asdict(self.timing) if self.timing else None,
        }


@dataclass(frozen=True)
class UnknownCommandResult:
    request_id: str
    session_id: str
    token: str
    available_commands: Tuple[str, ...]
    help_command: str = "/help"

    @property
    def message(self) -> str:
        return f"Unknown command: {self.token}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "unknown_command",
            "request_id": self.request_id,
            "session_id": self.session_id,
            "token": self.token,
            "message": self.message,
            "available_commands": list(self.available_commands),
            "help_command": self.help_command,
        }
