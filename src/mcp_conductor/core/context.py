"""
Request context construction.

Callers pass an explicit mapping (camelCase or snake_case keys) and
optionally a file list. The builder fills in the project profile, a
complexity estimate, the task type and the derived task flags. It never
walks the filesystem itself.
"""

import posixpath
import re
from dataclasses import fields
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from .catalog import CapabilityRegistry, match_file_pattern
from .types import RequestContext
from ..utils.logging import get_logger

LARGE_PROJECT_FILE_COUNT = 100

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")
_CONTEXT_FIELDS = {f.name for f in fields(RequestContext)} - {"extras", "user_input"}

# Ordered; first matching task type wins
TASK_TYPE_KEYWORDS = (
    ("analysis", ("분석", "analyze", "analysis", "debug")),
    ("development", ("개발", "구현", "코드", "implement", "develop")),
    ("database", ("데이터베이스", "sql", "query", "쿼리")),
    ("documentation", ("문서", "document", "readme")),
    ("version_control", ("git", "commit", "push")),
)

PROFILE_TASK_TYPES = {
    "database-heavy": "database",
    "documentation": "documentation",
}

TASK_FLAGS = {
    "analysis": "is_analysis_task",
    "database": "is_database_task",
    "version_control": "is_version_control_task",
}

SPECIAL_FILE_MARKERS = ("config", "test", "docker", "CI")


def to_snake_case(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def calculate_complexity(files: Sequence[str]) -> float:
    """Project complexity in [0, 1] from size, depth, variety and special files."""
    if not files:
        return 0.0

    complexity = min(len(files) / 100, 0.3)

    max_depth = max(len(f.rstrip("/").split("/")) - 1 for f in files)
    complexity += min(max_depth / 10, 0.2)

    extensions = {posixpath.splitext(f.rstrip("/"))[1].lower() for f in files}
    complexity += min(len(extensions) / 10, 0.3)

    special = [f for f in files if any(marker in f for marker in SPECIAL_FILE_MARKERS)]
    complexity += min(len(special) / 20, 0.2)

    return min(complexity, 1.0)


class ContextBuilder:
    """Builds RequestContext values for the dispatcher."""

    def __init__(self, registry: CapabilityRegistry):
        self.logger = get_logger(__name__)
        self.registry = registry

    def build(self, user_input: str, explicit: Optional[Mapping[str, Any]] = None) -> RequestContext:
        """Merge the explicit mapping with derived values.

        Explicit values always win over derived ones. Unknown keys are kept
        in ``extras`` and never influence scoring.
        """
        given: Dict[str, Any] = {}
        extras: Dict[str, Any] = {}
        for key, value in (explicit or {}).items():
            name = to_snake_case(str(key))
            if name in _CONTEXT_FIELDS:
                given[name] = value
            else:
                extras[key] = value

        files = self._normalize_files(given.pop("files", None))
        text = (user_input or "").strip().lower()

        profile = given.pop("project_profile", None) or self.detect_profile(files)
        project_type = given.pop("project_type", None)
        if project_type is None and profile != "general":
            project_type = profile

        file_count = int(given.pop("file_count", len(files)))
        task_type = given.pop("task_type", None) or self.analyze_task_type(text, profile)

        values: Dict[str, Any] = {
            "user_input": user_input or "",
            "files": files,
            "project_type": project_type,
            "project_profile": profile,
            "project_complexity": float(given.pop("project_complexity", calculate_complexity(files))),
            "file_count": file_count,
            "task_type": task_type,
            "has_git_files": self._has_git_files(files),
            "has_database_files": any(match_file_pattern(f, "*.sql") for f in files),
            "is_large_project": file_count > LARGE_PROJECT_FILE_COUNT,
        }

        task_flag = TASK_FLAGS.get(task_type)
        if task_flag:
            values[task_flag] = True

        for name, value in given.items():
            values[name] = bool(value) if isinstance(getattr(RequestContext, name, None), bool) else value

        return RequestContext(extras=extras, **values)

    def _normalize_files(self, files: Any) -> Tuple[str, ...]:
        if files is None:
            return ()
        if not isinstance(files, (list, tuple)):
            self.logger.warning(f"Ignoring non-list files context: {type(files).__name__}")
            return ()
        return tuple(str(f).replace("\\", "/") for f in files if f)

    @staticmethod
    def _has_git_files(files: Iterable[str]) -> bool:
        for path in files:
            segments = path.rstrip("/").split("/")
            if ".git" in segments or ".github" in segments[:-1]:
                return True
        return False

    def detect_profile(self, files: Sequence[str]) -> str:
        """Best-scoring project profile, ``general`` when none match."""
        best_name = "general"
        best_score = 0.0

        for profile in self.registry.project_profiles:
            found = sum(
                1 for indicator in profile.indicators
                if any(match_file_pattern(f, indicator) for f in files)
            )
            if not found:
                continue
            score = (found / len(profile.indicators)) * profile.confidence
            if score > best_score:
                best_name, best_score = profile.name, score

        return best_name

    @staticmethod
    def analyze_task_type(text: str, profile: str = "general") -> str:
        for task_type, keywords in TASK_TYPE_KEYWORDS:
            if any(keyword in text for keyword in keywords):
                return task_type
        return PROFILE_TASK_TYPES.get(profile, "general")
