"""
Provider, work-type and super-command catalogs.

The catalogs are immutable values built once and passed into the classifier,
selector and assembler. ``default_registry()`` and ``default_command_table()``
return the built-in data; tests may construct smaller catalogs directly.
"""

import re
from functools import lru_cache
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .types import (
    CapabilityProvider,
    LoadTime,
    NaturalLanguageRule,
    PriorityClass,
    ProjectProfile,
    RequestContext,
    SelectionStrategy,
    SuperCommand,
    WorkTypePattern,
)
from ..utils.error_handling import ConfigurationError
from ..utils.logging import get_logger

logger = get_logger(__name__)

ConditionalDefault = Callable[[RequestContext], bool]

# Conditional default thresholds
COMPLEXITY_THRESHOLD = 0.7
SEQUENTIAL_FILE_COUNT = 50
FILESYSTEM_FILE_COUNT = 20

# Aliases this short only resolve on an exact match
EXACT_ONLY_ALIAS_LENGTH = 2


# ---------------------------------------------------------------------------
# Glob matching
# ---------------------------------------------------------------------------

@lru_cache(maxsize=256)
def _compile_glob(pattern: str) -> "re.Pattern[str]":
    parts = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts))


def match_file_pattern(path: str, pattern: str) -> bool:
    """Match a project-relative path against a glob.

    Patterns without a ``/`` are matched against the basename, so ``*.sql``
    matches ``db/schema.sql``. A trailing ``/`` marks a directory indicator
    that matches any path containing that directory.
    """
    normalized = path.replace("\\", "/")
    if normalized.startswith("./"):
        normalized = normalized[2:]
    if pattern.endswith("/") and "*" not in pattern:
        directory = pattern.rstrip("/")
        segments = normalized.rstrip("/").split("/")
        return directory in segments[:-1] or (normalized.endswith("/") and segments[-1] == directory)
    if "/" not in pattern:
        target = normalized.rstrip("/").rsplit("/", 1)[-1]
        return _compile_glob(pattern).fullmatch(target) is not None
    return _compile_glob(pattern).fullmatch(normalized) is not None


# ---------------------------------------------------------------------------
# Conditional defaults
# ---------------------------------------------------------------------------

def _needs_sequential(context: RequestContext) -> bool:
    return (
        context.project_complexity > COMPLEXITY_THRESHOLD
        or context.file_count > SEQUENTIAL_FILE_COUNT
        or context.is_analysis_task
        or context.is_complex_debugging
    )


def _needs_filesystem(context: RequestContext) -> bool:
    return (
        context.needs_file_operations
        or context.is_project_structure_task
        or context.is_refactoring_task
        or context.file_count > FILESYSTEM_FILE_COUNT
    )


def _needs_github(context: RequestContext) -> bool:
    return (
        context.has_git_files
        or context.is_version_control_task
        or context.is_collaboration_task
        or any(".git" in f for f in context.files)
    )


_DATABASE_PATH_MARKERS = (".sql", "repository", "entity", "model")


def _needs_postgresql(context: RequestContext) -> bool:
    return (
        context.has_database_files
        or context.is_database_task
        or any(marker in f.lower() for f in context.files for marker in _DATABASE_PATH_MARKERS)
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class CapabilityRegistry:
    """Immutable catalog of providers, work-type patterns and defaults."""

    def __init__(
        self,
        providers: Sequence[CapabilityProvider],
        work_types: Sequence[WorkTypePattern],
        always_defaults: Sequence[str],
        conditional_defaults: Mapping[str, ConditionalDefault],
        project_profiles: Sequence[ProjectProfile] = (),
    ):
        self._providers: Dict[str, CapabilityProvider] = {}
        for provider in providers:
            if provider.id in self._providers:
                raise ConfigurationError(f"Duplicate provider id: {provider.id}")
            if not provider.activation_flags:
                raise ConfigurationError(f"Provider {provider.id} has no activation flags")
            self._providers[provider.id] = provider

        self._work_types: Dict[str, WorkTypePattern] = {}
        for pattern in work_types:
            if not 0.0 <= pattern.confidence <= 1.0:
                raise ConfigurationError(
                    f"Work type {pattern.name} confidence out of range",
                    details={"confidence": pattern.confidence}
                )
            self._check_known(pattern.recommended_providers, f"work type {pattern.name}")
            self._work_types[pattern.name] = pattern

        self._check_known(conditional_defaults.keys(), "conditional defaults")
        self._conditional_defaults = dict(conditional_defaults)

        self._profiles: Dict[str, ProjectProfile] = {}
        for profile in project_profiles:
            self._check_known(profile.recommended_providers, f"project profile {profile.name}")
            self._profiles[profile.name] = profile

        self._always_defaults: Tuple[str, ...] = ()
        self._always_defaults = self.validate_defaults(always_defaults)

    def _check_known(self, provider_ids: Iterable[str], owner: str) -> None:
        unknown = [pid for pid in provider_ids if pid not in self._providers]
        if unknown:
            raise ConfigurationError(
                f"Unknown provider(s) referenced by {owner}: {', '.join(unknown)}",
                details={"unknown": unknown}
            )

    def validate_defaults(self, provider_ids: Sequence[str]) -> Tuple[str, ...]:
        """Check a default-provider list against the catalog.

        Raises:
            ConfigurationError: if the list is empty or names an unknown provider
        """
        if not provider_ids:
            raise ConfigurationError("At least one default provider is required")
        self._check_known(provider_ids, "default providers")
        return tuple(dict.fromkeys(provider_ids))

    def with_defaults(self, provider_ids: Sequence[str]) -> "CapabilityRegistry":
        """Return a registry sharing this catalog with different always-defaults."""
        return CapabilityRegistry(
            providers=list(self._providers.values()),
            work_types=list(self._work_types.values()),
            always_defaults=provider_ids,
            conditional_defaults=self._conditional_defaults,
            project_profiles=list(self._profiles.values()),
        )

    # Lookups

    def get(self, provider_id: str) -> Optional[CapabilityProvider]:
        return self._providers.get(provider_id)

    def __getitem__(self, provider_id: str) -> CapabilityProvider:
        return self._providers[provider_id]

    def __contains__(self, provider_id: str) -> bool:
        return provider_id in self._providers

    @property
    def providers(self) -> List[CapabilityProvider]:
        return list(self._providers.values())

    @property
    def provider_ids(self) -> List[str]:
        return list(self._providers)

    @property
    def work_types(self) -> List[WorkTypePattern]:
        return list(self._work_types.values())

    def work_type(self, name: str) -> Optional[WorkTypePattern]:
        return self._work_types.get(name)

    @property
    def always_defaults(self) -> Tuple[str, ...]:
        return self._always_defaults

    @property
    def primary_default(self) -> CapabilityProvider:
        """Highest-priority always-default, first declared wins ties."""
        candidates = [self._providers[pid] for pid in self._always_defaults]
        return min(candidates, key=lambda provider: provider.priority.rank)

    @property
    def project_profiles(self) -> List[ProjectProfile]:
        return list(self._profiles.values())

    def profile(self, name: str) -> Optional[ProjectProfile]:
        return self._profiles.get(name)

    def conditional_defaults_for(self, context: RequestContext) -> List[str]:
        """Provider ids whose conditional-default predicate holds."""
        return [pid for pid, predicate in self._conditional_defaults.items() if predicate(context)]

    def canonical_flags(self) -> Dict[str, str]:
        return {pid: provider.canonical_flag for pid, provider in self._providers.items()}

    def is_activation_flag(self, flag: str) -> bool:
        return any(flag in provider.activation_flags for provider in self._providers.values())


class SuperCommandTable:
    """Immutable table of super-commands, their aliases and natural-language rules."""

    def __init__(
        self,
        commands: Sequence[SuperCommand],
        aliases: Sequence[Tuple[str, str]] = (),
        rules: Sequence[NaturalLanguageRule] = (),
        registry: Optional[CapabilityRegistry] = None,
    ):
        self._commands: Dict[str, SuperCommand] = {}
        for command in commands:
            if not command.token.startswith("/"):
                raise ConfigurationError(f"Super-command token must start with '/': {command.token}")
            if command.strategy is SelectionStrategy.EXPLICIT and not command.providers:
                raise ConfigurationError(f"Super-command {command.token} has no providers")
            if registry is not None and command.providers:
                registry._check_known(command.providers, f"super-command {command.token}")
            self._commands[command.token] = command

        # Ordered (alias, token, exact_only); first declaration of a key wins
        self._aliases: List[Tuple[str, str, bool]] = []
        seen = set()
        for alias, token in aliases:
            key = alias.strip().lower()
            if token not in self._commands:
                raise ConfigurationError(f"Alias {alias!r} points at unknown command {token}")
            if key in seen:
                continue
            seen.add(key)
            self._aliases.append((key, token, len(key) <= EXACT_ONLY_ALIAS_LENGTH))
        self._alias_map = {alias: token for alias, token, _ in self._aliases}

        for rule in rules:
            if rule.command not in self._commands:
                raise ConfigurationError(f"Natural-language rule points at unknown command {rule.command}")
        self._rules: Tuple[NaturalLanguageRule, ...] = tuple(rules)

    def get(self, token: str) -> Optional[SuperCommand]:
        return self._commands.get(token.lower())

    def __contains__(self, token: str) -> bool:
        return token.lower() in self._commands

    @property
    def commands(self) -> List[SuperCommand]:
        return list(self._commands.values())

    @property
    def tokens(self) -> List[str]:
        return list(self._commands)

    @property
    def aliases(self) -> List[Tuple[str, str, bool]]:
        return list(self._aliases)

    @property
    def rules(self) -> Tuple[NaturalLanguageRule, ...]:
        return self._rules

    def resolve_alias(self, text: str) -> Optional[str]:
        """Resolve free text to a command token through the alias table.

        An exact match on the whole normalized text wins. Otherwise every
        containment-eligible alias is looked up as a substring; the match that
        starts earliest in the text resolves the command, table order breaking
        ties. Short abbreviations are exact-match only.
        """
        normalized = text.strip().lower()
        if not normalized:
            return None

        if normalized in self._alias_map:
            return self._alias_map[normalized]

        best = None
        for alias, token, exact_only in self._aliases:
            if exact_only:
                continue
            position = normalized.find(alias)
            if position != -1 and (best is None or position < best[0]):
                best = (position, token)
        return best[1] if best else None


# ---------------------------------------------------------------------------
# Built-in data
# ---------------------------------------------------------------------------

PROVIDERS = (
    CapabilityProvider(
        id="sequential",
        name="Sequential",
        capabilities=frozenset({"complex_analysis", "multi_step", "systematic_thinking", "debugging", "structured_reasoning"}),
        activation_flags=("--seq", "--sequential"),
        description="Complex analysis, multi-step reasoning and systematic thinking",
        priority=PriorityClass.HIGH,
        load_time=LoadTime.MEDIUM,
        localized_name="순차적사고",
    ),
    CapabilityProvider(
        id="context7",
        name="Context7",
        capabilities=frozenset({"documentation", "research", "library_info", "best_practices", "api_docs"}),
        activation_flags=("--c7", "--context7"),
        description="Official library documentation, research and API docs lookup",
        priority=PriorityClass.HIGH,
        load_time=LoadTime.FAST,
        localized_name="컨텍스트7",
    ),
    CapabilityProvider(
        id="filesystem",
        name="Filesystem",
        capabilities=frozenset({"file_management", "directory_operations", "file_search", "file_analysis", "project_structure"}),
        activation_flags=("--fs", "--filesystem"),
        description="File system operations and project structure analysis",
        priority=PriorityClass.MEDIUM,
        load_time=LoadTime.FAST,
        localized_name="파일시스템",
    ),
    CapabilityProvider(
        id="memory",
        name="Memory Bank",
        capabilities=frozenset({"knowledge_storage", "context_persistence", "session_memory", "learning", "knowledge_retrieval"}),
        activation_flags=("--memory", "--mem"),
        description="Knowledge storage, context persistence and learning",
        priority=PriorityClass.MEDIUM,
        load_time=LoadTime.MEDIUM,
        localized_name="메모리뱅크",
    ),
    CapabilityProvider(
        id="github",
        name="GitHub",
        capabilities=frozenset({"repository_management", "issue_tracking", "pr_management", "git_operations", "collaboration"}),
        activation_flags=("--github", "--git"),
        description="GitHub repository management and collaboration",
        priority=PriorityClass.MEDIUM,
        load_time=LoadTime.MEDIUM,
        localized_name="깃허브",
    ),
    CapabilityProvider(
        id="postgresql",
        name="PostgreSQL",
        capabilities=frozenset({"database_operations", "sql_queries", "schema_management", "data_analysis", "db_optimization"}),
        activation_flags=("--postgres", "--pg", "--db"),
        description="PostgreSQL database management and queries",
        priority=PriorityClass.LOW,
        load_time=LoadTime.SLOW,
        localized_name="포스트그레SQL",
    ),
)

WORK_TYPES = (
    WorkTypePattern(
        name="coding",
        keywords=(
            "implement", "build", "create", "develop", "code", "function", "class", "method",
            "api", "endpoint", "service", "component", "module", "library", "framework",
            "구현", "개발", "코드", "함수", "클래스", "메서드", "컴포넌트", "모듈",
        ),
        file_patterns=("*.java", "*.js", "*.ts", "*.jsx", "*.tsx", "*.py", "*.go"),
        recommended_providers=("context7", "sequential", "filesystem", "memory"),
        confidence=0.9,
    ),
    WorkTypePattern(
        name="analysis",
        keywords=(
            "analyze", "review", "investigate", "examine", "study", "research", "assess",
            "debug", "troubleshoot", "diagnose", "profile", "monitor", "evaluate",
            "분석", "검토", "조사", "연구", "평가", "디버그", "문제해결", "진단",
        ),
        file_patterns=("**/*",),
        recommended_providers=("sequential", "context7", "filesystem", "memory"),
        confidence=0.85,
    ),
    WorkTypePattern(
        name="file_management",
        keywords=(
            "file", "directory", "folder", "structure", "organize", "refactor", "clean",
            "move", "rename", "delete", "search", "find", "project structure",
            "파일", "디렉토리", "폴더", "구조", "정리", "리팩토링", "청소", "검색",
        ),
        file_patterns=("**/*",),
        recommended_providers=("filesystem", "sequential", "memory"),
        confidence=0.9,
    ),
    WorkTypePattern(
        name="documentation",
        keywords=(
            "document", "documentation", "readme", "guide", "manual", "tutorial", "wiki",
            "help", "instructions", "specification", "api docs", "changelog",
            "문서", "문서화", "가이드", "매뉴얼", "튜토리얼", "위키", "도움말", "설명서",
        ),
        file_patterns=("*.md", "*.rst", "*.txt", "**/docs/**", "README*", "CHANGELOG*"),
        recommended_providers=("context7", "memory", "filesystem"),
        confidence=0.85,
    ),
    WorkTypePattern(
        name="git_operations",
        keywords=(
            "git", "github", "commit", "push", "pull", "merge", "branch", "repository",
            "issue", "pull request", "pr", "version control", "collaboration",
            "깃", "깃허브", "커밋", "푸시", "풀", "머지", "브랜치", "레포지토리", "이슈",
        ),
        file_patterns=(".git/**", "*.gitignore", ".github/**"),
        recommended_providers=("github", "memory", "filesystem"),
        confidence=0.9,
    ),
    WorkTypePattern(
        name="database",
        keywords=(
            "database", "sql", "query", "schema", "migration", "orm", "repository",
            "entity", "model", "crud", "transaction", "index", "constraint", "postgresql",
            "데이터베이스", "쿼리", "스키마", "마이그레이션", "엔티티", "모델", "트랜잭션",
        ),
        file_patterns=("*.sql", "**/repository/**", "**/entity/**", "**/model/**"),
        recommended_providers=("postgresql", "context7", "sequential"),
        confidence=0.9,
    ),
    WorkTypePattern(
        name="performance",
        keywords=(
            "optimize", "performance", "speed", "efficiency", "bottleneck", "profiling",
            "memory", "cpu", "latency", "throughput", "benchmark", "cache",
            "최적화", "성능", "속도", "효율성", "병목", "프로파일링", "메모리", "지연시간",
        ),
        file_patterns=("**/*",),
        recommended_providers=("sequential", "memory", "postgresql"),
        confidence=0.8,
    ),
    WorkTypePattern(
        name="security",
        keywords=(
            "security", "vulnerability", "authentication", "authorization", "encryption",
            "secure", "safety", "audit", "compliance", "penetration", "threat",
            "보안", "취약점", "인증", "인가", "암호화", "안전", "감사", "규정준수", "위협",
        ),
        file_patterns=("**/security/**", "**/auth/**", "*.security.js"),
        recommended_providers=("sequential", "context7", "memory"),
        confidence=0.9,
    ),
    WorkTypePattern(
        name="learning",
        keywords=(
            "learn", "study", "knowledge", "remember", "note", "save", "store",
            "context", "session", "history", "experience", "insight",
            "학습", "공부", "지식", "기억", "노트", "저장", "컨텍스트", "경험", "통찰",
        ),
        file_patterns=("**/*",),
        recommended_providers=("memory", "context7", "filesystem"),
        confidence=0.8,
    ),
)

CONDITIONAL_DEFAULTS: Dict[str, ConditionalDefault] = {
    "sequential": _needs_sequential,
    "filesystem": _needs_filesystem,
    "github": _needs_github,
    "postgresql": _needs_postgresql,
}

PROJECT_PROFILES = (
    ProjectProfile(
        name="spring-boot",
        indicators=("pom.xml", "build.gradle", "src/main/java/**", "application.properties"),
        recommended_providers=("context7", "sequential", "filesystem", "memory", "postgresql"),
        confidence=0.9,
    ),
    ProjectProfile(
        name="react",
        indicators=("package.json", "src/App.js", "src/App.tsx", "public/index.html"),
        recommended_providers=("context7", "sequential", "filesystem", "memory"),
        confidence=0.9,
    ),
    ProjectProfile(
        name="node-backend",
        indicators=("package.json", "server.js", "app.js", "routes/", "controllers/"),
        recommended_providers=("context7", "sequential", "filesystem", "memory", "postgresql"),
        confidence=0.8,
    ),
    ProjectProfile(
        name="database-heavy",
        indicators=("*.sql", "migrations/", "schema/", "repository/", "entity/"),
        recommended_providers=("postgresql", "context7", "sequential", "memory"),
        confidence=0.9,
    ),
    ProjectProfile(
        name="documentation",
        indicators=("docs/", "*.md", "README.md", "wiki/"),
        recommended_providers=("context7", "memory", "filesystem"),
        confidence=0.8,
    ),
)

SUPER_COMMANDS = (
    SuperCommand(
        token="/max",
        name="Maximum Performance Mode",
        description="Activate every provider with the most thorough settings",
        strategy=SelectionStrategy.EXPLICIT,
        providers=("sequential", "context7", "filesystem", "memory", "github", "postgresql"),
        flags=("--think-hard", "--delegate auto", "--wave-mode force"),
        options=(("parallel_processing", True), ("cache_enabled", True), ("all_providers_active", True)),
    ),
    SuperCommand(
        token="/auto",
        name="Auto Mode",
        description="Pick the best provider mix for the detected work type",
        strategy=SelectionStrategy.AUTO_DETECT,
        flags=("--delegate auto", "--wave-mode auto"),
        options=(("auto_detection", True), ("adaptive_selection", True)),
    ),
    SuperCommand(
        token="/smart",
        name="Smart Mode",
        description="Pick providers from usage history",
        strategy=SelectionStrategy.HISTORY_BASED,
        flags=("--think", "--delegate auto", "--memory"),
        options=(("history_based", True), ("personalized_selection", True)),
    ),
    SuperCommand(
        token="/quick",
        name="Quick Mode",
        description="Minimal provider set for fast answers",
        strategy=SelectionStrategy.EXPLICIT,
        providers=("context7",),
        flags=("--c7",),
        options=(("minimalist", True), ("fast_response", True)),
    ),
    SuperCommand(
        token="/analyze",
        name="Analysis Mode",
        description="In-depth analysis setup",
        strategy=SelectionStrategy.EXPLICIT,
        providers=("sequential", "context7", "filesystem", "memory"),
        flags=("--think-hard", "--delegate auto"),
        options=(("deep_analysis", True), ("context_persistence", True)),
    ),
    SuperCommand(
        token="/dev",
        name="Development Mode",
        description="Provider mix tuned for development work",
        strategy=SelectionStrategy.EXPLICIT,
        providers=("context7", "sequential", "filesystem", "memory", "github"),
        options=(("development_focused", True), ("version_control", True)),
    ),
    SuperCommand(
        token="/db",
        name="Database Mode",
        description="Provider mix specialised for database work",
        strategy=SelectionStrategy.EXPLICIT,
        providers=("postgresql", "sequential", "context7", "memory"),
        options=(("database_focused", True), ("sql_optimization", True)),
    ),
    SuperCommand(
        token="/learn",
        name="Learning Mode",
        description="Settings for knowledge building and learning",
        strategy=SelectionStrategy.EXPLICIT,
        providers=("memory", "context7", "filesystem"),
        options=(("learning_focused", True), ("knowledge_retention", True)),
    ),
    SuperCommand(
        token="/collab",
        name="Collaboration Mode",
        description="Team collaboration and project management",
        strategy=SelectionStrategy.EXPLICIT,
        providers=("github", "memory", "filesystem", "sequential"),
        options=(("collaboration_focused", True), ("issue_tracking", True)),
    ),
)

COMMAND_ALIASES = (
    # Korean
    ("최대", "/max"),
    ("자동", "/auto"),
    ("스마트", "/smart"),
    ("빠르게", "/quick"),
    ("분석", "/analyze"),
    ("개발", "/dev"),
    ("데이터베이스", "/db"),
    ("학습", "/learn"),
    ("협업", "/collab"),
    # English
    ("maximum", "/max"),
    ("auto", "/auto"),
    ("smart", "/smart"),
    ("quick", "/quick"),
    ("analyze", "/analyze"),
    ("analysis", "/analyze"),
    ("dev", "/dev"),
    ("develop", "/dev"),
    ("database", "/db"),
    ("learn", "/learn"),
    ("collaborate", "/collab"),
    # Abbreviations
    ("max", "/max"),
    ("a", "/auto"),
    ("s", "/smart"),
    ("q", "/quick"),
    ("an", "/analyze"),
    ("d", "/dev"),
    ("db", "/db"),
    ("l", "/learn"),
    ("c", "/collab"),
)

NATURAL_LANGUAGE_RULES = (
    NaturalLanguageRule(re.compile(r"모든.*서버.*활성화|전체.*기능|최대.*성능|\ball\s+(?:providers|servers)\b", re.I), "/max", 0.9),
    NaturalLanguageRule(re.compile(r"자동.*선택|알아서|스스로|자동으로|\bautomatically\b", re.I), "/auto", 0.8),
    NaturalLanguageRule(re.compile(r"빠르게|빠른|간단히|\bsimple\b|\bquick(?:ly)?\b", re.I), "/quick", 0.8),
    NaturalLanguageRule(re.compile(r"분석|\banaly[sz]e\b|\binvestigation\b|조사", re.I), "/analyze", 0.7),
    NaturalLanguageRule(re.compile(r"개발|\bdevelopment\b|\bcoding\b|구현", re.I), "/dev", 0.7),
    NaturalLanguageRule(re.compile(r"데이터베이스|\bdatabase\b|\bDB\b|\bsql\b", re.I), "/db", 0.8),
    NaturalLanguageRule(re.compile(r"학습|\blearn\b|기억|저장|\bcontext\b", re.I), "/learn", 0.7),
    NaturalLanguageRule(re.compile(r"협업|\bgithub\b|\bgit\b|\bcollaboration\b|\bteam\b", re.I), "/collab", 0.7),
)

DEFAULT_ALWAYS_ON = ("context7", "memory")


def default_registry(always_defaults: Optional[Sequence[str]] = None) -> CapabilityRegistry:
    """Build the built-in registry, optionally overriding the always-defaults."""
    return CapabilityRegistry(
        providers=PROVIDERS,
        work_types=WORK_TYPES,
        always_defaults=always_defaults if always_defaults is not None else DEFAULT_ALWAYS_ON,
        conditional_defaults=CONDITIONAL_DEFAULTS,
        project_profiles=PROJECT_PROFILES,
    )


def default_command_table(registry: Optional[CapabilityRegistry] = None) -> SuperCommandTable:
    return SuperCommandTable(
        commands=SUPER_COMMANDS,
        aliases=COMMAND_ALIASES,
        rules=NATURAL_LANGUAGE_RULES,
        registry=registry,
    )
