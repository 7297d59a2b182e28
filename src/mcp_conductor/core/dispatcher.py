"""
Request dispatcher for MCP Conductor.

The dispatcher owns the pipeline for one request:

    context -> classify -> select -> assemble -> history append -> session update

Dispatches on the same session are serialized by a per-session lock and each
dispatch is bounded by a timeout. Any failure inside the pipeline, including
the timeout, yields a fallback activation instead of an exception.
"""

import asyncio
import time
import uuid
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union

from .advisor import Advisor
from .assembler import ConfigAssembler
from .catalog import CapabilityRegistry, SuperCommandTable, default_command_table, default_registry
from .classifier import IntentClassifier
from .context import ContextBuilder
from .history import UsageHistoryStore
from .selector import ProviderSelector
from .sessions import SessionManager
from .storage import (
    HistoryStorage,
    InMemoryHistoryStorage,
    InMemorySettingsStorage,
    JsonFileHistoryStorage,
    JsonFileSettingsStorage,
    SettingsStorage,
)
from .types import (
    ActivationMode,
    DispatchResult,
    DispatchTiming,
    PersistenceResult,
    RequestContext,
    Session,
    SessionResultSummary,
    UnknownCommandIntent,
    UnknownCommandResult,
    UsageHistoryEntry,
)
from ..config.models import ConductorConfig
from ..utils.error_handling import handle_configuration_operation
from ..utils.logging import get_logger, log_performance

DispatchOutcome = Union[DispatchResult, UnknownCommandResult]


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:16]}"


class RequestDispatcher:
    """
    Entry point for provider orchestration requests.

    Construct with a ConductorConfig (or use ``from_config``) and call
    ``process_request``. ``start()`` loads history and begins the periodic
    session sweep; ``shutdown()`` stops it and flushes pending saves.
    """

    def __init__(
        self,
        config: Optional[ConductorConfig] = None,
        registry: Optional[CapabilityRegistry] = None,
        commands: Optional[SuperCommandTable] = None,
        history_storage: Optional[HistoryStorage] = None,
        settings_storage: Optional[SettingsStorage] = None,
        clock=time.monotonic,
    ):
        self.logger = get_logger(__name__)
        self.settings_storage = settings_storage or InMemorySettingsStorage()

        config = config or ConductorConfig()
        stored_options = self.settings_storage.load()
        if stored_options:
            config = self._apply_options(config, stored_options)
        self.config = config

        self._base_registry = registry or default_registry()
        self.registry = self._base_registry.with_defaults(config.orchestration.default_providers)
        self._custom_commands = commands
        self.commands = commands or default_command_table(self.registry)

        self.classifier = IntentClassifier(self.registry, self.commands)
        self.context_builder = ContextBuilder(self.registry)
        self.selector = ProviderSelector(
            self.registry,
            max_providers=config.orchestration.max_providers,
            auto_activation=config.orchestration.auto_activation,
        )
        self.assembler = ConfigAssembler(
            self.registry,
            performance_optimization=config.orchestration.performance_optimization,
        )
        self.advisor = Advisor(self.commands, slow_session_seconds=config.performance.slow_request_threshold_seconds)
        self.history = UsageHistoryStore(
            storage=history_storage or InMemoryHistoryStorage(),
            max_entries=config.history.max_entries,
            persist_on_append=config.history.persist_on_append,
        )
        self.sessions = SessionManager(
            timeout_seconds=config.sessions.session_timeout_seconds,
            max_sessions=config.sessions.max_sessions,
            sweep_interval=config.sessions.sweep_interval_seconds,
            window_size=config.sessions.window_size,
            clock=clock,
        )

        self._initialized = False
        self._load_task: Optional[asyncio.Future] = None
        self._counters = {"requests": 0, "fallbacks": 0, "unknown_commands": 0}

    @classmethod
    def from_config(cls, config: ConductorConfig, **kwargs) -> "RequestDispatcher":
        """Build a dispatcher with file-backed storage where the config names files."""
        timeout = config.performance.persistence_timeout_seconds
        if config.history.history_file and "history_storage" not in kwargs:
            kwargs["history_storage"] = JsonFileHistoryStorage(config.history.history_file, timeout=timeout)
        if config.history.settings_file and "settings_storage" not in kwargs:
            kwargs["settings_storage"] = JsonFileSettingsStorage(config.history.settings_file, timeout=timeout)
        return cls(config=config, **kwargs)

    @staticmethod
    @handle_configuration_operation("apply_options")
    def _apply_options(config: ConductorConfig, options: Mapping[str, Any]) -> ConductorConfig:
        return config.with_options(dict(options))

    # Lifecycle

    async def initialize(self) -> None:
        """Load stored history once; concurrent first requests share one load."""
        if self._initialized:
            return
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self.history.load())
        try:
            await asyncio.shield(self._load_task)
        except Exception:
            self._load_task = None
            raise
        if self._initialized:
            return
        self._initialized = True
        self.logger.info(
            f"Dispatcher ready: {len(self.registry.providers)} providers, "
            f"{len(self.registry.work_types)} work types, {len(self.commands.tokens)} super-commands"
        )

    async def start(self) -> None:
        await self.initialize()
        self.sessions.start()

    async def shutdown(self) -> PersistenceResult:
        """Stop the sweep, flush pending saves and drop all sessions."""
        await self.sessions.stop()
        await self.history.drain()
        result = await self.history.persist()
        self.sessions.clear()
        self._initialized = False
        self._load_task = None
        self.logger.info("Dispatcher shut down")
        return result

    # Dispatch

    async def process_request(
        self,
        user_input: str,
        session_id: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> DispatchOutcome:
        """Classify, select and assemble an activation config for one request.

        Args:
            user_input: Free text, a ``/command`` or an alias
            session_id: Existing session id; a new session is created when omitted
            context: Explicit context (files, projectType, task flags ...)

        Returns:
            DispatchResult, or UnknownCommandResult for an unknown ``/token``
        """
        await self.initialize()

        request_id = new_request_id()
        session = self.sessions.acquire(session_id)
        self._counters["requests"] += 1

        async with self.sessions.lock_for(session.id):
            started = time.perf_counter()
            stages: Dict[str, float] = {}

            try:
                outcome = await asyncio.wait_for(
                    self._run_pipeline(request_id, session, user_input, context, stages),
                    timeout=self.config.performance.request_timeout_seconds,
                )
            except asyncio.TimeoutError:
                self.logger.warning(
                    f"Request {request_id} timed out after {self.config.performance.request_timeout_seconds}s",
                    extra={"request_id": request_id, "session_id": session.id},
                )
                outcome = self._fallback_result(request_id, session, "request timed out")
            except Exception as e:
                self.logger.error(
                    f"Request {request_id} failed, using fallback: {e}",
                    exc_info=True,
                    extra={"request_id": request_id, "session_id": session.id},
                )
                outcome = self._fallback_result(request_id, session, str(e))

            elapsed_ms = (time.perf_counter() - started) * 1000
            self._update_session(session, request_id, outcome, elapsed_ms)

            if isinstance(outcome, DispatchResult):
                if outcome.fallback:
                    self._counters["fallbacks"] += 1
                outcome = DispatchResult(
                    request_id=outcome.request_id,
                    session_id=outcome.session_id,
                    success=outcome.success,
                    config=outcome.config,
                    ranking=outcome.ranking,
                    recommendations=outcome.recommendations,
                    timing=DispatchTiming(total_ms=elapsed_ms, stages=dict(stages)),
                    error=outcome.error,
                    fallback=outcome.fallback,
                )
            else:
                self._counters["unknown_commands"] += 1

            return outcome

    def process_request_sync(
        self,
        user_input: str,
        session_id: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> DispatchOutcome:
        """Run ``process_request`` to completion, including its pending saves."""
        async def run():
            outcome = await self.process_request(user_input, session_id, context)
            await self.history.drain()
            return outcome

        return asyncio.run(run())

    async def _build_context(self, user_input: str, context: Optional[Mapping[str, Any]]) -> RequestContext:
        return self.context_builder.build(user_input, context)

    async def _run_pipeline(
        self,
        request_id: str,
        session: Session,
        user_input: str,
        context: Optional[Mapping[str, Any]],
        stages: Dict[str, float],
    ) -> DispatchOutcome:
        with log_performance("build context") as timer:
            request_context = await self._build_context(user_input, context)
        stages["context_ms"] = timer.duration_ms

        with log_performance("classify") as timer:
            intent = self.classifier.classify(user_input, request_context)
        stages["classify_ms"] = timer.duration_ms

        if isinstance(intent, UnknownCommandIntent):
            return UnknownCommandResult(
                request_id=request_id,
                session_id=session.id,
                token=intent.token,
                available_commands=tuple(self.commands.tokens),
            )

        history = self.history.snapshot()
        with log_performance("select") as timer:
            selection = self.selector.select(
                intent, request_context, history, classify=self.classifier.detect_work_types
            )
        stages["select_ms"] = timer.duration_ms

        with log_performance("assemble") as timer:
            config = self.assembler.assemble(selection, request_context, intent)
        stages["assemble_ms"] = timer.duration_ms

        # No awaits past this point: a timeout must never leave a half-recorded request
        self.history.append(UsageHistoryEntry(
            timestamp=datetime.now().isoformat(),
            request_id=request_id,
            session_id=session.id,
            user_input=user_input or "",
            providers=config.providers,
            flags=config.flags,
            mode=config.mode.value,
        ))

        self.logger.info(
            f"Activated {', '.join(config.providers)} ({config.mode.value})",
            extra={"request_id": request_id, "session_id": session.id},
        )

        return DispatchResult(
            request_id=request_id,
            session_id=session.id,
            success=True,
            config=config,
            ranking=selection.ranking,
            recommendations=self.advisor.recommend(config, session, request_context),
        )

    def _fallback_result(self, request_id: str, session: Session, reason: str) -> DispatchResult:
        config = self.assembler.fallback(reason)
        return DispatchResult(
            request_id=request_id,
            session_id=session.id,
            success=False,
            config=config,
            recommendations=self.advisor.recommend(config),
            error=reason,
            fallback=True,
        )

    def _update_session(self, session: Session, request_id: str, outcome: DispatchOutcome, elapsed_ms: float) -> None:
        if isinstance(outcome, DispatchResult):
            summary = SessionResultSummary(
                request_id=request_id,
                providers=outcome.config.providers,
                mode=outcome.config.mode.value,
                success=outcome.success,
                elapsed_ms=elapsed_ms,
            )
            if outcome.success and outcome.config.mode is ActivationMode.SUPER_COMMAND:
                self.sessions.set_preference(session.id, "last_command", outcome.config.command)
        else:
            summary = SessionResultSummary(
                request_id=request_id,
                providers=(),
                mode="unknown-command",
                success=False,
                elapsed_ms=elapsed_ms,
            )
        self.sessions.record(session.id, summary)

    # Feedback, statistics and settings

    async def collect_feedback(self, request_id: str, rating: int, comments: str = "") -> Optional[UsageHistoryEntry]:
        """Rate an earlier request; ratings of 3 or more count as success.

        Raises:
            ValidationError: if the rating is outside 1..5
        """
        entry = self.history.record_feedback(request_id, rating, comments)
        if entry is not None:
            self.logger.info(f"Feedback recorded for {request_id}: {rating}")
        return entry

    def get_statistics(self) -> Dict[str, Any]:
        history_stats = self.history.statistics()
        return {
            "history": history_stats,
            "sessions": self.sessions.stats(),
            "dispatcher": {
                "total_requests": self._counters["requests"],
                "fallbacks": self._counters["fallbacks"],
                "unknown_commands": self._counters["unknown_commands"],
            },
        }

    def get_status(self) -> Dict[str, Any]:
        last = self.history.last_result
        return {
            "initialized": self._initialized,
            "providers": self.registry.provider_ids,
            "default_providers": list(self.registry.always_defaults),
            "commands": self.commands.tokens,
            "settings": self.config.to_options(),
            "sessions": self.sessions.stats(),
            "sweep_running": self.sessions.running,
            "history_entries": len(self.history),
            "last_persistence": {"ok": last.ok, "error": last.error} if last else None,
        }

    def get_help(self) -> Dict[str, Any]:
        return self.advisor.help()

    async def update_settings(self, **options) -> Dict[str, Any]:
        """Apply host options (camelCase or snake_case) and persist them.

        Raises:
            ConfigurationError: on invalid values or an unknown default provider
        """
        config = self._apply_options(self.config, options)
        registry = self._base_registry.with_defaults(config.orchestration.default_providers)
        commands = self._custom_commands or default_command_table(registry)

        self.config = config
        self.registry = registry
        self.classifier.registry = registry
        self.commands = commands
        self.classifier.commands = commands
        self.advisor = Advisor(commands, slow_session_seconds=config.performance.slow_request_threshold_seconds)
        self.context_builder.registry = registry
        self.selector.registry = registry
        self.selector.max_providers = config.orchestration.max_providers
        self.selector.auto_activation = config.orchestration.auto_activation
        self.assembler.registry = registry
        self.assembler.performance_optimization = config.orchestration.performance_optimization
        self.sessions.timeout_seconds = config.sessions.session_timeout_seconds
        self.sessions.max_sessions = config.sessions.max_sessions
        self.sessions.sweep_interval = config.sessions.sweep_interval_seconds
        self.sessions.window_size = config.sessions.window_size

        current = config.to_options()
        result = await self.settings_storage.save(current)
        if not result.ok:
            self.logger.warning(f"Settings not persisted: {result.error}")
        self.logger.info(f"Settings updated: {sorted(options)}")
        return current
