"""
Core orchestration components for MCP Conductor.

The pipeline stages (classifier, selector, assembler) are pure and
synchronous; the dispatcher ties them together with sessions, history and
settings persistence.
"""

from .catalog import (
    CapabilityRegistry,
    SuperCommandTable,
    default_registry,
    default_command_table,
    match_file_pattern,
)
from .classifier import IntentClassifier
from .context import ContextBuilder
from .selector import ProviderSelector
from .assembler import ConfigAssembler
from .advisor import Advisor
from .history import UsageHistoryStore
from .sessions import SessionManager
from .storage import (
    HistoryStorage,
    SettingsStorage,
    InMemoryHistoryStorage,
    InMemorySettingsStorage,
    JsonFileHistoryStorage,
    JsonFileSettingsStorage,
)
from .dispatcher import RequestDispatcher
from .types import (
    ActivationMode,
    AutoOptimizedActivation,
    DispatchResult,
    FallbackActivation,
    RequestContext,
    SelectionStrategy,
    SuperCommandActivation,
    UnknownCommandResult,
    UsageHistoryEntry,
)

__all__ = [
    # Catalog
    "CapabilityRegistry",
    "SuperCommandTable",
    "default_registry",
    "default_command_table",
    "match_file_pattern",

    # Pipeline
    "IntentClassifier",
    "ContextBuilder",
    "ProviderSelector",
    "ConfigAssembler",
    "Advisor",
    "RequestDispatcher",

    # State
    "UsageHistoryStore",
    "SessionManager",
    "HistoryStorage",
    "SettingsStorage",
    "InMemoryHistoryStorage",
    "InMemorySettingsStorage",
    "JsonFileHistoryStorage",
    "JsonFileSettingsStorage",

    # Results
    "ActivationMode",
    "AutoOptimizedActivation",
    "DispatchResult",
    "FallbackActivation",
    "RequestContext",
    "SelectionStrategy",
    "SuperCommandActivation",
    "UnknownCommandResult",
    "UsageHistoryEntry",
]
