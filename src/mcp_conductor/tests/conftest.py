"""
Shared pytest configuration for MCP Conductor tests.

This file provides the catalog, pipeline and dispatcher fixtures used across
the test modules.
"""

from datetime import datetime

import pytest

from mcp_conductor.config.models import ConductorConfig
from mcp_conductor.core.catalog import default_command_table, default_registry
from mcp_conductor.core.classifier import IntentClassifier
from mcp_conductor.core.context import ContextBuilder
from mcp_conductor.core.dispatcher import RequestDispatcher
from mcp_conductor.core.storage import InMemoryHistoryStorage, InMemorySettingsStorage
from mcp_conductor.core.types import UsageHistoryEntry


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_entry(request_id, providers, success=True, mode="auto-optimized", session_id="session_test"):
    """Build a history entry with sensible defaults."""
    return UsageHistoryEntry(
        timestamp=datetime.now().isoformat(),
        request_id=request_id,
        session_id=session_id,
        user_input="test input",
        providers=tuple(providers),
        flags=(),
        mode=mode,
        success=success,
    )


@pytest.fixture
def registry():
    """Built-in capability registry."""
    return default_registry()


@pytest.fixture
def commands(registry):
    """Built-in super-command table."""
    return default_command_table(registry)


@pytest.fixture
def classifier(registry, commands):
    return IntentClassifier(registry, commands)


@pytest.fixture
def context_builder(registry):
    return ContextBuilder(registry)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def history_storage():
    return InMemoryHistoryStorage()


@pytest.fixture
def settings_storage():
    return InMemorySettingsStorage()


@pytest.fixture
def test_config():
    """Default configuration with in-memory persistence."""
    return ConductorConfig()


@pytest.fixture
def dispatcher(test_config, history_storage, settings_storage, clock):
    """Dispatcher wired to in-memory storage and a fake clock."""
    return RequestDispatcher(
        config=test_config,
        history_storage=history_storage,
        settings_storage=settings_storage,
        clock=clock,
    )


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
