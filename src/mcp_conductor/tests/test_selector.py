"""
Tests for provider selection and history weighting.
"""

import pytest

from mcp_conductor.core.selector import (
    ProviderSelector,
    historical_success_rate,
    history_frequency,
)
from mcp_conductor.core.types import (
    RequestContext,
    SuperCommandIntent,
    UnknownCommandIntent,
    WorkTypeIntent,
    WorkTypeMatch,
)
from mcp_conductor.utils.error_handling import ClassificationError

from conftest import make_entry

CODING = WorkTypeMatch(type="coding", score=0.9, confidence=0.9, final_score=0.81)


@pytest.fixture
def selector(registry):
    return ProviderSelector(registry)


def scores(result):
    return {ranked.provider_id: ranked.score for ranked in result.ranking}


class TestHistoryHelpers:
    """Test the history statistics helpers."""

    def test_success_rate(self):
        history = [
            make_entry("r1", ["memory"]),
            make_entry("r2", ["memory", "github"], success=False),
            make_entry("r3", ["github"]),
        ]

        assert historical_success_rate("memory", history) == 0.5
        assert historical_success_rate("github", history) == 0.5
        assert historical_success_rate("context7", history) == 0.0
        assert historical_success_rate("memory", []) == 0.0

    def test_frequency_order(self):
        history = [
            make_entry("r1", ["github", "memory"]),
            make_entry("r2", ["github", "postgresql"]),
            make_entry("r3", ["github", "memory", "context7"]),
        ]
        assert history_frequency(history) == ["github", "memory", "postgresql", "context7"]


class TestWorkTypeSelection:
    """Test scoring for work-type intents."""

    def test_defaults_plus_recommendations(self, selector):
        result = selector.select(WorkTypeIntent(ranked=(CODING,)), RequestContext())

        assert [r.provider_id for r in result.ranking] == ["context7", "memory", "sequential", "filesystem"]
        assert scores(result)["context7"] == pytest.approx(0.905)
        assert scores(result)["sequential"] == pytest.approx(0.405)
        assert result.provider_ids == ["context7", "memory"]
        assert result.activation[0].reason == "coding"
        assert result.source == "work-type"

    def test_empty_intent_uses_primary_default(self, selector):
        result = selector.select(WorkTypeIntent(), RequestContext())

        assert [r.provider_id for r in result.ranking] == ["context7", "memory"]
        assert result.provider_ids == ["context7"]
        assert result.activation[0].score == 0.5

    def test_conditional_default(self, selector):
        result = selector.select(WorkTypeIntent(), RequestContext(is_database_task=True))

        assert result.ranking[0].provider_id == "postgresql"
        assert result.ranking[0].reason == "conditional"
        assert result.provider_ids == ["postgresql"]

    def test_only_top_three_work_types_count(self, selector):
        matches = tuple(
            WorkTypeMatch(type=name, score=0.5, confidence=0.8, final_score=0.4)
            for name in ("git_operations", "database", "security", "documentation")
        )
        result = selector.select(WorkTypeIntent(ranked=matches), RequestContext())

        # documentation is fourth, so it adds nothing to context7 or filesystem
        assert scores(result)["context7"] == pytest.approx(0.9)
        assert "filesystem" not in scores(result)

    def test_cap_respected(self, registry):
        selector = ProviderSelector(registry, max_providers=2)
        analysis = WorkTypeMatch(type="analysis", score=1.0, confidence=0.85, final_score=0.85)
        result = selector.select(WorkTypeIntent(ranked=(CODING, analysis)), RequestContext())

        assert len(result.activation) == 2
        assert len(result.ranking) > 2

    def test_auto_activation_disabled(self, registry):
        selector = ProviderSelector(registry, auto_activation=False)

        result = selector.select(WorkTypeIntent(), RequestContext(is_database_task=True))
        assert result.ranking == ()
        assert result.provider_ids == ["context7"]

        result = selector.select(WorkTypeIntent(ranked=(CODING,)), RequestContext())
        assert all(score == pytest.approx(0.405) for score in scores(result).values())
        assert result.provider_ids == ["context7"]

    def test_deterministic(self, selector):
        intent = WorkTypeIntent(ranked=(CODING,))
        ctx = RequestContext(file_count=60)
        assert selector.select(intent, ctx) == selector.select(intent, ctx)


class TestHistoryWeighting:
    """Test the historical success multiplier."""

    def test_success_boost_is_clamped(self, selector):
        history = [make_entry("r1", ["context7", "memory"])]
        result = selector.select(WorkTypeIntent(ranked=(CODING,)), RequestContext(), history)

        assert scores(result)["context7"] == 1.0
        assert scores(result)["memory"] == 1.0
        assert scores(result)["sequential"] == pytest.approx(0.405)

    def test_failures_give_no_boost(self, selector):
        history = [make_entry("r1", ["memory"], success=False)]
        result = selector.select(WorkTypeIntent(), RequestContext(), history)

        assert scores(result)["memory"] == 0.5
        assert result.provider_ids == ["context7"]

    def test_history_lifts_default_over_threshold(self, selector):
        history = [make_entry("r1", ["memory"])]
        result = selector.select(WorkTypeIntent(), RequestContext(), history)

        assert scores(result)["memory"] == pytest.approx(0.65)
        assert result.provider_ids == ["memory"]
        assert result.activation[0].reason == "history"

    def test_partial_success_rate(self, selector):
        history = [make_entry("r1", ["memory"]), make_entry("r2", ["memory"], success=False)]
        result = selector.select(WorkTypeIntent(), RequestContext(), history)

        assert scores(result)["memory"] == pytest.approx(0.5 * 1.15)
        assert result.activation[0].reason == "default"


class TestSuperCommandSelection:
    """Test selection for super-command intents."""

    def test_explicit_command_is_capped(self, selector, commands):
        intent = SuperCommandIntent(command=commands.get("/max"), resolved_by="command")
        result = selector.select(intent, RequestContext())

        assert len(result.ranking) == 6
        assert result.provider_ids == ["sequential", "context7", "filesystem", "memory"]
        assert all(r.score == 1.0 and r.reason == "super-command" for r in result.activation)
        assert result.source == "super-command"

    def test_quick(self, selector, commands):
        intent = SuperCommandIntent(command=commands.get("/quick"), resolved_by="command")
        assert selector.select(intent, RequestContext()).provider_ids == ["context7"]

    def test_smart_with_history(self, selector, commands):
        history = [
            make_entry("r1", ["github", "memory"]),
            make_entry("r2", ["github", "postgresql"]),
            make_entry("r3", ["github", "memory", "context7"]),
        ]
        intent = SuperCommandIntent(command=commands.get("/smart"), resolved_by="command")
        result = selector.select(intent, RequestContext(), history)

        assert result.provider_ids == ["github", "memory", "postgresql"]
        assert result.source == "history-based"
        assert result.activation[0].reason == "history"

    def test_smart_without_history(self, selector, commands):
        intent = SuperCommandIntent(command=commands.get("/smart"), resolved_by="command")
        result = selector.select(intent, RequestContext())

        assert result.provider_ids == ["context7", "memory"]
        assert result.activation[0].reason == "default"

    def test_auto_reclassifies_input(self, selector, commands, classifier):
        intent = SuperCommandIntent(command=commands.get("/auto"), resolved_by="command")
        ctx = RequestContext(user_input="/auto implement the payment service component")

        result = selector.select(intent, ctx, classify=classifier.detect_work_types)

        assert result.provider_ids == ["context7", "memory"]
        assert result.source == "auto-detect"
        assert result.activation[0].reason == "coding"

    def test_auto_without_classifier(self, selector, commands):
        intent = SuperCommandIntent(command=commands.get("/auto"), resolved_by="command")
        result = selector.select(intent, RequestContext())

        assert result.provider_ids == ["context7"]

    def test_unknown_command_rejected(self, selector):
        with pytest.raises(ClassificationError):
            selector.select(UnknownCommandIntent(token="/turbo"), RequestContext())
