"""
Provider selection.

Merges always-on defaults, conditional defaults, work-type recommendations
and usage-history weighting into a ranked, capped provider list.
"""

from typing import Dict, List, Sequence

from .catalog import CapabilityRegistry
from .types import (
    Intent,
    RankedProvider,
    RequestContext,
    SelectionResult,
    SelectionStrategy,
    SuperCommandIntent,
    UnknownCommandIntent,
    UsageHistoryEntry,
    WorkTypeIntent,
)
from ..utils.error_handling import ClassificationError
from ..utils.logging import get_logger

ALWAYS_DEFAULT_SCORE = 0.5
CONDITIONAL_DEFAULT_SCORE = 0.6
RECOMMENDATION_WEIGHT = 0.5
HISTORY_BONUS = 0.3
HISTORY_REASON_THRESHOLD = 0.7
RANKING_THRESHOLD = 0.3
ACTIVATION_THRESHOLD = 0.5
TOP_WORK_TYPES = 3
HISTORY_BASED_LIMIT = 3
SUPER_COMMAND_SCORE = 1.0

DEFAULT_MAX_PROVIDERS = 4


def historical_success_rate(provider_id: str, history: Sequence[UsageHistoryEntry]) -> float:
    """Share of history entries using ``provider_id`` that succeeded; 0 when unused."""
    with_provider = [entry for entry in history if provider_id in entry.providers]
    if not with_provider:
        return 0.0
    return sum(1 for entry in with_provider if entry.success) / len(with_provider)


def history_frequency(history: Sequence[UsageHistoryEntry]) -> List[str]:
    """Provider ids by descending usage count, first-seen order breaking ties."""
    counts: Dict[str, int] = {}
    for entry in history:
        for provider_id in entry.providers:
            counts[provider_id] = counts.get(provider_id, 0) + 1
    return sorted(counts, key=lambda pid: counts[pid], reverse=True)


class ProviderSelector:
    """Rank providers for an intent."""

    def __init__(
        self,
        registry: CapabilityRegistry,
        max_providers: int = DEFAULT_MAX_PROVIDERS,
        auto_activation: bool = True,
    ):
        self.logger = get_logger(__name__)
        self.registry = registry
        self.max_providers = max_providers
        self.auto_activation = auto_activation

    def select(
        self,
        intent: Intent,
        context: RequestContext,
        history: Sequence[UsageHistoryEntry] = (),
        classify=None,
    ) -> SelectionResult:
        """Select providers for a classified intent.

        Args:
            intent: Output of the IntentClassifier
            context: Request context
            history: Usage history snapshot, oldest first
            classify: Callable used by ``/auto`` to re-run work-type detection
                on ``context.user_input``

        Returns:
            SelectionResult with the full ranking and the capped activation list
        """
        if isinstance(intent, UnknownCommandIntent):
            raise ClassificationError(
                f"Cannot select providers for unknown command {intent.token}",
                details={"token": intent.token}
            )

        if isinstance(intent, SuperCommandIntent):
            return self._select_super_command(intent, context, history, classify)

        return self._select_work_types(intent, context, history)

    # Super-commands

    def _select_super_command(self, intent, context, history, classify) -> SelectionResult:
        command = intent.command

        if command.strategy is SelectionStrategy.AUTO_DETECT:
            ranked = classify(context.user_input, context) if classify else ()
            result = self._select_work_types(WorkTypeIntent(ranked=tuple(ranked)), context, history)
            return SelectionResult(result.ranking, result.activation, source="auto-detect")

        if command.strategy is SelectionStrategy.HISTORY_BASED:
            provider_ids = history_frequency(history)[:HISTORY_BASED_LIMIT]
            reason = "history"
            if not provider_ids:
                provider_ids = list(self.registry.always_defaults)
                reason = "default"
            ranking = tuple(RankedProvider(pid, SUPER_COMMAND_SCORE, reason) for pid in provider_ids)
            return SelectionResult(ranking, ranking[:self.max_providers], source="history-based")

        ranking = tuple(
            RankedProvider(pid, SUPER_COMMAND_SCORE, "super-command") for pid in command.providers
        )
        return SelectionResult(ranking, ranking[:self.max_providers], source="super-command")

    # Work-type scoring

    def _select_work_types(self, intent: WorkTypeIntent, context, history) -> SelectionResult:
        scores: Dict[str, float] = {}
        reasons: Dict[str, str] = {}

        if self.auto_activation:
            for provider_id in self.registry.always_defaults:
                scores[provider_id] = ALWAYS_DEFAULT_SCORE
                reasons[provider_id] = "default"

            for provider_id in self.registry.conditional_defaults_for(context):
                if scores.get(provider_id, 0.0) < CONDITIONAL_DEFAULT_SCORE:
                    scores[provider_id] = CONDITIONAL_DEFAULT_SCORE
                    reasons[provider_id] = "conditional"

        contributions: Dict[str, float] = {}
        for match in intent.ranked[:TOP_WORK_TYPES]:
            pattern = self.registry.work_type(match.type)
            if pattern is None:
                continue
            for provider_id in pattern.recommended_providers:
                bonus = match.final_score * RECOMMENDATION_WEIGHT
                scores[provider_id] = scores.get(provider_id, 0.0) + bonus
                if bonus > contributions.get(provider_id, 0.0):
                    contributions[provider_id] = bonus
                    reasons[provider_id] = match.type

        for provider_id in list(scores):
            rate = historical_success_rate(provider_id, history)
            if rate > 0:
                scores[provider_id] *= 1 + rate * HISTORY_BONUS
                if rate > HISTORY_REASON_THRESHOLD and reasons.get(provider_id) in ("default", "conditional"):
                    reasons[provider_id] = "history"
            scores[provider_id] = min(scores[provider_id], 1.0)

        ordered = sorted(
            self._declaration_order(scores),
            key=lambda pid: scores[pid],
            reverse=True,
        )
        ranking = tuple(
            RankedProvider(pid, scores[pid], reasons.get(pid, "default"))
            for pid in ordered if scores[pid] > RANKING_THRESHOLD
        )

        activation = tuple(r for r in ranking if r.score > ACTIVATION_THRESHOLD)[:self.max_providers]
        if not activation:
            primary = self.registry.primary_default
            activation = (RankedProvider(primary.id, scores.get(primary.id, ALWAYS_DEFAULT_SCORE), "default"),)

        self.logger.debug(
            "Provider ranking: " + ", ".join(f"{r.provider_id}={r.score:.3f}" for r in ranking)
        )
        return SelectionResult(ranking, activation, source="work-type")

    def _declaration_order(self, scores: Dict[str, float]) -> List[str]:
        catalog_order = [pid for pid in self.registry.provider_ids if pid in scores]
        return catalog_order + [pid for pid in scores if pid not in catalog_order]
