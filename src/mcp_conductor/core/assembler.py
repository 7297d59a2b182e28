"""
Activation config assembly.

Turns a SelectionResult into the final flag set, performance estimate,
cache hints and rationale.
"""

from typing import List, Sequence, Tuple

from .catalog import CapabilityRegistry
from .types import (
    ActivationConfig,
    AutoOptimizedActivation,
    CacheHint,
    FallbackActivation,
    Intent,
    PerformanceEstimate,
    RankedProvider,
    RequestContext,
    SelectionResult,
    SuperCommandActivation,
    SuperCommandIntent,
)
from ..utils.logging import get_logger

COMPRESSION_FLAG = "--uc"
THINK_FLAG = "--think"
DELEGATE_FLAG = "--delegate auto"
WAVE_FLAG = "--wave-mode auto"

COMPRESSION_MIN_PROVIDERS = 3
CACHE_PROVIDERS = ("context7", "memory")
RATIONALE_LIMIT = 3

_REASON_TEXT = {
    "default": "always-on default",
    "conditional": "enabled by project context",
    "history": "successful in earlier requests",
    "super-command": "requested by super-command",
}


def estimate_performance(provider_ids: Sequence[str]) -> PerformanceEstimate:
    count = len(provider_ids)
    if count <= 2:
        estimated_time, resource_usage = "fast", "low"
    elif count <= 3:
        estimated_time, resource_usage = "medium", "medium"
    else:
        estimated_time, resource_usage = "slow", "high"

    return PerformanceEstimate(
        estimated_time=estimated_time,
        resource_usage=resource_usage,
        cache_effective=any(pid in CACHE_PROVIDERS for pid in provider_ids),
        parallel_capable=count > 1,
    )


class ConfigAssembler:
    """Render selections into activation configs."""

    def __init__(self, registry: CapabilityRegistry, performance_optimization: bool = True):
        self.logger = get_logger(__name__)
        self.registry = registry
        self.performance_optimization = performance_optimization

    def assemble(
        self,
        selection: SelectionResult,
        context: RequestContext,
        intent: Intent,
    ) -> ActivationConfig:
        """Build the activation config for a selection.

        Super-command intents yield a SuperCommandActivation, everything else
        an AutoOptimizedActivation.
        """
        providers = tuple(dict.fromkeys(selection.provider_ids))
        command = intent.command if isinstance(intent, SuperCommandIntent) else None

        flags = self._build_flags(providers, context, command.flags if command else ())
        common = dict(
            providers=providers,
            flags=flags,
            cache_hints=self._cache_hints(providers),
            performance=estimate_performance(providers),
            rationale=self._rationale(selection.activation),
            user_friendly_command=" ".join(flags),
        )

        if command is not None:
            return SuperCommandActivation(
                command=command.token,
                name=command.name,
                description=command.description,
                options=command.options,
                **common,
            )

        return AutoOptimizedActivation(confidence=self._confidence(selection.ranking), **common)

    def fallback(self, reason: str = "") -> FallbackActivation:
        """Single primary default provider with its canonical flag."""
        primary = self.registry.primary_default
        providers = (primary.id,)
        return FallbackActivation(
            providers=providers,
            flags=(primary.canonical_flag,),
            cache_hints=self._cache_hints(providers),
            performance=estimate_performance(providers),
            rationale=f"Using the default provider {primary.name}: {primary.description}.",
            user_friendly_command=primary.canonical_flag,
            reason=reason,
        )

    def _build_flags(
        self,
        providers: Sequence[str],
        context: RequestContext,
        command_flags: Sequence[str] = (),
    ) -> Tuple[str, ...]:
        flags: List[str] = []

        for provider_id in providers:
            provider = self.registry.get(provider_id)
            if provider is not None:
                flags.append(provider.canonical_flag)

        # Provider flags only come from the kept providers; --uc is never taken from the catalog
        for flag in command_flags:
            if flag == COMPRESSION_FLAG or self.registry.is_activation_flag(flag):
                continue
            flags.append(flag)

        if context.is_complex_task:
            flags.append(THINK_FLAG)
        if context.needs_parallel_processing:
            flags.append(DELEGATE_FLAG)
        if context.is_large_project:
            flags.append(WAVE_FLAG)

        if self.performance_optimization and len(providers) >= COMPRESSION_MIN_PROVIDERS:
            flags.append(COMPRESSION_FLAG)

        return tuple(dict.fromkeys(flags))

    def _cache_hints(self, providers: Sequence[str]) -> Tuple[CacheHint, ...]:
        if not self.performance_optimization:
            return ()
        hints = []
        for provider_id in providers:
            provider = self.registry.get(provider_id)
            if provider is not None and provider_id in CACHE_PROVIDERS:
                hints.append(CacheHint(provider_id=provider_id, capabilities=tuple(sorted(provider.capabilities))))
        return tuple(hints)

    def _rationale(self, activation: Sequence[RankedProvider]) -> str:
        lines = []
        top = sorted(activation, key=lambda ranked: ranked.score, reverse=True)[:RATIONALE_LIMIT]
        for index, ranked in enumerate(top, start=1):
            provider = self.registry.get(ranked.provider_id)
            if provider is None:
                continue
            lines.append(
                f"{index}. {provider.name} ({round(ranked.score * 100)}): "
                f"{provider.description}; {self._reason_text(ranked.reason)}"
            )

        if not lines:
            return "Default provider configuration selected."
        return "\n".join(lines)

    @staticmethod
    def _reason_text(reason: str) -> str:
        if reason in _REASON_TEXT:
            return _REASON_TEXT[reason]
        return f"suited to {reason.replace('_', ' ')} work"

    @staticmethod
    def _confidence(ranking: Sequence[RankedProvider]) -> float:
        if not ranking:
            return 0.0
        return min(sum(ranked.score for ranked in ranking) / len(ranking), 1.0)
