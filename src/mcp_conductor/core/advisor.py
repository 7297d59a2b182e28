"""
Follow-up advice derived from an activation config and session state.
"""

from typing import Any, Dict, List, Optional

from .catalog import SuperCommandTable
from .types import (
    ActivationConfig,
    Alternative,
    Recommendations,
    RequestContext,
    Session,
    SuperCommandActivation,
)

SLOW_SESSION_SECONDS = 5.0
MOST_USED_MIN_REQUESTS = 5
FULL_SET_MIN_PROVIDERS = 3

PROVIDER_TIPS = {
    "memory": "Memory Bank is active, so conversation context carries over between requests.",
    "github": "GitHub is active and can help with version control work.",
    "postgresql": "PostgreSQL is active for database work.",
    "sequential": "Sequential is active for step-by-step reasoning on complex problems.",
}

COMMAND_TIPS = {
    "/max": "Every provider is active; expect higher resource usage.",
    "/quick": "Tuned for fast answers; some advanced capabilities are off.",
    "/auto": "Providers were chosen from the detected work type.",
    "/smart": "Providers were chosen from your usage history.",
}

PROFILE_ADVICE = {
    "spring-boot": "Spring Boot project detected: /dev or /db cover most backend work.",
    "react": "React project detected: /dev keeps documentation and file tools at hand.",
    "node-backend": "Node backend detected: /dev or /db cover most service work.",
    "database-heavy": "Database-heavy project detected: /db activates PostgreSQL with analysis support.",
    "documentation": "Documentation project detected: /learn keeps Context7 and Memory Bank active.",
}

NATURAL_LANGUAGE_EXAMPLES = (
    ("모든 서버 활성화", "/max"),
    ("자동으로 선택", "/auto"),
    ("quick answer please", "/quick"),
    ("database work", "/db"),
)


class Advisor:
    """Alternatives, tips and session-level recommendations."""

    def __init__(self, commands: SuperCommandTable, slow_session_seconds: float = SLOW_SESSION_SECONDS):
        self.commands = commands
        self.slow_session_seconds = slow_session_seconds

    def recommend(
        self,
        config: ActivationConfig,
        session: Optional[Session] = None,
        context: Optional[RequestContext] = None,
    ) -> Recommendations:
        return Recommendations(
            alternatives=tuple(self.alternatives(config)),
            tips=tuple(self.tips(config)),
            session=tuple(self.session_recommendations(session, context)) if session else (),
        )

    def alternatives(self, config: ActivationConfig) -> List[Alternative]:
        providers = set(config.providers)
        current = config.command if isinstance(config, SuperCommandActivation) else None
        alternatives = []

        if config.performance.estimated_time == "slow":
            alternatives.append(Alternative("/quick", "faster answers with a single provider"))
        if len(providers) < FULL_SET_MIN_PROVIDERS:
            alternatives.append(Alternative("/max", "use every available capability"))
        if "postgresql" in providers:
            alternatives.append(Alternative("/db", "settings specialised for database work"))
        if "filesystem" in providers and "sequential" in providers:
            alternatives.append(Alternative("/dev", "settings tuned for development work"))

        return [alt for alt in alternatives if alt.command != current and alt.command in self.commands]

    def tips(self, config: ActivationConfig) -> List[str]:
        tips = []
        if isinstance(config, SuperCommandActivation) and config.command in COMMAND_TIPS:
            tips.append(COMMAND_TIPS[config.command])

        if config.performance.cache_effective:
            tips.append("Caching is effective for this set, so repeated lookups get faster.")
        if config.performance.parallel_capable:
            tips.append("Providers can run in parallel.")

        for provider_id in config.providers:
            if provider_id in PROVIDER_TIPS:
                tips.append(PROVIDER_TIPS[provider_id])
        return tips

    def session_recommendations(self, session: Session, context: Optional[RequestContext] = None) -> List[str]:
        recommendations = []

        if session.average_time_ms > self.slow_session_seconds * 1000:
            recommendations.append("Requests in this session are slow; try /quick for lighter configurations.")

        if session.request_count > MOST_USED_MIN_REQUESTS:
            usage = session.provider_usage()
            if usage:
                provider_id = max(usage, key=lambda pid: usage[pid])
                recommendations.append(
                    f"{provider_id} is your most used provider ({usage[provider_id]} recent requests)."
                )

        if context is not None and context.project_profile in PROFILE_ADVICE:
            recommendations.append(PROFILE_ADVICE[context.project_profile])

        return recommendations

    def help(self) -> Dict[str, Any]:
        """Help payload: super-commands, aliases and natural-language examples."""
        lines = ["Super-commands:"]
        for command in self.commands.commands:
            lines.append(f"  {command.token:<10} {command.description}")

        alias_groups: Dict[str, List[str]] = {}
        for alias, token, _ in self.commands.aliases:
            alias_groups.setdefault(token, []).append(alias)

        lines.append("")
        lines.append("Aliases:")
        for token, aliases in alias_groups.items():
            lines.append(f"  {token:<10} {', '.join(aliases)}")

        lines.append("")
        lines.append("Natural language:")
        for example, token in NATURAL_LANGUAGE_EXAMPLES:
            lines.append(f"  \"{example}\" -> {token}")

        return {
            "content": "\n".join(lines),
            "commands": self.commands.tokens,
            "aliases": [alias for alias, _, _ in self.commands.aliases],
        }
