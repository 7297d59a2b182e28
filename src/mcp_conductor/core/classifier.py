"""
Intent classification for provider orchestration.

A request resolves, in order, to an explicit ``/command``, a command alias,
a natural-language rule, or a ranked list of work types scored from
keywords, file patterns and the project type.
"""

import re
from typing import Dict, List, Optional, Tuple

from .catalog import CapabilityRegistry, SuperCommandTable, match_file_pattern
from .types import (
    Intent,
    RequestContext,
    SuperCommandIntent,
    UnknownCommandIntent,
    WorkTypeIntent,
    WorkTypeMatch,
    WorkTypePattern,
)
from ..utils.error_handling import ClassificationError
from ..utils.logging import get_logger

KEYWORD_WEIGHT = 0.3
FILE_WEIGHT = 0.4
PROJECT_TYPE_WEIGHT = 0.3
WORK_TYPE_THRESHOLD = 0.3
NATURAL_LANGUAGE_THRESHOLD = 0.6


class IntentClassifier:
    """
    Resolve user text to a super-command or a ranked work-type list.

    Classification is pure: the same text and context always produce the
    same intent.
    """

    def __init__(self, registry: CapabilityRegistry, commands: SuperCommandTable):
        self.logger = get_logger(__name__)
        self.registry = registry
        self.commands = commands
        self._keyword_patterns: Dict[str, List[Tuple[str, "re.Pattern[str]"]]] = {
            pattern.name: [(kw, self._compile_keyword(kw)) for kw in pattern.keywords]
            for pattern in registry.work_types
        }

    @staticmethod
    def _compile_keyword(keyword: str) -> "re.Pattern[str]":
        keyword = keyword.lower()
        escaped = re.escape(keyword).replace(r"\ ", r"\s+")
        if keyword.isascii():
            return re.compile(rf"\b{escaped}\b")
        # Hangul keywords carry particles and endings, match as substrings
        return re.compile(escaped)

    def classify(self, text: str, context: Optional[RequestContext] = None) -> Intent:
        """Classify text into an intent.

        Args:
            text: Raw user input
            context: Request context; an empty context is used when omitted

        Returns:
            SuperCommandIntent, UnknownCommandIntent or WorkTypeIntent

        Raises:
            ClassificationError: if scoring fails on malformed input
        """
        context = context or RequestContext(user_input=text or "")
        if text is not None and not isinstance(text, str):
            raise ClassificationError(
                "User input must be a string",
                details={"type": type(text).__name__}
            )
        text = text or ""
        normalized = text.strip().lower()

        if normalized.startswith("/"):
            token = normalized.split()[0]
            command = self.commands.get(token)
            if command is None:
                self.logger.info(f"Unknown command token: {token}")
                return UnknownCommandIntent(token=token)
            return SuperCommandIntent(command=command, resolved_by="command")

        token = self.commands.resolve_alias(normalized)
        if token is not None:
            self.logger.debug(f"Alias resolved: {normalized!r} -> {token}")
            return SuperCommandIntent(command=self.commands.get(token), resolved_by="alias")

        token = self.match_natural_language(text)
        if token is not None:
            self.logger.debug(f"Natural language resolved: {text!r} -> {token}")
            return SuperCommandIntent(command=self.commands.get(token), resolved_by="natural_language")

        return WorkTypeIntent(ranked=tuple(self.detect_work_types(normalized, context)))

    def match_natural_language(self, text: str) -> Optional[str]:
        """Best natural-language rule above the acceptance threshold; first wins ties."""
        best_command = None
        best_confidence = 0.0

        for rule in self.commands.rules:
            if rule.pattern.search(text) and rule.confidence > best_confidence:
                best_command = rule.command
                best_confidence = rule.confidence

        return best_command if best_confidence > NATURAL_LANGUAGE_THRESHOLD else None

    def detect_work_types(self, text: str, context: RequestContext) -> List[WorkTypeMatch]:
        """Score every work type and return those above threshold, best first."""
        text = (text or "").strip().lower()
        detected = []
        for pattern in self.registry.work_types:
            score = self._score(pattern, text, context)
            if score > WORK_TYPE_THRESHOLD:
                detected.append(WorkTypeMatch(
                    type=pattern.name,
                    score=min(score, 1.0),
                    confidence=pattern.confidence,
                    final_score=score * pattern.confidence,
                ))

        # sorted() is stable, so declaration order breaks ties
        detected = sorted(detected, key=lambda match: match.final_score, reverse=True)

        if detected:
            self.logger.debug(
                "Detected work types: "
                + ", ".join(f"{m.type}({m.final_score:.2f})" for m in detected)
            )
        return detected

    def _score(self, pattern: WorkTypePattern, text: str, context: RequestContext) -> float:
        score = 0.0

        if text:
            keyword_matches = sum(
                1 for _, regex in self._keyword_patterns[pattern.name] if regex.search(text)
            )
            score += keyword_matches * KEYWORD_WEIGHT

        if context.files:
            file_matches = sum(
                1 for path in context.files
                if any(match_file_pattern(path, glob) for glob in pattern.file_patterns)
            )
            score += (file_matches / max(1, len(context.files))) * FILE_WEIGHT

        if context.project_type == pattern.name:
            score += PROJECT_TYPE_WEIGHT

        return score
