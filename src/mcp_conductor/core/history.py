"""
Usage history store.

Entries live in an immutable tuple that is replaced on every append, so
readers holding a snapshot never observe a partial update. Saves run as
background tasks whose PersistenceResult is kept for inspection.
"""

import asyncio
from dataclasses import replace
from typing import Any, Dict, List, Optional, Set, Tuple

from .storage import HistoryStorage, InMemoryHistoryStorage
from .types import FeedbackRecord, PersistenceResult, UsageHistoryEntry
from ..utils.error_handling import PersistenceError, validate_input
from ..utils.logging import get_logger

DEFAULT_MAX_ENTRIES = 100
SUCCESS_RATING = 3
MIN_RATING = 1
MAX_RATING = 5


class UsageHistoryStore:
    """Capped, append-only usage history with best-effort persistence."""

    def __init__(
        self,
        storage: Optional[HistoryStorage] = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        persist_on_append: bool = True,
    ):
        self.logger = get_logger(__name__)
        self.storage = storage or InMemoryHistoryStorage()
        self.max_entries = max_entries
        self.persist_on_append = persist_on_append

        self._entries: Tuple[UsageHistoryEntry, ...] = ()
        self._pending: Set[asyncio.Task] = set()
        self.last_result: Optional[PersistenceResult] = None

    async def load(self) -> int:
        """Load stored entries; a failing store leaves the history empty."""
        try:
            entries = await self.storage.load()
        except PersistenceError as e:
            self.logger.warning(f"Could not load usage history, starting empty: {e}")
            entries = []

        self._entries = tuple(entries[-self.max_entries:])
        self.logger.debug(f"Loaded {len(self._entries)} history entries")
        return len(self._entries)

    def snapshot(self) -> Tuple[UsageHistoryEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: UsageHistoryEntry) -> Optional[asyncio.Task]:
        """Append an entry, evicting the oldest beyond the cap.

        Returns:
            The scheduled save task, or None when nothing was scheduled
        """
        entries = self._entries + (entry,)
        if len(entries) > self.max_entries:
            entries = entries[-self.max_entries:]
        self._entries = entries

        if self.persist_on_append:
            return self.schedule_persist()
        return None

    def find(self, request_id: str) -> Optional[UsageHistoryEntry]:
        for entry in reversed(self._entries):
            if entry.request_id == request_id:
                return entry
        return None

    def record_feedback(self, request_id: str, rating: int, comments: str = "") -> Optional[UsageHistoryEntry]:
        """Attach feedback to the entry for ``request_id``.

        A rating of 3 or more marks the entry successful, anything lower
        marks it failed.

        Returns:
            The updated entry, or None when the request is not in history

        Raises:
            ValidationError: if the rating is outside 1..5
        """
        validate_input(
            rating, "rating", int,
            validator=lambda r: r if MIN_RATING <= r <= MAX_RATING else _raise_range(r),
        )

        updated = None
        entries = []
        for entry in self._entries:
            if updated is None and entry.request_id == request_id:
                entry = replace(
                    entry,
                    success=rating >= SUCCESS_RATING,
                    feedback=FeedbackRecord(rating=rating, comments=comments),
                )
                updated = entry
            entries.append(entry)

        if updated is None:
            self.logger.info(f"No history entry for request {request_id}")
            return None

        self._entries = tuple(entries)
        self.schedule_persist()
        return updated

    async def persist(self) -> PersistenceResult:
        """Save the current snapshot; failures come back as values."""
        try:
            result = await self.storage.save(self._entries)
        except Exception as e:
            result = PersistenceResult(ok=False, operation="save_history", error=str(e))

        if not result.ok:
            self.logger.warning(f"Usage history not persisted: {result.error}")
        self.last_result = result
        return result

    def schedule_persist(self) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (synchronous caller); the next async save picks the entry up
            return None

        task = loop.create_task(self.persist())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> List[PersistenceResult]:
        """Wait for every scheduled save."""
        results = []
        while self._pending:
            pending = list(self._pending)
            results.extend(await asyncio.gather(*pending))
            self._pending.difference_update(pending)
        return results

    def statistics(self) -> Dict[str, Any]:
        entries = self._entries
        popularity: Dict[str, int] = {}
        modes: Dict[str, int] = {}
        ratings = []

        for entry in entries:
            for provider_id in entry.providers:
                popularity[provider_id] = popularity.get(provider_id, 0) + 1
            modes[entry.mode] = modes.get(entry.mode, 0) + 1
            if entry.feedback:
                ratings.append(entry.feedback.rating)

        return {
            "total_usages": len(entries),
            "provider_popularity": dict(sorted(popularity.items(), key=lambda item: item[1], reverse=True)),
            "mode_counts": modes,
            "success_rate": (sum(1 for e in entries if e.success) / len(entries)) if entries else 0.0,
            "feedback_count": len(ratings),
            "average_rating": (sum(ratings) / len(ratings)) if ratings else 0.0,
        }


def _raise_range(rating: int):
    raise ValueError(f"must be between {MIN_RATING} and {MAX_RATING}, got {rating}")
