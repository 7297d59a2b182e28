"""
Session lifecycle management.

Sessions are created on first use, evicted after an idle timeout, and the
least recently accessed session is evicted when the manager is full. A
periodic sweep runs as an asyncio task between ``start()`` and ``stop()``.
"""

import asyncio
import time
import uuid
from typing import Callable, Dict, List, Optional

from .types import Session, SessionResultSummary, SessionState
from ..utils.logging import get_logger

DEFAULT_TIMEOUT_SECONDS = 3600.0
DEFAULT_MAX_SESSIONS = 100
DEFAULT_SWEEP_INTERVAL = 300.0
DEFAULT_WINDOW_SIZE = 20


def new_session_id() -> str:
    return f"session_{uuid.uuid4().hex[:12]}"


class SessionManager:
    """Owns every Session and its dispatch lock."""

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        window_size: int = DEFAULT_WINDOW_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.logger = get_logger(__name__)
        self.timeout_seconds = timeout_seconds
        self.max_sessions = max_sessions
        self.sweep_interval = sweep_interval
        self.window_size = window_size
        self.clock = clock

        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._sweep_task: Optional[asyncio.Task] = None
        self.evicted_count = 0

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def acquire(self, session_id: Optional[str] = None) -> Session:
        """Create or reuse a session and mark it accessed."""
        now = self.clock()
        session_id = session_id or new_session_id()
        session = self._sessions.get(session_id)

        if session is None:
            if len(self._sessions) >= self.max_sessions:
                self._evict_least_recent(SessionState.CAPACITY_EVICTED, keep=self.max_sessions - 1)
            session = Session(
                id=session_id,
                created_at=now,
                last_accessed=now,
                window_size=self.window_size,
            )
            self._sessions[session_id] = session
            self.logger.debug(f"Created session {session_id}")

        session.last_accessed = now
        session.request_count += 1
        session.state = SessionState.ACTIVE
        return session

    def lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def record(self, session_id: str, summary: SessionResultSummary) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            session.record(summary)

    def set_preference(self, session_id: str, key: str, value) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            session.preferences[key] = value

    def sweep(self, now: Optional[float] = None) -> List[str]:
        """Evict idle sessions, then enforce the capacity cap.

        Returns:
            Ids of evicted sessions
        """
        now = self.clock() if now is None else now
        evicted = []

        for session_id, session in list(self._sessions.items()):
            if self._is_busy(session_id):
                continue
            if now - session.last_accessed > self.timeout_seconds:
                session.state = SessionState.IDLE_TIMEOUT
                self._destroy(session_id)
                evicted.append(session_id)

        evicted.extend(self._evict_least_recent(SessionState.CAPACITY_EVICTED, keep=self.max_sessions))

        if evicted:
            self.logger.info(f"Swept {len(evicted)} session(s)")
        return evicted

    def _evict_least_recent(self, state: SessionState, keep: int) -> List[str]:
        evicted = []
        candidates = sorted(
            (s for s in self._sessions.values() if not self._is_busy(s.id)),
            key=lambda s: s.last_accessed,
        )
        overflow = len(self._sessions) - keep
        for session in candidates[:max(0, overflow)]:
            session.state = state
            self._destroy(session.id)
            evicted.append(session.id)
        return evicted

    def _is_busy(self, session_id: str) -> bool:
        lock = self._locks.get(session_id)
        return lock is not None and lock.locked()

    def _destroy(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        self._locks.pop(session_id, None)
        if session is not None:
            self.logger.debug(f"Destroyed session {session_id} ({session.state.value})")
            session.state = SessionState.DESTROYED
            self.evicted_count += 1

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                self.sweep()
            except Exception as e:
                self.logger.error(f"Session sweep failed: {e}", exc_info=True)

    def start(self) -> None:
        """Start the periodic sweep on the running loop."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_loop())

    async def stop(self) -> None:
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None

    @property
    def running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def clear(self) -> None:
        for session_id in list(self._sessions):
            self._destroy(session_id)

    def stats(self) -> Dict[str, float]:
        sessions = list(self._sessions.values())
        return {
            "active_sessions": len(sessions),
            "max_sessions": self.max_sessions,
            "evicted_sessions": self.evicted_count,
            "total_requests": sum(s.request_count for s in sessions),
        }
