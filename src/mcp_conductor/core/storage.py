"""
Storage backends for usage history and settings.

Both interfaces have an in-memory implementation for tests and a JSON file
implementation for production. File I/O runs in the default executor so the
event loop never blocks on disk.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .types import PersistenceResult, UsageHistoryEntry
from ..utils.error_handling import (
    AsyncStorageMixin,
    ConfigurationError,
    PersistenceError,
    handle_persistence_operation,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)


class HistoryStorage(ABC):
    """Where usage history lives between runs."""

    @abstractmethod
    async def load(self) -> List[UsageHistoryEntry]:
        """Return stored entries, oldest first.

        Raises:
            PersistenceError: if the backing store cannot be read
        """

    @abstractmethod
    async def save(self, entries: Sequence[UsageHistoryEntry]) -> PersistenceResult:
        """Replace the stored entries. Never raises."""


class SettingsStorage(ABC):
    """Where orchestration option overrides live between runs."""

    @abstractmethod
    def load(self) -> Dict[str, Any]:
        """Return stored options.

        Raises:
            ConfigurationError: if stored settings are corrupt
        """

    @abstractmethod
    async def save(self, options: Dict[str, Any]) -> PersistenceResult:
        """Replace stored options. Never raises."""


class InMemoryHistoryStorage(HistoryStorage):
    """History kept in process; optionally primed and made to fail for tests."""

    def __init__(self, entries: Optional[Sequence[UsageHistoryEntry]] = None, fail_saves: bool = False):
        self.entries: List[UsageHistoryEntry] = list(entries or [])
        self.fail_saves = fail_saves
        self.save_count = 0

    async def load(self) -> List[UsageHistoryEntry]:
        return list(self.entries)

    async def save(self, entries: Sequence[UsageHistoryEntry]) -> PersistenceResult:
        self.save_count += 1
        if self.fail_saves:
            return PersistenceResult(ok=False, operation="save_history", error="storage unavailable")
        self.entries = list(entries)
        return PersistenceResult(ok=True, operation="save_history", entries=len(self.entries))


class InMemorySettingsStorage(SettingsStorage):

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options: Dict[str, Any] = dict(options or {})

    def load(self) -> Dict[str, Any]:
        return dict(self.options)

    async def save(self, options: Dict[str, Any]) -> PersistenceResult:
        self.options = dict(options)
        return PersistenceResult(ok=True, operation="save_settings", entries=len(self.options))


class JsonFileHistoryStorage(HistoryStorage, AsyncStorageMixin):
    """History stored as a JSON array of entries."""

    def __init__(self, path: Union[str, Path], timeout: Optional[float] = None):
        self.path = Path(path).expanduser()
        self.timeout = timeout

    @handle_persistence_operation("load_history")
    def _read(self) -> List[UsageHistoryEntry]:
        if not self.path.exists():
            return []
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"{self.path} must contain a JSON array")
        return [UsageHistoryEntry.from_dict(item) for item in data]

    @handle_persistence_operation("save_history")
    def _write(self, entries: Sequence[UsageHistoryEntry]) -> int:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump([entry.to_dict() for entry in entries], f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.path)
        return len(entries)

    async def load(self) -> List[UsageHistoryEntry]:
        return await self.run_sync_in_executor(self._read, timeout=self.timeout)

    async def save(self, entries: Sequence[UsageHistoryEntry]) -> PersistenceResult:
        try:
            count = await self.run_sync_in_executor(self._write, list(entries), timeout=self.timeout)
            return PersistenceResult(ok=True, operation="save_history", entries=count)
        except PersistenceError as e:
            logger.warning(f"History save failed: {e}")
            return PersistenceResult(ok=False, operation="save_history", error=str(e))


class JsonFileSettingsStorage(SettingsStorage, AsyncStorageMixin):
    """Option overrides stored as a JSON object."""

    def __init__(self, path: Union[str, Path], timeout: Optional[float] = None):
        self.path = Path(path).expanduser()
        self.timeout = timeout

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Cannot read settings file {self.path}: {e}",
                details={"error_type": "corrupt_settings", "path": str(self.path)}
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Settings file {self.path} must contain a JSON object",
                details={"error_type": "corrupt_settings", "path": str(self.path)}
            )
        return data

    @handle_persistence_operation("save_settings")
    def _write(self, options: Dict[str, Any]) -> int:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(options, f, indent=2, ensure_ascii=False)
        return len(options)

    async def save(self, options: Dict[str, Any]) -> PersistenceResult:
        try:
            count = await self.run_sync_in_executor(self._write, dict(options), timeout=self.timeout)
            return PersistenceResult(ok=True, operation="save_settings", entries=count)
        except PersistenceError as e:
            logger.warning(f"Settings save failed: {e}")
            return PersistenceResult(ok=False, operation="save_settings", error=str(e))
