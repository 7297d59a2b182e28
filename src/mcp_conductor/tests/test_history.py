"""
Tests for the usage history store and its storage backends.
"""

import json
import pytest

from mcp_conductor.core.history import UsageHistoryStore
from mcp_conductor.core.storage import (
    InMemoryHistoryStorage,
    JsonFileHistoryStorage,
    JsonFileSettingsStorage,
)
from mcp_conductor.core.types import FeedbackRecord, UsageHistoryEntry
from mcp_conductor.utils.error_handling import ConfigurationError, PersistenceError, ValidationError

from conftest import make_entry


class TestUsageHistoryStore:
    """Test append, cap and snapshot behaviour."""

    def test_append_without_loop_does_not_schedule(self):
        store = UsageHistoryStore()
        assert store.append(make_entry("r1", ["context7"])) is None
        assert len(store) == 1

    def test_cap_keeps_most_recent(self):
        store = UsageHistoryStore(max_entries=100, persist_on_append=False)
        for n in range(101):
            store.append(make_entry(f"r{n}", ["context7"]))

        entries = store.snapshot()
        assert len(entries) == 100
        assert entries[0].request_id == "r1"
        assert entries[-1].request_id == "r100"

    def test_snapshot_is_stable(self):
        store = UsageHistoryStore(persist_on_append=False)
        store.append(make_entry("r1", ["context7"]))
        snapshot = store.snapshot()

        store.append(make_entry("r2", ["memory"]))

        assert len(snapshot) == 1
        assert len(store.snapshot()) == 2

    def test_find(self):
        store = UsageHistoryStore(persist_on_append=False)
        store.append(make_entry("r1", ["context7"]))

        assert store.find("r1").providers == ("context7",)
        assert store.find("missing") is None

    @pytest.mark.asyncio
    async def test_append_schedules_save(self):
        storage = InMemoryHistoryStorage()
        store = UsageHistoryStore(storage)

        task = store.append(make_entry("r1", ["context7"]))
        results = await store.drain()

        assert task is not None
        assert results[0].ok
        assert [e.request_id for e in storage.entries] == ["r1"]
        assert store.last_result.ok

    @pytest.mark.asyncio
    async def test_failed_save_is_a_value(self):
        store = UsageHistoryStore(InMemoryHistoryStorage(fail_saves=True))
        store.append(make_entry("r1", ["context7"]))

        results = await store.drain()

        assert results[0].ok is False
        assert results[0].error == "storage unavailable"
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_load_respects_cap(self):
        storage = InMemoryHistoryStorage([make_entry(f"r{n}", ["memory"]) for n in range(5)])
        store = UsageHistoryStore(storage, max_entries=3)

        assert await store.load() == 3
        assert store.snapshot()[0].request_id == "r2"

    @pytest.mark.asyncio
    async def test_load_failure_starts_empty(self):
        class BrokenStorage(InMemoryHistoryStorage):
            async def load(self):
                raise PersistenceError("disk gone")

        store = UsageHistoryStore(BrokenStorage())

        assert await store.load() == 0
        assert store.snapshot() == ()


class TestFeedback:
    """Test feedback recording and statistics."""

    @pytest.mark.asyncio
    async def test_low_rating_marks_failure(self):
        store = UsageHistoryStore(persist_on_append=False)
        store.append(make_entry("r1", ["postgresql"]))

        entry = store.record_feedback("r1", 2, "too slow")
        await store.drain()

        assert entry.success is False
        assert entry.feedback.rating == 2
        assert entry.feedback.comments == "too slow"
        assert store.find("r1").success is False

    def test_good_rating_marks_success(self):
        store = UsageHistoryStore(persist_on_append=False)
        store.append(make_entry("r1", ["memory"], success=False))

        assert store.record_feedback("r1", 3).success is True

    def test_unknown_request(self):
        store = UsageHistoryStore(persist_on_append=False)
        assert store.record_feedback("missing", 5) is None

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_range(self, rating):
        store = UsageHistoryStore(persist_on_append=False)
        store.append(make_entry("r1", ["memory"]))

        with pytest.raises(ValidationError):
            store.record_feedback("r1", rating)

    def test_rating_type(self):
        store = UsageHistoryStore(persist_on_append=False)
        with pytest.raises(ValidationError):
            store.record_feedback("r1", "5")

    def test_statistics(self):
        store = UsageHistoryStore(persist_on_append=False)
        store.append(make_entry("r1", ["context7", "memory"]))
        store.append(make_entry("r2", ["memory"], mode="super-command"))
        store.append(make_entry("r3", ["postgresql"]))
        store.record_feedback("r3", 1)
        store.record_feedback("r1", 5)

        stats = store.statistics()

        assert stats["total_usages"] == 3
        assert list(stats["provider_popularity"]) == ["memory", "context7", "postgresql"]
        assert stats["mode_counts"] == {"auto-optimized": 2, "super-command": 1}
        assert stats["success_rate"] == pytest.approx(2 / 3)
        assert stats["feedback_count"] == 2
        assert stats["average_rating"] == 3.0

    def test_empty_statistics(self):
        stats = UsageHistoryStore().statistics()
        assert stats["total_usages"] == 0
        assert stats["success_rate"] == 0.0


class TestUsageHistoryEntry:

    def test_dict_conversion(self):
        entry = make_entry("r1", ["context7"])
        entry = UsageHistoryEntry(**{**entry.__dict__, "feedback": FeedbackRecord(rating=4, comments="ok")})

        data = entry.to_dict()

        assert data["providers"] == ["context7"]
        assert data["feedback"]["rating"] == 4
        assert UsageHistoryEntry.from_dict(data) == entry

    def test_from_dict_defaults(self):
        entry = UsageHistoryEntry.from_dict({"timestamp": "2024-01-01T00:00:00", "request_id": "r1"})

        assert entry.providers == ()
        assert entry.mode == "auto-optimized"
        assert entry.success is True


class TestJsonFileHistoryStorage:
    """Test the JSON file history backend."""

    @pytest.mark.asyncio
    async def test_missing_file_loads_empty(self, tmp_path):
        storage = JsonFileHistoryStorage(tmp_path / "history.json")
        assert await storage.load() == []

    @pytest.mark.asyncio
    async def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "history.json"
        storage = JsonFileHistoryStorage(path, timeout=5)
        entries = [make_entry("r1", ["context7"]), make_entry("r2", ["memory", "github"])]

        result = await storage.save(entries)

        assert result.ok
        assert result.entries == 2
        assert json.loads(path.read_text(encoding="utf-8"))[1]["providers"] == ["memory", "github"]
        assert await storage.load() == entries

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceError) as exc_info:
            await JsonFileHistoryStorage(path).load()
        assert exc_info.value.details["error_type"] == "decode"

    @pytest.mark.asyncio
    async def test_non_array_raises(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text('{"entries": []}', encoding="utf-8")

        with pytest.raises(PersistenceError):
            await JsonFileHistoryStorage(path).load()

    @pytest.mark.asyncio
    async def test_save_failure_is_a_value(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")

        result = await JsonFileHistoryStorage(blocker / "history.json").save([make_entry("r1", ["memory"])])

        assert result.ok is False
        assert "save_history failed" in result.error


class TestJsonFileSettingsStorage:
    """Test the JSON file settings backend."""

    def test_missing_file(self, tmp_path):
        assert JsonFileSettingsStorage(tmp_path / "settings.json").load() == {}

    @pytest.mark.asyncio
    async def test_save_and_load(self, tmp_path):
        storage = JsonFileSettingsStorage(tmp_path / "settings.json")

        result = await storage.save({"maxProviders": 2})

        assert result.ok
        assert storage.load() == {"maxProviders": 2}

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("maxProviders: 2", encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            JsonFileSettingsStorage(path).load()
        assert exc_info.value.details["error_type"] == "corrupt_settings"

    def test_non_object(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="JSON object"):
            JsonFileSettingsStorage(path).load()
