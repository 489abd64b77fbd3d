"""Tests for the in-memory and JSON file key-value stores"""
import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from extflex import config
from extflex.exceptions import StorageReadError, StorageWriteError
from extflex.storage.base import StorageChange
from extflex.storage.json_file_store import JsonFileStore
from extflex.storage.memory_store import InMemoryStore


# ============================================================================
# InMemoryStore
# ============================================================================

class TestInMemoryStore:
    """Basic get/set/remove/clear semantics"""

    @pytest.mark.asyncio
    async def test_get_missing_key_returns_none(self):
        store = InMemoryStore()
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_set_then_get(self):
        store = InMemoryStore()
        await store.set("k", {"a": [1, 2]})

        assert await store.get("k") == {"a": [1, 2]}

    @pytest.mark.asyncio
    async def test_values_are_copied(self):
        store = InMemoryStore()
        value = {"a": [1]}
        await store.set("k", value)
        value["a"].append(2)

        stored = await store.get("k")
        stored["a"].append(3)

        assert await store.get("k") == {"a": [1]}

    @pytest.mark.asyncio
    async def test_initial_values(self):
        store = InMemoryStore({"k": 1})
        assert await store.get_all() == {"k": 1}

    @pytest.mark.asyncio
    async def test_non_json_value_rejected(self):
        store = InMemoryStore()

        with pytest.raises(StorageWriteError) as exc_info:
            await store.set("k", {"bad": {1, 2}})

        assert exc_info.value.key == "k"
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_remove_and_clear(self):
        store = InMemoryStore({"a": 1, "b": 2})

        await store.remove("a")
        await store.remove("a")
        assert await store.get_all() == {"b": 2}

        await store.clear()
        assert await store.get_all() == {}


class TestChangeNotification:
    """on_change subscriptions"""

    @pytest.mark.asyncio
    async def test_set_notifies_old_and_new_value(self):
        store = InMemoryStore({"k": 1})
        callback = MagicMock()
        store.on_change(callback)

        await store.set("k", 2)

        callback.assert_called_once_with({"k": StorageChange(old_value=1, new_value=2)})

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited(self):
        store = InMemoryStore()
        callback = AsyncMock()
        store.on_change(callback)

        await store.set("k", "v")

        callback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_remove_absent_key_does_not_notify(self):
        store = InMemoryStore()
        callback = MagicMock()
        store.on_change(callback)

        await store.remove("missing")
        await store.clear()

        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_clear_notifies_every_key(self):
        store = InMemoryStore({"a": 1, "b": 2})
        callback = MagicMock()
        store.on_change(callback)

        await store.clear()

        changes = callback.call_args[0][0]
        assert set(changes) == {"a", "b"}
        assert changes["a"].new_value is None

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        store = InMemoryStore()
        callback = MagicMock()
        unsubscribe = store.on_change(callback)
        unsubscribe()
        unsubscribe()

        await store.set("k", 1)

        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_undo_write(self):
        store = InMemoryStore()
        store.on_change(MagicMock(side_effect=RuntimeError("boom")))
        second = MagicMock()
        store.on_change(second)

        await store.set("k", 1)

        assert await store.get("k") == 1
        second.assert_called_once()


# ============================================================================
# JsonFileStore
# ============================================================================

class TestJsonFileStore:
    """File-backed persistence"""

    @pytest.mark.asyncio
    async def test_writes_survive_a_new_instance(self, tmp_path):
        path = tmp_path / "store.json"
        store = JsonFileStore(path)
        await store.set("extFlex_streak", {"current": 3})

        reopened = JsonFileStore(path)

        assert await reopened.get("extFlex_streak") == {"current": 3}
        assert json.loads(path.read_text(encoding="utf-8")) == {"extFlex_streak": {"current": 3}}

    @pytest.mark.asyncio
    async def test_missing_file_starts_empty(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested" / "store.json")

        assert await store.get_all() == {}
        await store.set("k", 1)
        assert (tmp_path / "nested" / "store.json").exists()

    @pytest.mark.asyncio
    async def test_no_temp_file_left_behind(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        await store.set("k", 1)

        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

    @pytest.mark.asyncio
    async def test_invalid_json_raises_read_error(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageReadError):
            await JsonFileStore(path).get("k")

    @pytest.mark.asyncio
    async def test_non_object_document_raises_read_error(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(StorageReadError):
            await JsonFileStore(path).get_all()

    @pytest.mark.asyncio
    async def test_remove_persists(self, tmp_path):
        path = tmp_path / "store.json"
        store = JsonFileStore(path)
        await store.set("a", 1)
        await store.set("b", 2)
        await store.remove("a")

        assert await JsonFileStore(path).get_all() == {"b": 2}

    def test_default_path_uses_data_path(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "DATA_PATH", tmp_path)

        assert JsonFileStore().path == tmp_path / "store.json"


class TestFailedWrites:
    """A write that cannot be persisted leaves the store as it was"""

    @pytest.mark.asyncio
    async def test_failed_set_is_not_visible(self, tmp_path):
        """Test a new key is dropped when the file cannot be written"""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = JsonFileStore(blocker / "store.json")

        with pytest.raises(StorageWriteError):
            await store.set("k", 1)

        assert await store.get("k") is None
        assert await store.get_all() == {}

    @pytest.mark.asyncio
    async def test_failed_overwrite_keeps_old_value(self):
        store = InMemoryStore({"k": 1})
        callback = MagicMock()
        store.on_change(callback)

        with patch.object(store, "_persist", AsyncMock(side_effect=StorageWriteError("disk full"))):
            with pytest.raises(StorageWriteError):
                await store.set("k", 2)

        assert await store.get("k") == 1
        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_remove_keeps_key(self):
        store = InMemoryStore({"k": 1})

        with patch.object(store, "_persist", AsyncMock(side_effect=StorageWriteError("disk full"))):
            with pytest.raises(StorageWriteError):
                await store.remove("k")

        assert await store.get("k") == 1

    @pytest.mark.asyncio
    async def test_failed_clear_keeps_everything(self):
        store = InMemoryStore({"a": 1, "b": 2})

        with patch.object(store, "_persist", AsyncMock(side_effect=StorageWriteError("disk full"))):
            with pytest.raises(StorageWriteError):
                await store.clear()

        assert await store.get_all() == {"a": 1, "b": 2}

    @pytest.mark.asyncio
    async def test_later_write_does_not_flush_failed_value(self, tmp_path):
        """Test a rolled-back value never reaches disk with the next write"""
        path = tmp_path / "store.json"
        store = JsonFileStore(path)
        await store.set("a", 1)

        with patch.object(store, "_persist", AsyncMock(side_effect=StorageWriteError("disk full"))):
            with pytest.raises(StorageWriteError):
                await store.set("b", 2)
        await store.set("c", 3)

        assert json.loads(path.read_text(encoding="utf-8")) == {"a": 1, "c": 3}
