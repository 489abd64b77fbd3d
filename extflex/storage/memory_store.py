"""
In-memory key-value store

Default backend. Nothing is persisted; values are copied on the way in and
out so callers never share mutable state with the store.
"""

import inspect
import json
import logging
from typing import Any, Dict, List, Optional

from extflex.exceptions import StorageError, wrap_storage_exception
from extflex.storage.base import ChangeCallback, KeyValueStore, StorageChange, Unsubscribe

logger = logging.getLogger(__name__)


def _copy(value: Any, key: Optional[str] = None, operation: str = "set") -> Any:
    """JSON round-trip: deep copy that also rejects non-JSON values"""
    if value is None:
        return None
    try:
        return json.loads(json.dumps(value))
    except (TypeError, ValueError) as e:
        raise wrap_storage_exception(e, operation=operation, key=key)


class InMemoryStore(KeyValueStore):
    """Dict-backed store with change notification"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = {}
        self._subscribers: List[ChangeCallback] = []
        for key, value in (initial or {}).items():
            self._data[key] = _copy(value, key)
        logger.debug(f"{self.__class__.__name__} initialized with {len(self._data)} keys")

    async def get(self, key: str) -> Optional[Any]:
        return _copy(self._data.get(key), key, operation="get")

    async def set(self, key: str, value: Any) -> None:
        new_value = _copy(value, key)
        had_key = key in self._data
        old_value = self._data.get(key)
        self._data[key] = new_value
        try:
            await self._persist()
        except StorageError:
            if had_key:
                self._data[key] = old_value
            else:
                del self._data[key]
            raise
        await self._notify({key: StorageChange(old_value=old_value, new_value=_copy(new_value))})

    async def remove(self, key: str) -> None:
        if key not in self._data:
            return
        old_value = self._data.pop(key)
        try:
            await self._persist()
        except StorageError:
            self._data[key] = old_value
            raise
        await self._notify({key: StorageChange(old_value=old_value, new_value=None)})

    async def clear(self) -> None:
        if not self._data:
            return
        removed = self._data
        self._data = {}
        try:
            await self._persist()
        except StorageError:
            self._data = removed
            raise
        await self._notify({
            key: StorageChange(old_value=value, new_value=None)
            for key, value in removed.items()
        })

    async def get_all(self) -> Dict[str, Any]:
        return _copy(self._data, operation="get_all")

    def on_change(self, callback: ChangeCallback) -> Unsubscribe:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def _persist(self) -> None:
        """Hook for durable subclasses; a StorageError here rolls the mutation back"""

    async def _notify(self, changes: Dict[str, StorageChange]) -> None:
        for callback in list(self._subscribers):
            try:
                result = callback(changes)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                # A failing observer must not undo a committed write
                logger.error(
                    f"Storage change callback failed for keys {list(changes)}: {e}",
                    exc_info=True
                )
