"""
Typed access to one record in the key-value store

Subclasses bind a storage key to a pydantic record and decide how lenient
parsing is. Malformed stored data never raises: it is logged at WARNING and
replaced with the record's default.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from extflex.storage.base import KeyValueStore, StorageChange, Unsubscribe

logger = logging.getLogger(__name__)

T = TypeVar("T")

RecordCallback = Callable[[T], Union[None, Awaitable[None]]]


class RecordStorage(Generic[T]):
    """Base class for per-record storages"""

    key: str = ""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def default(self) -> T:
        raise NotImplementedError

    def parse(self, raw: Any) -> T:
        """Build the record from a stored value (never raises)"""
        raise NotImplementedError

    def serialize(self, data: T) -> Any:
        return data.to_record()

    async def get_raw(self) -> Optional[Any]:
        return await self.store.get(self.key)

    async def exists(self) -> bool:
        return await self.get_raw() is not None

    async def get(self) -> T:
        raw = await self.get_raw()
        if raw is None:
            return self.default()
        return self.parse(raw)

    async def save(self, data: T) -> None:
        await self.store.set(self.key, self.serialize(data))

    async def reset(self) -> None:
        await self.save(self.default())

    def on_change(self, callback: RecordCallback) -> Unsubscribe:
        """
        Call ``callback`` with the freshly parsed record whenever this key changes

        Returns:
            Function that removes the subscription
        """
        async def listener(changes: dict[str, StorageChange]) -> None:
            change = changes.get(self.key)
            if change is None:
                return
            raw = change.new_value
            data = self.default() if raw is None else self.parse(raw)
            result = callback(data)
            if inspect.isawaitable(result):
                await result

        return self.store.on_change(listener)
