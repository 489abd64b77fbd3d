"""
Key-value store contract

Every record (progression, streak, personal bests, entry log) is one JSON
value under one key. Stores offer no multi-key transactions and no locking:
two writers doing read-modify-write on the same key race, and the later
write wins.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Union


@dataclass(frozen=True)
class StorageChange:
    """Old and new value of one key after a mutation (None means absent)"""
    old_value: Any = None
    new_value: Any = None


ChangeCallback = Callable[[Dict[str, StorageChange]], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]


class KeyValueStore(ABC):
    """
    Asynchronous key-value store

    Values are JSON-compatible (dicts, lists, strings, numbers, booleans).
    A read after a write in the same call chain observes the write.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Value stored under key, or None"""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value"""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete key (no-op if absent)"""

    @abstractmethod
    async def clear(self) -> None:
        """Delete every key"""

    @abstractmethod
    async def get_all(self) -> Dict[str, Any]:
        """Snapshot of every stored key"""

    @abstractmethod
    def on_change(self, callback: ChangeCallback) -> Unsubscribe:
        """
        Subscribe to mutations

        The callback receives ``{key: StorageChange}`` for every key a
        mutation touched. Coroutine callbacks are awaited.

        Returns:
            Function that removes the subscription
        """
