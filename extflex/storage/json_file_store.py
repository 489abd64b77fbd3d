"""
JSON file key-value store

Keeps the whole store as one JSON document (DATA_PATH/store.json). The file
is read on first access and rewritten after every mutation.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from extflex import config
from extflex.exceptions import StorageReadError, wrap_storage_exception
from extflex.storage.memory_store import InMemoryStore

logger = logging.getLogger(__name__)

STORE_FILENAME = "store.json"


class JsonFileStore(InMemoryStore):
    """File-backed store; one process per file"""

    def __init__(self, path: Optional[Path] = None):
        super().__init__()
        self.path = Path(path) if path is not None else config.DATA_PATH / STORE_FILENAME
        self._loaded = False

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return

        if self.path.exists():
            try:
                document = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                raise wrap_storage_exception(e, operation="load")
            if not isinstance(document, dict):
                raise StorageReadError(
                    f"Store file {self.path} does not contain a JSON object",
                    operation="load",
                )
            self._data = document
            logger.info(f"Loaded {len(document)} keys from {self.path}")
        else:
            logger.debug(f"No store file at {self.path}, starting empty")

        self._loaded = True

    async def get(self, key: str) -> Optional[Any]:
        await self._ensure_loaded()
        return await super().get(key)

    async def set(self, key: str, value: Any) -> None:
        await self._ensure_loaded()
        await super().set(key, value)

    async def remove(self, key: str) -> None:
        await self._ensure_loaded()
        await super().remove(key)

    async def clear(self) -> None:
        await self._ensure_loaded()
        await super().clear()

    async def get_all(self) -> Dict[str, Any]:
        await self._ensure_loaded()
        return await super().get_all()

    async def _persist(self) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(self._data, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            raise wrap_storage_exception(e, operation="set")
        logger.debug(f"Wrote {len(self._data)} keys to {self.path}")
