"""Streak persistence (key: extFlex_streak) and the one-time repair flag"""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from extflex.models.streak import StreakData
from extflex.storage.record_storage import RecordStorage

logger = logging.getLogger(__name__)

STREAK_KEY = "extFlex_streak"
REPAIR_FLAG_KEY = "extFlex_streak_local_date_keys_repaired_v1"


def parse_streak(raw: Any) -> StreakData:
    """Parse a stored streak record; a malformed record becomes the zero streak"""
    try:
        return StreakData.model_validate(raw)
    except PydanticValidationError as e:
        logger.warning(f"Malformed streak record ({e.error_count()} errors), using defaults")
        return StreakData()


class StreakStorage(RecordStorage[StreakData]):
    """Read/write the streak record"""

    key = STREAK_KEY

    def default(self) -> StreakData:
        return StreakData()

    def parse(self, raw: Any) -> StreakData:
        return parse_streak(raw)

    async def is_repaired(self) -> bool:
        return bool(await self.store.get(REPAIR_FLAG_KEY))

    async def mark_repaired(self) -> None:
        await self.store.set(REPAIR_FLAG_KEY, True)
