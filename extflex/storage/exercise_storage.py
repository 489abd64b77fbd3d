"""
Exercise entry log persistence

Keys:
- extFlex_exercises: list of ExerciseEntry records, oldest first
- extFlex_last_exercise: timestamp (ms) of the most recent log

Installs from before the rename stored the same data under trainer_* keys;
migrate_legacy_keys() copies it over once.
"""

import logging
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from extflex.models.exercise import ExerciseEntry
from extflex.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

EXERCISES_KEY = "extFlex_exercises"
LAST_EXERCISE_KEY = "extFlex_last_exercise"

LEGACY_EXERCISES_KEY = "trainer_exercises"
LEGACY_LAST_EXERCISE_KEY = "trainer_last_exercise"
MIGRATION_FLAG_KEY = "extFlex_exercise_migration_done"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_entries(raw: Any) -> Tuple[List[ExerciseEntry], int]:
    """
    Parse a list of entry records, dropping invalid ones

    An entry needs a string id and exerciseId and numeric value and timestamp.

    Returns:
        (entries, number of dropped records)
    """
    if not isinstance(raw, list):
        logger.warning(f"Exercise log is not a list ({type(raw).__name__}), ignoring it")
        return [], 1

    entries = []
    dropped = 0
    for record in raw:
        if not (
            isinstance(record, dict)
            and isinstance(record.get("id"), str)
            and isinstance(record.get("exerciseId", record.get("exercise_id")), str)
            and _is_number(record.get("value"))
            and _is_number(record.get("timestamp"))
        ):
            dropped += 1
            continue
        try:
            entries.append(ExerciseEntry.model_validate(record))
        except PydanticValidationError:
            dropped += 1

    if dropped:
        logger.warning(f"Dropped {dropped} malformed exercise entries")
    return entries, dropped


class ExerciseStorage:
    """Append-only exercise log plus the last-exercise timestamp"""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get_all_entries(self) -> List[ExerciseEntry]:
        raw = await self.store.get(EXERCISES_KEY)
        if raw is None:
            return []
        entries, _ = parse_entries(raw)
        return entries

    async def save_entries(self, entries: List[ExerciseEntry]) -> None:
        await self.store.set(EXERCISES_KEY, [e.to_record() for e in entries])

    async def append(self, entry: ExerciseEntry) -> None:
        entries = await self.get_all_entries()
        entries.append(entry)
        await self.save_entries(entries)
        await self.store.set(LAST_EXERCISE_KEY, entry.timestamp)

    async def replace_entries(self, entries: List[ExerciseEntry]) -> None:
        """Overwrite the log and point the last-exercise time at its newest entry"""
        await self.save_entries(entries)
        if entries:
            await self.store.set(LAST_EXERCISE_KEY, max(e.timestamp for e in entries))
        else:
            await self.store.remove(LAST_EXERCISE_KEY)

    async def delete_entry(self, entry_id: str) -> bool:
        entries = await self.get_all_entries()
        remaining = [e for e in entries if e.id != entry_id]
        if len(remaining) == len(entries):
            return False
        await self.save_entries(remaining)
        return True

    async def get_last_exercise_time(self) -> Optional[int]:
        value = await self.store.get(LAST_EXERCISE_KEY)
        return value if _is_number(value) else None

    async def clear_history(self) -> None:
        await self.store.remove(EXERCISES_KEY)
        await self.store.remove(LAST_EXERCISE_KEY)

    async def migrate_legacy_keys(self) -> bool:
        """
        Copy trainer_* data to the extFlex_* keys once

        Existing new-key data is never overwritten.

        Returns:
            True if the migration ran now, False if it had already run
        """
        if await self.store.get(MIGRATION_FLAG_KEY):
            return False

        old_entries = await self.store.get(LEGACY_EXERCISES_KEY)
        if isinstance(old_entries, list) and old_entries:
            current = await self.store.get(EXERCISES_KEY)
            if not current:
                await self.store.set(EXERCISES_KEY, old_entries)
                logger.info(f"Migrated {len(old_entries)} exercise entries from legacy storage keys")

        old_last = await self.store.get(LEGACY_LAST_EXERCISE_KEY)
        if old_last:
            if not await self.store.get(LAST_EXERCISE_KEY):
                await self.store.set(LAST_EXERCISE_KEY, old_last)

        await self.store.set(MIGRATION_FLAG_KEY, True)
        logger.info("Exercise storage migration complete")
        return True
