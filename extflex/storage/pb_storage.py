"""Personal best persistence (key: extFlex_personal_bests)"""

import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from extflex.models.exercise import ExercisePersonalBests
from extflex.storage.record_storage import RecordStorage

logger = logging.getLogger(__name__)

PERSONAL_BESTS_KEY = "extFlex_personal_bests"

PersonalBestMap = Dict[str, ExercisePersonalBests]


def parse_personal_bests(raw: Any) -> Tuple[PersonalBestMap, int]:
    """
    Parse ``{exercise_id: ExercisePersonalBests}``, dropping malformed entries

    Returns:
        (records, number of dropped entries)
    """
    if not isinstance(raw, dict):
        logger.warning(f"Personal bests record is not an object ({type(raw).__name__}), using defaults")
        return {}, 1

    records: PersonalBestMap = {}
    dropped = 0
    for exercise_id, record in raw.items():
        if isinstance(record, dict) and "exerciseId" not in record and "exercise_id" not in record:
            record = {**record, "exerciseId": exercise_id}
        try:
            records[exercise_id] = ExercisePersonalBests.model_validate(record)
        except PydanticValidationError as e:
            logger.warning(f"Dropping malformed personal bests for {exercise_id}: {e.error_count()} errors")
            dropped += 1
    return records, dropped


class PersonalBestStorage(RecordStorage[PersonalBestMap]):
    """Read/write every exercise's personal bests as one record"""

    key = PERSONAL_BESTS_KEY

    def default(self) -> PersonalBestMap:
        return {}

    def parse(self, raw: Any) -> PersonalBestMap:
        records, _ = parse_personal_bests(raw)
        return records

    def serialize(self, data: PersonalBestMap) -> Any:
        return {exercise_id: record.to_record() for exercise_id, record in data.items()}

    async def get_for(self, exercise_id: str) -> Optional[ExercisePersonalBests]:
        return (await self.get()).get(exercise_id)

    async def put(self, record: ExercisePersonalBests) -> None:
        records = await self.get()
        records[record.exercise_id] = record
        await self.save(records)

    async def clear(self) -> None:
        await self.store.remove(self.key)

    async def clear_exercise(self, exercise_id: str) -> None:
        records = await self.get()
        if records.pop(exercise_id, None) is not None:
            await self.save(records)
