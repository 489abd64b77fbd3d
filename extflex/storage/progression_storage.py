"""Progression snapshot persistence (key: extFlex_progression)"""

import logging
from typing import Any, Tuple

from pydantic import ValidationError as PydanticValidationError

from extflex.models.progression import ExerciseProgress, ProgressionData, UnlockedAchievement
from extflex.storage.record_storage import RecordStorage

logger = logging.getLogger(__name__)

PROGRESSION_KEY = "extFlex_progression"


def parse_progression(raw: Any) -> Tuple[ProgressionData, int]:
    """
    Leniently parse a stored or imported progression snapshot

    Invalid exercise records and achievements are dropped individually;
    duplicate achievements keep their first unlock. A stored ``level`` key is
    ignored since level always follows from xp.

    Returns:
        (snapshot, number of dropped records)
    """
    if not isinstance(raw, dict):
        logger.warning(f"Progression record is not an object ({type(raw).__name__}), using defaults")
        return ProgressionData(), 1

    dropped = 0

    exercises = {}
    raw_exercises = raw.get("exercises") or {}
    if not isinstance(raw_exercises, dict):
        logger.warning("Progression 'exercises' is not an object, ignoring it")
        raw_exercises = {}
        dropped += 1
    for exercise_id, record in raw_exercises.items():
        try:
            exercises[exercise_id] = ExerciseProgress.model_validate(record)
        except PydanticValidationError as e:
            logger.warning(f"Dropping malformed progress for {exercise_id}: {e.error_count()} errors")
            dropped += 1

    achievements = []
    seen = set()
    raw_achievements = raw.get("achievements") or []
    if not isinstance(raw_achievements, list):
        logger.warning("Progression 'achievements' is not a list, ignoring it")
        raw_achievements = []
        dropped += 1
    for record in raw_achievements:
        try:
            achievement = UnlockedAchievement.model_validate(record)
        except PydanticValidationError:
            logger.warning(f"Dropping malformed achievement record: {record!r}")
            dropped += 1
            continue
        if achievement.achievement_id in seen:
            continue
        seen.add(achievement.achievement_id)
        achievements.append(achievement)

    exercise_xp = sum(p.xp for p in exercises.values())
    total_xp = raw.get("totalXp", raw.get("total_xp"))
    if not isinstance(total_xp, int) or isinstance(total_xp, bool) or total_xp < 0:
        if total_xp is not None:
            logger.warning(f"Invalid totalXp {total_xp!r}, recomputing from exercises")
            dropped += 1
        total_xp = exercise_xp

    started_at = raw.get("startedAt", raw.get("started_at"))
    if started_at is not None and (not isinstance(started_at, int) or isinstance(started_at, bool)):
        logger.warning(f"Invalid startedAt {started_at!r}, clearing it")
        started_at = None

    data = ProgressionData(
        exercises=exercises,
        achievements=achievements,
        total_xp=total_xp,
        started_at=started_at,
    )
    return data, dropped


class ProgressionStorage(RecordStorage[ProgressionData]):
    """Read/write the progression snapshot"""

    key = PROGRESSION_KEY

    def default(self) -> ProgressionData:
        return ProgressionData()

    def parse(self, raw: Any) -> ProgressionData:
        data, _ = parse_progression(raw)
        return data
