"""
PersonalBestService - Personal Best Tracking

Non-weighted exercises track the single best set; weighted exercises track
one best per weight level.
"""

import logging
from typing import Callable, Dict, Optional

from extflex.catalog import get_exercise_by_id
from extflex.gamification.personal_bests import (
    evaluate_personal_best,
    get_highest_pb,
    get_pb_for,
)
from extflex.models.exercise import (
    ExerciseDefinition,
    ExercisePersonalBests,
    PBCheckResult,
    PersonalBest,
)
from extflex.storage.base import KeyValueStore, Unsubscribe
from extflex.storage.pb_storage import PersonalBestStorage
from extflex.storage.record_storage import RecordCallback
from extflex.utils.datetime_helpers import Clock, now_utc, to_timestamp_ms

logger = logging.getLogger(__name__)

ExerciseLookup = Callable[[str], Optional[ExerciseDefinition]]


class PersonalBestService:
    """Service for personal bests"""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Optional[Clock] = None,
        exercise_lookup: ExerciseLookup = get_exercise_by_id,
    ):
        self.storage = PersonalBestStorage(store)
        self._clock = clock or now_utc
        self._lookup = exercise_lookup
        logger.debug("PersonalBestService initialized")

    async def check_and_update_pb(
        self,
        exercise_id: str,
        value: int,
        weight: Optional[float] = None,
    ) -> PBCheckResult:
        """
        Check if a logged set is a personal best and store it if so

        Args:
            exercise_id: Exercise ID (e.g., 'pushups')
            value: Reps or seconds
            weight: Weight used (weighted exercises only)

        Returns:
            PBCheckResult: is_new_pb is False, with nothing written, for an
            unknown exercise or a weighted exercise logged without a weight
        """
        exercise = self._lookup(exercise_id)
        if exercise is None:
            logger.debug(f"No PB tracking for unknown exercise {exercise_id}")
            return PBCheckResult(is_new_pb=False)

        record = await self.storage.get_for(exercise_id)
        result, updated = evaluate_personal_best(
            exercise, record, value, weight, to_timestamp_ms(self._clock())
        )

        if updated is not None:
            await self.storage.put(updated)
            suffix = f" at weight {weight}" if exercise.requires_weight else ""
            logger.info(f"New personal best for {exercise_id}: {value}{suffix}")

        return result

    async def get_personal_bests(self) -> Dict[str, ExercisePersonalBests]:
        return await self.storage.get()

    async def get_exercise_pbs(self, exercise_id: str) -> Optional[ExercisePersonalBests]:
        return await self.storage.get_for(exercise_id)

    async def get_current_pb(
        self,
        exercise_id: str,
        weight: Optional[float] = None,
    ) -> Optional[PersonalBest]:
        """PB at a weight level for weighted exercises, else the single PB"""
        record = await self.storage.get_for(exercise_id)
        return get_pb_for(record, self._lookup(exercise_id), weight)

    async def get_weighted_pbs(self, exercise_id: str) -> Dict[str, PersonalBest]:
        record = await self.storage.get_for(exercise_id)
        if record is None:
            return {}
        return dict(record.weighted_pbs or {})

    async def get_highest_weighted_pb(self, exercise_id: str) -> Optional[PersonalBest]:
        """Best set across all weights, for an "overall best" display"""
        return get_highest_pb(await self.get_weighted_pbs(exercise_id))

    async def clear_all_pbs(self) -> None:
        await self.storage.clear()
        logger.info("All personal bests cleared")

    async def clear_exercise_pbs(self, exercise_id: str) -> None:
        await self.storage.clear_exercise(exercise_id)
        logger.info(f"Personal bests cleared for {exercise_id}")

    def on_change(self, callback: RecordCallback) -> Unsubscribe:
        return self.storage.on_change(callback)
