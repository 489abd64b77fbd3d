"""
ExerciseLogService - Exercise Logging Pipeline

log_exercise() runs the full pipeline for one set:
entry log -> personal best -> XP/unlocks/achievements -> streak.

The steps are separate writes. If the process dies halfway, earlier steps
stay applied and later ones never run; there is no rollback.
"""

import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional
from uuid import uuid4

from extflex.catalog import get_default_enabled_ids, get_exercise_by_id
from extflex.exceptions import UnknownExerciseError, ValidationError
from extflex.models.exercise import (
    ExerciseDefinition,
    ExerciseEntry,
    ExerciseStats,
    PBCheckResult,
)
from extflex.services.personal_best_service import ExerciseLookup, PersonalBestService
from extflex.services.progression_service import ProgressionService
from extflex.services.streak_service import StreakService
from extflex.storage.base import KeyValueStore
from extflex.storage.exercise_storage import ExerciseStorage
from extflex.utils.datetime_helpers import (
    Clock,
    date_key_for,
    date_key_for_timestamp,
    now_utc,
    parse_date_key,
    to_timestamp_ms,
    week_start_key,
)

logger = logging.getLogger(__name__)


def compute_stats(entries: Iterable[ExerciseEntry], exercise_id: Optional[str] = None) -> ExerciseStats:
    """Sum values and count sets, optionally for one exercise"""
    selected = [e for e in entries if exercise_id is None or e.exercise_id == exercise_id]
    return ExerciseStats(
        total_value=sum(e.value for e in selected),
        set_count=len(selected),
    )


class ExerciseLogService:
    """
    Service for logging exercises and querying the entry log.

    Responsibilities:
    - Input validation
    - Appending entries
    - Driving the PB, progression and streak services for each set
    - Entry queries and stats
    """

    def __init__(
        self,
        store: KeyValueStore,
        progression_service: ProgressionService,
        streak_service: StreakService,
        personal_best_service: PersonalBestService,
        clock: Optional[Clock] = None,
        exercise_lookup: ExerciseLookup = get_exercise_by_id,
    ):
        self.storage = ExerciseStorage(store)
        self.progression_service = progression_service
        self.streak_service = streak_service
        self.personal_best_service = personal_best_service
        self._clock = clock or now_utc
        self._lookup = exercise_lookup
        logger.debug("ExerciseLogService initialized")

    def _validate(self, exercise_id: str, value: int, weight: Optional[float]) -> ExerciseDefinition:
        exercise = self._lookup(exercise_id)
        if exercise is None:
            raise UnknownExerciseError(exercise_id)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValidationError(
                f"Value must be a positive whole number, got {value!r}",
                field="value",
                value=value,
            )
        if weight is not None and (isinstance(weight, bool) or weight <= 0):
            raise ValidationError(
                f"Weight must be positive, got {weight!r}",
                field="weight",
                value=weight,
            )
        return exercise

    async def log_exercise(
        self,
        exercise_id: str,
        value: int,
        weight: Optional[float] = None,
        session_id: Optional[str] = None,
    ) -> PBCheckResult:
        """
        Log one set and apply every consequence

        Args:
            exercise_id: Exercise ID (e.g., 'pushups')
            value: Reps or seconds; also the XP earned
            weight: Weight used (weighted exercises)
            session_id: Optional grouping id for sets done together

        Returns:
            PBCheckResult for the set. Unlock and achievement notices go to
            progression_service.unlock_queue; a streak milestone is held in
            streak_service.pending_milestone.

        Raises:
            UnknownExerciseError: exercise_id is not in the catalog
            ValidationError: value (or weight) is not positive
        """
        self._validate(exercise_id, value, weight)

        entry = ExerciseEntry(
            id=uuid4().hex,
            exercise_id=exercise_id,
            value=value,
            timestamp=to_timestamp_ms(self._clock()),
            session_id=session_id,
            weight=weight,
        )
        await self.storage.append(entry)
        logger.info(f"Logged {value} of {exercise_id}" + (f" at weight {weight}" if weight is not None else ""))

        pb_result = await self.personal_best_service.check_and_update_pb(exercise_id, value, weight)
        await self.progression_service.add_xp(exercise_id, value)
        await self.streak_service.record_activity()

        return pb_result

    # ==========================================
    # Entry queries
    # ==========================================

    async def get_all_entries(self) -> List[ExerciseEntry]:
        return await self.storage.get_all_entries()

    async def get_entries_by_type(self, exercise_id: str) -> List[ExerciseEntry]:
        return [e for e in await self.storage.get_all_entries() if e.exercise_id == exercise_id]

    async def get_today_entries(self) -> List[ExerciseEntry]:
        today = date_key_for(self._clock())
        return [
            e for e in await self.storage.get_all_entries()
            if date_key_for_timestamp(e.timestamp) == today
        ]

    async def get_week_entries(self) -> List[ExerciseEntry]:
        """Entries since Monday of the current local week"""
        week_start = parse_date_key(week_start_key(date_key_for(self._clock())))
        return [
            e for e in await self.storage.get_all_entries()
            if parse_date_key(date_key_for_timestamp(e.timestamp)) >= week_start
        ]

    async def get_recent_entries(self, days: int) -> List[ExerciseEntry]:
        """Entries from the last ``days`` * 24 hours"""
        cutoff = to_timestamp_ms(self._clock() - timedelta(days=days))
        return [e for e in await self.storage.get_all_entries() if e.timestamp >= cutoff]

    async def get_today_stats(self, exercise_ids: Optional[List[str]] = None) -> Dict[str, ExerciseStats]:
        """Per-exercise stats for today (default: the starter exercises)"""
        entries = await self.get_today_entries()
        ids = exercise_ids if exercise_ids is not None else get_default_enabled_ids()
        return {exercise_id: compute_stats(entries, exercise_id) for exercise_id in ids}

    async def get_week_stats(self, exercise_ids: Optional[List[str]] = None) -> Dict[str, ExerciseStats]:
        entries = await self.get_week_entries()
        ids = exercise_ids if exercise_ids is not None else get_default_enabled_ids()
        return {exercise_id: compute_stats(entries, exercise_id) for exercise_id in ids}

    async def get_all_time_totals(self) -> ExerciseStats:
        return compute_stats(await self.storage.get_all_entries())

    async def get_last_exercise_time(self) -> Optional[int]:
        return await self.storage.get_last_exercise_time()

    async def delete_entry(self, entry_id: str) -> bool:
        """
        Remove one entry from the log

        XP, PBs and the streak are not recalculated.
        """
        deleted = await self.storage.delete_entry(entry_id)
        if deleted:
            logger.info(f"Deleted exercise entry {entry_id}")
        return deleted

    async def clear_history(self) -> None:
        await self.storage.clear_history()
        logger.info("Exercise history cleared")

    async def migrate_legacy_storage(self) -> bool:
        return await self.storage.migrate_legacy_keys()
