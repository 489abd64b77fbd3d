"""
StreakService - Day Streak Business Logic

Wraps the pure streak transitions in extflex.gamification.streak_system with
persistence, the clock, weekly freeze replenishment and the one-time
date-key repair.
"""

import logging
from typing import Any, Dict, Optional

from extflex import config
from extflex.exceptions import StorageError
from extflex.gamification.streak_system import (
    apply_activity,
    apply_freeze,
    break_streak,
    calculate_milestone_progress,
    get_flame_intensity,
    get_next_milestone,
    get_status,
    get_streak_tier,
    maybe_reset_freezes,
    repair_from_history,
    should_break_streak,
)
from extflex.models.streak import (
    ActivityResult,
    FreezeResult,
    StreakData,
    StreakMilestoneEvent,
    StreakStatus,
)
from extflex.storage.base import KeyValueStore, Unsubscribe
from extflex.storage.exercise_storage import ExerciseStorage
from extflex.storage.record_storage import RecordCallback
from extflex.storage.streak_storage import StreakStorage
from extflex.utils.datetime_helpers import (
    Clock,
    date_key_for,
    date_key_for_timestamp,
    now_utc,
    to_timestamp_ms,
)

logger = logging.getLogger(__name__)


class StreakService:
    """
    Service for the day streak.

    Responsibilities:
    - Recording daily activity and detecting milestones
    - Spending and replenishing freezes
    - Breaking stale streaks on load
    - Repairing streaks recorded with UTC day keys (runs once per store)
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Optional[Clock] = None,
        freezes_per_week: Optional[int] = None,
    ):
        """
        Initialize StreakService.

        Args:
            store: Key-value store holding the streak and the entry log
            clock: Returns the current aware datetime (defaults to now_utc)
            freezes_per_week: Weekly freeze allowance (defaults to config)
        """
        self.storage = StreakStorage(store)
        self.exercise_storage = ExerciseStorage(store)
        self._clock = clock or now_utc
        self.freezes_per_week = (
            config.FREEZES_PER_WEEK if freezes_per_week is None else freezes_per_week
        )
        self.pending_milestone: Optional[StreakMilestoneEvent] = None
        logger.debug("StreakService initialized")

    def _today_key(self) -> str:
        return date_key_for(self._clock())

    def _now_ms(self) -> int:
        return to_timestamp_ms(self._clock())

    # ==========================================
    # Reading
    # ==========================================

    async def get_streak(self) -> StreakData:
        """
        Current streak record

        A stored record gets the one-time repair on first read. Freezes are
        replenished when a new week started, before anything else sees the
        record.
        """
        today = self._today_key()
        raw = await self.storage.get_raw()
        if raw is None:
            data = self.storage.default()
        else:
            data = await self._maybe_repair(self.storage.parse(raw), today)
        return maybe_reset_freezes(data, today, self.freezes_per_week)

    async def _maybe_repair(self, data: StreakData, today: str) -> StreakData:
        """Raise the streak from raw entry timestamps if the stored count is too low"""
        try:
            if await self.storage.is_repaired():
                return data

            entries = await self.exercise_storage.get_all_entries()
            active_days = {date_key_for_timestamp(e.timestamp) for e in entries}
            repaired = repair_from_history(data, active_days, today)

            if repaired is not None:
                await self.storage.save(repaired)
                logger.info(
                    f"Repaired streak from entry history: {data.current} -> {repaired.current} "
                    f"(last active {repaired.last_active_date})"
                )
                data = repaired

            await self.storage.mark_repaired()
        except StorageError as e:
            # Flag stays unset, so the repair is retried on the next read
            logger.error(f"Streak repair failed, using stored record: {e}")
        return data

    async def get_current_streak(self) -> int:
        return (await self.get_streak()).current

    async def get_streak_status(self) -> StreakStatus:
        """
        Streak plus today's state

        Returns:
            StreakStatus: is_at_risk is True when today has neither activity
            nor a freeze and there is a streak to lose
        """
        data = await self.get_streak()
        return get_status(data, self._today_key())

    async def get_streak_summary(self) -> Dict[str, Any]:
        """
        Display info for the streak widget

        Returns:
            {
                'current': int,
                'longest': int,
                'freezes_remaining': int,
                'tier': StreakTier,
                'flame_intensity': int (0-4),
                'next_milestone': int | None,
                'milestone_progress': int (0-100),
                'is_at_risk': bool,
                'is_active_today': bool,
                'is_frozen_today': bool
            }
        """
        status = await self.get_streak_status()
        data = status.data
        return {
            "current": data.current,
            "longest": data.longest,
            "freezes_remaining": data.freezes_remaining,
            "tier": get_streak_tier(data.current),
            "flame_intensity": get_flame_intensity(data.current),
            "next_milestone": get_next_milestone(data.current),
            "milestone_progress": calculate_milestone_progress(data.current),
            "is_at_risk": status.is_at_risk,
            "is_active_today": status.is_active,
            "is_frozen_today": status.is_frozen,
        }

    # ==========================================
    # Transitions
    # ==========================================

    async def record_activity(self) -> ActivityResult:
        """
        Record activity for today. Call whenever an exercise is logged.

        Returns:
            ActivityResult: streak_increased is False when today was already
            recorded (nothing is written then)
        """
        data = await self.get_streak()
        result = apply_activity(data, self._today_key(), self._now_ms())

        if not result.streak_increased:
            logger.debug("Activity already recorded today")
            return result

        await self.storage.save(result.data)
        logger.info(f"Streak is now {result.data.current} (longest {result.data.longest})")

        if result.milestone_hit and result.new_milestone is not None:
            self.pending_milestone = StreakMilestoneEvent(
                milestone=result.new_milestone,
                timestamp=self._now_ms(),
            )
            logger.info(f"Streak milestone reached: {result.new_milestone} days")

        return result

    async def use_freeze(self) -> FreezeResult:
        """
        Spend a freeze on today

        Returns:
            FreezeResult: on rejection, success is False, reason says why,
            and nothing is written
        """
        data = await self.get_streak()
        result = apply_freeze(data, self._today_key())

        if not result.success:
            logger.info(f"Freeze rejected: {result.reason}")
            return result

        await self.storage.save(result.data)
        logger.info(f"Freeze used, {result.data.freezes_remaining} remaining this week")
        return result

    async def validate_streak(self) -> StreakData:
        """
        Break the streak if the chain lapsed. Call when the app opens.

        Returns:
            StreakData: the (possibly broken) record
        """
        data = await self.get_streak()
        if not should_break_streak(data, self._today_key()):
            return data

        broken = break_streak(data)
        await self.storage.save(broken)
        logger.info(f"Streak of {data.current} broken (last active {data.last_active_date})")
        return broken

    async def reset_streak(self) -> None:
        """Zero the streak; the entry history must not bring it back"""
        await self.storage.reset()
        await self.storage.mark_repaired()
        self.pending_milestone = None
        logger.info("Streak reset")

    def dismiss_milestone(self) -> None:
        self.pending_milestone = None

    def on_change(self, callback: RecordCallback) -> Unsubscribe:
        return self.storage.on_change(callback)
