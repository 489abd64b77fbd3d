"""
ProgressionService - XP, Levels, Unlocks and Achievements

The only component that read-modify-writes the progression snapshot. One
add_xp() call reads the snapshot fresh, applies every consequence in memory
and writes it back once.

Concurrency: there is no locking. Two callers running add_xp() against the
same store at the same time each write their own copy and the later write
wins, dropping the other's XP. This is accepted behavior.
"""

import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, Iterable, List, Optional

from extflex import config
from extflex.catalog import EXERCISE_REGISTRY
from extflex.exceptions import ValidationError
from extflex.gamification.achievements import (
    ACHIEVEMENT_CATEGORIES,
    ACHIEVEMENTS,
    DailyCounters,
    evaluate_condition,
    get_achievement_progress,
)
from extflex.gamification.unlocks import (
    UNLOCK_CONFIG,
    find_newly_met_unlocks,
    get_default_exercise_progress,
    get_unlock_config,
    get_unlock_progress,
    is_requirement_met,
    is_starter_exercise,
)
from extflex.models.exercise import ExerciseDefinition
from extflex.models.progression import (
    Achievement,
    AchievementProgress,
    AddXpResult,
    ExerciseProgress,
    ExerciseUnlockConfig,
    NewUnlock,
    NewUnlockType,
    ProgressionData,
    UnlockedAchievement,
    UnlockRequirement,
)
from extflex.storage.base import KeyValueStore, Unsubscribe
from extflex.storage.progression_storage import ProgressionStorage
from extflex.storage.record_storage import RecordCallback
from extflex.utils.datetime_helpers import Clock, date_key_for, now_utc, to_timestamp_ms

logger = logging.getLogger(__name__)

StreakReader = Callable[[], Awaitable[int]]


class ProgressionService:
    """
    Orchestrates a logged exercise through the progression rules.

    Responsibilities:
    - XP and level tracking per exercise
    - Exercise unlocks when tier requirements are met
    - Achievement awards, including reward XP that can cascade
    - Daily XP / variety counters (in memory only)
    - The FIFO notification queue for the UI
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Optional[Clock] = None,
        exercises: Optional[Iterable[ExerciseDefinition]] = None,
        achievements: Optional[Iterable[Achievement]] = None,
        unlock_config: Optional[Iterable[ExerciseUnlockConfig]] = None,
        streak_reader: Optional[StreakReader] = None,
        cascade_limit: Optional[int] = None,
    ):
        """
        Initialize ProgressionService.

        Args:
            store: Key-value store holding the progression snapshot
            clock: Returns the current aware datetime (defaults to now_utc)
            exercises: Exercise catalog (defaults to EXERCISE_REGISTRY)
            achievements: Achievement definitions (defaults to ACHIEVEMENTS)
            unlock_config: Unlock requirements (defaults to UNLOCK_CONFIG)
            streak_reader: Coroutine returning the current streak length,
                used by streak achievements
            cascade_limit: Max unlock/achievement scan passes per add_xp()
        """
        self.storage = ProgressionStorage(store)
        self._clock = clock or now_utc
        self.exercises: List[ExerciseDefinition] = list(
            EXERCISE_REGISTRY if exercises is None else exercises
        )
        self.achievements: List[Achievement] = list(
            ACHIEVEMENTS if achievements is None else achievements
        )
        self.unlock_config: List[ExerciseUnlockConfig] = list(
            UNLOCK_CONFIG if unlock_config is None else unlock_config
        )
        self._streak_reader = streak_reader
        self.cascade_limit = config.ACHIEVEMENT_CASCADE_LIMIT if cascade_limit is None else cascade_limit

        self._exercises_by_id: Dict[str, ExerciseDefinition] = {e.id: e for e in self.exercises}
        self.daily = DailyCounters()
        self.unlock_queue: Deque[NewUnlock] = deque()
        logger.debug("ProgressionService initialized")

    def _now_ms(self) -> int:
        return to_timestamp_ms(self._clock())

    def _roll_daily(self) -> None:
        self.daily.roll(date_key_for(self._clock()))

    @property
    def daily_xp(self) -> int:
        self._roll_daily()
        return self.daily.xp

    @property
    def exercises_today(self) -> set:
        self._roll_daily()
        return set(self.daily.exercises)

    # ==========================================
    # Orchestration
    # ==========================================

    async def add_xp(self, exercise_id: str, xp_amount: int) -> AddXpResult:
        """
        Award XP for a logged exercise and apply every consequence

        Order: daily counters, XP and level, then repeated unlock and
        achievement scans until a pass changes nothing (at most
        ``cascade_limit`` passes). Achievement rewards go to the same
        exercise and can trigger further level-ups, unlocks and achievements.

        Args:
            exercise_id: Exercise that earned the XP
            xp_amount: Reps or seconds logged (must be positive)

        Returns:
            AddXpResult: new_unlocks lists this call's notifications in
            order (they are also appended to unlock_queue); progression is
            the updated snapshot that was saved
        """
        if xp_amount <= 0:
            raise ValidationError(
                f"XP amount must be positive, got {xp_amount}",
                field="xp_amount",
                value=xp_amount,
            )

        self._roll_daily()
        self.daily.record(exercise_id, xp_amount)

        data = await self.storage.get()
        now_ms = self._now_ms()
        new_unlocks: List[NewUnlock] = []

        previous_level = self._progress_of(data, exercise_id, now_ms).level
        self._apply_xp(data, exercise_id, xp_amount, now_ms, new_unlocks)
        logger.info(f"Awarded {xp_amount} XP to {exercise_id} (total {data.total_xp})")

        current_streak = await self._streak_reader() if self._streak_reader else None
        await self._run_scans(data, exercise_id, now_ms, current_streak, new_unlocks)

        await self.storage.save(data)
        self.unlock_queue.extend(new_unlocks)

        progress = data.exercises[exercise_id]
        return AddXpResult(
            progress=progress,
            leveled_up=progress.level > previous_level,
            previous_level=previous_level,
            new_level=progress.level,
            new_total_xp=data.total_xp,
            new_unlocks=new_unlocks,
            progression=data,
        )

    def _progress_of(self, data: ProgressionData, exercise_id: str, now_ms: int) -> ExerciseProgress:
        progress = data.exercises.get(exercise_id)
        if progress is not None:
            return progress
        return get_default_exercise_progress(exercise_id, now_ms, self.unlock_config)

    def _apply_xp(
        self,
        data: ProgressionData,
        exercise_id: str,
        xp_amount: int,
        now_ms: int,
        new_unlocks: List[NewUnlock],
    ) -> None:
        """Add XP to one exercise and the total; queue a level-up notice"""
        current = self._progress_of(data, exercise_id, now_ms)
        updated = current.model_copy(update={"xp": current.xp + xp_amount})
        data.exercises[exercise_id] = updated
        data.total_xp += xp_amount
        if data.started_at is None:
            data.started_at = now_ms

        if updated.level > current.level:
            logger.info(f"{exercise_id} reached level {updated.level}")
            exercise = self._exercises_by_id.get(exercise_id)
            if exercise is not None:
                new_unlocks.append(NewUnlock(
                    type=NewUnlockType.LEVEL_UP,
                    id=f"levelup_{exercise_id}_{updated.level}",
                    name=f"{exercise.name} Level {updated.level}!",
                    icon=exercise.icon,
                ))

    async def _run_scans(
        self,
        data: ProgressionData,
        exercise_id: str,
        now_ms: int,
        current_streak: Optional[int],
        new_unlocks: List[NewUnlock],
    ) -> None:
        for _ in range(self.cascade_limit):
            unlocked = self._scan_unlocks(data, now_ms, new_unlocks)
            awarded = self._scan_achievements(data, exercise_id, now_ms, current_streak, new_unlocks)
            if not unlocked and not awarded:
                return
        logger.warning(
            f"Unlock/achievement cascade for {exercise_id} stopped after {self.cascade_limit} passes"
        )

    def _scan_unlocks(self, data: ProgressionData, now_ms: int, new_unlocks: List[NewUnlock]) -> bool:
        ready = find_newly_met_unlocks(data, self.unlock_config)
        for unlock_id in ready:
            current = data.exercises.get(unlock_id) or ExerciseProgress()
            data.exercises[unlock_id] = current.model_copy(update={"unlocked": True, "unlocked_at": now_ms})
            logger.info(f"Exercise unlocked: {unlock_id}")

            exercise = self._exercises_by_id.get(unlock_id)
            if exercise is not None:
                new_unlocks.append(NewUnlock(
                    type=NewUnlockType.EXERCISE,
                    id=unlock_id,
                    name=f"{exercise.name} Unlocked!",
                    icon=exercise.icon,
                ))
        return bool(ready)

    def _scan_achievements(
        self,
        data: ProgressionData,
        exercise_id: str,
        now_ms: int,
        current_streak: Optional[int],
        new_unlocks: List[NewUnlock],
    ) -> bool:
        awarded = False
        for achievement in self.achievements:
            if data.has_achievement(achievement.id):
                continue
            if not evaluate_condition(
                achievement,
                data,
                daily_xp=self.daily.xp,
                exercises_today=self.daily.exercises,
                current_streak=current_streak,
                total_exercises=len(self.exercises),
            ):
                continue

            data.achievements.append(UnlockedAchievement(achievement_id=achievement.id, unlocked_at=now_ms))
            logger.info(f"Achievement unlocked: {achievement.id}")
            new_unlocks.append(NewUnlock(
                type=NewUnlockType.ACHIEVEMENT,
                id=achievement.id,
                name=achievement.name,
                icon=achievement.icon,
                xp_reward=achievement.xp_reward,
            ))
            if achievement.xp_reward:
                # Reward XP is not daily XP
                self._apply_xp(data, exercise_id, achievement.xp_reward, now_ms, new_unlocks)
            awarded = True
        return awarded

    # ==========================================
    # Queries
    # ==========================================

    async def get_progression(self) -> ProgressionData:
        return await self.storage.get()

    async def get_exercise_progress(self, exercise_id: str) -> ExerciseProgress:
        data = await self.storage.get()
        return data.exercises.get(exercise_id) or get_default_exercise_progress(
            exercise_id, self._now_ms(), self.unlock_config
        )

    async def is_unlocked(self, exercise_id: str) -> bool:
        return (await self.get_exercise_progress(exercise_id)).unlocked

    def get_unlock_requirement(self, exercise_id: str) -> Optional[UnlockRequirement]:
        config_entry = get_unlock_config(exercise_id, self.unlock_config)
        return config_entry.requirement if config_entry else None

    async def is_unlock_requirement_met(self, exercise_id: str) -> bool:
        requirement = self.get_unlock_requirement(exercise_id)
        if requirement is None:
            return False
        return is_requirement_met(requirement, await self.storage.get(), self.unlock_config)

    async def get_unlock_progress(self, exercise_id: str) -> int:
        """Progress toward unlocking an exercise (0-100; 0 if it has no requirement)"""
        requirement = self.get_unlock_requirement(exercise_id)
        if requirement is None:
            return 0
        return get_unlock_progress(requirement, await self.storage.get(), self.unlock_config)

    async def get_unlocked_exercises(self) -> List[str]:
        data = await self.storage.get()
        return [
            e.id for e in self.exercises
            if self._is_unlocked_in(data, e.id)
        ]

    async def get_locked_exercises(self) -> List[str]:
        data = await self.storage.get()
        return [
            e.id for e in self.exercises
            if not self._is_unlocked_in(data, e.id)
        ]

    def _is_unlocked_in(self, data: ProgressionData, exercise_id: str) -> bool:
        progress = data.exercises.get(exercise_id)
        if progress is not None and progress.unlocked:
            return True
        return is_starter_exercise(exercise_id, self.unlock_config)

    async def is_achievement_unlocked(self, achievement_id: str) -> bool:
        return (await self.storage.get()).has_achievement(achievement_id)

    async def get_achievement_progress(self, achievement_id: str) -> Optional[AchievementProgress]:
        achievement = next((a for a in self.achievements if a.id == achievement_id), None)
        if achievement is None:
            return None
        current_streak = await self._streak_reader() if self._streak_reader else None
        return get_achievement_progress(
            achievement,
            await self.storage.get(),
            daily_xp=self.daily_xp,
            exercises_today=self.exercises_today,
            current_streak=current_streak,
            total_exercises=len(self.exercises),
        )

    async def get_achievement_summary(self) -> Dict[str, Any]:
        """
        Achievements grouped by category

        Returns:
            {
                'unlocked': int,
                'total': int,
                'categories': [
                    {
                        'category': AchievementCategory,
                        'name': str,
                        'icon': str,
                        'achievements': [{'achievement': Achievement,
                                          'unlocked': bool,
                                          'unlocked_at': int | None}]
                    }
                ]
            }
        """
        data = await self.storage.get()
        unlocked_at = {a.achievement_id: a.unlocked_at for a in data.achievements}

        categories = []
        for category, meta in ACHIEVEMENT_CATEGORIES.items():
            members = [a for a in self.achievements if a.category == category]
            if not members:
                continue
            categories.append({
                "category": category,
                "name": meta["name"],
                "icon": meta["icon"],
                "achievements": [
                    {
                        "achievement": a,
                        "unlocked": a.id in unlocked_at,
                        "unlocked_at": unlocked_at.get(a.id),
                    }
                    for a in members
                ],
            })

        known = {a.id for a in self.achievements}
        return {
            "unlocked": sum(1 for a in data.achievements if a.achievement_id in known),
            "total": len(self.achievements),
            "categories": categories,
        }

    async def get_totals(self) -> Dict[str, int]:
        """
        Returns:
            {
                'total_xp': int,
                'daily_xp': int,
                'exercises_today_count': int,
                'achievements_unlocked': int,
                'total_achievements': int
            }
        """
        data = await self.storage.get()
        return {
            "total_xp": data.total_xp,
            "daily_xp": self.daily_xp,
            "exercises_today_count": len(self.exercises_today),
            "achievements_unlocked": len(data.achievements),
            "total_achievements": len(self.achievements),
        }

    # ==========================================
    # Notification queue
    # ==========================================

    def peek_unlock(self) -> Optional[NewUnlock]:
        return self.unlock_queue[0] if self.unlock_queue else None

    def dismiss_unlock(self) -> Optional[NewUnlock]:
        """Remove and return the oldest notification"""
        return self.unlock_queue.popleft() if self.unlock_queue else None

    # ==========================================
    # Lifecycle
    # ==========================================

    async def reset_progression(self) -> None:
        await self.storage.reset()
        self.daily.reset()
        self.unlock_queue.clear()
        logger.info("Progression reset")

    def on_change(self, callback: RecordCallback) -> Unsubscribe:
        return self.storage.on_change(callback)
