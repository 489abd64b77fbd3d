"""
Achievement System

Defines all unlockable achievements and evaluates their conditions against a
progression snapshot plus the ephemeral daily counters.

Achievement Categories:
1. Getting Started - first log and first unlocks
2. Leveling - reaching levels in any exercise
3. Dedication - total XP and daily XP
4. Variety - different exercises in one day
5. Mastery - max level, collecting everything

Daily counters live in memory only. Restarting the process mid-day resets
them to zero, so daily achievements may need a fresh 100/250/500 XP run.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from extflex.catalog import EXERCISE_REGISTRY
from extflex.gamification.levels import MAX_LEVEL, round_half_up
from extflex.models.progression import (
    Achievement,
    AchievementCategory,
    AchievementCondition,
    AchievementConditionType,
    AchievementProgress,
    ProgressionData,
)

logger = logging.getLogger(__name__)

_Cat = AchievementCategory
_Cond = AchievementConditionType


def _achievement(
    id: str,
    name: str,
    description: str,
    icon: str,
    category: AchievementCategory,
    condition_type: AchievementConditionType,
    value: Optional[int] = None,
    exercise_id: Optional[str] = None,
    xp_reward: Optional[int] = None,
) -> Achievement:
    return Achievement(
        id=id,
        name=name,
        description=description,
        icon=icon,
        category=category,
        condition=AchievementCondition(type=condition_type, value=value, exercise_id=exercise_id),
        xp_reward=xp_reward,
    )


# ==========================================
# Achievement Definitions
# ==========================================

ACHIEVEMENTS: List[Achievement] = [
    # Getting started
    _achievement("first_rep", "First Rep", "Log your first exercise", "🎯",
                 _Cat.GETTING_STARTED, _Cond.FIRST_EXERCISE, xp_reward=10),
    _achievement("first_unlock", "New Challenger", "Unlock your first new exercise", "🔓",
                 _Cat.GETTING_STARTED, _Cond.EXERCISES_UNLOCKED, value=2, xp_reward=25),
    _achievement("five_unlocked", "Building Arsenal", "Unlock 5 exercises", "🏗️",
                 _Cat.GETTING_STARTED, _Cond.EXERCISES_UNLOCKED, value=5, xp_reward=50),
    _achievement("ten_unlocked", "Well Equipped", "Unlock 10 exercises", "🎒",
                 _Cat.GETTING_STARTED, _Cond.EXERCISES_UNLOCKED, value=10, xp_reward=100),

    # Leveling
    _achievement("level_2", "Warming Up", "Reach Level 2 in any exercise", "📈",
                 _Cat.LEVELING, _Cond.EXERCISE_LEVEL, value=2, xp_reward=15),
    _achievement("level_3", "Getting Stronger", "Reach Level 3 in any exercise", "💪",
                 _Cat.LEVELING, _Cond.EXERCISE_LEVEL, value=3, xp_reward=25),
    _achievement("level_5", "Halfway Hero", "Reach Level 5 in any exercise", "⭐",
                 _Cat.LEVELING, _Cond.EXERCISE_LEVEL, value=5, xp_reward=50),
    _achievement("level_7", "Expert Form", "Reach Level 7 in any exercise", "🔥",
                 _Cat.LEVELING, _Cond.EXERCISE_LEVEL, value=7, xp_reward=75),
    _achievement("level_10", "Mastery Achieved", "Reach Level 10 (Master) in any exercise", "👑",
                 _Cat.MASTERY, _Cond.MAX_LEVEL, xp_reward=200),

    # Dedication (total XP)
    _achievement("xp_500", "Getting Started", "Earn 500 total XP", "🌱",
                 _Cat.DEDICATION, _Cond.TOTAL_XP, value=500, xp_reward=25),
    _achievement("xp_1000", "Centurion", "Earn 1,000 total XP", "💯",
                 _Cat.DEDICATION, _Cond.TOTAL_XP, value=1000, xp_reward=50),
    _achievement("xp_2500", "Dedicated", "Earn 2,500 total XP", "🏆",
                 _Cat.DEDICATION, _Cond.TOTAL_XP, value=2500, xp_reward=100),
    _achievement("xp_5000", "Committed", "Earn 5,000 total XP", "🎖️",
                 _Cat.DEDICATION, _Cond.TOTAL_XP, value=5000, xp_reward=150),
    _achievement("xp_10000", "Iron Will", "Earn 10,000 total XP", "⚔️",
                 _Cat.DEDICATION, _Cond.TOTAL_XP, value=10000, xp_reward=250),
    _achievement("xp_25000", "Legendary", "Earn 25,000 total XP", "🌟",
                 _Cat.DEDICATION, _Cond.TOTAL_XP, value=25000, xp_reward=500),
    _achievement("xp_50000", "Transcendent", "Earn 50,000 total XP", "✨",
                 _Cat.DEDICATION, _Cond.TOTAL_XP, value=50000, xp_reward=1000),

    # Variety
    _achievement("variety_3", "Mix It Up", "Do 3 different exercises in one day", "🎨",
                 _Cat.VARIETY, _Cond.EXERCISES_IN_DAY, value=3, xp_reward=25),
    _achievement("variety_5", "Full Rotation", "Do 5 different exercises in one day", "🔄",
                 _Cat.VARIETY, _Cond.EXERCISES_IN_DAY, value=5, xp_reward=50),
    _achievement("variety_8", "Completionist", "Do 8 different exercises in one day", "🌈",
                 _Cat.VARIETY, _Cond.EXERCISES_IN_DAY, value=8, xp_reward=100),

    # Daily intensity
    _achievement("daily_100", "Active Day", "Earn 100 XP in a single day", "📅",
                 _Cat.DEDICATION, _Cond.DAILY_XP, value=100, xp_reward=25),
    _achievement("daily_250", "Power Day", "Earn 250 XP in a single day", "⚡",
                 _Cat.DEDICATION, _Cond.DAILY_XP, value=250, xp_reward=50),
    _achievement("daily_500", "Beast Mode", "Earn 500 XP in a single day", "🦁",
                 _Cat.DEDICATION, _Cond.DAILY_XP, value=500, xp_reward=100),

    # Mastery
    _achievement("all_unlocked", "Collector", "Unlock all exercises", "🏛️",
                 _Cat.MASTERY, _Cond.ALL_UNLOCKED, xp_reward=300),
    _achievement("triple_master", "Triple Threat", "Reach Level 10 in 3 exercises", "🥇",
                 _Cat.MASTERY, _Cond.MULTI_MAX_LEVEL, value=3, xp_reward=500),
    _achievement("five_master", "Quintuple Master", "Reach Level 10 in 5 exercises", "💎",
                 _Cat.MASTERY, _Cond.MULTI_MAX_LEVEL, value=5, xp_reward=1000),

    # Specific exercise mastery
    _achievement("pushup_master", "Push-up Pro", "Reach Level 10 in Push-ups", "💪",
                 _Cat.MASTERY, _Cond.SPECIFIC_LEVEL, value=10, exercise_id="pushups", xp_reward=150),
    _achievement("plank_master", "Plank Perfectionist", "Reach Level 10 in Plank", "🧘",
                 _Cat.MASTERY, _Cond.SPECIFIC_LEVEL, value=10, exercise_id="plank", xp_reward=150),
    _achievement("squat_master", "Squat Sovereign", "Reach Level 10 in Squats", "🦵",
                 _Cat.MASTERY, _Cond.SPECIFIC_LEVEL, value=10, exercise_id="squats", xp_reward=150),
]

ACHIEVEMENT_CATEGORIES: Dict[AchievementCategory, Dict[str, str]] = {
    AchievementCategory.GETTING_STARTED: {"name": "Getting Started", "icon": "🚀"},
    AchievementCategory.LEVELING: {"name": "Leveling Up", "icon": "📈"},
    AchievementCategory.DEDICATION: {"name": "Dedication", "icon": "💪"},
    AchievementCategory.VARIETY: {"name": "Variety", "icon": "🎨"},
    AchievementCategory.MASTERY: {"name": "Mastery", "icon": "👑"},
}

_BY_ID: Dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}


def get_achievement_by_id(achievement_id: str) -> Optional[Achievement]:
    return _BY_ID.get(achievement_id)


def get_achievements_by_category(category: AchievementCategory) -> List[Achievement]:
    return [a for a in ACHIEVEMENTS if a.category == category]


def get_all_achievement_ids() -> List[str]:
    return [a.id for a in ACHIEVEMENTS]


# ==========================================
# Daily Counters
# ==========================================

@dataclass
class DailyCounters:
    """
    XP earned and distinct exercises logged on one local day

    Call ``roll()`` with the current day key before every read or write;
    a different key resets both counters.
    """
    day_key: Optional[str] = None
    xp: int = 0
    exercises: Set[str] = field(default_factory=set)

    def roll(self, day_key: str) -> bool:
        """Reset counters when the day changed. Returns True if a reset happened."""
        if day_key == self.day_key:
            return False
        if self.day_key is not None:
            logger.debug(f"Daily counters rolled over from {self.day_key} to {day_key}")
        self.day_key = day_key
        self.xp = 0
        self.exercises = set()
        return True

    def record(self, exercise_id: str, xp: int) -> None:
        self.xp += xp
        self.exercises.add(exercise_id)

    def reset(self) -> None:
        self.day_key = None
        self.xp = 0
        self.exercises = set()


# ==========================================
# Condition Evaluation
# ==========================================

def _max_level(data: ProgressionData) -> int:
    return max([p.level for p in data.exercises.values()] + [1])


def _mastered_count(data: ProgressionData) -> int:
    return sum(1 for p in data.exercises.values() if p.level >= MAX_LEVEL)


def _specific_level(data: ProgressionData, exercise_id: Optional[str]) -> int:
    progress = data.exercises.get(exercise_id) if exercise_id else None
    return progress.level if progress is not None else 1


def _measure(
    condition: AchievementCondition,
    data: ProgressionData,
    daily_xp: int,
    exercises_today: Set[str],
    current_streak: Optional[int],
    total_exercises: Optional[int],
) -> Optional[tuple]:
    """
    (current, required) for a condition, or None when it cannot be measured

    ``total_exercises`` defaults to the catalog size for ``all_unlocked``.
    """
    ctype = condition.type

    if ctype == _Cond.FIRST_EXERCISE:
        return (1 if data.total_xp > 0 else 0), 1

    if ctype == _Cond.TOTAL_XP:
        return data.total_xp, condition.value or 0

    if ctype == _Cond.EXERCISE_LEVEL:
        return _max_level(data), condition.value or 1

    if ctype == _Cond.SPECIFIC_LEVEL:
        return _specific_level(data, condition.exercise_id), condition.value or 1

    if ctype == _Cond.EXERCISES_UNLOCKED:
        return data.unlocked_count(), condition.value or 1

    if ctype == _Cond.ALL_UNLOCKED:
        if total_exercises is None:
            total_exercises = len(EXERCISE_REGISTRY)
        return data.unlocked_count(), total_exercises

    if ctype == _Cond.DAILY_XP:
        return daily_xp, condition.value or 0

    if ctype == _Cond.EXERCISES_IN_DAY:
        return len(exercises_today), condition.value or 1

    if ctype == _Cond.MAX_LEVEL:
        return _max_level(data), MAX_LEVEL

    if ctype == _Cond.MULTI_MAX_LEVEL:
        return _mastered_count(data), condition.value or 1

    if ctype == _Cond.STREAK:
        if current_streak is None:
            return None
        return current_streak, condition.value or 1

    return None


def evaluate_condition(
    achievement: Achievement,
    data: ProgressionData,
    daily_xp: int = 0,
    exercises_today: Optional[Set[str]] = None,
    current_streak: Optional[int] = None,
    total_exercises: Optional[int] = None,
) -> bool:
    """
    Check whether an achievement's condition holds

    Args:
        achievement: Achievement definition
        data: Progression snapshot after the current XP change
        daily_xp: XP logged today (achievement rewards excluded)
        exercises_today: Distinct exercise ids logged today
        current_streak: Current streak length; ``streak`` conditions are
            False without it
        total_exercises: Catalog size for ``all_unlocked``

    Returns:
        True if the condition is satisfied
    """
    measured = _measure(
        achievement.condition,
        data,
        daily_xp,
        exercises_today or set(),
        current_streak,
        total_exercises,
    )
    if measured is None:
        return False
    current, required = measured
    return current >= required


def get_achievement_progress(
    achievement: Achievement,
    data: ProgressionData,
    daily_xp: int = 0,
    exercises_today: Optional[Set[str]] = None,
    current_streak: Optional[int] = None,
    total_exercises: Optional[int] = None,
) -> AchievementProgress:
    """Progress toward an achievement, for display on locked badges"""
    measured = _measure(
        achievement.condition,
        data,
        daily_xp,
        exercises_today or set(),
        current_streak,
        total_exercises,
    )
    if measured is None:
        required = achievement.condition.value or 1
        return AchievementProgress(current=0, required=required, percentage=0)

    current, required = measured
    if required <= 0:
        percentage = 100
    else:
        percentage = min(100, round_half_up(current / required * 100))
    return AchievementProgress(current=min(current, required), required=required, percentage=percentage)
