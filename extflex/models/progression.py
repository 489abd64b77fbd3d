"""Progression models: XP, levels, unlocks and achievements"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from extflex.models.base import RecordModel

# XP thresholds for each level. Level 1 starts at 0, level 10 is mastery.
LEVEL_THRESHOLDS: tuple[int, ...] = (
    0,      # Level 1: Starting out
    200,    # Level 2: Getting consistent
    600,    # Level 3: Building habit
    1200,   # Level 4: Dedicated
    2000,   # Level 5: Halfway to mastery
    3000,   # Level 6: Advanced
    4000,   # Level 7: Expert territory
    6000,   # Level 8: Veteran status
    8000,   # Level 9: Elite
    12000,  # Level 10: Mastery
)

MAX_LEVEL = 10


def calculate_level(xp: int) -> int:
    """Largest level whose threshold xp has reached (always 1-10)"""
    for index in range(len(LEVEL_THRESHOLDS) - 1, -1, -1):
        if xp >= LEVEL_THRESHOLDS[index]:
            return index + 1
    return 1


class ExerciseProgress(RecordModel):
    """
    Progress for a single exercise

    ``level`` is derived from ``xp`` on every read and is never stored.
    """
    xp: int = Field(0, ge=0)
    unlocked: bool = False
    unlocked_at: Optional[int] = None

    @property
    def level(self) -> int:
        return calculate_level(self.xp)


class UnlockedAchievement(RecordModel):
    """Unlocked achievement record"""
    achievement_id: str
    unlocked_at: int


class ProgressionData(RecordModel):
    """Complete progression snapshot"""
    exercises: dict[str, ExerciseProgress] = Field(default_factory=dict)
    achievements: list[UnlockedAchievement] = Field(default_factory=list)
    total_xp: int = Field(0, ge=0)
    started_at: Optional[int] = None

    def has_achievement(self, achievement_id: str) -> bool:
        return any(a.achievement_id == achievement_id for a in self.achievements)

    def unlocked_count(self) -> int:
        return sum(1 for p in self.exercises.values() if p.unlocked)

    def count_unlocked_at_level(self, level: int) -> int:
        return sum(1 for p in self.exercises.values() if p.unlocked and p.level >= level)


# ==========================================
# Unlocks
# ==========================================

class UnlockRequirementType(str, Enum):
    """Types of unlock requirements"""
    STARTER = "starter"                        # Available from the start
    EXERCISE_LEVEL = "exercise_level"          # Reach a level in a specific exercise
    TOTAL_XP = "total_xp"                      # Accumulate total XP
    EXERCISES_AT_LEVEL = "exercises_at_level"  # Have N unlocked exercises at a level
    ACHIEVEMENT = "achievement"                # Earn a specific achievement


class UnlockRequirement(BaseModel):
    """Requirement to unlock an exercise"""
    type: UnlockRequirementType
    exercise_id: Optional[str] = None   # exercise_level
    level: Optional[int] = None         # exercise_level, exercises_at_level
    xp_threshold: Optional[int] = None  # total_xp
    count: Optional[int] = None         # exercises_at_level
    achievement_id: Optional[str] = None  # achievement
    description: str = ""


class ExerciseUnlockConfig(BaseModel):
    exercise_id: str
    requirement: UnlockRequirement


# ==========================================
# Achievements
# ==========================================

class AchievementCategory(str, Enum):
    """Achievement categories"""
    GETTING_STARTED = "getting_started"
    LEVELING = "leveling"
    DEDICATION = "dedication"
    VARIETY = "variety"
    MASTERY = "mastery"


class AchievementConditionType(str, Enum):
    """Achievement condition types"""
    FIRST_EXERCISE = "first_exercise"          # Log any exercise
    TOTAL_XP = "total_xp"                      # Reach total XP
    EXERCISE_LEVEL = "exercise_level"          # Reach level in any exercise
    SPECIFIC_LEVEL = "specific_level"          # Reach level in a named exercise
    EXERCISES_UNLOCKED = "exercises_unlocked"  # Unlock N exercises
    ALL_UNLOCKED = "all_unlocked"              # Unlock every exercise
    DAILY_XP = "daily_xp"                      # Earn N XP in one day
    EXERCISES_IN_DAY = "exercises_in_day"      # Do N different exercises in one day
    STREAK = "streak"                          # N day streak
    MAX_LEVEL = "max_level"                    # Max level in any exercise
    MULTI_MAX_LEVEL = "multi_max_level"        # Max level in N exercises


class AchievementCondition(BaseModel):
    type: AchievementConditionType
    value: Optional[int] = None
    exercise_id: Optional[str] = None


class Achievement(BaseModel):
    """Achievement definition"""
    id: str
    name: str
    description: str
    icon: str
    category: AchievementCategory
    condition: AchievementCondition
    xp_reward: Optional[int] = None


class AchievementProgress(BaseModel):
    current: int
    required: int
    percentage: int

    @property
    def description(self) -> str:
        return f"{self.current}/{self.required}"


# ==========================================
# Notifications & results
# ==========================================

class NewUnlockType(str, Enum):
    EXERCISE = "exercise"
    ACHIEVEMENT = "achievement"
    LEVEL_UP = "level_up"


class NewUnlock(BaseModel):
    """One entry of the unlock celebration queue"""
    type: NewUnlockType
    id: str
    name: str
    icon: str
    xp_reward: Optional[int] = None


class AddXpResult(BaseModel):
    """Outcome of one add_xp call; progression is the record as saved"""
    progress: ExerciseProgress
    leveled_up: bool
    previous_level: int
    new_level: int
    new_total_xp: int
    new_unlocks: list[NewUnlock] = Field(default_factory=list)
    progression: ProgressionData
