"""Pydantic models for persisted records and engine results"""

from extflex.models.exercise import (
    ExerciseCategory,
    ExerciseDefinition,
    ExerciseEntry,
    ExercisePersonalBests,
    ExerciseStats,
    ImportSummary,
    PBCheckResult,
    PersonalBest,
    TrackingType,
)
from extflex.models.progression import (
    Achievement,
    AchievementCategory,
    AchievementCondition,
    AchievementConditionType,
    AchievementProgress,
    AddXpResult,
    ExerciseProgress,
    ExerciseUnlockConfig,
    NewUnlock,
    NewUnlockType,
    ProgressionData,
    UnlockedAchievement,
    UnlockRequirement,
    UnlockRequirementType,
)
from extflex.models.streak import (
    ActivityResult,
    FreezeResult,
    StreakData,
    StreakMilestoneEvent,
    StreakStatus,
    StreakTier,
)

__all__ = [
    # Exercises
    "ExerciseCategory",
    "ExerciseDefinition",
    "ExerciseEntry",
    "ExercisePersonalBests",
    "ExerciseStats",
    "ImportSummary",
    "PBCheckResult",
    "PersonalBest",
    "TrackingType",
    # Progression
    "Achievement",
    "AchievementCategory",
    "AchievementCondition",
    "AchievementConditionType",
    "AchievementProgress",
    "AddXpResult",
    "ExerciseProgress",
    "ExerciseUnlockConfig",
    "NewUnlock",
    "NewUnlockType",
    "ProgressionData",
    "UnlockedAchievement",
    "UnlockRequirement",
    "UnlockRequirementType",
    # Streaks
    "ActivityResult",
    "FreezeResult",
    "StreakData",
    "StreakMilestoneEvent",
    "StreakStatus",
    "StreakTier",
]
