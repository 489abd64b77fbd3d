"""
Service Layer Package

Stateful services that put the pure rules in extflex.gamification on top of
a key-value store.

Core Services:
- ProgressionService: XP, levels, unlocks, achievements, notification queue
- StreakService: day streak, freezes, one-time streak repair
- PersonalBestService: per-exercise and per-weight bests
- ExerciseLogService: the log_exercise pipeline and entry queries
- DataTransferService: backup export/import
"""

from extflex.services.container import ServiceContainer
from extflex.services.data_transfer_service import DataTransferService
from extflex.services.exercise_log_service import ExerciseLogService
from extflex.services.personal_best_service import PersonalBestService
from extflex.services.progression_service import ProgressionService
from extflex.services.streak_service import StreakService

__all__ = [
    "ServiceContainer",
    "DataTransferService",
    "ExerciseLogService",
    "PersonalBestService",
    "ProgressionService",
    "StreakService",
]
