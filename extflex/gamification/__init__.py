"""
Gamification System

Pure rules for XP, levels, unlocks, achievements, streaks and personal
bests. Persistence and sequencing live in extflex.services.
"""

from extflex.gamification.levels import (
    LEVEL_THRESHOLDS,
    LEVEL_TITLES,
    MAX_LEVEL,
    calculate_level,
    get_level_info,
    get_level_progress,
    get_level_title,
    get_xp_for_current_level,
    get_xp_for_next_level,
)
from extflex.gamification.unlocks import (
    UNLOCK_CONFIG,
    find_newly_met_unlocks,
    get_default_exercise_progress,
    get_exercise_tier,
    get_exercises_for_level_tier,
    get_starter_exercises,
    get_unlock_config,
    get_unlock_progress,
    is_requirement_met,
    is_starter_exercise,
)
from extflex.gamification.achievements import (
    ACHIEVEMENT_CATEGORIES,
    ACHIEVEMENTS,
    DailyCounters,
    evaluate_condition,
    get_achievement_by_id,
    get_achievement_progress,
    get_achievements_by_category,
)
from extflex.gamification.streak_system import (
    calculate_milestone_progress,
    compute_current_streak_from_history,
    get_flame_intensity,
    get_next_milestone,
    get_streak_tier,
    is_milestone,
)
from extflex.gamification.personal_bests import (
    evaluate_personal_best,
    weight_key,
)

__all__ = [
    # Levels
    'LEVEL_THRESHOLDS',
    'LEVEL_TITLES',
    'MAX_LEVEL',
    'calculate_level',
    'get_level_info',
    'get_level_progress',
    'get_level_title',
    'get_xp_for_current_level',
    'get_xp_for_next_level',

    # Unlocks
    'UNLOCK_CONFIG',
    'find_newly_met_unlocks',
    'get_default_exercise_progress',
    'get_exercise_tier',
    'get_exercises_for_level_tier',
    'get_starter_exercises',
    'get_unlock_config',
    'get_unlock_progress',
    'is_requirement_met',
    'is_starter_exercise',

    # Achievements
    'ACHIEVEMENT_CATEGORIES',
    'ACHIEVEMENTS',
    'DailyCounters',
    'evaluate_condition',
    'get_achievement_by_id',
    'get_achievement_progress',
    'get_achievements_by_category',

    # Streaks
    'calculate_milestone_progress',
    'compute_current_streak_from_history',
    'get_flame_intensity',
    'get_next_milestone',
    'get_streak_tier',
    'is_milestone',

    # Personal bests
    'evaluate_personal_best',
    'weight_key',
]
