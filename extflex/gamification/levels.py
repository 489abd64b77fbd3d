"""
XP and Leveling System

Maps cumulative per-exercise XP to a level and to progress within that level.

Leveling Curve (cumulative XP per level):
- Level 1: 0          - Level 6: 3,000
- Level 2: 200        - Level 7: 4,000
- Level 3: 600        - Level 8: 6,000
- Level 4: 1,200      - Level 9: 8,000
- Level 5: 2,000      - Level 10 (Master): 12,000

XP Award Rules:
- Rep-based exercise: 1 XP per rep
- Duration-based exercise: 1 XP per second
- Achievement unlocks: 10-1000 XP bonus to the exercise that triggered them
"""

import math
from typing import Any, Dict

from extflex.models.progression import LEVEL_THRESHOLDS, MAX_LEVEL, calculate_level

LEVEL_TITLES = (
    "Novice",        # 1
    "Beginner",      # 2
    "Apprentice",    # 3
    "Intermediate",  # 4
    "Skilled",       # 5
    "Advanced",      # 6
    "Expert",        # 7
    "Veteran",       # 8
    "Elite",         # 9
    "Master",        # 10
)

__all__ = [
    "LEVEL_THRESHOLDS",
    "MAX_LEVEL",
    "calculate_level",
    "round_half_up",
    "get_xp_for_current_level",
    "get_xp_for_next_level",
    "get_level_progress",
    "get_level_title",
    "get_level_info",
]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (round() rounds half to even)"""
    return int(math.floor(value + 0.5))


def get_xp_for_current_level(level: int) -> int:
    """XP threshold where `level` starts"""
    if level < 1:
        return 0
    return LEVEL_THRESHOLDS[min(level, MAX_LEVEL) - 1]


def get_xp_for_next_level(level: int) -> int:
    """XP threshold of the next level (the max threshold once mastered)"""
    if level >= MAX_LEVEL:
        return LEVEL_THRESHOLDS[MAX_LEVEL - 1]
    return LEVEL_THRESHOLDS[max(level, 1)]


def get_level_progress(xp: int, level: int) -> int:
    """
    Progress toward the next level as a percentage

    Returns:
        0-100; always 100 at max level
    """
    if level >= MAX_LEVEL:
        return 100

    current_threshold = get_xp_for_current_level(level)
    next_threshold = get_xp_for_next_level(level)
    xp_in_level = xp - current_threshold
    xp_needed = next_threshold - current_threshold

    return max(0, min(100, round_half_up(xp_in_level / xp_needed * 100)))


def get_level_title(level: int) -> str:
    """Rank name for a level"""
    if level < 1:
        return LEVEL_TITLES[0]
    return LEVEL_TITLES[min(level, MAX_LEVEL) - 1]


def get_level_info(xp: int) -> Dict[str, Any]:
    """
    Calculate level information from XP

    Returns:
        {
            'current_level': int,
            'level_title': str,
            'level_progress': int (0-100),
            'xp_in_current_level': int,
            'xp_to_next_level': int (0 at max level),
            'is_max_level': bool
        }
    """
    level = calculate_level(xp)
    is_max_level = level >= MAX_LEVEL

    return {
        "current_level": level,
        "level_title": get_level_title(level),
        "level_progress": get_level_progress(xp, level),
        "xp_in_current_level": xp - get_xp_for_current_level(level),
        "xp_to_next_level": 0 if is_max_level else get_xp_for_next_level(level) - xp,
        "is_max_level": is_max_level,
    }
