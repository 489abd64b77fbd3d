"""
Exercise Unlock System

Tier-based gating: every time any exercise reaches a new level, three new
exercises unlock (one strength, one cardio, one wellness).

TIER STRUCTURE:
- Tier 0 (Start):     Push-ups, Jumping Jacks, Neck Rolls
- Tier 1 (First Lv2): Dumbbell Curls, High Knees, Shoulder Stretch
- Tier 2 (First Lv3): Squats, Burpees, Wrist Circles
- Tier 3 (First Lv4): Shoulder Press, Jump Squats, Hip Flexor Stretch
- Tier 4 (First Lv5): Tricep Dips, Mountain Climbers, Spinal Twist
- Tier 5 (First Lv6): Dumbbell Rows, Butt Kicks, Quad Stretch
- Tier 6 (First Lv7): Goblet Squats, Jump Lunges, Hamstring Stretch
- Tier 7 (First Lv8): Dumbbell Lunges, Skaters, Deep Breathing
- Tier 8 (First Lv9): Floor Chest Press, Tuck Jumps, 20-20-20 Rule
- Tier 9 (First Lv10): Plank, Star Jumps, Full Body Stretch

BONUS EXERCISES (total XP milestones, 5,000 to 75,000 XP):
Deadlifts, Lateral Raises, Hammer Curls, Tricep Extension, Flyes, Wall Sit,
Crunches, Bicycle Crunches, Cat-Cow, Russian Twists, Speed Skaters, Child's Pose
"""

from typing import Iterable, List, Optional

from extflex.gamification.levels import get_level_progress, round_half_up
from extflex.models.progression import (
    ExerciseProgress,
    ExerciseUnlockConfig,
    ProgressionData,
    UnlockRequirement,
    UnlockRequirementType,
)

_T = UnlockRequirementType


def _starter(exercise_id: str) -> ExerciseUnlockConfig:
    return ExerciseUnlockConfig(
        exercise_id=exercise_id,
        requirement=UnlockRequirement(type=_T.STARTER, description="Available from the start"),
    )


def _level_tier(exercise_id: str, level: int) -> ExerciseUnlockConfig:
    description = f"Reach Level {level} in any exercise"
    if level == 10:
        description = "Reach Level 10 (Master) in any exercise"
    return ExerciseUnlockConfig(
        exercise_id=exercise_id,
        requirement=UnlockRequirement(
            type=_T.EXERCISES_AT_LEVEL, level=level, count=1, description=description
        ),
    )


def _total_xp(exercise_id: str, threshold: int) -> ExerciseUnlockConfig:
    return ExerciseUnlockConfig(
        exercise_id=exercise_id,
        requirement=UnlockRequirement(
            type=_T.TOTAL_XP, xp_threshold=threshold, description=f"Earn {threshold:,} total XP"
        ),
    )


UNLOCK_CONFIG: List[ExerciseUnlockConfig] = [
    _starter("pushups"),
    _starter("jumping_jacks"),
    _starter("neck_rolls"),

    _level_tier("dumbbell_curls", 2),
    _level_tier("high_knees", 2),
    _level_tier("shoulder_stretch", 2),

    _level_tier("squats", 3),
    _level_tier("burpees", 3),
    _level_tier("wrist_circles", 3),

    _level_tier("dumbbell_shoulder_press", 4),
    _level_tier("jump_squats", 4),
    _level_tier("hip_flexor_stretch", 4),

    _level_tier("tricep_dips", 5),
    _level_tier("mountain_climbers", 5),
    _level_tier("spinal_twist", 5),

    _level_tier("dumbbell_rows", 6),
    _level_tier("butt_kicks", 6),
    _level_tier("quad_stretch", 6),

    _level_tier("goblet_squats", 7),
    _level_tier("jump_lunges", 7),
    _level_tier("hamstring_stretch", 7),

    _level_tier("dumbbell_lunges", 8),
    _level_tier("skaters", 8),
    _level_tier("deep_breathing", 8),

    _level_tier("dumbbell_chest_press", 9),
    _level_tier("tuck_jumps", 9),
    _level_tier("eye_20_20_20", 9),

    _level_tier("plank", 10),
    _level_tier("star_jumps", 10),
    _level_tier("full_body_stretch", 10),

    _total_xp("dumbbell_deadlifts", 5000),
    _total_xp("lateral_raises", 10000),
    _total_xp("hammer_curls", 15000),
    _total_xp("overhead_tricep_extension", 20000),
    _total_xp("dumbbell_flyes", 25000),
    _total_xp("wall_sit", 30000),
    _total_xp("crunches", 35000),
    _total_xp("bicycle_crunches", 40000),
    _total_xp("cat_cow_stretch", 45000),
    _total_xp("russian_twists", 50000),
    _total_xp("speed_skaters", 60000),
    _total_xp("childs_pose", 75000),
]


def get_unlock_config(
    exercise_id: str,
    unlock_config: Iterable[ExerciseUnlockConfig] = UNLOCK_CONFIG,
) -> Optional[ExerciseUnlockConfig]:
    for config in unlock_config:
        if config.exercise_id == exercise_id:
            return config
    return None


def get_starter_exercises(unlock_config: Iterable[ExerciseUnlockConfig] = UNLOCK_CONFIG) -> List[str]:
    return [c.exercise_id for c in unlock_config if c.requirement.type == _T.STARTER]


def is_starter_exercise(
    exercise_id: str,
    unlock_config: Iterable[ExerciseUnlockConfig] = UNLOCK_CONFIG,
) -> bool:
    config = get_unlock_config(exercise_id, unlock_config)
    return config is not None and config.requirement.type == _T.STARTER


def get_exercises_for_level_tier(
    level: int,
    unlock_config: Iterable[ExerciseUnlockConfig] = UNLOCK_CONFIG,
) -> List[str]:
    """Exercises unlocked by the first exercise to reach `level`"""
    return [
        c.exercise_id
        for c in unlock_config
        if c.requirement.type == _T.EXERCISES_AT_LEVEL
        and c.requirement.level == level
        and c.requirement.count == 1
    ]


def get_exercise_tier(
    exercise_id: str,
    unlock_config: Iterable[ExerciseUnlockConfig] = UNLOCK_CONFIG,
) -> Optional[int]:
    """Tier number (0 for starters, the gating level for level tiers, else None)"""
    config = get_unlock_config(exercise_id, unlock_config)
    if config is None:
        return None
    if config.requirement.type == _T.STARTER:
        return 0
    if config.requirement.type == _T.EXERCISES_AT_LEVEL:
        return config.requirement.level
    return None


def get_default_exercise_progress(
    exercise_id: str,
    now_ms: Optional[int] = None,
    unlock_config: Iterable[ExerciseUnlockConfig] = UNLOCK_CONFIG,
) -> ExerciseProgress:
    """Progress for an exercise with no stored record (starters begin unlocked)"""
    starter = is_starter_exercise(exercise_id, unlock_config)
    return ExerciseProgress(
        xp=0,
        unlocked=starter,
        unlocked_at=now_ms if starter else None,
    )


def get_exercise_progress(
    data: ProgressionData,
    exercise_id: str,
    unlock_config: Iterable[ExerciseUnlockConfig] = UNLOCK_CONFIG,
) -> ExerciseProgress:
    progress = data.exercises.get(exercise_id)
    if progress is not None:
        return progress
    return get_default_exercise_progress(exercise_id, unlock_config=unlock_config)


def is_requirement_met(
    requirement: UnlockRequirement,
    data: ProgressionData,
    unlock_config: Iterable[ExerciseUnlockConfig] = UNLOCK_CONFIG,
) -> bool:
    """Check an unlock requirement against a progression snapshot"""
    if requirement.type == _T.STARTER:
        return True

    if requirement.type == _T.EXERCISE_LEVEL:
        if not requirement.exercise_id:
            return False
        progress = get_exercise_progress(data, requirement.exercise_id, unlock_config)
        # Prerequisite must itself be unlocked
        return progress.unlocked and progress.level >= (requirement.level or 1)

    if requirement.type == _T.TOTAL_XP:
        return data.total_xp >= (requirement.xp_threshold or 0)

    if requirement.type == _T.EXERCISES_AT_LEVEL:
        return data.count_unlocked_at_level(requirement.level or 1) >= (requirement.count or 1)

    if requirement.type == _T.ACHIEVEMENT:
        return bool(requirement.achievement_id) and data.has_achievement(requirement.achievement_id)

    return False


def get_unlock_progress(
    requirement: UnlockRequirement,
    data: ProgressionData,
    unlock_config: Iterable[ExerciseUnlockConfig] = UNLOCK_CONFIG,
) -> int:
    """
    Progress toward an unlock requirement

    Returns:
        0-100
    """
    if requirement.type == _T.STARTER:
        return 100

    if requirement.type == _T.EXERCISE_LEVEL:
        if not requirement.exercise_id:
            return 0
        progress = get_exercise_progress(data, requirement.exercise_id, unlock_config)
        target_level = requirement.level or 1

        if not progress.unlocked:
            return 0
        if progress.level >= target_level:
            return 100

        levels_needed = target_level - 1
        if levels_needed <= 0:
            return 100
        levels_complete = progress.level - 1
        level_progress = get_level_progress(progress.xp, progress.level)
        return min(100, round_half_up((levels_complete + level_progress / 100) / levels_needed * 100))

    if requirement.type == _T.TOTAL_XP:
        threshold = requirement.xp_threshold or 1
        return min(100, round_half_up(data.total_xp / threshold * 100))

    if requirement.type == _T.EXERCISES_AT_LEVEL:
        count = data.count_unlocked_at_level(requirement.level or 1)
        needed = requirement.count or 1
        return min(100, round_half_up(count / needed * 100))

    if requirement.type == _T.ACHIEVEMENT:
        earned = bool(requirement.achievement_id) and data.has_achievement(requirement.achievement_id)
        return 100 if earned else 0

    return 0


def find_newly_met_unlocks(
    data: ProgressionData,
    unlock_config: Iterable[ExerciseUnlockConfig] = UNLOCK_CONFIG,
) -> List[str]:
    """
    Locked exercises whose requirement is now satisfied, in config order

    Starters are skipped: they are unlocked by default and never celebrated.
    """
    unlock_config = list(unlock_config)
    ready = []
    for config in unlock_config:
        if config.requirement.type == _T.STARTER:
            continue
        progress = data.exercises.get(config.exercise_id)
        if progress is not None and progress.unlocked:
            continue
        if is_requirement_met(config.requirement, data, unlock_config):
            ready.append(config.exercise_id)
    return ready
