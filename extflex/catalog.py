"""
Exercise Catalog

Static registry of every exercise the engine knows about. Exercises are
grouped in unlock tiers of three (strength, cardio, wellness); see
extflex.gamification.unlocks for the gating rules.
"""

from typing import Optional

from extflex.models.exercise import ExerciseCategory, ExerciseDefinition, TrackingType

_C = ExerciseCategory
_REPS = TrackingType.REPS
_SECS = TrackingType.DURATION


def _exercise(
    id: str,
    name: str,
    icon: str,
    category: ExerciseCategory,
    tracking_type: TrackingType,
    requires_weight: bool = False,
    enabled_by_default: bool = False,
) -> ExerciseDefinition:
    return ExerciseDefinition(
        id=id,
        name=name,
        icon=icon,
        category=category,
        tracking_type=tracking_type,
        requires_weight=requires_weight,
        enabled_by_default=enabled_by_default,
    )


EXERCISE_REGISTRY: list[ExerciseDefinition] = [
    # Tier 0 - starters
    _exercise("pushups", "Push-ups", "💪", _C.UPPER_BODY, _REPS, enabled_by_default=True),
    _exercise("jumping_jacks", "Jumping Jacks", "⭐", _C.CARDIO, _REPS, enabled_by_default=True),
    _exercise("neck_rolls", "Neck Rolls", "🔄", _C.STRETCH, _SECS, enabled_by_default=True),
    # Tier 1
    _exercise("dumbbell_curls", "Dumbbell Curls", "🏋️", _C.UPPER_BODY, _REPS, requires_weight=True),
    _exercise("high_knees", "High Knees", "🏃", _C.CARDIO, _REPS),
    _exercise("shoulder_stretch", "Shoulder Stretch", "💆", _C.STRETCH, _SECS),
    # Tier 2
    _exercise("squats", "Squats", "🦵", _C.LOWER_BODY, _REPS),
    _exercise("burpees", "Burpees", "💥", _C.CARDIO, _REPS),
    _exercise("wrist_circles", "Wrist Circles", "🖐️", _C.STRETCH, _SECS),
    # Tier 3
    _exercise("dumbbell_shoulder_press", "Shoulder Press", "🔱", _C.UPPER_BODY, _REPS, requires_weight=True),
    _exercise("jump_squats", "Jump Squats", "🦘", _C.CARDIO, _REPS),
    _exercise("hip_flexor_stretch", "Hip Flexor Stretch", "🧘", _C.STRETCH, _SECS),
    # Tier 4
    _exercise("tricep_dips", "Tricep Dips", "💺", _C.UPPER_BODY, _REPS),
    _exercise("mountain_climbers", "Mountain Climbers", "⛰️", _C.CARDIO, _REPS),
    _exercise("spinal_twist", "Seated Spinal Twist", "🌀", _C.STRETCH, _SECS),
    # Tier 5
    _exercise("dumbbell_rows", "Dumbbell Rows", "🚣", _C.UPPER_BODY, _REPS, requires_weight=True),
    _exercise("butt_kicks", "Butt Kicks", "🦶", _C.CARDIO, _REPS),
    _exercise("quad_stretch", "Standing Quad Stretch", "🦩", _C.STRETCH, _SECS),
    # Tier 6
    _exercise("goblet_squats", "Goblet Squats", "🏆", _C.LOWER_BODY, _REPS, requires_weight=True),
    _exercise("jump_lunges", "Jump Lunges", "🔥", _C.CARDIO, _REPS),
    _exercise("hamstring_stretch", "Hamstring Stretch", "🙆", _C.STRETCH, _SECS),
    # Tier 7
    _exercise("dumbbell_lunges", "Dumbbell Lunges", "🚶", _C.LOWER_BODY, _REPS, requires_weight=True),
    _exercise("skaters", "Skaters", "⛸️", _C.CARDIO, _REPS),
    _exercise("deep_breathing", "Deep Breathing", "🌬️", _C.STRETCH, _SECS),
    # Tier 8
    _exercise("dumbbell_chest_press", "Floor Chest Press", "🛋️", _C.UPPER_BODY, _REPS, requires_weight=True),
    _exercise("tuck_jumps", "Tuck Jumps", "🎯", _C.CARDIO, _REPS),
    _exercise("eye_20_20_20", "20-20-20 Rule", "👁️", _C.EYES, _SECS),
    # Tier 9
    _exercise("plank", "Plank", "🧱", _C.CORE, _SECS),
    _exercise("star_jumps", "Star Jumps", "🌟", _C.CARDIO, _REPS),
    _exercise("full_body_stretch", "Full Body Stretch", "🧘‍♀️", _C.STRETCH, _SECS),
    # Bonus - total XP milestones
    _exercise("dumbbell_deadlifts", "Dumbbell Deadlifts", "🏗️", _C.LOWER_BODY, _REPS, requires_weight=True),
    _exercise("lateral_raises", "Lateral Raises", "🦅", _C.UPPER_BODY, _REPS, requires_weight=True),
    _exercise("hammer_curls", "Hammer Curls", "🔨", _C.UPPER_BODY, _REPS, requires_weight=True),
    _exercise("overhead_tricep_extension", "Tricep Extension", "🎪", _C.UPPER_BODY, _REPS, requires_weight=True),
    _exercise("dumbbell_flyes", "Floor Dumbbell Flyes", "🦋", _C.UPPER_BODY, _REPS, requires_weight=True),
    _exercise("wall_sit", "Wall Sit", "🧱", _C.LOWER_BODY, _SECS),
    _exercise("crunches", "Crunches", "🔥", _C.CORE, _REPS),
    _exercise("bicycle_crunches", "Bicycle Crunches", "🚴", _C.CARDIO, _REPS),
    _exercise("cat_cow_stretch", "Cat-Cow Stretch", "🐱", _C.STRETCH, _SECS),
    _exercise("russian_twists", "Russian Twists", "🌀", _C.CORE, _REPS),
    _exercise("speed_skaters", "Speed Skaters", "⚡", _C.CARDIO, _REPS),
    _exercise("childs_pose", "Child's Pose", "🙏", _C.STRETCH, _SECS),
]

_BY_ID: dict[str, ExerciseDefinition] = {e.id: e for e in EXERCISE_REGISTRY}

CATEGORY_LABELS: dict[ExerciseCategory, str] = {
    ExerciseCategory.UPPER_BODY: "Upper Body",
    ExerciseCategory.LOWER_BODY: "Lower Body",
    ExerciseCategory.CORE: "Core",
    ExerciseCategory.CARDIO: "Cardio",
    ExerciseCategory.STRETCH: "Stretches",
    ExerciseCategory.EYES: "Eye Care",
}


def get_exercise_by_id(exercise_id: str) -> Optional[ExerciseDefinition]:
    return _BY_ID.get(exercise_id)


def is_valid_exercise_id(exercise_id: str) -> bool:
    return exercise_id in _BY_ID


def get_all_exercises() -> list[ExerciseDefinition]:
    return list(EXERCISE_REGISTRY)


def get_default_enabled_ids() -> list[str]:
    return [e.id for e in EXERCISE_REGISTRY if e.enabled_by_default]


def get_exercises_by_category(category: ExerciseCategory) -> list[ExerciseDefinition]:
    return [e for e in EXERCISE_REGISTRY if e.category == category]
