"""
Personal Best Comparison

For non-weighted exercises the single highest rep count (or longest hold) is
tracked. Weighted exercises keep one PB per weight level; each weight is its
own slate, so 10 reps at 20kg and 8 reps at 25kg are both PBs.

A new PB requires a strictly higher value than the stored one.
"""

from typing import Dict, Optional, Tuple

from extflex.models.exercise import (
    ExerciseDefinition,
    ExercisePersonalBests,
    PBCheckResult,
    PersonalBest,
)


def weight_key(weight: float) -> str:
    """Map key for a weight level ("20" for both 20 and 20.0)"""
    if float(weight).is_integer():
        return str(int(weight))
    return str(weight)


def get_pb_for(
    record: Optional[ExercisePersonalBests],
    exercise: Optional[ExerciseDefinition],
    weight: Optional[float] = None,
) -> Optional[PersonalBest]:
    """Current PB at a weight level (weighted) or the single PB"""
    if record is None:
        return None
    if exercise is not None and exercise.requires_weight and weight is not None:
        return (record.weighted_pbs or {}).get(weight_key(weight))
    return record.pb


def get_highest_pb(weighted_pbs: Dict[str, PersonalBest]) -> Optional[PersonalBest]:
    """Highest value across all weight levels (first one wins ties)"""
    highest: Optional[PersonalBest] = None
    for pb in weighted_pbs.values():
        if highest is None or pb.value > highest.value:
            highest = pb
    return highest


def evaluate_personal_best(
    exercise: Optional[ExerciseDefinition],
    record: Optional[ExercisePersonalBests],
    value: int,
    weight: Optional[float],
    now_ms: int,
) -> Tuple[PBCheckResult, Optional[ExercisePersonalBests]]:
    """
    Compare a logged value against the stored PB

    Args:
        exercise: Catalog definition (None for an unknown exercise id)
        record: Stored PBs for the exercise, if any
        value: Reps or seconds just logged
        weight: Weight used, for weighted exercises
        now_ms: Timestamp for a new PB

    Returns:
        (result, updated record). The updated record is None when nothing
        needs to be written.
    """
    if exercise is None:
        return PBCheckResult(is_new_pb=False), None

    if exercise.requires_weight:
        if weight is None:
            return PBCheckResult(is_new_pb=False), None
        key = weight_key(weight)
        previous = (record.weighted_pbs or {}).get(key) if record else None
    else:
        previous = record.pb if record else None

    if previous is not None and value <= previous.value:
        return PBCheckResult(is_new_pb=False, previous_pb=previous), None

    updated = (
        record.model_copy(deep=True)
        if record is not None
        else ExercisePersonalBests(exercise_id=exercise.id)
    )

    if exercise.requires_weight:
        new_pb = PersonalBest(value=value, timestamp=now_ms, weight=weight)
        weighted = dict(updated.weighted_pbs or {})
        weighted[key] = new_pb
        updated.weighted_pbs = weighted
    else:
        new_pb = PersonalBest(value=value, timestamp=now_ms)
        updated.pb = new_pb

    return PBCheckResult(is_new_pb=True, new_pb=new_pb, previous_pb=previous), updated
