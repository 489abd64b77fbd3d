"""Exercise catalog, entry and personal-best models"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from extflex.models.base import RecordModel


class ExerciseCategory(str, Enum):
    """Categories for grouping exercises"""
    UPPER_BODY = "upper_body"
    LOWER_BODY = "lower_body"
    CORE = "core"
    CARDIO = "cardio"
    STRETCH = "stretch"
    EYES = "eyes"


class TrackingType(str, Enum):
    """How the exercise is measured"""
    REPS = "reps"
    DURATION = "duration"  # seconds


class ExerciseDefinition(BaseModel):
    """Static catalog entry"""
    id: str
    name: str
    icon: str
    category: ExerciseCategory
    tracking_type: TrackingType
    requires_weight: bool = False
    enabled_by_default: bool = False


class ExerciseEntry(RecordModel):
    """A single logged exercise"""
    id: str
    exercise_id: str
    value: int  # reps or seconds
    timestamp: int  # epoch ms
    session_id: Optional[str] = None
    weight: Optional[float] = None


class ExerciseStats(BaseModel):
    """Aggregated stats for a set of entries"""
    total_value: int = 0
    set_count: int = 0


class PersonalBest(RecordModel):
    """Personal best record for one exercise (or one weight level)"""
    value: int
    timestamp: int
    weight: Optional[float] = None


class ExercisePersonalBests(RecordModel):
    """
    Personal bests for an exercise

    Non-weighted exercises keep a single ``pb``; weighted exercises keep
    ``weighted_pbs`` keyed by weight (see weight_key()).
    """
    exercise_id: str
    pb: Optional[PersonalBest] = None
    weighted_pbs: Optional[dict[str, PersonalBest]] = None


class PBCheckResult(BaseModel):
    """Result of checking/updating a personal best"""
    is_new_pb: bool
    new_pb: Optional[PersonalBest] = None
    previous_pb: Optional[PersonalBest] = None


class ImportSummary(BaseModel):
    """Outcome of a bulk data import"""
    entries_imported: int = 0
    exercises_imported: int = 0
    achievements_imported: int = 0
    personal_bests_imported: int = 0
    streak_imported: bool = False
    dropped: int = Field(0, description="Invalid records skipped")
