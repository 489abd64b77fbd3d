"""Streak models"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from extflex.models.base import RecordModel
from extflex.utils.datetime_helpers import is_valid_date_key

# Streak milestone thresholds (days)
STREAK_MILESTONES: tuple[int, ...] = (7, 14, 30, 60, 90, 180, 365)

DEFAULT_FREEZES = 2


class StreakTier(str, Enum):
    """Streak tier based on length"""
    NONE = "none"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EPIC = "epic"


class StreakData(RecordModel):
    """
    Streak record

    Date fields are local date keys (YYYY-MM-DD). ``frozen_dates`` has set
    semantics and is stored as a list in insertion order.
    """
    current: int = Field(0, ge=0)
    longest: int = Field(0, ge=0)
    last_active_date: Optional[str] = None
    freezes_remaining: int = Field(DEFAULT_FREEZES, ge=0)
    freezes_reset_date: Optional[str] = None
    frozen_dates: list[str] = Field(default_factory=list)
    started_at: Optional[int] = None

    @field_validator("last_active_date", "freezes_reset_date")
    @classmethod
    def _check_date_key(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_valid_date_key(v):
            raise ValueError(f"invalid date key: {v!r}")
        return v

    @field_validator("frozen_dates")
    @classmethod
    def _dedupe_frozen_dates(cls, v: list[str]) -> list[str]:
        seen: list[str] = []
        for key in v:
            if not is_valid_date_key(key):
                raise ValueError(f"invalid frozen date key: {key!r}")
            if key not in seen:
                seen.append(key)
        return seen

    @model_validator(mode="after")
    def _longest_covers_current(self) -> "StreakData":
        if self.longest < self.current:
            self.longest = self.current
        return self

    def is_frozen(self, date_key: str) -> bool:
        return date_key in self.frozen_dates


class ActivityResult(BaseModel):
    """Outcome of recording today's activity"""
    data: StreakData
    streak_increased: bool = False
    milestone_hit: bool = False
    new_milestone: Optional[int] = None


class FreezeResult(BaseModel):
    """Outcome of a freeze attempt; a rejection is a normal result, not an error"""
    success: bool
    data: StreakData
    reason: Optional[str] = None


class StreakStatus(BaseModel):
    data: StreakData
    is_at_risk: bool
    is_active: bool
    is_frozen: bool


class StreakMilestoneEvent(BaseModel):
    milestone: int
    timestamp: int
