"""
Streak System

Pure state transitions for the day streak. Every function takes the current
StreakData and today's local date key and returns a new StreakData; nothing
here touches storage or the clock.

Day States:
- Active: an exercise was logged that day
- Frozen: a freeze was spent that day (bridges the chain, does not count)
- Inactive: neither

Rules:
- Logging again on the same day is a no-op
- Activity the day after an active or frozen day extends the streak
- Any other gap restarts the streak at 1 and forgets old freezes
- Two freezes per week, replenished on Monday

Date arithmetic always goes through day numbers of YYYY-MM-DD keys
(see extflex.utils.datetime_helpers), never through datetime subtraction.
"""

from typing import Iterable, Optional, Set

from extflex.gamification.levels import round_half_up
from extflex.models.streak import (
    DEFAULT_FREEZES,
    STREAK_MILESTONES,
    ActivityResult,
    FreezeResult,
    StreakData,
    StreakStatus,
    StreakTier,
)
from extflex.utils.datetime_helpers import days_between, previous_date_key, week_start_key

FREEZE_ALREADY_ACTIVE = "Already logged activity today"
FREEZE_ALREADY_USED = "Freeze already used today"
FREEZE_NONE_LEFT = "No freezes remaining this week"

# Milestone progress is measured from the previous milestone
_MILESTONE_FLOORS: tuple[int, ...] = (0,) + STREAK_MILESTONES


# ==========================================
# Transitions
# ==========================================

def maybe_reset_freezes(
    data: StreakData,
    today_key: str,
    freezes_per_week: int = DEFAULT_FREEZES,
) -> StreakData:
    """Replenish freezes when the stored reset date is not this week's Monday"""
    week_start = week_start_key(today_key)
    if data.freezes_reset_date == week_start:
        return data
    return data.model_copy(
        update={"freezes_remaining": freezes_per_week, "freezes_reset_date": week_start}
    )


def apply_activity(data: StreakData, today_key: str, now_ms: int) -> ActivityResult:
    """
    Record activity for today

    Args:
        data: Current streak record (freezes already replenished)
        today_key: Local date key for today
        now_ms: Timestamp used for ``started_at`` on the very first activity

    Returns:
        ActivityResult with the updated record and milestone info
    """
    if data.last_active_date == today_key:
        return ActivityResult(data=data)

    updated = data.model_copy(deep=True)
    yesterday = previous_date_key(today_key)

    if updated.last_active_date == yesterday or updated.is_frozen(yesterday):
        updated.current += 1
    elif updated.last_active_date is None:
        updated.current = 1
        if updated.started_at is None:
            updated.started_at = now_ms
    else:
        # Chain broken: start over
        updated.current = 1
        updated.frozen_dates = []

    updated.last_active_date = today_key
    updated.longest = max(updated.longest, updated.current)

    new_milestone = updated.current if is_milestone(updated.current) else None
    return ActivityResult(
        data=updated,
        streak_increased=True,
        milestone_hit=new_milestone is not None,
        new_milestone=new_milestone,
    )


def apply_freeze(data: StreakData, today_key: str) -> FreezeResult:
    """
    Spend a freeze on today

    Rejections are ordinary results and leave the record untouched.
    """
    if data.last_active_date == today_key:
        return FreezeResult(success=False, data=data, reason=FREEZE_ALREADY_ACTIVE)
    if data.is_frozen(today_key):
        return FreezeResult(success=False, data=data, reason=FREEZE_ALREADY_USED)
    if data.freezes_remaining <= 0:
        return FreezeResult(success=False, data=data, reason=FREEZE_NONE_LEFT)

    updated = data.model_copy(deep=True)
    updated.freezes_remaining -= 1
    updated.frozen_dates.append(today_key)
    return FreezeResult(success=True, data=updated)


def should_break_streak(data: StreakData, today_key: str) -> bool:
    """True when the chain has a gap of more than one day that no freeze covers"""
    yesterday = previous_date_key(today_key)
    if data.last_active_date in (today_key, yesterday):
        return False
    if data.is_frozen(yesterday):
        return False
    if not data.last_active_date or data.current <= 0:
        return False
    gap = days_between(data.last_active_date, today_key)
    return gap is not None and gap > 1


def break_streak(data: StreakData) -> StreakData:
    return data.model_copy(update={"current": 0, "frozen_dates": []})


def get_status(data: StreakData, today_key: str) -> StreakStatus:
    is_active = data.last_active_date == today_key
    is_frozen = data.is_frozen(today_key)
    return StreakStatus(
        data=data,
        is_active=is_active,
        is_frozen=is_frozen,
        is_at_risk=not is_active and not is_frozen and data.current > 0,
    )


# ==========================================
# History Repair
# ==========================================

def compute_current_streak_from_history(
    last_active_date: str,
    active_days: Set[str],
    frozen_days: Set[str],
) -> int:
    """
    Count the streak ending at ``last_active_date`` from raw day sets

    Walks backwards one day at a time. Active days add one; frozen days
    keep the chain alive without adding.
    """
    current = 0
    cursor: Optional[str] = last_active_date

    while cursor:
        if cursor in active_days:
            current += 1

        prev = previous_date_key(cursor)
        if prev is None:
            break
        if prev in active_days or prev in frozen_days:
            cursor = prev
            continue
        break

    return current


def repair_from_history(
    data: StreakData,
    active_days: Iterable[str],
    today_key: str,
) -> Optional[StreakData]:
    """
    Rebuild the streak from activity day keys

    Returns:
        The corrected record when the history yields a longer streak than
        stored, otherwise None (nothing to change)
    """
    active = set(active_days)
    if not active:
        return None

    yesterday = previous_date_key(today_key)
    if today_key not in active and yesterday not in active:
        return None

    last_active = max(active)
    computed = compute_current_streak_from_history(last_active, active, set(data.frozen_dates))
    if computed <= data.current:
        return None

    return data.model_copy(
        update={
            "current": computed,
            "last_active_date": last_active,
            "longest": max(data.longest, computed),
        }
    )


# ==========================================
# Milestones & Display
# ==========================================

def is_milestone(streak: int) -> bool:
    return streak in STREAK_MILESTONES


def get_streak_tier(streak: int) -> StreakTier:
    if streak <= 0:
        return StreakTier.NONE
    if streak < 7:
        return StreakTier.SMALL
    if streak < 14:
        return StreakTier.MEDIUM
    if streak < 30:
        return StreakTier.LARGE
    return StreakTier.EPIC


def get_next_milestone(streak: int) -> Optional[int]:
    for milestone in STREAK_MILESTONES:
        if streak < milestone:
            return milestone
    return None


_FLAME_INTENSITY = {
    StreakTier.NONE: 0,
    StreakTier.SMALL: 1,
    StreakTier.MEDIUM: 2,
    StreakTier.LARGE: 3,
    StreakTier.EPIC: 4,
}


def get_flame_intensity(streak: int) -> int:
    """Flame size 0-4 for the streak display"""
    return _FLAME_INTENSITY[get_streak_tier(streak)]


def calculate_milestone_progress(streak: int) -> int:
    """
    Progress from the previous milestone to the next one

    Returns:
        0-100; 0 with no streak, 100 once every milestone is passed
    """
    if streak <= 0:
        return 0
    next_milestone = get_next_milestone(streak)
    if next_milestone is None:
        return 100

    floor = max(m for m in _MILESTONE_FLOORS if m <= streak)
    return min(100, round_half_up((streak - floor) / (next_milestone - floor) * 100))


def format_streak_display(streak: int) -> str:
    if streak <= 0:
        return "No streak"
    return f"{streak} day{'s' if streak != 1 else ''}"
