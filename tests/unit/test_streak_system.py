"""Unit tests for streak transitions (extflex/gamification/streak_system.py)"""
import pytest

from extflex.gamification.streak_system import (
    FREEZE_ALREADY_ACTIVE,
    FREEZE_ALREADY_USED,
    FREEZE_NONE_LEFT,
    apply_activity,
    apply_freeze,
    break_streak,
    calculate_milestone_progress,
    format_streak_display,
    get_flame_intensity,
    get_next_milestone,
    get_status,
    get_streak_tier,
    maybe_reset_freezes,
    repair_from_history,
    should_break_streak,
)
from extflex.models.streak import StreakData, StreakTier

NOW_MS = 1710331200000  # 2024-03-13 12:00 UTC
TODAY = "2024-03-13"  # Wednesday
YESTERDAY = "2024-03-12"
MONDAY = "2024-03-11"


# ============================================================================
# Activity
# ============================================================================

class TestApplyActivity:
    """Recording a day of activity"""

    def test_first_activity_starts_streak(self):
        result = apply_activity(StreakData(), TODAY, NOW_MS)

        assert result.streak_increased is True
        assert result.data.current == 1
        assert result.data.longest == 1
        assert result.data.last_active_date == TODAY
        assert result.data.started_at == NOW_MS

    def test_second_log_same_day_is_noop(self):
        data = StreakData(current=3, longest=5, last_active_date=TODAY)

        result = apply_activity(data, TODAY, NOW_MS)

        assert result.streak_increased is False
        assert result.data is data

    def test_consecutive_day_extends_streak(self):
        data = StreakData(current=3, longest=3, last_active_date=YESTERDAY, started_at=1)

        result = apply_activity(data, TODAY, NOW_MS)

        assert result.data.current == 4
        assert result.data.longest == 4
        assert result.data.started_at == 1

    def test_frozen_yesterday_bridges_the_gap(self):
        data = StreakData(current=1, last_active_date=MONDAY, frozen_dates=[YESTERDAY])

        result = apply_activity(data, TODAY, NOW_MS)

        assert result.data.current == 2
        assert result.data.frozen_dates == [YESTERDAY]

    def test_gap_restarts_streak_and_forgets_freezes(self):
        data = StreakData(
            current=10, longest=12, last_active_date="2024-03-01", frozen_dates=["2024-02-28"]
        )

        result = apply_activity(data, TODAY, NOW_MS)

        assert result.streak_increased is True
        assert result.data.current == 1
        assert result.data.longest == 12
        assert result.data.frozen_dates == []

    def test_input_is_not_mutated(self):
        data = StreakData(current=2, last_active_date=YESTERDAY)

        apply_activity(data, TODAY, NOW_MS)

        assert data.current == 2
        assert data.last_active_date == YESTERDAY

    def test_milestone_hit(self):
        data = StreakData(current=6, longest=6, last_active_date=YESTERDAY)

        result = apply_activity(data, TODAY, NOW_MS)

        assert result.milestone_hit is True
        assert result.new_milestone == 7

    def test_no_milestone_between_thresholds(self):
        data = StreakData(current=7, longest=7, last_active_date=YESTERDAY)

        result = apply_activity(data, TODAY, NOW_MS)

        assert result.milestone_hit is False
        assert result.new_milestone is None


# ============================================================================
# Freezes
# ============================================================================

class TestFreezes:
    """Spending and replenishing freezes"""

    def test_freeze_spends_one(self):
        data = StreakData(current=4, last_active_date=YESTERDAY, freezes_remaining=2)

        result = apply_freeze(data, TODAY)

        assert result.success is True
        assert result.reason is None
        assert result.data.freezes_remaining == 1
        assert result.data.frozen_dates == [TODAY]
        assert data.freezes_remaining == 2

    @pytest.mark.parametrize("data,reason", [
        (StreakData(last_active_date=TODAY), FREEZE_ALREADY_ACTIVE),
        (StreakData(frozen_dates=[TODAY], freezes_remaining=1), FREEZE_ALREADY_USED),
        (StreakData(freezes_remaining=0), FREEZE_NONE_LEFT),
    ])
    def test_freeze_rejections_leave_state_unchanged(self, data, reason):
        result = apply_freeze(data, TODAY)

        assert result.success is False
        assert result.reason == reason
        assert result.data == data

    def test_no_freezes_reason_text(self):
        assert FREEZE_NONE_LEFT == "No freezes remaining this week"

    def test_freezes_replenish_on_new_week(self):
        data = StreakData(freezes_remaining=0, freezes_reset_date="2024-03-04")

        updated = maybe_reset_freezes(data, TODAY)

        assert updated.freezes_remaining == 2
        assert updated.freezes_reset_date == MONDAY

    def test_freezes_not_replenished_within_week(self):
        data = StreakData(freezes_remaining=0, freezes_reset_date=MONDAY)

        assert maybe_reset_freezes(data, TODAY) is data

    def test_custom_weekly_allowance(self):
        updated = maybe_reset_freezes(StreakData(), TODAY, freezes_per_week=3)

        assert updated.freezes_remaining == 3


# ============================================================================
# Breaking & status
# ============================================================================

class TestBreakAndStatus:
    """Detecting broken chains on open"""

    def test_gap_breaks_streak(self):
        data = StreakData(current=5, last_active_date="2024-03-10")

        assert should_break_streak(data, TODAY) is True
        broken = break_streak(data)
        assert broken.current == 0
        assert broken.longest == 5

    @pytest.mark.parametrize("data", [
        StreakData(current=5, last_active_date=YESTERDAY),
        StreakData(current=5, last_active_date=TODAY),
        StreakData(current=5, last_active_date=MONDAY, frozen_dates=[YESTERDAY]),
        StreakData(current=0, last_active_date="2024-03-01"),
        StreakData(),
    ])
    def test_chain_intact(self, data):
        assert should_break_streak(data, TODAY) is False

    def test_status_at_risk(self):
        status = get_status(StreakData(current=3, last_active_date=YESTERDAY), TODAY)

        assert status.is_at_risk is True
        assert status.is_active is False
        assert status.is_frozen is False

    def test_status_frozen_today_is_not_at_risk(self):
        status = get_status(StreakData(current=3, frozen_dates=[TODAY]), TODAY)

        assert status.is_frozen is True
        assert status.is_at_risk is False


# ============================================================================
# History repair
# ============================================================================

class TestRepairFromHistory:
    """Rebuilding a streak stored under mismatched date keys"""

    def test_history_longer_than_stored(self):
        data = StreakData(current=1, longest=1, last_active_date=TODAY)

        repaired = repair_from_history(data, ["2024-03-11", "2024-03-12", TODAY], TODAY)

        assert repaired.current == 3
        assert repaired.longest == 3
        assert repaired.last_active_date == TODAY

    def test_frozen_day_bridges_history(self):
        data = StreakData(current=1, last_active_date=YESTERDAY, frozen_dates=[MONDAY])

        repaired = repair_from_history(data, ["2024-03-10", YESTERDAY], TODAY)

        assert repaired.current == 2

    def test_no_change_when_stored_is_not_shorter(self):
        data = StreakData(current=3, longest=3, last_active_date=TODAY)

        assert repair_from_history(data, [MONDAY, YESTERDAY, TODAY], TODAY) is None

    def test_stale_history_is_ignored(self):
        data = StreakData(current=0, longest=4)

        assert repair_from_history(data, ["2024-03-01", "2024-03-02"], TODAY) is None

    def test_empty_history(self):
        assert repair_from_history(StreakData(), [], TODAY) is None


# ============================================================================
# Milestones & display
# ============================================================================

@pytest.mark.parametrize("streak,expected", [
    (0, 0),
    (3, 43),
    (7, 0),
    (10, 43),
    (29, 94),
    (365, 100),
    (400, 100),
])
def test_milestone_progress(streak, expected):
    assert calculate_milestone_progress(streak) == expected


def test_next_milestone():
    assert get_next_milestone(0) == 7
    assert get_next_milestone(7) == 14
    assert get_next_milestone(365) is None


@pytest.mark.parametrize("streak,tier,flames", [
    (0, StreakTier.NONE, 0),
    (6, StreakTier.SMALL, 1),
    (7, StreakTier.MEDIUM, 2),
    (14, StreakTier.LARGE, 3),
    (30, StreakTier.EPIC, 4),
])
def test_streak_tier(streak, tier, flames):
    assert get_streak_tier(streak) == tier
    assert get_flame_intensity(streak) == flames


def test_format_streak_display():
    assert format_streak_display(0) == "No streak"
    assert format_streak_display(1) == "1 day"
    assert format_streak_display(5) == "5 days"
