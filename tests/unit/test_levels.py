"""Unit tests for the level curve (extflex/gamification/levels.py)"""
import pytest

from extflex.gamification.levels import (
    LEVEL_THRESHOLDS,
    MAX_LEVEL,
    calculate_level,
    get_level_info,
    get_level_progress,
    get_level_title,
    get_xp_for_current_level,
    get_xp_for_next_level,
    round_half_up,
)


# ============================================================================
# calculate_level
# ============================================================================

@pytest.mark.parametrize("xp,expected", [
    (0, 1),
    (199, 1),
    (200, 2),
    (599, 2),
    (600, 3),
    (1200, 4),
    (2000, 5),
    (3000, 6),
    (4000, 7),
    (5999, 7),
    (6000, 8),
    (8000, 9),
    (11999, 9),
    (12000, 10),
    (500000, 10),
])
def test_calculate_level(xp, expected):
    assert calculate_level(xp) == expected


def test_calculate_level_is_monotone():
    previous = 1
    for xp in range(0, 13000, 50):
        level = calculate_level(xp)
        assert 1 <= level <= MAX_LEVEL
        assert level >= previous
        previous = level


def test_every_threshold_starts_its_level():
    for index, threshold in enumerate(LEVEL_THRESHOLDS):
        assert calculate_level(threshold) == index + 1


# ============================================================================
# get_level_progress
# ============================================================================

def test_level_progress_at_level_start_is_zero():
    assert get_level_progress(200, 2) == 0


def test_level_progress_halfway():
    # Level 2 spans 200..600
    assert get_level_progress(400, 2) == 50


def test_level_progress_rounds_half_up():
    # Level 1 spans 0..200: 1 XP is 0.5%
    assert get_level_progress(1, 1) == 1
    assert get_level_progress(3, 1) == 2


def test_level_progress_is_100_at_max_level():
    assert get_level_progress(12000, 10) == 100
    assert get_level_progress(99999, 10) == 100


def test_level_progress_is_clamped():
    assert get_level_progress(0, 3) == 0
    assert get_level_progress(5000, 2) == 100


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4999) == 2


# ============================================================================
# Thresholds, titles and summary
# ============================================================================

def test_xp_for_current_and_next_level():
    assert get_xp_for_current_level(1) == 0
    assert get_xp_for_current_level(5) == 2000
    assert get_xp_for_next_level(1) == 200
    assert get_xp_for_next_level(9) == 12000
    assert get_xp_for_next_level(10) == 12000


def test_level_titles():
    assert get_level_title(1) == "Novice"
    assert get_level_title(5) == "Skilled"
    assert get_level_title(10) == "Master"
    assert get_level_title(0) == "Novice"


def test_level_info_mid_level():
    info = get_level_info(700)

    assert info["current_level"] == 3
    assert info["level_title"] == "Apprentice"
    assert info["xp_in_current_level"] == 100
    assert info["xp_to_next_level"] == 500
    assert info["level_progress"] == 17
    assert info["is_max_level"] is False


def test_level_info_max_level():
    info = get_level_info(15000)

    assert info["current_level"] == 10
    assert info["is_max_level"] is True
    assert info["xp_to_next_level"] == 0
    assert info["level_progress"] == 100
