"""Tests for date key helpers (extflex/utils/datetime_helpers.py)"""
from datetime import date, datetime, timezone

import pytest

from extflex import config
from extflex.utils.datetime_helpers import (
    date_key_for,
    date_key_for_timestamp,
    day_number,
    days_between,
    format_date_key,
    from_timestamp_ms,
    get_local_timezone,
    is_valid_date_key,
    parse_date_key,
    previous_date_key,
    shift_date_key,
    to_timestamp_ms,
    week_start_key,
)


def test_format_and_parse_date_key():
    assert format_date_key(date(2024, 3, 5)) == "2024-03-05"
    assert parse_date_key("2024-03-05") == date(2024, 3, 5)


@pytest.mark.parametrize("key", ["2024-3-5", "2024-02-30", "not a date", "", None, 20240305])
def test_invalid_date_keys(key):
    assert parse_date_key(key) is None
    assert is_valid_date_key(key) is False


def test_day_arithmetic_crosses_month_and_year():
    assert previous_date_key("2024-03-01") == "2024-02-29"
    assert previous_date_key("2024-01-01") == "2023-12-31"
    assert shift_date_key("2024-12-31", 1) == "2025-01-01"
    assert days_between("2023-12-31", "2024-03-01") == 61
    assert days_between("2024-03-13", "2024-03-12") == -1
    assert day_number("2024-03-13") - day_number("2024-03-12") == 1


def test_day_arithmetic_rejects_bad_keys():
    assert previous_date_key("garbage") is None
    assert days_between("garbage", "2024-03-13") is None
    assert week_start_key("garbage") is None


@pytest.mark.parametrize("key,monday", [
    ("2024-03-11", "2024-03-11"),
    ("2024-03-13", "2024-03-11"),
    ("2024-03-17", "2024-03-11"),
    ("2024-03-18", "2024-03-18"),
    ("2024-01-03", "2024-01-01"),
])
def test_week_start_key(key, monday):
    assert week_start_key(key) == monday


def test_timestamp_round_trip():
    moment = datetime(2024, 3, 13, 12, 0, tzinfo=timezone.utc)

    assert to_timestamp_ms(moment) == 1710331200000
    assert from_timestamp_ms(1710331200000, timezone.utc) == moment


def test_date_key_follows_configured_timezone(monkeypatch):
    # 02:30 UTC on the 13th is still the 12th in New York
    moment = datetime(2024, 3, 13, 2, 30, tzinfo=timezone.utc)

    assert date_key_for(moment) == "2024-03-13"

    monkeypatch.setattr(config, "TIMEZONE", "America/New_York")
    assert date_key_for(moment) == "2024-03-12"
    assert date_key_for_timestamp(to_timestamp_ms(moment)) == "2024-03-12"


def test_days_between_ignores_dst_shift(monkeypatch):
    monkeypatch.setattr(config, "TIMEZONE", "America/New_York")
    before = datetime(2024, 3, 9, 23, 30, tzinfo=timezone.utc)
    after = datetime(2024, 3, 11, 3, 30, tzinfo=timezone.utc)

    assert days_between(date_key_for(before), date_key_for(after)) == 1


def test_invalid_timezone_falls_back_to_system(monkeypatch):
    monkeypatch.setattr(config, "TIMEZONE", "Not/AZone")

    assert get_local_timezone() is not None
