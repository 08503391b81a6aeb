"""Tests for calendar date and time-of-day parsing."""

from __future__ import annotations

import pytest

from sweph_json import time_utils


def test_parse_date_accepts_real_dates() -> None:
    """Dates allow negative years and leap days in leap years."""
    assert time_utils.parse_date('1990-05-17') == (1990, 5, 17)
    assert time_utils.parse_date(' -500-03-01 ') == (-500, 3, 1)
    assert time_utils.parse_date('2024-02-29') == (2024, 2, 29)
    assert time_utils.parse_date('2000-02-29') == (2000, 2, 29)


@pytest.mark.parametrize(
    'text',
    [
        '2023-02-31',
        '2023-04-31',
        '1900-02-29',
        '1500-02-29',
        '1990-13-01',
        '1990-00-10',
        '1990/05/17',
    ],
)
def test_parse_date_rejects_impossible_dates(text: str) -> None:
    """Days that do not exist in the proleptic Gregorian calendar are rejected."""
    with pytest.raises(ValueError):
        time_utils.parse_date(text)


def test_validate_ymd_checks_early_years_as_gregorian() -> None:
    """1582-10-10 exists in the proleptic Gregorian calendar; 1700-02-29 does not."""
    time_utils.validate_ymd(1582, 10, 10)
    time_utils.validate_ymd(1600, 2, 29)
    with pytest.raises(ValueError):
        time_utils.validate_ymd(1700, 2, 29)


def test_parse_time() -> None:
    """Times allow omitted seconds; out-of-range parts are rejected."""
    assert time_utils.parse_time('07:30') == (7, 30, 0)
    assert time_utils.parse_time('23:59:59') == (23, 59, 59)
    with pytest.raises(ValueError):
        time_utils.parse_time('25:00')
    with pytest.raises(ValueError):
        time_utils.parse_time('12:60:00')
    with pytest.raises(ValueError):
        time_utils.parse_time('noon')
