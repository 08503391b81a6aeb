"""Calendar date and time-of-day parsing through rms-julian."""

from __future__ import annotations

import logging
import re

import julian

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r'(-?)(\d{1,6})-(\d{1,2})-(\d{1,2})')
_TIME_RE = re.compile(r'(\d{1,2}):(\d{2})(?::(\d{2}))?')

# The Gregorian calendar repeats every 400 years.
_GREGORIAN_CYCLE = 400
_GREGORIAN_CHECK_YEAR = 2000


def _gregorian_check_year(year: int) -> int:
    """Shift year by whole 400-year cycles to on or after 2000.

    rms-julian switches to the Julian calendar before 1582; the engine uses the
    proleptic Gregorian calendar, so dates are checked in the modern era.
    """
    if year >= _GREGORIAN_CHECK_YEAR:
        return year
    cycles = -((year - _GREGORIAN_CHECK_YEAR) // _GREGORIAN_CYCLE)
    return year + cycles * _GREGORIAN_CYCLE


def validate_ymd(year: int, month: int, day: int) -> None:
    """Check that year, month, day is a real proleptic Gregorian date.

    Raises:
        ValueError: If the month or day does not exist.
    """
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        raise ValueError(f'Invalid date {year}-{month:02d}-{day:02d}: month or day out of range')
    check_year = _gregorian_check_year(year)
    jday = julian.day_from_ymd(check_year, month, day)
    back = tuple(int(v) for v in julian.ymd_from_day(jday))
    if back != (check_year, month, day):
        raise ValueError(f'Invalid date {year}-{month:02d}-{day:02d}: no such day in that month')


def parse_date(value: str) -> tuple[int, int, int]:
    """Parse ``YYYY-MM-DD`` (a leading '-' gives a negative year).

    Parameters:
        value: Date text, e.g. ``"1990-05-17"`` or ``"-500-03-01"``.

    Returns:
        (year, month, day).

    Raises:
        ValueError: If the text is not a date or the date does not exist.
    """
    match = _DATE_RE.fullmatch(value.strip())
    if match is None:
        raise ValueError(f'Invalid date {value!r}; expected YYYY-MM-DD')
    sign, year, month, day = match.groups()
    ymd = (-int(year) if sign else int(year), int(month), int(day))
    validate_ymd(*ymd)
    return ymd


def parse_time(value: str) -> tuple[int, int, int]:
    """Parse ``HH:MM`` or ``HH:MM:SS`` (UT) into whole hours, minutes and seconds.

    Raises:
        ValueError: If the text is not a time of day.
    """
    match = _TIME_RE.fullmatch(value.strip())
    if match is None:
        raise ValueError(f'Invalid time {value!r}; expected HH:MM[:SS]')
    hour, minute, second = match.groups(default='00')
    if int(hour) > 23 or int(minute) > 59 or int(second) > 59:
        raise ValueError(f'Invalid time {value!r}: component out of range')
    try:
        _, sec = julian.day_sec_from_string(f'2000-01-01 {hour}:{minute}:{second}')[:2]
    except (ValueError, TypeError, LookupError) as e:
        raise ValueError(f'Invalid time {value!r}: component out of range') from e
    h, m, s = julian.hms_from_sec(sec)
    logger.debug('Parsed time %r as %s seconds of day', value, sec)
    return (int(h), int(m), int(round(float(s))))
