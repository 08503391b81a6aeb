"""Angle formatting and geographic coordinate parsing."""

from __future__ import annotations

import enum
import math
import re

from sweph_json.constants import (
    ARCMIN_PER_DEGREE,
    ARCSEC_PER_DEGREE,
    DEGREE_SYMBOL,
    DEGREES_PER_CIRCLE,
    DEGREES_PER_SIGN,
    FLG_EQUATORIAL,
    HOUR_SYMBOL,
    ZODIAC_SIGNS,
)

# Normalized values are snapped to this many decimal places of a degree so that
# x and x + 360k format identically despite floating-point residue.
_NORMALIZE_DIGITS = 10
_MINUTE_MARK = "'"

_COORDINATE_RE = re.compile(
    r"""^\s*(\d+)\s*[°d:\s]\s*(\d+)\s*['m:\s]\s*(\d+)\s*["s]?\s*([NSEWnsew])\s*$"""
)


class DegreeFormat(enum.IntFlag):
    """Format flags for format_degrees; values match the engine's bit layout."""

    NONE = 0
    ROUND_SEC = 1
    ROUND_MIN = 2
    ZODIAC = 4
    HOURS = FLG_EQUATORIAL


def _normalize(value: float) -> float:
    """Return abs(value) reduced into [0, 360)."""
    d = abs(value)
    if not math.isfinite(d):
        return 0.0
    d = round(d % DEGREES_PER_CIRCLE, _NORMALIZE_DIGITS)
    if d >= DEGREES_PER_CIRCLE:
        d -= DEGREES_PER_CIRCLE
    return d


def format_degrees(value: float, flags: int = DegreeFormat.NONE) -> str:
    """Format decimal degrees as degrees, minutes, seconds.

    The sign is taken off first and the magnitude normalized into [0, 360).
    ROUND_MIN and ROUND_SEC add half a minute or half a second before the
    components are truncated; minutes are always shown, seconds unless
    ROUND_MIN is set, and a 4-digit fraction of a second only when neither
    rounding flag is set. With ZODIAC the value is shown within its 30-degree
    sign as ``" 5 li 45'32.7240"``; otherwise as ``"185°45'32.7240"`` (``h``
    replaces ``°`` with HOURS). A negative input puts ``-`` in place of the
    blank before the first digit, or in front when there is none.

    Parameters:
        value: Angle in decimal degrees (or hours with HOURS), any sign or size.
        flags: Combination of DegreeFormat bits.

    Returns:
        Formatted string.
    """
    flags = int(flags)
    negative = value < 0
    d = _normalize(float(value))
    if flags & DegreeFormat.ROUND_MIN:
        d += 0.5 / ARCMIN_PER_DEGREE
    if flags & DegreeFormat.ROUND_SEC:
        d += 0.5 / ARCSEC_PER_DEGREE
    if d >= DEGREES_PER_CIRCLE:
        d -= DEGREES_PER_CIRCLE

    sign_name = ''
    if flags & DegreeFormat.ZODIAC:
        index = int(d / DEGREES_PER_SIGN) % len(ZODIAC_SIGNS)
        sign_name = ZODIAC_SIGNS[index]
        d = math.fmod(d, DEGREES_PER_SIGN)

    ideg = int(d)
    d = (d - ideg) * 60.0
    imin = int(d)
    d = (d - imin) * 60.0
    isec = int(d)
    frac = int((d - isec) * 10000.0)

    if flags & DegreeFormat.ROUND_MIN:
        tail = ''
    elif flags & DegreeFormat.ROUND_SEC:
        tail = f"'{isec:2d}"
    else:
        tail = f"'{isec:2d}.{frac:04d}"

    if flags & DegreeFormat.ZODIAC:
        out = f'{ideg:2d} {sign_name} {imin:2d}{tail}'
    else:
        symbol = HOUR_SYMBOL if flags & DegreeFormat.HOURS else DEGREE_SYMBOL
        # The plain minute-rounded form still closes the minutes with a tick.
        out = f'{ideg:3d}{symbol}{imin:2d}{tail or _MINUTE_MARK}'

    if negative:
        match = re.search(r'\d', out)
        if match is not None and match.start() > 0:
            i = match.start()
            out = out[: i - 1] + '-' + out[i:]
        else:
            out = '-' + out
    return out


def coordinate_to_degrees(deg: float, minute: float, sec: float, hemisphere: str) -> float:
    """Convert degrees, minutes, seconds and hemisphere letter to signed degrees.

    Components are not range-checked. West and south negate the result.

    Parameters:
        deg: Whole degrees.
        minute: Minutes of arc.
        sec: Seconds of arc.
        hemisphere: 'N', 'S', 'E' or 'W'; only the first character is used.

    Returns:
        Signed decimal degrees.
    """
    value = deg + minute / ARCMIN_PER_DEGREE + sec / ARCSEC_PER_DEGREE
    if hemisphere[:1] in ('W', 'S'):
        value = -value
    return value


def parse_coordinate(text: str) -> tuple[int, int, int, str]:
    """Parse a coordinate string such as ``51°30'0"N`` into its components.

    Parameters:
        text: Degrees, minutes, seconds and a hemisphere letter; ``°``, ``d``,
            ``:`` or blanks may separate the numbers.

    Returns:
        (degrees, minutes, seconds, hemisphere) with the hemisphere upper-cased.

    Raises:
        ValueError: If the text is not a coordinate.
    """
    match = _COORDINATE_RE.match(text)
    if match is None:
        raise ValueError(f'Invalid coordinate format {text!r}; expected e.g. 51°30\'0"N')
    deg, minute, sec, hemisphere = match.groups()
    return (int(deg), int(minute), int(sec), hemisphere.upper())
