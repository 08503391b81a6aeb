"""Record emitters: fetch one item from the oracle and render it as a JSON record."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from typing import TypeVar

from sweph_json.angle_utils import DegreeFormat, format_degrees
from sweph_json.constants import (
    AST_OFFSET,
    ERROR_FIELD_SIZE,
    FLG_SWIEPH,
    NAME_FIELD_SIZE,
    NUM_HOUSES,
)
from sweph_json.escape import escape_text
from sweph_json.models import (
    NODE_POINTS,
    BodyResult,
    HouseResult,
    NodeApsidesResult,
    OracleFailure,
    OracleSuccess,
    classify,
)
from sweph_json.oracle.base import EphemerisOracle

logger = logging.getLogger(__name__)

T = TypeVar('T', BodyResult, NodeApsidesResult, HouseResult)


def _num(value: float, digits: int = 6) -> str:
    """Fixed-point number, or null when the engine produced a non-finite value."""
    v = float(value)
    if not math.isfinite(v):
        return 'null'
    return f'{v:.{digits}f}'


def _long_s(value: float) -> str:
    return format_degrees(float(value), DegreeFormat.ZODIAC)


def _name(name: str) -> str:
    return escape_text(name, NAME_FIELD_SIZE)


def _error(message: str | None) -> str:
    return escape_text(message, ERROR_FIELD_SIZE)


# ---------------------------------------------------------------------------
# Fetchers: one oracle call each, classified into a tagged outcome
# ---------------------------------------------------------------------------


def asteroid_name(oracle: EphemerisOracle, number: int) -> str:
    """Engine name for asteroid number, or ``Asteroid_<n>`` when it has none."""
    name = oracle.body_name(AST_OFFSET + number)
    if not name or name == '?':
        return f'Asteroid_{number}'
    return name


def fetch_body(oracle: EphemerisOracle, jd_ut: float, body: int, flags: int) -> BodyResult:
    """Calculate one major body; success needs positive flags with SEFLG_SWIEPH."""
    raw = oracle.calc_ut(jd_ut, body, flags)
    outcome = classify(raw.values, raw.status, raw.message, vector=True, expected=FLG_SWIEPH)
    return BodyResult(body, oracle.body_name(body), outcome)


def fetch_asteroid(oracle: EphemerisOracle, jd_ut: float, number: int, flags: int) -> BodyResult:
    """Calculate one numbered asteroid; the record index is the catalog number."""
    raw = oracle.calc_ut(jd_ut, AST_OFFSET + number, flags)
    outcome = classify(raw.values, raw.status, raw.message, vector=True, expected=FLG_SWIEPH)
    return BodyResult(number, asteroid_name(oracle, number), outcome)


def fetch_nodes(
    oracle: EphemerisOracle, jd_et: float, body: int, flags: int, method: int
) -> NodeApsidesResult:
    """Calculate nodes and apsides of one body; success is a non-negative status."""
    raw = oracle.nod_aps(jd_et, body, flags, method)
    outcome = classify(raw.values, raw.status, raw.message, vector=False, expected=0)
    return NodeApsidesResult(body, oracle.body_name(body), outcome)


def fetch_houses(
    oracle: EphemerisOracle, jd_ut: float, flags: int, lat: float, lon: float, hsys: str
) -> HouseResult:
    """Calculate house cusps and the Asc/MC pair."""
    raw = oracle.houses(jd_ut, flags, lat, lon, hsys)
    outcome = classify(raw.values, raw.status, raw.message, vector=False, expected=0)
    values = [float(v) for v in raw.values]
    if len(values) < NUM_HOUSES + 2:
        values += [0.0] * (NUM_HOUSES + 2 - len(values))
    return HouseResult(
        cusps=tuple(values[:NUM_HOUSES]),
        ascendant=values[NUM_HOUSES],
        midheaven=values[NUM_HOUSES + 1],
        outcome=outcome,
    )


# ---------------------------------------------------------------------------
# Record shapes
# ---------------------------------------------------------------------------


def render_body(
    result: BodyResult,
    separator: str = '',
    *,
    distance_digits: int = 9,
    jd_ut: float | None = None,
    lead: str = ' ',
) -> str:
    """Render a body position record.

    Parameters:
        result: Classified body query.
        separator: Text after the closing brace (``", "`` between list items).
        distance_digits: Decimal places of the distance field.
        jd_ut: When given, a ``jd_ut`` member is included (single-body document).
        lead: Text before the opening brace.
    """
    jd = f'"jd_ut": {_num(jd_ut)}, ' if jd_ut is not None else ''
    head = f'{lead}{{ "index": {result.index}, "name": "{_name(result.name)}", '
    if isinstance(result.outcome, OracleFailure):
        return (
            f'{head}"long": 0.0, "lat": 0.0, "distance": 0.0, "speed": 0.0, "long_s": "", '
            f'{jd}"iflagret": {result.flags}, "error": true, '
            f'"error_msg": "{_error(result.error)}" }}{separator}'
        )
    return (
        f'{head}"long": {_num(result.longitude)}, "lat": {_num(result.latitude)}, '
        f'"distance": {_num(result.distance, distance_digits)}, "speed": {_num(result.speed)}, '
        f'"long_s": "{_long_s(result.longitude)}", {jd}"iflagret": {result.flags}, '
        f'"error": false }}{separator}'
    )


def render_asteroid(result: BodyResult, separator: str = '') -> str:
    """Asteroid list record (distance with six decimals)."""
    return render_body(result, separator, distance_digits=6)


def _render_point(values: Sequence[float]) -> str:
    return (
        f'{{ "long": {_num(values[0])}, "lat": {_num(values[1])}, '
        f'"distance": {_num(values[2], 9)}, "speed_long": {_num(values[3])}, '
        f'"speed_lat": {_num(values[4])}, "speed_dist": {_num(values[5], 9)}, '
        f'"long_s": "{_long_s(values[0])}" }}'
    )


def render_nodes(
    result: NodeApsidesResult,
    separator: str = '',
    *,
    jd_et: float | None = None,
    method: int | None = None,
    lead: str = ' ',
) -> str:
    """Render a nodes/apsides record: four points on success, one error otherwise.

    ``jd_et`` and ``method`` are echoed when given (single-body document).
    """
    head = f'{lead}{{ "index": {result.index}, "name": "{_name(result.name)}", '
    if jd_et is not None:
        head += f'"jd_et": {_num(jd_et)}, '
    if method is not None:
        head += f'"method": {method}, '
    if not result.ok:
        return f'{head}"error": true, "error_msg": "{_error(result.error)}" }}{separator}'
    points = ', '.join(f'"{name}": {_render_point(result.point(name))}' for name in NODE_POINTS)
    return f'{head}{points}, "error": false }}{separator}'


def render_angle(name: str, longitude: float, separator: str = '') -> str:
    """Ascendant/midheaven record."""
    return (
        f'{{ "name": "{_name(name)}", "long": {_num(longitude)}, '
        f'"long_s": "{_long_s(longitude)}" }}{separator}'
    )


def render_cusp(number: int, longitude: float, separator: str = '') -> str:
    """House cusp record; the house number is a string name."""
    return (
        f'{{ "name": "{number}", "long": {_num(longitude)}, '
        f'"long_s": "{_long_s(longitude)}" }}{separator}'
    )


# ---------------------------------------------------------------------------
# Generic emitter
# ---------------------------------------------------------------------------


def emit_item(
    fetch: Callable[[], T],
    render: Callable[[T, str], str],
    separator: str,
    sink: Callable[[str], bool],
) -> tuple[T, bool]:
    """Fetch one item, render it with separator and hand the record to sink.

    The oracle call never raises here: failures become error records.

    Parameters:
        fetch: Closure making the oracle call and classifying it.
        render: Record shape for the result.
        separator: Trailing separator (empty or blank for the last list item).
        sink: Writes the record; returns False when it did not fit.

    Returns:
        (result, written).
    """
    result = fetch()
    if not result.ok:
        logger.debug(
            'Item %s failed: %s', getattr(result, 'index', '?'), getattr(result, 'error', '')
        )
    return result, sink(render(result, separator))


def largest_record_bytes() -> int:
    """Size in bytes of the largest record the list emitters can produce.

    Built from worst-case inputs: a maximum-length name and error text made of
    characters that all need escaping, and extreme numeric values.
    """
    long_name = '"' * NAME_FIELD_SIZE
    long_error = '"' * ERROR_FIELD_SIZE
    big = -9.99999999e9
    failure = BodyResult(-(2**31), long_name, OracleFailure(-(2**31), long_error))
    body = render_body(failure, ', ', jd_ut=big)
    point = [big] * 6
    nodes = render_nodes(
        NodeApsidesResult(-(2**31), long_name, OracleSuccess([point] * len(NODE_POINTS), 0)),
        ', ',
        jd_et=big,
        method=-(2**31),
    )
    node_failure = render_nodes(
        NodeApsidesResult(-(2**31), long_name, OracleFailure(-(2**31), long_error)),
        ', ',
        jd_et=big,
        method=-(2**31),
    )
    return max(len(r.encode('utf-8')) for r in (body, nodes, node_failure))
