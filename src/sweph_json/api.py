"""Public entry points: each returns one well-formed JSON document as text."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from sweph_json.angle_utils import format_degrees
from sweph_json.config import get_ephe_path
from sweph_json.constants import (
    ASTEROIDS_BUFFER_SIZE,
    CALC_FLAGS,
    CHART_BUFFER_SIZE,
    DEFAULT_HOUSE_SYSTEM,
    ECHO_FIELD_SIZE,
    ERROR_FIELD_SIZE,
    HOUSES_BUFFER_SIZE,
    JULIAN_DAY_BUFFER_SIZE,
    MIN_ASTEROID_YEAR,
    MIN_BATCH_CAPACITY,
    NODBIT_MEAN,
    NODES_BUFFER_SIZE,
    NUM_HOUSES,
    PLANETS_BUFFER_SIZE,
    SINGLE_BUFFER_SIZE,
    SUPPORTED_DATE_RANGE,
)
from sweph_json.emitters import (
    emit_item,
    fetch_asteroid,
    fetch_body,
    fetch_houses,
    fetch_nodes,
    render_angle,
    render_asteroid,
    render_body,
    render_cusp,
    render_nodes,
)
from sweph_json.escape import escape_text
from sweph_json.models import (
    BatchSummary,
    BodyResult,
    GeoPosition,
    HouseResult,
    Moment,
    NodeApsidesResult,
)
from sweph_json.oracle.base import EphemerisOracle
from sweph_json.pipeline import (
    BatchPipeline,
    EmitOne,
    asteroid_range,
    node_body_ids,
    parse_id_list,
    planet_ids,
    summary_member,
    summary_reserve,
)
from sweph_json.writer import BoundedWriter

logger = logging.getLogger(__name__)

Sink = Callable[[str], bool]


def default_oracle(ephe_path: str | None = None) -> EphemerisOracle:
    """Build the production oracle over the swisseph extension module."""
    # Imported here so the pure formatting helpers do not need the extension.
    from sweph_json.oracle.swisseph_backend import SwissEphemerisOracle

    return SwissEphemerisOracle(ephe_path if ephe_path is not None else get_ephe_path())


def _resolve(oracle: EphemerisOracle | None) -> EphemerisOracle:
    return oracle if oracle is not None else default_oracle()


def _batch_writer(buffer_size: int, what: str) -> BoundedWriter:
    if buffer_size < MIN_BATCH_CAPACITY:
        logger.warning(
            'Capacity %d too small for a %s document; using %d',
            buffer_size,
            what,
            MIN_BATCH_CAPACITY,
        )
        buffer_size = MIN_BATCH_CAPACITY
    return BoundedWriter(buffer_size)


def _single_document(text: str, buffer_size: int) -> str:
    """Write a single-record document, growing a too-small capacity to fit it."""
    needed = len(text.encode('utf-8')) + 1
    if buffer_size < needed:
        logger.warning(
            'Capacity %d too small for a %d-byte record; using %d', buffer_size, needed - 1, needed
        )
        buffer_size = needed
    writer = BoundedWriter(buffer_size)
    writer.append(text)
    return writer.getvalue()


def _check_date(moment: Moment, *, asteroids: bool = False) -> None:
    if not moment.in_supported_range:
        logger.warning(
            'Year %d is outside the supported range %s to %s; results may be errors',
            moment.year,
            *SUPPORTED_DATE_RANGE,
        )
    if asteroids and moment.year < MIN_ASTEROID_YEAR:
        logger.warning(
            'Asteroid data is not available before %d (year %d)', MIN_ASTEROID_YEAR, moment.year
        )


def _init_date(moment: Moment, *, et: bool = False) -> str:
    key, jd = ('jd_et', moment.jd_et) if et else ('jd_ut', moment.jd_ut)
    return (
        f'"initDate": {{ "year": {moment.year}, "month": {moment.month}, "day": {moment.day}, '
        f'"hour": {moment.hour}, "minute": {moment.minute}, "second": {moment.second}, '
        f'"{key}": {jd:.6f} }}'
    )


# ---------------------------------------------------------------------------
# Document sections
# ---------------------------------------------------------------------------


def _write_list(
    pipe: BatchPipeline, member: str, ids: list[int], emit_one: EmitOne, kind: str
) -> BatchSummary:
    """Write one item list; a list that cannot even be opened counts as truncated."""
    if not pipe.open(f', "{member}": [', ']'):
        return BatchSummary(len(ids), truncated=bool(ids))
    summary = pipe.iterate(ids, emit_one, kind=kind)
    pipe.close()
    return summary


def _write_summary(pipe: BatchPipeline, summary: BatchSummary, reserve: int, kind: str) -> None:
    pipe.write_reserved(summary_member(summary), reserve)
    logger.debug(
        '%s batch: %d calculated, %d errors, %d requested',
        kind,
        summary.calculated,
        summary.errored,
        summary.requested,
    )


def _write_planets(pipe: BatchPipeline, oracle: EphemerisOracle, moment: Moment) -> BatchSummary:
    def emit_one(body: int, separator: str, sink: Sink) -> tuple[BodyResult, bool]:
        return emit_item(
            lambda: fetch_body(oracle, moment.jd_ut, body, CALC_FLAGS), render_body, separator, sink
        )

    return _write_list(pipe, 'planets', planet_ids(), emit_one, 'planet')


def _write_houses(pipe: BatchPipeline, houses: HouseResult) -> None:
    """Write the ascmc pair, the 12 cusps and, on failure, the engine message."""
    ascmc = (
        f', "ascmc": [ {render_angle("Asc", houses.ascendant, ", ")}'
        f'{render_angle("MC", houses.midheaven, " ")}]'
    )
    if not pipe.write(ascmc):
        return

    def emit_one(number: int, separator: str, sink: Sink) -> tuple[HouseResult, bool]:
        return houses, sink(' ' + render_cusp(number, houses.cusp(number), separator))

    if not pipe.open(', "houses": [', ']'):
        return
    pipe.iterate(range(1, NUM_HOUSES + 1), emit_one, kind='house')
    pipe.close()
    if not houses.ok:
        logger.debug('Houses calculation failed: %s', houses.outcome.message)
        message = escape_text(houses.outcome.message, ERROR_FIELD_SIZE)
        pipe.write(f', "error": true, "error_msg": "{message}"')


def _write_asteroids(
    pipe: BatchPipeline, oracle: EphemerisOracle, moment: Moment, numbers: list[int]
) -> None:
    def emit_one(number: int, separator: str, sink: Sink) -> tuple[BodyResult, bool]:
        return emit_item(
            lambda: fetch_asteroid(oracle, moment.jd_ut, number, CALC_FLAGS),
            render_asteroid,
            separator,
            sink,
        )

    reserve = summary_reserve(len(numbers))
    pipe.reserve(reserve)
    summary = _write_list(pipe, 'asteroids', numbers, emit_one, 'asteroid')
    _write_summary(pipe, summary, reserve, 'Asteroid')


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def get_chart(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    lon_deg: int,
    lon_min: int,
    lon_sec: int,
    lon_ew: str,
    lat_deg: int,
    lat_min: int,
    lat_sec: int,
    lat_ns: str,
    house_system: str = DEFAULT_HOUSE_SYSTEM,
    buffer_size: int = CHART_BUFFER_SIZE,
    *,
    oracle: EphemerisOracle | None = None,
) -> str:
    """Full chart: time, planet list, Asc/MC pair and the 12 house cusps.

    Parameters:
        year, month, day, hour, minute, second: UT calendar date and time.
        lon_deg, lon_min, lon_sec, lon_ew: Observer longitude and 'E'/'W'.
        lat_deg, lat_min, lat_sec, lat_ns: Observer latitude and 'N'/'S'.
        house_system: One-letter house system selector (e.g. 'P' Placidus).
        buffer_size: Output capacity in bytes.
        oracle: Ephemeris engine; defaults to the Swiss Ephemeris backend.

    Returns:
        JSON text.
    """
    oracle = _resolve(oracle)
    moment = Moment.derive(oracle, year, month, day, hour, minute, second)
    _check_date(moment)
    where = GeoPosition.from_dms(
        (lon_deg, lon_min, lon_sec, lon_ew), (lat_deg, lat_min, lat_sec, lat_ns)
    )
    pipe = BatchPipeline(_batch_writer(buffer_size, 'chart'))
    pipe.open('{ ' + _init_date(moment), ' }')
    reserve = summary_reserve(len(planet_ids()))
    pipe.reserve(reserve)
    summary = _write_planets(pipe, oracle, moment)
    houses = fetch_houses(
        oracle, moment.jd_ut, CALC_FLAGS, where.latitude, where.longitude, house_system
    )
    _write_houses(pipe, houses)
    _write_summary(pipe, summary, reserve, 'Planet')
    return pipe.close_all()


def get_planets(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    buffer_size: int = PLANETS_BUFFER_SIZE,
    *,
    oracle: EphemerisOracle | None = None,
) -> str:
    """Time and planet list, without houses."""
    oracle = _resolve(oracle)
    moment = Moment.derive(oracle, year, month, day, hour, minute, second)
    _check_date(moment)
    pipe = BatchPipeline(_batch_writer(buffer_size, 'planets'))
    pipe.open('{ ' + _init_date(moment), ' }')
    reserve = summary_reserve(len(planet_ids()))
    pipe.reserve(reserve)
    summary = _write_planets(pipe, oracle, moment)
    _write_summary(pipe, summary, reserve, 'Planet')
    return pipe.close_all()


def get_houses(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    lon_deg: int,
    lon_min: int,
    lon_sec: int,
    lon_ew: str,
    lat_deg: int,
    lat_min: int,
    lat_sec: int,
    lat_ns: str,
    house_system: str = DEFAULT_HOUSE_SYSTEM,
    buffer_size: int = HOUSES_BUFFER_SIZE,
    *,
    oracle: EphemerisOracle | None = None,
) -> str:
    """Time, Asc/MC pair and house cusps, without planets."""
    oracle = _resolve(oracle)
    moment = Moment.derive(oracle, year, month, day, hour, minute, second)
    _check_date(moment)
    where = GeoPosition.from_dms(
        (lon_deg, lon_min, lon_sec, lon_ew), (lat_deg, lat_min, lat_sec, lat_ns)
    )
    houses = fetch_houses(
        oracle, moment.jd_ut, CALC_FLAGS, where.latitude, where.longitude, house_system
    )
    pipe = BatchPipeline(_batch_writer(buffer_size, 'houses'))
    pipe.open('{ ' + _init_date(moment), ' }')
    _write_houses(pipe, houses)
    return pipe.close_all()


def get_planetary_nodes(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    method: int = NODBIT_MEAN,
    buffer_size: int = NODES_BUFFER_SIZE,
    *,
    include_sun: bool = True,
    oracle: EphemerisOracle | None = None,
) -> str:
    """Nodes and apsides of Sun through Pluto (Earth excluded) in ephemeris time.

    Parameters:
        year, month, day, hour, minute, second: UT calendar date and time.
        method: Node method bits (NODBIT_MEAN, NODBIT_OSCU, ...), echoed as ``method``.
        buffer_size: Output capacity in bytes.
        include_sun: Include the Sun as the first body.
        oracle: Ephemeris engine; defaults to the Swiss Ephemeris backend.

    Returns:
        JSON text.
    """
    oracle = _resolve(oracle)
    moment = Moment.derive(oracle, year, month, day, hour, minute, second, with_et=True)
    _check_date(moment)
    jd_et = moment.jd_et

    def emit_one(body: int, separator: str, sink: Sink) -> tuple[NodeApsidesResult, bool]:
        return emit_item(
            lambda: fetch_nodes(oracle, jd_et, body, CALC_FLAGS, method),
            render_nodes,
            separator,
            sink,
        )

    pipe = BatchPipeline(_batch_writer(buffer_size, 'nodes'))
    pipe.open('{ ' + _init_date(moment, et=True) + f', "method": {int(method)}', ' }')
    bodies = node_body_ids(include_sun)
    reserve = summary_reserve(len(bodies))
    pipe.reserve(reserve)
    summary = _write_list(pipe, 'nodes', bodies, emit_one, 'planet')
    _write_summary(pipe, summary, reserve, 'Node')
    return pipe.close_all()


def get_single_planet_nodes(
    planet_id: int,
    jd_et: float,
    method: int = NODBIT_MEAN,
    buffer_size: int = SINGLE_BUFFER_SIZE,
    *,
    oracle: EphemerisOracle | None = None,
) -> str:
    """One node/apsides record for planet_id at jd_et, echoing jd_et and method."""
    oracle = _resolve(oracle)
    result = fetch_nodes(oracle, jd_et, planet_id, CALC_FLAGS, method)
    if not result.ok:
        logger.debug('Nodes of body %d failed: %s', planet_id, result.error)
    record = render_nodes(result, jd_et=jd_et, method=int(method), lead='')
    return _single_document(record, buffer_size)


def get_asteroids(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    start: int,
    end: int,
    buffer_size: int = ASTEROIDS_BUFFER_SIZE,
    *,
    oracle: EphemerisOracle | None = None,
) -> str:
    """Numbered asteroids start..end with a range echo and a summary.

    The range is swapped when reversed and clamped to 1..MAX_ASTEROID_NUMBER;
    the echo shows the normalized range.
    """
    oracle = _resolve(oracle)
    moment = Moment.derive(oracle, year, month, day, hour, minute, second)
    _check_date(moment, asteroids=True)
    start, end = asteroid_range(start, end)
    pipe = BatchPipeline(_batch_writer(buffer_size, 'asteroids'))
    pipe.open('{ ' + _init_date(moment), ' }')
    pipe.write(f', "asteroid_range": {{ "start": {start}, "end": {end} }}')
    _write_asteroids(pipe, oracle, moment, list(range(start, end + 1)))
    return pipe.close_all()


def get_specific_asteroids(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    id_list: str,
    buffer_size: int = ASTEROIDS_BUFFER_SIZE,
    *,
    oracle: EphemerisOracle | None = None,
) -> str:
    """Asteroids named in a comma-separated list, with the list echoed and a summary.

    Tokens that are not asteroid numbers are dropped and not counted.
    """
    oracle = _resolve(oracle)
    moment = Moment.derive(oracle, year, month, day, hour, minute, second)
    _check_date(moment, asteroids=True)
    numbers = parse_id_list(id_list)
    pipe = BatchPipeline(_batch_writer(buffer_size, 'asteroids'))
    pipe.open('{ ' + _init_date(moment), ' }')
    pipe.write(f', "requested_list": "{escape_text(id_list, ECHO_FIELD_SIZE)}"')
    _write_asteroids(pipe, oracle, moment, numbers)
    return pipe.close_all()


def get_planet(
    planet_id: int,
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    *,
    oracle: EphemerisOracle | None = None,
) -> str:
    """Single body record with the Julian Day it was calculated for."""
    oracle = _resolve(oracle)
    moment = Moment.derive(oracle, year, month, day, hour, minute, second)
    _check_date(moment)
    result = fetch_body(oracle, moment.jd_ut, planet_id, CALC_FLAGS)
    if not result.ok:
        logger.debug('Body %d failed: %s', planet_id, result.error)
    return _single_document(render_body(result, jd_ut=moment.jd_ut, lead=''), SINGLE_BUFFER_SIZE)


def get_julian_day(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    *,
    oracle: EphemerisOracle | None = None,
) -> str:
    """Calendar date echo with its Julian Day (UT)."""
    oracle = _resolve(oracle)
    moment = Moment.derive(oracle, year, month, day, hour, minute, second)
    text = (
        f'{{ "year": {year}, "month": {month}, "day": {day}, "hour": {hour}, '
        f'"minute": {minute}, "second": {second}, "julian_day": {moment.jd_ut:.6f} }}'
    )
    return _single_document(text, JULIAN_DAY_BUFFER_SIZE)


def degrees_to_dms(value: float, format_flags: int = 0) -> str:
    """Format decimal degrees; see angle_utils.format_degrees for the flags."""
    return format_degrees(value, format_flags)


def get_ephemeris_info(
    buffer_size: int = SINGLE_BUFFER_SIZE, *, oracle: EphemerisOracle | None = None
) -> str:
    """Data path, engine library path and version, and the supported date range."""
    oracle = _resolve(oracle)
    start, end = SUPPORTED_DATE_RANGE
    text = (
        f'{{ "ephemeris_path": "{escape_text(oracle.ephe_path, ECHO_FIELD_SIZE)}", '
        f'"library_path": "{escape_text(oracle.library_path(), ECHO_FIELD_SIZE)}", '
        f'"version": "{escape_text(oracle.version(), ECHO_FIELD_SIZE)}", '
        f'"date_range": {{ "start": "{start}", "end": "{end}" }} }}'
    )
    return _single_document(text, buffer_size)


def free_memory(writer: BoundedWriter | None) -> None:
    """Release the storage of a BoundedWriter the caller built itself.

    Entry points return plain text and keep no buffer, so there is nothing of
    theirs to release. None is accepted and ignored.
    """
    if writer is not None:
        writer.release()


# ---------------------------------------------------------------------------
# Combined calculation
# ---------------------------------------------------------------------------


@dataclass
class AsteroidRequest:
    """Asteroid selection for calculate(): a number range or an explicit list.

    Parameters:
        mode: 'range' (uses start and end), 'specific' (uses id_list, else
            selection) or 'popular' (uses selection, else id_list).
        start, end: Range bounds for 'range'.
        id_list: Comma-separated numbers.
        selection: Picked asteroid numbers, as a sequence or comma-separated text.
    """

    mode: str
    start: int = 1
    end: int = 1
    id_list: str = ''
    selection: Sequence[int] | str = ()

    def list_text(self) -> str:
        """Comma-separated number list for the 'specific' and 'popular' modes."""
        selection = self.selection
        if not isinstance(selection, str):
            selection = ','.join(str(n) for n in selection)
        if self.mode == 'popular':
            return selection or self.id_list
        return self.id_list or selection


@dataclass
class CalculationParams:
    """Inputs of calculate(): chart request plus optional nodes and asteroids."""

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    lon_deg: int
    lon_min: int
    lon_sec: int
    lon_ew: str
    lat_deg: int
    lat_min: int
    lat_sec: int
    lat_ns: str
    house_system: str = DEFAULT_HOUSE_SYSTEM
    calculate_nodes: bool = False
    node_method: int = NODBIT_MEAN
    asteroids: AsteroidRequest | None = None


def calculate(
    params: CalculationParams, *, oracle: EphemerisOracle | None = None
) -> dict[str, Any]:
    """Chart as a dict, with ``nodes`` and ``asteroids`` documents added on request.

    Parameters:
        params: Chart inputs and optional extras.
        oracle: Ephemeris engine shared by all documents.

    Returns:
        Decoded chart document; ``nodes`` holds the nodes document and
        ``asteroids`` the asteroid document when requested. An empty specific
        list gives ``{"error": true, "error_msg": ...}`` for ``asteroids``.

    Raises:
        ValueError: If the asteroid mode is not 'range', 'specific' or 'popular'.
    """
    oracle = _resolve(oracle)
    when = (params.year, params.month, params.day, params.hour, params.minute, params.second)
    result: dict[str, Any] = json.loads(
        get_chart(
            *when,
            params.lon_deg,
            params.lon_min,
            params.lon_sec,
            params.lon_ew,
            params.lat_deg,
            params.lat_min,
            params.lat_sec,
            params.lat_ns,
            params.house_system,
            oracle=oracle,
        )
    )
    if params.calculate_nodes:
        result['nodes'] = json.loads(get_planetary_nodes(*when, params.node_method, oracle=oracle))
    request = params.asteroids
    if request is not None:
        if request.mode == 'range':
            result['asteroids'] = json.loads(
                get_asteroids(*when, request.start, request.end, oracle=oracle)
            )
        elif request.mode in ('specific', 'popular'):
            id_list = request.list_text()
            if not id_list.strip():
                result['asteroids'] = {'error': True, 'error_msg': 'Asteroid list is empty'}
            else:
                result['asteroids'] = json.loads(
                    get_specific_asteroids(*when, id_list, oracle=oracle)
                )
        else:
            raise ValueError(
                f"Unknown asteroid mode {request.mode!r}; use 'range', 'specific' or 'popular'"
            )
    return result
