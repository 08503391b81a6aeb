"""Request-scoped data model: time, location, oracle outcomes and batch counters."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sweph_json.angle_utils import coordinate_to_degrees
from sweph_json.constants import (
    FLG_SWIEPH,
    MAX_SUPPORTED_YEAR,
    MIN_SUPPORTED_YEAR,
    NUM_HOUSES,
)

if TYPE_CHECKING:
    from sweph_json.oracle.base import EphemerisOracle


@dataclass(frozen=True)
class Moment:
    """Calendar date/time (UT) with its derived Julian Day values.

    Parameters:
        year, month, day, hour, minute, second: Calendar components.
        jd_ut: Julian Day in Universal Time.
        jd_et: Julian Day in ephemeris time, when the request needs it.
    """

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    jd_ut: float
    jd_et: float | None = None

    @property
    def decimal_hour(self) -> float:
        """Hour of day including minutes and seconds."""
        return self.hour + self.minute / 60.0 + self.second / 3600.0

    @property
    def in_supported_range(self) -> bool:
        """True when the year lies within the bundled data files' range."""
        return MIN_SUPPORTED_YEAR <= self.year <= MAX_SUPPORTED_YEAR

    @classmethod
    def derive(
        cls,
        oracle: EphemerisOracle,
        year: int,
        month: int,
        day: int,
        hour: int,
        minute: int,
        second: int,
        *,
        with_et: bool = False,
    ) -> Moment:
        """Build a Moment, asking the oracle for the Julian Day (and delta T)."""
        decimal_hour = hour + minute / 60.0 + second / 3600.0
        jd_ut = oracle.julian_day(year, month, day, decimal_hour)
        jd_et = jd_ut + oracle.delta_t(jd_ut) if with_et else None
        return cls(year, month, day, hour, minute, second, jd_ut, jd_et)


@dataclass(frozen=True)
class GeoPosition:
    """Observer location in signed decimal degrees (east and north positive)."""

    longitude: float
    latitude: float

    @classmethod
    def from_dms(
        cls,
        lon: tuple[float, float, float, str],
        lat: tuple[float, float, float, str],
    ) -> GeoPosition:
        """Build from (degrees, minutes, seconds, hemisphere) pairs."""
        return cls(coordinate_to_degrees(*lon), coordinate_to_degrees(*lat))


@dataclass(frozen=True)
class OracleSuccess:
    """Successful engine call: result values and the engine's return flags."""

    values: Sequence
    flags: int

    ok = True


@dataclass(frozen=True)
class OracleFailure:
    """Failed engine call: return flags and the engine's error text."""

    flags: int
    message: str

    ok = False


OracleOutcome = OracleSuccess | OracleFailure


def vector_call_succeeded(flags: int, expected: int = FLG_SWIEPH) -> bool:
    """Success rule for position calculations: flags > 0 with the expected bits."""
    return flags > 0 and (flags & expected) == expected


def status_call_succeeded(flags: int, expected: int = 0) -> bool:
    """Success rule for status-returning calculations: flags >= 0 with the expected bits."""
    return flags >= 0 and (flags & expected) == expected


def classify(
    values: Sequence, flags: int, message: str, *, vector: bool, expected: int
) -> OracleOutcome:
    """Turn a raw engine return into a tagged outcome.

    Parameters:
        values: Values the engine filled in.
        flags: Engine return flags or status code.
        message: Engine error text (may be empty).
        vector: Use the position-calculation rule (strictly positive flags).
        expected: Flag bits that must be present for success.

    Returns:
        OracleSuccess or OracleFailure.
    """
    if vector:
        ok = vector_call_succeeded(flags, expected)
    else:
        ok = status_call_succeeded(flags, expected)
    if ok:
        return OracleSuccess(values, flags)
    return OracleFailure(flags, message or f'calculation failed (flags {flags})')


@dataclass(frozen=True)
class BodyResult:
    """One body position query: id, display name and outcome."""

    index: int
    name: str
    outcome: OracleOutcome

    @property
    def ok(self) -> bool:
        return self.outcome.ok

    @property
    def flags(self) -> int:
        return self.outcome.flags

    @property
    def longitude(self) -> float:
        return self._value(0)

    @property
    def latitude(self) -> float:
        return self._value(1)

    @property
    def distance(self) -> float:
        return self._value(2)

    @property
    def speed(self) -> float:
        return self._value(3)

    @property
    def error(self) -> str | None:
        if isinstance(self.outcome, OracleFailure):
            return self.outcome.message
        return None

    def _value(self, i: int) -> float:
        if isinstance(self.outcome, OracleSuccess):
            return float(self.outcome.values[i])
        raise AttributeError(f'body {self.index} has no position: {self.outcome.message}')


NODE_POINTS = ('ascending_node', 'descending_node', 'perihelion', 'aphelion')


@dataclass(frozen=True)
class NodeApsidesResult:
    """Nodes and apsides of one body: four six-value points, or one failure."""

    index: int
    name: str
    outcome: OracleOutcome

    @property
    def ok(self) -> bool:
        return self.outcome.ok

    @property
    def error(self) -> str | None:
        if isinstance(self.outcome, OracleFailure):
            return self.outcome.message
        return None

    def point(self, name: str) -> Sequence:
        """Return the six values of one point (see NODE_POINTS)."""
        if not isinstance(self.outcome, OracleSuccess):
            raise AttributeError(f'body {self.index} has no nodes: {self.outcome.message}')
        return self.outcome.values[NODE_POINTS.index(name)]


@dataclass(frozen=True)
class HouseResult:
    """House cusps 1-12 and the ascendant/midheaven angle pair."""

    cusps: tuple[float, ...]
    ascendant: float
    midheaven: float
    outcome: OracleOutcome

    @property
    def ok(self) -> bool:
        return self.outcome.ok

    def cusp(self, number: int) -> float:
        """Return the longitude of house number (1-12)."""
        if not 1 <= number <= NUM_HOUSES:
            raise IndexError(f'house number must be 1-{NUM_HOUSES}, got {number}')
        return self.cusps[number - 1]


@dataclass
class BatchSummary:
    """Counters for a batch: requested, calculated, errored and truncation."""

    requested: int
    calculated: int = 0
    errored: int = 0
    truncated: bool = False

    @property
    def processed(self) -> int:
        return self.calculated + self.errored

    def record(self, ok: bool) -> None:
        """Count one processed item."""
        if ok:
            self.calculated += 1
        else:
            self.errored += 1

    def reconciles(self) -> bool:
        """True when the counters are consistent with the truncation state."""
        if self.truncated:
            return self.processed < self.requested
        return self.processed == self.requested
