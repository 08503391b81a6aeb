"""Ephemeris oracle interface used by the emitters and entry points."""

from __future__ import annotations

from typing import NamedTuple, Protocol

import numpy as np


class RawCalc(NamedTuple):
    """Unclassified engine return.

    Parameters:
        values: Values the engine filled in (zeros when it failed).
        status: Engine return flags, or a negative error code.
        message: Engine error or warning text, possibly empty.
    """

    values: np.ndarray
    status: int
    message: str


class EphemerisOracle(Protocol):
    """Computation engine for positions, nodes/apsides and houses.

    Implementations never raise for a failed calculation; the failure is
    reported through ``RawCalc.status`` and ``RawCalc.message``.
    """

    def julian_day(self, year: int, month: int, day: int, hour: float) -> float:
        """Gregorian calendar date and decimal hour (UT) to Julian Day."""
        ...

    def delta_t(self, jd_ut: float) -> float:
        """Delta T in days at jd_ut."""
        ...

    def calc_ut(self, jd_ut: float, body: int, flags: int) -> RawCalc:
        """Position and speed of body: six values (lon, lat, dist, speeds)."""
        ...

    def nod_aps(self, jd_et: float, body: int, flags: int, method: int) -> RawCalc:
        """Nodes and apsides of body: a 4x6 array (asc, desc, peri, aph)."""
        ...

    def houses(self, jd_ut: float, flags: int, lat: float, lon: float, hsys: str) -> RawCalc:
        """House cusps 1-12 followed by ascendant and midheaven (14 values)."""
        ...

    def body_name(self, body: int) -> str:
        """Display name of body, or an empty string / ``?`` when unknown."""
        ...

    def library_path(self) -> str:
        """Location of the engine library."""
        ...

    def version(self) -> str:
        """Engine version string."""
        ...

    @property
    def ephe_path(self) -> str:
        """Data-file search path the oracle was configured with."""
        ...
