"""Swiss Ephemeris oracle backed by pyswisseph."""

from __future__ import annotations

import logging

import numpy as np
import swisseph as swe

from sweph_json.config import get_ephe_path
from sweph_json.constants import ERR, FLG_SWIEPH, GREG_CAL, NUM_HOUSES
from sweph_json.oracle.base import RawCalc

logger = logging.getLogger(__name__)

_VECTOR_LEN = 6
_NODE_POINTS = 4


class SwissEphemerisOracle:
    """EphemerisOracle over the swisseph extension module.

    The data path is passed in rather than read from process state; the
    engine's own path setting is updated once, at construction.

    Parameters:
        ephe_path: Directory holding the ``.se1`` data files; defaults to
            ``config.get_ephe_path()``.
    """

    def __init__(self, ephe_path: str | None = None) -> None:
        self._ephe_path = ephe_path if ephe_path is not None else get_ephe_path()
        swe.set_ephe_path(self._ephe_path)
        logger.debug('Swiss Ephemeris data path set to %s', self._ephe_path)

    @property
    def ephe_path(self) -> str:
        return self._ephe_path

    def julian_day(self, year: int, month: int, day: int, hour: float) -> float:
        return float(swe.julday(year, month, day, hour, GREG_CAL))

    def delta_t(self, jd_ut: float) -> float:
        try:
            return float(swe.deltat_ex(jd_ut, FLG_SWIEPH))
        except swe.Error as e:
            # deltat_ex only fails when the data files are missing; the plain
            # model value is still correct to within the file/analytic difference.
            logger.debug('deltat_ex failed at JD %.6f (%s); using deltat', jd_ut, e)
            return float(swe.deltat(jd_ut))

    def calc_ut(self, jd_ut: float, body: int, flags: int) -> RawCalc:
        try:
            xx, retflag = swe.calc_ut(jd_ut, body, flags)
        except swe.Error as e:
            logger.debug('calc_ut failed for body %d at JD %.6f: %s', body, jd_ut, e)
            return RawCalc(np.zeros(_VECTOR_LEN), ERR, str(e))
        return RawCalc(np.asarray(xx, dtype=float), int(retflag), '')

    def nod_aps(self, jd_et: float, body: int, flags: int, method: int) -> RawCalc:
        try:
            points = swe.nod_aps(jd_et, body, method=method, flags=flags)
        except swe.Error as e:
            logger.debug('nod_aps failed for body %d at JD %.6f: %s', body, jd_et, e)
            return RawCalc(np.zeros((_NODE_POINTS, _VECTOR_LEN)), ERR, str(e))
        return RawCalc(np.asarray(points, dtype=float), flags, '')

    def houses(self, jd_ut: float, flags: int, lat: float, lon: float, hsys: str) -> RawCalc:
        try:
            cusps, ascmc = swe.houses_ex(jd_ut, lat, lon, hsys.encode('ascii'), flags)
        except (swe.Error, UnicodeEncodeError) as e:
            logger.debug('houses_ex failed for system %r at JD %.6f: %s', hsys, jd_ut, e)
            return RawCalc(np.zeros(NUM_HOUSES + 2), ERR, str(e))
        # Older bindings return a 13-slot cusp list with slot 0 unused.
        if len(cusps) == NUM_HOUSES + 1:
            cusps = cusps[1:]
        values = list(cusps[:NUM_HOUSES]) + [ascmc[0], ascmc[1]]
        return RawCalc(np.asarray(values, dtype=float), flags, '')

    def body_name(self, body: int) -> str:
        try:
            return str(swe.get_planet_name(body))
        except swe.Error:
            return ''

    def library_path(self) -> str:
        return str(swe.get_library_path())

    def version(self) -> str:
        return str(swe.version)
