"""Shared fixtures: a deterministic in-memory ephemeris oracle."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
import pytest

from sweph_json.constants import AST_OFFSET, ERR
from sweph_json.oracle.base import RawCalc


class FakeOracle:
    """EphemerisOracle with fixed, body-dependent results and scripted failures.

    Parameters:
        failing: Body ids (asteroids as AST_OFFSET + n) whose calculations fail.
        names: Display names by body id; unnamed majors get ``Body<n>``,
            unnamed asteroids ``?``.
        house_status: When set, the houses call fails with this status.
    """

    def __init__(
        self,
        *,
        failing: Iterable[int] = (),
        names: dict[int, str] | None = None,
        house_status: int | None = None,
        ephe_path: str = 'eph',
    ) -> None:
        self.failing = set(failing)
        self.names = dict(names or {})
        self.house_status = house_status
        self._ephe_path = ephe_path
        self.calls: list[tuple[str, int]] = []

    @property
    def ephe_path(self) -> str:
        return self._ephe_path

    def julian_day(self, year: int, month: int, day: int, hour: float) -> float:
        return 2451544.5 + (year - 2000) * 365.25 + (month - 1) * 30.0 + (day - 1) + hour / 24.0

    def delta_t(self, jd_ut: float) -> float:
        return 0.00075

    def calc_ut(self, jd_ut: float, body: int, flags: int) -> RawCalc:
        self.calls.append(('calc_ut', body))
        if body in self.failing:
            return RawCalc(np.zeros(6), ERR, f'body {body} not available')
        longitude = (body * 17.25) % 360.0
        return RawCalc(np.array([longitude, 1.25, 1.5, 0.985, 0.0, 0.0]), flags, '')

    def nod_aps(self, jd_et: float, body: int, flags: int, method: int) -> RawCalc:
        self.calls.append(('nod_aps', body))
        if body in self.failing:
            return RawCalc(np.zeros((4, 6)), ERR, f'no nodes for body {body}')
        rows = [[(body * 10.0 + k * 90.0) % 360.0, 0.5, 1.0 + k, 0.1, 0.0, 0.0] for k in range(4)]
        return RawCalc(np.array(rows), flags, '')

    def houses(self, jd_ut: float, flags: int, lat: float, lon: float, hsys: str) -> RawCalc:
        self.calls.append(('houses', ord(hsys[:1] or ' ')))
        if self.house_status is not None:
            return RawCalc(np.zeros(14), self.house_status, 'house system failed')
        cusps = [(k * 30.0 + 10.0) % 360.0 for k in range(12)]
        return RawCalc(np.array(cusps + [10.0, 280.5]), flags, '')

    def body_name(self, body: int) -> str:
        if body in self.names:
            return self.names[body]
        if body > AST_OFFSET:
            return '?'
        return f'Body{body}'

    def library_path(self) -> str:
        return '/opt/swisseph/libswe.so'

    def version(self) -> str:
        return '2.10.03'


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()
