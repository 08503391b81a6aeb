"""Tests for the public document entry points over a fake oracle."""

from __future__ import annotations

import json
import logging

import pytest
from conftest import FakeOracle

from sweph_json import api
from sweph_json.constants import AST_OFFSET, ERR, MIN_BATCH_CAPACITY, NODBIT_OSCU
from sweph_json.writer import BoundedWriter

MILAN = (9, 11, 0, 'E', 45, 28, 0, 'N')


def test_get_chart_document(oracle: FakeOracle) -> None:
    """Chart: initDate, 22 planets without Earth, Asc/MC and 12 cusps."""
    doc = json.loads(api.get_chart(2000, 1, 1, 12, 0, 0, *MILAN, 'P', oracle=oracle))
    assert doc['initDate'] == {
        'year': 2000,
        'month': 1,
        'day': 1,
        'hour': 12,
        'minute': 0,
        'second': 0,
        'jd_ut': 2451545.0,
    }
    assert [p['index'] for p in doc['planets']] == [p for p in range(23) if p != 14]
    assert [a['name'] for a in doc['ascmc']] == ['Asc', 'MC']
    assert [h['name'] for h in doc['houses']] == [str(n) for n in range(1, 13)]
    assert doc['houses'][0]['long'] == 10.0
    assert 'error' not in doc
    assert doc['summary'] == {'calculated': 22, 'errors': 0, 'total_requested': 22}


def test_get_chart_passes_signed_location(oracle: FakeOracle) -> None:
    """West/South locations reach the houses call negated."""
    seen: dict[str, float] = {}
    original = oracle.houses

    def _houses(jd_ut, flags, lat, lon, hsys):  # type: ignore[no-untyped-def]
        seen.update(lat=lat, lon=lon)
        return original(jd_ut, flags, lat, lon, hsys)

    oracle.houses = _houses  # type: ignore[method-assign]
    api.get_houses(2000, 1, 1, 0, 0, 0, 0, 30, 0, 'W', 33, 0, 0, 'S', 'K', oracle=oracle)
    assert seen == {'lat': -33.0, 'lon': pytest.approx(-0.5)}


def test_get_chart_planet_failure_is_per_item() -> None:
    """One failed body is an error record; the rest are unaffected."""
    doc = json.loads(api.get_chart(2000, 1, 1, 0, 0, 0, *MILAN, oracle=FakeOracle(failing=[15])))
    by_index = {p['index']: p for p in doc['planets']}
    assert by_index[15]['error'] is True
    assert by_index[15]['error_msg'] == 'body 15 not available'
    assert by_index[0]['error'] is False


def test_get_houses_failure_reports_error() -> None:
    """A failed houses call keeps the shape and adds the engine message."""
    failing = FakeOracle(house_status=ERR)
    doc = json.loads(api.get_houses(2000, 1, 1, 0, 0, 0, *MILAN, 'P', oracle=failing))
    assert len(doc['houses']) == 12
    assert len(doc['ascmc']) == 2
    assert doc['error'] is True
    assert doc['error_msg'] == 'house system failed'
    assert 'planets' not in doc


def test_get_planets_document(oracle: FakeOracle) -> None:
    """Planets document has no houses."""
    doc = json.loads(api.get_planets(2000, 1, 1, 0, 0, 0, oracle=oracle))
    assert len(doc['planets']) == 22
    assert set(doc) == {'initDate', 'planets', 'summary'}


def test_get_planetary_nodes_document(oracle: FakeOracle) -> None:
    """Nodes use ephemeris time and echo the method."""
    doc = json.loads(api.get_planetary_nodes(2000, 1, 1, 12, 0, 0, NODBIT_OSCU, oracle=oracle))
    assert doc['initDate']['jd_et'] == pytest.approx(2451545.00075, abs=1e-6)
    assert doc['method'] == NODBIT_OSCU
    assert [n['index'] for n in doc['nodes']] == list(range(10))
    assert doc['summary'] == {'calculated': 10, 'errors': 0, 'total_requested': 10}
    no_sun = json.loads(
        api.get_planetary_nodes(2000, 1, 1, 0, 0, 0, include_sun=False, oracle=oracle)
    )
    assert no_sun['nodes'][0]['index'] == 1


def test_get_single_planet_nodes(oracle: FakeOracle) -> None:
    """Single-body nodes record carries jd_et and method."""
    doc = json.loads(api.get_single_planet_nodes(5, 2451545.5, 4, oracle=oracle))
    assert doc['index'] == 5
    assert doc['jd_et'] == 2451545.5
    assert doc['method'] == 4
    assert doc['aphelion']['long'] == 320.0


def test_get_asteroids_range_summary(oracle: FakeOracle) -> None:
    """Range batch echoes the normalized range and reconciles the summary."""
    failing = FakeOracle(failing=[AST_OFFSET + 3])
    doc = json.loads(api.get_asteroids(2000, 1, 1, 0, 0, 0, 5, 1, oracle=failing))
    assert doc['asteroid_range'] == {'start': 1, 'end': 5}
    assert [a['index'] for a in doc['asteroids']] == [1, 2, 3, 4, 5]
    assert doc['asteroids'][0]['name'] == 'Asteroid_1'
    assert doc['summary'] == {'calculated': 4, 'errors': 1, 'total_requested': 5}


def test_get_asteroids_truncates_with_small_capacity(oracle: FakeOracle) -> None:
    """Range 1..100 in a small buffer: fewer processed, warning, full total_requested."""
    text = api.get_asteroids(2000, 1, 1, 0, 0, 0, 1, 100, 6000, oracle=oracle)
    doc = json.loads(text)
    summary = doc['summary']
    assert summary['total_requested'] == 100
    assert summary['calculated'] + summary['errors'] < 100
    assert 'warning' in doc['asteroids'][-1]
    assert len(text.encode('utf-8')) < 6000


def test_get_asteroids_tiny_capacity_is_clamped(
    oracle: FakeOracle, caplog: pytest.LogCaptureFixture
) -> None:
    """A capacity below the batch minimum still yields a valid document."""
    with caplog.at_level(logging.WARNING, logger='sweph_json.api'):
        text = api.get_asteroids(2000, 1, 1, 0, 0, 0, 1, 100, 50, oracle=oracle)
    doc = json.loads(text)
    assert doc['summary']['total_requested'] == 100
    assert len(text.encode('utf-8')) < MIN_BATCH_CAPACITY
    assert any('too small' in r.message for r in caplog.records)


def test_get_specific_asteroids(oracle: FakeOracle) -> None:
    """Explicit list drops bad tokens and echoes the request text."""
    doc = json.loads(api.get_specific_asteroids(2000, 1, 1, 0, 0, 0, '1,2,abc,-5,3', oracle=oracle))
    assert doc['requested_list'] == '1,2,abc,-5,3'
    assert [a['index'] for a in doc['asteroids']] == [1, 2, 3]
    assert doc['summary']['total_requested'] == 3


def test_get_specific_asteroids_empty_list(oracle: FakeOracle) -> None:
    """No usable numbers: empty list and zero counts."""
    doc = json.loads(api.get_specific_asteroids(2000, 1, 1, 0, 0, 0, 'x,y', oracle=oracle))
    assert doc['asteroids'] == []
    assert doc['summary'] == {'calculated': 0, 'errors': 0, 'total_requested': 0}


def test_asteroid_date_warning(oracle: FakeOracle, caplog: pytest.LogCaptureFixture) -> None:
    """Asteroid queries before 1504 are logged as warnings."""
    with caplog.at_level(logging.WARNING, logger='sweph_json.api'):
        api.get_asteroids(1400, 1, 1, 0, 0, 0, 1, 2, oracle=oracle)
    assert any('not available before 1504' in r.message for r in caplog.records)


def test_get_planet_and_julian_day(oracle: FakeOracle) -> None:
    """Single planet record includes jd_ut; julian-day document echoes the date."""
    planet = json.loads(api.get_planet(1, 2000, 1, 1, 12, 0, 0, oracle=oracle))
    assert planet['index'] == 1 and planet['jd_ut'] == 2451545.0
    jd = json.loads(api.get_julian_day(2000, 1, 1, 12, 0, 0, oracle=oracle))
    assert jd == {
        'year': 2000,
        'month': 1,
        'day': 1,
        'hour': 12,
        'minute': 0,
        'second': 0,
        'julian_day': 2451545.0,
    }


def test_get_ephemeris_info(oracle: FakeOracle) -> None:
    """Info document names the data path, engine and date range."""
    doc = json.loads(api.get_ephemeris_info(oracle=oracle))
    assert doc['ephemeris_path'] == 'eph'
    assert doc['version'] == '2.10.03'
    assert doc['date_range'] == {'start': '0600-01-01', 'end': '2400-01-01'}


def test_degrees_to_dms() -> None:
    """DMS entry formats like angle_utils.format_degrees."""
    assert api.degrees_to_dms(185.759, 4 | 1).startswith(' 5 li')


def test_free_memory_releases_caller_writer() -> None:
    """free_memory releases a writer the caller built and accepts None."""
    w = BoundedWriter(10)
    w.append('abc')
    api.free_memory(w)
    assert w.getvalue() == ''
    api.free_memory(None)


def test_calculate_combines_documents(oracle: FakeOracle) -> None:
    """calculate() adds nodes and asteroids documents to the chart."""
    params = api.CalculationParams(
        2000,
        1,
        1,
        12,
        0,
        0,
        *MILAN,
        calculate_nodes=True,
        node_method=NODBIT_OSCU,
        asteroids=api.AsteroidRequest('specific', id_list='1,4'),
    )
    result = api.calculate(params, oracle=oracle)
    assert len(result['planets']) == 22
    assert result['nodes']['method'] == NODBIT_OSCU
    assert [a['index'] for a in result['asteroids']['asteroids']] == [1, 4]

    params.asteroids = api.AsteroidRequest('specific')
    assert api.calculate(params, oracle=oracle)['asteroids']['error'] is True

    params.asteroids = api.AsteroidRequest('comets')
    with pytest.raises(ValueError, match='Unknown asteroid mode'):
        api.calculate(params, oracle=oracle)


def test_calculate_popular_selection(oracle: FakeOracle) -> None:
    """'popular' takes a selection sequence or text and runs the explicit-list batch."""
    params = api.CalculationParams(
        2000,
        1,
        1,
        12,
        0,
        0,
        *MILAN,
        asteroids=api.AsteroidRequest('popular', selection=[1, 2, 3, 4]),
    )
    doc = api.calculate(params, oracle=oracle)['asteroids']
    assert doc['requested_list'] == '1,2,3,4'
    assert [a['index'] for a in doc['asteroids']] == [1, 2, 3, 4]

    params.asteroids = api.AsteroidRequest('popular', selection='433, 7')
    assert api.calculate(params, oracle=oracle)['asteroids']['summary']['total_requested'] == 2

    params.asteroids = api.AsteroidRequest('popular', id_list='1,2')
    listed = api.calculate(params, oracle=oracle)['asteroids']['asteroids']
    assert [a['index'] for a in listed] == [1, 2]

    params.asteroids = api.AsteroidRequest('specific', selection=(5,))
    assert api.calculate(params, oracle=oracle)['asteroids']['requested_list'] == '5'

    params.asteroids = api.AsteroidRequest('popular')
    assert api.calculate(params, oracle=oracle)['asteroids']['error'] is True


def test_default_oracle_used_when_none(monkeypatch: pytest.MonkeyPatch, oracle: FakeOracle) -> None:
    """Entry points build the default oracle when none is given."""
    monkeypatch.setattr('sweph_json.api.default_oracle', lambda ephe_path=None: oracle)
    doc = json.loads(api.get_julian_day(2000, 1, 1, 0, 0, 0))
    assert doc['julian_day'] == 2451544.5


def test_get_planetary_nodes_truncated_summary(oracle: FakeOracle) -> None:
    """A truncated node batch ends with the notice and a summary of the full request."""
    doc = json.loads(api.get_planetary_nodes(2000, 1, 1, 0, 0, 0, buffer_size=2500, oracle=oracle))
    assert 'warning' in doc['nodes'][-1]
    summary = doc['summary']
    assert summary['total_requested'] == 10
    assert summary['calculated'] + summary['errors'] < 10


_BATCH_DOCUMENTS = {
    'chart': lambda size, o: api.get_chart(2000, 1, 1, 0, 0, 0, *MILAN, 'P', size, oracle=o),
    'planets': lambda size, o: api.get_planets(2000, 1, 1, 0, 0, 0, size, oracle=o),
    'houses': lambda size, o: api.get_houses(2000, 1, 1, 0, 0, 0, *MILAN, 'P', size, oracle=o),
    'nodes': lambda size, o: api.get_planetary_nodes(2000, 1, 1, 0, 0, 0, 1, size, oracle=o),
    'asteroids': lambda size, o: api.get_asteroids(2000, 1, 1, 0, 0, 0, 1, 50, size, oracle=o),
    'specific': lambda size, o: api.get_specific_asteroids(
        2000, 1, 1, 0, 0, 0, '1,2,3,4,5,6,7,8,9,10', size, oracle=o
    ),
}


@pytest.mark.parametrize('capacity', [0, 1, 1999, 2000, 2600, 4000])
@pytest.mark.parametrize('name', sorted(_BATCH_DOCUMENTS))
@pytest.mark.parametrize('failing', [False, True])
def test_batch_documents_well_formed_at_small_capacities(
    name: str, capacity: int, failing: bool
) -> None:
    """Every batch document parses and stays inside its capacity, even with failures."""
    bad = [*range(30), *(AST_OFFSET + n for n in range(1, 51))]
    oracle = FakeOracle(failing=bad, house_status=ERR) if failing else FakeOracle()
    text = _BATCH_DOCUMENTS[name](capacity, oracle)
    doc = json.loads(text)
    assert 'initDate' in doc
    assert len(text.encode('utf-8')) < max(capacity, MIN_BATCH_CAPACITY)
    if 'summary' in doc:
        summary = doc['summary']
        assert summary['calculated'] + summary['errors'] <= summary['total_requested']
