"""Bounded JSON reports over the Swiss Ephemeris engine.

This package turns Swiss Ephemeris calculations into JSON text documents:
- Charts: planet positions, the Asc/MC pair and the 12 house cusps
- Nodes and apsides of the major planets
- Numbered asteroids by range or explicit list, with a batch summary

Every document is written into a fixed-capacity buffer and stays well-formed
when the buffer runs out; long batches end with a truncation notice.
"""

from sweph_json.api import (
    AsteroidRequest,
    CalculationParams,
    calculate,
    degrees_to_dms,
    free_memory,
    get_asteroids,
    get_chart,
    get_ephemeris_info,
    get_houses,
    get_julian_day,
    get_planet,
    get_planetary_nodes,
    get_planets,
    get_single_planet_nodes,
    get_specific_asteroids,
)

__all__: list[str] = [
    'AsteroidRequest',
    'CalculationParams',
    'calculate',
    'degrees_to_dms',
    'free_memory',
    'get_asteroids',
    'get_chart',
    'get_ephemeris_info',
    'get_houses',
    'get_julian_day',
    'get_planet',
    'get_planetary_nodes',
    'get_planets',
    'get_single_planet_nodes',
    'get_specific_asteroids',
]
