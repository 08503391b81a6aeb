"""CLI entry point: sweph-json chart|planets|houses|planet|nodes|asteroids|... subcommands."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn, cast

from sweph_json import api
from sweph_json.angle_utils import DegreeFormat, parse_coordinate
from sweph_json.config import get_log_level
from sweph_json.constants import (
    ASTEROIDS_BUFFER_SIZE,
    CHART_BUFFER_SIZE,
    DEFAULT_HOUSE_SYSTEM,
    HOUSE_SYSTEMS,
    HOUSES_BUFFER_SIZE,
    NODBIT_FOPOINT,
    NODBIT_MEAN,
    NODBIT_OSCU,
    NODBIT_OSCU_BAR,
    NODES_BUFFER_SIZE,
    PLANETS_BUFFER_SIZE,
    SINGLE_BUFFER_SIZE,
)
from sweph_json.models import Moment
from sweph_json.time_utils import parse_date, parse_time

logger = logging.getLogger(__name__)

_NODE_METHODS = {
    'mean': NODBIT_MEAN,
    'osculating': NODBIT_OSCU,
    'barycentric': NODBIT_OSCU | NODBIT_OSCU_BAR,
    'focal': NODBIT_OSCU | NODBIT_FOPOINT,
}


def _configure_logging(verbose: bool = False) -> None:
    """Configure logging for CLI (stderr, level from --verbose or SWEPH_JSON_LOG)."""
    level = get_log_level(logging.DEBUG if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(name)s: %(message)s',
        stream=sys.stderr,
    )


def parse_house_system(value: str) -> str:
    """Parse a house system selector: one letter from HOUSE_SYSTEMS.

    Parameters:
        value: Selector such as 'P' (Placidus) or 'K' (Koch); lower case is
            accepted except for 'i', which is its own system.

    Returns:
        The selector letter.

    Raises:
        ValueError: If value is not a single known selector.
    """
    v = value.strip()
    if len(v) != 1:
        raise ValueError(f'house system must be a single letter, got {value!r}')
    if v in HOUSE_SYSTEMS:
        return v
    if v.upper() in HOUSE_SYSTEMS:
        return v.upper()
    raise ValueError(f'Unknown house system {value!r}; use one of {HOUSE_SYSTEMS}')


def parse_node_method(value: str) -> int:
    """Parse a node method: a name (mean, osculating, barycentric, focal) or its bits.

    Raises:
        ValueError: If value is neither a known name nor a non-negative integer.
    """
    v = value.strip().lower()
    if v in _NODE_METHODS:
        return _NODE_METHODS[v]
    try:
        num = int(v)
    except ValueError:
        num = -1
    if num < 0:
        names = ', '.join(_NODE_METHODS)
        raise ValueError(f'Unknown node method {value!r}; use an integer or one of {names}')
    return num


def _when(args: argparse.Namespace) -> tuple[int, int, int, int, int, int]:
    return (*args.date, *args.time)


def _where(args: argparse.Namespace) -> tuple[int, int, int, str, int, int, int, str]:
    return (*args.lon, *args.lat)


def _emit(text: str) -> int:
    print(text)
    return 0


def _chart_cmd(args: argparse.Namespace) -> int:
    """Full chart document (chart subcommand)."""
    oracle = api.default_oracle(args.ephe_path)
    return _emit(
        api.get_chart(
            *_when(args), *_where(args), args.house_system, args.buffer_size, oracle=oracle
        )
    )


def _planets_cmd(args: argparse.Namespace) -> int:
    oracle = api.default_oracle(args.ephe_path)
    return _emit(api.get_planets(*_when(args), args.buffer_size, oracle=oracle))


def _houses_cmd(args: argparse.Namespace) -> int:
    oracle = api.default_oracle(args.ephe_path)
    return _emit(
        api.get_houses(
            *_when(args), *_where(args), args.house_system, args.buffer_size, oracle=oracle
        )
    )


def _planet_cmd(args: argparse.Namespace) -> int:
    oracle = api.default_oracle(args.ephe_path)
    return _emit(api.get_planet(args.body, *_when(args), oracle=oracle))


def _nodes_cmd(args: argparse.Namespace) -> int:
    """Nodes/apsides batch, or one body with --body (nodes subcommand)."""
    oracle = api.default_oracle(args.ephe_path)
    if args.body is not None:
        moment = Moment.derive(oracle, *_when(args), with_et=True)
        return _emit(
            api.get_single_planet_nodes(args.body, moment.jd_et, args.method, oracle=oracle)
        )
    return _emit(
        api.get_planetary_nodes(
            *_when(args),
            args.method,
            args.buffer_size,
            include_sun=not args.no_sun,
            oracle=oracle,
        )
    )


def _asteroids_cmd(args: argparse.Namespace) -> int:
    """Asteroid batch by --start/--end range or --list (asteroids subcommand)."""
    if args.list is None and (args.start is None or args.end is None):
        print('Error: give --start and --end, or --list', file=sys.stderr)
        return 1
    oracle = api.default_oracle(args.ephe_path)
    if args.list is not None:
        return _emit(
            api.get_specific_asteroids(*_when(args), args.list, args.buffer_size, oracle=oracle)
        )
    return _emit(
        api.get_asteroids(*_when(args), args.start, args.end, args.buffer_size, oracle=oracle)
    )


def _julian_day_cmd(args: argparse.Namespace) -> int:
    oracle = api.default_oracle(args.ephe_path)
    return _emit(api.get_julian_day(*_when(args), oracle=oracle))


def _dms_cmd(args: argparse.Namespace) -> int:
    """Format one angle (dms subcommand); no engine needed."""
    flags = DegreeFormat.NONE
    if args.zodiac:
        flags |= DegreeFormat.ZODIAC
    if args.round == 'sec':
        flags |= DegreeFormat.ROUND_SEC
    elif args.round == 'min':
        flags |= DegreeFormat.ROUND_MIN
    if args.hours:
        flags |= DegreeFormat.HOURS
    return _emit(api.degrees_to_dms(args.value, flags))


def _info_cmd(args: argparse.Namespace) -> int:
    oracle = api.default_oracle(args.ephe_path)
    return _emit(api.get_ephemeris_info(args.buffer_size, oracle=oracle))


def _add_common(sub: argparse.ArgumentParser, *, when: bool = True) -> None:
    if when:
        sub.add_argument('--date', type=parse_date, required=True, help='UT date YYYY-MM-DD')
        sub.add_argument(
            '--time', type=parse_time, default=(0, 0, 0), help='UT time HH:MM[:SS] (default 00:00)'
        )
    sub.add_argument(
        '--ephe-path', type=str, default=None, help='Ephemeris data directory; env: SWE_EPHE_PATH'
    )
    sub.add_argument('-v', '--verbose', action='store_true', help='Show DEBUG logs')


def _add_location(sub: argparse.ArgumentParser) -> None:
    sub.add_argument(
        '--lon', type=parse_coordinate, required=True, help='Longitude, e.g. 9°9\'34"E'
    )
    sub.add_argument(
        '--lat', type=parse_coordinate, required=True, help='Latitude, e.g. 45°28\'0"N'
    )
    sub.add_argument(
        '--house-system',
        type=parse_house_system,
        default=DEFAULT_HOUSE_SYSTEM,
        help=f'House system letter (default {DEFAULT_HOUSE_SYSTEM}, Placidus)',
    )


def main() -> int:
    """Entry point for sweph-json CLI.

    Returns:
        Exit code 0 on success, 1 on failure.
    """
    parser = argparse.ArgumentParser(
        prog='sweph-json',
        description='Swiss Ephemeris charts, nodes and asteroids as JSON documents.',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    chart_parser = subparsers.add_parser('chart', help='Planets, Asc/MC and house cusps')
    _add_common(chart_parser)
    _add_location(chart_parser)
    chart_parser.add_argument('--buffer-size', type=int, default=CHART_BUFFER_SIZE)
    chart_parser.set_defaults(func=_chart_cmd)

    planets_parser = subparsers.add_parser('planets', help='Planet positions')
    _add_common(planets_parser)
    planets_parser.add_argument('--buffer-size', type=int, default=PLANETS_BUFFER_SIZE)
    planets_parser.set_defaults(func=_planets_cmd)

    houses_parser = subparsers.add_parser('houses', help='Asc/MC and house cusps')
    _add_common(houses_parser)
    _add_location(houses_parser)
    houses_parser.add_argument('--buffer-size', type=int, default=HOUSES_BUFFER_SIZE)
    houses_parser.set_defaults(func=_houses_cmd)

    planet_parser = subparsers.add_parser('planet', help='One body position')
    _add_common(planet_parser)
    planet_parser.add_argument(
        '--body', type=int, required=True, help='Body id (0=Sun, 1=Moon, ...)'
    )
    planet_parser.set_defaults(func=_planet_cmd)

    nodes_parser = subparsers.add_parser('nodes', help='Nodes and apsides')
    _add_common(nodes_parser)
    nodes_parser.add_argument(
        '--method',
        type=parse_node_method,
        default=NODBIT_MEAN,
        help='mean, osculating, barycentric, focal or method bits',
    )
    nodes_parser.add_argument('--body', type=int, default=None, help='Single body id')
    nodes_parser.add_argument(
        '--no-sun', action='store_true', help='Leave the Sun out of the batch'
    )
    nodes_parser.add_argument('--buffer-size', type=int, default=NODES_BUFFER_SIZE)
    nodes_parser.set_defaults(func=_nodes_cmd)

    ast_parser = subparsers.add_parser('asteroids', help='Numbered asteroids')
    _add_common(ast_parser)
    ast_parser.add_argument('--start', type=int, default=None, help='First asteroid number')
    ast_parser.add_argument('--end', type=int, default=None, help='Last asteroid number')
    ast_parser.add_argument('--list', type=str, default=None, help='Comma-separated numbers')
    ast_parser.add_argument('--buffer-size', type=int, default=ASTEROIDS_BUFFER_SIZE)
    ast_parser.set_defaults(func=_asteroids_cmd)

    jd_parser = subparsers.add_parser('julian-day', help='Julian Day of a UT date')
    _add_common(jd_parser)
    jd_parser.set_defaults(func=_julian_day_cmd)

    dms_parser = subparsers.add_parser('dms', help='Format decimal degrees')
    dms_parser.add_argument('value', type=float, help='Decimal degrees')
    dms_parser.add_argument('--zodiac', action='store_true', help='Show within the zodiac sign')
    dms_parser.add_argument('--round', choices=['sec', 'min'], default=None)
    dms_parser.add_argument(
        '--hours', action='store_true', help="Use 'h' instead of the degree sign"
    )
    dms_parser.add_argument('-v', '--verbose', action='store_true', help='Show DEBUG logs')
    dms_parser.set_defaults(func=_dms_cmd)

    info_parser = subparsers.add_parser('info', help='Ephemeris data and engine information')
    _add_common(info_parser, when=False)
    info_parser.add_argument('--buffer-size', type=int, default=SINGLE_BUFFER_SIZE)
    info_parser.set_defaults(func=_info_cmd)

    args = parser.parse_args()
    _configure_logging(verbose=args.verbose)
    try:
        return cast(int, args.func(args))
    except (ValueError, RuntimeError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1


def cli_main() -> NoReturn:
    """Entry point for console_scripts; calls main() and exits with its return code."""
    sys.exit(main())


if __name__ == '__main__':
    sys.exit(main())
