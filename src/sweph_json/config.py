"""Configuration: ephemeris data path and log level from environment."""

import logging
import os

from sweph_json.constants import DEFAULT_EPHE_PATH

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def get_ephe_path() -> str:
    """Return the ephemeris data-file directory (SWE_EPHE_PATH env var or default).

    Returns:
        Path string handed to the engine's search-path setter.
    """
    path = os.environ.get('SWE_EPHE_PATH', '').strip()
    return path or DEFAULT_EPHE_PATH


def get_log_level(default: int = logging.WARNING) -> int:
    """Return the logging level from SWEPH_JSON_LOG, or default when unset/invalid.

    Parameters:
        default: Level used when the variable is missing or not a level name.

    Returns:
        Integer logging level.
    """
    name = os.environ.get('SWEPH_JSON_LOG', '').strip().upper()
    if name in _LOG_LEVELS:
        return int(getattr(logging, name))
    return default
