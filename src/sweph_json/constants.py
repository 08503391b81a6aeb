"""Fixed constants: Swiss Ephemeris body ids and flag bits, buffer sizes, limits.

Numeric values match swephexp.h so that ids and flags pass through the oracle
boundary unchanged.
"""

# Body ids (swephexp.h SE_*)
SUN = 0
MOON = 1
MERCURY = 2
VENUS = 3
MARS = 4
JUPITER = 5
SATURN = 6
URANUS = 7
NEPTUNE = 8
PLUTO = 9
MEAN_NODE = 10
TRUE_NODE = 11
MEAN_APOG = 12
OSCU_APOG = 13
EARTH = 14
CHIRON = 15
PHOLUS = 16
CERES = 17
PALLAS = 18
JUNO = 19
VESTA = 20
INTP_APOG = 21
INTP_PERG = 22
NPLANETS = 23
AST_OFFSET = 10000

# Calculation flags (SEFLG_*) and return codes
FLG_SWIEPH = 2
FLG_MOSEPH = 4
FLG_SPEED = 256
FLG_EQUATORIAL = 2048
CALC_FLAGS = FLG_SWIEPH | FLG_SPEED
OK = 0
ERR = -1
GREG_CAL = 1

# Node/apsides methods (SE_NODBIT_*)
NODBIT_MEAN = 1
NODBIT_OSCU = 2
NODBIT_OSCU_BAR = 4
NODBIT_FOPOINT = 256

# Zodiac sign abbreviations, 30 degrees each starting at 0 Aries
ZODIAC_SIGNS = ('ar', 'ta', 'ge', 'cn', 'le', 'vi', 'li', 'sc', 'sa', 'cp', 'aq', 'pi')
DEGREES_PER_SIGN = 30.0
DEGREES_PER_CIRCLE = 360.0
ARCMIN_PER_DEGREE = 60.0
ARCSEC_PER_DEGREE = 3600.0
DEGREE_SYMBOL = '°'
HOUR_SYMBOL = 'h'

# Output capacities in bytes
CHART_BUFFER_SIZE = 100000
PLANETS_BUFFER_SIZE = 50000
HOUSES_BUFFER_SIZE = 10000
NODES_BUFFER_SIZE = 50000
ASTEROIDS_BUFFER_SIZE = 100000
SINGLE_BUFFER_SIZE = 1000
JULIAN_DAY_BUFFER_SIZE = 500
MIN_BATCH_CAPACITY = 2 * SINGLE_BUFFER_SIZE

# Smallest truncation margin; the effective margin also covers the largest record
BASE_TRUNCATION_MARGIN = 1000

# Escaped free-text field capacities (bytes, terminator slot included)
NAME_FIELD_SIZE = 100
ERROR_FIELD_SIZE = 500
ECHO_FIELD_SIZE = 500

# Asteroid batch limits
MAX_ASTEROID_NUMBER = 1000
MAX_ASTEROID_LIST = 1000

# House cusps
NUM_HOUSES = 12
DEFAULT_HOUSE_SYSTEM = 'P'
HOUSE_SYSTEMS = 'ABCDEFGHIKLMNOPQRSTUVWXYi'

# Supported calendar range of the compressed data files
MIN_SUPPORTED_YEAR = 600
MAX_SUPPORTED_YEAR = 2400
MIN_ASTEROID_YEAR = 1504
SUPPORTED_DATE_RANGE = ('0600-01-01', '2400-01-01')

DEFAULT_EPHE_PATH = 'eph'
