"""
Search Constants

Tolerances, sweep bounds and skip-ahead magnitudes used by the orbit search,
plus the WGS-84 ellipsoid used for the geodetic transform.

Angles are swept as integer counters: mean anomaly and argument of perigee
in tenths of a degree, RAAN in hundredths of a degree.
"""

# Success tolerances
MAX_LAT_ERROR_DEG: float = 0.1
MAX_LON_ERROR_DEG: float = 0.1
MAX_ALT_ERROR_KM: float = 30.0

# Beyond these the sweep takes a larger step
FAR_LAT_DEG: float = 11.0
FAR_LON_DEG: float = 11.0
FAR_ALT_KM: float = 100.0

# Mean anomaly sweep (tenths of a degree)
MEAN_ANOMALY_SCALE: int = 10
MEAN_ANOMALY_STEPS: int = 520 * MEAN_ANOMALY_SCALE
MEAN_ANOMALY_WRONG_DIRECTION_SKIP: int = 20
MEAN_ANOMALY_FAR_SKIP: int = 100

# Argument of perigee sweep (tenths of a degree)
ARG_PERIGEE_SCALE: int = 10
ARG_PERIGEE_STEPS: int = 360 * ARG_PERIGEE_SCALE
ARG_PERIGEE_START_OFFSET: int = -100
ARG_PERIGEE_FAR_SKIP: int = 49
ARG_PERIGEE_WRONG_DIRECTION_SKIP: int = 20
ARG_PERIGEE_MEAN_ANOMALY_FAR_SKIP: int = 100

# RAAN sweep (hundredths of a degree)
RAAN_SCALE: int = 100
RAAN_STEPS: int = 520 * RAAN_SCALE
RAAN_FAR_SKIP: int = 10 * RAAN_SCALE

# WGS-84 ellipsoid
WGS84_A_KM: float = 6378.137
WGS84_F: float = 1.0 / 298.257223563

MINUTES_PER_DAY: float = 1440.0
