"""
Propagation Classifier

Propagates a candidate element set to the reference time and grades the
resulting ground point against the target along one search dimension:

- SUCCESS: within tolerance (0.1 deg latitude/longitude, 30 km altitude)
- FAR: more than 11 deg (latitude/longitude) or 100 km (altitude) away,
  the sweep should take a larger step
- NEAR: in between, the sweep keeps its small step
- ERROR: the propagation broke down (non-finite position)

For the latitude dimension the classifier also infers the direction of
motion by comparing against the previous latitude sample. That memory lives
in an explicit SearchState which is returned updated rather than mutated.
"""

import math
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .constants import (
    FAR_ALT_KM,
    FAR_LAT_DEG,
    FAR_LON_DEG,
    MAX_ALT_ERROR_KM,
    MAX_LAT_ERROR_DEG,
    MAX_LON_ERROR_DEG,
)
from .propagation import GeodeticSample, SGP4Propagator, eci_to_geodetic
from .tle_fields import OrbitalElementSet

logger = logging.getLogger(__name__)

DIRECTIONS = ("N", "S")


class PropagationOutcome(Enum):
    """Grade of a single candidate propagation"""

    NEAR = 0
    SUCCESS = 1
    ERROR = 2
    FAR = 3


class SearchDimension(Enum):
    """Which angle is being swept, and what it is matched against"""

    MEAN_ANOMALY = "latitude"
    RAAN = "longitude"
    ARG_PERIGEE = "altitude"


@dataclass(frozen=True)
class SearchTarget:
    """
    Ground-track point the orbit should pass through.

    Attributes:
        latitude: Target latitude (degrees, [-90, 90])
        longitude: Target longitude (degrees, [-180, 180])
        direction: "N" for ascending, "S" for descending
        when: Reference time
        altitude: Optional target altitude (km)
        raan_offset: Degrees added to the RAAN that hits the target longitude
    """

    latitude: float
    longitude: float
    direction: str
    when: datetime
    altitude: Optional[float] = None
    raan_offset: float = 0.0

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude must be in [-90, 90], got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude must be in [-180, 180], got {self.longitude}")
        if self.direction not in DIRECTIONS:
            raise ValueError(f"Direction must be 'N' or 'S', got {self.direction!r}")

    @property
    def has_altitude(self) -> bool:
        return self.altitude is not None


@dataclass(frozen=True)
class SearchState:
    """
    Memory carried between samples and between search phases.

    Attributes:
        last_latitude: Latitude of the previous latitude-dimension sample
        direction: Direction of motion inferred from the last two samples
        mean_anomaly_outcome: Result of the most recent mean anomaly sweep
    """

    last_latitude: Optional[float] = None
    direction: Optional[str] = None
    mean_anomaly_outcome: Optional[PropagationOutcome] = None

    def direction_matches(self, target: SearchTarget) -> bool:
        return self.direction == target.direction


def longitude_difference(lon: float, goal: float) -> float:
    """Signed difference lon - goal wrapped into [-180, 180)."""
    return (lon - goal + 180.0) % 360.0 - 180.0


def classify_sample(
    sample: GeodeticSample,
    dimension: SearchDimension,
    target: SearchTarget,
    state: SearchState,
) -> Tuple[PropagationOutcome, SearchState]:
    """
    Grade a propagated ground point.

    Args:
        sample: Propagated geodetic position
        dimension: Search dimension being swept
        target: Search target
        state: Current search state

    Returns:
        Tuple of (outcome, updated state)
    """
    if dimension is SearchDimension.MEAN_ANOMALY:
        lat = sample.latitude
        last = state.last_latitude if state.last_latitude is not None else lat

        # Not enough movement to tell a direction
        if lat == last:
            return PropagationOutcome.NEAR, replace(state, last_latitude=lat)

        direction = "N" if lat > last else "S"
        state = replace(state, last_latitude=lat, direction=direction)

        deviation = abs(lat - target.latitude)
        success_limit, far_limit = MAX_LAT_ERROR_DEG, FAR_LAT_DEG
    elif dimension is SearchDimension.RAAN:
        deviation = abs(longitude_difference(sample.longitude, target.longitude))
        success_limit, far_limit = MAX_LON_ERROR_DEG, FAR_LON_DEG
    else:
        if target.altitude is None:
            raise ValueError("Altitude search requires a target altitude")
        deviation = abs(sample.altitude - target.altitude)
        success_limit, far_limit = MAX_ALT_ERROR_KM, FAR_ALT_KM

    if deviation < success_limit:
        return PropagationOutcome.SUCCESS, state
    if not deviation < far_limit:
        return PropagationOutcome.FAR, state
    return PropagationOutcome.NEAR, state


def propagate_sample(
    elements: OrbitalElementSet,
    when: datetime,
    propagator: SGP4Propagator,
) -> Optional[GeodeticSample]:
    """
    Propagate an element set to the reference time.

    Returns:
        GeodeticSample, or None if the propagation broke down
    """
    line1, line2 = elements.to_lines()
    try:
        record = propagator.create_record(line1, line2)
    except ValueError as e:
        logger.warning(f"Propagator rejected derived TLE: {e}")
        return None

    minutes, gmst = propagator.time_variables(when, record)
    position = np.asarray(propagator.propagate(record, minutes), dtype=float)
    if not np.all(np.isfinite(position)):
        return None

    return eci_to_geodetic(position, gmst)


def classify_candidate(
    elements: OrbitalElementSet,
    dimension: SearchDimension,
    target: SearchTarget,
    state: SearchState,
    propagator: SGP4Propagator,
) -> Tuple[PropagationOutcome, SearchState]:
    """
    Propagate a candidate and grade it along one dimension.

    Non-finite propagation results are graded ERROR whatever the dimension.
    """
    sample = propagate_sample(elements, target.when, propagator)
    if sample is None:
        return PropagationOutcome.ERROR, state
    if not all(math.isfinite(v) for v in sample):
        return PropagationOutcome.ERROR, state
    return classify_sample(sample, dimension, target, state)
