"""
Orbit Finder

Rotates a satellite's orbit so that its ground track passes through a chosen
point at a chosen time. Given a TLE, a target latitude/longitude (and
optionally altitude), the direction of motion and a reference time, the
search adjusts, in order:

1. mean anomaly, to reach the target latitude going the right way
2. argument of perigee, to reach the target altitude (only if one is given)
3. RAAN, to reach the target longitude

and returns the modified TLE. Inclination, eccentricity, epoch, mean motion
and drag terms are carried through unchanged.

Example:
    >>> finder = OrbitFinder(line1, line2, SearchTarget(0.0, 0.0, "N", when))
    >>> result = finder.rotate_orbit_to_lat_lon()
    >>> if result.success:
    ...     print(result.line1)
    ...     print(result.line2)
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from .classifier import SearchState, SearchTarget
from .propagation import SGP4Propagator
from .search import (
    PhaseOutcome,
    PhaseResult,
    search_argument_of_perigee,
    search_mean_anomaly,
    search_raan,
)
from .tle_fields import OrbitalElementSet, parse_tle_fields

logger = logging.getLogger(__name__)


class SearchPhase(Enum):
    """Search phases, valued by their display names"""

    MEAN_ANOMALY = "Mean Anomaly"
    ARG_PERIGEE = "Argument of Perigee"
    RAAN = "Right Ascension of Ascending Node"


@dataclass(frozen=True)
class RotationResult:
    """
    Outcome of an orbit rotation.

    Attributes:
        success: True if every phase converged
        line1: Modified TLE line 1 (None on failure)
        line2: Modified TLE line 2 (None on failure)
        failed_phase: Phase that failed (None on success)
        phase_outcome: How the failed phase ended, ERROR or EXHAUSTED
        samples: Total number of propagations performed
    """

    success: bool
    line1: Optional[str] = None
    line2: Optional[str] = None
    failed_phase: Optional[SearchPhase] = None
    phase_outcome: Optional[PhaseOutcome] = None
    samples: int = 0

    @property
    def message(self) -> str:
        if self.success:
            return "OK"
        return f"Failed to find a solution for {self.failed_phase.value}"

    def as_pair(self) -> Tuple[str, str]:
        """Return (line1, line2), or ("Error", message) on failure."""
        if self.success:
            return self.line1, self.line2
        return "Error", self.message


class OrbitFinder:
    """
    One orbit rotation request.

    Each instance owns its element set and search state, so separate
    instances can run in parallel without coordination.
    """

    def __init__(
        self,
        line1: str,
        line2: str,
        target: SearchTarget,
        propagator: Optional[SGP4Propagator] = None,
    ):
        """
        Initialize an orbit rotation request.

        Args:
            line1: First line of the satellite's TLE
            line2: Second line of the satellite's TLE
            target: Ground-track point, direction and reference time
            propagator: Propagator collaborator (default: SGP4Propagator)
        """
        self.line1 = line1
        self.line2 = line2
        self.target = target
        self.propagator = propagator or SGP4Propagator()

    def rotate_orbit_to_lat_lon(self) -> RotationResult:
        """
        Run the mean anomaly, argument of perigee and RAAN searches in turn.

        Returns:
            RotationResult with the modified TLE, or naming the phase that
            failed. Nothing from a failed phase is committed.
        """
        elements = parse_tle_fields(self.line1, self.line2)
        state = SearchState()
        samples = 0

        result = search_mean_anomaly(elements, self.target, state, self.propagator)
        samples += result.samples
        if not result.succeeded:
            return self._failure(SearchPhase.MEAN_ANOMALY, result, samples)
        elements, state = result.elements, result.state

        if self.target.has_altitude:
            result = search_argument_of_perigee(elements, self.target, state, self.propagator)
            samples += result.samples
            if not result.succeeded:
                return self._failure(SearchPhase.ARG_PERIGEE, result, samples)
            elements, state = result.elements, result.state

        result = search_raan(elements, self.target, state, self.propagator)
        samples += result.samples
        if not result.succeeded:
            return self._failure(SearchPhase.RAAN, result, samples)
        elements = result.elements

        line1, line2 = elements.to_lines()
        logger.info(
            f"Rotated orbit of {elements.catalog_number} to "
            f"({self.target.latitude}, {self.target.longitude}, {self.target.direction}) "
            f"in {samples} propagations"
        )
        return RotationResult(True, line1=line1, line2=line2, samples=samples)

    def _failure(self, phase: SearchPhase, result: PhaseResult, samples: int) -> RotationResult:
        logger.warning(
            f"{phase.value} search {result.outcome.value} after {result.samples} samples "
            f"for target ({self.target.latitude}, {self.target.longitude}, {self.target.direction})"
        )
        return RotationResult(
            False,
            failed_phase=phase,
            phase_outcome=result.outcome,
            samples=samples,
        )


def rotate_orbit_to_lat_lon(
    line1: str,
    line2: str,
    latitude: float,
    longitude: float,
    direction: str,
    when: datetime,
    altitude: Optional[float] = None,
    raan_offset: float = 0.0,
    propagator: Optional[SGP4Propagator] = None,
) -> RotationResult:
    """
    Rotate an orbit so its ground track passes a point at a given time.

    Args:
        line1: First line of TLE
        line2: Second line of TLE
        latitude: Target latitude (degrees)
        longitude: Target longitude (degrees)
        direction: "N" (ascending) or "S" (descending)
        when: Reference time
        altitude: Optional target altitude (km)
        raan_offset: Degrees added to the RAAN that hits the target longitude
        propagator: Propagator collaborator

    Returns:
        RotationResult

    Raises:
        ValueError: If the target is out of range
    """
    target = SearchTarget(
        latitude=latitude,
        longitude=longitude,
        direction=direction,
        when=when,
        altitude=altitude,
        raan_offset=raan_offset,
    )
    return OrbitFinder(line1, line2, target, propagator).rotate_orbit_to_lat_lon()
