"""
Propagation Collaborators

Wraps the sgp4 library behind the three calls the orbit search needs:

- build a propagator record from a TLE pair
- compute time variables (minutes since epoch, Greenwich mean sidereal time)
  for a reference time
- propagate the record to an inertial (TEME) position

plus the inertial-to-geodetic transform that turns that position into
latitude, longitude and altitude.

A failed propagation is reported through the returned position containing
non-finite values, never by raising.
"""

import math
import logging
from datetime import datetime, timezone
from typing import NamedTuple, Tuple

import numpy as np
from sgp4.api import Satrec, jday
from sgp4.propagation import gstime

from .constants import MINUTES_PER_DAY, WGS84_A_KM, WGS84_F

logger = logging.getLogger(__name__)


# SGP4 error code meanings
SGP4_ERROR_CODES = {
    0: "No error",
    1: "Mean eccentricity < 0.0 or > 1.0",
    2: "Mean motion < 0.0",
    3: "Perturbed eccentricity < 0.0 or > 1.0",
    4: "Semi-latus rectum < 0.0",
    5: "Satellite has decayed",
    6: "Satellite has decayed (low altitude)",
}

NAN_POSITION = np.array([math.nan, math.nan, math.nan])


class GeodeticSample(NamedTuple):
    """Ground-referenced position of one propagation."""

    latitude: float
    longitude: float
    altitude: float


class SGP4Propagator:
    """
    Default propagator backed by sgp4.api.Satrec.

    Stateless: one instance can serve any number of searches.
    """

    def create_record(self, line1: str, line2: str) -> Satrec:
        """Build a Satrec from a TLE pair."""
        return Satrec.twoline2rv(line1, line2)

    def time_variables(self, when: datetime, record: Satrec) -> Tuple[float, float]:
        """
        Compute time variables for a reference time.

        Args:
            when: Reference time (naive values are taken as UTC)
            record: Satrec built by create_record

        Returns:
            Tuple of (minutes since TLE epoch, GMST in radians)
        """
        jd, fr = datetime_to_jd_fr(when)
        minutes = ((jd - record.jdsatepoch) + (fr - record.jdsatepochF)) * MINUTES_PER_DAY
        gmst = gstime(jd + fr)
        return minutes, gmst

    def propagate(self, record: Satrec, minutes: float) -> np.ndarray:
        """
        Propagate to a number of minutes since epoch.

        Returns:
            TEME position (km); all NaN when SGP4 reports an error
        """
        error, position, _ = record.sgp4(
            record.jdsatepoch, record.jdsatepochF + minutes / MINUTES_PER_DAY
        )
        if error != 0:
            logger.debug(
                f"SGP4 error {error} ({SGP4_ERROR_CODES.get(error, 'Unknown error')}) "
                f"for satellite {record.satnum} at t={minutes:.3f} min"
            )
            return NAN_POSITION.copy()
        return np.array(position, dtype=float)


def datetime_to_jd_fr(dt: datetime) -> Tuple[float, float]:
    """
    Convert datetime to Julian date and fraction.

    Args:
        dt: Datetime object; naive values are taken as UTC

    Returns:
        Tuple of (julian_day, fraction)
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    second = dt.second + dt.microsecond / 1e6
    return jday(dt.year, dt.month, dt.day, dt.hour, dt.minute, second)


def eci_to_geodetic(position: np.ndarray, gmst: float) -> GeodeticSample:
    """
    Convert an inertial position to geodetic latitude, longitude and altitude.

    Longitude is the inertial right ascension less the sidereal angle,
    wrapped into [-180, 180). Latitude is solved iteratively on the WGS-84
    ellipsoid.

    Args:
        position: Inertial position vector [x, y, z] (km)
        gmst: Greenwich mean sidereal time (radians)

    Returns:
        GeodeticSample with latitude and longitude in degrees, altitude in km
    """
    x, y, z = (float(c) for c in position)

    a = WGS84_A_KM
    e2 = WGS84_F * (2.0 - WGS84_F)

    lon = (math.atan2(y, x) - gmst) % (2.0 * math.pi)
    if lon >= math.pi:
        lon -= 2.0 * math.pi

    p = math.sqrt(x * x + y * y)
    lat = math.atan2(z, p)

    # Usually converges in a handful of iterations
    for _ in range(20):
        c = 1.0 / math.sqrt(1.0 - e2 * math.sin(lat) ** 2)
        new_lat = math.atan2(z + a * c * e2 * math.sin(lat), p)
        if abs(new_lat - lat) < 1e-12:
            lat = new_lat
            break
        lat = new_lat

    c = 1.0 / math.sqrt(1.0 - e2 * math.sin(lat) ** 2)
    if abs(math.cos(lat)) > 1e-10:
        alt = p / math.cos(lat) - a * c
    else:
        alt = abs(z) - a * (1.0 - e2) * c

    return GeodeticSample(math.degrees(lat), math.degrees(lon), alt)
