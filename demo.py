"""
Orbit Finder Demonstration

This script rotates the ISS orbit so that its ground track passes through a
chosen point at a chosen time, then re-propagates the modified TLE to show
where the satellite actually ends up.

Usage:
    python demo.py [--lat LAT] [--lon LON] [--direction N|S] [--alt KM]
                   [--raan-offset DEG] [--time ISO8601] [--verbose]

Arguments:
    --lat, --lon: Target ground point (degrees)
    --direction: N for an ascending pass, S for a descending pass
    --alt: Optional target altitude (km); enables the argument of perigee search
    --raan-offset: Degrees added to the RAAN that hits the target longitude
    --time: Reference time (ISO 8601, default near the TLE epoch)
    --verbose: Enable debug logging
"""

import argparse
import logging
from datetime import datetime, timezone

from config import DEFAULT_REFERENCE_TIME, FALLBACK_ISS_TLE
from logging_config import configure_logging, get_logger
from orbit_finder import SearchTarget, OrbitFinder, RotationResult
from orbit_finder.classifier import propagate_sample
from orbit_finder.propagation import SGP4Propagator
from orbit_finder.tle_fields import parse_tle_fields

logger = get_logger(__name__)


def demonstrate_tle_parsing(line1: str, line2: str, name: str) -> None:
    """
    Show the fields the orbit search works on.

    Parameters
    ----------
    line1 : str
        TLE line 1
    line2 : str
        TLE line 2
    name : str
        Satellite name
    """
    logger.info(f"Parsing TLE for {name}")
    logger.debug(f"Line 1: {line1}")
    logger.debug(f"Line 2: {line2}")

    elements = parse_tle_fields(line1, line2)

    logger.info(f"Catalog number: {elements.catalog_number}")
    logger.info(f"Inclination: {elements.inclination:.4f} degrees")
    logger.info(f"RAAN: {elements.raan:.4f} degrees")
    logger.info(f"Eccentricity: {elements.eccentricity:.7f}")
    logger.info(f"Argument of Perigee: {elements.arg_perigee:.4f} degrees")
    logger.info(f"Mean Anomaly: {elements.mean_anomaly:.4f} degrees")
    logger.info(f"Mean Motion: {elements.mean_motion.strip()} rev/day")


def demonstrate_rotation(line1: str, line2: str, target: SearchTarget) -> RotationResult:
    """
    Rotate the orbit and report the re-propagated ground point.

    Parameters
    ----------
    line1 : str
        TLE line 1
    line2 : str
        TLE line 2
    target : SearchTarget
        Ground point, direction and reference time

    Returns
    -------
    RotationResult
        Result of the rotation
    """
    logger.info(
        f"Target: lat={target.latitude} lon={target.longitude} "
        f"direction={target.direction} alt={target.altitude} "
        f"raan_offset={target.raan_offset} at {target.when.isoformat()}"
    )

    result = OrbitFinder(line1, line2, target).rotate_orbit_to_lat_lon()
    if not result.success:
        logger.error(f"{result.message} ({result.phase_outcome.value})")
        return result

    logger.info(f"New line 1: {result.line1}")
    logger.info(f"New line 2: {result.line2}")
    logger.info(f"Propagations: {result.samples}")

    sample = propagate_sample(
        parse_tle_fields(result.line1, result.line2), target.when, SGP4Propagator()
    )
    if sample is not None:
        logger.info(
            f"Re-propagated: lat={sample.latitude:.3f} lon={sample.longitude:.3f} "
            f"alt={sample.altitude:.1f} km"
        )

    return result


def parse_time(value: str) -> datetime:
    """Parse an ISO 8601 time, treating naive values as UTC."""
    when = datetime.fromisoformat(value)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when


def main() -> None:
    """Main demonstration entry point."""
    parser = argparse.ArgumentParser(description="Orbit Finder Demonstration")
    parser.add_argument("--lat", type=float, default=0.0, help="Target latitude (degrees)")
    parser.add_argument("--lon", type=float, default=0.0, help="Target longitude (degrees)")
    parser.add_argument("--direction", choices=["N", "S"], default="N", help="Direction of motion")
    parser.add_argument("--alt", type=float, default=None, help="Target altitude (km)")
    parser.add_argument("--raan-offset", type=float, default=0.0, help="RAAN offset (degrees)")
    parser.add_argument("--time", type=parse_time, default=DEFAULT_REFERENCE_TIME, help="Reference time (ISO 8601)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    logger.info("Orbit Finder Demonstration")
    logger.info("=" * 60)

    line1 = FALLBACK_ISS_TLE["line1"]
    line2 = FALLBACK_ISS_TLE["line2"]

    demonstrate_tle_parsing(line1, line2, FALLBACK_ISS_TLE["name"])

    try:
        target = SearchTarget(
            latitude=args.lat,
            longitude=args.lon,
            direction=args.direction,
            when=args.time,
            altitude=args.alt,
            raan_offset=args.raan_offset,
        )
    except ValueError as e:
        parser.error(str(e))

    logger.info("")
    demonstrate_rotation(line1, line2, target)

    logger.info("=" * 60)
    logger.info("Demonstration complete")


if __name__ == "__main__":
    main()
