"""
TLE Field Codec

Reads the fixed-column fields the orbit search needs from a Two-Line Element
set and writes updated fields back into correctly laid out lines.

Only the angles the search rotates (RAAN, argument of perigee, mean anomaly)
are re-rendered with new values. Everything else is carried through as the
exact text found in the input lines, so drag terms, epoch and mean motion are
never disturbed by float round-tripping.

Input lines are assumed to be well formed; no checksum or column count
validation is done on parse.
"""

import logging
from dataclasses import dataclass, replace
from typing import Tuple

logger = logging.getLogger(__name__)

ANGLE_WIDTH = 8
ECCENTRICITY_WIDTH = 7


@dataclass(frozen=True)
class OrbitalElementSet:
    """
    Working orbit derived from an input TLE.

    Attributes:
        catalog_number: NORAD catalog number, raw 5 characters
        classification: Security classification character
        intl_designator: International designator, raw 8 characters
        epoch_year: Two-digit epoch year, raw text
        epoch_day: Fractional epoch day of year, raw 12 characters
        line1_trailer: Line 1 from column 33 to the end, carried verbatim
        inclination: Inclination (degrees)
        raan: Right ascension of ascending node (degrees)
        eccentricity: Eccentricity (dimensionless)
        arg_perigee: Argument of perigee (degrees)
        mean_anomaly: Mean anomaly (degrees)
        mean_motion: Mean motion (rev/day), raw 11 characters
        rev_number: Revolution number at epoch, raw 5 characters
    """

    catalog_number: str
    classification: str
    intl_designator: str
    epoch_year: str
    epoch_day: str
    line1_trailer: str
    inclination: float
    raan: float
    eccentricity: float
    arg_perigee: float
    mean_anomaly: float
    mean_motion: str
    rev_number: str

    def with_angles(self, **angles: float) -> "OrbitalElementSet":
        """Return a copy with the given angle fields replaced."""
        for name in angles:
            if name not in ("raan", "arg_perigee", "mean_anomaly"):
                raise ValueError(f"Not a searchable angle: {name}")
        return replace(self, **angles)

    def to_lines(self) -> Tuple[str, str]:
        """Serialize to (line1, line2)."""
        return build_tle_lines(self)


def parse_tle_fields(line1: str, line2: str) -> OrbitalElementSet:
    """
    Extract the orbit search fields from a TLE pair.

    Args:
        line1: First line of TLE
        line2: Second line of TLE

    Returns:
        OrbitalElementSet holding the parsed fields
    """
    l1 = line1.rstrip().ljust(69)
    l2 = line2.rstrip().ljust(69)

    elements = OrbitalElementSet(
        catalog_number=l1[2:7],
        classification=l1[7],
        intl_designator=l1[9:17],
        epoch_year=l1[18:20],
        epoch_day=l1[20:32],
        line1_trailer=line1.rstrip()[32:],
        inclination=float(l2[8:16]),
        raan=float(l2[17:25]),
        eccentricity=float("0." + l2[26:33].strip()),
        arg_perigee=float(l2[34:42]),
        mean_anomaly=float(l2[43:51]),
        mean_motion=l2[52:63],
        rev_number=l2[63:68],
    )
    logger.debug(
        f"Parsed TLE {elements.catalog_number}: inc={elements.inclination} "
        f"raan={elements.raan} ecc={elements.eccentricity} "
        f"argp={elements.arg_perigee} ma={elements.mean_anomaly}"
    )
    return elements


def format_angle(degrees: float) -> str:
    """
    Render an angle as 4-decimal degrees, zero-left-padded to 8 characters.

    Raises:
        ValueError: If the value is negative or does not fit the column
    """
    if degrees < 0:
        raise ValueError(f"Angle must be non-negative, got {degrees}")
    text = f"{degrees:0{ANGLE_WIDTH}.4f}"
    if len(text) != ANGLE_WIDTH:
        raise ValueError(f"Angle {degrees} does not fit a {ANGLE_WIDTH}-column field")
    return text


def format_eccentricity(eccentricity: float) -> str:
    """Render eccentricity as a 7-digit fraction with the leading '0.' stripped."""
    if not 0.0 <= eccentricity < 1.0:
        raise ValueError(f"Eccentricity must be in [0, 1), got {eccentricity}")
    return f"{eccentricity:.7f}"[2:2 + ECCENTRICITY_WIDTH]


def compute_checksum(line: str) -> int:
    """Calculate TLE checksum."""
    checksum = 0
    for char in line[:68]:
        if char.isdigit():
            checksum += int(char)
        elif char == "-":
            checksum += 1
    return checksum % 10


def _check_width(name: str, value: str, width: int) -> str:
    if len(value) != width:
        raise ValueError(f"{name} must be {width} characters, got {value!r}")
    return value


def build_tle_lines(elements: OrbitalElementSet) -> Tuple[str, str]:
    """
    Reconstruct TLE lines from an element set.

    Line 1 is rebuilt from the carried fields and keeps the input trailer
    (and therefore its checksum). Line 2 is rebuilt with the current angles
    and gets a fresh checksum.

    Args:
        elements: Element set to serialize

    Returns:
        Tuple of (line1, line2) strings

    Raises:
        ValueError: If a field does not fit its column
    """
    catalog = _check_width("Catalog number", elements.catalog_number, 5)

    line1 = "1 " + catalog + elements.classification + " "
    line1 += _check_width("International designator", elements.intl_designator, 8) + " "
    line1 += _check_width("Epoch year", elements.epoch_year, 2)
    line1 += _check_width("Epoch day", elements.epoch_day, 12)
    line1 += elements.line1_trailer

    line2 = "2 " + catalog + " "
    line2 += format_angle(elements.inclination) + " "
    line2 += format_angle(elements.raan) + " "
    line2 += format_eccentricity(elements.eccentricity) + " "
    line2 += format_angle(elements.arg_perigee) + " "
    line2 += format_angle(elements.mean_anomaly) + " "
    line2 += _check_width("Mean motion", elements.mean_motion, 11)
    line2 += _check_width("Revolution number", elements.rev_number, 5)
    line2 += str(compute_checksum(line2))

    return line1, line2
