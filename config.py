"""
Orbit Finder Configuration

Reference TLE data and demonstration defaults.

Fallback TLE Data:
    ISS TLE used by the demonstration script and the test suite. The orbit
    search only needs a valid element set, so this does not have to be
    current, but the demo reference time should stay close to its epoch
    (within a few days) to keep SGP4 well conditioned.

    Sources for updated TLEs:
    - Space-Track.org (requires free registration)
    - CelesTrak.org (public access)
"""

from datetime import datetime, timezone
from typing import Dict, Any

# ISS (ZARYA), epoch 2023-09-16 13:49 UTC
FALLBACK_ISS_TLE: Dict[str, Any] = {
    'name': 'ISS (ZARYA)',
    'norad_id': 25544,
    'line1': '1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995',
    'line2': '2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598',
    'epoch': '2023-09-16T13:49:09Z',
    'inclination': 51.6416,
    'eccentricity': 0.0004263,
}

# Reference time used when the demo is run without --time
DEFAULT_REFERENCE_TIME: datetime = datetime(2023, 9, 16, 14, 0, 0, tzinfo=timezone.utc)
