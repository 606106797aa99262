"""
Orbit Finder Package

Rotates a satellite's orbital elements so that its ground track passes a
chosen point at a chosen time, using the sgp4 library for propagation.

Modules:
    tle_fields: Fixed-column TLE field codec
    propagation: sgp4 wrappers and inertial-to-geodetic transform
    classifier: Grades candidate propagations against the target
    search: Mean anomaly, argument of perigee and RAAN sweeps
    orbit_finder: Runs the sweeps in order and returns the modified TLE
"""

from .classifier import PropagationOutcome, SearchState, SearchTarget
from .orbit_finder import OrbitFinder, RotationResult, SearchPhase, rotate_orbit_to_lat_lon
from .search import PhaseOutcome

__version__ = "1.0.0"
