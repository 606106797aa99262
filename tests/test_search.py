"""
Unit Tests for the Mean Anomaly, Argument of Perigee and RAAN Sweeps

Most tests use a spherical circular-orbit propagator whose geometry can be
reasoned about by hand; the rest run against the real sgp4 library.

Run with:
    python -m pytest tests/test_search.py -v
"""

import math
import unittest

import numpy as np

from config import DEFAULT_REFERENCE_TIME, FALLBACK_ISS_TLE
from orbit_finder.classifier import (
    PropagationOutcome,
    SearchState,
    SearchTarget,
    longitude_difference,
    propagate_sample,
)
from orbit_finder.constants import MEAN_ANOMALY_STEPS, RAAN_STEPS
from orbit_finder.propagation import SGP4Propagator
from orbit_finder.search import (
    PhaseOutcome,
    apply_raan_offset,
    counter_to_degrees,
    search_argument_of_perigee,
    search_mean_anomaly,
    search_raan,
)
from orbit_finder.tle_fields import parse_tle_fields


class CircularOrbitPropagator(SGP4Propagator):
    """
    Circular orbit about a non-rotating Earth.

    The radius can be made to depend on argument of perigee so the altitude
    search has something to find.
    """

    def __init__(self, radius_km=6778.137, perigee_swing_km=0.0):
        self.radius_km = radius_km
        self.perigee_swing_km = perigee_swing_km

    def create_record(self, line1, line2):
        return parse_tle_fields(line1, line2)

    def time_variables(self, when, record):
        return 0.0, 0.0

    def propagate(self, record, minutes):
        i = math.radians(record.inclination)
        node = math.radians(record.raan)
        u = math.radians(record.arg_perigee + record.mean_anomaly)
        r = self.radius_km + self.perigee_swing_km * math.cos(math.radians(record.arg_perigee))
        return r * np.array([
            math.cos(node) * math.cos(u) - math.sin(node) * math.sin(u) * math.cos(i),
            math.sin(node) * math.cos(u) + math.cos(node) * math.sin(u) * math.cos(i),
            math.sin(u) * math.sin(i),
        ])


class BrokenPropagator(SGP4Propagator):
    """Propagator whose every propagation breaks down."""

    def propagate(self, record, minutes):
        return np.array([1.0, math.inf, 1.0])


def iss_elements():
    return parse_tle_fields(FALLBACK_ISS_TLE["line1"], FALLBACK_ISS_TLE["line2"])


class TestHelpers(unittest.TestCase):
    """Test counter and offset arithmetic."""

    def test_counter_to_degrees(self):
        self.assertEqual(counter_to_degrees(0, 10), 0.0)
        self.assertEqual(counter_to_degrees(1, 10), 0.1)
        self.assertEqual(counter_to_degrees(3600, 10), 0.0)
        self.assertEqual(counter_to_degrees(5199, 10), 159.9)
        self.assertEqual(counter_to_degrees(-5, 10), 359.5)
        self.assertEqual(counter_to_degrees(36001, 100), 0.01)

    def test_apply_raan_offset(self):
        """Test that RAAN is normalised into [0, 360) for any offset."""
        self.assertAlmostEqual(apply_raan_offset(350.0, 20.0), 10.0)
        self.assertAlmostEqual(apply_raan_offset(10.0, -20.0), 350.0)
        self.assertAlmostEqual(apply_raan_offset(0.0, 720.0), 0.0)
        self.assertAlmostEqual(apply_raan_offset(100.0, -1000.0), 180.0)
        self.assertAlmostEqual(apply_raan_offset(400.0, 0.0), 40.0)

        for raan in (0.0, 0.01, 180.0, 359.99, 519.99):
            for offset in (-1000.5, -360.0, -0.005, 0.0, 90.0, 359.99999, 725.25):
                value = apply_raan_offset(raan, offset)
                self.assertGreaterEqual(value, 0.0)
                self.assertLess(value, 360.0)


class TestMeanAnomalySearch(unittest.TestCase):
    """Test the mean anomaly sweep."""

    def setUp(self):
        self.elements = iss_elements()
        self.propagator = CircularOrbitPropagator()

    def test_ascending_equator_crossing(self):
        """Test that an ascending target skips the descending crossing."""
        target = SearchTarget(0.0, 0.0, "N", DEFAULT_REFERENCE_TIME)
        result = search_mean_anomaly(self.elements, target, propagator=self.propagator)

        self.assertEqual(result.outcome, PhaseOutcome.SUCCESS)
        self.assertEqual(result.state.direction, "N")
        self.assertEqual(result.state.mean_anomaly_outcome, PropagationOutcome.SUCCESS)
        # Argument of latitude 360 deg
        self.assertAlmostEqual(result.elements.mean_anomaly, 360.0 - 122.0101, delta=0.2)

        sample = propagate_sample(result.elements, target.when, self.propagator)
        self.assertLess(abs(sample.latitude), 0.1)

    def test_descending_equator_crossing(self):
        target = SearchTarget(0.0, 0.0, "S", DEFAULT_REFERENCE_TIME)
        result = search_mean_anomaly(self.elements, target, propagator=self.propagator)

        self.assertEqual(result.outcome, PhaseOutcome.SUCCESS)
        self.assertEqual(result.state.direction, "S")
        # Argument of latitude 180 deg
        self.assertAlmostEqual(result.elements.mean_anomaly, 180.0 - 122.0101, delta=0.2)

    def test_only_mean_anomaly_changes(self):
        target = SearchTarget(30.0, 0.0, "N", DEFAULT_REFERENCE_TIME)
        result = search_mean_anomaly(self.elements, target, propagator=self.propagator)

        self.assertTrue(result.succeeded)
        self.assertEqual(result.elements.raan, self.elements.raan)
        self.assertEqual(result.elements.arg_perigee, self.elements.arg_perigee)
        self.assertEqual(result.elements.inclination, self.elements.inclination)

    def test_unreachable_latitude_is_exhausted(self):
        """Test that a latitude above the inclination exhausts the sweep."""
        target = SearchTarget(80.0, 0.0, "N", DEFAULT_REFERENCE_TIME)
        result = search_mean_anomaly(self.elements, target, propagator=self.propagator)

        self.assertEqual(result.outcome, PhaseOutcome.EXHAUSTED)
        self.assertIs(result.elements, self.elements)
        self.assertEqual(result.last_outcome, PropagationOutcome.FAR)
        self.assertLess(result.samples, MEAN_ANOMALY_STEPS)

    def test_error_aborts(self):
        target = SearchTarget(0.0, 0.0, "N", DEFAULT_REFERENCE_TIME)
        result = search_mean_anomaly(self.elements, target, propagator=BrokenPropagator())

        self.assertEqual(result.outcome, PhaseOutcome.ERROR)
        self.assertEqual(result.samples, 1)
        self.assertIs(result.elements, self.elements)

    def test_deterministic(self):
        target = SearchTarget(-20.0, 0.0, "S", DEFAULT_REFERENCE_TIME)
        first = search_mean_anomaly(self.elements, target, propagator=self.propagator)
        second = search_mean_anomaly(self.elements, target, propagator=self.propagator)

        self.assertEqual(first, second)

    def test_real_sgp4(self):
        """Test the sweep against the sgp4 library."""
        target = SearchTarget(25.0, 0.0, "S", DEFAULT_REFERENCE_TIME)
        result = search_mean_anomaly(self.elements, target)

        self.assertTrue(result.succeeded)
        sample = propagate_sample(result.elements, target.when, SGP4Propagator())
        self.assertLess(abs(sample.latitude - 25.0), 0.1)


class TestArgumentOfPerigeeSearch(unittest.TestCase):
    """Test the argument of perigee sweep."""

    def setUp(self):
        self.elements = iss_elements()
        # Altitude swings between 300 and 700 km with argument of perigee
        self.propagator = CircularOrbitPropagator(radius_km=6878.137, perigee_swing_km=200.0)

    def _converged(self, target):
        result = search_mean_anomaly(self.elements, target, propagator=self.propagator)
        self.assertTrue(result.succeeded)
        return result

    def test_reaches_target_altitude(self):
        target = SearchTarget(0.0, 0.0, "N", DEFAULT_REFERENCE_TIME, altitude=600.0)
        start = self._converged(target)

        result = search_argument_of_perigee(start.elements, target, start.state, self.propagator)

        self.assertEqual(result.outcome, PhaseOutcome.SUCCESS)
        self.assertEqual(result.state.direction, "N")
        sample = propagate_sample(result.elements, target.when, self.propagator)
        self.assertLess(abs(sample.altitude - 600.0), 30.0)
        self.assertLess(abs(sample.latitude), 0.1)
        self.assertEqual(result.elements.raan, self.elements.raan)

    def test_unreachable_altitude_is_exhausted(self):
        target = SearchTarget(0.0, 0.0, "N", DEFAULT_REFERENCE_TIME, altitude=2000.0)
        start = self._converged(target)

        result = search_argument_of_perigee(start.elements, target, start.state, self.propagator)

        self.assertEqual(result.outcome, PhaseOutcome.EXHAUSTED)
        self.assertIs(result.elements, start.elements)

    def test_requires_altitude(self):
        target = SearchTarget(0.0, 0.0, "N", DEFAULT_REFERENCE_TIME)
        with self.assertRaises(ValueError):
            search_argument_of_perigee(self.elements, target, SearchState(), self.propagator)

    def test_error_aborts(self):
        target = SearchTarget(0.0, 0.0, "N", DEFAULT_REFERENCE_TIME, altitude=400.0)
        result = search_argument_of_perigee(
            self.elements, target, SearchState(), BrokenPropagator()
        )

        self.assertEqual(result.outcome, PhaseOutcome.ERROR)
        self.assertEqual(result.samples, 1)


class TestRaanSearch(unittest.TestCase):
    """Test the RAAN sweep."""

    def setUp(self):
        self.propagator = CircularOrbitPropagator()
        target = SearchTarget(0.0, 45.0, "N", DEFAULT_REFERENCE_TIME)
        self.start = search_mean_anomaly(iss_elements(), target, propagator=self.propagator)

    def _search(self, longitude, raan_offset=0.0):
        target = SearchTarget(0.0, longitude, "N", DEFAULT_REFERENCE_TIME, raan_offset=raan_offset)
        return target, search_raan(self.start.elements, target, self.start.state, self.propagator)

    def test_reaches_target_longitude(self):
        target, result = self._search(45.0)

        self.assertEqual(result.outcome, PhaseOutcome.SUCCESS)
        self.assertEqual(result.elements.mean_anomaly, self.start.elements.mean_anomaly)
        sample = propagate_sample(result.elements, target.when, self.propagator)
        self.assertLess(abs(longitude_difference(sample.longitude, 45.0)), 0.1)
        self.assertLess(abs(sample.latitude), 0.1)

    def test_antimeridian_target(self):
        target, result = self._search(-180.0)

        self.assertTrue(result.succeeded)
        sample = propagate_sample(result.elements, target.when, self.propagator)
        self.assertLess(abs(longitude_difference(sample.longitude, -180.0)), 0.1)

    def test_offset_applied_to_matched_raan(self):
        """Test that the offset shifts the matched RAAN and wraps it."""
        _, matched = self._search(45.0)
        for offset in (90.0, -400.0, 725.5):
            _, shifted = self._search(45.0, raan_offset=offset)

            self.assertTrue(shifted.succeeded)
            self.assertEqual(shifted.samples, matched.samples)
            self.assertAlmostEqual(
                shifted.elements.raan,
                apply_raan_offset(matched.elements.raan, offset),
                places=4,
            )
            self.assertGreaterEqual(shifted.elements.raan, 0.0)
            self.assertLess(shifted.elements.raan, 360.0)

    def test_error_aborts(self):
        target = SearchTarget(0.0, 45.0, "N", DEFAULT_REFERENCE_TIME)
        result = search_raan(self.start.elements, target, self.start.state, BrokenPropagator())

        self.assertEqual(result.outcome, PhaseOutcome.ERROR)
        self.assertIs(result.elements, self.start.elements)

    def test_bounded(self):
        _, result = self._search(-90.0)
        self.assertTrue(result.succeeded)
        self.assertLess(result.samples, RAAN_STEPS)


if __name__ == "__main__":
    unittest.main()
