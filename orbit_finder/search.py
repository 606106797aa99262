"""
Angular Sweeps

Three stepping searches, each built on the propagation classifier:

- mean anomaly, matched against target latitude and direction of motion
- argument of perigee, matched against target altitude while re-converging
  mean anomaly at every step
- RAAN, matched against target longitude, then shifted by the caller's
  offset

Every sweep walks an integer counter (tenths of a degree for mean anomaly and
argument of perigee, hundredths for RAAN), jumps ahead when the classifier
reports FAR, and ends in one of three explicit outcomes: SUCCESS, EXHAUSTED
or ERROR. A sweep never changes the element set it was given; on SUCCESS the
committed angle is carried by the returned PhaseResult.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .classifier import (
    PropagationOutcome,
    SearchDimension,
    SearchState,
    SearchTarget,
    classify_candidate,
)
from .constants import (
    ARG_PERIGEE_FAR_SKIP,
    ARG_PERIGEE_MEAN_ANOMALY_FAR_SKIP,
    ARG_PERIGEE_SCALE,
    ARG_PERIGEE_START_OFFSET,
    ARG_PERIGEE_STEPS,
    ARG_PERIGEE_WRONG_DIRECTION_SKIP,
    MEAN_ANOMALY_FAR_SKIP,
    MEAN_ANOMALY_SCALE,
    MEAN_ANOMALY_STEPS,
    MEAN_ANOMALY_WRONG_DIRECTION_SKIP,
    RAAN_FAR_SKIP,
    RAAN_SCALE,
    RAAN_STEPS,
)
from .propagation import SGP4Propagator
from .tle_fields import OrbitalElementSet

logger = logging.getLogger(__name__)


class PhaseOutcome(Enum):
    """How a sweep ended"""

    SUCCESS = "success"
    EXHAUSTED = "exhausted"
    ERROR = "error"


@dataclass(frozen=True)
class PhaseResult:
    """
    Result of one sweep.

    Attributes:
        outcome: How the sweep ended
        elements: Element set with the committed angle on SUCCESS,
            otherwise the element set the sweep was given
        state: Search state after the sweep
        samples: Number of propagations performed
        last_outcome: Classification of the final sample
    """

    outcome: PhaseOutcome
    elements: OrbitalElementSet
    state: SearchState
    samples: int
    last_outcome: Optional[PropagationOutcome] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is PhaseOutcome.SUCCESS


def counter_to_degrees(counter: int, scale: int) -> float:
    """Convert a fixed-point sweep counter to degrees wrapped into [0, 360)."""
    return (counter % (360 * scale)) / scale


def apply_raan_offset(raan: float, offset: float) -> float:
    """Shift a RAAN by an offset and normalise into [0, 360)."""
    value = round((raan + offset) % 360.0, 4)
    if value >= 360.0:
        value -= 360.0
    return value


def search_mean_anomaly(
    elements: OrbitalElementSet,
    target: SearchTarget,
    state: Optional[SearchState] = None,
    propagator: Optional[SGP4Propagator] = None,
) -> PhaseResult:
    """
    Sweep mean anomaly until the ground track crosses the target latitude
    in the target direction.

    The target latitude is usually crossed twice per orbit. A hit going the
    wrong way moves the sweep 2 deg further along before sampling again.

    Args:
        elements: Working element set (RAAN and argument of perigee are used
            as given)
        target: Search target
        state: Search state from earlier phases
        propagator: Propagator collaborator

    Returns:
        PhaseResult; on SUCCESS the elements carry the new mean anomaly
    """
    propagator = propagator or SGP4Propagator()
    # Direction is inferred afresh for every sweep
    state = replace(state or SearchState(), last_latitude=None)

    outcome = PropagationOutcome.NEAR
    samples = 0
    counter = 0
    while counter < MEAN_ANOMALY_STEPS:
        candidate = elements.with_angles(
            mean_anomaly=counter_to_degrees(counter, MEAN_ANOMALY_SCALE)
        )
        outcome, state = classify_candidate(
            candidate, SearchDimension.MEAN_ANOMALY, target, state, propagator
        )
        samples += 1

        if outcome is PropagationOutcome.ERROR:
            logger.debug(f"Mean anomaly sweep hit a propagation error at {candidate.mean_anomaly:.1f} deg")
            return PhaseResult(
                PhaseOutcome.ERROR,
                elements,
                replace(state, mean_anomaly_outcome=outcome),
                samples,
                outcome,
            )

        if outcome is PropagationOutcome.SUCCESS:
            if state.direction_matches(target):
                logger.debug(
                    f"Mean anomaly {candidate.mean_anomaly:.1f} deg matches latitude "
                    f"{target.latitude} ({target.direction}) after {samples} samples"
                )
                return PhaseResult(
                    PhaseOutcome.SUCCESS,
                    candidate,
                    replace(state, mean_anomaly_outcome=outcome),
                    samples,
                    outcome,
                )
            counter += MEAN_ANOMALY_WRONG_DIRECTION_SKIP
        elif outcome is PropagationOutcome.FAR:
            counter += MEAN_ANOMALY_FAR_SKIP

        counter += 1

    return PhaseResult(
        PhaseOutcome.EXHAUSTED,
        elements,
        replace(state, mean_anomaly_outcome=outcome),
        samples,
        outcome,
    )


def search_argument_of_perigee(
    elements: OrbitalElementSet,
    target: SearchTarget,
    state: SearchState,
    propagator: Optional[SGP4Propagator] = None,
) -> PhaseResult:
    """
    Sweep argument of perigee until the satellite sits at the target
    altitude over the target latitude.

    Starts 10 deg below the current argument of perigee and covers a full
    circle. Each candidate is first graded against altitude with the current
    mean anomaly, which only decides the step size. The mean anomaly is then
    re-converged for the candidate, and the sweep stops once the altitude is
    within tolerance while the mean anomaly sweep reports a direction-matched
    latitude hit.

    Args:
        elements: Working element set carrying the mean anomaly already found
        target: Search target (must have an altitude)
        state: Search state from the mean anomaly phase
        propagator: Propagator collaborator

    Returns:
        PhaseResult; on SUCCESS the elements carry the new argument of
        perigee and the matching mean anomaly
    """
    if not target.has_altitude:
        raise ValueError("Argument of perigee search requires a target altitude")

    propagator = propagator or SGP4Propagator()
    start = int(round(elements.arg_perigee * ARG_PERIGEE_SCALE)) + ARG_PERIGEE_START_OFFSET
    # The mean anomaly found so far belongs to the old argument of perigee
    state = replace(state, mean_anomaly_outcome=PropagationOutcome.NEAR)

    current = elements
    outcome = PropagationOutcome.NEAR
    samples = 0
    offset = 0
    while offset < ARG_PERIGEE_STEPS:
        candidate = current.with_angles(
            arg_perigee=counter_to_degrees(start + offset, ARG_PERIGEE_SCALE)
        )
        outcome, state = classify_candidate(
            candidate, SearchDimension.ARG_PERIGEE, target, state, propagator
        )
        samples += 1

        if outcome is PropagationOutcome.ERROR:
            return PhaseResult(PhaseOutcome.ERROR, elements, state, samples, outcome)

        if outcome is PropagationOutcome.FAR:
            offset += ARG_PERIGEE_FAR_SKIP

        inner = search_mean_anomaly(candidate, target, state, propagator)
        samples += inner.samples
        state = inner.state

        if inner.outcome is PhaseOutcome.ERROR:
            return PhaseResult(PhaseOutcome.ERROR, elements, state, samples, inner.last_outcome)

        if inner.succeeded:
            current = inner.elements
            outcome, state = classify_candidate(
                current, SearchDimension.ARG_PERIGEE, target, state, propagator
            )
            samples += 1
            if outcome is PropagationOutcome.ERROR:
                return PhaseResult(PhaseOutcome.ERROR, elements, state, samples, outcome)
            if _altitude_settled(outcome, state, target):
                logger.debug(
                    f"Argument of perigee {current.arg_perigee:.1f} deg matches altitude "
                    f"{target.altitude} km with mean anomaly {current.mean_anomaly:.1f} deg"
                )
                return PhaseResult(PhaseOutcome.SUCCESS, current, state, samples, outcome)
            state = replace(state, mean_anomaly_outcome=PropagationOutcome.NEAR)
        elif inner.last_outcome is PropagationOutcome.SUCCESS:
            # Sweep ran out just after a crossing in the wrong direction
            offset += ARG_PERIGEE_WRONG_DIRECTION_SKIP
        elif inner.last_outcome is PropagationOutcome.FAR:
            offset += ARG_PERIGEE_MEAN_ANOMALY_FAR_SKIP

        offset += 1

    return PhaseResult(PhaseOutcome.EXHAUSTED, elements, state, samples, outcome)


def _altitude_settled(
    outcome: PropagationOutcome, state: SearchState, target: SearchTarget
) -> bool:
    return (
        outcome is PropagationOutcome.SUCCESS
        and state.mean_anomaly_outcome is PropagationOutcome.SUCCESS
        and state.direction_matches(target)
    )


def search_raan(
    elements: OrbitalElementSet,
    target: SearchTarget,
    state: SearchState,
    propagator: Optional[SGP4Propagator] = None,
) -> PhaseResult:
    """
    Sweep RAAN until the ground track passes the target longitude.

    The matched RAAN is then shifted by the target's raan_offset and wrapped
    into [0, 360) before being committed, so the committed node can sit a
    chosen distance away from the one that exactly hits the target.

    Args:
        elements: Working element set carrying the committed mean anomaly
            (and argument of perigee, if searched)
        target: Search target
        state: Search state from earlier phases
        propagator: Propagator collaborator

    Returns:
        PhaseResult; on SUCCESS the elements carry the offset RAAN
    """
    propagator = propagator or SGP4Propagator()

    outcome = PropagationOutcome.NEAR
    samples = 0
    counter = 0
    while counter < RAAN_STEPS:
        candidate = elements.with_angles(raan=counter_to_degrees(counter, RAAN_SCALE))
        outcome, state = classify_candidate(
            candidate, SearchDimension.RAAN, target, state, propagator
        )
        samples += 1

        if outcome is PropagationOutcome.ERROR:
            return PhaseResult(PhaseOutcome.ERROR, elements, state, samples, outcome)

        if outcome is PropagationOutcome.SUCCESS:
            raan = apply_raan_offset(counter / RAAN_SCALE, target.raan_offset)
            logger.debug(
                f"RAAN {candidate.raan:.2f} deg matches longitude {target.longitude}; "
                f"committing {raan:.4f} deg (offset {target.raan_offset})"
            )
            return PhaseResult(
                PhaseOutcome.SUCCESS, candidate.with_angles(raan=raan), state, samples, outcome
            )

        if outcome is PropagationOutcome.FAR:
            counter += RAAN_FAR_SKIP

        counter += 1

    return PhaseResult(PhaseOutcome.EXHAUSTED, elements, state, samples, outcome)
