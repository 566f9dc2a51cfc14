"""
Glideslope interception feasibility.

Decides whether an aircraft may be cleared for the instrument approach
right now. The flight model itself is fairly lenient about approach
clearances, so this check imposes its own envelope around the runway
threshold: a distance band, a cone on the extended centerline, a minimum
altitude and a heading condition.
"""

import logging
from typing import Optional

from .config import ApproachConfig, InterceptHeadingPolicy
from .geometry import Position, absolute_heading_difference
from .interface import AircraftView, Runway


logger = logging.getLogger(__name__)


class ApproachFeasibility:
    """
    Glideslope interception test.

    Passing the test is terminal for an agent: it earns the interception
    reward, is cleared for the approach and leaves learner control.

    Example:
        >>> feasibility = ApproachFeasibility(ApproachConfig())
        >>> feasibility.can_intercept(position, heading=360, altitude=5000, runway=runway)
        True
    """

    def __init__(self, config: Optional[ApproachConfig] = None):
        """
        Initialize the feasibility test.

        Args:
            config: Approach geometry (defaults to ApproachConfig())
        """
        self.config = config or ApproachConfig()

    def can_intercept(
        self,
        position: Optional[Position],
        heading: float,
        altitude: float,
        runway: Optional[Runway],
        aircraft_id: str = "aircraft",
    ) -> bool:
        """
        Can an aircraft at this position, heading and altitude intercept the glideslope?

        Never raises: missing inputs produce ``False`` and a warning.

        Args:
            position: Aircraft position
            heading: Aircraft heading in degrees
            altitude: Aircraft (assigned) altitude in feet
            runway: The runway being approached
            aircraft_id: Used in log messages only

        Returns:
            Whether interception is possible now
        """
        if position is None:
            logger.warning(f"{aircraft_id} is checking for an approach intercept with a bad position!")
            return False

        if runway is None:
            logger.warning(f"{aircraft_id} attempted to intercept an approach for a nonexistent runway!")
            return False

        distance_to_runway = runway.threshold.distance_to(position)
        if not self.config.min_intercept_distance <= distance_to_runway <= self.config.max_intercept_distance:
            return False

        # assumes altitude does not change much between two states
        if altitude < runway.minimum_glideslope_intercept_altitude:
            logger.warning(f"{aircraft_id} can't intercept the ILS runway {runway.name} "
                           f"because altitude is too low ({altitude:.0f} ft)")
            return False

        # the aircraft must sit on the extended centerline cone, in front of the runway
        inbound_bearing = position.bearing_to(runway.threshold)
        if absolute_heading_difference(inbound_bearing, runway.heading) > self.config.intercept_cone_half_angle:
            return False

        if not self._heading_condition(heading, runway.heading):
            return False

        logger.debug(f"{aircraft_id} is able to intercept {runway.name}")
        return True

    def can_aircraft_intercept(self, aircraft: AircraftView, runway: Optional[Runway]) -> bool:
        """Convenience wrapper reading position, heading and altitude from ``aircraft``."""
        return self.can_intercept(
            aircraft.position,
            aircraft.heading,
            aircraft.altitude,
            runway,
            aircraft_id=aircraft.callsign,
        )

    def _heading_condition(self, aircraft_heading: float, runway_heading: float) -> bool:
        difference = absolute_heading_difference(aircraft_heading, runway_heading)

        if self.config.heading_policy is InterceptHeadingPolicy.DIVERGING:
            return difference >= self.config.min_heading_divergence

        return difference <= self.config.max_heading_convergence
