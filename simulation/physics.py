"""
Aircraft kinematics for the approach simulator.

Aircraft fly at constant speed and altitude, turning toward their
assigned heading at a fixed rate. That is all the learner needs from a
flight model: positions that move continuously in response to heading
instructions.
"""

from typing import Optional

import numpy as np

from airspace.constants import AircraftCategory
from airspace.geometry import Position, heading_difference, normalize_heading
from airspace.interface import AircraftView, Runway

from .constants import AIRCRAFT_SPEED_KNOTS, TURN_RATE_DEG_PER_SEC


class SimAircraft(AircraftView):
    """Simulated aircraft; also the AircraftView handed to the controller."""

    def __init__(
        self,
        aircraft_id: str,
        callsign: str,
        x: float,
        y: float,
        heading: float,
        altitude: float,
        speed: float = AIRCRAFT_SPEED_KNOTS,
        category: AircraftCategory = AircraftCategory.ARRIVAL,
    ):
        self._id = aircraft_id
        self._callsign = callsign
        self.x = float(x)  # nm east of the airport
        self.y = float(y)  # nm north of the airport
        self._heading = normalize_heading(heading)
        self.target_heading = self._heading
        self._altitude = float(altitude)  # feet
        self.speed = float(speed)  # knots
        self._category = category

        self.controllable = True
        self.cleared_runway: Optional[Runway] = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def callsign(self) -> str:
        return self._callsign

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)

    @property
    def heading(self) -> float:
        return self._heading

    @heading.setter
    def heading(self, value: float) -> None:
        self._heading = normalize_heading(value)

    @property
    def altitude(self) -> float:
        return self._altitude

    @property
    def category(self) -> AircraftCategory:
        return self._category

    @property
    def is_controllable(self) -> bool:
        return self.controllable and self.cleared_runway is None

    def __repr__(self) -> str:
        return (f"SimAircraft({self._callsign}, x={self.x:.2f}, y={self.y:.2f}, "
                f"hdg={self._heading:.0f}, alt={self._altitude:.0f})")


def update_aircraft(aircraft: SimAircraft, dt: float) -> None:
    """
    Advance one aircraft by ``dt`` seconds.

    Args:
        aircraft: Aircraft to update in place
        dt: Time step in seconds
    """
    # Turn toward the assigned heading by the shortest direction
    heading_diff = heading_difference(aircraft.target_heading, aircraft.heading)
    max_turn = TURN_RATE_DEG_PER_SEC * dt
    if abs(heading_diff) <= max_turn:
        aircraft.heading = aircraft.target_heading
    else:
        aircraft.heading = aircraft.heading + max_turn * np.sign(heading_diff)

    # Move along the (new) heading
    distance_nm = aircraft.speed / 3600.0 * dt
    heading_rad = np.radians(aircraft.heading)
    aircraft.x += float(distance_nm * np.sin(heading_rad))
    aircraft.y += float(distance_nm * np.cos(heading_rad))
