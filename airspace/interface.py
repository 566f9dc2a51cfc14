"""
Contracts for the collaborators the learning core depends on.

The core never moves aircraft, never decides which runway is active and
never talks to a scheduler. It reads aircraft through ``AircraftView``,
reads static airport data through the ``Airport``/``Runway`` records and
issues commands through ``FlightControl``. This allows:
1. Testing the core against mocks
2. Driving it from the bundled kinematic simulator or another host
3. A clear contract between the core and the flight model
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from .constants import AircraftCategory
from .geometry import Position


@dataclass(frozen=True)
class Runway:
    """Static description of the arrival runway end."""

    name: str
    heading: float  # degrees
    threshold: Position
    minimum_glideslope_intercept_altitude: float  # feet


@dataclass(frozen=True)
class Airport:
    """Static description of the airport and its controlled airspace."""

    name: str
    position: Position
    ctr_radius: float  # nm
    arrival_runway: Optional[Runway] = None

    def contains(self, position: Optional[Position]) -> bool:
        """Is ``position`` inside the controlled airspace?"""
        if position is None:
            return False
        return self.position.distance_to(position) < self.ctr_radius


@dataclass(frozen=True)
class CommandResponse:
    """Readback from the flight-control collaborator."""

    accepted: bool
    message: str = ""


class AircraftView(ABC):
    """
    Read-only view of one live aircraft.

    Implementations are expected to reflect the aircraft's current state
    every time a property is read; the controller keeps a reference for
    the whole time the aircraft is under its control.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique aircraft identifier (also the agent id)."""
        pass

    @property
    def callsign(self) -> str:
        """Radio callsign; defaults to the id."""
        return self.id

    @property
    @abstractmethod
    def position(self) -> Optional[Position]:
        """Current position, or None if unknown."""
        pass

    @property
    @abstractmethod
    def heading(self) -> float:
        """Current heading in degrees."""
        pass

    @property
    @abstractmethod
    def altitude(self) -> float:
        """Assigned altitude in feet."""
        pass

    @property
    @abstractmethod
    def category(self) -> AircraftCategory:
        """Arrival or departure."""
        pass

    @property
    @abstractmethod
    def is_controllable(self) -> bool:
        """Whether the aircraft currently accepts ATC instructions."""
        pass

    def is_inside_airspace(self, airport: Airport) -> bool:
        """Whether the aircraft is inside ``airport``'s controlled airspace."""
        return airport.contains(self.position)


class FlightControl(ABC):
    """
    Abstract interface for issuing instructions to aircraft.

    Implementations must never raise for a rejected instruction; they
    report it through ``CommandResponse.accepted`` instead.
    """

    @abstractmethod
    def issue_heading(self, aircraft_id: str, heading: float) -> CommandResponse:
        """
        Instruct an aircraft to fly a heading.

        Args:
            aircraft_id: Target aircraft
            heading: Heading to fly in degrees

        Returns:
            CommandResponse readback
        """
        pass

    @abstractmethod
    def issue_approach_clearance(self, aircraft_id: str, runway: Runway) -> CommandResponse:
        """
        Clear an aircraft for the instrument approach to ``runway``.

        Args:
            aircraft_id: Target aircraft
            runway: Runway to approach

        Returns:
            CommandResponse readback
        """
        pass
