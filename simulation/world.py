"""
Kinematic approach simulator.

A small stand-in for the full flight simulation: one airport with one
arrival runway, arrivals spawning near the airspace boundary, constant
speed kinematics, and a flight-control front end that accepts heading
instructions and approach clearances. Lifecycle notifications are
published on an EventBus the same way a full simulation would.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from airspace.constants import AircraftCategory, AircraftEvent
from airspace.geometry import Position
from airspace.interface import Airport, CommandResponse, FlightControl, Runway

from .constants import (
    AIRCRAFT_SPEED_KNOTS,
    CALLSIGNS,
    DEFAULT_CTR_RADIUS,
    DEFAULT_GLIDESLOPE_INTERCEPT_ALTITUDE,
    DEFAULT_MAX_ARRIVALS,
    DEFAULT_MAX_TICKS,
    DEFAULT_RUNWAY_HEADING,
    DEFAULT_RUNWAY_NAME,
    DEFAULT_RUNWAY_THRESHOLD,
    DEFAULT_SPAWN_INTERVAL_TICKS,
    DEFAULT_TICK_SECONDS,
    DEFAULT_TOTAL_ARRIVALS,
    REMOVAL_MARGIN_NM,
    SPAWN_ALTITUDE_RANGE,
    SPAWN_HEADING_JITTER,
    SPAWN_MARGIN_NM,
)
from .events import EventBus
from .physics import SimAircraft, update_aircraft


logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """Configuration for the approach simulator."""

    # Airport layout
    airport: str = "KLAS"
    ctr_radius: float = DEFAULT_CTR_RADIUS
    runway_name: str = DEFAULT_RUNWAY_NAME
    runway_heading: float = DEFAULT_RUNWAY_HEADING
    runway_threshold: Tuple[float, float] = DEFAULT_RUNWAY_THRESHOLD
    minimum_glideslope_intercept_altitude: float = DEFAULT_GLIDESLOPE_INTERCEPT_ALTITUDE

    # Episode settings
    tick_seconds: float = DEFAULT_TICK_SECONDS
    max_ticks: int = DEFAULT_MAX_TICKS

    # Traffic
    max_arrivals: int = DEFAULT_MAX_ARRIVALS
    total_arrivals: int = DEFAULT_TOTAL_ARRIVALS
    spawn_interval_ticks: int = DEFAULT_SPAWN_INTERVAL_TICKS
    aircraft_speed: float = AIRCRAFT_SPEED_KNOTS

    seed: Optional[int] = None

    def __post_init__(self):
        """Validate configuration consistency."""
        self.runway_threshold = tuple(self.runway_threshold)

        if self.ctr_radius <= SPAWN_MARGIN_NM:
            raise ValueError(f"ctr_radius must exceed the spawn margin ({SPAWN_MARGIN_NM} nm)")

        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")

        if self.max_ticks <= 0:
            raise ValueError("max_ticks must be positive")

        if self.max_arrivals <= 0:
            raise ValueError("max_arrivals must be positive")

        if self.spawn_interval_ticks <= 0:
            raise ValueError("spawn_interval_ticks must be positive")


class ApproachSimulator(FlightControl):
    """
    Simulated airspace around a single arrival runway.

    Example:
        >>> sim = ApproachSimulator(SimulationConfig(seed=0))
        >>> sim.reset()
        >>> while not sim.done:
        ...     sim.tick()
    """

    def __init__(self, config: Optional[SimulationConfig] = None, event_bus: Optional[EventBus] = None):
        """
        Initialize the simulator.

        Args:
            config: Simulator configuration
            event_bus: Bus for lifecycle notifications (a new one by default)
        """
        self.config = config or SimulationConfig()
        self.event_bus = event_bus or EventBus()
        self.rng = np.random.default_rng(self.config.seed)

        self.runway = Runway(
            name=self.config.runway_name,
            heading=self.config.runway_heading,
            threshold=Position(*self.config.runway_threshold),
            minimum_glideslope_intercept_altitude=self.config.minimum_glideslope_intercept_altitude,
        )
        self.airport = Airport(
            name=self.config.airport,
            position=Position(0.0, 0.0),
            ctr_radius=self.config.ctr_radius,
            arrival_runway=self.runway,
        )

        self.aircraft: Dict[str, SimAircraft] = {}
        self.current_tick = 0
        self.total_spawned = 0
        self.landings = 0
        self.exits = 0
        self._next_id = 0

    # ------------------------------------------------------------------
    # Episode management
    # ------------------------------------------------------------------

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Remove all traffic and restart the episode clock.

        Removal notifications are published for every aircraft still present.
        """
        if seed is not None:
            self.rng = np.random.default_rng(seed)

        for aircraft in list(self.aircraft.values()):
            self._remove(aircraft)

        self.current_tick = 0
        self.total_spawned = 0
        self.landings = 0
        self.exits = 0

        self.spawn_arrival()

    @property
    def done(self) -> bool:
        """Episode over: out of time, or all arrivals spawned and resolved."""
        if self.current_tick >= self.config.max_ticks:
            return True
        return self.total_spawned >= self.config.total_arrivals and not self.aircraft

    def tick(self) -> None:
        """Advance the simulation by one tick."""
        self.current_tick += 1

        if (self.current_tick % self.config.spawn_interval_ticks == 0
                and len(self.aircraft) < self.config.max_arrivals
                and self.total_spawned < self.config.total_arrivals):
            self.spawn_arrival()

        for aircraft in list(self.aircraft.values()):
            if aircraft.cleared_runway is not None:
                # established on the approach; hand over to tower
                self.landings += 1
                self._remove(aircraft)
                continue

            was_inside = aircraft.is_inside_airspace(self.airport)
            update_aircraft(aircraft, self.config.tick_seconds)
            is_inside = aircraft.is_inside_airspace(self.airport)

            if is_inside and not was_inside:
                self.event_bus.trigger(AircraftEvent.AIRSPACE_ENTER, aircraft)

            distance = self.airport.position.distance_to(aircraft.position)
            if distance > self.config.ctr_radius + REMOVAL_MARGIN_NM:
                self.exits += 1
                self._remove(aircraft)

    def spawn_arrival(self) -> SimAircraft:
        """Spawn one arrival just inside the boundary, pointed roughly at the airport."""
        spawn_bearing = float(self.rng.uniform(0.0, 360.0))
        spawn_distance = self.config.ctr_radius - SPAWN_MARGIN_NM
        spawn_position = self.airport.position.offset(spawn_bearing, spawn_distance)

        inbound = (spawn_bearing + 180.0) % 360.0
        heading = inbound + float(self.rng.uniform(-SPAWN_HEADING_JITTER, SPAWN_HEADING_JITTER))
        altitude = float(self.rng.uniform(*SPAWN_ALTITUDE_RANGE))

        aircraft_id = f"aircraft-{self._next_id}"
        callsign = CALLSIGNS[self._next_id % len(CALLSIGNS)]
        self._next_id += 1

        aircraft = SimAircraft(
            aircraft_id,
            callsign,
            spawn_position.x,
            spawn_position.y,
            heading,
            altitude,
            speed=self.config.aircraft_speed,
            category=AircraftCategory.ARRIVAL,
        )
        self.aircraft[aircraft_id] = aircraft
        self.total_spawned += 1

        logger.debug(f"Spawned {aircraft}")
        self.event_bus.trigger(AircraftEvent.ADD_AIRCRAFT, aircraft)
        return aircraft

    def _remove(self, aircraft: SimAircraft) -> None:
        self.aircraft.pop(aircraft.id, None)
        self.event_bus.trigger(AircraftEvent.REMOVE_AIRCRAFT, aircraft)

    # ------------------------------------------------------------------
    # FlightControl
    # ------------------------------------------------------------------

    def issue_heading(self, aircraft_id: str, heading: float) -> CommandResponse:
        aircraft = self.aircraft.get(aircraft_id)
        if aircraft is None:
            return CommandResponse(False, f"unknown aircraft {aircraft_id}")

        if not aircraft.is_controllable:
            return CommandResponse(False, f"{aircraft.callsign} is not under our control")

        if not 0 < heading <= 360:
            return CommandResponse(False, f"unable, invalid heading {heading}")

        aircraft.target_heading = heading % 360.0
        return CommandResponse(True, f"fly heading {int(round(heading)):03d}")

    def issue_approach_clearance(self, aircraft_id: str, runway: Runway) -> CommandResponse:
        aircraft = self.aircraft.get(aircraft_id)
        if aircraft is None:
            return CommandResponse(False, f"unknown aircraft {aircraft_id}")

        if not aircraft.is_controllable:
            return CommandResponse(False, f"{aircraft.callsign} is not under our control")

        if runway is None or runway.name != self.runway.name:
            return CommandResponse(False, "unable, no ILS for that runway")

        aircraft.cleared_runway = runway
        return CommandResponse(True, f"cleared ILS runway {runway.name} approach")

    def get_statistics(self) -> Dict[str, Any]:
        """Traffic counters for the current episode."""
        return {
            'ticks': self.current_tick,
            'spawned': self.total_spawned,
            'landings': self.landings,
            'exits': self.exits,
            'active': len(self.aircraft),
        }

    def list_aircraft(self) -> List[SimAircraft]:
        return list(self.aircraft.values())
