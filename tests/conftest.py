"""
Pytest configuration and shared fixtures for approach-control tests.
"""

import pytest
import numpy as np
from typing import Optional
from unittest.mock import MagicMock

from airspace.config import create_default_config
from airspace.constants import AircraftCategory
from airspace.geometry import Position
from airspace.interface import AircraftView, Airport, CommandResponse, FlightControl, Runway
from airspace.state_space import StateSpace
from training.agent_controller import AgentController


class FakeAircraft(AircraftView):
    """Mutable AircraftView for driving the controller by hand."""

    def __init__(
        self,
        aircraft_id: str = "AAL123",
        position: Optional[Position] = None,
        heading: float = 180.0,
        altitude: float = 5000.0,
        category: AircraftCategory = AircraftCategory.ARRIVAL,
        controllable: bool = True,
    ):
        self._id = aircraft_id
        self.current_position = position
        self.current_heading = heading
        self.current_altitude = altitude
        self._category = category
        self.controllable = controllable

    @property
    def id(self) -> str:
        return self._id

    @property
    def position(self) -> Optional[Position]:
        return self.current_position

    @property
    def heading(self) -> float:
        return self.current_heading

    @property
    def altitude(self) -> float:
        return self.current_altitude

    @property
    def category(self) -> AircraftCategory:
        return self._category

    @property
    def is_controllable(self) -> bool:
        return self.controllable


@pytest.fixture
def runway() -> Runway:
    """Runway 25L with its threshold at the airport reference point."""
    return Runway(
        name="25L",
        heading=250.0,
        threshold=Position(0.0, 0.0),
        minimum_glideslope_intercept_altitude=3000.0,
    )


@pytest.fixture
def airport(runway) -> Airport:
    """Airport at the origin with a 40 nm control zone."""
    return Airport(name="KLAS", position=Position(0.0, 0.0), ctr_radius=40.0, arrival_runway=runway)


@pytest.fixture
def state_space() -> StateSpace:
    """Default 5 nm / 5 degree grid over a 40 nm airspace."""
    return StateSpace(Position(0.0, 0.0), ctr_radius=40.0, distance_step=5.0, heading_step=5.0)


@pytest.fixture
def flight_control() -> MagicMock:
    """FlightControl mock that accepts every instruction."""
    mock = MagicMock(spec=FlightControl)
    mock.issue_heading.return_value = CommandResponse(True, "roger")
    mock.issue_approach_clearance.return_value = CommandResponse(True, "cleared")
    return mock


@pytest.fixture
def make_aircraft():
    """Factory for FakeAircraft."""
    def _make(**kwargs) -> FakeAircraft:
        return FakeAircraft(**kwargs)
    return _make


@pytest.fixture
def intercept_position() -> Position:
    """20 nm out on the extended centerline of runway 25L."""
    return Position(0.0, 0.0).offset(70.0, 20.0)


@pytest.fixture
def make_controller(airport, flight_control):
    """Factory for an AgentController on the default airport with a seeded generator."""
    def _make(seed: int = 0, **overrides) -> AgentController:
        config = create_default_config(**overrides)
        return AgentController(airport, flight_control, config=config, rng=np.random.default_rng(seed))
    return _make


@pytest.fixture
def controller(make_controller) -> AgentController:
    """Controller with default settings."""
    return make_controller()
