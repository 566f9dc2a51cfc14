"""
Tests for the kinematic approach simulator and its wiring to the controller.
"""

import pytest
import numpy as np
from unittest.mock import MagicMock

from airspace.config import create_default_config
from airspace.constants import AircraftCategory, AircraftEvent
from airspace.geometry import Position
from airspace.metrics import MetricsTracker
from simulation.events import EventBus
from simulation.physics import SimAircraft, update_aircraft
from simulation.world import ApproachSimulator, SimulationConfig
from training.agent_controller import AgentController


@pytest.fixture
def sim():
    simulator = ApproachSimulator(SimulationConfig(seed=0))
    simulator.reset()
    return simulator


class TestEventBus:
    """Tests for the synchronous event bus."""

    def test_on_trigger_off(self):
        """Test handlers receive arguments until unsubscribed."""
        bus = EventBus()
        handler = MagicMock()

        bus.on("event", handler)
        bus.trigger("event", 1, 2)
        bus.off("event", handler)
        bus.off("event", handler)
        bus.trigger("event", 3)

        handler.assert_called_once_with(1, 2)

    def test_handler_may_unsubscribe_during_trigger(self):
        """Test the handler list can change while being iterated."""
        bus = EventBus()
        calls = []

        def once(*args):
            calls.append(args)
            bus.off("event", once)

        bus.on("event", once)
        bus.trigger("event")
        bus.trigger("event")

        assert len(calls) == 1


class TestPhysics:
    """Tests for aircraft kinematics."""

    def test_straight_flight(self):
        """Test 240 knots for 60 seconds covers 4 nm."""
        aircraft = SimAircraft("a", "AAL1", 0.0, 0.0, heading=90.0, altitude=5000.0, speed=240.0)
        update_aircraft(aircraft, 60.0)

        assert aircraft.x == pytest.approx(4.0)
        assert aircraft.y == pytest.approx(0.0, abs=1e-9)

    def test_turn_is_rate_limited(self):
        """Test turns progress at 3 degrees per second by the shortest way."""
        aircraft = SimAircraft("a", "AAL1", 0.0, 0.0, heading=350.0, altitude=5000.0)
        aircraft.target_heading = 40.0

        update_aircraft(aircraft, 5.0)
        assert aircraft.heading == pytest.approx(5.0)

        update_aircraft(aircraft, 20.0)
        assert aircraft.heading == pytest.approx(40.0)

    def test_cleared_aircraft_is_not_controllable(self, runway):
        """Test an approach clearance ends ATC control."""
        aircraft = SimAircraft("a", "AAL1", 0.0, 0.0, heading=0.0, altitude=5000.0)
        assert aircraft.is_controllable

        aircraft.cleared_runway = runway
        assert not aircraft.is_controllable


class TestSimulator:
    """Tests for traffic and flight control."""

    def test_reset_spawns_inbound_arrival(self, sim):
        """Test an episode starts with one arrival just inside the airspace."""
        (aircraft,) = sim.list_aircraft()

        assert aircraft.category is AircraftCategory.ARRIVAL
        assert aircraft.is_inside_airspace(sim.airport)
        assert sim.airport.position.distance_to(aircraft.position) == pytest.approx(39.0)

    def test_issue_heading(self, sim):
        """Test heading instructions are validated and applied."""
        (aircraft,) = sim.list_aircraft()

        assert sim.issue_heading(aircraft.id, 360).accepted
        assert aircraft.target_heading == 0.0
        assert not sim.issue_heading(aircraft.id, 400).accepted
        assert not sim.issue_heading("nobody", 90).accepted

    def test_issue_approach_clearance(self, sim):
        """Test clearances only for the arrival runway, then the aircraft lands."""
        (aircraft,) = sim.list_aircraft()

        assert sim.issue_approach_clearance(aircraft.id, sim.runway).accepted
        assert not sim.issue_heading(aircraft.id, 90).accepted

        sim.tick()
        assert sim.landings == 1
        assert aircraft.id not in sim.aircraft

    def test_departing_traffic_is_removed(self, sim):
        """Test aircraft flying away are removed beyond the margin."""
        (aircraft,) = sim.list_aircraft()
        aircraft.x, aircraft.y = 0.0, 44.9
        aircraft.heading = aircraft.target_heading = 0.0

        removed = MagicMock()
        sim.event_bus.on(AircraftEvent.REMOVE_AIRCRAFT, removed)
        sim.tick()

        assert sim.exits == 1
        removed.assert_called_once_with(aircraft)

    def test_reset_is_repeatable(self):
        """Test the same seed spawns the same traffic."""
        first = ApproachSimulator(SimulationConfig(seed=5))
        second = ApproachSimulator(SimulationConfig(seed=5))
        first.reset()
        second.reset()

        assert first.list_aircraft()[0].position == second.list_aircraft()[0].position

    def test_episode_ends(self):
        """Test the episode ends at max_ticks."""
        sim = ApproachSimulator(SimulationConfig(seed=1, max_ticks=10))
        sim.reset()
        for _ in range(10):
            sim.tick()

        assert sim.done

    @pytest.mark.parametrize("kwargs", [
        dict(tick_seconds=0), dict(max_ticks=0), dict(max_arrivals=0), dict(ctr_radius=0.5),
    ])
    def test_invalid_config(self, kwargs):
        """Test invalid simulator settings are rejected."""
        with pytest.raises(ValueError):
            SimulationConfig(**kwargs)


class TestTrainingLoop:
    """Tests for the controller driven by the simulator."""

    def test_controller_follows_simulator(self):
        """Test a short run adopts arrivals, issues instructions and learns."""
        sim = ApproachSimulator(SimulationConfig(seed=3, max_ticks=600, total_arrivals=3))
        controller = AgentController(
            sim.airport,
            sim,
            config=create_default_config(seed=3),
            aircraft=sim.list_aircraft(),
            event_bus=sim.event_bus,
            rng=np.random.default_rng(3),
        )
        tracker = MetricsTracker()
        controller.metrics = tracker.start_episode()

        sim.reset()
        while not sim.done:
            sim.tick()
            controller.step()
        episode = tracker.end_episode()

        assert episode.agents_added >= 1
        assert episode.headings_issued >= 1
        assert len(controller.learner) >= 1
        assert set(controller.agents) <= set(sim.aircraft)

    def test_reset_releases_agents(self):
        """Test agents are dropped when the simulator clears its traffic."""
        sim = ApproachSimulator(SimulationConfig(seed=4))
        controller = AgentController(sim.airport, sim, event_bus=sim.event_bus)

        sim.reset()
        first_ids = set(controller.agents)
        sim.reset()

        assert first_ids and first_ids.isdisjoint(controller.agents)
        assert len(controller) == 1

    def test_position_is_read_live(self):
        """Test the controller sees simulated movement through the view."""
        aircraft = SimAircraft("a", "AAL1", 0.0, 30.0, heading=180.0, altitude=5000.0)
        before = aircraft.position
        update_aircraft(aircraft, 60.0)

        assert aircraft.position != before
        assert aircraft.position == Position(aircraft.x, aircraft.y)
