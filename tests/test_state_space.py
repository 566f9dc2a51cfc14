"""
Tests for the polar state space.
"""

import pytest
import numpy as np

from airspace.exceptions import ConfigurationError, StateSpaceError
from airspace.geometry import Position
from airspace.config import StateSpaceConfig
from airspace.state_space import StateSpace, make_state_id


class TestConstruction:
    """Tests for building the grid."""

    def test_default_grid_size(self, state_space):
        """Test 8 rings of 72 wedges cover a 40 nm airspace at 5 nm / 5 degrees."""
        assert state_space.rings == [0.0, 5.0, 10.0, 15.0, 20.0, 25.0, 30.0, 35.0]
        assert len(state_space) == 8 * 72
        assert state_space.outermost_distance == 35.0

    def test_ids_are_unique_and_stable(self, state_space):
        """Test ids derive from ring and wedge, so rebuilding yields the same ids."""
        ids = [cell.id for cell in state_space]
        assert len(ids) == len(set(ids))

        rebuilt = StateSpace(Position(0.0, 0.0), 40.0, 5.0, 5.0)
        assert [cell.id for cell in rebuilt] == ids
        assert make_state_id(35.0, 0.0) in state_space
        assert make_state_id(35.0, 355.0) in state_space

    def test_radius_not_multiple_of_step_adds_partial_ring(self):
        """Test a 42 nm radius gets an outermost ring starting at 40 nm."""
        space = StateSpace(Position(0.0, 0.0), 42.0, 5.0, 5.0)
        assert space.outermost_distance == 40.0
        assert space.locate(Position(0.0, 41.0)).min_distance == 40.0

    def test_reference_position_is_ring_wedge_corner(self, state_space):
        """Test the reference position sits at (min_distance, start_heading)."""
        cell = state_space.by_id("state-20-90")
        assert cell.reference_position.x == pytest.approx(20.0)
        assert cell.reference_position.y == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize("kwargs", [
        dict(ctr_radius=0.0, distance_step=5.0, heading_step=5.0),
        dict(ctr_radius=40.0, distance_step=0.0, heading_step=5.0),
        dict(ctr_radius=40.0, distance_step=5.0, heading_step=0.0),
        dict(ctr_radius=40.0, distance_step=5.0, heading_step=7.0),
        dict(ctr_radius=40.0, distance_step=5.0, heading_step=400.0),
    ])
    def test_invalid_geometry_raises(self, kwargs):
        """Test that geometry which cannot tile the airspace is rejected."""
        with pytest.raises(StateSpaceError):
            StateSpace(Position(0.0, 0.0), **kwargs)

    def test_state_space_error_is_configuration_error(self):
        """Test the error hierarchy."""
        with pytest.raises(ConfigurationError):
            StateSpace(Position(0.0, 0.0), 40.0, 5.0, 7.0)

    def test_from_airport(self, airport):
        """Test building from an airport and a StateSpaceConfig."""
        space = StateSpace.from_airport(airport, StateSpaceConfig(distance_step=10.0, heading_step=90.0))
        assert len(space) == 4 * 4
        assert space.center == airport.position


class TestLocate:
    """Tests for position -> cell lookup."""

    def test_locate_outer_ring_north(self, state_space):
        """Test a position 38 nm just east of north lands in the first wedge of the 35 nm ring."""
        cell = state_space.locate(Position(0.5, 38.0))
        assert cell.id == "state-35-0"
        assert state_space.is_outermost(cell)

    def test_locate_center(self, state_space):
        """Test the airport reference point maps to the first cell."""
        assert state_space.locate(Position(0.0, 0.0)).id == "state-0-0"

    def test_locate_wraps_through_north(self, state_space):
        """Test bearings just west of north land in the last wedge."""
        assert state_space.locate(Position(-0.01, 12.0)).id == "state-10-355"

    def test_ring_boundaries_are_half_open(self, state_space):
        """Test that a ring includes its lower bound and excludes its upper bound."""
        assert state_space.locate(Position(0.0, 5.0)).min_distance == 5.0
        assert state_space.locate(Position(0.0, 4.999)).min_distance == 0.0

    def test_locate_outside_airspace(self, state_space):
        """Test positions at or beyond the radius are unmapped."""
        assert state_space.locate(Position(0.0, 40.0)) is None
        assert state_space.locate(Position(50.0, 0.0)) is None

    def test_locate_missing_position(self, state_space):
        """Test a missing position is unmapped."""
        assert state_space.locate(None) is None

    def test_every_cell_contains_its_own_center(self, state_space):
        """Test that the wedges tile without gaps or overlap."""
        for cell in state_space:
            middle = Position(0.0, 0.0).offset(cell.center_heading, cell.min_distance + 2.5)
            assert state_space.locate(middle) is cell

    def test_random_positions_fall_in_exactly_one_cell(self, state_space):
        """Test every position inside the radius is located in the one cell containing it."""
        rng = np.random.default_rng(2024)
        center = state_space.center
        checked = 0

        for x, y in rng.uniform(-40.0, 40.0, size=(3000, 2)):
            position = Position(float(x), float(y))
            distance = center.distance_to(position)
            if distance >= state_space.ctr_radius:
                continue
            bearing = center.bearing_to(position)

            cell = state_space.locate(position)
            assert cell is not None
            assert cell.contains_polar(distance, bearing)
            assert sum(1 for other in state_space if other.contains_polar(distance, bearing)) == 1
            checked += 1

        assert checked > 2000


class TestLookup:
    """Tests for id lookup and ring access."""

    def test_by_id_round_trip(self, state_space):
        """Test every cell is reachable by its id."""
        for cell in state_space:
            assert state_space.by_id(cell.id) is cell

    def test_by_id_unknown(self, state_space):
        """Test unknown ids return None."""
        assert state_space.by_id("state-99-0") is None

    def test_ring_cells(self, state_space):
        """Test ring access by lower bound."""
        ring = state_space.ring_cells(35.0)
        assert len(ring) == 72
        assert [cell.start_heading for cell in ring[:3]] == [0.0, 5.0, 10.0]
        assert state_space.ring_cells(37.0) == []
