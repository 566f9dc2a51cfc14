"""
Discretization of the controlled airspace into a polar state space.

Aircraft can be at any point inside the controlled airspace, so the
learner cannot use raw positions as states. The StateSpace divides the
disk around the airport into rings of ``distance_step`` nautical miles,
and every ring into wedges of ``heading_step`` degrees measured clockwise
from north. Each (ring, wedge) pair is one AirspaceCell.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from .config import StateSpaceConfig
from .exceptions import StateSpaceError
from .geometry import Position, heading_in_wedge, normalize_heading
from .interface import Airport


logger = logging.getLogger(__name__)


def make_state_id(min_distance: float, start_heading: float) -> str:
    """Stable identifier of the cell starting at (min_distance, start_heading)."""
    return f"state-{min_distance:g}-{start_heading:g}"


@dataclass(frozen=True)
class AirspaceCell:
    """
    A single state: one wedge of one distance ring.

    The cell covers ``[min_distance, min_distance + distance_step)`` from the
    airport and bearings ``[start_heading, start_heading + heading_step)``,
    wrapping through north. ``reference_position`` is the corner at
    (min_distance, start_heading) and stands in for the whole cell whenever
    a single point is needed.
    """
    id: str
    min_distance: float
    start_heading: float
    distance_step: float
    heading_step: float
    reference_position: Position

    @property
    def max_distance(self) -> float:
        return self.min_distance + self.distance_step

    @property
    def end_heading(self) -> float:
        return normalize_heading(self.start_heading + self.heading_step)

    @property
    def center_heading(self) -> float:
        return normalize_heading(self.start_heading + self.heading_step / 2.0)

    def contains_polar(self, distance: float, bearing: float) -> bool:
        """Is the point at ``distance``/``bearing`` from the airport in this cell?"""
        distance_condition = self.min_distance <= distance < self.max_distance
        bearing_condition = heading_in_wedge(bearing, self.start_heading, self.heading_step)

        return distance_condition and bearing_condition


class StateSpace:
    """
    All the cells of one airspace, addressable by position and by id.

    Cells are built eagerly on construction and never change afterwards.

    Example:
        >>> space = StateSpace(Position(0.0, 0.0), ctr_radius=40, distance_step=5, heading_step=5)
        >>> cell = space.locate(Position(0.5, 38.0))
        >>> cell.min_distance, cell.start_heading
        (35.0, 0.0)
    """

    def __init__(
        self,
        center: Position,
        ctr_radius: float,
        distance_step: float,
        heading_step: float,
    ):
        """
        Build the state space.

        Args:
            center: Airport reference point
            ctr_radius: Radius of the controlled airspace (nm)
            distance_step: Depth of each ring (nm)
            heading_step: Width of each wedge (degrees); must divide 360

        Raises:
            StateSpaceError: If the geometry cannot tile the airspace
        """
        self._validate(ctr_radius, distance_step, heading_step)

        self.center = center
        self.ctr_radius = float(ctr_radius)
        self.distance_step = float(distance_step)
        self.heading_step = float(heading_step)

        self._rings: List[List[AirspaceCell]] = []
        self._cells_by_id: Dict[str, AirspaceCell] = {}

        self._build()

    @classmethod
    def build(
        cls,
        center: Position,
        ctr_radius: float,
        distance_step: float,
        heading_step: float,
    ) -> "StateSpace":
        """Alias of the constructor, for symmetry with ``from_airport``."""
        return cls(center, ctr_radius, distance_step, heading_step)

    @classmethod
    def from_airport(cls, airport: Airport, config: Optional[StateSpaceConfig] = None) -> "StateSpace":
        """Build the state space covering ``airport``'s controlled airspace."""
        config = config or StateSpaceConfig()
        return cls(airport.position, airport.ctr_radius, config.distance_step, config.heading_step)

    @staticmethod
    def _validate(ctr_radius: float, distance_step: float, heading_step: float) -> None:
        if ctr_radius <= 0:
            raise StateSpaceError(f"ctr_radius must be positive, got {ctr_radius}")

        if distance_step <= 0:
            raise StateSpaceError(f"distance_step must be positive, got {distance_step}")

        if heading_step <= 0 or heading_step > 360:
            raise StateSpaceError(f"heading_step must be in (0, 360], got {heading_step}")

        wedges = 360.0 / heading_step
        if abs(wedges - round(wedges)) > 1e-9:
            raise StateSpaceError(
                f"heading_step ({heading_step}) does not divide 360; the wedges would not tile the airspace"
            )

    def _build(self) -> None:
        logger.info(f"Building states: max distance {self.ctr_radius} nm, "
                    f"distance interval {self.distance_step} nm, heading interval {self.heading_step} deg")

        wedge_count = int(round(360.0 / self.heading_step))

        ring_index = 0
        while ring_index * self.distance_step < self.ctr_radius:
            min_distance = ring_index * self.distance_step
            ring = []
            for wedge_index in range(wedge_count):
                start_heading = wedge_index * self.heading_step
                cell = AirspaceCell(
                    id=make_state_id(min_distance, start_heading),
                    min_distance=min_distance,
                    start_heading=start_heading,
                    distance_step=self.distance_step,
                    heading_step=self.heading_step,
                    reference_position=self.center.offset(start_heading, min_distance),
                )
                ring.append(cell)
                self._cells_by_id[cell.id] = cell

            self._rings.append(ring)
            ring_index += 1

        logger.info(f"Built {len(self._cells_by_id)} states in {len(self._rings)} rings")

    @property
    def rings(self) -> List[float]:
        """Lower bound of every ring, innermost first."""
        return [ring[0].min_distance for ring in self._rings]

    @property
    def outermost_distance(self) -> float:
        """Lower bound of the outermost ring."""
        return self._rings[-1][0].min_distance

    @property
    def cells(self) -> List[AirspaceCell]:
        """All cells, ring by ring, in construction order."""
        return [cell for ring in self._rings for cell in ring]

    def is_outermost(self, cell: AirspaceCell) -> bool:
        """Does ``cell`` belong to the outermost ring?"""
        return math.isclose(cell.min_distance, self.outermost_distance)

    def ring_cells(self, min_distance: float) -> List[AirspaceCell]:
        """The wedges of the ring starting at ``min_distance`` (empty if none)."""
        index = int(round(min_distance / self.distance_step))
        if 0 <= index < len(self._rings) and math.isclose(self._rings[index][0].min_distance, min_distance):
            return list(self._rings[index])
        return []

    def locate(self, position: Optional[Position]) -> Optional[AirspaceCell]:
        """
        Get the cell that contains ``position``.

        Args:
            position: Position in the airspace frame

        Returns:
            The containing AirspaceCell, or None when the position is missing
            or lies outside the mapped airspace
        """
        if position is None:
            logger.warning("Attempted to locate a state for a missing position")
            return None

        distance_from_airport = self.center.distance_to(position)
        if distance_from_airport >= self.ctr_radius:
            # probably an aircraft that spawned too far away or just left
            return None

        ring_index = int(math.floor(distance_from_airport / self.distance_step))
        if ring_index >= len(self._rings):
            return None

        bearing_from_airport = self.center.bearing_to(position)
        for cell in self._rings[ring_index]:
            if heading_in_wedge(bearing_from_airport, cell.start_heading, cell.heading_step):
                return cell

        logger.warning(f"No wedge in ring {ring_index} contains bearing {bearing_from_airport:.3f}")
        return None

    def by_id(self, state_id: str) -> Optional[AirspaceCell]:
        """
        Get a cell by its unique id.

        Args:
            state_id: Cell identifier

        Returns:
            The AirspaceCell, or None if no cell has this id
        """
        cell = self._cells_by_id.get(state_id)
        if cell is None:
            logger.warning(f"Unknown state id: {state_id!r}")
        return cell

    def __len__(self) -> int:
        return len(self._cells_by_id)

    def __iter__(self) -> Iterator[AirspaceCell]:
        return iter(self.cells)

    def __contains__(self, state_id: object) -> bool:
        return state_id in self._cells_by_id
