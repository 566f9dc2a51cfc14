"""
Per-aircraft learning state.

A single agent can be thought of as the 'pilot' of one aircraft: there is
a 1:1 relationship between aircraft and agents, and the agent id is the
aircraft id.
"""

from dataclasses import dataclass
from typing import Optional

from airspace.interface import AircraftView
from airspace.state_space import AirspaceCell


@dataclass
class AgentState:
    """Mutable learning state of one controlled aircraft."""

    # the aircraft this agent is 'flying'
    aircraft: AircraftView

    # the last cell we saw this agent in; None before the first observation
    last_cell: Optional[AirspaceCell] = None

    # the cell observed this tick when it differs from last_cell
    pending_cell: Optional[AirspaceCell] = None

    # handed off for an approach or left the airspace; removed at the end of the tick
    terminated: bool = False

    @property
    def agent_id(self) -> str:
        return self.aircraft.id

    @property
    def has_pending_transition(self) -> bool:
        return self.pending_cell is not None

    def observe(self, cell: AirspaceCell) -> bool:
        """
        Record the cell seen this tick.

        Returns:
            True if the agent moved into a different cell
        """
        if self.last_cell is not None and cell.id == self.last_cell.id:
            self.pending_cell = None
            return False

        self.pending_cell = cell
        return True

    def commit(self) -> None:
        """Make the pending cell the last recorded cell."""
        if self.pending_cell is not None:
            self.last_cell = self.pending_cell
        self.pending_cell = None
