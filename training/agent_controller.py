"""
Per-tick orchestration of the approach-control agents.

The AgentController is part of the host's game loop. Once per tick it
finds the cell every agent is in, turns cell changes into Q-learning
updates, and issues the next heading (or the approach clearance) through
the flight-control collaborator.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

import numpy as np

from airspace.config import ControllerConfig
from airspace.constants import HEADINGS, AircraftCategory, AircraftEvent, Heading
from airspace.exceptions import ControllerError
from airspace.feasibility import ApproachFeasibility
from airspace.geometry import Position, absolute_heading_difference
from airspace.interface import AircraftView, Airport, FlightControl
from airspace.metrics import EpisodeMetrics
from airspace.rewards import ApproachOutcome, RewardTable, classify_outcome
from airspace.state_space import AirspaceCell, StateSpace
from algorithms.q_learning import QLearner

from .agent_model import AgentState


logger = logging.getLogger(__name__)


def heading_for_bearing(bearing: float) -> Heading:
    """
    Map a bearing onto the cardinal action whose quadrant contains it.

    Movement is continuous but the action space holds four headings, so
    an observed move is attributed to the heading closest to its bearing.
    """
    if bearing <= 45 or bearing > 315:
        return Heading.NORTH
    if bearing <= 135:
        return Heading.EAST
    if bearing <= 225:
        return Heading.SOUTH
    return Heading.WEST


def derive_action(origin: Position, destination: Position) -> Heading:
    """The cardinal action that best explains a move from ``origin`` to ``destination``."""
    return heading_for_bearing(origin.bearing_to(destination))


class AgentController:
    """
    Drives the learning loop for every arrival inside the airspace.

    Owns the agents, the state space and the QLearner; nothing else reads
    or writes the value table while a run is in progress.

    Example:
        >>> controller = AgentController(airport, flight_control, aircraft=sim.aircraft)
        >>> for _ in range(1000):
        ...     sim.tick()
        ...     controller.step()
        >>> table = controller.dump_value_table()
    """

    def __init__(
        self,
        airport: Airport,
        flight_control: FlightControl,
        config: Optional[ControllerConfig] = None,
        aircraft: Iterable[AircraftView] = (),
        event_bus: Optional[Any] = None,
        rng: Optional[np.random.Generator] = None,
        metrics: Optional[EpisodeMetrics] = None,
    ):
        """
        Initialize the controller.

        Args:
            airport: Airport whose airspace and arrival runway are controlled
            flight_control: Collaborator that executes instructions
            config: Controller configuration (defaults to ControllerConfig())
            aircraft: Aircraft already in the simulation
            event_bus: Optional bus with ``on``/``off``; when given, the
                controller follows aircraft lifecycle notifications
            rng: Random generator for the learner
            metrics: Metrics sink (a fresh EpisodeMetrics by default)

        Raises:
            ControllerError: If the airport has no arrival runway
            StateSpaceError: If the state space geometry is invalid
        """
        if airport.arrival_runway is None:
            raise ControllerError(f"Airport {airport.name} has no arrival runway")

        self.config = config or ControllerConfig()
        self.airport = airport
        self.runway = airport.arrival_runway
        self.flight_control = flight_control

        self.state_space = StateSpace.from_airport(airport, self.config.state_space)
        self.feasibility = ApproachFeasibility(self.config.approach)
        self.rewards = RewardTable(self.config.reward)
        self.learner = QLearner.from_config(self.config.learning, self.get_legal_actions, rng=rng)
        self.metrics = metrics or EpisodeMetrics()

        self.agents: Dict[str, AgentState] = {}

        self._event_bus = event_bus
        self._handlers: Dict[AircraftEvent, Callable[[AircraftView], None]] = {}

        for existing in aircraft:
            self.aircraft_added(existing)

        self._setup_handlers()

    def _setup_handlers(self) -> None:
        if self._event_bus is None:
            return

        self._handlers = {
            AircraftEvent.AIRSPACE_ENTER: self.aircraft_added,
            AircraftEvent.ADD_AIRCRAFT: self.aircraft_added,
            AircraftEvent.REMOVE_AIRCRAFT: self.aircraft_removed,
        }
        for event, handler in self._handlers.items():
            self._event_bus.on(event, handler)

    def close(self) -> None:
        """Stop following lifecycle notifications."""
        if self._event_bus is not None:
            for event, handler in self._handlers.items():
                self._event_bus.off(event, handler)
        self._handlers = {}

    # ------------------------------------------------------------------
    # Agent lifecycle
    # ------------------------------------------------------------------

    def aircraft_added(self, aircraft: AircraftView) -> None:
        """
        Handle an aircraft being added to the game or entering the airspace.

        Only arrivals inside the airspace become agents; an aircraft that
        already has an agent keeps it.
        """
        if aircraft.category != AircraftCategory.ARRIVAL:
            return

        if aircraft.id in self.agents:
            return

        if not aircraft.is_inside_airspace(self.airport):
            logger.debug(f"{aircraft.callsign} is outside the airspace, not controlling it yet")
            return

        self.agents[aircraft.id] = AgentState(aircraft)
        self.metrics.record_agent_added(len(self.agents))
        logger.info(f"Now controlling {aircraft.callsign} ({len(self.agents)} agents)")

    def aircraft_removed(self, aircraft: AircraftView) -> None:
        """Handle an aircraft being removed from the game."""
        self._remove_agent(aircraft.id)

    def _remove_agent(self, agent_id: str) -> None:
        agent = self.agents.pop(agent_id, None)
        if agent is not None:
            self.metrics.record_agent_removed()
            logger.info(f"Stopped controlling {agent.aircraft.callsign}")

    # ------------------------------------------------------------------
    # Game loop
    # ------------------------------------------------------------------

    def step(self) -> None:
        """
        Advance the learning loop by one tick.

        Issues at most one instruction per agent; never raises for
        per-agent conditions.
        """
        self.metrics.increment_step()

        state_updates: List[AgentState] = []
        for agent in list(self.agents.values()):
            cell = self.state_space.locate(agent.aircraft.position)

            if cell is None:
                self._handle_unmapped(agent)
                continue

            if agent.observe(cell):
                state_updates.append(agent)

        for agent in state_updates:
            if agent.agent_id in self.agents:
                self._transition(agent)

        for agent_id in [agent_id for agent_id, agent in self.agents.items() if agent.terminated]:
            self._remove_agent(agent_id)

    def _handle_unmapped(self, agent: AgentState) -> None:
        aircraft = agent.aircraft

        if aircraft.position is None:
            logger.warning(f"{aircraft.callsign}: no position reported, skipping tick")
            return

        if aircraft.is_inside_airspace(self.airport) or agent.last_cell is None:
            # no usable observation this tick
            return

        action = derive_action(agent.last_cell.reference_position, aircraft.position)
        reward = self.rewards.reward(ApproachOutcome.EXITED_AIRSPACE)
        self.learner.update(agent.last_cell, action, None, reward)
        self.metrics.record_transition(ApproachOutcome.EXITED_AIRSPACE, reward, updated=True)

        logger.debug(f"{aircraft.callsign}: (({agent.last_cell.min_distance:g}, "
                     f"{agent.last_cell.start_heading:g}), {action.name}) => exit = {reward}")

        agent.terminated = True

    def _transition(self, agent: AgentState) -> None:
        aircraft = agent.aircraft

        can_intercept = self.feasibility.can_aircraft_intercept(aircraft, self.runway)
        outcome = classify_outcome(can_intercept, aircraft.is_inside_airspace(self.airport))
        reward = self.rewards.reward(outcome)

        if agent.last_cell is not None:
            action = derive_action(agent.last_cell.reference_position, agent.pending_cell.reference_position)
            self.learner.update(agent.last_cell, action, agent.pending_cell, reward)
            self.metrics.record_transition(outcome, reward, updated=True)

            logger.debug(f"{aircraft.callsign}: (({agent.last_cell.min_distance:g}, "
                         f"{agent.last_cell.start_heading:g}), {action.name}) => "
                         f"({agent.pending_cell.min_distance:g}, {agent.pending_cell.start_heading:g}) = {reward}")
        else:
            self.metrics.record_transition(outcome, 0.0, updated=False)

        agent.commit()

        if outcome is ApproachOutcome.INTERCEPTED:
            response = self.flight_control.issue_approach_clearance(agent.agent_id, self.runway)
            self.metrics.record_approach_clearance(response.accepted)
            self._log_readback(aircraft, response.accepted, response.message)
            agent.terminated = True
            return

        if outcome is ApproachOutcome.EXITED_AIRSPACE:
            agent.terminated = True
            return

        if not aircraft.is_controllable:
            return

        action = self.learner.select_action(agent.last_cell)
        if action is None:
            return

        response = self.flight_control.issue_heading(agent.agent_id, int(action))
        self.metrics.record_heading(action, response.accepted)
        self._log_readback(aircraft, response.accepted, response.message)

    @staticmethod
    def _log_readback(aircraft: AircraftView, accepted: bool, message: str) -> None:
        if accepted:
            logger.debug(f"{aircraft.callsign}, {message}")
        else:
            logger.warning(f"{aircraft.callsign} rejected instruction: {message}")

    # ------------------------------------------------------------------
    # Legal actions
    # ------------------------------------------------------------------

    def get_legal_actions(self, cell: AirspaceCell) -> List[Heading]:
        """
        Get the legal actions in ``cell``.

        Agents cannot leave controlled airspace and cannot divert once
        they are in the approach envelope.

        Args:
            cell: The state

        Returns:
            The legal headings; empty for terminal states
        """
        approach = self.config.approach

        # if this is true the agent should already be cleared for approach
        bearing_to_runway = cell.reference_position.bearing_to(self.runway.threshold)
        arrival_distance_condition = cell.min_distance < approach.terminal_distance
        arrival_heading_condition = absolute_heading_difference(
            bearing_to_runway, self.runway.heading) <= approach.terminal_bearing_tolerance

        if arrival_distance_condition and arrival_heading_condition:
            return []

        # anywhere but the outermost ring, the agent can move in any direction
        if not self.state_space.is_outermost(cell):
            return list(HEADINGS)

        legal_moves = []
        heading = cell.start_heading

        if heading < 90 or heading >= 270:
            # northern half, south points back in
            legal_moves.append(Heading.SOUTH)
        else:
            legal_moves.append(Heading.NORTH)

        if heading < 180:
            # eastern half, west points back in
            legal_moves.append(Heading.WEST)
        else:
            legal_moves.append(Heading.EAST)

        return legal_moves

    # ------------------------------------------------------------------
    # Value table
    # ------------------------------------------------------------------

    def load_value_table(self, table: Dict[str, Dict[Any, float]]) -> None:
        """Replace the learner's value table; see QLearner.load_value_table."""
        unknown = [state_id for state_id in table if state_id not in self.state_space]
        if unknown:
            logger.warning(f"{len(unknown)} states in the loaded table do not exist in this airspace")
        self.learner.load_value_table(table)

    def dump_value_table(self) -> Dict[str, Dict[int, float]]:
        """Snapshot of the learner's value table; only call between ticks."""
        return self.learner.dump_value_table()

    def __len__(self) -> int:
        return len(self.agents)
