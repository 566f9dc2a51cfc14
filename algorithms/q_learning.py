"""
Tabular Q-learning for the approach-control agents.

A single QLearner holds the value table for every agent of a run: all
aircraft share what is learned about each airspace cell. The table is
sparse and keyed by cell id; a row is created in full, with every action
at zero, the first time any action in that state is updated.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import numpy as np

from airspace.config import LearningConfig
from airspace.constants import (
    DISCOUNT_RATE,
    EXPLORATION_RATE,
    HEADINGS,
    LEARNING_RATE,
    Heading,
)
from airspace.exceptions import ValueTableError
from airspace.state_space import AirspaceCell


logger = logging.getLogger(__name__)

LegalActionsFn = Callable[[AirspaceCell], Sequence[Heading]]
ValueTable = Dict[str, Dict[Heading, float]]


def parse_action(key: Any) -> Heading:
    """
    Convert a persisted action key into a Heading.

    Accepts Heading members, heading degrees as int or numeric string
    (``360``, ``"90"``) and heading names (``"NORTH"``, ``"west"``).

    Raises:
        ValueTableError: If the key names no heading
    """
    if isinstance(key, Heading):
        return key

    if isinstance(key, str):
        name = key.strip()
        if name.upper() in Heading.__members__:
            return Heading[name.upper()]
        try:
            key = float(name)
        except ValueError:
            raise ValueTableError(f"Unknown action key: {key!r}") from None

    if isinstance(key, (int, float, np.integer, np.floating)) and not isinstance(key, bool):
        degrees = int(key)
        if degrees == key and degrees in Heading._value2member_map_:
            return Heading(degrees)

    raise ValueTableError(f"Unknown action key: {key!r}")


class QLearner:
    """
    Single-step tabular Q-learning with epsilon-greedy exploration.

    Legal actions are not decided here: they depend on airspace geometry,
    so the owner passes a ``legal_actions(state)`` callable.

    Example:
        >>> learner = QLearner(lambda state: HEADINGS, learning_rate=0.5, discount_rate=0.9)
        >>> learner.update(state, Heading.NORTH, next_state, reward=10.0)
        5.0
        >>> learner.best_action(state)
        <Heading.NORTH: 360>
    """

    def __init__(
        self,
        legal_actions: LegalActionsFn,
        learning_rate: float = LEARNING_RATE,
        exploration_rate: float = EXPLORATION_RATE,
        discount_rate: float = DISCOUNT_RATE,
        epsilon_decay: float = 1.0,
        min_epsilon: float = 0.0,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize the learner.

        Args:
            legal_actions: Callable returning the legal actions of a state
            learning_rate: alpha, in (0, 1]
            exploration_rate: epsilon, in [0, 1]
            discount_rate: gamma, in [0, 1)
            epsilon_decay: Multiplier applied by decay_epsilon()
            min_epsilon: Floor for decay_epsilon()
            rng: Random generator used for exploration and tie-breaking
            seed: Seed for a new generator when ``rng`` is not given
        """
        self.legal_actions = legal_actions
        self.alpha = learning_rate
        self.epsilon = exploration_rate
        self.gamma = discount_rate
        self.epsilon_decay = epsilon_decay
        self.min_epsilon = min_epsilon
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        self.values: ValueTable = {}
        self.frozen = False

    @classmethod
    def from_config(
        cls,
        config: LearningConfig,
        legal_actions: LegalActionsFn,
        rng: Optional[np.random.Generator] = None,
    ) -> "QLearner":
        """Create a learner from a LearningConfig."""
        return cls(
            legal_actions,
            learning_rate=config.learning_rate,
            exploration_rate=config.exploration_rate,
            discount_rate=config.discount_rate,
            epsilon_decay=config.epsilon_decay,
            min_epsilon=config.min_epsilon,
            rng=rng,
            seed=config.seed,
        )

    def _legal_actions(self, state: Optional[AirspaceCell]) -> List[Heading]:
        if state is None:
            return []
        return list(self.legal_actions(state))

    def _choose(self, actions: Sequence[Heading]) -> Heading:
        return actions[int(self.rng.integers(len(actions)))]

    def value(self, state: Optional[AirspaceCell], action: Heading) -> float:
        """
        Get the Q-value of a (state, action) pair.

        Returns 0 if the state has never been seen.
        """
        if state is None or state.id not in self.values:
            return 0.0
        return self.values[state.id].get(action, 0.0)

    def best_value(self, state: Optional[AirspaceCell]) -> float:
        """
        Compute max over legal actions of Q(state, action).

        Returns 0 when there are no legal actions (terminal state).
        """
        legal_actions = self._legal_actions(state)
        if not legal_actions:
            return 0.0
        return max(self.value(state, action) for action in legal_actions)

    def best_action(self, state: Optional[AirspaceCell]) -> Optional[Heading]:
        """
        Compute the best legal action, or None if there is none.

        Ties are broken uniformly at random among all maximizers so that
        no cardinal direction is favoured systematically.
        """
        legal_actions = self._legal_actions(state)
        if not legal_actions:
            return None

        q_max = float("-inf")
        best_actions: List[Heading] = []
        for action in legal_actions:
            q = self.value(state, action)
            if q > q_max:
                q_max = q
                best_actions = [action]
            elif q == q_max:
                best_actions.append(action)

        return self._choose(best_actions)

    def select_action(self, state: Optional[AirspaceCell]) -> Optional[Heading]:
        """
        Choose an action to take in ``state``.

        With probability epsilon a random legal action is taken (explore);
        otherwise the best action (exploit).

        Returns:
            The action, or None if no legal action exists
        """
        legal_actions = self._legal_actions(state)
        if not legal_actions:
            return None

        if self.rng.random() < self.epsilon:
            return self._choose(legal_actions)

        return self.best_action(state)

    def update(
        self,
        state: AirspaceCell,
        action: Heading,
        next_state: Optional[AirspaceCell],
        reward: float = 0.0,
    ) -> float:
        """
        Apply one (state, action) => next_state transition.

        Args:
            state: The state the transition started in
            action: The action taken
            next_state: The state reached, or None if it is unmapped (terminal)
            reward: The reward for this transition

        Returns:
            The updated Q-value
        """
        if self.frozen:
            return self.value(state, action)

        if state.id not in self.values:
            self.values[state.id] = {heading: 0.0 for heading in HEADINGS}

        sample = reward + self.gamma * self.best_value(next_state)
        current = self.value(state, action)
        updated = (1 - self.alpha) * current + self.alpha * sample

        self.values[state.id][Heading(action)] = updated
        return updated

    def decay_epsilon(self) -> float:
        """Decay the exploration rate once; returns the new epsilon."""
        self.epsilon = max(self.min_epsilon, self.epsilon * self.epsilon_decay)
        return self.epsilon

    def freeze(self) -> None:
        """Act greedily and stop writing to the table, e.g. for evaluation."""
        self.epsilon = 0.0
        self.frozen = True

    def load_value_table(self, table: Mapping[str, Mapping[Any, Any]]) -> None:
        """
        Replace the value table wholesale.

        States missing from ``table`` are simply unseen (value 0).

        Args:
            table: state id -> (action -> value), exactly four actions per row

        Raises:
            ValueTableError: If a row does not hold exactly the four actions
                or holds a non-numeric value
        """
        values: ValueTable = {}
        for state_id, row in table.items():
            if not isinstance(row, Mapping):
                raise ValueTableError(f"Row for {state_id!r} is not a mapping")

            parsed: Dict[Heading, float] = {}
            for key, value in row.items():
                action = parse_action(key)
                if isinstance(value, (Mapping, list, tuple, str, bool)) or value is None:
                    raise ValueTableError(f"Value for ({state_id!r}, {key!r}) is not a number: {value!r}")
                parsed[action] = float(value)

            if set(parsed) != set(HEADINGS):
                raise ValueTableError(
                    f"Row for {state_id!r} must hold exactly {[h.name for h in HEADINGS]}, "
                    f"got {sorted(h.name for h in parsed)}"
                )

            values[str(state_id)] = {heading: parsed[heading] for heading in HEADINGS}

        self.values = values
        logger.info(f"Loaded value table with {len(values)} states")

    def dump_value_table(self) -> Dict[str, Dict[int, float]]:
        """
        Snapshot of the value table suitable for persistence.

        Returns:
            state id -> (heading degrees -> value), in the shape accepted by
            load_value_table
        """
        return {
            state_id: {int(heading): float(row[heading]) for heading in HEADINGS}
            for state_id, row in self.values.items()
        }

    def __len__(self) -> int:
        return len(self.values)
