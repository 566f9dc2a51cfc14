"""
Reward shaping for the approach-control learner.

The reward is sparse: every observed transition is classified into one
ApproachOutcome, and the outcome alone determines the reward through a
single lookup table built from RewardConfig. There is no explicit step
penalty; the discount rate plays that role.
"""

from enum import Enum
from typing import Dict, Optional

from .config import RewardConfig


class ApproachOutcome(Enum):
    """Result of one observed state transition."""
    INTERCEPTED = "intercepted"
    EXITED_AIRSPACE = "exited_airspace"
    ONGOING = "ongoing"

    @property
    def is_terminal(self) -> bool:
        return self is not ApproachOutcome.ONGOING


def classify_outcome(can_intercept: bool, inside_airspace: bool) -> ApproachOutcome:
    """
    Classify a transition.

    Interception wins over leaving the airspace, which cannot happen
    together with the default geometry anyway.
    """
    if can_intercept:
        return ApproachOutcome.INTERCEPTED
    if not inside_airspace:
        return ApproachOutcome.EXITED_AIRSPACE
    return ApproachOutcome.ONGOING


class RewardTable:
    """
    Maps outcomes to rewards.

    Example:
        >>> table = RewardTable(RewardConfig())
        >>> table.reward(ApproachOutcome.INTERCEPTED)
        1000.0
    """

    def __init__(self, config: Optional[RewardConfig] = None):
        """
        Initialize the reward table.

        Args:
            config: Reward configuration (defaults to RewardConfig())
        """
        self.config = config or RewardConfig()
        self._rewards: Dict[ApproachOutcome, float] = {
            ApproachOutcome.INTERCEPTED: float(self.config.intercept_reward),
            ApproachOutcome.EXITED_AIRSPACE: float(self.config.exit_airspace_reward),
            ApproachOutcome.ONGOING: float(self.config.ongoing_reward),
        }

    def reward(self, outcome: ApproachOutcome) -> float:
        """Reward for ``outcome``."""
        return self._rewards[outcome]

    def as_dict(self) -> Dict[str, float]:
        """Outcome name to reward, for logging."""
        return {outcome.value: reward for outcome, reward in self._rewards.items()}
