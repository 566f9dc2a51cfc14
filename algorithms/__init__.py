"""Learning algorithms"""

from .q_learning import QLearner, parse_action

__all__ = ["QLearner", "parse_action"]
