"""
Training modules for approach-control RL.

This package contains the per-tick orchestration that turns simulation
ticks into Q-learning updates and heading instructions, plus run
configuration logging.
"""

from .agent_model import AgentState
from .agent_controller import AgentController, derive_action, heading_for_bearing
from .config_logger import save_run_config, load_run_config, print_config_summary

__all__ = [
    "AgentState",
    "AgentController",
    "derive_action",
    "heading_for_bearing",
    "save_run_config",
    "load_run_config",
    "print_config_summary",
]
