"""
Airspace module for approach-control reinforcement learning.

This module provides the discretized state space, the approach
interception test, the reward table and the supporting configuration,
geometry and collaborator contracts used by the learning core.
"""

from .config import (
    ControllerConfig,
    StateSpaceConfig,
    LearningConfig,
    ApproachConfig,
    RewardConfig,
    InterceptHeadingPolicy,
    create_default_config,
    config_from_dict,
    config_to_dict,
    validate_config,
)
from .constants import Heading, HEADINGS, AircraftCategory, AircraftEvent
from .exceptions import (
    ApproachRLError,
    ConfigurationError,
    StateSpaceError,
    ValueTableError,
    ControllerError,
)
from .geometry import Position
from .interface import AircraftView, Airport, Runway, FlightControl, CommandResponse
from .state_space import AirspaceCell, StateSpace
from .feasibility import ApproachFeasibility
from .rewards import ApproachOutcome, RewardTable, classify_outcome
from .metrics import EpisodeMetrics, MetricsTracker

# Public API
__all__ = [
    # Configuration
    "ControllerConfig",
    "StateSpaceConfig",
    "LearningConfig",
    "ApproachConfig",
    "RewardConfig",
    "InterceptHeadingPolicy",
    "create_default_config",
    "config_from_dict",
    "config_to_dict",
    "validate_config",

    # Constants
    "Heading",
    "HEADINGS",
    "AircraftCategory",
    "AircraftEvent",

    # Exceptions
    "ApproachRLError",
    "ConfigurationError",
    "StateSpaceError",
    "ValueTableError",
    "ControllerError",

    # Geometry and collaborator contracts
    "Position",
    "AircraftView",
    "Airport",
    "Runway",
    "FlightControl",
    "CommandResponse",

    # State space, feasibility, rewards
    "AirspaceCell",
    "StateSpace",
    "ApproachFeasibility",
    "ApproachOutcome",
    "RewardTable",
    "classify_outcome",

    # Metrics
    "EpisodeMetrics",
    "MetricsTracker",
]

# Version info
__version__ = "0.1.0"
