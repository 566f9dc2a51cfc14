"""
Constants module for the approach-control learning core.

This module defines all constants used throughout the core,
including the action set, state space resolution, learning rates and
approach geometry. Constants in the sense that once a simulation starts
they are held constant; configuration may override most of them.
"""

from enum import Enum, IntEnum
from typing import List


class Heading(IntEnum):
    """Possible directional moves, as the heading to fly in degrees."""
    NORTH = 360
    EAST = 90
    SOUTH = 180
    WEST = 270


class AircraftCategory(Enum):
    """Aircraft categories."""
    ARRIVAL = "arrival"
    DEPARTURE = "departure"


class AircraftEvent(Enum):
    """Lifecycle notifications published by the simulation."""
    ADD_AIRCRAFT = "add_aircraft"
    AIRSPACE_ENTER = "airspace_enter"
    REMOVE_AIRCRAFT = "remove_aircraft"


# Ordered action set; row initialization and persistence follow this order
HEADINGS: List[Heading] = [Heading.NORTH, Heading.EAST, Heading.SOUTH, Heading.WEST]

# State space resolution
DISTANCE_STEP = 5.0  # nm
HEADING_STEP = 5.0  # degrees, must divide 360

# Learning parameters
LEARNING_RATE = 0.2  # alpha
EXPLORATION_RATE = 0.8  # epsilon
DISCOUNT_RATE = 0.99  # gamma

# Approach interception band, measured from the runway threshold
MIN_INTERCEPT_DISTANCE = 15.0  # nm
MAX_INTERCEPT_DISTANCE = 30.0  # nm
INTERCEPT_CONE_HALF_ANGLE = 10.0  # degrees
MIN_HEADING_DIVERGENCE = 20.0  # degrees
MAX_HEADING_CONVERGENCE = 30.0  # degrees

# Legal action policy
TERMINAL_DISTANCE = 25.0  # nm
TERMINAL_BEARING_TOLERANCE = 45.0  # degrees

# Rewards
INTERCEPT_REWARD = 1000.0
EXIT_AIRSPACE_REWARD = -1000.0
ONGOING_REWARD = 0.0

# Airport defaults
DEFAULT_AIRPORT = "KLAS"
DEFAULT_CTR_RADIUS = 40.0  # nm

# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL = "INFO"
