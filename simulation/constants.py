"""
Constants for the kinematic approach simulator.

This module defines all constants used by the simulator,
ensuring consistency and easy configuration.
"""

from typing import List

# Aircraft performance
AIRCRAFT_SPEED_KNOTS = 250.0
TURN_RATE_DEG_PER_SEC = 3.0  # standard rate turn

# Time
DEFAULT_TICK_SECONDS = 5.0
DEFAULT_MAX_TICKS = 2000

# Traffic
DEFAULT_MAX_ARRIVALS = 4  # concurrent
DEFAULT_TOTAL_ARRIVALS = 12  # per episode
DEFAULT_SPAWN_INTERVAL_TICKS = 40
SPAWN_MARGIN_NM = 1.0  # spawn this far inside the airspace boundary
REMOVAL_MARGIN_NM = 5.0  # remove this far outside the airspace boundary
SPAWN_HEADING_JITTER = 30.0  # degrees either side of direct-to-airport
SPAWN_ALTITUDE_RANGE = (6000.0, 11000.0)  # feet

# Default airport layout
DEFAULT_CTR_RADIUS = 40.0  # nm
DEFAULT_RUNWAY_NAME = "25L"
DEFAULT_RUNWAY_HEADING = 250.0
DEFAULT_RUNWAY_THRESHOLD = (0.0, 0.0)
DEFAULT_GLIDESLOPE_INTERCEPT_ALTITUDE = 3000.0  # feet

# Aircraft Callsigns
CALLSIGNS: List[str] = [
    "AAL123", "UAL456", "DAL789", "SWA101", "FDX202",
    "JBU303", "ASA404", "SKW505", "NKS606", "FFT707",
    "AAL808", "UAL909", "DAL111", "SWA222", "FDX333",
    "JBU444", "ASA555", "SKW666", "NKS777", "FFT888",
]
