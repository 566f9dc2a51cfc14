"""
Kinematic approach simulator.

A fast, self-contained stand-in for the full flight simulation, used to
train and evaluate the approach-control agents.

Usage:
    from simulation import ApproachSimulator, SimulationConfig
"""

from .events import EventBus
from .physics import SimAircraft, update_aircraft
from .world import ApproachSimulator, SimulationConfig

__all__ = [
    "EventBus",
    "SimAircraft",
    "update_aircraft",
    "ApproachSimulator",
    "SimulationConfig",
]
