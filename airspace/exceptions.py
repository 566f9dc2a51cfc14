"""
Custom exceptions for the approach-control learning core.

This module defines specific exception classes for the faults that are
allowed to escape the core. Per-tick conditions (bad positions, unseen
states, states without legal actions) are not exceptions; they are
logged and degrade to "no command this tick".
"""


class ApproachRLError(Exception):
    """Base exception for all approach-control learning errors."""
    pass


class ConfigurationError(ApproachRLError):
    """Exception raised for configuration validation errors."""
    pass


class StateSpaceError(ConfigurationError):
    """Exception raised when the airspace cannot be tiled with the given geometry."""
    pass


class ValueTableError(ApproachRLError):
    """Exception raised for malformed value tables on load."""
    pass


class ControllerError(ApproachRLError):
    """Exception raised for agent controller lifecycle errors."""
    pass
