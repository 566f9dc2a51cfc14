"""
Planar geometry helpers for the airspace.

Positions live in a local flat frame around the airport reference point:
``x`` grows to the east and ``y`` to the north, both in nautical miles.
Bearings and headings are degrees clockwise from north in [0, 360).
Over the size of a terminal control area the flat frame is an adequate
stand-in for great-circle distance and bearing.
"""

from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True)
class Position:
    """A point in the local airspace frame (nm east, nm north)."""
    x: float
    y: float

    def distance_to(self, other: "Position") -> float:
        """Distance to ``other`` in nautical miles."""
        return distance(self, other)

    def bearing_to(self, other: "Position") -> float:
        """Bearing from this position to ``other`` in degrees."""
        return bearing(self, other)

    def offset(self, bearing_deg: float, distance_nm: float) -> "Position":
        """Position reached by travelling ``distance_nm`` along ``bearing_deg``."""
        return offset(self, bearing_deg, distance_nm)


def normalize_heading(degrees: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = float(degrees) % 360.0
    # -1e-14 % 360 rounds to exactly 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def heading_difference(a: float, b: float) -> float:
    """Signed smallest rotation from ``b`` to ``a``, in (-180, 180]."""
    diff = (float(a) - float(b) + 180.0) % 360.0 - 180.0
    return 180.0 if diff == -180.0 else diff


def absolute_heading_difference(a: float, b: float) -> float:
    """Unsigned smallest angle between two headings, in [0, 180]."""
    return abs(heading_difference(a, b))


def is_within(value: float, low: float, high: float) -> bool:
    """Inclusive range check."""
    return low <= value <= high


def distance(a: Position, b: Position) -> float:
    """Euclidean distance between two positions."""
    return float(np.hypot(b.x - a.x, b.y - a.y))


def bearing(a: Position, b: Position) -> float:
    """Bearing from ``a`` to ``b``; 0 when the points coincide."""
    return normalize_heading(np.degrees(np.arctan2(b.x - a.x, b.y - a.y)))


def offset(origin: Position, bearing_deg: float, distance_nm: float) -> Position:
    """Project ``distance_nm`` from ``origin`` along ``bearing_deg``."""
    rad = np.radians(bearing_deg)
    return Position(
        x=float(origin.x + distance_nm * np.sin(rad)),
        y=float(origin.y + distance_nm * np.cos(rad)),
    )


def heading_in_wedge(heading: float, start: float, width: float) -> bool:
    """
    Is ``heading`` inside the half-open wedge ``[start, start + width)``?

    The wedge may wrap through north, e.g. ``[355, 5)``.
    """
    return normalize_heading(heading - start) < width
