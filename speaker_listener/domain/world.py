"""World model: slot objects, the hidden rule, and ground-plane geometry.

Positions are ``(x, y, z)`` tuples with ``y`` the fixed height; all distance
and direction math happens on the x/z ground plane.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum

from speaker_listener.config.constants import COLOR_NAMES, SHAPE_NAMES

Vec3 = tuple[float, float, float]


class Color(IntEnum):
    RED = 0
    GREEN = 1
    BLUE = 2

    @property
    def label(self) -> str:
        return COLOR_NAMES[self.value]


class Shape(IntEnum):
    SQUARE = 0
    CIRCLE = 1
    TRIANGLE = 2

    @property
    def label(self) -> str:
        return SHAPE_NAMES[self.value]


@dataclass
class Slot:
    """One candidate object. ``index`` is stable for the whole episode."""

    index: int
    color: Color = Color.RED
    shape: Shape = Shape.SQUARE
    position: Vec3 = (0.0, 0.0, 0.0)

    def matches(self, color: Color, shape: Shape) -> bool:
        return self.color == color and self.shape == shape


@dataclass(frozen=True)
class Rule:
    """Hidden selection rule for one episode."""

    target_color: Color
    target_shape: Shape
    require_no_red: bool


def planar_distance(a: Vec3, b: Vec3) -> float:
    """Euclidean distance on the x/z plane."""
    return math.hypot(b[0] - a[0], b[2] - a[2])


def heading_vector(heading_deg: float) -> tuple[float, float]:
    """Unit (x, z) vector for a heading; 0 faces +z, 90 faces +x."""
    rad = math.radians(heading_deg)
    return (math.sin(rad), math.cos(rad))


def to_local(direction: tuple[float, float], heading_deg: float) -> tuple[float, float]:
    """Project a world (x, z) direction into the (right, forward) frame of a heading."""
    fx, fz = heading_vector(heading_deg)
    rx, rz = fz, -fx
    dx, dz = direction
    return (dx * rx + dz * rz, dx * fx + dz * fz)
