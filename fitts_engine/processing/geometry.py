# fitts_engine/processing/geometry.py
"""
Axis geometry helpers.

Resolves the 1-D movement axis of a target pair and projects 3-D positions
and displacements onto it. All functions are pure and operate on numpy
arrays of shape (3,).

Sign convention for boundary distances: negative means the tracked point
is beyond the target (overshoot), positive means it has not reached the
target yet (undershoot), zero means it is on or inside the boundary along
the axis.
"""
from __future__ import annotations

import logging
import math
from typing import Sequence, Tuple

import numpy as np

from ..domain.targets import AxisType, Direction, TargetGeometry

logger = logging.getLogger(__name__)

FORWARD = np.array([0.0, 0.0, 1.0])
RIGHT = np.array([1.0, 0.0, 0.0])

_DIRECTION_VECTORS = {
    Direction.RIGHT: (1.0, 0.0, 0.0),
    Direction.LEFT: (-1.0, 0.0, 0.0),
    Direction.FORWARD: (0.0, 0.0, 1.0),
    Direction.BACK: (0.0, 0.0, -1.0),
}

_OPPOSITES = {
    Direction.FORWARD: Direction.BACK,
    Direction.BACK: Direction.FORWARD,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

# Below this length a vector is treated as zero
_EPSILON = 1e-9


def _vec(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float).reshape(3)


def normalize(vector: Sequence[float]) -> np.ndarray:
    """Unit vector in the direction of ``vector``; zero vector stays zero."""
    v = _vec(vector)
    norm = float(np.linalg.norm(v))
    if norm < _EPSILON:
        return np.zeros(3)
    return v / norm


def movement_axis(center1: Sequence[float], center2: Sequence[float]) -> np.ndarray:
    """Unit vector from target 1 to target 2.

    Coincident centres fall back to the forward axis.
    """
    axis = normalize(_vec(center2) - _vec(center1))
    if not axis.any():
        logger.warning("Target centres coincide; falling back to the forward movement axis")
        return FORWARD.copy()
    return axis


def movement_axis_index(axis: Sequence[float]) -> int:
    """0 (horizontal) when the axis is dominated by x, otherwise 1 (vertical)."""
    a = _vec(axis)
    return AxisType.HORIZONTAL.value if abs(a[0]) > abs(a[2]) else AxisType.VERTICAL.value


def direction_vector(direction: Direction) -> np.ndarray:
    """World-space unit vector pointing from the midpoint towards ``direction``."""
    values = _DIRECTION_VECTORS.get(direction)
    if values is None:
        logger.warning("Unsupported direction %s; using a zero direction vector", direction)
        return np.zeros(3)
    return np.array(values)


def axis_unit_vector(direction: Direction) -> np.ndarray:
    """Unsigned axis for a direction: +x for left/right, +z for forward/back."""
    if direction in (Direction.LEFT, Direction.RIGHT):
        return RIGHT.copy()
    if direction in (Direction.FORWARD, Direction.BACK):
        return FORWARD.copy()
    logger.warning("Unsupported direction %s; no movement axis", direction)
    return np.zeros(3)


def opposite_direction(direction: Direction) -> Direction:
    return _OPPOSITES.get(direction, Direction.OFF)


def closest_point_on_box(position: Sequence[float], geometry: TargetGeometry) -> np.ndarray:
    """Closest point of an axis-aligned box to ``position`` (itself when inside)."""
    low = geometry.center - geometry.half_extents
    high = geometry.center + geometry.half_extents
    return np.clip(_vec(position), low, high)


def axis_distance_to_boundary(
    direction: Direction,
    position: Sequence[float],
    geometry: TargetGeometry,
) -> float:
    """Signed distance to the nearest box point, projected on ``direction``."""
    p = _vec(position)
    to_boundary = closest_point_on_box(p, geometry) - p
    return float(np.dot(to_boundary, direction_vector(direction)))


def axis_distance_to_midpoint(
    direction: Direction,
    position: Sequence[float],
    midpoint: Sequence[float],
) -> float:
    """Signed distance to a target midpoint, projected on ``direction``."""
    to_midpoint = _vec(midpoint) - _vec(position)
    return float(np.dot(to_midpoint, direction_vector(direction)))


def axis_distance_between(
    position1: Sequence[float],
    position2: Sequence[float],
    direction: Direction,
) -> float:
    """Distance between two points along the axis of ``direction``.

    Unknown directions use the full Euclidean distance.
    """
    p1, p2 = _vec(position1), _vec(position2)
    if direction in (Direction.LEFT, Direction.RIGHT):
        return float(abs(p1[0] - p2[0]))
    if direction in (Direction.FORWARD, Direction.BACK):
        return float(abs(p1[2] - p2[2]))
    return float(np.linalg.norm(p1 - p2))


def axis_centre(center: Sequence[float], axis_index: int) -> np.ndarray:
    """Keep only the movement-axis component of a target centre."""
    c = _vec(center)
    result = np.zeros(3)
    if axis_index == AxisType.HORIZONTAL.value:
        result[0] = c[0]
    elif axis_index == AxisType.VERTICAL.value:
        result[2] = c[2]
    else:
        logger.warning("Unknown movement axis %s; using the full target centre", axis_index)
        return c.copy()
    return result


def is_contacting(position: Sequence[float], geometry: TargetGeometry, radius: float) -> bool:
    """True when a sphere of ``radius`` at ``position`` overlaps the box."""
    p = _vec(position)
    gap = float(np.linalg.norm(closest_point_on_box(p, geometry) - p))
    return gap < radius


def box_corners(geometry: TargetGeometry) -> Tuple[Tuple[float, float, float], ...]:
    """The 8 box corners, x slowest and z fastest, negative side first."""
    corners = []
    for sx in (-1.0, 1.0):
        for sy in (-1.0, 1.0):
            for sz in (-1.0, 1.0):
                offset = geometry.half_extents * np.array([sx, sy, sz])
                corner = geometry.center + offset
                corners.append(tuple(float(v) for v in corner))
    return tuple(corners)


def angle_between(a: Sequence[float], b: Sequence[float]) -> float:
    """Unsigned angle between two vectors in degrees; 0 if either is zero."""
    ua, ub = normalize(a), normalize(b)
    if not ua.any() or not ub.any():
        return 0.0
    cos = float(np.clip(np.dot(ua, ub), -1.0, 1.0))
    return math.degrees(math.acos(cos))


def movement_angle(
    start: Sequence[float],
    end: Sequence[float],
    target_centre: Sequence[float],
    axis_index: int,
) -> float:
    """Angle between the actual movement and the ideal straight line to the target.

    The target centre is flattened onto the start position's off-axis
    coordinates so the reference vector runs along the movement axis.
    """
    s = _vec(start)
    target = _vec(target_centre).copy()
    if axis_index == AxisType.VERTICAL.value:
        target[0] = s[0]
        target[1] = s[1]
    else:
        target[1] = s[1]
        target[2] = s[2]
    return angle_between(_vec(end) - s, target - s)


def quaternion_to_euler(rotation: Sequence[float]) -> np.ndarray:
    """Euler angles (degrees, 0-360) of an (x, y, z, w) quaternion.

    Uses the Z-X-Y rotation order of the tracking runtime, so the values
    match the angles reported alongside the raw controller pose.
    """
    x, y, z, w = (float(v) for v in np.asarray(rotation, dtype=float).reshape(4))
    sin_x = float(np.clip(2.0 * (w * x - y * z), -1.0, 1.0))
    ex = math.asin(sin_x)
    ey = math.atan2(2.0 * (w * y + x * z), 1.0 - 2.0 * (x * x + y * y))
    ez = math.atan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (x * x + z * z))
    return np.degrees(np.array([ex, ey, ez])) % 360.0


def delta_angle(current: float, target: float) -> float:
    """Shortest signed difference between two angles in degrees."""
    delta = (target - current) % 360.0
    if delta > 180.0:
        delta -= 360.0
    return float(delta)
