"""Target conditions, resolved target geometry and block labelling."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np


class Phase(Enum):
    """Experiment phase; the integer value is written to the trial log."""

    TRAINING = 0
    TESTING = 1


class Direction(Enum):
    """Direction of a target from the midpoint between the pair."""

    FORWARD = 0  # +z
    RIGHT = 1  # +x
    BACK = 2  # -z
    LEFT = 3  # -x
    OFF = 4


class WidthClass(Enum):
    TRAINING = 0
    SMALL = 1
    LARGE = 2


class DistanceClass(Enum):
    TRAINING = 0
    SHORT = 1
    MEDIUM = 2
    LONG = 3


class AxisType(Enum):
    HORIZONTAL = 0  # x axis
    VERTICAL = 1  # z axis


class GrowthPattern(Enum):
    """Haptic growth pattern used while approaching a target."""

    LINEAR = 0
    QUADRATIC = 1
    STAIR = 2
    PULSE = 3


_SMALL_IDS = {DistanceClass.SHORT: 1, DistanceClass.MEDIUM: 2, DistanceClass.LONG: 3}
_LARGE_IDS = {DistanceClass.SHORT: 4, DistanceClass.MEDIUM: 5, DistanceClass.LONG: 6}


def compute_target_id(width: WidthClass, distance: DistanceClass) -> int:
    """Map a width/distance condition onto its target ID (0-6, -1 if undefined).

    ID 0 is reserved for the training condition; 1-3 are small targets at
    short/medium/long distance and 4-6 the large ones.
    """
    if width == WidthClass.TRAINING and distance == DistanceClass.TRAINING:
        return 0
    if width == WidthClass.SMALL:
        return _SMALL_IDS.get(distance, -1)
    if width == WidthClass.LARGE:
        return _LARGE_IDS.get(distance, -1)
    return -1


def block_letter(axis: AxisType, pattern: GrowthPattern) -> str:
    """Return the block label for a movement axis and growth pattern."""
    if pattern == GrowthPattern.QUADRATIC:
        letters = ("A", "B")
    elif pattern == GrowthPattern.PULSE:
        letters = ("C", "D")
    elif pattern == GrowthPattern.LINEAR:
        letters = ("E", "F")
    elif pattern == GrowthPattern.STAIR:
        letters = ("G", "H")
    else:
        return ""
    return letters[0] if axis == AxisType.HORIZONTAL else letters[1]


@dataclass(frozen=True)
class TargetPairSpec:
    """A configured target pair before layout."""

    first_direction: Direction
    width: WidthClass
    distance: DistanceClass
    growth_pattern: GrowthPattern = GrowthPattern.LINEAR


@dataclass(frozen=True, eq=False)
class TargetGeometry:
    """World-space box for a single target."""

    center: np.ndarray
    half_extents: np.ndarray
    direction: Direction

    @property
    def width(self) -> float:
        """Extent of the box along its own movement axis."""
        if self.direction in (Direction.LEFT, Direction.RIGHT):
            return float(self.half_extents[0] * 2.0)
        if self.direction in (Direction.FORWARD, Direction.BACK):
            return float(self.half_extents[2] * 2.0)
        return float(self.half_extents[0] * 2.0)


@dataclass(frozen=True, eq=False)
class TargetPair:
    """A laid-out target pair: two opposite targets sharing width and distance."""

    spec: TargetPairSpec
    target_id: int
    pair_index: int
    direction1: Direction
    direction2: Direction
    geometry1: TargetGeometry
    geometry2: TargetGeometry

    @property
    def growth_pattern(self) -> GrowthPattern:
        return self.spec.growth_pattern

    @property
    def distance(self) -> DistanceClass:
        return self.spec.distance

    @property
    def amplitude(self) -> float:
        """Straight-line distance between the two target centres."""
        return float(np.linalg.norm(self.geometry2.center - self.geometry1.center))

    def geometry_for(self, index: int) -> TargetGeometry:
        return self.geometry1 if index == 0 else self.geometry2

    def direction_for(self, index: int) -> Direction:
        return self.direction1 if index == 0 else self.direction2

    def geometries(self) -> Tuple[TargetGeometry, TargetGeometry]:
        return self.geometry1, self.geometry2
