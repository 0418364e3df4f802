"""Per-tick input delivered by the tracking harness."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np


def _as_vector(values: Sequence[float], size: int) -> np.ndarray:
    arr = np.array(values, dtype=float).reshape(-1)
    if arr.shape[0] != size:
        raise ValueError(f"Expected {size} components, got {arr.shape[0]}")
    return arr


@dataclass(frozen=True, eq=False)
class PoseSample:
    """Controller pose for a single tick.

    ``timestamp`` is in seconds on the harness clock. ``rotation`` is a
    quaternion ordered (x, y, z, w). ``ready_pressed`` is the grip signal
    that starts a set; ``trigger_pressed`` is the selection event.
    """

    position: np.ndarray
    timestamp: float
    rotation: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0]))
    trigger_pressed: bool = False
    ready_pressed: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _as_vector(self.position, 3))
        object.__setattr__(self, "rotation", _as_vector(self.rotation, 4))
        object.__setattr__(self, "timestamp", float(self.timestamp))

    @classmethod
    def at(
        cls,
        x: float,
        y: float,
        z: float,
        t: float,
        *,
        trigger: bool = False,
        ready: bool = False,
    ) -> "PoseSample":
        """Convenience constructor with identity rotation."""
        return cls(position=(x, y, z), timestamp=t, trigger_pressed=trigger, ready_pressed=ready)
