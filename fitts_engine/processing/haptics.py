# fitts_engine/processing/haptics.py
"""
Haptic intensity request from the distance to the active target.

The engine only computes the requested strength (integer percentage);
driving the actuators is left to the caller.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

from ..config.config import HapticConfig
from ..domain.targets import GrowthPattern

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class HapticIntensityCalculator:
    """Maps a distance ratio to a strength for the four growth patterns."""

    def __init__(self, config: Optional[HapticConfig] = None):
        self.config = config or HapticConfig()
        self.reference_distance = 1.0

    def set_reference_distance(self, distance: float) -> None:
        """Distance that maps to the weakest feedback, floored at the minimum."""
        self.reference_distance = max(float(distance), self.config.minimum_distance)

    def distance_ratio(self, distance_to_target: float) -> float:
        reference = max(self.reference_distance, self.config.minimum_distance)
        return _clamp(distance_to_target / reference, 0.0, 1.0)

    def stair_percentage(self, ratio: float) -> float:
        steps = self.config.stair_steps
        step = int(_clamp(math.floor((1.0 - ratio) * steps), 0, steps - 1))
        return self.config.min_percentage + step * self.config.stair_size

    def percentage(self, pattern: GrowthPattern, ratio: float) -> int:
        if pattern == GrowthPattern.QUADRATIC:
            value = (1.0 - ratio ** 2) * 100.0
        elif pattern == GrowthPattern.STAIR:
            value = self.stair_percentage(ratio)
        else:
            # Linear, and pulse modulates a linear strength over time
            value = (1.0 - ratio) * 100.0
        return int(_clamp(int(value), self.config.min_percentage, self.config.max_percentage))

    def strength(self, pattern: GrowthPattern, distance_to_target: float) -> int:
        return self.percentage(pattern, self.distance_ratio(distance_to_target))


class PulseModulator:
    """On/off toggling for the pulse pattern; nearer targets pulse faster."""

    def __init__(self, config: Optional[HapticConfig] = None):
        self.config = config or HapticConfig()
        self.timer = 0.0
        self.is_on = False

    def reset(self) -> None:
        self.timer = 0.0
        self.is_on = False

    def interval(self, percentage: int) -> float:
        t = _clamp(percentage / 100.0, 0.0, 1.0)
        cfg = self.config
        return cfg.max_pulse_interval + (cfg.min_pulse_interval - cfg.max_pulse_interval) * t

    def step(self, percentage: int, dt: float) -> int:
        """Advance the timer by ``dt`` and return the output strength."""
        self.timer += max(dt, 0.0)
        if self.timer >= self.interval(percentage):
            self.timer = 0.0
            self.is_on = not self.is_on
        return self.config.max_percentage if self.is_on else 0
