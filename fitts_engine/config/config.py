# fitts_engine/config/config.py
"""
Configuration classes for the trial engine.

Defines every tunable parameter for:
  - Target layout (numeric distance and width tables)
  - Overshoot/undershoot detection
  - Movement analytics (speed filtering, reaction time)
  - Haptic intensity growth patterns
  - Session progression (quotas, skip flags, pair lists, shuffling)

Example:
    >>> from fitts_engine.config import SessionConfig, DetectorConfig
    >>>
    >>> cfg = SessionConfig(
    ...     participant_number=7,
    ...     skip_training=True,
    ...     detector=DetectorConfig(cooldown_s=0.05),
    ...     shuffle_seed=42,
    ... )
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .constants import SessionDefaults
from ..domain.targets import (
    Direction,
    DistanceClass,
    GrowthPattern,
    TargetPairSpec,
    WidthClass,
)


def _default_distances() -> Dict[DistanceClass, float]:
    return {
        DistanceClass.TRAINING: 0.12,
        DistanceClass.SHORT: 0.05,
        DistanceClass.MEDIUM: 0.1,
        DistanceClass.LONG: 0.15,
    }


def _default_widths() -> Dict[WidthClass, float]:
    return {
        WidthClass.TRAINING: 0.025,
        WidthClass.SMALL: 0.015,
        WidthClass.LARGE: 0.035,
    }


@dataclass(frozen=True)
class TargetTables:
    """Numeric lookup tables used when laying out target pairs."""

    # Distance of each target from the midpoint (m)
    distances: Dict[DistanceClass, float] = field(default_factory=_default_distances)

    # Target extent along the movement axis (m)
    widths: Dict[WidthClass, float] = field(default_factory=_default_widths)

    # Extent of the target box on the two off-axis dimensions
    off_axis_scale: float = 50.0

    def distance_for(self, distance: DistanceClass) -> float:
        return float(self.distances.get(distance, 0.0))

    def width_for(self, width: WidthClass) -> float:
        return float(self.widths.get(width, 0.0))


@dataclass(frozen=True)
class DetectorConfig:
    """Overshoot/undershoot detector settings."""

    # Minimum time between two counted over/undershoot events (s).
    # 0 counts every boundary crossing.
    cooldown_s: float = 0.0


@dataclass(frozen=True)
class MovementConfig:
    """Movement sample buffer and reaction-time settings."""

    # Speeds at or below this are treated as noise for the minimum speed (m/s)
    min_speed_threshold: float = 0.01

    # Cosine between the step direction and the target direction that
    # counts as "moving towards the target" for reaction time
    direction_threshold: float = 0.5

    # Low-pass filter weight for the monitoring speed
    speed_filter_alpha: float = 0.2


@dataclass(frozen=True)
class HapticConfig:
    """Growth-pattern parameters for the haptic intensity request."""

    min_percentage: int = 10
    max_percentage: int = 100

    # Stair pattern: number of steps and percentage added per step
    stair_steps: int = 6
    stair_size: float = 18.0

    # Floor for the reference distance (m)
    minimum_distance: float = 0.01

    # Pulse pattern toggle interval, far to near (s)
    max_pulse_interval: float = 0.5
    min_pulse_interval: float = 0.1


def _default_training_pairs() -> Tuple[TargetPairSpec, ...]:
    return (
        TargetPairSpec(Direction.RIGHT, WidthClass.TRAINING, DistanceClass.TRAINING),
    )


def _default_testing_pairs() -> Tuple[TargetPairSpec, ...]:
    return tuple(
        TargetPairSpec(Direction.RIGHT, width, distance)
        for width in (WidthClass.SMALL, WidthClass.LARGE)
        for distance in (DistanceClass.SHORT, DistanceClass.MEDIUM, DistanceClass.LONG)
    )


@dataclass(frozen=True)
class SessionConfig:
    """
    Complete configuration for one participant session (one block).
    """

    participant_number: int = 1
    block_number: int = 1

    # True when the participant repeats a block
    block_repetition: bool = False

    # Logged selections required per set (the baseline selection is extra)
    training_trials: int = SessionDefaults.TRAINING_TRIALS
    testing_trials: int = SessionDefaults.TESTING_TRIALS

    # Logged selections in a full block, training included
    trials_in_block: int = SessionDefaults.TRIALS_IN_BLOCK

    skip_training: bool = False
    skip_testing: bool = False

    # Radius of the controller contact sphere (m)
    controller_width: float = SessionDefaults.CONTROLLER_WIDTH

    # Minimum time between two accepted trigger presses (s)
    input_delay_s: float = SessionDefaults.INPUT_DELAY

    # Seed for the testing-pair shuffle; None draws from system entropy
    shuffle_seed: Optional[int] = None

    training_pairs: Tuple[TargetPairSpec, ...] = field(default_factory=_default_training_pairs)
    testing_pairs: Tuple[TargetPairSpec, ...] = field(default_factory=_default_testing_pairs)

    tables: TargetTables = field(default_factory=TargetTables)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    movement: MovementConfig = field(default_factory=MovementConfig)
    haptics: HapticConfig = field(default_factory=HapticConfig)

    def quota_for(self, training: bool) -> int:
        return self.training_trials if training else self.testing_trials
