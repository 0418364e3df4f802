"""Movement analytics: axis geometry, sample buffer, detector, metrics and haptics."""

from .geometry import (
    movement_axis,
    movement_axis_index,
    direction_vector,
    opposite_direction,
    closest_point_on_box,
    axis_distance_to_boundary,
    axis_distance_to_midpoint,
    axis_centre,
    is_contacting,
    box_corners,
    movement_angle,
    quaternion_to_euler,
    delta_angle,
)
from .movement import MovementSampleBuffer, MovementSummary
from .overshoot import OvershootUndershootDetector
from .fitts import (
    FittsMetricsEngine,
    TrialMeasurement,
    EffectiveResult,
    index_of_difficulty,
    throughput,
    precision_level,
    group_throughput,
    group_id,
    effective_measures,
)
from .haptics import HapticIntensityCalculator, PulseModulator

__all__ = [
    "movement_axis",
    "movement_axis_index",
    "direction_vector",
    "opposite_direction",
    "closest_point_on_box",
    "axis_distance_to_boundary",
    "axis_distance_to_midpoint",
    "axis_centre",
    "is_contacting",
    "box_corners",
    "movement_angle",
    "quaternion_to_euler",
    "delta_angle",
    "MovementSampleBuffer",
    "MovementSummary",
    "OvershootUndershootDetector",
    "FittsMetricsEngine",
    "TrialMeasurement",
    "EffectiveResult",
    "index_of_difficulty",
    "throughput",
    "precision_level",
    "group_throughput",
    "group_id",
    "effective_measures",
    "HapticIntensityCalculator",
    "PulseModulator",
]
