"""Immutable per-trial output records.

Field sets mirror the three record types of the experiment log: the
overshoot/undershoot summary, the Fitts' law block and the full trial row.
Downstream tooling reads the CSV built from these, so fields are only ever
added, never renamed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np

Vector3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]


class SkipReason(Enum):
    """Why a trial's Fitts metrics were not computed or aggregated."""

    INVALID_MOVEMENT_TIME = "invalid_movement_time"
    INVALID_WIDTH = "invalid_width"
    INVALID_AMPLITUDE = "invalid_amplitude"


def as_tuple(values) -> tuple:
    return tuple(float(v) for v in np.asarray(values, dtype=float).reshape(-1))


@dataclass(frozen=True)
class OvershootUndershootData:
    overshot_count: int = 0
    undershot_count: int = 0
    re_entry_number: int = 0
    overshoot_distance: float = 0.0
    undershoot_distance: float = 0.0
    total_overshoot_distance: float = 0.0
    total_undershoot_distance: float = 0.0
    correction_overshoot_distance: float = 0.0
    correction_undershoot_distance: float = 0.0
    correction_total_distance: float = 0.0


@dataclass(frozen=True)
class FittsLawData:
    """Per-trial, set and block Fitts' law measures.

    Set and block fields are zero except on the trial that closes the set
    (or block) with enough endpoints to compute them.
    """

    # Per trial
    movement_time_ms: float = 0.0
    target_width: float = 0.0
    distance_between_targets: float = 0.0
    id: float = 0.0
    task_precision: int = 0
    throughput: float = 0.0
    hit_miss_value: int = 0
    controller_width: float = 0.0
    aggregate_movement_distance_along_all_axes: float = 0.0
    movement_axis: int = 0

    # Effective measures for the set
    effective_iso_width: float = 0.0
    effective_perpendicular_deviation: float = 0.0
    effective_distance: float = 0.0
    effective_iso_ide: float = 0.0
    effective_iso_throughput: float = 0.0
    effective_width_perpendicular_variability: float = 0.0
    effective_distance_overshoot_undershoot: float = 0.0

    # Set distances
    total_path_length: float = 0.0
    euclidean_deviation: float = 0.0
    current_axis_distance: float = 0.0
    effective_distance_overshoot_undershoot_for_set: float = 0.0
    effective_width_perpendicular_variability_for_set: float = 0.0
    aggregate_movement_distance_along_axis_for_set: float = 0.0
    aggregate_movement_distance_along_all_axes_for_set: float = 0.0
    amplitude_aggregate_for_set: float = 0.0
    amplitude_aggregate_for_block: float = 0.0

    throughput_for_set: float = 0.0

    # Group measures for the block
    throughput_for_block: float = 0.0
    id_for_block: float = 0.0

    # Effective measures for the block
    effective_iso_width_for_block: float = 0.0
    effective_perpendicular_deviation_for_block: float = 0.0
    effective_iso_distance_for_block: float = 0.0
    effective_iso_id_for_block: float = 0.0
    effective_iso_throughput_for_block: float = 0.0
    effective_width_perpendicular_variability_for_block: float = 0.0
    effective_distance_overshoot_undershoot_for_block: float = 0.0
    aggregate_movement_distance_along_axis_for_block: float = 0.0
    aggregate_movement_distance_along_all_axes_for_block: float = 0.0


@dataclass(frozen=True)
class CompletedTrial:
    """Everything measured for one logged selection.

    Produced once when a trial closes and handed to observers; nothing
    downstream mutates it.
    """

    # Basic information
    timestamp: str
    participant_number: int
    block_number: int
    block_letter: str
    block_repetition: bool
    controller_width: float
    distance_to_target_collider: float
    distance_to_target_midpoint: float
    time_taken: float
    is_hit: int
    total_dwell_time: float

    # Overshoot and undershoot
    overshot_count: int
    undershot_count: int
    re_entry_number: int
    overshoot_distance: float
    undershoot_distance: float
    total_overshoot_distance: float
    total_undershoot_distance: float
    correction_distance: float

    # Phase and condition IDs
    phase: int
    distance_id: int
    direction_id: int
    target_id: int

    # Controller state
    controller_position: Vector3
    controller_rotation: Quaternion
    movement_angle: float
    start_controller_position: Vector3
    start_controller_rotation: Quaternion
    controller_position_x_difference: float
    controller_position_y_difference: float
    controller_position_z_difference: float
    controller_rotation_x_difference: float
    controller_rotation_y_difference: float
    controller_rotation_z_difference: float

    target_midpoint: Vector3

    # Trial numbers
    set_number: int
    trial_number_in_set: int
    trial_number_in_block: int
    trial_number_by_id: int
    training_set_number: int
    test_set_number: int

    # Haptic feedback
    haptic_feedback_method: int
    haptic_feedback_strength: int

    fitts_data: FittsLawData

    # Movement distances
    current_axis_distance: float
    difference_to_amplitude: float
    current_axis_net_distance: float
    aggregate_movement_distance_along_axis_for_set: float
    aggregate_movement_distance_along_all_axes_for_set: float
    aggregate_movement_distance_along_axis_for_block: float
    aggregate_movement_distance_along_all_axes_for_block: float
    aggregate_net_movement_distance_along_axis_for_set: float
    aggregate_net_movement_distance_along_axis_for_block: float
    path_curvature: float

    # Euclidean metrics
    euclidean_distance: float
    euclidean_distance_for_set: float
    euclidean_distance_for_block: float
    euclidean_deviation: float
    euclidean_deviation_for_set: float
    euclidean_deviation_for_block: float

    # Speeds
    average_movement_speed: float
    max_speed: float
    min_speed: float

    # Movement phases
    reaction_time: float
    ballistic_time: float
    correction_time: float
    ballistic_distance_along_axis: float
    ballistic_distance_along_all_axes: float
    correction_distance_along_axis: float
    correction_distance_along_all_axes: float

    overshoot_data: OvershootUndershootData = field(default_factory=OvershootUndershootData)
    target_corners: Tuple[Vector3, ...] = ()
    is_last_in_set: bool = False
    is_last_in_block: bool = False
    skip_reason: Optional[SkipReason] = None

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None
