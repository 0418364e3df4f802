# fitts_engine/io/trial_table.py
"""
Flatten ``CompletedTrial`` records into the experiment's CSV layout.

Column names and order are those of the trial log consumed by the
existing analysis scripts; do not rename them.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, List, Sequence, Tuple

import pandas as pd

from ..domain.records import CompletedTrial

# Columns read back by ``fitts_engine.evaluation``
COL_PARTICIPANT = "Participant_number"
COL_PHASE = "Phase(0=training_1=testing)"
COL_BLOCK = "Block_number_for_user"
COL_BLOCK_LETTER = "Block_letter"
COL_SET = "Set_number_in_block"
COL_TARGET_WIDTH = "Target_width(m)"
COL_HIT = "Hit_miss(0=miss_1=hit)"
COL_UNDERSHOT = "Total_undershot_to_nearest_target_point_count"
COL_OVERSHOT = "Total_overshot_to_nearest_target_point_count"
COL_MOVEMENT_TIME = "fitts_law_movement_time(ms)"
COL_THROUGHPUT = "fitts_law_throughput(bits/s)"
COL_THROUGHPUT_SET = "fitts_law_throughput_for_set(bits/s)"
COL_THROUGHPUT_BLOCK = "fitts_law_throughput_for_block(bits/s)"
COL_ID = "fitts_law__index_of_difficulty_ID(bits)"
COL_EFFECTIVE_THROUGHPUT = "fitts_law_effective_throughput_ISO_calculation(bits/s)"
COL_EFFECTIVE_THROUGHPUT_BLOCK = "fitts_law_effective_throughput_for_block_ISO_calculation(bits/s)"
COL_AMPLITUDE = "fitts_law_amplitude(m)"

Column = Tuple[str, Callable[[CompletedTrial], Any]]


def _fitts(name: str) -> Callable[[CompletedTrial], Any]:
    return lambda trial: getattr(trial.fitts_data, name)


def _attr(name: str) -> Callable[[CompletedTrial], Any]:
    return lambda trial: getattr(trial, name)


def _item(name: str, index: int) -> Callable[[CompletedTrial], Any]:
    return lambda trial: getattr(trial, name)[index]


def _corner(corner: int, axis: int) -> Callable[[CompletedTrial], Any]:
    def get(trial: CompletedTrial) -> Any:
        if corner < len(trial.target_corners):
            return trial.target_corners[corner][axis]
        return ""
    return get


TRIAL_COLUMNS: List[Column] = [
    # General info
    ("Date_and_time", _attr("timestamp")),
    (COL_PARTICIPANT, _attr("participant_number")),
    (COL_PHASE, _attr("phase")),
    ("Movement_axis(0_horizontal_1_vertical)", _fitts("movement_axis")),
    ("DistanceID(0=training_1=short_2=medium_3=long)", _attr("distance_id")),
    ("DirectionID(0=forward_1=right_2=back_3=left)", _attr("direction_id")),
    (COL_TARGET_WIDTH, _fitts("target_width")),
    ("Controller_width(m)", _attr("controller_width")),
    ("Time(s)_from_previous_target_to_this", _attr("time_taken")),
    (COL_HIT, _attr("is_hit")),
    # Block and set numbers
    (COL_BLOCK, _attr("block_number")),
    (COL_BLOCK_LETTER, _attr("block_letter")),
    ("Block_repetition(0_first_1_repeition)", lambda t: 1 if t.block_repetition else 0),
    (COL_SET, _attr("set_number")),
    ("Training_set_number", _attr("training_set_number")),
    ("Testing_set_number", _attr("test_set_number")),
    ("Trial_number_in_set", _attr("trial_number_in_set")),
    ("Trial_number_in_block", _attr("trial_number_in_block")),
    ("Trial_number_in_block_grouped_by_ID", _attr("trial_number_by_id")),
    # Haptics
    ("Haptic_feedback_method(0_Linear_1_Quadratic_2_Stair_3_Pulse)", _attr("haptic_feedback_method")),
    ("Haptic_feedback_strength_on_first_loop_trigger_press", _attr("haptic_feedback_strength")),
    # Distances to the target
    (
        "Distance_to_closest_point_on_target(controller_anchor_to_closest_target_collider_point)",
        _attr("distance_to_target_collider"),
    ),
    (
        "Distance_to_target_midpoint(controller_anchor_to_target_midpoint_along_movement_axis)",
        _attr("distance_to_target_midpoint"),
    ),
    ("Target_midpoint_along_x_axis_1D", _item("target_midpoint", 0)),
    ("Target_midpoint_along_y_axis_1D", _item("target_midpoint", 1)),
    ("Target_midpoint_along_z_axis_1D", _item("target_midpoint", 2)),
    # Dwell and over/undershooting
    ("Dwell_time(s)(total_time_in_contact_with_target)", _attr("total_dwell_time")),
    (COL_UNDERSHOT, _attr("undershot_count")),
    (COL_OVERSHOT, _attr("overshot_count")),
    ("Target_re_entry_number", _attr("re_entry_number")),
    ("On_trigger_undershoot_distance_to_nearest_target_point(m)", _attr("undershoot_distance")),
    ("On_trigger_overshoot_distance_to_nearest_target_point(m)", _attr("overshoot_distance")),
    ("Total_undershoot_distance_to_nearest_target_point(m)", _attr("total_undershoot_distance")),
    ("Total_overshoot_distance_to_nearest_target_point(m)", _attr("total_overshoot_distance")),
    (
        "Post_contact_correction_distance(m)(distance_moved_along_axis_post_target_contact"
        "_after_first_leaving_contact_until_trigger_press)",
        _attr("correction_distance"),
    ),
    # Controller pose
    ("Start_controller_position_x_axis", _item("start_controller_position", 0)),
    ("Start_controller_position_y_axis", _item("start_controller_position", 1)),
    ("Start_controller_position_z_axis", _item("start_controller_position", 2)),
    ("Start_controller_rotation_x_axis", _item("start_controller_rotation", 0)),
    ("Start_controller_rotation_y_axis", _item("start_controller_rotation", 1)),
    ("Start_controller_rotation_z_axis", _item("start_controller_rotation", 2)),
    ("End_controller_position_x_axis", _item("controller_position", 0)),
    ("End_controller_position_y_axis", _item("controller_position", 1)),
    ("End_controller_position_z_axis", _item("controller_position", 2)),
    ("End_controller_rotation_x_axis", _item("controller_rotation", 0)),
    ("End_controller_rotation_y_axis", _item("controller_rotation", 1)),
    ("End_controller_rotation_z_axis", _item("controller_rotation", 2)),
    ("Controller_position_x_axis_difference", _attr("controller_position_x_difference")),
    ("Controller_position_y_axis_difference", _attr("controller_position_y_difference")),
    ("Controller_position_z_axis_difference", _attr("controller_position_z_difference")),
    ("Controller_rotation_x_axis_difference", _attr("controller_rotation_x_difference")),
    ("Controller_rotation_y_axis_difference", _attr("controller_rotation_y_difference")),
    ("Controller_rotation_z_axis_difference", _attr("controller_rotation_z_difference")),
    ("Movement_angle(3D_degrees_between_movement_vector_and_target_vector)", _attr("movement_angle")),
    # Fitts' law
    (COL_MOVEMENT_TIME, _fitts("movement_time_ms")),
    (COL_THROUGHPUT, _fitts("throughput")),
    (COL_THROUGHPUT_SET, _fitts("throughput_for_set")),
    (COL_THROUGHPUT_BLOCK, _fitts("throughput_for_block")),
    (COL_ID, _fitts("id")),
    ("fitts_law__ID_for_block(bits)", _fitts("id_for_block")),
    ("fitts_law__precision_level(high_1_medium_2_low_3_verylow_4)", _fitts("task_precision")),
    ("fitts_law_effective_width_ISO_calculation(m)", _fitts("effective_iso_width")),
    ("fitts_law_effective_width_for_block_ISO_calculation(m)", _fitts("effective_iso_width_for_block")),
    ("fitts_law_effective_perpendicular_deviation(m)", _fitts("effective_perpendicular_deviation")),
    (
        "fitts_law_effective_perpendicular_deviation_for_block(m)",
        _fitts("effective_perpendicular_deviation_for_block"),
    ),
    ("fitts_law_effective_distance_ISO_calculation(m)", _fitts("effective_distance")),
    ("fitts_law_effective_distance_for_block_ISO_calculation(m)", _fitts("effective_iso_distance_for_block")),
    ("fitts_law_effective_ID_ISO_calculation(bits)", _fitts("effective_iso_ide")),
    ("fitts_law_effective_ID_for_block_ISO_calculation(bits)", _fitts("effective_iso_id_for_block")),
    (COL_EFFECTIVE_THROUGHPUT, _fitts("effective_iso_throughput")),
    (COL_EFFECTIVE_THROUGHPUT_BLOCK, _fitts("effective_iso_throughput_for_block")),
    (
        "fitts_law_effective_width_perpendicular_variability(m)",
        _fitts("effective_width_perpendicular_variability"),
    ),
    (
        "fitts_law_effective_width_perpendicular_variability_aggregate_for_set(m)",
        _fitts("effective_width_perpendicular_variability_for_set"),
    ),
    (
        "fitts_law_effective_width_perpendicular_variability_aggregate_for_block(m)",
        _fitts("effective_width_perpendicular_variability_for_block"),
    ),
    (
        "fitts_law_effective_distance_overshoot_undershoot(negative=overshoot_positive=undershoot)",
        _fitts("effective_distance_overshoot_undershoot"),
    ),
    (
        "fitts_law_effective_distance_overshoot_undershoot_aggregate_for_set"
        "(negative=overshoot_positive=undershoot)",
        _fitts("effective_distance_overshoot_undershoot_for_set"),
    ),
    (
        "fitts_law_effective_distance_overshoot_undershoot_aggregate_for_block"
        "(negative=overshoot_positive=undershoot)",
        _fitts("effective_distance_overshoot_undershoot_for_block"),
    ),
    # Movement along the axes
    (COL_AMPLITUDE, _fitts("distance_between_targets")),
    (
        "Euclidean_distance_along_axis_net_displacement_movement_distance_along_movement_axis(m)"
        "(straight_line_distance_along_the_axis_doesnt_account_for_overshot_correcting)",
        _attr("current_axis_net_distance"),
    ),
    ("Movement_along_movement_axis(m)", _attr("current_axis_distance")),
    (
        "Movement_difference_along_axis_over_or_under_amplitude"
        "(negative_less_than_amplitude_positive_over_amplitude)",
        _attr("difference_to_amplitude"),
    ),
    ("AmplitudeAggregateForSet(m)", _fitts("amplitude_aggregate_for_set")),
    (
        "Euclidean_distance_along_axis_net_displacement_aggregate_movement_distance_along_movement_axis_for_set(m)",
        _attr("aggregate_net_movement_distance_along_axis_for_set"),
    ),
    ("Aggregate_movement_distance_along_movement_axis_for_set(m)", _attr("aggregate_movement_distance_along_axis_for_set")),
    ("AmplitudeAggregateForBlock(m)", _fitts("amplitude_aggregate_for_block")),
    (
        "Euclidean_distance_along_axis_net_displacement_aggregate_movement_distance_along_movement_axis_for_block(m)",
        _attr("aggregate_net_movement_distance_along_axis_for_block"),
    ),
    (
        "Aggregate_movement_distance_along_movement_axis_for_block(m)",
        _attr("aggregate_movement_distance_along_axis_for_block"),
    ),
    ("Movement_distance_along_all_axes(Path_length)(m)", _fitts("total_path_length")),
    (
        "Aggregate_movement_distance_along_all_axes_for_set(m)",
        _attr("aggregate_movement_distance_along_all_axes_for_set"),
    ),
    (
        "Aggregate_movement_distance_along_all_axes_for_block(m)",
        _attr("aggregate_movement_distance_along_all_axes_for_block"),
    ),
    (
        "Euclidean_distance(straight_line_distance_between_start_and_end_positions(m))",
        _attr("euclidean_distance"),
    ),
    (
        "Euclidean_distance_for_set(straight_line_distance_between_start_and_end_positions(m))",
        _attr("euclidean_distance_for_set"),
    ),
    (
        "Euclidean_distance_for_block(straight_line_distance_between_start_and_end_positions(m))",
        _attr("euclidean_distance_for_block"),
    ),
    (
        "Euclidean_deviation(deviation_from_ideal_straight_line_of_actual_movement(m))",
        _fitts("euclidean_deviation"),
    ),
    (
        "Euclidean_deviation_for_set(deviation_from_ideal_straight_line_of_actual_movement(m))",
        _attr("euclidean_deviation_for_set"),
    ),
    (
        "Euclidean_deviation_for_block(deviation_from_ideal_straight_line_of_actual_movement(m))",
        _attr("euclidean_deviation_for_block"),
    ),
    ("Path_curvature(deviation_from_amplitude_straight_line_of_1)", _attr("path_curvature")),
    # Speeds and times
    ("Average_movement_speed(m/s)", _attr("average_movement_speed")),
    ("Max_speed(m/s)", _attr("max_speed")),
    ("Min_speed(m/s)", _attr("min_speed")),
    ("Reaction_time(s)", _attr("reaction_time")),
    ("Ballistic_time(s)", _attr("ballistic_time")),
    ("Correction_time(s)", _attr("correction_time")),
    # Ballistic and correction distances
    ("Ballistic_distance_along_movement_axis", _attr("ballistic_distance_along_axis")),
    ("Ballistic_distance_along_all_axes", _attr("ballistic_distance_along_all_axes")),
    ("Correction_distance_along_movement_axis", _attr("correction_distance_along_axis")),
    ("Correction_distance_along_all_axes", _attr("correction_distance_along_all_axes")),
]

# Target box corners
TRIAL_COLUMNS.extend(
    (f"Target_corner{corner + 1}_{axis_name}", _corner(corner, axis))
    for corner in range(8)
    for axis, axis_name in enumerate("XYZ")
)

TRIAL_HEADERS: List[str] = [name for name, _ in TRIAL_COLUMNS]


def trial_to_row(trial: CompletedTrial, columns: Sequence[Column] = TRIAL_COLUMNS) -> List[Any]:
    """Values of one trial in CSV column order."""
    return [get(trial) for _, get in columns]


def trials_to_frame(trials: Iterable[CompletedTrial]) -> pd.DataFrame:
    """Build a DataFrame with one row per trial and the trial-log headers."""
    rows = [trial_to_row(trial) for trial in trials]
    return pd.DataFrame(rows, columns=TRIAL_HEADERS)
