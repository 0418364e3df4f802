# fitts_engine/processing/fitts.py
"""
Fitts' law metrics at trial, set and block scope.

Per trial (Shannon formulation):
    ID = log2(A / W + 1)
    TP = ID / MT[s]

Per set and per block, once at least two endpoints are buffered, the
ISO 9241-411 effective measures are computed from the endpoint scatter:
    We  = 4.133 * SD(endpoint deviation along the movement axis)
    De  = mean |(end - start) . axis|
    IDe = log2((De + We) / We)
    TPe = IDe / mean MT[s]

The group ID and throughput (from summed amplitudes, widths, IDs and
movement times) are a convenience measure and not ISO-conformant.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config.constants import FittsConstants
from ..domain.records import FittsLawData, SkipReason
from .geometry import normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TrialMeasurement:
    """Inputs to the per-trial Fitts computation."""

    movement_time_ms: float
    target_width: float
    amplitude: float
    is_hit: bool
    start_position: np.ndarray
    end_position: np.ndarray
    movement_axis: np.ndarray
    target_centre: np.ndarray
    movement_axis_index: int = 0
    axis_difference: float = 0.0
    controller_width: float = 0.0
    current_axis_distance: float = 0.0
    total_path_length: float = 0.0
    euclidean_deviation: float = 0.0
    aggregate_distance_all_axes: float = 0.0
    is_last_in_set: bool = False
    is_last_in_block: bool = False


@dataclass(frozen=True)
class EffectiveResult:
    """Effective (ISO) measures for one scope.

    ``incomplete`` is set when fewer than two endpoints were available; the
    numeric fields are then 0.
    """

    effective_width: float = 0.0
    perpendicular_deviation: float = 0.0
    effective_distance: float = 0.0
    effective_id: float = 0.0
    incomplete: bool = True


@dataclass
class _ScopeBuffer:
    movement_times: List[float] = field(default_factory=list)
    amplitudes: List[float] = field(default_factory=list)
    widths: List[float] = field(default_factory=list)
    ids: List[float] = field(default_factory=list)
    starts: List[np.ndarray] = field(default_factory=list)
    ends: List[np.ndarray] = field(default_factory=list)
    centres: List[np.ndarray] = field(default_factory=list)
    perpendicular_sum: float = 0.0
    axis_difference_sum: float = 0.0
    amplitude_sum: float = 0.0
    axis_distance_sum: float = 0.0
    all_axes_distance_sum: float = 0.0

    def __len__(self) -> int:
        return len(self.ends)


# ----------------------------------------------------------------------
# Pure formulas
# ----------------------------------------------------------------------
def index_of_difficulty(amplitude: float, width: float) -> float:
    """Shannon ID in bits; 0 for non-positive width."""
    if width <= 0:
        return 0.0
    return math.log2(amplitude / width + 1.0)


def throughput(id_bits: float, movement_time_ms: float) -> float:
    """Bits per second; 0 for non-positive movement time."""
    if movement_time_ms <= 0:
        return 0.0
    return id_bits / (movement_time_ms / 1000.0)


def precision_level(id_bits: float) -> int:
    """Precision class: 1 high, 2 medium, 3 low, 4 very low."""
    if id_bits > FittsConstants.HIGH_PRECISION_ID:
        return 1
    if id_bits > FittsConstants.MEDIUM_PRECISION_ID:
        return 2
    if id_bits > FittsConstants.LOW_PRECISION_ID:
        return 3
    return 4


def group_throughput(ids: Sequence[float], movement_times_ms: Sequence[float]) -> float:
    """Sum of IDs over summed movement time in seconds.

    Empty or mismatched lists and non-positive total time give 0.
    """
    if not movement_times_ms or not ids or len(ids) != len(movement_times_ms):
        return 0.0
    total_seconds = float(np.sum(movement_times_ms)) / 1000.0
    if total_seconds <= 0:
        return 0.0
    return float(np.sum(ids)) / total_seconds


def group_id(amplitudes: Sequence[float], widths: Sequence[float]) -> float:
    """ID from summed amplitudes and widths."""
    total_width = float(np.sum(widths)) if widths else 0.0
    if total_width <= 0:
        return 0.0
    return math.log2(float(np.sum(amplitudes)) / total_width + 1.0)


def effective_id(effective_distance: float, effective_width: float) -> float:
    if effective_width <= 0:
        return 0.0
    return math.log2((effective_distance + effective_width) / effective_width)


def sample_std(values: Sequence[float]) -> float:
    """Sample standard deviation (n - 1); 0 for fewer than two values."""
    if len(values) < FittsConstants.MIN_EFFECTIVE_SAMPLES:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float), ddof=1))


def perpendicular_deviation(delta: np.ndarray, axis: np.ndarray) -> float:
    """Length of the component of ``delta`` orthogonal to ``axis``."""
    residual = delta - float(np.dot(delta, axis)) * axis
    return float(np.linalg.norm(residual))


def effective_measures(
    starts: Sequence[np.ndarray],
    ends: Sequence[np.ndarray],
    centres: Sequence[np.ndarray],
    axis: Sequence[float],
) -> EffectiveResult:
    """ISO effective width, perpendicular deviation, distance and IDe."""
    if len(ends) < FittsConstants.MIN_EFFECTIVE_SAMPLES or len(starts) < len(ends):
        return EffectiveResult()

    unit_axis = normalize(axis)
    deviations = [float(np.dot(end - centre, unit_axis)) for end, centre in zip(ends, centres)]
    deltas = [end - start for start, end in zip(starts, ends)]
    perpendiculars = [perpendicular_deviation(d, unit_axis) for d in deltas]
    distances = [abs(float(np.dot(d, unit_axis))) for d in deltas]

    we = FittsConstants.EFFECTIVE_WIDTH_FACTOR * sample_std(deviations)
    perp = FittsConstants.EFFECTIVE_WIDTH_FACTOR * sample_std(perpendiculars)
    de = float(np.mean(distances))
    return EffectiveResult(
        effective_width=we,
        perpendicular_deviation=perp,
        effective_distance=de,
        effective_id=effective_id(de, we),
        incomplete=False,
    )


# ----------------------------------------------------------------------
# Engine
# ----------------------------------------------------------------------
class FittsMetricsEngine:
    """
    Buffers valid trials per set and per block and computes their metrics.

    The set buffer is cleared with ``reset_set`` when a new set starts; the
    block buffer only with ``reset_block`` at session start and end.
    """

    def __init__(self):
        self._set = _ScopeBuffer()
        self._block = _ScopeBuffer()
        self._set_effective_ids: List[float] = []
        self._set_mean_times: List[float] = []

    @property
    def set_size(self) -> int:
        return len(self._set)

    @property
    def block_size(self) -> int:
        return len(self._block)

    def reset_set(self) -> None:
        self._set = _ScopeBuffer()

    def reset_block(self) -> None:
        self._block = _ScopeBuffer()
        self._set_effective_ids = []
        self._set_mean_times = []

    @staticmethod
    def validate(m: TrialMeasurement) -> Optional[SkipReason]:
        if m.movement_time_ms <= 0:
            return SkipReason.INVALID_MOVEMENT_TIME
        if m.target_width <= 0:
            return SkipReason.INVALID_WIDTH
        if m.amplitude <= 0:
            return SkipReason.INVALID_AMPLITUDE
        return None

    def compute(self, m: TrialMeasurement) -> Tuple[FittsLawData, Optional[SkipReason]]:
        """Compute the metrics for one closed trial.

        Degenerate inputs return an all-zero record and the skip reason;
        nothing is buffered for such a trial.
        """
        reason = self.validate(m)
        if reason is not None:
            logger.warning(
                "Skipping Fitts metrics (%s): MT=%.1f ms, W=%.4f m, A=%.4f m",
                reason.value, m.movement_time_ms, m.target_width, m.amplitude,
            )
            return FittsLawData(), reason

        id_bits = index_of_difficulty(m.amplitude, m.target_width)
        axis = normalize(m.movement_axis)
        start = np.asarray(m.start_position, dtype=float)
        end = np.asarray(m.end_position, dtype=float)
        centre = np.asarray(m.target_centre, dtype=float)
        delta = end - start
        perp = perpendicular_deviation(delta, axis)
        axis_distance = abs(float(np.dot(delta, axis)))
        all_axes_distance = float(np.linalg.norm(delta))

        for scope in (self._set, self._block):
            scope.movement_times.append(m.movement_time_ms)
            scope.amplitudes.append(m.amplitude)
            scope.widths.append(m.target_width)
            scope.ids.append(id_bits)
            scope.starts.append(start)
            scope.ends.append(end)
            scope.centres.append(centre)
            scope.perpendicular_sum += perp
            scope.axis_difference_sum += m.axis_difference
            scope.amplitude_sum += m.amplitude
            scope.axis_distance_sum += axis_distance
            scope.all_axes_distance_sum += all_axes_distance

        set_effective = EffectiveResult()
        set_effective_tp = 0.0
        set_tp = 0.0
        if m.is_last_in_set:
            set_effective = effective_measures(self._set.starts, self._set.ends, self._set.centres, axis)
            if set_effective.incomplete:
                logger.warning("Set closed with %d endpoint(s); effective metrics incomplete", len(self._set))
            else:
                mean_time = float(np.mean(self._set.movement_times))
                self._set_effective_ids.append(set_effective.effective_id)
                self._set_mean_times.append(mean_time)
                set_effective_tp = throughput(set_effective.effective_id, mean_time)
                set_tp = group_throughput(self._set.ids, self._set.movement_times)

        block_effective = EffectiveResult()
        block_id = 0.0
        block_tp = 0.0
        block_effective_tp = 0.0
        if m.is_last_in_block:
            block_effective = effective_measures(self._block.starts, self._block.ends, self._block.centres, axis)
            if block_effective.incomplete:
                logger.warning("Block closed with %d endpoint(s); effective metrics incomplete", len(self._block))
            else:
                block_id = group_id(self._block.amplitudes, self._block.widths)
                block_tp = group_throughput(self._block.ids, self._block.movement_times)
                block_effective_tp = group_throughput(self._set_effective_ids, self._set_mean_times)

        data = FittsLawData(
            movement_time_ms=m.movement_time_ms,
            target_width=m.target_width,
            distance_between_targets=m.amplitude,
            id=id_bits,
            task_precision=precision_level(id_bits),
            throughput=throughput(id_bits, m.movement_time_ms),
            hit_miss_value=1 if m.is_hit else 0,
            controller_width=m.controller_width,
            aggregate_movement_distance_along_all_axes=m.aggregate_distance_all_axes,
            movement_axis=m.movement_axis_index,
            effective_iso_width=set_effective.effective_width,
            effective_perpendicular_deviation=set_effective.perpendicular_deviation,
            effective_distance=set_effective.effective_distance,
            effective_iso_ide=set_effective.effective_id,
            effective_iso_throughput=set_effective_tp,
            effective_width_perpendicular_variability=perp,
            effective_distance_overshoot_undershoot=m.axis_difference,
            total_path_length=m.total_path_length,
            euclidean_deviation=m.euclidean_deviation,
            current_axis_distance=m.current_axis_distance,
            effective_distance_overshoot_undershoot_for_set=self._set.axis_difference_sum,
            effective_width_perpendicular_variability_for_set=self._set.perpendicular_sum,
            aggregate_movement_distance_along_axis_for_set=self._set.axis_distance_sum,
            aggregate_movement_distance_along_all_axes_for_set=self._set.all_axes_distance_sum,
            amplitude_aggregate_for_set=self._set.amplitude_sum,
            amplitude_aggregate_for_block=self._block.amplitude_sum,
            throughput_for_set=set_tp,
            throughput_for_block=block_tp,
            id_for_block=block_id,
            effective_iso_width_for_block=block_effective.effective_width,
            effective_perpendicular_deviation_for_block=block_effective.perpendicular_deviation,
            effective_iso_distance_for_block=block_effective.effective_distance,
            effective_iso_id_for_block=block_effective.effective_id,
            effective_iso_throughput_for_block=block_effective_tp,
            effective_width_perpendicular_variability_for_block=self._block.perpendicular_sum,
            effective_distance_overshoot_undershoot_for_block=self._block.axis_difference_sum,
            aggregate_movement_distance_along_axis_for_block=self._block.axis_distance_sum,
            aggregate_movement_distance_along_all_axes_for_block=self._block.all_axes_distance_sum,
        )
        return data, None
