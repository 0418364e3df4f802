import math

import numpy as np
import pytest

from fitts_engine.config import FittsConstants
from fitts_engine.domain.records import SkipReason
from fitts_engine.processing.fitts import (
    FittsMetricsEngine,
    TrialMeasurement,
    effective_id,
    effective_measures,
    group_id,
    group_throughput,
    index_of_difficulty,
    precision_level,
    sample_std,
    throughput,
)

X_AXIS = np.array([1.0, 0.0, 0.0])


def measurement(end_x, movement_time_ms=500.0, width=0.1, amplitude=0.3, **kwargs):
    return TrialMeasurement(
        movement_time_ms=movement_time_ms,
        target_width=width,
        amplitude=amplitude,
        is_hit=True,
        start_position=np.zeros(3),
        end_position=np.array([end_x, 0.0, 0.0]),
        movement_axis=X_AXIS,
        target_centre=np.array([0.3, 0.0, 0.0]),
        **kwargs,
    )


def test_index_of_difficulty():
    assert index_of_difficulty(0.3, 0.1) == pytest.approx(2.0)
    assert index_of_difficulty(0.3, 0.0) == 0.0


def test_throughput():
    assert throughput(2.0, 500.0) == pytest.approx(4.0)
    assert throughput(2.0, 0.0) == 0.0


@pytest.mark.parametrize("id_bits, level", [(6.5, 1), (5.0, 2), (3.5, 3), (2.0, 4), (3.0, 4)])
def test_precision_level(id_bits, level):
    assert precision_level(id_bits) == level


def test_group_measures():
    assert group_throughput([2.0, 2.0], [500.0, 500.0]) == pytest.approx(4.0)
    assert group_throughput([], []) == 0.0
    assert group_throughput([2.0], [500.0, 500.0]) == 0.0
    assert group_id([0.3, 0.3], [0.1, 0.1]) == pytest.approx(2.0)
    assert effective_id(3.0, 1.0) == pytest.approx(2.0)
    assert effective_id(3.0, 0.0) == 0.0


def test_sample_std_needs_two_values():
    assert sample_std([1.0]) == 0.0
    assert sample_std([1.0, 3.0]) == pytest.approx(math.sqrt(2.0))


def test_effective_measures_from_endpoint_spread():
    starts = [np.zeros(3), np.zeros(3)]
    ends = [np.array([0.31, 0.0, 0.0]), np.array([0.29, 0.0, 0.0])]
    centres = [np.array([0.3, 0.0, 0.0])] * 2
    result = effective_measures(starts, ends, centres, X_AXIS)

    spread = math.sqrt(2.0) * 0.01
    assert not result.incomplete
    assert result.effective_width == pytest.approx(FittsConstants.EFFECTIVE_WIDTH_FACTOR * spread)
    assert result.effective_distance == pytest.approx(0.3)
    assert result.perpendicular_deviation == pytest.approx(0.0)
    assert result.effective_id == pytest.approx(effective_id(0.3, result.effective_width))


def test_effective_measures_incomplete_with_one_endpoint():
    result = effective_measures([np.zeros(3)], [np.ones(3)], [np.ones(3)], X_AXIS)
    assert result.incomplete
    assert result.effective_width == 0.0


class TestFittsMetricsEngine:
    def test_per_trial_values(self):
        engine = FittsMetricsEngine()
        data, reason = engine.compute(measurement(0.3, axis_difference=0.01, controller_width=0.01))

        assert reason is None
        assert data.id == pytest.approx(2.0)
        assert data.throughput == pytest.approx(4.0)
        assert data.task_precision == 4
        assert data.hit_miss_value == 1
        assert data.effective_distance_overshoot_undershoot == pytest.approx(0.01)
        assert data.throughput_for_set == 0.0
        assert engine.set_size == 1
        assert engine.block_size == 1

    @pytest.mark.parametrize(
        "kwargs, reason",
        [
            ({"movement_time_ms": 0.0}, SkipReason.INVALID_MOVEMENT_TIME),
            ({"width": 0.0}, SkipReason.INVALID_WIDTH),
            ({"amplitude": 0.0}, SkipReason.INVALID_AMPLITUDE),
        ],
    )
    def test_degenerate_trials_are_skipped(self, kwargs, reason):
        engine = FittsMetricsEngine()
        data, skip = engine.compute(measurement(0.3, **kwargs))

        assert skip == reason
        assert data.id == 0.0
        assert data.movement_time_ms == 0.0
        assert engine.set_size == 0

    def test_set_close_computes_group_and_effective_values(self):
        engine = FittsMetricsEngine()
        engine.compute(measurement(0.31))
        data, _ = engine.compute(measurement(0.29, movement_time_ms=1500.0, is_last_in_set=True))

        assert data.throughput_for_set == pytest.approx(4.0 / 2.0)
        assert data.effective_iso_width > 0.0
        assert data.effective_iso_throughput == pytest.approx(data.effective_iso_ide / 1.0)
        assert data.amplitude_aggregate_for_set == pytest.approx(0.6)

    def test_set_close_with_one_endpoint_is_incomplete(self):
        engine = FittsMetricsEngine()
        data, reason = engine.compute(measurement(0.3, is_last_in_set=True))

        assert reason is None
        assert data.effective_iso_width == 0.0
        assert data.throughput_for_set == 0.0

    def test_reset_set_keeps_block(self):
        engine = FittsMetricsEngine()
        engine.compute(measurement(0.3))
        engine.reset_set()
        engine.compute(measurement(0.3))

        assert engine.set_size == 1
        assert engine.block_size == 2

    def test_block_close(self):
        engine = FittsMetricsEngine()
        engine.compute(measurement(0.31))
        engine.compute(measurement(0.29, is_last_in_set=True))
        engine.reset_set()
        engine.compute(measurement(0.31))
        data, _ = engine.compute(measurement(0.29, is_last_in_set=True, is_last_in_block=True))

        assert data.id_for_block == pytest.approx(2.0)
        assert data.throughput_for_block == pytest.approx(4.0)
        assert data.effective_iso_throughput_for_block == pytest.approx(data.effective_iso_throughput)
        assert data.amplitude_aggregate_for_block == pytest.approx(1.2)
