import pytest

from fitts_engine.processing.movement import MovementSampleBuffer

X_AXIS = (1.0, 0.0, 0.0)


def build_buffer(xs, dt=0.5):
    buffer = MovementSampleBuffer()
    buffer.start((xs[0], 0.0, 0.0), 0.0)
    for i, x in enumerate(xs[1:], start=1):
        buffer.add((x, 0.0, 0.0), i * dt)
    return buffer


def test_summary_splits_at_peak_speed():
    buffer = build_buffer([0.0, 0.25, 0.75, 0.75])
    summary = buffer.stop(X_AXIS)

    assert summary.sample_count == 4
    assert summary.peak_index == 2
    assert summary.axis_distance == pytest.approx(0.75)
    assert summary.path_length == pytest.approx(0.75)
    assert summary.max_speed == pytest.approx(1.0)
    assert summary.min_speed == pytest.approx(0.5)
    assert summary.average_speed == pytest.approx(0.5)
    assert summary.ballistic_time == pytest.approx(1.0)
    assert summary.correction_time == pytest.approx(0.5)
    assert summary.ballistic_axis_distance == pytest.approx(0.75)
    assert summary.correction_axis_distance == pytest.approx(0.0)
    assert not buffer.is_tracking


def test_axis_distance_counts_back_and_forth():
    buffer = build_buffer([0.0, 0.5, 0.25])
    summary = buffer.summarize(X_AXIS)

    assert summary.axis_distance == pytest.approx(0.75)
    assert summary.correction_axis_distance == pytest.approx(0.25)


def test_off_axis_motion_only_counts_in_path():
    buffer = MovementSampleBuffer()
    buffer.start((0.0, 0.0, 0.0), 0.0)
    buffer.add((0.0, 0.5, 0.0), 0.5)
    summary = buffer.summarize(X_AXIS)

    assert summary.axis_distance == pytest.approx(0.0)
    assert summary.path_length == pytest.approx(0.5)


def test_single_sample_gives_zero_summary():
    buffer = MovementSampleBuffer()
    buffer.start((0.0, 0.0, 0.0), 0.0)
    summary = buffer.stop(X_AXIS)

    assert summary.sample_count == 1
    assert summary.path_length == 0.0
    assert summary.peak_index == -1


def test_add_is_ignored_when_not_tracking():
    buffer = MovementSampleBuffer()
    buffer.add((1.0, 0.0, 0.0), 0.0)
    assert len(buffer) == 0


def test_no_movement_has_no_peak():
    buffer = build_buffer([0.1, 0.1, 0.1])
    summary = buffer.summarize(X_AXIS)

    assert summary.peak_index == -1
    assert summary.ballistic_time == 0.0
    assert summary.correction_time == 0.0
    assert summary.min_speed == 0.0


def test_current_direction():
    buffer = build_buffer([0.0, -0.5])
    assert buffer.current_direction() == pytest.approx([-1.0, 0.0, 0.0])
