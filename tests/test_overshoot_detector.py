import numpy as np
import pytest

from fitts_engine.config import DetectorConfig
from fitts_engine.domain.targets import Direction, TargetGeometry
from fitts_engine.processing.overshoot import OvershootUndershootDetector

# Right-hand target spanning x in [0.1075, 0.1325]
BOX = TargetGeometry(
    center=np.array([0.12, 0.0, 0.0]),
    half_extents=np.array([0.0125, 25.0, 25.0]),
    direction=Direction.RIGHT,
)


class Approach:
    """Feeds x positions to a detector for the right-hand target."""

    def __init__(self, detector):
        self.detector = detector
        self.previous = 0.0
        self.t = 0.0

    def step(self, x, contact=False, trigger=False):
        diff = self.detector.update(
            trigger, Direction.RIGHT, (x, 0.0, 0.0), (self.previous, 0.0, 0.0), BOX, contact, self.t
        )
        self.previous = x
        self.t += 0.5
        return diff


def test_approach_without_overshoot_counts_nothing():
    approach = Approach(OvershootUndershootDetector())
    assert approach.step(0.0) == pytest.approx(0.1075)
    approach.step(0.12, contact=True)

    detector = approach.detector
    assert detector.overshot_count == 0
    assert detector.undershot_count == 0
    assert detector.re_entry_number == 0


def test_overshoot_then_return():
    approach = Approach(OvershootUndershootDetector())
    approach.step(0.0)
    assert approach.step(0.15) == pytest.approx(-0.0175)
    detector = approach.detector
    assert detector.overshot_count == 1
    assert detector.is_overshooting

    approach.step(0.12, contact=True)
    assert not detector.is_overshooting
    assert detector.total_overshoot_distance == pytest.approx(0.0175)
    assert detector.re_entry_number == 1


def test_undershoot_after_overshoot_and_correction_distance():
    approach = Approach(OvershootUndershootDetector())
    approach.step(0.0)
    approach.step(0.15)
    approach.step(0.12, contact=True)
    approach.step(0.10)

    detector = approach.detector
    assert detector.undershot_count == 1
    assert detector.in_correction_phase
    assert detector.correction_total_distance == pytest.approx(0.02)

    approach.step(0.12, contact=True, trigger=True)
    assert detector.re_entry_number == 2
    assert detector.total_undershoot_distance == pytest.approx(0.0075)
    assert detector.correction_total_distance == pytest.approx(0.04)
    assert not detector.in_correction_phase


def test_selection_short_of_untouched_target_counts_undershoot():
    approach = Approach(OvershootUndershootDetector())
    approach.step(0.05, trigger=True)

    detector = approach.detector
    assert detector.undershot_count == 1
    assert detector.total_undershoot_distance == pytest.approx(0.0575)


def test_cooldown_suppresses_repeated_overshoot():
    approach = Approach(OvershootUndershootDetector(DetectorConfig(cooldown_s=5.0)))
    approach.step(0.15)
    approach.step(0.12, contact=True)
    approach.step(0.15)

    assert approach.detector.overshot_count == 1


def test_flush_pending_peaks_is_idempotent():
    approach = Approach(OvershootUndershootDetector())
    approach.step(0.14)
    approach.step(0.16)

    detector = approach.detector
    detector.flush_pending_peaks()
    detector.flush_pending_peaks()
    assert detector.total_overshoot_distance == pytest.approx(0.0275)


def test_reset_totals_keeps_counts():
    approach = Approach(OvershootUndershootDetector())
    approach.step(0.15)
    approach.step(0.12, contact=True)

    detector = approach.detector
    detector.reset_totals()
    assert detector.total_overshoot_distance == 0.0
    assert detector.overshot_count == 1

    detector.reset()
    assert detector.overshot_count == 0
    snapshot = detector.snapshot()
    assert snapshot.overshot_count == 0
    assert snapshot.re_entry_number == 0


def test_re_entry_counted_once_per_approach():
    approach = Approach(OvershootUndershootDetector())
    approach.step(0.0)
    approach.step(0.15)
    approach.step(0.12, contact=True)
    detector = approach.detector
    assert detector.re_entry_number == 1

    # Leave and re-enter contact off-axis without a new excursion
    assert approach.step(0.12) == 0.0
    assert approach.step(0.12, contact=True) == 0.0
    approach.step(0.12)
    approach.step(0.12, contact=True)

    assert detector.re_entry_number == 1
    assert detector.overshot_count == 1
    assert detector.undershot_count == 0


def test_monotonic_approach_stopping_on_boundary():
    edge = float((BOX.center - BOX.half_extents)[0])
    approach = Approach(OvershootUndershootDetector())
    approach.step(0.0)
    approach.step(0.05)
    approach.step(edge, contact=True)
    diff = approach.step(edge, contact=True, trigger=True)

    detector = approach.detector
    assert diff == 0.0
    assert detector.axis_difference == 0.0
    assert detector.overshot_count == 0
    # Undershoot is gated on a prior overshoot; a selection on the boundary counts none
    assert detector.undershot_count == 0
    assert detector.re_entry_number == 0
