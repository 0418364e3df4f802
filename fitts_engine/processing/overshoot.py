# fitts_engine/processing/overshoot.py
"""
Overshoot / undershoot detection along the movement axis.

The detector consumes one sample at a time for the target currently being
approached and keeps the per-approach state: whether the tracked point is
beyond or short of the target, the peak magnitude of the current excursion,
event counts, contact re-entries and the correction phase that starts when
the point leaves the target after touching it.

Counting rules:
  - Entering overshoot outside the cooldown counts one overshoot.
  - Undershoot is only counted after at least one overshoot, except for a
    selection made short of a target that was never touched.
  - The first contact after an over/undershoot counts one re-entry; the
    guard flag is cleared only when a new excursion starts.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np

from ..config.config import DetectorConfig
from ..domain.records import OvershootUndershootData
from ..domain.targets import Direction, TargetGeometry
from .geometry import axis_distance_to_boundary, axis_unit_vector

logger = logging.getLogger(__name__)


class OvershootUndershootDetector:
    """Stateful classifier for one target approach."""

    def __init__(self, config: Optional[DetectorConfig] = None):
        self.config = config or DetectorConfig()
        self.reset()

    # ------------------------------------------------------------------
    # Resets
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Clear the whole per-approach state, counters included."""
        self.overshot_count = 0
        self.undershot_count = 0
        self.re_entry_number = 0
        self.overshoot_distance = 0.0
        self.undershoot_distance = 0.0
        self.axis_difference = 0.0
        self.total_overshoot_distance = 0.0
        self.total_undershoot_distance = 0.0
        self.correction_overshoot_distance = 0.0
        self.correction_undershoot_distance = 0.0
        self.correction_total_distance = 0.0
        self.in_correction_phase = False
        self.has_contacted_target = False
        self.has_overshot = False
        self.has_undershot = False
        self.is_overshooting = False
        self.is_undershooting = False
        self.current_overshoot_peak = 0.0
        self.current_undershoot_peak = 0.0
        self.last_count_time = -math.inf
        self.was_in_contact = False
        self.re_entry_counted = False

    def reset_totals(self) -> None:
        """Zero the accumulated distance totals; counts and flags are kept."""
        self.total_overshoot_distance = 0.0
        self.total_undershoot_distance = 0.0
        self.correction_overshoot_distance = 0.0
        self.correction_undershoot_distance = 0.0

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------
    def mark_contact(self) -> None:
        self.has_contacted_target = True

    def update(
        self,
        trigger_pressed: bool,
        direction: Direction,
        position: Sequence[float],
        previous_position: Sequence[float],
        target: TargetGeometry,
        is_contacting: bool,
        timestamp: float,
    ) -> float:
        """Process one sample and return its signed axis difference."""
        unit_axis = axis_unit_vector(direction)
        if not unit_axis.any():
            return self.axis_difference

        self.axis_difference = axis_distance_to_boundary(direction, position, target)
        diff = self.axis_difference

        was_overshooting = self.is_overshooting
        was_undershooting = self.is_undershooting
        can_count = (timestamp - self.last_count_time) >= self.config.cooldown_s

        self._update_contact(is_contacting)

        if diff < 0:
            self.is_overshooting = True
            self.is_undershooting = False
            self.has_overshot = True
            self.has_undershot = True
            self.overshoot_distance = abs(diff)
            if not was_overshooting and can_count:
                self.overshot_count += 1
                self.last_count_time = timestamp
                self.current_overshoot_peak = self.overshoot_distance
                self.re_entry_counted = False
                logger.debug("Overshoot %d at t=%.3f", self.overshot_count, timestamp)
            elif self.overshoot_distance > self.current_overshoot_peak:
                self.current_overshoot_peak = self.overshoot_distance
        elif diff > 0:
            self.is_overshooting = False
            self.is_undershooting = True
            self.undershoot_distance = diff
            if self.has_overshot and can_count:
                if not was_undershooting:
                    self.undershot_count += 1
                    self.last_count_time = timestamp
                    self.current_undershoot_peak = self.undershoot_distance
                    self.re_entry_counted = False
                    logger.debug("Undershoot %d at t=%.3f", self.undershot_count, timestamp)
                elif self.undershoot_distance > self.current_undershoot_peak:
                    self.current_undershoot_peak = self.undershoot_distance
            if trigger_pressed and not is_contacting and not self.has_overshot and can_count:
                # Selection made short of a target that was never passed
                self.undershot_count += 1
                self.last_count_time = timestamp
                self.total_undershoot_distance += self.undershoot_distance
            if self.has_overshot:
                self.re_entry_counted = False
        else:
            self.is_overshooting = False
            self.is_undershooting = False
            self.overshoot_distance = 0.0
            self.undershoot_distance = 0.0

        if was_overshooting and not self.is_overshooting:
            self._flush_overshoot_peak()
        if was_undershooting and not self.is_undershooting:
            self._flush_undershoot_peak()

        if self.in_correction_phase:
            delta = np.asarray(position, dtype=float) - np.asarray(previous_position, dtype=float)
            self.correction_total_distance += abs(float(np.dot(delta, unit_axis)))
            if self.is_overshooting:
                self.correction_overshoot_distance += self.overshoot_distance
            elif self.is_undershooting and self.has_overshot:
                self.correction_undershoot_distance += self.undershoot_distance

        if trigger_pressed and self.in_correction_phase:
            self.in_correction_phase = False

        return diff

    def _update_contact(self, is_contacting: bool) -> None:
        if is_contacting:
            if not self.was_in_contact:
                self.was_in_contact = True
                self.mark_contact()
                if (self.has_overshot or self.has_undershot) and not self.re_entry_counted:
                    self.re_entry_number += 1
                    self.re_entry_counted = True
        elif self.was_in_contact:
            self.was_in_contact = False
            if self.has_contacted_target and not self.in_correction_phase:
                self.in_correction_phase = True

    def _flush_overshoot_peak(self) -> None:
        self.total_overshoot_distance += self.current_overshoot_peak
        if self.in_correction_phase:
            self.correction_overshoot_distance += self.current_overshoot_peak
        self.current_overshoot_peak = 0.0

    def _flush_undershoot_peak(self) -> None:
        if not self.has_overshot:
            return
        self.total_undershoot_distance += self.current_undershoot_peak
        if self.in_correction_phase:
            self.correction_undershoot_distance += self.current_undershoot_peak
        self.current_undershoot_peak = 0.0

    def flush_pending_peaks(self) -> None:
        """Fold a still-open excursion peak into the totals.

        Must run before the final counts are read at trial close. A second
        call without new samples adds nothing because the peaks are zeroed.
        """
        if self.is_overshooting:
            self._flush_overshoot_peak()
        if self.is_undershooting:
            self._flush_undershoot_peak()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def snapshot(self) -> OvershootUndershootData:
        return OvershootUndershootData(
            overshot_count=self.overshot_count,
            undershot_count=self.undershot_count,
            re_entry_number=self.re_entry_number,
            overshoot_distance=self.overshoot_distance,
            undershoot_distance=self.undershoot_distance,
            total_overshoot_distance=self.total_overshoot_distance,
            total_undershoot_distance=self.total_undershoot_distance,
            correction_overshoot_distance=self.correction_overshoot_distance,
            correction_undershoot_distance=self.correction_undershoot_distance,
            correction_total_distance=self.correction_total_distance,
        )
