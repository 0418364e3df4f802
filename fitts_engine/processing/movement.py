# fitts_engine/processing/movement.py
"""
Per-trial movement sample buffer.

Collects (position, timestamp) samples between two selections and derives
the path measures logged with each trial: axis-aligned distance, path
length, speeds and the ballistic/correction split at peak speed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..config.config import MovementConfig
from .geometry import normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovementSummary:
    """Derived measures for one closed trial.

    Every value is 0 when fewer than two samples were collected.
    """

    sample_count: int = 0
    axis_distance: float = 0.0
    path_length: float = 0.0
    peak_index: int = -1
    max_speed: float = 0.0
    min_speed: float = 0.0
    average_speed: float = 0.0
    ballistic_time: float = 0.0
    correction_time: float = 0.0
    ballistic_axis_distance: float = 0.0
    ballistic_path_length: float = 0.0
    correction_axis_distance: float = 0.0
    correction_path_length: float = 0.0


class MovementSampleBuffer:
    """Ordered pose samples for the trial that is currently open."""

    def __init__(self, config: Optional[MovementConfig] = None):
        self.config = config or MovementConfig()
        self._positions: List[np.ndarray] = []
        self._times: List[float] = []
        self._speeds: List[float] = []
        self.filtered_speed = 0.0
        self.is_tracking = False

    def __len__(self) -> int:
        return len(self._positions)

    @property
    def speeds(self) -> List[float]:
        return list(self._speeds)

    def start(self, position: Sequence[float], timestamp: float) -> None:
        """Clear the buffer and store the baseline sample."""
        self.clear()
        self.is_tracking = True
        self._append(position, timestamp)

    def add(self, position: Sequence[float], timestamp: float) -> None:
        if not self.is_tracking:
            return
        self._append(position, timestamp)

    def stop(self, axis: Sequence[float]) -> MovementSummary:
        """End tracking and summarise the collected samples along ``axis``."""
        self.is_tracking = False
        return self.summarize(axis)

    def clear(self) -> None:
        self._positions.clear()
        self._times.clear()
        self._speeds.clear()
        self.filtered_speed = 0.0

    def _append(self, position: Sequence[float], timestamp: float) -> None:
        p = np.asarray(position, dtype=float).reshape(3).copy()
        t = float(timestamp)
        speed = 0.0
        if self._positions:
            dt = t - self._times[-1]
            if dt > 0.0:
                speed = float(np.linalg.norm(p - self._positions[-1])) / dt
        self._positions.append(p)
        self._times.append(t)
        self._speeds.append(speed)
        alpha = self.config.speed_filter_alpha
        self.filtered_speed = alpha * speed + (1.0 - alpha) * self.filtered_speed

    def peak_index(self) -> int:
        """Index of the first sample reaching the maximum speed; -1 if none moved."""
        index = -1
        best = 0.0
        for i, speed in enumerate(self._speeds):
            if speed > best:
                best = speed
                index = i
        return index

    def current_direction(self) -> np.ndarray:
        """Unit vector of the most recent step, or zero."""
        if len(self._positions) < 2:
            return np.zeros(3)
        return normalize(self._positions[-1] - self._positions[-2])

    def _step_distances(self, start: int, stop: int, axis: np.ndarray):
        along_axis = 0.0
        path = 0.0
        for i in range(max(start, 1), stop):
            delta = self._positions[i] - self._positions[i - 1]
            along_axis += abs(float(np.dot(delta, axis)))
            path += float(np.linalg.norm(delta))
        return along_axis, path

    def summarize(self, axis: Sequence[float]) -> MovementSummary:
        n = len(self._positions)
        if n < 2:
            return MovementSummary(sample_count=n)

        unit_axis = normalize(axis)
        axis_distance, path_length = self._step_distances(1, n, unit_axis)
        peak = self.peak_index()

        ballistic_axis, ballistic_path = self._step_distances(1, peak + 1, unit_axis)
        correction_axis, correction_path = self._step_distances(peak + 1, n, unit_axis)

        if peak == -1:
            ballistic_time = correction_time = 0.0
        else:
            ballistic_time = self._times[peak] - self._times[0]
            correction_time = self._times[-1] - self._times[peak]

        elapsed = self._times[-1] - self._times[0]
        average_speed = path_length / elapsed if elapsed > 0.0 else 0.0

        moving = [s for s in self._speeds if s > self.config.min_speed_threshold]
        min_speed = min(moving) if moving else 0.0
        max_speed = self._speeds[peak] if peak >= 0 else 0.0

        logger.debug(
            "Movement summary: %d samples, path %.4f m, peak index %d",
            n, path_length, peak,
        )
        return MovementSummary(
            sample_count=n,
            axis_distance=axis_distance,
            path_length=path_length,
            peak_index=peak,
            max_speed=max_speed,
            min_speed=min_speed,
            average_speed=average_speed,
            ballistic_time=ballistic_time,
            correction_time=correction_time,
            ballistic_axis_distance=ballistic_axis,
            ballistic_path_length=ballistic_path,
            correction_axis_distance=correction_axis,
            correction_path_length=correction_path,
        )
