# fitts_engine/engine.py
"""
Trial progression state machine.

``TrialController`` owns every per-session counter and drives the movement
buffer, the overshoot/undershoot detector, the Fitts metrics engine and
the haptic calculator. Collaborators are injected by the composition root
(``fitts_engine.session``) and never call back into the controller.

Per tick the work is done in a fixed order:
    1. ingest the pose sample
    2. update the movement buffer, contact, dwell and the detector
    3. evaluate the selection trigger
    4. on a selection, close the trial, emit the record and advance
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import numpy as np

from .config.config import SessionConfig
from .config.constants import SessionDefaults, ValidationMessages
from .domain.records import CompletedTrial, SkipReason, as_tuple
from .domain.samples import PoseSample
from .domain.state import SessionState
from .domain.targets import (
    AxisType,
    Direction,
    GrowthPattern,
    Phase,
    TargetGeometry,
    TargetPair,
    block_letter,
)
from .errors import ConfigurationError, SessionEndedError
from .layout import shuffle_pairs
from .processing.fitts import FittsMetricsEngine, TrialMeasurement
from .processing.geometry import (
    axis_centre,
    axis_distance_between,
    axis_distance_to_boundary,
    axis_distance_to_midpoint,
    box_corners,
    delta_angle,
    direction_vector,
    is_contacting,
    movement_angle,
    movement_axis,
    movement_axis_index,
    quaternion_to_euler,
)
from .processing.haptics import HapticIntensityCalculator, PulseModulator
from .processing.movement import MovementSampleBuffer
from .processing.overshoot import OvershootUndershootDetector

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


@dataclass(frozen=True)
class TickResult:
    """Outcome of one tick."""

    state: SessionState
    phase: Phase
    trial: Optional[CompletedTrial] = None
    is_contacting: bool = False
    axis_difference: float = 0.0
    haptic_strength: int = 0
    haptic_output: int = 0

    @property
    def ended(self) -> bool:
        return self.state == SessionState.ENDED


class TrialController:
    """
    Drives one session through training and testing sets.

    The first selection of every set is a baseline: it starts movement
    tracking but is never logged or counted. Each later selection closes
    a trial and produces one immutable ``CompletedTrial``.

    Example:
        >>> from fitts_engine.session import build_session
        >>> controller = build_session(SessionConfig(shuffle_seed=1))
        >>> controller.ready()
        >>> result = controller.tick(sample)
    """

    def __init__(
        self,
        config: SessionConfig,
        training_pairs: Sequence[TargetPair],
        testing_pairs: Sequence[TargetPair],
        detector: OvershootUndershootDetector,
        buffer: MovementSampleBuffer,
        metrics: FittsMetricsEngine,
        haptics: HapticIntensityCalculator,
        pulse: PulseModulator,
        rng: random.Random,
        observers: Iterable = (),
        clock: Callable[[], datetime] = datetime.now,
    ):
        if config.skip_training and config.skip_testing:
            raise ConfigurationError(ValidationMessages.BOTH_PHASES_SKIPPED)
        if config.training_trials < 1 or config.testing_trials < 1:
            raise ConfigurationError("Trial quotas must be >= 1")

        self.config = config
        self.training_pairs = list(training_pairs)
        self.testing_pairs = list(testing_pairs)
        self.detector = detector
        self.buffer = buffer
        self.metrics = metrics
        self.haptics = haptics
        self.pulse = pulse
        self.rng = rng
        self._observers: List = list(observers)
        self._clock = clock

        self.state = SessionState.AWAITING_START
        self.trials: List[CompletedTrial] = []

        if config.skip_training:
            self.phase = Phase.TESTING
            self.pair_list = shuffle_pairs(self.testing_pairs, self.rng)
            self.training_set_number = 0
            self.test_set_number = 1
        else:
            self.phase = Phase.TRAINING
            self.pair_list = list(self.training_pairs)
            self.training_set_number = 1
            self.test_set_number = 0
        if not self.pair_list:
            raise ConfigurationError(f"No {self.phase.name.lower()} pairs configured")

        expected = self.expected_block_size()
        if expected != config.trials_in_block:
            logger.warning(
                ValidationMessages.BLOCK_SIZE_MISMATCH.format(configured=config.trials_in_block, expected=expected)
            )

        self.pair_index = 0
        self.set_number = 1
        self.trial_number_in_set = 0
        self.trial_number_in_block = 0
        self.trial_number_by_id: Dict[int, int] = {
            p.target_id: 0 for p in self.training_pairs + self.testing_pairs
        }

        self._reset_counters()
        self._reset_set_aggregates()
        self._reset_block_aggregates()
        self.metrics.reset_block()
        self.metrics.reset_set()

        self.last_click_time = SessionDefaults.UNSET_TIME
        self.last_accepted_press = -np.inf
        self._trigger_held = False
        self.reaction_time = 0.0
        self.reaction_recorded = False
        self.target_appearance_time = 0.0
        self.was_contacting = False
        self.haptic_strength = 0
        self._haptic_target_known = False
        self._last_timestamp: Optional[float] = None
        self._previous_position = np.zeros(3)
        self._start_position = np.zeros(3)
        self._start_rotation = np.array([0.0, 0.0, 0.0, 1.0])
        self._select_pair(0)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def register_observer(self, observer) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unregister_observer(self, observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self, method: str, *args) -> None:
        for observer in self._observers:
            try:
                getattr(observer, method)(*args)
            except Exception:
                logger.exception("Observer %s failed in %s", type(observer).__name__, method)

    def notify_error(self, error: Exception) -> None:
        self._notify("on_error", self.config, error)

    # ------------------------------------------------------------------
    # Current target
    # ------------------------------------------------------------------
    @property
    def is_training(self) -> bool:
        return self.phase == Phase.TRAINING

    @property
    def quota(self) -> int:
        return self.config.quota_for(self.is_training)

    def expected_block_size(self) -> int:
        """Logged trials the configured phases produce in one block."""
        total = 0
        if not self.config.skip_training:
            total += len(self.training_pairs) * self.config.training_trials
        if not self.config.skip_testing:
            total += len(self.testing_pairs) * self.config.testing_trials
        return total

    @property
    def current_target(self) -> TargetGeometry:
        return self.current_pair.geometry_for(self.target_index)

    @property
    def direction(self) -> Direction:
        return self.current_pair.direction_for(self.target_index)

    @property
    def axis_index(self) -> int:
        return movement_axis_index(self.axis)

    def _select_pair(self, index: int) -> None:
        self.pair_index = index
        self.current_pair = self.pair_list[index]
        self.target_index = 0
        self.axis = movement_axis(self.current_pair.geometry1.center, self.current_pair.geometry2.center)

    def require_active(self) -> None:
        """Raise ``SessionEndedError`` once the session has ended."""
        if self.state == SessionState.ENDED:
            raise SessionEndedError("Session has ended")

    # ------------------------------------------------------------------
    # Resets
    # ------------------------------------------------------------------
    def _reset_counters(self) -> None:
        self.logged_trial_count = 0
        self.is_first_selection = True
        self.total_dwell_time = 0.0

    def _reset_set_aggregates(self) -> None:
        self.axis_distance_for_set = 0.0
        self.all_axes_distance_for_set = 0.0
        self.net_axis_distance_for_set = 0.0
        self.euclidean_distance_for_set = 0.0
        self.euclidean_deviation_for_set = 0.0

    def _reset_block_aggregates(self) -> None:
        self.axis_distance_for_block = 0.0
        self.all_axes_distance_for_block = 0.0
        self.net_axis_distance_for_block = 0.0
        self.euclidean_distance_for_block = 0.0
        self.euclidean_deviation_for_block = 0.0

    def _new_target_time(self, timestamp: float) -> None:
        self.target_appearance_time = timestamp
        self.reaction_recorded = False
        self.reaction_time = 0.0

    # ------------------------------------------------------------------
    # Ready signal
    # ------------------------------------------------------------------
    def ready(self, position: Optional[Sequence[float]] = None) -> None:
        """Leave AWAITING_START or BETWEEN_SETS and accept selections."""
        if self.state not in (SessionState.AWAITING_START, SessionState.BETWEEN_SETS):
            return
        if self.state == SessionState.AWAITING_START:
            self._notify("on_session_start", self.config)
        self.state = SessionState.WITHIN_SET
        self.last_click_time = SessionDefaults.UNSET_TIME
        self._haptic_target_known = False
        self.pulse.reset()
        if position is not None:
            self._previous_position = np.asarray(position, dtype=float).copy()
        logger.info(
            "%s set %d started (pair %d, target ID %d)",
            self.phase.name.capitalize(), self.set_number,
            self.current_pair.pair_index, self.current_pair.target_id,
        )

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------
    def tick(self, sample: PoseSample) -> TickResult:
        """Process one pose sample to completion."""
        if self.state == SessionState.ENDED:
            return TickResult(state=self.state, phase=self.phase)

        # 1. ingest
        position = sample.position
        t = sample.timestamp
        dt = 0.0 if self._last_timestamp is None else max(t - self._last_timestamp, 0.0)
        self._last_timestamp = t

        # A held trigger is one press; only the released -> pressed edge selects
        pressed = sample.trigger_pressed and not self._trigger_held
        self._trigger_held = sample.trigger_pressed

        if sample.ready_pressed:
            self.ready(position)
        if self.state != SessionState.WITHIN_SET:
            return TickResult(state=self.state, phase=self.phase)

        # 2. movement, contact, dwell, detector
        if self.buffer.is_tracking:
            self.buffer.add(position, t)
            if not self.reaction_recorded:
                self._check_reaction_time(t)

        target = self.current_target
        contacting = is_contacting(position, target, self.config.controller_width)
        self._update_contact(contacting, dt)

        axis_difference = 0.0
        if not self.is_first_selection:
            axis_difference = self.detector.update(
                pressed,
                self.direction,
                position,
                self._previous_position,
                target,
                contacting,
                t,
            )
        self._previous_position = position.copy()

        haptic_output = self._update_haptics(position, dt)

        # 3. trigger
        trial = None
        if pressed and t - self.last_accepted_press >= self.config.input_delay_s:
            self.last_accepted_press = t
            # 4. close and advance
            trial = self._handle_selection(sample, contacting)

        return TickResult(
            state=self.state,
            phase=self.phase,
            trial=trial,
            is_contacting=contacting,
            axis_difference=axis_difference,
            haptic_strength=self.haptic_strength,
            haptic_output=haptic_output,
        )

    def _check_reaction_time(self, timestamp: float) -> None:
        step = self.buffer.current_direction()
        target_direction = direction_vector(self.direction)
        if not target_direction.any():
            return
        if float(np.dot(step, target_direction)) > self.config.movement.direction_threshold:
            self.reaction_time = timestamp - self.target_appearance_time
            self.reaction_recorded = True

    def _update_contact(self, contacting: bool, dt: float) -> None:
        if contacting:
            if not self.was_contacting:
                self.was_contacting = True
                self.detector.mark_contact()
            if not self.is_first_selection:
                self.total_dwell_time += dt
        elif self.was_contacting:
            self.was_contacting = False

    def _update_haptics(self, position: np.ndarray, dt: float) -> int:
        target = self.current_target
        distance = abs(axis_distance_to_boundary(self.direction, position, target))
        if not self._haptic_target_known:
            self.haptics.set_reference_distance(distance)
            self._haptic_target_known = True
        pattern = self.current_pair.growth_pattern
        self.haptic_strength = self.haptics.strength(pattern, distance)
        if pattern == GrowthPattern.PULSE:
            return self.pulse.step(self.haptic_strength, dt)
        return self.haptic_strength

    # ------------------------------------------------------------------
    # Selection handling
    # ------------------------------------------------------------------
    def _handle_selection(self, sample: PoseSample, contacting: bool) -> Optional[CompletedTrial]:
        trial = None
        if self.is_first_selection:
            self._baseline_selection(sample, contacting)
        else:
            trial = self._close_trial(sample, contacting)
        self._advance(sample)
        return trial

    def _baseline_selection(self, sample: PoseSample, contacting: bool) -> None:
        self.total_dwell_time = 0.0
        self.is_first_selection = False
        self.last_click_time = sample.timestamp
        self._start_tracking(sample)
        logger.debug("Baseline selection at t=%.3f (contact=%s)", sample.timestamp, contacting)

    def _start_tracking(self, sample: PoseSample) -> None:
        self.buffer.start(sample.position, sample.timestamp)
        self._start_position = sample.position.copy()
        self._start_rotation = sample.rotation.copy()

    def _close_trial(self, sample: PoseSample, contacting: bool) -> CompletedTrial:
        pair = self.current_pair
        target = self.current_target
        direction = self.direction
        axis = self.axis
        axis_index = self.axis_index
        t = sample.timestamp
        end = sample.position

        summary = self.buffer.stop(axis)

        time_taken = t - self.last_click_time if self.last_click_time >= 0 else 0.0
        midpoint = axis_centre(target.center, axis_index)
        distance_to_collider = abs(axis_distance_to_boundary(direction, end, target))
        distance_to_midpoint = abs(axis_distance_to_midpoint(direction, end, midpoint))
        overshoot_on_trigger = self.detector.overshoot_distance if self.detector.is_overshooting else 0.0
        undershoot_on_trigger = self.detector.undershoot_distance if self.detector.is_undershooting else 0.0

        self.logged_trial_count += 1

        amplitude = pair.amplitude
        difference_to_amplitude = summary.axis_distance - amplitude
        euclidean_deviation = max(summary.path_length - amplitude, 0.0)
        displacement = end - self._start_position
        net_axis_distance = abs(float(np.dot(displacement, axis)))
        euclidean_distance = float(np.linalg.norm(displacement))

        self.axis_distance_for_set += summary.axis_distance
        self.net_axis_distance_for_set += net_axis_distance
        self.all_axes_distance_for_set += summary.path_length
        self.axis_distance_for_block += summary.axis_distance
        self.net_axis_distance_for_block += net_axis_distance
        self.all_axes_distance_for_block += summary.path_length
        self.euclidean_distance_for_set += euclidean_distance
        self.euclidean_distance_for_block += euclidean_distance
        self.euclidean_deviation_for_set += euclidean_deviation
        self.euclidean_deviation_for_block += euclidean_deviation

        is_last_in_set = self.logged_trial_count == self.quota
        is_last_in_block = self.trial_number_in_block == self.config.trials_in_block - 1

        self.detector.flush_pending_peaks()

        self.trial_number_in_set += 1
        self.trial_number_in_block += 1
        self.trial_number_by_id[pair.target_id] = self.trial_number_by_id.get(pair.target_id, 0) + 1

        fitts_data, skip_reason = self.metrics.compute(
            TrialMeasurement(
                movement_time_ms=time_taken * 1000.0,
                target_width=target.width,
                amplitude=amplitude,
                is_hit=contacting,
                start_position=self._start_position,
                end_position=end,
                movement_axis=axis,
                target_centre=midpoint,
                movement_axis_index=axis_index,
                axis_difference=self.detector.axis_difference,
                controller_width=self.config.controller_width,
                current_axis_distance=summary.axis_distance,
                total_path_length=summary.path_length,
                euclidean_deviation=euclidean_deviation,
                aggregate_distance_all_axes=self.all_axes_distance_for_set,
                is_last_in_set=is_last_in_set,
                is_last_in_block=is_last_in_block,
            )
        )
        overshoot = self.detector.snapshot()

        start_euler = quaternion_to_euler(self._start_rotation)
        end_euler = quaternion_to_euler(sample.rotation)
        axis_type = AxisType.HORIZONTAL if axis_index == AxisType.HORIZONTAL.value else AxisType.VERTICAL

        trial = CompletedTrial(
            timestamp=self._clock().strftime(TIMESTAMP_FORMAT),
            participant_number=self.config.participant_number,
            block_number=self.config.block_number,
            block_letter=block_letter(axis_type, pair.growth_pattern),
            block_repetition=self.config.block_repetition,
            controller_width=self.config.controller_width,
            distance_to_target_collider=distance_to_collider,
            distance_to_target_midpoint=distance_to_midpoint,
            time_taken=time_taken,
            is_hit=1 if contacting else 0,
            total_dwell_time=self.total_dwell_time,
            overshot_count=overshoot.overshot_count,
            undershot_count=overshoot.undershot_count,
            re_entry_number=overshoot.re_entry_number,
            overshoot_distance=overshoot_on_trigger,
            undershoot_distance=undershoot_on_trigger,
            total_overshoot_distance=overshoot.total_overshoot_distance,
            total_undershoot_distance=overshoot.total_undershoot_distance,
            correction_distance=overshoot.correction_total_distance,
            phase=self.phase.value,
            distance_id=pair.distance.value,
            direction_id=direction.value,
            target_id=pair.target_id,
            controller_position=as_tuple(end),
            controller_rotation=as_tuple(sample.rotation),
            movement_angle=movement_angle(self._start_position, end, midpoint, axis_index),
            start_controller_position=as_tuple(self._start_position),
            start_controller_rotation=as_tuple(self._start_rotation),
            controller_position_x_difference=float(displacement[0]),
            controller_position_y_difference=float(displacement[1]),
            controller_position_z_difference=float(displacement[2]),
            controller_rotation_x_difference=delta_angle(start_euler[0], end_euler[0]),
            controller_rotation_y_difference=delta_angle(start_euler[1], end_euler[1]),
            controller_rotation_z_difference=delta_angle(start_euler[2], end_euler[2]),
            target_midpoint=as_tuple(midpoint),
            set_number=self.set_number,
            trial_number_in_set=self.trial_number_in_set,
            trial_number_in_block=self.trial_number_in_block,
            trial_number_by_id=self.trial_number_by_id[pair.target_id],
            training_set_number=self.training_set_number if self.is_training else 0,
            test_set_number=0 if self.is_training else self.test_set_number,
            haptic_feedback_method=pair.growth_pattern.value,
            haptic_feedback_strength=self.haptic_strength,
            fitts_data=fitts_data,
            current_axis_distance=summary.axis_distance,
            difference_to_amplitude=difference_to_amplitude,
            current_axis_net_distance=net_axis_distance,
            aggregate_movement_distance_along_axis_for_set=self.axis_distance_for_set,
            aggregate_movement_distance_along_all_axes_for_set=self.all_axes_distance_for_set,
            aggregate_movement_distance_along_axis_for_block=self.axis_distance_for_block,
            aggregate_movement_distance_along_all_axes_for_block=self.all_axes_distance_for_block,
            aggregate_net_movement_distance_along_axis_for_set=self.net_axis_distance_for_set,
            aggregate_net_movement_distance_along_axis_for_block=self.net_axis_distance_for_block,
            path_curvature=summary.path_length / amplitude if amplitude > 0 else 0.0,
            euclidean_distance=euclidean_distance,
            euclidean_distance_for_set=self.euclidean_distance_for_set,
            euclidean_distance_for_block=self.euclidean_distance_for_block,
            euclidean_deviation=euclidean_deviation,
            euclidean_deviation_for_set=self.euclidean_deviation_for_set,
            euclidean_deviation_for_block=self.euclidean_deviation_for_block,
            average_movement_speed=summary.average_speed,
            max_speed=summary.max_speed,
            min_speed=summary.min_speed,
            reaction_time=self.reaction_time,
            ballistic_time=summary.ballistic_time,
            correction_time=summary.correction_time,
            ballistic_distance_along_axis=summary.ballistic_axis_distance,
            ballistic_distance_along_all_axes=summary.ballistic_path_length,
            correction_distance_along_axis=summary.correction_axis_distance,
            correction_distance_along_all_axes=summary.correction_path_length,
            overshoot_data=overshoot,
            target_corners=box_corners(target),
            is_last_in_set=is_last_in_set,
            is_last_in_block=is_last_in_block,
            skip_reason=skip_reason,
        )

        self.trials.append(trial)
        self._notify("on_trial_complete", trial)

        self.last_click_time = t
        self.total_dwell_time = 0.0
        self.detector.reset_totals()
        self.detector.reset()
        self._start_tracking(sample)
        return trial

    # ------------------------------------------------------------------
    # Progression
    # ------------------------------------------------------------------
    def _advance(self, sample: PoseSample) -> None:
        if self.logged_trial_count >= self.quota:
            self._end_set(sample)
        else:
            self._switch_target(sample)

    def _switch_target(self, sample: PoseSample) -> None:
        self.target_index = 1 - self.target_index
        self.axis = movement_axis(self.current_pair.geometry1.center, self.current_pair.geometry2.center)
        reference = axis_distance_between(
            self.current_pair.geometry_for(1 - self.target_index).center,
            self.current_target.center,
            self.direction,
        )
        self.haptics.set_reference_distance(reference)
        self._haptic_target_known = True
        self._previous_position = sample.position.copy()
        self.total_dwell_time = 0.0
        self._new_target_time(sample.timestamp)

    def _end_set(self, sample: PoseSample) -> None:
        self._reset_counters()
        self.buffer.stop(self.axis)
        self.last_click_time = SessionDefaults.UNSET_TIME
        self.set_number += 1
        if self.is_training:
            self.training_set_number += 1
        else:
            self.test_set_number += 1

        logger.info("%s set complete; %d trial(s) logged so far", self.phase.name.capitalize(), len(self.trials))

        next_index = self.pair_index + 1
        if next_index >= len(self.pair_list):
            if self.is_training:
                self._switch_to_testing(sample)
            else:
                self._end_session()
            return

        self._select_pair(next_index)
        self._new_set(sample)

    def _switch_to_testing(self, sample: PoseSample) -> None:
        if self.config.skip_testing or not self.testing_pairs:
            self._end_session()
            return
        self.phase = Phase.TESTING
        self.pair_list = shuffle_pairs(self.testing_pairs, self.rng)
        self._reset_counters()
        self.training_set_number = 0
        self.test_set_number = 1
        logger.info("Training complete; switching to testing with %d pair(s)", len(self.pair_list))
        self._select_pair(0)
        self._new_set(sample)

    def _new_set(self, sample: PoseSample) -> None:
        self.trial_number_in_set = 0
        self.metrics.reset_set()
        self._new_target_time(sample.timestamp)
        self.last_click_time = SessionDefaults.UNSET_TIME
        self._previous_position = sample.position.copy()
        self._reset_set_aggregates()
        self.total_dwell_time = 0.0
        self.state = SessionState.BETWEEN_SETS

    def _end_session(self) -> None:
        self.metrics.reset_block()
        self.state = SessionState.ENDED
        logger.info("Session ended after %d logged trial(s)", len(self.trials))
        self._notify("on_session_end", self.config, list(self.trials))

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------
    def skipped_trials(self) -> List[CompletedTrial]:
        return [trial for trial in self.trials if trial.skip_reason is not None]

    def skip_counts(self) -> Dict[SkipReason, int]:
        counts: Dict[SkipReason, int] = {}
        for trial in self.skipped_trials():
            counts[trial.skip_reason] = counts.get(trial.skip_reason, 0) + 1
        return counts
