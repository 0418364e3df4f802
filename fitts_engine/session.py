# fitts_engine/session.py
"""Session wiring and replay.

Builds every collaborator from a ``SessionConfig`` and hands them to one
``TrialController``. Nothing else in the package constructs components.
"""
from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from .config.config import SessionConfig
from .domain.records import CompletedTrial
from .domain.samples import PoseSample
from .engine import TrialController
from .layout import lay_out_pairs
from .processing.fitts import FittsMetricsEngine
from .processing.haptics import HapticIntensityCalculator, PulseModulator
from .processing.movement import MovementSampleBuffer
from .processing.overshoot import OvershootUndershootDetector

logger = logging.getLogger(__name__)


def build_session(
    config: Optional[SessionConfig] = None,
    observers: Iterable = (),
    rng: Optional[random.Random] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> TrialController:
    """Lay out the target pairs and wire a ready-to-run controller.

    Args:
        config: Session configuration (defaults to ``SessionConfig()``)
        observers: ``TrialObserver`` instances notified of session events
        rng: Random source for the testing-pair shuffle. Defaults to
            ``random.Random(config.shuffle_seed)``
        clock: Wall clock used for the per-trial timestamp

    Raises:
        ConfigurationError: if the configured pairs cannot be laid out
    """
    config = config or SessionConfig()
    training, testing = lay_out_pairs(config)
    controller = TrialController(
        config=config,
        training_pairs=training,
        testing_pairs=testing,
        detector=OvershootUndershootDetector(config.detector),
        buffer=MovementSampleBuffer(config.movement),
        metrics=FittsMetricsEngine(),
        haptics=HapticIntensityCalculator(config.haptics),
        pulse=PulseModulator(config.haptics),
        rng=rng or random.Random(config.shuffle_seed),
        observers=observers,
        clock=clock or datetime.now,
    )
    logger.debug("Session built for participant %d, block %d", config.participant_number, config.block_number)
    return controller


def run_session(
    samples: Iterable[PoseSample],
    config: Optional[SessionConfig] = None,
    observers: Iterable = (),
    rng: Optional[random.Random] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> List[CompletedTrial]:
    """Replay ``samples`` through a fresh session and return the logged trials.

    Replay stops at the first tick that ends the session. Observers are
    told about any exception before it propagates.
    """
    controller = build_session(config, observers, rng, clock)
    try:
        for sample in samples:
            if controller.tick(sample).ended:
                break
        else:
            logger.info(
                "Pose stream exhausted before the session ended (%s, %d trial(s))",
                controller.state.name, len(controller.trials),
            )
    except Exception as e:
        controller.notify_error(e)
        raise
    return list(controller.trials)
