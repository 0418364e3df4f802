import random
from datetime import datetime
from typing import List

import numpy as np
import pytest

from fitts_engine.config import SessionConfig
from fitts_engine.domain.samples import PoseSample
from fitts_engine.domain.state import SessionState
from fitts_engine.domain.targets import (
    Direction,
    DistanceClass,
    TargetPairSpec,
    WidthClass,
)
from fitts_engine.engine import TrialController
from fitts_engine.io.observers import TrialCollector
from fitts_engine.session import build_session

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5)

# Half-second steps keep every timestamp exact in binary floating point
STEP = 0.5


def fixed_clock() -> datetime:
    return FIXED_TIME


def make_config(**overrides) -> SessionConfig:
    """Session config for tests: no input debounce, fixed shuffle seed."""
    values = dict(input_delay_s=0.0, shuffle_seed=1234)
    values.update(overrides)
    return SessionConfig(**values)


def make_controller(config: SessionConfig, observers=()) -> TrialController:
    return build_session(config, observers=observers, rng=random.Random(config.shuffle_seed), clock=fixed_clock)


class Driver:
    """Moves a controller between targets with one half-way sample per trial."""

    def __init__(self, controller: TrialController, t: float = 0.0):
        self.controller = controller
        self.t = t
        self.results = []
        self.samples: List[PoseSample] = []

    def tick(self, position, trigger=False, ready=False):
        sample = PoseSample(position=position, timestamp=self.t, trigger_pressed=trigger, ready_pressed=ready)
        self.samples.append(sample)
        result = self.controller.tick(sample)
        self.results.append(result)
        self.t += STEP
        return result

    def select_current(self):
        """Step to the origin, then select at the active target's centre."""
        self.tick((0.0, 0.0, 0.0))
        return self.tick(self.controller.current_target.center, trigger=True)

    def run_to_end(self, max_selections: int = 1000) -> List:
        self.tick((0.0, 0.0, 0.0), ready=True)
        for _ in range(max_selections):
            if self.controller.state == SessionState.ENDED:
                break
            if self.controller.state == SessionState.BETWEEN_SETS:
                self.tick((0.0, 0.0, 0.0), ready=True)
            self.select_current()
        return [r.trial for r in self.results if r.trial is not None]


@pytest.fixture
def training_only_config() -> SessionConfig:
    return make_config(training_trials=2, skip_testing=True, trials_in_block=2)


@pytest.fixture
def small_session_config() -> SessionConfig:
    return make_config(
        training_trials=2,
        testing_trials=3,
        trials_in_block=8,
        testing_pairs=(
            TargetPairSpec(Direction.RIGHT, WidthClass.SMALL, DistanceClass.SHORT),
            TargetPairSpec(Direction.FORWARD, WidthClass.LARGE, DistanceClass.LONG),
        ),
    )


@pytest.fixture
def collector() -> TrialCollector:
    return TrialCollector()


@pytest.fixture
def origin() -> np.ndarray:
    return np.zeros(3)
