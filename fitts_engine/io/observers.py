# fitts_engine/io/observers.py
"""
Observers for session events.

The controller notifies every registered observer at session start, after
each logged trial, at session end and when a replay fails. Observers never
feed back into the engine.

Example:
    >>> from fitts_engine.session import build_session
    >>> from fitts_engine.io.observers import ConsoleReporter, TrialCsvLogger
    >>>
    >>> controller = build_session(config, observers=[
    ...     ConsoleReporter(),
    ...     TrialCsvLogger("logs/P01_block1.csv"),
    ... ])
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

import pandas as pd

from ..config.config import SessionConfig
from ..domain.records import CompletedTrial
from .trial_table import TRIAL_HEADERS, trial_to_row, trials_to_frame

logger = logging.getLogger(__name__)


class TrialObserver(ABC):
    """
    Abstract base class for session observers.
    """

    @abstractmethod
    def on_session_start(self, config: SessionConfig):
        """
        Called when the first set starts.

        Args:
            config: Session configuration
        """
        pass

    @abstractmethod
    def on_trial_complete(self, trial: CompletedTrial):
        """
        Called once per logged trial, before the next tick is processed.

        Args:
            trial: The immutable trial record
        """
        pass

    @abstractmethod
    def on_session_end(self, config: SessionConfig, trials: List[CompletedTrial]):
        """
        Called when the last set of the last phase closes.

        Args:
            config: Session configuration
            trials: Every trial logged during the session
        """
        pass

    @abstractmethod
    def on_error(self, config: SessionConfig, error: Exception):
        """
        Called when a replay raises.

        Args:
            config: Session configuration
            error: Exception that occurred
        """
        pass


class ConsoleReporter(TrialObserver):
    """
    Reports session progress through logging.

    Example:
        >>> reporter = ConsoleReporter(verbose=True)
        >>> controller.register_observer(reporter)
    """

    def __init__(self, verbose: bool = False):
        """
        Args:
            verbose: If True, logs one line per trial
        """
        self.verbose = verbose

    def on_session_start(self, config: SessionConfig):
        logger.info(
            "Starting session: participant %d, block %d (training=%s, testing=%s)",
            config.participant_number, config.block_number,
            not config.skip_training, not config.skip_testing,
        )

    def on_trial_complete(self, trial: CompletedTrial):
        if trial.skip_reason is not None:
            logger.warning(
                "Trial %d of set %d skipped: %s",
                trial.trial_number_in_set, trial.set_number, trial.skip_reason.value,
            )
        elif self.verbose:
            logger.info(
                "Set %d trial %d: MT=%.0f ms, ID=%.2f bits, TP=%.2f bits/s, hit=%d",
                trial.set_number, trial.trial_number_in_set,
                trial.fitts_data.movement_time_ms, trial.fitts_data.id,
                trial.fitts_data.throughput, trial.is_hit,
            )
        if trial.is_last_in_set and trial.fitts_data.throughput_for_set > 0:
            logger.info(
                "Set %d closed: TP=%.2f bits/s, effective TP=%.2f bits/s",
                trial.set_number, trial.fitts_data.throughput_for_set,
                trial.fitts_data.effective_iso_throughput,
            )

    def on_session_end(self, config: SessionConfig, trials: List[CompletedTrial]):
        hits = sum(t.is_hit for t in trials)
        logger.info(
            "Session complete: %d trial(s), %d hit(s), %d skipped",
            len(trials), hits, sum(1 for t in trials if t.skipped),
        )

    def on_error(self, config: SessionConfig, error: Exception):
        logger.error("Session for participant %d failed: %s", config.participant_number, error)


class TrialCsvLogger(TrialObserver):
    """
    Appends one CSV row per trial using the trial-log headers.

    The header is written when the file is new or empty. Rows are appended
    as trials arrive so a crashed session keeps what it logged.

    Example:
        >>> csv_logger = TrialCsvLogger("logs/P01.csv")
        >>> controller.register_observer(csv_logger)
    """

    def __init__(self, log_file: Union[str, Path]):
        """
        Args:
            log_file: Path to the CSV file
        """
        self.log_file = Path(log_file)
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self.rows_written = 0

        if not self.log_file.exists() or self.log_file.stat().st_size == 0:
            self._create_header()

    def _create_header(self):
        pd.DataFrame(columns=TRIAL_HEADERS).to_csv(self.log_file, index=False)

    def on_session_start(self, config: SessionConfig):
        pass

    def on_trial_complete(self, trial: CompletedTrial):
        row = pd.DataFrame([trial_to_row(trial)], columns=TRIAL_HEADERS)
        row.to_csv(self.log_file, mode="a", header=False, index=False)
        self.rows_written += 1

    def on_session_end(self, config: SessionConfig, trials: List[CompletedTrial]):
        logger.info("%d trial row(s) written to %s", self.rows_written, self.log_file)

    def on_error(self, config: SessionConfig, error: Exception):
        pass


class TrialCollector(TrialObserver):
    """Keeps trial records in memory."""

    def __init__(self):
        self.trials: List[CompletedTrial] = []
        self.started = False
        self.ended = False
        self.errors: List[Exception] = []

    def on_session_start(self, config: SessionConfig):
        self.started = True

    def on_trial_complete(self, trial: CompletedTrial):
        self.trials.append(trial)

    def on_session_end(self, config: SessionConfig, trials: List[CompletedTrial]):
        self.ended = True

    def on_error(self, config: SessionConfig, error: Exception):
        self.errors.append(error)

    def to_frame(self) -> pd.DataFrame:
        return trials_to_frame(self.trials)
