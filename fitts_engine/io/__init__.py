"""Pose stream input, trial table output and session observers."""

from .pose_stream import read_pose_stream, read_pose_table, frame_to_samples, samples_to_frame
from .trial_table import TRIAL_COLUMNS, TRIAL_HEADERS, trial_to_row, trials_to_frame
from .observers import TrialObserver, ConsoleReporter, TrialCsvLogger, TrialCollector

__all__ = [
    "read_pose_stream",
    "read_pose_table",
    "frame_to_samples",
    "samples_to_frame",
    "TRIAL_COLUMNS",
    "TRIAL_HEADERS",
    "trial_to_row",
    "trials_to_frame",
    "TrialObserver",
    "ConsoleReporter",
    "TrialCsvLogger",
    "TrialCollector",
]
