"""
Fitts' law trial engine.

Contains:
- Session progression over training and testing sets
- Movement analytics (axis distances, speeds, ballistic/correction split)
- Overshoot/undershoot detection
- Fitts' law and ISO effective metrics per trial, set and block
- Haptic intensity requests
- Pose stream replay, trial CSV logging and summaries
"""

from .config import SessionConfig, DetectorConfig, MovementConfig, HapticConfig, TargetTables
from .domain import (
    Phase,
    Direction,
    WidthClass,
    DistanceClass,
    GrowthPattern,
    TargetPairSpec,
    PoseSample,
    CompletedTrial,
    FittsLawData,
    SessionState,
)
from .engine import TrialController, TickResult
from .errors import FittsEngineError, ConfigurationError, SessionEndedError
from .session import build_session, run_session

__version__ = "0.1.0"

__all__ = [
    "SessionConfig",
    "DetectorConfig",
    "MovementConfig",
    "HapticConfig",
    "TargetTables",
    "Phase",
    "Direction",
    "WidthClass",
    "DistanceClass",
    "GrowthPattern",
    "TargetPairSpec",
    "PoseSample",
    "CompletedTrial",
    "FittsLawData",
    "SessionState",
    "TrialController",
    "TickResult",
    "FittsEngineError",
    "ConfigurationError",
    "SessionEndedError",
    "build_session",
    "run_session",
]
