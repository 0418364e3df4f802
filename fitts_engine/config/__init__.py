"""Configuration and constants for the trial engine."""

from .config import (
    TargetTables,
    DetectorConfig,
    MovementConfig,
    HapticConfig,
    SessionConfig,
)
from .constants import FittsConstants, SessionDefaults, ValidationMessages

__all__ = [
    "TargetTables",
    "DetectorConfig",
    "MovementConfig",
    "HapticConfig",
    "SessionConfig",
    "FittsConstants",
    "SessionDefaults",
    "ValidationMessages",
]
