# fitts_engine/config/constants.py
"""Numeric constants and message templates shared across the engine."""

from __future__ import annotations


class FittsConstants:
    """Constants from the Shannon formulation and ISO 9241-411."""

    # Scales the endpoint standard deviation to the effective width (~96% of hits)
    EFFECTIVE_WIDTH_FACTOR: float = 4.133

    # Precision class boundaries on ID (bits)
    HIGH_PRECISION_ID: float = 6.0
    MEDIUM_PRECISION_ID: float = 4.0
    LOW_PRECISION_ID: float = 3.0

    # Effective metrics need at least this many endpoints
    MIN_EFFECTIVE_SAMPLES: int = 2


class SessionDefaults:
    """Defaults for the experiment session layout."""

    TRAINING_TRIALS: int = 9
    TESTING_TRIALS: int = 9
    TRIALS_IN_BLOCK: int = 63

    # Sentinel for "no selection has happened yet"
    UNSET_TIME: float = -1.0

    # Sentinel target ID for width/distance combinations outside the grid
    INVALID_TARGET_ID: int = -1

    # Sphere radius of the tracked controller anchor (m)
    CONTROLLER_WIDTH: float = 0.01

    # Trigger presses closer together than this are ignored (s)
    INPUT_DELAY: float = 0.1


class ValidationMessages:
    """Standard validation and error messages."""

    BOTH_PHASES_SKIPPED = "Both skip_training and skip_testing are set; nothing to run"
    NO_TRAINING_PAIRS = "No training pairs configured"
    NO_TESTING_PAIRS = "No testing pairs configured"
    OFF_DIRECTION = "Target pair {index} uses Direction.OFF as its first direction"
    INVALID_TARGET_ID = "Target pair {index} has no target ID for width={width} distance={distance}"
    UNKNOWN_ENUM = "Unknown {kind} value: {value!r}"
    INVALID_QUOTA = "{name} must be >= 1, got {value}"
    MISSING_POSE_COLUMNS = "Pose stream is missing columns: {columns}"
    BLOCK_SIZE_MISMATCH = (
        "trials_in_block is {configured} but the configured sets log {expected} trial(s); "
        "block metrics will not be produced"
    )
