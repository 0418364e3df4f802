"""Session progression states."""
from __future__ import annotations

from enum import Enum


class SessionState(Enum):
    AWAITING_START = "awaiting_start"
    WITHIN_SET = "within_set"
    BETWEEN_SETS = "between_sets"
    ENDED = "ended"
