"""Exception types raised by the engine."""
from __future__ import annotations


class FittsEngineError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(FittsEngineError):
    """Session cannot start: missing geometry, bad target ID or empty pair lists."""


class SessionEndedError(FittsEngineError):
    """Raised by strict callers that require an active session."""
