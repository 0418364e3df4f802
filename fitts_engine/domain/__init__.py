"""Domain types: target conditions, pose samples and trial records."""

from .targets import (
    Phase,
    Direction,
    WidthClass,
    DistanceClass,
    AxisType,
    GrowthPattern,
    TargetPairSpec,
    TargetGeometry,
    TargetPair,
    compute_target_id,
    block_letter,
)
from .samples import PoseSample
from .records import (
    SkipReason,
    OvershootUndershootData,
    FittsLawData,
    CompletedTrial,
)
from .state import SessionState

__all__ = [
    "Phase",
    "Direction",
    "WidthClass",
    "DistanceClass",
    "AxisType",
    "GrowthPattern",
    "TargetPairSpec",
    "TargetGeometry",
    "TargetPair",
    "compute_target_id",
    "block_letter",
    "PoseSample",
    "SkipReason",
    "OvershootUndershootData",
    "FittsLawData",
    "CompletedTrial",
    "SessionState",
]
