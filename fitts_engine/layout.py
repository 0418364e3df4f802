# fitts_engine/layout.py
"""Resolve configured target pairs into world-space geometry."""
from __future__ import annotations

import logging
import random
from typing import List, Sequence, Tuple

import numpy as np

from .config.config import SessionConfig, TargetTables
from .config.constants import SessionDefaults, ValidationMessages
from .domain.targets import (
    Direction,
    TargetGeometry,
    TargetPair,
    TargetPairSpec,
    compute_target_id,
)
from .errors import ConfigurationError
from .processing.geometry import opposite_direction

logger = logging.getLogger(__name__)


def target_geometry(
    direction: Direction,
    distance: float,
    width: float,
    tables: TargetTables,
) -> TargetGeometry:
    """Box for one target: ``width`` along its axis, ``off_axis_scale`` elsewhere."""
    center = np.zeros(3)
    scale = np.full(3, tables.off_axis_scale, dtype=float)
    if direction in (Direction.FORWARD, Direction.BACK):
        center[2] = distance if direction == Direction.FORWARD else -distance
        scale[2] = width
    elif direction in (Direction.LEFT, Direction.RIGHT):
        center[0] = distance if direction == Direction.RIGHT else -distance
        scale[0] = width
    else:
        raise ConfigurationError(f"Cannot place a target in direction {direction}")
    return TargetGeometry(center=center, half_extents=scale / 2.0, direction=direction)


def lay_out_pair(spec: TargetPairSpec, pair_index: int, tables: TargetTables) -> TargetPair:
    if spec.first_direction == Direction.OFF:
        raise ConfigurationError(ValidationMessages.OFF_DIRECTION.format(index=pair_index))

    target_id = compute_target_id(spec.width, spec.distance)
    if target_id == SessionDefaults.INVALID_TARGET_ID:
        raise ConfigurationError(
            ValidationMessages.INVALID_TARGET_ID.format(
                index=pair_index, width=spec.width.name, distance=spec.distance.name
            )
        )

    distance = tables.distance_for(spec.distance)
    width = tables.width_for(spec.width)
    if distance <= 0 or width <= 0:
        raise ConfigurationError(
            f"Target pair {pair_index} has no geometry (distance={distance}, width={width})"
        )

    direction2 = opposite_direction(spec.first_direction)
    return TargetPair(
        spec=spec,
        target_id=target_id,
        pair_index=pair_index,
        direction1=spec.first_direction,
        direction2=direction2,
        geometry1=target_geometry(spec.first_direction, distance, width, tables),
        geometry2=target_geometry(direction2, distance, width, tables),
    )


def lay_out_pairs(config: SessionConfig) -> Tuple[List[TargetPair], List[TargetPair]]:
    """Lay out training and testing pairs.

    ``pair_index`` runs over the training pairs first, then the testing
    pairs. Raises ``ConfigurationError`` for any pair that cannot be placed
    or when a phase that will run has no pairs.
    """
    if config.skip_training and config.skip_testing:
        raise ConfigurationError(ValidationMessages.BOTH_PHASES_SKIPPED)
    if not config.skip_training and not config.training_pairs:
        raise ConfigurationError(ValidationMessages.NO_TRAINING_PAIRS)
    if not config.skip_testing and not config.testing_pairs:
        raise ConfigurationError(ValidationMessages.NO_TESTING_PAIRS)

    specs = list(config.training_pairs) + list(config.testing_pairs)
    pairs = [lay_out_pair(spec, i, config.tables) for i, spec in enumerate(specs)]
    n_training = len(config.training_pairs)
    logger.info(
        "Laid out %d training and %d testing pair(s)",
        n_training, len(pairs) - n_training,
    )
    return pairs[:n_training], pairs[n_training:]


def shuffle_pairs(pairs: Sequence[TargetPair], rng: random.Random) -> List[TargetPair]:
    """Fisher-Yates shuffle of a copy of ``pairs`` using ``rng``."""
    result = list(pairs)
    n = len(result)
    while n > 1:
        n -= 1
        k = rng.randint(0, n)
        result[k], result[n] = result[n], result[k]
    return result
