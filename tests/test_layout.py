import random

import pytest

from conftest import make_config

from fitts_engine.config import TargetTables
from fitts_engine.domain.targets import (
    AxisType,
    Direction,
    DistanceClass,
    GrowthPattern,
    TargetPairSpec,
    WidthClass,
    block_letter,
    compute_target_id,
)
from fitts_engine.errors import ConfigurationError
from fitts_engine.layout import lay_out_pair, lay_out_pairs, shuffle_pairs


@pytest.mark.parametrize(
    "width, distance, expected",
    [
        (WidthClass.TRAINING, DistanceClass.TRAINING, 0),
        (WidthClass.SMALL, DistanceClass.SHORT, 1),
        (WidthClass.SMALL, DistanceClass.LONG, 3),
        (WidthClass.LARGE, DistanceClass.SHORT, 4),
        (WidthClass.LARGE, DistanceClass.LONG, 6),
        (WidthClass.SMALL, DistanceClass.TRAINING, -1),
        (WidthClass.TRAINING, DistanceClass.SHORT, -1),
    ],
)
def test_target_id(width, distance, expected):
    assert compute_target_id(width, distance) == expected


@pytest.mark.parametrize(
    "axis, pattern, letter",
    [
        (AxisType.HORIZONTAL, GrowthPattern.QUADRATIC, "A"),
        (AxisType.VERTICAL, GrowthPattern.QUADRATIC, "B"),
        (AxisType.HORIZONTAL, GrowthPattern.PULSE, "C"),
        (AxisType.VERTICAL, GrowthPattern.LINEAR, "F"),
        (AxisType.VERTICAL, GrowthPattern.STAIR, "H"),
    ],
)
def test_block_letter(axis, pattern, letter):
    assert block_letter(axis, pattern) == letter


def test_lay_out_horizontal_pair():
    spec = TargetPairSpec(Direction.RIGHT, WidthClass.TRAINING, DistanceClass.TRAINING)
    pair = lay_out_pair(spec, 0, TargetTables())

    assert pair.target_id == 0
    assert pair.direction2 == Direction.LEFT
    assert pair.geometry1.center == pytest.approx([0.12, 0.0, 0.0])
    assert pair.geometry2.center == pytest.approx([-0.12, 0.0, 0.0])
    assert pair.geometry1.width == pytest.approx(0.025)
    assert pair.geometry1.half_extents == pytest.approx([0.0125, 25.0, 25.0])
    assert pair.amplitude == pytest.approx(0.24)


def test_lay_out_vertical_pair():
    spec = TargetPairSpec(Direction.BACK, WidthClass.LARGE, DistanceClass.MEDIUM)
    pair = lay_out_pair(spec, 3, TargetTables())

    assert pair.target_id == 5
    assert pair.pair_index == 3
    assert pair.direction2 == Direction.FORWARD
    assert pair.geometry1.center == pytest.approx([0.0, 0.0, -0.1])
    assert pair.geometry2.width == pytest.approx(0.035)


def test_off_direction_is_rejected():
    spec = TargetPairSpec(Direction.OFF, WidthClass.SMALL, DistanceClass.SHORT)
    with pytest.raises(ConfigurationError):
        lay_out_pair(spec, 0, TargetTables())


def test_invalid_target_id_is_rejected():
    spec = TargetPairSpec(Direction.RIGHT, WidthClass.SMALL, DistanceClass.TRAINING)
    with pytest.raises(ConfigurationError):
        lay_out_pair(spec, 0, TargetTables())


def test_missing_geometry_is_rejected():
    tables = TargetTables(distances={DistanceClass.SHORT: 0.05})
    spec = TargetPairSpec(Direction.RIGHT, WidthClass.SMALL, DistanceClass.LONG)
    with pytest.raises(ConfigurationError):
        lay_out_pair(spec, 0, tables)


def test_pair_index_runs_over_both_phases():
    training, testing = lay_out_pairs(make_config())
    assert [p.pair_index for p in training] == [0]
    assert [p.pair_index for p in testing] == [1, 2, 3, 4, 5, 6]


def test_empty_testing_pairs_rejected():
    with pytest.raises(ConfigurationError):
        lay_out_pairs(make_config(testing_pairs=()))


def test_shuffle_is_deterministic_permutation():
    _, testing = lay_out_pairs(make_config())
    first = shuffle_pairs(testing, random.Random(7))
    second = shuffle_pairs(testing, random.Random(7))

    assert [p.target_id for p in first] == [p.target_id for p in second]
    assert sorted(p.target_id for p in first) == [1, 2, 3, 4, 5, 6]
    assert [p.target_id for p in testing] == [1, 2, 3, 4, 5, 6]
