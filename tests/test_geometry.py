import math

import numpy as np
import pytest

from fitts_engine.domain.targets import Direction, TargetGeometry
from fitts_engine.processing.geometry import (
    FORWARD,
    axis_centre,
    axis_distance_between,
    axis_distance_to_boundary,
    axis_distance_to_midpoint,
    box_corners,
    delta_angle,
    direction_vector,
    is_contacting,
    movement_angle,
    movement_axis,
    movement_axis_index,
    quaternion_to_euler,
)


def right_box():
    return TargetGeometry(
        center=np.array([0.12, 0.0, 0.0]),
        half_extents=np.array([0.0125, 25.0, 25.0]),
        direction=Direction.RIGHT,
    )


def test_movement_axis_is_unit_vector():
    axis = movement_axis((0.0, 0.0, 0.1), (0.0, 0.0, -0.1))
    assert axis == pytest.approx([0.0, 0.0, -1.0])
    assert movement_axis_index(axis) == 1
    assert movement_axis_index(movement_axis((0.1, 0, 0), (-0.1, 0, 0))) == 0


def test_coincident_centres_fall_back_to_forward():
    axis = movement_axis((0.1, 0.0, 0.0), (0.1, 0.0, 0.0))
    assert axis == pytest.approx(FORWARD)


def test_off_direction_has_zero_vector():
    assert not direction_vector(Direction.OFF).any()


@pytest.mark.parametrize(
    "x, expected",
    [
        (0.0, 0.1075),  # short of the box
        (0.15, -0.0175),  # beyond the box
        (0.12, 0.0),  # inside
    ],
)
def test_axis_distance_to_boundary_sign(x, expected):
    assert axis_distance_to_boundary(Direction.RIGHT, (x, 0.0, 0.0), right_box()) == pytest.approx(expected)


def test_axis_distance_ignores_off_axis_offset():
    assert axis_distance_to_boundary(Direction.RIGHT, (0.0, 0.3, -0.2), right_box()) == pytest.approx(0.1075)


def test_axis_distance_to_midpoint_left():
    assert axis_distance_to_midpoint(Direction.LEFT, (0.0, 0.0, 0.0), (-0.12, 0.0, 0.0)) == pytest.approx(0.12)


def test_axis_distance_between_uses_direction_axis():
    assert axis_distance_between((0.1, 5.0, 0.0), (-0.1, 0.0, 3.0), Direction.RIGHT) == pytest.approx(0.2)
    assert axis_distance_between((0.0, 0.0, 0.2), (0.0, 0.0, -0.1), Direction.BACK) == pytest.approx(0.3)


def test_axis_centre_keeps_axis_component():
    assert axis_centre((0.12, 1.0, 2.0), 0) == pytest.approx([0.12, 0.0, 0.0])
    assert axis_centre((0.12, 1.0, 2.0), 1) == pytest.approx([0.0, 0.0, 2.0])


def test_contact_uses_sphere_radius():
    box = right_box()
    assert is_contacting((0.1, 0.0, 0.0), box, 0.01)
    assert not is_contacting((0.09, 0.0, 0.0), box, 0.01)


def test_box_corners():
    corners = box_corners(right_box())
    assert len(corners) == 8
    assert corners[0] == pytest.approx((0.1075, -25.0, -25.0))
    assert corners[-1] == pytest.approx((0.1325, 25.0, 25.0))


def test_movement_angle():
    angle = movement_angle((0.0, 0.0, 0.0), (0.1, 0.1, 0.0), (0.2, 0.0, 0.0), 0)
    assert angle == pytest.approx(45.0)


def test_quaternion_to_euler():
    assert quaternion_to_euler((0.0, 0.0, 0.0, 1.0)) == pytest.approx([0.0, 0.0, 0.0])
    half = math.sqrt(0.5)
    assert quaternion_to_euler((0.0, half, 0.0, half)) == pytest.approx([0.0, 90.0, 0.0])


@pytest.mark.parametrize(
    "current, target, expected",
    [(350.0, 10.0, 20.0), (10.0, 350.0, -20.0), (0.0, 180.0, 180.0), (90.0, 90.0, 0.0)],
)
def test_delta_angle(current, target, expected):
    assert delta_angle(current, target) == pytest.approx(expected)
