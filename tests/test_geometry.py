import math

import pytest

from roadmapper.constants import ARROW_LENGTH, CURVE_OFFSET_MAX
from roadmapper.geometry import (
    bezier_control_points,
    bezier_point,
    connection_path,
    distance,
    distance_to_curve,
    edge_anchors,
    node_center,
)
from roadmapper.model import Node


def _node(x, y, width=280.0, height=160.0):
    return Node(id=f"n-{x}-{y}", course_id=f"c-{x}-{y}", x=x, y=y, width=width, height=height)


def test_horizontal_anchors_sit_on_facing_sides():
    source = _node(0, 0)
    target = _node(500, 0)

    start, end = edge_anchors(source, target)

    assert start == pytest.approx((280.0, 80.0))
    assert end == pytest.approx((500.0, 80.0))


def test_vertical_anchors_sit_on_bottom_and_top():
    source = _node(0, 0)
    target = _node(0, 400)

    start, end = edge_anchors(source, target)

    assert start == pytest.approx((140.0, 160.0))
    assert end == pytest.approx((140.0, 400.0))


def test_diagonal_anchors_land_on_the_rectangle_borders():
    source = _node(0, 0)
    target = _node(1000, 1000)

    start, end = edge_anchors(source, target)

    # 45 degrees leaves a 280x160 card through its bottom edge
    assert start == pytest.approx((220.0, 160.0))
    assert end == pytest.approx((1060.0, 1000.0))


def test_anchors_are_on_the_line_between_centers():
    source = _node(10, 30)
    target = _node(-600, 250)
    start, end = edge_anchors(source, target)
    (ax, ay), (bx, by) = node_center(source), node_center(target)
    for px, py in (start, end):
        cross = ((bx - ax) * (py - ay)) - ((by - ay) * (px - ax))
        assert cross == pytest.approx(0.0, abs=1e-6)


def test_control_points_offset_along_dominant_axis():
    cp1, cp2 = bezier_control_points((280.0, 80.0), (500.0, 80.0))
    assert cp1 == pytest.approx((368.0, 80.0))
    assert cp2 == pytest.approx((412.0, 80.0))

    cp1, cp2 = bezier_control_points((140.0, 160.0), (140.0, 400.0))
    assert cp1 == pytest.approx((140.0, 256.0))
    assert cp2 == pytest.approx((140.0, 304.0))


def test_control_points_follow_direction_of_travel():
    cp1, cp2 = bezier_control_points((500.0, 0.0), (300.0, 20.0))
    assert cp1[0] < 500.0
    assert cp2[0] > 300.0


def test_control_point_offset_is_capped():
    cp1, cp2 = bezier_control_points((0.0, 0.0), (2000.0, 0.0))
    assert cp1 == pytest.approx((CURVE_OFFSET_MAX, 0.0))
    assert cp2 == pytest.approx((2000.0 - CURVE_OFFSET_MAX, 0.0))


def test_arrowhead_points_back_along_the_curve():
    path = connection_path(_node(0, 0), _node(500, 0))
    tip, left, right = path.arrowhead

    assert tip == pytest.approx(path.end)
    assert distance(tip, left) == pytest.approx(ARROW_LENGTH)
    assert distance(tip, right) == pytest.approx(ARROW_LENGTH)
    assert left[0] < tip[0] and right[0] < tip[0]
    assert left[1] == pytest.approx(tip[1] + ARROW_LENGTH * math.sin(math.pi / 6))
    assert right[1] == pytest.approx(tip[1] - ARROW_LENGTH * math.sin(math.pi / 6))


def test_bezier_point_endpoints():
    path = connection_path(_node(0, 0), _node(500, 300))
    assert bezier_point(path.start, path.cp1, path.cp2, path.end, 0.0) == pytest.approx(path.start)
    assert bezier_point(path.start, path.cp1, path.cp2, path.end, 1.0) == pytest.approx(path.end)


def test_distance_to_curve():
    path = connection_path(_node(0, 0), _node(500, 0))
    assert distance_to_curve((390.0, 80.0), path) == pytest.approx(0.0, abs=1e-6)
    assert distance_to_curve((390.0, 110.0), path) == pytest.approx(30.0, abs=1e-6)


def _on_border(point, node):
    cx, cy = node_center(node)
    dx, dy = abs(point[0] - cx), abs(point[1] - cy)
    half_w, half_h = node.width / 2.0, node.height / 2.0
    on_side = dx == pytest.approx(half_w) and dy <= half_h + 1e-6
    on_top_or_bottom = dy == pytest.approx(half_h) and dx <= half_w + 1e-6
    return on_side or on_top_or_bottom


def _faces(point, node, other):
    cx, cy = node_center(node)
    ox, oy = node_center(other)
    return (point[0] - cx) * (ox - cx) + (point[1] - cy) * (oy - cy) > 0


@pytest.mark.parametrize("degrees", [0, 30, 60, 90, 135, 180, 225, 270, 315])
@pytest.mark.parametrize("small_first", [True, False])
def test_anchors_use_each_rectangles_own_size(degrees, small_first):
    small = _node(0, 0, width=100.0, height=40.0)
    angle = math.radians(degrees)
    center_x = 50.0 + (600.0 * math.cos(angle))
    center_y = 20.0 + (600.0 * math.sin(angle))
    large = _node(center_x - 150.0, center_y - 100.0, width=300.0, height=200.0)
    source, target = (small, large) if small_first else (large, small)

    start, end = edge_anchors(source, target)

    assert _on_border(start, source)
    assert _on_border(end, target)
    assert _faces(start, source, target)
    assert _faces(end, target, source)
