"""Edge geometry for connections drawn between rectangular nodes.

All functions are pure and work on ``(x, y)`` tuples in canvas space, so the
same code serves painting, hit testing and tests.  A node is anything with
``x``, ``y``, ``width`` and ``height`` attributes (``x``/``y`` being the top
left corner).
"""

from __future__ import annotations

from dataclasses import dataclass
import math

from .constants import (
    ARROW_HALF_ANGLE,
    ARROW_LENGTH,
    CURVE_HIT_SAMPLES,
    CURVE_OFFSET_FACTOR,
    CURVE_OFFSET_MAX,
)

Point = tuple[float, float]


@dataclass(frozen=True)
class EdgePath:
    start: Point
    cp1: Point
    cp2: Point
    end: Point
    arrowhead: tuple[Point, Point, Point]


def node_center(node) -> Point:
    return (node.x + (node.width / 2.0), node.y + (node.height / 2.0))


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def rectangle_edge_point(node, angle: float, outgoing: bool = True) -> Point:
    """Return where a ray from the node centre along ``angle`` leaves the node.

    For an incoming edge the ray is reversed, so the point lands on the side of
    the target facing the source.
    """
    if not outgoing:
        angle += math.pi
    center_x, center_y = node_center(node)
    half_w = node.width / 2.0
    half_h = node.height / 2.0
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    if abs(cos_a) * half_h > abs(sin_a) * half_w:
        # left or right edge
        x = center_x + math.copysign(half_w, cos_a)
        y = center_y + (half_w * sin_a / abs(cos_a))
    else:
        x = center_x + (half_h * cos_a / abs(sin_a)) if sin_a else center_x
        y = center_y + math.copysign(half_h, sin_a)
    return (x, y)


def edge_anchors(from_node, to_node) -> tuple[Point, Point]:
    from_x, from_y = node_center(from_node)
    to_x, to_y = node_center(to_node)
    angle = math.atan2(to_y - from_y, to_x - from_x)
    start = rectangle_edge_point(from_node, angle, outgoing=True)
    end = rectangle_edge_point(to_node, angle, outgoing=False)
    return start, end


def bezier_control_points(start: Point, end: Point) -> tuple[Point, Point]:
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    offset = min(distance(start, end) * CURVE_OFFSET_FACTOR, CURVE_OFFSET_MAX)
    if abs(dx) > abs(dy):
        offset = math.copysign(offset, dx)
        return (start[0] + offset, start[1]), (end[0] - offset, end[1])
    offset = math.copysign(offset, dy)
    return (start[0], start[1] + offset), (end[0], end[1] - offset)


def arrowhead_vertices(
    tip: Point,
    cp2: Point,
    length: float = ARROW_LENGTH,
    half_angle: float = ARROW_HALF_ANGLE,
) -> tuple[Point, Point, Point]:
    """Tip plus the two base vertices of an arrowhead ending at ``tip``.

    The curve tangent at its end is approximated by the direction from the
    second control point to the tip.
    """
    angle = math.atan2(tip[1] - cp2[1], tip[0] - cp2[0])
    left = (
        tip[0] - (length * math.cos(angle - half_angle)),
        tip[1] - (length * math.sin(angle - half_angle)),
    )
    right = (
        tip[0] - (length * math.cos(angle + half_angle)),
        tip[1] - (length * math.sin(angle + half_angle)),
    )
    return tip, left, right


def connection_path(from_node, to_node) -> EdgePath:
    start, end = edge_anchors(from_node, to_node)
    cp1, cp2 = bezier_control_points(start, end)
    return EdgePath(start, cp1, cp2, end, arrowhead_vertices(end, cp2))


def bezier_point(start: Point, cp1: Point, cp2: Point, end: Point, t: float) -> Point:
    inv = 1.0 - t
    a = inv * inv * inv
    b = 3.0 * inv * inv * t
    c = 3.0 * inv * t * t
    d = t * t * t
    return (
        (a * start[0]) + (b * cp1[0]) + (c * cp2[0]) + (d * end[0]),
        (a * start[1]) + (b * cp1[1]) + (c * cp2[1]) + (d * end[1]),
    )


def _distance_to_segment(point: Point, a: Point, b: Point) -> float:
    seg_x = b[0] - a[0]
    seg_y = b[1] - a[1]
    length_sq = (seg_x * seg_x) + (seg_y * seg_y)
    if length_sq == 0:
        return distance(point, a)
    t = (((point[0] - a[0]) * seg_x) + ((point[1] - a[1]) * seg_y)) / length_sq
    t = max(0.0, min(1.0, t))
    return distance(point, (a[0] + (seg_x * t), a[1] + (seg_y * t)))


def distance_to_curve(point: Point, path: EdgePath, samples: int = CURVE_HIT_SAMPLES) -> float:
    samples = max(1, samples)
    best = math.inf
    previous = path.start
    for step in range(1, samples + 1):
        current = bezier_point(path.start, path.cp1, path.cp2, path.end, step / samples)
        best = min(best, _distance_to_segment(point, previous, current))
        previous = current
    return best
