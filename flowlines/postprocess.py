"""Corner rounding and point reduction for traced lines."""

import math
from typing import List, Sequence

import numpy as np

from .models import Point


def smooth_line(points: Sequence[Point], strength: float) -> List[Point]:
    """Chaikin corner cutting, ceil(strength * 3) passes, endpoints fixed."""
    if len(points) < 3 or strength <= 0:
        return list(points)

    pts = np.asarray(points, dtype=np.float64)
    for _ in range(math.ceil(strength * 3)):
        head = pts[:-1]
        tail = pts[1:]
        q = 0.75 * head + 0.25 * tail
        r = 0.25 * head + 0.75 * tail
        cut = np.empty((2 * len(head), 2), dtype=np.float64)
        cut[0::2] = q
        cut[1::2] = r
        pts = np.concatenate((pts[:1], cut, pts[-1:]))

    return [(float(x), float(y)) for x, y in pts]


def perpendicular_distance(point: Point, start: Point, end: Point) -> float:
    """Distance from point to the segment start-end."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(point[0] - start[0], point[1] - start[1])

    t = ((point[0] - start[0]) * dx + (point[1] - start[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(point[0] - (start[0] + t * dx), point[1] - (start[1] + t * dy))


def simplify_line(points: Sequence[Point], epsilon: float) -> List[Point]:
    """Ramer-Douglas-Peucker reduction."""
    if len(points) < 3:
        return list(points)

    start = points[0]
    end = points[-1]
    max_dist = 0.0
    max_index = 0
    for i in range(1, len(points) - 1):
        dist = perpendicular_distance(points[i], start, end)
        if dist > max_dist:
            max_dist = dist
            max_index = i

    if max_dist > epsilon:
        left = simplify_line(points[: max_index + 1], epsilon)
        right = simplify_line(points[max_index:], epsilon)
        return left[:-1] + right

    return [start, end]
