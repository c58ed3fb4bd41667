import math

import pytest

from flowlines.postprocess import (
    perpendicular_distance,
    simplify_line,
    smooth_line,
)

ZIGZAG = [(0.0, 0.0), (10.0, 10.0), (20.0, 0.0), (30.0, 10.0), (40.0, 0.0)]


def test_smoothing_keeps_endpoints():
    smoothed = smooth_line(ZIGZAG, 1.0)
    assert smoothed[0] == ZIGZAG[0]
    assert smoothed[-1] == ZIGZAG[-1]


def test_one_pass_doubles_point_count():
    # strength 0.3 -> ceil(0.9) = 1 pass
    assert len(smooth_line(ZIGZAG, 0.3)) == 2 * len(ZIGZAG)


def test_more_strength_means_more_passes():
    assert len(smooth_line(ZIGZAG, 1.0)) > len(smooth_line(ZIGZAG, 0.5))


def test_smoothing_cuts_corners():
    smoothed = smooth_line(ZIGZAG, 0.3)
    assert max(y for _, y in smoothed) < 10.0


@pytest.mark.parametrize("strength", [0, -1])
def test_zero_strength_is_identity(strength):
    assert smooth_line(ZIGZAG, strength) == ZIGZAG


def test_short_lines_are_not_smoothed():
    line = [(0.0, 0.0), (5.0, 5.0)]
    assert smooth_line(line, 1.0) == line


def test_collinear_points_collapse_to_endpoints():
    line = [(float(i), 2.0 * i) for i in range(20)]
    assert simplify_line(line, 0.1) == [line[0], line[-1]]


def test_simplify_keeps_significant_corners():
    assert simplify_line(ZIGZAG, 1.0) == ZIGZAG


def test_simplify_is_idempotent():
    line = [(i * 1.0, math.sin(i * 0.3) * 10) for i in range(60)]
    once = simplify_line(line, 0.5)
    assert simplify_line(once, 0.5) == once
    assert len(once) < len(line)


def test_simplified_points_are_a_subsequence():
    line = [(i * 1.0, math.sin(i * 0.3) * 10) for i in range(60)]
    simplified = simplify_line(line, 0.5)
    it = iter(line)
    assert all(point in it for point in simplified)


def test_perpendicular_distance_clamps_to_segment():
    assert perpendicular_distance((5.0, 3.0), (0.0, 0.0), (10.0, 0.0)) == pytest.approx(3.0)
    assert perpendicular_distance((13.0, 4.0), (0.0, 0.0), (10.0, 0.0)) == pytest.approx(5.0)
    assert perpendicular_distance((3.0, 4.0), (0.0, 0.0), (0.0, 0.0)) == pytest.approx(5.0)
