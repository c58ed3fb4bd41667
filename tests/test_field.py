import math

import pytest

from flowlines.field import FlowField
from flowlines.models import Attractor, FieldMode


@pytest.mark.parametrize("mode", list(FieldMode))
def test_every_mode_yields_unit_vectors(mode):
    field = FlowField(200, 150, 10, seed=42, mode=mode)
    assert (field.cols, field.rows) == (20, 15)
    for x in range(0, 200, 17):
        for y in range(0, 150, 13):
            vx, vy = field.vector(x, y)
            assert math.isclose(math.hypot(vx, vy), 1.0, rel_tol=1e-9)
            assert 0.0 <= field.speed(x, y) <= 1.0


def test_field_is_deterministic():
    a = FlowField(100, 100, 10, seed=5, mode=FieldMode.CURL)
    b = FlowField(100, 100, 10, seed=5, mode=FieldMode.CURL)
    assert a.vector(33, 71) == b.vector(33, 71)


def test_field_mode_accepts_strings():
    assert FlowField(50, 50, 10, seed=1, mode="spiral").mode is FieldMode.SPIRAL


def test_angle_modes_have_uniform_speed():
    field = FlowField(100, 100, 10, seed=5, mode=FieldMode.NORMAL)
    assert all(field.speed(x, y) == 1.0 for x in range(0, 100, 10) for y in range(0, 100, 10))


def test_curl_speed_is_normalized_to_peak():
    field = FlowField(100, 100, 10, seed=5, mode=FieldMode.CURL)
    speeds = [field.speed(x, y) for x in range(0, 100, 10) for y in range(0, 100, 10)]
    assert max(speeds) == pytest.approx(1.0)


def test_lookups_outside_the_canvas_clamp_to_edge_cells():
    field = FlowField(100, 100, 10, seed=5)
    assert field.vector(-50, -50) == field.vector(0, 0)
    assert field.vector(500, 500) == field.vector(99, 99)


def test_strong_attractor_dominates_direction():
    field = FlowField(200, 200, 10, seed=3)
    attractor = Attractor(x=150, y=100, radius=100, strength=1000)
    vx, vy = field.vector(100, 100, [attractor])
    assert vx > 0.99
    assert math.isclose(math.hypot(vx, vy), 1.0)


def test_attractor_out_of_range_has_no_effect():
    field = FlowField(200, 200, 10, seed=3)
    far = Attractor(x=190, y=190, radius=10, strength=5)
    assert field.vector(20, 20, [far]) == pytest.approx(field.vector(20, 20))


def test_repelling_attractor_pushes_away():
    field = FlowField(200, 200, 10, seed=3)
    repeller = Attractor(x=150, y=100, radius=100, strength=-1000)
    vx, _ = field.vector(100, 100, [repeller])
    assert vx < -0.99


def test_in_bounds_is_half_open():
    field = FlowField(100, 100, 10, seed=1)
    assert field.in_bounds(10, 10, margin=10)
    assert not field.in_bounds(90, 50, margin=10)
    assert not field.in_bounds(9.99, 50, margin=10)


@pytest.mark.parametrize("resolution", [0, -5])
def test_non_positive_resolution_is_rejected(resolution):
    with pytest.raises(ValueError):
        FlowField(100, 100, resolution)
