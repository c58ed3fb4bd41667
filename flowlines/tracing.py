"""Stepping primitive, basic/bidirectional tracing and start point strategies."""

import math
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .field import FlowField
from .models import Attractor, FlowLine, FlowLinesConfig, Point, TraceStop
from .postprocess import smooth_line
from .spatial import SpatialGrid

POISSON_CANDIDATES = 30


@dataclass
class Trace:
    points: List[Point]
    stop: TraceStop


def step(
    field: FlowField,
    point: Point,
    direction: int,
    step_length: float,
    attractors: Optional[Sequence[Attractor]] = None,
) -> Point:
    """Advance one step along (direction=1) or against (direction=-1) the field."""
    vx, vy = field.vector(point[0], point[1], attractors)
    return (
        point[0] + direction * vx * step_length,
        point[1] + direction * vy * step_length,
    )


def trace_line(
    field: FlowField,
    start: Point,
    step_length: float,
    max_steps: int,
    margin: float,
    attractors: Optional[Sequence[Attractor]] = None,
    grid: Optional[SpatialGrid] = None,
    separation: float = 0.0,
    direction: int = 1,
    include_start: bool = True,
) -> Trace:
    points: List[Point] = [start] if include_start else []
    current = start
    stop = TraceStop.MAX_STEPS

    for _ in range(max_steps):
        nxt = step(field, current, direction, step_length, attractors)
        if not field.in_bounds(nxt[0], nxt[1], margin):
            stop = TraceStop.OUT_OF_BOUNDS
            break
        if grid is not None and separation > 0 and grid.has_nearby(nxt[0], nxt[1], separation):
            stop = TraceStop.COLLISION
            break
        points.append(nxt)
        current = nxt

    return Trace(points, stop)


def trace_bidirectional(
    field: FlowField,
    start: Point,
    step_length: float,
    max_steps: int,
    margin: float,
    attractors: Optional[Sequence[Attractor]] = None,
    grid: Optional[SpatialGrid] = None,
    separation: float = 0.0,
) -> List[Point]:
    """Reversed backward trace + forward trace, joined at the seed."""
    forward = trace_line(
        field, start, step_length, max_steps, margin, attractors, grid, separation
    )
    backward = trace_line(
        field,
        start,
        step_length,
        max_steps,
        margin,
        attractors,
        grid,
        separation,
        direction=-1,
        include_start=False,
    )
    return backward.points[::-1] + forward.points


# -------------------------
# Start points
# -------------------------


def random_start_points(
    width: float, height: float, count: int, margin: float, rng: random.Random
) -> List[Point]:
    return [
        (
            margin + rng.random() * (width - 2 * margin),
            margin + rng.random() * (height - 2 * margin),
        )
        for _ in range(count)
    ]


def poisson_disk_points(
    width: float, height: float, count: int, margin: float, rng: random.Random
) -> List[Point]:
    """Dart throwing with an active list, then a seeded shuffle and truncation."""
    if count <= 0:
        return []

    inner_w = width - 2 * margin
    inner_h = height - 2 * margin
    min_dist = math.sqrt(inner_w * inner_h / (count * math.pi)) * 1.5

    cell = min_dist / math.sqrt(2)
    cols = math.ceil(inner_w / cell)
    rows = math.ceil(inner_h / cell)
    grid: List[List[Optional[Point]]] = [[None] * cols for _ in range(rows)]

    def cell_of(p: Point):
        return math.floor((p[0] - margin) / cell), math.floor((p[1] - margin) / cell)

    def remember(p: Point) -> None:
        gx, gy = cell_of(p)
        if 0 <= gx < cols and 0 <= gy < rows:
            grid[gy][gx] = p

    first = (margin + rng.random() * inner_w, margin + rng.random() * inner_h)
    points = [first]
    active = [first]
    remember(first)

    while active and len(points) < count * 2:
        idx = math.floor(rng.random() * len(active))
        ax, ay = active[idx]
        found = False

        for _ in range(POISSON_CANDIDATES):
            angle = rng.random() * math.pi * 2
            dist = min_dist + rng.random() * min_dist
            candidate = (ax + math.cos(angle) * dist, ay + math.sin(angle) * dist)

            if not (
                margin <= candidate[0] < width - margin
                and margin <= candidate[1] < height - margin
            ):
                continue

            gx, gy = cell_of(candidate)
            too_close = False
            for ny in range(gy - 2, gy + 3):
                for nx in range(gx - 2, gx + 3):
                    if 0 <= nx < cols and 0 <= ny < rows:
                        neighbor = grid[ny][nx]
                        if neighbor is not None and math.hypot(
                            neighbor[0] - candidate[0], neighbor[1] - candidate[1]
                        ) < min_dist:
                            too_close = True
                            break
                if too_close:
                    break

            if not too_close:
                points.append(candidate)
                active.append(candidate)
                remember(candidate)
                found = True
                break

        if not found:
            active.pop(idx)

    for i in range(len(points) - 1, 0, -1):
        j = math.floor(rng.random() * (i + 1))
        points[i], points[j] = points[j], points[i]

    return points[:count]


def grid_start_points(
    width: float, height: float, spacing: float, margin: float
) -> List[Point]:
    if spacing <= 0:
        raise ValueError(f"grid_spacing must be positive, got {spacing}")
    points: List[Point] = []
    y = margin
    while y < height - margin:
        x = margin
        while x < width - margin:
            points.append((x, y))
            x += spacing
        y += spacing
    return points


def select_start_points(cfg: FlowLinesConfig, rng: random.Random) -> List[Point]:
    if cfg.start_points is not None:
        return [
            (float(x), float(y))
            for x, y in cfg.start_points
            if cfg.margin <= x < cfg.width - cfg.margin
            and cfg.margin <= y < cfg.height - cfg.margin
        ]
    if cfg.even_distribution:
        return poisson_disk_points(cfg.width, cfg.height, cfg.line_count, cfg.margin, rng)
    return random_start_points(cfg.width, cfg.height, cfg.line_count, cfg.margin, rng)


# -------------------------
# Basic / bidirectional strategy
# -------------------------


def trace_seeded_lines(
    cfg: FlowLinesConfig,
    field: FlowField,
    rng: random.Random,
    bidirectional: bool = False,
) -> List[FlowLine]:
    separation = cfg.separation_distance
    grid = SpatialGrid(separation) if separation > 0 else None
    lines: List[FlowLine] = []

    for start in select_start_points(cfg, rng):
        if grid is not None and grid.has_nearby(start[0], start[1], separation):
            continue

        if bidirectional:
            points = trace_bidirectional(
                field, start, cfg.step_length, cfg.max_steps, cfg.margin,
                cfg.attractors, grid, separation,
            )
        else:
            points = trace_line(
                field, start, cfg.step_length, cfg.max_steps, cfg.margin,
                cfg.attractors, grid, separation,
            ).points

        if cfg.smoothing > 0 and len(points) > 2:
            points = smooth_line(points, cfg.smoothing)

        if len(points) >= cfg.min_line_length:
            lines.append(FlowLine(tuple(points)))
            if grid is not None:
                grid.add_line(points)

    return lines
