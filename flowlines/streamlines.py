"""Density-aware space-filling streamlines ("fill mode")."""

import heapq
import itertools
import math
import random
from typing import List, Optional, Sequence, Tuple

from .field import FlowField
from .models import DensityPoint, FlowLine, FlowLinesConfig, Point, TraceStop
from .noise import (
    DENSITY_NOISE_OFFSET,
    FATIGUE_NOISE_OFFSET,
    WOBBLE_NOISE_OFFSET,
    SimplexNoise,
)
from .postprocess import smooth_line
from .spatial import SpatialGrid
from .tracing import Trace

DENSITY_POINT_PRIORITY = 10.0
EDGE_BAND = 0.3  # fraction of the shorter canvas side
STALL_FRACTION = 0.15
SHAKE_EVERY = 15  # accepted lines between queue shakes
SHAKE_COUNT = 20


class DensityModel:
    """Local target separation: base spacing shaped by noise and painted points."""

    def __init__(
        self,
        base_separation: float,
        min_separation: float,
        density_points: Sequence[DensityPoint] = (),
        noise: Optional[SimplexNoise] = None,
        noise_scale: float = 0.003,
        variation: float = 0.0,
    ):
        self.base_separation = base_separation
        self.min_separation = min_separation
        self.density_points = list(density_points)
        self.noise = noise
        self.noise_scale = noise_scale
        self.variation = variation

    def separation(self, x: float, y: float) -> float:
        target = self.base_separation

        if self.noise is not None and self.variation > 0:
            n = self.noise.fbm(x * self.noise_scale, y * self.noise_scale, 3, 0.5, 2)
            # 0.2x in the densest noise troughs up to ~2.5x at full variation
            multiplier = 0.2 + (n + 1) * 0.5 * (1 + self.variation * 1.5)
            target = self.base_separation * multiplier

        influence = 0.0
        for dp in self.density_points:
            dist = math.hypot(x - dp.x, y - dp.y)
            if dist < dp.radius:
                falloff = 1 - dist / dp.radius
                smooth = falloff * falloff * (3 - 2 * falloff)
                influence = max(influence, smooth * dp.strength)
        if influence > 0:
            target *= 1 - influence * 0.9

        return max(self.min_separation, target)

    def priority(self, x: float, y: float) -> float:
        return self.base_separation / self.separation(x, y)


class StreamlineFiller:
    """Grows evenly spaced streamlines outward from seeded candidates.

    Candidates sit in a max-priority queue keyed by how dense the target
    spacing is at their position, so dense regions are filled first. Every
    accepted line spawns new candidates on both sides of itself.
    """

    def __init__(self, cfg: FlowLinesConfig, field: FlowField, seed: int, rng: random.Random):
        self.cfg = cfg
        self.field = field
        self.rng = rng

        density_noise = (
            SimplexNoise(seed + DENSITY_NOISE_OFFSET) if cfg.density_variation > 0 else None
        )
        self.density = DensityModel(
            cfg.separation_distance,
            cfg.min_separation,
            cfg.density_points,
            density_noise,
            cfg.density_noise_scale,
            cfg.density_variation,
        )
        self.wobble_noise = SimplexNoise(seed + WOBBLE_NOISE_OFFSET) if cfg.wobble > 0 else None
        self.fatigue_noise = (
            SimplexNoise(seed + FATIGUE_NOISE_OFFSET) if cfg.line_fatigue > 0 else None
        )

        self.grid = SpatialGrid(max(cfg.min_separation * 0.5, 1.0))
        self._queue: List[Tuple[float, int, Point]] = []
        self._counter = itertools.count()

    # -------------------------
    # Queue
    # -------------------------

    def _push(self, point: Point, priority: float) -> None:
        heapq.heappush(self._queue, (-priority, next(self._counter), point))

    def _pop(self) -> Point:
        return heapq.heappop(self._queue)[2]

    def _shake_queue(self) -> None:
        """Swap the best SHAKE_COUNT candidates with random ones.

        Priorities stay in their slots; only the points move.
        """
        entries = sorted(self._queue)
        for i in range(SHAKE_COUNT):
            j = math.floor(self.rng.random() * len(entries))
            key_i, count_i, point_i = entries[i]
            key_j, count_j, point_j = entries[j]
            entries[i] = (key_i, count_i, point_j)
            entries[j] = (key_j, count_j, point_i)
        # a sorted list is a valid heap
        self._queue = entries

    def _seed_queue(self) -> None:
        cfg = self.cfg
        initial = max(20, math.ceil(cfg.line_count / 20))
        for _ in range(initial):
            x = cfg.margin + self.rng.random() * (cfg.width - 2 * cfg.margin)
            y = cfg.margin + self.rng.random() * (cfg.height - 2 * cfg.margin)
            self._push((x, y), self.density.priority(x, y))
        for dp in cfg.density_points:
            if self.field.in_bounds(dp.x, dp.y, cfg.margin):
                self._push((dp.x, dp.y), DENSITY_POINT_PRIORITY)

    # -------------------------
    # Main loop
    # -------------------------

    def fill(self) -> List[FlowLine]:
        cfg = self.cfg
        base = self.density.base_separation
        max_seeds = cfg.fill_max_seeds if cfg.fill_max_seeds is not None else cfg.line_count * 50
        lines: List[FlowLine] = []

        self._seed_queue()
        dequeued = 0

        while self._queue and len(lines) < cfg.line_count and dequeued < max_seeds:
            seed_point = self._pop()
            dequeued += 1

            local = self.density.separation(seed_point[0], seed_point[1])
            ratio = local / base
            # very dense zones skip collisions entirely and may overlap
            skip = ratio < 0.5 or (ratio < 0.8 and self.rng.random() > 0.5)

            if not skip and self.grid.has_nearby(seed_point[0], seed_point[1], local * 0.5):
                continue

            points = self._trace(seed_point, skip)
            if len(points) < cfg.min_line_length:
                continue

            if cfg.smoothing > 0 and len(points) > 2:
                points = smooth_line(points, cfg.smoothing)

            lines.append(FlowLine(tuple(points)))
            if not skip:
                self.grid.add_line(points)

            self._spawn_candidates(points, dense=ratio < 0.5)
            if len(lines) % SHAKE_EVERY == 0 and len(self._queue) > SHAKE_COUNT:
                self._shake_queue()

        return lines

    def _spawn_candidates(self, points: Sequence[Point], dense: bool) -> None:
        cfg = self.cfg
        interval = max(1, len(points) // (50 if dense else 20))

        for i in range(0, len(points) - 1, interval):
            p0 = points[i]
            p1 = points[i + 1]
            dx = p1[0] - p0[0]
            dy = p1[1] - p0[1]
            length = math.hypot(dx, dy)
            if length < 0.001:
                continue

            local = self.density.separation(p0[0], p0[1])
            nx = -dy / length
            ny = dx / length
            offset = local * (0.5 + self.rng.random() * 0.5)
            priority = self.density.base_separation / local

            for side in (1, -1):
                cx = p0[0] + side * nx * offset
                cy = p0[1] + side * ny * offset
                if self.field.in_bounds(cx, cy, cfg.margin):
                    self._push((cx, cy), priority)

    # -------------------------
    # Tracing with organic perturbations
    # -------------------------

    def _trace(self, start: Point, skip_collision: bool) -> List[Point]:
        forward = self._trace_direction(start, 1, skip_collision, include_start=True)
        backward = self._trace_direction(start, -1, skip_collision, include_start=False)
        return backward.points[::-1] + forward.points

    def _direction(self, point: Point, direction: int) -> Tuple[float, float]:
        cfg = self.cfg
        vx, vy = self.field.vector(point[0], point[1], cfg.attractors)
        vx *= direction
        vy *= direction

        if cfg.edge_attraction > 0:
            ex, ey, pull = self._edge_pull(point)
            if pull > 0:
                vx += ex * pull
                vy += ey * pull
                length = math.hypot(vx, vy)
                if length > 0:
                    vx /= length
                    vy /= length
        return vx, vy

    def _edge_pull(self, point: Point) -> Tuple[float, float, float]:
        cfg = self.cfg
        x, y = point
        band = EDGE_BAND * min(cfg.width, cfg.height)
        candidates = (
            (x, -1.0, 0.0),
            (cfg.width - x, 1.0, 0.0),
            (y, 0.0, -1.0),
            (cfg.height - y, 0.0, 1.0),
        )
        dist, ex, ey = min(candidates, key=lambda c: c[0])
        if band <= 0 or dist >= band:
            return 0.0, 0.0, 0.0
        pull = cfg.edge_attraction * (1 - dist / band) ** 1.5
        return ex, ey, pull

    def _wobble(self, point: Point) -> float:
        cfg = self.cfg
        f1 = cfg.wobble_frequency
        f2 = f1 * 3.7
        x, y = point
        low = self.wobble_noise.noise2d(x * f1, y * f1)
        high = self.wobble_noise.noise2d(x * f2 + 17.3, y * f2 - 9.1)
        return cfg.wobble * (0.7 * low + 0.3 * high)

    def _fatigued(self, point: Point) -> bool:
        cfg = self.cfg
        n = self.fatigue_noise.fbm(point[0] * 0.01, point[1] * 0.01, 2, 0.5, 2)
        chance = cfg.line_fatigue * 0.02 * (n + 1) / 2
        return self.rng.random() < chance

    def _trace_direction(
        self, start: Point, direction: int, skip_collision: bool, include_start: bool
    ) -> Trace:
        cfg = self.cfg
        field = self.field
        points: List[Point] = [start] if include_start else []
        current = start
        stop = TraceStop.MAX_STEPS

        for i in range(cfg.max_steps):
            vx, vy = self._direction(current, direction)

            step_length = cfg.step_length
            if cfg.velocity_damping > 0:
                speed = field.speed(current[0], current[1])
                step_length *= 1 - cfg.velocity_damping * (1 - speed)
                if step_length < cfg.step_length * STALL_FRACTION:
                    stop = TraceStop.STALLED
                    break

            nx = current[0] + vx * step_length
            ny = current[1] + vy * step_length

            if self.wobble_noise is not None:
                jitter = self._wobble((nx, ny))
                nx += -vy * jitter
                ny += vx * jitter

            if not field.in_bounds(nx, ny, cfg.margin):
                stop = TraceStop.OUT_OF_BOUNDS
                break

            if not skip_collision:
                local = self.density.separation(nx, ny)
                if self.grid.has_nearby(nx, ny, local * 0.5):
                    stop = TraceStop.COLLISION
                    break

            if (
                self.fatigue_noise is not None
                and i >= cfg.min_line_length
                and self._fatigued((nx, ny))
            ):
                stop = TraceStop.FATIGUE
                break

            current = (nx, ny)
            points.append(current)

        return Trace(points, stop)


def fill_streamlines(
    cfg: FlowLinesConfig, field: FlowField, seed: int, rng: random.Random
) -> List[FlowLine]:
    return StreamlineFiller(cfg, field, seed, rng).fill()
