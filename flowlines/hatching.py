"""Contour-following hatching over an implied height surface."""

import math
import random
from typing import List, Optional, Tuple

from .models import FlowLine, FlowLinesConfig, Point
from .noise import (
    FORM_NOISE_OFFSET,
    HATCH_ANGLE_NOISE_OFFSET,
    HATCH_DENSITY_NOISE_OFFSET,
    WOBBLE_NOISE_OFFSET,
    SimplexNoise,
)
from .postprocess import smooth_line

LOW_DENSITY = 0.3
MAX_ATTEMPTS_PER_LINE = 50


def sharpen(value: float, contrast: float) -> float:
    """Sign-preserving power curve pushing values toward -1 and 1."""
    if contrast <= 0:
        return value
    return math.copysign(abs(value) ** (1.0 / contrast), value)


class FormHatcher:
    """Hatches along isolines of a form-noise field.

    The vector field is not used here: the trace direction at every step is
    perpendicular to the gradient of the form noise, like following
    elevation lines on a map. A second noise decides where lines go.
    """

    def __init__(self, cfg: FlowLinesConfig, seed: int, rng: random.Random):
        self.cfg = cfg
        self.rng = rng
        self.form_noise = SimplexNoise(seed + FORM_NOISE_OFFSET)
        self.density_noise = SimplexNoise(seed + HATCH_DENSITY_NOISE_OFFSET)
        self.angle_noise = SimplexNoise(seed + HATCH_ANGLE_NOISE_OFFSET)
        self.position_noise = SimplexNoise(seed + WOBBLE_NOISE_OFFSET)

    def _in_bounds(self, x: float, y: float) -> bool:
        cfg = self.cfg
        return (
            cfg.margin <= x < cfg.width - cfg.margin
            and cfg.margin <= y < cfg.height - cfg.margin
        )

    def density(self, x: float, y: float) -> float:
        s = self.cfg.hatch_density_scale
        return self.density_noise.fbm(x * s, y * s, 3, 0.5, 2)

    def density01(self, x: float, y: float) -> float:
        return (sharpen(self.density(x, y), self.cfg.hatch_contrast) + 1) / 2

    def accept_seed(self, x: float, y: float) -> bool:
        weight = self.density01(x, y) ** max(self.cfg.hatch_contrast, 1e-9)
        return self.rng.random() < weight

    def contour(
        self, x: float, y: float, previous: Optional[Tuple[float, float]]
    ) -> Tuple[float, float]:
        cfg = self.cfg
        s = cfg.hatch_form_scale
        gx, gy = self.form_noise.gradient2d(x * s, y * s, 3, 0.5, 2)
        length = math.hypot(gx, gy)
        if length == 0:
            return previous if previous is not None else (1.0, 0.0)

        dx, dy = -gy / length, gx / length
        if previous is not None and dx * previous[0] + dy * previous[1] < 0:
            dx, dy = -dx, -dy

        if cfg.hatch_angle_variation > 0:
            a = cfg.hatch_angle_scale
            deviation = self.angle_noise.noise2d(x * a, y * a)
            angle = deviation * cfg.hatch_angle_variation * math.pi / 2
            cos_a = math.cos(angle)
            sin_a = math.sin(angle)
            dx, dy = dx * cos_a - dy * sin_a, dx * sin_a + dy * cos_a
        return dx, dy

    def target_steps(self, x: float, y: float) -> int:
        cfg = self.cfg
        s = cfg.hatch_form_scale
        shape = (self.form_noise.fbm(x * s + 91.7, y * s - 33.1, 2, 0.5, 2) + 1) / 2
        jitter = 1 + cfg.hatch_length_variation * (2 * self.rng.random() - 1)
        length = cfg.hatch_line_length * (0.5 + 0.5 * shape) * max(jitter, 0.0)
        return max(1, int(length / cfg.step_length))

    def _fades(self, x: float, y: float) -> bool:
        d01 = self.density01(x, y)
        if d01 >= LOW_DENSITY:
            return False
        return self.rng.random() < (LOW_DENSITY - d01) * self.cfg.hatch_contrast * 0.1

    def _trace_half(self, start: Point, sign: int, steps: int) -> List[Point]:
        cfg = self.cfg
        points: List[Point] = []
        x, y = start
        previous: Optional[Tuple[float, float]] = None

        for _ in range(steps):
            dx, dy = self.contour(x, y, previous)
            previous = (dx, dy)
            nx = x + sign * dx * cfg.step_length
            ny = y + sign * dy * cfg.step_length

            if cfg.hatch_wobble > 0:
                w = self.position_noise.noise2d(nx * 0.05, ny * 0.05) * cfg.hatch_wobble
                nx += -dy * w
                ny += dx * w

            if not self._in_bounds(nx, ny) or self._fades(nx, ny):
                break
            points.append((nx, ny))
            x, y = nx, ny

        return points

    def trace(self, start: Point) -> List[Point]:
        steps = self.target_steps(*start)
        forward_steps = steps // 2 + steps % 2
        forward = self._trace_half(start, 1, forward_steps)
        backward = self._trace_half(start, -1, steps // 2)
        return backward[::-1] + [start] + forward

    def hatch(self) -> List[FlowLine]:
        cfg = self.cfg
        lines: List[FlowLine] = []
        max_attempts = cfg.line_count * MAX_ATTEMPTS_PER_LINE

        for _ in range(max_attempts):
            if len(lines) >= cfg.line_count:
                break
            x = cfg.margin + self.rng.random() * (cfg.width - 2 * cfg.margin)
            y = cfg.margin + self.rng.random() * (cfg.height - 2 * cfg.margin)
            if not self.accept_seed(x, y):
                continue

            points = self.trace((x, y))
            if len(points) < cfg.min_line_length:
                continue
            if cfg.smoothing > 0 and len(points) > 2:
                points = smooth_line(points, cfg.smoothing)
            lines.append(FlowLine(tuple(points)))

        return lines


def hatch_form(cfg: FlowLinesConfig, seed: int, rng: random.Random) -> List[FlowLine]:
    return FormHatcher(cfg, seed, rng).hatch()
