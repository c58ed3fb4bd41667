"""Cached noise-derived direction field with attractor blending."""

import math
from typing import Iterable, Optional, Tuple

import numpy as np

from .models import Attractor, FieldMode
from .noise import create_noise

Vector = Tuple[float, float]


class FlowField:
    """Per-cell unit vectors, computed once at construction.

    Attractors are applied after the cell lookup so the base grid stays
    cacheable and immutable for the whole run.
    """

    def __init__(
        self,
        width: float,
        height: float,
        resolution: float,
        seed: Optional[int] = None,
        noise_scale: float = 0.005,
        octaves: int = 4,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
        mode: FieldMode = FieldMode.NORMAL,
        spiral_strength: float = 0.5,
        warp_strength: float = 0.5,
    ):
        if resolution <= 0:
            raise ValueError(f"resolution must be positive, got {resolution}")
        if width <= 0 or height <= 0:
            raise ValueError(f"field size must be positive, got {width}x{height}")

        self.width = width
        self.height = height
        self.resolution = resolution
        self.mode = FieldMode(mode)
        self.noise_scale = noise_scale
        self.octaves = octaves
        self.persistence = persistence
        self.lacunarity = lacunarity
        self.spiral_strength = spiral_strength
        self.warp_strength = warp_strength

        self.cols = math.ceil(width / resolution)
        self.rows = math.ceil(height / resolution)

        self.noise = create_noise(seed)
        self._vectors, self._speed = self._generate()

    def _raw_vector(self, x: float, y: float) -> Vector:
        nx = x * self.noise_scale
        ny = y * self.noise_scale
        noise = self.noise
        mode = self.mode

        if mode is FieldMode.CURL:
            return noise.curl2d(nx, ny, self.octaves, self.persistence, self.lacunarity)

        if mode is FieldMode.SPIRAL:
            cx, cy = noise.curl2d(nx, ny, self.octaves, self.persistence, self.lacunarity)
            dx = self.width / 2 - x
            dy = self.height / 2 - y
            dist = math.sqrt(dx * dx + dy * dy)
            if dist > 0:
                cx += dx / dist * self.spiral_strength
                cy += dy / dist * self.spiral_strength
            return cx, cy

        if mode is FieldMode.TURBULENT:
            return noise.curl2d(
                nx * 2,
                ny * 2,
                self.octaves + 2,
                self.persistence * 1.2,
                self.lacunarity,
            )

        if mode is FieldMode.RIDGED:
            value = noise.ridged(nx, ny, self.octaves, self.persistence, self.lacunarity)
        elif mode is FieldMode.WARPED:
            value = noise.warped_fbm(
                nx, ny, self.octaves, self.persistence, self.lacunarity, self.warp_strength
            )
        else:
            value = noise.fbm(nx, ny, self.octaves, self.persistence, self.lacunarity)

        angle = value * math.pi * 2
        return math.cos(angle), math.sin(angle)

    def _generate(self) -> Tuple[np.ndarray, np.ndarray]:
        vectors = np.empty((self.rows, self.cols, 2), dtype=np.float64)
        lengths = np.empty((self.rows, self.cols), dtype=np.float64)

        for row in range(self.rows):
            for col in range(self.cols):
                vx, vy = self._raw_vector(col * self.resolution, row * self.resolution)
                length = math.sqrt(vx * vx + vy * vy)
                if length > 0:
                    vectors[row, col] = (vx / length, vy / length)
                else:
                    # flat noise: stable default instead of NaN
                    vectors[row, col] = (1.0, 0.0)
                lengths[row, col] = length

        peak = float(lengths.max()) if lengths.size else 0.0
        if peak > 0:
            speed = lengths / peak
        else:
            speed = np.ones_like(lengths)
        if self.mode in (FieldMode.NORMAL, FieldMode.RIDGED, FieldMode.WARPED):
            speed = np.ones_like(lengths)

        # plain nested lists keep the per-step lookups cheap
        return vectors.tolist(), speed.tolist()

    def _cell(self, x: float, y: float) -> Tuple[int, int]:
        col = math.floor(x / self.resolution)
        row = math.floor(y / self.resolution)
        col = max(0, min(col, self.cols - 1))
        row = max(0, min(row, self.rows - 1))
        return row, col

    def base_vector(self, x: float, y: float) -> Vector:
        row, col = self._cell(x, y)
        vx, vy = self._vectors[row][col]
        return vx, vy

    def speed(self, x: float, y: float) -> float:
        """Relative flow speed in [0, 1] (1.0 everywhere for angle modes)."""
        row, col = self._cell(x, y)
        return self._speed[row][col]

    def vector(
        self, x: float, y: float, attractors: Optional[Iterable[Attractor]] = None
    ) -> Vector:
        base_x, base_y = self.base_vector(x, y)
        if not attractors:
            return base_x, base_y

        vx, vy = base_x, base_y
        for attractor in attractors:
            dx = attractor.x - x
            dy = attractor.y - y
            dist = math.sqrt(dx * dx + dy * dy)
            if 0 < dist < attractor.radius:
                falloff = 1 - dist / attractor.radius
                influence = falloff * falloff * attractor.strength
                vx += dx / dist * influence
                vy += dy / dist * influence

        length = math.sqrt(vx * vx + vy * vy)
        if length == 0:
            return base_x, base_y
        return vx / length, vy / length

    def in_bounds(self, x: float, y: float, margin: float = 0.0) -> bool:
        return (
            margin <= x < self.width - margin
            and margin <= y < self.height - margin
        )
