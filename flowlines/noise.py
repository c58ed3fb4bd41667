"""Seeded 2D simplex noise and the samplers derived from it."""

import math
import random
from typing import Optional, Tuple

# -------------------------
# Per-purpose seed offsets
# -------------------------
# Each purpose gets its own instance keyed by seed + offset so the derived
# fields never correlate trivially with the base field or with each other.

DENSITY_NOISE_OFFSET = 12345
WOBBLE_NOISE_OFFSET = 24680
FATIGUE_NOISE_OFFSET = 13579
FORM_NOISE_OFFSET = 31337
HATCH_DENSITY_NOISE_OFFSET = 42424
HATCH_ANGLE_NOISE_OFFSET = 55555
SWARM_WANDER_NOISE_OFFSET = 77777

START_POINTS_RNG_OFFSET = 0
FILL_RNG_OFFSET = 1
SWARM_RNG_OFFSET = 2
HATCH_RNG_OFFSET = 3

# Ken Perlin's reference permutation
_PERLIN = [
    151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225, 140,
    36, 103, 30, 69, 142, 8, 99, 37, 240, 21, 10, 23, 190, 6, 148, 247, 120, 234,
    75, 0, 26, 197, 62, 94, 252, 219, 203, 117, 35, 11, 32, 57, 177, 33, 88, 237,
    149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175, 74, 165, 71, 134, 139, 48,
    27, 166, 77, 146, 158, 231, 83, 111, 229, 122, 60, 211, 133, 230, 220, 105,
    92, 41, 55, 46, 245, 40, 244, 102, 143, 54, 65, 25, 63, 161, 1, 216, 80, 73,
    209, 76, 132, 187, 208, 89, 18, 169, 200, 196, 135, 130, 116, 188, 159, 86,
    164, 100, 109, 198, 173, 186, 3, 64, 52, 217, 226, 250, 124, 123, 5, 202, 38,
    147, 118, 126, 255, 82, 85, 212, 207, 206, 59, 227, 47, 16, 58, 17, 182, 189,
    28, 42, 223, 183, 170, 213, 119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101,
    155, 167, 43, 172, 9, 129, 22, 39, 253, 19, 98, 108, 110, 79, 113, 224, 232,
    178, 185, 112, 104, 218, 246, 97, 228, 251, 34, 242, 193, 238, 210, 144, 12,
    191, 179, 162, 241, 81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31,
    181, 199, 106, 157, 184, 84, 204, 176, 115, 121, 50, 45, 127, 4, 150, 254,
    138, 236, 205, 93, 222, 114, 67, 29, 24, 72, 243, 141, 128, 195, 78, 66, 215,
    61, 156, 180,
]

_GRAD2 = [
    (1.0, 1.0),
    (-1.0, 1.0),
    (1.0, -1.0),
    (-1.0, -1.0),
    (1.0, 0.0),
    (-1.0, 0.0),
    (0.0, 1.0),
    (0.0, -1.0),
]

_F2 = 0.5 * (math.sqrt(3.0) - 1.0)
_G2 = (3.0 - math.sqrt(3.0)) / 6.0


def _lcg(s: int) -> int:
    return (s * 1103515245 + 12345) & 0x7FFFFFFF


def random_seed() -> int:
    return random.randrange(0, 2**32)


def make_rng(seed: int, offset: int) -> random.Random:
    """Independent random stream for one purpose of one run."""
    return random.Random(seed + offset)


class SimplexNoise:
    """Stefan Gustavson style 2D simplex noise with a seeded permutation."""

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = random_seed()
        self.seed = int(seed)

        table = list(_PERLIN)
        s = self.seed
        for i in range(len(table) - 1, 0, -1):
            s = _lcg(s)
            j = s % (i + 1)
            table[i], table[j] = table[j], table[i]

        self._perm = [table[i & 255] for i in range(512)]
        self._perm_mod8 = [p & 7 for p in self._perm]

    def noise2d(self, x: float, y: float) -> float:
        """Single octave noise in [-1, 1]."""
        s = (x + y) * _F2
        i = math.floor(x + s)
        j = math.floor(y + s)

        t = (i + j) * _G2
        x0 = x - (i - t)
        y0 = y - (j - t)

        if x0 > y0:
            i1, j1 = 1, 0
        else:
            i1, j1 = 0, 1

        x1 = x0 - i1 + _G2
        y1 = y0 - j1 + _G2
        x2 = x0 - 1.0 + 2.0 * _G2
        y2 = y0 - 1.0 + 2.0 * _G2

        perm = self._perm
        ii = i & 255
        jj = j & 255
        gi0 = self._perm_mod8[ii + perm[jj]]
        gi1 = self._perm_mod8[ii + i1 + perm[jj + j1]]
        gi2 = self._perm_mod8[ii + 1 + perm[jj + 1]]

        total = 0.0
        for gi, cx, cy in ((gi0, x0, y0), (gi1, x1, y1), (gi2, x2, y2)):
            tc = 0.5 - cx * cx - cy * cy
            if tc >= 0:
                tc *= tc
                gx, gy = _GRAD2[gi]
                total += tc * tc * (gx * cx + gy * cy)

        return 70.0 * total

    def fbm(
        self,
        x: float,
        y: float,
        octaves: int = 4,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
        scale: float = 1.0,
    ) -> float:
        value = 0.0
        amplitude = 1.0
        frequency = scale
        max_value = 0.0
        for _ in range(octaves):
            value += amplitude * self.noise2d(x * frequency, y * frequency)
            max_value += amplitude
            amplitude *= persistence
            frequency *= lacunarity
        return value / max_value if max_value > 0 else 0.0

    def gradient2d(
        self,
        x: float,
        y: float,
        octaves: int = 4,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
        epsilon: float = 1e-4,
    ) -> Tuple[float, float]:
        """Central-difference gradient (dF/dx, dF/dy) of the fbm field."""
        n_right = self.fbm(x + epsilon, y, octaves, persistence, lacunarity)
        n_left = self.fbm(x - epsilon, y, octaves, persistence, lacunarity)
        n_down = self.fbm(x, y + epsilon, octaves, persistence, lacunarity)
        n_up = self.fbm(x, y - epsilon, octaves, persistence, lacunarity)
        return (
            (n_right - n_left) / (2.0 * epsilon),
            (n_down - n_up) / (2.0 * epsilon),
        )

    def curl2d(
        self,
        x: float,
        y: float,
        octaves: int = 4,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
        epsilon: float = 1e-4,
    ) -> Tuple[float, float]:
        """Divergence-free vector (dF/dy, -dF/dx)."""
        dx, dy = self.gradient2d(x, y, octaves, persistence, lacunarity, epsilon)
        return dy, -dx

    def ridged(
        self,
        x: float,
        y: float,
        octaves: int = 4,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
        offset: float = 1.0,
    ) -> float:
        value = 0.0
        amplitude = 1.0
        frequency = 1.0
        weight = 1.0
        for _ in range(octaves):
            signal = offset - abs(self.noise2d(x * frequency, y * frequency))
            signal *= signal
            signal *= weight
            weight = min(1.0, max(0.0, signal * 2.0))
            value += signal * amplitude
            amplitude *= persistence
            frequency *= lacunarity
        return value

    def warped_fbm(
        self,
        x: float,
        y: float,
        octaves: int = 4,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
        warp_strength: float = 0.5,
    ) -> float:
        warp_x = self.fbm(x, y, octaves, persistence, lacunarity)
        # shifted coordinates decorrelate the second offset from the first
        warp_y = self.fbm(x + 5.2, y + 1.3, octaves, persistence, lacunarity)
        return self.fbm(
            x + warp_x * warp_strength,
            y + warp_y * warp_strength,
            octaves,
            persistence,
            lacunarity,
        )


def create_noise(seed: Optional[int] = None, offset: int = 0) -> SimplexNoise:
    if seed is None:
        return SimplexNoise()
    return SimplexNoise(seed + offset)
