"""Uniform bucket grid for "is anything within r of here" queries."""

import math
from typing import Dict, Iterable, Iterator, List, Tuple

from .models import Point


class SpatialGrid:
    def __init__(self, cell_size: float):
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size = cell_size
        self._cells: Dict[Tuple[int, int], List[Point]] = {}
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def _key(self, x: float, y: float) -> Tuple[int, int]:
        return math.floor(x / self.cell_size), math.floor(y / self.cell_size)

    def add(self, point: Point) -> None:
        self._cells.setdefault(self._key(point[0], point[1]), []).append(point)
        self._count += 1

    def add_line(self, points: Iterable[Point]) -> None:
        for point in points:
            self.add(point)

    def query(self, x: float, y: float, distance: float) -> Iterator[Point]:
        """Yield every stored point strictly closer than distance."""
        cx, cy = self._key(x, y)
        reach = math.ceil(distance / self.cell_size)
        limit = distance * distance
        for dx in range(-reach, reach + 1):
            for dy in range(-reach, reach + 1):
                bucket = self._cells.get((cx + dx, cy + dy))
                if not bucket:
                    continue
                for px, py in bucket:
                    if (px - x) ** 2 + (py - y) ** 2 < limit:
                        yield px, py

    def has_nearby(self, x: float, y: float, distance: float) -> bool:
        for _ in self.query(x, y, distance):
            return True
        return False
