"""2D grid of terrain height and water volume per cell. Shape (nx, ny), indexed [x, y]."""

import numpy as np

from basin.constants import DRY, DEFAULT_NX, DEFAULT_NY, HEIGHT_WEIGHTS, MIN_SIZE
from basin.terrain import generate_heights


class Grid:
    """Static integer terrain plus mutable water; the kernel only ever writes water."""

    __slots__ = ("shape", "height", "water")

    def __init__(self, nx: int = DEFAULT_NX, ny: int = DEFAULT_NY) -> None:
        if nx < MIN_SIZE or ny < MIN_SIZE:
            raise ValueError(f"grid must be at least {MIN_SIZE}x{MIN_SIZE}, got {nx}x{ny}")
        self.shape = (nx, ny)
        self.height = np.zeros(self.shape, dtype=np.int64)
        self.water = np.full(self.shape, DRY, dtype=np.float64)

    @classmethod
    def from_arrays(cls, height: np.ndarray, water: np.ndarray | None = None) -> "Grid":
        """Build a grid from existing fields (copied). Water defaults to dry."""
        height = np.asarray(height)
        if height.ndim != 2:
            raise ValueError(f"height must be 2D, got {height.ndim}D")
        if np.any(height < 0):
            raise ValueError("height values must be non-negative")
        grid = cls(*height.shape)
        grid.height[:] = height
        if water is not None:
            water = np.asarray(water, dtype=np.float64)
            if water.shape != grid.shape:
                raise ValueError(f"water shape {water.shape} does not match height shape {grid.shape}")
            grid.water[:] = water
        return grid

    @classmethod
    def with_terrain(
        cls,
        nx: int = DEFAULT_NX,
        ny: int = DEFAULT_NY,
        seed: int = -1,
        weights=HEIGHT_WEIGHTS,
    ) -> tuple["Grid", int]:
        """Dry grid over freshly generated terrain. Returns (grid, seed_used)."""
        grid = cls(nx, ny)
        heights, seed_used = generate_heights(nx, ny, seed, weights)
        grid.height[:] = heights
        return grid, seed_used

    def get_cell(self, x: int, y: int) -> tuple[int, float]:
        return int(self.height[x, y]), float(self.water[x, y])

    def set_water(self, x: int, y: int, value: float) -> None:
        self.water[x, y] = value

    def levels(self) -> np.ndarray:
        """Combined level height + water per cell (a new array)."""
        return self.height + self.water

    def total_water(self) -> float:
        return float(np.sum(self.water))

    def min_water(self) -> float:
        return float(np.min(self.water))

    def reset_water(self) -> None:
        self.water.fill(DRY)
