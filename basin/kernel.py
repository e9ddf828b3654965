"""
Per-tick update: inject the spring, then one leveling pass over interior cells.

Leveling: each wet interior cell compares its combined level (height + water),
taken once before visiting neighbours, against each neighbour's live level and
pours (L - epsilon - L_n) / damping_divisor into every neighbour lower than
L - epsilon. Writes land in the live field, so cells later in the row-major
sweep see earlier transfers. Outflow is not capped by the cell's own water:
with more than damping_divisor low neighbours a cell can go negative.
"""

from basin.constants import (
    DAMPING_DIVISOR,
    DRY,
    EPSILON,
    NEIGHBOR_OFFSETS,
    SOURCE_CELL,
    SOURCE_INCREMENT,
)
from basin.grid import Grid


def check_step_args(
    grid: Grid,
    source_cell: tuple[int, int] = SOURCE_CELL,
    epsilon: float = EPSILON,
    damping_divisor: float = DAMPING_DIVISOR,
) -> None:
    """Raise ValueError for arguments under which step must not run."""
    nx, ny = grid.shape
    if grid.water.shape != grid.shape or grid.height.shape != grid.shape:
        raise ValueError("height and water fields must match the grid shape")
    sx, sy = source_cell
    if not (0 <= sx < nx and 0 <= sy < ny):
        raise ValueError(f"source cell {source_cell} outside {nx}x{ny} grid")
    if epsilon < 0:
        raise ValueError(f"epsilon must be non-negative, got {epsilon}")
    if damping_divisor <= 0:
        raise ValueError(f"damping_divisor must be positive, got {damping_divisor}")


def _level_pass(
    water: list[list[float]],
    height: list[list[int]],
    nx: int,
    ny: int,
    epsilon: float,
    damping_divisor: float,
    boundary_absorbs: bool,
) -> None:
    """One sweep over interior cells; water is nested lists indexed [x][y], mutated in place."""
    if boundary_absorbs:
        lo_x, hi_x, lo_y, hi_y = 0, nx - 1, 0, ny - 1
    else:
        lo_x, hi_x, lo_y, hi_y = 1, nx - 2, 1, ny - 2
    for y in range(1, ny - 1):
        for x in range(1, nx - 1):
            water_value = water[x][y]
            if water_value == DRY:
                continue
            level = water_value + height[x][y]
            threshold = level - epsilon
            for dx, dy in NEIGHBOR_OFFSETS:
                n_x, n_y = x + dx, y + dy
                if n_x < lo_x or n_x > hi_x or n_y < lo_y or n_y > hi_y:
                    continue
                n_level = water[n_x][n_y] + height[n_x][n_y]
                if n_level >= level:
                    continue
                if n_level < threshold:
                    flow = (threshold - n_level) / damping_divisor
                    water[n_x][n_y] += flow
                    water[x][y] -= flow


def step(
    grid: Grid,
    source_increment: float = SOURCE_INCREMENT,
    source_cell: tuple[int, int] = SOURCE_CELL,
    epsilon: float = EPSILON,
    damping_divisor: float = DAMPING_DIVISOR,
    boundary_absorbs: bool = True,
    clamp_negative: bool = False,
) -> None:
    """
    One tick. Mutates grid.water in place; grid.height is never written.

    boundary_absorbs=True lets interior cells pour into the outer ring (which
    never pours back); False keeps the ring untouched by the leveling pass.
    clamp_negative=True zeroes cells driven below dry after the pass (adds volume).
    """
    check_step_args(grid, source_cell, epsilon, damping_divisor)
    nx, ny = grid.shape
    sx, sy = source_cell
    grid.water[sx, sy] += source_increment

    water = grid.water.tolist()
    _level_pass(water, grid.height.tolist(), nx, ny, epsilon, damping_divisor, boundary_absorbs)
    grid.water[:] = water
    if clamp_negative:
        grid.water[grid.water < DRY] = DRY
