"""Basin: terrain grid and tick-driven water leveling."""

from basin.grid import Grid
from basin.kernel import step, check_step_args
from basin.terrain import generate_heights
from basin.constants import DEFAULT_NX, DEFAULT_NY, HEIGHT_WEIGHTS, DRY

__all__ = ["Grid", "step", "check_step_args", "generate_heights", "DEFAULT_NX", "DEFAULT_NY", "HEIGHT_WEIGHTS", "DRY"]
