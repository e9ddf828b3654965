"""Simulation constants. Dry = 0; heights are small non-negative integer bands."""

DRY = 0.0
# Water added at the spring each tick, and where.
SOURCE_INCREMENT = 1.0
SOURCE_CELL = (1, 1)
# Minimum head difference before water moves; below it cells are left alone.
EPSILON = 0.1
# Each lower neighbour takes (excess / DAMPING_DIVISOR); not an 8-neighbour average.
DAMPING_DIVISOR = 4.0
# Neighbour offsets (dx, dy): row of dy=-1 first, then dy=0, then dy=+1. Order matters.
NEIGHBOR_OFFSETS = tuple((dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0))
# Band weights for terrain heights 0..5 (percent).
HEIGHT_WEIGHTS = (95, 1, 1, 1, 1, 1)
MIN_SIZE = 3
DEFAULT_NX, DEFAULT_NY = 128, 72
