"""Reproducible random terrain from a seed. Seed -1 = new random each call.

Each cell independently draws a height band from a weighted table: one uniform
draw per cell, looked up in the cumulative weights.
"""

import logging
import random
from typing import Sequence, Tuple

import numpy as np

from basin.constants import HEIGHT_WEIGHTS

logger = logging.getLogger(__name__)


def resolve_seed(seed: int) -> int:
    """Return the seed to use: a fresh random one for -1, else seed itself."""
    if seed == -1:
        return random.randint(0, 2**31 - 1)
    return seed


def cumulative_weights(weights: Sequence[float]) -> np.ndarray:
    """Normalized cumulative table; last entry is exactly 1.0."""
    w = np.asarray(weights, dtype=np.float64)
    if w.ndim != 1 or w.size == 0:
        raise ValueError("weights must be a non-empty sequence")
    if np.any(w < 0):
        raise ValueError("weights must be non-negative")
    total = float(np.sum(w))
    if total <= 0.0:
        raise ValueError("weights must not sum to zero")
    cum = np.cumsum(w) / total
    cum[-1] = 1.0
    return cum


def generate_heights(
    nx: int,
    ny: int,
    seed: int = -1,
    weights: Sequence[float] = HEIGHT_WEIGHTS,
) -> Tuple[np.ndarray, int]:
    """
    Return (heights, seed_used). heights is int64 (nx, ny) with values in
    0..len(weights)-1; band k is drawn with probability weights[k] / sum(weights).
    """
    cum = cumulative_weights(weights)
    seed_used = resolve_seed(seed)
    rng = np.random.default_rng(seed_used)
    draws = rng.random((nx, ny))
    heights = np.searchsorted(cum, draws, side="right").astype(np.int64)
    logger.debug("Generated %dx%d terrain with seed %d", nx, ny, seed_used)
    return heights, seed_used
