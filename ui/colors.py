"""
Terrain bands and water overlay as RGB/RGBA arrays. Display only: nothing here
feeds back into the simulation.

Water RGBA is meant for premultiplied blending (src + (1 - a) * dst): the blue
channel is not scaled by alpha, so a wet tile shows full blue plus 0.2 of the floor.
"""

import numpy as np

# Sand tones from lowest (0) to highest (5) terrain band.
HEIGHT_COLORS = np.array([
    [255, 240, 200],
    [200, 190, 150],
    [180, 170, 120],
    [160, 150, 100],
    [140, 130, 70],
    [120, 110, 50],
], dtype=np.uint8)

WATER_DISPLAY_CAP = 5.0
WATER_ALPHA = 0.8


def height_to_rgb(height: np.ndarray) -> np.ndarray:
    """Returns (nx, ny, 3) uint8. Heights above the last band use the last color."""
    idx = np.clip(np.asarray(height), 0, len(HEIGHT_COLORS) - 1)
    return HEIGHT_COLORS[idx]


def water_to_rgba(water: np.ndarray, cap: float = WATER_DISPLAY_CAP) -> np.ndarray:
    """
    Returns (nx, ny, 4) uint8. Wet cells get blue that darkens with depth
    (1 - min(w, cap) / 10), alpha 0.8; dry or negative cells are transparent.
    """
    w = np.minimum(np.asarray(water, dtype=np.float64), cap)
    wet = w > 0.0
    nx, ny = w.shape
    rgba = np.zeros((nx, ny, 4), dtype=np.float64)
    rgba[..., 2] = np.where(wet, 1.0 - w / 10.0, 0.0)
    rgba[..., 3] = np.where(wet, WATER_ALPHA, 0.0)
    rgba = np.clip(rgba, 0, 1)
    return (rgba * 255).round().astype(np.uint8)
