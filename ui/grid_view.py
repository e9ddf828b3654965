"""Grid drawing: terrain floor rendered once, water overlay blitted every frame."""

import pygame
import numpy as np

from ui.colors import WATER_DISPLAY_CAP, height_to_rgb, water_to_rgba


def _array_to_surface(arr: np.ndarray, mode: str) -> pygame.Surface:
    """(nx, ny, channels) uint8 indexed [x, y] -> Surface of size (nx, ny)."""
    nx, ny = arr.shape[0], arr.shape[1]
    # pygame wants row-major (height, width, channels)
    rows = np.ascontiguousarray(arr.transpose(1, 0, 2))
    return pygame.image.frombytes(rows.tobytes(), (nx, ny), mode)


def render_floor(height: np.ndarray, tile_size: int) -> pygame.Surface:
    """Static terrain surface, one tile_size square per cell. Build once per grid."""
    nx, ny = height.shape
    img = _array_to_surface(height_to_rgb(height), "RGB")
    return pygame.transform.scale(img, (nx * tile_size, ny * tile_size))


def water_overlay(water: np.ndarray, tile_size: int, cap: float = WATER_DISPLAY_CAP) -> pygame.Surface:
    """Per-pixel-alpha surface of the water field scaled to tiles."""
    nx, ny = water.shape
    img = _array_to_surface(water_to_rgba(water, cap), "RGBA")
    return pygame.transform.scale(img, (nx * tile_size, ny * tile_size))


def draw_grid(
    surface: pygame.Surface,
    floor: pygame.Surface,
    water: np.ndarray,
    tile_size: int,
    cap: float = WATER_DISPLAY_CAP,
) -> None:
    """Blit floor then water at the surface origin. Water is added on top: rgb + (1 - a) * floor."""
    surface.blit(floor, (0, 0))
    surface.blit(water_overlay(water, tile_size, cap), (0, 0), special_flags=pygame.BLEND_PREMULTIPLIED)
