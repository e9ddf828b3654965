"""UI: terrain floor, water overlay and status line."""

from ui.grid_view import draw_grid, render_floor, water_overlay
from ui.colors import height_to_rgb, water_to_rgba
from ui.hud import draw_status

__all__ = ["draw_grid", "render_floor", "water_overlay", "height_to_rgb", "water_to_rgba", "draw_status"]
