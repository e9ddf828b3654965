"""Status line in the top-left corner: tick, total water, paused."""

import pygame

FONT_SIZE = 16
LABEL_COLOR = (40, 40, 40)
PAUSED_COLOR = (170, 30, 30)

_font: pygame.font.Font | None = None


def _ensure_font() -> pygame.font.Font:
    global _font
    if _font is None:
        _font = pygame.font.Font(None, FONT_SIZE)
    return _font


def status_text(tick_count: int, total_water: float, seed: int | None = None) -> str:
    text = f"Tick: {tick_count}  Water: {total_water:.1f}"
    if seed is not None:
        text += f"  Seed: {seed}"
    return text


def draw_status(
    surface: pygame.Surface,
    tick_count: int,
    total_water: float,
    paused: bool = False,
    seed: int | None = None,
) -> None:
    font = _ensure_font()
    x, y = 6, 4
    label = font.render(status_text(tick_count, total_water, seed), True, LABEL_COLOR)
    surface.blit(label, (x, y))
    if paused:
        surface.blit(font.render("PAUSED", True, PAUSED_COLOR), (x, y + font.get_height() + 2))
