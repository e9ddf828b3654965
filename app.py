"""
App shell: display and main loop. Simulation is tick-driven from elapsed time and
tick_rate (independent of frame rate). Basin, UI, and config are wired here.

Keys: Q/Esc quit, Space pause, R new terrain, C clear water, S save.
"""

import logging
import sys

import pygame

from basin import Grid, step, check_step_args
from ui.grid_view import draw_grid, render_floor
from ui.hud import draw_status
import config

logger = logging.getLogger(__name__)

TITLE = "Seep"
BACKGROUND = (0, 0, 0)
FPS = 60
SAVE_NAME = "session"


def setup_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s"))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))


def _new_grid(cfg: dict, seed: int) -> tuple[Grid, int]:
    nx, ny = config.grid_size(cfg)
    grid, seed_used = Grid.with_terrain(nx, ny, seed, cfg["height_weights"])
    logger.info("New %dx%d terrain, seed %d", nx, ny, seed_used)
    return grid, seed_used


def run(config_path: str | None = None) -> None:
    cfg = config.load_config(config_path)
    setup_logging(cfg.get("log_level", "INFO"))

    tile_size = int(cfg["display"]["tile_size"])
    nx, ny = config.grid_size(cfg)
    flow = config.flow_kwargs(cfg)
    cap = float(cfg["water_display_cap"])

    seed = cfg.get("seed", -1)
    if cfg.get("lock_seed") and seed == -1 and "actual_seed_used" in cfg:
        seed = cfg["actual_seed_used"]
    grid, actual_seed_used = _new_grid(cfg, seed)
    total_ticks = 0

    last = config.get_last_config() if config_path is None else None
    state = config.load_state(last[0], last[1]) if last else None
    if state is not None:
        if state["water"].shape == (nx, ny) and state["height"].shape == (nx, ny):
            grid = Grid.from_arrays(state["height"], state["water"])
            total_ticks = state["tick_count"]
            actual_seed_used = cfg.get("actual_seed_used", actual_seed_used)
            logger.info("Resumed %s_%s at tick %d", last[0], last[1], total_ticks)
        else:
            logger.warning("Saved state shape %s does not match grid %s; starting fresh",
                           state["water"].shape, (nx, ny))

    # Bad flow settings are fatal here, before the window opens
    check_step_args(grid, flow["source_cell"], flow["epsilon"], flow["damping_divisor"])

    pygame.init()
    screen = pygame.display.set_mode((nx * tile_size, ny * tile_size))
    pygame.display.set_caption(TITLE)
    clock = pygame.time.Clock()
    floor = render_floor(grid.height, tile_size)

    def do_restart() -> None:
        nonlocal grid, floor, total_ticks, actual_seed_used
        s = cfg.get("seed", -1)
        if s == -1 and cfg.get("lock_seed"):
            s = actual_seed_used
        grid, actual_seed_used = _new_grid(cfg, s)
        floor = render_floor(grid.height, tile_size)
        total_ticks = 0

    def save_current() -> None:
        state = {"height": grid.height, "water": grid.water, "tick_count": total_ticks}
        config.save_config(cfg, actual_seed_used, SAVE_NAME, tick_count=total_ticks, state=state)

    tick_rate = max(1, min(240, int(cfg["tick_rate"])))
    # Cap ticks per frame so we never freeze when tick rate exceeds what we can do
    max_ticks_per_frame = max(4, tick_rate // 10)
    tick_accum = 0.0
    paused = False
    running = True

    while running:
        dt_s = clock.tick(FPS) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
                break
            if event.type != pygame.KEYDOWN:
                continue
            if event.key in (pygame.K_q, pygame.K_ESCAPE):
                running = False
                break
            elif event.key == pygame.K_SPACE:
                paused = not paused
            elif event.key == pygame.K_r:
                do_restart()
            elif event.key == pygame.K_c:
                grid.reset_water()
                total_ticks = 0
            elif event.key == pygame.K_s:
                save_current()

        if not paused:
            tick_accum += dt_s * tick_rate
            num_ticks = min(int(tick_accum), max_ticks_per_frame)
            tick_accum -= num_ticks
            tick_accum = min(tick_accum, max_ticks_per_frame)  # prevent unbounded backlog
            for _ in range(num_ticks):
                step(grid, **flow)
            total_ticks += num_ticks
            if num_ticks and total_ticks % 600 < num_ticks:
                logger.debug("tick %d total water %.3f min %.3f",
                             total_ticks, grid.total_water(), grid.min_water())

        screen.fill(BACKGROUND)
        draw_grid(screen, floor, grid.water, tile_size, cap)
        draw_status(screen, total_ticks, grid.total_water(), paused=paused, seed=actual_seed_used)
        pygame.display.flip()

    logger.info("Stopped at tick %d", total_ticks)
    pygame.quit()


def main() -> None:
    run(sys.argv[1] if len(sys.argv) > 1 else None)


if __name__ == "__main__":
    main()
