"""Load/save simulation and display parameters. Configs live in configs/ as {seed}_{name}.json (+ optional .npz state)."""

import json
import logging
import re
from pathlib import Path

import numpy as np

from basin.constants import DAMPING_DIVISOR, EPSILON, HEIGHT_WEIGHTS, SOURCE_CELL, SOURCE_INCREMENT

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent / "configs"
LAST_FILE = CONFIG_DIR / "last.txt"

FLOW_KEYS = (
    "source_increment", "source_cell", "epsilon", "damping_divisor",
    "boundary_absorbs", "clamp_negative",
)


def _sanitize_name(name: str) -> str:
    s = (name or "").strip()
    s = re.sub(r"[^\w\s-]", "", s)
    s = re.sub(r"[\s-]+", "_", s).strip("_")
    return s[:64] or "unnamed"


def config_id(seed: int, name: str) -> str:
    return f"{seed}_{_sanitize_name(name)}"


def get_config_path(seed: int, name: str) -> Path:
    return CONFIG_DIR / f"{config_id(seed, name)}.json"


def get_state_path(seed: int, name: str) -> Path:
    return CONFIG_DIR / f"{config_id(seed, name)}.npz"


def list_configs() -> list[tuple[int, str]]:
    """Return (seed, name) for each saved config on disk, sorted by name."""
    found = []
    if not CONFIG_DIR.exists():
        return found
    for f in CONFIG_DIR.glob("*.json"):
        if "_" not in f.stem:
            continue
        first, rest = f.stem.split("_", 1)
        try:
            found.append((int(first), rest))
        except ValueError:
            continue
    return sorted(found, key=lambda x: (x[1].lower(), x[0]))


def get_last_config() -> tuple[int, str] | None:
    if not LAST_FILE.exists():
        return None
    try:
        raw = LAST_FILE.read_text().strip()
        if "_" not in raw:
            return None
        first, rest = raw.split("_", 1)
        return (int(first), rest)
    except (ValueError, OSError):
        return None


def set_last_config(seed: int, name: str) -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    LAST_FILE.write_text(config_id(seed, name))


def _read_json(p: Path) -> dict:
    if not p.exists():
        return _default_config()
    try:
        with open(p, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read config %s (%s); using defaults", p, exc)
        return _default_config()
    if not isinstance(data, dict):
        logger.warning("Config %s is not a JSON object; using defaults", p)
        return _default_config()
    return _merge_defaults(data)


def load_config(path: Path | str | None = None) -> dict:
    """Config at path, else the last saved config, else defaults."""
    if path is not None:
        return _read_json(Path(path))
    last = get_last_config()
    if last is None:
        return _default_config()
    return _read_json(get_config_path(last[0], last[1]))


def save_config(
    params: dict,
    actual_seed: int,
    name: str,
    tick_count: int = 0,
    state: dict | None = None,
) -> Path:
    """Save config and optional state. actual_seed used for filename. Returns the config path."""
    path = get_config_path(actual_seed, name)
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    out = {**params, "actual_seed_used": actual_seed, "tick_count": tick_count}
    with open(path, "w") as f:
        json.dump(out, f, indent=2)
    if state is not None:
        np.savez_compressed(
            get_state_path(actual_seed, name),
            height=state["height"],
            water=state["water"],
            tick_count=np.int64(state["tick_count"]),
        )
    set_last_config(actual_seed, name)
    logger.info("Saved config %s (tick %d)", path.name, tick_count)
    return path


def load_state(seed: int, name: str) -> dict | None:
    """Return {'height': ndarray, 'water': ndarray, 'tick_count': int} or None."""
    p = get_state_path(seed, name)
    if not p.exists():
        return None
    try:
        data = np.load(p, allow_pickle=False)
        return {
            "height": data["height"].copy(),
            "water": data["water"].copy(),
            "tick_count": int(data["tick_count"]),
        }
    except (KeyError, OSError, ValueError) as exc:
        logger.warning("Could not read state %s (%s)", p, exc)
        return None


def delete_config(seed: int, name: str) -> None:
    """Remove config and state from disk. Clear last if this was last."""
    key = (seed, _sanitize_name(name))
    get_config_path(seed, name).unlink(missing_ok=True)
    get_state_path(seed, name).unlink(missing_ok=True)
    if get_last_config() == key:
        LAST_FILE.unlink(missing_ok=True)


def grid_size(cfg: dict) -> tuple[int, int]:
    """(nx, ny) cells: display size divided by tile size."""
    d = cfg["display"]
    tile = int(d["tile_size"])
    return int(d["width"]) // tile, int(d["height"]) // tile


def flow_kwargs(cfg: dict) -> dict:
    """Keyword arguments for basin.step from cfg['flow']."""
    flow = cfg["flow"]
    kw = {k: flow[k] for k in FLOW_KEYS}
    kw["source_cell"] = tuple(int(v) for v in flow["source_cell"])
    return kw


def _default_config() -> dict:
    return {
        "display": {"width": 1280, "height": 720, "tile_size": 10},
        "tick_rate": 60,
        "seed": -1,
        "lock_seed": False,
        "height_weights": list(HEIGHT_WEIGHTS),
        "water_display_cap": 5.0,
        "flow": {
            "source_increment": SOURCE_INCREMENT,
            "source_cell": list(SOURCE_CELL),
            "epsilon": EPSILON,
            "damping_divisor": DAMPING_DIVISOR,
            "boundary_absorbs": True,
            "clamp_negative": False,
        },
        "log_level": "INFO",
    }


def _merge_defaults(data: dict) -> dict:
    d = _default_config()
    for section in ("display", "flow"):
        if isinstance(data.get(section), dict):
            d[section] = {**d[section], **data[section]}
    for k in (
        "tick_rate", "seed", "lock_seed", "actual_seed_used", "height_weights",
        "water_display_cap", "log_level", "tick_count",
    ):
        if k in data:
            d[k] = data[k]
    return d
