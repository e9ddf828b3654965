"""Shared fixtures: headless pygame and an isolated configs directory."""

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

import config


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point config at a throwaway configs/ directory."""
    d = tmp_path / "configs"
    monkeypatch.setattr(config, "CONFIG_DIR", d)
    monkeypatch.setattr(config, "LAST_FILE", d / "last.txt")
    return d
