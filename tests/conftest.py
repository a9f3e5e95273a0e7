"""Shared test fixtures for avatarkit tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from avatarkit.config import RenderConfig
from avatarkit.model.types import ColorPair
from avatarkit.render.catalog import DrawableCatalog
from avatarkit.render.drawables import VectorShape
from avatarkit.render.renderer import AvatarRenderer

DIMENSIONS = 96

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
GREEN = (0, 255, 0, 255)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Point AVATAR_HOME at a temp dir and clear render env overrides."""
    home = tmp_path / "avatar_home"
    monkeypatch.setenv("AVATAR_HOME", str(home))
    for var in ("AVATAR_DIMENSIONS", "AVATAR_JPEG_QUALITY", "AVATAR_MAX_WORKERS", "AVATAR_FONT_PATH"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture()
def config(tmp_path: Path) -> RenderConfig:
    return RenderConfig(dimensions=DIMENSIONS, max_workers=2, data_dir=tmp_path / "data")


@pytest.fixture()
def black_on_white() -> ColorPair:
    return ColorPair(foreground="#000000", background="#ffffff")


@pytest.fixture()
def red_on_blue() -> ColorPair:
    return ColorPair(foreground=RED, background=BLUE)


@pytest.fixture()
def icon_image() -> Image.Image:
    """A fully opaque white square, usable as a tintable icon mask."""
    return Image.new("RGBA", (10, 10), (255, 255, 255, 255))


@pytest.fixture()
def resources(icon_image) -> DrawableCatalog:
    catalog = DrawableCatalog()
    catalog.add_bitmap("ic_heart", icon_image)
    return catalog


@pytest.fixture()
def vectors() -> DrawableCatalog:
    catalog = DrawableCatalog()
    catalog.add_vector(
        "avatar_square",
        [VectorShape("rectangle", ((0.0, 0.0), (1.0, 1.0)), GREEN)],
    )
    return catalog


@pytest.fixture()
def renderer(config, resources, vectors):
    """An AvatarRenderer with small dimensions and temp-dir storage."""
    r = AvatarRenderer(config, resources=resources, vectors=vectors)
    yield r
    r.close()
