"""Render configuration via dataclass (no pydantic -- instant construction)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from avatarkit.model.types import AVATAR_DIMENSIONS, JPEG_QUALITY

logger = logging.getLogger(__name__)

DEFAULT_FONT_PATH = Path(__file__).parent / "render" / "fonts" / "Inter-Medium.ttf"


def _default_max_workers() -> int:
    """Bounded pool size: at least 2, at most 4, one core left for the caller."""
    return max(2, min((os.cpu_count() or 1) - 1, 4))


@dataclass
class RenderConfig:
    """Configuration for an :class:`~avatarkit.render.AvatarRenderer`.

    Every field may be left as ``None`` and is then filled in from an
    environment variable, an optional ``config.toml`` in the data directory,
    or a built-in default.

    Priority (highest wins): constructor arg > env var > config.toml > default.
    """

    dimensions: int | None = None
    jpeg_quality: int | None = None
    max_workers: int | None = None
    data_dir: Path | str | None = None
    font_path: Path | str | None = None

    def __post_init__(self) -> None:
        # data_dir first -- it locates config.toml.
        # AVATAR_HOME env var overrides ~/.avatarkit (useful for testing / isolation).
        if self.data_dir is None:
            avatar_home = os.getenv("AVATAR_HOME")
            self.data_dir = Path(avatar_home) if avatar_home else Path.home() / ".avatarkit"
        else:
            self.data_dir = Path(self.data_dir)

        file_values: dict[str, Any] = {}
        config_path = self.data_dir / "config.toml"
        if config_path.exists():
            file_values = self._load_config_file(config_path)

        if self.dimensions is None:
            self.dimensions = int(
                os.getenv("AVATAR_DIMENSIONS", file_values.get("dimensions", AVATAR_DIMENSIONS))
            )
        if self.jpeg_quality is None:
            self.jpeg_quality = int(
                os.getenv("AVATAR_JPEG_QUALITY", file_values.get("jpeg_quality", JPEG_QUALITY))
            )
        if self.max_workers is None:
            env_workers = os.getenv("AVATAR_MAX_WORKERS")
            if env_workers:
                self.max_workers = int(env_workers)
            else:
                self.max_workers = int(file_values.get("max_workers", _default_max_workers()))

        if self.font_path is None:
            self.font_path = os.getenv("AVATAR_FONT_PATH") or file_values.get("font_path")
        self.font_path = Path(self.font_path) if self.font_path else DEFAULT_FONT_PATH

        self._validate()

    def _validate(self) -> None:
        if self.dimensions < 1:
            raise ValueError(f"Invalid dimensions {self.dimensions}. Must be at least 1")
        if not 1 <= self.jpeg_quality <= 95:
            raise ValueError(
                f"Invalid jpeg_quality {self.jpeg_quality}. Must be between 1 and 95"
            )
        if self.max_workers < 1:
            raise ValueError(f"Invalid max_workers {self.max_workers}. Must be at least 1")

    def _load_config_file(self, path: Path) -> dict[str, Any]:
        """Load the optional ``[render]`` table from config.toml."""
        try:
            import tomllib
        except ModuleNotFoundError:
            import tomli as tomllib  # type: ignore[no-redef]  # Python 3.10 fallback

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except Exception:
            logger.warning("Failed to load config file %s", path, exc_info=True)
            return {}

        return data.get("render", {})

    @property
    def blob_dir(self) -> Path:
        return Path(self.data_dir) / "blobs"

    @property
    def picker_dir(self) -> Path:
        return Path(self.data_dir) / "avatar_picker"
