"""Tests for RenderConfig defaults and overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from avatarkit.config import DEFAULT_FONT_PATH, RenderConfig
from avatarkit.model.types import AVATAR_DIMENSIONS, JPEG_QUALITY


class TestRenderConfig:
    """RenderConfig default values and derivation."""

    def test_default_config(self, isolated_home):
        c = RenderConfig()
        assert c.dimensions == AVATAR_DIMENSIONS
        assert c.jpeg_quality == JPEG_QUALITY == 80
        assert 2 <= c.max_workers <= 4
        assert c.data_dir == isolated_home
        assert c.font_path == DEFAULT_FONT_PATH

    def test_default_home_without_env(self, monkeypatch):
        monkeypatch.delenv("AVATAR_HOME")
        c = RenderConfig()
        assert c.data_dir == Path.home() / ".avatarkit"

    def test_derived_directories(self, tmp_path):
        c = RenderConfig(data_dir=tmp_path / "mydata")
        assert c.blob_dir == tmp_path / "mydata" / "blobs"
        assert c.picker_dir == tmp_path / "mydata" / "avatar_picker"

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("AVATAR_DIMENSIONS", "256")
        monkeypatch.setenv("AVATAR_JPEG_QUALITY", "60")
        monkeypatch.setenv("AVATAR_MAX_WORKERS", "3")
        c = RenderConfig()
        assert c.dimensions == 256
        assert c.jpeg_quality == 60
        assert c.max_workers == 3

    def test_explicit_overrides_env_var(self, monkeypatch):
        monkeypatch.setenv("AVATAR_DIMENSIONS", "256")
        c = RenderConfig(dimensions=64)
        assert c.dimensions == 64

    def test_font_path_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("AVATAR_FONT_PATH", str(tmp_path / "Custom.ttf"))
        c = RenderConfig()
        assert c.font_path == tmp_path / "Custom.ttf"


class TestConfigFile:
    def test_config_toml_supplies_defaults(self, tmp_path):
        (tmp_path / "config.toml").write_text("[render]\ndimensions = 512\njpeg_quality = 70\n")
        c = RenderConfig(data_dir=tmp_path)
        assert c.dimensions == 512
        assert c.jpeg_quality == 70

    def test_env_beats_config_toml(self, tmp_path, monkeypatch):
        (tmp_path / "config.toml").write_text("[render]\ndimensions = 512\n")
        monkeypatch.setenv("AVATAR_DIMENSIONS", "128")
        c = RenderConfig(data_dir=tmp_path)
        assert c.dimensions == 128

    def test_broken_config_toml_is_ignored(self, tmp_path):
        (tmp_path / "config.toml").write_text("this is = = not toml")
        c = RenderConfig(data_dir=tmp_path)
        assert c.dimensions == AVATAR_DIMENSIONS


class TestValidation:
    def test_zero_dimensions_rejected(self):
        with pytest.raises(ValueError, match="dimensions"):
            RenderConfig(dimensions=0)

    def test_quality_out_of_range_rejected(self):
        with pytest.raises(ValueError, match="jpeg_quality"):
            RenderConfig(jpeg_quality=101)

    def test_zero_workers_rejected(self):
        with pytest.raises(ValueError, match="max_workers"):
            RenderConfig(max_workers=0)
