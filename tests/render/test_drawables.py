"""Tests for bitmap and vector drawables and the drawable catalog."""

from __future__ import annotations

import threading

import pytest
from PIL import Image

from avatarkit.render.catalog import DrawableCatalog
from avatarkit.render.drawables import (
    BitmapDrawable,
    VectorDrawable,
    VectorShape,
    fill_canvas,
)

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
GREEN = (0, 255, 0, 255)


def _canvas(size: int = 40) -> Image.Image:
    return Image.new("RGBA", (size, size), (0, 0, 0, 0))


class TestFillCanvas:
    def test_fills_every_pixel(self):
        canvas = _canvas()
        fill_canvas(canvas, "#0000ff")
        assert canvas.getcolors() == [(40 * 40, BLUE)]


class TestBitmapDrawable:
    def test_draws_into_bounds_only(self, icon_image):
        canvas = _canvas()
        fill_canvas(canvas, BLUE)
        drawable = BitmapDrawable(icon_image)
        drawable.set_bounds(10, 10, 30, 30)
        drawable.draw(canvas)
        assert canvas.getpixel((9, 20)) == BLUE
        assert canvas.getpixel((10, 20)) == (255, 255, 255, 255)
        assert canvas.getpixel((29, 29)) == (255, 255, 255, 255)
        assert canvas.getpixel((30, 30)) == BLUE

    def test_tint_replaces_color_keeps_alpha(self):
        mask = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
        mask.paste((255, 255, 255, 255), (0, 0, 5, 10))
        canvas = _canvas(10)
        fill_canvas(canvas, BLUE)
        drawable = BitmapDrawable(mask)
        drawable.set_tint(RED)
        drawable.set_bounds(0, 0, 10, 10)
        drawable.draw(canvas)
        assert canvas.getpixel((1, 5)) == RED
        assert canvas.getpixel((8, 5)) == BLUE

    def test_empty_bounds_draw_nothing(self, icon_image):
        canvas = _canvas()
        BitmapDrawable(icon_image).draw(canvas)
        assert canvas.getbbox() is None

    def test_invalid_bounds_rejected(self, icon_image):
        with pytest.raises(ValueError):
            BitmapDrawable(icon_image).set_bounds(10, 10, 5, 5)


class TestVectorDrawable:
    def test_stretches_to_bounds(self):
        vector = VectorDrawable([VectorShape("rectangle", ((0, 0), (1, 1)), GREEN)])
        canvas = _canvas()
        vector.set_bounds(0, 0, 40, 40)
        vector.draw(canvas)
        assert canvas.getpixel((20, 20)) == GREEN
        assert canvas.getpixel((1, 1)) == GREEN

    def test_custom_viewport(self):
        # Left half of a 24x24 viewport
        vector = VectorDrawable(
            [VectorShape("rectangle", ((0, 0), (12, 24)), RED)],
            viewport=(24, 24),
        )
        canvas = _canvas()
        fill_canvas(canvas, BLUE)
        vector.set_bounds(0, 0, 40, 40)
        vector.draw(canvas)
        assert canvas.getpixel((5, 20)) == RED
        assert canvas.getpixel((35, 20)) == BLUE

    def test_ellipse_and_polygon(self):
        vector = VectorDrawable(
            [
                VectorShape("ellipse", ((0, 0), (1, 1)), RED),
                VectorShape("polygon", ((0.2, 0.2), (0.8, 0.2), (0.5, 0.9)), GREEN),
            ]
        )
        canvas = _canvas()
        vector.set_bounds(0, 0, 40, 40)
        vector.draw(canvas)
        assert canvas.getpixel((0, 0))[3] == 0
        assert canvas.getpixel((20, 3)) == RED
        assert canvas.getpixel((20, 15)) == GREEN

    def test_unknown_shape_kind_rejected(self):
        with pytest.raises(ValueError):
            VectorShape("bezier", ((0, 0), (1, 1)), RED)

    def test_polygon_needs_three_points(self):
        with pytest.raises(ValueError):
            VectorShape("polygon", ((0, 0), (1, 1)), RED)


class TestDrawableCatalog:
    def test_unknown_key_returns_none(self):
        assert DrawableCatalog().get("nope") is None

    def test_each_lookup_is_a_fresh_drawable(self, icon_image):
        catalog = DrawableCatalog()
        catalog.add_bitmap("ic_heart", icon_image)
        a = catalog.get("ic_heart")
        b = catalog.get("ic_heart")
        assert a is not b
        a.set_tint(RED)
        assert b.tint is None

    def test_register_factory(self):
        catalog = DrawableCatalog()
        vector = VectorDrawable([VectorShape("rectangle", ((0, 0), (1, 1)), RED)])
        catalog.register("custom", lambda: vector)
        assert catalog.get("custom") is vector
        assert "custom" in catalog
        assert len(catalog) == 1

    def test_keys_sorted(self, icon_image):
        catalog = DrawableCatalog()
        catalog.add_bitmap("b", icon_image)
        catalog.add_vector("a", [VectorShape("rectangle", ((0, 0), (1, 1)), RED)])
        assert catalog.keys() == ["a", "b"]

    def test_concurrent_registration(self):
        catalog = DrawableCatalog()
        shape = VectorShape("rectangle", ((0, 0), (1, 1)), RED)

        def add(i: int) -> None:
            catalog.add_vector(f"v{i}", [shape])

        threads = [threading.Thread(target=add, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(catalog) == 20
