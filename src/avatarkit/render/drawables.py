"""Drawables -- things that know how to paint themselves into a bounds rect.

A drawable is configured with :meth:`Drawable.set_bounds` and then painted
onto an RGBA canvas with :meth:`Drawable.draw`.  Drawables are cheap,
mutable and not shared between render tasks: catalogs hand out a fresh
instance per lookup.
"""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image, ImageChops, ImageDraw

from avatarkit.model.types import Color, to_rgba

Bounds = tuple[int, int, int, int]

# Vector shapes are rasterised at this multiple of the target size, then
# downsampled, which gives antialiased edges with plain ImageDraw.
_SUPERSAMPLE = 4


def fill_canvas(canvas: Image.Image, color: Color) -> None:
    """Fill the whole canvas with ``color``."""
    canvas.paste(to_rgba(color), (0, 0, canvas.width, canvas.height))


class Drawable:
    """Base class: holds bounds, subclasses implement :meth:`draw`."""

    def __init__(self) -> None:
        self.bounds: Bounds = (0, 0, 0, 0)
        self.tint: Color | None = None

    def set_tint(self, color: Color | None) -> None:
        """Recolour the drawable: its alpha is kept, its colour replaced by ``color``."""
        self.tint = color

    def set_bounds(self, left: int, top: int, right: int, bottom: int) -> None:
        if right < left or bottom < top:
            raise ValueError(f"Invalid bounds ({left}, {top}, {right}, {bottom})")
        self.bounds = (left, top, right, bottom)

    @property
    def width(self) -> int:
        return self.bounds[2] - self.bounds[0]

    @property
    def height(self) -> int:
        return self.bounds[3] - self.bounds[1]

    def draw(self, canvas: Image.Image) -> None:
        raise NotImplementedError

    def _composite(self, canvas: Image.Image, layer: Image.Image) -> None:
        if self.tint is not None:
            layer = _tinted(layer, to_rgba(self.tint))
        canvas.alpha_composite(layer, dest=(self.bounds[0], self.bounds[1]))


class BitmapDrawable(Drawable):
    """An RGBA image scaled into its bounds.

    With a tint set, a monochrome icon mask renders in any foreground colour.
    """

    def __init__(self, image: Image.Image) -> None:
        super().__init__()
        self._image = image if image.mode == "RGBA" else image.convert("RGBA")

    def draw(self, canvas: Image.Image) -> None:
        if self.width == 0 or self.height == 0:
            return
        layer = self._image.resize((self.width, self.height), Image.LANCZOS)
        self._composite(canvas, layer)


def _tinted(layer: Image.Image, rgba: tuple[int, int, int, int]) -> Image.Image:
    alpha = layer.getchannel("A")
    if rgba[3] != 255:
        alpha = ImageChops.multiply(alpha, Image.new("L", layer.size, rgba[3]))
    tinted = Image.new("RGBA", layer.size, rgba[:3] + (255,))
    tinted.putalpha(alpha)
    return tinted


@dataclass(frozen=True)
class VectorShape:
    """One filled primitive of a vector glyph.

    ``kind`` is ``"polygon"``, ``"ellipse"`` or ``"rectangle"``.  Points are in
    the glyph's viewport coordinates; ellipses and rectangles take two points
    (opposite corners of the box).
    """

    kind: str
    points: tuple[tuple[float, float], ...]
    fill: Color

    def __post_init__(self) -> None:
        if self.kind not in ("polygon", "ellipse", "rectangle"):
            raise ValueError(f"Unknown vector shape kind {self.kind!r}")
        minimum = 3 if self.kind == "polygon" else 2
        if len(self.points) < minimum:
            raise ValueError(f"A {self.kind} needs at least {minimum} points")


class VectorDrawable(Drawable):
    """A resolution-independent glyph made of filled shapes.

    The glyph is stretched to fill its bounds; colours come from the shapes.
    """

    def __init__(self, shapes: tuple[VectorShape, ...] | list[VectorShape], viewport: tuple[float, float] = (1.0, 1.0)) -> None:
        super().__init__()
        self.shapes = tuple(shapes)
        self.viewport = viewport

    def draw(self, canvas: Image.Image) -> None:
        if self.width == 0 or self.height == 0:
            return
        big_w, big_h = self.width * _SUPERSAMPLE, self.height * _SUPERSAMPLE
        sx = big_w / self.viewport[0]
        sy = big_h / self.viewport[1]

        layer = Image.new("RGBA", (big_w, big_h), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        for shape in self.shapes:
            points = [(x * sx, y * sy) for x, y in shape.points]
            fill = to_rgba(shape.fill)
            if shape.kind == "polygon":
                draw.polygon(points, fill=fill)
            elif shape.kind == "ellipse":
                draw.ellipse(_box(points), fill=fill)
            else:
                draw.rectangle(_box(points), fill=fill)

        layer = layer.resize((self.width, self.height), Image.LANCZOS)
        self._composite(canvas, layer)


def _box(points: list[tuple[float, float]]) -> tuple[float, float, float, float]:
    (x0, y0), (x1, y1) = points[0], points[1]
    return (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))
