"""Text badges for initials avatars.

Builds :class:`TextDrawable` instances sized so that short strings render
large and longer strings shrink to fit on one line.  Usable on its own
(e.g. for list rows or badges) without going through the render pipeline.
"""

from __future__ import annotations

import functools
import logging
import threading
from pathlib import Path

from PIL import Image, ImageChops, ImageDraw, ImageFont

from avatarkit.config import DEFAULT_FONT_PATH
from avatarkit.model.types import AVATAR_DIMENSIONS, Color, TextAvatar, to_rgba
from avatarkit.render.drawables import Drawable

logger = logging.getLogger(__name__)

# Share of the badge size the text may span horizontally
TEXT_WIDTH_RATIO = 0.8
# Share of the badge size used as the font size ceiling
FONT_SIZE_RATIO = 0.45
# Smallest font size the sizing search will go down to
MIN_FONT_SIZE = 8

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


# ---------------------------------------------------------------------------
# Typeface
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=128)
def _load_font(path: str | None, size: int) -> Font:
    if path is None:
        return ImageFont.load_default(size)
    try:
        return ImageFont.truetype(path, size)
    except OSError:
        logger.warning("Could not load font %s at size %d, using default", path, size)
        return ImageFont.load_default(size)


class Typeface:
    """A font file plus a cache of sized fonts loaded from it.

    A missing font file falls back to Pillow's default font.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path: Path | None = None
        if path is not None:
            if Path(path).is_file():
                self.path = Path(path)
            else:
                logger.warning("Font file %s not found, using default font", path)

    def font(self, size: int) -> Font:
        return _load_font(str(self.path) if self.path else None, size)

    def measure(self, text: str, size: int) -> float:
        """Advance width of ``text`` at ``size`` pixels."""
        return self.font(size).getlength(text)


_typefaces: dict[Path, Typeface] = {}
_typeface_lock = threading.Lock()


def get_typeface(path: Path | str | None = None) -> Typeface:
    """Return the process-wide :class:`Typeface` for ``path``, loading it on first use.

    ``None`` selects the packaged Inter Medium font.
    """
    key = Path(path) if path is not None else DEFAULT_FONT_PATH
    with _typeface_lock:
        typeface = _typefaces.get(key)
        if typeface is None:
            typeface = Typeface(key)
            _typefaces[key] = typeface
    return typeface


# ---------------------------------------------------------------------------
# Sizing
# ---------------------------------------------------------------------------


def get_text_size_for_length(
    text: str,
    max_width: float,
    max_font_size: float,
    typeface: Typeface | None = None,
) -> int:
    """Largest integer font size at which ``text`` fits within ``max_width``.

    Candidates run from ``max_font_size`` downwards and stop at
    :data:`MIN_FONT_SIZE` (or the ceiling, if that is smaller), so very long
    strings come back at the floor even if they still overflow.
    """
    typeface = typeface or get_typeface()
    ceiling = max(1, int(max_font_size))
    floor = min(MIN_FONT_SIZE, ceiling)
    if not text:
        return ceiling

    size = ceiling
    while size > floor and typeface.measure(text, size) > max_width:
        size -= 1
    return size


# ---------------------------------------------------------------------------
# Drawable
# ---------------------------------------------------------------------------


class TextDrawable(Drawable):
    """Single-line text centred in a rectangular or round badge."""

    def __init__(
        self,
        text: str,
        font: Font,
        font_size: int,
        text_color: Color,
        width: int,
        height: int,
        *,
        round_shape: bool = False,
        shape_color: Color = (0, 0, 0, 0),
    ) -> None:
        super().__init__()
        self.text = text
        self.font = font
        self.font_size = font_size
        self.text_color = text_color
        self.intrinsic_width = width
        self.intrinsic_height = height
        self.round_shape = round_shape
        self.shape_color = shape_color

    def _box(self) -> tuple[int, int, int, int]:
        # Unset bounds: draw at the intrinsic size from the origin
        if self.width == 0 or self.height == 0:
            return (0, 0, self.intrinsic_width, self.intrinsic_height)
        return self.bounds

    def text_bbox(self) -> tuple[int, int, int, int]:
        """Bounding box of the rendered text, in canvas coordinates."""
        left, top, right, bottom = self._box()
        measure = ImageDraw.Draw(Image.new("L", (1, 1)))
        x0, y0, x1, y1 = measure.textbbox((0, 0), self.text, font=self.font)
        text_w, text_h = x1 - x0, y1 - y0
        x = left + ((right - left) - text_w) // 2
        y = top + ((bottom - top) - text_h) // 2
        return (x, y, x + text_w, y + text_h)

    def draw(self, canvas: Image.Image) -> None:
        left, top, right, bottom = self._box()
        width, height = right - left, bottom - top
        if width <= 0 or height <= 0:
            return

        layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        shape_rgba = to_rgba(self.shape_color)
        if self.round_shape:
            draw.ellipse((0, 0, width - 1, height - 1), fill=shape_rgba)
        else:
            draw.rectangle((0, 0, width - 1, height - 1), fill=shape_rgba)

        if self.text:
            x0, y0, x1, y1 = draw.textbbox((0, 0), self.text, font=self.font)
            x = (width - (x1 - x0)) // 2 - x0
            y = (height - (y1 - y0)) // 2 - y0
            draw.text((x, y), self.text, fill=to_rgba(self.text_color), font=self.font)

        if self.round_shape:
            mask = Image.new("L", (width, height), 0)
            ImageDraw.Draw(mask).ellipse((0, 0, width - 1, height - 1), fill=255)
            layer.putalpha(ImageChops.multiply(layer.getchannel("A"), mask))

        canvas.alpha_composite(layer, dest=(left, top))


def create_text_drawable(
    avatar: TextAvatar,
    inverted: bool = False,
    size: int = AVATAR_DIMENSIONS,
    is_rect: bool = True,
    typeface: Typeface | None = None,
) -> TextDrawable:
    """Build a text badge for ``avatar``.

    Args:
        avatar: The text and colour pair to draw.
        inverted: Draw the text in the background colour instead.
        size: Edge length of the badge in pixels.
        is_rect: Rectangular badge if True, round otherwise.
        typeface: Font source; defaults to the process-wide typeface.

    The badge itself is transparent: whoever draws it provides the fill.
    """
    typeface = typeface or get_typeface()
    color = avatar.color.background if inverted else avatar.color.foreground
    font_size = get_text_size_for_length(
        avatar.text,
        max_width=size * TEXT_WIDTH_RATIO,
        max_font_size=size * FONT_SIZE_RATIO,
        typeface=typeface,
    )
    return TextDrawable(
        avatar.text,
        typeface.font(font_size),
        font_size,
        color,
        size,
        size,
        round_shape=not is_rect,
    )
