"""Avatar rendering -- compositors, text badges, drawables and catalogs."""

from avatarkit.render.catalog import DrawableCatalog
from avatarkit.render.drawables import BitmapDrawable, Drawable, VectorDrawable, VectorShape
from avatarkit.render.renderer import AvatarRenderer, encode_jpeg
from avatarkit.render.text import (
    TextDrawable,
    Typeface,
    create_text_drawable,
    get_text_size_for_length,
    get_typeface,
)

__all__ = [
    "AvatarRenderer",
    "BitmapDrawable",
    "Drawable",
    "DrawableCatalog",
    "TextDrawable",
    "Typeface",
    "VectorDrawable",
    "VectorShape",
    "create_text_drawable",
    "encode_jpeg",
    "get_text_size_for_length",
    "get_typeface",
]
