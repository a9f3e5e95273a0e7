"""Avatar descriptions, colour pairs, media records and shared constants."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from PIL import ImageColor

if TYPE_CHECKING:
    from avatarkit.storage.blob import BlobHandle


# Square edge length of every rendered (non-photo) avatar
AVATAR_DIMENSIONS = 1024

# JPEG quality on Pillow's 1-95 scale
JPEG_QUALITY = 80

IMAGE_JPEG = "image/jpeg"

Color = Union[str, tuple]
RGBA = tuple[int, int, int, int]


def to_rgba(color: Color) -> RGBA:
    """Normalise a Pillow colour value (name, ``#hex``, RGB or RGBA tuple) to RGBA."""
    if isinstance(color, str):
        rgb = ImageColor.getrgb(color)
    else:
        rgb = tuple(int(c) for c in color)
    if len(rgb) == 3:
        return (rgb[0], rgb[1], rgb[2], 255)
    if len(rgb) == 4:
        return (rgb[0], rgb[1], rgb[2], rgb[3])
    raise ValueError(f"Invalid color value: {color!r}")


def now_millis() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ColorPair:
    """Foreground/background colour pair, as supplied by a palette."""

    foreground: Color
    background: Color

    def __post_init__(self) -> None:
        if self.foreground is None or self.background is None:
            raise ValueError("ColorPair requires both foreground and background colors")
        # Fail at construction rather than on a pool thread
        to_rgba(self.foreground)
        to_rgba(self.background)

    def inverted(self) -> ColorPair:
        return ColorPair(foreground=self.background, background=self.foreground)


# ---------------------------------------------------------------------------
# Avatar descriptions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResourceAvatar:
    """A built-in icon, tinted with ``color.foreground`` over ``color.background``."""

    resource_id: str
    color: ColorPair


@dataclass(frozen=True)
class VectorAvatar:
    """A built-in vector glyph looked up by ``key``; it carries its own colours."""

    key: str
    color: ColorPair


@dataclass(frozen=True)
class PhotoAvatar:
    """Raw image bytes previously imported into avatar picker storage.

    ``size`` is the known byte length of the stored photo.  ``width`` and
    ``height`` default to :data:`AVATAR_DIMENSIONS` since imported photos are
    cropped to the avatar dimension before they are saved.
    """

    uri: str
    size: int
    width: int | None = None
    height: int | None = None

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"Photo size must be non-negative, got {self.size}")


@dataclass(frozen=True)
class TextAvatar:
    """Short text such as initials, drawn in ``color.foreground``."""

    text: str
    color: ColorPair


Avatar = Union[ResourceAvatar, VectorAvatar, PhotoAvatar, TextAvatar]


# ---------------------------------------------------------------------------
# Render result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Media:
    """A persisted, encoded avatar plus the metadata callers need to attach it."""

    handle: BlobHandle
    mime_type: str
    timestamp_ms: int
    width: int
    height: int
    size: int

    @property
    def uri(self) -> str:
        return self.handle.uri

    def to_dict(self) -> dict[str, Any]:
        return {
            "uri": self.uri,
            "mime_type": self.mime_type,
            "timestamp_ms": self.timestamp_ms,
            "width": self.width,
            "height": self.height,
            "size": self.size,
        }
