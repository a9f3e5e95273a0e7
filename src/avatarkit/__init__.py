"""avatarkit -- render avatar descriptions into stored JPEG media.

Top-level convenience re-exports::

    from avatarkit import AvatarRenderer, RenderConfig, TextAvatar, ColorPair
    from avatarkit.render import create_text_drawable  # standalone text badges
"""

__version__ = "0.1.0"

from avatarkit.config import RenderConfig
from avatarkit.model import (
    AvatarError,
    AvatarLookupError,
    ColorPair,
    EncodingError,
    Media,
    PhotoAvatar,
    ResourceAvatar,
    StorageError,
    TextAvatar,
    VectorAvatar,
)
from avatarkit.render import AvatarRenderer, create_text_drawable

__all__ = [
    "__version__",
    "AvatarRenderer",
    "RenderConfig",
    "create_text_drawable",
    "ColorPair",
    "Media",
    "PhotoAvatar",
    "ResourceAvatar",
    "TextAvatar",
    "VectorAvatar",
    "AvatarError",
    "AvatarLookupError",
    "EncodingError",
    "StorageError",
]
