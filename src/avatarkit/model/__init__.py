"""Avatar data model -- descriptions, results and errors.

Public API re-exports for ``avatarkit.model``.
"""

from avatarkit.model.types import (
    AVATAR_DIMENSIONS,
    JPEG_QUALITY,
    IMAGE_JPEG,
    Avatar,
    ColorPair,
    Media,
    PhotoAvatar,
    ResourceAvatar,
    TextAvatar,
    VectorAvatar,
    now_millis,
    to_rgba,
)

from avatarkit.model.errors import (
    AvatarError,
    AvatarLookupError,
    EncodingError,
    StorageError,
)

__all__ = [
    "AVATAR_DIMENSIONS",
    "JPEG_QUALITY",
    "IMAGE_JPEG",
    "Avatar",
    "ColorPair",
    "Media",
    "PhotoAvatar",
    "ResourceAvatar",
    "TextAvatar",
    "VectorAvatar",
    "now_millis",
    "to_rgba",
    "AvatarError",
    "AvatarLookupError",
    "EncodingError",
    "StorageError",
]
