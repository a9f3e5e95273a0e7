"""avatarkit exception hierarchy.

All render-specific exceptions inherit from :class:`AvatarError`.  Raw I/O
errors from the photo read path are not wrapped and surface as ``OSError``.
"""

from __future__ import annotations


class AvatarError(Exception):
    """Base exception for all avatar rendering errors."""


class AvatarLookupError(AvatarError, LookupError):
    """Raised when an icon resource or vector key is not in its catalog."""

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"Drawable resource for key {key} does not exist.")


class EncodingError(AvatarError):
    """Raised when a canvas cannot be compressed to JPEG."""


class StorageError(AvatarError):
    """Raised when encoded bytes cannot be persisted or read back."""
