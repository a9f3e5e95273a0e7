"""File-backed storage for raw photos imported through the avatar picker.

Photos are saved under random UUID file names and referenced by
``content://avatarkit.part/avatar_picker/<filename>`` URIs.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import BinaryIO
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

PART_SCHEME = "content"
PART_AUTHORITY = "avatarkit.part"
AVATAR_PICKER_SEGMENT = "avatar_picker"


def avatar_picker_uri(filename: str) -> str:
    return f"{PART_SCHEME}://{PART_AUTHORITY}/{AVATAR_PICKER_SEGMENT}/{filename}"


def avatar_picker_filename(uri: str) -> str:
    """Extract the stored file name from an avatar picker URI.

    Raises:
        ValueError: ``uri`` is not an avatar picker URI or names a path
            outside the picker directory.
    """
    parsed = urlparse(uri)
    if parsed.scheme != PART_SCHEME or parsed.netloc != PART_AUTHORITY:
        raise ValueError(f"Not an avatar picker URI: {uri!r}")
    segments = parsed.path.strip("/").split("/")
    if len(segments) != 2 or segments[0] != AVATAR_PICKER_SEGMENT:
        raise ValueError(f"Not an avatar picker URI: {uri!r}")
    filename = segments[1]
    if not filename or filename in (".", "..") or "\\" in filename:
        raise ValueError(f"Invalid avatar picker file name in {uri!r}")
    return filename


class AvatarPickerStorage:
    """Stores raw avatar photo bytes in a single directory."""

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, uri: str) -> Path:
        return self._directory / avatar_picker_filename(uri)

    def save(self, data: bytes | BinaryIO) -> str:
        """Persist photo bytes and return the URI to reference them by."""
        self._directory.mkdir(parents=True, exist_ok=True)
        filename = str(uuid.uuid4())
        payload = data if isinstance(data, bytes) else data.read()
        (self._directory / filename).write_bytes(payload)
        logger.debug("Saved avatar picker photo %s (%d bytes)", filename, len(payload))
        return avatar_picker_uri(filename)

    def read(self, uri: str) -> BinaryIO:
        """Open the stored photo for reading.  Caller closes the stream.

        I/O errors (missing file, permissions) propagate as ``OSError``.
        """
        return open(self._path(uri), "rb")

    def size(self, uri: str) -> int:
        return self._path(uri).stat().st_size

    def delete(self, uri: str) -> bool:
        path = self._path(uri)
        if not path.exists():
            return False
        path.unlink()
        return True
