"""Single-session, on-disk blob storage for encoded avatars.

Each store instance owns one session.  Blobs are written to
``<root>/single-session/<session_id>/<blob_id>`` and addressed by a
:class:`BlobHandle` whose URI encodes the session, mime type and size.
Blobs are not durable across sessions: :meth:`SingleSessionBlobStore.on_session_start`
removes everything left behind by earlier sessions.

Writes go to unique files, so one store can be shared by every render
task in the pool without extra locking.
"""

from __future__ import annotations

import logging
import shutil
import threading
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote, unquote, urlparse

from avatarkit.model.errors import StorageError

logger = logging.getLogger(__name__)

BLOB_SCHEME = "blob"
SINGLE_SESSION_DISK = "single-session-disk"

_SESSION_DIR = "single-session"
_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class BlobHandle:
    """Retrievable reference to a persisted blob."""

    session_id: str
    blob_id: str
    mime_type: str
    size: int

    @property
    def uri(self) -> str:
        mime = quote(self.mime_type, safe="")
        return f"{BLOB_SCHEME}://{SINGLE_SESSION_DISK}/{self.session_id}/{mime}/{self.size}/{self.blob_id}"

    @classmethod
    def parse(cls, uri: str) -> BlobHandle:
        """Parse a ``blob://single-session-disk/...`` URI back into a handle."""
        parsed = urlparse(uri)
        if parsed.scheme != BLOB_SCHEME or parsed.netloc != SINGLE_SESSION_DISK:
            raise ValueError(f"Not a single-session blob URI: {uri!r}")
        segments = parsed.path.strip("/").split("/")
        if len(segments) != 4:
            raise ValueError(f"Malformed blob URI: {uri!r}")
        session_id, mime, size, blob_id = segments
        try:
            size_value = int(size)
        except ValueError:
            raise ValueError(f"Malformed blob size in URI: {uri!r}") from None
        return cls(session_id=session_id, blob_id=blob_id, mime_type=unquote(mime), size=size_value)


class SingleSessionBlobStore:
    """Persists byte streams on disk for the lifetime of one session.

    Usage::

        store = SingleSessionBlobStore(config.blob_dir)
        store.on_session_start()
        handle = store.store(io.BytesIO(data), len(data), "image/jpeg")
        with store.open(handle) as f:
            f.read()
    """

    def __init__(self, root: Path | str, session_id: str | None = None) -> None:
        self._root = Path(root) / _SESSION_DIR
        self.session_id = session_id or uuid.uuid4().hex
        self._lock = threading.Lock()
        self._session_dir_ready = False

    @property
    def session_dir(self) -> Path:
        return self._root / self.session_id

    def _ensure_session_dir(self) -> Path:
        with self._lock:
            if not self._session_dir_ready:
                self.session_dir.mkdir(parents=True, exist_ok=True)
                self._session_dir_ready = True
        return self.session_dir

    def path_for(self, handle: BlobHandle) -> Path:
        return self._root / handle.session_id / handle.blob_id

    def store(self, stream: BinaryIO, length: int, mime_type: str) -> BlobHandle:
        """Copy exactly ``length`` bytes from ``stream`` into a new blob.

        Raises:
            StorageError: the stream ended early or the blob could not be written.
        """
        if length < 0:
            raise StorageError(f"Invalid blob length {length}")

        try:
            directory = self._ensure_session_dir()
        except OSError as exc:
            raise StorageError(f"Cannot create session directory {self.session_dir}") from exc

        blob_id = uuid.uuid4().hex
        path = directory / blob_id
        remaining = length
        try:
            with open(path, "wb") as out:
                while remaining > 0:
                    chunk = stream.read(min(_CHUNK_SIZE, remaining))
                    if not chunk:
                        break
                    out.write(chunk)
                    remaining -= len(chunk)
        except OSError as exc:
            path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write blob {blob_id}: {exc}") from exc

        if remaining:
            path.unlink(missing_ok=True)
            raise StorageError(
                f"Expected {length} bytes for blob {blob_id}, stream ended after {length - remaining}"
            )

        handle = BlobHandle(session_id=self.session_id, blob_id=blob_id, mime_type=mime_type, size=length)
        logger.debug("Stored blob %s (%d bytes, %s)", blob_id, length, mime_type)
        return handle

    def open(self, handle: BlobHandle) -> BinaryIO:
        """Open a stored blob for reading.  Caller closes the stream."""
        try:
            return open(self.path_for(handle), "rb")
        except FileNotFoundError as exc:
            raise StorageError(f"Blob {handle.blob_id} does not exist") from exc

    def read_bytes(self, handle: BlobHandle) -> bytes:
        with self.open(handle) as f:
            return f.read()

    def delete(self, handle: BlobHandle) -> bool:
        """Delete a blob.  Returns False if it was already gone."""
        path = self.path_for(handle)
        if not path.exists():
            return False
        path.unlink()
        return True

    def on_session_start(self) -> int:
        """Remove blobs left behind by previous sessions.

        Returns the number of stale session directories removed.
        """
        if not self._root.exists():
            return 0
        removed = 0
        for entry in self._root.iterdir():
            if entry.name == self.session_id or not entry.is_dir():
                continue
            shutil.rmtree(entry, ignore_errors=True)
            removed += 1
        if removed:
            logger.info("Removed %d stale blob session(s) from %s", removed, self._root)
        return removed
