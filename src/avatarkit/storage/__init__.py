"""Storage collaborators -- session blobs and raw picker photos."""

from avatarkit.storage.blob import BlobHandle, SingleSessionBlobStore
from avatarkit.storage.picker import AvatarPickerStorage, avatar_picker_filename, avatar_picker_uri

__all__ = [
    "BlobHandle",
    "SingleSessionBlobStore",
    "AvatarPickerStorage",
    "avatar_picker_filename",
    "avatar_picker_uri",
]
