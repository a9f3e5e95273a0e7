"""Renders avatar descriptions into persisted JPEG media.

Resource, vector and text avatars are composited onto a square RGBA canvas
on a bounded worker pool, compressed to JPEG and stored in the session blob
store.  Photo avatars skip the canvas entirely: their stored bytes are
streamed straight into the blob store.

Results are delivered through two continuations, ``on_rendered(media)`` and
``on_failed(error)``, called on a pool thread.  Exactly one of them fires
per request.
"""

from __future__ import annotations

import asyncio
import functools
import io
import logging
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager

from PIL import Image

from avatarkit.config import RenderConfig
from avatarkit.model.errors import AvatarError, AvatarLookupError, EncodingError
from avatarkit.model.types import (
    IMAGE_JPEG,
    Avatar,
    ColorPair,
    Media,
    PhotoAvatar,
    ResourceAvatar,
    TextAvatar,
    VectorAvatar,
    now_millis,
)
from avatarkit.render.catalog import DrawableCatalog
from avatarkit.render.drawables import Drawable, fill_canvas
from avatarkit.render.text import TextDrawable, Typeface, create_text_drawable, get_typeface
from avatarkit.storage.blob import BlobHandle, SingleSessionBlobStore
from avatarkit.storage.picker import AvatarPickerStorage

logger = logging.getLogger(__name__)

# Icon inset on each side, as a share of the canvas dimension
RESOURCE_PADDING_RATIO = 0.2

OnRendered = Callable[[Media], None]
OnFailed = Callable[[BaseException], None]


# ---------------------------------------------------------------------------
# Canvas and encoding
# ---------------------------------------------------------------------------


@contextmanager
def allocate_canvas(dimensions: int) -> Iterator[Image.Image]:
    """A transparent square RGBA canvas, closed when the block exits."""
    canvas = Image.new("RGBA", (dimensions, dimensions), (0, 0, 0, 0))
    try:
        yield canvas
    finally:
        canvas.close()


def encode_jpeg(canvas: Image.Image, quality: int) -> bytes:
    """Compress ``canvas`` to JPEG bytes.

    Raises:
        EncodingError: Pillow could not encode the image.
    """
    buf = io.BytesIO()
    try:
        with canvas.convert("RGB") as rgb:
            rgb.save(buf, format="JPEG", quality=quality)
    except (OSError, ValueError) as exc:
        raise EncodingError(f"Failed to compress bitmap: {exc}") from exc
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Compositors
# ---------------------------------------------------------------------------


def composite_resource(canvas: Image.Image, resource: Drawable, color: ColorPair) -> None:
    """Background fill, then the icon tinted and inset by 20% on every side."""
    dimensions = canvas.width
    padding = int(dimensions * RESOURCE_PADDING_RATIO)
    resource.set_tint(color.foreground)
    resource.set_bounds(padding, padding, dimensions - padding, dimensions - padding)

    fill_canvas(canvas, color.background)
    resource.draw(canvas)


def composite_vector(canvas: Image.Image, vector: Drawable, color: ColorPair) -> None:
    """Background fill, then the vector stretched over the whole canvas."""
    vector.set_bounds(0, 0, canvas.width, canvas.height)

    fill_canvas(canvas, color.background)
    vector.draw(canvas)


def composite_text(canvas: Image.Image, text: TextDrawable, color: ColorPair) -> None:
    fill_canvas(canvas, color.background)
    text.draw(canvas)


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


def _deliver(callback: Callable, value: object, kind: str) -> None:
    try:
        callback(value)
    except Exception:
        logger.exception("Avatar %s callback raised", kind)


class AvatarRenderer:
    """Turns :data:`~avatarkit.model.Avatar` descriptions into :class:`Media`.

    Usage::

        with AvatarRenderer(RenderConfig(), vectors=vectors, resources=icons) as renderer:
            renderer.render_avatar(avatar, on_rendered, on_failed)
            media = renderer.submit(avatar).result()
            media = await renderer.render(avatar)

    The worker pool is created on first use and shut down by :meth:`close`.
    Collaborators default to on-disk stores under ``config.data_dir``.
    """

    def __init__(
        self,
        config: RenderConfig | None = None,
        *,
        vectors: DrawableCatalog | None = None,
        resources: DrawableCatalog | None = None,
        blob_store: SingleSessionBlobStore | None = None,
        picker_storage: AvatarPickerStorage | None = None,
        typeface: Typeface | None = None,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self.config = config or RenderConfig()
        self.vectors = vectors if vectors is not None else DrawableCatalog()
        self.resources = resources if resources is not None else DrawableCatalog()
        self.blob_store = blob_store or SingleSessionBlobStore(self.config.blob_dir)
        self.picker_storage = picker_storage or AvatarPickerStorage(self.config.picker_dir)
        self._typeface = typeface
        self._executor = executor
        self._owns_executor = executor is None
        self._lock = threading.Lock()

    # -- lifecycle ----------------------------------------------------------

    @property
    def dimensions(self) -> int:
        return self.config.dimensions

    @property
    def typeface(self) -> Typeface:
        if self._typeface is None:
            self._typeface = get_typeface(self.config.font_path)
        return self._typeface

    @property
    def executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.max_workers,
                    thread_name_prefix="avatar-render",
                )
        return self._executor

    def close(self, wait: bool = True) -> None:
        """Shut down the worker pool if this renderer created it."""
        if not self._owns_executor:
            return
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self) -> AvatarRenderer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- public API ---------------------------------------------------------

    def render_avatar(self, avatar: Avatar, on_rendered: OnRendered, on_failed: OnFailed) -> None:
        """Render ``avatar`` in the background; never blocks the caller."""
        match avatar:
            case ResourceAvatar():
                draw = functools.partial(self._draw_resource, avatar)
            case VectorAvatar():
                draw = functools.partial(self._draw_vector, avatar)
            case TextAvatar():
                draw = functools.partial(self._draw_text, avatar)
            case PhotoAvatar():
                self.executor.submit(self._render_photo, avatar, on_rendered, on_failed)
                return
            case _:
                raise TypeError(f"Unsupported avatar type: {type(avatar).__name__}")

        self.executor.submit(self._render_in_background, draw, on_rendered, on_failed)

    def submit(self, avatar: Avatar) -> Future[Media]:
        """Render ``avatar`` and return a future for the resulting media."""
        future: Future[Media] = Future()
        future.set_running_or_notify_cancel()
        self.render_avatar(avatar, future.set_result, future.set_exception)
        return future

    async def render(self, avatar: Avatar) -> Media:
        """Await the rendered media from a running event loop."""
        return await asyncio.wrap_future(self.submit(avatar))

    def create_text_drawable(
        self,
        avatar: TextAvatar,
        inverted: bool = False,
        size: int | None = None,
        is_rect: bool = True,
    ) -> TextDrawable:
        """Text badge using this renderer's typeface and dimensions."""
        return create_text_drawable(
            avatar,
            inverted=inverted,
            size=size or self.dimensions,
            is_rect=is_rect,
            typeface=self.typeface,
        )

    # -- compositors --------------------------------------------------------

    def _draw_resource(self, avatar: ResourceAvatar, canvas: Image.Image) -> None:
        resource = self.resources.get(avatar.resource_id)
        if resource is None:
            raise AvatarLookupError(
                avatar.resource_id, f"Icon resource {avatar.resource_id} does not exist."
            )
        composite_resource(canvas, resource, avatar.color)

    def _draw_vector(self, avatar: VectorAvatar, canvas: Image.Image) -> None:
        vector = self.vectors.get(avatar.key)
        if vector is None:
            raise AvatarLookupError(avatar.key)
        composite_vector(canvas, vector, avatar.color)

    def _draw_text(self, avatar: TextAvatar, canvas: Image.Image) -> None:
        composite_text(canvas, self.create_text_drawable(avatar), avatar.color)

    # -- background tasks ---------------------------------------------------

    def _render_in_background(
        self,
        draw: Callable[[Image.Image], None],
        on_rendered: OnRendered,
        on_failed: OnFailed,
    ) -> None:
        dimensions = self.dimensions
        try:
            with allocate_canvas(dimensions) as canvas:
                draw(canvas)
                data = encode_jpeg(canvas, self.config.jpeg_quality)
            handle = self.blob_store.store(io.BytesIO(data), len(data), IMAGE_JPEG)
        except Exception as exc:
            self._fail(on_failed, exc)
            return

        logger.debug("Rendered %dx%d avatar (%d bytes)", dimensions, dimensions, len(data))
        _deliver(on_rendered, self._create_media(handle, len(data)), "rendered")

    def _render_photo(self, avatar: PhotoAvatar, on_rendered: OnRendered, on_failed: OnFailed) -> None:
        try:
            with self.picker_storage.read(avatar.uri) as stream:
                handle = self.blob_store.store(stream, avatar.size, IMAGE_JPEG)
        except Exception as exc:
            self._fail(on_failed, exc)
            return

        media = self._create_media(handle, avatar.size, width=avatar.width, height=avatar.height)
        _deliver(on_rendered, media, "rendered")

    def _fail(self, on_failed: OnFailed, exc: Exception) -> None:
        if isinstance(exc, (AvatarError, OSError, ValueError)):
            logger.warning("Avatar render failed: %s", exc)
        else:
            logger.exception("Unexpected error rendering avatar")
        _deliver(on_failed, exc, "failure")

    def _create_media(
        self,
        handle: BlobHandle,
        size: int,
        width: int | None = None,
        height: int | None = None,
    ) -> Media:
        return Media(
            handle=handle,
            mime_type=IMAGE_JPEG,
            timestamp_ms=now_millis(),
            width=self.dimensions if width is None else width,
            height=self.dimensions if height is None else height,
            size=size,
        )
