"""Keyed catalogs of built-in drawables (icon resources and vector glyphs).

The renderer only consumes catalogs; callers populate them with the art
their application ships.  Every lookup builds a new drawable so a render
task can set bounds and tints without affecting concurrent tasks.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable

from PIL import Image

from avatarkit.render.drawables import BitmapDrawable, Drawable, VectorDrawable, VectorShape

DrawableFactory = Callable[[], Drawable]


class DrawableCatalog:
    """Thread-safe mapping of string keys to drawable factories."""

    def __init__(self) -> None:
        self._factories: dict[str, DrawableFactory] = {}
        self._lock = threading.Lock()

    def register(self, key: str, factory: DrawableFactory) -> None:
        with self._lock:
            self._factories[key] = factory

    def add_bitmap(self, key: str, image: Image.Image) -> None:
        """Register an RGBA icon; its alpha channel is the icon shape."""
        source = image.convert("RGBA")
        self.register(key, lambda: BitmapDrawable(source))

    def add_vector(
        self,
        key: str,
        shapes: Iterable[VectorShape],
        viewport: tuple[float, float] = (1.0, 1.0),
    ) -> None:
        frozen = tuple(shapes)
        self.register(key, lambda: VectorDrawable(frozen, viewport))

    def get(self, key: str) -> Drawable | None:
        """Build the drawable for ``key``, or None if the key is unknown."""
        with self._lock:
            factory = self._factories.get(key)
        return factory() if factory is not None else None

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._factories)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._factories

    def __len__(self) -> int:
        with self._lock:
            return len(self._factories)
