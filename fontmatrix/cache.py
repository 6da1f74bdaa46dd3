"""Registry of loaded fonts keyed by content hash.

FontCache maps a key (the hex sha256 of the font bytes, or a caller-chosen
key) to a loaded Font. There is no module-level registry: create a cache and
pass it where it is needed, which keeps tests isolated.

Loading is asynchronous. The first add_font call for a key stores its load
task in a pending slot before parsing starts; concurrent calls for the same
key await that task instead of parsing again. Reading and parsing run in
worker threads through asyncio.to_thread.

Example:
    cache = FontCache()
    key = await cache.add_font('fonts/Inter.ttf')
    matrix = cache.text2matrix('Hello', key, RasterOptions(max_height=20))
    cache.remove_font(key)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Iterator, Optional

from .errors import FontNotLoadedError
from .font import Font, FontSource, content_hash, read_font_bytes
from .rasterize import CoverageMatrix, RasterOptions, text_to_matrix
from .sizing import SolverConfig, estimate_font_size, get_max_height
from .surface import SurfaceFactory

logger = logging.getLogger(__name__)

FontLoader = Callable[[bytes], Font]


class FontCache:
    """Keyed store of loaded fonts with single-flight loading.

    Attributes:
        loader: Callable turning raw bytes into a Font. Runs in a worker
            thread. Defaults to Font.from_bytes with this cache's solver
            config.
    """

    def __init__(self, loader: Optional[FontLoader] = None,
                 solver_config: Optional[SolverConfig] = None):
        self.solver_config = solver_config
        self.loader = loader or (lambda data: Font.from_bytes(data, solver_config=self.solver_config))
        self._fonts: Dict[str, Font] = {}
        self._pending: Dict[str, asyncio.Future] = {}

    # -- loading ------------------------------------------------------------

    async def add_font(self, source: FontSource, key: Optional[str] = None) -> str:
        """Load a font once and return its key.

        Args:
            source: Font bytes or a path to a font file.
            key: Cache key; defaults to the sha256 hex digest of the bytes.

        Returns:
            The cache key.

        Raises:
            FontIOError: If a path cannot be read.
            FontInvalidError: If the bytes are not a usable font.
        """
        if key is not None and (key in self._fonts or key in self._pending):
            return await self._join(key)

        data = await asyncio.to_thread(read_font_bytes, source)
        if key is None:
            key = content_hash(data)
        if key in self._fonts:
            logger.debug("Font %s already cached", key)
            return key

        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, data))
            self._pending[key] = task
        else:
            logger.debug("Waiting on in-flight load of %s", key)
        await asyncio.shield(task)
        return key

    async def _join(self, key: str) -> str:
        """Return a known key, waiting on its load if one is in flight."""
        task = self._pending.get(key)
        if task is None:
            logger.debug("Font %s already cached", key)
        else:
            logger.debug("Waiting on in-flight load of %s", key)
            await asyncio.shield(task)
        return key

    async def _load(self, key: str, data: bytes) -> Font:
        try:
            font = await asyncio.to_thread(self.loader, data)
        finally:
            slot = self._pending.get(key)
            if slot is not None and slot is asyncio.current_task():
                del self._pending[key]
                removed = False
            else:
                # remove_font() dropped the key while it was loading
                removed = True
        if not removed:
            self._fonts[key] = font
            logger.info("Cached font %s (%s)", key, font.name)
        return font

    # -- map operations -----------------------------------------------------

    def get_font(self, key: str) -> Font:
        """Return the loaded font for ``key``.

        Raises:
            FontNotLoadedError: If the key is unknown or still loading.
        """
        font = self._fonts.get(key)
        if font is None:
            raise FontNotLoadedError(key, pending=key in self._pending)
        return font

    def has_font(self, key: str) -> bool:
        return key in self._fonts

    def is_loading(self, key: str) -> bool:
        return key in self._pending

    def remove_font(self, key: str) -> None:
        """Forget ``key``. Removing an unknown key is a no-op."""
        self._pending.pop(key, None)
        if self._fonts.pop(key, None) is not None:
            logger.info("Removed font %s", key)

    def clear(self) -> None:
        self._pending.clear()
        self._fonts.clear()

    def keys(self) -> Iterator[str]:
        return iter(list(self._fonts))

    def __contains__(self, key: object) -> bool:
        return key in self._fonts

    def __len__(self) -> int:
        return len(self._fonts)

    # -- key-based entry points ---------------------------------------------

    def text2matrix(self, text: str, key: str, options: Optional[RasterOptions] = None,
                    surface_factory: Optional[SurfaceFactory] = None) -> CoverageMatrix:
        """text_to_matrix for a cached font key."""
        return text_to_matrix(text, self.get_font(key), options, surface_factory)

    def estimate_font_size(self, key: str, max_height: float) -> float:
        return estimate_font_size(self.get_font(key), max_height)

    def get_max_height(self, key: str, font_size: float) -> int:
        return get_max_height(self.get_font(key), font_size)
