"""Parsed fonts: metrics, glyph layout and loading.

A Font wraps a fontTools TTFont and exposes what the sizing and
rasterization pipeline needs:

    - units_per_em and raw vertical Metrics (design units)
    - metrics_at(size): the same metrics scaled to pixels
    - get_path(text, x, y, size): laid-out glyph outlines as a VectorPath
    - normalize_size(size): the size normalizer calibrated at load time

Fonts are immutable after construction. Glyph outlines are recorded lazily
and memoised; the memo and the underlying TTFont are guarded by a lock so a
Font can be shared between threads.

Loading:
    font = Font.from_path('fonts/Inter.ttf')
    font = Font.from_bytes(data)
    font = await Font.load('fonts/Inter.ttf')

    pending = Font.create(data)      # inside a running event loop
    font = await pending.wait()
"""

from __future__ import annotations

import asyncio
import hashlib
import io
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from fontTools.pens.boundsPen import BoundsPen
from fontTools.pens.recordingPen import DecomposingRecordingPen
from fontTools.ttLib import TTFont

from .domain.metrics import Metrics
from .errors import FontInvalidError, FontIOError, FontNotLoadedError, SolverDidNotConvergeError
from .paths import VectorPath, glyph_transform
from .sizing import IDENTITY_NORMALIZER, SizeNormalizer, SolverConfig, build_normalizer

logger = logging.getLogger(__name__)

FontSource = Union[bytes, bytearray, memoryview, str, os.PathLike]

REQUIRED_TABLES = ('head', 'hhea', 'hmtx', 'cmap', 'OS/2')


def read_font_bytes(source: FontSource) -> bytes:
    """Return raw font bytes from an in-memory buffer or a file path.

    Raises:
        FontIOError: If the file cannot be read.
        TypeError: If ``source`` is neither bytes-like nor a path.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if not isinstance(source, (str, os.PathLike)):
        raise TypeError(f"Font source must be bytes or a path, got {type(source).__name__}")
    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as e:
        raise FontIOError(f"Error reading the file {path}: {e}") from e


def content_hash(data: bytes) -> str:
    """Hex sha256 digest of raw font bytes, used as the default cache key."""
    return hashlib.sha256(data).hexdigest()


def _glyph_top(tt: TTFont, char: str) -> float:
    """yMax of the outline mapped to ``char``, or 0 when the font lacks it."""
    glyph_name = (tt.getBestCmap() or {}).get(ord(char))
    if glyph_name is None:
        return 0.0
    glyph_set = tt.getGlyphSet()
    pen = BoundsPen(glyph_set)
    glyph_set[glyph_name].draw(pen)
    if pen.bounds is None:
        return 0.0
    return float(pen.bounds[3])


def read_metrics(tt: TTFont) -> Metrics:
    """Read raw vertical metrics in design units.

    Ascender and descender come from hhea; cap height, x height and line gap
    from OS/2. OS/2 tables before version 2 carry no cap/x height, so those
    fall back to the outline tops of 'H' and 'x'.
    """
    hhea = tt['hhea']
    os2 = tt['OS/2']
    cap_height = getattr(os2, 'sCapHeight', None)
    x_height = getattr(os2, 'sxHeight', None)
    if os2.version < 2 or cap_height is None:
        cap_height = _glyph_top(tt, 'H')
    if os2.version < 2 or x_height is None:
        x_height = _glyph_top(tt, 'x')
    return Metrics(
        ascender=float(hhea.ascent),
        descender=float(hhea.descent),
        cap_height=float(cap_height),
        x_height=float(x_height),
        line_gap=float(os2.sTypoLineGap),
    )


def _read_kerning(tt: TTFont) -> Dict[Tuple[str, str], int]:
    """Pair kerning from a legacy 'kern' table. GPOS kerning is not applied."""
    if 'kern' not in tt:
        return {}
    pairs: Dict[Tuple[str, str], int] = {}
    for subtable in tt['kern'].kernTables:
        table = getattr(subtable, 'kernTable', None)
        if table:
            pairs.update(table)
    return pairs


class Font:
    """A parsed font ready for measuring and rasterizing.

    Attributes:
        name: Family name from the name table, if present.
        units_per_em: Design units per em.
        metrics: Raw vertical Metrics in design units.
        size_normalizer: Linear SizeNormalizer calibrated at construction.
        solver_config: SolverConfig used for calibration and height targets.
    """

    def __init__(self, tt: TTFont, solver_config: Optional[SolverConfig] = None):
        """Wrap a TTFont and calibrate its size normalizer.

        Args:
            tt: Parsed fontTools font.
            solver_config: Solver settings; defaults to SolverConfig().

        Raises:
            FontInvalidError: If a required table is missing or unreadable.
        """
        self._tt = tt
        self._lock = threading.RLock()
        self._outlines: Dict[str, tuple] = {}
        self.solver_config = solver_config or SolverConfig()

        missing = [tag for tag in REQUIRED_TABLES if tag not in tt]
        if missing:
            raise FontInvalidError(f"Font is missing required tables: {', '.join(missing)}")
        try:
            self.units_per_em = int(tt['head'].unitsPerEm)
            self.metrics = read_metrics(tt)
            self._glyph_set = tt.getGlyphSet()
            self._cmap = tt.getBestCmap() or {}
            self._kerning = _read_kerning(tt)
        except FontInvalidError:
            raise
        except Exception as e:
            raise FontInvalidError(f"Font tables could not be read: {e}") from e
        if self.units_per_em <= 0:
            raise FontInvalidError(f"Invalid unitsPerEm: {self.units_per_em}")

        glyph_order = tt.getGlyphOrder()
        self._notdef = '.notdef' if '.notdef' in self._glyph_set else (glyph_order[0] if glyph_order else None)
        self.name = tt['name'].getDebugName(1) if 'name' in tt else None

        try:
            self.size_normalizer = build_normalizer(self, config=self.solver_config)
        except SolverDidNotConvergeError as e:
            logger.warning("Size normalizer unavailable for %s, using identity: %s", self.name, e)
            self.size_normalizer = IDENTITY_NORMALIZER

        logger.info("Loaded font %s (unitsPerEm=%d, normalizer a=%.4f b=%.4f)",
                    self.name, self.units_per_em, self.size_normalizer.a, self.size_normalizer.b)

    # -- construction -------------------------------------------------------

    @classmethod
    def from_bytes(cls, data: bytes, solver_config: Optional[SolverConfig] = None) -> Font:
        """Parse font bytes (TTF, OTF, or collections' first face).

        Raises:
            FontInvalidError: If the bytes are not a readable font.
        """
        font_number = 0 if bytes(data[:4]) == b'ttcf' else -1
        try:
            tt = TTFont(io.BytesIO(data), fontNumber=font_number)
        except Exception as e:
            raise FontInvalidError(f"Could not parse font data: {e}") from e
        return cls(tt, solver_config=solver_config)

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike], solver_config: Optional[SolverConfig] = None) -> Font:
        return cls.from_bytes(read_font_bytes(path), solver_config=solver_config)

    @classmethod
    async def load(cls, source: FontSource, solver_config: Optional[SolverConfig] = None) -> Font:
        """Read and parse a font off the event loop thread."""
        data = await asyncio.to_thread(read_font_bytes, source)
        return await asyncio.to_thread(cls.from_bytes, data, solver_config)

    @classmethod
    def create(cls, source: FontSource, solver_config: Optional[SolverConfig] = None) -> PendingFont:
        """Start loading a font on the running event loop.

        Returns immediately with a PendingFont; await ``pending.wait()`` for
        the Font. Must be called from inside a running loop.
        """
        loop = asyncio.get_running_loop()
        label = str(source) if isinstance(source, (str, os.PathLike)) else f"<{len(source)} bytes>"
        return PendingFont(loop.create_task(cls.load(source, solver_config)), label)

    # -- metrics ------------------------------------------------------------

    def metrics_at(self, size: float) -> Metrics:
        """Vertical metrics scaled to pixels for ``size``."""
        return self.metrics.scaled(self.units_per_em, size)

    def normalize_size(self, size: float) -> float:
        """Map a nominal size to the calibrated font size."""
        return self.size_normalizer(size)

    # -- glyphs -------------------------------------------------------------

    def glyph_name(self, char: str) -> Optional[str]:
        return self._cmap.get(ord(char), self._notdef)

    def glyph_outline(self, glyph_name: str) -> tuple:
        """Recorded outline of a glyph in design units, components decomposed."""
        with self._lock:
            outline = self._outlines.get(glyph_name)
            if outline is None:
                pen = DecomposingRecordingPen(self._glyph_set)
                self._glyph_set[glyph_name].draw(pen)
                outline = tuple(pen.value)
                self._outlines[glyph_name] = outline
            return outline

    def advance_width(self, glyph_name: str) -> float:
        with self._lock:
            return float(self._glyph_set[glyph_name].width)

    def kerning_value(self, left: str, right: str) -> int:
        return self._kerning.get((left, right), 0)

    def get_path(self, text: str, x: float, y: float, size: float,
                 letter_spacing: Optional[float] = None, kerning: bool = True) -> VectorPath:
        """Lay out ``text`` on a baseline and return its outline in pixels.

        Glyphs are placed left to right starting at (x, y), where y is the
        baseline and pixel y grows downward. Each advance is the glyph's
        horizontal advance, plus pair kerning when enabled, plus
        ``letter_spacing * size`` when letter spacing is given (em units).

        Args:
            text: Text to lay out. Characters missing from the font use
                the .notdef glyph.
            x: Left origin in pixels.
            y: Baseline in pixels.
            size: Font size in pixels per em.
            letter_spacing: Extra tracking in em units.
            kerning: Apply pair kerning from the kern table.

        Returns:
            VectorPath of the laid-out outlines.
        """
        scale = size / self.units_per_em
        path = VectorPath()
        names = [self.glyph_name(char) for char in text]
        names = [name for name in names if name is not None]
        for index, name in enumerate(names):
            path.append_glyph(self.glyph_outline(name), glyph_transform(x, y, scale))
            x += self.advance_width(name) * scale
            if kerning and index < len(names) - 1:
                x += self.kerning_value(name, names[index + 1]) * scale
            if letter_spacing:
                x += letter_spacing * size
        return path

    def __repr__(self) -> str:
        return f"Font(name={self.name!r}, units_per_em={self.units_per_em})"


def metrics_at(font: Font, size: float) -> Metrics:
    """Scale a font's metrics to ``size``; see Font.metrics_at."""
    return font.metrics_at(size)


class PendingFont:
    """Handle for a font whose load is in progress.

    Attributes:
        label: Human-readable description of the source.
    """

    def __init__(self, task: asyncio.Future, label: str):
        self._task = task
        self.label = label

    @property
    def done(self) -> bool:
        return self._task.done()

    async def wait(self) -> Font:
        """Wait for the load to finish and return the Font (or raise its error)."""
        return await self._task

    def result(self) -> Font:
        """Return the loaded Font without waiting.

        Raises:
            FontNotLoadedError: If the load has not completed yet.
        """
        if not self._task.done():
            raise FontNotLoadedError(self.label, pending=True)
        return self._task.result()
