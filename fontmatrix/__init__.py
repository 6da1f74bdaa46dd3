"""fontmatrix: render text into normalized ink-coverage matrices.

The package sizes and rasterizes text with font metrics rather than glyph
bounding boxes alone, so output from different fonts is comparable:

    font: Font loading (fontTools), metrics, glyph layout.
    sizing: Size solver (exact pixel height) and size normalizer.
    surface: Surface protocol and the Pillow-backed default surface.
    rasterize: RasterOptions, text_to_matrix, TextRender.
    cache: FontCache, an async single-flight registry keyed by content hash.
    overlay: Metric guide images for inspection.
    cli: The ``fontmatrix`` command.

Example usage:
    One-off font::

        from fontmatrix import Font, RasterOptions, text_to_matrix

        font = Font.from_path('fonts/Inter.ttf')
        matrix = text_to_matrix('Hello', font, RasterOptions(max_height=20))

    Cached fonts::

        import asyncio
        from fontmatrix import FontCache

        cache = FontCache()
        key = asyncio.run(cache.add_font('fonts/Inter.ttf'))
        matrix = cache.text2matrix('Hello', key)

Attributes:
    __version__ (str): Package version string.
"""

from .cache import FontCache
from .domain import BBox, Metrics, Point
from .errors import (
    ConfigurationError,
    DegenerateInputError,
    FontInvalidError,
    FontIOError,
    FontMatrixError,
    FontNotLoadedError,
    SolverDidNotConvergeError,
)
from .font import Font, PendingFont, content_hash, metrics_at
from .rasterize import RasterOptions, TextRender, text2matrix, text_to_matrix
from .sizing import SizeNormalizer, SolverConfig, build_normalizer, estimate_font_size, get_max_height
from .surface import PillowSurface, Surface

__all__ = [
    # Fonts
    'Font', 'PendingFont', 'FontCache', 'content_hash', 'metrics_at',
    # Values
    'Metrics', 'Point', 'BBox', 'SizeNormalizer',
    # Sizing
    'SolverConfig', 'estimate_font_size', 'get_max_height', 'build_normalizer',
    # Rasterization
    'RasterOptions', 'TextRender', 'text_to_matrix', 'text2matrix',
    'Surface', 'PillowSurface',
    # Errors
    'FontMatrixError', 'FontNotLoadedError', 'FontInvalidError', 'ConfigurationError',
    'FontIOError', 'DegenerateInputError', 'SolverDidNotConvergeError',
]

__version__ = '1.0.0'
