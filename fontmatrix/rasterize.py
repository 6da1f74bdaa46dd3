"""Text to coverage-matrix rasterization.

This module turns a string rendered in a Font into a row-major matrix of
ink coverage values in [0.0, 1.0]. Two layouts are supported:

    bbox
        The matrix is the tight bounding box of the laid-out outline:
        width = ceil(|x2 - x1|), height = round(|y2 - y1|). The text is
        drawn with its baseline on the bottom edge at x = 0, matching the
        historical text2matrix output.

    metrics
        The matrix height comes from the font metrics,
        ceil(|ascender - descender|), so every string drawn at the same size
        shares one baseline row regardless of its glyphs. The text is shifted
        so its left ink edge is at x = 0 and its baseline sits on the
        ascender row. TextRender exposes this layout with a pivot point for
        compositing.

Key functionality:
    - RasterOptions: validated per-call options
    - resolve_font_size: font_size / max_height / normalization handling
    - text_to_matrix: one-shot conversion for either layout
    - TextRender: metric-anchored render with width, height, pivot, matrix

Typical usage:
    from fontmatrix import Font, RasterOptions, text_to_matrix

    font = Font.from_path('fonts/Inter.ttf')
    matrix = text_to_matrix('Hello', font, RasterOptions(max_height=20))

    render = TextRender('Hello', font, RasterOptions(font_size=16, layout='metrics'))
    anchor = render.pivot
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import List, Optional

import numpy as np

from .config import DEFAULT_FONT_SIZE, DEFAULT_METRICS_FONT_SIZE
from .domain.geometry import Point
from .errors import ConfigurationError
from .font import Font
from .sizing import SolverConfig, estimate_font_size, round_half_up
from .surface import Surface, SurfaceFactory, create_surface

logger = logging.getLogger(__name__)

CoverageMatrix = List[List[float]]

LAYOUTS = ('bbox', 'metrics')
ROW_ORDERS = ('top', 'bottom')


@dataclass(frozen=True)
class RasterOptions:
    """Options for text_to_matrix and TextRender.

    Attributes:
        font_size: Nominal font size. Mutually exclusive with max_height.
        max_height: Target probe height in pixels; the size solver picks the
            font size. Mutually exclusive with font_size.
        normalize_size: Pass font_size through the font's size normalizer.
            Ignored when max_height is set.
        letter_spacing: Extra tracking in em units, passed to layout as is.
        layout: 'bbox' or 'metrics'.
        row_order: 'top' puts the topmost pixel row first; 'bottom' emits
            rows bottom-up like the historical renderer.
        solver: Solver settings for max_height; defaults to the font's.
    """
    font_size: Optional[float] = None
    max_height: Optional[float] = None
    normalize_size: bool = True
    letter_spacing: Optional[float] = None
    layout: str = 'bbox'
    row_order: str = 'top'
    solver: Optional[SolverConfig] = None

    def __post_init__(self):
        if self.font_size is not None and self.max_height is not None:
            raise ConfigurationError("font_size and max_height are mutually exclusive")
        if self.font_size is not None and self.font_size <= 0:
            raise ConfigurationError(f"font_size must be positive, got {self.font_size}")
        if self.max_height is not None and self.max_height <= 0:
            raise ConfigurationError(f"max_height must be positive, got {self.max_height}")
        if self.layout not in LAYOUTS:
            raise ConfigurationError(f"Unknown layout {self.layout!r}; expected one of {LAYOUTS}")
        if self.row_order not in ROW_ORDERS:
            raise ConfigurationError(f"Unknown row_order {self.row_order!r}; expected one of {ROW_ORDERS}")


def resolve_font_size(font: Font, options: RasterOptions) -> float:
    """Concrete font size for a render.

    max_height wins through the size solver; otherwise font_size (or the
    layout's default) goes through the size normalizer when normalize_size
    is set.
    """
    if options.max_height is not None:
        return estimate_font_size(font, options.max_height, options.solver)
    size = options.font_size
    if size is None:
        size = DEFAULT_FONT_SIZE if options.layout == 'bbox' else DEFAULT_METRICS_FONT_SIZE
    if options.normalize_size:
        return font.normalize_size(size)
    return float(size)


def extract_matrix(surface: Surface, row_order: str = 'top') -> CoverageMatrix:
    """Read a surface's alpha channel as rows of floats in [0, 1]."""
    width, height = surface.width, surface.height
    data = surface.get_image_data(0, 0, width, height)
    rgba = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
    alpha = rgba[:, :, 3] / 255.0
    if row_order == 'bottom':
        alpha = alpha[::-1]
    return alpha.tolist()


def _render_bbox(text: str, font: Font, options: RasterOptions,
                 surface_factory: SurfaceFactory) -> CoverageMatrix:
    size = resolve_font_size(font, options)
    bbox = font.get_path(text, 0, 0, size, letter_spacing=options.letter_spacing).get_bounding_box()
    width = math.ceil(bbox.width)
    height = round_half_up(bbox.height)
    logger.debug("bbox layout %r: size=%.4f -> %dx%d", text, size, width, height)
    if width <= 0 or height <= 0:
        return []

    surface = surface_factory(width, height)
    font.get_path(text, 0, height, size, letter_spacing=options.letter_spacing).draw(surface)
    return extract_matrix(surface, options.row_order)


class TextRender:
    """Metric-anchored render of a string.

    The canvas height is the font's ascender-to-descender span at the
    resolved size, so renders of different strings line up on one baseline.

    Attributes:
        text: The rendered string.
        font: Font used.
        font_size: Resolved font size.
        metrics: Font metrics at font_size, in pixels.
        width: Matrix width in pixels.
        height: Matrix height in pixels (0 when the text has no ink extent).
        path: Outline as drawn, in canvas coordinates.
        matrix: Coverage matrix; [] when width or height is 0.
    """

    def __init__(self, text: str, font: Font, options: Optional[RasterOptions] = None,
                 surface_factory: Optional[SurfaceFactory] = None):
        options = replace(options or RasterOptions(), layout='metrics')
        self.text = text
        self.font = font
        self.options = options
        self.font_size = resolve_font_size(font, options)
        self.metrics = font.metrics_at(self.font_size)

        self.bbox = font.get_path(text, 0, 0, self.font_size,
                                  letter_spacing=options.letter_spacing).get_bounding_box()
        self.width = math.ceil(self.bbox.width)
        self.height = math.ceil(self.metrics.line_height) if self.width > 0 else 0
        self.path = font.get_path(text, -self.bbox.x_min, self.metrics.ascender, self.font_size,
                                  letter_spacing=options.letter_spacing)
        logger.debug("metrics layout %r: size=%.4f -> %dx%d",
                     text, self.font_size, self.width, self.height)

        self.surface: Optional[Surface] = None
        self.matrix: CoverageMatrix = []
        if self.width > 0 and self.height > 0:
            self.surface = (surface_factory or create_surface)(self.width, self.height)
            self.path.draw(self.surface)
            self.matrix = extract_matrix(self.surface, options.row_order)

    @property
    def pivot(self) -> Point:
        """Stable compositing anchor: left edge on the baseline row (top-down)."""
        return Point(0, math.floor(self.metrics.ascender))

    @property
    def is_empty(self) -> bool:
        return not self.matrix


def text_to_matrix(text: str, font: Font, options: Optional[RasterOptions] = None,
                   surface_factory: Optional[SurfaceFactory] = None) -> CoverageMatrix:
    """Rasterize ``text`` into a coverage matrix.

    Args:
        text: String to render. Empty or ink-less strings give [].
        font: A loaded Font. Use FontCache.text2matrix to render by key.
        options: RasterOptions; defaults to bbox layout at the default size.
        surface_factory: Builds the drawing surface; defaults to PillowSurface.

    Returns:
        Row-major list of rows of floats in [0, 1].

    Raises:
        ConfigurationError: For invalid option combinations.
        SolverDidNotConvergeError: If max_height cannot be solved.
    """
    options = options or RasterOptions()
    if options.layout == 'metrics':
        return TextRender(text, font, options, surface_factory).matrix
    return _render_bbox(text, font, options, surface_factory or create_surface)


def text2matrix(text: str, font: Font, font_size: Optional[float] = None,
                max_height: Optional[float] = None, normalize_size: bool = True,
                letter_spacing: Optional[float] = None, **kwargs) -> CoverageMatrix:
    """Keyword form of text_to_matrix.

    Remaining keyword arguments (layout, row_order, solver) are passed to
    RasterOptions.
    """
    options = RasterOptions(font_size=font_size, max_height=max_height,
                            normalize_size=normalize_size, letter_spacing=letter_spacing, **kwargs)
    return text_to_matrix(text, font, options)
