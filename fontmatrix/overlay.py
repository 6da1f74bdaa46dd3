"""Metric guide overlays for visual inspection of a TextRender.

Draws the rendered coverage as black ink on white and adds horizontal guide
lines at the baseline, x-height and cap-height, which makes it easy to see
whether a font's declared metrics match its outlines.

Example:
    render = TextRender('Hxp', font, RasterOptions(font_size=48))
    save_metrics_overlay(render, 'metrics.png', scale=4)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image, ImageDraw

from .errors import DegenerateInputError
from .rasterize import TextRender

logger = logging.getLogger(__name__)

GUIDE_COLOR = (0, 0, 255)


def guide_rows(render: TextRender) -> dict:
    """Y positions (top-down, in pixels) of the guide lines."""
    metrics = render.metrics
    return {
        'baseline': metrics.ascender,
        'x_height': metrics.ascender - metrics.x_height,
        'cap_height': metrics.ascender - metrics.cap_height,
    }


def render_metrics_overlay(render: TextRender, scale: int = 1,
                           color: Tuple[int, int, int] = GUIDE_COLOR) -> Image.Image:
    """Return an RGB image of the render with metric guide lines.

    Args:
        render: A non-empty TextRender.
        scale: Integer upscaling factor (nearest neighbour) for small sizes.
        color: RGB color of the guide lines.

    Raises:
        DegenerateInputError: If the render has no pixels.
    """
    if render.is_empty:
        raise DegenerateInputError(f"Nothing to draw for {render.text!r}")

    coverage = np.asarray(render.matrix, dtype=np.float64)
    if render.options.row_order == 'bottom':
        coverage = coverage[::-1]
    gray = (255 - np.round(coverage * 255)).astype(np.uint8)
    img = Image.fromarray(gray).convert('RGB')
    if scale > 1:
        img = img.resize((render.width * scale, render.height * scale), Image.Resampling.NEAREST)

    draw = ImageDraw.Draw(img)
    for y in guide_rows(render).values():
        draw.line([(0, y * scale), (img.width, y * scale)], fill=color, width=1)
    return img


def save_metrics_overlay(render: TextRender, path: Union[str, Path], scale: int = 1) -> Path:
    """Write the overlay as a PNG and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    render_metrics_overlay(render, scale=scale).save(path)
    logger.info("Wrote metrics overlay to %s", path)
    return path
