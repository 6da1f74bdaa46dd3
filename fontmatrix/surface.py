"""Pixel surfaces that glyph paths are filled onto.

The rasterizer only relies on the Surface protocol, so any backend that can
fill polygons and hand back RGBA bytes can be injected through a
SurfaceFactory. PillowSurface is the default backend.

PillowSurface fills with the nonzero winding rule: every contour is scan
converted with skimage.draw.polygon at SUPERSAMPLE times the output
resolution and added to a numpy winding buffer with the sign of its
orientation, so holes (counter-wound contours) cancel and overlapping
same-direction contours stay filled. A subpixel is inked when its centre lies
inside the contour, so edges are half-open and a shape never bleeds into the
pixel row or column past its right or bottom edge. Pillow box-filters the
buffer down to the output size, which turns the supersampled hits into
fractional coverage.

Example:
    surface = PillowSurface(40, 12)
    path.draw(surface)
    rgba = surface.get_image_data(0, 0, 40, 12)
"""

from __future__ import annotations

from typing import Callable, Protocol, Sequence, Tuple

import numpy as np
from PIL import Image
from skimage import draw

from .config import SUPERSAMPLE
from .errors import DegenerateInputError


class Surface(Protocol):
    """Capability interface for a drawable pixel surface."""

    width: int
    height: int

    def fill_contours(self, contours: Sequence[Sequence[Tuple[float, float]]]) -> None:
        ...

    def get_image_data(self, x: int, y: int, width: int, height: int) -> bytes:
        """Return RGBA bytes, 4 per pixel, row-major from the top-left."""
        ...


SurfaceFactory = Callable[[int, int], Surface]


def signed_area(contour: Sequence[Tuple[float, float]]) -> float:
    """Shoelace area; the sign gives the contour orientation."""
    area = 0.0
    n = len(contour)
    for i in range(n):
        x0, y0 = contour[i]
        x1, y1 = contour[(i + 1) % n]
        area += x0 * y1 - x1 * y0
    return area / 2


class PillowSurface:
    """Supersampled nonzero-winding surface backed by scikit-image, numpy and Pillow.

    Attributes:
        width: Output width in pixels.
        height: Output height in pixels.
        supersample: Fill resolution multiplier.
    """

    def __init__(self, width: int, height: int, supersample: int = SUPERSAMPLE):
        if width <= 0 or height <= 0:
            raise DegenerateInputError(f"Surface must have positive size, got {width}x{height}")
        self.width = width
        self.height = height
        self.supersample = supersample
        self._winding = np.zeros((height * supersample, width * supersample), dtype=np.int32)

    def fill_contours(self, contours: Sequence[Sequence[Tuple[float, float]]]) -> None:
        ss = self.supersample
        for contour in contours:
            area = signed_area(contour)
            if area == 0:
                continue
            # Subpixel i spans [i, i + 1); test its centre
            rows = np.array([y for _, y in contour], dtype=np.float64) * ss - 0.5
            cols = np.array([x for x, _ in contour], dtype=np.float64) * ss - 0.5
            rr, cc = draw.polygon(rows, cols, shape=self._winding.shape)
            self._winding[rr, cc] += 1 if area > 0 else -1

    def coverage(self) -> Image.Image:
        """Anti-aliased coverage as an 'L' image (255 = fully inked)."""
        ink = np.where(self._winding != 0, 255, 0).astype(np.uint8)
        img = Image.fromarray(ink)
        if self.supersample == 1:
            return img
        return img.resize((self.width, self.height), Image.Resampling.BOX)

    def get_image_data(self, x: int, y: int, width: int, height: int) -> bytes:
        alpha = self.coverage().crop((x, y, x + width, y + height))
        rgba = Image.new('RGBA', alpha.size, (0, 0, 0, 0))
        rgba.putalpha(alpha)
        return rgba.tobytes()


def create_surface(width: int, height: int) -> Surface:
    """Default SurfaceFactory."""
    return PillowSurface(width, height)
