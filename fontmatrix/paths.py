"""Glyph outline paths in pixel space.

A VectorPath holds outline drawing commands that have already been laid out
and scaled into pixel coordinates (y grows downward). It can report its exact
bounding box and flatten itself into polygons for a raster surface.

Outline commands follow the fontTools pen protocol (moveTo, lineTo, curveTo,
qCurveTo, closePath, endPath). Cubic segments come from CFF fonts, quadratic
ones from TrueType fonts; both are flattened into straight segments before
filling.

Typical usage:
    path = font.get_path('Hello', 0, 20, 16)
    bbox = path.get_bounding_box()
    contours = path.to_contours()
    path.draw(surface)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Sequence, Tuple

from fontTools.pens.basePen import BasePen
from fontTools.pens.boundsPen import BoundsPen
from fontTools.pens.recordingPen import RecordingPen, replayRecording
from fontTools.pens.transformPen import TransformPen

from .config import CUBIC_STEPS, QUAD_STEPS
from .domain.geometry import BBox

if TYPE_CHECKING:
    from .surface import Surface

Contour = List[Tuple[float, float]]


def flatten_bezier_quad(p0: tuple, p1: tuple, p2: tuple, steps: int = QUAD_STEPS) -> list[tuple]:
    """Flatten a quadratic Bezier curve into a sequence of discrete points.

    B(t) = (1-t)^2 * p0 + 2*(1-t)*t * p1 + t^2 * p2

    Args:
        p0: Starting point (x, y), assumed to already be in the contour.
        p1: Control point (x, y).
        p2: End point (x, y).
        steps: Number of line segments approximating the curve.

    Returns:
        ``steps`` points evenly spaced in t from 1/steps to 1, excluding p0
        and including p2.
    """
    pts = []
    for i in range(1, steps + 1):
        t = i / steps
        x = (1-t)**2*p0[0] + 2*(1-t)*t*p1[0] + t**2*p2[0]
        y = (1-t)**2*p0[1] + 2*(1-t)*t*p1[1] + t**2*p2[1]
        pts.append((x, y))
    return pts


def flatten_bezier_cubic(p0: tuple, p1: tuple, p2: tuple, p3: tuple, steps: int = CUBIC_STEPS) -> list[tuple]:
    """Flatten a cubic Bezier curve into a sequence of discrete points.

    B(t) = (1-t)^3 * p0 + 3*(1-t)^2*t * p1 + 3*(1-t)*t^2 * p2 + t^3 * p3

    Returns ``steps`` points excluding p0 and including p3.
    """
    pts = []
    for i in range(1, steps + 1):
        t = i / steps
        x = (1-t)**3*p0[0] + 3*(1-t)**2*t*p1[0] + 3*(1-t)*t**2*p2[0] + t**3*p3[0]
        y = (1-t)**3*p0[1] + 3*(1-t)**2*t*p1[1] + 3*(1-t)*t**2*p2[1] + t**3*p3[1]
        pts.append((x, y))
    return pts


class FlatteningPen(BasePen):
    """Pen that collects outlines as closed polygons.

    BasePen splits multi-point qCurveTo/curveTo calls into single segments
    and resolves implied on-curve points, so only one-segment curves reach
    the flatten helpers here.
    """

    def __init__(self, quad_steps: int = QUAD_STEPS, cubic_steps: int = CUBIC_STEPS):
        super().__init__(glyphSet=None)
        self.quad_steps = quad_steps
        self.cubic_steps = cubic_steps
        self.contours: List[Contour] = []
        self._current: Contour = []

    def _flush(self) -> None:
        if len(self._current) >= 3:
            self.contours.append(self._current)
        self._current = []

    def _moveTo(self, pt):
        self._flush()
        self._current = [tuple(pt)]

    def _lineTo(self, pt):
        self._current.append(tuple(pt))

    def _curveToOne(self, pt1, pt2, pt3):
        start = self._getCurrentPoint()
        self._current.extend(flatten_bezier_cubic(start, pt1, pt2, pt3, self.cubic_steps))

    def _qCurveToOne(self, pt1, pt2):
        start = self._getCurrentPoint()
        self._current.extend(flatten_bezier_quad(start, pt1, pt2, self.quad_steps))

    def _closePath(self):
        self._flush()

    def _endPath(self):
        self._flush()


def glyph_transform(x: float, y: float, scale: float) -> Tuple[float, float, float, float, float, float]:
    """Affine transform from font units (y up) to pixels (y down) for a glyph origin."""
    return (scale, 0, 0, -scale, x, y)


class VectorPath:
    """Outline commands in pixel coordinates.

    Attributes:
        commands: List of (operator, operands) tuples as produced by a
            fontTools RecordingPen.
    """

    def __init__(self, commands: Iterable[tuple] = ()):
        self.commands: List[tuple] = list(commands)

    def append_glyph(self, recording: Sequence[tuple], transform: tuple) -> None:
        """Append a glyph recorded in font units, placed with ``transform``."""
        pen = RecordingPen()
        replayRecording(recording, TransformPen(pen, transform))
        self.commands.extend(pen.value)

    def draw_to_pen(self, pen) -> None:
        """Replay the path into any fontTools pen."""
        replayRecording(self.commands, pen)

    @property
    def is_empty(self) -> bool:
        return not self.commands

    def get_bounding_box(self) -> BBox:
        """Return the exact outline bounds as (x1, y1, x2, y2).

        Curve extrema are included, not just control points. An empty path
        reports a zero box at the origin.
        """
        pen = BoundsPen(None)
        self.draw_to_pen(pen)
        return BBox.from_bounds(pen.bounds)

    def to_contours(self, quad_steps: int = QUAD_STEPS, cubic_steps: int = CUBIC_STEPS) -> List[Contour]:
        """Flatten the path into closed polygons."""
        pen = FlatteningPen(quad_steps, cubic_steps)
        self.draw_to_pen(pen)
        return pen.contours

    def draw(self, surface: Surface) -> None:
        """Fill the path onto a surface."""
        surface.fill_contours(self.to_contours())
