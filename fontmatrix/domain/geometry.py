"""Geometric value objects for glyph layout."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Point:
    """Immutable 2D point."""
    x: float
    y: float

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class BBox:
    """Immutable bounding box in pixel space (y grows downward)."""
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @property
    def width(self) -> float:
        return abs(self.x_max - self.x_min)

    @property
    def height(self) -> float:
        return abs(self.y_max - self.y_min)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0

    def to_tuple(self) -> Tuple[float, float, float, float]:
        """Convert to (x1, y1, x2, y2)."""
        return (self.x_min, self.y_min, self.x_max, self.y_max)

    @classmethod
    def from_bounds(cls, bounds: Optional[Tuple[float, float, float, float]]) -> BBox:
        """Create from a fontTools bounds tuple; None becomes an empty box at the origin."""
        if bounds is None:
            return cls(0.0, 0.0, 0.0, 0.0)
        return cls(float(bounds[0]), float(bounds[1]), float(bounds[2]), float(bounds[3]))
