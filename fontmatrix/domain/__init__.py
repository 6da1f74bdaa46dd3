"""Value objects shared by the sizing and rasterization modules."""

from .geometry import BBox, Point
from .metrics import Metrics

__all__ = ['Point', 'BBox', 'Metrics']
