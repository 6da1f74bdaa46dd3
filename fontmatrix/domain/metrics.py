"""Vertical font metrics."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Metrics:
    """Vertical metrics of a font, in design units or pixels.

    A Font keeps one instance in design units; ``scaled`` produces the pixel
    values for a concrete size. The descender is negative for typical fonts.

    Attributes:
        ascender: Height of the tallest typical glyphs above the baseline.
        descender: Depth below the baseline (usually negative).
        cap_height: Height of flat capital letters.
        x_height: Height of lowercase letters without ascenders.
        line_gap: Recommended extra spacing between lines.
    """
    ascender: float
    descender: float
    cap_height: float
    x_height: float
    line_gap: float

    def scaled(self, units_per_em: int, size: float) -> Metrics:
        """Scale every field from design units to pixels at ``size``."""
        factor = size / units_per_em
        return Metrics(
            ascender=self.ascender * factor,
            descender=self.descender * factor,
            cap_height=self.cap_height * factor,
            x_height=self.x_height * factor,
            line_gap=self.line_gap * factor,
        )

    @property
    def line_height(self) -> float:
        """Distance from ascender to descender."""
        return abs(self.ascender - self.descender)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'ascender': self.ascender,
            'descender': self.descender,
            'cap_height': self.cap_height,
            'x_height': self.x_height,
            'line_gap': self.line_gap,
        }
