"""Font size solving and size normalization.

The size solver answers "which font size makes the probe string exactly N
pixels tall?". Heights are measured on the laid-out outline of the probe
string (config.PROBE_TEXT), rounded half-up to whole pixels, so a solution
is any size whose rounded height equals the target.

The size normalizer uses two solver runs to fit a line from nominal sizes to
font sizes. Applied to a requested size it yields glyphs of comparable pixel
height across fonts whose design metrics differ.

Two solver strategies exist:

    bisection (default)
        Lower bound 0, upper bound doubled from the target until the probe
        is at least as tall as the target, then bisected.

    legacy
        The historical probe sequence. The reference point stays at size 0,
        so each step moves by half the current size (x1.5 or x0.5). It can
        oscillate without ever hitting the target; kept only so existing
        calibrations can be reproduced.

Both stop after SolverConfig.max_iterations and raise
SolverDidNotConvergeError.

Example:
    >>> size = estimate_font_size(font, 20)
    >>> get_max_height(font, size)
    20
    >>> normalizer = build_normalizer(font)
    >>> font_size = normalizer(11)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from .config import CALIBRATION_ANCHORS, PROBE_TEXT, SOLVER_MAX_ITERATIONS, SOLVER_STRATEGY
from .errors import ConfigurationError, SolverDidNotConvergeError

if TYPE_CHECKING:
    from .font import Font

logger = logging.getLogger(__name__)

STRATEGIES = ('bisection', 'legacy')

Measure = Callable[[float], int]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class SolverConfig:
    """Settings for estimate_font_size.

    Attributes:
        strategy: 'bisection' or 'legacy'.
        max_iterations: Measurement budget before giving up.
        probe_text: Text whose bounding box height is measured.
    """
    strategy: str = SOLVER_STRATEGY
    max_iterations: int = SOLVER_MAX_ITERATIONS
    probe_text: str = PROBE_TEXT

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ConfigurationError(
                f"Unknown solver strategy {self.strategy!r}; expected one of {STRATEGIES}")
        if self.max_iterations <= 0:
            raise ConfigurationError(f"max_iterations must be positive, got {self.max_iterations}")
        if not self.probe_text:
            raise ConfigurationError("probe_text must not be empty")


@dataclass(frozen=True)
class SizeNormalizer:
    """Linear map ``size = a * requested + b``."""
    a: float
    b: float

    def __call__(self, requested_size: float) -> float:
        return self.a * requested_size + self.b


IDENTITY_NORMALIZER = SizeNormalizer(1.0, 0.0)


def get_max_height(font: Font, font_size: float, probe_text: str = PROBE_TEXT) -> int:
    """Pixel height of the probe string's bounding box at ``font_size``."""
    path = font.get_path(probe_text, 0, 0, font_size)
    return round_half_up(path.get_bounding_box().height)


def _solve_bisection(measure: Measure, target: int, max_iterations: int) -> Tuple[float, int]:
    low = 0.0
    high = float(target)
    iterations = 0

    # Grow the upper bound until the probe reaches the target
    while True:
        height = measure(high)
        iterations += 1
        logger.debug("bisection grow: size=%.6f height=%d target=%d", high, height, target)
        if height == target:
            return high, iterations
        if height > target:
            break
        if iterations >= max_iterations:
            raise SolverDidNotConvergeError(target, iterations, high)
        low = high
        high *= 2

    while iterations < max_iterations:
        mid = (low + high) / 2
        height = measure(mid)
        iterations += 1
        logger.debug("bisection step: size=%.6f height=%d target=%d", mid, height, target)
        if height == target:
            return mid, iterations
        if height < target:
            low = mid
        else:
            high = mid

    raise SolverDidNotConvergeError(target, iterations, (low + high) / 2)


def _solve_legacy(measure: Measure, target: int, max_iterations: int) -> Tuple[float, int]:
    previous_size = 0.0
    current_size = float(target)
    for iteration in range(1, max_iterations + 1):
        height = measure(current_size)
        logger.debug("legacy step: size=%.6f height=%d target=%d", current_size, height, target)
        if height == target:
            return current_size, iteration
        # previous_size is never advanced
        diff = abs(previous_size - current_size)
        if height < target:
            current_size += diff / 2
        else:
            current_size -= diff / 2
    raise SolverDidNotConvergeError(target, max_iterations, current_size)


_SOLVERS = {
    'bisection': _solve_bisection,
    'legacy': _solve_legacy,
}


def solve_size(measure: Measure, target_height: float, config: Optional[SolverConfig] = None) -> float:
    """Find a size whose measured height equals ``target_height``.

    Args:
        measure: Maps a font size to an integer pixel height. Expected to be
            non-decreasing in the size.
        target_height: Positive whole number of pixels.
        config: Strategy and iteration budget.

    Returns:
        The first probed size whose measurement equals the target.

    Raises:
        ConfigurationError: If the target is not a positive whole number.
        SolverDidNotConvergeError: If the budget runs out.
    """
    config = config or SolverConfig()
    if target_height <= 0 or not float(target_height).is_integer():
        raise ConfigurationError(f"Target height must be a positive whole number, got {target_height}")
    target = int(target_height)
    size, iterations = _SOLVERS[config.strategy](measure, target, config.max_iterations)
    logger.debug("Solved height %d -> size %.6f in %d iterations (%s)",
                 target, size, iterations, config.strategy)
    return size


def estimate_font_size(font: Font, target_height: float, config: Optional[SolverConfig] = None) -> float:
    """Font size at which the probe string is exactly ``target_height`` pixels tall."""
    config = config or font.solver_config
    return solve_size(lambda size: get_max_height(font, size, config.probe_text), target_height, config)


def build_normalizer(font: Font, anchors: Tuple[float, float] = CALIBRATION_ANCHORS,
                     config: Optional[SolverConfig] = None) -> SizeNormalizer:
    """Calibrate the linear size normalizer from two solver runs.

    Solves the font sizes y1, y2 for requested heights x1, x2 and fits the
    line through (x1, y1) and (x2, y2).

    Raises:
        ConfigurationError: If both anchors are equal.
        SolverDidNotConvergeError: If either anchor cannot be solved.
    """
    x1, x2 = anchors
    if x1 == x2:
        raise ConfigurationError(f"Calibration anchors must differ, got {anchors}")
    y1 = estimate_font_size(font, x1, config)
    y2 = estimate_font_size(font, x2, config)
    a = (y2 - y1) / (x2 - x1)
    b = y1 - a * x1
    return SizeNormalizer(a, b)
