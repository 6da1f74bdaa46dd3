"""Shared defaults for the sizing and rasterization pipeline.

Centralizes the constants used by:
    - sizing.py (probe string, calibration anchors, solver budget)
    - rasterize.py (default font sizes per layout)
    - surface.py and paths.py (supersampling, curve flattening)
"""

# Probe text measured by the size solver (no "X")
PROBE_TEXT = "ABCDEFGHIJKLMNOPQRSTUVWYZ"

# Requested heights used to calibrate the size normalizer
CALIBRATION_ANCHORS = (8, 16)

# Default nominal sizes when the caller gives neither font_size nor max_height
DEFAULT_FONT_SIZE = 11
DEFAULT_METRICS_FONT_SIZE = 15

# Solver
SOLVER_STRATEGY = "bisection"
SOLVER_MAX_ITERATIONS = 64

# Surface anti-aliasing: glyphs are filled at this multiple of the output
# resolution and box-filtered down
SUPERSAMPLE = 4

# Line segments per Bezier segment when flattening outlines
QUAD_STEPS = 15
CUBIC_STEPS = 20
