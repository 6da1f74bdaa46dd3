"""Command line interface for fontmatrix.

Subcommands:
    render   Rasterize text to a coverage matrix (JSON or PNG)
    size     Solve a font size for a pixel height, or measure a size
    metrics  Print scaled font metrics, optionally writing a guide overlay

Example:
    $ fontmatrix render fonts/Inter.ttf "Hello" --max-height 20 --output hello.png
    $ fontmatrix size fonts/Inter.ttf --max-height 20
    $ fontmatrix metrics fonts/Inter.ttf --size 32 --overlay guides.png --text Hxp
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
from PIL import Image

from .errors import FontMatrixError
from .font import Font
from .overlay import save_metrics_overlay
from .rasterize import LAYOUTS, ROW_ORDERS, RasterOptions, TextRender, text_to_matrix
from .sizing import STRATEGIES, SolverConfig, estimate_font_size, get_max_height

logger = logging.getLogger(__name__)


def configure_logging(level: str = 'INFO', log_file: str | None = None) -> None:
    """Configure application-wide logging.

    Args:
        level: Log level string ('DEBUG', 'INFO', 'WARNING', 'ERROR').
        log_file: Optional path to log file. If None, logs to stderr only.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s %(levelname)-8s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Third-party loggers are noisy at DEBUG
    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('fontTools').setLevel(logging.WARNING)

    logger.debug("Logging configured: level=%s, file=%s", level, log_file or 'stderr')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='fontmatrix',
                                     description="Rasterize text into ink-coverage matrices.")
    parser.add_argument('--log-level', default='WARNING', help="Logging level (default: WARNING).")
    parser.add_argument('--log-file', default=None, help="Also write logs to this file.")
    parser.add_argument('--strategy', choices=STRATEGIES, default='bisection',
                        help="Size solver strategy.")
    sub = parser.add_subparsers(dest='command', required=True)

    render = sub.add_parser('render', help="Rasterize text.")
    render.add_argument('font', help="Path to a TTF/OTF font.")
    render.add_argument('text', help="Text to render.")
    sizing = render.add_mutually_exclusive_group()
    sizing.add_argument('--font-size', type=float, help="Nominal font size.")
    sizing.add_argument('--max-height', type=float, help="Target probe height in pixels.")
    render.add_argument('--no-normalize', action='store_true',
                        help="Use --font-size literally instead of normalizing it.")
    render.add_argument('--letter-spacing', type=float, default=None, help="Tracking in em units.")
    render.add_argument('--layout', choices=LAYOUTS, default='bbox')
    render.add_argument('--row-order', choices=ROW_ORDERS, default='top')
    render.add_argument('--output', help="Write the coverage as a grayscale PNG.")
    render.add_argument('--json', action='store_true', help="Print the matrix as JSON.")

    size = sub.add_parser('size', help="Solve or measure font sizes.")
    size.add_argument('font', help="Path to a TTF/OTF font.")
    target = size.add_mutually_exclusive_group(required=True)
    target.add_argument('--max-height', type=float, help="Pixel height to solve for.")
    target.add_argument('--font-size', type=float, help="Font size to measure.")

    metrics = sub.add_parser('metrics', help="Show scaled font metrics.")
    metrics.add_argument('font', help="Path to a TTF/OTF font.")
    metrics.add_argument('--size', type=float, default=None,
                         help="Font size (default: font units per em).")
    metrics.add_argument('--overlay', help="Write a metric guide overlay PNG.")
    metrics.add_argument('--text', default='Hxp', help="Text for the overlay.")
    metrics.add_argument('--scale', type=int, default=4, help="Overlay upscaling factor.")
    return parser


def matrix_to_image(matrix: List[List[float]]) -> Image.Image:
    """Coverage matrix as black-on-white grayscale image."""
    coverage = np.asarray(matrix, dtype=np.float64)
    return Image.fromarray((255 - np.round(coverage * 255)).astype(np.uint8))


def _cmd_render(args: argparse.Namespace, font: Font) -> dict:
    options = RasterOptions(
        font_size=args.font_size,
        max_height=args.max_height,
        normalize_size=not args.no_normalize,
        letter_spacing=args.letter_spacing,
        layout=args.layout,
        row_order=args.row_order,
    )
    matrix = text_to_matrix(args.text, font, options)
    height = len(matrix)
    width = len(matrix[0]) if matrix else 0
    result = {'text': args.text, 'width': width, 'height': height}
    if args.output and matrix:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        matrix_to_image(matrix).save(output)
        result['output'] = str(output)
    if args.json:
        result['matrix'] = matrix
    return result


def _cmd_size(args: argparse.Namespace, font: Font) -> dict:
    if args.max_height is not None:
        size = estimate_font_size(font, args.max_height)
        return {'max_height': args.max_height, 'font_size': size}
    return {'font_size': args.font_size, 'max_height': get_max_height(font, args.font_size)}


def _cmd_metrics(args: argparse.Namespace, font: Font) -> dict:
    size = args.size if args.size is not None else font.units_per_em
    result = {
        'name': font.name,
        'units_per_em': font.units_per_em,
        'size': size,
        'metrics': font.metrics_at(size).to_dict(),
        'normalizer': {'a': font.size_normalizer.a, 'b': font.size_normalizer.b},
    }
    if args.overlay:
        render = TextRender(args.text, font, RasterOptions(font_size=size, normalize_size=False))
        result['overlay'] = str(save_metrics_overlay(render, args.overlay, scale=args.scale))
    return result


_COMMANDS = {
    'render': _cmd_render,
    'size': _cmd_size,
    'metrics': _cmd_metrics,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    try:
        font = Font.from_path(args.font, solver_config=SolverConfig(strategy=args.strategy))
        result = _COMMANDS[args.command](args, font)
    except FontMatrixError as e:
        logger.error("%s", e)
        return 1

    print(json.dumps(result))
    return 0


if __name__ == '__main__':
    sys.exit(main())
