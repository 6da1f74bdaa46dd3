"""Shared pytest fixtures for the fontmatrix test suite.

The suite does not ship font files. A small TrueType font is built in memory
with fontTools' FontBuilder so every measurement is predictable:

    unitsPerEm 1000, ascent 800, descent -200
    OS/2 sCapHeight 700, sxHeight 500, sTypoLineGap 90
    Capitals: 400x700 blocks (x 50..450), advance 500
    'O': capital block with a counter-wound hole (x 150..350, y 150..550)
    Lowercase: 400x500 blocks, except 'p' (y -200..500)
    'c': quadratic-curve diamond (x 50..450, y 0..500)
    space: empty, advance 500

At size S the probe string is exactly 0.7 * S pixels tall.

Fixtures:
    font_bytes: Compiled TTF bytes
    test_font: Font parsed from font_bytes
    font_file: font_bytes written to a temporary .ttf file
    tt_font: Fresh in-memory TTFont, for tests that edit tables

Markers:
    slow: Mark test as slow-running (skip with -m "not slow")
    integration: Mark test as integration test
"""

import io
import sys
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fontmatrix import Font

UNITS_PER_EM = 1000
ASCENT = 800
DESCENT = -200
CAP_HEIGHT = 700
X_HEIGHT = 500
LINE_GAP = 90
ADVANCE = 500


# -----------------------------------------------------------------------------
# Pytest Markers
# -----------------------------------------------------------------------------

def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow-running (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# -----------------------------------------------------------------------------
# Synthetic Font
# -----------------------------------------------------------------------------

def _rect(pen, x0, y0, x1, y1, clockwise=True):
    """Draw a rectangle; TrueType outer contours run clockwise."""
    if clockwise:
        points = [(x0, y0), (x0, y1), (x1, y1), (x1, y0)]
    else:
        points = [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]
    pen.moveTo(points[0])
    for point in points[1:]:
        pen.lineTo(point)
    pen.closePath()


def _glyph(draw):
    pen = TTGlyphPen(None)
    draw(pen)
    return pen.glyph()


def build_test_font(os2_version=3, cap_height=CAP_HEIGHT):
    """Build the synthetic test font and return the in-memory TTFont."""
    capitals = [chr(c) for c in range(ord('A'), ord('Z') + 1)]
    lowercase = [chr(c) for c in range(ord('a'), ord('z') + 1)]
    glyph_order = ['.notdef', 'space'] + capitals + lowercase

    glyphs = {}
    lsb = {}
    glyphs['.notdef'] = _glyph(lambda pen: _rect(pen, 50, 0, 450, 700))
    lsb['.notdef'] = 50
    glyphs['space'] = _glyph(lambda pen: None)
    lsb['space'] = 0

    for name in capitals:
        if name == 'O':
            def draw_o(pen):
                _rect(pen, 50, 0, 450, 700)
                _rect(pen, 150, 150, 350, 550, clockwise=False)
            glyphs[name] = _glyph(draw_o)
        else:
            glyphs[name] = _glyph(lambda pen: _rect(pen, 50, 0, 450, 700))
        lsb[name] = 50

    for name in lowercase:
        if name == 'p':
            glyphs[name] = _glyph(lambda pen: _rect(pen, 50, -200, 450, 500))
        elif name == 'c':
            def draw_c(pen):
                pen.moveTo((250, 0))
                pen.qCurveTo((450, 0), (450, 250))
                pen.qCurveTo((450, 500), (250, 500))
                pen.qCurveTo((50, 500), (50, 250))
                pen.qCurveTo((50, 0), (250, 0))
                pen.closePath()
            glyphs[name] = _glyph(draw_c)
        else:
            glyphs[name] = _glyph(lambda pen: _rect(pen, 50, 0, 450, 500))
        lsb[name] = 50

    cmap = {ord(' '): 'space'}
    cmap.update({ord(name): name for name in capitals + lowercase})

    fb = FontBuilder(UNITS_PER_EM, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(cmap)
    fb.setupGlyf(glyphs)
    fb.setupHorizontalMetrics({name: (ADVANCE, lsb[name]) for name in glyph_order})
    fb.setupHorizontalHeader(ascent=ASCENT, descent=DESCENT)
    fb.setupNameTable({'familyName': 'Blocks', 'styleName': 'Regular'})
    fb.setupOS2(
        version=os2_version,
        sTypoAscender=ASCENT,
        sTypoDescender=DESCENT,
        sTypoLineGap=LINE_GAP,
        usWinAscent=ASCENT,
        usWinDescent=-DESCENT,
        sCapHeight=cap_height,
        sxHeight=X_HEIGHT,
    )
    fb.setupPost()
    return fb.font


@pytest.fixture(scope="session")
def font_bytes():
    """Compiled bytes of the synthetic test font."""
    buf = io.BytesIO()
    build_test_font().save(buf)
    return buf.getvalue()


@pytest.fixture(scope="session")
def test_font(font_bytes):
    """Font parsed from the synthetic font bytes."""
    return Font.from_bytes(font_bytes)


@pytest.fixture
def font_file(tmp_path, font_bytes):
    """Path to the synthetic font written as a .ttf file."""
    path = tmp_path / "Blocks-Regular.ttf"
    path.write_bytes(font_bytes)
    return path


@pytest.fixture
def tt_font():
    """Fresh in-memory TTFont of the synthetic font."""
    return build_test_font()
