"""Unit tests for fontmatrix.font.

Tests:
    - Loading: from_bytes, from_path, load, create/PendingFont, failures
    - Metrics: raw design-unit metrics, OS/2 fallbacks, metrics_at
    - Layout: advances, .notdef fallback, kerning, letter spacing
    - Thread safety of shared glyph outlines
"""

import asyncio
import hashlib
import io
from concurrent.futures import ThreadPoolExecutor

import pytest
from fontTools.ttLib import TTCollection, TTFont, newTable
from fontTools.ttLib.tables._k_e_r_n import KernTable_format_0

from conftest import build_test_font
from fontmatrix.errors import FontInvalidError, FontIOError, FontNotLoadedError
from fontmatrix.font import Font, PendingFont, content_hash, metrics_at, read_font_bytes


def _add_kern_pair(tt, left, right, value):
    subtable = KernTable_format_0()
    subtable.version = 0
    subtable.coverage = 1
    subtable.kernTable = {(left, right): value}
    kern = newTable('kern')
    kern.version = 0
    kern.kernTables = [subtable]
    tt['kern'] = kern


class TestLoading:

    def test_from_bytes(self, test_font):
        assert test_font.units_per_em == 1000
        assert test_font.name == 'Blocks'

    def test_from_path(self, font_file):
        font = Font.from_path(font_file)
        assert font.units_per_em == 1000

    def test_from_path_str(self, font_file):
        font = Font.from_path(str(font_file))
        assert font.name == 'Blocks'

    def test_collection_uses_first_face(self, font_bytes):
        collection = TTCollection()
        collection.fonts = [TTFont(io.BytesIO(font_bytes))]
        buf = io.BytesIO()
        collection.save(buf)
        data = buf.getvalue()
        assert data[:4] == b'ttcf'
        font = Font.from_bytes(data)
        assert font.name == 'Blocks'
        assert font.units_per_em == 1000

    def test_missing_file(self, tmp_path):
        with pytest.raises(FontIOError):
            Font.from_path(tmp_path / 'nope.ttf')

    def test_garbage_bytes(self):
        with pytest.raises(FontInvalidError):
            Font.from_bytes(b'definitely not a font')

    def test_missing_table(self, tt_font):
        del tt_font['OS/2']
        with pytest.raises(FontInvalidError, match='OS/2'):
            Font(tt_font)

    def test_read_font_bytes_rejects_other_types(self):
        with pytest.raises(TypeError):
            read_font_bytes(42)

    def test_read_font_bytes_copies_buffers(self, font_bytes):
        assert read_font_bytes(bytearray(font_bytes)) == font_bytes
        assert read_font_bytes(memoryview(font_bytes)) == font_bytes

    def test_content_hash(self, font_bytes):
        assert content_hash(font_bytes) == hashlib.sha256(font_bytes).hexdigest()

    def test_repr(self, test_font):
        assert repr(test_font) == "Font(name='Blocks', units_per_em=1000)"


class TestAsyncLoading:

    def test_load(self, font_file):
        font = asyncio.run(Font.load(font_file))
        assert font.units_per_em == 1000

    def test_create_returns_pending(self, font_bytes):
        async def go():
            pending = Font.create(font_bytes)
            assert isinstance(pending, PendingFont)
            assert not pending.done
            with pytest.raises(FontNotLoadedError) as exc:
                pending.result()
            assert exc.value.pending
            font = await pending.wait()
            assert pending.done
            assert pending.result() is font
            return font

        font = asyncio.run(go())
        assert font.name == 'Blocks'

    def test_create_labels_source(self, font_bytes, font_file):
        async def go():
            by_bytes = Font.create(font_bytes)
            by_path = Font.create(font_file)
            await asyncio.gather(by_bytes.wait(), by_path.wait())
            return by_bytes.label, by_path.label

        bytes_label, path_label = asyncio.run(go())
        assert bytes_label == f'<{len(font_bytes)} bytes>'
        assert path_label == str(font_file)

    def test_create_propagates_errors(self):
        async def go():
            pending = Font.create(b'garbage')
            with pytest.raises(FontInvalidError):
                await pending.wait()
            with pytest.raises(FontInvalidError):
                pending.result()

        asyncio.run(go())

    def test_create_outside_loop(self, font_bytes):
        with pytest.raises(RuntimeError):
            Font.create(font_bytes)


class TestMetrics:

    def test_raw_metrics(self, test_font):
        m = test_font.metrics
        assert (m.ascender, m.descender) == (800, -200)
        assert (m.cap_height, m.x_height, m.line_gap) == (700, 500, 90)

    def test_metrics_at(self, test_font):
        m = test_font.metrics_at(20)
        assert m.ascender == pytest.approx(16)
        assert m.descender == pytest.approx(-4)
        assert m.cap_height == pytest.approx(14)
        assert m.x_height == pytest.approx(10)

    def test_module_metrics_at(self, test_font):
        assert metrics_at(test_font, 40) == test_font.metrics_at(40)

    def test_old_os2_falls_back_to_outlines(self):
        """OS/2 v1 has no cap/x height, so 'H' and 'x' outlines are used."""
        font = Font(build_test_font(os2_version=1, cap_height=123))
        assert font.metrics.cap_height == 700
        assert font.metrics.x_height == 500


class TestLayout:

    def test_single_glyph_bounds(self, test_font):
        bbox = test_font.get_path('H', 0, 0, 20).get_bounding_box()
        assert bbox.to_tuple() == pytest.approx((1.0, -14.0, 9.0, 0.0))

    def test_baseline_offset(self, test_font):
        bbox = test_font.get_path('H', 5, 30, 20).get_bounding_box()
        assert bbox.to_tuple() == pytest.approx((6.0, 16.0, 14.0, 30.0))

    def test_advance(self, test_font):
        assert test_font.advance_width('H') == 500
        bbox = test_font.get_path('HH', 0, 0, 20).get_bounding_box()
        assert bbox.width == pytest.approx(18.0)

    def test_descender(self, test_font):
        bbox = test_font.get_path('p', 0, 0, 20).get_bounding_box()
        assert bbox.y_max == pytest.approx(4.0)

    def test_missing_char_uses_notdef(self, test_font):
        assert test_font.glyph_name('€') == '.notdef'
        path = test_font.get_path('€', 0, 0, 20)
        assert not path.is_empty

    def test_space_has_no_ink_but_advances(self, test_font):
        assert test_font.get_path(' ', 0, 0, 20).is_empty
        bbox = test_font.get_path('H H', 0, 0, 20).get_bounding_box()
        assert bbox.width == pytest.approx(28.0)

    def test_letter_spacing_in_em(self, test_font):
        plain = test_font.get_path('HH', 0, 0, 20).get_bounding_box()
        spaced = test_font.get_path('HH', 0, 0, 20, letter_spacing=0.5).get_bounding_box()
        assert spaced.width - plain.width == pytest.approx(10.0)

    def test_kerning(self, tt_font):
        _add_kern_pair(tt_font, 'A', 'V', -100)
        font = Font(tt_font)
        assert font.kerning_value('A', 'V') == -100
        assert font.kerning_value('V', 'A') == 0
        kerned = font.get_path('AV', 0, 0, 20).get_bounding_box()
        unkerned = font.get_path('AV', 0, 0, 20, kerning=False).get_bounding_box()
        assert kerned.width == pytest.approx(16.0)
        assert unkerned.width == pytest.approx(18.0)

    def test_outline_memoised(self, test_font):
        assert test_font.glyph_outline('H') is test_font.glyph_outline('H')

    def test_shared_between_threads(self, font_bytes):
        font = Font.from_bytes(font_bytes)
        texts = ['HELLO', 'WORLD', 'cOp', 'ABC'] * 8
        expected = [font.get_path(t, 0, 0, 24).get_bounding_box() for t in texts]

        fresh = Font.from_bytes(font_bytes)
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda t: fresh.get_path(t, 0, 0, 24).get_bounding_box(), texts))
        assert results == expected
