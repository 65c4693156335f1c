"""Unit tests for overflow truncation."""

import asyncio

import pytest

from bannergen.interfaces.measurer import BBox
from bannergen.strategies.template_engine.dom import element_children, find_by_id, parse_svg, plain_text
from bannergen.strategies.template_engine.truncation import OverflowTruncator, drop_last_character


def text_root(body: str):
    return parse_svg(f'<svg xmlns="http://www.w3.org/2000/svg">{body}</svg>')


class TestDropLastCharacter:
    """Test suite for grapheme-aware character removal."""

    def test_plain_character(self):
        assert drop_last_character("abc") == "ab"

    def test_combining_mark_removed_with_base(self):
        assert drop_last_character("cafe\u0301") == "caf"

    def test_devanagari_vowel_sign_removed_with_consonant(self):
        assert drop_last_character("नमस्ते") == "नमस्"

    def test_empty(self):
        assert drop_last_character("") == ""


class TestOverflowTruncator:
    """Test suite for OverflowTruncator with a ten-units-per-character measurer."""

    @pytest.fixture
    def truncator(self, char_measurer):
        return OverflowTruncator(char_measurer, margin=10.0)

    def test_fits_budget(self, truncator):
        """Test that the budget is the canvas minus the left edge minus the margin."""
        assert truncator.fits(BBox(50, 0, 140, 10), canvas_width=200)
        assert not truncator.fits(BBox(50, 0, 141, 10), canvas_width=200)

    def test_long_text_shrinks_until_it_fits(self, truncator):
        async def run_test():
            root = text_root('<text id="t" x="0">ABCDEFGHIJKLMNOPQRSTUVWXYZ</text>')
            text = find_by_id(root, "t")

            result = await truncator.truncate(root, text, canvas_width=200)

            assert result.truncated
            assert result.removed == 8
            assert text.text == "ABCDEFGHIJKLMNOPQR…"
            assert len(text.text) * 10 <= 200 - 0 - 10

        asyncio.run(run_test())

    def test_fitting_text_untouched(self, truncator):
        async def run_test():
            root = text_root('<text id="t" x="0">Short</text>')
            text = find_by_id(root, "t")

            result = await truncator.truncate(root, text, canvas_width=200)

            assert not result.truncated
            assert text.text == "Short"

        asyncio.run(run_test())

    def test_left_edge_reduces_budget(self, truncator):
        async def run_test():
            root = text_root('<text id="t" x="100">ABCDEFGHIJ</text>')
            text = find_by_id(root, "t")

            await truncator.truncate(root, text, canvas_width=200)

            # 200 - 100 - 10 leaves room for nine characters including the ellipsis.
            assert text.text == "ABCDEFGH…"

        asyncio.run(run_test())

    def test_last_tspan_is_shrunk(self, truncator):
        async def run_test():
            root = text_root('<text id="t" x="0">Price: <tspan>ABCDEFGHIJ</tspan></text>')
            text = find_by_id(root, "t")

            await truncator.truncate(root, text, canvas_width=100)

            assert text.text == "Price: "
            assert element_children(text)[0].text == "A…"
            assert plain_text(text) == "Price: A…"

        asyncio.run(run_test())

    def test_trailing_space_not_kept_before_ellipsis(self, char_measurer):
        async def run_test():
            truncator = OverflowTruncator(char_measurer, margin=10.0)
            root = text_root('<text id="t" x="0">Hello World</text>')
            text = find_by_id(root, "t")

            await truncator.truncate(root, text, canvas_width=70)

            assert text.text == "Hello…"

        asyncio.run(run_test())

    def test_text_emptied_when_nothing_fits(self, char_measurer):
        async def run_test():
            truncator = OverflowTruncator(char_measurer, margin=10.0)
            root = text_root('<text id="t" x="0">ABC</text>')
            text = find_by_id(root, "t")

            result = await truncator.truncate(root, text, canvas_width=5)

            assert result.truncated
            assert not text.text

        asyncio.run(run_test())

    def test_measurement_failure_restores_text(self, failing_measurer_factory):
        async def run_test():
            truncator = OverflowTruncator(failing_measurer_factory(succeed=1), margin=10.0)
            root = text_root('<text id="t" x="0">ABCDEFGHIJKLMNOPQRSTUVWXYZ</text>')
            text = find_by_id(root, "t")

            result = await truncator.truncate(root, text, canvas_width=100)

            assert result.abandoned
            assert not result.truncated
            assert text.text == "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

        asyncio.run(run_test())
