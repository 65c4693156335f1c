"""Unit tests for the font-metrics measurer."""

import asyncio

import pytest

from bannergen.interfaces.measurer import BBox, MeasurementError
from bannergen.strategies.measurers import FontMetricsMeasurer
from bannergen.strategies.measurers.metrics import glyph_advance, path_points
from bannergen.strategies.template_engine.dom import find_by_id, parse_svg


def svg(body: str):
    return parse_svg(f'<svg xmlns="http://www.w3.org/2000/svg" width="800" height="400">{body}</svg>')


def box_tuple(box: BBox) -> tuple[float, float, float, float]:
    return (box.x, box.y, box.width, box.height)


@pytest.fixture
def measurer():
    return FontMetricsMeasurer()


class TestShapes:
    """Test suite for geometric boxes."""

    @pytest.mark.parametrize(
        "body,expected",
        [
            ('<rect id="e" x="1" y="2" width="3" height="4"/>', (1, 2, 3, 4)),
            ('<circle id="e" cx="50" cy="60" r="20"/>', (30, 40, 40, 40)),
            ('<ellipse id="e" cx="10" cy="10" rx="10" ry="5"/>', (0, 5, 20, 10)),
            ('<line id="e" x1="10" y1="20" x2="0" y2="5"/>', (0, 5, 10, 15)),
            ('<polygon id="e" points="0,0 10,0 5,8"/>', (0, 0, 10, 8)),
            ('<path id="e" d="M10 10 L40 10 L40 30 Z"/>', (10, 10, 30, 20)),
            ('<path id="e" d="m10 10 l 5 5 h 10 z"/>', (10, 10, 15, 5)),
        ],
    )
    def test_shape_boxes(self, measurer, body, expected):
        root = svg(body)

        box = measurer.measure(find_by_id(root, "e"))

        assert box_tuple(box) == pytest.approx(expected)

    def test_arc_is_sampled(self, measurer):
        """Test that a half-circle arc reaches its apex rather than its chord."""
        root = svg('<path id="e" d="M0 50 A50 50 0 0 1 100 50"/>')

        box = measurer.measure(find_by_id(root, "e"))

        assert box.x == pytest.approx(0, abs=1e-6)
        assert box.y == pytest.approx(0, abs=1e-6)
        assert box.width == pytest.approx(100, abs=1e-6)
        assert box.height == pytest.approx(50, abs=1e-6)

    def test_implicit_lineto_after_moveto(self):
        assert path_points("M0 0 10 10 20 0") == [(0, 0), (10, 10), (20, 0)]

    def test_zero_size_rect_rejected(self, measurer):
        root = svg('<rect id="e" width="0" height="10"/>')

        with pytest.raises(MeasurementError):
            measurer.measure(find_by_id(root, "e"))

    def test_group_union_skips_unmeasurable_children(self, measurer):
        root = svg(
            '<g id="g"><desc>card</desc><rect width="10" height="10"/><circle cx="30" cy="30" r="5"/></g>'
        )

        box = measurer.measure(find_by_id(root, "g"))

        assert box_tuple(box) == pytest.approx((0, 0, 35, 35))

    def test_empty_group_rejected(self, measurer):
        root = svg('<g id="g"/>')

        with pytest.raises(MeasurementError):
            measurer.measure(find_by_id(root, "g"))


class TestText:
    """Test suite for estimated text extents."""

    def test_single_line(self, measurer):
        root = svg('<text id="t" x="10" y="50" font-size="20">AAAA</text>')

        box = measurer.measure(find_by_id(root, "t"))

        assert box_tuple(box) == pytest.approx((10, 34, 54.4, 24))

    def test_middle_anchor_centers_box(self, measurer):
        root = svg('<text id="t" x="10" y="50" font-size="20" text-anchor="middle">AAAA</text>')

        box = measurer.measure(find_by_id(root, "t"))

        assert box.x == pytest.approx(10 - 27.2)
        assert box.width == pytest.approx(54.4)

    def test_font_size_inherited_from_group_style(self, measurer):
        root = svg('<g style="font-size:10px"><text id="t">ab</text></g>')

        box = measurer.measure(find_by_id(root, "t"))

        assert box.width == pytest.approx(10.4)

    def test_font_size_units(self, measurer):
        root = svg('<text id="pt" font-size="12pt">a</text><text id="em" font-size="2em">a</text>')

        assert measurer.font_size(find_by_id(root, "pt")) == pytest.approx(16)
        assert measurer.font_size(find_by_id(root, "em")) == pytest.approx(32)

    def test_multiline_tspans(self, measurer):
        root = svg(
            '<text id="t" x="0" y="20" font-size="10">'
            '<tspan x="0">aa</tspan><tspan x="0" dy="12">aaaa</tspan></text>'
        )

        box = measurer.measure(find_by_id(root, "t"))

        assert box.width == pytest.approx(20.8)
        assert box.height == pytest.approx(24)

    def test_tspan_measures_owning_text(self, measurer):
        root = svg('<text id="t" x="0" font-size="10">a<tspan id="s">b</tspan></text>')

        assert measurer.measure(find_by_id(root, "s")) == measurer.measure(find_by_id(root, "t"))

    def test_combining_marks_have_no_advance(self, measurer):
        assert glyph_advance("\u0301") == 0
        assert measurer.text_width("cafe\u0301", 10) == measurer.text_width("cafe", 10)

    def test_wide_glyphs_are_wider(self):
        assert glyph_advance("W") > glyph_advance("a") > glyph_advance("i")


class TestBBox:
    """Test suite for the async measurement entry point."""

    def test_attached_element(self, measurer):
        async def run_test():
            root = svg('<rect id="r" x="5" y="5" width="10" height="10"/>')

            box = await measurer.bbox(root, find_by_id(root, "r"))

            assert box == BBox(5, 5, 10, 10)

        asyncio.run(run_test())

    def test_detached_element_rejected(self, measurer):
        async def run_test():
            root = svg('<rect id="r" width="10" height="10"/>')
            other = svg('<rect id="r" width="10" height="10"/>')

            with pytest.raises(MeasurementError):
                await measurer.bbox(root, find_by_id(other, "r"))

        asyncio.run(run_test())
