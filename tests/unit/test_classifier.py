"""Unit tests for element and value classification."""

import pytest
from lxml import etree

from bannergen.strategies.template_engine.classifier import (
    classify_element,
    classify_value,
    is_color,
    is_image_reference,
)
from bannergen.strategies.template_engine.models import MutationKind, ValueKind

SVG = "http://www.w3.org/2000/svg"


def element(tag: str) -> etree._Element:
    return etree.Element(f"{{{SVG}}}{tag}")


class TestValueClassification:
    """Test suite for value sniffing."""

    @pytest.mark.parametrize(
        "value",
        [
            "https://cdn.example.com/p/123",
            "http://example.com/a.png",
            "data:image/png;base64,iVBORw0KGgo=",
            "images/photo.JPG?v=2",
            "hero.webp",
        ],
    )
    def test_image_references(self, value):
        assert is_image_reference(value)
        assert classify_value(value) is ValueKind.IMAGE_REFERENCE

    @pytest.mark.parametrize("value", ["Cotton Shirt", "report.pdf", "₹499", "png"])
    def test_not_image_references(self, value):
        assert not is_image_reference(value)

    @pytest.mark.parametrize(
        "value", ["#fff", "#A1B2C3", "#a1b2c3cc", "rgb(1, 2, 3)", "hsla(10,20%,30%,0.5)", "Red", "transparent"]
    )
    def test_colors(self, value):
        assert is_color(value)
        assert classify_value(value) is ValueKind.COLOR

    @pytest.mark.parametrize("value", ["#ggg", "blue sky", "#12345", "rgb"])
    def test_not_colors(self, value):
        assert not is_color(value)

    def test_plain_text(self):
        assert classify_value("Summer Sale") is ValueKind.PLAIN_TEXT


class TestElementClassification:
    """Test suite for choosing the mutation path."""

    def test_image_element(self):
        assert classify_element(element("image"), "anything") is MutationKind.IMAGE_FILL

    def test_shape_with_image_value(self):
        assert classify_element(element("rect"), "https://x/y.png") is MutationKind.SHAPE_TO_IMAGE

    @pytest.mark.parametrize("tag", ["rect", "circle", "path", "polygon"])
    def test_shape_with_other_value_is_filled(self, tag):
        assert classify_element(element(tag), "#ff0000") is MutationKind.COLOR_FILL

    def test_group(self):
        assert classify_element(element("g"), "Title") is MutationKind.GROUP_TEXT

    @pytest.mark.parametrize("tag", ["text", "tspan"])
    def test_text(self, tag):
        assert classify_element(element(tag), "Title") is MutationKind.TEXT

    def test_unnamespaced_tags(self):
        """Test that templates without the SVG namespace classify the same way."""
        assert classify_element(etree.Element("image"), "x.png") is MutationKind.IMAGE_FILL
