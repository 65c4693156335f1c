"""Unit tests for text and group mutation."""

import pytest

from bannergen.strategies.template_engine.dom import (
    element_children,
    find_by_id,
    local_name,
    parse_svg,
    plain_text,
)
from bannergen.strategies.template_engine.text import fill_row_tokens, mutate_group, mutate_text
from bannergen.strategies.template_engine.tokens import (
    IDENTIFIER,
    MARKUP_SPECIFIC,
    PLAIN_SPECIFIC,
)


def svg(body: str):
    return parse_svg(f'<svg xmlns="http://www.w3.org/2000/svg" width="800" height="400">{body}</svg>')


# =============================================================================
# Text Mutator Tests
# =============================================================================


class TestMutateText:
    """Test suite for single-element text mutation."""

    def test_token_inside_formatting_keeps_formatting(self):
        """Test that a bold price keeps its tspan and the surrounding text."""
        root = svg('<text id="price" x="10" y="20">₹<tspan font-weight="bold">{{price}}</tspan> only</text>')
        text = find_by_id(root, "price")

        strategy = mutate_text(text, "price", "499")

        assert strategy is MARKUP_SPECIFIC
        children = element_children(text)
        assert len(children) == 1
        assert children[0].get("font-weight") == "bold"
        assert children[0].text == "499"
        assert plain_text(text) == "₹499 only"

    def test_split_token_collapses_formatting(self):
        """Test that a token split by a tag is still resolved via the plain rendering."""
        root = svg('<text id="t">{{pr<tspan fill="red">ice}}</tspan></text>')
        text = find_by_id(root, "t")

        strategy = mutate_text(text, "price", "499")

        assert strategy is PLAIN_SPECIFIC
        assert text.text == "499"
        assert element_children(text) == []

    def test_single_child_overwrite_keeps_child(self):
        """Test that positioning on a lone tspan survives a plain overwrite."""
        root = svg('<text id="t"><tspan x="5" y="9">Old</tspan></text>')
        text = find_by_id(root, "t")

        strategy = mutate_text(text, "title", "New")

        assert strategy is IDENTIFIER
        child = element_children(text)[0]
        assert child.get("x") == "5"
        assert child.text == "New"

    def test_multiple_children_overwritten_wholesale(self):
        root = svg('<text id="t">A<tspan>B</tspan><tspan>C</tspan></text>')
        text = find_by_id(root, "t")

        mutate_text(text, "title", "New")

        assert text.text == "New"
        assert element_children(text) == []

    def test_lone_non_inline_child_not_kept(self):
        root = svg('<text id="t"><title>Tooltip</title>Old</text>')
        text = find_by_id(root, "t")

        mutate_text(text, "title", "New")

        assert text.text == "New"
        assert element_children(text) == []

    def test_unbound_token_kept_when_bound_token_present(self):
        root = svg('<text id="t">{{name}} in {{city}}</text>')
        text = find_by_id(root, "t")

        mutate_text(text, "city", "Pune")

        assert text.text == "{{name}} in Pune"


# =============================================================================
# Group Mutator Tests
# =============================================================================


class TestMutateGroup:
    """Test suite for container mutation."""

    def test_only_token_bearing_text_rewritten(self):
        """Test that siblings without tokens and non-text children are untouched."""
        root = svg(
            '<g id="card"><path id="icon" d="M0 0 L5 5"/>'
            '<text id="a">{{name}}</text><text id="b">Static</text></g>'
        )
        group = find_by_id(root, "card")

        rewritten = mutate_group(group, "name", "Shirt")

        assert [el.get("id") for el in rewritten] == ["a"]
        assert find_by_id(root, "a").text == "Shirt"
        assert find_by_id(root, "b").text == "Static"
        assert find_by_id(root, "icon") is not None

    def test_every_matching_descendant_rewritten(self):
        root = svg(
            '<g id="g"><text id="a">{{price}}</text><text id="b">Was {{ price }}</text></g>'
        )

        rewritten = mutate_group(find_by_id(root, "g"), "price", "99")

        assert len(rewritten) == 2
        assert find_by_id(root, "a").text == "99"
        assert find_by_id(root, "b").text == "Was 99"

    def test_fallback_overwrites_first_text_only(self):
        root = svg('<g id="g"><text id="a">First</text><text id="b">Second</text></g>')

        rewritten = mutate_group(find_by_id(root, "g"), "title", "X")

        assert [el.get("id") for el in rewritten] == ["a"]
        assert find_by_id(root, "a").text == "X"
        assert find_by_id(root, "b").text == "Second"

    def test_token_in_nested_tspan(self):
        root = svg('<g id="g"><text id="t">Price: <tspan>{{price}}</tspan></text></g>')

        rewritten = mutate_group(find_by_id(root, "g"), "price", "99")

        assert [el.get("id") for el in rewritten] == ["t"]
        assert plain_text(find_by_id(root, "t")) == "Price: 99"
        assert local_name(element_children(find_by_id(root, "t"))[0]) == "tspan"

    def test_text_and_its_tspan_rewritten_once(self):
        """Test that a group binds its text exactly as the text binds directly."""
        markup = '<text id="t">{{price}} <tspan>{{other}}</tspan></text>'
        grouped = svg(f'<g id="g">{markup}</g>')
        direct = svg(markup)

        rewritten = mutate_group(find_by_id(grouped, "g"), "price", "499")
        mutate_text(find_by_id(direct, "t"), "price", "499")

        assert [el.get("id") for el in rewritten] == ["t"]
        assert plain_text(find_by_id(grouped, "t")) == "499 {{other}}"
        assert plain_text(find_by_id(grouped, "t")) == plain_text(find_by_id(direct, "t"))

    def test_layout_only_group_unchanged(self):
        root = svg('<g id="g"><rect width="10" height="10"/></g>')

        assert mutate_group(find_by_id(root, "g"), "title", "X") == []
        assert len(element_children(find_by_id(root, "g"))) == 1


# =============================================================================
# Row Token Fill Tests
# =============================================================================


class TestFillRowTokens:
    """Test suite for filling leftover tokens from a row."""

    @pytest.fixture
    def root(self):
        return svg(
            "<style>.a { fill: red; } /* {{name}} */</style>"
            '<text id="a">{{name}} - {{unknown}}</text>'
            '<image id="i" href="{{photo}}"/>'
        )

    def test_text_and_attributes_filled(self, root):
        changed = fill_row_tokens(root, {"name": "Shirt", "photo": "p.png"})

        assert find_by_id(root, "a").text == "Shirt - {{unknown}}"
        assert find_by_id(root, "i").get("href") == "p.png"
        assert [el.get("id") for el in changed] == ["a"]

    def test_stylesheets_untouched(self, root):
        fill_row_tokens(root, {"name": "Shirt"})

        style = element_children(root)[0]
        assert "{{name}}" in style.text
