"""Unit tests for placeholder tokens and the resolver cascade."""

from bannergen.strategies.template_engine.tokens import (
    IDENTIFIER,
    MARKUP_GENERIC,
    MARKUP_SPECIFIC,
    PLAIN_SPECIFIC,
    TEXT_CASCADE,
    fill_tokens,
    find_tokens,
    resolve,
    select_strategy,
)


class TestFindTokens:
    """Test suite for token discovery."""

    def test_finds_tokens_in_order(self):
        """Test that token names are returned in order of appearance."""
        assert find_tokens("Only {{ price }} at {{Store}}") == ["price", "Store"]

    def test_ignores_unbalanced_braces(self):
        """Test that incomplete delimiters are not tokens."""
        assert find_tokens("{{price} and {price}}") == []

    def test_empty_text(self):
        assert find_tokens("") == []


class TestResolve:
    """Test suite for resolving a value against flat text."""

    def test_specific_token_replaced(self):
        """Test the currency-prefix case: surrounding text survives."""
        result = resolve("₹{{price}}", "price", "499")

        assert result.matched
        assert result.text == "₹499"
        assert result.strategy is MARKUP_SPECIFIC

    def test_specific_match_is_case_and_space_insensitive(self):
        result = resolve("{{ PRICE }}", "price", "1")

        assert result.text == "1"
        assert result.strategy is MARKUP_SPECIFIC

    def test_specific_wins_over_generic(self):
        """Test that a token for an unbound column survives when the bound token exists."""
        result = resolve("Hello {{name}} from {{city}}", "city", "Pune")

        assert result.text == "Hello {{name}} from Pune"
        assert result.strategy is MARKUP_SPECIFIC

    def test_generic_fallback_replaces_any_token(self):
        """Test that any token is replaced when the bound one is absent."""
        result = resolve("Call {{phone}}", "price", "99")

        assert result.text == "Call 99"
        assert result.strategy is MARKUP_GENERIC

    def test_no_token_is_not_matched(self):
        result = resolve("no tokens here", "price", "9")

        assert not result.matched
        assert result.text == "no tokens here"
        assert result.strategy is None

    def test_value_is_inserted_literally(self):
        """Test that backslashes and group references in values are not interpreted."""
        result = resolve("{{path}}", "path", r"C:\new\1")

        assert result.text == r"C:\new\1"

    def test_all_occurrences_replaced(self):
        assert resolve("{{a}} and {{ a }}", "a", "x").text == "x and x"


class TestSelectStrategy:
    """Test suite for the ordered cascade."""

    def test_plain_scope_used_when_fragments_miss(self):
        """Test that a token split across fragments is found in the plain rendering."""
        strategy = select_strategy(["{{pr", "ice}}"], "{{price}}", "price", TEXT_CASCADE)

        assert strategy is PLAIN_SPECIFIC

    def test_identifier_terminates_cascade(self):
        strategy = select_strategy(["Old text"], "Old text", "price", TEXT_CASCADE)

        assert strategy is IDENTIFIER


class TestFillTokens:
    """Test suite for row-token filling."""

    def test_known_columns_filled(self):
        assert fill_tokens("{{a}}-{{ B }}", {"A": "1", "b": "2"}) == "1-2"

    def test_unknown_tokens_left(self):
        assert fill_tokens("{{a}}-{{b}}", {"a": "1"}) == "1-{{b}}"
