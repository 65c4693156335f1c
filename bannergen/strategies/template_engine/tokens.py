"""Placeholder tokens and the ordered resolver cascade.

A placeholder token is a double-brace wrapped name such as ``{{ price }}``.
Resolution is an explicit, ordered list of strategies; the first strategy
that matches an element's content decides how the bound value is written.
"""

import enum
import re
from dataclasses import dataclass
from functools import lru_cache

GENERIC_PATTERN = re.compile(r"\{\{\s*([^{}<>]+?)\s*\}\}")


@lru_cache(maxsize=512)
def specific_pattern(column: str) -> re.Pattern[str]:
    """Compile the token pattern for one column name.

    Matching is case-insensitive and tolerant of inner whitespace, so
    ``{{price}}``, ``{{ Price }}`` and ``{{PRICE}}`` all bind to "Price".
    """
    return re.compile(r"\{\{\s*" + re.escape(column.strip()) + r"\s*\}\}", re.IGNORECASE)


def find_tokens(text: str) -> list[str]:
    """Return the token names found in text, in order of appearance."""
    return [match.group(1) for match in GENERIC_PATTERN.finditer(text or "")]


class ContentScope(str, enum.Enum):
    """Which rendering of an element's content a strategy inspects."""

    MARKUP = "markup"
    PLAIN = "plain"
    ELEMENT = "element"


@dataclass(frozen=True)
class ResolverStrategy:
    """One step of the resolution cascade.

    Attributes:
        name: Stable identifier used in logs and tests.
        scope: Content form inspected by this step.
        specific: Whether the step only matches the bound column's token.
    """

    name: str
    scope: ContentScope
    specific: bool = False

    def pattern_for(self, column: str) -> re.Pattern[str] | None:
        if self.scope is ContentScope.ELEMENT:
            return None
        return specific_pattern(column) if self.specific else GENERIC_PATTERN

    def matches(self, text: str, column: str) -> bool:
        """Check whether this step applies to a piece of content."""
        pattern = self.pattern_for(column)
        if pattern is None:
            return True
        return bool(text) and pattern.search(text) is not None

    def substitute(self, text: str, column: str, value: str) -> str:
        """Replace every occurrence this step matches with the value."""
        pattern = self.pattern_for(column)
        if pattern is None:
            return value
        return pattern.sub(lambda _: value, text)


MARKUP_SPECIFIC = ResolverStrategy("markup_specific", ContentScope.MARKUP, specific=True)
MARKUP_GENERIC = ResolverStrategy("markup_generic", ContentScope.MARKUP)
PLAIN_SPECIFIC = ResolverStrategy("plain_specific", ContentScope.PLAIN, specific=True)
PLAIN_GENERIC = ResolverStrategy("plain_generic", ContentScope.PLAIN)
IDENTIFIER = ResolverStrategy("identifier", ContentScope.ELEMENT)

# Token-driven steps, tried against markup-preserving content first.
TOKEN_STRATEGIES: tuple[ResolverStrategy, ...] = (
    MARKUP_SPECIFIC,
    MARKUP_GENERIC,
    PLAIN_SPECIFIC,
    PLAIN_GENERIC,
)

# Full cascade for a single text-bearing element.
TEXT_CASCADE: tuple[ResolverStrategy, ...] = TOKEN_STRATEGIES + (IDENTIFIER,)


@dataclass(frozen=True)
class Resolution:
    """Result of resolving a value against a piece of content."""

    matched: bool
    text: str
    strategy: ResolverStrategy | None = None


def select_strategy(
    fragments: list[str],
    plain: str,
    column: str,
    strategies: tuple[ResolverStrategy, ...] = TEXT_CASCADE,
) -> ResolverStrategy | None:
    """Pick the first strategy that matches an element's content.

    Args:
        fragments: Markup-preserving text fragments of the element.
        plain: The element's plain-text rendering.
        column: The bound column name.
        strategies: Ordered steps to try.

    Returns:
        The first matching strategy, or None when nothing matched.
    """
    for strategy in strategies:
        match strategy.scope:
            case ContentScope.MARKUP:
                if any(strategy.matches(fragment, column) for fragment in fragments):
                    return strategy
            case ContentScope.PLAIN:
                if strategy.matches(plain, column):
                    return strategy
            case ContentScope.ELEMENT:
                return strategy
    return None


def resolve(
    text: str,
    column: str,
    value: str,
    strategies: tuple[ResolverStrategy, ...] = TOKEN_STRATEGIES,
) -> Resolution:
    """Resolve a value against a flat string.

    Markup and plain scopes coincide for a flat string, so this is the
    cascade with the element structure taken out.
    """
    strategy = select_strategy([text] if text else [], text, column, strategies)
    if strategy is None:
        return Resolution(matched=False, text=text)
    return Resolution(matched=True, text=strategy.substitute(text, column, value), strategy=strategy)


def fill_tokens(text: str, values: dict[str, str]) -> str:
    """Replace tokens whose name is a known column, leaving the others.

    Args:
        text: Content containing tokens.
        values: Column name to value; names compare case-insensitively.
    """
    lookup = {name.strip().lower(): value for name, value in values.items()}

    def _replace(match: re.Match[str]) -> str:
        return lookup.get(match.group(1).strip().lower(), match.group(0))

    return GENERIC_PATTERN.sub(_replace, text)
