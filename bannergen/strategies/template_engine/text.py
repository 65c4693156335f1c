"""Text and group mutation.

Rewrites the content of text-bearing elements for one data row. Token
replacement happens inside text fragments so inline formatting children
survive; only tokens visible solely in the plain-text rendering (split
across formatting boundaries) collapse the formatting.
"""

import logging

from lxml import etree

from bannergen.strategies.template_engine.dom import (
    INLINE_TAGS,
    NON_CONTENT_TAGS,
    element_children,
    is_inside,
    local_name,
    owning_text,
    plain_text,
    rewrite_fragments,
    set_plain_text,
    text_descendants,
    text_fragments,
)
from bannergen.strategies.template_engine.tokens import (
    TEXT_CASCADE,
    TOKEN_STRATEGIES,
    ContentScope,
    ResolverStrategy,
    fill_tokens,
    select_strategy,
)

logger = logging.getLogger(__name__)


def overwrite_text(element: etree._Element, value: str) -> None:
    """Write a value into an element that has no tokens.

    An element whose only child is an inline formatting element keeps
    that child (and its positioning attributes) and only has the child's
    text replaced; otherwise the element's content is replaced wholesale.
    """
    children = element_children(element)
    if len(children) == 1 and local_name(children[0]) in INLINE_TAGS:
        set_plain_text(children[0], value)
        return
    set_plain_text(element, value)


def apply_strategy(
    element: etree._Element,
    strategy: ResolverStrategy,
    column: str,
    value: str,
) -> None:
    """Write a value into an element following one resolver step."""
    match strategy.scope:
        case ContentScope.MARKUP:
            rewrite_fragments(element, lambda text: strategy.substitute(text, column, value))
        case ContentScope.PLAIN:
            set_plain_text(element, strategy.substitute(plain_text(element), column, value))
        case ContentScope.ELEMENT:
            overwrite_text(element, value)


def mutate_text(element: etree._Element, column: str, value: str) -> ResolverStrategy:
    """Rewrite a single text-bearing element for one row.

    Tries, in order: the bound column's token in markup content, any token
    in markup content, the column's token in plain text, any token in plain
    text, and finally a plain overwrite keyed only by the element id.

    Args:
        element: A text, tspan or other text-bearing element.
        column: The bound column name.
        value: The row's value for that column.

    Returns:
        The strategy that was applied.
    """
    strategy = select_strategy(text_fragments(element), plain_text(element), column, TEXT_CASCADE)
    # The identifier step always matches, so a strategy is always found.
    apply_strategy(element, strategy, column, value)
    logger.debug(f"Text {element.get('id')!r} rewritten via {strategy.name}")
    return strategy


def mutate_group(group: etree._Element, column: str, value: str) -> list[etree._Element]:
    """Rewrite the text inside a container element for one row.

    Every text-bearing descendant is checked against the token steps and
    all matching descendants are rewritten. When no descendant holds a
    token, only the first text-bearing descendant is overwritten. Sibling
    markup such as icons is never touched.

    Args:
        group: The container element carrying the mapped id.
        column: The bound column name.
        value: The row's value for that column.

    Returns:
        The text elements that were rewritten, in document order. Empty for
        layout-only groups.
    """
    descendants = text_descendants(group)
    if not descendants:
        logger.debug(f"Group {group.get('id')!r} has no text; left unchanged")
        return []

    rewritten: list[etree._Element] = []
    for descendant in descendants:
        # A plain-text rewrite of an enclosing text element detaches its inline children.
        if not is_inside(descendant, group):
            continue
        # A rewritten text element already covered its inline children.
        if owning_text(descendant) in rewritten:
            continue
        strategy = select_strategy(
            text_fragments(descendant), plain_text(descendant), column, TOKEN_STRATEGIES
        )
        if strategy is None:
            continue
        apply_strategy(descendant, strategy, column, value)
        owner = owning_text(descendant)
        if owner is not None and owner not in rewritten:
            rewritten.append(owner)

    if not rewritten:
        first = descendants[0]
        overwrite_text(first, value)
        owner = owning_text(first)
        if owner is not None:
            rewritten.append(owner)

    logger.debug(f"Group {group.get('id')!r}: {len(rewritten)} text element(s) rewritten")
    return rewritten


def fill_row_tokens(root: etree._Element, row: dict[str, str]) -> list[etree._Element]:
    """Replace leftover ``{{column}}`` tokens anywhere in the document.

    Tokens in text content and in attribute values are filled from the row;
    tokens naming unknown columns are left as they are.

    Returns:
        Text elements whose content changed.
    """
    changed: list[etree._Element] = []
    for element in root.iter():
        if not isinstance(element.tag, str) or local_name(element) in NON_CONTENT_TAGS:
            continue
        for name, current in list(element.attrib.items()):
            if "{{" in current:
                element.set(name, fill_tokens(current, row))

        owners = []
        if element.text and "{{" in element.text:
            filled = fill_tokens(element.text, row)
            if filled != element.text:
                element.text = filled
                owners.append(owning_text(element))
        parent = element.getparent()
        if parent is not None and element.tail and "{{" in element.tail:
            filled = fill_tokens(element.tail, row)
            if filled != element.tail:
                element.tail = filled
                owners.append(owning_text(parent))

        for owner in owners:
            if owner is not None and owner not in changed:
                changed.append(owner)
    return changed
