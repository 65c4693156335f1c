"""Element-tree helpers shared by the binding engine.

Tags are compared by local name so that templates exported with or
without the SVG namespace behave the same.
"""

import re
from collections.abc import Callable, Iterator

from lxml import etree

from bannergen.interfaces.template import TemplateParseError

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

TEXT_TAG = "text"
INLINE_TAGS = frozenset({"tspan", "textPath", "a"})
NON_CONTENT_TAGS = frozenset({"style", "script"})

# Characters XML 1.0 cannot carry; lxml rejects them in text and attributes.
XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def local_name(element: etree._Element) -> str:
    """Return the tag without its namespace, or "" for comments and PIs."""
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def qualified(like: etree._Element, name: str) -> str:
    """Build a tag in the same namespace as an existing element."""
    namespace = etree.QName(like).namespace
    return f"{{{namespace}}}{name}" if namespace else name


def element_children(element: etree._Element) -> list[etree._Element]:
    """Return child elements, skipping comments and processing instructions."""
    return [child for child in element if isinstance(child.tag, str)]


def find_by_id(root: etree._Element, element_id: str) -> etree._Element | None:
    """Return the first element carrying the id, in document order."""
    matches = root.xpath("//*[@id=$id]", id=element_id)
    return matches[0] if matches else None


def owning_text(element: etree._Element) -> etree._Element | None:
    """Return the text element that is or contains the element."""
    node = element
    while node is not None:
        if local_name(node) == TEXT_TAG:
            return node
        node = node.getparent()
    return None


def is_inside(element: etree._Element, ancestor: etree._Element) -> bool:
    node = element
    while node is not None:
        if node is ancestor:
            return True
        node = node.getparent()
    return False


def text_descendants(container: etree._Element) -> list[etree._Element]:
    """List text elements and their inline children under a container, in document order."""
    found = []
    for element in container.iterdescendants():
        name = local_name(element)
        if name == TEXT_TAG:
            found.append(element)
        elif name in INLINE_TAGS and owning_text(element) is not None:
            found.append(element)
    return found


def text_fragments(element: etree._Element) -> list[str]:
    """Return every text fragment inside the element, tails included, excluding its own tail."""
    fragments = []
    if element.text:
        fragments.append(element.text)
    for descendant in element.iterdescendants():
        if isinstance(descendant.tag, str) and descendant.text:
            fragments.append(descendant.text)
        if descendant.tail:
            fragments.append(descendant.tail)
    return fragments


def plain_text(element: etree._Element) -> str:
    """Return the element's text as it would render, formatting removed."""
    return "".join(_iter_plain(element))


def _iter_plain(element: etree._Element) -> Iterator[str]:
    if element.text:
        yield element.text
    for child in element:
        if isinstance(child.tag, str):
            yield from _iter_plain(child)
        if child.tail:
            yield child.tail


def rewrite_fragments(element: etree._Element, rewrite: Callable[[str], str]) -> int:
    """Apply a rewrite to every text fragment inside the element.

    Returns:
        The number of fragments that changed.
    """
    changed = 0
    if element.text:
        new = rewrite(element.text)
        if new != element.text:
            element.text = new
            changed += 1
    for descendant in element.iterdescendants():
        if isinstance(descendant.tag, str) and descendant.text:
            new = rewrite(descendant.text)
            if new != descendant.text:
                descendant.text = new
                changed += 1
        if descendant.tail:
            new = rewrite(descendant.tail)
            if new != descendant.tail:
                descendant.tail = new
                changed += 1
    return changed


def xml_safe(value: str) -> str:
    """Drop control characters that cannot appear in an XML document."""
    return XML_ILLEGAL.sub("", value)


def set_plain_text(element: etree._Element, text: str) -> None:
    """Replace the element's content with bare text, dropping formatting children."""
    for child in list(element):
        element.remove(child)
    element.text = text


def format_number(value: float) -> str:
    """Format a coordinate without trailing zeros."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


_STYLE_DECLARATION = re.compile(r"\s*([\w-]+)\s*:\s*([^;]*)")


def style_property(element: etree._Element, name: str) -> str | None:
    """Return a property from the element's inline style attribute."""
    style = element.get("style")
    if not style:
        return None
    for declaration in style.split(";"):
        match = _STYLE_DECLARATION.match(declaration)
        if match and match.group(1).lower() == name:
            return match.group(2).strip()
    return None


def set_style_property(element: etree._Element, name: str, value: str) -> None:
    """Replace a property already declared in the element's inline style."""
    style = element.get("style")
    if not style:
        return
    declarations = []
    for declaration in style.split(";"):
        match = _STYLE_DECLARATION.match(declaration)
        if match and match.group(1).lower() == name:
            declarations.append(f"{name}:{value}")
        elif declaration.strip():
            declarations.append(declaration.strip())
    element.set("style", ";".join(declarations))


def inherited(element: etree._Element, name: str) -> str | None:
    """Resolve a presentation property from the element or its ancestors."""
    node = element
    while node is not None:
        if isinstance(node.tag, str):
            value = style_property(node, name)
            if value is None:
                value = node.get(name)
            if value is not None and value != "inherit":
                return value
        node = node.getparent()
    return None


def parse_svg(markup: str) -> etree._Element:
    """Parse SVG markup into a new element tree.

    Raises:
        TemplateParseError: If the markup is not well-formed XML.
    """
    parser = etree.XMLParser(remove_blank_text=False, no_network=True, huge_tree=True)
    try:
        return etree.fromstring(markup.lstrip("\ufeff").encode("utf-8"), parser)
    except etree.XMLSyntaxError as e:
        raise TemplateParseError(f"Template is not valid SVG: {e}") from e


def serialize(root: etree._Element) -> str:
    """Serialize a tree to markup without an XML declaration."""
    return etree.tostring(root, encoding="unicode")
