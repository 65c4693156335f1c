"""Document sizing pre-pass.

Computes the raster size of a template once per batch, rewrites the
template's size attributes and injects the font stylesheet. The result is
an immutable PreparedTemplate that every row re-parses from scratch.
"""

import logging
import math
import re
from dataclasses import dataclass

from lxml import etree

from bannergen.interfaces.template import TemplateParseError
from bannergen.strategies.template_engine.dom import (
    format_number,
    local_name,
    parse_svg,
    qualified,
    serialize,
)

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 800.0
DEFAULT_HEIGHT = 400.0
DEFAULT_SCALE_FACTOR = 3.0

DEFAULT_FONT_CSS = (
    "@import url('https://fonts.googleapis.com/css2?family=Mukta:wght@400;600;700"
    "&family=Poppins:wght@400;600;700&family=Tiro+Devanagari+Hindi&display=swap');\n"
    "svg { font-family: 'Poppins', 'Mukta', 'Tiro Devanagari Hindi', sans-serif; }"
)

_LENGTH = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*(?:px)?\s*$")
_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class PreparedTemplate:
    """A sized, styled template ready for per-row binding.

    Attributes:
        markup: Serialized template with final size attributes.
        width: Raster width in pixels.
        height: Raster height in pixels.
        base_width: Template width before scaling.
        base_height: Template height before scaling.
        canvas_width: Width of the user coordinate space (viewBox width).
    """

    markup: str
    width: int
    height: int
    base_width: float
    base_height: float
    canvas_width: float

    def fresh_root(self) -> etree._Element:
        """Parse a pristine copy of the template.

        Every row binds against its own tree, so nothing a row writes can
        reach the next one.
        """
        return parse_svg(self.markup)


def parse_length(value: str | None) -> float | None:
    """Parse a positive absolute length (unitless or px)."""
    if not value:
        return None
    match = _LENGTH.match(value)
    if not match:
        return None
    try:
        number = float(value.strip().removesuffix("px"))
    except ValueError:
        return None
    return number if number > 0 and math.isfinite(number) else None


def parse_view_box(value: str | None) -> tuple[float, float, float, float] | None:
    """Parse a viewBox into (min_x, min_y, width, height)."""
    if not value:
        return None
    numbers = _NUMBER.findall(value)
    if len(numbers) != 4:
        return None
    min_x, min_y, width, height = (float(n) for n in numbers)
    if width <= 0 or height <= 0:
        return None
    return min_x, min_y, width, height


def scale_dimension(value: float, scale_factor: float) -> int:
    """Scale a dimension and round half up to whole pixels."""
    return int(math.floor(value * scale_factor + 0.5))


def inject_style(root: etree._Element, css: str) -> None:
    """Add CSS to the template without discarding its own styles.

    Appends to the first existing style element, otherwise inserts a new
    style element as the root's first child.
    """
    if not css:
        return
    existing = next((el for el in root.iter() if local_name(el) == "style"), None)
    if existing is not None:
        current = existing.text or ""
        existing.text = f"{current}\n{css}" if current.strip() else css
        return
    style = etree.Element(qualified(root, "style"))
    style.text = css
    style.tail = root.text
    root.insert(0, style)


def size_template(
    raw_svg: str,
    scale_factor: float = DEFAULT_SCALE_FACTOR,
    font_css: str = DEFAULT_FONT_CSS,
    default_size: tuple[float, float] = (DEFAULT_WIDTH, DEFAULT_HEIGHT),
) -> PreparedTemplate:
    """Size and style a raw template for a batch.

    The base size comes from the root's width/height attributes when both
    are valid, else from the viewBox, else from the default size. Invalid
    size text silently falls through to the next source.

    Args:
        raw_svg: Template source.
        scale_factor: Raster multiplier.
        font_css: Stylesheet injected into the template.
        default_size: Size used when the template declares none.

    Returns:
        The PreparedTemplate for the batch.

    Raises:
        TemplateParseError: If the template is not well-formed or not SVG.
    """
    root = parse_svg(raw_svg)
    if local_name(root) != "svg":
        raise TemplateParseError(f"Template root is <{local_name(root)}>, expected <svg>")

    width = parse_length(root.get("width"))
    height = parse_length(root.get("height"))
    view_box = parse_view_box(root.get("viewBox"))

    if width is not None and height is not None:
        base_width, base_height = width, height
        source = "attributes"
    elif view_box is not None:
        base_width, base_height = view_box[2], view_box[3]
        source = "viewBox"
    else:
        base_width, base_height = default_size
        source = "default"

    final_width = scale_dimension(base_width, scale_factor)
    final_height = scale_dimension(base_height, scale_factor)

    if view_box is None:
        # Without a viewBox the content would not scale with the new size.
        root.set(
            "viewBox",
            f"0 0 {format_number(base_width)} {format_number(base_height)}",
        )
        canvas_width = base_width
    else:
        canvas_width = view_box[2]

    root.set("width", str(final_width))
    root.set("height", str(final_height))
    inject_style(root, font_css)

    logger.info(
        f"Template sized from {source}: {format_number(base_width)}x{format_number(base_height)} "
        f"-> {final_width}x{final_height} (x{format_number(scale_factor)})"
    )

    return PreparedTemplate(
        markup=serialize(root),
        width=final_width,
        height=final_height,
        base_width=base_width,
        base_height=base_height,
        canvas_width=canvas_width,
    )
