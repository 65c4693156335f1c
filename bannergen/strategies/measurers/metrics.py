"""Font-metrics bounding-box estimator.

A measurer that needs no browser: text extents are estimated from
per-glyph advance classes and the inherited font size, shapes from their
geometry attributes. Transforms are not applied, which matches getBBox()
for the measured element itself.
"""

import logging
import math
import re
import unicodedata

from lxml import etree

from bannergen.interfaces.measurer import BaseMeasurer, BBox, MeasurementError
from bannergen.strategies.template_engine.dom import (
    element_children,
    inherited,
    local_name,
    owning_text,
)

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_PATH_TOKEN = re.compile(r"[MmLlHhVvCcSsQqTtAaZz]|[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_PATH_ARITY = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}
_FONT_UNITS = {"px": 1.0, "pt": 4 / 3, "pc": 16.0, "in": 96.0, "cm": 96 / 2.54, "mm": 96 / 25.4}

NARROW = frozenset("iljtfr.,:;'|!`()[]{}\"")
WIDE = frozenset("mwMW@%")


def _first_number(value: str | None) -> float | None:
    if not value:
        return None
    match = _NUMBER.search(value)
    return float(match.group(0)) if match else None


def _number(element: etree._Element, name: str, default: float = 0.0) -> float:
    value = _first_number(element.get(name))
    return default if value is None else value


def glyph_advance(char: str) -> float:
    """Estimated advance of one character, as a fraction of the font size."""
    category = unicodedata.category(char)
    if category == "Mn" or category == "Me" or category == "Cf":
        return 0.0
    if category == "Mc":
        return 0.3
    if unicodedata.east_asian_width(char) in ("W", "F"):
        return 1.0
    if char.isspace():
        return 0.28
    if char in NARROW:
        return 0.3
    if char in WIDE:
        return 0.85
    if char.isdigit():
        return 0.56
    if char.isupper():
        return 0.68
    return 0.52


class FontMetricsMeasurer(BaseMeasurer):
    """Estimates bounding boxes without a rendering backend."""

    def __init__(
        self,
        default_font_size: float = 16.0,
        ascent: float = 0.8,
        line_height: float = 1.2,
    ) -> None:
        """Initialize the estimator.

        Args:
            default_font_size: Font size when none is declared in the tree.
            ascent: Baseline-to-top distance as a fraction of the font size.
            line_height: Line box height as a fraction of the font size.
        """
        self._default_font_size = default_font_size
        self._ascent = ascent
        self._line_height = line_height

    async def bbox(self, root: etree._Element, element: etree._Element) -> BBox:
        if element.getroottree().getroot() is not root:
            raise MeasurementError(f"Element {element.get('id')!r} is not attached to the document")
        return self.measure(element)

    def measure(self, element: etree._Element) -> BBox:
        """Measure an element synchronously.

        Raises:
            MeasurementError: If the element has no measurable geometry.
        """
        tag = local_name(element)
        match tag:
            case "text":
                return self._text_box(element)
            case "tspan" | "textPath":
                owner = owning_text(element)
                if owner is None:
                    raise MeasurementError("Inline text outside a text element")
                return self._text_box(owner)
            case "rect" | "image" | "use" | "foreignObject" | "svg":
                width = _number(element, "width")
                height = _number(element, "height")
                if width <= 0 or height <= 0:
                    raise MeasurementError(f"<{tag}> has no size")
                return BBox(_number(element, "x"), _number(element, "y"), width, height)
            case "circle":
                r = _number(element, "r")
                return BBox(_number(element, "cx") - r, _number(element, "cy") - r, 2 * r, 2 * r)
            case "ellipse":
                rx = _number(element, "rx")
                ry = _number(element, "ry")
                return BBox(_number(element, "cx") - rx, _number(element, "cy") - ry, 2 * rx, 2 * ry)
            case "line":
                return _points_box(
                    [
                        (_number(element, "x1"), _number(element, "y1")),
                        (_number(element, "x2"), _number(element, "y2")),
                    ]
                )
            case "polygon" | "polyline":
                values = [float(n) for n in _NUMBER.findall(element.get("points") or "")]
                return _points_box(list(zip(values[0::2], values[1::2])))
            case "path":
                return _points_box(path_points(element.get("d") or ""))
            case "g" | "a" | "switch":
                return self._union(element)
            case _:
                raise MeasurementError(f"Cannot measure <{tag}>")

    def _union(self, container: etree._Element) -> BBox:
        box = None
        for child in element_children(container):
            try:
                child_box = self.measure(child)
            except MeasurementError:
                continue
            box = child_box if box is None else box.union(child_box)
        if box is None:
            raise MeasurementError(f"<{local_name(container)}> has no measurable children")
        return box

    def font_size(self, element: etree._Element) -> float:
        """Resolve the font size in effect for an element."""
        value = inherited(element, "font-size")
        if not value:
            return self._default_font_size
        match = re.match(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))\s*([a-z%]*)\s*$", value, re.IGNORECASE)
        if not match:
            return self._default_font_size
        number, unit = float(match.group(1)), match.group(2).lower()
        if unit in ("", "px"):
            return number
        if unit in _FONT_UNITS:
            return number * _FONT_UNITS[unit]
        if unit in ("em", "rem"):
            return number * self._default_font_size
        return self._default_font_size

    def text_width(self, text: str, font_size: float) -> float:
        return sum(glyph_advance(char) for char in text) * font_size

    def _text_box(self, text: etree._Element) -> BBox:
        # Lines start at the text element and at every child carrying its own x.
        x = _first_number(text.get("x"))
        y = _first_number(text.get("y"))
        children = element_children(text)
        if x is None and children:
            x = _first_number(children[0].get("x"))
        if y is None and children:
            y = _first_number(children[0].get("y"))
        x = x or 0.0
        y = y or 0.0

        base_size = self.font_size(text)
        lines: list[tuple[float, float]] = [(x, 0.0)]
        tallest = base_size

        def advance(fragment: str | None, size: float) -> None:
            if fragment:
                start, width = lines[-1]
                lines[-1] = (start, width + self.text_width(fragment, size))

        advance(text.text, base_size)
        for index, child in enumerate(children):
            child_x = _first_number(child.get("x"))
            if child_x is not None and index > 0:
                lines.append((child_x, 0.0))
            elif child_x is not None:
                lines[-1] = (child_x, lines[-1][1])
            size = self.font_size(child)
            tallest = max(tallest, size)
            advance("".join(child.itertext()), size)
            advance(child.tail, base_size)

        anchor = (inherited(text, "text-anchor") or "start").strip()
        left = math.inf
        right = -math.inf
        for start, width in lines:
            if anchor == "middle":
                start -= width / 2
            elif anchor == "end":
                start -= width
            left = min(left, start)
            right = max(right, start + width)

        return BBox(
            x=left,
            y=y - tallest * self._ascent,
            width=max(right - left, 0.0),
            height=tallest * self._line_height * len(lines),
        )


def _points_box(points: list[tuple[float, float]]) -> BBox:
    if not points:
        raise MeasurementError("Shape has no geometry")
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return BBox(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


def path_points(d: str) -> list[tuple[float, float]]:
    """Collect the points that bound a path.

    Curve control points are included, so curves yield their control hull;
    elliptical arcs are sampled.
    """
    tokens = _PATH_TOKEN.findall(d)
    points: list[tuple[float, float]] = []
    command = ""
    x = y = start_x = start_y = 0.0
    i = 0

    while i < len(tokens):
        token = tokens[i]
        if token.isalpha():
            command = token
            i += 1
            if command in "Zz":
                x, y = start_x, start_y
                points.append((x, y))
                continue
        elif not command:
            break

        upper = command.upper()
        arity = _PATH_ARITY[upper]
        args = tokens[i : i + arity]
        if len(args) < arity or any(arg.isalpha() for arg in args):
            break
        values = [float(a) for a in args]
        i += arity
        relative = command.islower()

        match upper:
            case "H":
                x = x + values[0] if relative else values[0]
                points.append((x, y))
            case "V":
                y = y + values[0] if relative else values[0]
                points.append((x, y))
            case "A":
                rx, ry, rotation, large_arc, sweep, ex, ey = values
                if relative:
                    ex, ey = x + ex, y + ey
                points.extend(_arc_points(x, y, rx, ry, rotation, bool(large_arc), bool(sweep), ex, ey))
                x, y = ex, ey
            case _:
                for px, py in zip(values[0::2], values[1::2]):
                    if relative:
                        px, py = x + px, y + py
                    points.append((px, py))
                x, y = points[-1]

        if upper == "M":
            start_x, start_y = x, y
            # Extra coordinate pairs after a moveto are implicit linetos.
            command = "l" if relative else "L"

    return points


def _arc_points(
    x1: float,
    y1: float,
    rx: float,
    ry: float,
    rotation: float,
    large_arc: bool,
    sweep: bool,
    x2: float,
    y2: float,
    samples: int = 16,
) -> list[tuple[float, float]]:
    """Sample an SVG elliptical arc using its center parameterization."""
    rx, ry = abs(rx), abs(ry)
    if rx == 0 or ry == 0 or (x1 == x2 and y1 == y2):
        return [(x2, y2)]

    phi = math.radians(rotation)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    dx, dy = (x1 - x2) / 2, (y1 - y2) / 2
    x1p = cos_phi * dx + sin_phi * dy
    y1p = -sin_phi * dx + cos_phi * dy

    scale = (x1p**2) / (rx**2) + (y1p**2) / (ry**2)
    if scale > 1:
        rx *= math.sqrt(scale)
        ry *= math.sqrt(scale)

    numerator = rx**2 * ry**2 - rx**2 * y1p**2 - ry**2 * x1p**2
    denominator = rx**2 * y1p**2 + ry**2 * x1p**2
    factor = math.sqrt(max(numerator, 0.0) / denominator) if denominator else 0.0
    if large_arc == sweep:
        factor = -factor
    cxp = factor * rx * y1p / ry
    cyp = -factor * ry * x1p / rx
    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2

    def angle(ux: float, uy: float, vx: float, vy: float) -> float:
        return math.atan2(ux * vy - uy * vx, ux * vx + uy * vy)

    theta1 = angle(1, 0, (x1p - cxp) / rx, (y1p - cyp) / ry)
    delta = angle((x1p - cxp) / rx, (y1p - cyp) / ry, (-x1p - cxp) / rx, (-y1p - cyp) / ry)
    if not sweep and delta > 0:
        delta -= 2 * math.pi
    elif sweep and delta < 0:
        delta += 2 * math.pi

    points = []
    for step in range(1, samples + 1):
        t = theta1 + delta * step / samples
        px = cx + rx * math.cos(t) * cos_phi - ry * math.sin(t) * sin_phi
        py = cy + rx * math.cos(t) * sin_phi + ry * math.sin(t) * cos_phi
        points.append((px, py))
    return points
