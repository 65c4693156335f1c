"""Image writing and shape-to-image promotion."""

import logging

from lxml import etree

from bannergen.interfaces.measurer import BaseMeasurer, MeasurementError
from bannergen.strategies.template_engine.dom import (
    XLINK_NS,
    find_by_id,
    format_number,
    local_name,
    qualified,
)
from bannergen.strategies.template_engine.models import ImageFit

logger = logging.getLogger(__name__)

RECT_GEOMETRY = ("x", "y", "width", "height", "rx", "ry")
CARRIED_ATTRIBUTES = ("id", "class", "transform", "clip-path", "mask", "opacity", "style")

ROW_IMAGE_ID = "product_image_2"
PATTERN_FILL_TAGS = frozenset({"rect", "path", "image"})


def image_href(image: etree._Element) -> str:
    return image.get("href") or image.get(f"{{{XLINK_NS}}}href") or ""


def find_row_image_target(root: etree._Element) -> etree._Element | None:
    """Pick the element an unmapped row image should replace.

    Looks for the product_image_2 id, then the first rect, path or image
    painted with a pattern fill (``url(#...)``), then the first image not
    embedded as a data URI.
    """
    target = find_by_id(root, ROW_IMAGE_ID)
    if target is not None:
        return target
    for element in root.iter():
        if local_name(element) in PATTERN_FILL_TAGS and "url(#" in (element.get("fill") or ""):
            return element
    for element in root.iter():
        if local_name(element) == "image" and not image_href(element).startswith("data:"):
            return element
    return None


def set_image_source(image: etree._Element, href: str, fit: ImageFit) -> None:
    """Point an image element at a new source under the run's aspect-ratio policy.

    The legacy xlink:href is written too whenever the xlink namespace is in
    scope, so older renderers see the same source.
    """
    image.set("href", href)
    if XLINK_NS in image.nsmap.values():
        image.set(f"{{{XLINK_NS}}}href", href)
    image.set("preserveAspectRatio", fit.preserve_aspect_ratio)


async def promote_shape(
    root: etree._Element,
    shape: etree._Element,
    href: str,
    fit: ImageFit,
    measurer: BaseMeasurer,
) -> etree._Element | None:
    """Replace a shape with an image occupying the same place.

    Rectangles keep their geometry attributes verbatim; every other shape
    is reduced to its measured axis-aligned bounding box. The new element
    takes the shape's position in the tree and its id, so later lookups
    by id find the image.

    Args:
        root: The document root, needed for measurement.
        shape: The shape element to replace.
        href: The image source.
        fit: Aspect-ratio policy.
        measurer: Bounding-box measurement for non-rectangular shapes.

    Returns:
        The new image element, or None when the shape could not be
        measured or is detached (the tree is left untouched).
    """
    parent = shape.getparent()
    if parent is None:
        logger.warning(f"Shape {shape.get('id')!r} is detached; promotion skipped")
        return None

    namespace = etree.QName(shape).namespace
    nsmap = {None: namespace, "xlink": XLINK_NS} if namespace else {"xlink": XLINK_NS}
    image = etree.Element(qualified(shape, "image"), nsmap=nsmap)

    if local_name(shape) == "rect":
        for attr in RECT_GEOMETRY:
            value = shape.get(attr)
            if value is not None:
                image.set(attr, value)
    else:
        try:
            box = await measurer.bbox(root, shape)
        except MeasurementError as e:
            logger.warning(f"Cannot measure shape {shape.get('id')!r}: {e}; promotion skipped")
            return None
        image.set("x", format_number(box.x))
        image.set("y", format_number(box.y))
        image.set("width", format_number(box.width))
        image.set("height", format_number(box.height))

    for attr in CARRIED_ATTRIBUTES:
        value = shape.get(attr)
        if value is not None:
            image.set(attr, value)
    set_image_source(image, href, fit)

    image.tail = shape.tail
    parent.replace(shape, image)
    logger.debug(f"Promoted <{local_name(shape)}> {shape.get('id')!r} to <image>")
    return image
