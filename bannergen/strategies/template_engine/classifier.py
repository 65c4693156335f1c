"""Element and value classification.

Decides, for one mapped element and its bound value, which mutation path
the binder takes. Value sniffing is kept separate from the element tree so
it can be tested on its own.
"""

import re
from urllib.parse import urlsplit

from lxml import etree

from bannergen.strategies.template_engine.dom import local_name
from bannergen.strategies.template_engine.models import MutationKind, ValueKind

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".avif", ".svg"})
SHAPE_TAGS = frozenset({"rect", "path", "circle", "ellipse", "polygon", "polyline"})
GROUP_TAGS = frozenset({"g"})
IMAGE_TAGS = frozenset({"image"})

_HEX_COLOR = re.compile(r"^#(?:[0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)
_FUNCTIONAL_COLOR = re.compile(r"^(?:rgba?|hsla?|hwb|lab|lch|oklab|oklch)\(\s*[^()]*\)$", re.IGNORECASE)
_COLOR_KEYWORDS = frozenset({"none", "transparent", "currentcolor"})
_NAMED_COLORS = frozenset(
    {
        "aliceblue", "antiquewhite", "aqua", "aquamarine", "azure", "beige", "bisque",
        "black", "blanchedalmond", "blue", "blueviolet", "brown", "burlywood", "cadetblue",
        "chartreuse", "chocolate", "coral", "cornflowerblue", "cornsilk", "crimson", "cyan",
        "darkblue", "darkcyan", "darkgoldenrod", "darkgray", "darkgreen", "darkgrey",
        "darkkhaki", "darkmagenta", "darkolivegreen", "darkorange", "darkorchid", "darkred",
        "darksalmon", "darkseagreen", "darkslateblue", "darkslategray", "darkslategrey",
        "darkturquoise", "darkviolet", "deeppink", "deepskyblue", "dimgray", "dimgrey",
        "dodgerblue", "firebrick", "floralwhite", "forestgreen", "fuchsia", "gainsboro",
        "ghostwhite", "gold", "goldenrod", "gray", "green", "greenyellow", "grey", "honeydew",
        "hotpink", "indianred", "indigo", "ivory", "khaki", "lavender", "lavenderblush",
        "lawngreen", "lemonchiffon", "lightblue", "lightcoral", "lightcyan",
        "lightgoldenrodyellow", "lightgray", "lightgreen", "lightgrey", "lightpink",
        "lightsalmon", "lightseagreen", "lightskyblue", "lightslategray", "lightslategrey",
        "lightsteelblue", "lightyellow", "lime", "limegreen", "linen", "magenta", "maroon",
        "mediumaquamarine", "mediumblue", "mediumorchid", "mediumpurple", "mediumseagreen",
        "mediumslateblue", "mediumspringgreen", "mediumturquoise", "mediumvioletred",
        "midnightblue", "mintcream", "mistyrose", "moccasin", "navajowhite", "navy", "oldlace",
        "olive", "olivedrab", "orange", "orangered", "orchid", "palegoldenrod", "palegreen",
        "paleturquoise", "palevioletred", "papayawhip", "peachpuff", "peru", "pink", "plum",
        "powderblue", "purple", "rebeccapurple", "red", "rosybrown", "royalblue", "saddlebrown",
        "salmon", "sandybrown", "seagreen", "seashell", "sienna", "silver", "skyblue",
        "slateblue", "slategray", "slategrey", "snow", "springgreen", "steelblue", "tan", "teal",
        "thistle", "tomato", "turquoise", "violet", "wheat", "white", "whitesmoke", "yellow",
        "yellowgreen",
    }
)


def is_image_reference(value: str) -> bool:
    """Check whether a value points at an image.

    A value is an image reference when it is a data URI, an http(s) URL,
    or a path ending in a known image extension (query string and
    fragment ignored).
    """
    candidate = value.strip()
    lowered = candidate.lower()
    if lowered.startswith("data:"):
        return True
    if lowered.startswith(("http://", "https://")):
        return True
    path = urlsplit(candidate).path.lower()
    return any(path.endswith(ext) for ext in IMAGE_EXTENSIONS)


def is_color(value: str) -> bool:
    """Check whether a value is a CSS color."""
    candidate = value.strip()
    lowered = candidate.lower()
    return bool(
        _HEX_COLOR.match(candidate)
        or _FUNCTIONAL_COLOR.match(candidate)
        or lowered in _COLOR_KEYWORDS
        or lowered in _NAMED_COLORS
    )


def classify_value(value: str) -> ValueKind:
    """Classify a bound value as an image reference, a color, or plain text."""
    if is_image_reference(value):
        return ValueKind.IMAGE_REFERENCE
    if is_color(value):
        return ValueKind.COLOR
    return ValueKind.PLAIN_TEXT


def classify_element(element: etree._Element, value: str) -> MutationKind:
    """Decide how a targeted element is mutated for a value.

    Args:
        element: The element carrying the mapped id.
        value: The non-empty value bound to it for this row.

    Returns:
        The mutation path to take.
    """
    tag = local_name(element)
    if tag in IMAGE_TAGS:
        return MutationKind.IMAGE_FILL
    if tag in SHAPE_TAGS:
        if classify_value(value) is ValueKind.IMAGE_REFERENCE:
            return MutationKind.SHAPE_TO_IMAGE
        # Anything else bound to a shape is written as its fill.
        return MutationKind.COLOR_FILL
    if tag in GROUP_TAGS:
        return MutationKind.GROUP_TEXT
    return MutationKind.TEXT
