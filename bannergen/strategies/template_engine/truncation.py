"""Overflow truncation for rewritten text.

Shrinks a text element one character at a time, appending an ellipsis,
until its measured extent fits between its left edge and the right side
of the canvas (minus a margin).

Removal assumes that dropping a trailing character never widens the
text. That holds for left-to-right, non-ligature scripts; for shaping
scripts a trailing base character is dropped together with its combining
marks, but ligature-driven width changes are not accounted for.
"""

import logging
import unicodedata
from dataclasses import dataclass

from lxml import etree

from bannergen.interfaces.measurer import BaseMeasurer, BBox, MeasurementError
from bannergen.strategies.template_engine.dom import element_children

logger = logging.getLogger(__name__)

ELLIPSIS = "…"


@dataclass(frozen=True)
class TruncationResult:
    """Outcome of one truncation attempt.

    Attributes:
        truncated: Whether characters were removed.
        removed: Number of characters removed (a base character and its marks count once).
        abandoned: Whether measurement failed and the text was left as is.
    """

    truncated: bool
    removed: int = 0
    abandoned: bool = False


def drop_last_character(text: str) -> str:
    """Remove the last character together with any combining marks attached to it."""
    end = len(text)
    while end > 0 and unicodedata.category(text[end - 1]).startswith("M"):
        end -= 1
    return text[: max(end - 1, 0)]


class OverflowTruncator:
    """Greedy, monotonic text shrinker driven by an injected measurer."""

    def __init__(
        self,
        measurer: BaseMeasurer,
        margin: float = 10.0,
        ellipsis: str = ELLIPSIS,
    ) -> None:
        """Initialize the truncator.

        Args:
            measurer: Bounding-box measurement capability.
            margin: Space kept free at the right edge of the canvas.
            ellipsis: Marker appended after each removal.
        """
        self._measurer = measurer
        self._margin = margin
        self._ellipsis = ellipsis

    def fits(self, box: BBox, canvas_width: float) -> bool:
        """Check whether a box fits the horizontal budget left of the canvas edge."""
        budget = canvas_width - box.x - self._margin
        return box.width <= budget

    async def truncate(
        self,
        root: etree._Element,
        element: etree._Element,
        canvas_width: float,
    ) -> TruncationResult:
        """Shrink a text element until it fits the canvas.

        The last inline child is shrunk when there is one, otherwise the
        element's own text. The whole element is re-measured after every
        removal.

        Args:
            root: The document root.
            element: A text element whose content was just rewritten.
            canvas_width: Document width in user units.

        Returns:
            A TruncationResult describing what happened.
        """
        try:
            box = await self._measurer.bbox(root, element)
        except MeasurementError as e:
            logger.debug(f"Skipping truncation of {element.get('id')!r}: {e}")
            return TruncationResult(truncated=False, abandoned=True)

        if self.fits(box, canvas_width):
            return TruncationResult(truncated=False)

        children = element_children(element)
        target = children[-1] if children else element
        original = target.text or ""
        if not original:
            logger.debug(f"Text {element.get('id')!r} overflows but has nothing to shrink")
            return TruncationResult(truncated=False)

        remaining = original
        removed = 0
        try:
            while remaining:
                remaining = drop_last_character(remaining)
                removed += 1
                shown = remaining.rstrip()
                target.text = shown + self._ellipsis if shown else ""
                box = await self._measurer.bbox(root, element)
                if self.fits(box, canvas_width):
                    break
        except MeasurementError as e:
            target.text = original
            logger.warning(f"Truncation of {element.get('id')!r} abandoned: {e}")
            return TruncationResult(truncated=False, abandoned=True)

        logger.debug(f"Truncated {element.get('id')!r} by {removed} character(s)")
        return TruncationResult(truncated=True, removed=removed)
