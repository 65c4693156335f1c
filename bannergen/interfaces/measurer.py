"""Abstract base class for bounding-box measurement.

Measurement is injected into the binding engine so that shape promotion
and overflow truncation can run against a real browser layout in
production and against a deterministic estimate in tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from lxml import etree


@dataclass(frozen=True)
class BBox:
    """Axis-aligned bounding box in the document's user space.

    Attributes:
        x: Left edge.
        y: Top edge.
        width: Horizontal extent.
        height: Vertical extent.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def union(self, other: "BBox") -> "BBox":
        """Return the smallest box enclosing both boxes."""
        left = min(self.x, other.x)
        top = min(self.y, other.y)
        return BBox(
            x=left,
            y=top,
            width=max(self.right, other.right) - left,
            height=max(self.bottom, other.bottom) - top,
        )


class BaseMeasurer(ABC):
    """Abstract base class for bounding-box measurement strategies.

    Example:
        ```python
        measurer = FontMetricsMeasurer()
        box = await measurer.bbox(root, root.find(".//{*}text"))
        ```
    """

    @abstractmethod
    async def bbox(self, root: etree._Element, element: etree._Element) -> BBox:
        """Measure the rendered bounding box of an element.

        Args:
            root: The document root the element belongs to.
            element: The element to measure.

        Returns:
            The element's bounding box.

        Raises:
            MeasurementError: If the element cannot be measured
                (not renderable, detached, or empty geometry).
        """
        ...

    async def aclose(self) -> None:
        """Release any held resources."""
        return None


class MeasurementError(Exception):
    """Exception raised when an element cannot be measured."""

    pass
