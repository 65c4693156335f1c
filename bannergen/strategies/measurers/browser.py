"""Browser-backed bounding-box measurement.

Loads the document being bound into a Chromium page and asks the layout
engine for getBBox(). Elements are located by their element-child index
path from the root, so elements without an id can be measured too.
"""

import logging

from lxml import etree
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from bannergen.interfaces.measurer import BaseMeasurer, BBox, MeasurementError
from bannergen.interfaces.renderer import RendererStartupError
from bannergen.strategies.renderers.playwright import HTML_SHELL, PlaywrightRenderer
from bannergen.strategies.template_engine.dom import element_children, serialize

logger = logging.getLogger(__name__)

BBOX_SCRIPT = """
(path) => {
  let el = document.querySelector('svg');
  for (const index of path) {
    if (!el || !el.children[index]) return null;
    el = el.children[index];
  }
  if (!el || typeof el.getBBox !== 'function') return null;
  const box = el.getBBox();
  return { x: box.x, y: box.y, width: box.width, height: box.height };
}
"""


def child_index_path(root: etree._Element, element: etree._Element) -> list[int]:
    """Compute the element-child indexes leading from root to element.

    Raises:
        MeasurementError: If the element is not a descendant of root.
    """
    path: list[int] = []
    current = element
    while current is not root:
        parent = current.getparent()
        if parent is None:
            raise MeasurementError(f"Element {element.get('id')!r} is not attached to the document")
        path.append(element_children(parent).index(current))
        current = parent
    path.reverse()
    return path


class PlaywrightMeasurer(BaseMeasurer):
    """Measures elements with the browser's own layout.

    Shares the renderer's browser; the page is opened lazily and the
    document is reloaded only when its serialization changed since the
    previous measurement.
    """

    def __init__(self, renderer: PlaywrightRenderer, timeout_ms: int = 60000) -> None:
        self._renderer = renderer
        self._timeout_ms = timeout_ms
        self._page: Page | None = None
        self._loaded_markup: str | None = None

    async def _ensure_page(self) -> Page:
        if self._page is None or self._page.is_closed():
            try:
                self._page = await self._renderer.new_page()
            except RendererStartupError as e:
                raise MeasurementError(f"No browser available for measurement: {e}") from e
            self._loaded_markup = None
        return self._page

    async def bbox(self, root: etree._Element, element: etree._Element) -> BBox:
        path = child_index_path(root, element)
        markup = serialize(root)
        page = await self._ensure_page()

        try:
            if markup != self._loaded_markup:
                await page.set_content(
                    HTML_SHELL.format(markup=markup),
                    wait_until="load",
                    timeout=self._timeout_ms,
                )
                await page.evaluate("document.fonts.ready.then(() => true)")
                self._loaded_markup = markup
            box = await page.evaluate(BBOX_SCRIPT, path)
        except PlaywrightError as e:
            self._loaded_markup = None
            raise MeasurementError(f"Measurement failed: {e}") from e

        if box is None:
            raise MeasurementError(f"Element {element.get('id')!r} has no layout box")

        logger.debug(f"Measured {element.get('id')!r}: {box}")
        return BBox(box["x"], box["y"], box["width"], box["height"])

    async def aclose(self) -> None:
        if self._page is not None and not self._page.is_closed():
            await self._page.close()
        self._page = None
        self._loaded_markup = None
