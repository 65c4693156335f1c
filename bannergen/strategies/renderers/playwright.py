"""Playwright rendering strategy.

Rasterizes SVG documents in headless Chromium. The browser is launched
once per batch; each render loads the document into an HTML shell, waits
for web fonts and embedded images, and screenshots the exact raster size.
"""

import logging
from pathlib import Path

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from bannergen.interfaces.renderer import BaseRenderer, RenderError, RendererStartupError

logger = logging.getLogger(__name__)

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--font-render-hinting=none",
]

HTML_SHELL = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
html, body {{ margin: 0; padding: 0; background: transparent; overflow: hidden; }}
svg {{ display: block; }}
</style>
</head>
<body>{markup}</body>
</html>"""

# Resolves once fonts are ready and every <image> has loaded or failed,
# or when the timeout elapses, whichever comes first.
READINESS_SCRIPT = """
async (timeoutMs) => {
  const settle = (el) => new Promise((resolve) => {
    const href = el.getAttribute('href') || el.getAttributeNS('http://www.w3.org/1999/xlink', 'href');
    if (!href) { resolve(); return; }
    const img = new Image();
    img.onload = () => resolve();
    img.onerror = () => resolve();
    img.src = href;
  });
  const ready = Promise.all([
    document.fonts.ready,
    ...Array.from(document.querySelectorAll('image')).map(settle),
  ]);
  const timeout = new Promise((resolve) => setTimeout(() => resolve('timeout'), timeoutMs));
  const outcome = await Promise.race([ready.then(() => 'ready'), timeout]);
  await new Promise((resolve) => requestAnimationFrame(() => requestAnimationFrame(resolve)));
  return outcome;
}
"""


class PlaywrightRenderer(BaseRenderer):
    """Headless Chromium renderer.

    Example:
        ```python
        async with PlaywrightRenderer(timeout_ms=30000) as renderer:
            await renderer.render(markup, 2400, 1200, Path("banner.png"))
        ```
    """

    def __init__(
        self,
        executable_path: str | None = None,
        timeout_ms: int = 60000,
        readiness_timeout_s: float = 15.0,
    ) -> None:
        """Initialize the renderer.

        Args:
            executable_path: Chromium binary to launch. None uses Playwright's bundled build.
            timeout_ms: Navigation and capture timeout per document.
            readiness_timeout_s: Upper bound on waiting for fonts and images.
        """
        self._executable_path = executable_path
        self._timeout_ms = timeout_ms
        self._readiness_timeout_ms = int(readiness_timeout_s * 1000)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

        logger.info(
            f"PlaywrightRenderer initialized: executable={executable_path or 'bundled'}, "
            f"timeout={timeout_ms}ms"
        )

    @property
    def started(self) -> bool:
        return self._context is not None

    async def start(self) -> None:
        if self.started:
            return
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=True,
                executable_path=self._executable_path,
                args=CHROMIUM_ARGS,
            )
            self._context = await self._browser.new_context(bypass_csp=True)
            logger.info("Chromium launched")
        except PlaywrightError as e:
            logger.error(f"Chromium launch failed: {e}", exc_info=True)
            await self.close()
            raise RendererStartupError(f"Could not launch Chromium: {e}") from e

    async def new_page(self) -> Page:
        """Open a page in the renderer's browser context.

        Raises:
            RendererStartupError: If the browser cannot be started.
        """
        await self.start()
        assert self._context is not None
        return await self._context.new_page()

    async def render(self, markup: str, width: int, height: int, output_path: Path) -> Path:
        await self.start()
        if self._page is None or self._page.is_closed():
            self._page = await self.new_page()

        page = self._page
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            await page.set_viewport_size({"width": width, "height": height})
            await page.set_content(
                HTML_SHELL.format(markup=markup),
                wait_until="domcontentloaded",
                timeout=self._timeout_ms,
            )
            outcome = await page.evaluate(READINESS_SCRIPT, self._readiness_timeout_ms)
            if outcome == "timeout":
                logger.warning(
                    f"Fonts or images not ready after {self._readiness_timeout_ms}ms, "
                    f"capturing {output_path.name} anyway"
                )
            await page.screenshot(
                path=str(output_path),
                type="png",
                clip={"x": 0, "y": 0, "width": width, "height": height},
                omit_background=True,
                timeout=self._timeout_ms,
            )
        except PlaywrightError as e:
            # A broken page must not leak into the next row.
            await page.close()
            self._page = None
            raise RenderError(f"Failed to render {output_path.name}: {e}") from e

        logger.debug(f"Rendered {output_path.name} ({width}x{height})")
        return output_path

    async def close(self) -> None:
        if self._context is not None:
            try:
                await self._context.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing browser context: {e}")
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing browser: {e}")
        if self._playwright is not None:
            await self._playwright.stop()
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None
