"""Abstract base class for rasterization backends.

The binding engine only prepares a document; turning it into pixels is
delegated to a renderer that must expose font and image readiness before
capture.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from types import TracebackType


class BaseRenderer(ABC):
    """Abstract base class for rendering strategies.

    Renderers hold an expensive backend (a browser, a native library) and
    are used as async context managers for the duration of one batch.

    Example:
        ```python
        async with PlaywrightRenderer() as renderer:
            await renderer.render(markup, 2400, 1200, Path("out.png"))
        ```
    """

    @abstractmethod
    async def start(self) -> None:
        """Initialize the backend.

        Raises:
            RendererStartupError: If the backend cannot be initialized.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the backend. Safe to call more than once."""
        ...

    @abstractmethod
    async def render(self, markup: str, width: int, height: int, output_path: Path) -> Path:
        """Rasterize a mutated document.

        Implementations must wait for font loading and image decoding
        (bounded by a timeout) before capturing.

        Args:
            markup: Serialized SVG document.
            width: Target raster width in pixels.
            height: Target raster height in pixels.
            output_path: Where to write the PNG.

        Returns:
            The path of the written image.

        Raises:
            RenderError: If the backend cannot accept or capture the content.
        """
        ...

    async def __aenter__(self) -> "BaseRenderer":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


class RendererStartupError(Exception):
    """Exception raised when the rendering backend fails to initialize."""

    pass


class RenderError(Exception):
    """Exception raised when a single document fails to render."""

    pass
