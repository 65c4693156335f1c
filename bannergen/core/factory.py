"""Component Factory for strategy instantiation.

The Factory Pattern lets the generator and the API pick reader,
measurer, renderer, uploader and packager implementations at runtime
from configuration.
"""

import logging

from bannergen.core.config import Settings, get_settings
from bannergen.interfaces.measurer import BaseMeasurer
from bannergen.interfaces.packager import BasePackager
from bannergen.interfaces.reader import BaseTableReader
from bannergen.interfaces.renderer import BaseRenderer
from bannergen.interfaces.template import BaseTemplateBinder
from bannergen.interfaces.uploader import BaseAssetUploader
from bannergen.strategies.measurers import FontMetricsMeasurer, PlaywrightMeasurer
from bannergen.strategies.packagers import ZipPackager
from bannergen.strategies.readers import CsvTableReader
from bannergen.strategies.renderers import PlaywrightRenderer
from bannergen.strategies.template_engine import TemplateBinder
from bannergen.strategies.uploaders import HttpAssetUploader

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Stateless components (reader, packager, estimate measurer) are cached.
    Renderers, browser measurers and uploaders hold connections and are
    created fresh for every batch.

    Example:
        ```python
        factory = ComponentFactory(get_settings())

        reader = factory.get_reader()
        renderer = factory.get_renderer()
        measurer = factory.get_measurer(renderer)
        binder = factory.get_binder(measurer)
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._reader_cache: BaseTableReader | None = None
        self._packager_cache: BasePackager | None = None
        self._metrics_measurer_cache: BaseMeasurer | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_reader(self) -> BaseTableReader:
        """Get the tabular input reader."""
        if self._reader_cache is None:
            logger.info("Instantiating table reader: csv")
            self._reader_cache = CsvTableReader(delimiter=self._settings.csv_delimiter)
        return self._reader_cache

    def get_renderer(self, renderer_type: str | None = None) -> BaseRenderer:
        """Create a renderer for one batch.

        Args:
            renderer_type: The renderer type to instantiate. If None, uses settings.

        Returns:
            A new, not yet started BaseRenderer.

        Raises:
            ValueError: If the renderer type is unknown.
        """
        renderer_type = renderer_type or self._settings.renderer_type

        logger.info(f"Instantiating renderer: {renderer_type}")

        match renderer_type:
            case "playwright":
                return PlaywrightRenderer(
                    executable_path=self._settings.chromium_executable_path,
                    timeout_ms=self._settings.render_timeout_ms,
                    readiness_timeout_s=self._settings.readiness_timeout_s,
                )
            case _:
                raise ValueError(
                    f"Unknown renderer type: {renderer_type}. "
                    f"Valid options: 'playwright'"
                )

    def get_measurer(
        self,
        renderer: BaseRenderer | None = None,
        measurer_type: str | None = None,
    ) -> BaseMeasurer:
        """Get a bounding-box measurer.

        Args:
            renderer: The batch renderer whose browser a 'browser' measurer shares.
            measurer_type: The measurer type to instantiate. If None, uses settings.

        Returns:
            A BaseMeasurer implementation instance.

        Raises:
            ValueError: If the measurer type is unknown or lacks a usable renderer.
        """
        measurer_type = measurer_type or self._settings.measurer_type

        match measurer_type:
            case "metrics":
                if self._metrics_measurer_cache is None:
                    logger.info("Instantiating measurer: metrics")
                    self._metrics_measurer_cache = FontMetricsMeasurer()
                return self._metrics_measurer_cache
            case "browser":
                if not isinstance(renderer, PlaywrightRenderer):
                    raise ValueError("The 'browser' measurer requires a Playwright renderer")
                logger.info("Instantiating measurer: browser")
                return PlaywrightMeasurer(renderer, timeout_ms=self._settings.render_timeout_ms)
            case _:
                raise ValueError(
                    f"Unknown measurer type: {measurer_type}. "
                    f"Valid options: 'browser', 'metrics'"
                )

    def get_binder(self, measurer: BaseMeasurer) -> BaseTemplateBinder:
        """Create a template binder around a measurer."""
        return TemplateBinder(
            measurer=measurer,
            image_fit=self._settings.image_fit,
            truncation_margin=self._settings.truncation_margin,
            ellipsis=self._settings.ellipsis,
            fill_row_tokens=self._settings.fill_row_tokens,
        )

    def get_uploader(self) -> BaseAssetUploader:
        """Create an asset uploader.

        Raises:
            ValueError: If no upload endpoint is configured.
        """
        if not self._settings.asset_upload_url:
            raise ValueError("ASSET_UPLOAD_URL is required for asset uploads")

        logger.info("Instantiating asset uploader: http")
        return HttpAssetUploader(
            url=self._settings.asset_upload_url,
            token=self._settings.asset_upload_token,
            url_field=self._settings.asset_upload_url_field,
        )

    def get_packager(self) -> BasePackager:
        """Get the session packager."""
        if self._packager_cache is None:
            logger.info("Instantiating packager: zip")
            self._packager_cache = ZipPackager()
        return self._packager_cache

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._reader_cache = None
        self._packager_cache = None
        self._metrics_measurer_cache = None
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
