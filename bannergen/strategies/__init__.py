"""Concrete strategy implementations."""

from bannergen.strategies.measurers import (
    FontMetricsMeasurer,
    PlaywrightMeasurer,
)
from bannergen.strategies.packagers import (
    ZipPackager,
)
from bannergen.strategies.readers import (
    CsvTableReader,
)
from bannergen.strategies.renderers import (
    PlaywrightRenderer,
)
from bannergen.strategies.template_engine import (
    TemplateBinder,
)
from bannergen.strategies.uploaders import (
    HttpAssetUploader,
)

__all__ = [
    "FontMetricsMeasurer",
    "PlaywrightMeasurer",
    "ZipPackager",
    "CsvTableReader",
    "PlaywrightRenderer",
    "TemplateBinder",
    "HttpAssetUploader",
]
