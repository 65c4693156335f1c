"""Abstract base classes for banner generation collaborators."""

from bannergen.interfaces.measurer import BaseMeasurer, BBox, MeasurementError
from bannergen.interfaces.packager import BasePackager
from bannergen.interfaces.reader import BaseTableReader, Row, TableReadError
from bannergen.interfaces.renderer import BaseRenderer, RenderError, RendererStartupError
from bannergen.interfaces.template import BaseTemplateBinder, TemplateParseError
from bannergen.interfaces.uploader import AssetUploadError, BaseAssetUploader

__all__ = [
    "BaseMeasurer",
    "BBox",
    "MeasurementError",
    "BasePackager",
    "BaseTableReader",
    "Row",
    "TableReadError",
    "BaseRenderer",
    "RenderError",
    "RendererStartupError",
    "BaseTemplateBinder",
    "TemplateParseError",
    "AssetUploadError",
    "BaseAssetUploader",
]
