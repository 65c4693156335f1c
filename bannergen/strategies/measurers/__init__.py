"""Bounding-box measurement strategies."""

from bannergen.strategies.measurers.browser import PlaywrightMeasurer
from bannergen.strategies.measurers.metrics import FontMetricsMeasurer

__all__ = ["FontMetricsMeasurer", "PlaywrightMeasurer"]
