"""Packaging strategies."""

from bannergen.strategies.packagers.zip import ZipPackager

__all__ = ["ZipPackager"]
