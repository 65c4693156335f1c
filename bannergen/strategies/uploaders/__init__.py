"""Asset upload strategies."""

from bannergen.strategies.uploaders.http import HttpAssetUploader

__all__ = ["HttpAssetUploader"]
