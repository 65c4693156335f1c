"""Abstract base class for asset upload services."""

from abc import ABC, abstractmethod
from pathlib import Path


class BaseAssetUploader(ABC):
    """Abstract base class for asset upload strategies.

    Uploads a generated raster and returns a public reference URL.
    """

    @abstractmethod
    async def upload(self, file_path: Path, name: str) -> str:
        """Upload an image.

        Args:
            file_path: Path to the image on disk.
            name: Logical name of the asset.

        Returns:
            The reference URL returned by the service.

        Raises:
            FileNotFoundError: If the image does not exist.
            AssetUploadError: If the service rejects the upload.
        """
        ...

    async def aclose(self) -> None:
        """Release any held connections."""
        return None


class AssetUploadError(Exception):
    """Exception raised when an asset upload fails."""

    pass
