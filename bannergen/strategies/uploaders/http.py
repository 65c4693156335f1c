"""HTTP asset upload strategy.

Posts each generated image as a multipart form to an asset-hosting
endpoint and reads the public URL out of the JSON response.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

import httpx

from bannergen.interfaces.uploader import AssetUploadError, BaseAssetUploader

logger = logging.getLogger(__name__)

FALLBACK_URL_FIELDS = ("secure_url", "url")


def extract_field(payload: Any, dotted: str) -> Any:
    """Walk a dotted path (e.g. "data.url") through nested JSON objects."""
    current = payload
    for part in dotted.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


class HttpAssetUploader(BaseAssetUploader):
    """Uploads images to an HTTP endpoint.

    Example:
        ```python
        uploader = HttpAssetUploader("https://assets.example.com/upload", token="...")
        url = await uploader.upload(Path("banner.png"), "banner")
        ```
    """

    def __init__(
        self,
        url: str,
        token: str | None = None,
        url_field: str = "secure_url",
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the uploader.

        Args:
            url: Upload endpoint.
            token: Optional bearer token.
            url_field: Dotted JSON path of the returned asset URL.
            timeout: Request timeout in seconds.
            client: Preconfigured client, mainly for tests.
        """
        self._url = url
        self._url_field = url_field
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

        logger.info(f"HttpAssetUploader initialized: endpoint={url}")

    async def upload(self, file_path: Path, name: str) -> str:
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        content = await asyncio.to_thread(file_path.read_bytes)

        try:
            response = await self._client.post(
                self._url,
                files={"file": (file_path.name, content, "image/png")},
                data={"public_id": name},
                headers=self._headers,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise AssetUploadError(
                f"Upload of {file_path.name} rejected with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise AssetUploadError(f"Upload of {file_path.name} failed: {e}") from e
        except ValueError as e:
            raise AssetUploadError(f"Upload service returned invalid JSON: {e}") from e

        for field in (self._url_field, *FALLBACK_URL_FIELDS):
            value = extract_field(payload, field)
            if isinstance(value, str) and value:
                logger.debug(f"Uploaded {file_path.name} -> {value}")
                return value

        raise AssetUploadError(f"Upload response has no {self._url_field!r} field")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
