"""Unit tests for HttpAssetUploader."""

import asyncio

import httpx
import pytest

from bannergen.interfaces.uploader import AssetUploadError
from bannergen.strategies.uploaders import HttpAssetUploader
from bannergen.strategies.uploaders.http import extract_field

UPLOAD_URL = "https://assets.example.com/upload"


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "Shirt.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake")
    return path


def make_uploader(handler, **kwargs) -> HttpAssetUploader:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpAssetUploader(UPLOAD_URL, client=client, **kwargs)


class TestExtractField:
    """Test suite for dotted JSON lookups."""

    def test_nested(self):
        assert extract_field({"data": {"url": "u"}}, "data.url") == "u"

    def test_missing(self):
        assert extract_field({"data": "flat"}, "data.url") is None
        assert extract_field([], "url") is None


class TestHttpAssetUploader:
    """Test suite for uploading generated images."""

    def test_returns_secure_url(self, image):
        async def run_test():
            seen: list[httpx.Request] = []

            def handler(request: httpx.Request) -> httpx.Response:
                seen.append(request)
                return httpx.Response(200, json={"secure_url": "https://cdn/x.png", "url": "http://cdn/x.png"})

            uploader = make_uploader(handler, token="secret")
            url = await uploader.upload(image, "Shirt")
            await uploader.aclose()

            assert url == "https://cdn/x.png"
            request = seen[0]
            assert request.method == "POST"
            assert str(request.url) == UPLOAD_URL
            assert request.headers["Authorization"] == "Bearer secret"
            body = request.content
            assert b'name="public_id"' in body
            assert b"Shirt" in body
            assert b'filename="Shirt.png"' in body

        asyncio.run(run_test())

    def test_configured_dotted_field(self, image):
        async def run_test():
            uploader = make_uploader(
                lambda request: httpx.Response(200, json={"data": {"link": "https://i/1"}}),
                url_field="data.link",
            )

            assert await uploader.upload(image, "Shirt") == "https://i/1"

        asyncio.run(run_test())

    def test_falls_back_to_url(self, image):
        async def run_test():
            uploader = make_uploader(lambda request: httpx.Response(200, json={"url": "http://cdn/x.png"}))

            assert await uploader.upload(image, "Shirt") == "http://cdn/x.png"

        asyncio.run(run_test())

    def test_no_authorization_without_token(self, image):
        async def run_test():
            seen: list[httpx.Request] = []

            def handler(request: httpx.Request) -> httpx.Response:
                seen.append(request)
                return httpx.Response(200, json={"secure_url": "u"})

            await make_uploader(handler).upload(image, "Shirt")

            assert "Authorization" not in seen[0].headers

        asyncio.run(run_test())

    def test_error_status(self, image):
        async def run_test():
            uploader = make_uploader(lambda request: httpx.Response(500, text="boom"))

            with pytest.raises(AssetUploadError, match="500"):
                await uploader.upload(image, "Shirt")

        asyncio.run(run_test())

    def test_missing_url_field(self, image):
        async def run_test():
            uploader = make_uploader(lambda request: httpx.Response(200, json={"id": 7}))

            with pytest.raises(AssetUploadError):
                await uploader.upload(image, "Shirt")

        asyncio.run(run_test())

    def test_invalid_json(self, image):
        async def run_test():
            uploader = make_uploader(lambda request: httpx.Response(200, text="<html>"))

            with pytest.raises(AssetUploadError):
                await uploader.upload(image, "Shirt")

        asyncio.run(run_test())

    def test_transport_error(self, image):
        async def run_test():
            def handler(request: httpx.Request) -> httpx.Response:
                raise httpx.ConnectError("refused", request=request)

            with pytest.raises(AssetUploadError):
                await make_uploader(handler).upload(image, "Shirt")

        asyncio.run(run_test())

    def test_missing_file(self, tmp_path):
        async def run_test():
            uploader = make_uploader(lambda request: httpx.Response(200, json={"secure_url": "u"}))

            with pytest.raises(FileNotFoundError):
                await uploader.upload(tmp_path / "nope.png", "nope")

        asyncio.run(run_test())
