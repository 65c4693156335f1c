"""Shared fixtures and test doubles for the unit tests."""

from pathlib import Path

import pytest
from lxml import etree

from bannergen.core.config import Settings
from bannergen.core.factory import ComponentFactory
from bannergen.interfaces.measurer import BaseMeasurer, BBox, MeasurementError
from bannergen.interfaces.renderer import BaseRenderer, RenderError, RendererStartupError
from bannergen.interfaces.uploader import AssetUploadError, BaseAssetUploader
from bannergen.strategies.template_engine.dom import owning_text, plain_text


# =============================================================================
# Test Doubles
# =============================================================================


class CharWidthMeasurer(BaseMeasurer):
    """Every character is char_width units wide; text boxes start at the text's x."""

    def __init__(self, char_width: float = 10.0) -> None:
        self.char_width = char_width
        self.calls = 0

    async def bbox(self, root: etree._Element, element: etree._Element) -> BBox:
        self.calls += 1
        owner = owning_text(element)
        if owner is None:
            raise MeasurementError("not text")
        x = float(owner.get("x", "0"))
        return BBox(x, 0.0, len(plain_text(owner)) * self.char_width, 10.0)


class FailingMeasurer(BaseMeasurer):
    """Succeeds for the first `succeed` calls, then raises MeasurementError."""

    def __init__(self, succeed: int = 0, char_width: float = 10.0) -> None:
        self._succeed = succeed
        self._inner = CharWidthMeasurer(char_width)

    async def bbox(self, root: etree._Element, element: etree._Element) -> BBox:
        if self._succeed <= 0:
            raise MeasurementError("layout unavailable")
        self._succeed -= 1
        return await self._inner.bbox(root, element)


class FakeRenderer(BaseRenderer):
    """Records every render and writes a placeholder PNG."""

    def __init__(self) -> None:
        self.started = False
        self.closed = False
        self.fail_startup = False
        self.fail_when_contains: str | None = None
        self.renders: list[tuple[str, int, int, Path]] = []

    async def start(self) -> None:
        if self.fail_startup:
            raise RendererStartupError("no browser")
        self.started = True

    async def close(self) -> None:
        self.closed = True

    async def render(self, markup: str, width: int, height: int, output_path: Path) -> Path:
        if self.fail_when_contains and self.fail_when_contains in markup:
            raise RenderError("page crashed")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"\x89PNG\r\n\x1a\nfake")
        self.renders.append((markup, width, height, output_path))
        return output_path


class FakeUploader(BaseAssetUploader):
    """Returns predictable URLs; names listed in fail_names are rejected."""

    def __init__(self) -> None:
        self.fail_names: set[str] = set()
        self.uploaded: list[str] = []
        self.closed = False

    async def upload(self, file_path: Path, name: str) -> str:
        if name in self.fail_names:
            raise AssetUploadError("quota exceeded")
        self.uploaded.append(name)
        return f"https://cdn.example.com/{name}.png"

    async def aclose(self) -> None:
        self.closed = True


class FakeFactory(ComponentFactory):
    """Component factory wired to the test doubles."""

    def __init__(self, settings: Settings, renderer: FakeRenderer, uploader: FakeUploader | None) -> None:
        super().__init__(settings)
        self.renderer = renderer
        self.uploader = uploader

    def get_renderer(self, renderer_type: str | None = None) -> BaseRenderer:
        return self.renderer

    def get_uploader(self) -> BaseAssetUploader:
        if self.uploader is None:
            return super().get_uploader()
        return self.uploader


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path):
    """Settings isolated to a temporary directory, using the estimate measurer."""
    return Settings(
        upload_dir=tmp_path / "uploads",
        output_dir=tmp_path / "public" / "temp",
        log_dir=tmp_path / "logs",
        measurer_type="metrics",
        scale_factor=3.0,
        asset_upload_url=None,
    )


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def fake_uploader():
    return FakeUploader()


@pytest.fixture
def fake_factory(settings, fake_renderer, fake_uploader):
    return FakeFactory(settings, fake_renderer, fake_uploader)


@pytest.fixture
def factory_without_uploader(settings, fake_renderer):
    """Factory that falls back to the configured uploader (none in these settings)."""
    return FakeFactory(settings, fake_renderer, None)


@pytest.fixture
def char_measurer():
    return CharWidthMeasurer(char_width=10.0)


@pytest.fixture
def failing_measurer_factory():
    """Build measurers that fail after a number of successful calls."""
    return FailingMeasurer
