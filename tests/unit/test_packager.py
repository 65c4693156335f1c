"""Unit tests for ZipPackager."""

import csv
import io
import zipfile

import pytest

from bannergen.strategies.packagers import ZipPackager
from bannergen.strategies.template_engine.models import ArtifactStatus, GeneratedArtifact


@pytest.fixture
def packager():
    return ZipPackager()


class TestPackage:
    """Test suite for session archives."""

    def test_only_images_archived(self, packager, tmp_path):
        (tmp_path / "b.png").write_bytes(b"b")
        (tmp_path / "a.png").write_bytes(b"a")
        (tmp_path / "report.csv").write_text("name\n")

        data = packager.package(tmp_path)

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert archive.namelist() == ["a.png", "b.png"]
            assert archive.read("a.png") == b"a"
            assert archive.getinfo("a.png").compress_type == zipfile.ZIP_DEFLATED

    def test_empty_session(self, packager, tmp_path):
        with zipfile.ZipFile(io.BytesIO(packager.package(tmp_path))) as archive:
            assert archive.namelist() == []

    def test_missing_session(self, packager, tmp_path):
        with pytest.raises(FileNotFoundError):
            packager.package(tmp_path / "gone")

    def test_media_type(self, packager):
        assert packager.media_type == "application/zip"


class TestWriteReport:
    """Test suite for the per-row report."""

    def test_report_rows(self, packager, tmp_path):
        artifacts = [
            GeneratedArtifact(index=1, name="Shirt", file_name="Shirt.png", url="https://x/Shirt.png"),
            GeneratedArtifact(
                index=2,
                name="Jeans",
                file_name="Jeans.png",
                status=ArtifactStatus.FAILED,
                error="page crashed",
            ),
        ]

        path = packager.write_report(artifacts, tmp_path / "out" / "report.csv")

        with path.open(encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
        assert rows == [
            {"name": "Shirt", "file_name": "Shirt.png", "status": "generated", "url": "https://x/Shirt.png", "error": ""},
            {"name": "Jeans", "file_name": "Jeans.png", "status": "failed", "url": "", "error": "page crashed"},
        ]
