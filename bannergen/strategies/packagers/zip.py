"""Zip packaging strategy."""

import csv
import io
import logging
import zipfile
from pathlib import Path
from typing import Any

from bannergen.interfaces.packager import BasePackager

logger = logging.getLogger(__name__)

REPORT_COLUMNS = ["name", "file_name", "status", "url", "error"]


class ZipPackager(BasePackager):
    """Bundles a session's images into a deflated zip archive."""

    def __init__(self, extensions: set[str] | None = None) -> None:
        self._extensions = extensions or {".png"}

    @property
    def media_type(self) -> str:
        return "application/zip"

    def package(self, session_dir: Path) -> bytes:
        if not session_dir.is_dir():
            raise FileNotFoundError(f"Session directory not found: {session_dir}")

        images = sorted(
            p for p in session_dir.iterdir() if p.is_file() and p.suffix.lower() in self._extensions
        )

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for image in images:
                archive.write(image, arcname=image.name)

        logger.info(f"Packaged {len(images)} image(s) from {session_dir.name}")
        return buffer.getvalue()

    def write_report(self, artifacts: list[Any], report_path: Path) -> Path:
        report_path.parent.mkdir(parents=True, exist_ok=True)
        with report_path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=REPORT_COLUMNS)
            writer.writeheader()
            for artifact in artifacts:
                writer.writerow(
                    {
                        "name": artifact.name,
                        "file_name": artifact.file_name,
                        "status": artifact.status.value,
                        "url": artifact.url or "",
                        "error": artifact.error or "",
                    }
                )

        logger.info(f"Wrote report for {len(artifacts)} row(s) to {report_path.name}")
        return report_path
