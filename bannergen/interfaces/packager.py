"""Abstract base class for packaging sinks.

Packagers turn a session's generated images into a downloadable archive
and write the per-row report.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class BasePackager(ABC):
    """Abstract base class for packaging strategies."""

    @abstractmethod
    def package(self, session_dir: Path) -> bytes:
        """Bundle every image in a session directory.

        Args:
            session_dir: Directory holding the generated images.

        Returns:
            The archive contents.

        Raises:
            FileNotFoundError: If the session directory does not exist.
        """
        ...

    @abstractmethod
    def write_report(self, artifacts: list[Any], report_path: Path) -> Path:
        """Write the per-row report.

        Args:
            artifacts: GeneratedArtifact objects in row order.
            report_path: Destination path.

        Returns:
            The path of the written report.
        """
        ...

    @property
    @abstractmethod
    def media_type(self) -> str:
        """Return the archive media type."""
