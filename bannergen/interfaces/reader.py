"""Abstract base class for tabular input readers.

The Strategy Pattern allows different tabular formats to feed the
banner pipeline interchangeably.
"""

from abc import ABC, abstractmethod
from pathlib import Path

Row = dict[str, str]


class BaseTableReader(ABC):
    """Abstract base class for tabular input strategies.

    All concrete reader implementations must inherit from this class
    and implement the `aload_rows` and `parse` methods.

    Example:
        ```python
        class CsvTableReader(BaseTableReader):
            async def aload_rows(self, file_path: str) -> list[Row]:
                # Implementation here
                pass
        ```
    """

    @abstractmethod
    async def aload_rows(self, file_path: str) -> list[Row]:
        """Asynchronously read a tabular file.

        Args:
            file_path: The path to the file to read.

        Returns:
            Rows as mappings from column name to string value, in file order.

        Raises:
            FileNotFoundError: If the file does not exist.
            TableReadError: If the file cannot be decoded or parsed.
        """
        ...

    @abstractmethod
    def parse(self, text: str) -> list[Row]:
        """Parse already-decoded tabular text.

        Args:
            text: Delimited text whose first line is the header.

        Returns:
            Rows as mappings from column name to string value.
        """
        ...

    @property
    @abstractmethod
    def supported_extensions(self) -> set[str]:
        """Return the set of file extensions supported by this reader.

        Returns:
            A set of file extensions (e.g., {'.csv', '.tsv'}).
        """
        ...

    def supports_file(self, file_path: str) -> bool:
        """Check if this reader supports the given file.

        Args:
            file_path: The path to the file to check.

        Returns:
            True if the file extension is supported, False otherwise.
        """
        return Path(file_path).suffix.lower() in self.supported_extensions


class TableReadError(Exception):
    """Exception raised when tabular input cannot be read."""

    pass
