"""Delimited-text table reader.

Reads the product sheet that drives a banner batch: a header row followed
by one row per banner.
"""

import asyncio
import csv
import io
import logging
from pathlib import Path

from bannergen.interfaces.reader import BaseTableReader, Row, TableReadError

logger = logging.getLogger(__name__)


class CsvTableReader(BaseTableReader):
    """Reader for comma (or otherwise) delimited files.

    Column names are stripped, missing cells become empty strings and rows
    with no content at all are skipped.
    """

    def __init__(
        self,
        delimiter: str = ",",
        encoding: str = "utf-8-sig",
    ) -> None:
        """Initialize the CSV reader.

        Args:
            delimiter: Field separator.
            encoding: File encoding; the default tolerates a UTF-8 BOM.
        """
        self._delimiter = delimiter
        self._encoding = encoding

    async def aload_rows(self, file_path: str) -> list[Row]:
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        logger.info(f"Reading table: {file_path}")

        try:
            text = await asyncio.to_thread(path.read_text, encoding=self._encoding)
        except UnicodeDecodeError as e:
            logger.error(f"Encoding error reading {file_path}: {e}")
            raise TableReadError(f"{path.name} is not valid {self._encoding} text") from e

        rows = self.parse(text)
        logger.info(f"Read {len(rows)} row(s) from {path.name}")
        return rows

    def parse(self, text: str) -> list[Row]:
        text = text.lstrip("\ufeff")
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=self._delimiter)

        try:
            header: list[str] | None = None
            rows: list[Row] = []
            for record in reader:
                if not any(cell.strip() for cell in record):
                    continue
                if header is None:
                    header = [name.strip() for name in record]
                    continue
                cells = record + [""] * (len(header) - len(record))
                rows.append(
                    {name: cells[i] for i, name in enumerate(header) if name}
                )
        except csv.Error as e:
            raise TableReadError(f"Malformed table at line {reader.line_num}: {e}") from e

        if header is None:
            logger.warning("Table has no header row")
        return rows

    @property
    def supported_extensions(self) -> set[str]:
        return {".csv", ".tsv", ".txt"}
