"""Tabular input strategies."""

from bannergen.strategies.readers.csv_reader import CsvTableReader

__all__ = ["CsvTableReader"]
