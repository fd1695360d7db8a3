"""Concrete tabular parser implementations."""

from docgen.strategies.parsers.csv_parser import CsvTableParser
from docgen.strategies.parsers.excel import XlsTableParser, XlsxTableParser

__all__ = [
    "CsvTableParser",
    "XlsTableParser",
    "XlsxTableParser",
]
