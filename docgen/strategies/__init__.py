"""Concrete strategy implementations."""

from docgen.strategies.dispatchers import (
    LogDispatcher,
    SmtpDispatcher,
)
from docgen.strategies.parsers import (
    CsvTableParser,
    XlsTableParser,
    XlsxTableParser,
)
from docgen.strategies.renderers import (
    DocxRenderer,
    PdfRenderer,
)

__all__ = [
    "LogDispatcher",
    "SmtpDispatcher",
    "CsvTableParser",
    "XlsTableParser",
    "XlsxTableParser",
    "DocxRenderer",
    "PdfRenderer",
]
