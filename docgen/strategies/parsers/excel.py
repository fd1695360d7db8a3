"""Spreadsheet parsers for .xlsx (openpyxl) and legacy .xls (xlrd) uploads.

Only the first worksheet is read. Row 1 is the header. Every cell is
converted to trimmed text before it reaches validation.
"""

import datetime
import io
import logging
from typing import Any

import openpyxl
import xlrd
from xlrd.biffh import XL_CELL_BOOLEAN, XL_CELL_DATE, XL_CELL_EMPTY, XL_CELL_ERROR
from xlrd.xldate import xldate_as_datetime

from docgen.interfaces.parser import BaseTabularParser, ParsedTable, ParseError

logger = logging.getLogger(__name__)


def stringify_cell(value: Any) -> str:
    """Convert a spreadsheet cell value to the text a user would see.

    Whole-number floats lose their ".0", midnight datetimes become dates,
    and booleans use spreadsheet spelling.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime.datetime):
        if value.time() == datetime.time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value).strip()


class XlsxTableParser(BaseTabularParser):
    """Parser for Office Open XML workbooks."""

    async def parse(self, content: bytes) -> ParsedTable:
        """Parse the first worksheet of an .xlsx workbook.

        Raises:
            ParseError: If the workbook is unreadable or the sheet is empty.
        """
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        except Exception as e:
            logger.error(f"Failed to open workbook: {e}")
            raise ParseError(f"Unreadable spreadsheet: {e}") from e

        try:
            if not workbook.worksheets:
                raise ParseError("Spreadsheet contains no worksheets")
            sheet = workbook.worksheets[0]
            rows = [
                [stringify_cell(cell) for cell in row]
                for row in sheet.iter_rows(values_only=True)
            ]
        except ParseError:
            raise
        except Exception as e:
            logger.error(f"Failed to read worksheet: {e}")
            raise ParseError(f"Unreadable spreadsheet: {e}") from e
        finally:
            workbook.close()

        return self._table_from_rows(rows)

    def _table_from_rows(self, rows: list[list[str]]) -> ParsedTable:
        if not rows or not any(rows[0]):
            raise ParseError("Spreadsheet is empty")

        table = self._build_table(rows[0], rows[1:])
        logger.info(f"Parsed spreadsheet: {len(table.columns)} columns, {len(table.rows)} rows")
        return table

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".xlsx"}


class XlsTableParser(XlsxTableParser):
    """Parser for legacy binary Excel workbooks."""

    async def parse(self, content: bytes) -> ParsedTable:
        """Parse the first sheet of an .xls workbook.

        Raises:
            ParseError: If the workbook is unreadable or the sheet is empty.
        """
        try:
            book = xlrd.open_workbook(file_contents=content)
        except Exception as e:
            logger.error(f"Failed to open legacy workbook: {e}")
            raise ParseError(f"Unreadable spreadsheet: {e}") from e

        try:
            if book.nsheets == 0:
                raise ParseError("Spreadsheet contains no worksheets")
            sheet = book.sheet_by_index(0)
            rows = [
                [self._cell_value(cell, book.datemode) for cell in sheet.row(index)]
                for index in range(sheet.nrows)
            ]
        except ParseError:
            raise
        except Exception as e:
            logger.error(f"Failed to read legacy worksheet: {e}")
            raise ParseError(f"Unreadable spreadsheet: {e}") from e
        finally:
            book.release_resources()

        return self._table_from_rows(rows)

    @staticmethod
    def _cell_value(cell: xlrd.sheet.Cell, datemode: int) -> str:
        if cell.ctype in (XL_CELL_EMPTY, XL_CELL_ERROR):
            return ""
        if cell.ctype == XL_CELL_DATE:
            return stringify_cell(xldate_as_datetime(cell.value, datemode))
        if cell.ctype == XL_CELL_BOOLEAN:
            return stringify_cell(bool(cell.value))
        return stringify_cell(cell.value)

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".xls"}
