"""Unit tests for the spreadsheet parsers."""

import asyncio
import datetime
import io
from unittest.mock import MagicMock, patch

import openpyxl
import pytest
import xlrd
from xlrd.biffh import (
    XL_CELL_BOOLEAN,
    XL_CELL_DATE,
    XL_CELL_EMPTY,
    XL_CELL_ERROR,
    XL_CELL_NUMBER,
    XL_CELL_TEXT,
)
from xlrd.sheet import Cell

from docgen.interfaces.parser import ParseError
from docgen.strategies.parsers import XlsTableParser, XlsxTableParser
from docgen.strategies.parsers.excel import stringify_cell


def workbook_bytes(*sheets: list[list]) -> bytes:
    """Build an .xlsx file in memory, one worksheet per row list."""
    workbook = openpyxl.Workbook()
    first = workbook.active
    for position, rows in enumerate(sheets):
        sheet = first if position == 0 else workbook.create_sheet(f"Sheet{position + 1}")
        for row in rows:
            sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


# =============================================================================
# Cell conversion
# =============================================================================


class TestStringifyCell:
    """Test suite for stringify_cell."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            (True, "TRUE"),
            (False, "FALSE"),
            (55000.0, "55000"),
            (12.5, "12.5"),
            (7, "7"),
            ("  Bob ", "Bob"),
            (datetime.datetime(2024, 1, 15), "2024-01-15"),
            (datetime.datetime(2024, 1, 15, 9, 30), "2024-01-15 09:30:00"),
            (datetime.date(2024, 3, 1), "2024-03-01"),
        ],
    )
    def test_conversion(self, value, expected):
        assert stringify_cell(value) == expected


# =============================================================================
# .xlsx
# =============================================================================


class TestXlsxTableParser:
    """Test suite for XlsxTableParser."""

    def test_reads_first_sheet(self):
        """Test that row 1 is the header and later sheets are ignored."""
        content = workbook_bytes(
            [["name", "salary", "start_date"], ["Bob", 55000, datetime.datetime(2024, 1, 15)]],
            [["other"], ["ignored"]],
        )

        table = asyncio.run(XlsxTableParser().parse(content))

        assert table.columns == ("name", "salary", "start_date")
        assert len(table) == 1
        assert dict(table.rows[0]) == {
            "name": "Bob",
            "salary": "55000",
            "start_date": "2024-01-15",
        }

    def test_empty_rows_are_skipped(self):
        content = workbook_bytes(
            [["name", "company"], ["Bob", "Acme"], [None, None], ["Ann", None]],
        )

        table = asyncio.run(XlsxTableParser().parse(content))

        assert [row.index for row in table.rows] == [1, 2]
        assert dict(table.rows[1]) == {"name": "Ann", "company": ""}

    def test_empty_workbook_fails(self):
        """Test that a worksheet without a header is rejected."""
        with pytest.raises(ParseError, match="empty"):
            asyncio.run(XlsxTableParser().parse(workbook_bytes([])))

    def test_garbage_bytes_fail(self):
        with pytest.raises(ParseError, match="Unreadable spreadsheet"):
            asyncio.run(XlsxTableParser().parse(b"this is not a workbook"))

    def test_supported_extensions(self):
        assert XlsxTableParser().supports_file("data.xlsx")
        assert not XlsxTableParser().supports_file("data.xls")


# =============================================================================
# .xls
# =============================================================================


OPEN_WORKBOOK = "docgen.strategies.parsers.excel.xlrd.open_workbook"


def fake_book(rows: list[list[Cell]], nsheets: int = 1, datemode: int = 0) -> MagicMock:
    """Stand-in for an xlrd Book whose first sheet holds the given cells."""
    sheet = MagicMock()
    sheet.nrows = len(rows)
    sheet.row.side_effect = lambda index: rows[index]

    book = MagicMock()
    book.nsheets = nsheets
    book.datemode = datemode
    book.sheet_by_index.return_value = sheet
    return book


def text(value: str) -> Cell:
    return Cell(XL_CELL_TEXT, value)


EMPTY = Cell(XL_CELL_EMPTY, "")


class TestXlsTableParser:
    """Test suite for XlsTableParser."""

    def test_reads_first_sheet(self):
        """Test that typed legacy cells become the text a user would see."""
        book = fake_book(
            [
                [text("name"), text("salary"), text("start_date"), text("active"), text("bonus")],
                [
                    text("  Bob "),
                    Cell(XL_CELL_NUMBER, 55000.0),
                    Cell(XL_CELL_DATE, 45306.0),
                    Cell(XL_CELL_BOOLEAN, 1),
                    Cell(XL_CELL_ERROR, 0x07),
                ],
                [EMPTY, EMPTY, EMPTY, EMPTY, EMPTY],
                [
                    text("Ann"),
                    Cell(XL_CELL_NUMBER, 1250.5),
                    Cell(XL_CELL_DATE, 45306.375),
                    Cell(XL_CELL_BOOLEAN, 0),
                    EMPTY,
                ],
            ]
        )

        with patch(OPEN_WORKBOOK, return_value=book) as open_workbook:
            table = asyncio.run(XlsTableParser().parse(b"legacy workbook"))

        open_workbook.assert_called_once_with(file_contents=b"legacy workbook")
        book.sheet_by_index.assert_called_once_with(0)
        book.release_resources.assert_called_once()
        assert table.columns == ("name", "salary", "start_date", "active", "bonus")
        assert [row.index for row in table.rows] == [1, 2]
        assert dict(table.rows[0]) == {
            "name": "Bob",
            "salary": "55000",
            "start_date": "2024-01-15",
            "active": "TRUE",
            "bonus": "",
        }
        assert dict(table.rows[1]) == {
            "name": "Ann",
            "salary": "1250.5",
            "start_date": "2024-01-15 09:00:00",
            "active": "FALSE",
            "bonus": "",
        }

    def test_dates_follow_the_workbook_datemode(self):
        """Test that 1904-based workbooks shift date serials accordingly."""
        book = fake_book([[text("joined")], [Cell(XL_CELL_DATE, 0.0)]], datemode=1)

        with patch(OPEN_WORKBOOK, return_value=book):
            table = asyncio.run(XlsTableParser().parse(b"legacy workbook"))

        assert dict(table.rows[0]) == {"joined": "1904-01-01"}

    def test_empty_sheet_fails(self):
        book = fake_book([[EMPTY, EMPTY]])

        with patch(OPEN_WORKBOOK, return_value=book):
            with pytest.raises(ParseError, match="empty"):
                asyncio.run(XlsTableParser().parse(b"legacy workbook"))

    def test_workbook_without_sheets_fails(self):
        book = fake_book([], nsheets=0)

        with patch(OPEN_WORKBOOK, return_value=book):
            with pytest.raises(ParseError, match="no worksheets"):
                asyncio.run(XlsTableParser().parse(b"legacy workbook"))

        book.release_resources.assert_called_once()

    def test_unreadable_sheet_fails(self):
        book = fake_book([[text("name")]])
        book.sheet_by_index.side_effect = xlrd.XLRDError("corrupt sheet")

        with patch(OPEN_WORKBOOK, return_value=book):
            with pytest.raises(ParseError, match="corrupt sheet"):
                asyncio.run(XlsTableParser().parse(b"legacy workbook"))

        book.release_resources.assert_called_once()

    def test_garbage_bytes_fail(self):
        with pytest.raises(ParseError, match="Unreadable spreadsheet"):
            asyncio.run(XlsTableParser().parse(b"not a legacy workbook at all"))

    def test_supported_extensions(self):
        parser = XlsTableParser()
        assert parser.supports_file("DATA.XLS")
        assert not parser.supports_file("data.xlsx")
