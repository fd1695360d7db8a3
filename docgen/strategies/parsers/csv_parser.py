"""CSV parser for bulk generation uploads."""

import csv
import io
import logging

from docgen.interfaces.parser import BaseTabularParser, ParsedTable, ParseError

logger = logging.getLogger(__name__)


class CsvTableParser(BaseTabularParser):
    """Parser for comma-separated files with a header row.

    Decodes as UTF-8 (a leading byte order mark is ignored). The first
    non-blank line is the header. Malformed quoting fails the whole file.
    """

    def __init__(self, encoding: str = "utf-8-sig", delimiter: str = ",") -> None:
        """Initialize the CSV parser.

        Args:
            encoding: Character encoding of the uploaded bytes.
            delimiter: Field separator.
        """
        self._encoding = encoding
        self._delimiter = delimiter

    async def parse(self, content: bytes) -> ParsedTable:
        """Parse CSV bytes into a table.

        Args:
            content: Raw CSV file content.

        Returns:
            A ParsedTable. Empty input yields an empty table.

        Raises:
            ParseError: If the bytes cannot be decoded or the CSV is malformed.
        """
        try:
            text = content.decode(self._encoding)
        except UnicodeDecodeError as e:
            logger.error(f"CSV decoding failed: {e}")
            raise ParseError(f"File is not valid {self._encoding} text: {e}") from e

        reader = csv.reader(io.StringIO(text, newline=""), delimiter=self._delimiter, strict=True)

        try:
            records = list(reader)
        except csv.Error as e:
            logger.error(f"Malformed CSV at line {reader.line_num}: {e}")
            raise ParseError(f"Malformed CSV at line {reader.line_num}: {e}") from e

        header_position = next(
            (i for i, record in enumerate(records) if any(cell.strip() for cell in record)),
            None,
        )
        if header_position is None:
            logger.info("CSV upload contained no data")
            return ParsedTable()

        table = self._build_table(records[header_position], records[header_position + 1 :])
        logger.info(f"Parsed CSV: {len(table.columns)} columns, {len(table.rows)} rows")
        return table

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".csv"}
