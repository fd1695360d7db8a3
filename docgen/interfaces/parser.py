"""Abstract base class for tabular data parsers.

The Strategy Pattern allows CSV and spreadsheet parsing
implementations to be interchangeable at runtime.
"""

import os
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


class ParseError(Exception):
    """Raised when an uploaded data file cannot be turned into rows."""


@dataclass(frozen=True)
class RowRecord(Mapping[str, str]):
    """One data row keyed by column header.

    Attributes:
        index: 1-based position among the parsed data rows.
        data: Trimmed string value per column.
    """

    index: int
    data: Mapping[str, str] = field(default_factory=dict)

    def __getitem__(self, key: str) -> str:
        return self.data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ParsedTable:
    """A parsed dataset with the column set declared by its header row.

    Attributes:
        columns: Column names in header order.
        rows: Row records in input order.
    """

    columns: tuple[str, ...] = ()
    rows: tuple[RowRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.rows)


class BaseTabularParser(ABC):
    """Abstract base class for tabular parsing strategies.

    Concrete parsers decode raw cells and hand them to `_build_table`,
    which applies the shared header and blank-row rules.

    Example:
        ```python
        class CsvTableParser(BaseTabularParser):
            async def parse(self, content: bytes) -> ParsedTable:
                # Implementation here
                pass
        ```
    """

    @abstractmethod
    async def parse(self, content: bytes) -> ParsedTable:
        """Parse raw file bytes into a table.

        Args:
            content: The uploaded file content.

        Returns:
            A ParsedTable with header columns and row records.

        Raises:
            ParseError: If the content is unreadable or structurally broken.
        """
        ...

    @property
    @abstractmethod
    def supported_extensions(self) -> set[str]:
        """Return the set of file extensions supported by this parser.

        Returns:
            A set of file extensions (e.g., {'.csv'}).
        """
        ...

    def supports_file(self, file_path: str) -> bool:
        """Check if this parser supports the given file.

        Args:
            file_path: The path to the file to check.

        Returns:
            True if the file extension is supported, False otherwise.
        """
        _, ext = os.path.splitext(file_path)
        return ext.lower() in self.supported_extensions

    @staticmethod
    def _cell_text(value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    def _build_table(
        self,
        header: Sequence[Any] | None,
        data_rows: Iterable[Sequence[Any]],
    ) -> ParsedTable:
        """Assemble a ParsedTable from a header row and raw data rows.

        Columns with an empty header are dropped. Rows whose cells are all
        empty are skipped. Short rows resolve missing cells to "".

        Raises:
            ParseError: If two columns share a header name.
        """
        if header is None:
            return ParsedTable()

        header_cells = [self._cell_text(cell) for cell in header]
        positions: list[tuple[int, str]] = []
        seen: set[str] = set()
        for position, name in enumerate(header_cells):
            if not name:
                continue
            if name in seen:
                raise ParseError(f"Duplicate column header: '{name}'")
            seen.add(name)
            positions.append((position, name))

        rows: list[RowRecord] = []
        for raw in data_rows:
            cells = [self._cell_text(cell) for cell in raw]
            if not any(cells):
                continue
            values = {
                name: cells[position] if position < len(cells) else ""
                for position, name in positions
            }
            rows.append(RowRecord(index=len(rows) + 1, data=values))

        return ParsedTable(
            columns=tuple(name for _, name in positions),
            rows=tuple(rows),
        )
