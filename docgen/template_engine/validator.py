"""Schema validation of parsed rows against a template's placeholder schema."""

import logging
import math
import re
from collections.abc import Mapping, Sequence

from dateutil import parser as date_parser

from docgen.template_engine.models import BatchValidationResult, PlaceholderSpec, ValueType

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class SchemaValidationError(Exception):
    """Raised when a dataset is rejected as a whole.

    Attributes:
        errors: Human-readable reasons, in report order.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Data validation failed")


class RowValidationError(Exception):
    """A single row failed value checks. The rest of the batch is unaffected."""

    def __init__(self, record_index: int, messages: list[str]) -> None:
        self.record_index = record_index
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class MissingPlaceholdersError(Exception):
    """Required placeholders have no value for a single-document request."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required placeholders: {', '.join(self.missing)}")


def is_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def is_date(value: str) -> bool:
    try:
        date_parser.parse(value)
    except (ValueError, OverflowError):
        return False
    return True


def is_number(value: str) -> bool:
    """Finite decimal or scientific notation. Digit separators are not accepted."""
    if "_" in value:
        return False
    try:
        number = float(value)
    except ValueError:
        return False
    return math.isfinite(number)


_TYPE_CHECKS = (
    (ValueType.EMAIL, "email", is_email),
    (ValueType.DATE, "date", is_date),
    (ValueType.NUMBER, "number", is_number),
)


def validate_row(
    row: Mapping[str, str],
    schema: Sequence[PlaceholderSpec],
    row_number: int,
) -> list[str]:
    """Check one row's values.

    Messages are ordered by check kind (required, email, date, number)
    and by schema declaration order within each kind.
    """
    messages: list[str] = []

    for spec in schema:
        if spec.required and not (row.get(spec.name) or "").strip():
            messages.append(
                f"Row {row_number}: Missing value for required field '{spec.name}'"
            )

    for value_type, label, check in _TYPE_CHECKS:
        for spec in schema:
            if spec.value_type != value_type:
                continue
            value = row.get(spec.name) or ""
            if value and not check(value):
                messages.append(
                    f"Row {row_number}: Invalid {label} format for '{spec.name}': {value}"
                )

    return messages


def validate_rows(
    rows: Sequence[Mapping[str, str]],
    schema: Sequence[PlaceholderSpec],
    columns: Sequence[str] | None = None,
) -> BatchValidationResult:
    """Validate a dataset before any document is generated.

    Args:
        rows: Parsed row records in input order.
        schema: The template's placeholder schema.
        columns: Column names declared by the parser. When omitted, the
            keys of the first row are used.

    Returns:
        A BatchValidationResult. Row checks only run when the batch
        itself is acceptable.
    """
    if columns is None:
        columns = list(rows[0].keys()) if rows else []
    available = list(columns)

    result = BatchValidationResult(available_columns=available, total_rows=len(rows))

    if not rows:
        result.batch_errors.append("No data found in file")
        return result

    available_set = set(available)
    missing_columns = [
        spec.name for spec in schema if spec.required and spec.name not in available_set
    ]
    if missing_columns:
        result.batch_errors.append(f"Missing required columns: {', '.join(missing_columns)}")
        return result

    for row_number, row in enumerate(rows, start=1):
        messages = validate_row(row, schema, row_number)
        if messages:
            result.row_errors[row_number] = messages

    logger.info(
        f"Validated {len(rows)} rows: {len(result.row_errors)} with errors, "
        f"{result.valid_row_count} valid"
    )
    return result


def missing_required_values(
    values: Mapping[str, str | None],
    schema: Sequence[PlaceholderSpec],
) -> list[str]:
    """Names of required placeholders with no usable value."""
    return [
        spec.name
        for spec in schema
        if spec.required and not str(values.get(spec.name) or "").strip()
    ]
