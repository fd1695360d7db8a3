"""Sample data files describing a template's expected columns."""

import csv
import io
from collections.abc import Sequence

from docgen.template_engine.models import PlaceholderSpec, ValueType

_SAMPLE_VALUES = {
    ValueType.EMAIL: "example@company.com",
    ValueType.DATE: "2024-01-01",
    ValueType.NUMBER: "123",
}


def sample_value(spec: PlaceholderSpec) -> str:
    return _SAMPLE_VALUES.get(spec.value_type, f"Sample {spec.name}")


def build_sample_csv(schema: Sequence[PlaceholderSpec]) -> str:
    """Render a header row of placeholder names plus one example row.

    Every field is quoted so the file opens cleanly in spreadsheet tools.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([spec.name for spec in schema])
    writer.writerow([sample_value(spec) for spec in schema])
    return buffer.getvalue()
