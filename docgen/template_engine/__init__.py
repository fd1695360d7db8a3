"""Template engine.

Placeholder schema models, {{placeholder}} substitution, and row validation.
"""

from docgen.template_engine.models import (
    BatchResult,
    BatchValidationResult,
    MergeDocumentSource,
    OutputKind,
    PlaceholderSpec,
    PlainTextSource,
    Template,
    TemplateCategory,
    TemplateSource,
    ValueType,
)
from docgen.template_engine.substitution import find_placeholders, substitute
from docgen.template_engine.validator import (
    MissingPlaceholdersError,
    RowValidationError,
    SchemaValidationError,
    validate_rows,
)

__all__ = [
    "BatchResult",
    "BatchValidationResult",
    "MergeDocumentSource",
    "OutputKind",
    "PlaceholderSpec",
    "PlainTextSource",
    "Template",
    "TemplateCategory",
    "TemplateSource",
    "ValueType",
    "find_placeholders",
    "substitute",
    "MissingPlaceholdersError",
    "RowValidationError",
    "SchemaValidationError",
    "validate_rows",
]
