"""Template engine domain models.

Pydantic models for templates, their placeholder schema, and the
validation and batch summaries produced while generating documents.
Template sources are plain dataclasses because renderers pattern-match on them.
"""

import datetime
import enum
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field


class TemplateCategory(str, enum.Enum):
    """Document type of a template. Used only to pick a visual theme."""

    OFFER_LETTER = "offer_letter"
    APPOINTMENT_LETTER = "appointment_letter"
    EXPERIENCE_LETTER = "experience_letter"
    CERTIFICATE = "certificate"
    GENERAL = "general"

    @classmethod
    def coerce(cls, value: "str | TemplateCategory | None") -> "TemplateCategory":
        """Map a free-form category label onto a known category.

        Accepts dashed, spaced or mixed-case spellings ("Offer-Letter").
        Anything unrecognized becomes GENERAL.
        """
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(normalized)
        except ValueError:
            return cls.GENERAL


class ValueType(str, enum.Enum):
    """Type constraint on a placeholder value."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    EMAIL = "email"


class OutputKind(str, enum.Enum):
    """Rendered output format."""

    PDF = "pdf"
    DOCX = "docx"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]


_MIME_TYPES = {
    OutputKind.PDF: "application/pdf",
    OutputKind.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class DocumentStatus(str, enum.Enum):
    """Lifecycle of a generated document.

    GENERATED -> SENT
         |
         v
       FAILED (email delivery failed)
    """

    GENERATED = "generated"
    SENT = "sent"
    FAILED = "failed"


# =============================================================================
# Template Sources
# =============================================================================


@dataclass(frozen=True)
class PlainTextSource:
    """Template content held as text with {{placeholder}} tokens."""

    body: str


@dataclass(frozen=True)
class MergeDocumentSource:
    """An uploaded .docx carrying merge fields.

    Attributes:
        path: Location of the uploaded Word file.
        fallback_body: Plain body used by backends that cannot merge (PDF).
    """

    path: Path
    fallback_body: str = ""


TemplateSource = PlainTextSource | MergeDocumentSource


# =============================================================================
# Templates
# =============================================================================


class PlaceholderSpec(BaseModel):
    """One entry of a template's placeholder schema."""

    name: str = Field(min_length=1, description="Placeholder name, addressable as {{name}}")
    value_type: ValueType = Field(default=ValueType.TEXT)
    required: bool = Field(default=True)
    description: str | None = None


class Template(BaseModel):
    """A named document blueprint. Read-only for the generation pipeline."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = Field(min_length=1, max_length=255)
    category: TemplateCategory = Field(default=TemplateCategory.GENERAL)
    body_text: str = Field(default="")
    placeholder_schema: list[PlaceholderSpec] = Field(default_factory=list)
    active: bool = Field(default=True)
    docx_template_path: str | None = Field(
        default=None, description="Uploaded .docx used for merge-field rendering"
    )

    model_config = {"from_attributes": True}

    @property
    def source(self) -> TemplateSource:
        """The content source renderers should consume."""
        if self.docx_template_path:
            return MergeDocumentSource(
                path=Path(self.docx_template_path),
                fallback_body=self.body_text,
            )
        return PlainTextSource(body=self.body_text)

    @property
    def required_fields(self) -> list[str]:
        return [spec.name for spec in self.placeholder_schema if spec.required]


# =============================================================================
# Validation and Batch Results
# =============================================================================


class BatchValidationResult(BaseModel):
    """Outcome of checking a parsed dataset against a placeholder schema.

    Batch errors (empty data, missing required columns) reject the whole
    upload. Row errors are keyed by 1-based row index and only block the
    rows they name.
    """

    batch_errors: list[str] = Field(default_factory=list)
    row_errors: dict[int, list[str]] = Field(default_factory=dict)
    available_columns: list[str] = Field(default_factory=list)
    total_rows: int = 0

    @computed_field
    @property
    def errors(self) -> list[str]:
        ordered = list(self.batch_errors)
        for index in sorted(self.row_errors):
            ordered.extend(self.row_errors[index])
        return ordered

    @computed_field
    @property
    def is_valid(self) -> bool:
        return not self.batch_errors and not any(self.row_errors.values())

    @computed_field
    @property
    def accepted(self) -> bool:
        """Whether the batch may proceed to generation."""
        return not self.batch_errors

    @computed_field
    @property
    def valid_row_count(self) -> int:
        if self.batch_errors:
            return 0
        return self.total_rows - sum(1 for messages in self.row_errors.values() if messages)

    def errors_for_row(self, index: int) -> list[str]:
        return self.row_errors.get(index, [])


class DocumentEntry(BaseModel):
    """A successfully generated and recorded document within a batch."""

    record_index: int
    recipient_name: str
    recipient_email: str | None = None
    file_name: str
    file_ref: str = Field(description="Identifier of the stored document record")
    artifact_key: str


class RowFailure(BaseModel):
    """A row that produced no document."""

    record_index: int
    recipient_name: str
    error_message: str


class EmailResult(BaseModel):
    """Outcome of dispatching one generated document."""

    recipient_email: str
    success: bool
    message_id: str | None = None
    error: str | None = None


class BatchResult(BaseModel):
    """Aggregate outcome of one bulk generation run."""

    batch_id: str
    total_records: int = 0
    success_count: int = 0
    failure_count: int = 0
    documents: list[DocumentEntry] = Field(default_factory=list)
    errors: list[RowFailure] = Field(default_factory=list)
    email_results: list[EmailResult] = Field(default_factory=list)


class SingleGenerationResult(BaseModel):
    """Outcome of generating one document from form values."""

    document_id: str
    file_name: str
    output_kind: OutputKind
    recipient_name: str
    recipient_email: str | None = None
    email_sent: bool = False
    email_error: str | None = None


class StoredDocument(BaseModel):
    """A recorded document with its delivery status."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    template_id: uuid.UUID
    recipient_name: str
    recipient_email: str | None = None
    file_name: str
    file_type: OutputKind
    file_size: int | None = None
    status: DocumentStatus = DocumentStatus.GENERATED
    email_sent: bool = False
    email_sent_at: datetime.datetime | None = None
    email_error: str | None = None
    batch_id: str | None = None
    row_index: int | None = None
    generated_by: str | None = None
    placeholder_values: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime.datetime
