"""Database models using SQLModel.

Defines the persisted records of the document generation platform:
- TemplateRecord: Template blueprints managed outside the generation pipeline
- GeneratedDocumentRecord: One row per generated file with delivery status
"""

import datetime
import uuid
from typing import Any

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Uuid
from sqlmodel import Field, SQLModel

from docgen.template_engine.models import (
    DocumentStatus,
    OutputKind,
    PlaceholderSpec,
    Template,
    TemplateCategory,
)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


# =============================================================================
# Shared Models (for API responses, not database tables)
# =============================================================================


class TemplateBase(SQLModel):
    """Base template fields."""

    name: str = Field(min_length=1, max_length=255)
    category: TemplateCategory = Field(default=TemplateCategory.GENERAL)
    body_text: str = Field(default="")
    is_active: bool = Field(default=True)
    docx_template_path: str | None = Field(default=None, max_length=1024)


class GeneratedDocumentBase(SQLModel):
    """Base generated document fields."""

    recipient_name: str = Field(max_length=255)
    recipient_email: str | None = Field(default=None, max_length=255)
    file_name: str = Field(max_length=512)
    file_path: str = Field(max_length=1024)
    file_type: OutputKind = Field(default=OutputKind.PDF)
    file_size: int | None = Field(default=None, ge=0)
    artifact_key: str = Field(max_length=128, index=True)
    status: DocumentStatus = Field(default=DocumentStatus.GENERATED)
    email_sent: bool = Field(default=False)
    email_error: str | None = Field(default=None, max_length=2048)
    batch_id: str | None = Field(default=None, max_length=64, index=True)
    row_index: int | None = Field(default=None, ge=1)
    generated_by: str | None = Field(default=None, max_length=255)


# =============================================================================
# Database Models
# =============================================================================


class TemplateRecord(TemplateBase, table=True):
    """Stored template.

    The placeholder schema is kept as a JSON list of
    {"name", "value_type", "required"} objects.
    """

    __tablename__ = "templates"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True),
    )
    placeholders: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    created_at: datetime.datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime.datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, onupdate=_utcnow),
    )

    def to_template(self) -> Template:
        """Convert to the domain model consumed by the generation pipeline."""
        return Template(
            id=self.id,
            name=self.name,
            category=TemplateCategory.coerce(self.category),
            body_text=self.body_text,
            placeholder_schema=[PlaceholderSpec.model_validate(p) for p in self.placeholders or []],
            active=self.is_active,
            docx_template_path=self.docx_template_path,
        )


class GeneratedDocumentRecord(GeneratedDocumentBase, table=True):
    """A generated document and its delivery status."""

    __tablename__ = "generated_documents"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True),
    )
    template_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid(as_uuid=True),
            ForeignKey("templates.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    placeholder_values: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
    email_sent_at: datetime.datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    created_at: datetime.datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
