"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
Batch and single-generation results are returned as the domain models.
"""

import uuid

from pydantic import BaseModel, EmailStr, Field

from docgen.template_engine.models import (
    BatchResult,
    EmailResult,
    OutputKind,
    SingleGenerationResult,
    StoredDocument,
)

__all__ = [
    "BatchResult",
    "DocumentListResponse",
    "EmailResult",
    "ErrorResponse",
    "GenerateDocumentRequest",
    "PreviewRequest",
    "PreviewResponse",
    "SendEmailRequest",
    "SingleGenerationResult",
    "StoredDocument",
]


# =============================================================================
# Document Schemas
# =============================================================================


class GenerateDocumentRequest(BaseModel):
    """Request schema for generating a single document."""

    template_id: uuid.UUID = Field(description="Template to fill")
    recipient_name: str = Field(min_length=1, max_length=255)
    recipient_email: EmailStr | None = Field(default=None)
    placeholder_values: dict[str, str] = Field(default_factory=dict)
    file_type: OutputKind | None = Field(
        default=None, description="Output format. Defaults to the configured kind."
    )
    send_email: bool = Field(default=False)


class PreviewRequest(BaseModel):
    """Request schema for a substitution-only preview."""

    template_id: uuid.UUID
    placeholder_values: dict[str, str] = Field(default_factory=dict)


class PreviewResponse(BaseModel):
    """Template body with placeholders substituted."""

    content: str


class SendEmailRequest(BaseModel):
    """Request schema for emailing a stored document."""

    recipient_email: EmailStr | None = Field(
        default=None, description="Address to send to. Defaults to the recorded recipient."
    )


class DocumentListResponse(BaseModel):
    """Response for listing generated documents."""

    documents: list[StoredDocument]
    total: int
    page: int = 1
    page_size: int = 10


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
    error_code: str | None = Field(default=None, description="Application-specific error code")
    errors: list[str] | None = Field(default=None, description="Validation messages")
    missing_placeholders: list[str] | None = Field(
        default=None, description="Required placeholders without a value"
    )
