"""Document generation API routes.

Thin adapters over the document service. Domain errors are translated to
HTTP responses by the application's exception handlers.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse

from docgen.api.deps import get_document_service, get_requesting_user, get_sender_name
from docgen.api.schemas import (
    BatchResult,
    DocumentListResponse,
    EmailResult,
    GenerateDocumentRequest,
    PreviewRequest,
    PreviewResponse,
    SendEmailRequest,
    SingleGenerationResult,
    StoredDocument,
)
from docgen.core.config import Settings, get_settings
from docgen.interfaces.store import DocumentQuery
from docgen.services.documents import DocumentService
from docgen.services.intake import SUPPORTED_FORMATS, file_format
from docgen.template_engine.models import DocumentStatus, OutputKind

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


# =============================================================================
# Endpoints
# =============================================================================


@router.post(
    "/bulk-generate",
    response_model=BatchResult,
    status_code=status.HTTP_201_CREATED,
)
async def bulk_generate(
    file: UploadFile = File(..., description="CSV or Excel file, one row per document"),
    template_id: uuid.UUID = Form(...),
    file_type: OutputKind | None = Form(default=None),
    send_email: bool = Form(default=False),
    generated_by: str | None = Depends(get_requesting_user),
    sender_name: str | None = Depends(get_sender_name),
    service: DocumentService = Depends(get_document_service),
    settings: Settings = Depends(get_settings),
) -> BatchResult:
    """Generate one document per row of an uploaded spreadsheet.

    Partial failure is reported in the body: check `failure_count`,
    `errors` and `email_results`, not only the status code.

    Raises:
        HTTPException: If the upload type is unsupported or the file is too large.
    """
    upload_format = file_format(file.filename)
    if upload_format not in SUPPORTED_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV and Excel files (.csv, .xlsx, .xls) are supported",
        )

    content = await file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {settings.max_upload_bytes} byte upload limit",
        )

    logger.info(
        f"Bulk generation requested: template={template_id}, file={file.filename}, "
        f"size={len(content)}, output={file_type}, send_email={send_email}"
    )

    upload_path = service.intake.store_upload(file.filename or f"upload.{upload_format}", content)
    return await service.bulk_generate(
        template_id,
        upload_path,
        upload_format,
        output_kind=file_type,
        send_email=send_email,
        generated_by=generated_by,
        sender_name=sender_name,
    )


@router.post(
    "/generate",
    response_model=SingleGenerationResult,
    status_code=status.HTTP_201_CREATED,
)
async def generate_document(
    request: GenerateDocumentRequest,
    generated_by: str | None = Depends(get_requesting_user),
    sender_name: str | None = Depends(get_sender_name),
    service: DocumentService = Depends(get_document_service),
) -> SingleGenerationResult:
    """Generate a single document from submitted placeholder values."""
    return await service.generate_single(
        request.template_id,
        request.recipient_name,
        request.placeholder_values,
        recipient_email=request.recipient_email,
        output_kind=request.file_type,
        send_email=request.send_email,
        generated_by=generated_by,
        sender_name=sender_name,
    )


@router.post("/preview", response_model=PreviewResponse)
async def preview_document(
    request: PreviewRequest,
    service: DocumentService = Depends(get_document_service),
) -> PreviewResponse:
    """Show the template body with the given values substituted."""
    content = await service.preview(request.template_id, request.placeholder_values)
    return PreviewResponse(content=content)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    template_id: uuid.UUID | None = None,
    batch_id: str | None = None,
    recipient_email: str | None = Query(default=None, description="Case-insensitive substring match"),
    doc_status: DocumentStatus | None = Query(default=None, alias="status"),
    generated_by: str | None = None,
    service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    """List generated documents, newest first."""
    query = DocumentQuery(
        template_id=template_id,
        batch_id=batch_id,
        recipient_email=recipient_email,
        generated_by=generated_by,
        status=doc_status,
        page=page,
        page_size=limit,
    )
    documents, total = await service.list_documents(query)
    logger.info(f"Found {len(documents)} of {total} documents (page {page})")

    return DocumentListResponse(documents=documents, total=total, page=page, page_size=limit)


@router.get("/{document_id}", response_model=StoredDocument)
async def get_document(
    document_id: uuid.UUID,
    service: DocumentService = Depends(get_document_service),
) -> StoredDocument:
    """Get a generated document's record and delivery status."""
    return await service.get_document_detail(document_id)


@router.get("/{document_id}/download")
async def download_document(
    document_id: uuid.UUID,
    service: DocumentService = Depends(get_document_service),
) -> FileResponse:
    """Download a generated document with its exact content type.

    Raises:
        HTTPException: If the document record or its file does not exist.
    """
    document = await service.get_document(document_id)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found",
        )

    return FileResponse(
        path=document.file_path,
        media_type=document.mime_type,
        filename=document.file_name,
    )


@router.post("/{document_id}/send-email", response_model=EmailResult)
async def send_document_email(
    document_id: uuid.UUID,
    request: SendEmailRequest,
    sender_name: str | None = Depends(get_sender_name),
    service: DocumentService = Depends(get_document_service),
) -> EmailResult:
    """Email a generated document, to the recorded recipient unless another address is given.

    Raises:
        HTTPException: If neither the request nor the record has an address.
    """
    try:
        return await service.resend_email(
            document_id,
            recipient_email=request.recipient_email,
            sender_name=sender_name,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
