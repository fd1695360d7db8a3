"""Template helper API routes."""

import logging
import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from docgen.api.deps import get_document_service
from docgen.services.documents import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("/{template_id}/sample-csv")
async def download_sample_csv(
    template_id: uuid.UUID,
    service: DocumentService = Depends(get_document_service),
) -> Response:
    """Sample data file with one column per placeholder and an example row."""
    content = await service.sample_csv(template_id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="template_{template_id}_sample.csv"'},
    )
