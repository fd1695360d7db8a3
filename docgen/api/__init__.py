"""FastAPI routers and dependencies."""

from docgen.api.deps import get_db, get_document_service, get_requesting_user, get_sender_name
from docgen.api.documents import router as documents_router
from docgen.api.templates import router as templates_router

__all__ = [
    "get_db",
    "get_document_service",
    "get_requesting_user",
    "get_sender_name",
    "documents_router",
    "templates_router",
]
