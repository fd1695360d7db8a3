"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- Database sessions
- The document service wired to SQL stores
- Requesting user context
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from docgen.core.config import Settings, get_settings
from docgen.core.factory import ComponentFactory, get_factory
from docgen.db.session import get_async_session
from docgen.db.stores import SqlDocumentStore, SqlTemplateStore
from docgen.services.documents import DocumentService

logger = logging.getLogger(__name__)


async def get_db(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Args:
        settings: Application settings.

    Yields:
        An async database session.
    """
    sessions = get_async_session(settings)
    try:
        session = await anext(sessions)
    except Exception as e:
        logger.error(f"Error getting database session: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database connection error",
        ) from e

    # Route errors must reach the application's exception handlers unchanged.
    try:
        yield session
    finally:
        await sessions.aclose()


async def get_document_service(
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    factory: ComponentFactory = Depends(get_factory),
) -> DocumentService:
    """Dependency for the document service bound to the request's session."""
    return DocumentService(
        template_store=SqlTemplateStore(session),
        document_store=SqlDocumentStore(session),
        settings=settings,
        factory=factory,
    )


async def get_requesting_user(
    x_user_id: str | None = Header(default=None, description="Id of the requesting user"),
) -> str | None:
    """Optional id of the user on whose behalf documents are generated."""
    return x_user_id.strip() if x_user_id and x_user_id.strip() else None


async def get_sender_name(
    x_user_name: str | None = Header(default=None, description="Display name for outgoing email"),
) -> str | None:
    return x_user_name.strip() if x_user_name and x_user_name.strip() else None
