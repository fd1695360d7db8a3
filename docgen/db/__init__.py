"""Database models, session management and stores."""

from docgen.db.models import (
    DocumentStatus,
    GeneratedDocumentRecord,
    TemplateRecord,
)
from docgen.db.session import (
    AsyncSession,
    close_db,
    create_all_tables,
    get_async_session,
    init_db,
)
from docgen.db.stores import SqlDocumentStore, SqlTemplateStore

__all__ = [
    # Models
    "DocumentStatus",
    "GeneratedDocumentRecord",
    "TemplateRecord",
    # Session
    "AsyncSession",
    "close_db",
    "create_all_tables",
    "get_async_session",
    "init_db",
    # Stores
    "SqlDocumentStore",
    "SqlTemplateStore",
]
