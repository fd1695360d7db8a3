"""SQL implementations of the template and document stores."""

import datetime
import logging
import uuid
from pathlib import Path

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docgen.db.models import DocumentStatus, GeneratedDocumentRecord, TemplateRecord
from docgen.interfaces.renderer import GeneratedDocument
from docgen.interfaces.store import (
    BaseDocumentStore,
    BaseTemplateStore,
    DocumentMetadata,
    DocumentQuery,
    TemplateNotFoundError,
)
from docgen.template_engine.models import OutputKind, StoredDocument, Template

logger = logging.getLogger(__name__)


def _as_uuid(value: uuid.UUID | str) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class SqlTemplateStore(BaseTemplateStore):
    """Reads templates from the `templates` table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_template(self, template_id: uuid.UUID | str) -> Template:
        """Fetch an active template.

        Raises:
            TemplateNotFoundError: If the id is unknown, malformed or inactive.
        """
        key = _as_uuid(template_id)
        record = await self._session.get(TemplateRecord, key) if key else None

        if record is None or not record.is_active:
            logger.warning(f"Template not found or inactive: {template_id}")
            raise TemplateNotFoundError(template_id)

        return record.to_template()


class SqlDocumentStore(BaseDocumentStore):
    """Records generated documents in the `generated_documents` table.

    Each write commits immediately so a later failing row cannot roll
    back documents that were already reported as generated.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save_document(self, document: GeneratedDocument, metadata: DocumentMetadata) -> str:
        record = GeneratedDocumentRecord(
            template_id=metadata.template_id,
            recipient_name=metadata.recipient_name,
            recipient_email=metadata.recipient_email,
            file_name=document.file_name,
            file_path=str(document.file_path),
            file_type=document.output_kind,
            file_size=document.size_bytes,
            artifact_key=document.artifact_key,
            placeholder_values=dict(metadata.values),
            generated_by=metadata.generated_by,
            batch_id=metadata.batch_id,
            row_index=metadata.row_index,
        )
        try:
            self._session.add(record)
            await self._session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save document {document.file_name}: {e}", exc_info=True)
            await self._session.rollback()
            raise

        return str(record.id)

    async def get_record(self, record_id: uuid.UUID | str) -> GeneratedDocumentRecord | None:
        key = _as_uuid(record_id)
        if key is None:
            return None
        return await self._session.get(GeneratedDocumentRecord, key)

    async def get_document(self, record_id: uuid.UUID | str) -> GeneratedDocument | None:
        record = await self.get_record(record_id)
        if record is None:
            return None
        return GeneratedDocument(
            file_name=record.file_name,
            file_path=Path(record.file_path),
            output_kind=OutputKind(record.file_type),
            artifact_key=record.artifact_key,
            size_bytes=record.file_size or 0,
        )

    async def find_document(self, record_id: uuid.UUID | str) -> StoredDocument | None:
        record = await self.get_record(record_id)
        return StoredDocument.model_validate(record) if record else None

    async def list_documents(self, query: DocumentQuery) -> tuple[list[StoredDocument], int]:
        statement = select(GeneratedDocumentRecord)

        if query.template_id:
            statement = statement.where(GeneratedDocumentRecord.template_id == query.template_id)
        if query.batch_id:
            statement = statement.where(GeneratedDocumentRecord.batch_id == query.batch_id)
        if query.recipient_email:
            statement = statement.where(
                GeneratedDocumentRecord.recipient_email.ilike(f"%{query.recipient_email}%")
            )
        if query.generated_by:
            statement = statement.where(GeneratedDocumentRecord.generated_by == query.generated_by)
        if query.status:
            statement = statement.where(GeneratedDocumentRecord.status == query.status)

        count_result = await self._session.execute(
            select(func.count()).select_from(statement.subquery())
        )
        total = count_result.scalar_one() or 0

        statement = (
            statement.order_by(GeneratedDocumentRecord.created_at.desc())
            .offset(query.offset)
            .limit(query.page_size)
        )
        result = await self._session.execute(statement)
        records = result.scalars().all()

        return [StoredDocument.model_validate(record) for record in records], total

    async def mark_sent(self, record_id: str, recipient_email: str | None = None) -> None:
        changes = {}
        if recipient_email:
            changes["recipient_email"] = recipient_email
        await self._update(
            record_id,
            status=DocumentStatus.SENT,
            email_sent=True,
            email_sent_at=datetime.datetime.now(datetime.timezone.utc),
            email_error=None,
            **changes,
        )

    async def mark_failed(self, record_id: str, error: str) -> None:
        await self._update(record_id, status=DocumentStatus.FAILED, email_error=error[:2048])

    async def _update(self, record_id: str, **changes) -> None:
        record = await self.get_record(record_id)
        if record is None:
            logger.warning(f"Generated document not found: {record_id}")
            return

        for field_name, value in changes.items():
            setattr(record, field_name, value)

        try:
            self._session.add(record)
            await self._session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to update document {record_id}: {e}", exc_info=True)
            await self._session.rollback()
            raise
