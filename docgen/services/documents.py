"""Document service: the use cases behind the HTTP surface.

Bulk generation runs parse, validate and orchestrate in sequence. A
dataset is rejected as a whole only for batch-level problems. Row-level
problems become failures of the rows they concern.
"""

import asyncio
import logging
import uuid
from collections.abc import Mapping
from pathlib import Path

from docgen.core.config import Settings, get_settings
from docgen.core.factory import ComponentFactory, get_factory
from docgen.interfaces.dispatcher import BaseDispatcher, DispatchError
from docgen.interfaces.parser import ParseError
from docgen.interfaces.renderer import GeneratedDocument
from docgen.interfaces.store import (
    BaseDocumentStore,
    BaseTemplateStore,
    DocumentMetadata,
    DocumentNotFoundError,
    DocumentQuery,
    TemplateNotFoundError,
)
from docgen.services.batch import BatchOrchestrator, update_delivery_status
from docgen.services.generator import DocumentGenerator
from docgen.services.intake import FileIntake
from docgen.template_engine.models import (
    BatchResult,
    EmailResult,
    OutputKind,
    SingleGenerationResult,
    StoredDocument,
)
from docgen.template_engine.sample import build_sample_csv
from docgen.template_engine.substitution import substitute
from docgen.template_engine.validator import (
    MissingPlaceholdersError,
    SchemaValidationError,
    missing_required_values,
    validate_rows,
)

logger = logging.getLogger(__name__)


class DocumentService:
    """Coordinates stores, parsers, the generator and dispatch.

    Args:
        template_store: Source of templates.
        document_store: Destination for generated document records.
        settings: Application settings. If None, uses global settings.
        factory: Strategy factory. If None, uses the global factory.
        generator: Document generator. Built from settings when omitted.
        intake: Upload storage. Built from settings when omitted.
        dispatcher: Email dispatcher. Resolved from the factory on first
            email request when omitted.
    """

    def __init__(
        self,
        template_store: BaseTemplateStore,
        document_store: BaseDocumentStore,
        settings: Settings | None = None,
        factory: ComponentFactory | None = None,
        generator: DocumentGenerator | None = None,
        intake: FileIntake | None = None,
        dispatcher: BaseDispatcher | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._factory = factory or get_factory()
        self._templates = template_store
        self._documents = document_store
        self._generator = generator or DocumentGenerator(self._settings, self._factory)
        self._intake = intake or FileIntake(self._settings)
        self._dispatcher = dispatcher

    @property
    def intake(self) -> FileIntake:
        return self._intake

    def _get_dispatcher(self) -> BaseDispatcher:
        if self._dispatcher is None:
            self._dispatcher = self._factory.get_dispatcher()
        return self._dispatcher

    def _output_kind(self, output_kind: OutputKind | str | None) -> OutputKind:
        requested = output_kind or self._settings.default_output_kind
        try:
            return OutputKind(requested)
        except ValueError as e:
            raise ValueError(f"Unknown output kind: {requested}. Valid options: 'pdf', 'docx'") from e

    async def bulk_generate(
        self,
        template_id: uuid.UUID | str,
        upload_path: Path | str,
        file_format: str,
        output_kind: OutputKind | str | None = None,
        send_email: bool = False,
        generated_by: str | None = None,
        sender_name: str | None = None,
    ) -> BatchResult:
        """Generate one document per row of an uploaded data file.

        The upload is removed afterwards whatever the outcome.

        Args:
            template_id: Template to fill.
            upload_path: Stored upload to read.
            file_format: "csv", "xlsx" or "xls".
            output_kind: PDF or DOCX. Defaults to the configured kind.
            send_email: Email each document to its row's address.
            generated_by: Optional id of the requesting user.
            sender_name: Display name for outgoing email.

        Returns:
            The BatchResult.

        Raises:
            TemplateNotFoundError: If the template is missing or inactive.
            ParseError: If the upload cannot be parsed.
            SchemaValidationError: If the dataset is empty or lacks required columns.
        """
        try:
            kind = self._output_kind(output_kind)
            template = await self._templates.get_template(template_id)
            parser = self._factory.get_parser(file_format)

            try:
                content = await asyncio.to_thread(Path(upload_path).read_bytes)
            except OSError as e:
                raise ParseError(f"Upload could not be read: {e}") from e

            table = await parser.parse(content)
            validation = validate_rows(table.rows, template.placeholder_schema, columns=table.columns)

            if not validation.accepted:
                logger.warning(
                    f"Rejected upload for template {template.name}: {validation.batch_errors}"
                )
                raise SchemaValidationError(validation.batch_errors)

            orchestrator = BatchOrchestrator(
                generator=self._generator,
                document_store=self._documents,
                dispatcher=self._get_dispatcher() if send_email else None,
                sender_name=self._settings.sender_name,
            )
            return await orchestrator.run_batch(
                template,
                table.rows,
                kind,
                send_email=send_email,
                validation=validation,
                generated_by=generated_by,
                sender_name=sender_name,
            )

        finally:
            self._intake.cleanup(upload_path)

    async def generate_single(
        self,
        template_id: uuid.UUID | str,
        recipient_name: str,
        values: Mapping[str, str],
        recipient_email: str | None = None,
        output_kind: OutputKind | str | None = None,
        send_email: bool = False,
        generated_by: str | None = None,
        sender_name: str | None = None,
    ) -> SingleGenerationResult:
        """Generate a single document from form values.

        Raises:
            TemplateNotFoundError: If the template is missing or inactive.
            MissingPlaceholdersError: If required placeholders have no value.
            RenderError: If rendering fails.
        """
        kind = self._output_kind(output_kind)
        template = await self._templates.get_template(template_id)

        missing = missing_required_values(values, template.placeholder_schema)
        if missing:
            raise MissingPlaceholdersError(missing)

        document = await self._generator.generate(template, values, recipient_name, kind)
        record_id = await self._documents.save_document(
            document,
            DocumentMetadata(
                template_id=template.id,
                recipient_name=recipient_name,
                recipient_email=recipient_email,
                values=dict(values),
                generated_by=generated_by,
            ),
        )
        logger.info(f"Generated {document.file_name} from template {template.name}")

        result = SingleGenerationResult(
            document_id=record_id,
            file_name=document.file_name,
            output_kind=kind,
            recipient_name=recipient_name,
            recipient_email=recipient_email,
        )

        if send_email and recipient_email:
            try:
                await self._get_dispatcher().send(
                    recipient_email,
                    recipient_name,
                    document,
                    template.name,
                    sender_name or self._settings.sender_name,
                )
            except Exception as e:
                logger.warning(f"Email to {recipient_email} failed: {e}")
                result.email_error = str(e)
                await update_delivery_status(self._documents.mark_failed(record_id, str(e)))
            else:
                result.email_sent = True
                await update_delivery_status(self._documents.mark_sent(record_id))

        return result

    async def preview(self, template_id: uuid.UUID | str, values: Mapping[str, str]) -> str:
        """Substitute values into the template body without rendering."""
        template = await self._templates.get_template(template_id)
        return substitute(template.body_text, values)

    async def get_document(self, document_id: uuid.UUID | str) -> GeneratedDocument | None:
        """Stored document descriptor, or None when the record or its file is gone."""
        document = await self._documents.get_document(str(document_id))
        if document is None or not document.file_path.exists():
            return None
        return document

    async def list_documents(self, query: DocumentQuery) -> tuple[list[StoredDocument], int]:
        """Recorded documents matching the query, newest first, with the total match count."""
        return await self._documents.list_documents(query)

    async def get_document_detail(self, document_id: uuid.UUID | str) -> StoredDocument:
        """Recorded document with its delivery status.

        Raises:
            DocumentNotFoundError: If no record has this id.
        """
        record = await self._documents.find_document(str(document_id))
        if record is None:
            raise DocumentNotFoundError(document_id)
        return record

    async def resend_email(
        self,
        document_id: uuid.UUID | str,
        recipient_email: str | None = None,
        sender_name: str | None = None,
    ) -> EmailResult:
        """Email a previously generated document.

        Args:
            document_id: Record to send.
            recipient_email: Address to send to. Defaults to the recorded one
                and replaces it on success.
            sender_name: Display name for the email.

        Returns:
            A successful EmailResult carrying the message id.

        Raises:
            DocumentNotFoundError: If the record or its file is gone.
            ValueError: If there is no address to send to.
            DispatchError: If delivery failed. The record is marked failed.
        """
        record = await self.get_document_detail(document_id)
        document = await self.get_document(record.id)
        if document is None:
            raise DocumentNotFoundError(document_id)

        to_address = recipient_email or record.recipient_email
        if not to_address:
            raise ValueError("Recipient email is required")

        record_id = str(record.id)
        try:
            receipt = await self._get_dispatcher().send(
                to_address,
                record.recipient_name,
                document,
                await self._template_name(record),
                sender_name or self._settings.sender_name,
            )
        except DispatchError as e:
            logger.warning(f"Resending {record.file_name} to {to_address} failed: {e}")
            await update_delivery_status(self._documents.mark_failed(record_id, str(e)))
            raise

        await update_delivery_status(
            self._documents.mark_sent(record_id, recipient_email=to_address)
        )
        logger.info(f"Sent {record.file_name} to {to_address}, message id {receipt.message_id}")
        return EmailResult(recipient_email=to_address, success=True, message_id=receipt.message_id)

    async def _template_name(self, record: StoredDocument) -> str:
        # Inactive or deleted templates still leave their documents sendable.
        try:
            template = await self._templates.get_template(record.template_id)
        except TemplateNotFoundError:
            return "document"
        return template.name

    async def sample_csv(self, template_id: uuid.UUID | str) -> str:
        """Example data file matching the template's placeholder schema."""
        template = await self._templates.get_template(template_id)
        return build_sample_csv(template.placeholder_schema)
