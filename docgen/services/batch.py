"""Batch orchestration for bulk document generation.

Rows are processed strictly in input order, one at a time. Each row ends
either as a generated and recorded document or as a failure entry; a
failing row never stops the batch. Email delivery happens after a row has
succeeded and never changes its outcome.
"""

import logging
import uuid
from collections.abc import Mapping, Sequence

from docgen.interfaces.dispatcher import BaseDispatcher
from docgen.interfaces.renderer import GeneratedDocument
from docgen.interfaces.store import BaseDocumentStore, DocumentMetadata
from docgen.services.generator import DocumentGenerator
from docgen.template_engine.models import (
    BatchResult,
    BatchValidationResult,
    DocumentEntry,
    EmailResult,
    OutputKind,
    RowFailure,
    Template,
)
from docgen.template_engine.validator import RowValidationError

logger = logging.getLogger(__name__)

NAME_COLUMNS = ("name", "recipientName", "recipient_name")
EMAIL_COLUMNS = ("email", "recipientEmail", "recipient_email")


async def update_delivery_status(update) -> None:
    """Await a delivery status update. Failures are logged, not raised."""
    try:
        await update
    except Exception as e:
        logger.error(f"Failed to update delivery status: {e}", exc_info=True)


def _generate_batch_id() -> str:
    """Generate a unique batch ID."""
    return f"batch_{uuid.uuid4().hex[:12]}"


def _first_value(values: Mapping[str, str], columns: Sequence[str]) -> str | None:
    for column in columns:
        value = (values.get(column) or "").strip()
        if value:
            return value
    return None


def recipient_name_for(values: Mapping[str, str], record_index: int) -> str:
    return _first_value(values, NAME_COLUMNS) or f"Recipient_{record_index}"


def recipient_email_for(values: Mapping[str, str]) -> str | None:
    return _first_value(values, EMAIL_COLUMNS)


class BatchOrchestrator:
    """Drives the per-row generate, record and notify loop.

    Args:
        generator: Renders and stores document files.
        document_store: Records generated documents.
        dispatcher: Delivers documents by email. Required when a batch
            asks for email delivery.
        sender_name: Default display name for outgoing email.
    """

    def __init__(
        self,
        generator: DocumentGenerator,
        document_store: BaseDocumentStore,
        dispatcher: BaseDispatcher | None = None,
        sender_name: str = "Document Generation Platform",
    ) -> None:
        self._generator = generator
        self._document_store = document_store
        self._dispatcher = dispatcher
        self._sender_name = sender_name

    async def run_batch(
        self,
        template: Template,
        rows: Sequence[Mapping[str, str]],
        output_kind: OutputKind | str,
        send_email: bool = False,
        validation: BatchValidationResult | None = None,
        generated_by: str | None = None,
        sender_name: str | None = None,
    ) -> BatchResult:
        """Generate one document per row.

        Args:
            template: Template shared read-only by every row.
            rows: Row records in input order.
            output_kind: PDF or DOCX.
            send_email: Email each document to its row's address, if any.
            validation: Validation outcome for these rows. Rows it flags are
                recorded as failures with the validator's messages and not rendered.
            generated_by: Optional id of the requesting user.
            sender_name: Display name for email. Defaults to the configured one.

        Returns:
            The BatchResult. success_count + failure_count == total_records.

        Raises:
            ValueError: If email is requested but no dispatcher is configured.
        """
        if send_email and self._dispatcher is None:
            raise ValueError("Email delivery requested but no dispatcher is configured")

        output_kind = OutputKind(output_kind)
        sender_name = sender_name or self._sender_name
        result = BatchResult(batch_id=_generate_batch_id(), total_records=len(rows))

        logger.info(
            f"Starting batch {result.batch_id}: template={template.name}, "
            f"rows={len(rows)}, output={output_kind.value}, send_email={send_email}"
        )

        for record_index, values in enumerate(rows, start=1):
            recipient_name = recipient_name_for(values, record_index)
            recipient_email = recipient_email_for(values)

            try:
                self._check_row(validation, record_index)
                document = await self._generator.generate(
                    template,
                    values,
                    recipient_name,
                    output_kind,
                    artifact_key=f"{result.batch_id}_{record_index:05d}",
                )
            except RowValidationError as e:
                self._record_failure(result, record_index, recipient_name, str(e))
                continue
            except Exception as e:
                logger.error(
                    f"Batch {result.batch_id} row {record_index} failed to render: {e}",
                    exc_info=True,
                )
                self._record_failure(result, record_index, recipient_name, str(e))
                continue

            metadata = DocumentMetadata(
                template_id=template.id,
                recipient_name=recipient_name,
                recipient_email=recipient_email,
                values=dict(values),
                generated_by=generated_by,
                batch_id=result.batch_id,
                row_index=record_index,
            )
            try:
                record_id = await self._document_store.save_document(document, metadata)
            except Exception as e:
                logger.error(
                    f"Batch {result.batch_id} row {record_index} could not be recorded: {e}",
                    exc_info=True,
                )
                document.file_path.unlink(missing_ok=True)
                self._record_failure(result, record_index, recipient_name, str(e))
                continue

            result.documents.append(
                DocumentEntry(
                    record_index=record_index,
                    recipient_name=recipient_name,
                    recipient_email=recipient_email,
                    file_name=document.file_name,
                    file_ref=record_id,
                    artifact_key=document.artifact_key,
                )
            )
            result.success_count += 1

            if send_email and recipient_email:
                result.email_results.append(
                    await self._notify(
                        record_id, recipient_email, recipient_name, document, template, sender_name
                    )
                )

        logger.info(
            f"Completed batch {result.batch_id}: {result.success_count} succeeded, "
            f"{result.failure_count} failed, {len(result.email_results)} emails attempted"
        )
        return result

    async def _notify(
        self,
        record_id: str,
        recipient_email: str,
        recipient_name: str,
        document: GeneratedDocument,
        template: Template,
        sender_name: str,
    ) -> EmailResult:
        try:
            receipt = await self._dispatcher.send(
                recipient_email, recipient_name, document, template.name, sender_name
            )
        except Exception as e:
            logger.warning(f"Email to {recipient_email} failed: {e}")
            await update_delivery_status(self._document_store.mark_failed(record_id, str(e)))
            return EmailResult(recipient_email=recipient_email, success=False, error=str(e))

        await update_delivery_status(self._document_store.mark_sent(record_id))
        return EmailResult(
            recipient_email=recipient_email, success=True, message_id=receipt.message_id
        )

    @staticmethod
    def _check_row(validation: BatchValidationResult | None, record_index: int) -> None:
        messages = validation.errors_for_row(record_index) if validation else []
        if messages:
            raise RowValidationError(record_index, messages)

    @staticmethod
    def _record_failure(
        result: BatchResult, record_index: int, recipient_name: str, message: str
    ) -> None:
        logger.warning(f"Batch {result.batch_id} row {record_index} ({recipient_name}): {message}")
        result.errors.append(
            RowFailure(
                record_index=record_index,
                recipient_name=recipient_name,
                error_message=message,
            )
        )
        result.failure_count += 1
