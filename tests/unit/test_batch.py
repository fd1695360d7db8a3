"""Unit tests for batch orchestration."""

import asyncio
import re
from unittest.mock import AsyncMock

import pytest

from docgen.interfaces.dispatcher import DispatchError, DispatchReceipt
from docgen.interfaces.renderer import GeneratedDocument, RenderError
from docgen.services.batch import BatchOrchestrator, recipient_email_for, recipient_name_for
from docgen.template_engine.models import OutputKind
from docgen.template_engine.validator import validate_rows


class FakeGenerator:
    """Writes a stub file per row and fails for the configured row numbers."""

    def __init__(self, output_dir, failing_rows=()):
        self.output_dir = output_dir
        self.failing_rows = set(failing_rows)
        self.calls = []

    async def generate(self, template, values, recipient_name, output_kind, artifact_key=None):
        row = int(artifact_key.rsplit("_", 1)[1])
        self.calls.append(row)
        if row in self.failing_rows:
            raise RenderError(f"cannot render row {row}")
        kind = OutputKind(output_kind)
        path = self.output_dir / f"{artifact_key}{kind.extension}"
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"stub")
        return GeneratedDocument(
            file_name=f"{recipient_name}_1.{kind.value}",
            file_path=path,
            output_kind=kind,
            artifact_key=artifact_key,
            size_bytes=4,
        )


def rows_of(count):
    return [
        {"name": f"Person{i}", "company": "Acme", "email": f"p{i}@example.com"}
        for i in range(1, count + 1)
    ]


# =============================================================================
# Recipient resolution
# =============================================================================


class TestRecipientResolution:
    """Test suite for recipient name and email lookup."""

    def test_name_columns_in_priority_order(self):
        assert recipient_name_for({"recipientName": "B", "name": "A"}, 1) == "A"
        assert recipient_name_for({"name": " ", "recipient_name": "C"}, 1) == "C"

    def test_name_fallback(self):
        assert recipient_name_for({"company": "Acme"}, 4) == "Recipient_4"

    def test_email_columns(self):
        assert recipient_email_for({"recipientEmail": "a@b.co"}) == "a@b.co"
        assert recipient_email_for({"email": ""}) is None


# =============================================================================
# Batch runs
# =============================================================================


class TestBatchOrchestrator:
    """Test suite for BatchOrchestrator."""

    def test_isolates_failing_rows(self, tmp_path, welcome_template, document_store):
        """Test that failing rows are recorded and later rows still run."""
        generator = FakeGenerator(tmp_path, failing_rows={2, 5})
        orchestrator = BatchOrchestrator(generator, document_store)

        result = asyncio.run(orchestrator.run_batch(welcome_template, rows_of(6), "pdf"))

        assert result.total_records == 6
        assert result.success_count == 4
        assert result.failure_count == 2
        assert result.success_count + result.failure_count == result.total_records
        assert [e.record_index for e in result.errors] == [2, 5]
        assert [d.record_index for d in result.documents] == [1, 3, 4, 6]
        assert result.errors[0].error_message == "cannot render row 2"
        assert result.errors[0].recipient_name == "Person2"
        assert generator.calls == [1, 2, 3, 4, 5, 6]
        assert len(document_store.documents) == 4

    def test_batch_id_and_artifact_keys(self, tmp_path, welcome_template, document_store):
        """Test that every document gets a distinct key derived from the batch id."""
        orchestrator = BatchOrchestrator(FakeGenerator(tmp_path), document_store)

        result = asyncio.run(orchestrator.run_batch(welcome_template, rows_of(3), "docx"))

        assert re.fullmatch(r"batch_[0-9a-f]{12}", result.batch_id)
        keys = [d.artifact_key for d in result.documents]
        assert keys == [f"{result.batch_id}_{i:05d}" for i in (1, 2, 3)]
        assert {d.file_ref for d in result.documents} == set(document_store.documents)

    def test_metadata_is_recorded(self, tmp_path, welcome_template, document_store):
        orchestrator = BatchOrchestrator(FakeGenerator(tmp_path), document_store)

        result = asyncio.run(
            orchestrator.run_batch(welcome_template, rows_of(1), "pdf", generated_by="user-7")
        )

        _, metadata = document_store.documents[result.documents[0].file_ref]
        assert metadata.template_id == welcome_template.id
        assert metadata.batch_id == result.batch_id
        assert metadata.row_index == 1
        assert metadata.recipient_email == "p1@example.com"
        assert metadata.generated_by == "user-7"
        assert metadata.values["company"] == "Acme"

    def test_rows_flagged_by_validation_are_skipped(self, tmp_path, welcome_template, document_store):
        """Test that a row with validation errors fails without being rendered."""
        rows = [{"name": "Bob", "company": "Acme"}, {"name": "", "company": ""}]
        validation = validate_rows(rows, welcome_template.placeholder_schema)
        generator = FakeGenerator(tmp_path)
        orchestrator = BatchOrchestrator(generator, document_store)

        result = asyncio.run(
            orchestrator.run_batch(welcome_template, rows, "pdf", validation=validation)
        )

        assert generator.calls == [1]
        assert result.success_count == 1
        assert result.errors[0].record_index == 2
        assert result.errors[0].recipient_name == "Recipient_2"
        assert result.errors[0].error_message == (
            "Row 2: Missing value for required field 'name'; "
            "Row 2: Missing value for required field 'company'"
        )

    def test_save_failure_removes_file(self, tmp_path, welcome_template, document_store):
        """Test that a document that cannot be recorded is deleted and fails its row."""
        document_store.save_document = AsyncMock(side_effect=RuntimeError("db down"))
        orchestrator = BatchOrchestrator(FakeGenerator(tmp_path), document_store)

        result = asyncio.run(orchestrator.run_batch(welcome_template, rows_of(1), "pdf"))

        assert result.failure_count == 1
        assert result.errors[0].error_message == "db down"
        assert list(tmp_path.glob("*.pdf")) == []

    def test_email_requires_dispatcher(self, tmp_path, welcome_template, document_store):
        orchestrator = BatchOrchestrator(FakeGenerator(tmp_path), document_store)
        with pytest.raises(ValueError, match="dispatcher"):
            asyncio.run(
                orchestrator.run_batch(welcome_template, rows_of(1), "pdf", send_email=True)
            )

    def test_email_delivery(self, tmp_path, welcome_template, document_store, dispatcher):
        """Test that rows with an address are emailed and marked sent."""
        rows = rows_of(2) + [{"name": "NoMail", "company": "Acme"}]
        orchestrator = BatchOrchestrator(FakeGenerator(tmp_path), document_store, dispatcher)

        result = asyncio.run(
            orchestrator.run_batch(welcome_template, rows, "pdf", send_email=True)
        )

        assert result.success_count == 3
        assert [r.recipient_email for r in result.email_results] == ["p1@example.com", "p2@example.com"]
        assert all(r.success and r.message_id for r in result.email_results)
        assert len(dispatcher.sent) == 2
        statuses = [document_store.status[d.file_ref] for d in result.documents]
        assert statuses == ["sent", "sent", "generated"]

    def test_email_failure_does_not_fail_row(self, tmp_path, welcome_template, document_store):
        """Test that a failed send is reported but the document still counts."""
        dispatcher = AsyncMock()
        dispatcher.send.side_effect = [
            DispatchError("mailbox full"),
            DispatchReceipt(message_id="<id@x>", to_address="p2@example.com"),
        ]
        orchestrator = BatchOrchestrator(FakeGenerator(tmp_path), document_store, dispatcher)

        result = asyncio.run(
            orchestrator.run_batch(welcome_template, rows_of(2), "pdf", send_email=True)
        )

        assert result.success_count == 2
        assert result.failure_count == 0
        first, second = result.email_results
        assert first.success is False
        assert first.error == "mailbox full"
        assert second.success is True
        assert second.message_id == "<id@x>"
        first_ref = result.documents[0].file_ref
        assert document_store.status[first_ref] == "failed"
        assert document_store.errors[first_ref] == "mailbox full"

    def test_status_update_failure_is_contained(self, tmp_path, welcome_template, document_store, dispatcher):
        document_store.mark_sent = AsyncMock(side_effect=RuntimeError("db down"))
        orchestrator = BatchOrchestrator(FakeGenerator(tmp_path), document_store, dispatcher)

        result = asyncio.run(
            orchestrator.run_batch(welcome_template, rows_of(1), "pdf", send_email=True)
        )

        assert result.success_count == 1
        assert result.email_results[0].success is True

    def test_empty_rows(self, tmp_path, welcome_template, document_store):
        orchestrator = BatchOrchestrator(FakeGenerator(tmp_path), document_store)
        result = asyncio.run(orchestrator.run_batch(welcome_template, [], "pdf"))
        assert result.total_records == 0
        assert result.documents == []

    def test_scenario_with_real_generator(self, generator, welcome_template, document_store):
        """Test the welcome-letter scenario end to end with real rendering."""
        rows = [{"name": "Bob", "company": "Acme"}, {"name": "", "company": "Acme"}]
        validation = validate_rows(rows, welcome_template.placeholder_schema)
        orchestrator = BatchOrchestrator(generator, document_store)

        result = asyncio.run(
            orchestrator.run_batch(welcome_template, rows, "pdf", validation=validation)
        )

        assert result.success_count == 1
        assert result.failure_count == 1
        entry = result.documents[0]
        assert entry.recipient_name == "Bob"
        assert entry.file_name.startswith("Bob_")
        stored, _ = document_store.documents[entry.file_ref]
        assert stored.file_path.read_bytes().startswith(b"%PDF")
        assert result.errors[0].error_message == "Row 2: Missing value for required field 'name'"
