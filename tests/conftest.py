"""Shared fixtures for the test suite."""

import datetime
import os
import tempfile
import uuid
from pathlib import Path

import pytest

# Keep module-level app and logging setup out of the working directory.
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="docgen-tests-"))
os.environ.setdefault("UPLOAD_DIR", str(_TEST_ROOT / "uploads"))
os.environ.setdefault("OUTPUT_DIR", str(_TEST_ROOT / "generated"))
os.environ.setdefault("LOG_DIR", str(_TEST_ROOT / "logs"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_ROOT / 'docgen.db'}")
os.environ.setdefault("DISPATCHER_TYPE", "log")

from docgen.core.config import Settings  # noqa: E402
from docgen.core.factory import ComponentFactory  # noqa: E402
from docgen.interfaces.dispatcher import DispatchReceipt  # noqa: E402
from docgen.interfaces.renderer import GeneratedDocument  # noqa: E402
from docgen.interfaces.store import (  # noqa: E402
    BaseDocumentStore,
    BaseTemplateStore,
    DocumentMetadata,
    TemplateNotFoundError,
)
from docgen.services.documents import DocumentService  # noqa: E402
from docgen.services.generator import DocumentGenerator  # noqa: E402
from docgen.strategies.dispatchers import LogDispatcher  # noqa: E402
from docgen.template_engine.models import (  # noqa: E402
    PlaceholderSpec,
    StoredDocument,
    Template,
    TemplateCategory,
    ValueType,
)


# =============================================================================
# In-memory collaborators
# =============================================================================


class InMemoryTemplateStore(BaseTemplateStore):
    """Template store backed by a dict."""

    def __init__(self, *templates: Template) -> None:
        self.templates = {template.id: template for template in templates}

    async def get_template(self, template_id):
        try:
            key = template_id if isinstance(template_id, uuid.UUID) else uuid.UUID(str(template_id))
        except ValueError:
            raise TemplateNotFoundError(template_id)
        template = self.templates.get(key)
        if template is None or not template.active:
            raise TemplateNotFoundError(template_id)
        return template


class InMemoryDocumentStore(BaseDocumentStore):
    """Document store that records every call."""

    def __init__(self) -> None:
        self.documents: dict[str, tuple[GeneratedDocument, DocumentMetadata]] = {}
        self.status: dict[str, str] = {}
        self.errors: dict[str, str] = {}
        self.addresses: dict[str, str] = {}
        self.created: dict[str, datetime.datetime] = {}

    async def save_document(self, document, metadata):
        record_id = str(uuid.uuid4())
        self.documents[record_id] = (document, metadata)
        self.status[record_id] = "generated"
        self.created[record_id] = datetime.datetime.now(datetime.timezone.utc)
        return record_id

    async def mark_sent(self, record_id, recipient_email=None):
        self.status[record_id] = "sent"
        if recipient_email:
            self.addresses[record_id] = recipient_email

    async def mark_failed(self, record_id, error):
        self.status[record_id] = "failed"
        self.errors[record_id] = error

    async def get_document(self, record_id):
        entry = self.documents.get(str(record_id))
        return entry[0] if entry else None

    async def find_document(self, record_id):
        record_id = str(record_id)
        if record_id not in self.documents:
            return None
        document, metadata = self.documents[record_id]
        return StoredDocument(
            id=uuid.UUID(record_id),
            template_id=metadata.template_id,
            recipient_name=metadata.recipient_name,
            recipient_email=self.addresses.get(record_id, metadata.recipient_email),
            file_name=document.file_name,
            file_type=document.output_kind,
            file_size=document.size_bytes,
            status=self.status[record_id],
            email_sent=self.status[record_id] == "sent",
            email_error=self.errors.get(record_id),
            batch_id=metadata.batch_id,
            row_index=metadata.row_index,
            generated_by=metadata.generated_by,
            placeholder_values=dict(metadata.values),
            created_at=self.created[record_id],
        )

    async def list_documents(self, query):
        records = [await self.find_document(record_id) for record_id in reversed(self.documents)]
        matches = [
            record
            for record in records
            if (query.template_id is None or record.template_id == query.template_id)
            and (query.batch_id is None or record.batch_id == query.batch_id)
            and (query.status is None or record.status == query.status)
        ]
        return matches[query.offset : query.offset + query.page_size], len(matches)


class RecordingDispatcher(LogDispatcher):
    """Log dispatcher that also keeps every receipt."""

    def __init__(self) -> None:
        self.sent: list[DispatchReceipt] = []

    async def send(self, to_address, recipient_name, document, template_name, sender_name):
        receipt = await super().send(to_address, recipient_name, document, template_name, sender_name)
        self.sent.append(receipt)
        return receipt


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path):
    """Settings isolated to a temporary directory."""
    return Settings(
        upload_dir=tmp_path / "uploads",
        output_dir=tmp_path / "generated",
        log_dir=tmp_path / "logs",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        dispatcher_type="log",
        default_output_kind="pdf",
    )


@pytest.fixture
def factory(settings):
    return ComponentFactory(settings)


@pytest.fixture
def generator(settings, factory):
    return DocumentGenerator(settings, factory)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def welcome_template():
    """Template from the welcome-letter scenario."""
    return Template(
        name="Welcome Letter",
        category=TemplateCategory.OFFER_LETTER,
        body_text="Dear {{name}}, welcome to {{company}}",
        placeholder_schema=[
            PlaceholderSpec(name="name"),
            PlaceholderSpec(name="company"),
        ],
    )


@pytest.fixture
def offer_template():
    """Template with one field of every value type."""
    return Template(
        name="Offer Letter",
        category=TemplateCategory.OFFER_LETTER,
        body_text=(
            "Dear {{name}},\n"
            "\n"
            "We offer you a salary of {{salary}} starting {{start_date}}.\n"
            "Questions? Write to {{ email }}."
        ),
        placeholder_schema=[
            PlaceholderSpec(name="name", value_type=ValueType.TEXT),
            PlaceholderSpec(name="email", value_type=ValueType.EMAIL, required=False),
            PlaceholderSpec(name="start_date", value_type=ValueType.DATE),
            PlaceholderSpec(name="salary", value_type=ValueType.NUMBER),
        ],
    )


@pytest.fixture
def document_store():
    return InMemoryDocumentStore()


@pytest.fixture
def template_store(welcome_template, offer_template):
    return InMemoryTemplateStore(welcome_template, offer_template)


@pytest.fixture
def service(settings, factory, generator, template_store, document_store, dispatcher):
    """Document service over in-memory stores and the log dispatcher."""
    return DocumentService(
        template_store=template_store,
        document_store=document_store,
        settings=settings,
        factory=factory,
        generator=generator,
        dispatcher=dispatcher,
    )
