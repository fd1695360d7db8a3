"""Abstract base classes for document generation strategies."""

from docgen.interfaces.dispatcher import BaseDispatcher, DispatchError, DispatchReceipt
from docgen.interfaces.parser import BaseTabularParser, ParsedTable, ParseError, RowRecord
from docgen.interfaces.renderer import BaseRenderer, GeneratedDocument, RenderError
from docgen.interfaces.store import (
    BaseDocumentStore,
    BaseTemplateStore,
    DocumentMetadata,
    DocumentNotFoundError,
    DocumentQuery,
    TemplateNotFoundError,
)

__all__ = [
    "BaseDispatcher",
    "DispatchError",
    "DispatchReceipt",
    "BaseTabularParser",
    "ParsedTable",
    "ParseError",
    "RowRecord",
    "BaseRenderer",
    "GeneratedDocument",
    "RenderError",
    "BaseDocumentStore",
    "BaseTemplateStore",
    "DocumentMetadata",
    "DocumentNotFoundError",
    "DocumentQuery",
    "TemplateNotFoundError",
]
