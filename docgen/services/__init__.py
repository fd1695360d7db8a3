"""Document generation services."""

from docgen.services.batch import BatchOrchestrator
from docgen.services.documents import DocumentService
from docgen.services.generator import DocumentGenerator, build_file_name, sanitize_name
from docgen.services.intake import FileIntake, file_format

__all__ = [
    "BatchOrchestrator",
    "DocumentService",
    "DocumentGenerator",
    "build_file_name",
    "sanitize_name",
    "FileIntake",
    "file_format",
]
