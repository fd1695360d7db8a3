"""Concrete renderer implementations."""

from docgen.strategies.renderers.docx import DocxRenderer
from docgen.strategies.renderers.pdf import PdfRenderer
from docgen.strategies.renderers.themes import THEMES, Theme, get_theme

__all__ = [
    "DocxRenderer",
    "PdfRenderer",
    "THEMES",
    "Theme",
    "get_theme",
]
