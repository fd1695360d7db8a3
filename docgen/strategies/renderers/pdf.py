"""PDF renderer built on reportlab's platypus layout engine."""

import io
import logging
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from docgen.interfaces.renderer import BaseRenderer, RenderError
from docgen.strategies.renderers.themes import (
    Theme,
    footer_text,
    get_theme,
    heading_text,
    split_paragraphs,
)
from docgen.template_engine.models import OutputKind, TemplateCategory

logger = logging.getLogger(__name__)

PAGE_MARGIN = 50

_ALIGNMENTS = {
    "left": TA_LEFT,
    "center": TA_CENTER,
    "right": TA_RIGHT,
    "justify": TA_JUSTIFY,
}


class PdfRenderer(BaseRenderer):
    """Renders themed A4 PDFs. Content wraps and paginates automatically.

    Merge documents are not understood by this backend, so their
    fallback body is substituted and styled instead.
    """

    def __init__(self, page_size: tuple[float, float] = A4, margin: float = PAGE_MARGIN) -> None:
        self._page_size = page_size
        self._margin = margin

    @property
    def output_kind(self) -> OutputKind:
        return OutputKind.PDF

    def render_text(self, content: str, *, category: TemplateCategory, title: str) -> bytes:
        """Lay out title, body paragraphs and footer with the category theme.

        Raises:
            RenderError: If reportlab fails to build the document.
        """
        theme = get_theme(category)
        buffer = io.BytesIO()

        try:
            doc = SimpleDocTemplate(
                buffer,
                pagesize=self._page_size,
                leftMargin=self._margin,
                rightMargin=self._margin,
                topMargin=self._margin,
                bottomMargin=self._margin,
                title=title,
            )
            story = self._build_story(theme, content, title)

            def decorate(canvas, document):
                if theme.border:
                    self._draw_border(canvas, document, theme)

            doc.build(story, onFirstPage=decorate, onLaterPages=decorate)

        except Exception as e:
            logger.error(f"PDF rendering failed for '{title}': {e}", exc_info=True)
            raise RenderError(f"PDF rendering failed: {e}") from e

        return buffer.getvalue()

    def _build_story(self, theme: Theme, content: str, title: str) -> list:
        title_style = ParagraphStyle(
            "DocTitle",
            fontName=theme.title_font,
            fontSize=theme.title_size,
            leading=theme.title_size * 1.2,
            textColor=HexColor(theme.title_color),
            alignment=_ALIGNMENTS[theme.title_alignment],
            spaceAfter=10,
        )
        body_style = ParagraphStyle(
            "DocBody",
            fontName=theme.body_font,
            fontSize=theme.body_size,
            leading=theme.body_size + theme.line_gap,
            textColor=HexColor(theme.body_color),
            alignment=_ALIGNMENTS[theme.body_alignment],
            spaceAfter=theme.line_gap,
        )
        footer_style = ParagraphStyle(
            "DocFooter",
            fontName=theme.body_font,
            fontSize=theme.footer_size,
            leading=theme.footer_size * 1.2,
            textColor=HexColor(theme.footer_color),
            alignment=_ALIGNMENTS[theme.footer_alignment],
        )

        story: list = [Paragraph(escape(heading_text(theme, title)), title_style)]

        if theme.title_rule:
            story.append(
                HRFlowable(
                    width="100%",
                    thickness=theme.title_rule.width,
                    color=HexColor(theme.title_rule.color),
                    spaceBefore=2,
                    spaceAfter=16,
                )
            )
        else:
            story.append(Spacer(1, 16))

        for paragraph in split_paragraphs(content):
            story.append(Paragraph(escape(paragraph), body_style))

        story.append(Spacer(1, 30))

        if theme.footer_rule:
            story.append(
                HRFlowable(
                    width="100%",
                    thickness=theme.footer_rule.width,
                    color=HexColor(theme.footer_rule.color),
                    spaceAfter=6,
                )
            )

        story.append(Paragraph(escape(footer_text()), footer_style))
        return story

    @staticmethod
    def _draw_border(canvas, document, theme: Theme) -> None:
        """Double frame around the page: heavy outer line, light inner line."""
        width, height = document.pagesize
        canvas.saveState()
        canvas.setStrokeColor(HexColor(theme.title_color))
        canvas.setLineWidth(3)
        canvas.rect(30, 30, width - 60, height - 60)
        canvas.setLineWidth(1)
        canvas.rect(40, 40, width - 80, height - 80)
        canvas.restoreState()
