"""Word renderer.

Plain text templates are synthesized with python-docx using the category
theme. Uploaded .docx templates are mail-merged with docxtpl, which
injects the row values into the document's {{ field }} tags directly.
"""

import io
import logging
from collections.abc import Mapping

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt, RGBColor
from docxtpl import DocxTemplate

from docgen.interfaces.renderer import BaseRenderer, RenderError
from docgen.strategies.renderers.themes import (
    Rule,
    Theme,
    footer_text,
    get_theme,
    heading_text,
    split_paragraphs,
)
from docgen.template_engine.models import MergeDocumentSource, OutputKind, TemplateCategory

logger = logging.getLogger(__name__)

_ALIGNMENTS = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
    "justify": WD_ALIGN_PARAGRAPH.JUSTIFY,
}


def _rgb(color: str) -> RGBColor:
    return RGBColor.from_string(color.lstrip("#").upper())


class DocxRenderer(BaseRenderer):
    """Renders Word documents for both template source shapes."""

    @property
    def output_kind(self) -> OutputKind:
        return OutputKind.DOCX

    def render_text(self, content: str, *, category: TemplateCategory, title: str) -> bytes:
        """Synthesize a themed document from substituted text.

        Each non-blank line of the body becomes one paragraph, followed
        by a generation-date footer.

        Raises:
            RenderError: If the document cannot be built.
        """
        theme = get_theme(category)

        try:
            document = Document()
            for section in document.sections:
                section.top_margin = Inches(1)
                section.bottom_margin = Inches(1)
                section.left_margin = Inches(1)
                section.right_margin = Inches(1)
                if theme.border:
                    self._add_page_border(section, theme.title_color)

            heading = document.add_paragraph()
            if theme.title_rule:
                self._add_paragraph_rule(heading, theme.title_rule, edge="bottom")
            heading.alignment = _ALIGNMENTS[theme.title_alignment]
            heading.paragraph_format.space_after = Pt(20)
            run = heading.add_run(heading_text(theme, title))
            run.bold = True
            self._style_run(run, theme.word_font, theme.word_title_size, theme.title_color)

            for text in split_paragraphs(content):
                paragraph = document.add_paragraph()
                paragraph.alignment = _ALIGNMENTS[theme.body_alignment]
                paragraph.paragraph_format.space_after = Pt(10)
                run = paragraph.add_run(text)
                self._style_run(run, theme.word_font, theme.word_body_size, theme.body_color)

            footer = document.add_paragraph()
            if theme.footer_rule:
                self._add_paragraph_rule(footer, theme.footer_rule, edge="top")
            footer.alignment = _ALIGNMENTS[theme.footer_alignment]
            footer.paragraph_format.space_before = Pt(20)
            run = footer.add_run(footer_text())
            run.italic = True
            self._style_run(run, theme.word_font, theme.footer_size, theme.footer_color)

            buffer = io.BytesIO()
            document.save(buffer)
            return buffer.getvalue()

        except Exception as e:
            logger.error(f"DOCX rendering failed for '{title}': {e}", exc_info=True)
            raise RenderError(f"DOCX rendering failed: {e}") from e

    def render_merge(
        self,
        source: MergeDocumentSource,
        *,
        category: TemplateCategory,
        title: str,
        values: Mapping[str, str],
    ) -> bytes:
        """Fill an uploaded .docx template's merge fields with the row values.

        Raises:
            RenderError: If the template is missing or the merge fails.
        """
        if not source.path.exists():
            raise RenderError(f"Template document not found: {source.path}")

        try:
            template = DocxTemplate(str(source.path))
            template.render(dict(values), autoescape=True)
            buffer = io.BytesIO()
            template.save(buffer)
            return buffer.getvalue()

        except Exception as e:
            logger.error(f"Merge rendering failed for {source.path}: {e}", exc_info=True)
            raise RenderError(f"Merge rendering failed: {e}") from e

    @staticmethod
    def _style_run(run, font: str, size: float, color: str) -> None:
        run.font.name = font
        run.font.size = Pt(size)
        run.font.color.rgb = _rgb(color)

    @staticmethod
    def _add_paragraph_rule(paragraph, rule: Rule, edge: str) -> None:
        # Must run before alignment/spacing are set: pBdr precedes them in pPr.
        p_pr = paragraph._p.get_or_add_pPr()
        borders = OxmlElement("w:pBdr")
        line = OxmlElement(f"w:{edge}")
        line.set(qn("w:val"), "single")
        line.set(qn("w:sz"), str(int(rule.width * 8)))
        line.set(qn("w:space"), "4")
        line.set(qn("w:color"), rule.color.lstrip("#").upper())
        borders.append(line)
        p_pr.append(borders)

    @staticmethod
    def _add_page_border(section, color: str) -> None:
        sect_pr = section._sectPr
        borders = OxmlElement("w:pgBorders")
        borders.set(qn("w:offsetFrom"), "page")
        for edge in ("top", "left", "bottom", "right"):
            line = OxmlElement(f"w:{edge}")
            line.set(qn("w:val"), "double")
            line.set(qn("w:sz"), "18")
            line.set(qn("w:space"), "24")
            line.set(qn("w:color"), color.lstrip("#").upper())
            borders.append(line)
        page_margins = sect_pr.find(qn("w:pgMar"))
        if page_margins is not None:
            page_margins.addnext(borders)
        else:
            sect_pr.append(borders)
