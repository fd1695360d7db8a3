"""Visual themes keyed by template category.

One theme drives both backends so a certificate looks like a certificate
whether it is rendered as PDF or DOCX.
"""

from dataclasses import dataclass
from datetime import date

from docgen.template_engine.models import TemplateCategory


@dataclass(frozen=True)
class Rule:
    """A horizontal line drawn under the title or above the footer."""

    color: str
    width: float


@dataclass(frozen=True)
class Theme:
    """Styling for one template category.

    Colors are "#rrggbb" hex strings. Alignments are one of
    "left", "center", "right", "justify". PDF fonts are the standard
    Type 1 names, `word_font` is the closest Word font family.
    """

    title_font: str
    title_size: float
    title_color: str
    title_uppercase: bool
    body_font: str
    body_size: float
    body_alignment: str
    line_gap: float
    footer_alignment: str
    word_font: str
    word_title_size: float
    word_body_size: float
    body_color: str = "#333333"
    footer_color: str = "#666666"
    footer_size: float = 10
    title_alignment: str = "center"
    border: bool = False
    title_rule: Rule | None = None
    footer_rule: Rule | None = None


THEMES: dict[TemplateCategory, Theme] = {
    TemplateCategory.CERTIFICATE: Theme(
        title_font="Helvetica-Bold",
        title_size=24,
        title_color="#2c5aa0",
        title_uppercase=True,
        body_font="Helvetica",
        body_size=14,
        body_alignment="center",
        line_gap=8,
        footer_alignment="center",
        word_font="Arial",
        word_title_size=16,
        word_body_size=12,
        border=True,
    ),
    TemplateCategory.OFFER_LETTER: Theme(
        title_font="Helvetica-Bold",
        title_size=20,
        title_color="#0066cc",
        title_uppercase=False,
        body_font="Helvetica",
        body_size=12,
        body_alignment="justify",
        line_gap=6,
        footer_alignment="right",
        word_font="Arial",
        word_title_size=14,
        word_body_size=11,
        title_rule=Rule(color="#0066cc", width=2),
        footer_rule=Rule(color="#cccccc", width=1),
    ),
    TemplateCategory.APPOINTMENT_LETTER: Theme(
        title_font="Times-Bold",
        title_size=22,
        title_color="#8B4513",
        title_uppercase=True,
        body_font="Times-Roman",
        body_size=13,
        body_alignment="justify",
        line_gap=7,
        footer_alignment="center",
        word_font="Times New Roman",
        word_title_size=15,
        word_body_size=12,
        title_rule=Rule(color="#8B4513", width=2),
    ),
    TemplateCategory.EXPERIENCE_LETTER: Theme(
        title_font="Helvetica-Bold",
        title_size=18,
        title_color="#4a90a4",
        title_uppercase=False,
        body_font="Helvetica",
        body_size=12,
        body_alignment="left",
        line_gap=6,
        footer_alignment="right",
        word_font="Arial",
        word_title_size=13,
        word_body_size=11,
        title_rule=Rule(color="#4a90a4", width=2),
        footer_rule=Rule(color="#4a90a4", width=1),
    ),
    TemplateCategory.GENERAL: Theme(
        title_font="Helvetica-Bold",
        title_size=16,
        title_color="#000000",
        title_uppercase=False,
        body_font="Helvetica",
        body_size=12,
        body_alignment="justify",
        line_gap=5,
        footer_alignment="right",
        word_font="Arial",
        word_title_size=14,
        word_body_size=11,
    ),
}


def get_theme(category: TemplateCategory | str | None) -> Theme:
    """Theme for a category. Unknown categories get the general theme."""
    return THEMES[TemplateCategory.coerce(category)]


def heading_text(theme: Theme, title: str) -> str:
    return title.upper() if theme.title_uppercase else title


def footer_text(today: date | None = None) -> str:
    today = today or date.today()
    return f"Generated on: {today.strftime('%B %d, %Y')}"


def split_paragraphs(content: str) -> list[str]:
    """Split body text into non-blank paragraphs, one per line."""
    return [line.strip() for line in content.splitlines() if line.strip()]
