from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from typing import Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from app.core.tuning import get_tuning_float, get_tuning_int, get_tuning_value
from app.markup.models import DateLine, ListItem, Paragraph, Section, Subheading
from app.markup.structurer import fallback_section_title

logger = logging.getLogger(__name__)

REGULAR_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
OBLIQUE_FONT = "Helvetica-Oblique"
BULLET_PREFIX = "• "

PLACEHOLDER_TEXT = "No content was available to render."


class RenderStyle(str, Enum):
    STANDARD = "pdf"
    FORMAL = "latex"


@dataclass(frozen=True)
class _Layout:
    margin: float
    title: str
    title_size: int
    heading_size: int
    subheading_size: int
    normal_size: int
    small_size: int
    line_spacing: float
    advance: dict[str, float]


def _load_layout() -> _Layout:
    advance_defaults = {
        "section_title": 6.0,
        "divider": 8.0,
        "subheading": 4.0,
        "date": 2.0,
        "paragraph": 6.0,
        "list_item": 2.0,
        "section_gap": 12.0,
    }
    advance = {
        key: get_tuning_float(f"rendering.advance.{key}", default)
        for key, default in advance_defaults.items()
    }
    return _Layout(
        margin=get_tuning_float("rendering.margin", 50.0),
        title=str(get_tuning_value("rendering.document_title", "Professional Resume") or "Professional Resume"),
        title_size=get_tuning_int("rendering.font_sizes.title", 16),
        heading_size=get_tuning_int("rendering.font_sizes.heading", 14),
        subheading_size=get_tuning_int("rendering.font_sizes.subheading", 12),
        normal_size=get_tuning_int("rendering.font_sizes.normal", 11),
        small_size=get_tuning_int("rendering.font_sizes.small", 10),
        line_spacing=get_tuning_float("rendering.line_spacing", 1.25),
        advance=advance,
    )


def _safe_text(value: str) -> str:
    # Standard Type 1 fonts only carry latin-1 glyphs.
    return (value or "").encode("latin-1", "replace").decode("latin-1")


class _PageWriter:
    """Cursor over a reportlab canvas that wraps lines and starts new pages."""

    def __init__(self, layout: _Layout) -> None:
        self._layout = layout
        self._buffer = BytesIO()
        self._canvas = canvas.Canvas(self._buffer, pagesize=A4)
        self._canvas.setTitle(layout.title)
        self.width, self.height = A4
        self.content_width = self.width - 2 * layout.margin
        self.y = self.height - layout.margin

    def _ensure_room(self, line_height: float) -> None:
        if self.y - line_height < self._layout.margin:
            self._canvas.showPage()
            self.y = self.height - self._layout.margin

    def skip(self, amount: float) -> None:
        self.y -= amount

    def centered(self, text: str, font: str, size: int) -> None:
        line_height = size * self._layout.line_spacing
        self._ensure_room(line_height)
        self.y -= size
        self._canvas.setFont(font, size)
        self._canvas.drawCentredString(self.width / 2, self.y, _safe_text(text))
        self.y -= line_height - size

    def text(self, text: str, font: str, size: int, *, justify: bool = False, indent: float = 0.0) -> None:
        line_height = size * self._layout.line_spacing
        available = self.content_width - indent
        lines = simpleSplit(_safe_text(text), font, size, available) or [""]
        for index, line in enumerate(lines):
            self._ensure_room(line_height)
            self.y -= size
            is_last = index == len(lines) - 1
            if justify and not is_last and " " in line.strip():
                self._draw_justified(line.strip(), font, size, self._layout.margin + indent, available)
            else:
                self._canvas.setFont(font, size)
                self._canvas.drawString(self._layout.margin + indent, self.y, line)
            self.y -= line_height - size

    def bullet(self, text: str, font: str, size: int) -> None:
        line_height = size * self._layout.line_spacing
        indent = stringWidth(BULLET_PREFIX, font, size)
        lines = simpleSplit(_safe_text(text), font, size, self.content_width - indent) or [""]
        for index, line in enumerate(lines):
            self._ensure_room(line_height)
            self.y -= size
            self._canvas.setFont(font, size)
            if index == 0:
                self._canvas.drawString(self._layout.margin, self.y, BULLET_PREFIX)
            self._canvas.drawString(self._layout.margin + indent, self.y, line)
            self.y -= line_height - size

    def divider(self) -> None:
        self._ensure_room(1)
        self._canvas.setLineWidth(0.5)
        self._canvas.line(self._layout.margin, self.y, self.width - self._layout.margin, self.y)

    def _draw_justified(self, line: str, font: str, size: int, x: float, available: float) -> None:
        gaps = line.count(" ")
        extra = (available - stringWidth(line, font, size)) / gaps if gaps else 0.0
        text_object = self._canvas.beginText(x, self.y)
        text_object.setFont(font, size)
        text_object.setWordSpace(max(0.0, extra))
        text_object.textOut(line)
        self._canvas.drawText(text_object)

    def finish(self) -> bytes:
        self._canvas.save()
        return self._buffer.getvalue()


def _walk(writer: _PageWriter, layout: _Layout, sections: Sequence[Section], style: RenderStyle) -> None:
    formal = style is RenderStyle.FORMAL
    advance = layout.advance
    for section in sections:
        title = section.title.upper() if formal else section.title
        writer.text(title, BOLD_FONT, layout.heading_size)
        writer.skip(advance["section_title"])
        if not formal:
            writer.divider()
            writer.skip(advance["divider"])

        for item in section.items:
            if isinstance(item, Subheading):
                writer.text(item.text, BOLD_FONT, layout.subheading_size)
                writer.skip(advance["subheading"])
            elif isinstance(item, DateLine):
                writer.text(item.text, OBLIQUE_FONT, layout.small_size)
                writer.skip(advance["date"])
            elif isinstance(item, Paragraph):
                writer.text(item.text, REGULAR_FONT, layout.normal_size, justify=formal)
                writer.skip(advance["paragraph"])
            elif isinstance(item, ListItem):
                writer.bullet(item.text, REGULAR_FONT, layout.normal_size)
                writer.skip(advance["list_item"])
            else:
                raise TypeError(f"Unsupported content item: {type(item).__name__}")
        writer.skip(advance["section_gap"])


def render_sections(sections: Sequence[Section], style: RenderStyle = RenderStyle.STANDARD) -> bytes:
    """Lay sections out on A4 pages and return the PDF bytes.

    Standard style keeps heading case and rules each heading; Formal style
    upper-cases headings and justifies paragraphs.
    """
    layout = _load_layout()
    content = list(sections)
    if not content:
        content = [Section(title=fallback_section_title(), items=(Paragraph(PLACEHOLDER_TEXT),))]

    writer = _PageWriter(layout)
    writer.centered(layout.title, BOLD_FONT, layout.title_size)
    writer.skip(layout.advance["section_gap"])
    _walk(writer, layout, content, RenderStyle(style))
    pdf = writer.finish()
    logger.info("cv_rendered style=%s sections=%s bytes=%s", RenderStyle(style).value, len(content), len(pdf))
    return pdf
