import sys
import unittest
from io import BytesIO
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pypdf import PdfReader  # noqa: E402

from app.markup import DateLine, ListItem, Paragraph, Section, Subheading  # noqa: E402
from app.rendering import PLACEHOLDER_TEXT, RenderStyle, render_sections  # noqa: E402
from app.services.cv_service import render_document  # noqa: E402

SECTIONS = [
    Section(
        title="Experience",
        items=(
            Subheading("Senior Engineer, Acme"),
            DateLine("2019 - 2023"),
            Paragraph("Built Python services and data pipelines for payment processing teams across Europe."),
            ListItem("Cut latency by 40%"),
        ),
    ),
    Section(title="Skills", items=(ListItem("Python"), ListItem("Kubernetes"))),
]


def _pdf_text(pdf: bytes) -> str:
    reader = PdfReader(BytesIO(pdf))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


class RenderSectionsTests(unittest.TestCase):
    def test_standard_style_keeps_heading_case(self):
        pdf = render_sections(SECTIONS, RenderStyle.STANDARD)
        self.assertTrue(pdf.startswith(b"%PDF"))
        text = _pdf_text(pdf)
        self.assertIn("Professional Resume", text)
        self.assertIn("Experience", text)
        self.assertNotIn("EXPERIENCE", text)
        self.assertIn("Senior Engineer, Acme", text)

    def test_formal_style_upper_cases_headings(self):
        text = _pdf_text(render_sections(SECTIONS, RenderStyle.FORMAL))
        self.assertIn("EXPERIENCE", text)
        self.assertIn("SKILLS", text)

    def test_style_accepts_wire_names(self):
        self.assertEqual(RenderStyle("pdf"), RenderStyle.STANDARD)
        self.assertEqual(RenderStyle("latex"), RenderStyle.FORMAL)
        self.assertTrue(render_sections(SECTIONS, "latex").startswith(b"%PDF"))

    def test_empty_section_list_renders_placeholder(self):
        text = _pdf_text(render_sections([]))
        self.assertIn(PLACEHOLDER_TEXT, text)
        self.assertIn("Resume Content", text)

    def test_long_content_spans_pages(self):
        paragraph = Paragraph("Delivered reliable backend services for customers. " * 4)
        sections = [Section(title=f"Section {index}", items=(paragraph,) * 5) for index in range(12)]
        reader = PdfReader(BytesIO(render_sections(sections)))
        self.assertGreater(len(reader.pages), 1)

    def test_characters_outside_font_do_not_fail(self):
        pdf = render_sections([Section(title="Zürich 東京", items=(Paragraph("Café ☕ résumé"),))])
        self.assertTrue(pdf.startswith(b"%PDF"))

    def test_unknown_item_kind_is_a_programming_error(self):
        with self.assertRaises(TypeError):
            render_sections([Section(title="Broken", items=("raw text",))])


class RenderDocumentTests(unittest.TestCase):
    def test_markup_is_structured_then_rendered(self):
        pdf = render_document("<h2>Skills</h2><ul><li>Python</li></ul>", RenderStyle.FORMAL)
        text = _pdf_text(pdf)
        self.assertIn("SKILLS", text)
        self.assertIn("Python", text)

    def test_unknown_style_falls_back_to_standard(self):
        text = _pdf_text(render_document("<h2>Skills</h2><p>Go</p>", "docx"))
        self.assertIn("Skills", text)

    def test_plain_text_and_empty_markup_render(self):
        self.assertIn("Just plain text.", _pdf_text(render_document("Just plain text.")))
        self.assertIn(PLACEHOLDER_TEXT, _pdf_text(render_document("")))


if __name__ == "__main__":
    unittest.main()
