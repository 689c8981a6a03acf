import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.markup import DateLine, ListItem, Paragraph, Section, Subheading, clean_inline, parse_markup  # noqa: E402

RESUME_MARKUP = """
<div class="resume-content">
<h2>Experience</h2>
<h3>Senior Engineer, Acme</h3>
<p class="text-xs text-gray-500">2019 - 2023 | Berlin</p>
<p>Built <span class="bg-green-100 px-1">Python</span> services.</p>
<p>Led a team of <strong>five</strong>.</p>
<ul><li>Cut latency by 40%</li><li>Migrated to Kubernetes</li></ul>
<h2>Education</h2>
<h3>BSc Computer Science</h3>
<p class="text-xs">2014 - 2018</p>
<p>First class honours.</p>
<p>Thesis on compilers.</p>
<ul><li>Dean&apos;s list</li><li>Chess club &amp; captain</li></ul>
</div>
"""


class ParseMarkupTests(unittest.TestCase):
    def test_plain_text_becomes_one_generic_section(self):
        sections = parse_markup("Just plain text.")
        self.assertEqual(sections, [Section(title="Resume Content", items=(Paragraph("Just plain text."),))])

    def test_full_document_structure(self):
        sections = parse_markup(RESUME_MARKUP)

        self.assertEqual([section.title for section in sections], ["Experience", "Education"])
        self.assertEqual(
            sections[0].items,
            (
                Subheading("Senior Engineer, Acme"),
                DateLine("2019 - 2023 | Berlin"),
                Paragraph("Built Python services."),
                Paragraph("Led a team of five."),
                ListItem("Cut latency by 40%"),
                ListItem("Migrated to Kubernetes"),
            ),
        )
        self.assertEqual(
            sections[1].items,
            (
                Subheading("BSc Computer Science"),
                DateLine("2014 - 2018"),
                Paragraph("First class honours."),
                Paragraph("Thesis on compilers."),
                ListItem("Dean's list"),
                ListItem("Chess club & captain"),
            ),
        )

    def test_only_first_small_print_block_is_a_date(self):
        markup = (
            "<h2>Work</h2><h3>Analyst</h3>"
            '<p class="text-xs">2020 - 2021</p><p class="text-xs">Remote</p>'
        )
        items = parse_markup(markup)[0].items
        self.assertEqual(items, (Subheading("Analyst"), DateLine("2020 - 2021"), Paragraph("Remote")))

    def test_small_print_without_subheading_is_a_paragraph(self):
        markup = '<h2>Summary</h2><p class="text-xs">Berlin, Germany</p><ul><li>Python</li></ul>'
        items = parse_markup(markup)[0].items
        self.assertEqual(items, (Paragraph("Berlin, Germany"), ListItem("Python")))

    def test_source_order_is_kept(self):
        markup = "<h2>Skills</h2><ul><li>Go</li></ul><p>And more.</p>"
        items = parse_markup(markup)[0].items
        self.assertEqual(items, (ListItem("Go"), Paragraph("And more.")))

    def test_empty_items_are_skipped(self):
        markup = "<h2>Profile</h2><p>  </p><ul><li></li><li>Rust</li></ul>"
        self.assertEqual(parse_markup(markup)[0].items, (ListItem("Rust"),))

    def test_empty_input_has_no_sections(self):
        self.assertEqual(parse_markup(""), [])
        self.assertEqual(parse_markup(None), [])
        self.assertEqual(parse_markup("<div> </div>"), [])


class CleanInlineTests(unittest.TestCase):
    def test_entities_and_wrappers(self):
        self.assertEqual(clean_inline("A&nbsp;<em>B</em>&#38;<br/>C"), "A B& C")


if __name__ == "__main__":
    unittest.main()
