import sys
import unittest
from io import BytesIO
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from docx import Document  # noqa: E402

from app.extraction import StrategyName, extract_direct  # noqa: E402
from app.extraction.direct import (  # noqa: E402
    DOCX_MIME_TYPE,
    EMPTY_DOCUMENT_MESSAGE,
    LEGACY_DOC_MESSAGE,
    UNSUPPORTED_MESSAGE,
)
from app.services.cv_service import extract_text  # noqa: E402

RESUME_LINES = [
    "EXPERIENCE",
    "Senior Software Engineer",
    "Built Python services on Docker for payments and reporting teams across Europe.",
    "- Reduced latency by 40%",
]


def _docx_bytes(lines: list[str]) -> bytes:
    document = Document()
    for line in lines:
        document.add_paragraph(line)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


class DirectExtractionTests(unittest.TestCase):
    def test_plain_text_keeps_lines(self):
        content = "\n".join(RESUME_LINES).encode("utf-8")
        result = extract_direct(content, "text/plain; charset=utf-8")
        self.assertTrue(result.accepted)
        self.assertEqual(result.strategy_used, StrategyName.DIRECT)
        self.assertEqual(result.text.splitlines(), RESUME_LINES)

    def test_docx_paragraphs_are_read(self):
        result = extract_direct(_docx_bytes(RESUME_LINES), DOCX_MIME_TYPE)
        self.assertTrue(result.accepted)
        self.assertIn("Senior Software Engineer", result.text)
        self.assertIn("Reduced latency by 40%", result.text)

    def test_legacy_doc_is_rejected_with_guidance(self):
        result = extract_direct(b"\xd0\xcf\x11\xe0legacy", "application/msword")
        self.assertFalse(result.accepted)
        self.assertEqual(result.text, LEGACY_DOC_MESSAGE)

    def test_unknown_type_is_rejected(self):
        result = extract_direct(b"\x89PNG\r\n", "image/png")
        self.assertFalse(result.accepted)
        self.assertEqual(result.text, UNSUPPORTED_MESSAGE)

    def test_short_text_fails_quality_gate(self):
        result = extract_direct(b"Too short", "text/plain")
        self.assertFalse(result.accepted)
        self.assertEqual(result.text, EMPTY_DOCUMENT_MESSAGE)

    def test_broken_docx_is_invalid_not_an_error(self):
        result = extract_text(b"PK\x03\x04 not really a zip", DOCX_MIME_TYPE)
        self.assertFalse(result.is_valid)
        self.assertEqual(result.error_message, EMPTY_DOCUMENT_MESSAGE)


if __name__ == "__main__":
    unittest.main()
