from __future__ import annotations

import logging
from io import BytesIO
from zipfile import ZipFile

import defusedxml.ElementTree as ET

from .models import ExtractionResult, StrategyName
from .normalizer import strip_control_characters
from .quality import accept

logger = logging.getLogger(__name__)

PDF_MIME_TYPES = {"application/pdf", "application/x-pdf"}
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
LEGACY_DOC_MIME_TYPE = "application/msword"
TEXT_MIME_TYPES = {"text/plain", "text/markdown", "text/rtf", "application/rtf"}

LEGACY_DOC_MESSAGE = "Legacy .doc files are not supported. Please convert to .docx or PDF and upload again."
UNSUPPORTED_MESSAGE = "Unsupported document type. Please upload a PDF, .docx or plain text file."
EMPTY_DOCUMENT_MESSAGE = (
    "ERROR: Unable to extract enough text from your document. "
    "Make sure the file contains selectable text and try again."
)


def normalize_mime_type(declared: str | None) -> str:
    return (declared or "").split(";", 1)[0].strip().lower()


def is_pdf_mime_type(declared: str | None) -> bool:
    return normalize_mime_type(declared) in PDF_MIME_TYPES


def _extract_docx_text_fallback(content: bytes) -> str:
    with ZipFile(BytesIO(content)) as archive:
        raw = archive.read("word/document.xml")
    root = ET.fromstring(raw)
    paragraphs: list[str] = []
    for paragraph in root.iter():
        if not str(paragraph.tag).endswith("}p"):
            continue
        texts: list[str] = []
        for node in paragraph.iter():
            if str(node.tag).endswith("}t") and node.text:
                value = node.text.strip()
                if value:
                    texts.append(value)
        if texts:
            paragraphs.append(" ".join(texts))
    return "\n".join(paragraphs)


def _extract_docx_text(content: bytes) -> str:
    try:
        from docx import Document

        document = Document(BytesIO(content))
        lines = [paragraph.text for paragraph in document.paragraphs if paragraph.text.strip()]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    lines.append(" | ".join(dict.fromkeys(cells)))
        return "\n".join(lines)
    except Exception as exc:
        logger.info("docx_parser_fallback reason=%s", exc)
        return _extract_docx_text_fallback(content)


def _decode_text(content: bytes) -> str:
    for encoding in ("utf-8", "utf-16", "latin-1"):
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    return ""


def extract_direct(buffer: bytes, mime_type: str) -> ExtractionResult:
    """Single-path extraction for word-processor and plain-text uploads."""
    kind = normalize_mime_type(mime_type)
    if kind == LEGACY_DOC_MIME_TYPE:
        return ExtractionResult(text=LEGACY_DOC_MESSAGE, accepted=False, strategy_used=StrategyName.NONE)
    if kind == DOCX_MIME_TYPE:
        try:
            text = _extract_docx_text(buffer)
        except Exception as exc:  # noqa: BLE001 - malformed archives surface as an invalid result
            logger.warning("docx_extraction_failed: %s", exc)
            text = ""
    elif kind in TEXT_MIME_TYPES or kind.startswith("text/"):
        text = _decode_text(buffer)
    else:
        return ExtractionResult(text=UNSUPPORTED_MESSAGE, accepted=False, strategy_used=StrategyName.NONE)

    cleaned = strip_control_characters(text)
    if not accept(cleaned):
        return ExtractionResult(text=EMPTY_DOCUMENT_MESSAGE, accepted=False, strategy_used=StrategyName.DIRECT)
    return ExtractionResult(text=cleaned, accepted=True, strategy_used=StrategyName.DIRECT)
