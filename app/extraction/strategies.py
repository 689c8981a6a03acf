from __future__ import annotations

import re
from io import BytesIO
from typing import Protocol

from pypdf import PdfReader

from app.core.tuning import get_tuning_int

from .external_tool import TextExtractionTool, get_default_text_tool
from .models import StrategyName


class ExtractionStrategy(Protocol):
    name: StrategyName

    def extract(self, buffer: bytes) -> str | None:
        """Return candidate text for the buffer, or None when nothing was recovered."""


def _open_reader(buffer: bytes) -> PdfReader:
    reader = PdfReader(BytesIO(buffer), strict=False)
    if reader.is_encrypted:
        # Owner-password-only files open with an empty user password.
        reader.decrypt("")
    return reader


class LibraryStrategy:
    """Content-stream aware extraction through pypdf."""

    name = StrategyName.LIBRARY

    def extract(self, buffer: bytes) -> str | None:
        reader = _open_reader(buffer)
        page_chunks: list[str] = []
        for page in reader.pages:
            page_text = page.extract_text() or ""
            if page_text.strip():
                page_chunks.append(page_text)
        return "\n\n".join(page_chunks) or None


class ExternalToolStrategy:
    name = StrategyName.EXTERNAL_TOOL

    def __init__(self, tool: TextExtractionTool | None = None) -> None:
        self._tool = tool or get_default_text_tool()

    def extract(self, buffer: bytes) -> str | None:
        return self._tool.extract(buffer)


_BYTE_PATTERNS = (
    # Parenthesized string operands.
    re.compile(r"\(([^)]{2,})\)"),
    # Tj text-show operator runs.
    re.compile(r"\([^)]+\)\s*Tj"),
    # BT ... ET text objects.
    re.compile(r"BT\s*([\s\S]*?)\s*ET"),
    # Computer Modern / TeX font selections.
    re.compile(r"/([CT]m[rbi]\d+)\s+\d+\s+Tf"),
    re.compile(r"\\text\{([^}]+)\}"),
    re.compile(r"\\(?:title|author|section|subsection)\{([^}]+)\}"),
    # Capitalized word followed by at least two lowercase words.
    re.compile(r"[A-Z][a-z]+(?:\s+[a-z]+){2,}\.?"),
)
_OPERATOR_TOKEN_RE = re.compile(r"[()]|\bTj\b|\bBT\b|\bET\b")
_ALNUM_RE = re.compile(r"[a-zA-Z0-9]")


class BytePatternStrategy:
    """Regex scan of the raw bytes for text-show idioms and TeX leftovers."""

    name = StrategyName.BYTE_PATTERN

    def __init__(self, scan_limit: int | None = None) -> None:
        self._scan_limit = scan_limit

    def extract(self, buffer: bytes) -> str | None:
        limit = self._scan_limit or get_tuning_int("extraction.byte_scan_limit", 100_000)
        content = buffer[:limit].decode("latin-1")
        parts: list[str] = []
        for pattern in _BYTE_PATTERNS:
            for match in pattern.finditer(content):
                part = _OPERATOR_TOKEN_RE.sub("", match.group(0))
                if part.strip() and _ALNUM_RE.search(part):
                    parts.append(part)
        return " ".join(parts) or None


class MetadataStrategy:
    """Document-info fields for image-only files that carry no text layer."""

    name = StrategyName.METADATA

    _FIELDS = (("Title", "/Title"), ("Author", "/Author"), ("Subject", "/Subject"), ("Keywords", "/Keywords"))

    def extract(self, buffer: bytes) -> str | None:
        reader = _open_reader(buffer)
        metadata = reader.metadata
        if not metadata:
            return None
        lines: list[str] = []
        for label, key in self._FIELDS:
            if key not in metadata:
                continue
            value = metadata[key]
            text = str(value).strip() if value is not None else ""
            if text:
                lines.append(f"{label}: {text}")
        return "\n".join(lines) or None


_PRINTABLE_TABLE = bytes(
    byte if (0x20 <= byte <= 0x7E or byte in (0x09, 0x0A, 0x0D)) else 0x20 for byte in range(256)
)


class AsciiScrapeStrategy:
    """Last resort: printable ASCII tokens longer than three characters."""

    name = StrategyName.ASCII_SCRAPE

    def __init__(self, min_token_length: int | None = None) -> None:
        self._min_token_length = min_token_length

    def extract(self, buffer: bytes) -> str | None:
        min_length = self._min_token_length or get_tuning_int("extraction.ascii_min_token_length", 4)
        printable = buffer.translate(_PRINTABLE_TABLE).decode("ascii")
        words = [word for word in printable.split() if len(word) >= min_length]
        return " ".join(words) or None


def default_strategies(tool: TextExtractionTool | None = None) -> list[ExtractionStrategy]:
    return [
        LibraryStrategy(),
        ExternalToolStrategy(tool),
        BytePatternStrategy(),
        MetadataStrategy(),
        AsciiScrapeStrategy(),
    ]
