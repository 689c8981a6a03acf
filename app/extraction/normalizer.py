from __future__ import annotations

import re
import unicodedata

_PDF_ESCAPED_CHAR_RE = re.compile(r"\\([()\\])")
_LATEX_GROUP_OPEN_RE = re.compile(r"\\[a-zA-Z]+\{")
_LATEX_COMMAND_RE = re.compile(r"\\[a-zA-Z]+")
_OBJECT_MARKER_RE = re.compile(r"\b\d+\s+\d+\s+obj\b|\bendobj\b|\bobj\b")
_STREAM_MARKER_RE = re.compile(r"\bendstream\b|\bstream\b")
_XREF_MARKER_RE = re.compile(r"\bxref\b|\btrailer\b|\bstartxref\b")
_DICT_NAME_RE = re.compile(
    r"/(?:Title|Author|Subject|Keywords|Producer|Creator|CreationDate|ModDate|BaseFont|Encoding"
    r"|FontDescriptor|Font|Page|Contents|Resources|MediaBox)\b"
)
_DICT_FRAGMENT_RE = re.compile(r"/Length\s+\d+\s*>>|/Filter\s*/FlateDecode")
_SYMBOL_RUN_RE = re.compile(r"[^\w\s.,;:?!()\"'-]{3,}")
_MANY_NEWLINES_RE = re.compile(r"\n{3,}")
_WHITESPACE_RE = re.compile(r"\s+")
_INLINE_SPACE_RE = re.compile(r"[ \t\f\v]+")

# Unicode categories that never carry readable content.
_DROP_CATEGORIES = {"Cc", "Cf", "Co", "Cn", "Cs"}


def _is_printable(char: str) -> bool:
    if char in "\n\r\t":
        return True
    if char == "\ufffd":
        return False
    return unicodedata.category(char) not in _DROP_CATEGORIES


def strip_control_characters(text: str) -> str:
    """Replace non-printable characters with spaces, keeping line structure."""
    if not text:
        return ""
    cleaned = "".join(char if _is_printable(char) else " " for char in text)
    cleaned = cleaned.replace("\r\n", "\n").replace("\r", "\n")
    lines = [_INLINE_SPACE_RE.sub(" ", line).strip() for line in cleaned.split("\n")]
    return _MANY_NEWLINES_RE.sub("\n\n", "\n".join(lines)).strip()


def strip_residual_syntax(text: str) -> str:
    """Remove PDF object markers, dictionary names and LaTeX commands left by byte-level scans."""
    value = _PDF_ESCAPED_CHAR_RE.sub(r"\1", text)
    value = _LATEX_GROUP_OPEN_RE.sub("", value).replace("}", "")
    value = _LATEX_COMMAND_RE.sub(" ", value)
    value = _OBJECT_MARKER_RE.sub("", value)
    value = _STREAM_MARKER_RE.sub("", value)
    value = _XREF_MARKER_RE.sub("", value)
    value = _DICT_NAME_RE.sub("", value)
    return value


def normalize_extracted_text(text: str | None) -> str:
    """Clean text recovered from a PDF into a single normalized run of prose."""
    if not text:
        return ""
    value = text.replace("\r\n", "\n")
    value = _MANY_NEWLINES_RE.sub("\n\n", value)
    value = strip_residual_syntax(value)
    value = "".join(char if _is_printable(char) else " " for char in value)
    value = _WHITESPACE_RE.sub(" ", value).strip()

    value = _SYMBOL_RUN_RE.sub(" ", value)
    value = _DICT_FRAGMENT_RE.sub(" ", value)
    return _WHITESPACE_RE.sub(" ", value).strip()
