from __future__ import annotations

import html
import re
from typing import Sequence

from app.core.tuning import get_tuning_int
from app.matching import highlight_keywords

_BULLET_CHARS = "•◦▪▫●○■□◆◇▶►-–—*·"
_BULLET_PATTERN = re.compile(rf"^\s*(?:[{re.escape(_BULLET_CHARS)}]|(?:\d+[\.\)]))\s+")
_HEADING_WORDS = (
    "summary",
    "objective",
    "profile",
    "experience",
    "employment",
    "skills",
    "education",
    "projects",
    "certifications",
    "languages",
    "awards",
    "publications",
    "contact",
)
_POSITION_WORDS = (
    "manager",
    "engineer",
    "developer",
    "director",
    "analyst",
    "consultant",
    "specialist",
    "designer",
    "architect",
    "lead",
    "intern",
    "coordinator",
    "administrator",
    "scientist",
)
_YEAR_RANGE_RE = re.compile(r"\b(?:19|20)\d{2}\s*(?:-|–|—|to)\s*(?:(?:19|20)\d{2}|present|current|now)\b", re.IGNORECASE)
_MONTH_RE = re.compile(
    r"\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?\s+(?:19|20)\d{2}\b",
    re.IGNORECASE,
)
_PRESENT_RE = re.compile(r"\b(?:present|current)\b", re.IGNORECASE)

ERROR_MARKUP = (
    '<div class="resume-content">'
    "<h2>Error Processing Your Resume</h2>"
    "<p>We could not read enough text from your resume to optimize it.</p>"
    "<ul>"
    "<li>Upload a text-based PDF rather than a scanned image</li>"
    "<li>Try a DOCX or plain text version of the same resume</li>"
    "<li>Paste the resume content directly</li>"
    "</ul>"
    "</div>"
)


def _strip_bullet(line: str) -> str:
    return _BULLET_PATTERN.sub("", line).strip()


def _looks_like_date(line: str) -> bool:
    return bool(_YEAR_RANGE_RE.search(line) or _MONTH_RE.search(line) or _PRESENT_RE.search(line))


def _classify(line: str) -> str:
    lowered = line.lower()
    words = line.split()
    heading_max = get_tuning_int("markup.heading_max_chars", 50)
    if len(line) < heading_max:
        has_letters = any(char.isalpha() for char in line)
        if has_letters and line.isupper() and len(words) <= 6:
            return "h2"
        if line.endswith(":") and len(words) <= 5:
            return "h2"
        if len(words) <= 4 and any(word in lowered for word in _HEADING_WORDS):
            return "h2"

    has_position_word = any(re.search(rf"\b{word}\b", lowered) for word in _POSITION_WORDS)
    if len(line) < get_tuning_int("markup.date_line_max_chars", 60) and _looks_like_date(line) and not has_position_word:
        return "date"
    if len(line) < get_tuning_int("markup.position_max_chars", 80) and (
        has_position_word or _YEAR_RANGE_RE.search(line) or _MONTH_RE.search(line)
    ):
        return "h3"
    return "p"


def _render_block(kind: str, text: str) -> str:
    escaped = html.escape(text, quote=False)
    if kind == "h2":
        return f"<h2>{html.escape(text.rstrip(':').strip(), quote=False)}</h2>"
    if kind == "h3":
        return f"<h3>{escaped}</h3>"
    if kind == "date":
        return f'<p class="text-xs text-gray-500">{escaped}</p>'
    return f'<p class="mb-4 text-sm">{escaped}</p>'


def build_markup(cv_text: str | None, keywords: Sequence[str] | None = None) -> str:
    """Structure plain CV text into the resume markup dialect and highlight keywords.

    Used whenever no rewriting service is available. Headings, position lines
    and date lines are recognised per line; consecutive body lines form a
    paragraph and bullet lines form a list.
    """
    text = (cv_text or "").replace("\r\n", "\n").replace("\r", "\n")
    if len(text.strip()) < 10 or not re.search(r"[A-Za-z0-9]", text):
        return ERROR_MARKUP

    blocks: list[str] = []
    paragraph: list[str] = []
    bullets: list[str] = []

    def flush_paragraph() -> None:
        if paragraph:
            blocks.append(_render_block("p", " ".join(paragraph)))
            paragraph.clear()

    def flush_bullets() -> None:
        if bullets:
            items = "".join(f"<li>{html.escape(item, quote=False)}</li>" for item in bullets)
            blocks.append(f"<ul>{items}</ul>")
            bullets.clear()

    for raw_line in text.split("\n"):
        line = re.sub(r"\s+", " ", raw_line).strip()
        if not line:
            flush_paragraph()
            flush_bullets()
            continue
        if _BULLET_PATTERN.match(raw_line):
            flush_paragraph()
            item = _strip_bullet(raw_line)
            if item:
                bullets.append(re.sub(r"\s+", " ", item))
            continue

        flush_bullets()
        kind = _classify(line)
        if kind == "p":
            paragraph.append(line)
            continue
        flush_paragraph()
        blocks.append(_render_block(kind, line))

    flush_paragraph()
    flush_bullets()

    body = "".join(blocks)
    return f'<div class="resume-content">{highlight_keywords(body, keywords)}</div>'
