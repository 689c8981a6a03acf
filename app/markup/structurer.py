from __future__ import annotations

import html
import re

from app.core.tuning import get_tuning_value

from .models import ContentItem, DateLine, ListItem, Paragraph, Section, Subheading

_SECTION_RE = re.compile(r"<h2[^>]*>(.*?)</h2>(.*?)(?=<h2[\s>]|\Z)", re.IGNORECASE | re.DOTALL)
_SUBSECTION_RE = re.compile(r"<h3[^>]*>(.*?)</h3>(.*?)(?=<h3[\s>]|\Z)", re.IGNORECASE | re.DOTALL)
_BLOCK_RE = re.compile(
    r"<p(?P<p_attrs>[^>]*)>(?P<p_body>.*?)</p>|<ul[^>]*>(?P<ul_body>.*?)</ul>",
    re.IGNORECASE | re.DOTALL,
)
_LIST_ITEM_RE = re.compile(r"<li[^>]*>(.*?)</li>", re.IGNORECASE | re.DOTALL)
_SMALL_PRINT_RE = re.compile(r"""class\s*=\s*["'][^"']*\btext-xs\b""", re.IGNORECASE)
_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

DEFAULT_SECTION_TITLE = "Resume Content"


def fallback_section_title() -> str:
    return str(get_tuning_value("markup.fallback_section_title", DEFAULT_SECTION_TITLE) or DEFAULT_SECTION_TITLE)


def clean_inline(fragment: str) -> str:
    """Strip inline wrappers (highlights, emphasis) and entities down to plain text."""
    value = _BREAK_RE.sub(" ", fragment or "")
    value = _TAG_RE.sub("", value)
    value = html.unescape(value).replace("\xa0", " ")
    return _WHITESPACE_RE.sub(" ", value).strip()


def _scan_blocks(body: str, *, under_subheading: bool) -> list[ContentItem]:
    items: list[ContentItem] = []
    date_allowed = under_subheading
    for match in _BLOCK_RE.finditer(body):
        if match.group("ul_body") is not None:
            date_allowed = False
            for item_match in _LIST_ITEM_RE.finditer(match.group("ul_body")):
                text = clean_inline(item_match.group(1))
                if text:
                    items.append(ListItem(text))
            continue

        text = clean_inline(match.group("p_body"))
        if not text:
            continue
        if date_allowed and _SMALL_PRINT_RE.search(match.group("p_attrs") or ""):
            items.append(DateLine(text))
        else:
            items.append(Paragraph(text))
        date_allowed = False
    return items


def _section_items(body: str) -> list[ContentItem]:
    groups = list(_SUBSECTION_RE.finditer(body))
    if not groups:
        return _scan_blocks(body, under_subheading=False)

    items: list[ContentItem] = _scan_blocks(body[: groups[0].start()], under_subheading=False)
    for group in groups:
        heading = clean_inline(group.group(1))
        if heading:
            items.append(Subheading(heading))
        items.extend(_scan_blocks(group.group(2), under_subheading=bool(heading)))
    return items


def parse_markup(markup: str | None) -> list[Section]:
    """Parse the resume markup dialect into ordered sections.

    ``<h2>`` opens a section, ``<h3>`` a subheading group whose first
    ``<p class="text-xs ...">`` block becomes its date line; remaining ``<p>``
    and ``<li>`` blocks become paragraphs and list items in source order.
    Input without any ``<h2>`` collapses into one generic section.
    """
    content = markup or ""
    sections: list[Section] = []
    for match in _SECTION_RE.finditer(content):
        title = clean_inline(match.group(1)) or fallback_section_title()
        sections.append(Section(title=title, items=tuple(_section_items(match.group(2)))))

    if sections:
        return sections

    plain_text = clean_inline(content)
    if not plain_text:
        return []
    return [Section(title=fallback_section_title(), items=(Paragraph(plain_text),))]
