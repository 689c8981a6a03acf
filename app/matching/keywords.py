from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, Sequence

from pydantic import BaseModel, Field

from app.core.tuning import get_tuning_int

HIGHLIGHT_OPEN = '<span class="bg-green-100 px-1">'
HIGHLIGHT_CLOSE = "</span>"

_HIGHLIGHT_SPAN_RE = re.compile(r'<span class="bg-green-100[^"]*"[^>]*>.*?</span>', re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_TOKEN_RE = re.compile(r"[A-Za-z][A-Za-z0-9+#./-]*")

STOPWORDS = {
    "a", "about", "above", "after", "again", "against", "all", "am", "an", "and", "any", "are", "as", "at",
    "be", "because", "been", "before", "being", "below", "between", "both", "but", "by", "could", "did",
    "do", "does", "doing", "down", "during", "each", "few", "for", "from", "further", "had", "has", "have",
    "having", "he", "her", "here", "hers", "herself", "him", "himself", "his", "how", "i", "if", "in",
    "into", "is", "it", "its", "itself", "me", "more", "most", "my", "myself", "nor", "of", "on", "once",
    "only", "or", "other", "ought", "our", "ours", "ourselves", "out", "over", "own", "same", "she",
    "should", "so", "some", "such", "than", "that", "the", "their", "theirs", "them", "themselves", "then",
    "there", "these", "they", "this", "those", "through", "to", "too", "under", "until", "up", "very",
    "was", "we", "were", "what", "when", "where", "which", "while", "who", "whom", "why", "will", "with",
    "would", "you", "your", "yours", "yourself", "yourselves",
}


class MatchReport(BaseModel):
    matching: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    match_rate: int = Field(default=0, ge=0, le=100)


def dedupe_keywords(keywords: Iterable[str] | None) -> list[str]:
    """Trim, drop blanks and collapse case-insensitive duplicates, keeping first spelling and order."""
    seen: set[str] = set()
    output: list[str] = []
    for raw in keywords or []:
        value = str(raw or "").strip()
        if not value:
            continue
        key = value.casefold()
        if key in seen:
            continue
        seen.add(key)
        output.append(value)
    return output


def _rounded_percent(part: int, total: int) -> int:
    if total <= 0:
        return 0
    # Half-up rounding on integers so 62.5 becomes 63.
    return (200 * part + total) // (2 * total)


def match_keywords(keywords: Sequence[str] | None, corpus: str | None) -> MatchReport:
    """Partition keywords into present/missing by case-insensitive substring containment.

    Every entry is classified exactly once and both lists keep the input order;
    blank entries are always missing.
    Callers that want a KeywordSet run ``dedupe_keywords`` first.
    """
    keyword_set = [str(keyword or "") for keyword in keywords or []]
    haystack = (corpus or "").casefold()
    matching: list[str] = []
    missing: list[str] = []
    for keyword in keyword_set:
        needle = keyword.strip().casefold()
        if needle and needle in haystack:
            matching.append(keyword)
        else:
            missing.append(keyword)
    return MatchReport(
        matching=matching,
        missing=missing,
        match_rate=_rounded_percent(len(matching), len(keyword_set)),
    )


def _overlaps(span: tuple[int, int], others: Iterable[tuple[int, int]]) -> bool:
    start, end = span
    return any(start < other_end and other_start < end for other_start, other_end in others)


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![A-Za-z0-9]){re.escape(keyword)}(?![A-Za-z0-9])", re.IGNORECASE)


def highlight_keywords(text: str | None, keywords: Sequence[str] | None) -> str:
    """Wrap keyword occurrences in highlight spans without ever nesting them.

    Keywords are placed longest first; a candidate overlapping an accepted span,
    an existing highlight or any markup tag is dropped. Spans are applied from
    the end of the text backwards so earlier offsets stay valid.
    """
    if not text:
        return text or ""
    protected = [match.span() for match in _HIGHLIGHT_SPAN_RE.finditer(text)]
    protected.extend(match.span() for match in _TAG_RE.finditer(text))

    accepted: list[tuple[int, int]] = []
    for keyword in sorted(dedupe_keywords(keywords), key=len, reverse=True):
        for match in _keyword_pattern(keyword).finditer(text):
            span = match.span()
            if _overlaps(span, protected) or _overlaps(span, accepted):
                continue
            accepted.append(span)

    output = text
    for start, end in sorted(accepted, reverse=True):
        output = output[:start] + HIGHLIGHT_OPEN + output[start:end] + HIGHLIGHT_CLOSE + output[end:]
    return output


def extract_keywords_locally(text: str | None, limit: int | None = None) -> list[str]:
    """Frequency-ranked terms from a job description, used when no analysis service is reachable."""
    max_items = limit if limit is not None else get_tuning_int("keywords.local_limit", 20)
    min_length = get_tuning_int("keywords.min_token_length", 3)
    counts: Counter[str] = Counter()
    for token in _TOKEN_RE.findall((text or "").lower()):
        cleaned = token.strip(".,;:/-")
        if len(cleaned) < min_length or cleaned in STOPWORDS:
            continue
        counts[cleaned] += 1
    return [term for term, _count in counts.most_common(max(0, max_items))]
