from .keywords import (
    HIGHLIGHT_CLOSE,
    HIGHLIGHT_OPEN,
    MatchReport,
    dedupe_keywords,
    extract_keywords_locally,
    highlight_keywords,
    match_keywords,
)

__all__ = [
    "HIGHLIGHT_CLOSE",
    "HIGHLIGHT_OPEN",
    "MatchReport",
    "dedupe_keywords",
    "extract_keywords_locally",
    "highlight_keywords",
    "match_keywords",
]
