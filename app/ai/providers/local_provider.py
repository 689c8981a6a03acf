from __future__ import annotations

from typing import Sequence

from app.matching import extract_keywords_locally


class LocalAnalysisProvider:
    """Offline analysis: frequency keywords and no rewrite (the caller keeps the original text)."""

    name = "local"

    def extract_keywords(self, job_description: str) -> list[str]:
        return extract_keywords_locally(job_description)

    def rewrite_cv(self, cv_text: str, keywords: Sequence[str]) -> str | None:
        return None
