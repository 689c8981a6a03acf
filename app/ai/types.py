from __future__ import annotations

from typing import Protocol, Sequence


class AnalysisProvider(Protocol):
    name: str

    def extract_keywords(self, job_description: str) -> list[str]: ...

    def rewrite_cv(self, cv_text: str, keywords: Sequence[str]) -> str | None: ...
