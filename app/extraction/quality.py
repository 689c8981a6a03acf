from __future__ import annotations

import re
from functools import lru_cache

from app.core.tuning import get_tuning_int

DEFAULT_MIN_CHARS = 100
DEFAULT_MIN_ALPHA_RUN = 5


def quality_thresholds() -> tuple[int, int]:
    """Return the (min_chars, min_alpha_run) pair used by the quality gate."""
    min_chars = get_tuning_int("quality_gate.min_chars", DEFAULT_MIN_CHARS)
    min_alpha_run = get_tuning_int("quality_gate.min_alpha_run", DEFAULT_MIN_ALPHA_RUN)
    return max(0, min_chars), max(1, min_alpha_run)


@lru_cache(maxsize=8)
def _alpha_run_re(length: int) -> re.Pattern[str]:
    return re.compile(rf"[a-zA-Z]{{{length},}}")


def accept(text: str | None, *, min_chars: int | None = None, min_alpha_run: int | None = None) -> bool:
    """Decide whether extracted text is good enough to hand downstream.

    Rejects empty text, text shorter than ``min_chars`` once stripped, and text
    without a single run of ``min_alpha_run`` consecutive ASCII letters. Used
    after every extraction attempt and again on the final normalized result.
    """
    if not text:
        return False
    default_chars, default_run = quality_thresholds()
    chars = default_chars if min_chars is None else min_chars
    run = default_run if min_alpha_run is None else max(1, min_alpha_run)
    if len(text.strip()) < chars:
        return False
    return bool(_alpha_run_re(run).search(text))
