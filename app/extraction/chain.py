from __future__ import annotations

import logging
from typing import Sequence

from .models import ExtractionResult, StrategyName
from .normalizer import normalize_extracted_text
from .quality import accept
from .strategies import ExtractionStrategy, default_strategies

logger = logging.getLogger(__name__)

EXTRACTION_FAILURE_MESSAGE = (
    "ERROR: Unable to extract text content from your PDF. This might be because:\n\n"
    "1. The PDF contains scanned images without embedded text\n"
    "2. The PDF has security restrictions or is password-protected\n"
    "3. The PDF uses custom fonts or encoding\n\n"
    "Please try uploading a different PDF where you can select and copy text content."
)


def _attempt(strategy: ExtractionStrategy, buffer: bytes) -> str:
    try:
        return strategy.extract(buffer) or ""
    except Exception as exc:  # noqa: BLE001 - a failing strategy only means "try the next one"
        logger.warning("pdf_strategy_failed strategy=%s: %s", strategy.name.value, exc)
        return ""


def run_extraction_chain(
    buffer: bytes,
    strategies: Sequence[ExtractionStrategy] | None = None,
) -> ExtractionResult:
    """Recover text from a PDF buffer by trying each strategy until one passes the quality gate.

    When every strategy is rejected the last non-empty candidate is still
    normalized and gated once more; if that also fails the result carries the
    user-facing diagnostic instead of partial garbage.
    """
    chain = list(strategies) if strategies is not None else default_strategies()
    candidate = ""
    used = StrategyName.NONE

    for strategy in chain:
        text = _attempt(strategy, buffer or b"")
        if not text.strip():
            logger.info("pdf_strategy_empty strategy=%s", strategy.name.value)
            continue
        candidate, used = text, strategy.name
        if accept(text):
            logger.info("pdf_strategy_accepted strategy=%s chars=%s", used.value, len(text))
            break
        logger.info("pdf_strategy_rejected strategy=%s chars=%s", strategy.name.value, len(text))

    normalized = normalize_extracted_text(candidate)
    if not accept(normalized):
        logger.error("pdf_extraction_failed strategy=%s chars=%s", used.value, len(normalized))
        return ExtractionResult(text=EXTRACTION_FAILURE_MESSAGE, accepted=False, strategy_used=used)

    logger.info("pdf_extraction_sample strategy=%s sample=%r", used.value, normalized[:200])
    return ExtractionResult(text=normalized, accepted=True, strategy_used=used)
