from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Sequence

from app.ai.factory import get_analysis_provider
from app.core import document_store
from app.core.tuning import get_tuning_int
from app.extraction import (
    EXTRACTION_FAILURE_MESSAGE,
    ExtractTextResult,
    StrategyName,
    accept,
    extract_direct,
    is_pdf_mime_type,
    run_extraction_chain,
)
from app.markup import build_markup, parse_markup
from app.matching import MatchReport, dedupe_keywords, match_keywords
from app.matching import highlight_keywords as _highlight_keywords
from app.rendering import RenderStyle, render_sections

logger = logging.getLogger(__name__)


class RecordNotFoundError(LookupError):
    pass


def extract_text(buffer: bytes, declared_mime_type: str | None) -> ExtractTextResult:
    """Turn an uploaded document into usable text or a diagnostic. Never raises."""
    try:
        if is_pdf_mime_type(declared_mime_type):
            result = run_extraction_chain(buffer or b"")
        else:
            result = extract_direct(buffer or b"", declared_mime_type or "")
    except Exception as exc:  # noqa: BLE001 - callers always get a well-formed result
        logger.exception("extract_text_failed mime=%s: %s", declared_mime_type, exc)
        return ExtractTextResult(
            text=EXTRACTION_FAILURE_MESSAGE,
            is_valid=False,
            error_message=EXTRACTION_FAILURE_MESSAGE,
            strategy_used=StrategyName.NONE,
        )

    is_valid = result.accepted and accept(result.text)
    return ExtractTextResult(
        text=result.text,
        is_valid=is_valid,
        error_message=None if is_valid else result.text,
        strategy_used=result.strategy_used,
    )


def compute_match(keywords: Sequence[str] | None, corpus_text: str | None) -> MatchReport:
    try:
        return match_keywords(keywords, corpus_text)
    except Exception as exc:  # noqa: BLE001
        logger.warning("compute_match_failed: %s", exc)
        return MatchReport(matching=[], missing=[str(keyword) for keyword in keywords or []], match_rate=0)


def highlight_keywords(text: str | None, keywords: Sequence[str] | None) -> str:
    try:
        return _highlight_keywords(text, keywords)
    except Exception as exc:  # noqa: BLE001
        logger.warning("highlight_keywords_failed: %s", exc)
        return text or ""


def render_document(markup: str | None, style: RenderStyle | str = RenderStyle.STANDARD) -> bytes:
    """Structure markup into sections and lay them out as PDF bytes."""
    try:
        resolved = RenderStyle(style)
    except ValueError:
        logger.info("render_style_unknown style=%s", style)
        resolved = RenderStyle.STANDARD

    try:
        sections = parse_markup(markup)
    except Exception as exc:  # noqa: BLE001 - an unreadable document still renders the placeholder
        logger.warning("markup_structuring_failed: %s", exc)
        sections = []
    try:
        return render_sections(sections, resolved)
    except Exception as exc:  # noqa: BLE001
        logger.exception("render_failed style=%s sections=%s: %s", resolved.value, len(sections), exc)
        return render_sections([], resolved)


def upload_preview(text: str) -> str:
    limit = get_tuning_int("extraction.upload_preview_chars", 200)
    return f"{text[:limit]}..."


def store_cv(*, file_name: str, file_type: str, buffer: bytes) -> tuple[dict[str, Any], ExtractTextResult]:
    extraction = extract_text(buffer, file_type)
    record = document_store.create_cv_document(
        file_name=file_name,
        file_type=file_type,
        extracted_text=extraction.text,
    )
    logger.info(
        "cv_stored id=%s type=%s valid=%s strategy=%s chars=%s",
        record["id"],
        file_type,
        extraction.is_valid,
        extraction.strategy_used.value,
        len(extraction.text),
    )
    return record, extraction


def analyze_job_description(job_description: str, cv_id: str | None = None) -> dict[str, Any]:
    provider = get_analysis_provider()
    keywords = dedupe_keywords(provider.extract_keywords(job_description))
    record = document_store.create_job_description(content=job_description, keywords=keywords, cv_id=cv_id)
    logger.info("job_description_analyzed id=%s provider=%s keywords=%s", record["id"], provider.name, len(keywords))
    return {"id": record["id"], "keywords": keywords, "content": job_description}


def _usable_cv_text(cv_text: str) -> bool:
    return accept(cv_text) and not cv_text.startswith("ERROR:")


def _optimized_markup(cv_text: str, keywords: Sequence[str]) -> str:
    if not _usable_cv_text(cv_text):
        return build_markup("", keywords)

    provider = get_analysis_provider()
    rewritten = provider.rewrite_cv(cv_text, keywords)
    if rewritten:
        return highlight_keywords(rewritten, keywords)
    return build_markup(cv_text, keywords)


def optimize_cv(cv_id: str, job_description_id: str) -> tuple[dict[str, Any], bool]:
    """Return the optimized CV payload for a (cv, job description) pair and whether it was newly created.

    An earlier optimization for the same pair is reused; only its keyword lists
    are recomputed against the current CV text.
    """
    cv = document_store.get_cv_document(cv_id)
    job_description = document_store.get_job_description(job_description_id)
    if cv is None or job_description is None:
        raise RecordNotFoundError("CV or job description not found")

    cv_text = cv["extracted_text"] or ""
    keywords = job_description["keywords"] or []
    if _usable_cv_text(cv_text):
        report = compute_match(keywords, cv_text)
    else:
        # A stored diagnostic is not CV content; nothing in it counts as a match.
        report = MatchReport(matching=[], missing=[str(keyword) for keyword in keywords], match_rate=0)

    existing = document_store.get_optimized_cv_by_pair(cv_id, job_description_id)
    if existing is not None:
        logger.info("optimized_cv_reused id=%s", existing["id"])
        return (
            {
                "id": existing["id"],
                "optimized_content": existing["content"],
                "match_rate": existing["match_rate"],
                "matching_keywords": report.matching,
                "missing_keywords": report.missing,
            },
            False,
        )

    markup = _optimized_markup(cv_text, keywords)
    record = document_store.create_optimized_cv(
        content=markup,
        match_rate=report.match_rate,
        cv_id=cv_id,
        job_description_id=job_description_id,
    )
    logger.info("optimized_cv_created id=%s match_rate=%s", record["id"], report.match_rate)
    return (
        {
            "id": record["id"],
            "optimized_content": markup,
            "match_rate": report.match_rate,
            "matching_keywords": report.matching,
            "missing_keywords": report.missing,
        },
        True,
    )


def download_filename(now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return f"optimized-cv-{moment.strftime('%Y-%m-%d')}.pdf"


def download_optimized_cv(optimized_id: str, style: RenderStyle | str = RenderStyle.STANDARD) -> tuple[bytes, str]:
    record = document_store.get_optimized_cv(optimized_id)
    if record is None:
        raise RecordNotFoundError("Optimized CV not found")
    return render_document(record["content"], style), download_filename()
