from __future__ import annotations

import json
import logging
import time
from typing import Any, Sequence

from openai import OpenAI

from app.ai.config import AIConfig
from app.matching import dedupe_keywords, extract_keywords_locally

logger = logging.getLogger(__name__)

KEYWORD_SYSTEM_PROMPT = (
    "You are an ATS (Applicant Tracking System) expert who identifies the high-priority keywords "
    "hiring systems scan for.\n\n"
    "Extract 15-20 important keywords from the job description, prioritizing hard skills, "
    "domain knowledge, tools and platforms, certifications and industry terminology.\n"
    "- Keywords and key phrases only (typically 1-3 words)\n"
    "- Keep original capitalization for proper nouns, acronyms and product names\n"
    "- Exclude generic soft skills unless heavily emphasized\n"
    "- Sort by priority, most important first\n"
    'Return JSON: {"keywords": ["keyword1", "keyword2"]}'
)

REWRITE_SYSTEM_PROMPT = (
    "You rewrite resumes so they match a job description without inventing experience.\n"
    "Keep every fact from the original resume. Work the provided keywords in only where the "
    "original content supports them.\n"
    "Format the result with this HTML subset only:\n"
    "- <h2> for section headings\n"
    "- <h3> for a position or degree line\n"
    '- <p class="text-xs text-gray-500"> for the date/location line directly under an <h3>\n'
    "- <p> for paragraphs and <ul><li> for bullet points\n"
    'Return JSON: {"markup": "<h2>...</h2>..."}'
)


class OpenAIAnalysisProvider:
    name = "openai"

    def __init__(self, cfg: AIConfig, client: OpenAI | None = None):
        self._model = cfg.model
        self._client = client or OpenAI(
            api_key=cfg.api_key,
            base_url=cfg.base_url,
            timeout=cfg.timeout_s,
            max_retries=cfg.max_retries,
        )

    def _json_completion(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_output_tokens: int = 900,
        task: str = "unknown",
    ) -> dict[str, Any] | None:
        started = time.perf_counter()
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                response_format={"type": "json_object"},
                max_tokens=max_output_tokens,
            )
            content = response.choices[0].message.content if response.choices else ""
            if not content:
                logger.warning("analysis_llm_empty task=%s model=%s", task, self._model)
                return None
            parsed = json.loads(content)
            if not isinstance(parsed, dict):
                logger.warning("analysis_llm_invalid_schema task=%s model=%s", task, self._model)
                return None
            logger.info(
                "analysis_llm_success task=%s model=%s latency_ms=%s",
                task,
                self._model,
                int((time.perf_counter() - started) * 1000),
            )
            return parsed
        except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
            logger.warning("analysis_llm_json_failed task=%s model=%s prompt_len=%s: %s", task, self._model, len(user_prompt), exc)
            return None

    def extract_keywords(self, job_description: str) -> list[str]:
        payload = self._json_completion(
            system_prompt=KEYWORD_SYSTEM_PROMPT,
            user_prompt=job_description,
            task="keywords",
        )
        raw = payload.get("keywords") if payload else None
        if isinstance(raw, list):
            keywords = dedupe_keywords(str(item) for item in raw if isinstance(item, str))
            if keywords:
                return keywords
        return extract_keywords_locally(job_description)

    def rewrite_cv(self, cv_text: str, keywords: Sequence[str]) -> str | None:
        user_prompt = f"Keywords: {', '.join(keywords)}\n\nResume:\n{cv_text}"
        payload = self._json_completion(
            system_prompt=REWRITE_SYSTEM_PROMPT,
            user_prompt=user_prompt,
            temperature=0.3,
            max_output_tokens=3000,
            task="rewrite",
        )
        markup = payload.get("markup") if payload else None
        if isinstance(markup, str) and "<h2" in markup.lower():
            return markup
        return None
