import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AIConfig:
    enabled: bool
    provider: str
    model: str
    api_key: str
    base_url: str | None
    timeout_s: float
    max_retries: int


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def load_ai_config() -> AIConfig:
    enabled = (os.getenv("TOOLS_LLM_ENABLED") or "true").strip().lower() in {"1", "true", "yes", "y", "on"}
    provider = os.getenv("AI_PROVIDER", "openai").strip().lower()
    model = (os.getenv("AI_MODEL") or os.getenv("OPENAI_MODEL") or "gpt-4o-mini").strip()
    api_key = (os.getenv("OPENAI_API_KEY") or "").strip()
    if _looks_like_placeholder(api_key):
        api_key = ""
    return AIConfig(
        enabled=enabled,
        provider=provider,
        model=model,
        api_key=api_key,
        base_url=(os.getenv("OPENAI_BASE_URL") or "").strip() or None,
        timeout_s=float(os.getenv("TOOLS_LLM_TIMEOUT_S", "20")),
        max_retries=int(os.getenv("OPENAI_MAX_RETRIES", "2")),
    )


def remote_analysis_available(cfg: AIConfig) -> bool:
    return cfg.enabled and cfg.provider == "openai" and bool(cfg.api_key)
