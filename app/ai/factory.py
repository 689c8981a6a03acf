import logging
from functools import lru_cache

from app.ai.config import load_ai_config, remote_analysis_available
from app.ai.providers.local_provider import LocalAnalysisProvider
from app.ai.providers.openai_provider import OpenAIAnalysisProvider
from app.ai.types import AnalysisProvider

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_analysis_provider() -> AnalysisProvider:
    cfg = load_ai_config()

    if remote_analysis_available(cfg):
        return OpenAIAnalysisProvider(cfg)

    logger.info(
        "analysis_provider_local enabled=%s provider=%s key_set=%s",
        cfg.enabled,
        cfg.provider,
        bool(cfg.api_key),
    )
    return LocalAnalysisProvider()
