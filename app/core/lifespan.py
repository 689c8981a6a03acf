from contextlib import asynccontextmanager
import logging

from app.core.document_store import init_document_store
from app.extraction.external_tool import get_default_text_tool

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    init_document_store()
    tool = get_default_text_tool()
    logger.info("startup_ready pdf_text_tool=%s", tool.name)
    yield
