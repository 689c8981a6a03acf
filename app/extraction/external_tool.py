from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from functools import lru_cache
from typing import Protocol

from app.core.config import settings

logger = logging.getLogger(__name__)


class TextExtractionTool(Protocol):
    name: str

    def extract(self, buffer: bytes) -> str | None:
        """Return text recovered by an operating-system utility, or None."""


def _safe_unlink(path: str) -> None:
    try:
        if os.path.exists(path):
            os.unlink(path)
    except OSError as exc:
        logger.warning("pdf_temp_cleanup_failed path=%s: %s", path, exc)


class PdftotextTool:
    """Runs poppler's ``pdftotext`` against a temp copy of the buffer."""

    name = "pdftotext"

    def __init__(self, command: str = "pdftotext", timeout_s: float = 20.0) -> None:
        self._command = command
        self._timeout_s = timeout_s

    def extract(self, buffer: bytes) -> str | None:
        fd, temp_path = tempfile.mkstemp(prefix="cv-extract-", suffix=".pdf")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(buffer)
            completed = subprocess.run(
                [self._command, temp_path, "-"],
                capture_output=True,
                timeout=self._timeout_s,
                check=False,
            )
            if completed.returncode != 0:
                stderr = completed.stderr.decode("utf-8", errors="replace").strip()
                logger.info("pdftotext_nonzero_exit code=%s: %s", completed.returncode, stderr[:200])
                return None
            return completed.stdout.decode("utf-8", errors="replace")
        finally:
            _safe_unlink(temp_path)


class UnavailableTextTool:
    """Stand-in used when no extraction utility exists on the host."""

    name = "unavailable"

    def extract(self, buffer: bytes) -> str | None:
        return None


@lru_cache(maxsize=1)
def get_default_text_tool() -> TextExtractionTool:
    if not settings.extract_tool_enabled:
        return UnavailableTextTool()
    resolved = shutil.which(settings.extract_tool_command)
    if not resolved:
        logger.info("pdf_text_tool_unavailable command=%s", settings.extract_tool_command)
        return UnavailableTextTool()
    return PdftotextTool(command=resolved, timeout_s=settings.extract_tool_timeout_s)
