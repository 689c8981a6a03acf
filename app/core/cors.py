from __future__ import annotations

from app.core.config import settings


def cors_allowed_origins() -> list[str]:
    # Browsers send origins without a trailing slash.
    origins = [origin.rstrip("/") for origin in settings.cors_allowed_origins]
    return list(dict.fromkeys(origin for origin in origins if origin and origin != "*"))


def cors_allow_origin_regex() -> str | None:
    regex = (settings.cors_allow_origin_regex or "").strip()
    return regex or None
