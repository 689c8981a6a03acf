from __future__ import annotations

from slowapi import Limiter
from starlette.requests import Request

from app.core.config import settings
from app.core.tuning import get_tuning_value


def client_key(request: Request) -> str:
    """First X-Forwarded-For hop when behind a proxy, otherwise the socket peer."""
    forwarded_for = request.headers.get("x-forwarded-for", "").strip()
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


limiter = Limiter(key_func=client_key)


def route_limit(route_name: str) -> str:
    """Limit string for a route from config/pipeline.yaml, falling back to RATE_LIMIT."""
    value = get_tuning_value(f"rate_limits.{route_name}")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return settings.rate_limit


def rate_limit(route_name: str | None = None):
    if settings.rate_limit_enabled:
        return limiter.limit(route_limit(route_name) if route_name else settings.rate_limit)

    def decorator(func):
        return func

    return decorator
