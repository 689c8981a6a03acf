from __future__ import annotations

import os
from pathlib import Path
from typing import Any

_TUNING_CONFIG_CACHE: dict[str, Any] | None = None
_TUNING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "pipeline.yaml"

# Environment overrides for the highest-impact knobs, keyed by dot path.
_ENV_OVERRIDES = {
    "quality_gate.min_chars": "QUALITY_MIN_CHARS",
    "quality_gate.min_alpha_run": "QUALITY_MIN_ALPHA_RUN",
}


def get_tuning_config() -> dict[str, Any]:
    """Load pipeline tuning values from repo-level config/pipeline.yaml and cache them."""
    global _TUNING_CONFIG_CACHE

    if _TUNING_CONFIG_CACHE is not None:
        return _TUNING_CONFIG_CACHE

    if not _TUNING_CONFIG_PATH.exists():
        raise RuntimeError(
            f"Pipeline config not found at '{_TUNING_CONFIG_PATH}'. "
            "Expected file: config/pipeline.yaml"
        )

    try:
        import yaml  # type: ignore[import-not-found]
    except Exception as exc:
        raise RuntimeError(
            "Unable to parse pipeline config because PyYAML is unavailable. "
            "Install dependency: PyYAML."
        ) from exc

    try:
        raw = _TUNING_CONFIG_PATH.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(
            f"Failed to read pipeline config '{_TUNING_CONFIG_PATH}': {exc}"
        ) from exc

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:  # type: ignore[attr-defined]
        raise RuntimeError(
            f"Invalid YAML in pipeline config '{_TUNING_CONFIG_PATH}': {exc}"
        ) from exc

    if not isinstance(parsed, dict):
        raise RuntimeError(
            f"Invalid pipeline config '{_TUNING_CONFIG_PATH}': expected a top-level mapping."
        )

    _TUNING_CONFIG_CACHE = parsed
    return _TUNING_CONFIG_CACHE


def get_tuning_value(path: str, default: Any = None) -> Any:
    """Get nested config value using dot path notation, e.g. 'quality_gate.min_chars'."""
    if not path:
        return default

    env_name = _ENV_OVERRIDES.get(path)
    if env_name:
        raw = (os.getenv(env_name) or "").strip()
        if raw:
            try:
                return int(raw)
            except ValueError:
                pass

    current: Any = get_tuning_config()
    for key in path.split("."):
        if not isinstance(current, dict):
            return default
        if key not in current:
            return default
        current = current[key]
    return current


def get_tuning_int(path: str, default: int) -> int:
    value = get_tuning_value(path, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def get_tuning_float(path: str, default: float) -> float:
    value = get_tuning_value(path, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
