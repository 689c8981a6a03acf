from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class StrategyName(str, Enum):
    LIBRARY = "library"
    EXTERNAL_TOOL = "external_tool"
    BYTE_PATTERN = "byte_pattern"
    METADATA = "metadata"
    ASCII_SCRAPE = "ascii_scrape"
    DIRECT = "direct"
    NONE = "none"


class ExtractionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    accepted: bool
    strategy_used: StrategyName


class ExtractTextResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    is_valid: bool
    error_message: str | None = None
    strategy_used: StrategyName = StrategyName.NONE
