from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

RenderFormat = Literal["pdf", "latex"]


class CVPreviewResponse(BaseModel):
    extracted_text: str
    is_valid: bool
    error_message: str | None = None


class CVUploadResponse(BaseModel):
    id: str
    file_name: str
    extracted_text: str
    is_valid: bool


class AnalyzeRequest(BaseModel):
    job_description: str = Field(min_length=1, max_length=50000)
    cv_id: str | None = Field(default=None, max_length=64)


class AnalyzeResponse(BaseModel):
    id: str
    keywords: list[str]
    content: str


class OptimizeRequest(BaseModel):
    cv_id: str = Field(min_length=1, max_length=64)
    job_description_id: str = Field(min_length=1, max_length=64)


class OptimizeResponse(BaseModel):
    id: str
    optimized_content: str
    match_rate: int = Field(ge=0, le=100)
    matching_keywords: list[str] = Field(default_factory=list)
    missing_keywords: list[str] = Field(default_factory=list)


class MatchRequest(BaseModel):
    keywords: list[str] = Field(default_factory=list, max_length=500)
    corpus_text: str = Field(default="", max_length=200000)


class HighlightRequest(BaseModel):
    text: str = Field(default="", max_length=200000)
    keywords: list[str] = Field(default_factory=list, max_length=500)


class HighlightResponse(BaseModel):
    text: str


class RenderRequest(BaseModel):
    markup: str = Field(default="", max_length=500000)
