from fastapi import APIRouter, File, HTTPException, Query, Request, Response, UploadFile, status

from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.matching import MatchReport
from app.rendering import RenderStyle
from app.schemas.cv import (
    AnalyzeRequest,
    AnalyzeResponse,
    CVPreviewResponse,
    CVUploadResponse,
    HighlightRequest,
    HighlightResponse,
    MatchRequest,
    OptimizeRequest,
    OptimizeResponse,
    RenderFormat,
    RenderRequest,
)
from app.services import cv_service
from app.services.upload_policy import UnsupportedUploadError, resolve_upload_mime_type, validate_upload_signature

router = APIRouter()

MAX_UPLOAD_BYTES = settings.max_upload_mb * 1024 * 1024


async def _read_upload(file: UploadFile) -> tuple[str, str, bytes]:
    filename = file.filename or "uploaded-file"
    try:
        mime_type = resolve_upload_mime_type(filename=filename, content_type=file.content_type)
    except UnsupportedUploadError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(1024 * 64)
        if not chunk:
            break
        total += len(chunk)
        if total > MAX_UPLOAD_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large. Maximum allowed size is {settings.max_upload_mb} MB.",
            )
        chunks.append(chunk)
    payload = b"".join(chunks)

    try:
        validate_upload_signature(mime_type=mime_type, content=payload)
    except UnsupportedUploadError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return filename, mime_type, payload


def _pdf_response(pdf: bytes, filename: str | None = None) -> Response:
    headers = {"Cache-Control": "no-cache"}
    if filename:
        headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return Response(content=pdf, media_type="application/pdf", headers=headers)


@router.post("/cv/preview", response_model=CVPreviewResponse)
@rate_limit("cv_preview")
async def cv_preview(request: Request, file: UploadFile = File(...)):
    _, mime_type, payload = await _read_upload(file)
    result = cv_service.extract_text(payload, mime_type)
    return CVPreviewResponse(
        extracted_text=result.text,
        is_valid=result.is_valid,
        error_message=result.error_message,
    )


@router.post("/cv/upload", response_model=CVUploadResponse, status_code=status.HTTP_201_CREATED)
@rate_limit("cv_upload")
async def cv_upload(request: Request, file: UploadFile = File(...)):
    filename, mime_type, payload = await _read_upload(file)
    record, extraction = cv_service.store_cv(file_name=filename, file_type=mime_type, buffer=payload)
    return CVUploadResponse(
        id=record["id"],
        file_name=record["file_name"],
        extracted_text=cv_service.upload_preview(extraction.text),
        is_valid=extraction.is_valid,
    )


@router.post("/analyze", response_model=AnalyzeResponse)
@rate_limit("analyze")
async def analyze(request: Request, payload: AnalyzeRequest):
    return cv_service.analyze_job_description(payload.job_description, payload.cv_id)


@router.post("/optimize", response_model=OptimizeResponse, status_code=status.HTTP_201_CREATED)
@rate_limit("optimize")
async def optimize(request: Request, response: Response, payload: OptimizeRequest):
    try:
        result, created = cv_service.optimize_cv(payload.cv_id, payload.job_description_id)
    except cv_service.RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if not created:
        response.status_code = status.HTTP_200_OK
    return result


@router.post("/match", response_model=MatchReport)
@rate_limit("match")
async def match(request: Request, payload: MatchRequest):
    return cv_service.compute_match(payload.keywords, payload.corpus_text)


@router.post("/highlight", response_model=HighlightResponse)
@rate_limit("highlight")
async def highlight(request: Request, payload: HighlightRequest):
    return HighlightResponse(text=cv_service.highlight_keywords(payload.text, payload.keywords))


@router.post("/render")
@rate_limit("render")
async def render(request: Request, payload: RenderRequest, format: RenderFormat = Query(default="pdf")):
    pdf = cv_service.render_document(payload.markup, RenderStyle(format))
    return _pdf_response(pdf)


@router.get("/cv/download/{optimized_id}")
@rate_limit("cv_download")
async def cv_download(request: Request, optimized_id: str, format: RenderFormat = Query(default="pdf")):
    try:
        pdf, filename = cv_service.download_optimized_cv(optimized_id, RenderStyle(format))
    except cv_service.RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _pdf_response(pdf, filename)
