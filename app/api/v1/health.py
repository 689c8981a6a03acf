from fastapi import APIRouter

from app.extraction.external_tool import get_default_text_tool

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check():
    return {"status": "healthy", "pdf_text_tool": get_default_text_tool().name}
