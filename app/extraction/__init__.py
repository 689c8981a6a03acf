from .chain import EXTRACTION_FAILURE_MESSAGE, run_extraction_chain
from .direct import extract_direct, is_pdf_mime_type
from .models import ExtractionResult, ExtractTextResult, StrategyName
from .normalizer import normalize_extracted_text, strip_control_characters
from .quality import accept

__all__ = [
    "EXTRACTION_FAILURE_MESSAGE",
    "ExtractionResult",
    "ExtractTextResult",
    "StrategyName",
    "accept",
    "extract_direct",
    "is_pdf_mime_type",
    "normalize_extracted_text",
    "run_extraction_chain",
    "strip_control_characters",
]
