from __future__ import annotations

from io import BytesIO
from typing import Any
from zipfile import ZipFile

from app.extraction.direct import DOCX_MIME_TYPE, LEGACY_DOC_MIME_TYPE, normalize_mime_type

EXTENSION_MIME_TYPES = {
    "pdf": "application/pdf",
    "docx": DOCX_MIME_TYPE,
    "doc": LEGACY_DOC_MIME_TYPE,
    "txt": "text/plain",
    "md": "text/markdown",
    "rtf": "application/rtf",
}
ALLOWED_MIME_TYPES = set(EXTENSION_MIME_TYPES.values()) | {"application/x-pdf", "text/rtf"}

PDF_MAGIC = b"%PDF-"
ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")


class UnsupportedUploadError(ValueError):
    pass


def _safe_str(value: Any, max_len: int = 255) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    if not text:
        return ""
    return text[:max_len]


def extension_from_filename(filename: str) -> str:
    if "." not in filename:
        return ""
    return _safe_str(filename.rsplit(".", 1)[-1], 20).lower()


def _is_zip_payload(content: bytes) -> bool:
    return any(content.startswith(prefix) for prefix in ZIP_MAGICS)


def _zip_has_paths(content: bytes, prefixes: tuple[str, ...]) -> bool:
    try:
        with ZipFile(BytesIO(content)) as archive:
            names = archive.namelist()
        return any(any(name.startswith(prefix) for prefix in prefixes) for name in names)
    except Exception:
        return False


def _is_probably_text_payload(content: bytes) -> bool:
    if not content:
        return False
    sample = content[:4096]
    if b"\x00" in sample:
        return False
    try:
        sample.decode("utf-8")
        return True
    except UnicodeDecodeError:
        pass
    printable = 0
    for byte in sample:
        if byte in (9, 10, 13) or 32 <= byte <= 126:
            printable += 1
    return (printable / len(sample)) >= 0.75


def resolve_upload_mime_type(*, filename: str, content_type: str | None) -> str:
    """Pick the document type from the file extension, falling back to the declared content type."""
    ext = extension_from_filename(filename or "")
    if ext in EXTENSION_MIME_TYPES:
        return EXTENSION_MIME_TYPES[ext]
    declared = normalize_mime_type(content_type)
    if declared in ALLOWED_MIME_TYPES:
        return declared
    raise UnsupportedUploadError(
        "Unsupported file type. Allowed: .pdf, .docx, .doc, .txt, .md, .rtf."
    )


def validate_upload_signature(*, mime_type: str, content: bytes) -> None:
    if not content:
        raise UnsupportedUploadError("Uploaded file is empty.")

    if mime_type in {"application/pdf", "application/x-pdf"}:
        if PDF_MAGIC not in content[:1024]:
            raise UnsupportedUploadError("File signature does not match .pdf content.")
        return

    if mime_type == DOCX_MIME_TYPE:
        if not _is_zip_payload(content) or not _zip_has_paths(content, ("word/",)):
            raise UnsupportedUploadError("File signature does not match .docx content.")
        return

    if mime_type.startswith("text/") or mime_type == "application/rtf":
        if not _is_probably_text_payload(content):
            raise UnsupportedUploadError("File signature does not match text content.")
