"""Text extraction from uploaded files (base64 upload boundary)."""

import base64
import binascii
import re
import uuid

from app.core.config import get_settings
from app.core.document_processing import (
    ExtractionError,
    detect_file_format,
    extract_file_text,
)
from app.core.logging import get_logger
from app.core.schemas_discovery import UploadedSource, UploadRequest, UploadResponse

logger = get_logger(__name__)

# Base64 inflates payloads by ~4/3; size checks run on the encoded string
BASE64_OVERHEAD = 1.34

TRUNCATION_MARKER = "\n\n[Content truncated]"


def title_from_filename(filename: str) -> str:
    """'site_permit-2024.pdf' -> 'Site Permit 2024'."""
    stem = filename.rsplit(".", 1)[0] if "." in filename else filename
    words = re.sub(r"[_-]+", " ", stem).split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def truncate_text(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def _decode_payload(file_content: str) -> bytes:
    payload = file_content.strip()
    # Accept data URLs ("data:application/pdf;base64,....")
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    return base64.b64decode(payload, validate=False)


async def process_upload(request: UploadRequest) -> UploadResponse:
    """
    Extract text from a base64-encoded upload.

    Args:
        request: UploadRequest with file name, optional type hint and content

    Returns:
        UploadResponse; extraction problems are reported with success=False
        rather than raised
    """
    settings = get_settings()

    if not request.file_name or not request.file_content:
        return UploadResponse(success=False, error="file_name and file_content are required")

    max_encoded = int(settings.MAX_UPLOAD_BYTES * BASE64_OVERHEAD)
    if len(request.file_content) > max_encoded:
        limit_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
        return UploadResponse(
            success=False, error=f"File too large. Maximum size is {limit_mb:.0f}MB."
        )

    try:
        raw_bytes = _decode_payload(request.file_content)
    except (binascii.Error, ValueError):
        return UploadResponse(success=False, error="File content is not valid base64")

    file_format = detect_file_format(request.file_type, request.file_name)

    try:
        result = await extract_file_text(raw_bytes, file_format, request.file_name)
    except ExtractionError as e:
        logger.warning(f"Upload extraction failed for {request.file_name}: {e}")
        return UploadResponse(success=False, error=str(e))

    text = truncate_text(result.text.strip(), settings.MAX_EXTRACTED_TEXT_CHARS)
    if not text:
        return UploadResponse(success=False, error="No text content found in file")

    source = UploadedSource(
        id=f"upload-{uuid.uuid4().hex[:12]}",
        url=f"file://{request.file_name}",
        title=title_from_filename(request.file_name),
        content=text,
    )

    logger.info(
        f"Processed upload {request.file_name}: {len(text)} chars, "
        f"format={file_format.value}, method={result.extraction_method}"
    )

    return UploadResponse(success=True, source=source)
