"""API endpoints for user document uploads."""

from fastapi import APIRouter, HTTPException

from app.core.file_text import process_upload
from app.core.logging import get_logger
from app.core.schemas_discovery import UploadRequest, UploadResponse

logger = get_logger(__name__)

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload_document(request: UploadRequest) -> UploadResponse:
    """
    Extract text from an uploaded document.

    Extraction problems (unsupported type, no readable text, oversized file)
    come back as ``success: false`` with an error message.

    Raises:
        HTTPException 500: If processing fails unexpectedly
    """
    try:
        return await process_upload(request)
    except Exception as e:
        logger.exception(f"Upload processing failed for {request.file_name}")
        raise HTTPException(status_code=500, detail="Upload processing failed") from e
