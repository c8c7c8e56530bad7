"""API endpoints for compliance domain preparation."""

from fastapi import APIRouter, HTTPException

from app.core.domain_prep import prepare_domain
from app.core.logging import get_logger
from app.core.schemas_discovery import DomainPrepRequest, DomainPrepResponse

logger = get_logger(__name__)

router = APIRouter()


@router.post("/prepare", response_model=DomainPrepResponse)
async def prepare(request: DomainPrepRequest) -> DomainPrepResponse:
    """
    Discover sources for each category of a domain.

    The response carries the final progress record (status 'ready' or
    'error') and all discovered chunks.

    Raises:
        HTTPException 500: If preparation fails unexpectedly
    """
    try:
        return await prepare_domain(request)
    except Exception as e:
        logger.exception(f"Domain preparation failed for {request.country}")
        raise HTTPException(status_code=500, detail="Domain preparation failed") from e
