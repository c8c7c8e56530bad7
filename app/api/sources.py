"""API endpoints for regulatory source discovery and retrieval."""

from fastapi import APIRouter, HTTPException

from app.core.errors import (
    ConfigurationError,
    DimensionMismatchError,
    EmbeddingError,
    SearchUnavailableError,
)
from app.core.logging import get_logger
from app.core.retrieval import retrieve
from app.core.schemas_discovery import (
    DiscoveryQuery,
    DiscoveryResult,
    RetrievalRequest,
    RetrievalResponse,
)
from app.core.source_discovery import discover_sources

logger = get_logger(__name__)

router = APIRouter()


@router.post("/discover", response_model=DiscoveryResult)
async def discover(request: DiscoveryQuery) -> DiscoveryResult:
    """
    Discover, chunk and embed regulatory sources for a jurisdiction and category.

    Args:
        request: DiscoveryQuery with query text, jurisdiction, category and cap

    Returns:
        DiscoveryResult with embedded source chunks

    Raises:
        HTTPException 503: If no embedding provider or search fallback is available
        HTTPException 500: If discovery fails unexpectedly
    """
    try:
        return await discover_sources(request)
    except (ConfigurationError, SearchUnavailableError) as e:
        logger.warning(f"Discovery unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e)) from e
    except Exception as e:
        logger.exception(f"Source discovery failed for {request.jurisdiction}")
        raise HTTPException(status_code=500, detail="Source discovery failed") from e


@router.post("/retrieve", response_model=RetrievalResponse)
async def retrieve_sources(request: RetrievalRequest) -> RetrievalResponse:
    """
    Rank candidate chunks against a query.

    Raises:
        HTTPException 400: If candidate vectors differ in dimension from the query
        HTTPException 503: If no embedding provider is configured
        HTTPException 502: If the query could not be embedded
    """
    try:
        return await retrieve(request, request.candidates)
    except DimensionMismatchError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    except EmbeddingError as e:
        logger.error(f"Query embedding failed: {e.failures}")
        raise HTTPException(status_code=502, detail=str(e)) from e
    except Exception as e:
        logger.exception("Retrieval failed")
        raise HTTPException(status_code=500, detail="Retrieval failed") from e
