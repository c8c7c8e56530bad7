"""API router for v1 endpoints."""

from fastapi import APIRouter

from app.api import documents, domains, sources

router = APIRouter()

# Source discovery and retrieval routes
router.include_router(sources.router, prefix="/sources", tags=["sources"])

# Document upload routes
router.include_router(documents.router, prefix="/documents", tags=["documents"])

# Domain preparation routes
router.include_router(domains.router, prefix="/domains", tags=["domains"])
