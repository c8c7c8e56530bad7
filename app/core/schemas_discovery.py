"""Pydantic schemas for source discovery, retrieval, uploads and domain prep."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class RegulatoryCategory(str, Enum):
    """Regulatory category a discovery run is scoped to."""

    ENVIRONMENTAL = "environmental"
    DATA_PRIVACY = "data_privacy"
    FINANCIAL = "financial"
    SAFETY_WORKFORCE = "safety_workforce"
    LEGAL_CONTRACTUAL = "legal_contractual"

    @property
    def label(self) -> str:
        """Human-readable label used in search queries."""
        return self.value.replace("_", " ")


# Category tag for user-uploaded documents
USER_UPLOADED_CATEGORY = "user_uploaded"


class JurisdictionLevel(str, Enum):
    FEDERAL = "federal"
    STATE = "state"
    LOCAL = "local"


class DiscoveryQuery(BaseModel):
    """Request to discover regulatory sources."""

    query: str = Field(..., min_length=1, description="Free-text query (usually document text)")
    jurisdiction: str = Field(
        ..., min_length=1, description="Country, optionally followed by a region (e.g. 'USA Texas')"
    )
    category: RegulatoryCategory = Field(..., description="Regulatory category")
    max_sources: int = Field(default=25, ge=1, description="Maximum chunks returned")


class SearchResult(BaseModel):
    """One web search hit."""

    url: str
    title: str = ""
    snippet: str = ""


class SourceChunk(BaseModel):
    """One embedded chunk of a regulatory source."""

    id: str = Field(..., description="Normalized URL plus chunk index, unique within a run")
    url: str
    title: str
    snippet: str = ""
    category: str
    jurisdiction_level: JurisdictionLevel
    content: str
    embedding: list[float]
    embedding_model: str


class DiscoveryResult(BaseModel):
    """Outcome of a discovery run."""

    sources: list[SourceChunk] = Field(default_factory=list)
    query: str
    total_found: int = Field(default=0, description="Chunks produced before the final cap")
    indexed: int = Field(default=0, description="Chunks returned")
    errors: list[str] = Field(default_factory=list)
    used_curated_fallback: bool = False


class RetrievalQuery(BaseModel):
    """Query to rank stored chunks against."""

    query: str = Field(..., min_length=1)
    categories: list[str] | None = Field(
        default=None, description="Only consider chunks in these categories"
    )
    top_k: int = Field(default=10, ge=1)


class RetrievalRequest(RetrievalQuery):
    """HTTP body for retrieval: the query plus the candidate chunks."""

    candidates: list[SourceChunk] = Field(default_factory=list)


class RetrievalResult(BaseModel):
    """A ranked chunk with its similarity score."""

    source_id: str
    url: str
    title: str
    content: str
    category: str
    similarity: float = Field(..., ge=-1.0, le=1.0)


class RetrievalResponse(BaseModel):
    results: list[RetrievalResult] = Field(default_factory=list)
    query: str
    total_candidates: int = 0


class UploadRequest(BaseModel):
    """Base64-encoded document upload."""

    file_name: str = Field(..., description="Original file name")
    file_type: str | None = Field(
        default=None, description="Declared type hint (extension or MIME type)"
    )
    file_content: str = Field(..., description="Base64-encoded file bytes")
    category: str | None = Field(default=None, description="Ignored; uploads are user_uploaded")


class UploadedSource(BaseModel):
    id: str
    url: str
    title: str
    content: str
    category: str = USER_UPLOADED_CATEGORY


class UploadResponse(BaseModel):
    success: bool
    source: UploadedSource | None = None
    error: str | None = None


class DomainPrepRequest(BaseModel):
    """Request to prepare a regulatory domain across several categories."""

    country: str = Field(..., min_length=1)
    site: str | None = Field(default=None, description="Sub-national region, e.g. 'Texas'")
    asset_class: str = Field(default="", description="Asset class appended to search queries")
    categories: list[RegulatoryCategory] = Field(..., min_length=1)
    max_sources_per_category: int = Field(default=25, ge=1)


PrepStatus = Literal["pending", "preparing", "ready", "error"]


class PrepProgress(BaseModel):
    status: PrepStatus = "pending"
    progress: int = Field(default=0, ge=0, le=100)
    log: list[str] = Field(default_factory=list)
    sources_found: int = 0
    sources_indexed: int = 0


class DomainPrepResponse(BaseModel):
    progress: PrepProgress
    sources: list[SourceChunk] = Field(default_factory=list)
