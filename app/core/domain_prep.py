"""Domain preparation: run discovery for each category of a compliance domain."""

from collections.abc import Callable

from app.core.errors import ConfigurationError, SearchUnavailableError
from app.core.logging import get_logger
from app.core.schemas_discovery import (
    DiscoveryQuery,
    DomainPrepRequest,
    DomainPrepResponse,
    PrepProgress,
    RegulatoryCategory,
    SourceChunk,
)
from app.core.source_discovery import SourceDiscoverer

logger = get_logger(__name__)

CATEGORY_SEARCH_QUERIES: dict[RegulatoryCategory, list[str]] = {
    RegulatoryCategory.ENVIRONMENTAL: [
        "environmental regulations",
        "EPA compliance requirements",
        "environmental impact assessment",
        "emissions standards",
        "waste management regulations",
    ],
    RegulatoryCategory.DATA_PRIVACY: [
        "data privacy regulations",
        "GDPR compliance requirements",
        "data protection laws",
        "privacy impact assessment",
        "personal data handling requirements",
    ],
    RegulatoryCategory.FINANCIAL: [
        "financial compliance regulations",
        "SOX compliance requirements",
        "financial reporting standards",
        "audit requirements",
        "internal controls regulations",
    ],
    RegulatoryCategory.SAFETY_WORKFORCE: [
        "workplace safety regulations",
        "OSHA compliance requirements",
        "occupational health standards",
        "worker safety requirements",
        "labor law compliance",
    ],
    RegulatoryCategory.LEGAL_CONTRACTUAL: [
        "contract law requirements",
        "legal compliance obligations",
        "regulatory filing requirements",
        "licensing requirements",
        "permit regulations",
    ],
}

# Base queries combined into each category's discovery query
QUERIES_PER_CATEGORY = 2

ProgressCallback = Callable[[PrepProgress], None]


def build_category_query(
    category: RegulatoryCategory, country: str, site: str | None, asset_class: str
) -> str:
    """'environmental regulations EPA compliance requirements Texas, USA solar'"""
    location = f"{site}, {country}" if site else country
    base = " ".join(CATEGORY_SEARCH_QUERIES[category][:QUERIES_PER_CATEGORY])
    return " ".join(part for part in (base, location, asset_class.strip()) if part)


def _snapshot(progress: PrepProgress, on_progress: ProgressCallback | None) -> None:
    if on_progress is not None:
        on_progress(progress.model_copy(deep=True))


async def prepare_domain(
    request: DomainPrepRequest,
    discoverer: SourceDiscoverer | None = None,
    on_progress: ProgressCallback | None = None,
) -> DomainPrepResponse:
    """
    Discover sources for every category of a domain, one category at a time.

    Args:
        request: Country, optional site, asset class and categories
        discoverer: Discoverer to use (defaults to settings-based providers)
        on_progress: Called with a snapshot after each step

    Returns:
        DomainPrepResponse with final progress and all discovered chunks.
        Configuration errors mark the preparation as 'error'; failures for a
        single category are logged and the loop continues.
    """
    progress = PrepProgress(status="preparing")
    sources: list[SourceChunk] = []
    jurisdiction = f"{request.country} {request.site}" if request.site else request.country
    total = len(request.categories)

    progress.log.append(
        f"Validating domain: {request.country}" + (f" - {request.site}" if request.site else "")
    )
    progress.progress = 5
    _snapshot(progress, on_progress)

    try:
        discoverer = discoverer or SourceDiscoverer()

        for position, category in enumerate(request.categories, start=1):
            query = build_category_query(category, request.country, request.site, request.asset_class)
            progress.log.append(f"Discovering {category.label} sources")

            try:
                result = await discoverer.discover(
                    DiscoveryQuery(
                        query=query,
                        jurisdiction=jurisdiction,
                        category=category,
                        max_sources=request.max_sources_per_category,
                    )
                )
            except SearchUnavailableError as e:
                logger.warning(f"Domain prep skipped {category.value}: {e}")
                progress.log.append(f"Skipped {category.label}: {e}")
            else:
                sources.extend(result.sources)
                progress.sources_found += result.total_found
                progress.sources_indexed += result.indexed
                progress.log.append(
                    f"Indexed {result.indexed} of {result.total_found} {category.label} sources"
                    + (" (curated)" if result.used_curated_fallback else "")
                )
                for error in result.errors:
                    progress.log.append(f"Warning: {error}")

            progress.progress = 5 + int(95 * position / total)
            _snapshot(progress, on_progress)

    except ConfigurationError as e:
        logger.error(f"Domain prep failed: {e}")
        progress.status = "error"
        progress.log.append(f"Error: {e}")
        _snapshot(progress, on_progress)
        return DomainPrepResponse(progress=progress, sources=sources)

    progress.status = "ready"
    progress.progress = 100
    progress.log.append(f"Successfully indexed {progress.sources_indexed} sources")
    _snapshot(progress, on_progress)

    logger.info(
        f"Domain prep ready for {jurisdiction}: {progress.sources_indexed} chunks "
        f"across {total} categories"
    )
    return DomainPrepResponse(progress=progress, sources=sources)
