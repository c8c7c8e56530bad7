"""Regulatory source discovery.

A discovery run searches the web for a jurisdiction/category pair, reads each
hit, chunks and embeds the text, and returns embedded ``SourceChunk`` records.

When the jurisdiction names a US state, a federal and a state sub-run execute
concurrently. Each owns its URL-seen set and chunk cap; their results are
combined by ``merge_sub_runs`` with state chunks taking priority. Without a
search key (or when every live search fails) the run uses the curated
catalog instead.
"""

import asyncio
import logging
import math
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from app.core.brave_search_service import search_web_safe
from app.core.cancellation import CancellationToken
from app.core.chunking import chunk_text
from app.core.config import Settings, get_settings
from app.core.curated_sources import (
    CATALOG_VERSION,
    CuratedSource,
    curated_sources_for,
    placeholder_text,
)
from app.core.embeddings import Embedder, EmbeddingTask
from app.core.errors import EmbeddingError, SearchUnavailableError
from app.core.jina_reader_service import fetch_markdown_safe
from app.core.jurisdiction import catalog_key, detect_region, remove_region
from app.core.logging import get_logger, log_with_context
from app.core.schemas_discovery import (
    DiscoveryQuery,
    DiscoveryResult,
    JurisdictionLevel,
    SearchResult,
    SourceChunk,
)
from app.core.url_utils import normalize_url

logger = get_logger(__name__)

# Returns None when the search itself failed, [] when it found nothing
SearchFn = Callable[[str], Awaitable[list[SearchResult] | None]]
# Returns "" when the page could not be read
ReaderFn = Callable[[str], Awaitable[str]]


@dataclass
class SubRunResult:
    """Chunks and errors owned by one federal or state sub-run."""

    level: JurisdictionLevel
    chunks: list[SourceChunk] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    search_failed: bool = False


def build_federal_query(query: str, region: str | None) -> str:
    base = remove_region(query, region) if region else query.strip()
    return f"{base} federal law regulations"


def build_state_query(region: str, category_label: str) -> str:
    return f"{region} {category_label} state law regulations requirements"


def merge_sub_runs(state: SubRunResult, federal: SubRunResult) -> list[SourceChunk]:
    """
    Combine state and federal chunks, preferring state for shared URLs.

    The result is keyed by normalized URL: state chunks are taken first, then
    federal ones, and only the first chunk seen for each URL is kept.
    """
    seen: set[str] = set()
    merged: list[SourceChunk] = []
    for chunk in [*state.chunks, *federal.chunks]:
        normalized = normalize_url(chunk.url)
        if normalized in seen:
            logger.debug(f"Dropping duplicate {chunk.jurisdiction_level.value} chunk: {chunk.id}")
            continue
        seen.add(normalized)
        merged.append(chunk)
    return merged


class SourceDiscoverer:
    """Runs discovery against injected search, reader and embedding providers."""

    def __init__(
        self,
        embedder: Embedder | None = None,
        search: SearchFn | None = None,
        reader: ReaderFn | None = None,
        search_enabled: bool | None = None,
        settings: Settings | None = None,
        timeout: float | None = None,
    ):
        self.settings = settings or get_settings()
        self.timeout = timeout or self.settings.HTTP_TIMEOUT_SECONDS
        self.embedder = embedder or Embedder.from_settings(self.settings, timeout=self.timeout)
        self._search = search or self._default_search
        self._reader = reader or self._default_reader
        if search_enabled is None:
            search_enabled = search is not None or bool(self.settings.BRAVE_API_KEY)
        self.search_enabled = search_enabled

    async def _default_search(self, query: str) -> list[SearchResult] | None:
        return await search_web_safe(
            query, count=self.settings.SEARCH_RESULT_COUNT, timeout=self.timeout
        )

    async def _default_reader(self, url: str) -> str:
        return await fetch_markdown_safe(url, timeout=self.timeout)

    async def discover(
        self,
        request: DiscoveryQuery,
        cancel_token: CancellationToken | None = None,
    ) -> DiscoveryResult:
        """
        Discover and embed regulatory sources.

        Args:
            request: Query, jurisdiction, category and chunk cap
            cancel_token: Optional token checked before each network call

        Returns:
            DiscoveryResult with at most request.max_sources chunks

        Raises:
            EmbeddingConfigurationError: If no embedding provider is configured
            SearchUnavailableError: If live search failed and no curated sources exist
            DiscoveryCancelledError: If cancel_token is cancelled mid-run
        """
        self.embedder.ensure_configured()
        token = cancel_token or CancellationToken()
        run_id = str(uuid.uuid4())
        region = detect_region(request.jurisdiction)

        log_with_context(
            logger,
            logging.INFO,
            "Starting source discovery",
            run_id=run_id,
            jurisdiction=request.jurisdiction,
            category=request.category.value,
            region=region or "none",
            max_sources=request.max_sources,
        )

        if not self.search_enabled:
            logger.info("Search not configured, using curated sources", extra={"run_id": run_id})
            return await self._discover_curated(request, region, token, run_id, errors=[])

        if region:
            sub_cap = math.ceil(request.max_sources / 2)
            federal, state = await asyncio.gather(
                self._sub_run(
                    build_federal_query(request.query, region),
                    JurisdictionLevel.FEDERAL, request, sub_cap, token, run_id,
                ),
                self._sub_run(
                    build_state_query(region, request.category.label),
                    JurisdictionLevel.STATE, request, sub_cap, token, run_id,
                ),
            )
            sub_runs = [state, federal]
            combined = merge_sub_runs(state, federal)
        else:
            federal = await self._sub_run(
                request.query, JurisdictionLevel.FEDERAL, request, request.max_sources, token, run_id
            )
            sub_runs = [federal]
            combined = federal.chunks

        errors = [e for run in sub_runs for e in run.errors]

        if all(run.search_failed for run in sub_runs):
            logger.warning("Every live search failed, falling back to curated sources")
            return await self._discover_curated(
                request, region, token, run_id, errors=errors, require_entries=True
            )

        final = combined[: request.max_sources]

        log_with_context(
            logger,
            logging.INFO,
            "Source discovery complete",
            run_id=run_id,
            total=len(final),
            federal=sum(1 for c in final if c.jurisdiction_level == JurisdictionLevel.FEDERAL),
            state=sum(1 for c in final if c.jurisdiction_level == JurisdictionLevel.STATE),
            errors=len(errors),
        )

        return DiscoveryResult(
            sources=final,
            query=request.query,
            total_found=len(combined),
            indexed=len(final),
            errors=errors,
        )

    async def _sub_run(
        self,
        search_query: str,
        level: JurisdictionLevel,
        request: DiscoveryQuery,
        cap: int,
        token: CancellationToken,
        run_id: str,
    ) -> SubRunResult:
        result = SubRunResult(level=level)
        seen: set[str] = set()

        log_with_context(
            logger,
            logging.INFO,
            "Searching",
            run_id=run_id,
            jurisdiction_level=level.value,
            query=search_query,
        )

        token.raise_if_cancelled()
        hits = await self._search(search_query)
        if hits is None:
            result.search_failed = True
            result.errors.append(f"Search failed for {level.value} query")
            return result

        for hit in hits:
            if len(result.chunks) >= cap:
                break

            normalized = normalize_url(hit.url)
            if normalized in seen:
                logger.info(f"Skipping duplicate: {hit.url}", extra={"run_id": run_id})
                continue
            seen.add(normalized)

            token.raise_if_cancelled()
            try:
                content = await self._reader(hit.url)
            except Exception as e:
                logger.warning(f"Reader error for {hit.url}: {e}", extra={"run_id": run_id})
                content = ""
            if not content:
                logger.warning(f"Failed to extract content from {hit.url}", extra={"run_id": run_id})
                result.errors.append(f"Failed to extract content from {hit.url}")
                continue

            await self._embed_chunks(
                content,
                chunk_fields={"url": hit.url, "title": hit.title, "snippet": hit.snippet},
                normalized_url=normalized,
                level=level,
                request=request,
                cap=cap,
                into=result,
                token=token,
            )

        logger.info(
            f"{level.value} sub-run indexed {len(result.chunks)} chunks", extra={"run_id": run_id}
        )
        return result

    async def _embed_chunks(
        self,
        content: str,
        chunk_fields: dict[str, Any],
        normalized_url: str,
        level: JurisdictionLevel,
        request: DiscoveryQuery,
        cap: int,
        into: SubRunResult,
        token: CancellationToken,
        snippet_from_chunk: bool = False,
    ) -> None:
        """Chunk content and embed up to MAX_CHUNKS_PER_SOURCE chunks into a sub-run."""
        chunks = chunk_text(content, max_tokens=self.settings.CHUNK_MAX_TOKENS)
        for index, chunk in enumerate(chunks[: self.settings.MAX_CHUNKS_PER_SOURCE]):
            if len(into.chunks) >= cap:
                return

            token.raise_if_cancelled()
            try:
                embedding = await self.embedder.embed_text(chunk, EmbeddingTask.PASSAGE)
            except EmbeddingError as e:
                logger.warning(f"Failed to embed chunk from {chunk_fields['url']}: {e}")
                into.errors.append(f"Failed to embed chunk from {chunk_fields['url']}")
                continue

            fields = dict(chunk_fields)
            if snippet_from_chunk:
                fields["snippet"] = chunk[:200]

            into.chunks.append(
                SourceChunk(
                    id=f"{normalized_url}#{index}",
                    category=request.category.value,
                    jurisdiction_level=level,
                    content=chunk,
                    embedding=embedding.vector,
                    embedding_model=embedding.model,
                    **fields,
                )
            )

    async def _discover_curated(
        self,
        request: DiscoveryQuery,
        region: str | None,
        token: CancellationToken,
        run_id: str,
        errors: list[str],
        require_entries: bool = False,
    ) -> DiscoveryResult:
        entries = curated_sources_for(catalog_key(request.jurisdiction), request.category, region)

        if not entries:
            message = (
                f"No curated sources for {request.jurisdiction} / {request.category.value}"
            )
            if require_entries:
                raise SearchUnavailableError(f"Web search failed. {message}")
            logger.warning(message, extra={"run_id": run_id})
            return DiscoveryResult(
                query=request.query, errors=[*errors, message], used_curated_fallback=True
            )

        results: dict[JurisdictionLevel, SubRunResult] = {}
        for entry in entries:
            run = results.setdefault(entry.level, SubRunResult(level=entry.level))
            produced = sum(len(r.chunks) for r in results.values())
            if produced >= request.max_sources:
                break
            await self._curated_entry(entry, request, run, token, run_id, produced)

        ordered = [
            c for level in (JurisdictionLevel.STATE, JurisdictionLevel.FEDERAL)
            for c in results.get(level, SubRunResult(level=level)).chunks
        ]
        final = ordered[: request.max_sources]
        all_errors = [*errors, *(e for run in results.values() for e in run.errors)]

        log_with_context(
            logger,
            logging.INFO,
            "Curated discovery complete",
            run_id=run_id,
            catalog_version=CATALOG_VERSION,
            entries=len(entries),
            total=len(final),
        )

        return DiscoveryResult(
            sources=final,
            query=request.query,
            total_found=len(ordered),
            indexed=len(final),
            errors=all_errors,
            used_curated_fallback=True,
        )

    async def _curated_entry(
        self,
        entry: CuratedSource,
        request: DiscoveryQuery,
        run: SubRunResult,
        token: CancellationToken,
        run_id: str,
        produced: int,
    ) -> None:
        token.raise_if_cancelled()
        try:
            content = await self._reader(entry.url)
        except Exception as e:
            logger.warning(f"Reader error for {entry.url}: {e}", extra={"run_id": run_id})
            content = ""
        if not content:
            logger.info(f"Using placeholder for curated source {entry.url}", extra={"run_id": run_id})
            content = placeholder_text(entry)

        # Cap for this entry: remaining room in the overall run
        cap = len(run.chunks) + (request.max_sources - produced)
        await self._embed_chunks(
            content,
            chunk_fields={"url": entry.url, "title": entry.title},
            normalized_url=normalize_url(entry.url),
            level=entry.level,
            request=request,
            cap=cap,
            into=run,
            token=token,
            snippet_from_chunk=True,
        )


async def discover_sources(
    request: DiscoveryQuery,
    cancel_token: CancellationToken | None = None,
) -> DiscoveryResult:
    """Run discovery with providers built from settings."""
    return await SourceDiscoverer().discover(request, cancel_token)
