"""Similarity retrieval over embedded source chunks (RAG)."""

from collections.abc import Sequence

from app.core.config import get_settings
from app.core.embeddings import Embedder, EmbeddingTask, get_embedder
from app.core.logging import get_logger
from app.core.schemas_discovery import (
    RetrievalQuery,
    RetrievalResponse,
    RetrievalResult,
    SourceChunk,
)
from app.core.similarity import cosine_similarity

logger = get_logger(__name__)


def filter_by_category(
    candidates: Sequence[SourceChunk], categories: list[str] | None
) -> list[SourceChunk]:
    if not categories:
        return list(candidates)
    wanted = {str(c) for c in categories}
    return [c for c in candidates if c.category in wanted]


async def retrieve(
    query: RetrievalQuery,
    candidates: Sequence[SourceChunk],
    embedder: Embedder | None = None,
) -> RetrievalResponse:
    """
    Rank candidate chunks against a query by cosine similarity.

    Args:
        query: Query text, optional category filter and top_k
        candidates: Previously embedded chunks
        embedder: Embedder for the query (defaults to settings-based chain)

    Returns:
        RetrievalResponse with the top_k results, highest similarity first

    Raises:
        EmbeddingConfigurationError: If no embedding provider is configured
        EmbeddingError: If the query cannot be embedded
        DimensionMismatchError: If a candidate vector differs in length from the query
    """
    settings = get_settings()
    pool = filter_by_category(candidates, query.categories)

    if not pool:
        logger.info("No candidate chunks to rank")
        return RetrievalResponse(results=[], query=query.query, total_candidates=0)

    embedder = embedder or get_embedder()
    query_embedding = await embedder.embed_text(query.query, EmbeddingTask.QUERY)

    mismatched_models = {c.embedding_model for c in pool} - {query_embedding.model}
    if mismatched_models:
        logger.warning(
            f"Ranking chunks embedded with {sorted(mismatched_models)} "
            f"against a {query_embedding.model} query"
        )

    scored = [(cosine_similarity(query_embedding.vector, c.embedding), c) for c in pool]
    # sorted() is stable: equal scores keep candidate order
    scored = sorted(scored, key=lambda pair: pair[0], reverse=True)[: query.top_k]

    content_chars = settings.RETRIEVAL_CONTENT_CHARS
    results = [
        RetrievalResult(
            source_id=chunk.id,
            url=chunk.url,
            title=chunk.title,
            content=chunk.content[:content_chars],
            category=chunk.category,
            similarity=score,
        )
        for score, chunk in scored
    ]

    logger.info(
        f"Ranked {len(pool)} chunks, returning {len(results)}",
        extra={"extra_data": {"top_k": query.top_k, "model": query_embedding.model}},
    )

    return RetrievalResponse(results=results, query=query.query, total_candidates=len(pool))
