"""Brave Search service for regulatory web search."""

import logging

import httpx

from app.core.config import get_settings
from app.core.schemas_discovery import SearchResult

logger = logging.getLogger(__name__)

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"


async def search_web(
    query: str,
    count: int | None = None,
    timeout: float | None = None,
) -> list[SearchResult]:
    """
    Search the web via Brave Search.

    Args:
        query: Search query string
        count: Number of results (defaults to SEARCH_RESULT_COUNT)
        timeout: Request timeout in seconds (defaults to HTTP_TIMEOUT_SECONDS)

    Returns:
        Ordered list of SearchResult

    Raises:
        ValueError: If BRAVE_API_KEY not configured
        httpx.HTTPStatusError: If the API request fails
    """
    settings = get_settings()

    if not settings.BRAVE_API_KEY:
        raise ValueError("BRAVE_API_KEY not configured")

    result_count = count or settings.SEARCH_RESULT_COUNT

    async with httpx.AsyncClient(timeout=timeout or settings.HTTP_TIMEOUT_SECONDS) as client:
        response = await client.get(
            BRAVE_SEARCH_URL,
            params={
                "q": query,
                "count": result_count,
                "safesearch": "strict",
            },
            headers={
                "Accept": "application/json",
                "X-Subscription-Token": settings.BRAVE_API_KEY,
            },
        )
        response.raise_for_status()

        data = response.json()
        web_results = (data.get("web") or {}).get("results") or []

        results = []
        for item in web_results[:result_count]:
            url = item.get("url")
            if not url:
                continue
            results.append(
                SearchResult(
                    url=url,
                    title=item.get("title", ""),
                    snippet=item.get("description", ""),
                )
            )

        logger.info(f"Brave search '{query[:50]}': {len(results)} results")
        return results


async def search_web_safe(
    query: str,
    count: int | None = None,
    timeout: float | None = None,
) -> list[SearchResult] | None:
    """Search with error handling. Returns None on failure so callers can tell
    a failed search from an empty one."""
    try:
        return await search_web(query, count, timeout)
    except ValueError as e:
        logger.warning(f"Brave search not configured: {e}")
        return None
    except httpx.HTTPStatusError as e:
        logger.warning(f"Brave search HTTP error for '{query[:50]}': {e.response.status_code}")
        return None
    except httpx.TimeoutException:
        logger.warning(f"Brave search timeout for '{query[:50]}'")
        return None
    except Exception as e:
        logger.warning(f"Brave search error for '{query[:50]}': {e}")
        return None
