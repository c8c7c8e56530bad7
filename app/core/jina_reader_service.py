"""Jina Reader service: fetch a web page as markdown."""

import logging

import httpx

from app.core.config import get_settings

logger = logging.getLogger(__name__)

JINA_READER_BASE_URL = "https://r.jina.ai/"


async def fetch_markdown(url: str, timeout: float | None = None) -> str:
    """
    Fetch a page's content as markdown through the Jina Reader.

    Args:
        url: Page URL
        timeout: Optional timeout override in seconds

    Returns:
        Markdown text limited to READER_MAX_CHARS; empty string when the
        reader answers with a non-success status

    Raises:
        httpx.HTTPError: On network failure or timeout
    """
    settings = get_settings()

    headers = {"Accept": "text/markdown"}
    if settings.JINA_API_KEY:
        headers["Authorization"] = f"Bearer {settings.JINA_API_KEY}"

    async with httpx.AsyncClient(
        timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
        follow_redirects=True,
    ) as client:
        response = await client.get(f"{JINA_READER_BASE_URL}{url}", headers=headers)

        if not response.is_success:
            logger.warning(f"Jina Reader returned {response.status_code} for {url}")
            return ""

        content = response.text[: settings.READER_MAX_CHARS]
        logger.info(f"Read {url}: {len(content)} chars")
        return content


async def fetch_markdown_safe(url: str, timeout: float | None = None) -> str:
    """
    Fetch markdown with error handling - returns empty string on failure.

    Use this when acquisition is per-item and failure should not break the run.
    """
    try:
        return await fetch_markdown(url, timeout)
    except httpx.TimeoutException:
        logger.warning(f"Jina Reader timeout for {url}")
        return ""
    except httpx.HTTPError as e:
        logger.warning(f"Jina Reader error for {url}: {e}")
        return ""
    except httpx.InvalidURL as e:
        logger.warning(f"Jina Reader rejected URL {url!r}: {e}")
        return ""
    except Exception as e:
        logger.warning(f"Jina Reader unexpected error for {url}: {e}")
        return ""
