"""URL normalization used to deduplicate search hits."""

from urllib.parse import urlsplit, urlunsplit


def normalize_url(url: str) -> str:
    """
    Normalize a URL for duplicate detection.

    Drops the fragment and any trailing slash, keeps the query string as-is,
    and lower-cases scheme, host and path.

    Args:
        url: URL as returned by a search provider

    Returns:
        Normalized URL string
    """
    parts = urlsplit(url.strip())
    path = parts.path.lower().rstrip("/")
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ""))
