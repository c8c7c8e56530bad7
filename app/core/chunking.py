"""Text chunking for regulatory source content."""

import re

CHARS_PER_TOKEN = 4

PARAGRAPH_BREAK = re.compile(r"\n\n+")
SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")


def estimate_tokens(text: str) -> int:
    """Rough token estimate (~4 characters per token)."""
    return len(text) // CHARS_PER_TOKEN


def _over_budget(text: str, max_tokens: int) -> bool:
    return len(text) / CHARS_PER_TOKEN > max_tokens


def _accumulate(parts: list[str], separator: str, max_tokens: int) -> list[str]:
    """Greedily join parts with separator while the joined text stays in budget."""
    chunks: list[str] = []
    current = ""

    for part in parts:
        part = part.strip()
        if not part:
            continue

        candidate = f"{current}{separator}{part}" if current else part
        if current and _over_budget(candidate, max_tokens):
            chunks.append(current)
            current = part
        else:
            current = candidate

    if current:
        chunks.append(current)

    return chunks


def chunk_text(text: str, max_tokens: int = 512) -> list[str]:
    """
    Split text into retrieval-sized chunks.

    Paragraphs are packed together first. Any chunk still over budget is
    re-split on sentence boundaries and packed again. A single sentence longer
    than the budget is emitted as-is.

    Args:
        text: Text to chunk
        max_tokens: Token budget per chunk

    Returns:
        Ordered list of non-empty chunk strings

    Raises:
        ValueError: If max_tokens is not positive
    """
    if max_tokens <= 0:
        raise ValueError(f"max_tokens must be positive, got {max_tokens}")

    if not text or not text.strip():
        return []

    chunks: list[str] = []
    for chunk in _accumulate(PARAGRAPH_BREAK.split(text), "\n\n", max_tokens):
        if _over_budget(chunk, max_tokens):
            chunks.extend(_accumulate(SENTENCE_BREAK.split(chunk), " ", max_tokens))
        else:
            chunks.append(chunk)

    return chunks
