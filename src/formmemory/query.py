"""Search query composition."""

from collections.abc import Sequence

from .config import FALLBACK_QUERY

QUERY_KEYWORDS = 3
MIN_QUERY_LENGTH = 3


def compose_query(prompt: str, keywords: Sequence[str]) -> str:
    """
    Build the text sent to the memory store's search endpoint.

    The trimmed prompt is followed by its first three keywords. A blank prompt
    or a result shorter than three characters is replaced by a fixed fallback,
    so the store never receives a degenerate query.

    Args:
        prompt: Free-text prompt
        keywords: Keywords extracted from the prompt, most useful first

    Returns:
        Non-empty query string
    """
    cleaned = (prompt or "").strip()
    if not cleaned:
        return FALLBACK_QUERY

    query = f"{cleaned} {' '.join(keywords[:QUERY_KEYWORDS])}".strip()
    if len(query) < MIN_QUERY_LENGTH:
        return FALLBACK_QUERY
    return query
