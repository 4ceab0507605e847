"""
Relevance scoring for memories returned by the store.

Each record earns:

- ``KEYWORD_POINTS`` for every keyword contained (as a substring) in its text
- ``RECENCY_POINTS`` if it was created within the recency window
- ``SUCCESS_POINTS`` if its form scored at or above the success threshold
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Optional

from .config import DEFAULT_FORMMEMORY_RECENCY_WINDOW_DAYS, DEFAULT_FORMMEMORY_SUCCESS_THRESHOLD
from .models import MemoryRecord
from .utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)

KEYWORD_POINTS = 2
RECENCY_POINTS = 1
SUCCESS_POINTS = 3


def max_score(keywords: Sequence[str]) -> int:
    """Highest score a record can reach for ``keywords``."""
    return KEYWORD_POINTS * len(keywords) + RECENCY_POINTS + SUCCESS_POINTS


def score_record(
    record: MemoryRecord,
    keywords: Sequence[str],
    now: Optional[datetime] = None,
    recency_window_days: int = DEFAULT_FORMMEMORY_RECENCY_WINDOW_DAYS,
    success_threshold: float = DEFAULT_FORMMEMORY_SUCCESS_THRESHOLD,
) -> int:
    """
    Compute the composite relevance score of one record.

    Args:
        record: Memory to score
        keywords: Keywords extracted from the prompt
        now: Evaluation time (default: current UTC time)
        recency_window_days: Age below which a record counts as recent
        success_threshold: Success score needed for the success bonus

    Returns:
        Non-negative integer score; missing text, timestamp or metadata add nothing
    """
    score = 0
    text = record.text.lower()

    for keyword in keywords:
        if keyword and keyword.lower() in text:
            score += KEYWORD_POINTS

    if record.created_at is not None:
        now = ensure_utc(now) or utc_now()
        if now - record.created_at < timedelta(days=recency_window_days):
            score += RECENCY_POINTS

    if record.is_successful(success_threshold):
        score += SUCCESS_POINTS

    return score


def rank_records(
    records: Sequence[MemoryRecord],
    keywords: Sequence[str],
    limit: Optional[int] = None,
    now: Optional[datetime] = None,
    recency_window_days: int = DEFAULT_FORMMEMORY_RECENCY_WINDOW_DAYS,
    success_threshold: float = DEFAULT_FORMMEMORY_SUCCESS_THRESHOLD,
) -> list[MemoryRecord]:
    """
    Score records and sort them by descending relevance.

    The input records are not modified: each result is a copy carrying its
    ``relevance_score``. Equal scores keep their store order.

    Args:
        records: Records in store order
        keywords: Keywords extracted from the prompt
        limit: Keep at most this many records after sorting (default: all)
        now: Evaluation time (default: current UTC time)
        recency_window_days: Age below which a record counts as recent
        success_threshold: Success score needed for the success bonus

    Returns:
        Scored copies, highest score first
    """
    now = ensure_utc(now) or utc_now()
    scored = [
        record.model_copy(update={
            "relevance_score": score_record(
                record,
                keywords,
                now=now,
                recency_window_days=recency_window_days,
                success_threshold=success_threshold,
            ),
        })
        for record in records
    ]
    # sorted() is stable
    ranked = sorted(scored, key=lambda r: r.relevance_score, reverse=True)
    if limit is not None:
        ranked = ranked[:max(limit, 0)]

    logger.debug(
        "Ranked %s memories with %s keywords; top score %s",
        len(scored), len(keywords), ranked[0].relevance_score if ranked else None,
    )
    return ranked
