"""Shared fixtures for form memory tests."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from formmemory import (
    EngineSettings,
    MemoryRecord,
    MemoryRetriever,
    MemoryStoreClient,
    StaticCredentialProvider,
)

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_record(
    text: str,
    success_score: Optional[float] = None,
    field_count: Optional[int] = None,
    field_types: Optional[list[str]] = None,
    created_at: Optional[datetime] = None,
    **metadata: Any,
) -> MemoryRecord:
    """Build a MemoryRecord the way the store would return it."""
    analytics: dict[str, Any] = {}
    if success_score is not None:
        analytics["success_score"] = success_score
    if field_count is not None:
        analytics["generated_field_count"] = field_count
    if field_types is not None:
        analytics["generated_field_types"] = field_types
    if analytics:
        metadata["ai_form_analytics"] = analytics
    return MemoryRecord(text=text, metadata=metadata, created_at=created_at)


def wire_memory(
    text: str,
    success_score: Optional[float] = None,
    field_count: Optional[int] = None,
    field_types: Optional[list[str]] = None,
    days_old: Optional[float] = None,
) -> dict[str, Any]:
    """Build one entry of a /memory/search response body."""
    entry: dict[str, Any] = {"memory": text}
    analytics: dict[str, Any] = {}
    if success_score is not None:
        analytics["success_score"] = success_score
    if field_count is not None:
        analytics["generated_field_count"] = field_count
    if field_types is not None:
        analytics["generated_field_types"] = field_types
    if analytics:
        entry["metadata"] = {"ai_form_analytics": analytics}
    if days_old is not None:
        entry["created_at"] = (datetime.now(timezone.utc) - timedelta(days=days_old)).isoformat()
    return entry


@pytest.fixture
def base_url() -> str:
    """Test base URL."""
    return "http://test.memory-store.local"


@pytest.fixture
def settings(base_url: str) -> EngineSettings:
    return EngineSettings(store_url=base_url)


@pytest.fixture
def client(base_url: str) -> MemoryStoreClient:
    """Create test client."""
    return MemoryStoreClient(
        base_url=base_url,
        credentials=StaticCredentialProvider("test_token"),
    )


@pytest.fixture
def retriever(settings: EngineSettings) -> MemoryRetriever:
    """Create a retriever that owns its store client."""
    return MemoryRetriever(
        settings=settings,
        credentials=StaticCredentialProvider("test_token"),
    )
