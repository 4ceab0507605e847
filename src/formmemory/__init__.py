"""Contextual memory retrieval and relevance ranking for AI form generation."""

from .client import MemoryStoreClient
from .config import EngineSettings
from .credentials import (
    CredentialProvider,
    ServiceContextCredentialProvider,
    SessionCredentialProvider,
    StaticCredentialProvider,
)
from .exceptions import (
    ForbiddenError,
    FormMemoryError,
    StoreError,
    TransportError,
    UnauthorizedError,
)
from .insights import enhance_prompt_fallback, format_insight, format_successful_examples, synthesize
from .keywords import extract_keywords
from .models import (
    FormAnalytics,
    FormHistory,
    Insight,
    InsightStats,
    MemoryMetadata,
    MemoryRecord,
    OperationResult,
    PromptEnhancement,
    SearchResult,
    UserContext,
    UserPreferences,
)
from .query import compose_query
from .result import Result
from .retrieval import MemoryRetriever
from .scoring import rank_records, score_record
from .types import InteractionType, MemoryType

__version__ = "0.1.0"

__all__ = [
    # Main entry points
    "MemoryRetriever",
    "MemoryStoreClient",
    "EngineSettings",
    # Pipeline stages
    "extract_keywords",
    "compose_query",
    "score_record",
    "rank_records",
    "synthesize",
    "format_insight",
    "format_successful_examples",
    "enhance_prompt_fallback",
    # Credentials
    "CredentialProvider",
    "StaticCredentialProvider",
    "SessionCredentialProvider",
    "ServiceContextCredentialProvider",
    # Models
    "MemoryRecord",
    "MemoryMetadata",
    "FormAnalytics",
    "SearchResult",
    "OperationResult",
    "UserContext",
    "FormHistory",
    "UserPreferences",
    "Insight",
    "InsightStats",
    "PromptEnhancement",
    "Result",
    # Types
    "InteractionType",
    "MemoryType",
    # Exceptions
    "FormMemoryError",
    "UnauthorizedError",
    "ForbiddenError",
    "StoreError",
    "TransportError",
]
