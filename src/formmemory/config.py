"""Configuration for the form memory engine.

Environment variable names are module-level constants paired with a
``DEFAULT_*`` value. ``EngineSettings.from_env`` resolves them into a single
settings object.
"""

import logging
import os
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

# ============================================
# Memory Store Connection
# ============================================
FORMMEMORY_STORE_URL = 'FORMMEMORY_STORE_URL'
DEFAULT_FORMMEMORY_STORE_URL = 'http://localhost:8000'

FORMMEMORY_STORE_TIMEOUT = 'FORMMEMORY_STORE_TIMEOUT'
DEFAULT_FORMMEMORY_STORE_TIMEOUT = 30.0

# ============================================
# Retrieval
# ============================================
FORMMEMORY_SEARCH_LIMIT = 'FORMMEMORY_SEARCH_LIMIT'
DEFAULT_FORMMEMORY_SEARCH_LIMIT = 10

FORMMEMORY_CONTEXT_LIMIT = 'FORMMEMORY_CONTEXT_LIMIT'
DEFAULT_FORMMEMORY_CONTEXT_LIMIT = 5

FORMMEMORY_CONTEXT_MEMORY_TYPE = 'FORMMEMORY_CONTEXT_MEMORY_TYPE'
DEFAULT_FORMMEMORY_CONTEXT_MEMORY_TYPE = 'form_interaction'

# ============================================
# Relevance Scoring
# ============================================
FORMMEMORY_RECENCY_WINDOW_DAYS = 'FORMMEMORY_RECENCY_WINDOW_DAYS'
DEFAULT_FORMMEMORY_RECENCY_WINDOW_DAYS = 30

FORMMEMORY_SUCCESS_THRESHOLD = 'FORMMEMORY_SUCCESS_THRESHOLD'
DEFAULT_FORMMEMORY_SUCCESS_THRESHOLD = 7.0

# Query sent when the prompt degenerates to (almost) nothing
FALLBACK_QUERY = "recent form interactions"


class EngineSettings(BaseModel):
    """Resolved engine configuration."""

    model_config = ConfigDict(frozen=True)

    store_url: str = DEFAULT_FORMMEMORY_STORE_URL
    store_timeout: float = Field(default=DEFAULT_FORMMEMORY_STORE_TIMEOUT, gt=0)
    search_limit: int = Field(default=DEFAULT_FORMMEMORY_SEARCH_LIMIT, ge=1)
    context_limit: int = Field(default=DEFAULT_FORMMEMORY_CONTEXT_LIMIT, ge=1)
    context_memory_type: str = DEFAULT_FORMMEMORY_CONTEXT_MEMORY_TYPE
    recency_window_days: int = Field(default=DEFAULT_FORMMEMORY_RECENCY_WINDOW_DAYS, ge=0)
    success_threshold: float = DEFAULT_FORMMEMORY_SUCCESS_THRESHOLD

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            Settings with every unset or unparseable variable left at its default
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        for field_name, var_name, parse in (
                ("store_url", FORMMEMORY_STORE_URL, str),
                ("store_timeout", FORMMEMORY_STORE_TIMEOUT, float),
                ("search_limit", FORMMEMORY_SEARCH_LIMIT, int),
                ("context_limit", FORMMEMORY_CONTEXT_LIMIT, int),
                ("context_memory_type", FORMMEMORY_CONTEXT_MEMORY_TYPE, str),
                ("recency_window_days", FORMMEMORY_RECENCY_WINDOW_DAYS, int),
                ("success_threshold", FORMMEMORY_SUCCESS_THRESHOLD, float),
        ):
            raw = env.get(var_name)
            if raw is None or not raw.strip():
                continue
            try:
                values[field_name] = parse(raw.strip())
            except ValueError:
                logger.warning("Ignoring invalid value for %s: %r", var_name, raw)

        if "store_url" in values:
            values["store_url"] = values["store_url"].rstrip("/")

        try:
            return cls(**values)
        except ValidationError as e:
            for error in e.errors():
                field_name = error["loc"][0]
                logger.warning("Ignoring out-of-range value for %s: %s", field_name, error["msg"])
                values.pop(field_name, None)
            return cls(**values)
