"""
Contextual memory retrieval.

``MemoryRetriever`` ties keyword extraction, query composition, the store
client, relevance ranking and insight synthesis together. It is never on the
critical path of the features it supports: store failures are logged and
turned into sentinels (``None`` for searches, ``""`` for context strings,
``False`` for tracking writes). The ``*_result`` variants return the same
outcome as a ``Result`` so callers can inspect the error. Tracking writes
swallow any exception, including payloads the JSON encoder rejects.
"""

import logging
from typing import Any, Optional, Union

from .client import MemoryStoreClient
from .config import EngineSettings
from .credentials import CredentialProvider
from .exceptions import FormMemoryError
from .insights import (
    enhance_prompt_fallback,
    format_insight,
    format_successful_examples,
    synthesize,
)
from .keywords import extract_keywords
from .models import PromptEnhancement, SearchResult
from .query import compose_query
from .result import Result
from .scoring import rank_records
from .types import InteractionType, MemoryType

logger = logging.getLogger(__name__)


class MemoryRetriever:
    """
    Retrieves and ranks a user's memories for prompt enhancement.

    Usage:
        async with MemoryRetriever(credentials=SessionCredentialProvider(session)) as retriever:
            context = await retriever.get_enhanced_context("user_123", "Create a customer feedback survey")
            if context:
                prompt = f"{prompt}\\n\\n{context}"

    Each call is independent and issues at most one request to the store.
    """

    def __init__(
        self,
        client: Optional[MemoryStoreClient] = None,
        settings: Optional[EngineSettings] = None,
        credentials: Optional[CredentialProvider] = None,
    ):
        """
        Initialize the retriever.

        Args:
            client: Store client to use; built from settings and credentials if omitted
            settings: Engine settings (default: read from the environment)
            credentials: Bearer token source for a client built here
        """
        self.settings = settings or EngineSettings.from_env()
        self._owns_client = client is None
        self.client = client or MemoryStoreClient(
            base_url=self.settings.store_url,
            credentials=credentials,
            timeout=self.settings.store_timeout,
        )

    async def __aenter__(self) -> "MemoryRetriever":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the store client if this retriever created it."""
        if self._owns_client:
            await self.client.aclose()

    # Search

    async def search_with_context_result(
        self,
        user_id: str,
        prompt: str,
        limit: Optional[int] = None,
        memory_type: Optional[Union[str, MemoryType]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> Result[SearchResult]:
        """
        Search memories related to ``prompt`` and rank them.

        Args:
            user_id: Owner of the memories
            prompt: Free-text prompt
            limit: Maximum ranked records (default: configured search limit)
            memory_type: Optional memory type filter
            timeout: Optional per-call timeout in seconds

        Returns:
            Ranked result (empty for a blank prompt), or the store error
        """
        limit = self.settings.search_limit if limit is None else limit

        clean_prompt = (prompt or "").strip()
        if not clean_prompt:
            logger.debug("Blank prompt; skipping memory search")
            return Result.success(SearchResult.empty())

        keywords = extract_keywords(clean_prompt)
        query = compose_query(clean_prompt, keywords)
        logger.debug("Searching memories for user %s with query: %r", user_id, query)

        try:
            found = await self.client.search(user_id, query, limit=limit, memory_type=memory_type, timeout=timeout)
        except FormMemoryError as e:
            logger.warning("Memory search failed: %s", e)
            return Result.failure(e)

        if not found.records:
            return Result.success(SearchResult.empty())

        ranked = rank_records(
            found.records,
            keywords,
            limit=limit,
            recency_window_days=self.settings.recency_window_days,
            success_threshold=self.settings.success_threshold,
        )
        return Result.success(SearchResult(records=ranked, total_count=len(ranked)))

    async def search_with_context(
        self,
        user_id: str,
        prompt: str,
        limit: Optional[int] = None,
        memory_type: Optional[Union[str, MemoryType]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> Optional[SearchResult]:
        """Like ``search_with_context_result``; returns None when the store is unavailable."""
        result = await self.search_with_context_result(
            user_id, prompt, limit=limit, memory_type=memory_type, timeout=timeout,
        )
        return result.value

    # Context

    async def get_enhanced_context_result(
        self,
        user_id: str,
        prompt: str,
        *,
        timeout: Optional[float] = None,
    ) -> Result[str]:
        """
        Build the "Memory insights: ..." string for a form-generation prompt.

        Returns:
            The insight text ("" when nothing useful was found), or the store error
        """
        search = await self.search_with_context_result(
            user_id,
            prompt,
            limit=self.settings.context_limit,
            memory_type=self.settings.context_memory_type,
            timeout=timeout,
        )
        if not search.ok:
            return Result.failure(search.error)
        if not search.value.records:
            return Result.success("")

        insight = synthesize(
            search.value,
            extract_keywords(prompt),
            success_threshold=self.settings.success_threshold,
        )
        return Result.success(format_insight(insight))

    async def get_enhanced_context(self, user_id: str, prompt: str, *, timeout: Optional[float] = None) -> str:
        result = await self.get_enhanced_context_result(user_id, prompt, timeout=timeout)
        return result.unwrap_or("")

    async def get_successful_examples(self, user_id: str, prompt: str, *, timeout: Optional[float] = None) -> str:
        """Describe up to three successful past forms similar to ``prompt``."""
        search = await self.search_with_context(
            user_id,
            prompt,
            limit=self.settings.context_limit,
            memory_type=self.settings.context_memory_type,
            timeout=timeout,
        )
        if search is None or not search.records:
            return ""
        return format_successful_examples(search.records, success_threshold=self.settings.success_threshold)

    async def build_enhancement(
        self,
        user_id: str,
        prompt: str,
        *,
        timeout: Optional[float] = None,
    ) -> PromptEnhancement:
        """
        Gather insight text and successful examples for a prompt in one search.

        The returned ``fallback_prompt`` is a locally enhanced prompt usable
        when the generation agent cannot be reached.
        """
        search = await self.search_with_context(
            user_id,
            prompt,
            limit=self.settings.context_limit,
            memory_type=self.settings.context_memory_type,
            timeout=timeout,
        )

        memory_context = ""
        examples = ""
        if search is not None and search.records:
            threshold = self.settings.success_threshold
            insight = synthesize(search, extract_keywords(prompt), success_threshold=threshold)
            memory_context = format_insight(insight)
            examples = format_successful_examples(search.records, success_threshold=threshold)

        return PromptEnhancement(
            prompt=prompt,
            memory_context=memory_context,
            successful_examples=examples,
            fallback_prompt=enhance_prompt_fallback(prompt, memory_context, examples),
        )

    async def get_relevant_context(self, user_id: str, query: str, *, timeout: Optional[float] = None) -> str:
        """Return the store's own context summary, or "" if it is unavailable."""
        try:
            response = await self.client.get_user_context(user_id, query, timeout=timeout)
        except FormMemoryError as e:
            logger.warning("Failed to get user context: %s", e)
            return ""
        return response.context

    # Tracking (best-effort)

    async def track_form_interaction(
        self,
        user_id: str,
        form_id: str,
        form_title: str,
        interaction_type: Union[str, InteractionType],
        details: Optional[dict[str, Any]] = None,
    ) -> bool:
        """
        Record a form interaction without ever failing the caller.

        Returns:
            True if the store acknowledged the write
        """
        try:
            response = await self.client.add_form_interaction(
                user_id=user_id,
                form_id=form_id,
                form_title=form_title,
                interaction_type=interaction_type,
                details=details or {},
            )
        except Exception as e:
            logger.warning("Failed to track form interaction: %s", e)
            return False
        return response.success

    async def track_user_preference(
        self,
        user_id: str,
        preference_type: str,
        preference_value: Any,
        context: Optional[str] = None,
    ) -> bool:
        """Record a user preference without ever failing the caller."""
        try:
            response = await self.client.add_user_preference(
                user_id=user_id,
                preference_type=preference_type,
                preference_value=preference_value,
                context=context,
            )
        except Exception as e:
            logger.warning("Failed to track user preference: %s", e)
            return False
        return response.success

    async def track_conversation(
        self,
        user_id: str,
        user_message: str,
        assistant_response: str,
        context: Optional[dict[str, Any]] = None,
    ) -> bool:
        """Record a conversation turn without ever failing the caller."""
        try:
            response = await self.client.add_conversation(
                user_id=user_id,
                user_message=user_message,
                assistant_response=assistant_response,
                context=context,
            )
        except Exception as e:
            logger.warning("Failed to track conversation: %s", e)
            return False
        return response.success
