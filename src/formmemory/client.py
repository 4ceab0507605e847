"""Async client for the remote memory store."""

import logging
from typing import Any, Optional, Union
from urllib.parse import quote

import httpx

from .config import DEFAULT_FORMMEMORY_STORE_TIMEOUT, DEFAULT_FORMMEMORY_STORE_URL
from .credentials import CredentialProvider, resolve_token
from .exceptions import (
    ForbiddenError,
    StoreError,
    TransportError,
    UnauthorizedError,
)
from .models import (
    FormHistory,
    MemoryRecord,
    OperationResult,
    SearchResult,
    UserContext,
    UserPreferences,
)
from .types import InteractionType, MemoryType

logger = logging.getLogger(__name__)


def _to_value(v: Any) -> Any:
    """Extract string value from an enum member, or return string as-is."""
    return v.value if hasattr(v, "value") else v


def _error_detail(response: httpx.Response, default: str) -> str:
    """Best-effort error message from a failed response body."""
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        for key in ("detail", "message", "error"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return default


def _parse_search(data: dict[str, Any]) -> SearchResult:
    raw_memories = data.get("memories")
    if not isinstance(raw_memories, list):
        raw_memories = []

    records = []
    for index, entry in enumerate(raw_memories):
        if not isinstance(entry, dict):
            logger.warning("Skipping malformed memory at position %s: %r", index, entry)
            continue
        records.append(MemoryRecord.model_validate(entry))

    total_count = data.get("total_count")
    if not isinstance(total_count, int) or isinstance(total_count, bool):
        total_count = len(records)

    return SearchResult(records=records, total_count=total_count)


class MemoryStoreClient:
    """
    Python client for the memory store HTTP API.

    Usage:
        async with MemoryStoreClient(
            base_url="http://localhost:8000",
            credentials=StaticCredentialProvider("token"),
        ) as client:
            result = await client.search("user_123", "customer feedback survey", limit=5)

            await client.add_form_interaction(
                user_id="user_123",
                form_id="form_1",
                form_title="Customer Feedback",
                interaction_type=InteractionType.CREATED,
                details={"field_count": 6},
            )

    The client never retries; every method issues exactly one request.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_FORMMEMORY_STORE_URL,
        credentials: Optional[CredentialProvider] = None,
        timeout: float = DEFAULT_FORMMEMORY_STORE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the memory store client.

        Args:
            base_url: Memory store base URL (default: http://localhost:8000)
            credentials: Bearer token source; None sends unauthenticated requests
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport, mainly for embedding and tests

        Raises:
            TypeError: credentials is not callable
        """
        if credentials is not None and not isinstance(credentials, CredentialProvider):
            raise TypeError(f"credentials must be a CredentialProvider, got {type(credentials).__name__}")

        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "MemoryStoreClient":
        """Async context manager entry."""
        self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Create the HTTP client on first use."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """
        Make HTTP request with error handling.

        Args:
            method: HTTP method
            path: API path
            json: JSON body
            timeout: Per-call timeout in seconds, overriding the client default

        Returns:
            Response JSON

        Raises:
            UnauthorizedError: Authentication required (401)
            ForbiddenError: Access denied (403)
            StoreError: Any other non-2xx response, or an unreadable body
            TransportError: The request failed before a response arrived
        """
        client = self._ensure_client()

        headers = {}
        token = await resolve_token(self.credentials)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        request_kwargs: dict[str, Any] = {"json": json, "headers": headers}
        if timeout is not None:
            request_kwargs["timeout"] = timeout

        try:
            response = await client.request(method, path, **request_kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timeout: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error: {e}") from e

        if response.status_code == 401:
            raise UnauthorizedError(_error_detail(response, "Authentication required"))
        elif response.status_code == 403:
            raise ForbiddenError(_error_detail(response, "Access denied"))
        elif not response.is_success:
            raise StoreError(
                _error_detail(response, f"HTTP error! status: {response.status_code}"),
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            raise StoreError(
                f"Invalid JSON from memory store: {e}",
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise StoreError(
                f"Unexpected response shape from memory store: {type(data).__name__}",
                status_code=response.status_code,
            )
        return data

    # Search

    async def search(
        self,
        user_id: str,
        query: str,
        limit: int = 10,
        memory_type: Optional[Union[str, MemoryType]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> SearchResult:
        """
        Search a user's memories.

        Args:
            user_id: Owner of the memories
            query: Search text; must not be blank
            limit: Maximum memories to return (default: 10)
            memory_type: Optional memory type filter
            timeout: Optional per-call timeout in seconds

        Returns:
            Records in the order the store returned them
        """
        payload: dict[str, Any] = {
            "user_id": user_id,
            "query": query,
            "limit": limit,
        }
        if memory_type is not None:
            payload["memory_type"] = _to_value(memory_type)

        data = await self._request("POST", "/memory/search", json=payload, timeout=timeout)
        return _parse_search(data)

    # Writes (append-only)

    async def add_conversation(
        self,
        user_id: str,
        user_message: str,
        assistant_response: str,
        context: Optional[dict[str, Any]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> OperationResult:
        """
        Store a conversation turn.

        Args:
            user_id: Owner of the memory
            user_message: What the user said
            assistant_response: What the assistant answered
            context: Optional structured context for the turn
            timeout: Optional per-call timeout in seconds

        Returns:
            Store acknowledgement
        """
        payload: dict[str, Any] = {
            "user_id": user_id,
            "user_message": user_message,
            "assistant_response": assistant_response,
        }
        if context is not None:
            payload["context"] = context

        data = await self._request("POST", "/memory/conversation", json=payload, timeout=timeout)
        return OperationResult.model_validate(data)

    async def add_form_interaction(
        self,
        user_id: str,
        form_id: str,
        form_title: str,
        interaction_type: Union[str, InteractionType],
        details: Optional[dict[str, Any]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> OperationResult:
        """
        Store a form interaction.

        Args:
            user_id: Owner of the memory
            form_id: Form the interaction happened on
            form_title: Human-readable form title
            interaction_type: One of created, filled, analyzed, viewed, edited
            details: Open map of interaction details (default: empty)
            timeout: Optional per-call timeout in seconds

        Returns:
            Store acknowledgement

        Raises:
            ValueError: interaction_type is not a known interaction type
        """
        payload = {
            "user_id": user_id,
            "form_id": form_id,
            "form_title": form_title,
            "interaction_type": InteractionType(_to_value(interaction_type)).value,
            "details": details or {},
        }

        data = await self._request("POST", "/memory/form-interaction", json=payload, timeout=timeout)
        return OperationResult.model_validate(data)

    async def add_user_preference(
        self,
        user_id: str,
        preference_type: str,
        preference_value: Any,
        context: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ) -> OperationResult:
        """
        Store a user preference.

        Args:
            user_id: Owner of the memory
            preference_type: Preference name, e.g. "theme"
            preference_value: Any JSON-serializable value
            context: Optional free-text note on where the preference came from
            timeout: Optional per-call timeout in seconds

        Returns:
            Store acknowledgement
        """
        payload: dict[str, Any] = {
            "user_id": user_id,
            "preference_type": preference_type,
            "preference_value": preference_value,
        }
        if context is not None:
            payload["context"] = context

        data = await self._request("POST", "/memory/user-preference", json=payload, timeout=timeout)
        return OperationResult.model_validate(data)

    # Reads

    async def get_user_context(
        self,
        user_id: str,
        query: str,
        *,
        timeout: Optional[float] = None,
    ) -> UserContext:
        """Fetch the store's own context summary for a user and query."""
        payload = {"user_id": user_id, "query": query}
        data = await self._request("POST", "/memory/user-context", json=payload, timeout=timeout)
        return UserContext.model_validate(data)

    async def get_form_history(
        self,
        user_id: str,
        form_id: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ) -> FormHistory:
        """Fetch past form interactions, optionally for a single form."""
        payload: dict[str, Any] = {"user_id": user_id}
        if form_id is not None:
            payload["form_id"] = form_id

        data = await self._request("POST", "/memory/form-history", json=payload, timeout=timeout)
        return FormHistory.model_validate(data)

    async def get_user_preferences(
        self,
        user_id: str,
        *,
        timeout: Optional[float] = None,
    ) -> UserPreferences:
        """Fetch every preference recorded for a user."""
        path = f"/memory/user-preferences/{quote(user_id, safe='')}"
        data = await self._request("GET", path, timeout=timeout)
        return UserPreferences.model_validate(data)
