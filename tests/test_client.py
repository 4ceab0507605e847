"""Unit tests for the memory store client."""

import json

import httpx
import pytest
import respx
from httpx import Response

from formmemory import (
    ForbiddenError,
    FormHistory,
    InteractionType,
    MemoryStoreClient,
    OperationResult,
    SearchResult,
    SessionCredentialProvider,
    StoreError,
    TransportError,
    UnauthorizedError,
    UserContext,
    UserPreferences,
)


def _body(route: respx.Route) -> dict:
    return json.loads(route.calls.last.request.content)


@pytest.mark.asyncio
@respx.mock
async def test_search(client: MemoryStoreClient, base_url: str) -> None:
    """Test searching memories."""
    mock_response = {
        "memories": [
            {
                "memory": "Created customer feedback form",
                "metadata": {
                    "ai_form_analytics": {
                        "success_score": 9,
                        "generated_field_count": 5,
                        "generated_field_types": ["rating", "text"],
                    },
                },
                "created_at": "2026-01-26T10:00:00Z",
            },
            {"memory": "Viewed job application"},
        ],
        "total_count": 2,
    }
    route = respx.post(f"{base_url}/memory/search").mock(return_value=Response(200, json=mock_response))

    async with client:
        result = await client.search("user_1", "customer feedback", limit=5, memory_type="form_interaction")

    assert isinstance(result, SearchResult)
    assert result.total_count == 2
    assert [r.text for r in result.records] == ["Created customer feedback form", "Viewed job application"]
    assert result.records[0].success_score == 9
    assert result.records[0].analytics.generated_field_types == ["rating", "text"]
    assert result.records[0].created_at.year == 2026
    assert result.records[1].analytics is None
    assert _body(route) == {
        "user_id": "user_1",
        "query": "customer feedback",
        "limit": 5,
        "memory_type": "form_interaction",
    }


@pytest.mark.asyncio
@respx.mock
async def test_search_omits_missing_memory_type(client: MemoryStoreClient, base_url: str) -> None:
    route = respx.post(f"{base_url}/memory/search").mock(
        return_value=Response(200, json={"memories": [], "total_count": 0})
    )

    async with client:
        await client.search("user_1", "anything")

    assert "memory_type" not in _body(route)
    assert _body(route)["limit"] == 10


@pytest.mark.asyncio
@respx.mock
async def test_search_tolerates_malformed_entries(client: MemoryStoreClient, base_url: str) -> None:
    """Bad fields default per record; non-object entries are skipped."""
    mock_response = {
        "memories": [
            "not a record",
            {"memory": None, "metadata": "oops", "created_at": "yesterday"},
            {"memory": "fine", "metadata": {"ai_form_analytics": {"success_score": "n/a"}}},
        ],
    }
    respx.post(f"{base_url}/memory/search").mock(return_value=Response(200, json=mock_response))

    async with client:
        result = await client.search("user_1", "query")

    assert len(result.records) == 2
    assert result.total_count == 2
    assert result.records[0].text == ""
    assert result.records[0].created_at is None
    assert result.records[0].metadata.ai_form_analytics is None
    assert result.records[1].success_score is None


@pytest.mark.asyncio
@respx.mock
async def test_search_missing_memories_key(client: MemoryStoreClient, base_url: str) -> None:
    respx.post(f"{base_url}/memory/search").mock(return_value=Response(200, json={}))

    async with client:
        result = await client.search("user_1", "query")

    assert result.records == []
    assert result.total_count == 0


@pytest.mark.asyncio
@respx.mock
async def test_add_conversation(client: MemoryStoreClient, base_url: str) -> None:
    route = respx.post(f"{base_url}/memory/conversation").mock(
        return_value=Response(200, json={"success": True, "message": "stored"})
    )

    async with client:
        result = await client.add_conversation("user_1", "make a survey", "here it is", context={"form_id": "f1"})

    assert isinstance(result, OperationResult)
    assert result.success is True
    assert result.message == "stored"
    assert _body(route) == {
        "user_id": "user_1",
        "user_message": "make a survey",
        "assistant_response": "here it is",
        "context": {"form_id": "f1"},
    }


@pytest.mark.asyncio
@respx.mock
async def test_add_form_interaction(client: MemoryStoreClient, base_url: str) -> None:
    route = respx.post(f"{base_url}/memory/form-interaction").mock(
        return_value=Response(200, json={"success": True, "message": "ok"})
    )

    async with client:
        result = await client.add_form_interaction(
            user_id="user_1",
            form_id="form_1",
            form_title="Customer Feedback",
            interaction_type=InteractionType.CREATED,
            details={"field_count": 6},
        )

    assert result.success is True
    assert _body(route) == {
        "user_id": "user_1",
        "form_id": "form_1",
        "form_title": "Customer Feedback",
        "interaction_type": "created",
        "details": {"field_count": 6},
    }


@pytest.mark.asyncio
async def test_add_form_interaction_rejects_unknown_type(client: MemoryStoreClient) -> None:
    with pytest.raises(ValueError):
        async with client:
            await client.add_form_interaction("user_1", "form_1", "Title", "deleted", {})


@pytest.mark.asyncio
@respx.mock
async def test_add_user_preference(client: MemoryStoreClient, base_url: str) -> None:
    route = respx.post(f"{base_url}/memory/user-preference").mock(
        return_value=Response(200, json={"success": True, "message": "saved"})
    )

    async with client:
        await client.add_user_preference("user_1", "theme", {"mode": "dark"})

    assert _body(route) == {
        "user_id": "user_1",
        "preference_type": "theme",
        "preference_value": {"mode": "dark"},
    }


@pytest.mark.asyncio
@respx.mock
async def test_get_user_context(client: MemoryStoreClient, base_url: str) -> None:
    route = respx.post(f"{base_url}/memory/user-context").mock(
        return_value=Response(200, json={"context": "Prefers short forms", "memories_count": 3})
    )

    async with client:
        context = await client.get_user_context("user_1", "feedback")

    assert isinstance(context, UserContext)
    assert context.context == "Prefers short forms"
    assert context.memories_count == 3
    assert _body(route) == {"user_id": "user_1", "query": "feedback"}


@pytest.mark.asyncio
@respx.mock
async def test_get_form_history(client: MemoryStoreClient, base_url: str) -> None:
    route = respx.post(f"{base_url}/memory/form-history").mock(
        return_value=Response(200, json={"interactions": [{"form_id": "form_1"}], "total_count": 1})
    )

    async with client:
        history = await client.get_form_history("user_1", form_id="form_1")

    assert isinstance(history, FormHistory)
    assert history.interactions == [{"form_id": "form_1"}]
    assert _body(route) == {"user_id": "user_1", "form_id": "form_1"}


@pytest.mark.asyncio
@respx.mock
async def test_get_user_preferences(client: MemoryStoreClient, base_url: str) -> None:
    route = respx.get(f"{base_url}/memory/user-preferences/user_1").mock(
        return_value=Response(200, json={"preferences": {"theme": "dark"}, "total_count": 1})
    )

    async with client:
        preferences = await client.get_user_preferences("user_1")

    assert isinstance(preferences, UserPreferences)
    assert preferences.preferences == {"theme": "dark"}
    assert route.calls.last.request.method == "GET"


@pytest.mark.asyncio
@respx.mock
async def test_request_headers(client: MemoryStoreClient, base_url: str) -> None:
    route = respx.post(f"{base_url}/memory/user-context").mock(
        return_value=Response(200, json={"context": "", "memories_count": 0})
    )

    async with client:
        await client.get_user_context("user_1", "q")

    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer test_token"
    assert request.headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
@respx.mock
async def test_no_token_sends_no_authorization(base_url: str) -> None:
    route = respx.post(f"{base_url}/memory/user-context").mock(
        return_value=Response(200, json={"context": "", "memories_count": 0})
    )

    async with MemoryStoreClient(base_url=base_url, credentials=SessionCredentialProvider(None)) as client:
        await client.get_user_context("user_1", "q")

    assert "Authorization" not in route.calls.last.request.headers


@pytest.mark.asyncio
@respx.mock
async def test_failing_credentials_fall_back_to_unauthenticated(base_url: str) -> None:
    async def broken() -> str:
        raise RuntimeError("session expired")

    route = respx.post(f"{base_url}/memory/user-context").mock(
        return_value=Response(200, json={"context": "", "memories_count": 0})
    )

    async with MemoryStoreClient(base_url=base_url, credentials=broken) as client:
        await client.get_user_context("user_1", "q")

    assert "Authorization" not in route.calls.last.request.headers


@pytest.mark.asyncio
@respx.mock
async def test_authentication_error(client: MemoryStoreClient, base_url: str) -> None:
    respx.post(f"{base_url}/memory/search").mock(return_value=Response(401, json={"detail": "Invalid token"}))

    with pytest.raises(UnauthorizedError) as exc_info:
        async with client:
            await client.search("user_1", "query")

    assert "Invalid token" in str(exc_info.value)
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
@respx.mock
async def test_forbidden_error(client: MemoryStoreClient, base_url: str) -> None:
    respx.post(f"{base_url}/memory/search").mock(return_value=Response(403, text="nope"))

    with pytest.raises(ForbiddenError) as exc_info:
        async with client:
            await client.search("user_1", "query")

    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Access denied"


@pytest.mark.parametrize("status_code", [400, 404, 429, 500, 503])
@pytest.mark.asyncio
@respx.mock
async def test_store_error(client: MemoryStoreClient, base_url: str, status_code: int) -> None:
    respx.post(f"{base_url}/memory/search").mock(return_value=Response(status_code, json={"error": "bad"}))

    with pytest.raises(StoreError) as exc_info:
        async with client:
            await client.search("user_1", "query")

    assert exc_info.value.status_code == status_code


@pytest.mark.asyncio
@respx.mock
async def test_invalid_json_body(client: MemoryStoreClient, base_url: str) -> None:
    respx.post(f"{base_url}/memory/search").mock(return_value=Response(200, text="<html>"))

    with pytest.raises(StoreError):
        async with client:
            await client.search("user_1", "query")


@pytest.mark.asyncio
@respx.mock
async def test_transport_error(client: MemoryStoreClient, base_url: str) -> None:
    respx.post(f"{base_url}/memory/search").mock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(TransportError):
        async with client:
            await client.search("user_1", "query")


@pytest.mark.asyncio
@respx.mock
async def test_timeout_error(client: MemoryStoreClient, base_url: str) -> None:
    respx.post(f"{base_url}/memory/search").mock(side_effect=httpx.ReadTimeout("too slow"))

    with pytest.raises(TransportError) as exc_info:
        async with client:
            await client.search("user_1", "query", timeout=0.5)

    assert "timeout" in str(exc_info.value).lower()


def test_rejects_non_callable_credentials(base_url: str) -> None:
    with pytest.raises(TypeError):
        MemoryStoreClient(base_url=base_url, credentials="raw-token")
