"""
Bearer token sources for the memory store client.

A credential provider is any async callable returning an optional token.
Token acquisition is best-effort: ``resolve_token`` turns every failure into
``None`` so the request goes out unauthenticated and the store decides whether
to reject it.
"""

import inspect
import logging
from typing import Any, Callable, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class CredentialProvider(Protocol):
    """Supplies the bearer token for a single outbound request."""

    async def __call__(self) -> Optional[str]:
        ...


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class StaticCredentialProvider:
    """Always returns the same token (API keys, tests)."""

    def __init__(self, token: Optional[str]):
        self._token = token

    async def __call__(self) -> Optional[str]:
        return self._token


class SessionCredentialProvider:
    """
    Token source backed by an interactive user session.

    The session is any object exposing ``get_token()``, sync or async. A
    missing session means the user is not signed in and no token is sent.
    """

    def __init__(self, session: Any = None):
        self.session = session

    async def __call__(self) -> Optional[str]:
        if self.session is None:
            return None
        return await _maybe_await(self.session.get_token())


class ServiceContextCredentialProvider:
    """
    Token source backed by a request-scoped server auth context.

    Args:
        get_context: Callable (sync or async) returning the auth context for the
            current request; the context must expose ``get_token()``.
    """

    def __init__(self, get_context: Callable[[], Any]):
        self._get_context = get_context

    async def __call__(self) -> Optional[str]:
        context = await _maybe_await(self._get_context())
        if context is None:
            return None
        return await _maybe_await(context.get_token())


async def resolve_token(provider: Optional[CredentialProvider]) -> Optional[str]:
    """
    Acquire a bearer token without ever failing the caller.

    Args:
        provider: Credential provider, or None for unauthenticated access

    Returns:
        The token, or None when there is no provider, no token, or acquisition failed
    """
    if provider is None:
        return None
    try:
        token = await provider()
    except Exception as e:
        logger.warning("Failed to get auth token: %s", e)
        return None
    if not token:
        return None
    return str(token)
