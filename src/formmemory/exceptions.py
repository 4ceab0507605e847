"""Custom exceptions for the form memory engine."""


class FormMemoryError(Exception):
    """Base exception for all memory store errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnauthorizedError(FormMemoryError):
    """Raised when the memory store rejects the credentials (401)."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, status_code=401)


class ForbiddenError(FormMemoryError):
    """Raised when the memory store denies access (403)."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message, status_code=403)


class StoreError(FormMemoryError):
    """Raised for any other non-2xx response from the memory store."""

    def __init__(self, message: str = "Memory store error", status_code: int = 500) -> None:
        super().__init__(message, status_code=status_code)


class TransportError(FormMemoryError):
    """Raised when the request never produced an HTTP response (network, timeout)."""

    def __init__(self, message: str = "Transport error") -> None:
        super().__init__(message)
