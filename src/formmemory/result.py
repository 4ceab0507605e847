"""Explicit success/failure container for operations that must not raise."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .exceptions import FormMemoryError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a best-effort operation.

    Exactly one of ``value`` or ``error`` is meaningful: ``error`` is set when
    the memory store could not be used, in which case ``value`` is ``None``.
    """

    value: Optional[T] = None
    error: Optional[FormMemoryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: FormMemoryError) -> "Result[T]":
        return cls(error=error)

    def unwrap_or(self, default: T) -> T:
        """Return the value, or ``default`` if the operation failed."""
        if self.error is not None or self.value is None:
            return default
        return self.value
