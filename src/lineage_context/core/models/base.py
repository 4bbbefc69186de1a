"""Core data models used across all modules.

This module defines the fundamental data structures that form the
contract between modules. All inter-module communication uses these types.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Category of a failed operation."""

    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    REPOSITORY_UNAVAILABLE = "repository_unavailable"
    NOT_FOUND = "not_found"


class Result(BaseModel, Generic[T]):
    """Result type for operations that can fail.

    Use this instead of exceptions for expected failures.
    Exceptions are reserved for unexpected/programming errors.
    """

    success: bool
    value: T | None = None
    error: str | None = None
    kind: ErrorKind | None = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, value: T, warnings: list[str] | None = None) -> Result[T]:
        """Create a successful result."""
        return cls(success=True, value=value, warnings=warnings or [])

    @classmethod
    def fail(cls, error: str, kind: ErrorKind | None = None) -> Result[T]:
        """Create a failed result."""
        return cls(success=False, error=error, kind=kind)

    def unwrap(self) -> T:
        """Get the value or raise if failed."""
        if not self.success:
            raise ValueError(f"Result failed: {self.error}")
        assert self.value is not None
        return self.value

    def map(self, fn: Callable[[T], Any]) -> Result[Any]:
        """Transform the value if successful."""
        if self.success:
            return Result.ok(fn(self.value), self.warnings)  # type: ignore[arg-type]
        return self  # type: ignore
