"""
Explicit success/failure values returned by every service operation.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from store.domain.errors import BusinessRuleError, ErrorKind

T = TypeVar("T")

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a service operation."""
    success: bool
    value: T | None = None
    message: str = ""
    error_kind: ErrorKind | None = None

    @classmethod
    def ok(cls, value: T | None = None, message: str = "") -> "Result[T]":
        return cls(success=True, value=value, message=message)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(success=False, message=message, error_kind=kind)

    @classmethod
    def from_error(cls, error: BusinessRuleError) -> "Result[T]":
        return cls.failure(error.kind, error.message)

    @classmethod
    def unexpected(cls) -> "Result[T]":
        return cls.failure(ErrorKind.UNEXPECTED, GENERIC_ERROR_MESSAGE)
