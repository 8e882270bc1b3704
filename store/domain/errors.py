"""
Business rule errors raised inside domain and service code.

They never cross the API boundary as exceptions: service operations turn
them into failed ``Result`` values.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Failure taxonomy shared by services and the API layer."""
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_STATE = "INVALID_STATE"
    UNEXPECTED = "UNEXPECTED"


class BusinessRuleError(Exception):
    """Base class for expected, user-facing failures."""

    kind = ErrorKind.INVALID_STATE

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NotFound(BusinessRuleError):
    kind = ErrorKind.NOT_FOUND


class Forbidden(BusinessRuleError):
    kind = ErrorKind.FORBIDDEN


class InvalidState(BusinessRuleError):
    kind = ErrorKind.INVALID_STATE
