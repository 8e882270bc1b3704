"""
Shared plumbing for application services: the result boundary and the
access policy.
"""
from __future__ import annotations

import logging
from functools import wraps
from uuid import UUID

from django.db import DatabaseError

from store.domain.errors import BusinessRuleError, Forbidden, NotFound
from store.domain.results import Result
from store.domain.roles import DENIED_MESSAGES, Capability, Role, is_permitted
from store.infra.repositories import UserRepository

logger = logging.getLogger(__name__)


def service_operation(func):
    """
    Turn business rule errors into failed results.

    Infrastructure failures are logged with their traceback and reported as a
    generic failure, so callers cannot tell them apart by message text.
    Must sit outside ``transaction.atomic`` so the rollback happens first.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BusinessRuleError as e:
            logger.info(
                "business_rule_failure",
                extra={
                    "operation": func.__name__,
                    "error_kind": e.kind.value,
                    "error": e.message,
                },
            )
            return Result.from_error(e)
        except DatabaseError as e:
            logger.error(
                "unexpected_error",
                extra={
                    "operation": func.__name__,
                    "error": f"{type(e).__name__}: {e}",
                },
                exc_info=True,
            )
            return Result.unexpected()
    return wrapper


class AccessPolicy:
    """Resolves caller roles and checks capabilities."""

    def __init__(self, user_repo: UserRepository | None = None):
        self.user_repo = user_repo or UserRepository()

    def role_of(self, user_id: UUID | str) -> Role:
        user = self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return Role(user.role)

    def allows(self, user_id: UUID | str, capability: Capability) -> bool:
        return is_permitted(self.role_of(user_id), capability)

    def require(self, user_id: UUID | str, capability: Capability) -> Role:
        """Raise Forbidden unless the caller's role carries ``capability``."""
        role = self.role_of(user_id)
        if not is_permitted(role, capability):
            raise Forbidden(DENIED_MESSAGES[capability])
        return role
