"""
Middleware for caller identity, request logging and error handling.
"""
import logging
import time
from uuid import UUID, uuid4

from django.http import JsonResponse

from store.domain.errors import ErrorKind
from store.domain.results import GENERIC_ERROR_MESSAGE, Result
from store.infra.pii_masker import mask_uuid

logger = logging.getLogger(__name__)


def parse_caller_id(raw: str | None) -> UUID | None:
    """Parse the X-User-ID header; anything that is not a UUID means no caller."""
    if not raw:
        return None
    try:
        return UUID(raw.strip())
    except (ValueError, TypeError):
        logger.warning("invalid_user_id", extra={"user_id": mask_uuid(raw)})
        return None


class ErrorHandler:
    """Error handler for API responses."""

    STATUS_CODES = {
        ErrorKind.NOT_FOUND: 404,
        ErrorKind.FORBIDDEN: 403,
        ErrorKind.INVALID_STATE: 400,
        ErrorKind.UNEXPECTED: 500,
    }

    @classmethod
    def status_for(cls, result: Result) -> int:
        if result.success:
            return 200
        return cls.STATUS_CODES.get(result.error_kind, 500)

    @classmethod
    def failure_response(cls, result: Result) -> JsonResponse:
        return JsonResponse(
            {"success": False, "message": result.message},
            status=cls.status_for(result),
        )

    @classmethod
    def handle_error(cls, error: Exception, request_id: str | None = None) -> JsonResponse:
        """Turn a stray exception into the generic 500 envelope."""
        logger.error(
            "unexpected_error",
            extra={
                "request_id": request_id,
                "error": f"{type(error).__name__}: {error}",
            },
            exc_info=error,
        )
        return JsonResponse(
            {"success": False, "message": GENERIC_ERROR_MESSAGE},
            status=500,
        )


class RequestLoggingMiddleware:
    """Assigns a request id and logs every API call."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.request_id = request.headers.get("X-Request-ID") or str(uuid4())
        user_id = request.headers.get("X-User-ID")
        started = time.monotonic()

        logger.info(
            "api_request",
            extra={
                "request_id": request.request_id,
                "user_id": mask_uuid(user_id) if user_id else None,
                "operation": f"{request.method} {request.path}",
            },
        )

        response = self.get_response(request)

        logger.info(
            "api_response",
            extra={
                "request_id": request.request_id,
                "user_id": mask_uuid(user_id) if user_id else None,
                "status": response.status_code,
                "duration_ms": round((time.monotonic() - started) * 1000, 2),
            },
        )
        response["X-Request-ID"] = request.request_id
        return response

    def process_exception(self, request, exception):
        if not request.path.startswith(("/api/", "/graphql/")):
            return None
        return ErrorHandler.handle_error(exception, getattr(request, "request_id", None))


class CallerIdentityMiddleware:
    """Exposes the X-User-ID header as ``request.caller_id``."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.caller_id = parse_caller_id(request.headers.get("X-User-ID"))
        return self.get_response(request)
