"""
JSON REST views and the GraphQL endpoint.
"""
import json
import logging
import re
from functools import wraps
from uuid import UUID

from ariadne import graphql_sync
from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from store.api.middleware import ErrorHandler
from store.api.schema import schema
from store.api.serializers import (
    serialize_activity,
    serialize_book,
    serialize_bookmark,
    serialize_cart,
    serialize_cart_line,
    serialize_order,
    serialize_review,
    serialize_stats,
)
from store.infra.activity import ActivityFeedRepository
from store.infra.pii_masker import mask_uuid
from store.infra.repositories import UserRepository
from store.services import BookmarkService, CartService, CatalogService, OrderService, ReviewService

logger = logging.getLogger(__name__)

INTEGER_TEXT = re.compile(r"-?[0-9]+", re.ASCII)


class BadRequest(Exception):
    """Malformed request body or query string."""


def envelope(result, key: str | None = None, serializer=None, status: int = 200) -> JsonResponse:
    """Render a service Result as ``{success, message, <key>}``."""
    if not result.success:
        return ErrorHandler.failure_response(result)
    body = {"success": True}
    if result.message:
        body["message"] = result.message
    if key is not None:
        body[key] = serializer(result.value) if serializer else result.value
    return JsonResponse(body, status=status)


def bad_request(message: str) -> JsonResponse:
    return JsonResponse({"success": False, "message": message}, status=400)


def read_json(request) -> dict:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequest("Invalid JSON")
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def read_int(data: dict, name: str, default: int | None = None) -> int:
    """Accept a JSON integer or a plain ASCII decimal string such as ``"-3"``."""
    value = data.get(name, default)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and INTEGER_TEXT.fullmatch(value.strip()):
        return int(value)
    raise BadRequest(f"{name} must be an integer")


def read_uuid(data: dict, name: str) -> UUID:
    value = data.get(name)
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise BadRequest(f"{name} must be a valid id")


def authenticated(view):
    """Reject requests without a known X-User-ID with 401."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        caller_id = getattr(request, "caller_id", None)
        if caller_id is None or UserRepository().get_by_id(caller_id) is None:
            return JsonResponse(
                {"success": False, "message": "Authentication required"},
                status=401,
            )
        try:
            return view(request, caller_id, *args, **kwargs)
        except BadRequest as e:
            return bad_request(str(e))
    return wrapper


def list_of(serializer):
    return lambda values: [serializer(value) for value in values]


# Orders

@csrf_exempt
@require_http_methods(["GET", "POST"])
@authenticated
def orders(request, caller_id):
    service = OrderService()
    if request.method == "POST":
        data = read_json(request)
        note = data.get("note")
        if note is not None and not isinstance(note, str):
            raise BadRequest("note must be a string")
        return envelope(service.create_order_from_cart(caller_id, note), "order", serialize_order, status=201)
    return envelope(service.get_member_orders(caller_id), "orders", list_of(serialize_order))


@require_http_methods(["GET"])
@authenticated
def all_orders(request, caller_id):
    processed = request.GET.get("processed")
    if processed is not None:
        if processed.lower() not in ("true", "false"):
            raise BadRequest("processed must be true or false")
        processed = processed.lower() == "true"
    result = OrderService().get_all_orders(caller_id, processed)
    return envelope(result, "orders", list_of(serialize_order))


@csrf_exempt
@require_http_methods(["POST"])
@authenticated
def process_order(request, caller_id):
    data = read_json(request)
    claim_code = data.get("claimCode")
    membership_id = data.get("membershipId")
    if not isinstance(claim_code, str) or not claim_code.strip():
        raise BadRequest("claimCode is required")
    if not isinstance(membership_id, str) or not membership_id.strip():
        raise BadRequest("membershipId is required")
    result = OrderService().process_order(caller_id, claim_code, membership_id)
    return envelope(result, "order", serialize_order)


@require_http_methods(["GET"])
@authenticated
def order_detail(request, caller_id, order_id):
    return envelope(OrderService().get_order(caller_id, order_id), "order", serialize_order)


@csrf_exempt
@require_http_methods(["POST"])
@authenticated
def cancel_order(request, caller_id, order_id):
    return envelope(OrderService().cancel_order(caller_id, order_id), "order", serialize_order)


# Cart

@csrf_exempt
@require_http_methods(["GET", "POST", "DELETE"])
@authenticated
def cart(request, caller_id):
    service = CartService()
    if request.method == "POST":
        data = read_json(request)
        book_id = read_uuid(data, "bookId")
        quantity = read_int(data, "quantity", 1)
        return envelope(service.add_to_cart(caller_id, book_id, quantity), "item", serialize_cart_line)
    if request.method == "DELETE":
        return envelope(service.clear_cart(caller_id))
    return envelope(service.get_cart(caller_id), "cart", serialize_cart)


@csrf_exempt
@require_http_methods(["PUT", "DELETE"])
@authenticated
def cart_item(request, caller_id, line_id):
    service = CartService()
    if request.method == "DELETE":
        return envelope(service.remove_from_cart(caller_id, line_id))
    quantity = read_int(read_json(request), "quantity")
    return envelope(service.update_cart_item(caller_id, line_id, quantity), "item", serialize_cart_line)


# Books

def _paging(request) -> tuple[int, int]:
    try:
        page = int(request.GET.get("page", 1))
        page_size = int(request.GET.get("pageSize", 20))
    except ValueError:
        raise BadRequest("page and pageSize must be integers")
    return page, page_size


def _list_books(request):
    try:
        page, page_size = _paging(request)
    except BadRequest as e:
        return bad_request(str(e))
    result = CatalogService().list_books(request.GET.get("search", ""), page, page_size)
    if not result.success:
        return ErrorHandler.failure_response(result)
    listing = result.value
    return JsonResponse({
        "success": True,
        "books": [serialize_book(book) for book in listing["items"]],
        "totalCount": listing["total"],
        "page": listing["page"],
        "pageSize": listing["page_size"],
    })


@authenticated
def _create_book(request, caller_id):
    result = CatalogService().create_book(caller_id, read_json(request))
    return envelope(result, "book", serialize_book, status=201)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def books(request):
    if request.method == "POST":
        return _create_book(request)
    return _list_books(request)


@authenticated
def _update_book(request, caller_id, book_id):
    result = CatalogService().update_book(caller_id, book_id, read_json(request))
    return envelope(result, "book", serialize_book)


@authenticated
def _delete_book(request, caller_id, book_id):
    return envelope(CatalogService().delete_book(caller_id, book_id))


@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
def book_detail(request, book_id):
    if request.method == "PUT":
        return _update_book(request, book_id)
    if request.method == "DELETE":
        return _delete_book(request, book_id)

    result = CatalogService().get_book(book_id)
    if not result.success:
        return ErrorHandler.failure_response(result)
    body = serialize_book(result.value["book"])
    rating = result.value["average_rating"]
    body["averageRating"] = str(rating) if rating is not None else None
    return JsonResponse({"success": True, "book": body})


@require_http_methods(["GET"])
@authenticated
def book_stats(request, caller_id):
    return envelope(CatalogService().stats(caller_id), "stats", serialize_stats)


# Reviews

@require_http_methods(["GET"])
def book_reviews(request, book_id):
    return envelope(ReviewService().list_for_book(book_id), "reviews", list_of(serialize_review))


@csrf_exempt
@require_http_methods(["POST"])
@authenticated
def reviews(request, caller_id):
    data = read_json(request)
    book_id = read_uuid(data, "bookId")
    rating = read_int(data, "rating")
    comment = data.get("comment")
    if not isinstance(comment, str):
        raise BadRequest("comment must be a string")
    result = ReviewService().create_review(caller_id, book_id, rating, comment)
    return envelope(result, "review", serialize_review, status=201)


@csrf_exempt
@require_http_methods(["DELETE"])
@authenticated
def review_detail(request, caller_id, review_id):
    return envelope(ReviewService().delete_review(caller_id, review_id))


@require_http_methods(["GET"])
@authenticated
def check_purchase(request, caller_id, book_id):
    return envelope(ReviewService().has_purchased(caller_id, book_id), "hasPurchased")


# Bookmarks

@csrf_exempt
@require_http_methods(["GET", "POST"])
@authenticated
def bookmarks(request, caller_id):
    service = BookmarkService()
    if request.method == "POST":
        book_id = read_uuid(read_json(request), "bookId")
        return envelope(service.add_bookmark(caller_id, book_id), "bookmark", serialize_bookmark, status=201)
    return envelope(service.list_bookmarks(caller_id), "bookmarks", list_of(serialize_bookmark))


@csrf_exempt
@require_http_methods(["DELETE"])
@authenticated
def bookmark_detail(request, caller_id, bookmark_id):
    return envelope(BookmarkService().remove_bookmark(caller_id, bookmark_id))


@csrf_exempt
@require_http_methods(["DELETE"])
@authenticated
def bookmark_by_book(request, caller_id, book_id):
    return envelope(BookmarkService().remove_bookmark_for_book(caller_id, book_id))


@require_http_methods(["GET"])
@authenticated
def check_bookmark(request, caller_id, book_id):
    return envelope(BookmarkService().is_bookmarked(caller_id, book_id), "isBookmarked")


# Activity feed

@require_http_methods(["GET"])
def activity(request):
    default_limit = settings.BOOKSTORE.get("ACTIVITY_FEED_LIMIT", 20)
    try:
        limit = int(request.GET.get("limit", default_limit))
    except ValueError:
        return bad_request("limit must be an integer")
    limit = min(max(limit, 1), 100)
    entries = ActivityFeedRepository().recent(limit=limit)
    return JsonResponse({
        "success": True,
        "events": [serialize_activity(entry) for entry in entries],
    })


# GraphQL

class BookstoreGraphQLView:
    """GraphQL view with structured logging."""

    def dispatch(self, request):
        request_id = getattr(request, "request_id", None)
        user_id = request.headers.get("X-User-ID")

        logger.info(
            "graphql_request",
            extra={
                "request_id": request_id,
                "user_id": mask_uuid(user_id) if user_id else None,
                "operation": "graphql",
            },
        )

        response = self._process_graphql_request(request)

        logger.info(
            "graphql_response",
            extra={
                "request_id": request_id,
                "user_id": mask_uuid(user_id) if user_id else None,
                "status": response.status_code,
            },
        )
        return response

    def _process_graphql_request(self, request):
        if request.method == "GET":
            return JsonResponse({"message": "GraphQL endpoint. Use POST for queries."})

        try:
            data = json.loads(request.body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return JsonResponse({"error": {"message": "Invalid JSON"}}, status=400)

        success, result = graphql_sync(
            schema,
            data,
            context_value={"request": request},
            debug=settings.DEBUG,
        )
        return JsonResponse(result, status=200 if success else 400)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def graphql_view(request):
    """GraphQL endpoint."""
    return BookstoreGraphQLView().dispatch(request)
