"""
Book catalog management.
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from uuid import UUID

from django.conf import settings

from store.domain.errors import InvalidState, NotFound
from store.domain.results import Result
from store.domain.roles import Capability
from store.infra.models import BookORM
from store.infra.repositories import BookRepository, ReviewRepository
from store.services.base import AccessPolicy, service_operation

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "author", "isbn", "description", "genre", "publisher", "language", "format")
REQUIRED_FIELDS = ("title", "author", "price")
MAX_PAGE_SIZE = 100


def clean_book_fields(data: dict, partial: bool = False) -> dict:
    """Validate and coerce incoming book fields."""
    if not partial:
        missing = [name for name in REQUIRED_FIELDS if data.get(name) in (None, "")]
        if missing:
            raise InvalidState(f"Missing required fields: {', '.join(missing)}")

    cleaned = {}
    for name in TEXT_FIELDS:
        if name in data:
            value = str(data[name] or "").strip()
            if name in ("title", "author") and not value:
                raise InvalidState(f"{name.capitalize()} cannot be empty")
            cleaned[name] = value

    if "price" in data:
        try:
            price = Decimal(str(data["price"]))
        except (InvalidOperation, ValueError):
            raise InvalidState("Price must be a number")
        if not price.is_finite() or price <= 0:
            raise InvalidState("Price must be greater than zero")
        cleaned["price"] = price.quantize(Decimal("0.01"))

    if "inventory_count" in data:
        try:
            inventory = int(data["inventory_count"])
        except (TypeError, ValueError):
            raise InvalidState("Inventory count must be an integer")
        if inventory < 0:
            raise InvalidState("Inventory count cannot be negative")
        cleaned["inventory_count"] = inventory

    if data.get("published_date"):
        try:
            cleaned["published_date"] = date.fromisoformat(str(data["published_date"])[:10])
        except ValueError:
            raise InvalidState("Published date must be an ISO date")

    return cleaned


class CatalogService:
    """Service for browsing and managing books."""

    def __init__(
        self,
        book_repo: BookRepository | None = None,
        review_repo: ReviewRepository | None = None,
        access: AccessPolicy | None = None,
    ):
        self.book_repo = book_repo or BookRepository()
        self.review_repo = review_repo or ReviewRepository()
        self.access = access or AccessPolicy()

    @service_operation
    def list_books(self, query: str = "", page: int = 1, page_size: int = 20) -> Result[dict]:
        page = max(page, 1)
        page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
        books, total = self.book_repo.search(query.strip(), limit=page_size, offset=(page - 1) * page_size)
        return Result.ok({
            "items": books,
            "total": total,
            "page": page,
            "page_size": page_size,
        })

    @service_operation
    def get_book(self, book_id: UUID | str) -> Result[dict]:
        book = self.book_repo.get_by_id(book_id)
        if book is None:
            raise NotFound("Book not found")
        return Result.ok({
            "book": book,
            "average_rating": self.review_repo.average_rating(book.id),
        })

    @service_operation
    def create_book(self, caller_id: UUID | str, data: dict) -> Result[BookORM]:
        self.access.require(caller_id, Capability.MANAGE_CATALOG)
        book = self.book_repo.create(**clean_book_fields(data))
        logger.info("book_created", extra={"book_id": str(book.id)})
        return Result.ok(book, "Book created successfully")

    @service_operation
    def update_book(self, caller_id: UUID | str, book_id: UUID | str, data: dict) -> Result[BookORM]:
        self.access.require(caller_id, Capability.MANAGE_CATALOG)
        book = self.book_repo.get_by_id(book_id)
        if book is None:
            raise NotFound("Book not found")
        book = self.book_repo.update(book, **clean_book_fields(data, partial=True))
        logger.info("book_updated", extra={"book_id": str(book.id)})
        return Result.ok(book, "Book updated successfully")

    @service_operation
    def delete_book(self, caller_id: UUID | str, book_id: UUID | str) -> Result[None]:
        self.access.require(caller_id, Capability.MANAGE_CATALOG)
        book = self.book_repo.get_by_id(book_id)
        if book is None:
            raise NotFound("Book not found")
        if self.book_repo.has_orders(book.id):
            raise InvalidState("Cannot delete a book that appears in orders")
        self.book_repo.delete(book)
        logger.info("book_deleted", extra={"book_id": str(book_id)})
        return Result.ok(None, "Book deleted successfully")

    @service_operation
    def stats(self, caller_id: UUID | str) -> Result[dict]:
        self.access.require(caller_id, Capability.MANAGE_CATALOG)
        return Result.ok(
            self.book_repo.stats(low_stock_threshold=settings.BOOKSTORE.get("LOW_STOCK_THRESHOLD", 5))
        )
