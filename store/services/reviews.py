"""
Purchase-verified book reviews.
"""
from __future__ import annotations

import logging
from uuid import UUID

from store.domain.errors import Forbidden, InvalidState, NotFound
from store.domain.results import Result
from store.domain.roles import Capability
from store.infra.models import ReviewORM
from store.infra.repositories import (
    BookRepository,
    OrderRepository,
    ReviewRepository,
    UserRepository,
)
from store.services.base import AccessPolicy, service_operation

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 1000


class ReviewService:
    """Members may review books they have picked up."""

    def __init__(
        self,
        review_repo: ReviewRepository | None = None,
        book_repo: BookRepository | None = None,
        order_repo: OrderRepository | None = None,
        user_repo: UserRepository | None = None,
        access: AccessPolicy | None = None,
    ):
        self.review_repo = review_repo or ReviewRepository()
        self.book_repo = book_repo or BookRepository()
        self.order_repo = order_repo or OrderRepository()
        self.user_repo = user_repo or UserRepository()
        self.access = access or AccessPolicy(self.user_repo)

    @service_operation
    def list_for_book(self, book_id: UUID | str) -> Result[list[ReviewORM]]:
        book = self.book_repo.get_by_id(book_id)
        if book is None:
            raise NotFound("Book not found")
        return Result.ok(self.review_repo.list_for_book(book.id))

    @service_operation
    def has_purchased(self, caller_id: UUID | str, book_id: UUID | str) -> Result[bool]:
        """A purchase counts once the order has been picked up and not cancelled."""
        book = self.book_repo.get_by_id(book_id)
        if book is None:
            raise NotFound("Book not found")
        if self.access.allows(caller_id, Capability.REVIEW_WITHOUT_PURCHASE):
            return Result.ok(True, "Admin users can review any book")

        member = self.user_repo.get_member_profile(caller_id)
        if member is None:
            raise NotFound("Member profile not found")
        return Result.ok(self.order_repo.has_purchased(member.id, book.id))

    @service_operation
    def create_review(
        self,
        caller_id: UUID | str,
        book_id: UUID | str,
        rating: int,
        comment: str,
    ) -> Result[ReviewORM]:
        member = self.user_repo.get_member_profile(caller_id)
        if member is None:
            raise NotFound("Member profile not found")

        book = self.book_repo.get_by_id(book_id)
        if book is None:
            raise NotFound("Book not found")

        if not isinstance(rating, int) or not 1 <= rating <= 5:
            raise InvalidState("Rating must be between 1 and 5")
        comment = (comment or "").strip()
        if not comment:
            raise InvalidState("Comment cannot be empty")
        if len(comment) > MAX_COMMENT_LENGTH:
            raise InvalidState(f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters")

        if not self.access.allows(caller_id, Capability.REVIEW_WITHOUT_PURCHASE):
            if not self.order_repo.has_purchased(member.id, book.id):
                raise Forbidden("You can only review books you have purchased")

        if self.review_repo.exists_for(member.id, book.id):
            raise InvalidState("You have already reviewed this book")

        review = self.review_repo.create(member.id, book, rating, comment)
        logger.info("review_created", extra={"book_id": str(book.id)})
        return Result.ok(review, "Review created successfully")

    @service_operation
    def delete_review(self, caller_id: UUID | str, review_id: UUID | str) -> Result[None]:
        review = self.review_repo.get_by_id(review_id)
        if review is None:
            raise NotFound("Review not found")

        member = self.user_repo.get_member_profile(caller_id)
        is_author = member is not None and review.member_id == member.id
        if not is_author and not self.access.allows(caller_id, Capability.MODERATE_REVIEWS):
            raise Forbidden("You do not have permission to delete this review")

        self.review_repo.delete(review)
        return Result.ok(None, "Review deleted successfully")
