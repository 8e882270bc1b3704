"""
Member carts.
"""
from __future__ import annotations

import logging
from uuid import UUID

from django.conf import settings
from django.db import transaction

from store.domain.cart import (
    MAX_CART_QUANTITY,
    CartLine,
    cart_totals,
    clamp_quantity,
    merged_quantity,
    validate_line_quantity,
)
from store.domain.errors import InvalidState, NotFound
from store.domain.results import Result
from store.domain.roles import Capability
from store.infra.models import CartItemORM, MemberProfileORM
from store.infra.repositories import BookRepository, CartRepository, UserRepository
from store.services.base import AccessPolicy, service_operation

logger = logging.getLogger(__name__)


def to_cart_line(line: CartItemORM) -> CartLine:
    return CartLine(
        id=line.id,
        book_id=line.book_id,
        book_title=line.book.title,
        book_author=line.book.author,
        unit_price=line.book.price,
        quantity=line.quantity,
        inventory_count=line.book.inventory_count,
    )


class CartService:
    """Service for cart operations. Admins have no cart."""

    def __init__(
        self,
        cart_repo: CartRepository | None = None,
        book_repo: BookRepository | None = None,
        user_repo: UserRepository | None = None,
        access: AccessPolicy | None = None,
    ):
        self.cart_repo = cart_repo or CartRepository()
        self.book_repo = book_repo or BookRepository()
        self.user_repo = user_repo or UserRepository()
        self.access = access or AccessPolicy(self.user_repo)

    @property
    def max_quantity(self) -> int:
        return settings.BOOKSTORE.get("CART_MAX_QUANTITY", MAX_CART_QUANTITY)

    def _member_for(self, caller_id: UUID | str) -> MemberProfileORM:
        self.access.require(caller_id, Capability.USE_CART)
        member = self.user_repo.get_member_profile(caller_id)
        if member is None:
            raise NotFound("Member profile not found")
        return member

    @service_operation
    def get_cart(self, caller_id: UUID | str) -> Result[dict]:
        member = self._member_for(caller_id)
        lines = [to_cart_line(line) for line in self.cart_repo.lines_for_member(member.id)]
        total_items, total_price = cart_totals(lines)
        return Result.ok({
            "items": lines,
            "total_items": total_items,
            "total_price": total_price,
        })

    @service_operation
    @transaction.atomic
    def add_to_cart(self, caller_id: UUID | str, book_id: UUID | str, quantity: int = 1) -> Result[CartLine]:
        """Add copies of a book; an existing line grows, capped at the maximum."""
        member = self._member_for(caller_id)
        if quantity < 1:
            raise InvalidState("Quantity must be at least 1")

        book = self.book_repo.get_by_id(book_id)
        if book is None:
            raise NotFound("Book not found")

        line = self.cart_repo.get_line_for_book(member.id, book.id)
        if line is not None:
            line = self.cart_repo.set_quantity(
                line, merged_quantity(line.quantity, quantity, self.max_quantity)
            )
        else:
            line = self.cart_repo.add_line(member.id, book, clamp_quantity(quantity, self.max_quantity))

        logger.info(
            "cart_item_added",
            extra={"book_id": str(book.id), "details": {"quantity": line.quantity}},
        )
        return Result.ok(to_cart_line(line), "Item added to cart")

    @service_operation
    def update_cart_item(self, caller_id: UUID | str, line_id: UUID | str, quantity: int) -> Result[CartLine]:
        member = self._member_for(caller_id)
        validate_line_quantity(quantity, self.max_quantity)

        line = self.cart_repo.get_line(member.id, line_id)
        if line is None:
            raise NotFound("Cart item not found")

        line = self.cart_repo.set_quantity(line, quantity)
        return Result.ok(to_cart_line(line), "Cart item updated")

    @service_operation
    def remove_from_cart(self, caller_id: UUID | str, line_id: UUID | str) -> Result[None]:
        member = self._member_for(caller_id)
        line = self.cart_repo.get_line(member.id, line_id)
        if line is None:
            raise NotFound("Cart item not found")

        self.cart_repo.delete_line(line)
        return Result.ok(None, "Item removed from cart")

    @service_operation
    def clear_cart(self, caller_id: UUID | str) -> Result[int]:
        member = self._member_for(caller_id)
        removed = self.cart_repo.clear(member.id)
        return Result.ok(removed, "Cart cleared")
