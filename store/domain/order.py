"""
Domain model for Order aggregate.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from store.domain.errors import Forbidden, InvalidState

AUTO_ACCEPT = "auto-accept"


class OrderStatus(str, Enum):
    """Order status derived from the two terminal flags."""
    PENDING = "PENDING"
    PROCESSED = "PROCESSED"
    CANCELLED = "CANCELLED"


class OrderItem:
    """Order line item value object."""

    def __init__(
        self,
        book_id: UUID,
        quantity: int,
        unit_price: Decimal,
        book_title: str = "",
        book_author: str = "",
        id: UUID | None = None,
    ):
        if quantity <= 0:
            raise ValueError("Quantity must be positive")
        if unit_price < 0:
            raise ValueError("Price must be non-negative")

        self.id = id
        self.book_id = book_id
        self.quantity = quantity
        self.unit_price = unit_price
        self.book_title = book_title
        self.book_author = book_author

    @property
    def line_total(self) -> Decimal:
        """Calculate item subtotal."""
        return self.unit_price * self.quantity


class Order:
    """Order aggregate root."""

    def __init__(
        self,
        id: UUID | None = None,
        member_id: UUID | None = None,
        owner_user_id: UUID | None = None,
        items: list[OrderItem] | None = None,
        subtotal: Decimal = Decimal("0.00"),
        discount_percentage: Decimal = Decimal("0.00"),
        discount_description: str = "",
        total_amount: Decimal = Decimal("0.00"),
        claim_code: str = "",
        note: str = "",
        order_date: datetime | None = None,
        is_processed: bool = False,
        is_cancelled: bool = False,
    ):
        if is_processed and is_cancelled:
            raise ValueError("An order cannot be both processed and cancelled")

        self.id = id or uuid4()
        self.member_id = member_id
        self.owner_user_id = owner_user_id
        self._items = items or []
        self.subtotal = subtotal
        self.discount_percentage = discount_percentage
        self.discount_description = discount_description
        self.total_amount = total_amount
        self.claim_code = claim_code
        self.note = note
        self.order_date = order_date
        self._is_processed = is_processed
        self._is_cancelled = is_cancelled

    @property
    def items(self) -> list[OrderItem]:
        """Get order items (immutable)."""
        return list(self._items)

    @property
    def is_processed(self) -> bool:
        return self._is_processed

    @property
    def is_cancelled(self) -> bool:
        return self._is_cancelled

    @property
    def status(self) -> OrderStatus:
        if self._is_processed:
            return OrderStatus.PROCESSED
        if self._is_cancelled:
            return OrderStatus.CANCELLED
        return OrderStatus.PENDING

    @property
    def total_books(self) -> int:
        return sum(item.quantity for item in self._items)

    def is_owned_by(self, member_id: UUID | None) -> bool:
        return member_id is not None and self.member_id == member_id

    def ensure_can_cancel(self, member_id: UUID | None) -> None:
        """Check that ``member_id`` may cancel this order right now."""
        if not self.is_owned_by(member_id):
            raise Forbidden("You do not have permission to cancel this order")
        if self._is_processed:
            raise InvalidState("Cannot cancel a processed order")
        if self._is_cancelled:
            raise InvalidState("Order is already cancelled")

    def ensure_can_process(self, membership_id: str) -> None:
        """Check pickup preconditions; ``auto-accept`` skips the owner check."""
        if self._is_processed:
            raise InvalidState("Order is already processed")
        if self._is_cancelled:
            raise InvalidState("Cannot process a cancelled order")
        if membership_id != AUTO_ACCEPT and str(self.owner_user_id).lower() != str(membership_id).strip().lower():
            raise InvalidState("The provided membership ID does not match the order's owner")
