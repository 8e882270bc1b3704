"""
Cart line rules.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from store.domain.errors import InvalidState

MAX_CART_QUANTITY = 99


def clamp_quantity(quantity: int, maximum: int = MAX_CART_QUANTITY) -> int:
    """Clamp a line quantity into ``[1, maximum]``."""
    return max(1, min(quantity, maximum))


def merged_quantity(existing: int, added: int, maximum: int = MAX_CART_QUANTITY) -> int:
    """Quantity after adding ``added`` copies to a line holding ``existing``."""
    if added < 1:
        raise InvalidState("Quantity must be at least 1")
    return clamp_quantity(existing + added, maximum)


def validate_line_quantity(quantity: int, maximum: int = MAX_CART_QUANTITY) -> int:
    """Explicit updates must already be in range; use removal instead of 0."""
    if quantity < 1 or quantity > maximum:
        raise InvalidState(f"Quantity must be between 1 and {maximum}")
    return quantity


@dataclass(frozen=True)
class CartLine:
    """Snapshot of one cart line with the book's current price."""
    id: UUID
    book_id: UUID
    book_title: str
    book_author: str
    unit_price: Decimal
    quantity: int
    inventory_count: int = 0

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


def cart_totals(lines: list[CartLine]) -> tuple[int, Decimal]:
    """Return ``(total_items, total_price)`` for a cart."""
    total_items = sum(line.quantity for line in lines)
    total_price = sum((line.line_total for line in lines), Decimal("0.00"))
    return total_items, total_price
