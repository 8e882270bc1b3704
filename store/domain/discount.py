"""
Stacked percentage discounts for an order.

Components are additive: an order that qualifies for both the volume and the
loyalty discount gets 15% off the subtotal, applied once.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")

VOLUME_DISCOUNT_MIN_BOOKS = 5
VOLUME_DISCOUNT = Decimal("0.05")

LOYALTY_DISCOUNT_MIN_ORDERS = 10
LOYALTY_DISCOUNT = Decimal("0.10")


@dataclass(frozen=True)
class Discount:
    percentage: Decimal
    description: str

    @property
    def applies(self) -> bool:
        return self.percentage > 0


def compute_discount(total_books: int, prior_orders: int) -> Discount:
    """Return the discount earned by an order of ``total_books`` books."""
    percentage = Decimal("0.00")
    parts = []

    if total_books >= VOLUME_DISCOUNT_MIN_BOOKS:
        percentage += VOLUME_DISCOUNT
        parts.append("5% volume discount")

    if prior_orders >= LOYALTY_DISCOUNT_MIN_ORDERS:
        percentage += LOYALTY_DISCOUNT
        parts.append("10% loyalty discount")

    return Discount(percentage=percentage, description=", ".join(parts))


def round_money(amount: Decimal) -> Decimal:
    """Round half-up to cents."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def apply_discount(subtotal: Decimal, percentage: Decimal) -> Decimal:
    """Total payable after discount, rounded half-up to cents."""
    return round_money(subtotal * (Decimal("1") - percentage))
