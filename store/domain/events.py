"""
Domain events emitted by the order lifecycle.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from uuid import UUID


class EventVersion(str, Enum):
    """Event version for upcasting."""
    V1 = "1.0"


@dataclass
class DomainEvent:
    """Base domain event."""
    event_id: UUID
    aggregate_id: UUID
    event_type: str


@dataclass
class OrderPlaced(DomainEvent):
    """Order created from a member's cart."""
    member_id: UUID
    claim_code: str
    total_amount: Decimal
    items_count: int
    version: EventVersion = EventVersion.V1
    occurred_at: str = ""


@dataclass
class OrderProcessed(DomainEvent):
    """Order picked up at the counter."""
    claim_code: str
    auto_accepted: bool = False
    version: EventVersion = EventVersion.V1
    occurred_at: str = ""


@dataclass
class OrderCancelled(DomainEvent):
    """Order cancelled by its owner."""
    restored_books: dict[str, int] = field(default_factory=dict)
    version: EventVersion = EventVersion.V1
    occurred_at: str = ""


@dataclass
class BookPurchased(DomainEvent):
    """A book was bought; aggregate_id is the book id."""
    order_id: UUID
    member_name: str
    book_title: str
    quantity: int
    version: EventVersion = EventVersion.V1
    occurred_at: str = ""

    @property
    def message(self) -> str:
        return f"{self.member_name} just purchased {self.book_title}!"


def serialize_event(event: DomainEvent) -> dict:
    """Serialize event to a JSON-compatible dict."""
    data = {
        "event_id": str(event.event_id),
        "aggregate_id": str(event.aggregate_id),
        "event_type": event.event_type,
        "version": event.version.value,
    }
    for key, value in event.__dict__.items():
        if key not in ("event_id", "aggregate_id", "event_type", "version"):
            if isinstance(value, (UUID, Decimal)):
                data[key] = str(value)
            else:
                data[key] = value
    return data
