"""
Best-effort notifications for the order lifecycle.

Everything here runs after the order transaction has committed. A failing
notifier is logged and ignored; it never turns a successful order into a
failed one.
"""
from __future__ import annotations

import logging
from typing import Callable, Protocol

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

from store.domain.events import (
    BookPurchased,
    DomainEvent,
    OrderCancelled,
    OrderPlaced,
    OrderProcessed,
    serialize_event,
)
from store.domain.order import Order
from store.infra.activity import ActivityFeedRepository
from store.infra.models import UserORM
from store.infra.pii_masker import mask_pii_in_dict

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send_order_confirmation(self, user: UserORM, claim_code: str, itemized_html: str) -> None: ...

    def send_order_processed(self, user: UserORM, order: Order) -> None: ...

    def send_order_cancelled(self, user: UserORM, order: Order) -> None: ...


class ActivityFeed(Protocol):
    def broadcast_purchase(self, event: BookPurchased) -> None: ...


def render_order_details_html(order: Order) -> str:
    """Itemized order table embedded in the confirmation email."""
    return render_to_string(
        "store/emails/order_details.html",
        {
            "order": order,
            "discount_amount": order.subtotal - order.total_amount,
        },
    )


class EmailNotifier:
    """Sends order emails through Django's configured email backend."""

    def __init__(self, from_email: str | None = None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def send_order_confirmation(self, user: UserORM, claim_code: str, itemized_html: str) -> None:
        name = user.full_name or user.username
        html = render_to_string(
            "store/emails/order_confirmation.html",
            {"name": name, "claim_code": claim_code, "order_details": itemized_html},
        )
        send_mail(
            subject=f"Your order is confirmed - claim code {claim_code}",
            message=(
                f"Hello {name},\n\n"
                f"Thank you for your order. Present claim code {claim_code} "
                f"together with your membership ID when you pick it up.\n"
            ),
            from_email=self.from_email,
            recipient_list=[user.email],
            html_message=html,
        )

    def send_order_processed(self, user: UserORM, order: Order) -> None:
        send_mail(
            subject=f"Order {order.claim_code} picked up",
            message=(
                f"Hello {user.full_name or user.username},\n\n"
                f"Your order with claim code {order.claim_code} has been handed over. Enjoy your books!\n"
            ),
            from_email=self.from_email,
            recipient_list=[user.email],
        )

    def send_order_cancelled(self, user: UserORM, order: Order) -> None:
        send_mail(
            subject=f"Order {order.claim_code} cancelled",
            message=(
                f"Hello {user.full_name or user.username},\n\n"
                f"Your order with claim code {order.claim_code} has been cancelled.\n"
            ),
            from_email=self.from_email,
            recipient_list=[user.email],
        )


class StoredActivityFeed:
    """Activity feed backed by the ActivityEvent table."""

    def __init__(self, repo: ActivityFeedRepository | None = None):
        self.repo = repo or ActivityFeedRepository()

    def broadcast_purchase(self, event: BookPurchased) -> None:
        self.repo.publish(event)


class NotificationDispatcher:
    """Routes committed lifecycle events to the notifier and the feed."""

    def __init__(self, notifier: Notifier | None = None, activity_feed: ActivityFeed | None = None):
        self.notifier = notifier or EmailNotifier()
        self.activity_feed = activity_feed or StoredActivityFeed()

    def order_placed(
        self,
        event: OrderPlaced,
        order: Order,
        user: UserORM,
        purchases: list[BookPurchased],
    ) -> None:
        self._log_event(event)
        self._best_effort(
            "send_order_confirmation",
            self.notifier.send_order_confirmation,
            user,
            order.claim_code,
            render_order_details_html(order),
        )
        for purchase in purchases:
            self._best_effort("broadcast_purchase", self.activity_feed.broadcast_purchase, purchase)

    def order_processed(self, event: OrderProcessed, order: Order, user: UserORM) -> None:
        self._log_event(event)
        self._best_effort("send_order_processed", self.notifier.send_order_processed, user, order)

    def order_cancelled(self, event: OrderCancelled, order: Order, user: UserORM) -> None:
        self._log_event(event)
        self._best_effort("send_order_cancelled", self.notifier.send_order_cancelled, user, order)

    def _log_event(self, event: DomainEvent) -> None:
        logger.info(
            event.event_type,
            extra={
                "order_id": str(event.aggregate_id),
                "event": mask_pii_in_dict(serialize_event(event)),
            },
        )

    def _best_effort(self, name: str, func: Callable, *args) -> None:
        try:
            func(*args)
        except Exception as e:
            logger.error(
                "notification_failed",
                extra={
                    "operation": name,
                    "error": f"{type(e).__name__}: {e}",
                },
                exc_info=True,
            )
