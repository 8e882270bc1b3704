"""
Order lifecycle: cart to order, pickup processing and cancellation.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from functools import partial
from uuid import UUID, uuid4

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from store.domain.claim_code import generate_claim_code, normalize_claim_code
from store.domain.discount import apply_discount, compute_discount, round_money
from store.domain.errors import Forbidden, InvalidState, NotFound
from store.domain.events import BookPurchased, OrderCancelled, OrderPlaced, OrderProcessed
from store.domain.order import AUTO_ACCEPT, Order, OrderItem
from store.domain.results import Result
from store.domain.roles import Capability
from store.infra.models import CartItemORM, MemberProfileORM
from store.infra.pii_masker import mask_claim_code, mask_uuid
from store.infra.repositories import (
    BookRepository,
    CartRepository,
    OrderRepository,
    UserRepository,
)
from store.infra.retry import retry_with_backoff
from store.services.base import AccessPolicy, service_operation
from store.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


class OrderService:
    """Service for order operations."""

    def __init__(
        self,
        order_repo: OrderRepository | None = None,
        book_repo: BookRepository | None = None,
        cart_repo: CartRepository | None = None,
        user_repo: UserRepository | None = None,
        access: AccessPolicy | None = None,
        dispatcher: NotificationDispatcher | None = None,
    ):
        self.order_repo = order_repo or OrderRepository()
        self.book_repo = book_repo or BookRepository()
        self.cart_repo = cart_repo or CartRepository()
        self.user_repo = user_repo or UserRepository()
        self.access = access or AccessPolicy(self.user_repo)
        self.dispatcher = dispatcher or NotificationDispatcher()

    @service_operation
    @transaction.atomic
    def create_order_from_cart(self, caller_id: UUID | str, note: str | None = None) -> Result[Order]:
        """Turn the caller's cart into an order, all or nothing."""
        self.access.require(caller_id, Capability.PLACE_ORDER)

        member = self.user_repo.get_member_profile(caller_id)
        if member is None:
            raise NotFound("Member profile not found")

        lines = self.cart_repo.lines_for_member(member.id, lock=True)
        if not lines:
            raise InvalidState("Cart is empty")

        for line in lines:
            if line.book.inventory_count < line.quantity:
                raise InvalidState(f"Insufficient stock for '{line.book.title}'")

        order = self._build_order(member, lines, note or "")
        self._insert_with_fresh_claim_code(order)

        # Conditional decrement closes the gap between the check above and now.
        for line in lines:
            if not self.book_repo.decrement_stock(line.book_id, line.quantity):
                raise InvalidState(f"Insufficient stock for '{line.book.title}'")

        self.user_repo.increment_total_orders(member.id)
        self.cart_repo.clear(member.id)

        created = self.order_repo.get_by_id(order.id)
        logger.info(
            "order_created",
            extra={
                "order_id": str(created.id),
                "user_id": mask_uuid(str(caller_id)),
                "claim_code": mask_claim_code(created.claim_code),
            },
        )

        placed = OrderPlaced(
            event_id=uuid4(),
            aggregate_id=created.id,
            event_type="OrderPlaced",
            member_id=member.id,
            claim_code=created.claim_code,
            total_amount=created.total_amount,
            items_count=len(created.items),
        )
        placed.occurred_at = timezone.now().isoformat()
        purchases = [
            BookPurchased(
                event_id=uuid4(),
                aggregate_id=item.book_id,
                event_type="BookPurchased",
                order_id=created.id,
                member_name=member.user.full_name or member.user.username,
                book_title=item.book_title,
                quantity=item.quantity,
                occurred_at=placed.occurred_at,
            )
            for item in created.items
        ]
        transaction.on_commit(
            partial(self.dispatcher.order_placed, placed, created, member.user, purchases)
        )
        return Result.ok(created, "Order created successfully")

    def _build_order(self, member: MemberProfileORM, lines: list[CartItemORM], note: str) -> Order:
        subtotal = round_money(
            sum((line.book.price * line.quantity for line in lines), Decimal("0.00"))
        )
        total_books = sum(line.quantity for line in lines)
        discount = compute_discount(total_books, member.total_orders)

        logger.info(
            "discount_calculated",
            extra={
                "operation": "create_order",
                "details": {
                    "total_books": total_books,
                    "total_orders": member.total_orders,
                    "discount_percentage": str(discount.percentage),
                    "discount_description": discount.description,
                },
            },
        )

        items = [
            OrderItem(
                book_id=line.book_id,
                quantity=line.quantity,
                unit_price=line.book.price,
                book_title=line.book.title,
                book_author=line.book.author,
            )
            for line in lines
        ]
        return Order(
            member_id=member.id,
            owner_user_id=member.user_id,
            items=items,
            subtotal=subtotal,
            discount_percentage=discount.percentage,
            discount_description=discount.description,
            total_amount=apply_discount(subtotal, discount.percentage),
            note=note,
            order_date=timezone.now(),
        )

    def _insert_with_fresh_claim_code(self, order: Order) -> UUID:
        options = settings.BOOKSTORE
        length = options.get("CLAIM_CODE_LENGTH", 8)

        @retry_with_backoff(
            max_retries=options.get("CLAIM_CODE_MAX_ATTEMPTS", 5) - 1,
            initial_delay=0,
            jitter=False,
            exceptions=(IntegrityError,),
        )
        def insert() -> UUID:
            order.claim_code = generate_claim_code(length)
            return self.order_repo.create(order)

        return insert()

    @service_operation
    @transaction.atomic
    def cancel_order(self, caller_id: UUID | str, order_id: UUID | str) -> Result[Order]:
        """Cancel a pending order of the caller and put its books back."""
        order = self.order_repo.get_by_id(order_id)
        if order is None:
            raise NotFound("Order not found")

        member = self.user_repo.get_member_profile(caller_id)
        member_id = member.id if member else None
        order.ensure_can_cancel(member_id)

        if not self.order_repo.mark_cancelled(order.id):
            # Lost a race with another transition; report the state that won.
            self.order_repo.get_by_id(order.id).ensure_can_cancel(member_id)
            raise InvalidState("Order could not be cancelled")

        restored = {}
        for item in order.items:
            self.book_repo.restore_stock(item.book_id, item.quantity)
            restored[str(item.book_id)] = restored.get(str(item.book_id), 0) + item.quantity

        # total_orders stays as it is: loyalty credit is not revoked on cancel.
        cancelled = self.order_repo.get_by_id(order.id)
        logger.info(
            "order_cancelled",
            extra={"order_id": str(order.id), "user_id": mask_uuid(str(caller_id))},
        )

        event = OrderCancelled(
            event_id=uuid4(),
            aggregate_id=order.id,
            event_type="OrderCancelled",
            restored_books=restored,
        )
        event.occurred_at = timezone.now().isoformat()
        transaction.on_commit(
            partial(self.dispatcher.order_cancelled, event, cancelled, member.user)
        )
        return Result.ok(cancelled, "Order cancelled successfully")

    @service_operation
    @transaction.atomic
    def process_order(self, caller_id: UUID | str, claim_code: str, membership_id: str) -> Result[Order]:
        """Hand an order over at the counter."""
        self.access.require(caller_id, Capability.PROCESS_ORDER)

        code = normalize_claim_code(claim_code)
        order = self.order_repo.get_by_claim_code(code)
        if order is None:
            raise NotFound("Order not found with the provided claim code")

        membership_id = (membership_id or "").strip()
        auto_accepted = membership_id == AUTO_ACCEPT
        order.ensure_can_process(membership_id)

        if auto_accepted:
            logger.info(
                "order_auto_accepted",
                extra={"order_id": str(order.id), "claim_code": mask_claim_code(code)},
            )

        if not self.order_repo.mark_processed(order.id):
            self.order_repo.get_by_id(order.id).ensure_can_process(AUTO_ACCEPT)
            raise InvalidState("Order is already processed")

        processed = self.order_repo.get_by_id(order.id)
        logger.info(
            "order_processed",
            extra={
                "order_id": str(order.id),
                "user_id": mask_uuid(str(caller_id)),
                "claim_code": mask_claim_code(code),
            },
        )

        owner = self.user_repo.get_by_id(order.owner_user_id)
        event = OrderProcessed(
            event_id=uuid4(),
            aggregate_id=order.id,
            event_type="OrderProcessed",
            claim_code=code,
            auto_accepted=auto_accepted,
        )
        event.occurred_at = timezone.now().isoformat()
        transaction.on_commit(
            partial(self.dispatcher.order_processed, event, processed, owner)
        )
        return Result.ok(processed, "Order processed successfully")

    @service_operation
    def get_order(self, caller_id: UUID | str, order_id: UUID | str) -> Result[Order]:
        """Owners see their own orders; staff and admins see any."""
        order = self.order_repo.get_by_id(order_id)
        if order is None:
            raise NotFound("Order not found")

        member = self.user_repo.get_member_profile(caller_id)
        if not order.is_owned_by(member.id if member else None):
            if not self.access.allows(caller_id, Capability.VIEW_ANY_ORDER):
                raise Forbidden("You do not have permission to view this order")

        return Result.ok(order, "Order retrieved successfully")

    @service_operation
    def get_member_orders(self, caller_id: UUID | str) -> Result[list[Order]]:
        """Get the caller's own orders, newest first."""
        member = self.user_repo.get_member_profile(caller_id)
        if member is None:
            raise NotFound("Member profile not found")
        return Result.ok(self.order_repo.get_by_member(member.id), "Orders retrieved successfully")

    @service_operation
    def get_all_orders(self, caller_id: UUID | str, processed: bool | None = None) -> Result[list[Order]]:
        """Staff view of every order, optionally only processed or pending ones."""
        self.access.require(caller_id, Capability.VIEW_ANY_ORDER)
        return Result.ok(self.order_repo.get_all(processed), "Orders retrieved successfully")
