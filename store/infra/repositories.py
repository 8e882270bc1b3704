"""
Infrastructure repositories for domain entities.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from django.db import transaction
from django.db.models import Avg, F, Q, Sum
from django.utils import timezone

from store.domain.order import Order, OrderItem
from store.infra.models import (
    BookmarkORM,
    BookORM,
    CartItemORM,
    MemberProfileORM,
    OrderItemORM,
    OrderORM,
    ReviewORM,
    UserORM,
)

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for users and their member profiles."""

    def get_by_id(self, user_id: UUID | str) -> UserORM | None:
        """Get user by ID."""
        return UserORM.objects.filter(id=user_id).first()

    def get_member_profile(self, user_id: UUID | str) -> MemberProfileORM | None:
        """Get the member profile belonging to a user, if any."""
        return (
            MemberProfileORM.objects
            .select_related("user")
            .filter(user_id=user_id)
            .first()
        )

    @transaction.atomic
    def create_user(
        self,
        username: str,
        role: str = "Member",
        full_name: str = "",
        email: str = "",
        password: str | None = None,
        address: str = "",
        phone_number: str = "",
    ) -> UserORM:
        """Create a user; members also get their profile."""
        user = UserORM.objects.create_user(
            username=username,
            email=email,
            password=password,
            full_name=full_name,
            role=role,
        )
        if role == "Member":
            MemberProfileORM.objects.create(
                user=user,
                address=address,
                phone_number=phone_number,
            )
        return user

    def increment_total_orders(self, member_id: UUID) -> None:
        MemberProfileORM.objects.filter(id=member_id).update(
            total_orders=F("total_orders") + 1,
        )


class BookRepository:
    """Repository for the catalog and its inventory ledger."""

    def get_by_id(self, book_id: UUID | str) -> BookORM | None:
        """Get book by ID."""
        return BookORM.objects.filter(id=book_id).first()

    def search(self, query: str = "", limit: int = 20, offset: int = 0) -> tuple[list[BookORM], int]:
        """Search title, author, genre and ISBN. Returns ``(page, total)``."""
        books = BookORM.objects.all()
        if query:
            books = books.filter(
                Q(title__icontains=query)
                | Q(author__icontains=query)
                | Q(genre__icontains=query)
                | Q(isbn__icontains=query)
            )
        total = books.count()
        page = list(books.order_by("title", "id")[offset:offset + limit])
        return page, total

    def create(self, **fields) -> BookORM:
        return BookORM.objects.create(**fields)

    def update(self, book: BookORM, **fields) -> BookORM:
        for name, value in fields.items():
            setattr(book, name, value)
        book.save()
        return book

    def delete(self, book: BookORM) -> None:
        book.delete()

    def has_orders(self, book_id: UUID) -> bool:
        return OrderItemORM.objects.filter(book_id=book_id).exists()

    def decrement_stock(self, book_id: UUID, quantity: int) -> bool:
        """
        Take ``quantity`` copies out of stock and count them as sold.

        The stock check happens inside the UPDATE, so two buyers racing for
        the last copy cannot both win. Returns False when stock is short.
        """
        updated = (
            BookORM.objects
            .filter(id=book_id, inventory_count__gte=quantity)
            .update(
                inventory_count=F("inventory_count") - quantity,
                total_sold=F("total_sold") + quantity,
                updated_at=timezone.now(),
            )
        )
        return updated == 1

    def restore_stock(self, book_id: UUID, quantity: int) -> None:
        """Put cancelled copies back on the shelf."""
        BookORM.objects.filter(id=book_id).update(
            inventory_count=F("inventory_count") + quantity,
            total_sold=F("total_sold") - quantity,
            updated_at=timezone.now(),
        )

    def stats(self, top: int = 5, low_stock_threshold: int = 5) -> dict:
        """Sales and stock figures for the admin dashboard."""
        totals = BookORM.objects.aggregate(
            total_inventory=Sum("inventory_count"),
            total_sold=Sum("total_sold"),
        )
        return {
            "total_books": BookORM.objects.count(),
            "total_inventory": totals["total_inventory"] or 0,
            "total_sold": totals["total_sold"] or 0,
            "top_sellers": list(
                BookORM.objects.filter(total_sold__gt=0).order_by("-total_sold", "title")[:top]
            ),
            "low_stock": list(
                BookORM.objects.filter(inventory_count__lte=low_stock_threshold).order_by("inventory_count", "title")
            ),
        }


class CartRepository:
    """Repository for member cart lines."""

    def lines_for_member(self, member_id: UUID, lock: bool = False) -> list[CartItemORM]:
        """Get cart lines with their books (optimized, no N+1)."""
        lines = CartItemORM.objects.select_related("book").filter(member_id=member_id)
        if lock:
            lines = lines.select_for_update()
        return list(lines.order_by("created_at", "id"))

    def get_line(self, member_id: UUID, line_id: UUID | str) -> CartItemORM | None:
        return (
            CartItemORM.objects
            .select_related("book")
            .filter(member_id=member_id, id=line_id)
            .first()
        )

    def get_line_for_book(self, member_id: UUID, book_id: UUID) -> CartItemORM | None:
        return (
            CartItemORM.objects
            .select_related("book")
            .filter(member_id=member_id, book_id=book_id)
            .first()
        )

    def add_line(self, member_id: UUID, book: BookORM, quantity: int) -> CartItemORM:
        return CartItemORM.objects.create(member_id=member_id, book=book, quantity=quantity)

    def set_quantity(self, line: CartItemORM, quantity: int) -> CartItemORM:
        line.quantity = quantity
        line.save(update_fields=["quantity", "updated_at"])
        return line

    def delete_line(self, line: CartItemORM) -> None:
        line.delete()

    def clear(self, member_id: UUID) -> int:
        """Delete every line of a member's cart."""
        deleted, _ = CartItemORM.objects.filter(member_id=member_id).delete()
        return deleted


class OrderRepository:
    """Repository for Order aggregate."""

    def _base_queryset(self):
        return (
            OrderORM.objects
            .select_related("member__user")
            .prefetch_related("items__book")
        )

    def get_by_id(self, order_id: UUID | str) -> Order | None:
        """Get order by ID with items (optimized, no N+1)."""
        try:
            return self._to_domain(self._base_queryset().get(id=order_id))
        except OrderORM.DoesNotExist:
            return None

    def get_by_claim_code(self, claim_code: str) -> Order | None:
        try:
            return self._to_domain(self._base_queryset().get(claim_code=claim_code))
        except OrderORM.DoesNotExist:
            return None

    def get_by_member(self, member_id: UUID) -> list[Order]:
        """Get a member's orders, newest first."""
        orders_orm = self._base_queryset().filter(member_id=member_id).order_by("-order_date")
        return [self._to_domain(order_orm) for order_orm in orders_orm]

    def get_all(self, processed: bool | None = None) -> list[Order]:
        """Get all orders, optionally only processed or only pending ones."""
        orders_orm = self._base_queryset()
        if processed is not None:
            orders_orm = orders_orm.filter(is_processed=processed)
        return [self._to_domain(order_orm) for order_orm in orders_orm.order_by("-order_date")]

    def create(self, order: Order) -> UUID:
        """
        Insert a new order with its items.

        Runs in its own savepoint so a claim code collision (IntegrityError)
        can be retried without poisoning the outer transaction.
        """
        with transaction.atomic():
            order_orm = OrderORM.objects.create(
                id=order.id,
                member_id=order.member_id,
                order_date=order.order_date or timezone.now(),
                subtotal=order.subtotal,
                discount_percentage=order.discount_percentage,
                discount_description=order.discount_description,
                total_amount=order.total_amount,
                claim_code=order.claim_code,
                note=order.note,
            )
            OrderItemORM.objects.bulk_create([
                OrderItemORM(
                    order=order_orm,
                    book_id=item.book_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in order.items
            ])
        return order_orm.id

    def mark_processed(self, order_id: UUID) -> bool:
        """Flip to processed only if still pending. True for the single winner."""
        updated = (
            OrderORM.objects
            .filter(id=order_id, is_processed=False, is_cancelled=False)
            .update(is_processed=True, processed_at=timezone.now(), updated_at=timezone.now())
        )
        return updated == 1

    def mark_cancelled(self, order_id: UUID) -> bool:
        """Flip to cancelled only if still pending. True for the single winner."""
        updated = (
            OrderORM.objects
            .filter(id=order_id, is_processed=False, is_cancelled=False)
            .update(is_cancelled=True, cancelled_at=timezone.now(), updated_at=timezone.now())
        )
        return updated == 1

    def has_purchased(self, member_id: UUID, book_id: UUID) -> bool:
        """True when a processed, non-cancelled order of the member holds the book."""
        return OrderItemORM.objects.filter(
            book_id=book_id,
            order__member_id=member_id,
            order__is_processed=True,
            order__is_cancelled=False,
        ).exists()

    def _to_domain(self, order_orm: OrderORM) -> Order:
        """Convert ORM model to domain entity."""
        items = []
        for item_orm in order_orm.items.all():
            items.append(OrderItem(
                id=item_orm.id,
                book_id=item_orm.book_id,
                quantity=item_orm.quantity,
                unit_price=item_orm.unit_price,
                book_title=item_orm.book.title,
                book_author=item_orm.book.author,
            ))

        return Order(
            id=order_orm.id,
            member_id=order_orm.member_id,
            owner_user_id=order_orm.member.user_id,
            items=items,
            subtotal=order_orm.subtotal,
            discount_percentage=order_orm.discount_percentage,
            discount_description=order_orm.discount_description,
            total_amount=order_orm.total_amount,
            claim_code=order_orm.claim_code,
            note=order_orm.note,
            order_date=order_orm.order_date,
            is_processed=order_orm.is_processed,
            is_cancelled=order_orm.is_cancelled,
        )


class ReviewRepository:
    """Repository for book reviews."""

    def list_for_book(self, book_id: UUID) -> list[ReviewORM]:
        return list(
            ReviewORM.objects
            .select_related("member__user", "book")
            .filter(book_id=book_id)
            .order_by("-created_at")
        )

    def get_by_id(self, review_id: UUID | str) -> ReviewORM | None:
        return ReviewORM.objects.select_related("member__user", "book").filter(id=review_id).first()

    def exists_for(self, member_id: UUID, book_id: UUID) -> bool:
        return ReviewORM.objects.filter(member_id=member_id, book_id=book_id).exists()

    def create(self, member_id: UUID, book: BookORM, rating: int, comment: str) -> ReviewORM:
        review = ReviewORM.objects.create(
            member_id=member_id,
            book=book,
            rating=rating,
            comment=comment,
        )
        return self.get_by_id(review.id)

    def delete(self, review: ReviewORM) -> None:
        review.delete()

    def average_rating(self, book_id: UUID) -> Decimal | None:
        value = ReviewORM.objects.filter(book_id=book_id).aggregate(avg=Avg("rating"))["avg"]
        if value is None:
            return None
        return Decimal(str(value)).quantize(Decimal("0.01"))


class BookmarkRepository:
    """Repository for member bookmarks."""

    def list_for_member(self, member_id: UUID) -> list[BookmarkORM]:
        return list(
            BookmarkORM.objects
            .select_related("book")
            .filter(member_id=member_id)
            .order_by("-created_at")
        )

    def get_by_id(self, bookmark_id: UUID | str) -> BookmarkORM | None:
        return BookmarkORM.objects.select_related("book").filter(id=bookmark_id).first()

    def get_for(self, member_id: UUID, book_id: UUID) -> BookmarkORM | None:
        return BookmarkORM.objects.select_related("book").filter(member_id=member_id, book_id=book_id).first()

    def create(self, member_id: UUID, book: BookORM) -> BookmarkORM:
        return BookmarkORM.objects.create(member_id=member_id, book=book)

    def delete(self, bookmark: BookmarkORM) -> None:
        bookmark.delete()
