from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone


ROLE_CHOICES = (
    ("Member", "Member"),
    ("Staff", "Staff"),
    ("Admin", "Admin"),
)


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UserORM(AbstractUser):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    full_name = models.CharField(max_length=255, blank=True, default="")
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default="Member")

    class Meta(AbstractUser.Meta):
        indexes = [
            models.Index(fields=("role",), name="store_user_role_idx"),
        ]

    def __str__(self):
        return self.full_name or self.username


class MemberProfileORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    user = models.OneToOneField(
        UserORM,
        on_delete=models.CASCADE,
        related_name="member_profile",
    )
    address = models.CharField(max_length=255, blank=True, default="")
    phone_number = models.CharField(max_length=32, blank=True, default="")
    joined_at = models.DateTimeField(default=timezone.now)
    total_orders = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"MemberProfile({self.user})"


class BookORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    title = models.CharField(max_length=255)
    author = models.CharField(max_length=255)
    isbn = models.CharField(max_length=20, blank=True, default="")
    description = models.TextField(blank=True, default="")
    genre = models.CharField(max_length=64, blank=True, default="")
    publisher = models.CharField(max_length=128, blank=True, default="")
    language = models.CharField(max_length=32, default="English")
    format = models.CharField(max_length=32, default="Paperback")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    inventory_count = models.IntegerField(default=0)
    total_sold = models.IntegerField(default=0)
    published_date = models.DateField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=("title",), name="store_book_title_idx"),
            models.Index(fields=("-total_sold",), name="store_book_sold_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(inventory_count__gte=0),
                name="book_inventory_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(total_sold__gte=0),
                name="book_total_sold_non_negative",
            ),
        ]

    def __str__(self):
        return self.title


class CartItemORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    member = models.ForeignKey(
        MemberProfileORM,
        on_delete=models.CASCADE,
        related_name="cart_items",
    )
    book = models.ForeignKey(
        BookORM,
        on_delete=models.CASCADE,
        related_name="cart_items",
    )
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(99)],
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("member", "book"), name="cart_item_unique_book"),
        ]
        indexes = [
            models.Index(fields=("member",), name="store_cart_member_idx"),
        ]


class OrderORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    member = models.ForeignKey(
        MemberProfileORM,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    order_date = models.DateTimeField(default=timezone.now)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    discount_description = models.CharField(max_length=100, blank=True, default="")
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    claim_code = models.CharField(max_length=50, unique=True)
    note = models.TextField(blank=True, default="")
    is_processed = models.BooleanField(default=False)
    is_cancelled = models.BooleanField(default=False)
    processed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=("member", "-order_date"), name="store_order_member_date_idx"),
            models.Index(fields=("is_processed", "is_cancelled"), name="store_order_state_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(is_processed=True, is_cancelled=True),
                name="order_single_terminal_state",
            ),
        ]


class OrderItemORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.CASCADE,
        related_name="items",
    )
    book = models.ForeignKey(
        BookORM,
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        indexes = [
            models.Index(fields=("order",), name="store_orderitem_order_idx"),
        ]


class ReviewORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    book = models.ForeignKey(
        BookORM,
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    member = models.ForeignKey(
        MemberProfileORM,
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    comment = models.CharField(max_length=1000)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("book", "member"), name="review_unique_member_book"),
        ]
        indexes = [
            models.Index(fields=("book", "-created_at"), name="store_review_book_idx"),
        ]


class BookmarkORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    member = models.ForeignKey(
        MemberProfileORM,
        on_delete=models.CASCADE,
        related_name="bookmarks",
    )
    book = models.ForeignKey(
        BookORM,
        on_delete=models.CASCADE,
        related_name="bookmarks",
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("member", "book"), name="bookmark_unique_member_book"),
        ]
        indexes = [
            models.Index(fields=("member", "-created_at"), name="store_bookmark_member_idx"),
        ]
