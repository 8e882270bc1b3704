from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from store.infra.activity import ActivityEvent
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


@admin.register(UserORM)
class BookstoreUserAdmin(UserAdmin):
    list_display = ("username", "full_name", "email", "role", "is_active")
    list_filter = ("role", "is_active")
    search_fields = ("username", "full_name", "email")
    fieldsets = UserAdmin.fieldsets + (
        ("Bookstore", {"fields": ("full_name", "role")}),
    )


@admin.register(MemberProfileORM)
class MemberProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "total_orders", "joined_at")
    search_fields = ("user__username", "user__full_name")
    readonly_fields = ("total_orders",)


@admin.register(BookORM)
class BookAdmin(admin.ModelAdmin):
    list_display = ("title", "author", "price", "inventory_count", "total_sold")
    list_filter = ("genre", "format", "language")
    search_fields = ("title", "author", "isbn")


@admin.register(CartItemORM)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("id", "member", "book", "quantity", "created_at")


class OrderItemInline(admin.TabularInline):
    model = OrderItemORM
    extra = 0
    readonly_fields = ("book", "quantity", "unit_price")


@admin.register(OrderORM)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("claim_code", "member", "total_amount", "is_processed", "is_cancelled", "order_date")
    list_filter = ("is_processed", "is_cancelled", "order_date")
    search_fields = ("claim_code", "member__user__username")
    readonly_fields = (
        "claim_code",
        "subtotal",
        "discount_percentage",
        "discount_description",
        "total_amount",
        "processed_at",
        "cancelled_at",
    )
    inlines = (OrderItemInline,)


@admin.register(ReviewORM)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "book", "member", "rating", "created_at")
    list_filter = ("rating",)


@admin.register(BookmarkORM)
class BookmarkAdmin(admin.ModelAdmin):
    list_display = ("id", "book", "member", "created_at")
    search_fields = ("book__title", "member__user__username")


@admin.register(ActivityEvent)
class ActivityEventAdmin(admin.ModelAdmin):
    list_display = ("id", "event_type", "message", "created_at")
    list_filter = ("event_type", "created_at")
    readonly_fields = ("id", "aggregate_id", "event_type", "event_data", "message")
