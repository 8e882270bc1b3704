"""
JSON shapes for API responses.
"""
from store.domain.cart import CartLine
from store.domain.order import Order, OrderItem
from store.infra.activity import ActivityEvent
from store.infra.models import BookmarkORM, BookORM, ReviewORM


def money(value) -> str:
    return f"{value:.2f}"


def serialize_order_item(item: OrderItem) -> dict:
    return {
        "id": str(item.id) if item.id else None,
        "bookId": str(item.book_id),
        "bookTitle": item.book_title,
        "bookAuthor": item.book_author,
        "quantity": item.quantity,
        "unitPrice": money(item.unit_price),
        "lineTotal": money(item.line_total),
    }


def serialize_order(order: Order) -> dict:
    return {
        "id": str(order.id),
        "memberId": str(order.member_id),
        "orderDate": order.order_date.isoformat() if order.order_date else None,
        "subtotal": money(order.subtotal),
        "discountPercentage": str(order.discount_percentage),
        "discountDescription": order.discount_description,
        "totalAmount": money(order.total_amount),
        "claimCode": order.claim_code,
        "note": order.note,
        "isProcessed": order.is_processed,
        "isCancelled": order.is_cancelled,
        "status": order.status.value,
        "items": [serialize_order_item(item) for item in order.items],
    }


def serialize_cart_line(line: CartLine) -> dict:
    return {
        "id": str(line.id),
        "bookId": str(line.book_id),
        "bookTitle": line.book_title,
        "bookAuthor": line.book_author,
        "price": money(line.unit_price),
        "quantity": line.quantity,
        "inventoryCount": line.inventory_count,
        "lineTotal": money(line.line_total),
    }


def serialize_cart(cart: dict) -> dict:
    return {
        "items": [serialize_cart_line(line) for line in cart["items"]],
        "totalItems": cart["total_items"],
        "totalPrice": money(cart["total_price"]),
    }


def serialize_book(book: BookORM) -> dict:
    return {
        "id": str(book.id),
        "title": book.title,
        "author": book.author,
        "isbn": book.isbn,
        "description": book.description,
        "genre": book.genre,
        "publisher": book.publisher,
        "language": book.language,
        "format": book.format,
        "price": money(book.price),
        "inventoryCount": book.inventory_count,
        "totalSold": book.total_sold,
        "publishedDate": book.published_date.isoformat() if book.published_date else None,
    }


def serialize_review(review: ReviewORM) -> dict:
    return {
        "id": str(review.id),
        "bookId": str(review.book_id),
        "memberId": str(review.member_id),
        "memberName": review.member.user.full_name or review.member.user.username,
        "rating": review.rating,
        "comment": review.comment,
        "createdAt": review.created_at.isoformat(),
    }


def serialize_bookmark(bookmark: BookmarkORM) -> dict:
    return {
        "id": str(bookmark.id),
        "bookId": str(bookmark.book_id),
        "book": serialize_book(bookmark.book),
        "createdAt": bookmark.created_at.isoformat(),
    }


def serialize_stats(stats: dict) -> dict:
    return {
        "totalBooks": stats["total_books"],
        "totalInventory": stats["total_inventory"],
        "totalSold": stats["total_sold"],
        "topSellers": [serialize_book(book) for book in stats["top_sellers"]],
        "lowStock": [serialize_book(book) for book in stats["low_stock"]],
    }


def serialize_activity(entry: ActivityEvent) -> dict:
    return {
        "id": str(entry.id),
        "type": entry.event_type,
        "message": entry.message,
        "data": entry.event_data,
        "createdAt": entry.created_at.isoformat(),
    }
