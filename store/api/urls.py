from django.urls import path

from store.api import views

urlpatterns = [
    path("Order", views.orders, name="orders"),
    path("Order/all", views.all_orders, name="orders-all"),
    path("Order/process", views.process_order, name="orders-process"),
    path("Order/<uuid:order_id>", views.order_detail, name="order-detail"),
    path("Order/<uuid:order_id>/cancel", views.cancel_order, name="order-cancel"),
    path("Cart", views.cart, name="cart"),
    path("Cart/<uuid:line_id>", views.cart_item, name="cart-item"),
    path("Books", views.books, name="books"),
    path("Books/stats", views.book_stats, name="books-stats"),
    path("Books/<uuid:book_id>", views.book_detail, name="book-detail"),
    path("Review", views.reviews, name="reviews"),
    path("Review/<uuid:review_id>", views.review_detail, name="review-detail"),
    path("Review/book/<uuid:book_id>", views.book_reviews, name="book-reviews"),
    path("Review/check-purchase/<uuid:book_id>", views.check_purchase, name="check-purchase"),
    path("Bookmark", views.bookmarks, name="bookmarks"),
    path("Bookmark/<uuid:bookmark_id>", views.bookmark_detail, name="bookmark-detail"),
    path("Bookmark/ByBookId/<uuid:book_id>", views.bookmark_by_book, name="bookmark-by-book"),
    path("Bookmark/Check/<uuid:book_id>", views.check_bookmark, name="bookmark-check"),
    path("activity", views.activity, name="activity"),
]
