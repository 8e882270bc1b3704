from store.services.bookmarks import BookmarkService
from store.services.cart import CartService
from store.services.catalog import CatalogService
from store.services.orders import OrderService
from store.services.reviews import ReviewService

__all__ = ["BookmarkService", "CartService", "CatalogService", "OrderService", "ReviewService"]
