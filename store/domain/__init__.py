from store.domain.order import Order, OrderItem, OrderStatus
from store.domain.results import Result

__all__ = ["Order", "OrderItem", "OrderStatus", "Result"]
