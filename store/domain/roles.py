"""
Role-based access rules.

Every service operation asks one question at its top: does the caller's role
carry the capability this operation needs?
"""
from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role enumeration."""
    MEMBER = "Member"
    STAFF = "Staff"
    ADMIN = "Admin"


class Capability(str, Enum):
    USE_CART = "USE_CART"
    USE_BOOKMARKS = "USE_BOOKMARKS"
    PLACE_ORDER = "PLACE_ORDER"
    VIEW_ANY_ORDER = "VIEW_ANY_ORDER"
    PROCESS_ORDER = "PROCESS_ORDER"
    MANAGE_CATALOG = "MANAGE_CATALOG"
    MODERATE_REVIEWS = "MODERATE_REVIEWS"
    REVIEW_WITHOUT_PURCHASE = "REVIEW_WITHOUT_PURCHASE"


PERMISSIONS: dict[Role, frozenset[Capability]] = {
    Role.MEMBER: frozenset({
        Capability.USE_CART,
        Capability.USE_BOOKMARKS,
        Capability.PLACE_ORDER,
    }),
    # Staff pass the cart and bookmark gates but hold no member
    # profile, so those operations still fail for them further down.
    Role.STAFF: frozenset({
        Capability.USE_CART,
        Capability.USE_BOOKMARKS,
        Capability.VIEW_ANY_ORDER,
        Capability.PROCESS_ORDER,
    }),
    Role.ADMIN: frozenset({
        Capability.VIEW_ANY_ORDER,
        Capability.PROCESS_ORDER,
        Capability.MANAGE_CATALOG,
        Capability.MODERATE_REVIEWS,
        Capability.REVIEW_WITHOUT_PURCHASE,
    }),
}

DENIED_MESSAGES: dict[Capability, str] = {
    Capability.USE_CART: "Admin users cannot use cart functionality",
    Capability.USE_BOOKMARKS: "Admin users cannot use bookmarks",
    Capability.PLACE_ORDER: "Only members can place orders",
    Capability.VIEW_ANY_ORDER: "You do not have permission to view these orders",
    Capability.PROCESS_ORDER: "Only staff can process orders",
    Capability.MANAGE_CATALOG: "Only administrators can manage the catalog",
    Capability.MODERATE_REVIEWS: "You do not have permission to modify this review",
    Capability.REVIEW_WITHOUT_PURCHASE: "You can only review books you have purchased",
}


def is_permitted(role: Role, capability: Capability) -> bool:
    return capability in PERMISSIONS.get(role, frozenset())
