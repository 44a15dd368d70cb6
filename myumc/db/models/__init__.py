"""
Domain-split SQLAlchemy models.

Exposes `Base`, the time helpers and all ORM classes from one place so
callers can `from myumc.db import models`.
"""

from .base import Base, now_utc, ensure_aware  # re-export

from .organizations import Organization
from .users import User
from .members import Member, GivingRecord, MembershipHistory
from .content import (
    Content,
    Sermon,
    BlogPost,
    Announcement,
    Comment,
    SermonRating,
    BlogPostLike,
    AnnouncementAcknowledgement,
)
from .events import ChurchEvent, EventRegistration, EventReminder
from .store import Product, ProductVariant, Cart, CartItem, Order, OrderItem
from .audit import AuditLog

__all__ = [
    # base
    "Base",
    "now_utc",
    "ensure_aware",
    # identity
    "Organization",
    "User",
    # members
    "Member",
    "GivingRecord",
    "MembershipHistory",
    # content
    "Content",
    "Sermon",
    "BlogPost",
    "Announcement",
    "Comment",
    "SermonRating",
    "BlogPostLike",
    "AnnouncementAcknowledgement",
    # events
    "ChurchEvent",
    "EventRegistration",
    "EventReminder",
    # store
    "Product",
    "ProductVariant",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    # audit
    "AuditLog",
]
