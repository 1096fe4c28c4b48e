"""
SQLAlchemy Models for the SoniCart notification engine

Usage:
    from app.models import User, Product, UserNotification, etc.
    # または
    from app.models import Base
"""

from .base import Base
from .enums import NotificationType, InventoryAlertType, UserRole
from .user import User
from .category import Category
from .product import Product
from .notification_preference import NotificationPreference, PREFERENCE_FIELDS
from .user_notification import UserNotification
from .inventory_alert import InventoryAlert
from .stock_notification import StockNotification

__all__ = [
    "Base",
    "NotificationType",
    "InventoryAlertType",
    "UserRole",
    "User",
    "Category",
    "Product",
    "NotificationPreference",
    "PREFERENCE_FIELDS",
    "UserNotification",
    "InventoryAlert",
    "StockNotification",
]
