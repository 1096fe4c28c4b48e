"""
Pydantic Schemas for the SoniCart notification engine
Based on app/models
"""

from .base import BaseSchema, MessageResponse
from .product import ProductSummary, CategorySummary, LowStockProduct
from .notification import (
    PaginationInfo,
    NotificationResponse,
    NotificationListResponse,
    UnreadCountResponse,
    MarkAllReadResponse,
    SendTestNotificationRequest,
)
from .preference import NotificationPreferenceResponse, NotificationPreferenceUpdate
from .inventory import (
    InventoryAlertCreateRequest,
    InventoryAlertResponse,
    InventoryAlertCreateResponse,
    InventoryAlertListResponse,
    StockNotificationResponse,
    StockNotificationListResponse,
    LowStockResponse,
)

__all__ = [
    "BaseSchema",
    "MessageResponse",
    "ProductSummary",
    "CategorySummary",
    "LowStockProduct",
    "PaginationInfo",
    "NotificationResponse",
    "NotificationListResponse",
    "UnreadCountResponse",
    "MarkAllReadResponse",
    "SendTestNotificationRequest",
    "NotificationPreferenceResponse",
    "NotificationPreferenceUpdate",
    "InventoryAlertCreateRequest",
    "InventoryAlertResponse",
    "InventoryAlertCreateResponse",
    "InventoryAlertListResponse",
    "StockNotificationResponse",
    "StockNotificationListResponse",
    "LowStockResponse",
]
