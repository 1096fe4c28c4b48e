"""
通知種別・アラート種別の列挙型
"""
from enum import Enum


class NotificationType(str, Enum):
    """通知種別"""
    ORDER_UPDATE = "ORDER_UPDATE"
    PRICE_DROP_ALERT = "PRICE_DROP_ALERT"
    NEW_ARRIVAL_ALERT = "NEW_ARRIVAL_ALERT"
    LOW_STOCK_ALERT = "LOW_STOCK_ALERT"
    OUT_OF_STOCK_ALERT = "OUT_OF_STOCK_ALERT"
    BACK_IN_STOCK_ALERT = "BACK_IN_STOCK_ALERT"
    MARKETING_EMAIL = "MARKETING_EMAIL"
    TEST_NOTIFICATION = "TEST_NOTIFICATION"


class InventoryAlertType(str, Enum):
    """在庫アラート種別"""
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    BACK_IN_STOCK = "BACK_IN_STOCK"


class UserRole(str, Enum):
    """ユーザー権限"""
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


# 在庫アラート種別 → 通知種別
STOCK_NOTIFICATION_TYPES = {
    InventoryAlertType.LOW_STOCK: NotificationType.LOW_STOCK_ALERT,
    InventoryAlertType.OUT_OF_STOCK: NotificationType.OUT_OF_STOCK_ALERT,
    InventoryAlertType.BACK_IN_STOCK: NotificationType.BACK_IN_STOCK_ALERT,
}
