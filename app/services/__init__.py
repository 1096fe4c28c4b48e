"""
通知エンジンのサービス
"""

from .email_service import EmailService, email_service
from .inbox_service import InboxService, StockInboxService
from .inventory_alert_service import InventoryAlertService
from .notification_service import (
    NotificationService,
    create_notification,
    dispatch_to_subscribers,
)
from .preference_service import PreferenceService

__all__ = [
    "EmailService",
    "email_service",
    "InboxService",
    "StockInboxService",
    "InventoryAlertService",
    "NotificationService",
    "create_notification",
    "dispatch_to_subscribers",
    "PreferenceService",
]
