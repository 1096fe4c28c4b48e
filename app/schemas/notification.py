"""Notification schemas"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .base import BaseSchema


class PaginationInfo(BaseModel):
    """Pagination metadata for inbox listings"""
    current_page: int
    total_pages: int
    total_notifications: int
    has_next_page: bool
    has_prev_page: bool


class NotificationResponse(BaseSchema):
    """Schema for notification response"""
    id: str
    user_id: str
    type: str
    title: str
    message: str
    data: Optional[Dict[str, Any]] = None
    is_read: bool
    is_emailed: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    """Paginated notification list"""
    success: bool = True
    data: List[NotificationResponse]
    pagination: PaginationInfo


class UnreadCountResponse(BaseModel):
    """Unread counter"""
    success: bool = True
    count: int


class MarkAllReadResponse(BaseModel):
    """Result of a bulk read update"""
    success: bool = True
    message: str
    updated: int


class SendTestNotificationRequest(BaseModel):
    """Request body for a test notification"""
    title: str = Field("Test Notification", max_length=255)
    message: str = Field("This is a test notification.", max_length=2000)
