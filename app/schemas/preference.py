"""Notification preference schemas"""
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .base import BaseSchema


class NotificationPreferenceResponse(BaseSchema):
    """Schema for notification preference response"""
    email_notifications: bool
    push_notifications: bool
    order_updates: bool
    price_drops: bool
    new_arrivals: bool
    stock_alerts: bool
    marketing_emails: bool


class NotificationPreferenceUpdate(BaseModel):
    """Partial update; omitted fields are left untouched"""
    email_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    order_updates: Optional[bool] = None
    price_drops: Optional[bool] = None
    new_arrivals: Optional[bool] = None
    stock_alerts: Optional[bool] = None
    marketing_emails: Optional[bool] = None

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "email_notifications": True,
                "marketing_emails": False
            }
        }
    )
