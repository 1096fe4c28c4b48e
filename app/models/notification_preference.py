"""
NotificationPreference Model - 通知設定テーブル
ユーザーごとに1レコード（初回アクセス時に作成）
"""
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base

if TYPE_CHECKING:
    from .user import User


# 通知設定のトグル項目
PREFERENCE_FIELDS = (
    "email_notifications",
    "push_notifications",
    "order_updates",
    "price_drops",
    "new_arrivals",
    "stock_alerts",
    "marketing_emails",
)


class NotificationPreference(Base):
    """通知設定テーブル"""
    __tablename__ = "notification_preferences"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), unique=True, nullable=False, index=True)
    email_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)  # メール通知のマスタースイッチ
    push_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    order_updates: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    price_drops: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    new_arrivals: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    stock_alerts: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    marketing_emails: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="notification_preference")

    def to_dict(self) -> dict:
        return {field: getattr(self, field) for field in PREFERENCE_FIELDS}
