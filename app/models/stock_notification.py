"""
StockNotification Model - 在庫通知テーブル
アラート発火ごとに1レコード
"""
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .user import User
    from .product import Product
    from .inventory_alert import InventoryAlert


class StockNotification(Base):
    """在庫通知テーブル"""
    __tablename__ = "stock_notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("products.id"), nullable=False, index=True)
    alert_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("inventory_alerts.id", ondelete="SET NULL"), nullable=True
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    # MySQL ではマイクロ秒まで保持（同一秒内の作成順を維持）
    created_at: Mapped[datetime] = mapped_column(
        DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql"),
        default=datetime.now,
        nullable=False,
        index=True
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="stock_notifications")
    product: Mapped["Product"] = relationship("Product")
    alert: Mapped[Optional["InventoryAlert"]] = relationship("InventoryAlert", back_populates="stock_notifications")
