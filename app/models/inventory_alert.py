"""
InventoryAlert Model - 在庫アラート（購読）テーブル
"""
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .user import User
    from .product import Product
    from .stock_notification import StockNotification


class InventoryAlert(Base):
    """在庫アラートテーブル"""
    __tablename__ = "inventory_alerts"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", "alert_type", name="uq_user_product_alert_type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("products.id"), nullable=False, index=True)
    alert_type: Mapped[str] = mapped_column(String(30), nullable=False)  # "LOW_STOCK", "OUT_OF_STOCK", "BACK_IN_STOCK"
    threshold: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    fired_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="inventory_alerts")
    product: Mapped["Product"] = relationship("Product", back_populates="inventory_alerts")
    # 削除時は発火済みの在庫通知の alert_id を NULL にする
    stock_notifications: Mapped[list["StockNotification"]] = relationship(
        "StockNotification", back_populates="alert"
    )
