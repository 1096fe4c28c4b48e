"""Inventory alert and stock notification schemas"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.enums import InventoryAlertType

from .base import BaseSchema
from .notification import PaginationInfo
from .product import LowStockProduct, ProductSummary


class InventoryAlertCreateRequest(BaseModel):
    """Subscribe to a stock condition on a product"""
    product_id: str = Field(..., min_length=1, description="Product ID")
    type: InventoryAlertType = Field(..., description="Alert type")
    threshold: int = Field(0, ge=0, description="Stock threshold (LOW_STOCK requires 1 or more)")


class InventoryAlertResponse(BaseSchema):
    """Schema for inventory alert response"""
    id: str
    product_id: str
    alert_type: str
    threshold: int
    is_active: bool
    fired_at: Optional[datetime] = None
    created_at: datetime
    product: ProductSummary


class InventoryAlertCreateResponse(BaseModel):
    """Created alert"""
    success: bool = True
    message: str
    data: InventoryAlertResponse


class InventoryAlertListResponse(BaseModel):
    """Active alerts of the current user"""
    success: bool = True
    data: List[InventoryAlertResponse]


class StockNotificationResponse(BaseSchema):
    """Schema for stock notification response"""
    id: str
    product_id: str
    alert_id: Optional[str] = None
    type: str
    message: str
    is_read: bool
    created_at: datetime
    product: ProductSummary


class StockNotificationListResponse(BaseModel):
    """Paginated stock notification list"""
    success: bool = True
    data: List[StockNotificationResponse]
    pagination: PaginationInfo


class LowStockResponse(BaseModel):
    """Admin low-stock report"""
    success: bool = True
    data: List[LowStockProduct]
    threshold: int
