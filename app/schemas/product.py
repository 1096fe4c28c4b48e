"""Product schemas"""
from typing import List, Optional

from pydantic import Field

from .base import BaseSchema


class ProductSummary(BaseSchema):
    """Live product snapshot joined onto alerts and stock notifications"""
    id: str
    name: str
    price: float
    stock: int
    images: List[str] = Field(default_factory=list)


class CategorySummary(BaseSchema):
    """Category summary"""
    id: str
    name: str


class LowStockProduct(ProductSummary):
    """Product listed in the admin low-stock report"""
    is_active: bool
    category: Optional[CategorySummary] = None
