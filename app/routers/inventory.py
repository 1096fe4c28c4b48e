"""
在庫アラート・在庫通知 API エンドポイント
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth import get_current_user, require_admin
from app.config import settings
from app.database import get_db
from app.exceptions import NotificationEngineError
from app.models.user import User
from app.routers.errors import http_error
from app.schemas.base import MessageResponse
from app.schemas.inventory import (
    InventoryAlertCreateRequest,
    InventoryAlertCreateResponse,
    InventoryAlertListResponse,
    InventoryAlertResponse,
    LowStockResponse,
    StockNotificationListResponse,
    StockNotificationResponse,
)
from app.schemas.notification import MarkAllReadResponse, UnreadCountResponse
from app.schemas.product import LowStockProduct
from app.services.inbox_service import StockInboxService
from app.services.inventory_alert_service import InventoryAlertService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/inventory", tags=["Inventory"])


# ============================================
# 在庫アラート
# ============================================

@router.get("/alerts", response_model=InventoryAlertListResponse)
def list_alerts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    有効な在庫アラート一覧を取得（現在の商品情報付き）
    """
    try:
        alerts = InventoryAlertService(db).list_active(current_user.id)
    except NotificationEngineError as e:
        raise http_error(e)

    return InventoryAlertListResponse(
        data=[InventoryAlertResponse.model_validate(alert) for alert in alerts]
    )


@router.post(
    "/alerts", response_model=InventoryAlertCreateResponse, status_code=status.HTTP_201_CREATED
)
def create_alert(
    request: InventoryAlertCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    在庫アラートを登録

    同じ商品・同じ種別の有効なアラートがある場合は400
    """
    try:
        alert = InventoryAlertService(db).subscribe(
            current_user.id, request.product_id, request.type, request.threshold
        )
    except NotificationEngineError as e:
        raise http_error(e)

    return InventoryAlertCreateResponse(
        message="在庫アラートを登録しました",
        data=InventoryAlertResponse.model_validate(alert),
    )


@router.delete("/alerts/{alert_id}", response_model=MessageResponse)
def delete_alert(
    alert_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """在庫アラートを削除"""
    try:
        InventoryAlertService(db).unsubscribe(current_user.id, alert_id)
    except NotificationEngineError as e:
        raise http_error(e)
    return MessageResponse(message="在庫アラートを削除しました")


# ============================================
# 在庫通知
# ============================================

@router.get("/notifications", response_model=StockNotificationListResponse)
def list_stock_notifications(
    page: int = Query(1, ge=1, description="ページ番号"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="1ページあたりの件数"),
    unread_only: bool = Query(False, description="未読のみ"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """在庫通知一覧を新しい順に取得"""
    try:
        items, pagination = StockInboxService(db).list_notifications(
            current_user.id, page=page, limit=limit, unread_only=unread_only
        )
    except NotificationEngineError as e:
        raise http_error(e)

    return StockNotificationListResponse(
        data=[StockNotificationResponse.model_validate(item) for item in items],
        pagination=pagination,
    )


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
def get_stock_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """在庫通知の未読数を取得"""
    try:
        count = StockInboxService(db).unread_count(current_user.id)
    except NotificationEngineError as e:
        raise http_error(e)
    return UnreadCountResponse(count=count)


@router.patch("/notifications/read-all", response_model=MarkAllReadResponse)
def mark_all_stock_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """在庫通知をすべて既読にする"""
    try:
        updated = StockInboxService(db).mark_all_read(current_user.id)
    except NotificationEngineError as e:
        raise http_error(e)
    return MarkAllReadResponse(message="すべての在庫通知を既読にしました", updated=updated)


@router.patch("/notifications/{notification_id}/read", response_model=MessageResponse)
def mark_stock_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """在庫通知を既読にする"""
    try:
        StockInboxService(db).mark_read(current_user.id, notification_id)
    except NotificationEngineError as e:
        raise http_error(e)
    return MessageResponse(message="在庫通知を既読にしました")


@router.delete("/notifications/{notification_id}", response_model=MessageResponse)
def delete_stock_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """在庫通知を削除"""
    try:
        StockInboxService(db).delete(current_user.id, notification_id)
    except NotificationEngineError as e:
        raise http_error(e)
    return MessageResponse(message="在庫通知を削除しました")


# ============================================
# 管理者向け
# ============================================

@router.get("/low-stock", response_model=LowStockResponse)
def get_low_stock_products(
    threshold: Optional[int] = Query(None, ge=0, description="在庫閾値（省略時は設定値）"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    在庫が閾値以下の商品一覧（在庫の少ない順）
    """
    if threshold is None:
        threshold = settings.LOW_STOCK_DEFAULT_THRESHOLD

    try:
        products = StockInboxService(db).low_stock_products(threshold)
    except NotificationEngineError as e:
        raise http_error(e)

    logger.info(f"在庫少商品取得: admin={admin.id}, threshold={threshold}, 件数={len(products)}")
    return LowStockResponse(
        data=[LowStockProduct.model_validate(product) for product in products],
        threshold=threshold,
    )
