"""
在庫アラートサービス
在庫アラートの登録（重複防止）、解除、一覧、在庫変動時の発火を担当
"""
import uuid
import logging
from datetime import datetime
from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.exceptions import (
    DuplicateAlertError,
    NotFoundError,
    ProductNotFoundError,
    ValidationFailedError,
)
from app.models.enums import InventoryAlertType, NotificationType, STOCK_NOTIFICATION_TYPES
from app.models.inventory_alert import InventoryAlert
from app.models.product import Product
from app.models.stock_notification import StockNotification
from app.services.db_errors import store_operation
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def parse_alert_type(value: Union[InventoryAlertType, str]) -> InventoryAlertType:
    try:
        return InventoryAlertType(value)
    except ValueError:
        raise ValidationFailedError(f"不正なアラート種別: {value}")


def alert_condition_met(
    alert_type: Union[InventoryAlertType, str],
    threshold: int,
    old_stock: int,
    new_stock: int
) -> bool:
    """
    在庫変動でアラート条件をまたいだか判定

    - LOW_STOCK: 閾値を上回っていた在庫が閾値以下（0より大きい）になった
    - OUT_OF_STOCK: 在庫ありから0になった
    - BACK_IN_STOCK: 0から在庫ありになった
    """
    kind = InventoryAlertType(alert_type)
    if kind is InventoryAlertType.LOW_STOCK:
        return old_stock > threshold >= new_stock > 0
    if kind is InventoryAlertType.OUT_OF_STOCK:
        return old_stock > 0 and new_stock == 0
    return old_stock == 0 and new_stock > 0


def stock_alert_message(notification_type: NotificationType, product_name: str, stock: int) -> str:
    """在庫通知の本文"""
    if notification_type is NotificationType.LOW_STOCK_ALERT:
        return f"Only {stock} left in stock for {product_name}. Order soon before it sells out."
    if notification_type is NotificationType.OUT_OF_STOCK_ALERT:
        return f"{product_name} is now out of stock."
    return f"Good news! {product_name} is back in stock ({stock} available)."


class InventoryAlertService:
    """在庫アラートサービスクラス"""

    def __init__(self, db: Session, notification_service: NotificationService = None):
        self.db = db
        self.notifications = notification_service or NotificationService(db)

    def _get_product(self, product_id: str) -> Product:
        with store_operation(self.db, "商品取得"):
            product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise ProductNotFoundError(f"商品が見つかりません: {product_id}")
        return product

    def _find_alert(
        self, user_id: str, product_id: str, kind: InventoryAlertType
    ) -> Optional[InventoryAlert]:
        return self.db.query(InventoryAlert).filter(
            InventoryAlert.user_id == user_id,
            InventoryAlert.product_id == product_id,
            InventoryAlert.alert_type == kind.value
        ).first()

    def subscribe(
        self,
        user_id: str,
        product_id: str,
        alert_type: Union[InventoryAlertType, str],
        threshold: int = 0
    ) -> InventoryAlert:
        """
        在庫アラートを登録

        同じ (ユーザー, 商品, 種別) の有効なアラートがあれば DuplicateAlertError。
        発火済み（無効）のアラートがあれば閾値を更新して再度有効にする。
        """
        kind = parse_alert_type(alert_type)
        if threshold < 0:
            raise ValidationFailedError("threshold は0以上で指定してください")
        # 閾値0の LOW_STOCK は条件 (0 < 新在庫 <= 閾値) を満たせない
        if kind is InventoryAlertType.LOW_STOCK and threshold < 1:
            raise ValidationFailedError("LOW_STOCK アラートには1以上の threshold が必要です")
        self._get_product(product_id)

        with store_operation(self.db, "在庫アラート登録"):
            existing = self._find_alert(user_id, product_id, kind)

            if existing and existing.is_active:
                raise DuplicateAlertError("この商品のアラートは既に登録されています")

            if existing:
                existing.is_active = True
                existing.threshold = threshold
                existing.fired_at = None
                existing.created_at = datetime.now()
                alert = existing
            else:
                alert = InventoryAlert(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    product_id=product_id,
                    alert_type=kind.value,
                    threshold=threshold,
                    is_active=True,
                    created_at=datetime.now()
                )
                self.db.add(alert)

            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                # 同時登録による一意制約違反のみ重複として扱う
                if self._find_alert(user_id, product_id, kind) is not None:
                    raise DuplicateAlertError("この商品のアラートは既に登録されています")
                raise

            self.db.refresh(alert)

        logger.info(f"在庫アラート登録: user={user_id}, product={product_id}, type={kind.value}")
        return alert

    def unsubscribe(self, user_id: str, alert_id: str) -> None:
        """在庫アラートを削除"""
        with store_operation(self.db, "在庫アラート削除"):
            alert = self.db.query(InventoryAlert).filter(
                InventoryAlert.id == alert_id,
                InventoryAlert.user_id == user_id
            ).first()

            if not alert:
                raise NotFoundError(f"アラートが見つかりません: {alert_id}")

            self.db.delete(alert)
            self.db.commit()

        logger.info(f"在庫アラート削除: user={user_id}, alert={alert_id}")

    def list_active(self, user_id: str) -> List[InventoryAlert]:
        """有効な在庫アラートを現在の商品情報付きで取得"""
        with store_operation(self.db, "在庫アラート一覧取得"):
            return (
                self.db.query(InventoryAlert)
                .options(joinedload(InventoryAlert.product))
                .filter(
                    InventoryAlert.user_id == user_id,
                    InventoryAlert.is_active == True  # noqa: E712
                )
                .order_by(InventoryAlert.created_at.desc())
                .all()
            )

    def process_stock_change(
        self,
        product_id: str,
        old_stock: int,
        new_stock: int
    ) -> List[StockNotification]:
        """
        在庫変動を受けて条件をまたいだアラートを発火

        在庫を更新した処理から呼び出す（このサービスは在庫を監視しない）。
        発火したアラートは無効化し、fired_at を記録する。

        Returns:
            作成した在庫通知のリスト
        """
        if old_stock == new_stock:
            return []

        product = self._get_product(product_id)

        with store_operation(self.db, "在庫アラート取得"):
            alerts = self.db.query(InventoryAlert).filter(
                InventoryAlert.product_id == product_id,
                InventoryAlert.is_active == True  # noqa: E712
            ).all()

        fired: List[StockNotification] = []
        for alert in alerts:
            if not alert_condition_met(alert.alert_type, alert.threshold, old_stock, new_stock):
                continue
            try:
                fired.append(self._fire(alert, product, new_stock))
            except Exception as e:
                logger.error(f"在庫アラート発火エラー: alert={alert.id}, error={str(e)}")

        if fired:
            logger.info(
                f"在庫アラート発火: product={product_id}, {old_stock} → {new_stock}, 件数={len(fired)}"
            )
        return fired

    def _fire(self, alert: InventoryAlert, product: Product, new_stock: int) -> StockNotification:
        """アラートを1件発火して在庫通知を作成"""
        notification_type = STOCK_NOTIFICATION_TYPES[InventoryAlertType(alert.alert_type)]
        message = stock_alert_message(notification_type, product.name, new_stock)
        now = datetime.now()
        user_id = alert.user_id

        stock_notification = StockNotification(
            id=str(uuid.uuid4()),
            user_id=user_id,
            product_id=product.id,
            alert_id=alert.id,
            type=notification_type.value,
            message=message,
            is_read=False,
            created_at=now
        )

        with store_operation(self.db, "在庫通知作成"):
            alert.is_active = False
            alert.fired_at = now
            self.db.add(stock_notification)
            self.db.commit()
            self.db.refresh(stock_notification)

        # 一般通知（メール送信判定含む）は失敗しても在庫通知は残す
        try:
            self.notifications.create_stock_notification(
                user_id, product.id, notification_type, message
            )
        except Exception as e:
            logger.error(f"在庫アラートの一般通知作成に失敗: user={user_id}, error={str(e)}")

        return stock_notification
