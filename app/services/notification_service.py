"""
通知サービス
アプリ内通知の作成、通知設定に応じたメール送信、一括配信を担当
"""
import uuid
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import ProductNotFoundError, ValidationFailedError
from app.models.enums import NotificationType
from app.models.notification_preference import NotificationPreference
from app.models.product import Product
from app.models.user import User
from app.models.user_notification import UserNotification
from app.services.db_errors import store_operation
from app.services.email_service import email_service
from app.services.email_templates import display_name_for, render_notification_email
from app.services.preference_service import PreferenceService

logger = logging.getLogger(__name__)

NotificationTypeLike = Union[NotificationType, str]

# 通知種別 → メール送信可否を決める設定項目（None はマスタースイッチのみ）
PREFERENCE_FIELD_BY_TYPE: Dict[NotificationType, Optional[str]] = {
    NotificationType.ORDER_UPDATE: "order_updates",
    NotificationType.PRICE_DROP_ALERT: "price_drops",
    NotificationType.NEW_ARRIVAL_ALERT: "new_arrivals",
    NotificationType.LOW_STOCK_ALERT: "stock_alerts",
    NotificationType.OUT_OF_STOCK_ALERT: "stock_alerts",
    NotificationType.BACK_IN_STOCK_ALERT: "stock_alerts",
    NotificationType.MARKETING_EMAIL: "marketing_emails",
    NotificationType.TEST_NOTIFICATION: None,
}

# 在庫通知のタイトル
STOCK_TITLE_TEMPLATES: Dict[NotificationType, str] = {
    NotificationType.LOW_STOCK_ALERT: "Low Stock Alert: {name}",
    NotificationType.OUT_OF_STOCK_ALERT: "Out of Stock: {name}",
    NotificationType.BACK_IN_STOCK_ALERT: "Back in Stock: {name}",
}
DEFAULT_STOCK_TITLE = "Stock Update"


def parse_notification_type(value: NotificationTypeLike) -> Optional[NotificationType]:
    """既知の通知種別なら列挙型を返し、未知なら None"""
    if isinstance(value, NotificationType):
        return value
    try:
        return NotificationType(value)
    except ValueError:
        return None


def notification_type_value(value: NotificationTypeLike) -> str:
    return value.value if isinstance(value, NotificationType) else str(value)


def should_send_email(
    notification_type: NotificationTypeLike,
    preferences: NotificationPreference
) -> bool:
    """
    通知設定からメール送信可否を判定

    マスタースイッチがOFFなら常に送信しない。
    未知の通知種別はマスタースイッチのみで判定する（既定で送信）。
    新しい種別で送信しない場合は PREFERENCE_FIELD_BY_TYPE に追加すること。
    """
    if not preferences.email_notifications:
        return False

    kind = parse_notification_type(notification_type)
    if kind is None:
        return True

    field = PREFERENCE_FIELD_BY_TYPE[kind]
    if field is None:
        return True
    return bool(getattr(preferences, field))


def preference_field_for(notification_type: NotificationTypeLike) -> str:
    """配信対象ユーザー抽出に使う設定項目"""
    kind = parse_notification_type(notification_type)
    if kind is None:
        return "email_notifications"
    return PREFERENCE_FIELD_BY_TYPE[kind] or "email_notifications"


class NotificationService:
    """通知サービスクラス"""

    def __init__(self, db: Session, email_sender=None):
        self.db = db
        self.email_sender = email_sender or email_service
        self.preferences = PreferenceService(db)

    def create_notification(
        self,
        user_id: str,
        notification_type: NotificationTypeLike,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None
    ) -> UserNotification:
        """
        アプリ内通知を作成し、設定に応じてメールも送信

        Parameters:
            user_id: ユーザーID
            notification_type: 通知種別
            title: タイトル（メール件名）
            message: 本文
            data: 種別ごとの付加情報

        Returns:
            作成した通知（メール送信結果は is_emailed に反映）

        Raises:
            DependencyUnavailableError: DBへの書き込みに失敗した場合
        """
        preferences = self.preferences.get_or_create(user_id)

        notification = UserNotification(
            id=str(uuid.uuid4()),
            user_id=user_id,
            type=notification_type_value(notification_type),
            title=title,
            message=message,
            data=data,
            is_read=False,
            is_emailed=False,
            created_at=datetime.now()
        )

        with store_operation(self.db, "通知作成"):
            self.db.add(notification)
            self.db.commit()
            self.db.refresh(notification)

        if should_send_email(notification_type, preferences):
            self._send_email_notification(notification)
        else:
            logger.debug(f"メール送信対象外: user={user_id}, type={notification.type}")

        return notification

    def _send_email_notification(self, notification: UserNotification) -> bool:
        """
        通知メールを送信し、成功時に is_emailed を更新

        メール送信の失敗は通知作成を失敗させない（ログのみ）
        """
        try:
            user = self.db.query(User).filter(User.id == notification.user_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"メール送信先の取得に失敗: user={notification.user_id}, error={str(e)}")
            return False

        if not user or not user.email:
            logger.warning(f"メールアドレスがないため送信スキップ: user={notification.user_id}")
            return False

        html_content = render_notification_email(
            title=notification.title,
            message=notification.message,
            recipient_name=display_name_for(user.first_name, user.email),
        )

        try:
            result = self.email_sender.send_email(
                to=user.email,
                subject=notification.title,
                html_content=html_content
            )
        except Exception as e:
            logger.error(f"通知メール送信エラー: notification={notification.id}, error={str(e)}")
            return False

        if not result.get("success"):
            logger.warning(
                f"通知メール送信失敗: notification={notification.id}, error={result.get('error')}"
            )
            return False

        try:
            notification.is_emailed = True
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"メール送信済みフラグの更新に失敗: notification={notification.id}, error={str(e)}")
            return False

        logger.info(f"通知メール送信: user={user.id}, notification={notification.id}")
        return True

    # ============================================
    # 種別ごとの通知作成
    # ============================================

    def _get_product(self, product_id: str) -> Product:
        with store_operation(self.db, "商品取得"):
            product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise ProductNotFoundError(f"商品が見つかりません: {product_id}")
        return product

    def create_order_notification(
        self,
        user_id: str,
        order_id: str,
        status: str,
        message: str
    ) -> UserNotification:
        """注文ステータス更新の通知"""
        title = f"Order Update - {status.upper()}"
        return self.create_notification(
            user_id,
            NotificationType.ORDER_UPDATE,
            title,
            message,
            {"order_id": order_id, "status": status},
        )

    def create_price_drop_notification(
        self,
        user_id: str,
        product_id: str,
        old_price: float,
        new_price: float
    ) -> UserNotification:
        """値下げ通知"""
        if old_price <= 0 or new_price >= old_price:
            raise ValidationFailedError(f"値下げではありません: {old_price} → {new_price}")

        product = self._get_product(product_id)
        discount = f"{(old_price - new_price) / old_price * 100:.1f}"
        title = f"Price Drop Alert: {product.name}"
        message = (
            f"Great news! The price of {product.name} has dropped from "
            f"${old_price:,.2f} to ${new_price:,.2f} ({discount}% off)."
        )

        return self.create_notification(
            user_id,
            NotificationType.PRICE_DROP_ALERT,
            title,
            message,
            {
                "product_id": product.id,
                "product_name": product.name,
                "old_price": old_price,
                "new_price": new_price,
                "discount": discount,
            },
        )

    def create_new_arrival_notification(self, user_id: str, product_id: str) -> UserNotification:
        """新着商品の通知"""
        product = self._get_product(product_id)
        category_name = product.category.name if product.category else None

        title = f"New Arrival: {product.name}"
        if category_name:
            message = f"A new {category_name} product has arrived: {product.name} for ${product.price:,.2f}."
        else:
            message = f"A new product has arrived: {product.name} for ${product.price:,.2f}."

        return self.create_notification(
            user_id,
            NotificationType.NEW_ARRIVAL_ALERT,
            title,
            message,
            {
                "product_id": product.id,
                "product_name": product.name,
                "product_price": product.price,
                "category_name": category_name,
            },
        )

    def create_stock_notification(
        self,
        user_id: str,
        product_id: str,
        notification_type: NotificationTypeLike,
        message: str
    ) -> UserNotification:
        """在庫関連の通知"""
        product = self._get_product(product_id)
        kind = parse_notification_type(notification_type)
        template = STOCK_TITLE_TEMPLATES.get(kind, DEFAULT_STOCK_TITLE)
        title = template.format(name=product.name)

        return self.create_notification(
            user_id,
            notification_type,
            title,
            message,
            {
                "product_id": product.id,
                "product_name": product.name,
                "product_price": product.price,
            },
        )

    # ============================================
    # 一括配信
    # ============================================

    def dispatch_bulk(
        self,
        user_ids: Iterable[str],
        notification_type: NotificationTypeLike,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None
    ) -> List[UserNotification]:
        """
        複数ユーザーへ順番に通知を作成

        個別の失敗はログに記録して残りのユーザーの処理を続ける

        Returns:
            作成に成功した通知のみ（入力順）
        """
        notifications: List[UserNotification] = []
        failed = 0

        for user_id in user_ids:
            try:
                notification = self.create_notification(
                    user_id, notification_type, title, message, data
                )
                notifications.append(notification)
            except Exception as e:
                failed += 1
                logger.error(f"一括通知の作成に失敗: user={user_id}, error={str(e)}")

        logger.info(
            f"一括通知完了: type={notification_type_value(notification_type)}, "
            f"成功={len(notifications)}, 失敗={failed}"
        )
        return notifications

    def select_recipients(self, notification_type: NotificationTypeLike) -> List[str]:
        """
        通知種別の設定項目がONのユーザーIDを取得

        通知設定レコードを持たないユーザーは対象外
        （PreferenceService.backfill_missing で事前に作成できる）
        """
        field = preference_field_for(notification_type)
        column = getattr(NotificationPreference, field)

        with store_operation(self.db, "配信対象ユーザー取得"):
            rows = (
                self.db.query(User.id)
                .join(NotificationPreference, NotificationPreference.user_id == User.id)
                .filter(column == True)  # noqa: E712
                .order_by(User.created_at, User.id)
                .all()
            )

        return [row.id for row in rows]


def create_notification(
    db: Session,
    user_id: str,
    notification_type: NotificationTypeLike,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None
) -> UserNotification:
    """通知を作成するヘルパー関数"""
    service = NotificationService(db)
    return service.create_notification(user_id, notification_type, title, message, data)


def dispatch_to_subscribers(
    db: Session,
    notification_type: NotificationTypeLike,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None
) -> List[UserNotification]:
    """通知種別を購読しているユーザー全員へ配信するヘルパー関数"""
    service = NotificationService(db)
    user_ids = service.select_recipients(notification_type)
    return service.dispatch_bulk(user_ids, notification_type, title, message, data)
