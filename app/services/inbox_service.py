"""
通知受信箱サービス
通知一覧（ページング）、既読化、未読数、削除を担当
一般通知（UserNotification）と在庫通知（StockNotification）で共通
"""
import logging
import math
from typing import List, Optional, Tuple, Type, Union

from sqlalchemy.orm import Session, joinedload

from app.config import settings
from app.exceptions import NotFoundError, ValidationFailedError
from app.models.product import Product
from app.models.stock_notification import StockNotification
from app.models.user_notification import UserNotification
from app.schemas.notification import PaginationInfo
from app.services.db_errors import store_operation

logger = logging.getLogger(__name__)

InboxModel = Union[UserNotification, StockNotification]


def build_pagination(page: int, limit: int, total: int) -> PaginationInfo:
    """ページ情報を計算"""
    total_pages = math.ceil(total / limit) if total else 0
    return PaginationInfo(
        current_page=page,
        total_pages=total_pages,
        total_notifications=total,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


class InboxService:
    """通知受信箱サービスクラス"""

    model: Type[InboxModel] = UserNotification

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self, user_id: str, unread_only: bool = False):
        query = self.db.query(self.model).filter(self.model.user_id == user_id)
        if unread_only:
            query = query.filter(self.model.is_read == False)  # noqa: E712
        return query

    def _list_options(self) -> list:
        return []

    def list_notifications(
        self,
        user_id: str,
        page: int = 1,
        limit: int = settings.DEFAULT_PAGE_SIZE,
        unread_only: bool = False
    ) -> Tuple[List[InboxModel], PaginationInfo]:
        """
        通知一覧を新しい順に取得

        Parameters:
            user_id: ユーザーID
            page: ページ番号（1始まり）
            limit: 1ページあたりの件数
            unread_only: 未読のみ

        Returns:
            (通知リスト, ページ情報)
        """
        if page < 1 or limit < 1:
            raise ValidationFailedError("page と limit は1以上で指定してください")

        with store_operation(self.db, "通知一覧取得"):
            query = self._base_query(user_id, unread_only)
            total = query.count()
            items = (
                query.options(*self._list_options())
                .order_by(self.model.created_at.desc(), self.model.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )

        return items, build_pagination(page, limit, total)

    def _get_owned(self, user_id: str, notification_id: str) -> InboxModel:
        with store_operation(self.db, "通知取得"):
            notification = self.db.query(self.model).filter(
                self.model.id == notification_id,
                self.model.user_id == user_id
            ).first()
        if not notification:
            raise NotFoundError(f"通知が見つかりません: {notification_id}")
        return notification

    def mark_read(self, user_id: str, notification_id: str) -> InboxModel:
        """通知を既読にする（既読済みでも成功）"""
        notification = self._get_owned(user_id, notification_id)
        if notification.is_read:
            return notification

        with store_operation(self.db, "既読更新"):
            notification.is_read = True
            self.db.commit()
            self.db.refresh(notification)
        return notification

    def mark_all_read(self, user_id: str) -> int:
        """
        未読通知をすべて既読にする

        Returns:
            既読にした件数
        """
        with store_operation(self.db, "一括既読更新"):
            updated = (
                self._base_query(user_id, unread_only=True)
                .update({self.model.is_read: True}, synchronize_session=False)
            )
            self.db.commit()

        self.db.expire_all()
        logger.info(f"一括既読: user={user_id}, table={self.model.__tablename__}, 件数={updated}")
        return updated

    def unread_count(self, user_id: str) -> int:
        """未読数を取得"""
        with store_operation(self.db, "未読数取得"):
            return self._base_query(user_id, unread_only=True).count()

    def delete(self, user_id: str, notification_id: str) -> None:
        """通知を削除"""
        notification = self._get_owned(user_id, notification_id)
        with store_operation(self.db, "通知削除"):
            self.db.delete(notification)
            self.db.commit()
        logger.info(f"通知削除: user={user_id}, notification={notification_id}")


class StockInboxService(InboxService):
    """在庫通知の受信箱サービスクラス"""

    model = StockNotification

    def _list_options(self) -> list:
        # 商品情報（id, name, price, stock, images）を同時に取得
        return [joinedload(StockNotification.product)]

    def low_stock_products(self, threshold: Optional[int] = None) -> List[Product]:
        """
        在庫が閾値以下の有効な商品を在庫の少ない順に取得（管理者向け）
        """
        if threshold is None:
            threshold = settings.LOW_STOCK_DEFAULT_THRESHOLD
        if threshold < 0:
            raise ValidationFailedError("threshold は0以上で指定してください")

        with store_operation(self.db, "在庫少商品取得"):
            return (
                self.db.query(Product)
                .options(joinedload(Product.category))
                .filter(
                    Product.stock <= threshold,
                    Product.is_active == True  # noqa: E712
                )
                .order_by(Product.stock.asc(), Product.name.asc())
                .all()
            )
