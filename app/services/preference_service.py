"""
通知設定サービス
ユーザーごとの通知設定の取得・遅延作成・部分更新を担当
"""
import uuid
import logging
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ValidationFailedError
from app.models.notification_preference import NotificationPreference, PREFERENCE_FIELDS
from app.models.user import User
from app.services.db_errors import store_operation

logger = logging.getLogger(__name__)


def default_preference_values() -> Dict[str, bool]:
    """初期値（NOTIFICATION_DEFAULTS_OFF に含まれる項目以外はすべてON）"""
    disabled = set(settings.NOTIFICATION_DEFAULTS_OFF)
    return {field: field not in disabled for field in PREFERENCE_FIELDS}


class PreferenceService:
    """通知設定サービスクラス"""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, user_id: str) -> Optional[NotificationPreference]:
        return self.db.query(NotificationPreference).filter(
            NotificationPreference.user_id == user_id
        ).first()

    def _new_preference(self, user_id: str, **overrides: bool) -> NotificationPreference:
        values = default_preference_values()
        values.update(overrides)
        return NotificationPreference(id=str(uuid.uuid4()), user_id=user_id, **values)

    def get_or_create(self, user_id: str) -> NotificationPreference:
        """
        通知設定を取得（存在しなければ初期値で作成）

        同時作成でユニーク制約違反になった場合は、先に作成された設定を返す
        """
        with store_operation(self.db, "通知設定取得"):
            preference = self._find(user_id)
            if preference:
                return preference

            preference = self._new_preference(user_id)
            self.db.add(preference)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                existing = self._find(user_id)
                if existing is None:
                    raise
                logger.info(f"通知設定は既に作成済み: user={user_id}")
                return existing

            self.db.refresh(preference)
            logger.info(f"通知設定を初期値で作成: user={user_id}")
            return preference

    def update(self, user_id: str, **changes: Optional[bool]) -> NotificationPreference:
        """
        指定された項目だけを更新（UPSERT）

        Parameters:
            user_id: ユーザーID
            changes: 更新する項目（None の項目は変更しない）
        """
        unknown = set(changes) - set(PREFERENCE_FIELDS)
        if unknown:
            raise ValidationFailedError(f"不明な通知設定項目: {', '.join(sorted(unknown))}")

        updates = {key: value for key, value in changes.items() if value is not None}
        for key, value in updates.items():
            if not isinstance(value, bool):
                raise ValidationFailedError(f"{key} は真偽値で指定してください")

        with store_operation(self.db, "通知設定更新"):
            preference = self._find(user_id)
            if preference is None:
                preference = self._new_preference(user_id, **updates)
                self.db.add(preference)
                try:
                    self.db.commit()
                except IntegrityError:
                    # 同時作成された設定に対して更新を適用する
                    self.db.rollback()
                    preference = self._find(user_id)
                    if preference is None:
                        raise
                    for key, value in updates.items():
                        setattr(preference, key, value)
                    self.db.commit()
            else:
                for key, value in updates.items():
                    setattr(preference, key, value)
                self.db.commit()

            self.db.refresh(preference)

        logger.info(f"通知設定を更新: user={user_id}, fields={sorted(updates)}")
        return preference

    def backfill_missing(self) -> int:
        """
        通知設定を持たない全ユーザーに初期値の設定を作成

        Returns:
            作成した件数
        """
        with store_operation(self.db, "通知設定バックフィル"):
            users_without_preference = (
                self.db.query(User.id)
                .outerjoin(NotificationPreference, NotificationPreference.user_id == User.id)
                .filter(NotificationPreference.id.is_(None))
                .all()
            )

            for row in users_without_preference:
                self.db.add(self._new_preference(row.id))
            self.db.commit()

        created = len(users_without_preference)
        logger.info(f"通知設定バックフィル完了: {created}件作成")
        return created
