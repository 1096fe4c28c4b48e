"""
DB操作エラーの共通ハンドリング
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import DependencyUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def store_operation(db: Session, action: str):
    """
    SQLAlchemyErrorをロールバックしてDependencyUnavailableErrorに変換する

    使用例:
        with store_operation(self.db, "通知作成"):
            self.db.add(notification)
            self.db.commit()
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"DBエラー（{action}）: {str(e)}")
        raise DependencyUnavailableError(f"{action}に失敗しました") from e
