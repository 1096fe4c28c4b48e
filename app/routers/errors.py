"""
通知エンジンの例外 → HTTPレスポンス変換
"""
import logging

from fastapi import HTTPException, status

from app.exceptions import (
    DuplicateAlertError,
    NotFoundError,
    NotificationEngineError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)


def http_error(error: NotificationEngineError) -> HTTPException:
    """
    NotFound → 404、Duplicate / ValidationFailed → 400、それ以外 → 500
    """
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, (DuplicateAlertError, ValidationFailedError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))

    logger.error(f"サーバーエラー: {str(error)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="サーバーエラー"
    )
