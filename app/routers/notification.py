"""
通知関連のAPIエンドポイント
通知一覧、既読化、未読数、削除、通知設定、テスト通知
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth import get_current_user
from app.config import settings
from app.database import get_db
from app.exceptions import NotificationEngineError
from app.models.enums import NotificationType
from app.models.user import User
from app.routers.errors import http_error
from app.schemas.base import MessageResponse
from app.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    SendTestNotificationRequest,
    UnreadCountResponse,
)
from app.schemas.preference import (
    NotificationPreferenceResponse,
    NotificationPreferenceUpdate,
)
from app.services.email_service import EmailService, get_email_service
from app.services.inbox_service import InboxService
from app.services.notification_service import NotificationService
from app.services.preference_service import PreferenceService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    page: int = Query(1, ge=1, description="ページ番号"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="1ページあたりの件数"),
    unread_only: bool = Query(False, description="未読のみ"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    通知一覧を新しい順に取得
    """
    try:
        items, pagination = InboxService(db).list_notifications(
            current_user.id, page=page, limit=limit, unread_only=unread_only
        )
    except NotificationEngineError as e:
        raise http_error(e)

    return NotificationListResponse(
        data=[NotificationResponse.model_validate(item) for item in items],
        pagination=pagination,
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """未読数を取得"""
    try:
        count = InboxService(db).unread_count(current_user.id)
    except NotificationEngineError as e:
        raise http_error(e)
    return UnreadCountResponse(count=count)


@router.patch("/read-all", response_model=MarkAllReadResponse)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """未読通知をすべて既読にする"""
    try:
        updated = InboxService(db).mark_all_read(current_user.id)
    except NotificationEngineError as e:
        raise http_error(e)
    return MarkAllReadResponse(message="すべての通知を既読にしました", updated=updated)


@router.get("/preferences", response_model=NotificationPreferenceResponse)
def get_preferences(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    通知設定を取得（未作成なら初期値で作成）
    """
    try:
        preference = PreferenceService(db).get_or_create(current_user.id)
    except NotificationEngineError as e:
        raise http_error(e)
    return NotificationPreferenceResponse.model_validate(preference)


@router.put("/preferences", response_model=NotificationPreferenceResponse)
def update_preferences(
    request: NotificationPreferenceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    通知設定を更新

    指定した項目のみ変更し、省略した項目はそのまま
    """
    try:
        preference = PreferenceService(db).update(
            current_user.id, **request.model_dump(exclude_unset=True)
        )
    except NotificationEngineError as e:
        raise http_error(e)
    return NotificationPreferenceResponse.model_validate(preference)


@router.post("/test", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
def send_test_notification(
    request: SendTestNotificationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    email_sender: EmailService = Depends(get_email_service)
):
    """
    テスト通知を作成

    メール通知がONであればテストメールも送信されます
    """
    try:
        notification = NotificationService(db, email_sender=email_sender).create_notification(
            current_user.id,
            NotificationType.TEST_NOTIFICATION,
            request.title,
            request.message,
        )
    except NotificationEngineError as e:
        raise http_error(e)
    return NotificationResponse.model_validate(notification)


@router.patch("/{notification_id}/read", response_model=MessageResponse)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """通知を既読にする"""
    try:
        InboxService(db).mark_read(current_user.id, notification_id)
    except NotificationEngineError as e:
        raise http_error(e)
    return MessageResponse(message="通知を既読にしました")


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """通知を削除"""
    try:
        InboxService(db).delete(current_user.id, notification_id)
    except NotificationEngineError as e:
        raise http_error(e)
    return MessageResponse(message="通知を削除しました")
