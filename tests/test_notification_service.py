"""
通知サービスのテスト（作成・メール送信判定・種別ごとの通知）
"""

import pytest

from app.exceptions import ProductNotFoundError, ValidationFailedError
from app.models.enums import NotificationType
from app.models.notification_preference import NotificationPreference
from app.models.user_notification import UserNotification
from app.services.notification_service import (
    NotificationService,
    PREFERENCE_FIELD_BY_TYPE,
    should_send_email,
)
from app.services.preference_service import PreferenceService

from conftest import FakeEmailSender


def make_preferences(**overrides):
    values = {
        "email_notifications": True,
        "push_notifications": True,
        "order_updates": True,
        "price_drops": True,
        "new_arrivals": True,
        "stock_alerts": True,
        "marketing_emails": True,
    }
    values.update(overrides)
    return NotificationPreference(**values)


class TestShouldSendEmail:
    """メール送信判定テスト"""

    def test_every_type_has_a_gating_entry(self):
        assert set(PREFERENCE_FIELD_BY_TYPE) == set(NotificationType)

    @pytest.mark.parametrize("notification_type,field", [
        (NotificationType.ORDER_UPDATE, "order_updates"),
        (NotificationType.PRICE_DROP_ALERT, "price_drops"),
        (NotificationType.NEW_ARRIVAL_ALERT, "new_arrivals"),
        (NotificationType.LOW_STOCK_ALERT, "stock_alerts"),
        (NotificationType.OUT_OF_STOCK_ALERT, "stock_alerts"),
        (NotificationType.BACK_IN_STOCK_ALERT, "stock_alerts"),
        (NotificationType.MARKETING_EMAIL, "marketing_emails"),
    ])
    def test_category_toggle_gates_email(self, notification_type, field):
        assert should_send_email(notification_type, make_preferences()) is True
        assert should_send_email(notification_type, make_preferences(**{field: False})) is False

    def test_master_switch_off_blocks_everything(self):
        preferences = make_preferences(email_notifications=False)
        for notification_type in NotificationType:
            assert should_send_email(notification_type, preferences) is False
        assert should_send_email("SOMETHING_NEW", preferences) is False

    def test_test_notification_only_needs_master_switch(self):
        preferences = make_preferences(order_updates=False, marketing_emails=False)
        assert should_send_email(NotificationType.TEST_NOTIFICATION, preferences) is True

    def test_unknown_type_falls_back_to_master_switch(self):
        """未知の種別はマスタースイッチのみで判定"""
        preferences = make_preferences(order_updates=False, stock_alerts=False)
        assert should_send_email("LOYALTY_POINTS", preferences) is True

    def test_string_values_are_accepted(self):
        assert should_send_email("PRICE_DROP_ALERT", make_preferences(price_drops=False)) is False


class TestCreateNotification:
    """通知作成テスト"""

    def test_creates_inbox_item_and_sends_email(self, db_session, test_user):
        sender = FakeEmailSender()
        service = NotificationService(db_session, email_sender=sender)

        notification = service.create_order_notification(
            test_user.id, "order-42", "shipped", "Your order is on its way."
        )

        assert notification.title == "Order Update - SHIPPED"
        assert notification.data == {"order_id": "order-42", "status": "shipped"}
        assert notification.is_read is False
        assert notification.is_emailed is True
        assert len(sender.sent) == 1
        assert sender.sent[0]["to"] == "test@example.com"
        assert sender.sent[0]["subject"] == "Order Update - SHIPPED"
        assert "Hello Aiko!" in sender.sent[0]["html"]

    def test_preference_is_created_lazily(self, db_session, test_user):
        NotificationService(db_session, email_sender=FakeEmailSender()).create_notification(
            test_user.id, NotificationType.TEST_NOTIFICATION, "Hi", "Hello"
        )
        assert db_session.query(NotificationPreference).filter(
            NotificationPreference.user_id == test_user.id
        ).count() == 1

    def test_disabled_category_skips_email(self, db_session, test_user):
        """stock_alerts がOFFならメールは送らない（アプリ内通知は作成）"""
        PreferenceService(db_session).update(test_user.id, stock_alerts=False)
        sender = FakeEmailSender()

        notification = NotificationService(db_session, email_sender=sender).create_notification(
            test_user.id, NotificationType.LOW_STOCK_ALERT, "Low Stock Alert: X", "Only 2 left"
        )

        assert notification.is_emailed is False
        assert sender.sent == []
        assert db_session.query(UserNotification).count() == 1

    def test_unknown_type_is_stored_and_emailed(self, db_session, test_user):
        sender = FakeEmailSender()
        notification = NotificationService(db_session, email_sender=sender).create_notification(
            test_user.id, "LOYALTY_POINTS", "Points", "You earned 10 points"
        )
        assert notification.type == "LOYALTY_POINTS"
        assert notification.is_emailed is True
        assert len(sender.sent) == 1

    def test_rejected_email_keeps_flag_false(self, db_session, test_user):
        """送信失敗でも通知は残り、is_emailed は False のまま"""
        sender = FakeEmailSender(succeed=False)
        notification = NotificationService(db_session, email_sender=sender).create_notification(
            test_user.id, NotificationType.MARKETING_EMAIL, "Sale", "Everything 20% off"
        )

        db_session.expire_all()
        stored = db_session.query(UserNotification).filter(UserNotification.id == notification.id).one()
        assert stored.is_emailed is False
        assert len(sender.sent) == 1

    def test_transport_exception_is_absorbed(self, db_session, test_user):
        sender = FakeEmailSender(raise_error=True)
        notification = NotificationService(db_session, email_sender=sender).create_notification(
            test_user.id, NotificationType.ORDER_UPDATE, "Order Update - PAID", "Thanks"
        )
        assert notification.is_emailed is False


class TestTypedNotifications:
    """種別ごとの通知作成テスト"""

    def test_price_drop(self, db_session, test_user, test_product):
        notification = NotificationService(db_session, email_sender=FakeEmailSender()).create_price_drop_notification(
            test_user.id, test_product.id, 100.0, 75.0
        )

        assert notification.type == NotificationType.PRICE_DROP_ALERT.value
        assert notification.title == "Price Drop Alert: Wireless Headphones"
        assert "$100.00 to $75.00 (25.0% off)" in notification.message
        assert notification.data["discount"] == "25.0"
        assert notification.data["product_id"] == test_product.id

    def test_price_drop_requires_lower_price(self, db_session, test_user, test_product):
        service = NotificationService(db_session, email_sender=FakeEmailSender())
        with pytest.raises(ValidationFailedError):
            service.create_price_drop_notification(test_user.id, test_product.id, 50.0, 60.0)
        with pytest.raises(ValidationFailedError):
            service.create_price_drop_notification(test_user.id, test_product.id, 0, 0)

    def test_price_drop_unknown_product(self, db_session, test_user):
        service = NotificationService(db_session, email_sender=FakeEmailSender())
        with pytest.raises(ProductNotFoundError):
            service.create_price_drop_notification(test_user.id, "missing", 10.0, 5.0)
        assert db_session.query(UserNotification).count() == 0

    def test_new_arrival_includes_category(self, db_session, test_user, test_product):
        notification = NotificationService(db_session, email_sender=FakeEmailSender()).create_new_arrival_notification(
            test_user.id, test_product.id
        )
        assert notification.title == "New Arrival: Wireless Headphones"
        assert "Headphones" in notification.message
        assert notification.data["category_name"] == "Headphones"

    def test_stock_notification_title(self, db_session, test_user, test_product):
        notification = NotificationService(db_session, email_sender=FakeEmailSender()).create_stock_notification(
            test_user.id, test_product.id, NotificationType.BACK_IN_STOCK_ALERT, "Back!"
        )
        assert notification.title == "Back in Stock: Wireless Headphones"
        assert notification.data["product_name"] == "Wireless Headphones"

    def test_stock_notification_unknown_type_uses_generic_title(self, db_session, test_user, test_product):
        notification = NotificationService(db_session, email_sender=FakeEmailSender()).create_stock_notification(
            test_user.id, test_product.id, "RESTOCK_SCHEDULED", "Coming soon"
        )
        assert notification.title == "Stock Update"
