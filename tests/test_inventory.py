"""
在庫アラート・在庫通知APIのテスト
"""

from app.services.inventory_alert_service import InventoryAlertService
from app.services.notification_service import NotificationService

from conftest import FakeEmailSender, headers_for, make_product


class TestInventoryAlertAPI:
    """在庫アラートAPIテスト"""

    def test_create_alert_unauthorized(self, client, test_product):
        response = client.post(
            "/api/inventory/alerts",
            json={"product_id": test_product.id, "type": "LOW_STOCK", "threshold": 5}
        )
        assert response.status_code == 401

    def test_create_and_list(self, client, auth_headers, test_product):
        response = client.post(
            "/api/inventory/alerts",
            headers=auth_headers,
            json={"product_id": test_product.id, "type": "LOW_STOCK", "threshold": 5}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["alert_type"] == "LOW_STOCK"
        assert body["data"]["product"]["name"] == "Wireless Headphones"

        listed = client.get("/api/inventory/alerts", headers=auth_headers).json()["data"]
        assert len(listed) == 1
        assert listed[0]["product"]["stock"] == 20

    def test_duplicate_alert(self, client, auth_headers, test_product):
        payload = {"product_id": test_product.id, "type": "BACK_IN_STOCK"}
        assert client.post("/api/inventory/alerts", headers=auth_headers, json=payload).status_code == 201

        response = client.post("/api/inventory/alerts", headers=auth_headers, json=payload)
        assert response.status_code == 400

    def test_unknown_product(self, client, auth_headers, db_session):
        response = client.post(
            "/api/inventory/alerts",
            headers=auth_headers,
            json={"product_id": "missing", "type": "OUT_OF_STOCK"}
        )
        assert response.status_code == 404

    def test_low_stock_without_threshold(self, client, auth_headers, test_product):
        """閾値なしの LOW_STOCK は発火しないため400"""
        response = client.post(
            "/api/inventory/alerts",
            headers=auth_headers,
            json={"product_id": test_product.id, "type": "LOW_STOCK"}
        )
        assert response.status_code == 400
        assert client.get("/api/inventory/alerts", headers=auth_headers).json()["data"] == []

    def test_invalid_type(self, client, auth_headers, test_product):
        response = client.post(
            "/api/inventory/alerts",
            headers=auth_headers,
            json={"product_id": test_product.id, "type": "PRICE_CHANGE"}
        )
        assert response.status_code == 422

    def test_delete_alert(self, client, auth_headers, test_product):
        created = client.post(
            "/api/inventory/alerts",
            headers=auth_headers,
            json={"product_id": test_product.id, "type": "OUT_OF_STOCK"}
        ).json()["data"]

        assert client.delete(f"/api/inventory/alerts/{created['id']}", headers=auth_headers).status_code == 200
        assert client.delete(f"/api/inventory/alerts/{created['id']}", headers=auth_headers).status_code == 404
        assert client.get("/api/inventory/alerts", headers=auth_headers).json()["data"] == []


class TestStockNotificationAPI:
    """在庫通知APIテスト"""

    def fire(self, db_session, user, product):
        service = InventoryAlertService(
            db_session, notification_service=NotificationService(db_session, email_sender=FakeEmailSender())
        )
        service.subscribe(user.id, product.id, "OUT_OF_STOCK")
        return service.process_stock_change(product.id, 5, 0)

    def test_list_and_read(self, client, db_session, test_user, auth_headers, test_product):
        fired = self.fire(db_session, test_user, test_product)
        notification_id = fired[0].id

        data = client.get("/api/inventory/notifications", headers=auth_headers).json()
        assert data["pagination"]["total_notifications"] == 1
        assert data["data"][0]["type"] == "OUT_OF_STOCK_ALERT"
        assert data["data"][0]["product"]["name"] == "Wireless Headphones"

        assert client.get("/api/inventory/notifications/unread-count", headers=auth_headers).json()["count"] == 1
        response = client.patch(f"/api/inventory/notifications/{notification_id}/read", headers=auth_headers)
        assert response.status_code == 200
        assert client.get("/api/inventory/notifications/unread-count", headers=auth_headers).json()["count"] == 0

    def test_read_all_and_delete(self, client, db_session, test_user, auth_headers, test_product):
        fired = self.fire(db_session, test_user, test_product)
        notification_id = fired[0].id

        assert client.patch("/api/inventory/notifications/read-all", headers=auth_headers).json()["updated"] == 1
        assert client.delete(f"/api/inventory/notifications/{notification_id}", headers=auth_headers).status_code == 200
        assert client.get("/api/inventory/notifications", headers=auth_headers).json()["data"] == []

    def test_other_user_cannot_touch(self, client, db_session, test_user, other_user, test_product):
        fired = self.fire(db_session, test_user, test_product)
        response = client.delete(
            f"/api/inventory/notifications/{fired[0].id}", headers=headers_for(other_user)
        )
        assert response.status_code == 404


class TestLowStockAPI:
    """管理者向け在庫少商品APIテスト"""

    def test_requires_admin(self, client, auth_headers):
        assert client.get("/api/inventory/low-stock", headers=auth_headers).status_code == 403

    def test_low_stock(self, client, db_session, admin_headers, category):
        make_product(db_session, "p-a", "Cable", stock=2, category=category)
        make_product(db_session, "p-b", "Amp", stock=40)

        response = client.get("/api/inventory/low-stock?threshold=5", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["threshold"] == 5
        assert [p["name"] for p in body["data"]] == ["Cable"]
        assert body["data"][0]["category"]["name"] == "Headphones"

    def test_default_threshold(self, client, admin_headers):
        response = client.get("/api/inventory/low-stock", headers=admin_headers)
        assert response.json()["threshold"] == 10
