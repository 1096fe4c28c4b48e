"""
テスト用の共通設定・フィクスチャ
"""

import os
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# テスト用の環境変数を設定（app.mainをインポートする前に設定）
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("RESEND_API_KEY", "")

from app.main import app
from app.auth import create_access_token
from app.database import get_db, Base
from app.models.category import Category
from app.models.enums import UserRole
from app.models.product import Product
from app.models.user import User
from app.services.email_service import get_email_service


# テスト用のインメモリSQLiteデータベース
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

BASE_TIME = datetime(2026, 1, 1, 9, 0, 0)


class FakeEmailSender:
    """送信内容を記録するメール送信のテストダブル"""

    def __init__(self, succeed: bool = True, raise_error: bool = False):
        self.succeed = succeed
        self.raise_error = raise_error
        self.sent = []

    def send_email(self, to, subject, html_content, text_content=None):
        self.sent.append({"to": to, "subject": subject, "html": html_content})
        if self.raise_error:
            raise RuntimeError("mail transport down")
        if not self.succeed:
            return {"success": False, "error": "rejected"}
        return {"success": True, "id": f"email-{len(self.sent)}"}


def override_get_db():
    """テスト用のDBセッションを提供"""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def db_session():
    """各テスト用のDBセッション"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture(scope="function")
def client(db_session, email_sender):
    """テスト用のAPIクライアント"""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_sender

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_user(db, user_id, email, role=UserRole.CUSTOMER, first_name=None, offset=0):
    """ユーザーを作成（created_at は BASE_TIME からの秒数で固定）"""
    user = User(
        id=user_id,
        email=email,
        first_name=first_name,
        role=role.value,
        created_at=BASE_TIME + timedelta(seconds=offset),
        updated_at=BASE_TIME + timedelta(seconds=offset),
    )
    db.add(user)
    db.commit()
    return user


def make_product(db, product_id, name, price=100.0, stock=20, category=None, is_active=True):
    product = Product(
        id=product_id,
        name=name,
        price=price,
        stock=stock,
        images=[f"https://cdn.example.com/{product_id}.jpg"],
        is_active=is_active,
        category_id=category.id if category else None,
    )
    db.add(product)
    db.commit()
    return product


@pytest.fixture
def test_user(db_session):
    """テスト用ユーザーを作成"""
    return make_user(db_session, "user-1", "test@example.com", first_name="Aiko")


@pytest.fixture
def other_user(db_session):
    return make_user(db_session, "user-2", "other@example.com", offset=1)


@pytest.fixture
def admin_user(db_session):
    return make_user(db_session, "admin-1", "admin@example.com", role=UserRole.ADMIN, offset=2)


@pytest.fixture
def category(db_session):
    category = Category(id="cat-1", name="Headphones", slug="headphones")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture
def test_product(db_session, category):
    """テスト用商品を作成"""
    return make_product(db_session, "prod-1", "Wireless Headphones", price=100.0, stock=20, category=category)


def headers_for(user):
    token = create_access_token({"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user):
    """認証ヘッダーを取得"""
    return headers_for(test_user)


@pytest.fixture
def admin_headers(admin_user):
    return headers_for(admin_user)
