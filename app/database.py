import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import QueuePool

from app.config import settings

DATABASE_URL = settings.DATABASE_URL


def _build_connect_args(url: str) -> dict:
    """DBごとの接続オプションを組み立てる"""
    if url.startswith("sqlite"):
        return {"check_same_thread": False}

    # MySQLで SSL CA が指定されていれば検証付きで接続
    if url.startswith("mysql"):
        ssl_ca_path = settings.DB_SSL_CA_PATH
        if ssl_ca_path and os.path.exists(ssl_ca_path):
            return {"ssl_ca": ssl_ca_path, "ssl_verify_cert": True}
        if "mysql.database.azure.com" in url:
            # Azure MySQLはSSL必須のため、システムのCA証明書を使用
            import certifi

            return {"ssl_ca": certifi.where(), "ssl_verify_cert": True}

    return {}


if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        echo=settings.SQL_ECHO,
        connect_args=_build_connect_args(DATABASE_URL),
    )
else:
    engine = create_engine(
        DATABASE_URL,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
        pool_pre_ping=True,
        echo=settings.SQL_ECHO,
        connect_args=_build_connect_args(DATABASE_URL),
    )

# セッションファクトリー
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Base Class for ORM models
class Base(DeclarativeBase):
    pass


# 依存性注入用のジェネレータ
def get_db():
    """
    FastAPIの依存性注入で使用するDBセッション

    使用例:
        from sqlalchemy.orm import Session
        from app.database import get_db

        @router.get("/notifications")
        def list_notifications(db: Session = Depends(get_db)):
            ...
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
