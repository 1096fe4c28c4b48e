"""Application configuration"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "SoniCart Notifications"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # database
    DATABASE_URL: str
    SQL_ECHO: bool = False
    DB_SSL_CA_PATH: Optional[str] = None

    # auth
    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Email
    RESEND_API_KEY: Optional[str] = None
    RESEND_FROM_EMAIL: str = "SoniCart <onboarding@resend.dev>"

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"
    STORE_NAME: str = "SoniCart"
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # notifications
    # 初回作成時にOFFにする通知カテゴリ（例: ["marketing_emails"]）
    NOTIFICATION_DEFAULTS_OFF: List[str] = Field(default_factory=list)
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    LOW_STOCK_DEFAULT_THRESHOLD: int = 10

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )


settings = Settings()
