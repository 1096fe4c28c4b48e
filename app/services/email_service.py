"""
メール送信サービス
Resend APIを使用してメールを送信する
"""
import logging
from typing import Optional
import resend

from app.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """メール送信サービスクラス"""

    def __init__(self, api_key: Optional[str] = None, from_email: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.from_email = from_email or settings.RESEND_FROM_EMAIL

        if not self.api_key:
            logger.warning("RESEND_API_KEY が設定されていません（メール送信は無効）")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def send_email(
        self,
        to: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> dict:
        """
        メールを送信する

        Returns:
            成功時 {"success": True, "id": ...}、失敗時 {"success": False, "error": ...}
        """
        if not self.is_configured:
            logger.warning(f"メール送信スキップ（未設定）: to={to}, subject={subject}")
            return {"success": False, "error": "RESEND_API_KEY is not configured"}

        try:
            resend.api_key = self.api_key
            params: resend.Emails.SendParams = {
                "from": self.from_email,
                "to": [to],
                "subject": subject,
                "html": html_content,
            }

            if text_content:
                params["text"] = text_content

            response = resend.Emails.send(params)

            logger.info(f"メール送信成功: to={to}, subject={subject}")
            return {"success": True, "id": response.get("id")}

        except Exception as e:
            logger.error(f"メール送信エラー: to={to}, error={str(e)}")
            return {"success": False, "error": str(e)}


# シングルトンインスタンス
email_service = EmailService()


def get_email_service() -> EmailService:
    """FastAPIの依存性注入で使用するメール送信サービス"""
    return email_service
