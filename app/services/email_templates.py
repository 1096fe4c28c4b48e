"""
通知メールのHTMLテンプレート
副作用なしの純粋関数のみ
"""
from html import escape
from typing import Optional

from app.config import settings


def display_name_for(first_name: Optional[str], email: str) -> str:
    """メール宛名（名がなければメールアドレスのローカル部）"""
    if first_name:
        return first_name
    return email.split("@")[0]


def render_notification_email(
    title: str,
    message: str,
    recipient_name: str,
    frontend_url: Optional[str] = None,
    store_name: Optional[str] = None,
) -> str:
    """
    通知メールのHTMLを生成

    Args:
        title: 件名と同じタイトル
        message: 本文
        recipient_name: 宛名
        frontend_url: 「サイトへ」ボタンのリンク先（省略時は設定値）
        store_name: ストア名（省略時は設定値）

    Returns:
        HTMLドキュメント文字列
    """
    url = frontend_url or settings.FRONTEND_URL
    store = store_name or settings.STORE_NAME

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="background: #3b82f6; color: white; padding: 20px; text-align: center;">
            <h1 style="margin: 0;">{escape(store)}</h1>
        </div>
        <div style="padding: 20px; background: #f9fafb;">
            <h2>Hello {escape(recipient_name)}!</h2>
            <p>{escape(message)}</p>
            <p style="margin-top: 30px;">
                <a href="{escape(url, quote=True)}"
                   style="display: inline-block; padding: 12px 24px; background: #3b82f6; color: white; text-decoration: none; border-radius: 6px;">
                    Visit {escape(store)}
                </a>
            </p>
        </div>
        <div style="text-align: center; padding: 20px; color: #6b7280; font-size: 14px;">
            <p>This email was sent from {escape(store)}. You can manage your notification preferences in your account settings.</p>
        </div>
    </div>
</body>
</html>
"""
