"""
通知エンジンの例外定義
"""


class NotificationEngineError(Exception):
    """通知エンジン共通の基底例外"""

    pass


class NotFoundError(NotificationEngineError):
    """対象レコードが存在しない、または呼び出しユーザーの所有ではない"""

    pass


class ProductNotFoundError(NotFoundError):
    """商品が存在しない"""

    pass


class DuplicateAlertError(NotificationEngineError):
    """同じ (ユーザー, 商品, 種別) の有効なアラートが既に存在する"""

    pass


class ValidationFailedError(NotificationEngineError):
    """引数が契約の範囲外"""

    pass


class DependencyUnavailableError(NotificationEngineError):
    """DBなど外部依存が利用できない"""

    pass
