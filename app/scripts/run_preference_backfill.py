"""
通知設定バックフィル実行スクリプト
通知設定を持たないユーザーに初期値の設定を作成し、一括配信の対象に含める

使い方:
    python -m app.scripts.run_preference_backfill
"""
import sys
import logging
from datetime import datetime

from dotenv import load_dotenv
load_dotenv()

from app.database import SessionLocal
from app.exceptions import NotificationEngineError
from app.services.preference_service import PreferenceService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_preference_backfill() -> int:
    """バックフィルを実行して作成件数を返す"""
    db = SessionLocal()
    try:
        return PreferenceService(db).backfill_missing()
    finally:
        db.close()


def main():
    """メイン処理"""
    print("=" * 60)
    print("🚀 通知設定バックフィル")
    print(f"   実行日時: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 60)

    try:
        created = run_preference_backfill()
        print(f"\n📊 作成件数: {created}")
        print("\n✅ バックフィルが完了しました")
        return 0

    except NotificationEngineError as e:
        logger.exception(f"バックフィル失敗: {str(e)}")
        print(f"\n❌ エラーが発生しました: {str(e)}")
        return 1


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
