"""
統一ロギングシステム
"""
import logging
from pathlib import Path
from typing import Dict, Any, Optional


class UnifiedLogger:
    """統一ロギングシステムクラス"""

    SECRET_KEYWORDS = ['password', 'secret', 'key', 'token']

    def __init__(self, name: str = __name__, level: str = "INFO", log_file: Optional[Path] = None):
        self.logger = self.setup_logger(name, level, log_file)

    def setup_logger(self, name: str, level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
        """ロガーをセットアップ"""
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        # 既存のハンドラーをクリア
        logger.handlers.clear()

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        return logger

    def log_file_operation(self, operation: str, file_name: str, success: bool) -> None:
        """ファイル操作のログ出力"""
        status = "成功" if success else "失敗"
        message = f"ファイル操作 [{operation}] {status}: {Path(file_name).name}"

        if success:
            self.logger.info(message)
        else:
            self.logger.error(message)

    def log_processing_progress(self, current: int, total: int, item: str) -> None:
        """処理進捗のログ出力"""
        percentage = (current / total) * 100 if total > 0 else 0
        message = f"処理進捗: {current}/{total} ({percentage:.1f}%) - {item}"
        self.logger.info(message)

    def log_processing_summary(self, processed_count: int, success_count: int, error_count: int,
                               duration_seconds: float) -> None:
        """処理結果サマリーのログ出力"""
        success_rate = (success_count / processed_count) * 100 if processed_count > 0 else 0

        self.logger.info("=" * 50)
        self.logger.info("取り込み結果サマリー")
        self.logger.info(f"処理対象数: {processed_count}")
        self.logger.info(f"成功数: {success_count}")
        self.logger.info(f"エラー数: {error_count}")
        self.logger.info(f"成功率: {success_rate:.1f}%")
        self.logger.info(f"処理時間: {duration_seconds:.2f}秒")
        self.logger.info("=" * 50)

    def log_configuration_info(self, config: Dict[str, Any]) -> None:
        """設定情報のログ出力"""
        self.logger.info("設定情報:")
        for key, value in config.items():
            # パスワードやAPIキーをマスク
            if any(secret in key.lower() for secret in self.SECRET_KEYWORDS):
                value = '*' * len(str(value)) if value else 'None'
            self.logger.info(f"  {key}: {value}")

    def log_upload_result(self, file_name: str, month: str, store_name: str, categories) -> None:
        """取り込み結果のログ出力"""
        self.logger.info(
            f"取り込み完了: {file_name} -> {month} / {store_name} "
            f"(カテゴリ: {', '.join(categories) if categories else 'なし'})"
        )

    def log_category_totals(self, label: str, total_sales: float, total_guests: int) -> None:
        """カテゴリ別合計のログ出力"""
        self.logger.info(f"[{label}] 売上: ¥{total_sales:,.0f} / 客数: {total_guests}人")

    # 既存のロガーメソッドのプロキシ
    def info(self, message: str) -> None:
        """情報レベルのログ出力"""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """警告レベルのログ出力"""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """エラーレベルのログ出力"""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """デバッグレベルのログ出力"""
        self.logger.debug(message)
