"""
統一エラーハンドリングシステム
"""
import logging
import traceback
from typing import Dict, Any, List, Optional

from .exceptions import SalesPipelineError


class ErrorHandler:
    """エラーハンドリングの統一クラス"""

    DEFAULT_USER_MESSAGE = 'ファイルの処理に失敗しました。ファイル形式を確認して再度お試しください。'

    def __init__(self, logger=None):
        self.logger = logger

    def _get_logger(self):
        # logger未指定時はモジュールロガーにフォールバック
        return self.logger if self.logger else logging.getLogger(__name__)

    def handle_file_processing_error(self, error: Exception, file_name: Optional[str]) -> None:
        """ファイル処理エラーを処理"""
        error_context = {
            'error_type': type(error).__name__,
            'file_name': file_name or 'Unknown',
            'error_message': str(error)
        }

        self.log_error_with_context(error, error_context)

    def handle_data_validation_error(self, error: Exception, data_context: str) -> None:
        """データ検証エラーを処理"""
        error_context = {
            'error_type': type(error).__name__,
            'data_context': data_context,
            'error_message': str(error)
        }

        self.log_error_with_context(error, error_context)

    def log_and_continue(self, error: Exception, context: str) -> None:
        """エラーをログ出力して処理を継続"""
        logger = self._get_logger()
        logger.error(f"処理継続エラー [{context}]: {str(error)}")
        logger.debug(f"エラー詳細: {traceback.format_exc()}")

    def log_and_raise(self, error: Exception, context: str) -> None:
        """エラーをログ出力して例外を再発生"""
        logger = self._get_logger()
        logger.error(f"致命的エラー [{context}]: {str(error)}")
        logger.debug(f"エラー詳細: {traceback.format_exc()}")

        raise error

    def log_error_with_context(self, error: Exception, context: Dict[str, Any]) -> None:
        """コンテキスト情報付きでエラーをログ出力"""
        logger = self._get_logger()
        context_str = ", ".join([f"{k}={v}" for k, v in context.items()])
        logger.error(f"エラー詳細: {context_str}")
        logger.debug(f"スタックトレース: {traceback.format_exc()}")

    def to_user_message(self, error: Exception) -> str:
        """例外を画面表示用のメッセージに変換"""
        if isinstance(error, SalesPipelineError) and str(error):
            return str(error)
        return self.DEFAULT_USER_MESSAGE

    def create_error_summary(self, errors: List[Exception]) -> Dict[str, Any]:
        """エラーリストから統計情報を作成"""
        if not errors:
            return {'total_errors': 0, 'error_types': {}}

        error_types = {}
        for error in errors:
            error_type = type(error).__name__
            error_types[error_type] = error_types.get(error_type, 0) + 1

        return {
            'total_errors': len(errors),
            'error_types': error_types,
            'first_error': str(errors[0]),
            'last_error': str(errors[-1])
        }
