"""
エンコーディング検出ユーティリティ
"""
from typing import List, Optional

import chardet

from ..error_handling.exceptions import EncodingDetectionError


class EncodingDetector:
    """バイト列のエンコーディングを推定するユーティリティクラス"""

    DEFAULT_ENCODINGS = ['cp932', 'utf-8', 'euc-jp']

    def __init__(self, logger=None):
        self.logger = logger

    def detect_encoding(self, raw_data: bytes, file_name: str = '') -> Optional[str]:
        """chardetでエンコーディングを推定（推定できなければNone）"""
        if not raw_data:
            return None

        result = chardet.detect(raw_data)
        if result.get('encoding'):
            detected_encoding = result['encoding'].lower()
            if self.logger:
                self.logger.info(
                    f"エンコーディング検出: {file_name} -> {detected_encoding} "
                    f"(信頼度: {result.get('confidence') or 0:.2f})"
                )
            return detected_encoding

        if self.logger:
            self.logger.warning(f"エンコーディング検出失敗: {file_name}")
        return None

    def try_encodings(self, raw_data: bytes, encodings: Optional[List[str]] = None, file_name: str = '') -> str:
        """複数のエンコーディングを順次試行して最初にデコードできたものを返す"""
        if encodings is None:
            encodings = self.DEFAULT_ENCODINGS

        for encoding in encodings:
            if self.validate_encoding(raw_data, encoding):
                if self.logger:
                    self.logger.info(f"エンコーディング試行成功: {file_name} -> {encoding}")
                return encoding

        raise EncodingDetectionError(f"すべてのエンコーディングで読み込みに失敗: {file_name}")

    def validate_encoding(self, raw_data: bytes, encoding: str) -> bool:
        """指定されたエンコーディングでデコード可能かチェック"""
        try:
            raw_data.decode(encoding)
            return True
        except (UnicodeDecodeError, LookupError):
            return False
