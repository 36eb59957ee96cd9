"""
ファイル名からのメタデータ（対象年月・店舗コード）抽出
"""
import logging
import re
import unicodedata
from datetime import date
from typing import Callable, List, Optional

from .constants import FileNameConstants
from .data_models import format_month_label
from .error_handling.exceptions import DataValidationError
from .messages import MessageTemplates


def _month_from_year_month(file_name: str) -> Optional[str]:
    match = re.search(FileNameConstants.YEAR_MONTH_PATTERN, file_name)
    if match:
        return format_month_label(match.group(1), match.group(2))
    return None


def _month_from_year_month_day(file_name: str) -> Optional[str]:
    match = re.search(FileNameConstants.YEAR_MONTH_DAY_PATTERN, file_name)
    if match:
        return format_month_label(match.group(1), match.group(2))
    return None


def _month_from_transaction_date(file_name: str) -> Optional[str]:
    match = re.search(FileNameConstants.TRANSACTION_DATE_PATTERN, unicodedata.normalize('NFKC', file_name))
    if match:
        yyyymmdd = match.group(1)
        return format_month_label(yyyymmdd[:4], yyyymmdd[4:6])
    return None


MONTH_RULES: List[Callable[[str], Optional[str]]] = [
    _month_from_year_month,
    _month_from_year_month_day,
    _month_from_transaction_date,
]


class MetadataExtractor:
    """ファイル名から年月・店舗コードを取り出すクラス"""

    def __init__(self, month_fallback: str = 'current', today: Optional[Callable[[], date]] = None, logger=None):
        self.month_fallback = month_fallback
        self.today = today or date.today
        self.logger = logger or logging.getLogger(__name__)

    def extract_month(self, file_name: str) -> str:
        """対象年月（YYYY年M月）を抽出

        どのパターンにも一致しない場合は当月を返す（month_fallback="error" なら例外）。
        """
        for rule in MONTH_RULES:
            month = rule(file_name)
            if month:
                return month

        if self.month_fallback == 'error':
            raise DataValidationError(MessageTemplates.format('month_not_found', file_name=file_name))

        today = self.today()
        month = format_month_label(today.year, today.month)
        self.logger.warning(MessageTemplates.format('month_fallback', file_name=file_name, month=month))
        return month

    def extract_store_code(self, file_name: str, selected_store_code: Optional[str] = None) -> Optional[str]:
        """店舗コードを抽出（明示指定があればそれを優先）"""
        if selected_store_code:
            return selected_store_code

        for pattern in FileNameConstants.STORE_CODE_PATTERNS:
            match = re.match(pattern, file_name)
            if match and match.group(1):
                return match.group(1).upper()

        return None
