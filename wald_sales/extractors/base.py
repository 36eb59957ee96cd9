"""
カテゴリ抽出処理の基底クラス
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..constants import ColumnLayout, FileType
from ..data_models import WaldData

FULL_DATE_PATTERN = re.compile(r'\d{4}/(\d{1,2})/(\d{1,2})')
PARTIAL_DATE_PATTERN = re.compile(r'(\d{1,2})/(\d{1,2})')


def day_label(day: int) -> str:
    return f"{int(day)}日"


def extract_day(value: str, allow_partial: bool = True) -> Optional[str]:
    """"2024/5/3" や "5/3" から日付ラベル（"3日"）を取り出す"""
    match = FULL_DATE_PATTERN.search(value)
    if match:
        return day_label(match.group(2))
    if allow_partial:
        match = PARTIAL_DATE_PATTERN.search(value)
        if match:
            return day_label(match.group(2))
    return None


class CategoryExtractor(ABC):
    """データ行（ヘッダー除去済み）から WaldData の断片を作る基底クラス"""

    file_type: FileType = FileType.UNKNOWN
    layout: ColumnLayout

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    def extract(self, rows: Sequence[Sequence[str]], file_name: str) -> WaldData:
        """データ行を変換する（サブクラスで実装）"""
        pass

    def cell(self, row: Sequence[str], field_name: str) -> Optional[str]:
        """列定義に従ってセル値を取得（列が足りなければ None）"""
        index = self.layout.index(field_name)
        if index < len(row):
            return row[index]
        return None

    def text(self, row: Sequence[str], field_name: str) -> str:
        return (self.cell(row, field_name) or '').strip()

    def has_min_fields(self, row: Sequence[str]) -> bool:
        return bool(row) and len(row) >= self.layout.min_fields

    def log_skipped(self, skipped: int, total: int) -> None:
        if skipped:
            self.logger.debug(f"{self.layout.name}: {total}行中{skipped}行をスキップしました")

    @staticmethod
    def as_rows(rows: Sequence[Sequence[str]]) -> List[List[str]]:
        return [list(row) for row in rows if row is not None]
