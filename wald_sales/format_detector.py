"""
CSV形式判定モジュール
ファイル名 -> ヘッダー内容 -> 外部分類器（AI）の順に判定し、最初に決まった形式を採用する
"""
import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .constants import FileType, FileNameConstants, ContentConstants

Rule = Callable[..., Optional[FileType]]


# --- ファイル名による判定ルール（判定できなければ None） ---

def _daily_sales_by_name(file_name: str) -> Optional[FileType]:
    if re.match(FileNameConstants.DAILY_SALES_PATTERN, file_name):
        return FileType.DAILY_SALES
    return None


def _party_by_name(file_name: str) -> Optional[FileType]:
    has_room_marker = any(marker in file_name for marker, _ in FileNameConstants.ROOM_MARKERS)
    if (FileNameConstants.TRANSACTION_MARKER in file_name and has_room_marker
            and file_name.lower().endswith(FileNameConstants.CSV_EXTENSION)):
        return FileType.PARTY
    return None


def _product_sales_by_name(file_name: str) -> Optional[FileType]:
    if re.search(FileNameConstants.PRODUCT_SALES_PATTERN, unicodedata.normalize('NFKC', file_name)):
        return FileType.PRODUCT_SALES_BY_TAX_RATE
    return None


FILENAME_RULES: List[Rule] = [
    _daily_sales_by_name,
    _party_by_name,
    _product_sales_by_name,
]


# --- ヘッダー内容による判定ルール ---

def _daily_sales_by_header(header: List[str]) -> Optional[FileType]:
    if all(label in header for label in ContentConstants.DAILY_SALES_HEADERS):
        return FileType.DAILY_SALES
    return None


def _party_by_header(header: List[str]) -> Optional[FileType]:
    if all(any(keyword in h for h in header) for keyword in ContentConstants.PARTY_HEADER_KEYWORDS):
        return FileType.PARTY
    return None


def _product_sales_by_header(header: List[str]) -> Optional[FileType]:
    if all(any(keyword in h for h in header) for keyword in ContentConstants.PRODUCT_HEADER_KEYWORDS):
        return FileType.PRODUCT_SALES_BY_TAX_RATE
    if len(header) >= ContentConstants.PRODUCT_MIN_COLUMNS:
        return FileType.PRODUCT_SALES_BY_TAX_RATE
    return None


CONTENT_RULES: List[Rule] = [
    _daily_sales_by_header,
    _party_by_header,
    _product_sales_by_header,
]


@dataclass
class DetectionResult:
    """形式判定の結果と判定方法"""
    file_type: FileType
    method: Optional[str] = None

    @property
    def is_known(self) -> bool:
        return self.file_type is not FileType.UNKNOWN


class FormatDetector:
    """アップロードCSVの形式判定クラス"""

    METHOD_FILENAME = 'filename'
    METHOD_CONTENT = 'content'
    METHOD_CLASSIFIER = 'classifier'

    def __init__(self, classifier=None, logger=None):
        self.classifier = classifier
        self.logger = logger or logging.getLogger(__name__)

    def detect_by_filename(self, file_name: str) -> FileType:
        """ファイル名から形式を判定"""
        return self._first_match(FILENAME_RULES, file_name)

    def detect_by_content(self, rows: Sequence[Sequence[str]]) -> FileType:
        """ヘッダー行の内容から形式を判定"""
        if not rows or len(rows) < 2:
            return FileType.UNKNOWN
        header = [str(cell).strip() for cell in rows[0]]
        return self._first_match(CONTENT_RULES, header)

    def detect_by_classifier(self, rows: Sequence[Sequence[str]]) -> FileType:
        """外部分類器で形式を推定（失敗時は UNKNOWN）"""
        if self.classifier is None or not rows:
            return FileType.UNKNOWN

        sample = [list(row) for row in rows[:ContentConstants.AI_SAMPLE_ROWS]]
        try:
            file_type = self.classifier.classify(sample)
        except Exception as e:
            # 分類器の失敗は形式不明として扱い、パイプラインは止めない
            self.logger.warning(f"AI形式判定に失敗しました: {str(e)}")
            return FileType.UNKNOWN

        return file_type if isinstance(file_type, FileType) else FileType.UNKNOWN

    def detect(self, file_name: str, rows: Optional[Sequence[Sequence[str]]] = None) -> DetectionResult:
        """ファイル名 -> 内容 -> 分類器の順で形式を判定"""
        file_type = self.detect_by_filename(file_name)
        if file_type is not FileType.UNKNOWN:
            return DetectionResult(file_type, self.METHOD_FILENAME)

        if rows is None:
            return DetectionResult(FileType.UNKNOWN)

        file_type = self.detect_by_content(rows)
        if file_type is not FileType.UNKNOWN:
            return DetectionResult(file_type, self.METHOD_CONTENT)

        file_type = self.detect_by_classifier(rows)
        if file_type is not FileType.UNKNOWN:
            return DetectionResult(file_type, self.METHOD_CLASSIFIER)

        return DetectionResult(FileType.UNKNOWN)

    @staticmethod
    def _first_match(rules: List[Rule], subject) -> FileType:
        for rule in rules:
            file_type = rule(subject)
            if file_type is not None:
                return file_type
        return FileType.UNKNOWN
