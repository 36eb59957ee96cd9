"""
統一CSVハンドラー
第1エンコーディングで構造エラーが出た場合は第2エンコーディングで全体を再解析する
"""
import csv
import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from ..messages import MessageTemplates
from ..utils.encoding_detector import EncodingDetector
from ..error_handling.exceptions import FileProcessingError, EncodingDetectionError, EmptyFileError

Row = List[str]


@dataclass
class ParseAttempt:
    """1エンコーディングでの解析結果"""
    encoding: str
    rows: List[Row] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


@dataclass
class ParsedCsv:
    """解析済みCSV（先頭行はヘッダー）"""
    file_name: str
    encoding: str
    rows: List[Row]

    @property
    def header(self) -> Row:
        return [cell.strip() for cell in self.rows[0]] if self.rows else []

    @property
    def data_rows(self) -> List[Row]:
        """ヘッダーを除いたデータ行"""
        return self.rows[1:]


class CSVHandler:
    """CSVファイルの統一処理クラス"""

    DEFAULT_ENCODINGS = ['cp932', 'utf-8']

    def __init__(self, logger=None, error_handler=None, encodings: Optional[Sequence[str]] = None):
        self.logger = logger
        self.error_handler = error_handler
        self.encodings = list(encodings or self.DEFAULT_ENCODINGS)
        self.encoding_detector = EncodingDetector(logger)

    def read_file(self, file_path: Path) -> ParsedCsv:
        """ファイルを読み込んで解析"""
        file_path = Path(file_path)
        try:
            raw_data = file_path.read_bytes()
        except OSError as e:
            raise FileProcessingError(
                MessageTemplates.format('file_read_failed', file_name=file_path.name, error=str(e))
            )
        return self.parse_bytes(raw_data, file_path.name)

    def parse_bytes(self, raw_data: bytes, file_name: str) -> ParsedCsv:
        """バイト列を行リストに解析（エンコーディングのフォールバック付き）"""
        first_encoding, second_encoding = self.encodings[0], self.encodings[-1]

        attempt = self._parse_with_encoding(raw_data, first_encoding)
        if attempt.has_errors:
            if self.logger:
                self.logger.info(MessageTemplates.format(
                    'encoding_retry', first=first_encoding, second=second_encoding, file_name=file_name
                ))
                self.logger.debug(f"解析エラー詳細 ({first_encoding}): {attempt.errors}")

            attempt = self._parse_with_encoding(raw_data, second_encoding)
            if attempt.has_errors and len(attempt.rows) <= 1:
                guessed = self.encoding_detector.detect_encoding(raw_data, file_name)
                error_msg = MessageTemplates.format('encoding_failed', file_name=file_name)
                if self.logger:
                    self.logger.error(f"{error_msg} (推定エンコーディング: {guessed}, エラー: {attempt.errors})")
                raise EncodingDetectionError(error_msg)

        if len(attempt.rows) <= 1:
            raise EmptyFileError(MessageTemplates.format('empty_file', file_name=file_name))

        if self.logger:
            self.logger.info(MessageTemplates.format(
                'csv_parsed', file_name=file_name, encoding=attempt.encoding, rows=len(attempt.rows)
            ))

        return ParsedCsv(file_name=file_name, encoding=attempt.encoding, rows=attempt.rows)

    def _parse_with_encoding(self, raw_data: bytes, encoding: str) -> ParseAttempt:
        """指定されたエンコーディングで解析し、行と構造エラーを返す"""
        attempt = ParseAttempt(encoding=encoding)

        try:
            text = raw_data.decode(encoding)
        except UnicodeDecodeError as e:
            attempt.errors.append(f"デコードエラー: {str(e)}")
            text = raw_data.decode(encoding, errors='replace')
        except LookupError as e:
            attempt.errors.append(f"未対応のエンコーディング: {str(e)}")
            return attempt

        if text.startswith('\ufeff'):
            text = text[1:]

        reader = csv.reader(io.StringIO(text, newline=''), strict=True)
        try:
            for row in reader:
                # 空行は読み飛ばす
                if not row or (len(row) == 1 and not row[0].strip()):
                    continue
                attempt.rows.append(row)
        except csv.Error as e:
            attempt.errors.append(f"CSV構造エラー (行 {reader.line_num}): {str(e)}")

        return attempt

    def read_file_safe(self, file_path: Path) -> Optional[ParsedCsv]:
        """安全なCSV読み込み（エラー時はNoneを返す）"""
        try:
            return self.read_file(file_path)
        except FileProcessingError as e:
            self._report(e, Path(file_path).name)
            return None
        except EmptyFileError as e:
            self._report(e, Path(file_path).name)
            return None

    def _report(self, error: Exception, file_name: str) -> None:
        if self.error_handler:
            self.error_handler.handle_file_processing_error(error, file_name)
        elif self.logger:
            self.logger.error(f"CSV読み込みエラー: {file_name} - {str(error)}")
