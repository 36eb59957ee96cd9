"""
アップロード処理パイプライン
1ファイルごとに 解析 -> 形式判定 -> 年月・店舗解決 -> 抽出 -> 集計ストアへ統合 を行う
"""
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Tuple

from .classifier import AIFormatClassifier, OpenAICompletionClient
from .config.config_manager import ConfigManager
from .constants import FileType
from .data_models import ProcessingSummary, UploadResult, WaldData
from .error_handling.error_handler import ErrorHandler
from .error_handling.exceptions import (
    FileProcessingError,
    SalesPipelineError,
    UnknownFileFormatError,
)
from .extractors import get_extractor
from .file_handlers.csv_handler import CSVHandler
from .format_detector import FormatDetector
from .messages import MessageTemplates
from .metadata_extractor import MetadataExtractor
from .repository import JsonFileRepository
from .sales_store import SalesDataStore
from .store_directory import StoreDirectory

DETECTION_MESSAGE_KEYS = {
    FormatDetector.METHOD_FILENAME: 'file_type_by_name',
    FormatDetector.METHOD_CONTENT: 'file_type_by_content',
    FormatDetector.METHOD_CLASSIFIER: 'file_type_by_ai',
}


class UploadPipeline:
    """売上CSVの取り込み処理クラス"""

    def __init__(self, store_directory: StoreDirectory, sales_store: SalesDataStore,
                 csv_handler: Optional[CSVHandler] = None,
                 format_detector: Optional[FormatDetector] = None,
                 metadata_extractor: Optional[MetadataExtractor] = None,
                 logger=None, error_handler: Optional[ErrorHandler] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.error_handler = error_handler or ErrorHandler(self.logger)
        self.store_directory = store_directory
        self.sales_store = sales_store
        self.csv_handler = csv_handler or CSVHandler(self.logger, self.error_handler)
        self.format_detector = format_detector or FormatDetector(logger=self.logger)
        self.metadata_extractor = metadata_extractor or MetadataExtractor(logger=self.logger)

    @classmethod
    def from_config(cls, config: ConfigManager, logger=None) -> 'UploadPipeline':
        """設定からリポジトリ・分類器を含めて一式を構築"""
        logger = logger or logging.getLogger(__name__)
        paths = config.get_storage_paths()
        processing = config.get_processing_settings()
        ai_settings = config.get_ai_settings()

        classifier = None
        if ai_settings['enabled']:
            client = OpenAICompletionClient.from_settings(ai_settings, logger)
            classifier = AIFormatClassifier(client, logger)

        error_handler = ErrorHandler(logger)
        return cls(
            store_directory=StoreDirectory(JsonFileRepository(paths['stores_path'], logger), logger),
            sales_store=SalesDataStore(JsonFileRepository(paths['monthly_data_path'], logger), logger),
            csv_handler=CSVHandler(logger, error_handler, processing['encodings']),
            format_detector=FormatDetector(classifier, logger),
            metadata_extractor=MetadataExtractor(processing['month_fallback'], logger=logger),
            logger=logger,
            error_handler=error_handler
        )

    def process_file(self, file_name: str, raw_data: bytes,
                     selected_store_code: Optional[str] = None) -> UploadResult:
        """1ファイルを取り込む

        例外はこの境界で捕捉し、利用者向けメッセージとして UploadResult.error に格納する。
        集計ストアへの書き込みは最後の1回のみなので、失敗時に中途半端な統合は残らない。
        """
        start_time = time.time()
        result = UploadResult(file_name=file_name)

        try:
            self._ingest(file_name, raw_data, selected_store_code, result)
            result.success = True
        except SalesPipelineError as e:
            self.error_handler.handle_file_processing_error(e, file_name)
            result.error = self.error_handler.to_user_message(e)
        except Exception as e:
            self.error_handler.log_error_with_context(e, {'file_name': file_name, 'stage': 'upload'})
            result.error = self.error_handler.to_user_message(e)

        result.processing_time = time.time() - start_time
        return result

    def _ingest(self, file_name: str, raw_data: bytes, selected_store_code: Optional[str],
                result: UploadResult) -> WaldData:
        parsed = self.csv_handler.parse_bytes(raw_data, file_name)

        file_type = self._detect(file_name, parsed.rows)
        result.file_type = file_type.value

        month = self.metadata_extractor.extract_month(file_name)
        result.month = month

        store_code = self.metadata_extractor.extract_store_code(file_name, selected_store_code)
        store = self.store_directory.resolve(store_code, file_name)
        result.store_id = store.id

        extractor = get_extractor(file_type, self.logger)
        fragment = extractor.extract(parsed.data_rows, file_name)
        result.categories = fragment.categories()

        self.sales_store.add_or_update(month, store, fragment, file_name)
        self.logger.info(
            f"アップロード完了: {file_name} -> {month} / {store.name} "
            f"(カテゴリ: {', '.join(result.categories) or 'なし'})"
        )
        return fragment

    def _detect(self, file_name: str, rows) -> FileType:
        detection = self.format_detector.detect(file_name, rows)
        if not detection.is_known:
            key = 'unknown_format_ai_failed' if self.format_detector.classifier else 'unknown_format'
            raise UnknownFileFormatError(MessageTemplates.format(key, file_name=file_name))

        self.logger.info(MessageTemplates.format(
            DETECTION_MESSAGE_KEYS[detection.method], file_name=file_name, file_type=detection.file_type.value
        ))
        return detection.file_type

    def process_files(self, files: Iterable[Tuple[str, bytes]],
                      selected_store_code: Optional[str] = None) -> ProcessingSummary:
        """複数ファイルをアップロード順に1件ずつ取り込む（失敗しても後続は継続）"""
        files = list(files)
        summary = ProcessingSummary(processing_start=datetime.now())

        for index, (file_name, raw_data) in enumerate(files, start=1):
            self.logger.info(f"処理中 ({index}/{len(files)}): {file_name}")
            summary.add_result(self.process_file(file_name, raw_data, selected_store_code))

        summary.processing_end = datetime.now()
        self._log_summary(summary)
        return summary

    def process_paths(self, paths: Iterable[Path],
                      selected_store_code: Optional[str] = None) -> ProcessingSummary:
        """ファイルパスの一覧を順に取り込む"""
        paths = [Path(p) for p in paths]
        summary = ProcessingSummary(processing_start=datetime.now())

        for index, path in enumerate(paths, start=1):
            self.logger.info(f"処理中 ({index}/{len(paths)}): {path.name}")
            try:
                raw_data = path.read_bytes()
            except OSError as e:
                error = FileProcessingError(
                    MessageTemplates.format('file_read_failed', file_name=path.name, error=str(e))
                )
                self.error_handler.handle_file_processing_error(error, path.name)
                summary.add_result(UploadResult(file_name=path.name, error=str(error)))
                continue
            summary.add_result(self.process_file(path.name, raw_data, selected_store_code))

        summary.processing_end = datetime.now()
        self._log_summary(summary)
        return summary

    def _log_summary(self, summary: ProcessingSummary) -> None:
        self.logger.info(
            f"一括処理完了: 成功 {summary.successful_files}件 / 失敗 {summary.failed_files}件 "
            f"(成功率: {summary.success_rate:.1f}%)"
        )
