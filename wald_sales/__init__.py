"""
店舗売上CSV取り込み・集計パッケージ
"""

from .file_handlers.csv_handler import CSVHandler
from .file_handlers.excel_handler import ExcelHandler
from .error_handling.exceptions import (
    SalesPipelineError,
    FileProcessingError,
    DataValidationError,
    ConfigurationError,
    EncodingDetectionError,
    NetworkError,
    UnknownFileFormatError,
    EmptyFileError,
    StoreResolutionError,
    StorageError,
    ClassificationError,
    BackupFormatError
)
from .error_handling.error_handler import ErrorHandler
from .logging.unified_logger import UnifiedLogger
from .config.config_manager import ConfigManager
from .constants import FileType
from .data_models import (
    DailyEntry,
    SalesCategoryData,
    ProductSalesByTaxRate,
    ProductSales,
    Store,
    WaldData,
    StoreData,
    MonthlyData,
    UploadResult,
    ProcessingSummary
)
from .format_detector import FormatDetector
from .metadata_extractor import MetadataExtractor
from .repository import Repository, InMemoryRepository, JsonFileRepository
from .store_directory import StoreDirectory
from .sales_store import SalesDataStore
from .backup import BackupManager
from .pipeline import UploadPipeline

__all__ = [
    'CSVHandler',
    'ExcelHandler',
    'SalesPipelineError',
    'FileProcessingError',
    'DataValidationError',
    'ConfigurationError',
    'EncodingDetectionError',
    'NetworkError',
    'UnknownFileFormatError',
    'EmptyFileError',
    'StoreResolutionError',
    'StorageError',
    'ClassificationError',
    'BackupFormatError',
    'ErrorHandler',
    'UnifiedLogger',
    'ConfigManager',
    'FileType',
    'DailyEntry',
    'SalesCategoryData',
    'ProductSalesByTaxRate',
    'ProductSales',
    'Store',
    'WaldData',
    'StoreData',
    'MonthlyData',
    'UploadResult',
    'ProcessingSummary',
    'FormatDetector',
    'MetadataExtractor',
    'Repository',
    'InMemoryRepository',
    'JsonFileRepository',
    'StoreDirectory',
    'SalesDataStore',
    'BackupManager',
    'UploadPipeline'
]
