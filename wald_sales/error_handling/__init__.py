"""
エラーハンドリングパッケージ
"""

from .exceptions import (
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
from .error_handler import ErrorHandler

__all__ = [
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
    'ErrorHandler'
]
