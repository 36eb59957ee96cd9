"""
統一例外クラス定義
"""


class SalesPipelineError(Exception):
    """売上パイプラインの基本例外クラス"""
    pass


class FileProcessingError(SalesPipelineError):
    """ファイル処理関連のエラー"""
    pass


class DataValidationError(SalesPipelineError):
    """データ検証関連のエラー"""
    pass


class ConfigurationError(SalesPipelineError):
    """設定関連のエラー"""
    pass


class EncodingDetectionError(FileProcessingError):
    """エンコーディング検出関連のエラー"""
    pass


class NetworkError(SalesPipelineError):
    """ネットワーク関連のエラー"""
    pass


class UnknownFileFormatError(FileProcessingError):
    """ファイル形式を判定できない場合のエラー"""
    pass


class EmptyFileError(DataValidationError):
    """CSVが空、またはヘッダーのみの場合のエラー"""
    pass


class StoreResolutionError(DataValidationError):
    """店舗コードから店舗を特定できない場合のエラー"""

    def __init__(self, message: str, store_code=None):
        super().__init__(message)
        self.store_code = store_code


class StorageError(SalesPipelineError):
    """永続化ストレージ関連のエラー"""
    pass


class ClassificationError(NetworkError):
    """外部分類器（AI）呼び出しのエラー"""
    pass


class BackupFormatError(DataValidationError):
    """バックアップファイルの形式エラー"""
    pass
