"""
ファイルハンドラーパッケージ
"""

from .csv_handler import CSVHandler, ParsedCsv, ParseAttempt
from .excel_handler import ExcelHandler

__all__ = ['CSVHandler', 'ParsedCsv', 'ParseAttempt', 'ExcelHandler']
