"""
バックアップ・復元
店舗一覧と月次集計データを1つのJSONドキュメントとして書き出し・読み込みする
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .constants import StorageConstants
from .data_models import MonthlyData, Store, now_iso
from .error_handling.exceptions import BackupFormatError
from .messages import MessageTemplates
from .sales_store import sort_months


@dataclass
class BackupComparison:
    """現在データとバックアップの比較結果"""
    stores_changed: bool
    monthly_data_changed: bool
    backup_date: str
    current_date: str


class BackupManager:
    """バックアップの作成・読み込み・復元を行うクラス"""

    def __init__(self, store_directory, sales_store, logger=None):
        self.store_directory = store_directory
        self.sales_store = sales_store
        self.logger = logger or logging.getLogger(__name__)

    def create_backup(self) -> Dict[str, Any]:
        """現在のデータからバックアップドキュメントを作成"""
        return {
            'stores': [store.to_dict() for store in self.store_directory.load_stores()],
            'monthlyData': [month.to_dict() for month in self.sales_store.load_all()],
            'timestamp': now_iso(),
            'version': StorageConstants.BACKUP_VERSION
        }

    def write_backup(self, output_dir: Path, today: Optional[datetime] = None) -> Path:
        """バックアップをJSONファイルとして書き出す"""
        today = today or datetime.now()
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / StorageConstants.BACKUP_FILENAME_FORMAT.format(date=today.strftime('%Y-%m-%d'))

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.create_backup(), f, ensure_ascii=False, indent=2)

        self.logger.info(MessageTemplates.format('backup_created', path=path))
        return path

    def load_backup(self, path: Path) -> Dict[str, Any]:
        """バックアップファイルを読み込んで検証"""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                backup = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise BackupFormatError(MessageTemplates.format('backup_read_failed', path=path, error=str(e)))

        self.validate_backup(backup)
        return backup

    @staticmethod
    def validate_backup(backup: Any) -> None:
        if not isinstance(backup, dict):
            raise BackupFormatError(MessageTemplates.format('backup_invalid', missing=StorageConstants.BACKUP_REQUIRED_KEYS))
        missing = [key for key in StorageConstants.BACKUP_REQUIRED_KEYS if backup.get(key) in (None, '')]
        if missing:
            raise BackupFormatError(MessageTemplates.format('backup_invalid', missing=missing))

    def restore_backup(self, backup: Dict[str, Any]) -> None:
        """バックアップの内容で現在のデータを置き換える"""
        self.validate_backup(backup)
        stores: List[Store] = [Store.from_dict(item) for item in backup['stores']]
        months: List[MonthlyData] = [MonthlyData.from_dict(item) for item in backup['monthlyData']]

        self.store_directory.save_stores(stores)
        self.sales_store.save_all(months)
        self.logger.info(MessageTemplates.format('backup_restored', timestamp=backup['timestamp']))

    def compare_backup(self, backup: Dict[str, Any]) -> BackupComparison:
        """現在のデータとバックアップを比較"""
        current = self.create_backup()
        normalized_stores = [Store.from_dict(item).to_dict() for item in backup.get('stores') or []]
        normalized_months = [month.to_dict() for month in sort_months(
            [MonthlyData.from_dict(item) for item in backup.get('monthlyData') or []]
        )]

        return BackupComparison(
            stores_changed=current['stores'] != normalized_stores,
            monthly_data_changed=current['monthlyData'] != normalized_months,
            backup_date=backup.get('timestamp', ''),
            current_date=current['timestamp']
        )
