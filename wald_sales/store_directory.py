"""
店舗ディレクトリ
店舗（ID・名称・コード）の登録と、店舗コードからの店舗解決を行う
"""
import logging
import threading
import uuid
from typing import List, Optional

from .constants import StorageConstants
from .data_models import Store
from .error_handling.exceptions import DataValidationError, StoreResolutionError
from .messages import MessageTemplates
from .repository import Repository


class StoreDirectory:
    """店舗一覧の管理クラス"""

    def __init__(self, repository: Repository, logger=None):
        self.repository = repository
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()

    def load_stores(self) -> List[Store]:
        """店舗一覧を読み込み"""
        snapshot = self.repository.load() or []
        return [Store.from_dict(item) for item in snapshot]

    def save_stores(self, stores: List[Store]) -> None:
        """店舗一覧を保存"""
        self.repository.save([store.to_dict() for store in stores])

    def add_store(self, name: str, code: str, store_id: Optional[str] = None) -> Store:
        """店舗を追加"""
        name, code = (name or '').strip(), (code or '').strip()
        if not name or not code:
            raise DataValidationError('店舗名と店舗コードを入力してください。')

        with self._lock:
            stores = self.load_stores()
            if any(self._same_code(store.code, code) for store in stores):
                raise DataValidationError(f"店舗コード \"{code}\" は既に登録されています。")

            store = Store(id=store_id or uuid.uuid4().hex, name=name, code=code)
            self.save_stores(stores + [store])

        self.logger.info(f"店舗を追加: {store.name} ({store.code})")
        return store

    def update_store(self, store_id: str, name: Optional[str] = None, code: Optional[str] = None) -> Store:
        """店舗名・店舗コードを更新"""
        with self._lock:
            stores = self.load_stores()
            target = self._find(stores, store_id)
            if target is None:
                raise DataValidationError(MessageTemplates.format('store_id_not_found', store_id=store_id))

            if code is not None and any(
                    self._same_code(store.code, code) for store in stores if store.id != store_id):
                raise DataValidationError(f"店舗コード \"{code}\" は既に登録されています。")

            if name is not None:
                target.name = name.strip()
            if code is not None:
                target.code = code.strip()
            self.save_stores(stores)

        self.logger.info(f"店舗を更新: {target.name} ({target.code})")
        return target

    def delete_store(self, store_id: str) -> List[Store]:
        """店舗を削除"""
        with self._lock:
            stores = [store for store in self.load_stores() if store.id != store_id]
            self.save_stores(stores)
        self.logger.info(f"店舗を削除: {store_id}")
        return stores

    def find_by_id(self, store_id: str) -> Optional[Store]:
        return self._find(self.load_stores(), store_id)

    def find_by_code(self, code: str) -> Optional[Store]:
        for store in self.load_stores():
            if self._same_code(store.code, code):
                return store
        return None

    def get_store_name(self, store_id: str) -> str:
        """店舗IDから店舗名を取得"""
        store = self.find_by_id(store_id)
        return store.name if store else StorageConstants.UNKNOWN_STORE_NAME

    def resolve(self, store_code: Optional[str], file_name: str = '') -> Store:
        """店舗コードから店舗を特定（見つからなければ例外）"""
        if not store_code:
            raise StoreResolutionError(MessageTemplates.format('store_code_missing', file_name=file_name), store_code)

        store = self.find_by_code(store_code)
        if store is None:
            raise StoreResolutionError(
                MessageTemplates.format('store_not_found', store_code=store_code), store_code
            )
        return store

    def clear(self) -> None:
        self.repository.clear()

    @staticmethod
    def _find(stores: List[Store], store_id: str) -> Optional[Store]:
        for store in stores:
            if store.id == store_id:
                return store
        return None

    @staticmethod
    def _same_code(left: str, right: str) -> bool:
        return (left or '').strip().upper() == (right or '').strip().upper()
