"""
永続化リポジトリ
集計ストアはスナップショット全体を load() / save() するだけのインターフェースに依存する
"""
import copy
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from .error_handling.exceptions import StorageError
from .messages import MessageTemplates


class Repository(ABC):
    """JSON互換スナップショットの保存先"""

    @abstractmethod
    def load(self) -> Optional[Any]:
        """保存済みスナップショットを返す（未保存なら None）"""
        pass

    @abstractmethod
    def save(self, snapshot: Any) -> None:
        """スナップショット全体を書き込む"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """保存データを削除"""
        pass


class InMemoryRepository(Repository):
    """メモリ上のリポジトリ（テスト・一時利用向け）"""

    def __init__(self, initial: Optional[Any] = None):
        self._snapshot = copy.deepcopy(initial)
        self._lock = threading.Lock()

    def load(self) -> Optional[Any]:
        with self._lock:
            return copy.deepcopy(self._snapshot)

    def save(self, snapshot: Any) -> None:
        with self._lock:
            self._snapshot = copy.deepcopy(snapshot)

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None


class JsonFileRepository(Repository):
    """JSONファイルのリポジトリ

    一時ファイルに書いてから置き換えるため、書き込み途中のファイルは残らない。
    """

    def __init__(self, path: Path, logger=None):
        self.path = Path(path)
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()

    def load(self) -> Optional[Any]:
        with self._lock:
            if not self.path.exists():
                return None
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                error_msg = MessageTemplates.format('storage_load_failed', path=self.path, error=str(e))
                self.logger.error(error_msg)
                raise StorageError(error_msg)

    def save(self, snapshot: Any) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(snapshot, f, ensure_ascii=False, indent=2)
                os.replace(temp_path, self.path)
            except (OSError, TypeError, ValueError) as e:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                error_msg = MessageTemplates.format('storage_save_failed', path=self.path, error=str(e))
                self.logger.error(error_msg)
                raise StorageError(error_msg)

    def clear(self) -> None:
        with self._lock:
            if self.path.exists():
                self.path.unlink()
