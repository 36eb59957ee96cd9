"""
中央集約設定管理システム
"""
import copy
import json
import os
from pathlib import Path
from typing import Dict, Any, Optional, List

from ..error_handling.exceptions import ConfigurationError


class ConfigManager:
    """設定管理の統一クラス"""

    DEFAULT_CONFIG_FILES = [
        'wald_sales_config.json',
        'config.json'
    ]

    MONTH_FALLBACK_MODES = ['current', 'error']

    def __init__(self, config_path: Optional[Path] = None, logger=None):
        self.logger = logger
        self.config_path = config_path
        self.config_data = {}
        self.load_config(config_path)

    def load_config(self, config_path: Optional[Path] = None) -> Dict[str, Any]:
        """設定ファイルを読み込み"""
        self.config_data = self._get_default_config()

        if config_path:
            self._merge(self.config_data, self._load_single_config(Path(config_path)))
        else:
            # デフォルトの設定ファイルを順次試行
            for config_file in self.DEFAULT_CONFIG_FILES:
                candidate = Path(config_file)
                if not candidate.exists():
                    continue
                try:
                    self._merge(self.config_data, self._load_single_config(candidate))
                    self.config_path = candidate
                    break
                except ConfigurationError as e:
                    if self.logger:
                        self.logger.debug(f"設定ファイル読み込み失敗: {config_file} - {str(e)}")
                    continue

            if self.config_path is None and self.logger:
                self.logger.warning("設定ファイルが見つかりません。デフォルト設定を使用します。")

        self._apply_environment_overrides()
        return self.config_data

    def _load_single_config(self, config_path: Path) -> Dict[str, Any]:
        """単一の設定ファイルを読み込み"""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)

            if self.logger:
                self.logger.info(f"設定ファイル読み込み成功: {config_path.name}")

            return config_data

        except FileNotFoundError:
            raise ConfigurationError(f"設定ファイルが見つかりません: {config_path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"設定ファイルの形式が無効です: {config_path} - {str(e)}")
        except OSError as e:
            raise ConfigurationError(f"設定ファイル読み込みエラー: {config_path} - {str(e)}")

    def _get_default_config(self) -> Dict[str, Any]:
        """デフォルト設定を取得"""
        return {
            'data_dir': str(Path.cwd() / 'data'),
            'monthly_data_file': 'wald_monthly_data.json',
            'stores_file': 'wald_stores.json',
            'encodings': ['cp932', 'utf-8'],
            'log_level': 'INFO',
            'log_file': None,
            'month_fallback': 'current',
            'ai': {
                'enabled': False,
                'api_url': 'https://api.openai.com/v1/chat/completions',
                'model': 'gpt-3.5-turbo',
                'timeout_seconds': 30,
                'api_key': ''
            }
        }

    def _apply_environment_overrides(self) -> None:
        """環境変数で設定を上書き"""
        api_key = os.getenv('OPENAI_API_KEY')
        if api_key:
            self.set('ai.api_key', api_key)

        data_dir = os.getenv('WALD_SALES_DATA_DIR')
        if data_dir:
            self.set('data_dir', data_dir)

    def _merge(self, base: Dict[str, Any], updates: Dict[str, Any]) -> None:
        for key, value in updates.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """設定値を取得（ドット区切りキー対応）"""
        value = self.config_data
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """設定値を設定"""
        keys = key.split('.')
        current = self.config_data

        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

    def get_storage_paths(self) -> Dict[str, Path]:
        """データ保存先のパスを構築"""
        data_dir = Path(self.get('data_dir', '.'))
        return {
            'data_dir': data_dir,
            'monthly_data_path': data_dir / self.get('monthly_data_file', 'wald_monthly_data.json'),
            'stores_path': data_dir / self.get('stores_file', 'wald_stores.json')
        }

    def get_processing_settings(self) -> Dict[str, Any]:
        """処理関連の設定を取得"""
        return {
            'encodings': list(self.get('encodings', ['cp932', 'utf-8'])),
            'month_fallback': self.get('month_fallback', 'current')
        }

    def get_logging_settings(self) -> Dict[str, Any]:
        """ログ関連の設定を取得"""
        return {
            'log_level': self.get('log_level', 'INFO'),
            'log_file': self.get('log_file')
        }

    def get_ai_settings(self) -> Dict[str, Any]:
        """AI連携の設定を取得"""
        return {
            'enabled': bool(self.get('ai.enabled', False)),
            'api_url': self.get('ai.api_url'),
            'model': self.get('ai.model'),
            'timeout_seconds': self.get('ai.timeout_seconds', 30),
            'api_key': self.get('ai.api_key', '')
        }

    def validate_configuration(self) -> bool:
        """設定の妥当性を検証"""
        errors: List[str] = []

        encodings = self.get('encodings')
        if not isinstance(encodings, list) or len(encodings) != 2:
            errors.append(f"encodingsは2件のリストで指定してください: {encodings}")

        if self.get('month_fallback') not in self.MONTH_FALLBACK_MODES:
            errors.append(f"month_fallbackが無効です: {self.get('month_fallback')}")

        if self.get('ai.enabled') and not self.get('ai.api_key'):
            errors.append("AI連携が有効ですがAPIキーが設定されていません")

        if errors:
            error_msg = f"設定エラー: {errors}"
            if self.logger:
                self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

        if self.logger:
            self.logger.info("設定の妥当性検証完了")

        return True

    def save_config(self, config_path: Optional[Path] = None) -> None:
        """設定をファイルに保存"""
        if config_path is None:
            config_path = self.config_path or Path(self.DEFAULT_CONFIG_FILES[0])

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config_data, f, ensure_ascii=False, indent=2)

            if self.logger:
                self.logger.info(f"設定ファイル保存完了: {config_path}")

        except OSError as e:
            error_msg = f"設定ファイル保存エラー: {config_path} - {str(e)}"
            if self.logger:
                self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

    def update_config(self, updates: Dict[str, Any]) -> None:
        """設定を更新"""
        self._merge(self.config_data, updates)

        if self.logger:
            self.logger.info(f"設定更新: {list(updates.keys())}")

    def get_all_settings(self) -> Dict[str, Any]:
        """すべての設定を取得"""
        return copy.deepcopy(self.config_data)
