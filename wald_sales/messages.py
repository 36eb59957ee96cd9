"""
メッセージテンプレートモジュール
画面表示・ログ出力用のメッセージを集約する
"""

from typing import Any


class MessageTemplates:
    """メッセージテンプレート定義クラス"""

    ERROR_MESSAGES = {
        "unknown_format": "不明またはサポートされていないCSVファイル形式です: {file_name}",
        "unknown_format_ai_failed": "不明またはサポートされていないCSVファイル形式です (AI判定も失敗): {file_name}",
        "encoding_failed": "Shift_JISおよびUTF-8エンコーディングでのCSV解析に失敗しました: {file_name}",
        "empty_file": "CSVファイルが空か、ヘッダーのみを含んでいます: {file_name}",
        "store_code_missing": "ファイル名から店舗情報を抽出できませんでした。店舗を選択するか、ファイル名に店舗コードを含めてください: {file_name}",
        "store_not_found": "店舗コード \"{store_code}\" に対応する店舗が見つかりません。店舗管理で店舗を追加してください。",
        "store_id_not_found": "店舗が見つかりません: {store_id}",
        "month_not_found": "ファイル名から年月を抽出できませんでした: {file_name}",
        "unsupported_type": "このファイルタイプの処理は実装されていません: {file_type}",
        "file_read_failed": "ファイルの読み込みに失敗しました: {file_name} - {error}",
        "storage_load_failed": "保存データの読み込みに失敗しました: {path} - {error}",
        "storage_save_failed": "保存データの書き込みに失敗しました: {path} - {error}",
        "backup_invalid": "無効なバックアップファイルです: 不足キー {missing}",
        "backup_read_failed": "バックアップファイルの読み込みに失敗しました: {path} - {error}",
        "ai_request_failed": "AI APIリクエストに失敗しました: {status} {error}",
        "ai_response_invalid": "AIの応答を解析できませんでした: {error}",
    }

    INFO_MESSAGES = {
        "file_type_by_name": "ファイル名から形式を判定: {file_name} -> {file_type}",
        "file_type_by_content": "ヘッダー内容から形式を判定: {file_name} -> {file_type}",
        "file_type_by_ai": "AI判定で形式を推定: {file_name} -> {file_type}",
        "month_fallback": "ファイル名から年月を抽出できないため当月を使用します: {file_name} -> {month}",
        "encoding_retry": "{first}での解析でエラーが発生したため{second}で再解析します: {file_name}",
        "csv_parsed": "CSV解析完了: {file_name} ({encoding}, {rows}行)",
        "store_data_added": "店舗データを追加: {month} / {store_id}",
        "store_data_updated": "店舗データを更新: {month} / {store_id} (ファイル数: {file_count})",
        "store_data_deleted": "店舗データを削除: {month} / {store_id}",
        "month_removed": "店舗データがなくなったため月データを削除: {month}",
        "all_data_cleared": "全データをクリアしました",
        "backup_created": "バックアップを作成しました: {path}",
        "backup_restored": "バックアップデータを復元しました (作成日時: {timestamp})",
    }

    @classmethod
    def format(cls, key: str, **kwargs: Any) -> str:
        """テンプレートにパラメータを埋め込む"""
        template = cls.ERROR_MESSAGES.get(key) or cls.INFO_MESSAGES.get(key)
        if template is None:
            return key
        try:
            return template.format(**kwargs)
        except KeyError as e:
            return f"{template} (パラメータ不足: {e})"
