"""
定数定義モジュール
CSVレイアウト（列位置）・ファイル名パターン・商品マスタを集約する
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple


class FileType(Enum):
    """アップロードCSVの種別"""
    UNKNOWN = "unknown"
    DAILY_SALES = "daily_sales"
    PARTY = "party"
    PRODUCT_SALES_BY_TAX_RATE = "product_sales_by_tax_rate"


@dataclass(frozen=True)
class ColumnLayout:
    """CSV形式ごとの列定義（意味 -> 0始まりの列番号）"""
    name: str
    columns: Dict[str, int]
    min_fields: int = 0

    def index(self, field_name: str) -> int:
        return self.columns[field_name]


# 日別売上CSV: A列=日付, B列=売上, K列=客数, L列=客単価
DAILY_SALES_LAYOUT = ColumnLayout(
    name="日別売上",
    columns={'date': 0, 'sales': 1, 'guests': 10, 'avg_spend': 11},
)

# パーティ取引CSV: B列=取引日時, E列=人数, J列=金額
PARTY_LAYOUT = ColumnLayout(
    name="パーティ取引",
    columns={'date': 1, 'guests': 4, 'sales': 9},
    min_fields=10,
)

# 取引データCSV: AG列=商品コード, AH列=商品名, AP列=売上, AS列=税率
PRODUCT_SALES_LAYOUT = ColumnLayout(
    name="商品別売上（税率別）",
    columns={'product_code': 32, 'product_name': 33, 'sales': 41, 'tax_rate': 44},
    min_fields=45,
)

COLUMN_LAYOUTS: Dict[FileType, ColumnLayout] = {
    FileType.DAILY_SALES: DAILY_SALES_LAYOUT,
    FileType.PARTY: PARTY_LAYOUT,
    FileType.PRODUCT_SALES_BY_TAX_RATE: PRODUCT_SALES_LAYOUT,
}


class FileNameConstants:
    """ファイル名判定に関する定数"""
    DAILY_SALES_PATTERN = r'^日別売上\(年月：\d{4}_\d{2}\)\.csv$'
    TRANSACTION_MARKER = "取引"
    PRODUCT_SALES_PATTERN = r'取引データ[\(（]取引日時='
    CSV_EXTENSION = ".csv"

    # 部屋コード -> WaldDataのスロット名（CPT=3F, DPT=4F）
    ROOM_MARKERS: List[Tuple[str, str]] = [
        ('CPT', 'party3F'),
        ('DPT', 'party4F'),
    ]

    # 月の抽出パターン（優先順）
    YEAR_MONTH_PATTERN = r'(\d{4})_(\d{1,2})'
    YEAR_MONTH_DAY_PATTERN = r'(\d{4})(\d{2})(\d{2})'
    TRANSACTION_DATE_PATTERN = r'取引日時=([0-9]{8})'

    # 店舗コードの抽出パターン（優先順）
    STORE_CODE_PATTERNS: List[str] = [
        r'^([A-Z]+)_',    # 英大文字の店舗コード
        r'^([^_]+)_',     # アンダースコア前の文字列
        r'^([^0-9]+)',    # 数字前の文字列
    ]


class ContentConstants:
    """ヘッダー内容による判定に関する定数"""
    DAILY_SALES_HEADERS: List[str] = ['日付', '売上', '客数']
    PARTY_HEADER_KEYWORDS: List[str] = ['取引', '人数', '金額']
    PRODUCT_HEADER_KEYWORDS: List[str] = ['商品', '税率']
    PRODUCT_MIN_COLUMNS = 45
    TOTAL_ROW_MARKER = "合計"

    # AI判定に渡すサンプル行数
    AI_SAMPLE_ROWS = 5


class CategoryConstants:
    """売上カテゴリに関する定数"""
    CAFE = 'cafe'
    PARTY_3F = 'party3F'
    PARTY_4F = 'party4F'
    PRODUCT_SALES = 'productSales'

    SALES_CATEGORIES: List[str] = [CAFE, PARTY_3F, PARTY_4F]
    ALL_CATEGORIES: List[str] = [CAFE, PARTY_3F, PARTY_4F, PRODUCT_SALES]

    LABELS: Dict[str, str] = {
        CAFE: 'カフェ',
        PARTY_3F: 'パーティ3F',
        PARTY_4F: 'パーティ4F',
        PRODUCT_SALES: '商品別売上',
    }


class ProductConstants:
    """商品分類に関する定数"""
    SANDWICHES = 'sandwiches'
    DRINKS = 'drinks'
    OTHER = 'other'

    BUCKETS: List[str] = [SANDWICHES, DRINKS, OTHER]

    # 判定順（先に一致したバケットを採用、どれにも一致しなければ other）
    CATEGORY_KEYWORDS: List[Tuple[str, List[str]]] = [
        (SANDWICHES, ['サンド', 'sand', 'ホットドッグ', 'バーガー', 'burger']),
        (DRINKS, ['コーヒー', 'coffee', 'ラテ', 'latte', 'ティー', 'tea', '紅茶',
                  'ジュース', 'juice', 'ソーダ', 'soda', 'ドリンク', 'drink',
                  'ビール', 'beer', 'ワイン', 'wine', 'エスプレッソ', 'espresso']),
    ]

    STANDARD_TAX_RATE = 10
    REDUCED_TAX_RATE = 8

    # 商品コード -> 正式商品名
    PRODUCT_NAME_MASTER: Dict[str, str] = {
        '1001': 'BLTサンド',
        '1002': 'ハムチーズサンド',
        '1003': 'たまごサンド',
        '1004': 'クラブハウスサンド',
        '2001': 'ブレンドコーヒー',
        '2002': 'カフェラテ',
        '2003': 'アイスティー',
        '2004': 'オレンジジュース',
        '3001': 'チーズケーキ',
        '3002': 'クッキー',
    }


class StorageConstants:
    """永続化に関する定数"""
    BACKUP_VERSION = '1.0'
    BACKUP_FILENAME_FORMAT = 'sales-dashboard-backup-{date}.json'
    BACKUP_REQUIRED_KEYS: List[str] = ['stores', 'monthlyData', 'timestamp', 'version']
    UNKNOWN_STORE_NAME = '不明な店舗'
