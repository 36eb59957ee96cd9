"""
標準化されたデータモデル
JSON保存形式（camelCaseキー）との相互変換を to_dict / from_dict で行う
"""
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any, Tuple


def day_number(date_label: str) -> int:
    """"12日" のような日付ラベルから日の数値を取り出す"""
    match = re.match(r'\s*(\d+)', date_label or '')
    return int(match.group(1)) if match else 0


def format_month_label(year: int, month: int) -> str:
    """年月ラベル（YYYY年M月）を作成"""
    return f"{int(year)}年{int(month)}月"


def parse_month_label(label: str) -> Tuple[int, int]:
    """年月ラベルを (年, 月) に分解する。解析できない部分は 0"""
    year_match = re.search(r'(\d{4})年', label or '')
    month_match = re.search(r'(\d{1,2})月', label or '')
    year = int(year_match.group(1)) if year_match else 0
    month = int(month_match.group(1)) if month_match else 0
    return year, month


def safe_average(total: float, count: float) -> float:
    """0除算を避けた平均値"""
    if not count:
        return 0.0
    value = total / count
    return value if math.isfinite(value) else 0.0


def now_iso() -> str:
    return datetime.now().isoformat()


@dataclass
class DailyEntry:
    """1日分の売上データ"""
    date: str
    sales: float = 0.0
    guests: float = 0
    avg_spend: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'sales': self.sales,
            'guests': self.guests,
            'avgSpend': self.avg_spend
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DailyEntry':
        return cls(
            date=str(data.get('date', '')),
            sales=data.get('sales', 0) or 0,
            guests=data.get('guests', 0) or 0,
            avg_spend=data.get('avgSpend', 0) or 0
        )


@dataclass
class SalesCategoryData:
    """1カテゴリ1か月分の売上データ

    合計値と客単価は日別リストから常に再計算される。
    """
    daily: List[DailyEntry] = field(default_factory=list)
    total_sales: float = 0.0
    total_guests: float = 0
    avg_spend: float = 0.0

    @classmethod
    def from_daily(cls, entries: List[DailyEntry]) -> 'SalesCategoryData':
        """日別リストから作成（同一日付は後勝ち、日の昇順）"""
        by_date: Dict[str, DailyEntry] = {}
        for entry in entries:
            by_date[entry.date] = entry
        daily = sorted(by_date.values(), key=lambda e: day_number(e.date))

        total_sales = sum(entry.sales for entry in daily)
        total_guests = sum(entry.guests for entry in daily)
        return cls(
            daily=daily,
            total_sales=total_sales,
            total_guests=total_guests,
            avg_spend=safe_average(total_sales, total_guests)
        )

    def get_entry(self, date: str) -> Optional[DailyEntry]:
        for entry in self.daily:
            if entry.date == date:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'daily': [entry.to_dict() for entry in self.daily],
            'totalSales': self.total_sales,
            'totalGuests': self.total_guests,
            'avgSpend': self.avg_spend
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SalesCategoryData':
        # 保存値の合計は信用せず日別リストから再計算する
        return cls.from_daily([DailyEntry.from_dict(d) for d in data.get('daily') or []])


@dataclass
class ProductSalesByTaxRate:
    """税率別の売上・税額"""
    sales10: float = 0.0
    tax10: float = 0.0
    sales8: float = 0.0
    tax8: float = 0.0

    def __add__(self, other: 'ProductSalesByTaxRate') -> 'ProductSalesByTaxRate':
        return ProductSalesByTaxRate(
            sales10=self.sales10 + other.sales10,
            tax10=self.tax10 + other.tax10,
            sales8=self.sales8 + other.sales8,
            tax8=self.tax8 + other.tax8
        )

    @property
    def total_sales(self) -> float:
        return self.sales10 + self.sales8

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sales10': self.sales10,
            'tax10': self.tax10,
            'sales8': self.sales8,
            'tax8': self.tax8
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ProductSalesByTaxRate':
        data = data or {}
        return cls(
            sales10=data.get('sales10', 0) or 0,
            tax10=data.get('tax10', 0) or 0,
            sales8=data.get('sales8', 0) or 0,
            tax8=data.get('tax8', 0) or 0
        )


@dataclass
class ProductSales:
    """商品分類（サンドイッチ・ドリンク・その他）ごとの税率別売上"""
    sandwiches: ProductSalesByTaxRate = field(default_factory=ProductSalesByTaxRate)
    drinks: ProductSalesByTaxRate = field(default_factory=ProductSalesByTaxRate)
    other: ProductSalesByTaxRate = field(default_factory=ProductSalesByTaxRate)

    def bucket(self, name: str) -> ProductSalesByTaxRate:
        return getattr(self, name)

    def __add__(self, other: 'ProductSales') -> 'ProductSales':
        return ProductSales(
            sandwiches=self.sandwiches + other.sandwiches,
            drinks=self.drinks + other.drinks,
            other=self.other + other.other
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sandwiches': self.sandwiches.to_dict(),
            'drinks': self.drinks.to_dict(),
            'other': self.other.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductSales':
        return cls(
            sandwiches=ProductSalesByTaxRate.from_dict(data.get('sandwiches')),
            drinks=ProductSalesByTaxRate.from_dict(data.get('drinks')),
            other=ProductSalesByTaxRate.from_dict(data.get('other'))
        )


@dataclass
class Store:
    """店舗"""
    id: str
    name: str
    code: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'code': self.code}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Store':
        return cls(id=str(data['id']), name=str(data.get('name', '')), code=str(data.get('code', '')))


@dataclass
class WaldData:
    """1店舗1か月分のレポート（各カテゴリは任意）"""
    month: Optional[str] = None
    store_id: Optional[str] = None
    cafe: Optional[SalesCategoryData] = None
    party_3f: Optional[SalesCategoryData] = None
    party_4f: Optional[SalesCategoryData] = None
    product_sales: Optional[ProductSales] = None

    # JSONキー -> 属性名
    SLOT_ATTRIBUTES = {
        'cafe': 'cafe',
        'party3F': 'party_3f',
        'party4F': 'party_4f',
        'productSales': 'product_sales',
    }

    def get_slot(self, key: str):
        return getattr(self, self.SLOT_ATTRIBUTES[key])

    def categories(self) -> List[str]:
        """値を持つカテゴリのキー一覧"""
        return [key for key in self.SLOT_ATTRIBUTES if self.get_slot(key) is not None]

    def is_empty(self) -> bool:
        return not self.categories()

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.month is not None:
            result['month'] = self.month
        if self.store_id is not None:
            result['storeId'] = self.store_id
        for key in self.categories():
            result[key] = self.get_slot(key).to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WaldData':
        data = data or {}
        return cls(
            month=data.get('month'),
            store_id=data.get('storeId'),
            cafe=SalesCategoryData.from_dict(data['cafe']) if data.get('cafe') else None,
            party_3f=SalesCategoryData.from_dict(data['party3F']) if data.get('party3F') else None,
            party_4f=SalesCategoryData.from_dict(data['party4F']) if data.get('party4F') else None,
            product_sales=ProductSales.from_dict(data['productSales']) if data.get('productSales') else None
        )


@dataclass
class StoreData:
    """1店舗1か月分の集計と更新情報"""
    store: Store
    data: WaldData
    last_updated: str = field(default_factory=now_iso)
    file_count: int = 0
    upload_history: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'store': self.store.to_dict(),
            'data': self.data.to_dict(),
            'lastUpdated': self.last_updated,
            'fileCount': self.file_count,
            'uploadHistory': list(self.upload_history)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoreData':
        return cls(
            store=Store.from_dict(data['store']),
            data=WaldData.from_dict(data.get('data') or {}),
            last_updated=data.get('lastUpdated') or now_iso(),
            file_count=int(data.get('fileCount', 0) or 0),
            upload_history=list(data.get('uploadHistory') or [])
        )


@dataclass
class MonthlyData:
    """1か月分の全店舗データ"""
    month: str
    stores: List[StoreData] = field(default_factory=list)
    last_updated: str = field(default_factory=now_iso)
    total_file_count: int = 0

    def find_store(self, store_id: str) -> Optional[StoreData]:
        for store_data in self.stores:
            if store_data.store.id == store_id:
                return store_data
        return None

    @property
    def sort_key(self) -> Tuple[int, int]:
        return parse_month_label(self.month)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'month': self.month,
            'stores': [store_data.to_dict() for store_data in self.stores],
            'lastUpdated': self.last_updated,
            'totalFileCount': self.total_file_count
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MonthlyData':
        return cls(
            month=str(data['month']),
            stores=[StoreData.from_dict(s) for s in data.get('stores') or []],
            last_updated=data.get('lastUpdated') or now_iso(),
            total_file_count=int(data.get('totalFileCount', 0) or 0)
        )


@dataclass
class TimeSeriesEntry:
    """分析用の日別時系列データ"""
    date: str
    sales: float
    guests: float
    avg_spend: float
    category: str
    month: str
    store_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'sales': self.sales,
            'guests': self.guests,
            'avgSpend': self.avg_spend,
            'category': self.category,
            'month': self.month,
            'storeId': self.store_id
        }


@dataclass
class HistoricalAnalysis:
    """期間比較（前年同月比など）の分析結果"""
    period: str
    total_sales: float
    total_guests: float
    avg_spend: float
    previous_period: str
    sales_change: float = 0.0
    guests_change: float = 0.0
    spend_change: float = 0.0

    @property
    def growth_rate(self) -> float:
        return self.sales_change

    def to_dict(self) -> Dict[str, Any]:
        return {
            'period': self.period,
            'totalSales': self.total_sales,
            'totalGuests': self.total_guests,
            'avgSpend': self.avg_spend,
            'growthRate': self.growth_rate,
            'comparison': {
                'previousPeriod': self.previous_period,
                'salesChange': self.sales_change,
                'guestsChange': self.guests_change,
                'spendChange': self.spend_change
            }
        }


@dataclass
class UploadResult:
    """1ファイル分の取り込み結果"""
    file_name: str
    success: bool = False
    file_type: Optional[str] = None
    month: Optional[str] = None
    store_id: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    error: Optional[str] = None
    processing_time: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'file_name': self.file_name,
            'success': self.success,
            'file_type': self.file_type,
            'month': self.month,
            'store_id': self.store_id,
            'categories': self.categories,
            'error': self.error,
            'processing_time': self.processing_time
        }


@dataclass
class ProcessingSummary:
    """一括アップロードの処理サマリー"""
    total_files: int = 0
    successful_files: int = 0
    failed_files: int = 0
    processing_start: Optional[datetime] = None
    processing_end: Optional[datetime] = None
    results: List[UploadResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """成功率を計算"""
        if self.total_files == 0:
            return 0.0
        return (self.successful_files / self.total_files) * 100

    @property
    def processing_duration(self) -> Optional[float]:
        """処理時間を計算（秒）"""
        if self.processing_start and self.processing_end:
            return (self.processing_end - self.processing_start).total_seconds()
        return None

    def add_result(self, result: UploadResult) -> None:
        """処理結果を追加"""
        self.results.append(result)
        self.total_files += 1

        if result.success:
            self.successful_files += 1
        else:
            self.failed_files += 1
            if result.error:
                self.errors.append(f"{result.file_name}: {result.error}")

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式で出力"""
        return {
            'total_files': self.total_files,
            'successful_files': self.successful_files,
            'failed_files': self.failed_files,
            'success_rate': self.success_rate,
            'processing_duration': self.processing_duration,
            'processing_start': self.processing_start.isoformat() if self.processing_start else None,
            'processing_end': self.processing_end.isoformat() if self.processing_end else None,
            'total_errors': len(self.errors)
        }
