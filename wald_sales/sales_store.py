"""
月次 x 店舗の集計ストア
追加・更新はスナップショット全体の読み込み -> 統合 -> 書き戻しを1単位として行う
"""
import logging
import threading
from dataclasses import replace
from typing import Callable, Iterable, List, Optional

from .aggregate_merger import merge_many, merge_wald_data
from .constants import CategoryConstants
from .data_models import (
    HistoricalAnalysis,
    MonthlyData,
    Store,
    StoreData,
    TimeSeriesEntry,
    WaldData,
    day_number,
    now_iso,
    parse_month_label,
    safe_average,
)
from .messages import MessageTemplates
from .repository import Repository


def sort_months(months: List[MonthlyData]) -> List[MonthlyData]:
    """年月順（文字列順ではなく年・月の数値順）に並べる"""
    return sorted(months, key=lambda m: parse_month_label(m.month))


def sort_month_labels(labels: Iterable[str]) -> List[str]:
    return sorted(set(labels), key=parse_month_label)


def summary_month_label(months: List[str]) -> Optional[str]:
    """サマリーの期間ラベル（単月ならその月、複数なら "最初 - 最後"）"""
    if not months:
        return None
    if len(months) == 1:
        return months[0]
    return f"{months[0]} - {months[-1]}"


def _percent_change(current: float, previous: float) -> float:
    if not previous:
        return 0.0
    return ((current - previous) / previous) * 100


class SalesDataStore:
    """集計データの永続ストア"""

    def __init__(self, repository: Repository, logger=None, clock: Optional[Callable[[], str]] = None):
        self.repository = repository
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock or now_iso
        self._lock = threading.RLock()

    # --- 読み込み・保存 ---

    def load_all(self) -> List[MonthlyData]:
        """全月の集計データを読み込み"""
        snapshot = self.repository.load() or []
        return sort_months([MonthlyData.from_dict(item) for item in snapshot])

    def save_all(self, months: List[MonthlyData]) -> None:
        self.repository.save([month.to_dict() for month in sort_months(months)])

    def available_months(self) -> List[str]:
        return [month.month for month in self.load_all()]

    def get_monthly_data(self, month: str) -> Optional[MonthlyData]:
        for monthly in self.load_all():
            if monthly.month == month:
                return monthly
        return None

    def get_store_data(self, month: str, store_id: str) -> Optional[WaldData]:
        """特定の月・店舗の集計データを取得"""
        monthly = self.get_monthly_data(month)
        if monthly is None:
            return None
        store_data = monthly.find_store(store_id)
        return store_data.data if store_data else None

    # --- 更新 ---

    def add_or_update(self, month: str, store: Store, fragment: WaldData,
                      file_name: Optional[str] = None) -> List[MonthlyData]:
        """新しい断片を (月, 店舗) の集計に統合して保存"""
        with self._lock:
            months = self.load_all()
            timestamp = self.clock()
            incoming = replace(fragment, month=month, store_id=store.id)

            monthly = next((m for m in months if m.month == month), None)
            if monthly is None:
                monthly = MonthlyData(month=month, last_updated=timestamp)
                months.append(monthly)

            store_data = monthly.find_store(store.id)
            if store_data is None:
                store_data = StoreData(
                    store=store,
                    data=merge_wald_data(None, incoming),
                    last_updated=timestamp,
                    file_count=1,
                    upload_history=[file_name] if file_name else []
                )
                monthly.stores.append(store_data)
                self.logger.info(MessageTemplates.format('store_data_added', month=month, store_id=store.id))
            else:
                store_data.store = store
                store_data.data = merge_wald_data(store_data.data, incoming)
                store_data.last_updated = timestamp
                store_data.file_count += 1
                if file_name:
                    store_data.upload_history.append(file_name)
                self.logger.info(MessageTemplates.format(
                    'store_data_updated', month=month, store_id=store.id, file_count=store_data.file_count
                ))

            monthly.last_updated = timestamp
            monthly.total_file_count += 1

            months = sort_months(months)
            self.save_all(months)
            return months

    def delete_store_data(self, month: str, store_id: str) -> List[MonthlyData]:
        """特定の月・店舗のデータを削除（店舗がなくなった月は月ごと削除）"""
        with self._lock:
            months = self.load_all()
            monthly = next((m for m in months if m.month == month), None)

            if monthly is not None:
                store_data = monthly.find_store(store_id)
                if store_data is not None:
                    monthly.stores.remove(store_data)
                    monthly.total_file_count = max(0, monthly.total_file_count - store_data.file_count)
                    monthly.last_updated = self.clock()
                    self.logger.info(MessageTemplates.format('store_data_deleted', month=month, store_id=store_id))

                if not monthly.stores:
                    months.remove(monthly)
                    self.logger.info(MessageTemplates.format('month_removed', month=month))

            self.save_all(months)
            return months

    def purge_store(self, store_id: str) -> List[MonthlyData]:
        """店舗削除に合わせて全月からその店舗のデータを削除"""
        with self._lock:
            for month in [m.month for m in self.load_all()]:
                self.delete_store_data(month, store_id)
            return self.load_all()

    def clear_all(self) -> None:
        """全データをクリア"""
        with self._lock:
            self.repository.clear()
        self.logger.info(MessageTemplates.format('all_data_cleared'))

    # --- 参照・集計 ---

    def _selected_store_data(self, months: List[str], store_ids: Optional[List[str]]) -> List[StoreData]:
        selected = []
        for monthly in self.load_all():
            if monthly.month not in months:
                continue
            for store_data in monthly.stores:
                if store_ids is None or store_data.store.id in store_ids:
                    selected.append(store_data)
        return selected

    def create_summary(self, selected_months: List[str], selected_store_ids: List[str]) -> WaldData:
        """選択した月・店舗のデータをカテゴリごとに統合したサマリーを作成"""
        available = set(self.available_months())
        months = sort_month_labels(m for m in selected_months if m in available)
        if not months:
            return WaldData()

        fragments = [store_data.data for store_data in self._selected_store_data(months, list(selected_store_ids))]
        return merge_many(fragments, month=summary_month_label(months))

    def extract_time_series(self, months: List[str], store_ids: Optional[List[str]] = None) -> List[TimeSeriesEntry]:
        """日別の時系列データを抽出（分析・AIチャット用）"""
        entries: List[TimeSeriesEntry] = []
        for store_data in self._selected_store_data(list(months), store_ids):
            for category in CategoryConstants.SALES_CATEGORIES:
                category_data = store_data.data.get_slot(category)
                if category_data is None:
                    continue
                for daily in category_data.daily:
                    entries.append(TimeSeriesEntry(
                        date=daily.date,
                        sales=daily.sales,
                        guests=daily.guests,
                        avg_spend=safe_average(daily.sales, daily.guests),
                        category=category,
                        month=store_data.data.month or '',
                        store_id=store_data.store.id
                    ))

        return sorted(entries, key=lambda e: (parse_month_label(e.month), day_number(e.date)))

    def _period_totals(self, months: List[str], store_ids: Optional[List[str]]):
        total_sales = 0.0
        total_guests = 0.0
        for store_data in self._selected_store_data(months, store_ids):
            for category in CategoryConstants.SALES_CATEGORIES:
                category_data = store_data.data.get_slot(category)
                if category_data is not None:
                    total_sales += category_data.total_sales
                    total_guests += category_data.total_guests
        return total_sales, total_guests

    def analyze_historical(self, current_months: List[str], previous_months: List[str],
                           store_ids: Optional[List[str]] = None) -> HistoricalAnalysis:
        """期間比較（前年同月比など）"""
        current_sales, current_guests = self._period_totals(list(current_months), store_ids)
        previous_sales, previous_guests = self._period_totals(list(previous_months), store_ids)

        current_avg = safe_average(current_sales, current_guests)
        previous_avg = safe_average(previous_sales, previous_guests)

        return HistoricalAnalysis(
            period=', '.join(current_months),
            total_sales=current_sales,
            total_guests=current_guests,
            avg_spend=current_avg,
            previous_period=', '.join(previous_months),
            sales_change=_percent_change(current_sales, previous_sales),
            guests_change=_percent_change(current_guests, previous_guests),
            spend_change=_percent_change(current_avg, previous_avg)
        )
