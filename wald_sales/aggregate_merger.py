"""
集計データの統合処理
既存データと新しい断片から新しいスナップショットを作る（入力は変更しない）
"""
from dataclasses import replace
from functools import reduce
from typing import Iterable, List, Optional

from .data_models import SalesCategoryData, ProductSales, WaldData


def merge_sales_category_data(existing: Optional[SalesCategoryData],
                              incoming: Optional[SalesCategoryData]) -> Optional[SalesCategoryData]:
    """日別データを日付キーで統合（同じ日付は新しいデータで置き換え）"""
    if incoming is None:
        return existing
    if existing is None:
        return SalesCategoryData.from_daily(list(incoming.daily))
    return SalesCategoryData.from_daily(list(existing.daily) + list(incoming.daily))


def merge_product_sales(existing: Optional[ProductSales],
                        incoming: Optional[ProductSales]) -> Optional[ProductSales]:
    """商品別売上を分類・税率ごとに加算"""
    if incoming is None:
        return existing
    if existing is None:
        return incoming + ProductSales()
    return existing + incoming


def merge_wald_data(existing: Optional[WaldData], incoming: WaldData) -> WaldData:
    """カテゴリごとに統合（新しい断片にないカテゴリは既存値を維持）"""
    if existing is None:
        existing = WaldData()

    return replace(
        existing,
        month=incoming.month or existing.month,
        store_id=incoming.store_id or existing.store_id,
        cafe=merge_sales_category_data(existing.cafe, incoming.cafe),
        party_3f=merge_sales_category_data(existing.party_3f, incoming.party_3f),
        party_4f=merge_sales_category_data(existing.party_4f, incoming.party_4f),
        product_sales=merge_product_sales(existing.product_sales, incoming.product_sales)
    )


def merge_many(fragments: Iterable[WaldData], month: Optional[str] = None) -> WaldData:
    """複数の断片を順に統合（サマリー作成用）"""
    fragment_list: List[WaldData] = list(fragments)
    merged = reduce(merge_wald_data, fragment_list, WaldData())
    merged.month = month
    merged.store_id = None
    return merged
