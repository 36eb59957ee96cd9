"""
取引データCSV（商品別・税率別）の抽出処理
"""
from typing import Sequence

import pandas as pd

from ..constants import PRODUCT_SALES_LAYOUT, ProductConstants, FileType
from ..data_models import ProductSales, ProductSalesByTaxRate, WaldData
from ..utils.numbers import parse_number, as_plain_number
from .base import CategoryExtractor


def canonical_product_name(code: str, fallback_name: str) -> str:
    """商品マスタから正式名を取得（なければ行の商品名）"""
    return ProductConstants.PRODUCT_NAME_MASTER.get(code) or fallback_name


def classify_product(name: str) -> str:
    """商品名のキーワードから分類を決める"""
    lower_name = (name or '').lower()
    for bucket, keywords in ProductConstants.CATEGORY_KEYWORDS:
        if any(keyword.lower() in lower_name for keyword in keywords):
            return bucket
    return ProductConstants.OTHER


def tax_slot(tax_rate: float) -> str:
    """税率から加算先の列を決める（8%以外は10%扱い）"""
    if tax_rate == ProductConstants.REDUCED_TAX_RATE:
        return 'sales8'
    return 'sales10'


class ProductSalesExtractor(CategoryExtractor):
    """取引データCSVを商品分類 x 税率で集計"""

    file_type = FileType.PRODUCT_SALES_BY_TAX_RATE
    layout = PRODUCT_SALES_LAYOUT

    def extract(self, rows: Sequence[Sequence[str]], file_name: str) -> WaldData:
        records = []
        for row in self.as_rows(rows):
            if not self.has_min_fields(row):
                continue

            product_code = self.text(row, 'product_code')
            if not product_code:
                continue

            name = canonical_product_name(product_code, self.text(row, 'product_name'))
            records.append({
                'bucket': classify_product(name),
                'slot': tax_slot(parse_number(self.cell(row, 'tax_rate'))),
                'sales': parse_number(self.cell(row, 'sales')),
            })

        self.log_skipped(len(rows) - len(records), len(rows))
        product_sales = self._accumulate(records)
        self.logger.info(f"商品別売上抽出完了: {file_name} ({len(records)}件)")
        return WaldData(product_sales=product_sales)

    @staticmethod
    def _accumulate(records) -> ProductSales:
        product_sales = ProductSales()
        if not records:
            return product_sales

        df = pd.DataFrame(records, columns=['bucket', 'slot', 'sales'])
        totals = df.groupby(['bucket', 'slot'])['sales'].sum()

        for (bucket, slot), amount in totals.items():
            current: ProductSalesByTaxRate = product_sales.bucket(bucket)
            setattr(current, slot, getattr(current, slot) + as_plain_number(amount))
        return product_sales
