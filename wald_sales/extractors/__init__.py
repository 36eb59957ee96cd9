"""
カテゴリ抽出パッケージ
"""

from typing import Dict, Type

from ..constants import FileType
from .base import CategoryExtractor, extract_day
from .daily_sales import DailySalesExtractor
from .party_sales import PartySalesExtractor, room_slot
from .product_sales import ProductSalesExtractor, classify_product, canonical_product_name

EXTRACTORS: Dict[FileType, Type[CategoryExtractor]] = {
    FileType.DAILY_SALES: DailySalesExtractor,
    FileType.PARTY: PartySalesExtractor,
    FileType.PRODUCT_SALES_BY_TAX_RATE: ProductSalesExtractor,
}


def get_extractor(file_type: FileType, logger=None) -> CategoryExtractor:
    """形式に対応する抽出クラスを生成"""
    extractor_class = EXTRACTORS.get(file_type)
    if extractor_class is None:
        raise KeyError(file_type)
    return extractor_class(logger)


__all__ = [
    'CategoryExtractor',
    'DailySalesExtractor',
    'PartySalesExtractor',
    'ProductSalesExtractor',
    'EXTRACTORS',
    'get_extractor',
    'extract_day',
    'room_slot',
    'classify_product',
    'canonical_product_name'
]
