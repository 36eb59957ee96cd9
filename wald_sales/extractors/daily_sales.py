"""
日別売上CSV（カフェ）の抽出処理
"""
from typing import Sequence

from ..constants import DAILY_SALES_LAYOUT, ContentConstants, FileType
from ..data_models import DailyEntry, SalesCategoryData, WaldData
from ..utils.numbers import parse_number
from .base import CategoryExtractor, extract_day


class DailySalesExtractor(CategoryExtractor):
    """日別売上CSVを cafe カテゴリに変換"""

    file_type = FileType.DAILY_SALES
    layout = DAILY_SALES_LAYOUT

    def extract(self, rows: Sequence[Sequence[str]], file_name: str) -> WaldData:
        entries = []
        skipped = 0

        for row in self.as_rows(rows):
            date_value = self.text(row, 'date')
            # 空行・合計行は対象外
            if not date_value or ContentConstants.TOTAL_ROW_MARKER in date_value:
                skipped += 1
                continue

            day = extract_day(date_value)
            if not day:
                skipped += 1
                continue

            entries.append(DailyEntry(
                date=day,
                sales=parse_number(self.cell(row, 'sales')),
                guests=parse_number(self.cell(row, 'guests')),
                avg_spend=parse_number(self.cell(row, 'avg_spend'))
            ))

        self.log_skipped(skipped, len(rows))
        cafe = SalesCategoryData.from_daily(entries)
        self.logger.info(f"日別売上抽出完了: {file_name} ({len(cafe.daily)}日分)")
        return WaldData(cafe=cafe)
