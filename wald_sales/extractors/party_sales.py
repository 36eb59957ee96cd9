"""
パーティ取引CSV（3F / 4F）の抽出処理
"""
from typing import Optional, Sequence

import pandas as pd

from ..constants import PARTY_LAYOUT, FileNameConstants, FileType
from ..data_models import DailyEntry, SalesCategoryData, WaldData, safe_average
from ..utils.numbers import parse_number, as_plain_number
from .base import CategoryExtractor, extract_day


def room_slot(file_name: str) -> Optional[str]:
    """ファイル名の部屋コードから格納先スロット（party3F / party4F）を決める"""
    for marker, slot in FileNameConstants.ROOM_MARKERS:
        if marker in file_name:
            return slot
    return None


class PartySalesExtractor(CategoryExtractor):
    """パーティ取引CSVを日別に集計"""

    file_type = FileType.PARTY
    layout = PARTY_LAYOUT

    def extract(self, rows: Sequence[Sequence[str]], file_name: str) -> WaldData:
        slot = room_slot(file_name)
        if slot is None:
            self.logger.warning(f"部屋コード（CPT/DPT）がファイル名にないためパーティデータを登録しません: {file_name}")
            return WaldData()

        records = []
        for row in self.as_rows(rows):
            if not self.has_min_fields(row):
                continue
            # 取引日時は YYYY/M/D 形式のみ受け付ける
            day = extract_day(self.text(row, 'date'), allow_partial=False)
            if not day:
                continue
            records.append({
                'date': day,
                'sales': parse_number(self.cell(row, 'sales')),
                'guests': parse_number(self.cell(row, 'guests')),
            })

        self.log_skipped(len(rows) - len(records), len(rows))
        party = SalesCategoryData.from_daily(self._sum_by_day(records))
        self.logger.info(f"パーティ取引抽出完了: {file_name} -> {slot} ({len(party.daily)}日分)")

        fragment = WaldData()
        if slot == 'party3F':
            fragment.party_3f = party
        else:
            fragment.party_4f = party
        return fragment

    @staticmethod
    def _sum_by_day(records):
        """同じ日の取引を合算（置き換えではなく加算）"""
        if not records:
            return []

        df = pd.DataFrame(records, columns=['date', 'sales', 'guests'])
        grouped = df.groupby('date', sort=False)[['sales', 'guests']].sum()

        entries = []
        for day, totals in grouped.iterrows():
            sales = as_plain_number(totals['sales'])
            guests = as_plain_number(totals['guests'])
            entries.append(DailyEntry(
                date=day,
                sales=sales,
                guests=guests,
                avg_spend=safe_average(sales, guests)
            ))
        return entries
