"""
統一Excelハンドラー
集計サマリーをExcelブックに書き出す
"""
from pathlib import Path
from typing import List, Sequence

import openpyxl
from openpyxl.styles import Font
from openpyxl.worksheet.worksheet import Worksheet

from ..constants import CategoryConstants, ProductConstants
from ..data_models import WaldData
from ..error_handling.exceptions import FileProcessingError

PRODUCT_BUCKET_LABELS = {
    ProductConstants.SANDWICHES: 'サンドイッチ',
    ProductConstants.DRINKS: 'ドリンク',
    ProductConstants.OTHER: 'その他',
}


class ExcelHandler:
    """Excelファイルの統一処理クラス"""

    SUMMARY_SHEET = 'カテゴリ別集計'
    DAILY_SHEET = '日別売上'
    PRODUCT_SHEET = '商品別売上'

    def __init__(self, logger=None, error_handler=None):
        self.logger = logger
        self.error_handler = error_handler

    def write_summary(self, summary: WaldData, output_path: Path) -> Path:
        """サマリーを3シート（カテゴリ別・日別・商品別）のブックとして保存"""
        output_path = Path(output_path)
        workbook = openpyxl.Workbook()

        summary_sheet = workbook.active
        summary_sheet.title = self.SUMMARY_SHEET
        self._write_category_totals(summary_sheet, summary)
        self._write_daily(workbook.create_sheet(self.DAILY_SHEET), summary)
        self._write_product_sales(workbook.create_sheet(self.PRODUCT_SHEET), summary)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(output_path)
        except OSError as e:
            raise FileProcessingError(f"Excel書き込みエラー: {output_path.name} - {str(e)}")

        if self.logger:
            self.logger.info(f"Excel出力完了: {output_path}")
        return output_path

    def _write_header(self, worksheet: Worksheet, headers: Sequence[str]) -> None:
        worksheet.append(list(headers))
        for cell in worksheet[1]:
            cell.font = Font(bold=True)

    def _write_category_totals(self, worksheet: Worksheet, summary: WaldData) -> None:
        worksheet.append(['期間', summary.month or ''])
        worksheet.append([])
        worksheet.append(['カテゴリ', '売上', '客数', '客単価'])
        for cell in worksheet[3]:
            cell.font = Font(bold=True)

        for category in CategoryConstants.SALES_CATEGORIES:
            data = summary.get_slot(category)
            if data is None:
                continue
            worksheet.append([
                CategoryConstants.LABELS[category],
                data.total_sales,
                data.total_guests,
                round(data.avg_spend)
            ])

    def _write_daily(self, worksheet: Worksheet, summary: WaldData) -> None:
        self._write_header(worksheet, ['カテゴリ', '日付', '売上', '客数', '客単価'])
        for category in CategoryConstants.SALES_CATEGORIES:
            data = summary.get_slot(category)
            if data is None:
                continue
            for entry in data.daily:
                worksheet.append([
                    CategoryConstants.LABELS[category],
                    entry.date,
                    entry.sales,
                    entry.guests,
                    entry.avg_spend
                ])

    def _write_product_sales(self, worksheet: Worksheet, summary: WaldData) -> None:
        self._write_header(worksheet, ['分類', '売上(10%)', '税額(10%)', '売上(8%)', '税額(8%)'])
        if summary.product_sales is None:
            return
        for bucket in ProductConstants.BUCKETS:
            values = summary.product_sales.bucket(bucket)
            worksheet.append([
                PRODUCT_BUCKET_LABELS[bucket],
                values.sales10,
                values.tax10,
                values.sales8,
                values.tax8
            ])

    def read_sheet_rows(self, workbook_path: Path, sheet_name: str) -> List[list]:
        """書き出したブックのシートを行リストとして読み込む"""
        try:
            workbook = openpyxl.load_workbook(workbook_path, read_only=True)
        except (OSError, KeyError) as e:
            raise FileProcessingError(f"Excel読み込みエラー: {Path(workbook_path).name} - {str(e)}")
        try:
            return [list(row) for row in workbook[sheet_name].iter_rows(values_only=True)]
        finally:
            workbook.close()
