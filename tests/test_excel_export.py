"""
Excel出力のテスト
"""
import unittest
import tempfile
from pathlib import Path
import sys

import openpyxl

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent.parent))

from wald_sales import ExcelHandler, FileProcessingError
from wald_sales.data_models import (
    DailyEntry,
    ProductSales,
    ProductSalesByTaxRate,
    SalesCategoryData,
    WaldData,
)


class TestExcelHandler(unittest.TestCase):
    """ExcelHandlerのテスト"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.excel_handler = ExcelHandler()
        self.summary = WaldData(
            month='2024年5月 - 2024年6月',
            cafe=SalesCategoryData.from_daily([DailyEntry('1日', 1000, 2), DailyEntry('2日', 2000, 3)]),
            party_4f=SalesCategoryData.from_daily([DailyEntry('5日', 30000, 6)]),
            product_sales=ProductSales(drinks=ProductSalesByTaxRate(sales10=500, tax10=50, sales8=200, tax8=16))
        )

    def tearDown(self):
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_write_summary_sheets(self):
        path = self.excel_handler.write_summary(self.summary, self.temp_dir / 'out' / 'summary.xlsx')

        self.assertTrue(path.exists())
        workbook = openpyxl.load_workbook(path)
        self.assertEqual(workbook.sheetnames, ['カテゴリ別集計', '日別売上', '商品別売上'])
        workbook.close()

    def test_category_totals(self):
        path = self.excel_handler.write_summary(self.summary, self.temp_dir / 'summary.xlsx')

        rows = self.excel_handler.read_sheet_rows(path, ExcelHandler.SUMMARY_SHEET)

        self.assertEqual(rows[0][:2], ['期間', '2024年5月 - 2024年6月'])
        by_label = {row[0]: row for row in rows if row and row[0]}
        self.assertEqual(by_label['カフェ'][1:4], [3000, 5, 600])
        self.assertEqual(by_label['パーティ4F'][1:4], [30000, 6, 5000])
        self.assertNotIn('パーティ3F', by_label)

    def test_daily_and_product_sheets(self):
        path = self.excel_handler.write_summary(self.summary, self.temp_dir / 'summary.xlsx')

        daily_rows = self.excel_handler.read_sheet_rows(path, ExcelHandler.DAILY_SHEET)
        self.assertEqual(daily_rows[0], ['カテゴリ', '日付', '売上', '客数', '客単価'])
        self.assertEqual([row[1] for row in daily_rows[1:]], ['1日', '2日', '5日'])

        product_rows = self.excel_handler.read_sheet_rows(path, ExcelHandler.PRODUCT_SHEET)
        self.assertEqual(len(product_rows), 4)
        self.assertEqual(product_rows[2], ['ドリンク', 500, 50, 200, 16])

    def test_summary_without_product_sales(self):
        path = self.excel_handler.write_summary(WaldData(month='2024年5月'), self.temp_dir / 'empty.xlsx')

        product_rows = self.excel_handler.read_sheet_rows(path, ExcelHandler.PRODUCT_SHEET)
        self.assertEqual(len(product_rows), 1)

    def test_read_missing_workbook(self):
        with self.assertRaises(FileProcessingError):
            self.excel_handler.read_sheet_rows(self.temp_dir / 'missing.xlsx', ExcelHandler.SUMMARY_SHEET)


if __name__ == '__main__':
    unittest.main()
