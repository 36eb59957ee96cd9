"""
カテゴリ抽出処理・数値変換のテスト
"""
import unittest
from pathlib import Path
import sys

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from wald_sales.constants import FileType
from wald_sales.extractors import (
    DailySalesExtractor,
    PartySalesExtractor,
    ProductSalesExtractor,
    canonical_product_name,
    classify_product,
    extract_day,
    get_extractor,
    room_slot,
)
from wald_sales.utils import parse_number, as_plain_number
from sample_data import product_row


def daily_row(date_value, sales, guests, avg_spend=''):
    return [date_value, str(sales)] + [''] * 8 + [str(guests), str(avg_spend)]


def party_row(date_value, guests, sales):
    return ['T1', date_value, '', '', str(guests), '', '', '', '', str(sales)]


class TestNumberParsing(unittest.TestCase):
    """数値変換のテスト"""

    def test_coercion_table(self):
        self.assertEqual(parse_number("¥12,345"), 12345)
        self.assertEqual(parse_number(""), 0)
        self.assertEqual(parse_number(None), 0)
        self.assertEqual(parse_number("abc"), 0)
        self.assertEqual(parse_number(42), 42)
        self.assertEqual(parse_number(float('nan')), 0)

    def test_lenient_strings(self):
        self.assertEqual(parse_number("1,234.5円"), 1234.5)
        self.assertEqual(parse_number("-500"), -500)
        self.assertEqual(parse_number(" 3,000 "), 3000)
        # 先頭の数値部分だけを読む
        self.assertEqual(parse_number("12-34"), 12)
        self.assertEqual(parse_number("1.2.3"), 1.2)
        self.assertIsInstance(parse_number("100"), int)

    def test_as_plain_number(self):
        self.assertEqual(as_plain_number(3.0), 3)
        self.assertIsInstance(as_plain_number(3.0), int)
        self.assertEqual(as_plain_number(2.5), 2.5)
        self.assertEqual(as_plain_number(float('inf')), 0)


class TestDailySalesExtractor(unittest.TestCase):
    """日別売上の抽出テスト"""

    def setUp(self):
        self.extractor = DailySalesExtractor()

    def test_days_sorted_ascending(self):
        """入力順に関係なく日の昇順になる"""
        rows = [
            daily_row('2024/5/10', 3000, 6),
            daily_row('2024/5/2', 1000, 2),
            daily_row('2024/5/1', 2000, 4),
        ]

        data = self.extractor.extract(rows, "日別売上(年月：2024_05).csv")

        self.assertEqual([entry.date for entry in data.cafe.daily], ['1日', '2日', '10日'])
        self.assertEqual(data.cafe.total_sales, 6000)
        self.assertEqual(data.cafe.total_guests, 12)
        self.assertEqual(data.cafe.avg_spend, 500)
        self.assertEqual(data.categories(), ['cafe'])

    def test_total_and_blank_rows_skipped(self):
        rows = [
            daily_row('2024/5/1', 1000, 2),
            daily_row('', 999, 9),
            daily_row('合計', 1000, 2),
            daily_row('備考', 5, 5),
        ]

        data = self.extractor.extract(rows, "test.csv")

        self.assertEqual(len(data.cafe.daily), 1)
        self.assertEqual(data.cafe.total_sales, 1000)

    def test_partial_date_and_columns(self):
        """M/D 形式の日付、客単価列の読み込み"""
        data = self.extractor.extract([daily_row('5/3', '¥1,500', 3, '500')], "test.csv")

        entry = data.cafe.get_entry('3日')
        self.assertIsNotNone(entry)
        self.assertEqual(entry.sales, 1500)
        self.assertEqual(entry.guests, 3)
        self.assertEqual(entry.avg_spend, 500)

    def test_duplicate_day_keeps_last(self):
        rows = [daily_row('2024/5/1', 1000, 2), daily_row('2024/5/1', 1200, 3)]

        data = self.extractor.extract(rows, "test.csv")

        self.assertEqual(len(data.cafe.daily), 1)
        self.assertEqual(data.cafe.daily[0].sales, 1200)

    def test_short_row_coerced_to_zero(self):
        """列が足りない行は0として扱う"""
        data = self.extractor.extract([['2024/5/4', '800']], "test.csv")

        entry = data.cafe.get_entry('4日')
        self.assertEqual(entry.sales, 800)
        self.assertEqual(entry.guests, 0)
        self.assertEqual(data.cafe.avg_spend, 0)

    def test_extract_day(self):
        self.assertEqual(extract_day('2024/05/07'), '7日')
        self.assertEqual(extract_day('5/7'), '7日')
        self.assertIsNone(extract_day('5/7', allow_partial=False))
        self.assertIsNone(extract_day('合計'))


class TestPartySalesExtractor(unittest.TestCase):
    """パーティ取引の抽出テスト"""

    def setUp(self):
        self.extractor = PartySalesExtractor()

    def test_same_day_transactions_are_summed(self):
        rows = [
            party_row('2024/5/3 18:00', 4, 5000),
            party_row('2024/5/3 20:00', 2, 3000),
            party_row('2024/5/1 12:00', 10, 20000),
        ]

        data = self.extractor.extract(rows, "SHIBUYA_取引_CPT_2024_05.csv")

        self.assertIsNone(data.party_4f)
        party = data.party_3f
        self.assertEqual([entry.date for entry in party.daily], ['1日', '3日'])
        day3 = party.get_entry('3日')
        self.assertEqual(day3.sales, 8000)
        self.assertEqual(day3.guests, 6)
        self.assertAlmostEqual(day3.avg_spend, 8000 / 6)
        self.assertEqual(party.total_sales, 28000)
        self.assertEqual(party.total_guests, 16)

    def test_routed_to_4f(self):
        data = self.extractor.extract([party_row('2024/5/3', 4, 5000)], "取引_DPT_2024_05.csv")

        self.assertIsNone(data.party_3f)
        self.assertEqual(data.party_4f.total_sales, 5000)

    def test_without_room_marker(self):
        """部屋コードがなければデータなし"""
        data = self.extractor.extract([party_row('2024/5/3', 4, 5000)], "取引_2024_05.csv")
        self.assertTrue(data.is_empty())

    def test_invalid_rows_skipped(self):
        rows = [
            party_row('2024/5/3', 4, 5000),
            ['T2', '2024/5/4', '', '', '3'],
            party_row('5/5', 2, 1000),
        ]

        data = self.extractor.extract(rows, "取引_CPT.csv")

        self.assertEqual([entry.date for entry in data.party_3f.daily], ['3日'])

    def test_zero_guests(self):
        data = self.extractor.extract([party_row('2024/5/3', 0, 5000)], "取引_CPT.csv")
        self.assertEqual(data.party_3f.daily[0].avg_spend, 0)
        self.assertEqual(data.party_3f.avg_spend, 0)

    def test_room_slot(self):
        self.assertEqual(room_slot("取引_CPT_2024.csv"), 'party3F')
        self.assertEqual(room_slot("取引_DPT_2024.csv"), 'party4F')
        self.assertIsNone(room_slot("取引_2024.csv"))


class TestProductSalesExtractor(unittest.TestCase):
    """商品別・税率別の抽出テスト"""

    def setUp(self):
        self.extractor = ProductSalesExtractor()

    def test_buckets_and_tax_slots(self):
        rows = [
            product_row('1001', '', 800, 10),
            product_row('1002', '', 700, 8),
            product_row('2001', '', 400, 8),
            product_row('9001', 'Latte Special', 500, 10),
            product_row('9002', 'ポテト', 300, 5),
            product_row('9003', 'ポテト', 200, 8),
        ]

        data = self.extractor.extract(rows, "取引データ(取引日時=20240115).csv")
        product_sales = data.product_sales

        self.assertEqual(product_sales.sandwiches.sales10, 800)
        self.assertEqual(product_sales.sandwiches.sales8, 700)
        self.assertEqual(product_sales.drinks.sales8, 400)
        self.assertEqual(product_sales.drinks.sales10, 500)
        # 8%以外の税率は10%扱い
        self.assertEqual(product_sales.other.sales10, 300)
        self.assertEqual(product_sales.other.sales8, 200)
        self.assertEqual(product_sales.other.tax10, 0)

    def test_rows_without_code_or_columns_skipped(self):
        rows = [
            product_row('', 'BLTサンド', 800, 10),
            ['1001', 'BLTサンド', '800'],
            product_row('1003', '', 600, 8),
        ]

        data = self.extractor.extract(rows, "test.csv")

        self.assertEqual(data.product_sales.sandwiches.sales8, 600)
        self.assertEqual(data.product_sales.sandwiches.sales10, 0)

    def test_empty_rows_give_zero_buckets(self):
        data = self.extractor.extract([], "test.csv")
        self.assertEqual(data.product_sales.sandwiches.total_sales, 0)
        self.assertEqual(data.categories(), ['productSales'])

    def test_product_master_and_classification(self):
        self.assertEqual(canonical_product_name('2002', 'latte'), 'カフェラテ')
        self.assertEqual(canonical_product_name('9999', 'オリジナル'), 'オリジナル')
        self.assertEqual(classify_product('チーズバーガー'), 'sandwiches')
        self.assertEqual(classify_product('ICED COFFEE'), 'drinks')
        self.assertEqual(classify_product('チーズケーキ'), 'other')


class TestExtractorRegistry(unittest.TestCase):

    def test_get_extractor(self):
        self.assertIsInstance(get_extractor(FileType.DAILY_SALES), DailySalesExtractor)
        self.assertIsInstance(get_extractor(FileType.PARTY), PartySalesExtractor)
        self.assertIsInstance(get_extractor(FileType.PRODUCT_SALES_BY_TAX_RATE), ProductSalesExtractor)
        with self.assertRaises(KeyError):
            get_extractor(FileType.UNKNOWN)


if __name__ == '__main__':
    unittest.main()
