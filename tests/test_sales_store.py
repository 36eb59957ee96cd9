"""
月次集計ストア・リポジトリのテスト
"""
import json
import unittest
import tempfile
from pathlib import Path
import sys

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent.parent))

from wald_sales import (
    InMemoryRepository,
    JsonFileRepository,
    SalesDataStore,
    StorageError,
    Store,
)
from wald_sales.data_models import (
    DailyEntry,
    ProductSales,
    ProductSalesByTaxRate,
    SalesCategoryData,
    WaldData,
)
from wald_sales.sales_store import sort_month_labels, summary_month_label


def cafe_fragment(*entries):
    return WaldData(cafe=SalesCategoryData.from_daily([DailyEntry(d, s, g) for d, s, g in entries]))


class TestSalesDataStore(unittest.TestCase):
    """SalesDataStoreのテスト"""

    def setUp(self):
        self.repository = InMemoryRepository()
        self.store = SalesDataStore(self.repository, clock=lambda: '2024-06-01T00:00:00')
        self.shibuya = Store(id='s1', name='渋谷店', code='SHIBUYA')
        self.shinjuku = Store(id='s2', name='新宿店', code='SHINJUKU')

    def test_two_uploads_same_month_and_store(self):
        """同じ月・店舗への2回目のアップロードは日付単位で上書き・追加"""
        self.store.add_or_update('2024年5月', self.shibuya,
                                 cafe_fragment(('1日', 1000, 2), ('3日', 3000, 5)), 'first.csv')
        self.store.add_or_update('2024年5月', self.shibuya,
                                 cafe_fragment(('1日', 1200, 3), ('5日', 500, 1)), 'second.csv')

        cafe = self.store.get_store_data('2024年5月', 's1').cafe
        self.assertEqual(
            [(e.date, e.sales, e.guests) for e in cafe.daily],
            [('1日', 1200, 3), ('3日', 3000, 5), ('5日', 500, 1)]
        )
        self.assertEqual(cafe.total_sales, 4700)
        self.assertEqual(cafe.total_guests, 9)

        monthly = self.store.get_monthly_data('2024年5月')
        store_data = monthly.find_store('s1')
        self.assertEqual(store_data.file_count, 2)
        self.assertEqual(store_data.upload_history, ['first.csv', 'second.csv'])
        self.assertEqual(monthly.total_file_count, 2)
        self.assertEqual(monthly.last_updated, '2024-06-01T00:00:00')
        self.assertEqual(store_data.data.month, '2024年5月')
        self.assertEqual(store_data.data.store_id, 's1')

    def test_months_sorted_chronologically(self):
        for month in ['2024年10月', '2023年12月', '2024年2月']:
            self.store.add_or_update(month, self.shibuya, cafe_fragment(('1日', 100, 1)))

        self.assertEqual(self.store.available_months(), ['2023年12月', '2024年2月', '2024年10月'])

    def test_snapshot_is_json_compatible(self):
        self.store.add_or_update('2024年5月', self.shibuya, cafe_fragment(('1日', 100, 1)))

        snapshot = self.repository.load()

        json.dumps(snapshot, ensure_ascii=False)
        self.assertEqual(snapshot[0]['month'], '2024年5月')
        self.assertEqual(snapshot[0]['stores'][0]['store']['code'], 'SHIBUYA')
        self.assertEqual(snapshot[0]['stores'][0]['data']['cafe']['totalSales'], 100)

    def test_delete_only_store_removes_month(self):
        self.store.add_or_update('2024年5月', self.shibuya, cafe_fragment(('1日', 100, 1)))
        self.store.add_or_update('2024年6月', self.shibuya, cafe_fragment(('1日', 200, 1)))

        months = self.store.delete_store_data('2024年5月', 's1')

        self.assertEqual([m.month for m in months], ['2024年6月'])
        self.assertEqual(self.store.available_months(), ['2024年6月'])
        self.assertEqual(self.store.get_store_data('2024年6月', 's1').cafe.total_sales, 200)

    def test_delete_one_of_two_stores(self):
        self.store.add_or_update('2024年5月', self.shibuya, cafe_fragment(('1日', 100, 1)))
        self.store.add_or_update('2024年5月', self.shinjuku, cafe_fragment(('1日', 300, 1)))
        self.store.add_or_update('2024年5月', self.shinjuku, cafe_fragment(('2日', 300, 1)))

        self.store.delete_store_data('2024年5月', 's2')

        monthly = self.store.get_monthly_data('2024年5月')
        self.assertEqual([s.store.id for s in monthly.stores], ['s1'])
        self.assertEqual(monthly.total_file_count, 1)
        self.assertIsNone(self.store.get_store_data('2024年5月', 's2'))

    def test_delete_unknown_is_noop(self):
        self.store.add_or_update('2024年5月', self.shibuya, cafe_fragment(('1日', 100, 1)))

        self.store.delete_store_data('2024年7月', 's1')
        self.store.delete_store_data('2024年5月', 'missing')

        self.assertEqual(self.store.available_months(), ['2024年5月'])

    def test_purge_store_and_clear_all(self):
        self.store.add_or_update('2024年5月', self.shibuya, cafe_fragment(('1日', 100, 1)))
        self.store.add_or_update('2024年6月', self.shibuya, cafe_fragment(('1日', 100, 1)))
        self.store.add_or_update('2024年6月', self.shinjuku, cafe_fragment(('1日', 100, 1)))

        self.store.purge_store('s1')
        self.assertEqual(self.store.available_months(), ['2024年6月'])

        self.store.clear_all()
        self.assertEqual(self.store.load_all(), [])

    def test_create_summary(self):
        self.store.add_or_update('2024年6月', self.shibuya, cafe_fragment(('1日', 100, 1)))
        self.store.add_or_update('2024年5月', self.shibuya, WaldData(
            product_sales=ProductSales(sandwiches=ProductSalesByTaxRate(sales8=100))))
        self.store.add_or_update('2024年5月', self.shinjuku, WaldData(
            product_sales=ProductSales(sandwiches=ProductSalesByTaxRate(sales8=50))))

        summary = self.store.create_summary(['2024年6月', '2024年5月'], ['s1', 's2'])

        self.assertEqual(summary.month, '2024年5月 - 2024年6月')
        self.assertIsNone(summary.store_id)
        self.assertEqual(summary.product_sales.sandwiches.sales8, 150)
        self.assertEqual(summary.cafe.total_sales, 100)

        single = self.store.create_summary(['2024年5月'], ['s2'])
        self.assertEqual(single.month, '2024年5月')
        self.assertEqual(single.product_sales.sandwiches.sales8, 50)
        self.assertIsNone(single.cafe)

    def test_create_summary_without_data(self):
        summary = self.store.create_summary(['2024年1月'], ['s1'])
        self.assertTrue(summary.is_empty())
        self.assertIsNone(summary.month)

    def test_time_series_and_historical(self):
        self.store.add_or_update('2024年5月', self.shibuya, cafe_fragment(('3日', 300, 3), ('1日', 1000, 4)))
        self.store.add_or_update('2024年4月', self.shibuya, cafe_fragment(('2日', 500, 5)))

        series = self.store.extract_time_series(['2024年5月', '2024年4月'], ['s1'])

        self.assertEqual([(e.month, e.date) for e in series],
                         [('2024年4月', '2日'), ('2024年5月', '1日'), ('2024年5月', '3日')])
        self.assertEqual(series[1].avg_spend, 250)
        self.assertEqual(series[1].category, 'cafe')

        analysis = self.store.analyze_historical(['2024年5月'], ['2024年4月'], ['s1'])

        self.assertEqual(analysis.total_sales, 1300)
        self.assertEqual(analysis.total_guests, 7)
        self.assertAlmostEqual(analysis.sales_change, 160.0)
        self.assertAlmostEqual(analysis.guests_change, 40.0)
        self.assertEqual(analysis.to_dict()['comparison']['salesChange'], analysis.sales_change)

    def test_historical_without_previous_data(self):
        self.store.add_or_update('2024年5月', self.shibuya, cafe_fragment(('1日', 1000, 4)))

        analysis = self.store.analyze_historical(['2024年5月'], ['2023年5月'])

        self.assertEqual(analysis.sales_change, 0.0)
        self.assertEqual(analysis.spend_change, 0.0)

    def test_month_label_helpers(self):
        self.assertEqual(sort_month_labels(['2024年10月', '2024年9月', '2024年9月']), ['2024年9月', '2024年10月'])
        self.assertIsNone(summary_month_label([]))
        self.assertEqual(summary_month_label(['2024年1月']), '2024年1月')


class TestJsonFileRepository(unittest.TestCase):
    """JSONファイルリポジトリのテスト"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.path = self.temp_dir / 'data' / 'wald_monthly_data.json'

    def tearDown(self):
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_persisted_between_instances(self):
        store = SalesDataStore(JsonFileRepository(self.path))
        store.add_or_update('2024年5月', Store('s1', '渋谷店', 'SHIBUYA'),
                            cafe_fragment(('1日', 1000, 2)), '日別売上.csv')

        reopened = SalesDataStore(JsonFileRepository(self.path))

        self.assertEqual(reopened.get_store_data('2024年5月', 's1').cafe.total_sales, 1000)
        self.assertIn('渋谷店', self.path.read_text(encoding='utf-8'))
        # 一時ファイルは残らない
        self.assertEqual([p.name for p in self.path.parent.iterdir()], ['wald_monthly_data.json'])

    def test_missing_file_loads_none(self):
        self.assertIsNone(JsonFileRepository(self.path).load())
        self.assertEqual(SalesDataStore(JsonFileRepository(self.path)).load_all(), [])

    def test_corrupted_file(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text('{broken', encoding='utf-8')

        with self.assertRaises(StorageError):
            JsonFileRepository(self.path).load()

    def test_unserializable_snapshot(self):
        repository = JsonFileRepository(self.path)

        with self.assertRaises(StorageError):
            repository.save({'value': object()})
        self.assertFalse(self.path.exists())

    def test_clear(self):
        repository = JsonFileRepository(self.path)
        repository.save([])
        repository.clear()
        self.assertFalse(self.path.exists())


if __name__ == '__main__':
    unittest.main()
