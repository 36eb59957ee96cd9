"""
コマンドラインスクリプトのテスト
"""
import io
import json
import os
import unittest
import tempfile
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch
import sys

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

import run_sales_pipeline
from sample_data import daily_sales_csv


class TestCommandLine(unittest.TestCase):
    """run_sales_pipeline のサブコマンドのテスト"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.data_dir = self.temp_dir / 'data'
        self.config_file = self.temp_dir / 'wald_sales_config.json'
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump({'data_dir': str(self.data_dir)}, f)

        self.env_patcher = patch.dict(os.environ, {'OPENAI_API_KEY': '', 'WALD_SALES_DATA_DIR': ''})
        self.env_patcher.start()

    def tearDown(self):
        self.env_patcher.stop()
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def run_cli(self, *args):
        output = io.StringIO()
        with redirect_stdout(output):
            exit_code = run_sales_pipeline.main(['--config', str(self.config_file)] + list(args))
        return exit_code, output.getvalue()

    def upload_sample(self, file_name="SHIBUYA_日別売上(年月：2024_05).csv"):
        upload_file = self.temp_dir / file_name
        upload_file.write_bytes(daily_sales_csv([('2024/5/1', 1000, 2), ('2024/5/3', 3000, 5)]))
        return self.run_cli('upload', str(upload_file))

    def test_store_registration_and_upload(self):
        exit_code, output = self.run_cli('add-store', '--name', '渋谷店', '--code', 'SHIBUYA')
        self.assertEqual(exit_code, 0)
        self.assertIn('店舗を追加しました: 渋谷店 (SHIBUYA)', output)

        exit_code, output = self.run_cli('stores')
        self.assertEqual(exit_code, 0)
        self.assertIn('SHIBUYA\t渋谷店', output)

        exit_code, _ = self.upload_sample()
        self.assertEqual(exit_code, 0)

        with open(self.data_dir / 'wald_monthly_data.json', encoding='utf-8') as f:
            saved = json.load(f)
        self.assertEqual(saved[0]['month'], '2024年5月')
        self.assertEqual(saved[0]['stores'][0]['data']['cafe']['totalSales'], 4000)

    def test_upload_with_unknown_store_fails(self):
        exit_code, output = self.upload_sample("OSAKA_日別売上(年月：2024_05).csv")

        self.assertEqual(exit_code, 1)
        self.assertIn('"OSAKA"', output)

    def test_duplicate_store_is_reported(self):
        self.run_cli('add-store', '--name', '渋谷店', '--code', 'SHIBUYA')

        exit_code, output = self.run_cli('add-store', '--name', '渋谷2号店', '--code', 'shibuya')

        self.assertEqual(exit_code, 1)
        self.assertIn('既に登録されています', output)

    def test_summary_export_backup_and_restore(self):
        self.run_cli('add-store', '--name', '渋谷店', '--code', 'SHIBUYA')
        self.upload_sample()

        exit_code, output = self.run_cli('summary', '--months', '2024年5月')
        self.assertEqual(exit_code, 0)
        self.assertIn('サマリー: 2024年5月', output)

        excel_path = self.temp_dir / 'summary.xlsx'
        exit_code, _ = self.run_cli('export', '--months', '2024年5月', '--output', str(excel_path))
        self.assertEqual(exit_code, 0)
        self.assertTrue(excel_path.exists())

        backup_dir = self.temp_dir / 'backups'
        exit_code, _ = self.run_cli('backup', '--output-dir', str(backup_dir))
        self.assertEqual(exit_code, 0)
        backups = list(backup_dir.glob('sales-dashboard-backup-*.json'))
        self.assertEqual(len(backups), 1)

        exit_code, _ = self.run_cli('clear', '--yes')
        self.assertEqual(exit_code, 0)
        self.assertFalse((self.data_dir / 'wald_monthly_data.json').exists())

        exit_code, output = self.run_cli('summary', '--months', '2024年5月')
        self.assertIn('データがありません', output)

        exit_code, output = self.run_cli('restore', str(backups[0]))
        self.assertEqual(exit_code, 0)
        self.assertIn('月次データの差分: あり', output)
        self.assertTrue((self.data_dir / 'wald_monthly_data.json').exists())

    def test_delete(self):
        self.run_cli('add-store', '--name', '渋谷店', '--code', 'SHIBUYA')
        self.upload_sample()
        with open(self.data_dir / 'wald_stores.json', encoding='utf-8') as f:
            store_id = json.load(f)[0]['id']

        exit_code, _ = self.run_cli('delete', '--month', '2024年5月', '--store-id', store_id)

        self.assertEqual(exit_code, 0)
        with open(self.data_dir / 'wald_monthly_data.json', encoding='utf-8') as f:
            self.assertEqual(json.load(f), [])

    def test_analyze_requires_api_key(self):
        exit_code, output = self.run_cli('analyze', '--month', '2024年5月')

        self.assertEqual(exit_code, 1)
        self.assertIn('APIキーが設定されていません', output)


if __name__ == '__main__':
    unittest.main()
