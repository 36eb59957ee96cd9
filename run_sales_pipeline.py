#!/usr/bin/env python3
"""
店舗売上集計システムの実行スクリプト
"""

import argparse
import sys
from pathlib import Path

from wald_sales import BackupManager, ConfigManager, ExcelHandler, UnifiedLogger, UploadPipeline
from wald_sales.ai_summary import MonthlyReportAnalyzer
from wald_sales.classifier import OpenAICompletionClient
from wald_sales.constants import CategoryConstants
from wald_sales.error_handling import SalesPipelineError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='店舗売上CSVの取り込み・集計')
    parser.add_argument('--config', type=Path, help='設定ファイル（JSON）のパス')
    parser.add_argument('--log-level', help='ログレベル（設定ファイルより優先）')

    subparsers = parser.add_subparsers(dest='command', required=True)

    upload = subparsers.add_parser('upload', help='CSVファイルを取り込む')
    upload.add_argument('files', nargs='+', type=Path)
    upload.add_argument('--store-code', help='店舗コード（省略時はファイル名から抽出）')

    summary = subparsers.add_parser('summary', help='選択した月・店舗のサマリーを表示')
    summary.add_argument('--months', nargs='+', required=True, help='例: 2024年5月')
    summary.add_argument('--stores', nargs='*', help='店舗ID（省略時は全店舗）')

    delete = subparsers.add_parser('delete', help='特定の月・店舗のデータを削除')
    delete.add_argument('--month', required=True)
    delete.add_argument('--store-id', required=True)

    clear = subparsers.add_parser('clear', help='全データを削除')
    clear.add_argument('--yes', action='store_true', help='確認なしで削除')

    subparsers.add_parser('stores', help='店舗一覧を表示')

    add_store = subparsers.add_parser('add-store', help='店舗を追加')
    add_store.add_argument('--name', required=True)
    add_store.add_argument('--code', required=True)

    backup = subparsers.add_parser('backup', help='バックアップを作成')
    backup.add_argument('--output-dir', type=Path, default=Path('.'))

    restore = subparsers.add_parser('restore', help='バックアップから復元')
    restore.add_argument('backup_file', type=Path)

    export = subparsers.add_parser('export', help='サマリーをExcelに出力')
    export.add_argument('--months', nargs='+', required=True)
    export.add_argument('--stores', nargs='*')
    export.add_argument('--output', type=Path, default=Path('売上サマリー.xlsx'))

    analyze = subparsers.add_parser('analyze', help='月次データをAIで分析')
    analyze.add_argument('--month', required=True)
    analyze.add_argument('--stores', nargs='*')

    return parser


def selected_store_ids(pipeline: UploadPipeline, stores):
    if stores:
        return stores
    return [store.id for store in pipeline.store_directory.load_stores()]


def cmd_upload(args, pipeline: UploadPipeline, logger: UnifiedLogger) -> int:
    summary = pipeline.process_paths(args.files, args.store_code)

    for result in summary.results:
        if result.success:
            logger.log_upload_result(
                result.file_name, result.month,
                pipeline.store_directory.get_store_name(result.store_id), result.categories
            )
        else:
            print(f"失敗: {result.file_name}: {result.error}")

    logger.log_processing_summary(
        summary.total_files, summary.successful_files, summary.failed_files,
        summary.processing_duration or 0.0
    )
    return 0 if summary.failed_files == 0 else 1


def cmd_summary(args, pipeline: UploadPipeline, logger: UnifiedLogger) -> int:
    summary = pipeline.sales_store.create_summary(args.months, selected_store_ids(pipeline, args.stores))
    if summary.is_empty():
        print("選択した期間のデータがありません。")
        return 0

    print(f"\n=== サマリー: {summary.month} ===")
    for category in CategoryConstants.SALES_CATEGORIES:
        data = summary.get_slot(category)
        if data is not None:
            logger.log_category_totals(CategoryConstants.LABELS[category], data.total_sales, data.total_guests)

    if summary.product_sales is not None:
        for bucket, values in summary.product_sales.to_dict().items():
            print(f"  商品 {bucket}: 10% {values['sales10']:,.0f}円 / 8% {values['sales8']:,.0f}円")
    return 0


def cmd_delete(args, pipeline: UploadPipeline, logger: UnifiedLogger) -> int:
    pipeline.sales_store.delete_store_data(args.month, args.store_id)
    return 0


def cmd_clear(args, pipeline: UploadPipeline, logger: UnifiedLogger) -> int:
    if not args.yes:
        answer = input("すべてのデータを削除します。よろしいですか？ (y/N): ")
        if answer.strip().lower() != 'y':
            print("中止しました。")
            return 0
    pipeline.sales_store.clear_all()
    return 0


def cmd_stores(args, pipeline: UploadPipeline, logger: UnifiedLogger) -> int:
    stores = pipeline.store_directory.load_stores()
    if not stores:
        print("店舗が登録されていません。")
        return 0
    for store in stores:
        print(f"{store.id}\t{store.code}\t{store.name}")
    return 0


def cmd_add_store(args, pipeline: UploadPipeline, logger: UnifiedLogger) -> int:
    store = pipeline.store_directory.add_store(args.name, args.code)
    print(f"店舗を追加しました: {store.name} ({store.code}) id={store.id}")
    return 0


def cmd_backup(args, pipeline: UploadPipeline, logger: UnifiedLogger) -> int:
    manager = BackupManager(pipeline.store_directory, pipeline.sales_store, logger)
    path = manager.write_backup(args.output_dir)
    logger.log_file_operation('バックアップ', str(path), True)
    return 0


def cmd_restore(args, pipeline: UploadPipeline, logger: UnifiedLogger) -> int:
    manager = BackupManager(pipeline.store_directory, pipeline.sales_store, logger)
    backup = manager.load_backup(args.backup_file)

    comparison = manager.compare_backup(backup)
    print(f"バックアップ作成日時: {comparison.backup_date}")
    print(f"店舗データの差分: {'あり' if comparison.stores_changed else 'なし'}")
    print(f"月次データの差分: {'あり' if comparison.monthly_data_changed else 'なし'}")

    manager.restore_backup(backup)
    return 0


def cmd_export(args, pipeline: UploadPipeline, logger: UnifiedLogger) -> int:
    summary = pipeline.sales_store.create_summary(args.months, selected_store_ids(pipeline, args.stores))
    path = ExcelHandler(logger).write_summary(summary, args.output)
    logger.log_file_operation('Excel出力', str(path), True)
    return 0


def cmd_analyze(args, pipeline: UploadPipeline, logger: UnifiedLogger, config: ConfigManager) -> int:
    ai_settings = config.get_ai_settings()
    if not ai_settings['api_key']:
        print("APIキーが設定されていません（OPENAI_API_KEY または ai.api_key）。")
        return 1

    summary = pipeline.sales_store.create_summary([args.month], selected_store_ids(pipeline, args.stores))
    analyzer = MonthlyReportAnalyzer(OpenAICompletionClient.from_settings(ai_settings, logger), logger)
    result = analyzer.analyze(args.month, summary)
    if not result.success:
        print(f"分析に失敗しました: {result.error}")
        return 1

    print(f"\n=== {args.month} の分析 ===")
    print(result.data.get('summary', ''))
    for insight in result.insights:
        print(f"- {insight}")
    return 0


COMMANDS = {
    'upload': cmd_upload,
    'summary': cmd_summary,
    'delete': cmd_delete,
    'clear': cmd_clear,
    'stores': cmd_stores,
    'add-store': cmd_add_store,
    'backup': cmd_backup,
    'restore': cmd_restore,
    'export': cmd_export,
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = ConfigManager(args.config)
    logging_settings = config.get_logging_settings()
    logger = UnifiedLogger(
        'wald_sales',
        args.log_level or logging_settings['log_level'],
        logging_settings['log_file']
    )
    config.logger = logger

    try:
        config.validate_configuration()
        logger.log_configuration_info(config.get_processing_settings())
        pipeline = UploadPipeline.from_config(config, logger)

        if args.command == 'analyze':
            return cmd_analyze(args, pipeline, logger, config)
        return COMMANDS[args.command](args, pipeline, logger)

    except SalesPipelineError as e:
        print(f"エラーが発生しました: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
