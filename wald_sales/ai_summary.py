"""
AIによる売上サマリー・チャット用データ整形
AIの失敗は画面にエラー状態として表示するだけで、集計処理は止めない
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import CategoryConstants
from .data_models import WaldData

REPORT_SYSTEM_PROMPT = (
    "あなたは売上データ分析の専門家です。\n"
    "必ず指定されたJSON形式で返してください。\n"
    "totalSales, totalGuests, avgSpendは数値で返してください。\n"
    "topCategoryは最も売上が高いカテゴリ（cafe, party3F, party4F）を返してください。"
)

REPORT_PROMPT_TEMPLATE = """以下は{month}の売上データです。

データ構造:
- cafe: {{ totalSales: 数値, totalGuests: 数値, avgSpend: 数値 }}
- party3F: {{ totalSales: 数値, totalGuests: 数値, avgSpend: 数値 }}
- party4F: {{ totalSales: 数値, totalGuests: 数値, avgSpend: 数値 }}

以下のJSON形式で返してください:
{{
  "summary": {{
    "month": "{month}",
    "totalSales": 数値,
    "totalGuests": 数値,
    "avgSpend": 数値,
    "topCategory": "カテゴリ名"
  }},
  "insights": ["インサイト1", "インサイト2", "インサイト3"]
}}

売上データ:
{data}"""

TIME_SERIES_LIMIT = 20

_CODE_FENCE = re.compile(r'^```(?:json)?\s*|\s*```$')


@dataclass
class AnalysisResult:
    """AI分析の結果（失敗時は error に内容を入れる）"""
    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    raw_text: Optional[str] = None
    error: Optional[str] = None

    @property
    def insights(self) -> List[str]:
        return list(self.data.get('insights') or [])


def parse_json_answer(text: str) -> Dict[str, Any]:
    """AIの回答からJSONを取り出す（```json ... ``` の囲みにも対応）"""
    cleaned = _CODE_FENCE.sub('', (text or '').strip())
    data = json.loads(cleaned)
    if not isinstance(data, dict):
        raise ValueError('JSONオブジェクトではありません')
    return data


class MonthlyReportAnalyzer:
    """月次サマリーをAIに分析させるクラス"""

    def __init__(self, client, logger=None):
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    def build_prompt(self, month: str, summary: WaldData) -> str:
        category_totals = {}
        for category in CategoryConstants.SALES_CATEGORIES:
            data = summary.get_slot(category)
            if data is not None:
                category_totals[category] = {
                    'totalSales': data.total_sales,
                    'totalGuests': data.total_guests,
                    'avgSpend': data.avg_spend,
                }
        return REPORT_PROMPT_TEMPLATE.format(
            month=month,
            data=json.dumps(category_totals, ensure_ascii=False, indent=2)
        )

    def analyze(self, month: str, summary: WaldData) -> AnalysisResult:
        """サマリーを分析（例外は送出せず AnalysisResult.error に格納）"""
        try:
            text = self.client.complete(self.build_prompt(month, summary), REPORT_SYSTEM_PROMPT)
        except Exception as e:
            self.logger.warning(f"AI分析に失敗しました: {str(e)}")
            return AnalysisResult(success=False, error=f"AI分析に失敗しました: {str(e)}")

        try:
            data = parse_json_answer(text)
        except ValueError as e:
            self.logger.warning(f"AI分析の応答を解析できませんでした: {str(e)}")
            return AnalysisResult(success=False, raw_text=text, error=f"AIの応答を解析できませんでした: {str(e)}")

        return AnalysisResult(success=True, data=data, raw_text=text)


def format_sales_data_for_ai(sales_store, store_directory, selected_months: List[str],
                             selected_store_ids: List[str]) -> str:
    """AIチャットに渡す売上データのテキストを作成"""
    monthly_data = sales_store.load_all()
    if not monthly_data:
        return 'データがありません。'

    store_names = [store_directory.get_store_name(store_id) for store_id in selected_store_ids]
    lines = [
        f"現在選択されている期間: {', '.join(selected_months)}",
        f"選択店舗: {', '.join(store_names)}",
        ''
    ]

    time_series = sales_store.extract_time_series(selected_months, selected_store_ids)
    if time_series:
        lines.append('日次売上データ:')
        for entry in time_series[:TIME_SERIES_LIMIT]:
            lines.append(
                f"{entry.month} {entry.date} ({CategoryConstants.LABELS[entry.category]}): "
                f"売上{entry.sales:,.0f}円, 客数{entry.guests:,.0f}人, 客単価{entry.avg_spend:,.0f}円"
            )
        lines.append('')

    for monthly in monthly_data:
        if monthly.month not in selected_months:
            continue
        lines.append(f"{monthly.month}のサマリー:")
        for store_data in monthly.stores:
            if store_data.store.id not in selected_store_ids:
                continue
            for category in CategoryConstants.SALES_CATEGORIES:
                data = store_data.data.get_slot(category)
                if data is not None:
                    lines.append(
                        f"  {store_data.store.name} {CategoryConstants.LABELS[category]}: "
                        f"売上{data.total_sales:,.0f}円, 客数{data.total_guests:,.0f}人"
                    )
        lines.append('')

    return "\n".join(lines)
