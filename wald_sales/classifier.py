"""
外部テキスト生成サービス（AI）との連携
形式判定のフォールバックに使う分類器と、チャット補完クライアント
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

import requests

from .constants import FileType
from .error_handling.exceptions import ClassificationError
from .messages import MessageTemplates

FORMAT_SYSTEM_PROMPT = 'あなたは売上データ分析の専門家です。ファイルタイプを1語で答えてください。'
FORMAT_PROMPT_TEMPLATE = (
    "以下は売上CSVデータのサンプルです。ファイルタイプを次から1つだけ日本語で答えてください："
    "日別売上, パーティ売上, 商品別売上。\n---\n{sample}"
)
DEFAULT_SYSTEM_PROMPT = 'あなたは売上データ分析の専門家です。'


class TextCompletionClient(ABC):
    """プロンプトを受け取り文字列を返す補完サービス"""

    @abstractmethod
    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        pass


class OpenAICompletionClient(TextCompletionClient):
    """OpenAI Chat Completions API クライアント"""

    def __init__(self, api_key: str, api_url: str = 'https://api.openai.com/v1/chat/completions',
                 model: str = 'gpt-3.5-turbo', timeout_seconds: float = 30, session=None, logger=None):
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, settings: dict, logger=None) -> 'OpenAICompletionClient':
        """ConfigManager.get_ai_settings() の値から生成"""
        return cls(
            api_key=settings.get('api_key', ''),
            api_url=settings.get('api_url') or 'https://api.openai.com/v1/chat/completions',
            model=settings.get('model') or 'gpt-3.5-turbo',
            timeout_seconds=settings.get('timeout_seconds', 30),
            logger=logger
        )

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        body = {
            'model': self.model,
            'messages': [
                {'role': 'system', 'content': system_prompt or DEFAULT_SYSTEM_PROMPT},
                {'role': 'user', 'content': prompt}
            ]
        }
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.api_key}'
        }

        try:
            response = self.session.post(self.api_url, json=body, headers=headers, timeout=self.timeout_seconds)
        except requests.RequestException as e:
            raise ClassificationError(MessageTemplates.format('ai_request_failed', status='-', error=str(e)))

        if not response.ok:
            try:
                error_data = response.json()
                error_message = (error_data.get('error') or {}).get('message') or str(error_data)
            except ValueError:
                error_message = 'No error message in response'
            raise ClassificationError(
                MessageTemplates.format('ai_request_failed', status=response.status_code, error=error_message)
            )

        try:
            data = response.json()
            return data['choices'][0]['message']['content']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ClassificationError(MessageTemplates.format('ai_response_invalid', error=str(e)))


class FormatClassifier(ABC):
    """サンプル行からCSV形式を推定する分類器"""

    @abstractmethod
    def classify(self, sample_rows: Sequence[Sequence[str]]) -> FileType:
        pass


def parse_format_answer(answer) -> FileType:
    """AIの回答（"日別" / "パーティ" / "商品"）を形式に変換"""
    if not isinstance(answer, str):
        return FileType.UNKNOWN
    if '日別' in answer:
        return FileType.DAILY_SALES
    if 'パーティ' in answer:
        return FileType.PARTY
    if '商品' in answer:
        return FileType.PRODUCT_SALES_BY_TAX_RATE
    return FileType.UNKNOWN


class AIFormatClassifier(FormatClassifier):
    """テキスト補完サービスに問い合わせて形式を推定"""

    def __init__(self, client: TextCompletionClient, logger=None):
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    def build_prompt(self, sample_rows: Sequence[Sequence[str]]) -> str:
        sample = "\n".join(",".join(str(cell) for cell in row) for row in sample_rows)
        return FORMAT_PROMPT_TEMPLATE.format(sample=sample)

    def classify(self, sample_rows: Sequence[Sequence[str]]) -> FileType:
        answer = self.client.complete(self.build_prompt(sample_rows), FORMAT_SYSTEM_PROMPT)
        file_type = parse_format_answer(answer)
        self.logger.info(f"AI形式判定の回答: {str(answer)[:50]} -> {file_type.value}")
        return file_type

