"""
ユーティリティパッケージ
"""

from .encoding_detector import EncodingDetector
from .numbers import parse_number, as_plain_number

__all__ = ['EncodingDetector', 'parse_number', 'as_plain_number']
