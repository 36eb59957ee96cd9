"""
数値変換ユーティリティ
"""
import math
import re

# 数字・マイナス・小数点以外を除去した後、先頭の数値部分だけを読む
_NON_NUMERIC = re.compile(r'[^0-9.\-]')
_LEADING_NUMBER = re.compile(r'-?(?:\d+(?:\.\d*)?|\.\d+)')


def parse_number(value) -> float:
    """CSVセルを数値に変換する

    通貨記号や桁区切りを含む値も読み取り、読めない値は 0 とする。
    例: "¥12,345" -> 12345, "" -> 0, None -> 0, "abc" -> 0
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return 0 if isinstance(value, float) and math.isnan(value) else value

    cleaned = _NON_NUMERIC.sub('', str(value))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0

    number = float(match.group(0))
    return int(number) if number.is_integer() else number


def as_plain_number(value) -> float:
    """numpy型などを JSON 保存可能な int / float に変換"""
    number = float(value)
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number
