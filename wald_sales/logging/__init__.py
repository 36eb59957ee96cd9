"""
ロギングパッケージ
"""

from .unified_logger import UnifiedLogger

__all__ = ['UnifiedLogger']
