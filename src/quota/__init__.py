"""
Quota package - Проверка подписок и месячных квот
"""

from src.quota.gate import QuotaGate

__all__ = [
    "QuotaGate",
]
