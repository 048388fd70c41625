"""
Services package - Массовые операции поверх очереди
"""

from src.services.bulk import BulkService

__all__ = [
    "BulkService",
]
