"""
Processing package - Клиент удаления фона и обработчик задач очереди
"""

from src.processing.client import RemoveBgClient
from src.processing.background_removal import make_background_removal_processor

__all__ = [
    "RemoveBgClient",
    "make_background_removal_processor",
]
