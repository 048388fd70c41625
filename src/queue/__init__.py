"""
Queue package - Хранилище очередей пользователей и последовательный процессор
"""

from src.queue.store import QueueStore
from src.queue.processor import QueueProcessor, PROGRESS_EVENT, COMPLETE_EVENT

__all__ = [
    "QueueStore",
    "QueueProcessor",
    "PROGRESS_EVENT",
    "COMPLETE_EVENT",
]
