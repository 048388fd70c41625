"""
Bulk Image Queue

Сервис массовой обработки изображений: очередь задач на пользователя,
удаление фона через внешний API, квоты подписок и push-уведомления о прогрессе.
"""

__version__ = "1.0.0"
__description__ = "Per-user bulk image processing queue with progress notifications"

from src.utils.config_loader import load_config
from src.utils.logger import setup_logger

__all__ = [
    "load_config",
    "setup_logger",
]
