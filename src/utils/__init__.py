"""
Utilities package - Загрузка конфигурации (config.yaml + .env) и настройка loguru
"""

from src.utils.config_loader import load_config
from src.utils.logger import setup_logger

__all__ = [
    "load_config",
    "setup_logger",
]
