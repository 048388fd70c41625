"""Логирование сервиса: loguru + перехват логов websockets и aiohttp"""

import logging
import sys
from pathlib import Path
from typing import Optional
from loguru import logger

from src.models.config import LoggingConfig


# Библиотеки, которые пишут через стандартный logging
LIBRARY_LOGGERS = ("websockets", "aiohttp")

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


class InterceptHandler(logging.Handler):
    """Перенаправление записей стандартного logging в loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Пропускаем кадры модуля logging, чтобы в логе было место вызова
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def intercept_library_logs(level: str = "WARNING") -> None:
    """Подключить логгеры websockets/aiohttp к sink'ам loguru"""
    handler = InterceptHandler()
    for name in LIBRARY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.handlers = [handler]
        library_logger.setLevel(level)
        library_logger.propagate = False


def setup_logger(logs_dir: Path = Path("logs"), config: Optional[LoggingConfig] = None) -> logger:
    """
    Настройка логирования с loguru

    Args:
        logs_dir: Директория для service.log и errors.log
        config: Уровни, ротация и хранение (из config.logging)
    """
    config = config or LoggingConfig()
    logs_dir = Path(logs_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()

    # Консоль (цветной вывод)
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=config.level,
        colorize=True
    )

    # Общий лог сервиса: очереди, квоты, WebSocket подключения
    logger.add(
        logs_dir / "service.log",
        rotation=config.rotation,
        retention=config.retention,
        level=config.level,
        format=FILE_FORMAT,
        backtrace=True,
        diagnose=True
    )

    # Только ошибки: упавшие задачи, ошибки remove.bg, падения фоновых проходов
    logger.add(
        logs_dir / "errors.log",
        rotation=config.errors_rotation,
        retention=config.errors_retention,
        level="ERROR",
        format=FILE_FORMAT,
        backtrace=True,
        diagnose=True
    )

    intercept_library_logs(config.library_level)

    logger.info(f"Logger initialized (level {config.level}, libraries {config.library_level})")
    return logger
