"""Управление входными и выходными файлами"""

import asyncio
from pathlib import Path
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import urlparse
from loguru import logger


class FileManager:
    """Управление файлами сервиса"""

    def __init__(self, data_dir: Path):
        """
        Args:
            data_dir: Базовая директория для данных (из config.data_dir)
        """
        self.data_dir = data_dir
        self.input_dir = data_dir / "input"
        self.output_dir = data_dir / "output"

        self._cleanup_task: Optional[asyncio.Task] = None

        # Создать директории если не существуют
        for dir_path in [self.input_dir, self.output_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

        logger.info(f"FileManager initialized with data_dir: {data_dir}")

    def resolve_source(self, resource: str):
        """
        Источник изображения для задачи

        http(s) URL возвращается как есть, относительный путь считается
        относительно data_dir.
        """
        if resource.startswith(("http://", "https://")):
            return resource
        path = Path(resource)
        return path if path.is_absolute() else self.data_dir / path

    def get_output_path(self, resource: str, prefix: str = "bg_removed_") -> Path:
        """
        Путь для сохранения результата

        Args:
            resource: Путь или URL исходного изображения
            prefix: Префикс имени файла

        Returns:
            output/<prefix><имя исходника>.png
        """
        if resource.startswith(("http://", "https://")):
            name = Path(urlparse(resource).path).stem or "image"
        else:
            name = Path(resource).stem
        return self.output_dir / f"{prefix}{name}.png"

    async def cleanup_old_files(self, max_age_hours: int = 24,
                               keep_results: bool = True) -> int:
        """
        Очистка старых файлов

        Args:
            max_age_hours: Максимальный возраст файла в часах (из config.storage.cleanup_after_hours)
            keep_results: Сохранять результаты (из config.storage.keep_results)

        Returns:
            Количество удаленных файлов
        """
        cutoff_time = datetime.now() - timedelta(hours=max_age_hours)
        total_removed = await self._cleanup_directory(self.input_dir, cutoff_time)

        if not keep_results:
            total_removed += await self._cleanup_directory(self.output_dir, cutoff_time)

        if total_removed > 0:
            logger.info(f"Cleaned up {total_removed} old files")
        return total_removed

    async def _cleanup_directory(self, directory: Path, cutoff_time: datetime) -> int:
        removed_count = 0

        if not directory.exists():
            return 0

        for file_path in directory.iterdir():
            if not file_path.is_file():
                continue

            try:
                file_mtime = datetime.fromtimestamp(file_path.stat().st_mtime)

                if file_mtime < cutoff_time:
                    file_path.unlink()
                    removed_count += 1
                    logger.debug(f"Removed old file: {file_path}")
            except OSError as e:
                logger.warning(f"Failed to delete {file_path}: {e}")

        return removed_count

    async def start_cleanup_task(self, interval_hours: int = 1,
                                 max_age_hours: int = 24,
                                 keep_results: bool = True):
        """
        Запуск периодической очистки файлов

        Args:
            interval_hours: Интервал проверки в часах
            max_age_hours: Максимальный возраст файлов
            keep_results: Сохранять результаты
        """
        logger.info(
            f"Starting file cleanup task "
            f"(interval: {interval_hours}h, max_age: {max_age_hours}h, keep_results: {keep_results})"
        )

        async def cleanup_loop():
            while True:
                await asyncio.sleep(interval_hours * 3600)
                try:
                    await self.cleanup_old_files(max_age_hours, keep_results)
                except Exception as e:
                    logger.error(f"Cleanup task error: {e}")

        self._cleanup_task = asyncio.create_task(cleanup_loop())

    def stop_cleanup_task(self):
        """Остановка периодической очистки"""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            self._cleanup_task = None
            logger.info("File cleanup task stopped")
