"""Обработчик задач удаления фона"""

import asyncio
from typing import Any, Dict

from loguru import logger

from src.models.task import BulkTask
from src.processing.client import RemoveBgClient
from src.queue.store import Processor
from src.storage.file_manager import FileManager


def make_background_removal_processor(client: RemoveBgClient, files: FileManager) -> Processor:
    """
    Создать обработчик задач для очереди

    Обработчик берёт task.resource (путь или URL), отправляет изображение
    в сервис удаления фона и сохраняет PNG в output.

    Args:
        client: Подключенный RemoveBgClient
        files: FileManager для путей входа и выхода

    Returns:
        async функция processor(task) -> {"file": путь к результату}
    """

    async def process(task: BulkTask) -> Dict[str, Any]:
        source = files.resolve_source(task.resource)
        image_data = await client.remove_background(source)

        output_path = files.get_output_path(task.resource)
        await asyncio.to_thread(output_path.write_bytes, image_data)
        logger.debug(f"Task {task.id[:8]} saved result: {output_path}")

        return {"file": str(output_path), "size": len(image_data)}

    return process
