#!/usr/bin/env python3
"""
Bulk Image Queue - сервис массовой обработки изображений с push-уведомлениями
"""

import asyncio
import signal
import sys
from loguru import logger

import websockets

from src.utils.config_loader import load_config
from src.utils.logger import setup_logger
from src.notifications.bus import ProgressBus
from src.notifications.hub import WebSocketHub
from src.notifications.sinks import RoomSink
from src.processing.background_removal import make_background_removal_processor
from src.processing.client import RemoveBgClient
from src.queue.processor import QueueProcessor
from src.queue.store import QueueStore
from src.quota.gate import QuotaGate
from src.services.bulk import BulkService
from src.storage.file_manager import FileManager


class Application:
    """Главное приложение сервиса"""

    def __init__(self):
        """Инициализация приложения"""
        self.config = None
        self.removebg_client = None
        self.file_manager = None
        self.store = None
        self.bus = None
        self.queue_processor = None
        self.bulk_service = None
        self.hub = None
        self.ws_server = None
        self.shutdown_event = asyncio.Event()

    async def setup(self):
        """Настройка всех компонентов"""
        # 1. Загрузка конфигурации
        logger.info("Loading configuration...")
        self.config = load_config()

        # 2. Настройка логирования
        setup_logger(self.config.logs_dir, self.config.logging)
        logger.info("Configuration loaded successfully")

        # 3. Клиент удаления фона
        removebg_config = self.config.removebg
        if not removebg_config.api_key:
            logger.warning("REMOVEBG_API_KEY is not set, background removal requests will fail")
        self.removebg_client = RemoveBgClient(
            api_key=removebg_config.api_key,
            api_url=removebg_config.api_url,
            timeout=removebg_config.timeout_seconds,
            size=removebg_config.size
        )
        await self.removebg_client.connect()

        # 4. Файлы
        self.file_manager = FileManager(self.config.data_dir)

        # 5. Очереди и шина событий
        self.store = QueueStore()
        self.bus = ProgressBus()
        self.queue_processor = QueueProcessor(
            self.store,
            self.bus,
            task_timeout=self.config.queue.task_timeout_seconds
        )
        logger.info("Queue store and processor initialized")

        # 6. Массовые операции
        self.bulk_service = BulkService(
            self.queue_processor,
            QuotaGate(self.config.quota),
            default_processor=make_background_removal_processor(self.removebg_client, self.file_manager),
            max_batch_size=self.config.queue.max_batch_size
        )

        # 7. WebSocket комнаты: все события шины уходят в комнату user-<id>
        self.hub = WebSocketHub(on_command=self.bulk_service.handle_command)
        self.bus.subscribe(None, RoomSink(self.hub))

        logger.success("All components initialized successfully")

    async def start(self):
        """Запуск приложения"""
        logger.info("Starting application...")

        await self.file_manager.start_cleanup_task(
            interval_hours=1,
            max_age_hours=self.config.storage.cleanup_after_hours,
            keep_results=self.config.storage.keep_results
        )

        server_config = self.config.server
        self.ws_server = await websockets.serve(self.hub.handler, server_config.host, server_config.port)
        logger.success(f"🚀 Service listening on ws://{server_config.host}:{server_config.port}")
        logger.info("Press Ctrl+C to stop")

        await self.shutdown_event.wait()

    async def shutdown(self):
        """Graceful shutdown"""
        logger.info("Shutting down application...")

        # 1. Остановить WebSocket сервер
        if self.ws_server:
            self.ws_server.close()
            await self.ws_server.wait_closed()
        logger.info("WebSocket server stopped")

        # 2. Отменить фоновые проходы очередей
        if self.bulk_service:
            await self.bulk_service.shutdown()

        # 3. Остановить очистку файлов
        if self.file_manager:
            self.file_manager.stop_cleanup_task()

        # 4. Закрыть клиент удаления фона
        if self.removebg_client:
            await self.removebg_client.close()

        logger.success("Application stopped gracefully")


async def main():
    """Главная функция"""
    app = Application()

    def signal_handler(sig):
        """Обработчик SIGINT/SIGTERM"""
        logger.warning(f"Received signal {signal.Signals(sig).name}, initiating shutdown...")
        app.shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))

    try:
        await app.setup()
        await app.start()
        await app.shutdown()
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        await app.shutdown()
        sys.exit(1)


def run():
    """Точка входа консольной команды"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Application terminated by user")
    except Exception as e:
        logger.critical(f"Application crashed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
