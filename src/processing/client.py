"""REST клиент сервиса удаления фона (remove.bg совместимый API)"""

from typing import Dict, Optional, Union
from pathlib import Path
import asyncio

import aiohttp
from loguru import logger

from src.exceptions import RemoveBgError


class RemoveBgClient:
    """Клиент для удаления фона через внешний HTTP сервис"""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.remove.bg/v1.0/removebg",
        timeout: int = 60,
        size: str = "auto"
    ):
        """
        Инициализация клиента

        Args:
            api_key: Ключ API (REMOVEBG_API_KEY)
            api_url: URL эндпоинта удаления фона
            timeout: Таймаут запроса в секундах
            size: Размер результата (auto/preview/full)
        """
        self.api_key = api_key
        self.api_url = api_url
        self.base_url = api_url.rsplit("/", 1)[0]
        self.timeout = timeout
        self.size = size
        self.session: Optional[aiohttp.ClientSession] = None

    async def connect(self):
        """Открыть HTTP сессию на всё время жизни приложения"""
        if self.session and not self.session.closed:
            logger.warning("Session already open")
            return

        self.session = aiohttp.ClientSession(headers={"X-Api-Key": self.api_key})
        logger.info(f"Background removal client connected ({self.base_url})")

    async def close(self):
        """Закрыть HTTP сессию"""
        if self.session and not self.session.closed:
            await self.session.close()
            logger.info("Background removal client session closed")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def check_health(self) -> bool:
        """
        Проверка доступности сервиса и ключа

        Returns:
            True если сервис отвечает 200, False иначе
        """
        try:
            await self.get_account()
            return True
        except (aiohttp.ClientError, asyncio.TimeoutError, RemoveBgError) as e:
            logger.warning(f"Background removal health check failed: {e}")
            return False

    async def get_account(self) -> Dict:
        """
        Информация об аккаунте (остаток кредитов)

        Raises:
            RemoveBgError: Сервис вернул ошибку
        """
        async with self.session.get(
            f"{self.base_url}/account",
            timeout=aiohttp.ClientTimeout(total=5)
        ) as response:
            if response.status >= 400:
                raise RemoveBgError(response.status, await response.text())
            return await response.json()

    async def remove_background(self, source: Union[Path, str]) -> bytes:
        """
        Удаление фона с изображения

        Args:
            source: Локальный путь к изображению или http(s) URL

        Returns:
            PNG изображение без фона

        Raises:
            FileNotFoundError: Локальный файл не найден
            RemoveBgError: Сервис вернул ошибку
            aiohttp.ClientError: Сетевая ошибка
        """
        data = aiohttp.FormData()
        data.add_field("size", self.size)

        if isinstance(source, str) and source.startswith(("http://", "https://")):
            data.add_field("image_url", source)
            logger.info(f"Removing background from URL: {source}")
        else:
            image_path = Path(source)
            if not image_path.exists():
                raise FileNotFoundError(f"Image not found: {image_path}")
            data.add_field(
                "image_file",
                image_path.read_bytes(),
                filename=image_path.name,
                content_type="application/octet-stream"
            )
            logger.info(f"Removing background from file: {image_path.name}")

        try:
            async with self.session.post(
                self.api_url,
                data=data,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if response.status >= 400:
                    message = await response.text()
                    logger.error(f"Background removal failed: status {response.status}")
                    raise RemoveBgError(response.status, message)
                image_data = await response.read()
                logger.success(f"✅ Background removed: {len(image_data)} bytes")
                return image_data
        except aiohttp.ClientError as e:
            logger.error(f"Failed to call background removal service: {e}")
            raise
