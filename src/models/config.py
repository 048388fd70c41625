from pydantic import BaseModel, Field
from pathlib import Path
from typing import Dict, Optional


class ServerConfig(BaseModel):
    """Конфигурация WebSocket сервера уведомлений"""
    host: str = "127.0.0.1"
    port: int = 8765


class QueueConfig(BaseModel):
    """Конфигурация очереди"""
    max_batch_size: int = 100
    task_timeout_seconds: Optional[float] = None  # None = без таймаута


class RemoveBgConfig(BaseModel):
    """Конфигурация сервиса удаления фона"""
    api_url: str = "https://api.remove.bg/v1.0/removebg"
    api_key: str = ""
    timeout_seconds: int = 60
    size: str = "auto"


class PlanConfig(BaseModel):
    """Лимиты тарифного плана"""
    quota: int = 10


class QuotaConfig(BaseModel):
    """Конфигурация квот"""
    reset_period_days: int = 30
    plans: Dict[str, PlanConfig] = Field(default_factory=lambda: {
        "free": PlanConfig(quota=10),
        "pro": PlanConfig(quota=100),
        "premium": PlanConfig(quota=1000),
    })

    def quota_for(self, plan: str) -> int:
        """Квота плана (для неизвестного плана - квота free)"""
        config = self.plans.get(plan) or self.plans.get("free") or PlanConfig()
        return config.quota


class StorageConfig(BaseModel):
    """Конфигурация хранилища"""
    cleanup_after_hours: int = 24
    keep_results: bool = True


class LoggingConfig(BaseModel):
    """Конфигурация логирования"""
    level: str = "INFO"
    rotation: str = "100 MB"
    retention: str = "7 days"
    errors_rotation: str = "50 MB"
    errors_retention: str = "30 days"
    # Уровень для логгеров websockets и aiohttp
    library_level: str = "WARNING"


class Config(BaseModel):
    """Полная конфигурация приложения"""
    # Пути
    data_dir: Path = Path("data")
    logs_dir: Path = Path("logs")

    # Компоненты
    server: ServerConfig = ServerConfig()
    queue: QueueConfig = QueueConfig()
    removebg: RemoveBgConfig = RemoveBgConfig()
    quota: QuotaConfig = QuotaConfig()
    storage: StorageConfig = StorageConfig()
    logging: LoggingConfig = LoggingConfig()
