"""
Models package - Pydantic модели конфигурации и модели задач очереди
"""

from src.models.config import (
    Config,
    ServerConfig,
    QueueConfig,
    RemoveBgConfig,
    PlanConfig,
    QuotaConfig,
    StorageConfig,
    LoggingConfig
)
from src.models.task import (
    BulkTask,
    TaskResult,
    ProgressEvent,
    QueueSnapshot,
    QueueStatus,
    ResultStatus,
    UserQueue
)
from src.models.account import Account, Plan, Role, Subscription

__all__ = [
    # Config models
    "Config",
    "ServerConfig",
    "QueueConfig",
    "RemoveBgConfig",
    "PlanConfig",
    "QuotaConfig",
    "StorageConfig",
    "LoggingConfig",
    # Task models
    "BulkTask",
    "TaskResult",
    "ProgressEvent",
    "QueueSnapshot",
    "QueueStatus",
    "ResultStatus",
    "UserQueue",
    # Account models
    "Account",
    "Plan",
    "Role",
    "Subscription",
]
