from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
import asyncio
import uuid


class QueueStatus(str, Enum):
    """Статусы очереди пользователя"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ResultStatus(str, Enum):
    """Статусы выполнения отдельной задачи"""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class BulkTask:
    """Задача массовой операции (одно изображение из пакета)"""
    resource: str
    payload: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "resource": self.resource, "payload": dict(self.payload)}


@dataclass
class TaskResult:
    """Результат обработки задачи"""
    task: BulkTask
    status: ResultStatus
    result: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"task": self.task.to_dict(), "status": self.status.value}
        if self.status == ResultStatus.SUCCESS:
            data["result"] = self.result
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class ProgressEvent:
    """Событие прогресса, отправляемое после каждой задачи"""
    task: BulkTask
    progress: int
    completed: int
    total: int
    status: ResultStatus
    error: Optional[str] = None
    type: str = "progress"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.type,
            "task": self.task.to_dict(),
            "progress": self.progress,
            "completed": self.completed,
            "total": self.total,
            "status": self.status.value,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class QueueSnapshot:
    """Снимок состояния очереди (только для чтения)"""
    tasks: List[BulkTask]
    status: QueueStatus
    current_index: int
    results: List[TaskResult]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "status": self.status.value,
            "current_index": self.current_index,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class UserQueue:
    """Изменяемое состояние очереди одного пользователя"""
    tasks: List[BulkTask] = field(default_factory=list)
    status: QueueStatus = QueueStatus.IDLE
    current_index: int = 0
    results: List[TaskResult] = field(default_factory=list)

    # Флаг активного прохода process_queue
    active: bool = False
    # Установлен = очередь не на паузе
    resumed: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    cancelled: bool = False

    def __post_init__(self):
        self.resumed.set()

    def snapshot(self) -> QueueSnapshot:
        return QueueSnapshot(
            tasks=list(self.tasks),
            status=self.status,
            current_index=self.current_index,
            results=list(self.results),
        )
