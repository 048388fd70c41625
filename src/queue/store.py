from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional
from loguru import logger

from src.models.task import BulkTask, QueueSnapshot, QueueStatus, UserQueue


Processor = Callable[[BulkTask], Awaitable[Any]]


class QueueStore:
    """Хранилище очередей массовых операций (по одной на пользователя)"""

    def __init__(self):
        self._queues: Dict[Any, UserQueue] = {}
        self._processors: Dict[Any, Processor] = {}

    def add_to_queue(self, user_id: Any, tasks: Iterable[BulkTask],
                     processor: Optional[Processor] = None) -> None:
        """
        Добавление задач в очередь пользователя

        Очередь создаётся при первом вызове. Если проход обработки не активен,
        состояние прохода сбрасывается (status=idle, cursor=0, results=[]).
        Во время активного прохода задачи добавляются после курсора и
        обрабатываются тем же проходом.

        Args:
            user_id: ID пользователя
            tasks: Задачи для добавления
            processor: Обработчик задач (заменяет ранее зарегистрированный)
        """
        queue = self._queues.get(user_id)
        if queue is None:
            queue = UserQueue()
            self._queues[user_id] = queue

        tasks = list(tasks)
        if queue.active:
            queue.tasks.extend(tasks)
            logger.info(
                f"Appended {len(tasks)} tasks to active queue of user {user_id} "
                f"(total: {len(queue.tasks)})"
            )
        else:
            queue.tasks = queue.tasks + tasks
            queue.status = QueueStatus.IDLE
            queue.current_index = 0
            queue.results = []
            queue.cancelled = False
            queue.resumed.set()
            logger.info(f"Added {len(tasks)} tasks to queue of user {user_id} (total: {len(queue.tasks)})")

        if processor is not None:
            self._processors[user_id] = processor

    def get_queue_status(self, user_id: Any) -> Optional[QueueSnapshot]:
        """Снимок очереди или None, если очереди нет"""
        queue = self._queues.get(user_id)
        return queue.snapshot() if queue else None

    def pause_queue(self, user_id: Any) -> bool:
        queue = self._queues.get(user_id)
        if queue is None:
            return False
        queue.status = QueueStatus.PAUSED
        queue.resumed.clear()
        logger.info(f"Queue of user {user_id} paused at index {queue.current_index}")
        return True

    def resume_queue(self, user_id: Any) -> bool:
        """Возобновить очередь (только если она на паузе)"""
        queue = self._queues.get(user_id)
        if queue is None or queue.status != QueueStatus.PAUSED:
            return False
        queue.status = QueueStatus.RUNNING
        queue.resumed.set()
        logger.info(f"Queue of user {user_id} resumed")
        return True

    def cancel_queue(self, user_id: Any) -> bool:
        """
        Отмена очереди

        Текущая выполняемая задача не прерывается, следующая не начнётся.
        """
        queue = self._queues.get(user_id)
        if queue is None:
            return False
        queue.status = QueueStatus.CANCELLED
        queue.cancelled = True
        queue.tasks = []
        queue.current_index = 0
        # Будим проход, ожидающий на паузе
        queue.resumed.set()
        logger.info(f"Queue of user {user_id} cancelled")
        return True

    def clear_queue(self, user_id: Any) -> bool:
        """Полное удаление очереди и обработчика пользователя"""
        queue = self._queues.pop(user_id, None)
        self._processors.pop(user_id, None)
        if queue is None:
            return False
        queue.cancelled = True
        queue.resumed.set()
        logger.info(f"Queue of user {user_id} cleared")
        return True

    def get_queue(self, user_id: Any) -> Optional[UserQueue]:
        """Изменяемое состояние очереди (для процессора)"""
        return self._queues.get(user_id)

    def get_processor(self, user_id: Any) -> Optional[Processor]:
        return self._processors.get(user_id)

    def has_queue(self, user_id: Any) -> bool:
        return user_id in self._queues

    def user_ids(self) -> List[Any]:
        return list(self._queues)

    def __len__(self) -> int:
        return len(self._queues)
