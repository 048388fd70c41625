import asyncio
import math
from typing import Any, Dict, List, Optional
from loguru import logger

from src.exceptions import ProcessorNotRegisteredError
from src.models.task import BulkTask, ProgressEvent, QueueStatus, ResultStatus, TaskResult, UserQueue
from src.notifications.bus import ProgressBus
from src.notifications.sinks import CallbackSink, RoomEmitter, RoomSink
from src.queue.store import Processor, QueueStore


PROGRESS_EVENT = "bulk-progress"
COMPLETE_EVENT = "bulk-complete"


def progress_percent(completed: int, total: int) -> int:
    """Процент выполнения с округлением половины вверх (33, 67, 100)"""
    if total <= 0:
        return 100
    return int(math.floor(completed * 100 / total + 0.5))


class QueueProcessor:
    """Последовательный обработчик очереди пользователя"""

    def __init__(
        self,
        store: QueueStore,
        bus: Optional[ProgressBus] = None,
        task_timeout: Optional[float] = None
    ):
        """
        Args:
            store: Хранилище очередей
            bus: Шина событий прогресса (создаётся, если не передана)
            task_timeout: Таймаут одной задачи в секундах (None = без таймаута,
                из config.queue.task_timeout_seconds)
        """
        self.store = store
        self.bus = bus or ProgressBus()
        self.task_timeout = task_timeout

    async def process_queue(
        self,
        user_id: Any,
        notifier: Optional[RoomEmitter] = None,
        on_progress=None
    ) -> Dict[str, List[Dict[str, Any]]]:
        """
        Обработка очереди пользователя от текущего курсора до конца

        Args:
            user_id: ID пользователя
            notifier: emitter с комнатами (emit(channel, event, payload)), опционально
            on_progress: callback(payload) для событий прогресса, опционально

        Returns:
            {"results": [...]} с результатами задач, обработанных в этом проходе

        Raises:
            ProcessorNotRegisteredError: Обработчик для пользователя не зарегистрирован
        """
        queue = self.store.get_queue(user_id)
        if queue is None or not queue.tasks:
            return {"results": []}

        if queue.active:
            logger.warning(f"Queue of user {user_id} is already being processed")
            return {"results": []}

        processor = self.store.get_processor(user_id)
        if processor is None:
            raise ProcessorNotRegisteredError(user_id)

        unsubscribers = []
        if on_progress is not None:
            unsubscribers.append(
                self.bus.subscribe(user_id, CallbackSink(on_progress, events=(PROGRESS_EVENT,)))
            )
        if notifier is not None:
            unsubscribers.append(self.bus.subscribe(user_id, RoomSink(notifier)))

        try:
            results = await self._run(user_id, queue, processor)
        finally:
            for unsubscribe in unsubscribers:
                unsubscribe()

        return {"results": [r.to_dict() for r in results]}

    async def _run(self, user_id: Any, queue: UserQueue, processor: Processor) -> List[TaskResult]:
        queue.active = True
        queue.cancelled = False
        queue.status = QueueStatus.RUNNING
        queue.resumed.set()

        # Отмена заменяет queue.tasks пустым списком, а добавление во время
        # прохода расширяет этот же список
        tasks = queue.tasks
        results: List[TaskResult] = []
        index = queue.current_index
        logger.info(f"Processing queue of user {user_id}: {len(tasks) - index} tasks from index {index}")

        try:
            while index < len(tasks):
                if queue.cancelled:
                    break

                if queue.status == QueueStatus.PAUSED:
                    logger.info(f"Queue of user {user_id} waiting for resume at index {index}")
                    while queue.status == QueueStatus.PAUSED and not queue.cancelled:
                        await queue.resumed.wait()
                    if queue.cancelled:
                        break

                task = tasks[index]
                queue.current_index = index
                current = self.store.get_processor(user_id) or processor

                result = await self._execute(current, task)
                results.append(result)

                completed = index + 1
                total = len(tasks)
                event = ProgressEvent(
                    task=task,
                    progress=progress_percent(completed, total),
                    completed=completed,
                    total=total,
                    status=result.status,
                    error=result.error
                )
                await self.bus.publish(user_id, PROGRESS_EVENT, event.to_dict())
                index += 1
        except asyncio.CancelledError:
            queue.status = QueueStatus.CANCELLED
            queue.results = results
            logger.warning(f"Processing of user {user_id} interrupted after {len(results)} tasks")
            raise
        finally:
            queue.active = False

        queue.status = QueueStatus.CANCELLED if queue.cancelled else QueueStatus.COMPLETED
        queue.results = results

        succeeded = sum(1 for r in results if r.status == ResultStatus.SUCCESS)
        failed = len(results) - succeeded
        if queue.status == QueueStatus.CANCELLED:
            logger.warning(f"Queue of user {user_id} cancelled after {len(results)} tasks")
        else:
            logger.success(f"Queue of user {user_id} completed: {succeeded} succeeded, {failed} failed")

        await self.bus.publish(user_id, COMPLETE_EVENT, {
            "type": "complete",
            "status": queue.status.value,
            "completed": len(results),
            "total": len(tasks),
            "succeeded": succeeded,
            "failed": failed
        })
        return results

    async def _execute(self, processor: Processor, task: BulkTask) -> TaskResult:
        """Выполнение одной задачи; ошибка записывается в результат"""
        try:
            if self.task_timeout:
                value = await asyncio.wait_for(processor(task), timeout=self.task_timeout)
            else:
                value = await processor(task)
        except Exception as e:
            if isinstance(e, asyncio.TimeoutError) and self.task_timeout:
                error = f"Processing timeout ({self.task_timeout}s)"
            else:
                error = str(e) or e.__class__.__name__
            logger.error(f"Task {task.id[:8]} failed: {error}")
            return TaskResult(task=task, status=ResultStatus.FAILED, error=error)

        logger.debug(f"Task {task.id[:8]} done: {task.resource}")
        return TaskResult(task=task, status=ResultStatus.SUCCESS, result=value)
