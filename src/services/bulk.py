"""Массовые операции: проверка квоты, постановка в очередь, управление"""

import asyncio
from typing import Any, Dict, Iterable, Optional

from loguru import logger

from src.exceptions import ProcessorNotRegisteredError, QuotaError, QuotaExceededError
from src.models.account import Account
from src.models.task import BulkTask, QueueStatus, ResultStatus
from src.queue.processor import QueueProcessor
from src.queue.store import Processor
from src.quota.gate import QuotaGate


class BulkService:
    """Действия обработчиков запросов над очередью пользователя"""

    def __init__(
        self,
        processor: QueueProcessor,
        gate: QuotaGate,
        default_processor: Optional[Processor] = None,
        max_batch_size: int = 100
    ):
        """
        Args:
            processor: Процессор очередей (содержит store и bus)
            gate: Проверка квот
            default_processor: Обработчик задач по умолчанию
            max_batch_size: Максимум задач в одном запросе (из config.queue.max_batch_size)
        """
        self.processor = processor
        self.store = processor.store
        self.bus = processor.bus
        self.gate = gate
        self.default_processor = default_processor
        self.max_batch_size = max_batch_size

        self._accounts: Dict[Any, Account] = {}
        self._runs: Dict[Any, asyncio.Task] = {}
        # Квота, списанная при постановке и ещё не подтверждённая проходом
        self._reserved: Dict[Any, int] = {}

    def account_for(self, user_id: Any) -> Account:
        """Аккаунт пользователя (создаётся с планом free)"""
        account = self._accounts.get(user_id)
        if account is None:
            account = Account(user_id=user_id, subscription=self.gate.new_subscription())
            self._accounts[user_id] = account
        return account

    def register_account(self, account: Account) -> None:
        self._accounts[account.user_id] = account

    async def submit(
        self,
        account: Account,
        resources: Iterable[str],
        processor: Optional[Processor] = None
    ) -> Dict[str, Any]:
        """
        Поставить пакет изображений в очередь и запустить обработку в фоне

        Квота списывается сразу на весь пакет; после прохода возвращается
        за задачи, которые не завершились успешно (ошибка, отмена).

        Args:
            account: Аккаунт пользователя
            resources: Пути или URL изображений
            processor: Обработчик задач (по умолчанию - зарегистрированный ранее
                или default_processor)

        Returns:
            {"queued": n, "status": снимок очереди}

        Raises:
            ValueError: Пустой пакет или пакет больше max_batch_size
            QuotaError: Квота исчерпана или подписка истекла
            ProcessorNotRegisteredError: Нет обработчика задач
        """
        user_id = account.user_id
        resources = [r for r in resources if r]
        if not resources:
            raise ValueError("No images provided")
        if len(resources) > self.max_batch_size:
            raise ValueError(f"Too many images in one request (max {self.max_batch_size})")

        processor = processor or self.store.get_processor(user_id) or self.default_processor
        if processor is None:
            raise ProcessorNotRegisteredError(user_id)

        self.gate.check(account, requested=len(resources))
        self.register_account(account)
        self.gate.increment(account, len(resources))
        self._reserved[user_id] = self._reserved.get(user_id, 0) + len(resources)

        # Новый пакет заменяет завершённый, а не дописывается к нему
        queue = self.store.get_queue(user_id)
        if queue is not None and not queue.active and queue.status in (
            QueueStatus.COMPLETED, QueueStatus.CANCELLED
        ):
            self.store.clear_queue(user_id)

        tasks = [BulkTask(resource=r) for r in resources]
        self.store.add_to_queue(user_id, tasks, processor)
        self._ensure_running(user_id)

        logger.info(f"User {user_id} submitted {len(tasks)} images")
        return {
            "queued": len(tasks),
            "status": self.store.get_queue_status(user_id).to_dict()
        }

    def _ensure_running(self, user_id: Any) -> None:
        run = self._runs.get(user_id)
        if run is not None and not run.done():
            return
        self._runs[user_id] = asyncio.create_task(self._run(user_id))

    async def _run(self, user_id: Any) -> None:
        """Фоновые проходы, пока в очереди есть необработанный пакет"""
        succeeded = 0
        try:
            while True:
                outcome = await self.processor.process_queue(user_id)
                succeeded += sum(
                    1 for r in outcome["results"] if r["status"] == ResultStatus.SUCCESS.value
                )

                queue = self.store.get_queue(user_id)
                if queue is None or not queue.tasks:
                    break
                if queue.status == QueueStatus.CANCELLED:
                    # Пакет поставлен после отмены, пока отменённый проход дорабатывал задачу
                    self.store.add_to_queue(user_id, [])
                elif queue.status != QueueStatus.IDLE:
                    break
        except asyncio.CancelledError:
            logger.info(f"Background run of user {user_id} cancelled")
            raise
        except Exception as e:
            logger.exception(f"Background run of user {user_id} failed: {e}")
        finally:
            self._settle(user_id, succeeded)
            if self._runs.get(user_id) is asyncio.current_task():
                del self._runs[user_id]

    def _settle(self, user_id: Any, succeeded: int) -> None:
        """Вернуть квоту за задачи, которые не завершились успешно"""
        reserved = self._reserved.pop(user_id, 0)
        account = self._accounts.get(user_id)
        if account is not None and reserved > succeeded:
            self.gate.release(account, reserved - succeeded)

    async def wait(self, user_id: Any) -> None:
        """Дождаться завершения фоновой обработки пользователя"""
        run = self._runs.get(user_id)
        if run is not None:
            await asyncio.gather(run, return_exceptions=True)

    def status(self, user_id: Any) -> Optional[Dict[str, Any]]:
        snapshot = self.store.get_queue_status(user_id)
        return snapshot.to_dict() if snapshot else None

    async def pause(self, user_id: Any) -> bool:
        ok = self.store.pause_queue(user_id)
        if ok:
            await self.bus.publish(user_id, "queue-paused", {"message": "Queue paused"})
        return ok

    async def resume(self, user_id: Any) -> bool:
        ok = self.store.resume_queue(user_id)
        if ok:
            await self.bus.publish(user_id, "queue-resumed", {"message": "Queue resumed"})
        return ok

    async def cancel(self, user_id: Any) -> bool:
        ok = self.store.cancel_queue(user_id)
        if ok:
            await self.bus.publish(user_id, "queue-cancelled", {"message": "Queue cancelled"})
        return ok

    def clear(self, user_id: Any) -> bool:
        return self.store.clear_queue(user_id)

    async def handle_command(self, user_id: Any, message: Dict[str, Any]) -> Dict[str, Any]:
        """
        Обработка команды от WebSocket клиента

        Args:
            user_id: ID пользователя из join
            message: {"action": "status|pause|resume|cancel|submit", ...}

        Returns:
            Ответ {"ok": bool, ...}
        """
        action = message.get("action")

        if action == "status":
            return {"ok": True, "status": self.status(user_id)}
        if action == "pause":
            return {"ok": await self.pause(user_id)}
        if action == "resume":
            return {"ok": await self.resume(user_id)}
        if action == "cancel":
            return {"ok": await self.cancel(user_id)}
        if action == "submit":
            try:
                reply = await self.submit(self.account_for(user_id), message.get("resources") or [])
            except QuotaExceededError as e:
                return {"ok": False, "error": str(e), "quota": e.to_dict()}
            except (QuotaError, ValueError, ProcessorNotRegisteredError) as e:
                return {"ok": False, "error": str(e)}
            return {"ok": True, **reply}

        return {"ok": False, "error": f"unknown action: {action}"}

    async def shutdown(self) -> None:
        """Отмена всех фоновых проходов"""
        runs = list(self._runs.values())
        for run in runs:
            run.cancel()
        if runs:
            await asyncio.gather(*runs, return_exceptions=True)
        self._runs.clear()
        # Проходы, отменённые до старта, не успели вернуть квоту
        for user_id in list(self._reserved):
            self._settle(user_id, 0)
        logger.info(f"Bulk service stopped ({len(runs)} runs cancelled)")
