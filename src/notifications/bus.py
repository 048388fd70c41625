"""Внутренний поток событий прогресса"""

import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from loguru import logger


Handler = Callable[[Any, str, Dict[str, Any]], Union[None, Awaitable[None]]]


class ProgressBus:
    """
    Шина событий: процессор публикует, адаптеры подписываются

    Подписчик получает (user_id, event_name, payload). Подписка с user_id=None
    получает события всех пользователей.
    """

    def __init__(self):
        self._subscribers: List[Tuple[Optional[Any], Handler]] = []

    def subscribe(self, user_id: Optional[Any], handler: Handler) -> Callable[[], None]:
        """
        Добавить подписчика

        Args:
            user_id: ID пользователя или None для всех пользователей
            handler: sync или async функция handler(user_id, event_name, payload)

        Returns:
            Функция отписки
        """
        entry = (user_id, handler)
        self._subscribers.append(entry)

        def unsubscribe():
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    async def publish(self, user_id: Any, event_name: str, payload: Dict[str, Any]) -> int:
        """
        Доставить событие подписчикам в порядке подписки

        Ошибка одного подписчика не влияет на остальных.

        Returns:
            Количество подписчиков, получивших событие
        """
        delivered = 0
        for target, handler in list(self._subscribers):
            if target is not None and target != user_id:
                continue
            try:
                result = handler(user_id, event_name, payload)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as e:
                logger.warning(f"Subscriber failed on {event_name} for user {user_id}: {e}")
        return delivered

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
