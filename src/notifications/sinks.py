"""Адаптеры шины событий"""

import inspect
from typing import Any, Callable, Dict, Iterable, Optional, Protocol


class RoomEmitter(Protocol):
    """Любой pub/sub с комнатами: emit(channel, event_name, payload)"""

    def emit(self, channel: str, event_name: str, payload: Dict[str, Any]): ...


def user_room(user_id: Any) -> str:
    return f"user-{user_id}"


class CallbackSink:
    """
    Передаёт payload в обычный callback (sync или async)

    Args:
        callback: callback(payload)
        events: Имена событий для пересылки (None = все)
    """

    def __init__(self, callback: Callable[[Dict[str, Any]], Any],
                 events: Optional[Iterable[str]] = None):
        self.callback = callback
        self.events = frozenset(events) if events is not None else None

    async def __call__(self, user_id: Any, event_name: str, payload: Dict[str, Any]):
        if self.events is not None and event_name not in self.events:
            return
        result = self.callback(payload)
        if inspect.isawaitable(result):
            await result


class RoomSink:
    """Пересылает события в комнату пользователя user-<id>"""

    def __init__(self, emitter: RoomEmitter):
        self.emitter = emitter

    async def __call__(self, user_id: Any, event_name: str, payload: Dict[str, Any]):
        result = self.emitter.emit(user_room(user_id), event_name, payload)
        if inspect.isawaitable(result):
            await result
