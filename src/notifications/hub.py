"""WebSocket комнаты для push-уведомлений пользователям"""

import json
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from loguru import logger
from websockets.exceptions import ConnectionClosed

from src.notifications.sinks import user_room


CommandHandler = Callable[[Any, Dict[str, Any]], Awaitable[Dict[str, Any]]]


class WebSocketHub:
    """
    Группировка WebSocket соединений по комнатам

    Реализует emit(channel, event_name, payload), поэтому подходит как
    emitter для RoomSink.
    """

    def __init__(self, on_command: Optional[CommandHandler] = None):
        """
        Args:
            on_command: async функция on_command(user_id, message) -> ответ,
                вызывается для всех сообщений кроме join
        """
        self.rooms: Dict[str, Set[Any]] = defaultdict(set)
        self.on_command = on_command

    def join(self, room: str, ws) -> None:
        self.rooms[room].add(ws)
        logger.debug(f"Connection joined room {room} ({len(self.rooms[room])} total)")

    def leave(self, room: str, ws) -> None:
        members = self.rooms.get(room)
        if not members:
            return
        members.discard(ws)
        if not members:
            del self.rooms[room]

    async def emit(self, channel: str, event_name: str, payload: Dict[str, Any]) -> int:
        """
        Отправить событие всем соединениям комнаты

        Returns:
            Количество соединений, получивших сообщение
        """
        members = list(self.rooms.get(channel, ()))
        if not members:
            return 0

        message = json.dumps({"event": event_name, "data": payload}, default=str)
        sent = 0
        for ws in members:
            try:
                await ws.send(message)
                sent += 1
            except ConnectionClosed:
                logger.debug(f"Dropping closed connection from room {channel}")
                self.leave(channel, ws)
        return sent

    async def handler(self, ws) -> None:
        """
        Обработчик соединения для websockets.serve

        Первое сообщение должно быть {"action": "join", "user_id": ...}.
        """
        room = None
        user_id = None
        try:
            async for raw in ws:
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError as e:
                    logger.warning(f"Failed to decode WebSocket message: {e}")
                    await self._reply(ws, {"action": None, "ok": False, "error": "invalid json"})
                    continue

                action = message.get("action")
                if action == "join":
                    if room:
                        self.leave(room, ws)
                    user_id = message.get("user_id")
                    room = user_room(user_id)
                    self.join(room, ws)
                    await self._reply(ws, {"action": "join", "ok": True, "room": room})
                    continue

                if user_id is None:
                    await self._reply(ws, {"action": action, "ok": False, "error": "join first"})
                    continue

                if self.on_command is None:
                    await self._reply(ws, {"action": action, "ok": False, "error": "commands disabled"})
                    continue

                reply = await self.on_command(user_id, message)
                await self._reply(ws, {"action": action, **reply})
        except ConnectionClosed:
            logger.debug(f"Connection closed for user {user_id}")
        finally:
            if room:
                self.leave(room, ws)

    @staticmethod
    async def _reply(ws, data: Dict[str, Any]) -> None:
        await ws.send(json.dumps({"event": "ack", "data": data}, default=str))
