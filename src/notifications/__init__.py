"""
Notifications package - Шина событий прогресса и её адаптеры
"""

from src.notifications.bus import ProgressBus
from src.notifications.sinks import CallbackSink, RoomSink, user_room
from src.notifications.hub import WebSocketHub

__all__ = [
    "ProgressBus",
    "CallbackSink",
    "RoomSink",
    "user_room",
    "WebSocketHub",
]
