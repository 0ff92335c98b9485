from . import auth, health, history, rooms, websocket

__all__ = [
    "auth",
    "health",
    "history",
    "rooms",
    "websocket"
]
