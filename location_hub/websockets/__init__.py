"""
WebSocket 실시간 위치 공유 모듈

주요 구성 요소:
- connection_manager: 연결 레지스트리, 방 디렉토리, 브로드캐스트
- handlers: 인증/위치 메시지 처리 (세션 상태 머신)
"""

from .connection_manager import manager, ConnectionManager, Connection, SessionState
from .handlers import message_handler, WebSocketMessageHandler

__all__ = [
    "manager",
    "ConnectionManager",
    "Connection",
    "SessionState",
    "message_handler",
    "WebSocketMessageHandler"
]
