import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from location_hub.core.logging import get_logger
from location_hub.schemas.messages import MetaMessage
from location_hub.schemas.user import UserSummary

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionState:
    """연결의 인증/방 상태. user_id가 없으면 미인증."""
    user_id: Optional[str] = None
    name: Optional[str] = None
    room: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


UNAUTHENTICATED = SessionState()


@dataclass(eq=False)
class Connection:
    """WebSocket 연결 하나와 그 세션 상태"""
    websocket: WebSocket
    connection_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    session: SessionState = UNAUTHENTICATED

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.application_state == WebSocketState.CONNECTED
            and self.websocket.client_state == WebSocketState.CONNECTED
        )


class ConnectionManager:
    """
    연결 레지스트리와 방 디렉토리.

    모든 변경(register/join/leave/remove)은 하나의 asyncio.Lock 아래에서 수행되고,
    브로드캐스트는 락 안에서 멤버 스냅샷을 뜬 뒤 락 밖에서 전송합니다.
    """

    def __init__(self):
        # 연결 레지스트리: {connection_id: Connection}
        self.connections: Dict[str, Connection] = {}
        # 방별 연결 그룹: {room: {connection_id: Connection}}
        self.room_connections: Dict[str, Dict[str, Connection]] = {}
        self._lock = asyncio.Lock()

    # =========================================================================
    # Connection Registry
    # =========================================================================

    async def register(self, websocket: WebSocket) -> Connection:
        """새 연결을 미인증 상태로 등록합니다."""
        connection = Connection(websocket=websocket)
        async with self._lock:
            self.connections[connection.connection_id] = connection
        return connection

    async def set_authenticated(self, connection: Connection, user: UserSummary, room: str) -> bool:
        """
        연결을 인증 상태로 전환하고 방에 참가시킵니다.

        이미 다른 방에 있던 연결은 이전 방에서 먼저 제거됩니다.

        Returns:
            bool: 이미 해제된 연결이면 False (아무 것도 하지 않음)
        """
        async with self._lock:
            if connection.connection_id not in self.connections:
                return False

            previous_room = connection.session.room
            if previous_room is not None:
                self._leave(previous_room, connection)

            connection.session = SessionState(user_id=user.id, name=user.name, room=room)
            self._join(room, connection)
            return True

    def lookup(self, connection: Connection) -> SessionState:
        """현재 세션 상태. 등록되지 않은 연결은 미인증으로 취급합니다."""
        registered = self.connections.get(connection.connection_id)
        if registered is None:
            return UNAUTHENTICATED
        return registered.session

    async def remove(self, connection: Connection) -> Optional[str]:
        """
        연결을 방과 레지스트리에서 제거합니다. 두 번 호출해도 안전합니다.

        Returns:
            str: 연결이 속해 있던 방, 없었거나 이미 제거된 경우 None
        """
        async with self._lock:
            registered = self.connections.pop(connection.connection_id, None)
            if registered is None:
                return None

            room = registered.session.room
            if room is not None:
                self._leave(room, registered)
            return room

    # =========================================================================
    # Room Directory
    # =========================================================================

    async def join(self, room: str, connection: Connection):
        async with self._lock:
            self._join(room, connection)

    async def leave(self, room: str, connection: Connection):
        async with self._lock:
            self._leave(room, connection)

    def _join(self, room: str, connection: Connection):
        self.room_connections.setdefault(room, {})[connection.connection_id] = connection

    def _leave(self, room: str, connection: Connection):
        # 빈 방 항목은 남겨 둠 (조회 시 비어 있는 방은 제외됨)
        members = self.room_connections.get(room)
        if members is not None:
            members.pop(connection.connection_id, None)

    def _snapshot(self, room: str) -> List[Connection]:
        return list(self.room_connections.get(room, {}).values())

    def _roster(self, room: str) -> List[UserSummary]:
        return [
            UserSummary(id=member.session.user_id, name=member.session.name)
            for member in self.room_connections.get(room, {}).values()
            if member.session.is_authenticated
        ]

    # =========================================================================
    # Broadcast
    # =========================================================================

    async def send_personal_json(self, connection: Connection, data: Dict[str, Any]) -> bool:
        """한 연결에 JSON 데이터를 전송합니다. 실패는 로그만 남깁니다."""
        if not connection.is_open:
            return False
        try:
            await connection.websocket.send_json(data)
            return True
        except Exception as e:
            logger.warning(f"Failed to send message to connection {connection.connection_id}: {e}")
            return False

    async def broadcast_to_room(self, room: str, data: Dict[str, Any]) -> int:
        """
        방의 열린 연결 모두에게 메시지를 전송합니다.

        닫힌 연결은 건너뛸 뿐 제거하지 않습니다 (제거는 연결 종료 처리에서만).

        Returns:
            int: 전송에 성공한 연결 수
        """
        async with self._lock:
            members = self._snapshot(room)

        delivered = 0
        for connection in members:
            if await self.send_personal_json(connection, data):
                delivered += 1
        return delivered

    async def broadcast_roster(self, room: str) -> List[UserSummary]:
        """방의 현재 참가자 목록(meta)을 방 전체에 전송합니다."""
        async with self._lock:
            members = self._snapshot(room)
            roster = self._roster(room)

        payload = MetaMessage(users=roster).to_payload()
        for connection in members:
            await self.send_personal_json(connection, payload)
        return roster

    # =========================================================================
    # 조회
    # =========================================================================

    def get_room_users(self, room: str) -> List[UserSummary]:
        """방에 연결된 인증 사용자 목록을 반환합니다."""
        return self._roster(room)

    def get_user_count_in_room(self, room: str) -> int:
        """방의 연결 수를 반환합니다."""
        return len(self.room_connections.get(room, {}))

    def get_room_names(self) -> List[str]:
        """참가자가 있는 방 이름 목록"""
        return [room for room, members in self.room_connections.items() if members]

    def get_connection_count(self) -> int:
        return len(self.connections)

    def is_registered(self, connection: Connection) -> bool:
        return connection.connection_id in self.connections


# 전역 연결 매니저 인스턴스
manager = ConnectionManager()
