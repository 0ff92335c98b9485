import json
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from pydantic import ValidationError

from location_hub.core.config import settings
from location_hub.core.logging import get_logger, log_authentication_event, log_websocket_event, user_id_var
from location_hub.schemas.location import LocationEvent
from location_hub.schemas.messages import (
    INVALID_TOKEN,
    NOT_AUTHENTICATED,
    AuthMessage,
    ErrorMessage,
    LocationBroadcast,
    LocationMessage,
    WelcomeMessage,
)
from location_hub.schemas.user import UserSummary
from location_hub.services import auth_service
from location_hub.services.position_writer import PositionWriter, position_writer
from location_hub.websockets.connection_manager import Connection, ConnectionManager, manager

logger = get_logger(__name__)

IdentityLookup = Callable[[Optional[str]], Awaitable[Optional[UserSummary]]]


def _now_ms() -> int:
    return int(time.time() * 1000)


class WebSocketMessageHandler:
    """WebSocket 메시지 처리 핸들러 (연결별 세션 상태 머신)"""

    def __init__(
        self,
        connection_manager: ConnectionManager = manager,
        identity_lookup: IdentityLookup = auth_service.lookup_identity,
        writer: PositionWriter = position_writer,
        default_room: Optional[str] = None,
    ):
        self.manager = connection_manager
        self.identity_lookup = identity_lookup
        self.writer = writer
        self.default_room = default_room or settings.default_room

    async def handle_message(self, connection: Connection, raw: Union[str, bytes]):
        """
        WebSocket으로 받은 프레임 하나를 처리합니다.

        Args:
            connection: 메시지를 보낸 연결
            raw: 수신한 텍스트 또는 바이너리 프레임
        """
        try:
            data = json.loads(raw)
        except (ValueError, TypeError) as e:
            logger.warning(f"Discarding unparsable frame from connection {connection.connection_id}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Discarding non-object frame from connection {connection.connection_id}")
            return

        message_type = data.get("type")

        if message_type == "auth":
            await self._handle_auth(connection, data)
        elif message_type == "location":
            await self._handle_location(connection, data)
        else:
            logger.warning(f"Unknown message type: {message_type} from connection {connection.connection_id}")

    async def _handle_auth(self, connection: Connection, data: Dict[str, Any]):
        """인증 요청을 처리하고 방에 참가시킵니다."""
        try:
            message = AuthMessage.model_validate(data)
        except ValidationError as e:
            # 문자열이 아닌 token/room은 잘못된 토큰과 동일하게 응답
            logger.warning(f"Malformed auth message from connection {connection.connection_id}: {e}")
            log_authentication_event(logger, "websocket_auth", success=False,
                                     connection_id=connection.connection_id)
            await self.manager.send_personal_json(connection, ErrorMessage(error=INVALID_TOKEN).to_payload())
            return

        user = await self.identity_lookup(message.token)
        if user is None:
            log_authentication_event(logger, "websocket_auth", success=False,
                                     connection_id=connection.connection_id)
            await self.manager.send_personal_json(connection, ErrorMessage(error=INVALID_TOKEN).to_payload())
            return

        room = message.room or self.default_room
        previous_room = connection.session.room

        if not await self.manager.set_authenticated(connection, user, room):
            # 조회 중에 연결이 닫힘
            logger.info(f"Connection {connection.connection_id} closed before authentication completed")
            return

        user_id_var.set(user.id)
        log_authentication_event(logger, "websocket_auth", user_id=user.id,
                                 connection_id=connection.connection_id)
        log_websocket_event(logger, "joined", connection.connection_id, room, user_id=user.id)

        await self.manager.send_personal_json(connection, WelcomeMessage(client_id=user.id).to_payload())
        await self.manager.broadcast_roster(room)

        # 재인증으로 방을 옮긴 경우 이전 방에도 퇴장을 알림
        if previous_room is not None and previous_room != room:
            log_websocket_event(logger, "left", connection.connection_id, previous_room, user_id=user.id)
            await self.manager.broadcast_roster(previous_room)

    async def _handle_location(self, connection: Connection, data: Dict[str, Any]):
        """위치 업데이트를 저장 큐에 넣고 방에 브로드캐스트합니다."""
        session = self.manager.lookup(connection)
        if not session.is_authenticated:
            logger.warning(f"Location from unauthenticated connection {connection.connection_id}")
            await self.manager.send_personal_json(connection, ErrorMessage(error=NOT_AUTHENTICATED).to_payload())
            return

        try:
            message = LocationMessage.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Discarding malformed location from connection {connection.connection_id}: {e}")
            return

        event = LocationEvent(
            user_id=session.user_id,
            name=session.name,
            lat=message.lat,
            lng=message.lng,
            accuracy=message.accuracy or 0,
            ts=round(message.ts) if message.ts else _now_ms()
        )

        self.writer.submit(event)

        broadcast = LocationBroadcast(
            client_id=event.user_id,
            name=event.name,
            lat=event.lat,
            lng=event.lng,
            ts=event.ts,
            accuracy=event.accuracy
        )
        await self.manager.broadcast_to_room(session.room, broadcast.to_payload())

    async def handle_disconnect(self, connection: Connection):
        """연결 종료 처리. 여러 번 호출되어도 한 번만 반영됩니다."""
        room = await self.manager.remove(connection)
        if room is None:
            return

        log_websocket_event(logger, "left", connection.connection_id, room,
                            user_id=connection.session.user_id)
        await self.manager.broadcast_roster(room)


# 메시지 핸들러 인스턴스
message_handler = WebSocketMessageHandler()
