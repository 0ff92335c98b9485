from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from location_hub.core.config import settings
from location_hub.core.logging import get_logger, log_websocket_event, set_connection_context, clear_connection_context
from location_hub.websockets.connection_manager import manager
from location_hub.websockets.handlers import message_handler

logger = get_logger(__name__)

router = APIRouter(tags=["WebSocket"])


@router.websocket(settings.websocket_path)
async def websocket_endpoint(websocket: WebSocket):
    """
    위치 공유 WebSocket 엔드포인트

    연결은 미인증 상태로 시작하며, 클라이언트가 auth 메시지로 토큰과 방을 보내야 합니다.
    """
    await websocket.accept()
    connection = await manager.register(websocket)
    set_connection_context(connection.connection_id)
    log_websocket_event(logger, "connected", connection.connection_id)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue

            try:
                await message_handler.handle_message(connection, raw)
            except Exception as e:
                # 메시지 하나의 실패가 연결을 끊지 않음
                logger.exception(f"Error processing message from connection {connection.connection_id}: {e}")

    except WebSocketDisconnect as e:
        logger.info(f"WebSocket disconnected: connection {connection.connection_id} (code {e.code})")

    except Exception as e:
        logger.error(f"Unexpected error in WebSocket connection {connection.connection_id}: {e}")

    finally:
        await message_handler.handle_disconnect(connection)
        log_websocket_event(logger, "closed", connection.connection_id)
        clear_connection_context()
